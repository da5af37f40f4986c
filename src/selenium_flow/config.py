"""Configuration settings for selenium-flow."""

import logging
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


DEFAULT_ACTION_TITLES = {
    "appearance": "Wait for appearance of element $template $parameters",
    "disappearance": "Wait for disappearance of element $template $parameters",
    "find_element": "Find element $template $parameters",
    "get_attribute": "Get attribute \"$attribute\" of element $template $parameters",
    "get_text": "Get text of element $template $parameters",
    "input": "Input \"$value\" into element $template $parameters",
    "mouse_over": "Mouse over element $template $parameters",
    "select": "Select \"$value\" in element $template $parameters",
    "send_key": "Send keys $keys",
    "left_click": "Click on element $template $parameters",
    "right_click": "Right click on element $template $parameters",
    "double_click": "Double click on element $template $parameters",
}

DEFAULT_ERROR_TEMPLATES = {
    action: {
        "timeout": f"Timeout ($timeout s) of {label} element $template $parameters",
        "no_such_element": f"Element $template $parameters not found for {label}",
        "web_driver": f"Driver error during {label} element $template $parameters",
    }
    for action, label in {
        "appearance": "waiting for appearance of",
        "disappearance": "waiting for disappearance of",
        "find_element": "finding",
        "get_attribute": "getting attribute of",
        "get_text": "getting text of",
        "input": "input of \"$value\" into",
        "mouse_over": "mouse over",
        "select": "selecting \"$value\" in",
        "send_key": "sending keys to",
        "click": "click on",
    }.items()
}
DEFAULT_ERROR_TEMPLATES["select"]["no_such_element"] = (
    "Option \"$value\" is not present in select $template $parameters"
)

DEFAULT_CHECK_MESSAGES = {
    "assert_true_error_message": "Condition expected to be true",
    "assert_true_title": "Check that condition is true",
    "assert_false_error_message": "Condition expected to be false",
    "assert_false_title": "Check that condition is false",
    "assert_none_error_message": "Value expected to be empty",
    "assert_none_title": "Check that value is empty",
    "assert_not_none_error_message": "Value expected to be present",
    "assert_not_none_title": "Check that value is present",
    "assert_equals_error_message": "Expected [{expected}] but found [{actual}]",
    "assert_equals_title": "Check that values are equal",
}


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # Browser
    grid_url: Optional[str] = None  # Empty = local browser
    default_browser: str = "chrome"
    headless: bool = True

    # Session management (MCP server)
    max_concurrent_sessions: int = 10
    session_max_lifetime_seconds: int = 900  # 15 minutes
    session_max_idle_seconds: int = 300  # 5 minutes
    sweep_interval_seconds: int = 60  # 1 minute

    # Action timeouts
    default_action_timeout_ms: int = 10000
    min_retry_time_ms: int = 500

    # Window manager
    window_open_timeout_ms: int = 10000
    window_switch_backoff_ms: int = 1000
    window_switch_max_retries: int = 3
    window_close_attempts: int = 5
    window_close_backoff_ms: int = 500

    # Driver timeouts
    page_load_timeout_seconds: int = 30
    script_timeout_seconds: int = 30
    implicit_wait_seconds: int = 0

    # Reporting toggles
    enable_action_default_titles: bool = True
    enable_assert_default_titles: bool = True
    attachments_enabled: bool = True
    capture_screenshot_on_error: bool = True
    capture_page_source_on_error: bool = True
    dom_max_chars: int = 20000

    # Message tables
    action_titles: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_ACTION_TITLES))
    error_templates: dict[str, dict[str, str]] = Field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_ERROR_TEMPLATES.items()}
    )
    check_messages: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CHECK_MESSAGES))

    # Locator templates preloaded into every MCP session (JSON file)
    locator_templates_file: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "SELENIUM_FLOW_"}

    @property
    def window_open_timeout_seconds(self) -> float:
        """Convert ms timeout to seconds."""
        return self.window_open_timeout_ms / 1000.0

    def action_title(self, key: str) -> str:
        """Default title for an action key, or empty when titles are disabled."""
        if not self.enable_action_default_titles:
            return ""
        return self.action_titles.get(key, "")

    def error_template(self, action: str, kind: str) -> str:
        """Message template keyed by action and exception kind."""
        templates = self.error_templates.get(action)
        if templates is None:
            logger.warning(f"No error templates configured for action '{action}'")
            return ""
        return templates.get(kind, "")


# Global settings instance
settings = Settings()
