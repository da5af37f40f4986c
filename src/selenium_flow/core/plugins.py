"""Reporting plugins notified around actions and checks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from selenium.common.exceptions import WebDriverException

from ..config import Settings
from ..utils.dom_helpers import get_dom_content
from .records import ErrorRecord
from .session import BrowserSession

logger = logging.getLogger(__name__)

HOOKS = (
    "before_action",
    "after_action",
    "on_error",
    "action_result",
    "on_check",
    "on_check_success",
    "on_check_failure",
)


class ReportingPlugin:
    """
    Base class for reporters. Every hook is a no-op; override what you need.

    Hooks receive the action or check builder itself, so ``describe()``,
    ``render_title()`` and ``config`` are available to reporters.
    """

    def before_action(self, action) -> None:
        pass

    def after_action(self, action) -> None:
        pass

    def on_error(self, action, error: ErrorRecord) -> None:
        pass

    def action_result(self, action, result: Any) -> None:
        pass

    def on_check(self, check, method: str) -> None:
        pass

    def on_check_success(self, check) -> None:
        pass

    def on_check_failure(self, check, error: ErrorRecord) -> None:
        pass


class PluginChain:
    """Ordered list of plugins. A plugin that raises is logged and skipped."""

    def __init__(self, plugins: Optional[list[ReportingPlugin]] = None):
        self._plugins: list[ReportingPlugin] = list(plugins or [])

    def register(self, plugin: ReportingPlugin) -> ReportingPlugin:
        self._plugins.append(plugin)
        logger.debug(f"Registered plugin {type(plugin).__name__}")
        return plugin

    def __iter__(self):
        return iter(list(self._plugins))

    def __len__(self) -> int:
        return len(self._plugins)

    def notify(self, hook: str, *args: Any) -> None:
        """Call ``hook`` on every plugin in registration order."""
        if hook not in HOOKS:
            raise ValueError(f"Unknown plugin hook: {hook}")
        for plugin in list(self._plugins):
            try:
                getattr(plugin, hook)(*args)
            except Exception:
                logger.exception(f"Plugin {type(plugin).__name__} failed in {hook}")


class LoggingPlugin(ReportingPlugin):
    """Logs titles, results and failures."""

    def before_action(self, action) -> None:
        title = action.render_title()
        if title:
            logger.info(title)

    def on_error(self, action, error: ErrorRecord) -> None:
        logger.error(f"{error.message}\n{error.description}\nAction: {action.describe()}")

    def action_result(self, action, result: Any) -> None:
        logger.debug(f"{action.action_type.name} result: {result!r}")

    def on_check_failure(self, check, error: ErrorRecord) -> None:
        logger.error(f"Check failed: {error.message}")


@dataclass
class PageCapture:
    """Screenshot and page source taken when an action failed."""

    message: str
    captured_at: datetime
    screenshot_base64: Optional[str] = None
    page_source: Optional[dict] = None
    errors: list[str] = field(default_factory=list)


class PageCapturePlugin(ReportingPlugin):
    """
    Captures the page state on action errors.

    Captures are skipped for actions with ``disable_attachments`` or when
    attachments are turned off in settings. A failing capture is recorded
    in ``PageCapture.errors`` and never hides the action error.
    """

    def __init__(self, session: BrowserSession, settings: Settings):
        self.session = session
        self.settings = settings
        self.captures: list[PageCapture] = []

    def on_error(self, action, error: ErrorRecord) -> None:
        if not self.settings.attachments_enabled or action.config.disable_attachments:
            return
        if not self.session.is_open:
            return

        driver = self.session.driver
        capture = PageCapture(message=error.message, captured_at=datetime.now(timezone.utc))

        if self.settings.capture_screenshot_on_error:
            try:
                capture.screenshot_base64 = driver.get_screenshot_as_base64()
            except WebDriverException as e:
                capture.errors.append(f"screenshot: {e.msg or e}")

        if self.settings.capture_page_source_on_error:
            try:
                capture.page_source = get_dom_content(driver, self.settings.dom_max_chars)
            except WebDriverException as e:
                capture.errors.append(f"page source: {e.msg or e}")

        self.captures.append(capture)
        logger.debug(f"Captured page state for error: {error.message}")

    def latest(self) -> Optional[PageCapture]:
        return self.captures[-1] if self.captures else None
