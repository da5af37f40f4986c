"""Shared fluent builder for browser actions."""

from __future__ import annotations

import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from string import Template
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.remote.webelement import WebElement

from ..core.exceptions import (
    ActionConfigError,
    ActionError,
    ActionTimeoutError,
    DriverActionError,
    NonRetryableValidationError,
    TransientDriverError,
    TransientNotFound,
)
from ..core.locators import Locator
from ..core.records import AssertType, ErrorRecord
from ..utils.element_resolver import is_element_displayed, scroll_into_view
from ..utils.error_mapper import classify_exception, is_transient_driver_error
from ..utils.keys import key_name
from .executor import ActionExecutor, ExecutionResult

if TYPE_CHECKING:
    from ..core.context import ActionContext

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="ActionBuilder")


class ActionType(str, Enum):
    APPEARANCE = "appearance"
    CLICK = "click"
    DISAPPEARANCE = "disappearance"
    FIND_ELEMENT = "find_element"
    GET_ATTRIBUTE = "get_attribute"
    GET_TEXT = "get_text"
    INPUT = "input"
    MOUSE_OVER = "mouse_over"
    SELECT = "select"
    SEND_KEY = "send_key"


class ClickKind(str, Enum):
    LEFT_CLICK = "left_click"
    RIGHT_CLICK = "right_click"
    DOUBLE_CLICK = "double_click"


@dataclass(frozen=True)
class ActionConfig:
    """Settings collected by an action builder."""

    timeout_ms: int
    retry_min_ms: int
    retry_hook: Optional[Callable[[], Any]] = None
    locator: Optional[Locator] = None
    require: bool = False
    visible: bool = True
    assert_type: AssertType = AssertType.BLOCK
    error_message: Optional[str] = None
    error_description: Optional[str] = None
    value: str = ""
    clear: bool = False
    click_kind: ClickKind = ClickKind.LEFT_CLICK
    keys: tuple[str, ...] = ()
    attribute: str = ""
    disable_attachments: bool = False
    title: str = ""


@contextmanager
def transient_driver_errors():
    """Turn retryable driver errors raised inside the block into TransientDriverError."""
    try:
        yield
    except WebDriverException as e:
        if is_transient_driver_error(e):
            raise TransientDriverError(f"{type(e).__name__}: {e.msg or e}") from e
        raise


class ActionBuilder:
    """
    Fluent configuration plus execution lifecycle of one action.

    Setters return the builder itself, so calls chain::

        ctx.click().template("button", "Search").timeout(2000).perform()

    A builder runs once; its configuration is frozen after execution.
    Plugins see ``before_action`` and ``after_action`` around every run
    whatever the outcome. Terminal failures are classified, reported through
    ``on_error`` and then raised (BLOCK) or recorded in the soft error log
    (SOFT), in which case the action returns its empty result.
    """

    action_type: ActionType

    def __init__(self, context: ActionContext):
        self._context = context
        self._executed = False
        settings = context.settings
        self.config = ActionConfig(
            timeout_ms=settings.default_action_timeout_ms,
            retry_min_ms=settings.min_retry_time_ms,
            title=settings.action_title(self.action_type.value),
        )

    # Fluent setters

    def _update(self: T, **changes) -> T:
        if self._executed:
            raise ActionConfigError(
                f"{self.action_type.name} action already executed; start a new action"
            )
        self.config = dataclasses.replace(self.config, **changes)
        return self

    def locator(self: T, locator: Locator) -> T:
        return self._update(locator=locator)

    def template(self: T, name: str, *parameters: str) -> T:
        """Locate elements with a named template from the context's table."""
        return self._update(locator=Locator.from_template(name, *parameters))

    def xpath(self: T, expression: str) -> T:
        return self._update(locator=Locator.from_expression(expression, "xpath"))

    def css(self: T, selector: str) -> T:
        return self._update(locator=Locator.from_expression(selector, "css"))

    def timeout(self: T, value: float, unit: str = "ms") -> T:
        """Set the action budget in milliseconds (``unit="s"`` for seconds)."""
        if unit not in ("ms", "s"):
            raise ActionConfigError(f"Unsupported timeout unit: {unit}")
        timeout_ms = value * 1000 if unit == "s" else value
        if timeout_ms < 0:
            raise ActionConfigError(f"Timeout cannot be negative: {value}{unit}")
        return self._update(timeout_ms=int(timeout_ms))

    def retry(self: T, hook: Callable[[], Any], min_time_ms: Optional[int] = None) -> T:
        """
        Run ``hook`` between failed attempts, padded to at least ``min_time_ms``.

        Exceptions raised by the hook propagate unchanged: they are not
        reported to plugins and do not follow the action's severity.
        """
        changes: dict = {"retry_hook": hook}
        if min_time_ms is not None:
            changes["retry_min_ms"] = min_time_ms
        return self._update(**changes)

    def visible(self: T, value: bool = True) -> T:
        return self._update(visible=value)

    def assert_type(self: T, value: AssertType) -> T:
        return self._update(assert_type=value)

    def soft(self: T) -> T:
        return self._update(assert_type=AssertType.SOFT)

    def error_message(self: T, message: str) -> T:
        return self._update(error_message=message)

    def error_description(self: T, description: str) -> T:
        return self._update(error_description=description)

    def disable_attachments(self: T) -> T:
        return self._update(disable_attachments=True)

    def title(self: T, title: str) -> T:
        return self._update(title=title)

    def titlef(self: T, title: str, *args: Any) -> T:
        return self._update(title=title % args)

    # Rendering

    def _substitutions(self) -> dict[str, str]:
        config = self.config
        locator = config.locator
        if locator is None:
            template = ""
        else:
            template = locator.template if locator.template is not None else locator.expression
        return {
            "template": template or "",
            "parameters": "[" + ", ".join(locator.parameters if locator else ()) + "]",
            "value": config.value,
            "timeout": f"{config.timeout_ms / 1000:g}",
            "attribute": config.attribute,
            "keys": ", ".join(key_name(k) for k in config.keys),
        }

    def render(self, text: str) -> str:
        """Substitute ``$template $parameters $value $timeout $attribute $keys``."""
        return Template(text).safe_substitute(self._substitutions())

    def render_title(self) -> str:
        return self.render(self.config.title)

    def describe(self) -> str:
        """Dump of the builder state for logs and reports."""
        lines = [f"type : {self.action_type.name}"]
        for field in dataclasses.fields(self.config):
            lines.append(f"{field.name} : {getattr(self.config, field.name)!r}")
        return "[\n\t" + "\n\t".join(lines) + "\n]"

    # Execution helpers

    @property
    def driver(self):
        return self._context.session.driver

    def _require_locator(self) -> Locator:
        if self.config.locator is None:
            raise ActionConfigError(
                f"{self.action_type.name} action needs a template or an expression"
            )
        return self.config.locator

    def _lookup(self) -> list[WebElement]:
        """
        Resolve the locator into elements.

        With ``visible`` set, every match is scrolled into view and the lookup
        fails while any of them is hidden.

        Raises:
            TransientNotFound: No matches, or hidden matches
            TransientDriverError: A retryable driver error occurred
        """
        locator = self._require_locator()
        by, value = self._context.templates.build(locator)
        driver = self.driver
        with transient_driver_errors():
            logger.debug(f"Find elements located with: {by}={value}")
            elements = driver.find_elements(by, value)
            if not elements:
                raise TransientNotFound(f"No elements located with {locator}")
            if self.config.visible:
                for element in elements:
                    scroll_into_view(driver, element)
                    if not is_element_displayed(element):
                        raise TransientNotFound(f"Elements located with {locator} are not visible")
        return elements

    def _execute(self, attempt: Callable[[], Any]) -> ExecutionResult:
        executor = ActionExecutor(
            retry_hook=self.config.retry_hook,
            retry_min_ms=self.config.retry_min_ms,
            clock=self._context.clock,
            sleep=self._context.sleep,
        )
        result = executor.run(attempt, self.config.timeout_ms)
        logger.debug(
            f"{self.action_type.name} finished: succeeded={result.succeeded} "
            f"attempts={result.attempts} elapsed={result.elapsed_ms:.0f} ms"
        )
        return result

    def _perform(self, body: Callable[[], Any], empty: Any = None) -> Any:
        """Run ``body`` once, wrapped in plugin notifications and failure routing."""
        if self._executed:
            raise ActionConfigError(
                f"{self.action_type.name} action already executed; start a new action"
            )
        self._executed = True
        plugins = self._context.plugins
        logger.debug(f"Perform action {self.action_type.name}")
        plugins.notify("before_action", self)
        try:
            return body()
        except (NonRetryableValidationError, WebDriverException) as e:
            self._fail(e)
            return empty
        finally:
            plugins.notify("after_action", self)

    def _report_result(self, result: Any) -> None:
        self._context.plugins.notify("action_result", self, result)

    def _exhausted(self, what: str, result: ExecutionResult) -> None:
        """Report a spent budget as a timeout."""
        error = ActionTimeoutError(
            f"Timeout ({self.config.timeout_ms / 1000:g} s) {what} located with: "
            f"{self.config.locator} after {result.attempts} attempt(s)"
        )
        error.__cause__ = result.last_error
        self._fail(error)

    def _fail(self, exc: BaseException) -> None:
        """
        Classify, report and escalate a terminal failure.

        The default message comes from the template configured for
        ``(action, kind)``. A custom ``error_message`` replaces it and the
        default moves into the description.

        Raises:
            ActionError: Under BLOCK severity, with the record attached
        """
        kind = classify_exception(exc)
        default_message = self.render(
            self._context.settings.error_template(self.action_type.value, kind.value)
        ) or str(exc)
        description = self.config.error_description or ""
        if self.config.error_message:
            message = self.config.error_message
            description = f"{default_message}\n{description}" if description else default_message
        else:
            message = default_message
        record = ErrorRecord(message=message, description=description, cause=exc)

        self._context.plugins.notify("on_error", self, record)

        if isinstance(exc, ActionError):
            error = exc
            error.record = record
        else:
            error = DriverActionError(str(exc), record)
            error.__cause__ = exc

        if self.config.assert_type is AssertType.BLOCK:
            raise error
        self._context.soft_errors.append(record)
