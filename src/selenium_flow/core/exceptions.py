"""Domain-specific exceptions for selenium-flow."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .records import ErrorRecord


class SeleniumFlowError(Exception):
    """Base exception for all selenium-flow errors."""

    pass


class SessionError(SeleniumFlowError):
    """Raised when no browser session is active."""

    def __init__(self, message: str = "No active browser session"):
        super().__init__(message)


class SessionNotFoundError(SessionError):
    """Raised when referencing a non-existent or expired managed session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionLimitError(SeleniumFlowError):
    """Raised when max session limit is reached."""

    def __init__(self, max_sessions: int):
        self.max_sessions = max_sessions
        super().__init__(f"Maximum sessions ({max_sessions}) reached")


class GridConnectionError(SessionError):
    """Raised when unable to connect to Selenium Grid."""

    def __init__(self, grid_url: str, message: str):
        self.grid_url = grid_url
        super().__init__(f"Failed to connect to Selenium Grid at {grid_url}: {message}")


class LocatorError(SeleniumFlowError):
    """Raised when a locator is malformed."""

    pass


class TemplateNotFoundError(LocatorError):
    """Raised when a locator template name is not in the template table."""

    def __init__(self, template: str):
        self.template = template
        super().__init__(f"Locator template not found: {template}")


class ActionConfigError(SeleniumFlowError):
    """Raised when an action builder is misconfigured or reused after execution."""

    pass


class TransientNotFound(SeleniumFlowError):
    """Lookup found no elements, or found hidden ones. Retryable."""

    pass


class TransientDriverError(SeleniumFlowError):
    """A recognized transient driver signal occurred during an attempt. Retryable."""

    pass


class ActionError(SeleniumFlowError):
    """Terminal action failure. Carries the reported error record once classified."""

    def __init__(self, detail: str, record: Optional[ErrorRecord] = None):
        self.detail = detail
        self.record = record
        super().__init__(detail)

    def __str__(self) -> str:
        if self.record is None:
            return self.detail
        if self.record.description:
            return f"{self.record.message}\n{self.record.description}"
        return self.record.message


class ActionTimeoutError(ActionError):
    """Raised when an action's retry budget is exhausted."""

    pass


class NonRetryableValidationError(ActionError):
    """Raised on the first attempt for conditions retrying cannot fix."""

    pass


class OptionNotFoundError(NonRetryableValidationError):
    """Raised when a requested option is absent from a dropdown."""

    pass


class DriverActionError(ActionError):
    """Raised when a non-transient driver error aborts an action."""

    pass


class WindowError(SeleniumFlowError):
    """Raised when a window cannot be opened, switched to or closed."""

    pass


class WindowNotFoundError(WindowError):
    """Raised when referencing a window name unknown to the window manager."""

    def __init__(self, window_name: str):
        self.window_name = window_name
        super().__init__(f"Window not registered: {window_name}")


class CheckFailedError(AssertionError):
    """Raised by a BLOCK check failure."""

    def __init__(self, record: ErrorRecord):
        self.record = record
        message = record.message
        if record.description:
            message = f"{message}\n{record.description}"
        super().__init__(message)


class SoftAssertionError(AssertionError):
    """Raised when flushing a soft error log that holds failures."""

    def __init__(self, errors: list[ErrorRecord]):
        self.errors = errors
        lines = []
        for index, error in enumerate(errors, start=1):
            line = f"{index}. {error.message}"
            if error.description:
                line += f" - {error.description}"
            lines.append(line)
        super().__init__("\n" + "\n".join(lines))
