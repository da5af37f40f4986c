"""Classify exceptions for message templates and MCP-friendly error payloads."""

from enum import Enum
from dataclasses import dataclass
from typing import Optional

from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
    ElementNotInteractableException,
    ElementClickInterceptedException,
    InvalidSelectorException,
    InvalidArgumentException,
    InvalidSessionIdException,
    TimeoutException,
    NoSuchWindowException,
    UnexpectedTagNameException,
    JavascriptException,
    WebDriverException,
    SessionNotCreatedException,
)

from ..core.exceptions import (
    SessionError,
    SessionNotFoundError,
    SessionLimitError,
    GridConnectionError,
    LocatorError,
    TemplateNotFoundError,
    ActionConfigError,
    ActionTimeoutError,
    OptionNotFoundError,
    NonRetryableValidationError,
    DriverActionError,
    WindowError,
    WindowNotFoundError,
    CheckFailedError,
    SoftAssertionError,
)


class ErrorKind(str, Enum):
    """Exception kinds used to pick an action's message template."""

    TIMEOUT = "timeout"
    NO_SUCH_ELEMENT = "no_such_element"
    WEB_DRIVER = "web_driver"
    UNKNOWN = "unknown"


# Driver errors that retrying the same lookup cannot fix
NON_TRANSIENT_DRIVER_ERRORS: tuple[type[WebDriverException], ...] = (
    InvalidSelectorException,
    InvalidArgumentException,
    InvalidSessionIdException,
    NoSuchWindowException,
    UnexpectedTagNameException,
    SessionNotCreatedException,
)

MISSING_WINDOW_MARKERS = ("no window with id", "no such window")


def classify_exception(exc: BaseException) -> ErrorKind:
    """
    Pick the message-template kind for an exception.

    Order matters: Selenium's TimeoutException and NoSuchElementException are
    WebDriverExceptions too.
    """
    if isinstance(exc, (ActionTimeoutError, TimeoutException)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, (NonRetryableValidationError, NoSuchElementException)):
        return ErrorKind.NO_SUCH_ELEMENT
    if isinstance(exc, (DriverActionError, WebDriverException)):
        return ErrorKind.WEB_DRIVER
    return ErrorKind.UNKNOWN


def is_transient_driver_error(exc: BaseException) -> bool:
    """Whether a driver error raised during an attempt should drive a retry."""
    if not isinstance(exc, WebDriverException):
        return False
    return not isinstance(exc, NON_TRANSIENT_DRIVER_ERRORS)


def is_missing_window_error(exc: BaseException) -> bool:
    """Whether a driver error signals a window handle that is not ready yet."""
    message = (getattr(exc, "msg", None) or str(exc)).lower()
    return any(marker in message for marker in MISSING_WINDOW_MARKERS)


class ErrorCode(str, Enum):
    """MCP-compatible error codes."""

    # Session errors
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_LIMIT_REACHED = "SESSION_LIMIT_REACHED"
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"

    # Locator errors
    INVALID_LOCATOR = "INVALID_LOCATOR"
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    INVALID_SELECTOR = "INVALID_SELECTOR"

    # Action errors
    ACTION_TIMEOUT = "ACTION_TIMEOUT"
    OPTION_NOT_FOUND = "OPTION_NOT_FOUND"
    ELEMENT_NOT_FOUND = "ELEMENT_NOT_FOUND"
    ELEMENT_STALE = "ELEMENT_STALE"
    ELEMENT_NOT_INTERACTABLE = "ELEMENT_NOT_INTERACTABLE"
    DRIVER_ERROR = "DRIVER_ERROR"
    INVALID_ACTION = "INVALID_ACTION"

    # Window errors
    WINDOW_ERROR = "WINDOW_ERROR"
    WINDOW_NOT_FOUND = "WINDOW_NOT_FOUND"

    # Check errors
    CHECK_FAILED = "CHECK_FAILED"
    SOFT_ERRORS = "SOFT_ERRORS"

    # JavaScript errors
    JAVASCRIPT_ERROR = "JAVASCRIPT_ERROR"

    # Grid/Connection errors
    GRID_UNAVAILABLE = "GRID_UNAVAILABLE"

    # Generic errors
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Map exceptions to MCP error codes
EXCEPTION_MAP: dict[type[BaseException], ErrorCode] = {
    # Domain exceptions
    SessionNotFoundError: ErrorCode.SESSION_NOT_FOUND,
    SessionLimitError: ErrorCode.SESSION_LIMIT_REACHED,
    GridConnectionError: ErrorCode.GRID_UNAVAILABLE,
    SessionError: ErrorCode.NO_ACTIVE_SESSION,
    TemplateNotFoundError: ErrorCode.TEMPLATE_NOT_FOUND,
    LocatorError: ErrorCode.INVALID_LOCATOR,
    ActionConfigError: ErrorCode.INVALID_ACTION,
    ActionTimeoutError: ErrorCode.ACTION_TIMEOUT,
    OptionNotFoundError: ErrorCode.OPTION_NOT_FOUND,
    DriverActionError: ErrorCode.DRIVER_ERROR,
    WindowNotFoundError: ErrorCode.WINDOW_NOT_FOUND,
    WindowError: ErrorCode.WINDOW_ERROR,
    CheckFailedError: ErrorCode.CHECK_FAILED,
    SoftAssertionError: ErrorCode.SOFT_ERRORS,
    # Selenium exceptions
    NoSuchElementException: ErrorCode.ELEMENT_NOT_FOUND,
    StaleElementReferenceException: ErrorCode.ELEMENT_STALE,
    ElementNotInteractableException: ErrorCode.ELEMENT_NOT_INTERACTABLE,
    ElementClickInterceptedException: ErrorCode.ELEMENT_NOT_INTERACTABLE,
    InvalidSelectorException: ErrorCode.INVALID_SELECTOR,
    NoSuchWindowException: ErrorCode.WINDOW_NOT_FOUND,
    JavascriptException: ErrorCode.JAVASCRIPT_ERROR,
    InvalidArgumentException: ErrorCode.INVALID_ARGUMENT,
    ValueError: ErrorCode.INVALID_ARGUMENT,
}

# Suggestions for each error code to help the client recover
SUGGESTIONS: dict[ErrorCode, str] = {
    ErrorCode.SESSION_NOT_FOUND: (
        "The session ID is invalid or has expired. "
        "Create a new session with create_session."
    ),
    ErrorCode.SESSION_LIMIT_REACHED: (
        "Maximum number of concurrent sessions reached. "
        "Close unused sessions with close_session before creating new ones."
    ),
    ErrorCode.NO_ACTIVE_SESSION: (
        "The browser for this session is closed. "
        "Create a new session with create_session."
    ),
    ErrorCode.TEMPLATE_NOT_FOUND: (
        "The locator template is not registered. "
        "Register it with register_templates or pass an xpath instead."
    ),
    ErrorCode.INVALID_LOCATOR: (
        "Provide either a template (with parameters) or an xpath, not both, "
        "and match the template's placeholders."
    ),
    ErrorCode.ACTION_TIMEOUT: (
        "The element never reached the required state within the timeout. "
        "Increase timeout_ms or wait_for_appearance before acting."
    ),
    ErrorCode.OPTION_NOT_FOUND: (
        "The dropdown does not contain an option with that visible text. "
        "Read the options with get_text first."
    ),
    ErrorCode.ELEMENT_NOT_INTERACTABLE: (
        "Element exists but cannot be interacted with. "
        "It may be hidden, disabled, or covered by another element."
    ),
    ErrorCode.INVALID_SELECTOR: (
        "The selector syntax is invalid. "
        "Check for typos in CSS selectors or XPath expressions."
    ),
    ErrorCode.WINDOW_ERROR: (
        "The window could not be opened or closed in time. "
        "Check that the page actually opens a new window."
    ),
    ErrorCode.WINDOW_NOT_FOUND: (
        "The window name is not registered. "
        "Use list_windows to see known windows."
    ),
    ErrorCode.SOFT_ERRORS: (
        "Soft failures were recorded during the session; see the message for the list."
    ),
    ErrorCode.GRID_UNAVAILABLE: (
        "Cannot connect to Selenium Grid. "
        "Verify the Grid URL is correct and the Grid service is running."
    ),
    ErrorCode.INVALID_ARGUMENT: (
        "Invalid argument provided. Check parameter types and values."
    ),
}


@dataclass
class ToolErrorResponse:
    """Structured error response for MCP tools."""

    error_code: str
    message: str
    suggestion: Optional[str] = None
    details: Optional[dict] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for tool response."""
        result = {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
            },
        }
        if self.suggestion:
            result["error"]["suggestion"] = self.suggestion
        if self.details:
            result["error"]["details"] = self.details
        return result


def map_error(exc: BaseException) -> tuple[ErrorCode, str]:
    """
    Map an exception to an MCP error code and message.

    Args:
        exc: The exception to map

    Returns:
        Tuple of (ErrorCode, error message)
    """
    exc_type = type(exc)

    # Check exact type first
    if exc_type in EXCEPTION_MAP:
        return EXCEPTION_MAP[exc_type], str(exc)

    # Check parent types
    for exc_class, code in EXCEPTION_MAP.items():
        if isinstance(exc, exc_class):
            return code, str(exc)

    if isinstance(exc, WebDriverException):
        return ErrorCode.DRIVER_ERROR, str(exc)

    # Fallback
    return ErrorCode.UNKNOWN_ERROR, str(exc)


def create_error_response(
    code: ErrorCode,
    message: str,
    details: Optional[dict] = None,
) -> ToolErrorResponse:
    """
    Create a structured error response with suggestion.

    Args:
        code: Error code
        message: Error message
        details: Optional additional details

    Returns:
        ToolErrorResponse with suggestion from SUGGESTIONS
    """
    return ToolErrorResponse(
        error_code=code.value,
        message=message,
        suggestion=SUGGESTIONS.get(code),
        details=details,
    )
