"""Core building blocks: sessions, locators, error records and exceptions."""

from .exceptions import (
    SeleniumFlowError,
    SessionError,
    SessionNotFoundError,
    SessionLimitError,
    LocatorError,
    TemplateNotFoundError,
    ActionError,
    ActionTimeoutError,
    OptionNotFoundError,
    WindowError,
    CheckFailedError,
    SoftAssertionError,
)
from .locators import Locator, LocatorTemplates
from .records import AssertType, ErrorRecord, SoftErrorLog
from .session import BrowserSession

__all__ = [
    "SeleniumFlowError",
    "SessionError",
    "SessionNotFoundError",
    "SessionLimitError",
    "LocatorError",
    "TemplateNotFoundError",
    "ActionError",
    "ActionTimeoutError",
    "OptionNotFoundError",
    "WindowError",
    "CheckFailedError",
    "SoftAssertionError",
    "Locator",
    "LocatorTemplates",
    "AssertType",
    "ErrorRecord",
    "SoftErrorLog",
    "BrowserSession",
]
