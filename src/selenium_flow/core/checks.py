"""Assertions reported through the same plugins and soft error log as actions."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional

from ..config import Settings
from .exceptions import CheckFailedError
from .plugins import PluginChain
from .records import AssertType, ErrorRecord, SoftErrorLog

logger = logging.getLogger(__name__)


class CheckMethod(str, Enum):
    ASSERT_TRUE = "assert_true"
    ASSERT_FALSE = "assert_false"
    ASSERT_NONE = "assert_none"
    ASSERT_NOT_NONE = "assert_not_none"
    ASSERT_EQUALS = "assert_equals"
    FAIL = "fail"


def merge_messages(message: str, description: str, default_message: str) -> tuple[str, str]:
    """
    Combine a custom message and description with the default message.

    Without a custom message the default is used and the description is
    dropped. With one, the default message is appended to the description.
    """
    if not message:
        return default_message, ""
    if not description:
        return message, default_message
    return message, f"{description}\n{default_message}"


class CheckBuilder:
    """
    One assertion, configured fluently and evaluated by a terminal call::

        checks.builder().actual(title).expected("Home").assert_equals()
    """

    def __init__(self, plugins: PluginChain, soft_errors: SoftErrorLog, settings: Settings):
        self._plugins = plugins
        self._soft_errors = soft_errors
        self._settings = settings
        self.actual_value: Any = None
        self.expected_value: Any = None
        self.condition_value: bool = False
        self.severity: AssertType = AssertType.BLOCK
        self.cause_value: Optional[BaseException] = None
        self.message: str = ""
        self.description: str = ""
        self.title_text: Optional[str] = None

    def actual(self, value: Any) -> "CheckBuilder":
        self.actual_value = value
        return self

    def expected(self, value: Any) -> "CheckBuilder":
        self.expected_value = value
        return self

    def condition(self, value: bool) -> "CheckBuilder":
        self.condition_value = bool(value)
        return self

    def assert_type(self, value: AssertType) -> "CheckBuilder":
        self.severity = AssertType(value)
        return self

    def soft(self) -> "CheckBuilder":
        return self.assert_type(AssertType.SOFT)

    def cause(self, exc: BaseException) -> "CheckBuilder":
        self.cause_value = exc
        return self

    def error_message(self, message: str) -> "CheckBuilder":
        self.message = message
        return self

    def error_description(self, description: str) -> "CheckBuilder":
        self.description = description
        return self

    def title(self, title: str) -> "CheckBuilder":
        self.title_text = title
        return self

    # Terminal calls

    def assert_true(self) -> bool:
        return self._evaluate(CheckMethod.ASSERT_TRUE, self.condition_value)

    def assert_false(self) -> bool:
        return self._evaluate(CheckMethod.ASSERT_FALSE, not self.condition_value)

    def assert_none(self) -> bool:
        return self._evaluate(CheckMethod.ASSERT_NONE, self.actual_value is None)

    def assert_not_none(self) -> bool:
        return self._evaluate(CheckMethod.ASSERT_NOT_NONE, self.actual_value is not None)

    def assert_equals(self) -> bool:
        return self._evaluate(CheckMethod.ASSERT_EQUALS, self.actual_value == self.expected_value)

    def fail(self) -> bool:
        """Fail unconditionally with the configured message."""
        self._plugins.notify("on_check", self, CheckMethod.FAIL)
        return self._check(False, self.message, self.description)

    # Evaluation

    def _prepare_messages(self, method: CheckMethod) -> tuple[str, str]:
        """Failure message and description for ``method``; the builder keeps the caller's text."""
        messages = self._settings.check_messages
        default_message = messages.get(f"{method.value}_error_message", "")
        if method is CheckMethod.ASSERT_EQUALS:
            default_message = default_message.format(
                expected=self.expected_value, actual=self.actual_value
            )
        if not self.title_text and self._settings.enable_assert_default_titles:
            self.title_text = messages.get(f"{method.value}_title", "")
        return merge_messages(self.message, self.description, default_message)

    def _evaluate(self, method: CheckMethod, statement: bool) -> bool:
        message, description = self._prepare_messages(method)
        self._plugins.notify("on_check", self, method)
        return self._check(statement, message, description)

    def _check(self, statement: bool, message: str, description: str) -> bool:
        if statement:
            self._plugins.notify("on_check_success", self)
            return True

        cause = self.cause_value
        if cause is None:
            cause = AssertionError(f"{message}\n{description}")
        record = ErrorRecord(message=message, description=description, cause=cause)
        self._plugins.notify("on_check_failure", self, record)

        if self.severity is AssertType.BLOCK:
            raise CheckFailedError(record) from cause
        logger.debug(f"Soft check failure recorded: {record.message}")
        self._soft_errors.append(record)
        return False


class Checks:
    """Factory of check builders bound to one context's plugins and soft error log."""

    def __init__(self, plugins: PluginChain, soft_errors: SoftErrorLog, settings: Settings):
        self.plugins = plugins
        self.soft_errors = soft_errors
        self.settings = settings

    def builder(self) -> CheckBuilder:
        return CheckBuilder(self.plugins, self.soft_errors, self.settings)
