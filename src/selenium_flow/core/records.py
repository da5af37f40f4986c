"""Error records and the soft error log."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import SoftAssertionError

logger = logging.getLogger(__name__)


class AssertType(str, Enum):
    """Severity of a failure: BLOCK aborts, SOFT records and continues."""

    BLOCK = "block"
    SOFT = "soft"


@dataclass(frozen=True)
class ErrorRecord:
    """A reported failure: message, longer description and underlying cause."""

    message: str
    description: str = ""
    cause: Optional[BaseException] = None


class SoftErrorLog:
    """
    Ordered list of failures recorded under SOFT severity.

    Owned by one execution context (one test on one thread). The log is
    never reset automatically: callers flush or clear it at test
    boundaries, otherwise the recorded failures are silently lost.
    """

    def __init__(self):
        self._errors: list[ErrorRecord] = []
        self._lock = threading.Lock()

    def append(self, error: ErrorRecord) -> int:
        """Record a failure and return the log size."""
        with self._lock:
            self._errors.append(error)
            size = len(self._errors)
        logger.debug(f"Soft error #{size} recorded: {error.message}")
        return size

    @property
    def errors(self) -> list[ErrorRecord]:
        """Snapshot of recorded failures in call order."""
        with self._lock:
            return list(self._errors)

    def __len__(self) -> int:
        with self._lock:
            return len(self._errors)

    def flush(self) -> list[ErrorRecord]:
        """Return all recorded failures in call order and empty the log."""
        with self._lock:
            errors = self._errors
            self._errors = []
        return errors

    def clear(self) -> int:
        """Drop recorded failures. Returns count of dropped failures."""
        return len(self.flush())

    def raise_if_any(self) -> None:
        """
        Flush the log and surface its failures.

        Raises:
            SoftAssertionError: If any failure was recorded since the last flush
        """
        errors = self.flush()
        if errors:
            logger.info(f"Surfacing {len(errors)} soft error(s)")
            raise SoftAssertionError(errors)
