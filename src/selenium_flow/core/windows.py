"""Named browser windows: open, switch and close them."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from selenium.common.exceptions import NoSuchWindowException, TimeoutException, WebDriverException
from selenium.webdriver.support.ui import WebDriverWait

from ..config import Settings
from ..utils.error_mapper import is_missing_window_error
from ..utils.scripts import execute_script
from .exceptions import WindowError, WindowNotFoundError
from .session import BrowserSession

logger = logging.getLogger(__name__)

OPEN_WINDOW_SCRIPT = "window.open();"


def any_window_other_than(known_handles: set[str]) -> Callable[[Any], Optional[str]]:
    """Wait condition returning a window handle not in ``known_handles``."""

    def _predicate(driver) -> Optional[str]:
        for handle in driver.window_handles:
            if handle not in known_handles:
                return handle
        return None

    return _predicate


class WindowManager:
    """
    Keeps a table of window names to handles for one session.

    The window that was current when the manager was created is registered
    under ``window_name``. ``active_window`` is always a key of the table
    while the session is open.
    """

    def __init__(
        self,
        session: BrowserSession,
        settings: Settings,
        window_name: str = "main",
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.session = session
        self.settings = settings
        self._sleep = sleep
        handle = session.driver.current_window_handle
        if not handle:
            raise WindowError("Cannot read the active window handle")
        self._handles: dict[str, str] = {window_name: handle}
        self.active_window: Optional[str] = window_name
        self.active_handle: Optional[str] = handle

    @property
    def windows(self) -> dict[str, str]:
        """Copy of the name to handle table."""
        return dict(self._handles)

    def _table(self) -> str:
        return ", ".join(f"{name}: {handle}" for name, handle in self._handles.items())

    def open(self, name: str) -> None:
        """Open a blank window and make it active under ``name``."""
        logger.debug(f"Open new window '{name}'")
        execute_script(self.session.driver, OPEN_WINDOW_SCRIPT)
        self.switch_to(name)

    def open_link(self, name: str, url: str) -> None:
        """Open a window under ``name`` and navigate it to ``url``."""
        self.open(name)
        self.session.driver.get(url)

    def switch_to(self, name: str) -> None:
        """
        Make the window registered as ``name`` active.

        An unknown name is bound to the first window handle that is not yet
        in the table, waiting up to ``window_open_timeout_ms`` for one to
        appear. Missing-window driver errors are retried after
        ``window_switch_backoff_ms``, at most ``window_switch_max_retries``
        times, so the total wait can exceed the open timeout.

        Raises:
            WindowError: If no new window appears or retries are exhausted
        """
        driver = self.session.driver
        handle = self._handles.get(name)
        if handle:
            logger.debug(f"Switch to known window '{name}' ({handle})")
            driver.switch_to.window(handle)
            self.active_window = name
            self.active_handle = driver.current_window_handle
            return

        retries = 0
        while True:
            try:
                self._switch_to_new(name)
                return
            except TimeoutException as e:
                raise WindowError(
                    f"No new window appeared for '{name}' within "
                    f"{self.settings.window_open_timeout_seconds:g} s"
                ) from e
            except WebDriverException as e:
                if not is_missing_window_error(e) or retries >= self.settings.window_switch_max_retries:
                    raise WindowError(f"Cannot switch to new window '{name}': {e.msg or e}") from e
                retries += 1
                logger.debug(
                    f"Window vanished while switching to '{name}', "
                    f"retry {retries}/{self.settings.window_switch_max_retries}"
                )
                self._sleep(self.settings.window_switch_backoff_ms / 1000.0)

    def _switch_to_new(self, name: str) -> None:
        driver = self.session.driver
        size = driver.get_window_size()
        known = set(self._handles.values())
        logger.debug(f"Wait for a window other than: {self._table()}")
        handle = WebDriverWait(driver, self.settings.window_open_timeout_seconds).until(
            any_window_other_than(known)
        )
        driver.switch_to.window(handle)
        # Resizing forces some drivers to render the new window
        driver.set_window_size(size["width"] + 1, size["height"] + 1)
        self.active_window = name
        self.active_handle = driver.current_window_handle
        self._handles[name] = self.active_handle
        logger.debug(f"Active window '{name}' ({self.active_handle}); windows: {self._table()}")

    def close(self) -> None:
        """Close the active window. Closing the last one ends the session."""
        logger.debug(f"Close window '{self.active_window}' ({self.active_handle})")
        if len(self._handles) <= 1:
            self.session.close()
            self._handles.clear()
            self.active_window = None
            self.active_handle = None
            return
        other = next(name for name in self._handles if name != self.active_window)
        self.close_and_switch(other)

    def close_and_switch(self, name: str) -> None:
        """
        Close the active window and switch to ``name``.

        Raises:
            WindowNotFoundError: If ``name`` is not registered
            WindowError: If the window does not close
        """
        if name not in self._handles:
            raise WindowNotFoundError(name)
        self.session.driver.close()
        self._forget_active(name)

    def auto_close_and_switch(self, name: str) -> None:
        """Wait for the page to close the active window itself, then switch to ``name``."""
        if name not in self._handles:
            raise WindowNotFoundError(name)
        self._forget_active(name)

    def _forget_active(self, switch_to: str) -> None:
        self._wait_until_closed()
        self._handles.pop(self.active_window, None)
        self.switch_to(switch_to)

    def is_closed(self) -> bool:
        """Whether the active window's handle no longer exists."""
        try:
            self.session.driver.switch_to.window(self.active_handle)
            return False
        except NoSuchWindowException:
            return True

    def _wait_until_closed(self) -> None:
        attempts = self.settings.window_close_attempts
        for attempt in range(1, attempts + 1):
            if self.is_closed():
                logger.debug(f"Window '{self.active_window}' closed")
                return
            logger.debug(f"Window '{self.active_window}' still open ({attempt}/{attempts})")
            self._sleep(self.settings.window_close_backoff_ms / 1000.0)
        if not self.is_closed():
            raise WindowError(f"Window '{self.active_window}' did not close")
