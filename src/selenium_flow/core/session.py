"""Explicit browser session handle."""

from __future__ import annotations

import logging
from typing import Optional

from selenium.webdriver.remote.webdriver import WebDriver

from .driver_factory import DriverFactory
from .exceptions import SessionError

logger = logging.getLogger(__name__)


class BrowserSession:
    """
    Owns one browser driver for one worker.

    The session object is held by the caller's test context and passed into
    every action; it is not shared between threads. Teardown is explicit via
    ``close()``.
    """

    def __init__(self, driver_factory: Optional[DriverFactory] = None):
        self._driver_factory = driver_factory or DriverFactory()
        self._driver: Optional[WebDriver] = None
        self.capabilities: dict = {}

    def open(
        self,
        hub_url: Optional[str] = None,
        browser: str = "chrome",
        headless: bool = True,
        capabilities: Optional[dict] = None,
        viewport: Optional[tuple[int, int]] = None,
    ) -> WebDriver:
        """
        Start a browser for this session.

        Args:
            hub_url: Selenium Grid URL; a local browser is started when empty
            browser: Browser type (chrome, firefox, edge)
            headless: Run in headless mode
            capabilities: Additional WebDriver capabilities
            viewport: Optional (width, height)

        Returns:
            The new driver

        Raises:
            SessionError: If a driver is already open or cannot be started
        """
        if self._driver is not None:
            raise SessionError("Session already has an open driver; close it first")

        width, height = viewport if viewport else (None, None)
        driver = self._driver_factory.create(
            browser=browser,
            headless=headless,
            hub_url=hub_url,
            viewport_width=width,
            viewport_height=height,
            extra_capabilities=capabilities,
        )
        return self.attach(driver)

    def attach(self, driver: WebDriver) -> WebDriver:
        """Register an externally created driver with this session."""
        self._driver = driver
        self.capabilities = dict(getattr(driver, "capabilities", None) or {})
        return driver

    @property
    def driver(self) -> WebDriver:
        """The active driver.

        Raises:
            SessionError: If the session has no open driver
        """
        if self._driver is None:
            raise SessionError()
        return self._driver

    @property
    def is_open(self) -> bool:
        return self._driver is not None

    def close(self) -> None:
        """Quit the driver. Safe to call on a closed session."""
        driver, self._driver = self._driver, None
        if driver is None:
            return
        try:
            driver.quit()
        except Exception as e:
            logger.warning(f"Error quitting driver: {e}")
        logger.info("Browser session closed")

    def is_active(self) -> bool:
        """Liveness check: reading the current URL must succeed."""
        if self._driver is None:
            return False
        try:
            _ = self._driver.current_url
            return True
        except Exception:
            return False
