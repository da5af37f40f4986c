"""Factory for creating local or Grid-backed WebDriver instances."""

import logging
from typing import Optional
from selenium import webdriver
from selenium.webdriver.remote.file_detector import LocalFileDetector
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.common.exceptions import WebDriverException

from .exceptions import GridConnectionError, SessionError

logger = logging.getLogger(__name__)


class DriverFactory:
    """
    Creates WebDriver instances, either local or connected to Selenium Grid.

    Creation is blocking; async callers run it in a worker thread.
    """

    def __init__(
        self,
        page_load_timeout: int = 30,
        script_timeout: int = 30,
        implicit_wait: int = 0,
    ):
        self.page_load_timeout = page_load_timeout
        self.script_timeout = script_timeout
        self.implicit_wait = implicit_wait

    def create(
        self,
        browser: str = "chrome",
        headless: bool = True,
        hub_url: Optional[str] = None,
        viewport_width: Optional[int] = None,
        viewport_height: Optional[int] = None,
        extra_capabilities: Optional[dict] = None,
    ) -> WebDriver:
        """
        Create a new WebDriver.

        Args:
            browser: Browser type (chrome, firefox, edge)
            headless: Run browser in headless mode
            hub_url: Selenium Grid URL; a local browser is started when empty
            viewport_width: Optional viewport width
            viewport_height: Optional viewport height
            extra_capabilities: Additional capabilities to pass to the browser

        Returns:
            Configured WebDriver instance

        Raises:
            GridConnectionError: If unable to connect to Selenium Grid
            SessionError: If a local browser cannot be started
            ValueError: If browser type is not supported
        """
        options = self._build_options(
            browser=browser,
            headless=headless,
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            extra_capabilities=extra_capabilities,
        )

        try:
            if hub_url:
                driver = webdriver.Remote(command_executor=hub_url, options=options)
                # Upload local files through the remote node
                driver.file_detector = LocalFileDetector()
            else:
                driver = self._local_driver(browser, options)

            driver.set_page_load_timeout(self.page_load_timeout)
            driver.set_script_timeout(self.script_timeout)
            driver.implicitly_wait(self.implicit_wait)

            if viewport_width and viewport_height:
                driver.set_window_size(viewport_width, viewport_height)

            logger.info(f"Started {browser} driver ({'grid ' + hub_url if hub_url else 'local'})")
            return driver

        except WebDriverException as e:
            if hub_url:
                raise GridConnectionError(hub_url, str(e)) from e
            raise SessionError(f"Failed to start {browser}: {e}") from e

    @staticmethod
    def _local_driver(browser: str, options) -> WebDriver:
        drivers = {
            "chrome": webdriver.Chrome,
            "firefox": webdriver.Firefox,
            "edge": webdriver.Edge,
        }
        return drivers[browser.lower()](options=options)

    def _build_options(
        self,
        browser: str,
        headless: bool,
        viewport_width: Optional[int],
        viewport_height: Optional[int],
        extra_capabilities: Optional[dict],
    ):
        """Build browser-specific options object."""
        options_map = {
            "chrome": webdriver.ChromeOptions,
            "firefox": webdriver.FirefoxOptions,
            "edge": webdriver.EdgeOptions,
        }

        if browser.lower() not in options_map:
            raise ValueError(
                f"Unsupported browser: {browser}. "
                f"Supported browsers: {list(options_map.keys())}"
            )

        options = options_map[browser.lower()]()

        # Common arguments for stability
        if browser.lower() == "chrome":
            options.add_argument("--no-sandbox")
            options.add_argument("--disable-dev-shm-usage")
            options.add_argument("--disable-gpu")
            if headless:
                options.add_argument("--headless=new")
            if viewport_width and viewport_height:
                options.add_argument(f"--window-size={viewport_width},{viewport_height}")

        elif browser.lower() == "firefox":
            if headless:
                options.add_argument("-headless")

        elif browser.lower() == "edge":
            options.add_argument("--no-sandbox")
            options.add_argument("--disable-dev-shm-usage")
            if headless:
                options.add_argument("--headless=new")

        # Apply extra capabilities
        if extra_capabilities:
            for key, value in extra_capabilities.items():
                options.set_capability(key, value)

        return options
