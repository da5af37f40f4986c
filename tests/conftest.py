"""Pytest fixtures for testing selenium-flow."""

import pytest
from unittest.mock import MagicMock

from selenium.common.exceptions import NoSuchWindowException

from selenium_flow.config import Settings
from selenium_flow.core.context import ActionContext
from selenium_flow.core.driver_factory import DriverFactory
from selenium_flow.core.locators import LocatorTemplates
from selenium_flow.core.plugins import LoggingPlugin, PluginChain, ReportingPlugin
from selenium_flow.core.session import BrowserSession
from selenium_flow.core.session_manager import SessionManager


class FakeClock:
    """Monotonic clock in seconds that only moves when told to."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingPlugin(ReportingPlugin):
    """Remembers every hook call as (hook, args)."""

    def __init__(self):
        self.calls = []

    def hooks(self) -> list[str]:
        return [hook for hook, _ in self.calls]

    def before_action(self, action):
        self.calls.append(("before_action", (action,)))

    def after_action(self, action):
        self.calls.append(("after_action", (action,)))

    def on_error(self, action, error):
        self.calls.append(("on_error", (action, error)))

    def action_result(self, action, result):
        self.calls.append(("action_result", (action, result)))

    def on_check(self, check, method):
        self.calls.append(("on_check", (check, method)))

    def on_check_success(self, check):
        self.calls.append(("on_check_success", (check,)))

    def on_check_failure(self, check, error):
        self.calls.append(("on_check_failure", (check, error)))


@pytest.fixture
def mock_webelement():
    """Create a mock WebElement."""
    element = MagicMock()
    element.tag_name = "button"
    element.text = "Click Me"
    element.is_displayed.return_value = True
    element.is_enabled.return_value = True
    element.is_selected.return_value = False
    element.get_attribute.return_value = None
    element.location = {"x": 100, "y": 200}
    element.size = {"width": 80, "height": 30}
    return element


@pytest.fixture
def mock_webdriver(mock_webelement):
    """Create a mock WebDriver whose window calls track real handles."""
    driver = MagicMock()

    # Navigation
    driver.current_url = "https://example.com"
    driver.title = "Example Page"
    driver.page_source = "<html><body><h1>Hello</h1></body></html>"

    # Execute script
    driver.execute_script = MagicMock(return_value=None)

    # Find elements
    driver.find_elements = MagicMock(return_value=[mock_webelement])

    # Screenshot
    driver.get_screenshot_as_base64 = MagicMock(return_value="BASE64_DATA")

    # Window management
    driver.get_window_size = MagicMock(return_value={"width": 1920, "height": 1080})
    driver.set_window_size = MagicMock()
    driver.window_handles = ["window1"]
    driver.current_window_handle = "window1"

    def switch_window(handle):
        if handle not in driver.window_handles:
            raise NoSuchWindowException(f"no such window: {handle}")
        driver.current_window_handle = handle

    def close_window():
        driver.window_handles = [h for h in driver.window_handles if h != driver.current_window_handle]

    driver.switch_to.window.side_effect = switch_window
    driver.close.side_effect = close_window

    # Session
    driver.session_id = "mock-session-id"
    driver.capabilities = {
        "browserName": "chrome",
        "browserVersion": "120.0",
        "platformName": "linux",
    }
    driver.quit = MagicMock()

    return driver


@pytest.fixture
def settings():
    """Settings with library defaults."""
    return Settings()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def recorder():
    return RecordingPlugin()


@pytest.fixture
def browser_session(mock_webdriver):
    """BrowserSession attached to the mock driver."""
    session = BrowserSession()
    session.attach(mock_webdriver)
    return session


@pytest.fixture
def templates():
    return LocatorTemplates(
        {
            "button": "//button[text()='%s']",
            "field": "//label[text()='%s']/following::input[1]",
            "dropdown": "//select[@name='%s']",
            "spinner": "//div[@class='spinner']",
        }
    )


@pytest.fixture
def context(browser_session, templates, settings, fake_clock, recorder):
    """ActionContext on the mock driver with a fake clock and a recording plugin."""
    return ActionContext(
        browser_session,
        templates=templates,
        plugins=PluginChain([LoggingPlugin(), recorder]),
        settings=settings,
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )


@pytest.fixture
def mock_driver_factory(mock_webdriver):
    """Create mock DriverFactory that returns mock WebDriver."""
    factory = MagicMock(spec=DriverFactory)
    factory.create = MagicMock(return_value=mock_webdriver)
    return factory


@pytest.fixture
def session_manager(mock_driver_factory, settings, templates):
    """Create SessionManager with mocked driver factory."""
    return SessionManager(
        driver_factory=mock_driver_factory,
        settings=settings,
        templates=templates,
        max_sessions=5,
        max_lifetime_seconds=900,
        max_idle_seconds=300,
    )
