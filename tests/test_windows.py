"""Tests for WindowManager."""

import itertools

import pytest
from unittest.mock import patch

from selenium.common.exceptions import NoSuchWindowException, TimeoutException

from selenium_flow.core.exceptions import WindowError, WindowNotFoundError
from selenium_flow.core.windows import OPEN_WINDOW_SCRIPT, WindowManager, any_window_other_than


@pytest.fixture
def windows(browser_session, settings, fake_clock):
    return WindowManager(browser_session, settings, sleep=fake_clock.sleep)


def open_popup(driver, handle="window2"):
    """execute_script side effect that opens a window on window.open()."""

    def execute_script(source, *args):
        if source == OPEN_WINDOW_SCRIPT:
            driver.window_handles = driver.window_handles + [handle]

    return execute_script


def open_popups(driver):
    """execute_script side effect that gives every window.open() a fresh handle."""
    counter = itertools.count(2)

    def execute_script(source, *args):
        if source == OPEN_WINDOW_SCRIPT:
            driver.window_handles = driver.window_handles + [f"window{next(counter)}"]

    return execute_script


def test_initial_window_registered(windows):
    assert windows.windows == {"main": "window1"}
    assert windows.active_window == "main"
    assert windows.active_handle == "window1"


def test_windows_is_a_copy(windows):
    windows.windows["other"] = "x"

    assert "other" not in windows.windows


def test_any_window_other_than(mock_webdriver):
    mock_webdriver.window_handles = ["window1", "window2"]

    assert any_window_other_than({"window1"})(mock_webdriver) == "window2"
    assert any_window_other_than({"window1", "window2"})(mock_webdriver) is None


def test_open_registers_and_activates(windows, mock_webdriver):
    mock_webdriver.execute_script.side_effect = open_popup(mock_webdriver)

    windows.open("popup")

    assert windows.windows == {"main": "window1", "popup": "window2"}
    assert windows.active_window == "popup"
    assert mock_webdriver.current_window_handle == "window2"
    mock_webdriver.set_window_size.assert_called_once_with(1921, 1081)


def test_open_link_navigates_new_window(windows, mock_webdriver):
    mock_webdriver.execute_script.side_effect = open_popup(mock_webdriver)

    windows.open_link("docs", "https://example.com/docs")

    mock_webdriver.get.assert_called_once_with("https://example.com/docs")
    assert windows.active_window == "docs"


def test_switch_to_known_window(windows, mock_webdriver):
    mock_webdriver.execute_script.side_effect = open_popup(mock_webdriver)
    windows.open("popup")

    windows.switch_to("main")

    assert windows.active_window == "main"
    assert mock_webdriver.current_window_handle == "window1"


def test_switch_to_unknown_window_times_out(windows, settings):
    with patch("selenium_flow.core.windows.WebDriverWait") as wait:
        wait.return_value.until.side_effect = TimeoutException("no window")

        with pytest.raises(WindowError):
            windows.switch_to("popup")

    assert windows.windows == {"main": "window1"}
    assert windows.active_window == "main"


def test_switch_retries_missing_window(windows, mock_webdriver, fake_clock):
    mock_webdriver.window_handles = ["window1", "window2"]
    with patch("selenium_flow.core.windows.WebDriverWait") as wait:
        wait.return_value.until.side_effect = [NoSuchWindowException("no such window"), "window2"]

        windows.switch_to("popup")

    assert windows.active_window == "popup"
    assert fake_clock.sleeps == [1.0]


def test_switch_retries_are_bounded(windows, settings, fake_clock):
    with patch("selenium_flow.core.windows.WebDriverWait") as wait:
        wait.return_value.until.side_effect = NoSuchWindowException("No window with id: 42")

        with pytest.raises(WindowError):
            windows.switch_to("popup")

    assert wait.return_value.until.call_count == settings.window_switch_max_retries + 1
    assert fake_clock.sleeps == [1.0] * settings.window_switch_max_retries


def test_close_switches_to_remaining_window(windows, mock_webdriver):
    mock_webdriver.execute_script.side_effect = open_popup(mock_webdriver)
    windows.open("popup")

    windows.close()

    mock_webdriver.close.assert_called_once()
    assert windows.windows == {"main": "window1"}
    assert windows.active_window == "main"
    assert windows.active_window in windows.windows


def test_close_last_window_ends_session(windows, browser_session, mock_webdriver):
    windows.close()

    mock_webdriver.quit.assert_called_once()
    assert browser_session.is_open is False
    assert windows.windows == {}
    assert windows.active_window is None


def test_mixed_window_sequence_keeps_active_registered(windows, mock_webdriver):
    mock_webdriver.execute_script.side_effect = open_popups(mock_webdriver)
    steps = [
        (lambda: windows.open("a"), 1),
        (lambda: windows.open("b"), 1),
        (lambda: windows.switch_to("main"), 0),
        (lambda: windows.switch_to("a"), 0),
        (windows.close, -1),
        (lambda: windows.switch_to("b"), 0),
        (lambda: windows.close_and_switch("main"), -1),
    ]

    for step, change in steps:
        size = len(windows.windows)
        step()

        assert windows.active_window in windows.windows
        assert len(windows.windows) - size == change
        assert mock_webdriver.current_window_handle == windows.active_handle

    assert windows.windows == {"main": "window1"}


def test_close_and_switch_unknown_window(windows, mock_webdriver):
    with pytest.raises(WindowNotFoundError):
        windows.close_and_switch("nowhere")

    mock_webdriver.close.assert_not_called()


def test_close_waits_for_window_to_close(windows, mock_webdriver, settings, fake_clock):
    mock_webdriver.execute_script.side_effect = open_popup(mock_webdriver)
    windows.open("popup")
    mock_webdriver.close.side_effect = None

    with pytest.raises(WindowError):
        windows.close_and_switch("main")

    assert fake_clock.sleeps == [0.5] * settings.window_close_attempts


def test_auto_close_and_switch(windows, mock_webdriver):
    mock_webdriver.execute_script.side_effect = open_popup(mock_webdriver)
    windows.open("popup")
    # The page closes its own window
    mock_webdriver.window_handles = ["window1"]

    windows.auto_close_and_switch("main")

    mock_webdriver.close.assert_not_called()
    assert windows.windows == {"main": "window1"}
    assert windows.active_window == "main"


def test_is_closed(windows, mock_webdriver):
    assert windows.is_closed() is False

    mock_webdriver.window_handles = []

    assert windows.is_closed() is True


def test_context_creates_window_manager_lazily(context, mock_webdriver):
    manager = context.windows

    assert manager is context.windows
    assert manager.active_handle == "window1"
