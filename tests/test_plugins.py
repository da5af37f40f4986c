"""Tests for reporting plugins."""

import pytest
from unittest.mock import MagicMock

from selenium.common.exceptions import WebDriverException

from selenium_flow.core.exceptions import ActionTimeoutError
from selenium_flow.core.plugins import PageCapturePlugin, PluginChain, ReportingPlugin


class TestPluginChain:
    def test_notify_in_registration_order(self):
        order = []
        first, second = ReportingPlugin(), ReportingPlugin()
        first.before_action = lambda action: order.append("first")
        second.before_action = lambda action: order.append("second")
        chain = PluginChain([first])
        chain.register(second)

        chain.notify("before_action", object())

        assert order == ["first", "second"]
        assert len(chain) == 2

    def test_raising_plugin_is_skipped(self):
        seen = []
        broken, healthy = ReportingPlugin(), ReportingPlugin()
        broken.after_action = MagicMock(side_effect=RuntimeError("boom"))
        healthy.after_action = lambda action: seen.append(action)
        chain = PluginChain([broken, healthy])

        chain.notify("after_action", "action")

        assert seen == ["action"]

    def test_unknown_hook(self):
        with pytest.raises(ValueError):
            PluginChain().notify("on_everything")


class TestPageCapturePlugin:
    """Tests for PageCapturePlugin."""

    @pytest.fixture
    def capture(self, context, browser_session, settings):
        plugin = PageCapturePlugin(browser_session, settings)
        context.register_plugin(plugin)
        return plugin

    def test_captures_on_action_error(self, capture, context, mock_webdriver):
        mock_webdriver.find_elements.return_value = []
        mock_webdriver.page_source = "<html><script>x()</script><body>Oops</body></html>"

        with pytest.raises(ActionTimeoutError):
            context.click().template("button", "Search").timeout(0).perform()

        latest = capture.latest()
        assert latest.message.startswith("Timeout (0 s)")
        assert latest.screenshot_base64 == "BASE64_DATA"
        assert latest.page_source["html"] == "<html><body>Oops</body></html>"
        assert latest.errors == []

    def test_disable_attachments_skips_capture(self, capture, context, mock_webdriver):
        mock_webdriver.find_elements.return_value = []

        context.click().template("button", "Search").timeout(0).soft().disable_attachments().perform()

        assert capture.captures == []

    def test_attachments_turned_off(self, capture, context, mock_webdriver, settings):
        settings.attachments_enabled = False
        mock_webdriver.find_elements.return_value = []

        context.click().template("button", "Search").timeout(0).soft().perform()

        assert capture.captures == []

    def test_failed_screenshot_is_recorded(self, capture, context, mock_webdriver):
        mock_webdriver.find_elements.return_value = []
        mock_webdriver.get_screenshot_as_base64.side_effect = WebDriverException("tab crashed")

        context.click().template("button", "Search").timeout(0).soft().perform()

        latest = capture.latest()
        assert latest.screenshot_base64 is None
        assert latest.errors == ["screenshot: tab crashed"]
        assert len(context.soft_errors) == 1
