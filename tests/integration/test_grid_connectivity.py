"""Grid connectivity and end-to-end action tests.

These run the action builders against a real browser on Selenium Grid.
Set SELENIUM_FLOW_GRID_URL to enable them.
"""

import pytest
import httpx

from selenium_flow.core.exceptions import ActionTimeoutError, CheckFailedError

pytestmark = pytest.mark.integration


class TestGridConnectivity:
    """Tests for direct Selenium Grid access."""

    def test_grid_status_api(self, grid_url):
        """Verify Selenium Grid status API is accessible and ready."""
        response = httpx.get(f"{grid_url}/status", timeout=10.0)
        assert response.status_code == 200

        status = response.json()
        assert status.get("value", {}).get("ready") is True, f"Grid not ready: {status}"

    def test_session_navigates(self, browser_session):
        driver = browser_session.driver
        driver.get("https://example.com")

        assert "Example Domain" in driver.title
        assert browser_session.is_active()


class TestActionsOnGrid:
    """Action builders against https://example.com."""

    @pytest.fixture(autouse=True)
    def open_page(self, browser_session):
        browser_session.driver.get("https://example.com")

    def test_read_heading(self, context):
        text = context.text().template("heading").get_first()

        assert context.check().actual(text).expected("Example Domain").assert_equals()

    def test_wait_for_appearance(self, context):
        element = context.appearance().template("link", "More").timeout(5000).perform()

        assert element is not None

    def test_missing_element_times_out(self, context):
        with pytest.raises(ActionTimeoutError) as exc:
            context.click().template("link", "Nowhere").timeout(1000).perform()

        assert str(exc.value).startswith("Timeout (1 s) of click on element link [Nowhere]")

    def test_soft_failures_flush_together(self, context):
        context.click().template("link", "Nowhere").timeout(500).soft().perform()
        context.check().actual("a").expected("b").soft().assert_equals()

        with pytest.raises(AssertionError) as exc:
            context.flush_soft_errors()

        assert not isinstance(exc.value, CheckFailedError)
        assert "2. Expected [b] but found [a]" in str(exc.value)

    def test_open_and_close_named_window(self, context):
        context.windows.open_link("second", "https://example.com")

        assert context.windows.active_window == "second"

        context.windows.close()

        assert context.windows.active_window == "main"
