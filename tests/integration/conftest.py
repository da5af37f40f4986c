"""Fixtures for integration tests against a real Selenium Grid."""

import os

import pytest

from selenium_flow.config import Settings
from selenium_flow.core.context import ActionContext
from selenium_flow.core.locators import LocatorTemplates
from selenium_flow.core.session import BrowserSession

# Configuration
GRID_URL = os.environ.get("SELENIUM_FLOW_GRID_URL")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests when no Grid is configured."""
    if GRID_URL:
        return
    skip = pytest.mark.skip(reason="SELENIUM_FLOW_GRID_URL is not set")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip)


@pytest.fixture
def grid_url():
    """Return the Selenium Grid URL."""
    return GRID_URL


@pytest.fixture
def browser_session(grid_url):
    """Open a headless Chrome on the Grid and quit it after the test."""
    session = BrowserSession()
    session.open(hub_url=grid_url, browser="chrome", headless=True)
    yield session
    session.close()


@pytest.fixture
def context(browser_session):
    """ActionContext with templates for https://example.com."""
    templates = LocatorTemplates(
        {
            "heading": "//h1",
            "link": "//a[contains(text(), '%s')]",
        }
    )
    return ActionContext(browser_session, templates=templates, settings=Settings())
