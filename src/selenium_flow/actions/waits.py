"""Wait for elements to appear or disappear."""

from __future__ import annotations

import logging
from typing import Optional

from selenium.webdriver.remote.webelement import WebElement

from ..core.exceptions import TransientNotFound
from ..utils.element_resolver import is_element_displayed
from .base import ActionBuilder, ActionType, transient_driver_errors

logger = logging.getLogger(__name__)


class Appearance(ActionBuilder):
    """
    Wait until the locator resolves to a (visible) element.

    Optional by default: on timeout ``perform()`` returns None. After
    ``require()`` the timeout is reported as a failure instead.
    """

    action_type = ActionType.APPEARANCE

    def require(self, value: bool = True) -> "Appearance":
        return self._update(require=value)

    def perform(self) -> Optional[WebElement]:
        return self._perform(self._wait)

    def _wait(self) -> Optional[WebElement]:
        result = self._execute(lambda: self._lookup()[0])
        if result.succeeded:
            return result.value
        if self.config.require:
            self._exhausted("waiting for appearance of element", result)
        else:
            logger.debug(f"Element located with {self.config.locator} did not appear")
        return None


class Disappearance(ActionBuilder):
    """
    Wait until no element matching the locator is displayed.

    Elements that went stale while checking count as gone. With
    ``visible(False)`` any match in the DOM keeps the wait going.
    """

    action_type = ActionType.DISAPPEARANCE

    def require(self, value: bool = True) -> "Disappearance":
        return self._update(require=value)

    def perform(self) -> bool:
        return self._perform(self._wait, empty=False)

    def _still_present(self) -> bool:
        locator = self._require_locator()
        by, value = self._context.templates.build(locator)
        with transient_driver_errors():
            elements = self.driver.find_elements(by, value)
            if not elements:
                return False
            if not self.config.visible:
                return True
            return any(is_element_displayed(element) for element in elements)

    def _wait(self) -> bool:
        def attempt():
            if self._still_present():
                raise TransientNotFound(f"Elements located with {self.config.locator} still displayed")
            return True

        result = self._execute(attempt)
        if result.succeeded:
            return True
        if self.config.require:
            self._exhausted("waiting for disappearance of element", result)
        else:
            logger.debug(f"Element located with {self.config.locator} did not disappear")
        return False
