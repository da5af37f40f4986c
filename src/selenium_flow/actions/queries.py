"""Actions that read from the page: find elements, get text, get attributes."""

from __future__ import annotations

import logging
from typing import Optional

from selenium.webdriver.remote.webelement import WebElement

from ..utils.element_resolver import read_element_text
from .base import ActionBuilder, ActionType, transient_driver_errors

logger = logging.getLogger(__name__)


class FindElement(ActionBuilder):
    """
    Resolve the locator to elements.

    ``find_*`` calls are optional and return None (or an empty list) on
    timeout. ``get_*`` calls report the timeout as a failure.
    """

    action_type = ActionType.FIND_ELEMENT

    def find_first(self) -> Optional[WebElement]:
        elements = self._find(required=False)
        return elements[0] if elements else None

    def find_last(self) -> Optional[WebElement]:
        elements = self._find(required=False)
        return elements[-1] if elements else None

    def find_all(self) -> list[WebElement]:
        return self._find(required=False)

    def get_first(self) -> Optional[WebElement]:
        elements = self._find(required=True)
        return elements[0] if elements else None

    def get_last(self) -> Optional[WebElement]:
        elements = self._find(required=True)
        return elements[-1] if elements else None

    def get_all(self) -> list[WebElement]:
        return self._find(required=True)

    def _find(self, required: bool) -> list[WebElement]:
        def body():
            result = self._execute(self._lookup)
            if result.succeeded:
                return result.value
            if required:
                self._exhausted("waiting for element", result)
            else:
                logger.debug(f"No elements located with {self.config.locator}")
            return []

        return self._perform(body, empty=[])


class GetText(ActionBuilder):
    """
    Read the text of matched elements.

    Inputs and textareas yield their value, selects the selected option.
    Every terminal call treats a timeout as a failure.
    """

    action_type = ActionType.GET_TEXT

    def get_first(self) -> str:
        texts = self._texts()
        return texts[0] if texts else ""

    def get_last(self) -> str:
        texts = self._texts()
        return texts[-1] if texts else ""

    def get_all(self) -> list[str]:
        return self._texts()

    def _texts(self) -> list[str]:
        def attempt():
            elements = self._lookup()
            with transient_driver_errors():
                return [read_element_text(element) for element in elements]

        def body():
            result = self._execute(attempt)
            if not result.succeeded:
                self._exhausted("get text of element", result)
                return []
            texts = result.value
            logger.debug(f"Text of elements located with {self.config.locator}: {texts}")
            self._report_result(texts)
            return texts

        return self._perform(body, empty=[])


class GetAttribute(ActionBuilder):
    """Read one attribute of the first match."""

    action_type = ActionType.GET_ATTRIBUTE

    def attribute(self, name: str) -> "GetAttribute":
        return self._update(attribute=name)

    def get(self) -> str:
        return self._perform(self._get, empty="")

    def _get(self) -> str:
        name = self.config.attribute
        if not name:
            logger.warning("Get attribute action performed without an attribute name")

        def attempt():
            element = self._lookup()[0]
            with transient_driver_errors():
                return element.get_attribute(name)

        result = self._execute(attempt)
        if not result.succeeded:
            self._exhausted("get attribute of element", result)
            return ""
        value = result.value or ""
        logger.debug(f"Attribute \"{name}\" of element located with {self.config.locator}: \"{value}\"")
        self._report_result(value)
        return value
