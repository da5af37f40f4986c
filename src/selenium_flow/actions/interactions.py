"""Actions that change page state: click, input, select, key presses, mouse over."""

from __future__ import annotations

import dataclasses
import logging

from selenium.common.exceptions import NoSuchElementException
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.support.ui import Select as SelectElement

from ..core.exceptions import OptionNotFoundError
from ..utils.keys import resolve_key
from ..utils.scripts import execute_script
from .base import ActionBuilder, ActionType, ClickKind, transient_driver_errors

logger = logging.getLogger(__name__)

MOUSE_OVER_SCRIPT = (
    "var event = new MouseEvent('mouseover', "
    "{bubbles: true, cancelable: true, view: window});"
    "arguments[0].dispatchEvent(event);"
)


class Click(ActionBuilder):
    """Left, right or double click on the first match."""

    action_type = ActionType.CLICK

    def __init__(self, context):
        super().__init__(context)
        self.config = dataclasses.replace(
            self.config, title=context.settings.action_title(ClickKind.LEFT_CLICK.value)
        )

    def kind(self, click_kind: ClickKind) -> "Click":
        """Set the click kind; a default title follows it, a title set by the caller is kept."""
        settings = self._context.settings
        changes = {"click_kind": ClickKind(click_kind)}
        if self.config.title == settings.action_title(self.config.click_kind.value):
            changes["title"] = settings.action_title(ClickKind(click_kind).value)
        return self._update(**changes)

    def right(self) -> "Click":
        return self.kind(ClickKind.RIGHT_CLICK)

    def double(self) -> "Click":
        return self.kind(ClickKind.DOUBLE_CLICK)

    def perform(self) -> None:
        self._perform(self._click)

    def _click(self) -> None:
        click_kind = self.config.click_kind

        def attempt():
            element = self._lookup()[0]
            with transient_driver_errors():
                logger.debug(f"Perform {click_kind.value} action")
                if click_kind is ClickKind.LEFT_CLICK:
                    element.click()
                elif click_kind is ClickKind.RIGHT_CLICK:
                    ActionChains(self.driver).context_click(element).perform()
                else:
                    ActionChains(self.driver).double_click(element).perform()

        result = self._execute(attempt)
        if not result.succeeded:
            self._exhausted("click on element", result)


class Input(ActionBuilder):
    """Type a value into the first match, optionally clearing it first."""

    action_type = ActionType.INPUT

    def value(self, value: str) -> "Input":
        return self._update(value=str(value))

    def clear(self) -> "Input":
        return self._update(clear=True)

    def perform(self) -> None:
        self._perform(self._input)

    def _input(self) -> None:
        if not self.config.value:
            logger.warning("Input action performed without a value")

        def attempt():
            element = self._lookup()[0]
            with transient_driver_errors():
                if self.config.clear:
                    element.clear()
                element.send_keys(self.config.value)

        result = self._execute(attempt)
        if not result.succeeded:
            self._exhausted("input to element", result)


class SendKey(ActionBuilder):
    """
    Press keys.

    With a locator the keys go to the first match inside the retry loop;
    without one they go once to the focused element through ActionChains.
    """

    action_type = ActionType.SEND_KEY

    def key(self, key: str) -> "SendKey":
        """Add a key by name (``"ENTER"``, ``"ctrl"``) or as a Selenium key code."""
        return self._update(keys=self.config.keys + (resolve_key(key),))

    def keys(self, *keys: str) -> "SendKey":
        return self._update(keys=self.config.keys + tuple(resolve_key(k) for k in keys))

    def perform(self) -> None:
        self._perform(self._send)

    def _send(self) -> None:
        keys = self.config.keys
        if not keys:
            logger.warning("Send key action performed without keys")

        if self.config.locator is None:
            actions = ActionChains(self.driver)
            for key in keys:
                actions.send_keys(key)
            actions.perform()
            return

        def attempt():
            element = self._lookup()[0]
            with transient_driver_errors():
                element.send_keys(*keys)

        result = self._execute(attempt)
        if not result.succeeded:
            self._exhausted("send keys to element", result)


class MouseOver(ActionBuilder):
    """Dispatch a synthetic mouseover event on the first match."""

    action_type = ActionType.MOUSE_OVER

    def perform(self) -> None:
        self._perform(self._hover)

    def _hover(self) -> None:
        def attempt():
            element = self._lookup()[0]
            with transient_driver_errors():
                execute_script(self.driver, MOUSE_OVER_SCRIPT, element)

        result = self._execute(attempt)
        if not result.succeeded:
            self._exhausted("mouse over on element", result)


class Select(ActionBuilder):
    """
    Choose a dropdown option by visible text.

    A missing option fails on the first attempt without retrying.
    """

    action_type = ActionType.SELECT

    def value(self, value: str) -> "Select":
        return self._update(value=str(value))

    def perform(self) -> None:
        self._perform(self._select)

    def _select(self) -> None:
        value = self.config.value
        if not value:
            logger.warning("Select action performed without a value")

        def attempt():
            element = self._lookup()[0]
            with transient_driver_errors():
                try:
                    SelectElement(element).select_by_visible_text(value)
                except NoSuchElementException as e:
                    raise OptionNotFoundError(
                        f"Cannot locate option with value \"{value}\" in select located with: "
                        f"{self.config.locator}"
                    ) from e
                except NotImplementedError as e:
                    raise OptionNotFoundError(
                        f"Option with value \"{value}\" is disabled in select located with: "
                        f"{self.config.locator}"
                    ) from e

        result = self._execute(attempt)
        if not result.succeeded:
            self._exhausted(f"select value \"{value}\" in element", result)
