"""Execution context handed to every action and check."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

from ..actions.interactions import Click, Input, MouseOver, Select, SendKey
from ..actions.queries import FindElement, GetAttribute, GetText
from ..actions.waits import Appearance, Disappearance
from ..config import Settings, settings as default_settings
from .checks import CheckBuilder, Checks
from .locators import LocatorTemplates
from .plugins import LoggingPlugin, PluginChain, ReportingPlugin
from .records import SoftErrorLog
from .session import BrowserSession
from .windows import WindowManager

logger = logging.getLogger(__name__)


class ActionContext:
    """
    Everything one test needs to drive a browser.

    Holds the session, the locator templates of the current page, the
    plugin chain and the soft error log. One context belongs to one test
    on one thread; nothing here is global.

    Example::

        ctx = ActionContext(session, LocatorTemplates({"button": "//button[text()='%s']"}))
        ctx.click().template("button", "Search").perform()
        ctx.flush_soft_errors()
    """

    def __init__(
        self,
        session: BrowserSession,
        templates: Optional[LocatorTemplates] = None,
        plugins: Optional[PluginChain] = None,
        soft_errors: Optional[SoftErrorLog] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = time.sleep,
    ):
        self.session = session
        self.templates = templates if templates is not None else LocatorTemplates()
        self.plugins = plugins if plugins is not None else PluginChain([LoggingPlugin()])
        self.soft_errors = soft_errors if soft_errors is not None else SoftErrorLog()
        self.settings = settings or default_settings
        self.clock = clock
        self.sleep = sleep
        self._windows: Optional[WindowManager] = None
        self._checks = Checks(self.plugins, self.soft_errors, self.settings)

    @property
    def windows(self) -> WindowManager:
        """Window manager for the session, created on first use."""
        if self._windows is None:
            self._windows = WindowManager(self.session, self.settings, sleep=self.sleep)
        return self._windows

    def with_templates(self, templates: LocatorTemplates) -> "ActionContext":
        """Context for another page: same session, plugins and soft log, other templates."""
        derived = ActionContext(
            self.session,
            templates=templates,
            plugins=self.plugins,
            soft_errors=self.soft_errors,
            settings=self.settings,
            clock=self.clock,
            sleep=self.sleep,
        )
        derived._windows = self._windows
        return derived

    def register_plugin(self, plugin: ReportingPlugin) -> ReportingPlugin:
        return self.plugins.register(plugin)

    def flush_soft_errors(self) -> None:
        """Raise SoftAssertionError if any soft failure was recorded; always empties the log."""
        self.soft_errors.raise_if_any()

    # Action factories

    def appearance(self) -> Appearance:
        return Appearance(self)

    def attribute(self) -> GetAttribute:
        return GetAttribute(self)

    def click(self) -> Click:
        return Click(self)

    def disappearance(self) -> Disappearance:
        return Disappearance(self)

    def find_element(self) -> FindElement:
        return FindElement(self)

    def text(self) -> GetText:
        return GetText(self)

    def input(self) -> Input:
        return Input(self)

    def mouse_over(self) -> MouseOver:
        return MouseOver(self)

    def select(self) -> Select:
        return Select(self)

    def send_keys(self) -> SendKey:
        return SendKey(self)

    def check(self) -> CheckBuilder:
        return self._checks.builder()
