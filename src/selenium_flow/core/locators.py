"""Element locators resolved from named templates or raw expressions."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .exceptions import LocatorError, TemplateNotFoundError
from ..utils.element_resolver import get_by_strategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Locator:
    """
    Identifies DOM elements either by a named template with parameters or by
    a raw expression. Exactly one of ``template`` / ``expression`` is set.
    """

    template: Optional[str] = None
    parameters: tuple[str, ...] = ()
    expression: Optional[str] = None
    strategy: str = "xpath"

    def __post_init__(self):
        if (self.template is None) == (self.expression is None):
            raise LocatorError("Locator needs exactly one of a template name or a raw expression")
        if self.expression is not None and self.parameters:
            raise LocatorError("Parameters only apply to template locators")

    @classmethod
    def from_template(cls, name: str, *parameters: str) -> "Locator":
        return cls(template=name, parameters=tuple(str(p) for p in parameters))

    @classmethod
    def from_expression(cls, expression: str, strategy: str = "xpath") -> "Locator":
        return cls(expression=expression, strategy=strategy)

    def __str__(self) -> str:
        if self.template is not None:
            return f"template '{self.template}' {list(self.parameters)}"
        return f"{self.strategy}={self.expression}"


class LocatorTemplates:
    """
    Table of named xpath templates.

    Templates use ``%s`` placeholders filled positionally from the locator
    parameters, e.g. ``"button": "//button[text()='%s']"``.
    """

    def __init__(self, templates: Optional[Mapping[str, str]] = None):
        self._templates: dict[str, str] = dict(templates or {})

    @classmethod
    def from_file(cls, path: str | Path) -> "LocatorTemplates":
        """
        Load templates from a JSON file.

        The file is either a flat ``{name: xpath}`` object or a page
        configuration holding such an object under ``"xpath"``.
        """
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        if isinstance(data, dict) and isinstance(data.get("xpath"), dict):
            data = data["xpath"]
        if not isinstance(data, dict):
            raise LocatorError(f"Locator template file must hold an object: {path}")
        logger.info(f"Loaded {len(data)} locator template(s) from {path}")
        return cls({str(k): str(v) for k, v in data.items()})

    def register(self, name: str, xpath: str) -> None:
        self._templates[name] = xpath

    def update(self, templates: Mapping[str, str]) -> None:
        self._templates.update(templates)

    def __contains__(self, name: str) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    @property
    def names(self) -> list[str]:
        return sorted(self._templates)

    def copy(self) -> "LocatorTemplates":
        return LocatorTemplates(self._templates)

    def resolve(self, name: str, parameters: tuple[str, ...] | list[str] = ()) -> str:
        """
        Fill a template with parameters.

        Raises:
            TemplateNotFoundError: If the template is not registered
            LocatorError: If the parameters do not match the placeholders
        """
        if name not in self._templates:
            raise TemplateNotFoundError(name)
        template = self._templates[name]
        if not parameters:
            return template
        try:
            return template % tuple(parameters)
        except (TypeError, ValueError) as e:
            raise LocatorError(
                f"Template '{name}' ({template}) does not accept parameters {list(parameters)}: {e}"
            ) from e

    def build(self, locator: Locator) -> tuple[str, str]:
        """Resolve a locator into a Selenium ``(By, value)`` pair."""
        if locator.template is not None:
            return get_by_strategy("xpath"), self.resolve(locator.template, locator.parameters)
        try:
            by = get_by_strategy(locator.strategy)
        except ValueError as e:
            raise LocatorError(str(e)) from e
        return by, locator.expression
