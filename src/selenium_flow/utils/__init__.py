"""Shared utilities for selenium-flow."""

from .error_mapper import map_error, classify_exception, ErrorCode, ErrorKind
from .dom_helpers import get_dom_content
from .keys import resolve_keys
from .scripts import execute_script

__all__ = [
    "map_error",
    "classify_exception",
    "ErrorCode",
    "ErrorKind",
    "get_dom_content",
    "resolve_keys",
    "execute_script",
]
