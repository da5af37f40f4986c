"""Script execution bridge."""

import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


def execute_script(driver, source: str, *args: Any) -> Optional[Any]:
    """
    Run JavaScript in the current window.

    Args:
        driver: Selenium WebDriver instance
        source: Script body; arguments are available as ``arguments[i]``
        *args: Script arguments (elements are passed by reference)

    Returns:
        The script's return value, or None when it returns nothing
    """
    return driver.execute_script(source, *args)


def execute_script_file(driver, path: str | Path, *args: Any) -> Optional[Any]:
    """Run a JavaScript file in the current window."""
    source = Path(path).read_text(encoding="utf-8")
    logger.debug(f"Executing script file {path}")
    return execute_script(driver, source, *args)
