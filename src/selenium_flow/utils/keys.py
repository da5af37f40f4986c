"""Keyboard key names."""

from selenium.webdriver.common.keys import Keys


# Key name mapping
KEY_MAP = {
    "ENTER": Keys.ENTER,
    "RETURN": Keys.RETURN,
    "TAB": Keys.TAB,
    "ESCAPE": Keys.ESCAPE,
    "ESC": Keys.ESCAPE,
    "BACKSPACE": Keys.BACKSPACE,
    "DELETE": Keys.DELETE,
    "SPACE": Keys.SPACE,
    "UP": Keys.UP,
    "DOWN": Keys.DOWN,
    "LEFT": Keys.LEFT,
    "RIGHT": Keys.RIGHT,
    "HOME": Keys.HOME,
    "END": Keys.END,
    "PAGE_UP": Keys.PAGE_UP,
    "PAGE_DOWN": Keys.PAGE_DOWN,
    "CONTROL": Keys.CONTROL,
    "CTRL": Keys.CONTROL,
    "ALT": Keys.ALT,
    "SHIFT": Keys.SHIFT,
    "META": Keys.META,
    "COMMAND": Keys.COMMAND,
    "F1": Keys.F1,
    "F2": Keys.F2,
    "F3": Keys.F3,
    "F4": Keys.F4,
    "F5": Keys.F5,
    "F6": Keys.F6,
    "F7": Keys.F7,
    "F8": Keys.F8,
    "F9": Keys.F9,
    "F10": Keys.F10,
    "F11": Keys.F11,
    "F12": Keys.F12,
}

_KEY_NAMES = {value: name for name, value in reversed(list(KEY_MAP.items()))}


def resolve_key(key: str) -> str:
    """Map a key name (case-insensitive) to its Selenium code; other text is sent literally."""
    return KEY_MAP.get(key.upper(), key)


def resolve_keys(keys: list[str]) -> list[str]:
    return [resolve_key(key) for key in keys]


def key_name(key: str) -> str:
    """Readable name of a key code, for titles and logs."""
    return _KEY_NAMES.get(key, key)
