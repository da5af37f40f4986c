"""Element lookup helpers shared by actions and tools."""

from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.common.by import By
from selenium.webdriver.support.ui import Select
from selenium.common.exceptions import NoSuchElementException, StaleElementReferenceException

from .scripts import execute_script


# Map strategy names to Selenium By constants
STRATEGY_MAP = {
    "css": By.CSS_SELECTOR,
    "xpath": By.XPATH,
    "id": By.ID,
    "name": By.NAME,
    "class": By.CLASS_NAME,
    "tag": By.TAG_NAME,
    "link_text": By.LINK_TEXT,
    "partial_link_text": By.PARTIAL_LINK_TEXT,
}

SCROLL_INTO_VIEW_SCRIPT = "arguments[0].scrollIntoView(false);"


def get_by_strategy(strategy: str) -> str:
    """
    Convert strategy string to Selenium By constant.

    Args:
        strategy: Locator strategy name (css, xpath, id, name, class, tag, link_text)

    Returns:
        Selenium By constant

    Raises:
        ValueError: If strategy is not supported
    """
    strategy = strategy.lower()
    if strategy not in STRATEGY_MAP:
        raise ValueError(
            f"Unsupported locator strategy: {strategy}. "
            f"Supported: {list(STRATEGY_MAP.keys())}"
        )
    return STRATEGY_MAP[strategy]


def scroll_into_view(driver, element: WebElement) -> None:
    """Scroll an element into the viewport through the script bridge."""
    execute_script(driver, SCROLL_INTO_VIEW_SCRIPT, element)


def is_element_displayed(element: WebElement) -> bool:
    """Visibility check treating detached elements as not displayed."""
    try:
        return element.is_displayed()
    except StaleElementReferenceException:
        return False


def read_element_text(element: WebElement) -> str:
    """
    Read the user-visible text of an element.

    - input/textarea: current value
    - select: text of the selected option (value for multi-selects)
    - anything else: innerText
    """
    tag = element.tag_name.lower()
    if tag in ("input", "textarea"):
        text = element.get_attribute("value")
    elif tag == "select":
        select = Select(element)
        if select.is_multiple:
            text = element.get_attribute("value")
        else:
            try:
                text = select.first_selected_option.get_attribute("innerText")
            except NoSuchElementException:
                text = ""
    else:
        text = element.get_attribute("innerText")
    return text or ""


def serialize_element(element: WebElement, include_text: bool = True) -> dict:
    """
    Serialize a WebElement to a dictionary for API responses.

    Args:
        element: WebElement to serialize
        include_text: Whether to include text content

    Returns:
        Dictionary with element properties
    """
    result = {
        "tag_name": element.tag_name,
        "is_displayed": element.is_displayed(),
        "is_enabled": element.is_enabled(),
        "location": element.location,
        "size": element.size,
        "attributes": {
            "id": element.get_attribute("id"),
            "class": element.get_attribute("class"),
            "name": element.get_attribute("name"),
            "type": element.get_attribute("type"),
            "value": element.get_attribute("value"),
            "href": element.get_attribute("href"),
        },
    }

    if include_text:
        text = element.text
        result["text"] = text[:500] if text else ""

    # Clean up None values in attributes
    result["attributes"] = {k: v for k, v in result["attributes"].items() if v}

    return result
