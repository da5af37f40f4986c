"""Element action tools backed by the retrying action builders."""

from typing import Annotated, Optional, Literal
from pydantic import Field
from fastmcp import FastMCP, Context
from fastmcp.exceptions import ToolError

from ..actions.base import ActionBuilder, ClickKind
from ..core.exceptions import LocatorError
from ..utils.element_resolver import serialize_element
from ..utils.error_mapper import map_error, create_error_response

actions_router = FastMCP(
    name="ActionTools",
    instructions=(
        "Element actions with automatic retries until the timeout: click, type, "
        "select, keys, hover, waits and reads. Locate elements with a registered "
        "template plus parameters, an xpath, or a css selector."
    ),
)

CLICK_KINDS = {
    "left": ClickKind.LEFT_CLICK,
    "right": ClickKind.RIGHT_CLICK,
    "double": ClickKind.DOUBLE_CLICK,
}

TemplateArg = Annotated[Optional[str], Field(description="Registered locator template name")]
ParametersArg = Annotated[
    Optional[list[str]], Field(description="Values for the template's %s placeholders")
]
XpathArg = Annotated[Optional[str], Field(description="Raw XPath expression")]
CssArg = Annotated[Optional[str], Field(description="Raw CSS selector")]
TimeoutArg = Annotated[
    Optional[int], Field(description="Action timeout in milliseconds (server default if omitted)")
]
SoftArg = Annotated[
    bool,
    Field(description="Record a failure as a soft error instead of failing the call"),
]


def get_context(ctx: Context):
    """Helper to retrieve app context from lifespan."""
    return ctx.request_context.lifespan_context


def get_session(ctx: Context, session_id: str):
    """Get session from manager."""
    app_ctx = get_context(ctx)
    return app_ctx.session_manager.get_session(session_id)


def configure(
    builder: ActionBuilder,
    template: Optional[str] = None,
    parameters: Optional[list[str]] = None,
    xpath: Optional[str] = None,
    css: Optional[str] = None,
    timeout_ms: Optional[int] = None,
    soft: bool = False,
    required: bool = True,
) -> ActionBuilder:
    """
    Apply the common tool arguments to a builder.

    Raises:
        LocatorError: If not exactly one of template / xpath / css is given
    """
    given = [name for name, value in (("template", template), ("xpath", xpath), ("css", css)) if value]
    if len(given) > 1:
        raise LocatorError(f"Use only one of template, xpath or css (got {', '.join(given)})")
    if template:
        builder.template(template, *(parameters or []))
    elif xpath:
        builder.xpath(xpath)
    elif css:
        builder.css(css)
    elif required:
        raise LocatorError("Provide a template, an xpath or a css selector")
    if timeout_ms is not None:
        builder.timeout(timeout_ms)
    if soft:
        builder.soft()
    return builder


def raise_tool_error(e: Exception, session=None):
    """Map an exception to a structured ToolError, with the last page capture if any."""
    error_code, message = map_error(e)
    details = None
    if session is not None:
        details = {"soft_error_count": len(session.context.soft_errors)}
        capture = session.capture.latest() if session.capture else None
        if capture is not None and capture.message in message:
            details["page_capture"] = {
                "captured_at": capture.captured_at.isoformat(),
                "has_screenshot": capture.screenshot_base64 is not None,
                "page_source_truncated": (capture.page_source or {}).get("truncated"),
                "errors": capture.errors,
            }
    error_response = create_error_response(error_code, message, details)
    raise ToolError(str(error_response.to_dict())) from e


def _result(session_id: str, session, **values) -> dict:
    return {
        "success": True,
        "session_id": session_id,
        **values,
        "soft_error_count": len(session.context.soft_errors),
    }


@actions_router.tool(
    description="Click an element (left, right or double click), retrying until it is visible",
    tags={"action", "click"},
)
async def click(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    kind: Annotated[
        Literal["left", "right", "double"],
        Field(description="Click kind"),
    ] = "left",
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Click the first element matching the locator.

    Matches are scrolled into view; the click is retried while the element
    is missing, hidden or temporarily unclickable.

    Args:
        session_id: Active session ID
        template: Template name (with parameters), or use xpath / css
        kind: left, right or double
        timeout_ms: Retry budget
        soft: Record failure as soft error

    Returns:
        Success status
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(session.context.click(), template, parameters, xpath, css, timeout_ms, soft)
        builder.kind(CLICK_KINDS[kind])
        await session.run(builder.perform)
        return _result(session_id, session, action=f"{kind}_click")

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Type text into an input element",
    tags={"action", "input"},
)
async def input_text(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    text: Annotated[str, Field(description="Text to type")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    clear_first: Annotated[bool, Field(description="Clear existing value first")] = True,
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Type text into the first element matching the locator.

    Args:
        session_id: Active session ID
        text: Text to type
        clear_first: Whether to clear the field before typing

    Returns:
        Success status
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(session.context.input(), template, parameters, xpath, css, timeout_ms, soft)
        builder.value(text)
        if clear_first:
            builder.clear()
        await session.run(builder.perform)
        return _result(session_id, session, action="typed", text_length=len(text))

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Select a dropdown option by its visible text",
    tags={"action", "select"},
)
async def select_option(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    value: Annotated[str, Field(description="Visible text of the option")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Select an option in a <select> element.

    A missing option fails immediately; a missing select is retried.

    Args:
        session_id: Active session ID
        value: Visible option text

    Returns:
        Success status
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(session.context.select(), template, parameters, xpath, css, timeout_ms, soft)
        builder.value(value)
        await session.run(builder.perform)
        return _result(session_id, session, action="selected", value=value)

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Send keys (ENTER, TAB, CTRL, F1..F12 or plain text) to an element or the focused element",
    tags={"action", "keyboard"},
)
async def send_keys(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    keys: Annotated[
        list[str],
        Field(description="Key names (ENTER, TAB, ESCAPE, CTRL...) or text, sent in order"),
    ],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Send keys to the located element, or once to the focused element when
    no locator is given.

    Args:
        session_id: Active session ID
        keys: Key names or text

    Returns:
        Success status
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(
            session.context.send_keys(), template, parameters, xpath, css, timeout_ms, soft,
            required=False,
        )
        builder.keys(*keys)
        await session.run(builder.perform)
        return _result(session_id, session, action="keys_sent", keys=keys)

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Hover over an element (dispatches a mouseover event)",
    tags={"action", "hover"},
)
async def mouse_over(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """Dispatch a mouseover event on the first element matching the locator."""
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(session.context.mouse_over(), template, parameters, xpath, css, timeout_ms, soft)
        await session.run(builder.perform)
        return _result(session_id, session, action="hovered")

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Wait until an element appears (optionally require it)",
    tags={"action", "wait"},
)
async def wait_for_appearance(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    visible: Annotated[bool, Field(description="Require the element to be displayed")] = True,
    require: Annotated[bool, Field(description="Fail when the element never appears")] = False,
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Wait for the locator to resolve to an element.

    Args:
        session_id: Active session ID
        visible: Whether the element must be displayed
        require: Fail on timeout instead of returning appeared=False

    Returns:
        Whether the element appeared, and the element when it did
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(session.context.appearance(), template, parameters, xpath, css, timeout_ms, soft)
        builder.visible(visible).require(require)

        def wait():
            element = builder.perform()
            return serialize_element(element) if element is not None else None

        element = await session.run(wait)
        return _result(session_id, session, appeared=element is not None, element=element)

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Wait until an element disappears (optionally require it)",
    tags={"action", "wait"},
)
async def wait_for_disappearance(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    visible: Annotated[
        bool, Field(description="Hidden elements count as gone (False: must leave the DOM)")
    ] = True,
    require: Annotated[bool, Field(description="Fail when the element never disappears")] = False,
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Wait until no element matching the locator is displayed.

    Returns:
        Whether the element disappeared
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(
            session.context.disappearance(), template, parameters, xpath, css, timeout_ms, soft
        )
        builder.visible(visible).require(require)
        disappeared = await session.run(builder.perform)
        return _result(session_id, session, disappeared=disappeared)

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Find elements and return their properties",
    tags={"action", "query"},
)
async def find_elements(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    mode: Annotated[
        Literal["first", "last", "all"],
        Field(description="Which matches to return"),
    ] = "all",
    required: Annotated[bool, Field(description="Fail when nothing is found")] = False,
    visible: Annotated[bool, Field(description="Only accept displayed elements")] = True,
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Find elements matching the locator.

    Args:
        session_id: Active session ID
        mode: first, last or all matches
        required: Fail on timeout instead of returning no elements

    Returns:
        Serialized elements
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(session.context.find_element(), template, parameters, xpath, css, timeout_ms, soft)
        builder.visible(visible)
        finder = getattr(builder, f"{'get' if required else 'find'}_{mode}")

        def find():
            found = finder()
            if found is None:
                return []
            elements = found if isinstance(found, list) else [found]
            return [serialize_element(element) for element in elements]

        elements = await session.run(find)
        return _result(session_id, session, elements=elements, count=len(elements))

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Read the text of elements (input values and selected options included)",
    tags={"action", "query"},
)
async def get_text(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    mode: Annotated[
        Literal["first", "last", "all"],
        Field(description="Which matches to read"),
    ] = "first",
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Read element text. Inputs and textareas return their value, selects the
    selected option. Fails when nothing matches within the timeout.

    Returns:
        Text of the first or last match, or a list of all texts
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(session.context.text(), template, parameters, xpath, css, timeout_ms, soft)
        text = await session.run(getattr(builder, f"get_{mode}"))
        return _result(session_id, session, text=text)

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Read an attribute of an element",
    tags={"action", "query"},
)
async def get_attribute(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    attribute: Annotated[str, Field(description="Attribute name, e.g. href or value")],
    template: TemplateArg = None,
    parameters: ParametersArg = None,
    xpath: XpathArg = None,
    css: CssArg = None,
    timeout_ms: TimeoutArg = None,
    soft: SoftArg = False,
) -> dict:
    """
    Read one attribute of the first element matching the locator.

    Returns:
        Attribute value (empty string when absent)
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        builder = configure(session.context.attribute(), template, parameters, xpath, css, timeout_ms, soft)
        builder.attribute(attribute)
        value = await session.run(builder.get)
        return _result(session_id, session, attribute=attribute, value=value)

    except Exception as e:
        raise_tool_error(e, session)


@actions_router.tool(
    description="Return and clear the soft errors recorded in a session",
    tags={"action", "errors"},
)
async def flush_soft_errors(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
) -> dict:
    """
    Drain the session's soft error log.

    Returns:
        Recorded soft errors in call order; the log is empty afterwards
    """
    session = None
    try:
        session = get_session(ctx, session_id)
        errors = session.context.soft_errors.flush()
        return {
            "success": True,
            "session_id": session_id,
            "errors": [
                {"message": error.message, "description": error.description} for error in errors
            ],
            "count": len(errors),
        }

    except Exception as e:
        raise_tool_error(e, session)
