"""Named window tools."""

from typing import Annotated, Optional
from pydantic import Field
from fastmcp import FastMCP, Context
from fastmcp.exceptions import ToolError

from ..utils.error_mapper import map_error, create_error_response

windows_router = FastMCP(
    name="WindowTools",
    instructions="Open, switch and close browser windows by name",
)


def get_context(ctx: Context):
    """Helper to retrieve app context from lifespan."""
    return ctx.request_context.lifespan_context


def get_session(ctx: Context, session_id: str):
    """Get session from manager."""
    app_ctx = get_context(ctx)
    return app_ctx.session_manager.get_session(session_id)


def _window_state(windows) -> dict:
    return {
        "active_window": windows.active_window,
        "windows": sorted(windows.windows),
    }


@windows_router.tool(
    description="Open a new window under a name, optionally loading a URL",
    tags={"window"},
)
async def open_window(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    name: Annotated[str, Field(description="Name to register the window under")],
    url: Annotated[Optional[str], Field(description="URL to open in the new window")] = None,
) -> dict:
    """
    Open a window and make it active.

    Args:
        session_id: Active session ID
        name: Window name for later switch/close calls
        url: Optional URL to load

    Returns:
        Active window and all registered window names
    """
    try:
        session = get_session(ctx, session_id)

        def open_():
            manager = session.context.windows
            if url:
                manager.open_link(name, url)
            else:
                manager.open(name)
            return _window_state(manager)

        state = await session.run(open_)
        return {"success": True, "session_id": session_id, **state}

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))


@windows_router.tool(
    description="Switch to a window by name; an unknown name binds the next newly opened window",
    tags={"window"},
)
async def switch_window(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    name: Annotated[str, Field(description="Window name")],
) -> dict:
    """
    Switch to a registered window, or wait for a window the page opened
    (e.g. via target=_blank) and register it under ``name``.

    Returns:
        Active window and all registered window names
    """
    try:
        session = get_session(ctx, session_id)

        def switch():
            manager = session.context.windows
            manager.switch_to(name)
            return _window_state(manager)

        state = await session.run(switch)
        return {"success": True, "session_id": session_id, **state}

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))


@windows_router.tool(
    description="Close the active window and switch to another one",
    tags={"window"},
)
async def close_window(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    switch_to: Annotated[
        Optional[str],
        Field(description="Window to activate afterwards (any other window if omitted)"),
    ] = None,
    closed_by_page: Annotated[
        bool,
        Field(description="The page closes the window itself; only wait and switch"),
    ] = False,
) -> dict:
    """
    Close the active window. Closing the last window ends the browser
    session; the managed session is then removed by the sweeper.

    Returns:
        Active window and remaining window names
    """
    try:
        session = get_session(ctx, session_id)

        def close():
            manager = session.context.windows
            if closed_by_page:
                manager.auto_close_and_switch(switch_to or _other_window(manager))
            elif switch_to:
                manager.close_and_switch(switch_to)
            else:
                manager.close()
            return _window_state(manager)

        state = await session.run(close)
        return {
            "success": True,
            "session_id": session_id,
            "browser_open": session.browser_session.is_open,
            **state,
        }

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))


def _other_window(manager) -> str:
    for window_name in manager.windows:
        if window_name != manager.active_window:
            return window_name
    return manager.active_window


@windows_router.tool(
    description="List registered windows",
    tags={"window"},
)
async def list_windows(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
) -> dict:
    """
    List the window names and handles known to the session.

    Returns:
        Active window and the name to handle table
    """
    try:
        session = get_session(ctx, session_id)

        def read():
            manager = session.context.windows
            return {"active_window": manager.active_window, "windows": manager.windows}

        state = await session.run(read)
        return {"success": True, "session_id": session_id, **state}

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))
