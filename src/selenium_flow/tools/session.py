"""Browser session lifecycle, navigation and locator template tools."""

from typing import Annotated, Optional, Literal
from pydantic import Field
from fastmcp import FastMCP, Context
from fastmcp.exceptions import ToolError

from ..core.exceptions import SessionNotFoundError
from ..utils.error_mapper import map_error, create_error_response

session_router = FastMCP(
    name="SessionTools",
    instructions="Browser session lifecycle, navigation and locator templates",
)


def get_context(ctx: Context):
    """Helper to retrieve app context from lifespan."""
    return ctx.request_context.lifespan_context


def get_session(ctx: Context, session_id: str):
    """Get session from manager, raising SessionNotFoundError if unknown."""
    app_ctx = get_context(ctx)
    return app_ctx.session_manager.get_session(session_id)


def _page_state(driver) -> dict:
    return {
        "url": driver.current_url,
        "title": driver.title,
        "ready_state": driver.execute_script("return document.readyState"),
    }


@session_router.tool(
    description="Create a new browser session (Selenium Grid or local browser)",
    tags={"session", "lifecycle"},
)
async def create_session(
    ctx: Context,
    browser: Annotated[
        Literal["chrome", "firefox", "edge"],
        Field(description="Browser type to launch"),
    ] = "chrome",
    headless: Annotated[
        bool,
        Field(description="Run browser in headless mode (no visible window)"),
    ] = True,
    viewport_width: Annotated[
        Optional[int],
        Field(description="Browser viewport width in pixels"),
    ] = None,
    viewport_height: Annotated[
        Optional[int],
        Field(description="Browser viewport height in pixels"),
    ] = None,
    extra_capabilities: Annotated[
        Optional[dict],
        Field(description="Additional browser capabilities"),
    ] = None,
) -> dict:
    """
    Create a new browser session.

    Returns a session_id that must be used in all subsequent tool calls.
    The session comes with the server's preloaded locator templates and
    is closed automatically after the configured idle or lifetime limit.

    Args:
        browser: Browser type (chrome, firefox, or edge)
        headless: Whether to run in headless mode
        viewport_width: Optional viewport width
        viewport_height: Optional viewport height
        extra_capabilities: Additional WebDriver capabilities

    Returns:
        Session ID and browser info for use in subsequent calls
    """
    app_ctx = get_context(ctx)

    try:
        session = await app_ctx.session_manager.create_session(
            browser=browser,
            headless=headless,
            viewport_width=viewport_width,
            viewport_height=viewport_height,
            extra_capabilities=extra_capabilities,
        )

        await ctx.info(f"Created {browser} session: {session.session_id}")

        capabilities = session.browser_session.capabilities
        return {
            "success": True,
            "session_id": session.session_id,
            "browser": session.browser,
            "headless": headless,
            "created_at": session.created_at,
            "templates": session.context.templates.names,
            "capabilities": {
                "browserName": capabilities.get("browserName"),
                "browserVersion": capabilities.get("browserVersion"),
                "platformName": capabilities.get("platformName"),
            },
        }

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))


@session_router.tool(
    description="Close a browser session and release all resources",
    tags={"session", "lifecycle"},
)
async def close_session(
    ctx: Context,
    session_id: Annotated[
        str,
        Field(description="Session ID to close"),
    ],
) -> dict:
    """
    Close a browser session and release its resources.

    Soft errors that were never flushed are dropped with a warning.

    Args:
        session_id: The session ID to close

    Returns:
        Confirmation that the session was closed
    """
    app_ctx = get_context(ctx)

    try:
        closed = await app_ctx.session_manager.close_session(session_id)

        if not closed:
            raise SessionNotFoundError(session_id)

        await ctx.info(f"Closed session: {session_id}")

        return {
            "success": True,
            "closed": True,
            "session_id": session_id,
            "message": "Session closed successfully",
        }

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))


@session_router.tool(
    description="Get information about a browser session and its current page",
    tags={"session", "info"},
)
async def get_session_info(
    ctx: Context,
    session_id: Annotated[
        str,
        Field(description="Session ID to get info for"),
    ],
    include_grid_capabilities: Annotated[
        bool,
        Field(description="Include Selenium Grid specific capabilities (CDP, VNC URLs)"),
    ] = False,
    include_full_capabilities: Annotated[
        bool,
        Field(description="Include all browser capabilities (can be verbose)"),
    ] = False,
) -> dict:
    """
    Get detailed information about a browser session.

    Args:
        session_id: The session ID to query
        include_grid_capabilities: Include se: prefixed capabilities
        include_full_capabilities: Include complete capabilities dict

    Returns:
        Session metadata, current page, windows and soft error count
    """
    try:
        session = get_session(ctx, session_id)
        driver = session.browser_session.driver

        def read_page():
            windows = session.context.windows
            return driver.current_url, driver.title, windows.active_window, windows.windows

        current_url, current_title, active_window, windows = await session.run(read_page)

        response = {
            "success": True,
            **session.to_dict(),
            "current_url": current_url,
            "current_title": current_title,
            "active_window": active_window,
            "windows": sorted(windows),
            "templates": session.context.templates.names,
        }

        if include_grid_capabilities:
            response["grid_capabilities"] = session.get_grid_capabilities()

        if include_full_capabilities:
            response["full_capabilities"] = session.browser_session.capabilities

        return response

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))


@session_router.tool(
    description="Navigate to a URL",
    tags={"session", "navigation"},
)
async def navigate(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    url: Annotated[str, Field(description="URL to navigate to")],
) -> dict:
    """
    Navigate the active window to the specified URL.

    Args:
        session_id: Active session ID from create_session
        url: Full URL to navigate to (e.g., "https://example.com")

    Returns:
        Final URL (after redirects), page title, and ready state
    """
    try:
        session = get_session(ctx, session_id)
        driver = session.browser_session.driver

        def go():
            driver.get(url)
            return _page_state(driver)

        state = await session.run(go)

        await ctx.info(f"Navigated to {state['url']}")

        return {
            "success": True,
            "session_id": session_id,
            **state,
        }

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))


@session_router.tool(
    description="Register named xpath locator templates for a session",
    tags={"session", "locators"},
)
async def register_templates(
    ctx: Context,
    session_id: Annotated[str, Field(description="Active session ID")],
    templates: Annotated[
        dict[str, str],
        Field(
            description=(
                "Template name to xpath with %s placeholders, "
                "e.g. {\"button\": \"//button[text()='%s']\"}"
            )
        ),
    ],
) -> dict:
    """
    Add or replace locator templates used by the session's actions.

    Args:
        session_id: Active session ID
        templates: Mapping of template names to xpath templates

    Returns:
        All template names now registered for the session
    """
    try:
        session = get_session(ctx, session_id)
        session.context.templates.update(templates)

        return {
            "success": True,
            "session_id": session_id,
            "registered": sorted(templates),
            "templates": session.context.templates.names,
        }

    except Exception as e:
        error_code, message = map_error(e)
        error_response = create_error_response(error_code, message)
        raise ToolError(str(error_response.to_dict()))
