"""MCP tool definitions organized by category."""

from fastmcp import FastMCP

from .meta import meta_router
from .session import session_router
from .actions import actions_router
from .windows import windows_router


def create_tool_router() -> FastMCP:
    """Create empty router - tools will be imported async in setup."""
    return FastMCP("SeleniumFlowTools")


async def import_all_tools(router: FastMCP) -> None:
    """Import all tool sub-routers into the main router (async)."""
    await router.import_server(meta_router)
    await router.import_server(session_router)
    await router.import_server(actions_router)
    await router.import_server(windows_router)


__all__ = ["create_tool_router", "import_all_tools"]
