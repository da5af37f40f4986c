"""Main FastMCP server with lifespan management."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .config import Settings, settings
from .core.driver_factory import DriverFactory
from .core.locators import LocatorTemplates
from .core.session_manager import SessionManager, SessionSweeper
from .tools import create_tool_router, import_all_tools

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Lifespan context holding all services shared across tools."""

    session_manager: SessionManager
    settings: Settings


def load_templates(path: str | None) -> LocatorTemplates:
    """Locator templates preloaded into every session (empty without a file)."""
    if not path:
        return LocatorTemplates()
    return LocatorTemplates.from_file(path)


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """
    Initialize services on startup, cleanup on shutdown.

    This lifespan function:
    1. Loads locator templates and creates the DriverFactory and SessionManager
    2. Starts the background session sweeper
    3. Yields the context for tools to access
    4. On shutdown, stops sweeper and closes all sessions
    """
    logger.info(f"Starting selenium-flow server (grid: {settings.grid_url or 'local browser'})")

    driver_factory = DriverFactory(
        page_load_timeout=settings.page_load_timeout_seconds,
        script_timeout=settings.script_timeout_seconds,
        implicit_wait=settings.implicit_wait_seconds,
    )

    session_manager = SessionManager(
        driver_factory=driver_factory,
        settings=settings,
        templates=load_templates(settings.locator_templates_file),
        max_sessions=settings.max_concurrent_sessions,
        max_lifetime_seconds=settings.session_max_lifetime_seconds,
        max_idle_seconds=settings.session_max_idle_seconds,
    )

    sweeper = SessionSweeper(
        session_manager=session_manager,
        interval_seconds=settings.sweep_interval_seconds,
    )
    await sweeper.start()

    try:
        yield AppContext(
            session_manager=session_manager,
            settings=settings,
        )
    finally:
        logger.info("Shutting down selenium-flow server...")
        await sweeper.stop()
        closed = await session_manager.close_all()
        logger.info(f"Shutdown complete ({closed} sessions closed)")


def create_server() -> FastMCP:
    """Create and configure the main MCP server (without tools - they're added async)."""
    return FastMCP(
        name="selenium-flow",
        instructions=(
            "Browser automation with automatic retries. "
            "Use create_session to start a browser, register_templates to name "
            "xpath locators, then act on elements with click, input_text, "
            "select_option and friends; every action retries until its timeout. "
            "Soft failures are collected until flush_soft_errors. "
            "Always close sessions when done with close_session."
        ),
        lifespan=app_lifespan,
    )


async def setup_server(mcp: FastMCP) -> None:
    """Import all tool routers into the server (async)."""
    tool_router = create_tool_router()
    await import_all_tools(tool_router)
    await mcp.import_server(tool_router)


# Create the global server instance
mcp = create_server()


# Health check endpoint for Docker/Kubernetes health checks
@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> Response:
    """Health check endpoint for container orchestration."""
    return JSONResponse({"status": "ok"})


def run_server() -> None:
    """Run the MCP server with HTTP transport."""
    asyncio.run(setup_server(mcp))

    mcp.run(
        transport="http",
        host=settings.host,
        port=settings.port,
    )
