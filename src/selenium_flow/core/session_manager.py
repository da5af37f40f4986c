"""Managed browser sessions for the MCP server, each with its own action context."""

from __future__ import annotations

import asyncio
import functools
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, TypeVar

import anyio

from ..config import Settings, settings as default_settings
from .context import ActionContext
from .driver_factory import DriverFactory
from .exceptions import SessionLimitError, SessionNotFoundError
from .locators import LocatorTemplates
from .plugins import LoggingPlugin, PageCapturePlugin, PluginChain
from .session import BrowserSession

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass
class ManagedSession:
    """
    A browser session owned by the server, with its action context.

    Blocking driver work goes through ``run`` so calls on one session are
    serialized and never block the event loop.
    """

    session_id: str
    context: ActionContext
    browser: str
    created_at: float
    last_activity: float
    capture: Optional[PageCapturePlugin] = None
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @property
    def browser_session(self) -> BrowserSession:
        return self.context.session

    def touch(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = time.time()

    async def run(self, func: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        """Run a blocking call in a worker thread while holding the session lock."""
        async with self._lock:
            self.touch()
            return await anyio.to_thread.run_sync(functools.partial(func, *args, **kwargs))

    def to_dict(self) -> dict:
        """Convert session info to dictionary for API responses."""
        session = self.browser_session
        return {
            "session_id": self.session_id,
            "browser": self.browser,
            "created_at": self.created_at,
            "last_activity": self.last_activity,
            "is_open": session.is_open,
            "template_count": len(self.context.templates),
            "soft_error_count": len(self.context.soft_errors),
            "selenium_session_id": getattr(session.driver, "session_id", None) if session.is_open else None,
        }

    def get_grid_capabilities(self) -> dict:
        """Extract Selenium Grid specific capabilities (se: prefixed)."""
        capabilities = self.browser_session.capabilities
        return {key: value for key, value in capabilities.items() if key.startswith("se:")}


class SessionManager:
    """
    Registry of managed sessions.

    Uses asyncio.Lock for coroutine-safe access to the session registry.
    Each session has its own lock for per-session operations.
    """

    def __init__(
        self,
        driver_factory: DriverFactory,
        settings: Optional[Settings] = None,
        templates: Optional[LocatorTemplates] = None,
        max_sessions: int = 10,
        max_lifetime_seconds: int = 900,
        max_idle_seconds: int = 300,
    ):
        self._driver_factory = driver_factory
        self._settings = settings or default_settings
        self._templates = templates or LocatorTemplates()
        self._max_sessions = max_sessions
        self._max_lifetime_seconds = max_lifetime_seconds
        self._max_idle_seconds = max_idle_seconds
        self._sessions: Dict[str, ManagedSession] = {}
        self._lock = asyncio.Lock()

    async def create_session(
        self,
        browser: str = "chrome",
        headless: bool = True,
        viewport_width: Optional[int] = None,
        viewport_height: Optional[int] = None,
        extra_capabilities: Optional[dict] = None,
    ) -> ManagedSession:
        """
        Start a browser and wrap it in a new action context.

        Every session gets its own copy of the preloaded locator templates,
        a logging plugin and a page capture plugin.

        Raises:
            SessionLimitError: If max sessions reached
            GridConnectionError: If unable to connect to Grid
        """
        async with self._lock:
            if len(self._sessions) >= self._max_sessions:
                raise SessionLimitError(self._max_sessions)

            browser_session = BrowserSession(self._driver_factory)
            viewport = (viewport_width, viewport_height) if viewport_width and viewport_height else None
            await anyio.to_thread.run_sync(
                functools.partial(
                    browser_session.open,
                    hub_url=self._settings.grid_url,
                    browser=browser,
                    headless=headless,
                    capabilities=extra_capabilities,
                    viewport=viewport,
                )
            )

            capture = PageCapturePlugin(browser_session, self._settings)
            context = ActionContext(
                browser_session,
                templates=self._templates.copy(),
                plugins=PluginChain([LoggingPlugin(), capture]),
                settings=self._settings,
            )

            session_id = f"sess_{uuid.uuid4().hex[:16]}"
            now = time.time()
            session = ManagedSession(
                session_id=session_id,
                context=context,
                browser=browser,
                created_at=now,
                last_activity=now,
                capture=capture,
            )

            self._sessions[session_id] = session
            logger.info(f"Created session {session_id} with {browser}")

            return session

    def get_session(self, session_id: str) -> ManagedSession:
        """
        Get a session by ID.

        Raises:
            SessionNotFoundError: If session doesn't exist
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.touch()
        return session

    async def close_session(self, session_id: str) -> bool:
        """
        Close a session and release its browser.

        Returns:
            True if session was closed, False if not found
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False

            async with session._lock:
                dropped = session.context.soft_errors.clear()
                if dropped:
                    logger.warning(f"Session {session_id} closed with {dropped} unflushed soft error(s)")
                await anyio.to_thread.run_sync(session.browser_session.close)

            logger.info(f"Closed session {session_id}")
            return True

    def list_sessions(self, browser: Optional[str] = None) -> list[dict]:
        """List active sessions, optionally filtered by browser type."""
        sessions = list(self._sessions.values())
        if browser:
            sessions = [s for s in sessions if s.browser.lower() == browser.lower()]
        return [s.to_dict() for s in sessions]

    async def get_expired_sessions(self) -> list[str]:
        """
        Find sessions that have exceeded lifetime or idle limits, or whose
        browser was closed (for example by closing its last window).
        """
        now = time.time()
        expired = []

        for session_id, session in self._sessions.items():
            age = now - session.created_at
            idle = now - session.last_activity

            if not session.browser_session.is_open:
                logger.info(f"Session {session_id} has no open browser")
                expired.append(session_id)
            elif age > self._max_lifetime_seconds:
                logger.info(f"Session {session_id} exceeded max lifetime ({age:.0f}s)")
                expired.append(session_id)
            elif idle > self._max_idle_seconds:
                logger.info(f"Session {session_id} exceeded max idle time ({idle:.0f}s)")
                expired.append(session_id)

        return expired

    async def sweep_expired(self) -> int:
        """Close all expired sessions. Returns number of sessions closed."""
        expired = await self.get_expired_sessions()
        count = 0
        for session_id in expired:
            if await self.close_session(session_id):
                count += 1
        return count

    async def close_all(self) -> int:
        """Close all sessions (for shutdown). Returns number of sessions closed."""
        session_ids = list(self._sessions.keys())
        count = 0
        for session_id in session_ids:
            if await self.close_session(session_id):
                count += 1
        logger.info(f"Closed all {count} sessions")
        return count

    @property
    def session_count(self) -> int:
        """Number of active sessions."""
        return len(self._sessions)


class SessionSweeper:
    """
    Background task that periodically cleans up expired sessions.

    Started during server lifespan and cancelled on shutdown.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        interval_seconds: int = 60,
    ):
        self._session_manager = session_manager
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None
        self._shutdown_event = asyncio.Event()

    async def start(self) -> None:
        """Start the sweeper background task."""
        self._shutdown_event.clear()
        self._task = asyncio.create_task(self._sweep_loop())
        logger.info(f"Session sweeper started (interval: {self._interval}s)")

    async def stop(self) -> None:
        """Stop the sweeper gracefully."""
        if self._task:
            self._shutdown_event.set()
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Session sweeper stopped")

    async def _sweep_loop(self) -> None:
        """Sleep for the interval, sweep, repeat until shutdown."""
        while not self._shutdown_event.is_set():
            try:
                await asyncio.wait_for(self._shutdown_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                try:
                    swept = await self._session_manager.sweep_expired()
                    if swept > 0:
                        logger.info(f"Swept {swept} expired session(s)")
                except Exception as e:
                    logger.error(f"Error during session sweep: {e}")
