"""Unit tests for SessionManager."""

import pytest
import time

from selenium_flow.core.exceptions import SessionLimitError, SessionNotFoundError
from selenium_flow.core.records import ErrorRecord
from selenium_flow.core.session_manager import SessionManager


class TestManagedSession:
    """Tests for ManagedSession."""

    @pytest.mark.asyncio
    async def test_touch_updates_last_activity(self, session_manager):
        """Should update last_activity timestamp on touch."""
        session = await session_manager.create_session()
        original = session.last_activity
        time.sleep(0.01)

        session.touch()

        assert session.last_activity > original

    @pytest.mark.asyncio
    async def test_to_dict(self, session_manager):
        """Should convert session to dictionary."""
        session = await session_manager.create_session()
        session.context.soft_errors.append(ErrorRecord("late"))

        result = session.to_dict()

        assert result["session_id"] == session.session_id
        assert result["browser"] == "chrome"
        assert result["is_open"] is True
        assert result["template_count"] == 4
        assert result["soft_error_count"] == 1
        assert result["selenium_session_id"] == "mock-session-id"

    @pytest.mark.asyncio
    async def test_run_executes_blocking_call(self, session_manager, mock_webdriver):
        session = await session_manager.create_session()

        url = await session.run(lambda: session.browser_session.driver.current_url)

        assert url == "https://example.com"

    @pytest.mark.asyncio
    async def test_get_grid_capabilities(self, session_manager, mock_webdriver):
        """Should extract se: prefixed capabilities."""
        mock_webdriver.capabilities = {
            "browserName": "chrome",
            "se:cdp": "ws://node:4444/session/abc/cdp",
            "se:vncEnabled": True,
        }
        session = await session_manager.create_session()

        grid_caps = session.get_grid_capabilities()

        assert grid_caps == {"se:cdp": "ws://node:4444/session/abc/cdp", "se:vncEnabled": True}


class TestSessionManager:
    """Tests for SessionManager."""

    @pytest.mark.asyncio
    async def test_create_session_success(self, session_manager, mock_driver_factory):
        """Should create session with its own action context."""
        session = await session_manager.create_session(browser="chrome")

        assert session.session_id.startswith("sess_")
        assert session.browser == "chrome"
        assert session_manager.session_count == 1
        assert session.capture is not None
        assert len(session.context.plugins) == 2
        mock_driver_factory.create.assert_called_once()

    @pytest.mark.asyncio
    async def test_sessions_get_template_copies(self, session_manager, templates):
        first = await session_manager.create_session()
        second = await session_manager.create_session()

        first.context.templates.register("link", "//a[text()='%s']")

        assert "link" in first.context.templates
        assert "link" not in second.context.templates
        assert "link" not in templates

    @pytest.mark.asyncio
    async def test_create_session_limit_reached(self, mock_driver_factory):
        """Should raise SessionLimitError when max reached."""
        manager = SessionManager(mock_driver_factory, max_sessions=1)

        await manager.create_session()

        with pytest.raises(SessionLimitError) as exc:
            await manager.create_session()

        assert "1" in str(exc.value)

    @pytest.mark.asyncio
    async def test_get_session_success(self, session_manager):
        """Should retrieve existing session."""
        session = await session_manager.create_session()

        assert session_manager.get_session(session.session_id) is session

    def test_get_session_not_found(self, session_manager):
        """Should raise SessionNotFoundError for unknown ID."""
        with pytest.raises(SessionNotFoundError) as exc:
            session_manager.get_session("unknown-id")

        assert "unknown-id" in str(exc.value)

    @pytest.mark.asyncio
    async def test_close_session_success(self, session_manager, mock_webdriver):
        """Should close session and remove from registry."""
        session = await session_manager.create_session()

        closed = await session_manager.close_session(session.session_id)

        assert closed is True
        assert session_manager.session_count == 0
        mock_webdriver.quit.assert_called_once()

    @pytest.mark.asyncio
    async def test_close_session_drops_soft_errors(self, session_manager):
        session = await session_manager.create_session()
        session.context.soft_errors.append(ErrorRecord("never flushed"))

        await session_manager.close_session(session.session_id)

        assert len(session.context.soft_errors) == 0

    @pytest.mark.asyncio
    async def test_close_session_not_found(self, session_manager):
        """Should return False for unknown session."""
        closed = await session_manager.close_session("unknown-id")

        assert closed is False

    def test_list_sessions_empty(self, session_manager):
        """Should return empty list when no sessions."""
        assert session_manager.list_sessions() == []

    @pytest.mark.asyncio
    async def test_list_sessions_with_filter(self, session_manager):
        """Should filter sessions by browser type."""
        await session_manager.create_session(browser="chrome")

        assert len(session_manager.list_sessions(browser="chrome")) == 1
        assert len(session_manager.list_sessions(browser="firefox")) == 0

    @pytest.mark.asyncio
    async def test_close_all_sessions(self, session_manager):
        """Should close all sessions."""
        await session_manager.create_session()
        await session_manager.create_session()
        assert session_manager.session_count == 2

        closed = await session_manager.close_all()

        assert closed == 2
        assert session_manager.session_count == 0


class TestExpiry:
    """Tests for expired session detection."""

    @pytest.mark.asyncio
    async def test_idle_session_expires(self, session_manager):
        session = await session_manager.create_session()
        session.last_activity -= 301

        assert await session_manager.get_expired_sessions() == [session.session_id]

    @pytest.mark.asyncio
    async def test_old_session_expires(self, session_manager):
        session = await session_manager.create_session()
        session.created_at -= 901

        assert await session_manager.get_expired_sessions() == [session.session_id]

    @pytest.mark.asyncio
    async def test_session_without_browser_expires(self, session_manager):
        """Closing the last window ends the browser; the session is swept."""
        session = await session_manager.create_session()
        session.context.windows.close()

        swept = await session_manager.sweep_expired()

        assert swept == 1
        assert session_manager.session_count == 0

    @pytest.mark.asyncio
    async def test_fresh_session_kept(self, session_manager):
        await session_manager.create_session()

        assert await session_manager.sweep_expired() == 0
