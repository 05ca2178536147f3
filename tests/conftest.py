# =============================================================================
# tests/conftest.py
# Pytest Configuration and Fixtures
# =============================================================================

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Tuple
from unittest.mock import MagicMock


# =============================================================================
# TIME FIXTURES
# =============================================================================

class RecordingSleeper:
    """Stands in for time.sleep; remembers every requested delay."""

    def __init__(self):
        self.delays: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class RecordingScheduler:
    """Stands in for a Timer; callbacks run only when the test says so."""

    def __init__(self):
        self.scheduled: List[Tuple[float, Callable[[], None]]] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> None:
        self.scheduled.append((delay, callback))

    def run_all(self) -> None:
        pending, self.scheduled = self.scheduled, []
        for _, callback in pending:
            callback()


@pytest.fixture
def sleeper():
    return RecordingSleeper()


@pytest.fixture
def scheduler():
    return RecordingScheduler()


@pytest.fixture
def fixed_clock():
    """Clock frozen at one instant; the store must still order its stamps."""
    instant = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    return lambda: instant


@pytest.fixture
def advancing_clock():
    """Clock that moves forward one second per call."""
    state = {"now": datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)}

    def _clock():
        state["now"] += timedelta(seconds=1)
        return state["now"]

    return _clock


# =============================================================================
# CORE FIXTURES
# =============================================================================

@pytest.fixture
def memory_backend():
    from copilot_core.data import MemoryBackend
    return MemoryBackend()


@pytest.fixture
def reload_calls():
    return []


@pytest.fixture
def connection_manager(memory_backend, sleeper, scheduler, reload_calls):
    from copilot_core.connection import ConnectionManager
    return ConnectionManager(
        memory_backend,
        sleep=sleeper,
        schedule=scheduler,
        reload=lambda: reload_calls.append(True),
    )


@pytest.fixture
def document_store(memory_backend, connection_manager):
    from copilot_core.data import DocumentStore
    return DocumentStore(memory_backend, connection_manager=connection_manager)


@pytest.fixture
def memory_settings():
    from copilot_core.config import Settings
    return Settings(backend="memory")


@pytest.fixture
def supabase_settings():
    from copilot_core.config import Settings
    return Settings(
        supabase_url="https://abcd1234.supabase.co",
        supabase_key="anon-test-key",
    )


@pytest.fixture(autouse=True)
def unbound_access_token():
    """Data requests act anonymously unless a test binds a token itself."""
    from copilot_core.data import bind_access_token
    bind_access_token(None)
    yield
    bind_access_token(None)


# =============================================================================
# MOCK FIXTURES
# =============================================================================

@pytest.fixture
def mock_streamlit(monkeypatch):
    """Mock Streamlit for testing"""
    mock_st = MagicMock()
    mock_st.session_state = {}
    mock_st.cache_data = lambda f: f
    mock_st.cache_resource = lambda f: f

    # Modules hold their own reference to streamlit, so patch each one
    import copilot_core.errors.handlers as handlers
    import copilot_core.state.session as session
    monkeypatch.setattr(handlers, "st", mock_st)
    monkeypatch.setattr(session, "st", mock_st)

    yield mock_st


@pytest.fixture
def mock_supabase():
    """Mock Supabase client"""
    mock_client = MagicMock()
    mock_client.table.return_value.select.return_value.execute.return_value.data = []
    mock_client.table.return_value.insert.return_value.execute.return_value = MagicMock()
    return mock_client


class BackendFailure(Exception):
    """Exception shaped like a backend client error: code + message."""

    def __init__(self, message: str, code=None, status=None):
        super().__init__(message)
        self.message = message
        self.code = code
        if status is not None:
            self.status = status


@pytest.fixture
def backend_failure():
    return BackendFailure
