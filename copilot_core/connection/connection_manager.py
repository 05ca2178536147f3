# =============================================================================
# copilot_core/connection/connection_manager.py
# Connection Status Management, Retry and Session Recovery
# =============================================================================
"""
ConnectionManager - single process-wide belief about connectivity to the
document backend, plus recovery from transient and session failures.

Features:
- Online/offline toggles of the backend transport
- Exponential-backoff retries bounded by a RetryPolicy
- Session recovery (disable -> pause -> enable) with a last-resort reload
- Coalescing: concurrent retry or recovery calls join the sequence already
  in flight instead of starting another one
- Event callbacks for status changes

The manager is constructed once at startup (see copilot_core.bootstrap) and
passed to its consumers; there is no module-level instance.
"""

from __future__ import annotations
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional, Union

from copilot_core.data.backend import DocumentBackend
from copilot_core.errors import BackendErrorInfo, ErrorKind, recovery_signature
from copilot_core.logging import get_logger
from .policies import (
    RetryPolicy,
    Scheduler,
    SessionRecoveryPolicy,
    Sleeper,
    schedule_with_timer,
)

logger = get_logger(__name__)


class ConnectionStatus(Enum):
    """Connection status states."""
    ONLINE = "online"           # Transport enabled and last probe succeeded
    OFFLINE = "offline"         # Transport disabled or last probe failed
    RETRYING = "retrying"       # Backoff retry in progress
    RECOVERING = "recovering"   # Session recovery cycle in progress
    FAILED = "failed"           # Retries exhausted; caller must surface it


@dataclass
class ConnectionState:
    """Current connection state with metadata."""
    status: ConnectionStatus = ConnectionStatus.ONLINE
    is_online: bool = True
    retry_attempts: int = 0
    session_recovery_attempts: int = 0
    last_online: Optional[datetime] = None
    last_error: Optional[str] = None


class _Flight:
    def __init__(self):
        self.done = threading.Event()
        self.result = False


class SingleFlight:
    """
    Runs at most one sequence at a time; callers arriving while one is in
    flight wait for it and receive its result.
    """

    def __init__(self, name: str):
        self.name = name
        self._lock = threading.Lock()
        self._joined = threading.Condition(self._lock)
        self._current: Optional[_Flight] = None
        self._waiters = 0

    @property
    def in_flight(self) -> bool:
        return self._current is not None

    @property
    def waiters(self) -> int:
        """Callers currently waiting on the sequence in flight."""
        return self._waiters

    def wait_for_waiters(self, count: int, timeout: Optional[float] = None) -> bool:
        """Block until at least ``count`` callers have joined the current sequence."""
        with self._joined:
            return self._joined.wait_for(lambda: self._waiters >= count, timeout)

    def run(self, func: Callable[[], bool]) -> bool:
        with self._lock:
            flight = self._current
            leader = flight is None
            if leader:
                flight = self._current = _Flight()
            else:
                self._waiters += 1
                self._joined.notify_all()

        if not leader:
            logger.debug(f"Joining in-flight {self.name}")
            flight.done.wait()
            with self._lock:
                self._waiters -= 1
            return flight.result

        try:
            flight.result = func()
            return flight.result
        finally:
            with self._lock:
                self._current = None
            flight.done.set()


class ConnectionManager:
    """
    Mediates online/offline state and recovery for a DocumentBackend.

    Usage:
        manager = ConnectionManager(backend, retry_policy=RetryPolicy(max_attempts=3))
        if not manager.retry_connection():
            # retries exhausted or reconnect failed
            ...
    """

    def __init__(
        self,
        backend: DocumentBackend,
        retry_policy: Optional[RetryPolicy] = None,
        recovery_policy: Optional[SessionRecoveryPolicy] = None,
        sleep: Sleeper = time.sleep,
        schedule: Scheduler = schedule_with_timer,
        reload: Optional[Callable[[], None]] = None,
    ):
        self.backend = backend
        self.retry_policy = retry_policy or RetryPolicy()
        self.recovery_policy = recovery_policy or SessionRecoveryPolicy()
        self._sleep = sleep
        self._schedule = schedule
        self._reload_hook = reload

        self._state = ConnectionState(last_online=datetime.now())
        self._state_lock = threading.Lock()
        self._callbacks: List[Callable[[ConnectionState], None]] = []
        self._retry_flight = SingleFlight("connection retry")
        self._recovery_flight = SingleFlight("session recovery")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.is_online

    @property
    def retry_attempts(self) -> int:
        return self._state.retry_attempts

    @property
    def session_recovery_attempts(self) -> int:
        return self._state.session_recovery_attempts

    @property
    def max_retries(self) -> int:
        return self.retry_policy.max_attempts

    @property
    def max_session_recovery_attempts(self) -> int:
        return self.recovery_policy.max_attempts

    @property
    def retry_flight(self) -> SingleFlight:
        return self._retry_flight

    @property
    def recovery_flight(self) -> SingleFlight:
        return self._recovery_flight

    # =========================================================================
    # TRANSPORT TOGGLES
    # =========================================================================

    def enable_offline_mode(self) -> None:
        """Disable the backend transport. Idempotent."""
        self.backend.disable_network()
        with self._state_lock:
            self._state.is_online = False
        self._set_status(ConnectionStatus.OFFLINE)

    def enable_online_mode(self) -> None:
        """
        Enable the backend transport and reset the retry counter.

        Errors from the backend propagate unchanged.
        """
        try:
            self.backend.enable_network()
        except Exception as e:
            with self._state_lock:
                self._state.last_error = str(e)
            raise

        with self._state_lock:
            self._state.is_online = True
            self._state.retry_attempts = 0
            self._state.last_online = datetime.now()
            self._state.last_error = None
        self._set_status(ConnectionStatus.ONLINE)

    # =========================================================================
    # RETRY WITH BACKOFF
    # =========================================================================

    def retry_connection(self) -> bool:
        """
        One backoff step: wait, then try to go online.

        Returns False immediately, without touching the backend or the
        counter, once ``max_retries`` attempts have been used.
        """
        return self._retry_flight.run(self._retry_once)

    def _retry_once(self) -> bool:
        with self._state_lock:
            if self._state.retry_attempts >= self.retry_policy.max_attempts:
                exhausted = True
            else:
                exhausted = False
                self._state.retry_attempts += 1
                attempt = self._state.retry_attempts

        if exhausted:
            logger.error(
                f"Connection retries exhausted ({self.retry_policy.max_attempts}); giving up"
            )
            self._set_status(ConnectionStatus.FAILED)
            return False

        delay = self.retry_policy.delay_for(attempt)
        logger.info(
            f"Retrying connection (attempt {attempt}/{self.retry_policy.max_attempts}) in {delay:.1f}s"
        )
        self._set_status(ConnectionStatus.RETRYING)
        self._sleep(delay)

        try:
            self.enable_online_mode()
        except Exception as e:
            logger.warning(f"Connection retry {attempt} failed: {e}")
            self._set_status(ConnectionStatus.OFFLINE)
            return False

        logger.info("Connection restored")
        return True

    # =========================================================================
    # SESSION RECOVERY
    # =========================================================================

    def handle_session_recovery(self) -> bool:
        """
        Re-establish a corrupted transport session.

        Cycles the transport (disable, pause, enable). Once all attempts are
        used the app is reloaded as a last resort.
        """
        return self._recovery_flight.run(self._recover_session_once)

    def _recover_session_once(self) -> bool:
        max_attempts = self.recovery_policy.max_attempts
        with self._state_lock:
            if self._state.session_recovery_attempts >= max_attempts:
                exhausted = True
            else:
                exhausted = False
                self._state.session_recovery_attempts += 1
                attempt = self._state.session_recovery_attempts

        if exhausted:
            logger.error(f"Session recovery exhausted ({max_attempts}); reloading")
            self._set_status(ConnectionStatus.FAILED)
            self._reload()
            return False

        logger.info(f"Recovering session (attempt {attempt}/{max_attempts})")
        self._set_status(ConnectionStatus.RECOVERING)

        try:
            self.enable_offline_mode()
            self._sleep(self.recovery_policy.cycle_delay)
            self.enable_online_mode()
        except Exception as e:
            logger.warning(f"Session recovery attempt {attempt} failed: {e}")
            self._set_status(ConnectionStatus.OFFLINE)
            if attempt >= max_attempts:
                delay = self.recovery_policy.reload_delay
                logger.error(f"Last session recovery attempt failed; reloading in {delay:.1f}s")
                self._schedule(delay, self._reload)
            return False

        with self._state_lock:
            self._state.session_recovery_attempts = 0
        logger.info("Session recovered")
        return True

    def _reload(self) -> None:
        if self._reload_hook is None:
            logger.warning("Reload requested but no reload hook is installed")
            return
        self._reload_hook()

    # =========================================================================
    # ERROR DISPATCH
    # =========================================================================

    def handle_connection_error(
        self,
        error: Union[BaseException, BackendErrorInfo],
    ) -> Optional[bool]:
        """
        Match ``error`` against the recovery signatures and start the matching recovery.

        - session-invalid (HTTP 400, "Bad Request", "Unknown SID",
          "gsessionid")                   -> handle_session_recovery()
        - unavailable / "network" message -> retry_connection()
        - anything else                   -> no action, returns None

        Session markers take precedence over network markers, and both are
        checked before any permission, auth or quota code the error carries.
        """
        kind = recovery_signature(error)

        if kind is ErrorKind.SESSION_INVALID:
            logger.warning("Session-invalid error detected; starting session recovery")
            return self.handle_session_recovery()

        if kind is not None and kind.is_transient:
            logger.warning(f"{kind.value} error detected; retrying connection")
            return self.retry_connection()

        return None

    # =========================================================================
    # CALLBACKS
    # =========================================================================

    def register_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        """Register a callback for connection status changes."""
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[ConnectionState], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _set_status(self, status: ConnectionStatus) -> None:
        with self._state_lock:
            old_status = self._state.status
            self._state.status = status

        if old_status != status:
            logger.info(f"Connection status changed: {old_status.value} -> {status.value}")
            self._notify_callbacks()

    def _notify_callbacks(self) -> None:
        for callback in list(self._callbacks):
            try:
                callback(self._state)
            except Exception as e:
                logger.error(f"Error in connection callback: {e}")

    def get_status_display(self) -> dict:
        """Get status information for UI display."""
        return {
            "status": self._state.status.value,
            "is_online": self._state.is_online,
            "retry_attempts": self._state.retry_attempts,
            "max_retries": self.retry_policy.max_attempts,
            "session_recovery_attempts": self._state.session_recovery_attempts,
            "last_online": self._state.last_online.isoformat() if self._state.last_online else None,
            "error": self._state.last_error,
        }
