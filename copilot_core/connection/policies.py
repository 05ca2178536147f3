# =============================================================================
# copilot_core/connection/policies.py
# Retry and Session-Recovery Policies
# =============================================================================

from __future__ import annotations
import threading
from dataclasses import dataclass
from typing import Callable

from copilot_core.config import Settings


Sleeper = Callable[[float], None]
Scheduler = Callable[[float, Callable[[], None]], None]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff: attempt n waits base_delay * multiplier ** (n - 1).

    With the defaults the three permitted retries wait 1s, 2s and 4s.
    """
    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 0:
            raise ValueError("max_attempts must be >= 0")
        if self.base_delay < 0 or self.multiplier < 1:
            raise ValueError("base_delay must be >= 0 and multiplier >= 1")

    def delay_for(self, attempt: int) -> float:
        """Delay before the given 1-based attempt."""
        if attempt < 1:
            raise ValueError("attempt is 1-based")
        return self.base_delay * self.multiplier ** (attempt - 1)

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.max_retries,
            base_delay=settings.retry_delay,
            multiplier=settings.backoff_multiplier,
        )


@dataclass(frozen=True)
class SessionRecoveryPolicy:
    """How often to cycle the transport before giving up and reloading."""
    max_attempts: int = 3
    cycle_delay: float = 1.0   # pause between disable and enable
    reload_delay: float = 2.0  # delay before the last-resort reload

    @classmethod
    def from_settings(cls, settings: Settings) -> SessionRecoveryPolicy:
        return cls(
            max_attempts=settings.max_session_recovery_attempts,
            cycle_delay=settings.session_cycle_delay,
            reload_delay=settings.reload_delay,
        )


def schedule_with_timer(delay: float, callback: Callable[[], None]) -> None:
    """Run ``callback`` once after ``delay`` seconds on a daemon timer thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
