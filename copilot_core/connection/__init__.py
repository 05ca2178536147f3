# =============================================================================
# copilot_core/connection/__init__.py
# Connection Resilience
# =============================================================================

from .policies import (
    RetryPolicy,
    SessionRecoveryPolicy,
    schedule_with_timer,
)
from .connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
    SingleFlight,
)

__all__ = [
    "RetryPolicy",
    "SessionRecoveryPolicy",
    "schedule_with_timer",
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
    "SingleFlight",
]
