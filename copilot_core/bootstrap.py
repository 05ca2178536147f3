# =============================================================================
# copilot_core/bootstrap.py
# Application Wiring
# =============================================================================
"""
Builds the object graph once per process:

    backend -> ConnectionManager -> DocumentStore -> services / advisor

Authentication is per browser session, so the container only carries a
factory; each session asks it for its own AuthGateway.

The Streamlit entry point caches the result with ``st.cache_resource``;
its reload hook clears that cache so the next script run rebuilds
everything from scratch.
"""

from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Callable, Optional

from copilot_core.ai import BusinessAdvisor
from copilot_core.auth import AuthGateway
from copilot_core.config import Settings
from copilot_core.connection import (
    ConnectionManager,
    RetryPolicy,
    SessionRecoveryPolicy,
    schedule_with_timer,
)
from copilot_core.connection.policies import Scheduler, Sleeper
from copilot_core.data import DocumentBackend, DocumentStore, MemoryBackend, SupabaseBackend
from copilot_core.logging import get_logger
from copilot_core.services import (
    ConsultationService,
    ProjectService,
    StartupService,
    UserService,
)

logger = get_logger(__name__)


@dataclass
class AppContainer:
    """Everything the UI layer needs, built once."""
    settings: Settings
    backend: DocumentBackend
    connection: ConnectionManager
    store: DocumentStore
    projects: ProjectService
    users: UserService
    startups: StartupService
    consultations: ConsultationService
    auth_factory: Callable[[], AuthGateway]
    advisor: BusinessAdvisor

    def new_auth_gateway(self) -> AuthGateway:
        """A gateway with its own auth client, for one browser session."""
        return self.auth_factory()


def create_backend(settings: Settings) -> DocumentBackend:
    if settings.backend == "memory":
        logger.info("Using in-memory document backend")
        return MemoryBackend()
    return SupabaseBackend(settings)


def build_container(
    settings: Settings,
    sleep: Sleeper = time.sleep,
    schedule: Scheduler = schedule_with_timer,
    reload: Optional[Callable[[], None]] = None,
    backend: Optional[DocumentBackend] = None,
    advisor: Optional[BusinessAdvisor] = None,
    auth_factory: Optional[Callable[[], AuthGateway]] = None,
) -> AppContainer:
    """
    Wire the persistence core.

    Args:
        settings: Loaded settings
        sleep: Blocking delay used by retries and session cycling
        schedule: Deferred execution used for the last-resort reload
        reload: App-level reload hook
        backend: Pre-built backend (defaults to the one settings select)
        advisor: Pre-built advisor (defaults to a Gemini advisor)
        auth_factory: Builds one AuthGateway per browser session
    """
    backend = backend or create_backend(settings)

    connection = ConnectionManager(
        backend,
        retry_policy=RetryPolicy.from_settings(settings),
        recovery_policy=SessionRecoveryPolicy.from_settings(settings),
        sleep=sleep,
        schedule=schedule,
        reload=reload,
    )
    store = DocumentStore(backend, connection_manager=connection)

    container = AppContainer(
        settings=settings,
        backend=backend,
        connection=connection,
        store=store,
        projects=ProjectService(store),
        users=UserService(store),
        startups=StartupService(store),
        consultations=ConsultationService(store),
        auth_factory=auth_factory or (lambda: AuthGateway(settings)),
        advisor=advisor or BusinessAdvisor(settings),
    )

    logger.info(
        f"Container ready (backend={backend.name}, configured={backend.is_configured}, "
        f"ai={container.advisor.is_configured})"
    )
    return container
