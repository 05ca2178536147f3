# =============================================================================
# copilot_core/services/startup_service.py
# Startup Persistence
# =============================================================================

from __future__ import annotations
from typing import Any, List, Optional

from copilot_core.data import OrderBy, QueryFilter
from copilot_core.models import StartupData, StartupStage
from .base_service import CollectionService


class StartupService(CollectionService[StartupData]):
    collection = "startups"
    model = StartupData
    default_order = OrderBy("created_at", descending=True)

    def create_startup(self, startup: StartupData) -> str:
        with self.log_operation(f"Creating startup '{startup.name}'"):
            return self._create(startup)

    def get_startup(self, startup_id: str) -> Optional[StartupData]:
        return self._get(startup_id)

    def get_startups_by_founder(self, founder_id: str) -> List[StartupData]:
        """Newest first. The founder may no longer have a profile."""
        return self._find(QueryFilter("founder_id", "==", founder_id))

    def update_startup(self, startup_id: str, **fields: Any) -> None:
        if "stage" in fields:
            fields["stage"] = StartupStage(fields["stage"])
        self._update(startup_id, fields)

    def delete_startup(self, startup_id: str) -> bool:
        return self._delete(startup_id)
