# =============================================================================
# copilot_core/services/consultation_service.py
# Consultation Persistence
# =============================================================================

from __future__ import annotations
from typing import Any, List, Optional

from copilot_core.data import OrderBy, QueryFilter
from copilot_core.models import ConsultationData, ConsultationStatus
from .base_service import CollectionService


class ConsultationService(CollectionService[ConsultationData]):
    collection = "consultations"
    model = ConsultationData
    default_order = OrderBy("created_at", descending=True)

    def create_consultation(self, consultation: ConsultationData) -> str:
        with self.log_operation(f"Creating consultation '{consultation.title}'"):
            return self._create(consultation)

    def get_consultation(self, consultation_id: str) -> Optional[ConsultationData]:
        return self._get(consultation_id)

    def get_consultations_by_startup(self, startup_id: str) -> List[ConsultationData]:
        return self._find(QueryFilter("startup_id", "==", startup_id))

    def get_consultations_by_consultant(self, consultant_id: str) -> List[ConsultationData]:
        """Latest scheduled first."""
        return self._find(
            QueryFilter("consultant_id", "==", consultant_id),
            order_by=OrderBy("scheduled_at", descending=True),
        )

    def update_consultation(self, consultation_id: str, **fields: Any) -> None:
        if "status" in fields:
            fields["status"] = ConsultationStatus(fields["status"])
        self._update(consultation_id, fields)
