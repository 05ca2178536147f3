# =============================================================================
# copilot_core/services/user_service.py
# User Profile Persistence
# =============================================================================

from __future__ import annotations
from typing import Any, List, Optional

from copilot_core.data import OrderBy, QueryFilter
from copilot_core.models import UserProfile, UserRole
from .base_service import CollectionService


class UserService(CollectionService[UserProfile]):
    """Profiles are keyed by document id but looked up by auth ``uid``."""

    collection = "users"
    model = UserProfile
    default_order = OrderBy("created_at", descending=True)
    immutable_fields = ("id", "created_at", "updated_at", "uid")

    def create_user_profile(self, profile: UserProfile) -> str:
        with self.log_operation(f"Creating profile for {profile.uid}"):
            return self._create(profile)

    def get_user_profile(self, uid: str) -> Optional[UserProfile]:
        """First profile whose ``uid`` matches, or None."""
        profiles = self._find(QueryFilter("uid", "==", uid), limit=1, use_default_order=False)
        return profiles[0] if profiles else None

    def update_user_profile(self, profile_id: str, **fields: Any) -> None:
        if "role" in fields:
            fields["role"] = UserRole(fields["role"])
        self._update(profile_id, fields)

    def get_consultants(self) -> List[UserProfile]:
        return self._find(QueryFilter("role", "==", UserRole.CONSULTANT.value), use_default_order=False)
