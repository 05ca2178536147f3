# =============================================================================
# copilot_core/services/__init__.py
# Typed Per-Entity Services
# =============================================================================
"""
Service layer on top of the generic DocumentStore.

Usage Example:
-------------
    from copilot_core.bootstrap import build_container

    container = build_container(settings)
    project_id = container.projects.create_project(user_id=uid, name="EcoTech")
    stats = container.projects.get_project_stats(uid)
"""

from .base_service import BaseService, CollectionService, to_storable
from .project_service import ProjectService
from .user_service import UserService
from .startup_service import StartupService
from .consultation_service import ConsultationService

__all__ = [
    "BaseService",
    "CollectionService",
    "to_storable",
    "ProjectService",
    "UserService",
    "StartupService",
    "ConsultationService",
]
