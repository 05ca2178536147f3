# =============================================================================
# copilot_core/services/project_service.py
# Project Persistence and Dashboard Statistics
# =============================================================================

from __future__ import annotations
from typing import Any, Iterable, List, Optional

import pandas as pd

from copilot_core.data import OrderBy, QueryFilter
from copilot_core.errors import DocumentNotFoundError, ValidationError
from copilot_core.models import (
    Project,
    ProjectContent,
    ProjectStats,
    ProjectStatus,
    ProjectType,
    validate_progress,
)
from .base_service import CollectionService


PROJECT_COLUMNS = ["id", "name", "status", "progress", "type", "tags", "updated_at"]


class ProjectService(CollectionService[Project]):
    """
    CRUD for projects, newest activity first.

    Usage:
        service = ProjectService(store)
        project_id = service.create_project(user_id=uid, name="EcoTech")
        stats = service.get_project_stats(uid)
    """

    collection = "projects"
    model = Project
    default_order = OrderBy("updated_at", descending=True)
    immutable_fields = ("id", "created_at", "updated_at", "user_id")

    def create_project(
        self,
        user_id: str,
        name: str,
        description: str = "",
        type: ProjectType = ProjectType.BUSINESS_PLAN,
        tags: Iterable[str] = (),
        industry: str = "",
        stage: str = "",
        business_model: str = "",
        target_market: str = "",
        content: Optional[ProjectContent] = None,
    ) -> str:
        """Create a project for ``user_id``; always starts as a 0% draft."""
        project = Project(
            user_id=user_id,
            name=name,
            description=description,
            status=ProjectStatus.DRAFT,
            progress=0,
            type=type,
            tags=set(tags),
            industry=industry,
            stage=stage,
            business_model=business_model,
            target_market=target_market,
            content=content,
        )
        project.validate()

        with self.log_operation(f"Creating project '{name}'"):
            return self._create(project)

    def get_project(self, project_id: str) -> Optional[Project]:
        return self._get(project_id)

    def get_projects_by_user(self, user_id: str, limit: Optional[int] = None) -> List[Project]:
        """All projects owned by ``user_id``, most recently modified first."""
        return self._find(QueryFilter("user_id", "==", user_id), limit=limit)

    def update_project(self, project_id: str, **fields: Any) -> None:
        """
        Merge arbitrary project fields.

        Status and progress are validated; content goes through
        update_project_content so its kind can be checked.
        """
        if "status" in fields:
            fields["status"] = ProjectStatus(fields["status"])
        if "progress" in fields:
            validate_progress(fields["progress"])
        if "type" in fields:
            fields["type"] = ProjectType(fields["type"])
        if "content" in fields:
            raise ValidationError("Use update_project_content to change content", field="content")
        if "tags" in fields:
            fields["tags"] = set(fields["tags"])

        self._update(project_id, fields)

    def update_project_status(self, project_id: str, status: ProjectStatus) -> None:
        self._update(project_id, {"status": ProjectStatus(status)})

    def update_project_progress(self, project_id: str, progress: int) -> None:
        self._update(project_id, {"progress": validate_progress(progress)})

    def update_project_content(self, project_id: str, content: ProjectContent) -> None:
        """Replace the project's content; its kind must match the project type."""
        project = self.get_project(project_id)
        if project is None:
            raise DocumentNotFoundError(self.collection, project_id)
        if content.project_type is not project.type:
            raise ValidationError(
                f"Content kind '{content.kind}' does not match project type '{project.type.value}'",
                field="content",
            )
        self._update(project_id, {"content": content})

    def delete_project(self, project_id: str) -> bool:
        with self.log_operation(f"Deleting project {project_id}"):
            return self._delete(project_id)

    def get_project_stats(self, user_id: str) -> ProjectStats:
        """Counts by status, computed from the user's full project set."""
        return ProjectStats.from_projects(self.get_projects_by_user(user_id))

    @staticmethod
    def projects_frame(projects: Iterable[Project]) -> pd.DataFrame:
        """Tabular view of projects for the dashboard."""
        rows = [
            {
                "id": p.id,
                "name": p.name,
                "status": p.status.value,
                "progress": p.progress,
                "type": p.type.value,
                "tags": ", ".join(sorted(p.tags)),
                "updated_at": p.updated_at,
            }
            for p in projects
        ]
        return pd.DataFrame(rows, columns=PROJECT_COLUMNS)
