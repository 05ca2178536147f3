# =============================================================================
# tests/unit/test_services.py
# Unit Tests for the Typed Collection Services
# =============================================================================

from datetime import datetime, timezone

import pytest

from copilot_core.data import DocumentStore
from copilot_core.errors import DocumentNotFoundError, ValidationError
from copilot_core.models import (
    ConsultationData,
    ConsultationStatus,
    IdeaValidationContent,
    ProjectStatus,
    ProjectType,
    StartupData,
    SwotAnalysisContent,
    UserProfile,
    UserRole,
)
from copilot_core.services import (
    ConsultationService,
    ProjectService,
    StartupService,
    UserService,
)


@pytest.fixture
def store(memory_backend, connection_manager, advancing_clock):
    return DocumentStore(memory_backend, connection_manager, clock=advancing_clock)


class TestProjectService:
    """Project CRUD, validation and statistics"""

    def test_new_project_is_empty_draft(self, store):
        service = ProjectService(store)
        project_id = service.create_project(user_id="u1", name="EcoTech", tags=["climate"])

        project = service.get_project(project_id)
        assert project.status is ProjectStatus.DRAFT
        assert project.progress == 0
        assert project.tags == {"climate"}
        assert project.created_at == project.updated_at

    def test_projects_by_user_newest_activity_first(self, store):
        service = ProjectService(store)
        first = service.create_project(user_id="u1", name="first")
        second = service.create_project(user_id="u1", name="second")
        service.create_project(user_id="u2", name="not mine")

        service.update_project_progress(first, 10)

        assert [p.id for p in service.get_projects_by_user("u1")] == [first, second]
        assert [p.name for p in service.get_projects_by_user("u1", limit=1)] == ["first"]

    def test_update_status_and_progress(self, store):
        service = ProjectService(store)
        project_id = service.create_project(user_id="u1", name="A")

        service.update_project_status(project_id, ProjectStatus.IN_PROGRESS)
        service.update_project(project_id, progress=60, description="Now with revenue")

        project = service.get_project(project_id)
        assert project.status is ProjectStatus.IN_PROGRESS
        assert project.progress == 60
        assert project.description == "Now with revenue"

    def test_invalid_progress_rejected_before_write(self, store, memory_backend):
        service = ProjectService(store)
        project_id = service.create_project(user_id="u1", name="A")

        with pytest.raises(ValidationError):
            service.update_project_progress(project_id, 150)
        assert memory_backend.calls["update"] == 0

    def test_owner_cannot_be_reassigned(self, store):
        service = ProjectService(store)
        project_id = service.create_project(user_id="u1", name="A")

        with pytest.raises(ValidationError):
            service.update_project(project_id, user_id="u2")

    def test_content_must_match_project_type(self, store):
        service = ProjectService(store)
        project_id = service.create_project(user_id="u1", name="A", type=ProjectType.SWOT_ANALYSIS)

        with pytest.raises(ValidationError):
            service.update_project_content(project_id, IdeaValidationContent(viability_score=8))

        service.update_project_content(project_id, SwotAnalysisContent(threats=["incumbents"]))
        assert service.get_project(project_id).content.threats == ["incumbents"]

    def test_content_update_on_missing_project(self, store):
        with pytest.raises(DocumentNotFoundError):
            ProjectService(store).update_project_content("ghost", SwotAnalysisContent())

    def test_update_missing_project(self, store):
        with pytest.raises(DocumentNotFoundError):
            ProjectService(store).update_project_status("ghost", ProjectStatus.COMPLETED)

    def test_stats_and_delete(self, store):
        service = ProjectService(store)
        keep = service.create_project(user_id="u1", name="keep")
        drop = service.create_project(user_id="u1", name="drop")
        service.update_project_status(keep, ProjectStatus.COMPLETED)

        assert service.delete_project(drop) is True
        assert service.delete_project(drop) is False

        stats = service.get_project_stats("u1")
        assert stats.total_projects == 1
        assert stats.completed_projects == 1
        assert stats.draft_projects == 0

    def test_projects_frame(self, store):
        service = ProjectService(store)
        service.create_project(user_id="u1", name="EcoTech", tags=["b", "a"])

        frame = ProjectService.projects_frame(service.get_projects_by_user("u1"))
        assert list(frame.columns) == ["id", "name", "status", "progress", "type", "tags", "updated_at"]
        assert frame.loc[0, "tags"] == "a, b"
        assert frame.loc[0, "status"] == "draft"

    def test_empty_frame_has_columns(self):
        assert ProjectService.projects_frame([]).empty


class TestUserService:

    def test_profile_lookup_by_uid(self, store):
        service = UserService(store)
        service.create_user_profile(UserProfile(uid="auth-1", email="a@example.com", display_name="Ada"))

        profile = service.get_user_profile("auth-1")
        assert profile.display_name == "Ada"
        assert service.get_user_profile("auth-unknown") is None

    def test_consultants(self, store):
        service = UserService(store)
        service.create_user_profile(UserProfile(uid="f1", email="f@example.com"))
        service.create_user_profile(
            UserProfile(uid="c1", email="c@example.com", role=UserRole.CONSULTANT, expertise=["pricing"])
        )

        consultants = service.get_consultants()
        assert [c.uid for c in consultants] == ["c1"]
        assert consultants[0].expertise == ["pricing"]

    def test_uid_is_immutable(self, store):
        service = UserService(store)
        profile_id = service.create_user_profile(UserProfile(uid="f1", email="f@example.com"))

        service.update_user_profile(profile_id, bio="Founder", role="consultant")
        with pytest.raises(ValidationError):
            service.update_user_profile(profile_id, uid="f2")

        assert service.get_user_profile("f1").role is UserRole.CONSULTANT


class TestStartupAndConsultationServices:

    def test_startups_by_founder(self, store):
        service = StartupService(store)
        older = service.create_startup(StartupData(name="Old", founder_id="u1"))
        newer = service.create_startup(StartupData(name="New", founder_id="u1"))

        assert [s.id for s in service.get_startups_by_founder("u1")] == [newer, older]

        service.update_startup(newer, stage="mvp", team_size=4)
        assert service.get_startup(newer).team_size == 4
        assert service.delete_startup(older) is True

    def test_startup_with_dangling_founder_is_readable(self, store):
        service = StartupService(store)
        startup_id = service.create_startup(StartupData(name="Orphan", founder_id="deleted-user"))
        assert service.get_startup(startup_id).founder_id == "deleted-user"

    def test_consultations(self, store):
        service = ConsultationService(store)
        early = service.create_consultation(ConsultationData(
            startup_id="s1",
            consultant_id="c1",
            title="Kickoff",
            scheduled_at=datetime(2024, 4, 1, tzinfo=timezone.utc),
        ))
        late = service.create_consultation(ConsultationData(
            startup_id="s1",
            consultant_id="c1",
            title="Review",
            scheduled_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        ))

        assert [c.id for c in service.get_consultations_by_consultant("c1")] == [late, early]
        assert len(service.get_consultations_by_startup("s1")) == 2

        service.update_consultation(early, status="completed", recommendations=["Raise prices"])
        updated = service.get_consultation(early)
        assert updated.status is ConsultationStatus.COMPLETED
        assert updated.recommendations == ["Raise prices"]
