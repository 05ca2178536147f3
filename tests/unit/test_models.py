# =============================================================================
# tests/unit/test_models.py
# Unit Tests for Document Models and Typed Project Content
# =============================================================================

from datetime import datetime, timezone

import pytest

from copilot_core.errors import ValidationError
from copilot_core.models import (
    BusinessPlanContent,
    ConsultationData,
    ContentSection,
    Funding,
    Project,
    ProjectStats,
    ProjectStatus,
    ProjectType,
    StartupData,
    StartupMetrics,
    SwotAnalysisContent,
    parse_content,
    validate_progress,
)


class TestProjectContent:
    """Tagged, versioned content union"""

    def test_record_carries_kind_and_version(self):
        record = SwotAnalysisContent(strengths=["team"]).to_record()
        assert record["kind"] == "swot-analysis"
        assert record["version"] == 1
        assert record["strengths"] == ["team"]

    def test_sections_are_rebuilt(self):
        content = BusinessPlanContent(
            sections=[ContentSection(title="Market", body="Large", order=1)],
            summary="Plan",
        )
        parsed = parse_content(ProjectType.BUSINESS_PLAN, content.to_record())

        assert isinstance(parsed, BusinessPlanContent)
        assert parsed.sections[0].title == "Market"
        assert parsed == content

    def test_kind_mismatch_rejected(self):
        record = SwotAnalysisContent().to_record()
        with pytest.raises(ValidationError):
            parse_content(ProjectType.PITCH_DECK, record)

    def test_newer_version_rejected(self):
        record = {**SwotAnalysisContent().to_record(), "version": 2}
        with pytest.raises(ValidationError):
            parse_content(ProjectType.SWOT_ANALYSIS, record)

    def test_missing_kind_reads_as_project_type(self):
        parsed = parse_content(ProjectType.SWOT_ANALYSIS, {"threats": ["incumbents"]})
        assert parsed.threats == ["incumbents"]

    def test_none_is_no_content(self):
        assert parse_content(ProjectType.BUSINESS_PLAN, None) is None


class TestProject:

    def test_progress_bounds(self):
        assert validate_progress(0) == 0
        assert validate_progress(100) == 100
        for bad in (-1, 101, 50.5, True):
            with pytest.raises(ValidationError):
                validate_progress(bad)

    def test_record_round_trip_keeps_tags_as_set(self):
        project = Project(user_id="u1", name="EcoTech", tags={"saas", "climate"})
        record = project.to_record()
        record.update(id="p1", created_at="2024-03-01T12:00:00Z", updated_at="2024-03-02T12:00:00Z")

        restored = Project.from_record(record)

        assert record["tags"] == ["climate", "saas"]
        assert restored.tags == {"saas", "climate"}
        assert restored.created_at == datetime(2024, 3, 1, 12, tzinfo=timezone.utc)
        assert restored.id == "p1"

    def test_record_excludes_store_managed_fields(self):
        record = Project(user_id="u1", name="A", id="p1").to_record()
        assert "id" not in record
        assert "created_at" not in record

    def test_strings_coerced_to_enums(self):
        project = Project(user_id="u1", name="A", status="in-progress", type="pitch-deck")
        assert project.status is ProjectStatus.IN_PROGRESS
        assert project.type is ProjectType.PITCH_DECK

    def test_content_must_match_type(self):
        project = Project(user_id="u1", name="A", type=ProjectType.PITCH_DECK, content=SwotAnalysisContent())
        with pytest.raises(ValidationError):
            project.validate()

    def test_ownership(self):
        project = Project(user_id="u1", name="A")
        assert project.is_owned_by("u1")
        assert not project.is_owned_by("u2")
        assert not project.is_owned_by(None)


class TestProjectStats:

    def test_counts_by_status(self):
        projects = [
            Project(user_id="u1", name="a", status=ProjectStatus.DRAFT),
            Project(user_id="u1", name="b", status=ProjectStatus.DRAFT),
            Project(user_id="u1", name="c", status=ProjectStatus.COMPLETED),
            Project(user_id="u1", name="d", status=ProjectStatus.IN_PROGRESS),
        ]
        stats = ProjectStats.from_projects(projects)

        assert stats.to_dict() == {
            "total_projects": 4,
            "completed_projects": 1,
            "in_progress_projects": 1,
            "draft_projects": 2,
        }
        assert stats.share(stats.draft_projects) == 50

    def test_empty(self):
        stats = ProjectStats.from_projects([])
        assert stats.total_projects == 0
        assert stats.share(0) == 0


class TestOtherEntities:

    def test_startup_nested_values(self):
        startup = StartupData(
            name="EcoTech",
            founder_id="u1",
            funding=Funding(amount=250000.0, round="seed", investors=["Angel"]),
            metrics=StartupMetrics(users=1200),
        )
        restored = StartupData.from_record(startup.to_record())

        assert restored.funding == startup.funding
        assert restored.metrics.users == 1200

    def test_startup_tolerates_newer_nested_keys(self):
        restored = StartupData.from_record({
            "name": "EcoTech",
            "founder_id": "u1",
            "funding": {"amount": 250000, "round": "seed", "currency": "EUR"},
            "metrics": {"users": 1200, "churn": 0.02},
        })

        assert restored.funding == Funding(amount=250000.0, round="seed", investors=[])
        assert restored.metrics == StartupMetrics(users=1200)

    def test_consultation_scheduled_at_parsed(self):
        restored = ConsultationData.from_record({
            "startup_id": "s1",
            "consultant_id": "c1",
            "title": "Pricing review",
            "scheduled_at": "2024-04-01T09:30:00+00:00",
        })
        assert restored.scheduled_at == datetime(2024, 4, 1, 9, 30, tzinfo=timezone.utc)
        assert restored.recommendations == []
