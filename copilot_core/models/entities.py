# =============================================================================
# copilot_core/models/entities.py
# Document Dataclasses for Startup Copilot
# =============================================================================
"""
Plain dataclasses for every persisted entity.

Each entity extends Document (id + store-assigned timestamps). ``to_record``
returns only caller-owned fields; ``id``, ``created_at`` and ``updated_at``
are never written by callers. ``from_record`` ignores unknown keys so readers
tolerate rows written by newer versions, and foreign keys (founder_id,
startup_id, consultant_id) are plain strings that may point nowhere.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Set

from copilot_core.errors import ValidationError
from .content import ProjectContent, ProjectType, parse_content


STORE_MANAGED_FIELDS = ("id", "created_at", "updated_at")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept datetimes or ISO 8601 strings (as returned by PostgREST)."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    raise ValidationError(f"Unsupported timestamp value {value!r}", value=repr(value))


# =============================================================================
# ENUMS
# =============================================================================

class ProjectStatus(Enum):
    DRAFT = "draft"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class UserRole(Enum):
    FOUNDER = "founder"
    CONSULTANT = "consultant"
    ADMIN = "admin"


class StartupStage(Enum):
    IDEA = "idea"
    MVP = "mvp"
    GROWTH = "growth"
    SCALE = "scale"


class ConsultationStatus(Enum):
    PENDING = "pending"
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# =============================================================================
# BASE DOCUMENT
# =============================================================================

@dataclass(kw_only=True)
class Document:
    """Base shape shared by every persisted record."""
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def _base_from(self, record: Dict[str, Any]) -> None:
        self.id = record.get("id")
        self.created_at = parse_timestamp(record.get("created_at"))
        self.updated_at = parse_timestamp(record.get("updated_at"))


# =============================================================================
# PROJECT
# =============================================================================

@dataclass(kw_only=True)
class Project(Document):
    user_id: str
    name: str
    description: str = ""
    status: ProjectStatus = ProjectStatus.DRAFT
    progress: int = 0
    type: ProjectType = ProjectType.BUSINESS_PLAN
    tags: Set[str] = field(default_factory=set)
    industry: str = ""
    stage: str = ""
    business_model: str = ""
    target_market: str = ""
    content: Optional[ProjectContent] = None

    def __post_init__(self) -> None:
        if isinstance(self.status, str):
            self.status = ProjectStatus(self.status)
        if isinstance(self.type, str):
            self.type = ProjectType(self.type)
        self.tags = set(self.tags or ())
        if isinstance(self.content, dict):
            self.content = parse_content(self.type, self.content)

    def validate(self) -> None:
        if not self.user_id:
            raise ValidationError("Project must be owned by a user", field="user_id")
        validate_progress(self.progress)
        if self.content is not None and self.content.project_type is not self.type:
            raise ValidationError(
                f"Content kind '{self.content.kind}' does not match project type '{self.type.value}'",
                field="content",
            )

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return bool(user_id) and self.user_id == user_id

    def to_record(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "description": self.description,
            "status": self.status.value,
            "progress": self.progress,
            "type": self.type.value,
            "tags": sorted(self.tags),
            "industry": self.industry,
            "stage": self.stage,
            "business_model": self.business_model,
            "target_market": self.target_market,
            "content": self.content.to_record() if self.content else None,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Project:
        project_type = ProjectType(record.get("type") or ProjectType.BUSINESS_PLAN.value)
        project = cls(
            user_id=record.get("user_id", ""),
            name=record.get("name", ""),
            description=record.get("description") or "",
            status=ProjectStatus(record.get("status") or ProjectStatus.DRAFT.value),
            progress=int(record.get("progress") or 0),
            type=project_type,
            tags=set(record.get("tags") or ()),
            industry=record.get("industry") or "",
            stage=record.get("stage") or "",
            business_model=record.get("business_model") or "",
            target_market=record.get("target_market") or "",
            content=parse_content(project_type, record.get("content")),
        )
        project._base_from(record)
        return project


def validate_progress(progress: Any) -> int:
    """Progress is an integer percentage in [0, 100]."""
    if isinstance(progress, bool) or not isinstance(progress, int):
        raise ValidationError("Progress must be an integer percentage", field="progress", value=progress)
    if not 0 <= progress <= 100:
        raise ValidationError("Progress must be between 0 and 100", field="progress", value=progress)
    return progress


@dataclass
class ProjectStats:
    """Counts derived client-side from a user's full project set."""
    total_projects: int = 0
    completed_projects: int = 0
    in_progress_projects: int = 0
    draft_projects: int = 0

    @classmethod
    def from_projects(cls, projects: Iterable[Project]) -> ProjectStats:
        projects = list(projects)
        return cls(
            total_projects=len(projects),
            completed_projects=sum(1 for p in projects if p.status is ProjectStatus.COMPLETED),
            in_progress_projects=sum(1 for p in projects if p.status is ProjectStatus.IN_PROGRESS),
            draft_projects=sum(1 for p in projects if p.status is ProjectStatus.DRAFT),
        )

    def share(self, count: int) -> int:
        """Rounded percentage of ``count`` over the total (0 when empty)."""
        if not self.total_projects:
            return 0
        return round(count / self.total_projects * 100)

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_projects": self.total_projects,
            "completed_projects": self.completed_projects,
            "in_progress_projects": self.in_progress_projects,
            "draft_projects": self.draft_projects,
        }


# =============================================================================
# USER PROFILE
# =============================================================================

@dataclass(kw_only=True)
class UserProfile(Document):
    uid: str
    email: str
    display_name: str = ""
    role: UserRole = UserRole.FOUNDER
    bio: Optional[str] = None
    expertise: List[str] = field(default_factory=list)
    experience: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role.value,
            "bio": self.bio,
            "expertise": list(self.expertise),
            "experience": self.experience,
            "linkedin": self.linkedin,
            "twitter": self.twitter,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> UserProfile:
        profile = cls(
            uid=record.get("uid", ""),
            email=record.get("email", ""),
            display_name=record.get("display_name") or "",
            role=UserRole(record.get("role") or UserRole.FOUNDER.value),
            bio=record.get("bio"),
            expertise=list(record.get("expertise") or []),
            experience=record.get("experience"),
            linkedin=record.get("linkedin"),
            twitter=record.get("twitter"),
        )
        profile._base_from(record)
        return profile


# =============================================================================
# STARTUP
# =============================================================================

@dataclass
class Funding:
    amount: float
    round: str
    investors: List[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> Funding:
        return cls(
            amount=float(record.get("amount") or 0),
            round=record.get("round") or "",
            investors=list(record.get("investors") or []),
        )


@dataclass
class StartupMetrics:
    revenue: Optional[float] = None
    users: Optional[int] = None
    growth: Optional[float] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> StartupMetrics:
        return cls(**{f.name: record[f.name] for f in fields(cls) if f.name in record})


@dataclass(kw_only=True)
class StartupData(Document):
    name: str
    founder_id: str
    description: str = ""
    industry: str = ""
    stage: StartupStage = StartupStage.IDEA
    team_size: int = 1
    funding: Optional[Funding] = None
    metrics: Optional[StartupMetrics] = None

    def to_record(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "founder_id": self.founder_id,
            "description": self.description,
            "industry": self.industry,
            "stage": self.stage.value,
            "team_size": self.team_size,
            "funding": asdict(self.funding) if self.funding else None,
            "metrics": asdict(self.metrics) if self.metrics else None,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> StartupData:
        funding = record.get("funding")
        metrics = record.get("metrics")
        startup = cls(
            name=record.get("name", ""),
            founder_id=record.get("founder_id", ""),
            description=record.get("description") or "",
            industry=record.get("industry") or "",
            stage=StartupStage(record.get("stage") or StartupStage.IDEA.value),
            team_size=int(record.get("team_size") or 1),
            funding=Funding.from_record(funding) if funding else None,
            metrics=StartupMetrics.from_record(metrics) if metrics else None,
        )
        startup._base_from(record)
        return startup


# =============================================================================
# CONSULTATION
# =============================================================================

@dataclass(kw_only=True)
class ConsultationData(Document):
    startup_id: str
    consultant_id: str
    title: str
    description: str = ""
    status: ConsultationStatus = ConsultationStatus.PENDING
    scheduled_at: Optional[datetime] = None
    duration: Optional[int] = None  # minutes
    notes: Optional[str] = None
    recommendations: List[str] = field(default_factory=list)

    def to_record(self) -> Dict[str, Any]:
        return {
            "startup_id": self.startup_id,
            "consultant_id": self.consultant_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "scheduled_at": self.scheduled_at,
            "duration": self.duration,
            "notes": self.notes,
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> ConsultationData:
        consultation = cls(
            startup_id=record.get("startup_id", ""),
            consultant_id=record.get("consultant_id", ""),
            title=record.get("title", ""),
            description=record.get("description") or "",
            status=ConsultationStatus(record.get("status") or ConsultationStatus.PENDING.value),
            scheduled_at=parse_timestamp(record.get("scheduled_at")),
            duration=record.get("duration"),
            notes=record.get("notes"),
            recommendations=list(record.get("recommendations") or []),
        )
        consultation._base_from(record)
        return consultation
