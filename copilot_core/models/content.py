# =============================================================================
# copilot_core/models/content.py
# Versioned Project Content (one schema per project type)
# =============================================================================
"""
Project content is a tagged union: each ProjectType owns exactly one content
class. Serialized records carry ``kind`` (the project type value) and
``version`` so readers can reject shapes they do not understand.

    {"kind": "swot-analysis", "version": 1, "strengths": [...], ...}
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type

from copilot_core.errors import ValidationError


CONTENT_VERSION = 1


class ProjectType(Enum):
    """Kinds of document a project can generate."""
    BUSINESS_PLAN = "business-plan"
    MARKET_ANALYSIS = "market-analysis"
    IDEA_VALIDATION = "idea-validator"
    FINANCIAL_PROJECTIONS = "financial-projections"
    SWOT_ANALYSIS = "swot-analysis"
    PITCH_DECK = "pitch-deck"


@dataclass
class ContentSection:
    """One titled block of generated content."""
    title: str
    body: str = ""
    order: int = 0
    section_type: str = "text"  # text | chart | table | list
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ProjectContent:
    """Base class for per-type content; never stored directly."""
    project_type: ClassVar[ProjectType]
    version: int = CONTENT_VERSION

    @property
    def kind(self) -> str:
        return self.project_type.value

    def to_record(self) -> Dict[str, Any]:
        record = asdict(self)
        record["kind"] = self.kind
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> ProjectContent:
        values = {f.name: record[f.name] for f in fields(cls) if f.name in record}
        if "sections" in values:
            values["sections"] = [
                section if isinstance(section, ContentSection) else ContentSection(**section)
                for section in values["sections"] or []
            ]
        return cls(**values)


@dataclass
class BusinessPlanContent(ProjectContent):
    project_type: ClassVar[ProjectType] = ProjectType.BUSINESS_PLAN
    sections: List[ContentSection] = field(default_factory=list)
    summary: str = ""
    recommendations: List[str] = field(default_factory=list)


@dataclass
class MarketAnalysisContent(ProjectContent):
    project_type: ClassVar[ProjectType] = ProjectType.MARKET_ANALYSIS
    sections: List[ContentSection] = field(default_factory=list)
    market_size: str = ""
    growth_rate: str = ""
    competitors: List[str] = field(default_factory=list)


@dataclass
class IdeaValidationContent(ProjectContent):
    project_type: ClassVar[ProjectType] = ProjectType.IDEA_VALIDATION
    viability_score: Optional[float] = None
    strengths: List[str] = field(default_factory=list)
    challenges: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    summary: str = ""


@dataclass
class FinancialProjectionsContent(ProjectContent):
    project_type: ClassVar[ProjectType] = ProjectType.FINANCIAL_PROJECTIONS
    sections: List[ContentSection] = field(default_factory=list)
    revenue_forecast: Dict[str, float] = field(default_factory=dict)
    assumptions: List[str] = field(default_factory=list)


@dataclass
class SwotAnalysisContent(ProjectContent):
    project_type: ClassVar[ProjectType] = ProjectType.SWOT_ANALYSIS
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    opportunities: List[str] = field(default_factory=list)
    threats: List[str] = field(default_factory=list)


@dataclass
class PitchDeckContent(ProjectContent):
    project_type: ClassVar[ProjectType] = ProjectType.PITCH_DECK
    sections: List[ContentSection] = field(default_factory=list)
    tagline: str = ""


CONTENT_TYPES: Dict[ProjectType, Type[ProjectContent]] = {
    cls.project_type: cls
    for cls in (
        BusinessPlanContent,
        MarketAnalysisContent,
        IdeaValidationContent,
        FinancialProjectionsContent,
        SwotAnalysisContent,
        PitchDeckContent,
    )
}


def content_class_for(project_type: ProjectType) -> Type[ProjectContent]:
    return CONTENT_TYPES[project_type]


def parse_content(
    project_type: ProjectType,
    record: Optional[Dict[str, Any]],
) -> Optional[ProjectContent]:
    """
    Rebuild typed content from a stored record.

    Records without ``kind`` are read as the project's own type. A ``kind``
    that disagrees with the project type, or a newer ``version``, raises
    ValidationError.
    """
    if record is None:
        return None
    if isinstance(record, ProjectContent):
        record = record.to_record()

    kind = record.get("kind", project_type.value)
    if kind != project_type.value:
        raise ValidationError(
            f"Content kind '{kind}' does not match project type '{project_type.value}'",
            field="content.kind",
            value=kind,
        )

    version = record.get("version", CONTENT_VERSION)
    if not isinstance(version, int) or version > CONTENT_VERSION or version < 1:
        raise ValidationError(
            f"Unsupported content version {version!r}",
            field="content.version",
            value=version,
        )

    return content_class_for(project_type).from_record(record)
