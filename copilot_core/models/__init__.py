# =============================================================================
# copilot_core/models/__init__.py
# Document Models
# =============================================================================

from .content import (
    CONTENT_VERSION,
    ProjectType,
    ContentSection,
    ProjectContent,
    BusinessPlanContent,
    MarketAnalysisContent,
    IdeaValidationContent,
    FinancialProjectionsContent,
    SwotAnalysisContent,
    PitchDeckContent,
    parse_content,
)

from .entities import (
    STORE_MANAGED_FIELDS,
    Document,
    Project,
    ProjectStatus,
    ProjectStats,
    UserProfile,
    UserRole,
    StartupData,
    StartupStage,
    Funding,
    StartupMetrics,
    ConsultationData,
    ConsultationStatus,
    parse_timestamp,
    validate_progress,
)

__all__ = [
    # Content
    "CONTENT_VERSION",
    "ProjectType",
    "ContentSection",
    "ProjectContent",
    "BusinessPlanContent",
    "MarketAnalysisContent",
    "IdeaValidationContent",
    "FinancialProjectionsContent",
    "SwotAnalysisContent",
    "PitchDeckContent",
    "parse_content",
    # Entities
    "STORE_MANAGED_FIELDS",
    "Document",
    "Project",
    "ProjectStatus",
    "ProjectStats",
    "UserProfile",
    "UserRole",
    "StartupData",
    "StartupStage",
    "Funding",
    "StartupMetrics",
    "ConsultationData",
    "ConsultationStatus",
    "parse_timestamp",
    "validate_progress",
]
