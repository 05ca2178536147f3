# =============================================================================
# copilot_core/ai/__init__.py
# AI Business Advisor
# =============================================================================

from .advisor import (
    AIResponse,
    BusinessAdvisor,
    GENERATION_CONFIG,
    SAFETY_SETTINGS,
    parse_json_response,
)

__all__ = [
    "AIResponse",
    "BusinessAdvisor",
    "GENERATION_CONFIG",
    "SAFETY_SETTINGS",
    "parse_json_response",
]
