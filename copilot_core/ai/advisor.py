# =============================================================================
# copilot_core/ai/advisor.py
# Gemini Business Advisor
# =============================================================================
"""
BusinessAdvisor - Gemini-backed analysis helpers for the dashboard.

Each call returns an AIResponse instead of raising, so a failed
generation shows up as a message next to the form that requested it.
Model replies are asked for JSON; when the reply cannot be parsed a
canned structure is returned with the raw text kept under ``summary``
(or ``raw``).
"""

from __future__ import annotations
import copy
import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import google.generativeai as genai
from google.generativeai.types import HarmBlockThreshold, HarmCategory

from copilot_core.config import Settings
from copilot_core.logging import get_logger

logger = get_logger(__name__)


GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 2048,
}

CHAT_TEMPERATURE = 0.8

SAFETY_SETTINGS = {
    HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
}

IDEA_FALLBACK = {
    "viability_score": 7,
    "market_potential": {"size": "Medium", "growth": "Moderate", "competition": "Competitive"},
    "strengths": ["Innovative concept"],
    "challenges": ["Market validation needed"],
    "recommendations": ["Conduct market research"],
    "similar_companies": [],
    "revenue_models": ["Subscription", "Freemium"],
}

COMPETITOR_FALLBACK = {
    "direct_competitors": [],
    "indirect_competitors": [],
    "market_overview": {"size": "Unknown", "growth": "Unknown", "trends": []},
    "opportunities": ["Market research needed"],
    "recommendations": ["Analyze competitor strategies"],
    "competitive_advantages": ["Unique value proposition"],
}

SWOT_FALLBACK = {
    "strengths": [{"point": "Innovative approach", "description": "Unique solution to market problem", "impact": "high"}],
    "weaknesses": [{"point": "Limited resources", "description": "Startup constraints", "impact": "medium"}],
    "opportunities": [{"point": "Growing market", "description": "Expanding target audience", "timeframe": "medium"}],
    "threats": [{"point": "Competition", "description": "Established players", "likelihood": "medium"}],
    "strategic_recommendations": ["Focus on core strengths", "Address key weaknesses"],
}

ADVISOR_PERSONA = (
    "You are Startup Copilot, an expert business consultant for early-stage "
    "founders. Give practical, actionable advice that is encouraging but realistic."
)


@dataclass
class AIResponse:
    """Outcome of one generation call."""
    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict)


def parse_json_response(text: str, fallback: Dict[str, Any], text_key: str = "summary") -> Dict[str, Any]:
    """
    Parse a model reply as a JSON object.

    Markdown code fences are stripped first. On failure a copy of
    ``fallback`` is returned with the raw text under ``text_key``.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.strip("`")
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
        cleaned = cleaned.strip()

    try:
        parsed = json.loads(cleaned)
    except (json.JSONDecodeError, ValueError):
        parsed = None

    if isinstance(parsed, dict):
        return parsed

    logger.warning("Model reply was not a JSON object; using fallback structure")
    result = copy.deepcopy(fallback)
    result[text_key] = text
    return result


class BusinessAdvisor:
    """
    Usage:
        advisor = BusinessAdvisor(settings)
        if advisor.is_configured:
            result = advisor.analyze_business_idea("Solar kiosks", "Rural retailers")
    """

    def __init__(self, settings: Settings, model: Optional[Any] = None):
        self.settings = settings
        self.model_name = settings.gemini_model
        self._model = model

        if self._model is None and settings.is_ai_configured:
            genai.configure(api_key=settings.gemini_api_key)
            self._model = genai.GenerativeModel(
                model_name=self.model_name,
                generation_config=GENERATION_CONFIG,
                safety_settings=SAFETY_SETTINGS,
            )

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    def _generate(self, operation: str, prompt: str, generation_config: Optional[Dict[str, Any]] = None):
        """Run one prompt; returns (text, usage) or raises."""
        if self._model is None:
            raise RuntimeError("Gemini API key is not configured")

        if generation_config is None:
            response = self._model.generate_content(prompt)
        else:
            response = self._model.generate_content(prompt, generation_config=generation_config)

        metadata = getattr(response, "usage_metadata", None)
        usage = {"tokens_used": getattr(metadata, "total_token_count", 0) or 0, "model": self.model_name}
        logger.debug(f"{operation}: {usage['tokens_used']} tokens")
        return response.text, usage

    def _structured(self, operation: str, prompt: str, fallback: Dict[str, Any]) -> AIResponse:
        start = time.perf_counter()
        try:
            text, usage = self._generate(operation, prompt)
        except Exception as e:
            logger.error(f"{operation} failed: {e}")
            return AIResponse(
                success=False,
                error=str(e),
                usage={"tokens_used": 0, "processing_time": time.perf_counter() - start, "model": self.model_name},
            )

        usage["processing_time"] = time.perf_counter() - start
        return AIResponse(success=True, data=parse_json_response(text, fallback), usage=usage)

    # =========================================================================
    # ANALYSES
    # =========================================================================

    def analyze_business_idea(self, idea: str, target_market: str, context: str = "") -> AIResponse:
        prompt = (
            "Assess the following business idea.\n\n"
            f"Business idea: {idea}\n"
            f"Target market: {target_market}\n"
            f"Additional context: {context or 'None provided'}\n\n"
            "Reply with a JSON object only, using the keys: viability_score (1-10), "
            "market_potential {size, growth, competition}, strengths, challenges, "
            "recommendations, similar_companies, revenue_models, summary."
        )
        return self._structured("Business idea analysis", prompt, IDEA_FALLBACK)

    def research_competitors(self, idea: str, industry: str, target_market: str) -> AIResponse:
        prompt = (
            "Research the competitive landscape for this business.\n\n"
            f"Business idea: {idea}\n"
            f"Industry: {industry}\n"
            f"Target market: {target_market}\n\n"
            "Reply with a JSON object only, using the keys: direct_competitors "
            "[{name, description, strengths, weaknesses, market_share, pricing_model}], "
            "indirect_competitors [{name, description, relevance}], "
            "market_overview {size, growth, trends}, opportunities, recommendations, "
            "competitive_advantages."
        )
        return self._structured("Competitor research", prompt, COMPETITOR_FALLBACK)

    def generate_swot_analysis(self, idea: str, market_context: str) -> AIResponse:
        prompt = (
            "Write a SWOT analysis with 3-5 specific points per quadrant.\n\n"
            f"Business idea: {idea}\n"
            f"Market context: {market_context}\n\n"
            "Reply with a JSON object only, using the keys: strengths and weaknesses "
            "[{point, description, impact}], opportunities [{point, description, timeframe}], "
            "threats [{point, description, likelihood}], strategic_recommendations."
        )
        return self._structured("SWOT analysis", prompt, SWOT_FALLBACK)

    def chat(self, message: str, context: Optional[Dict[str, Any]] = None) -> AIResponse:
        """Free-form advice; the reply text is returned under ``data['message']``."""
        prompt = (
            f"{ADVISOR_PERSONA}\n\n"
            f"Context: {json.dumps(context, default=str) if context else 'No additional context provided'}\n\n"
            f"User message: {message}"
        )
        start = time.perf_counter()
        try:
            text, usage = self._generate(
                "Advisor chat",
                prompt,
                generation_config={**GENERATION_CONFIG, "temperature": CHAT_TEMPERATURE},
            )
        except Exception as e:
            logger.error(f"Advisor chat failed: {e}")
            return AIResponse(
                success=False,
                error=str(e),
                usage={"tokens_used": 0, "processing_time": time.perf_counter() - start, "model": self.model_name},
            )

        usage["processing_time"] = time.perf_counter() - start
        return AIResponse(success=True, data={"message": text}, usage=usage)
