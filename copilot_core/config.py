# =============================================================================
# copilot_core/config.py
# Settings for Startup Copilot
# =============================================================================
"""
Settings are read from environment variables first and fall back to
Streamlit secrets:

    # .streamlit/secrets.toml
    [supabase]
    url = "https://your-project.supabase.co"
    key = "your-anon-key"

    [gemini]
    api_key = "..."

A missing or placeholder Supabase URL/key does not raise: the store is
simply reported as not configured and every store operation fails with
NotConfiguredError.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import streamlit as st

from copilot_core.errors import ConfigurationError
from copilot_core.logging import get_logger

logger = get_logger(__name__)


# Settings that must all be present and non-placeholder for the store to run
REQUIRED_STORE_SETTINGS = ("supabase_url", "supabase_key")

PLACEHOLDER_MARKERS = ("placeholder", "your-project", "your-anon-key", "demo-", "changeme")

BACKENDS = ("supabase", "memory")


def is_placeholder(value: Optional[str]) -> bool:
    """True for empty values or values that still hold template text."""
    if value is None or not str(value).strip():
        return True
    lowered = str(value).lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)


@dataclass
class Settings:
    """Runtime configuration for the persistence core."""
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    backend: str = "supabase"
    health_table: str = "projects"

    # Explicit per-call deadline for backend requests (seconds)
    request_timeout: float = 10.0

    # Retry policy
    max_retries: int = 3
    retry_delay: float = 1.0
    backoff_multiplier: float = 2.0

    # Session recovery policy
    max_session_recovery_attempts: int = 3
    session_cycle_delay: float = 1.0
    reload_delay: float = 2.0

    # AI advisor
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-1.5-flash"

    log_level: str = "INFO"
    log_to_file: bool = False

    extra: Dict[str, Any] = field(default_factory=dict)

    def missing_store_settings(self) -> List[str]:
        """Names of required store settings that are absent or placeholders."""
        if self.backend == "memory":
            return []
        return [name for name in REQUIRED_STORE_SETTINGS if is_placeholder(getattr(self, name))]

    @property
    def is_store_configured(self) -> bool:
        return not self.missing_store_settings()

    @property
    def is_ai_configured(self) -> bool:
        return not is_placeholder(self.gemini_api_key)


def _read_streamlit_secrets() -> Mapping[str, Any]:
    """Return st.secrets as a plain mapping, or {} when no secrets file exists."""
    try:
        return {key: st.secrets[key] for key in st.secrets.keys()}
    except (FileNotFoundError, KeyError):
        return {}


def _as_float(raw: Optional[str], name: str, default: float) -> float:
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", config_key=name, expected_type="float")


def _as_int(raw: Optional[str], name: str, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}", config_key=name, expected_type="int")


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    secrets: Optional[Mapping[str, Any]] = None,
) -> Settings:
    """
    Build Settings from the environment and Streamlit secrets.

    Args:
        environ: Mapping to read variables from (default: os.environ)
        secrets: Secrets mapping (default: st.secrets, if a secrets file exists)

    Returns:
        Settings instance; check ``missing_store_settings()`` before use
    """
    env = os.environ if environ is None else environ
    secrets = _read_streamlit_secrets() if secrets is None else secrets

    supabase_secrets = secrets.get("supabase", {}) or {}
    gemini_secrets = secrets.get("gemini", {}) or {}

    backend = env.get("COPILOT_BACKEND", "supabase").strip().lower()
    if backend not in BACKENDS:
        raise ConfigurationError(
            f"Unknown backend {backend!r}; expected one of {', '.join(BACKENDS)}",
            config_key="COPILOT_BACKEND",
        )

    settings = Settings(
        supabase_url=env.get("SUPABASE_URL") or supabase_secrets.get("url"),
        supabase_key=env.get("SUPABASE_KEY") or supabase_secrets.get("key"),
        backend=backend,
        health_table=env.get("COPILOT_HEALTH_TABLE", "projects"),
        request_timeout=_as_float(env.get("COPILOT_REQUEST_TIMEOUT"), "COPILOT_REQUEST_TIMEOUT", 10.0),
        max_retries=_as_int(env.get("COPILOT_MAX_RETRIES"), "COPILOT_MAX_RETRIES", 3),
        retry_delay=_as_float(env.get("COPILOT_RETRY_DELAY"), "COPILOT_RETRY_DELAY", 1.0),
        backoff_multiplier=_as_float(env.get("COPILOT_BACKOFF_MULTIPLIER"), "COPILOT_BACKOFF_MULTIPLIER", 2.0),
        max_session_recovery_attempts=_as_int(
            env.get("COPILOT_MAX_SESSION_RECOVERY"), "COPILOT_MAX_SESSION_RECOVERY", 3
        ),
        session_cycle_delay=_as_float(env.get("COPILOT_SESSION_CYCLE_DELAY"), "COPILOT_SESSION_CYCLE_DELAY", 1.0),
        reload_delay=_as_float(env.get("COPILOT_RELOAD_DELAY"), "COPILOT_RELOAD_DELAY", 2.0),
        gemini_api_key=env.get("GOOGLE_GEMINI_API_KEY") or gemini_secrets.get("api_key"),
        gemini_model=env.get("GEMINI_MODEL") or gemini_secrets.get("model") or "gemini-1.5-flash",
        log_level=env.get("COPILOT_LOG_LEVEL") or env.get("LOG_LEVEL") or "INFO",
        log_to_file=env.get("COPILOT_LOG_TO_FILE", "").lower() in ("1", "true", "yes"),
    )

    if settings.max_retries < 0:
        raise ConfigurationError("COPILOT_MAX_RETRIES must be >= 0", config_key="COPILOT_MAX_RETRIES")

    missing = settings.missing_store_settings()
    if missing:
        logger.warning(
            f"Store configuration incomplete. Missing or placeholder values for: {', '.join(missing)}. "
            "Persistence is disabled."
        )

    return settings
