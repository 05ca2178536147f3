# =============================================================================
# copilot_core/state/__init__.py
# Streamlit Session State
# =============================================================================

from .session import SESSION_DEFAULTS, LOCAL_USER_ID, init_state, current_user_id

__all__ = ["SESSION_DEFAULTS", "LOCAL_USER_ID", "init_state", "current_user_id"]
