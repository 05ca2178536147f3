# =============================================================================
# copilot_core/state/session.py
# Streamlit Session State
# =============================================================================

import streamlit as st

# Owner id used with the in-memory backend, which has no authentication
LOCAL_USER_ID = "local-founder"

# Central registry for session-state keys used across the app.
SESSION_DEFAULTS = {
    "user": None,               # Principal of the signed-in user
    "auth": None,               # AuthGateway owned by this browser session
    "debug_mode": False,
}


def init_state():
    """Initialize session state with defaults."""
    for k, v in SESSION_DEFAULTS.items():
        if k not in st.session_state:
            st.session_state[k] = v


def current_user_id():
    """uid of the signed-in user, or None."""
    user = st.session_state.get("user")
    return user.uid if user is not None else None
