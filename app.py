# =============================================================================
# app.py
# Startup Copilot - Streamlit Dashboard
# =============================================================================
"""
Entry point: streamlit run app.py

Shows the signed-in founder's project statistics and project list, a form
to start a new project and the AI advisor. Store failures are reported with
a user-facing message; session-invalid failures rerun the page.
"""

from __future__ import annotations
import streamlit as st

from copilot_core.auth import Principal
from copilot_core.bootstrap import AppContainer, build_container
from copilot_core.config import load_settings
from copilot_core.data import bind_access_token
from copilot_core.errors import ErrorContext, StoreError, handle_error, report_store_error, safe_execute
from copilot_core.logging import get_logger, setup_logging
from copilot_core.models import ProjectStats, ProjectType
from copilot_core.services import ProjectService
from copilot_core.state import LOCAL_USER_ID, current_user_id, init_state

logger = get_logger(__name__)

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="Startup Copilot",
    page_icon="🚀",
    layout="wide",
)


def _reload_app() -> None:
    """Last-resort reload: drop the cached container so the next run rebuilds it."""
    logger.warning("Reloading application state")
    st.cache_resource.clear()


@st.cache_resource
def get_container() -> AppContainer:
    settings = load_settings()
    setup_logging(level=settings.log_level, log_to_file=settings.log_to_file)
    return build_container(settings, reload=_reload_app)


init_state()
container = get_container()

if st.session_state.auth is None:
    st.session_state.auth = container.new_auth_gateway()
auth = st.session_state.auth

# Data requests on this run act for this browser session's user only
access_token = None
if auth.is_configured and st.session_state.user is not None:
    try:
        access_token = auth.access_token()
    except StoreError as e:
        report_store_error(e)
        st.stop()
    if access_token is None:
        st.session_state.user = None
bind_access_token(access_token)

# ============================================================================
# SIDEBAR - CONNECTION AND ACCOUNT
# ============================================================================
with st.sidebar:
    st.header("Connection")
    status = container.connection.get_status_display()
    if status["is_online"]:
        st.success(f"Status: {status['status']}")
    else:
        st.warning(f"Status: {status['status']}")
    st.caption(f"Retries used: {status['retry_attempts']}/{status['max_retries']}")
    if status["status"] == "failed" and st.button("Reconnect"):
        try:
            container.connection.enable_online_mode()
        except Exception as e:
            handle_error(e, user_message="Reconnect failed")
        st.rerun()

    st.header("Account")
    if container.settings.backend == "memory":
        st.session_state.user = Principal(uid=LOCAL_USER_ID, display_name="Local founder")
        st.caption("In-memory backend; working as a local user.")
    elif not auth.is_configured:
        st.caption("Authentication is not configured. Set SUPABASE_URL and SUPABASE_KEY.")
    elif st.session_state.user is None:
        with st.form("sign_in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Sign in"):
                try:
                    st.session_state.user = auth.sign_in(email, password)
                    st.rerun()
                except StoreError as e:
                    report_store_error(e)
    else:
        user = st.session_state.user
        st.write(user.display_name or user.email or user.uid)
        if st.button("Sign out"):
            try:
                auth.sign_out()
            except StoreError as e:
                report_store_error(e)
            st.session_state.user = None
            st.rerun()

# ============================================================================
# DASHBOARD
# ============================================================================
st.title("🚀 Startup Copilot")

uid = current_user_id()
if uid is None:
    st.info("Sign in to see your projects.")
    st.stop()

if not container.store.is_configured:
    st.error("The database is not properly configured. Please check your environment variables.")
    st.stop()

projects = safe_execute(container.projects.get_projects_by_user, uid)
if projects is None:
    st.stop()

stats = ProjectStats.from_projects(projects)

col1, col2, col3, col4 = st.columns(4)
col1.metric("Total projects", stats.total_projects)
col2.metric("Completed", stats.completed_projects, f"{stats.share(stats.completed_projects)}%")
col3.metric("In progress", stats.in_progress_projects)
col4.metric("Drafts", stats.draft_projects)

st.subheader("Projects")
if projects:
    st.dataframe(ProjectService.projects_frame(projects), use_container_width=True, hide_index=True)
else:
    st.caption("No projects yet. Start one below.")

with st.expander("New project", expanded=not projects):
    with st.form("new_project", clear_on_submit=True):
        name = st.text_input("Name")
        description = st.text_area("Description")
        project_type = st.selectbox(
            "Type",
            list(ProjectType),
            format_func=lambda t: t.value.replace("-", " ").title(),
        )
        industry = st.text_input("Industry")
        tags = st.text_input("Tags (comma separated)")
        if st.form_submit_button("Create project"):
            created = None
            with ErrorContext("Creating project"):
                created = container.projects.create_project(
                    user_id=uid,
                    name=name,
                    description=description,
                    type=project_type,
                    tags=[t.strip() for t in tags.split(",") if t.strip()],
                    industry=industry,
                )
            if created:
                st.rerun()

# ============================================================================
# AI ADVISOR
# ============================================================================
st.subheader("AI Advisor")
if not container.advisor.is_configured:
    st.caption("Set GOOGLE_GEMINI_API_KEY to enable the advisor.")
else:
    with st.form("advisor"):
        idea = st.text_area("Business idea")
        market = st.text_input("Target market")
        if st.form_submit_button("Analyze idea"):
            with st.spinner("Analyzing..."):
                result = container.advisor.analyze_business_idea(idea, market)
            if result.success:
                st.json(result.data)
                st.caption(f"{result.usage.get('tokens_used', 0)} tokens")
            else:
                st.error(f"Analysis failed: {result.error}")
