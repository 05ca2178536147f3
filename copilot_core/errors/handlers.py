# =============================================================================
# copilot_core/errors/handlers.py
# Streamlit Error Reporting for Startup Copilot
# =============================================================================
"""
UI-side error reporting.

Typed store errors are caught once, at the page, and mapped to a fixed
user-facing message per ErrorKind. SESSION_INVALID additionally reruns the
page after a short pause so the fresh run picks up a recovered connection.
"""

from __future__ import annotations
import time
import traceback
from typing import Callable, Optional, TypeVar
import streamlit as st

from copilot_core.logging import get_logger
from .exceptions import CopilotError, ErrorKind, StoreError

logger = get_logger(__name__)

T = TypeVar("T")

# Pause before rerunning the page after a session-invalid error (seconds)
SESSION_RELOAD_DELAY = 2.0

USER_MESSAGES = {
    ErrorKind.SESSION_INVALID: "Session expired. Refreshing page to restore connection...",
    ErrorKind.NETWORK_ERROR: "Network connection error. Please check your internet connection and try again.",
    ErrorKind.UNAVAILABLE: "The database service is temporarily unavailable. Please try again in a moment.",
    ErrorKind.PERMISSION_DENIED: "Access denied. Please check your authentication and permissions.",
    ErrorKind.UNAUTHENTICATED: "Authentication required. Please sign in again.",
    ErrorKind.QUOTA_EXCEEDED: "Service quota exceeded. Please try again later.",
    ErrorKind.NOT_CONFIGURED: "The database is not properly configured. Please check your environment variables.",
    ErrorKind.UNKNOWN: "An error occurred while loading your data. Please try again.",
}


def user_message_for(kind: ErrorKind) -> str:
    return USER_MESSAGES.get(kind, USER_MESSAGES[ErrorKind.UNKNOWN])


def handle_error(
    error: BaseException,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Log ``error`` and show it on the page.

    CopilotErrors carry their own code, details and recoverability; anything
    else is reported as UNKNOWN with its traceback attached to the details.

    Args:
        error: The exception being reported
        show_user_message: Render st.error on the page
        log_error: Write the error to the log
        user_message: Text shown instead of the error's own message
    """
    if isinstance(error, CopilotError):
        report = error.to_dict()
    else:
        report = {
            "error_type": type(error).__name__,
            "code": "UNKNOWN",
            "message": str(error),
            "details": {"traceback": traceback.format_exc()},
            "recoverable": True,
        }
    shown = user_message or report["message"]

    if log_error:
        logger.error(f"[{report['code']}] {report['message']}", extra={"details": report["details"]})

    if not show_user_message:
        return

    if report["recoverable"]:
        st.error(f"Error: {shown}")
    else:
        st.error(f"Critical Error: {shown}. Please contact support.")

    if report["details"] and st.session_state.get("debug_mode", False):
        with st.expander("Error Details", expanded=False):
            st.json(report)


def report_store_error(
    error: StoreError,
    reload_delay: float = SESSION_RELOAD_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Show the per-kind message for a store error.

    Returns True when the page was asked to rerun (SESSION_INVALID only).
    """
    handle_error(error, user_message=user_message_for(error.kind))

    if error.kind is not ErrorKind.SESSION_INVALID:
        return False

    logger.info(f"Session invalid; rerunning page in {reload_delay:.0f}s")
    sleep(reload_delay)
    st.rerun()
    return True


def _report(error: Exception, fallback_message: Optional[str] = None) -> None:
    if isinstance(error, StoreError):
        report_store_error(error)
    elif isinstance(error, CopilotError):
        handle_error(error)
    else:
        handle_error(error, user_message=fallback_message)


def safe_execute(
    func: Callable[..., T],
    *args,
    default: Optional[T] = None,
    error_message: Optional[str] = None,
    reraise: bool = False,
    **kwargs,
) -> Optional[T]:
    """
    Call ``func`` and report any failure on the page instead of raising.

    Usage:
        projects = safe_execute(projects_service.get_projects_by_user, uid, default=[])
    """
    try:
        return func(*args, **kwargs)
    except Exception as e:
        _report(e, error_message)
        if reraise:
            raise
        return default


class ErrorContext:
    """
    Reports failures inside a block; suppresses them when ``recoverable``.

    Usage:
        with ErrorContext("Creating project"):
            projects_service.create_project(user_id=uid, name=name)
    """

    def __init__(
        self,
        operation: str,
        recoverable: bool = True,
        show_success: bool = False,
        success_message: Optional[str] = None,
    ):
        self.operation = operation
        self.recoverable = recoverable
        self.show_success = show_success
        self.success_message = success_message

    def __enter__(self) -> ErrorContext:
        logger.debug(f"{self.operation}: started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is None:
            logger.debug(f"{self.operation}: completed")
            if self.show_success:
                st.success(self.success_message or f"{self.operation} completed")
            return False

        # Streamlit's rerun/stop signals are not Exceptions and must pass through
        if not isinstance(exc_val, Exception):
            return False

        _report(exc_val, f"Error during: {self.operation}")
        return self.recoverable
