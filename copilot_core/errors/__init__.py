# =============================================================================
# copilot_core/errors/__init__.py
# Centralized Error Handling for Startup Copilot
# =============================================================================

from .exceptions import (
    CopilotError,
    ErrorKind,
    StoreError,
    NotConfiguredError,
    UnavailableError,
    PermissionDeniedError,
    UnauthenticatedError,
    NetworkError,
    SessionInvalidError,
    QuotaExceededError,
    UnknownStoreError,
    DocumentNotFoundError,
    ValidationError,
    ConfigurationError,
)

from .classification import (
    BackendErrorInfo,
    describe_error,
    classify_error,
    recovery_signature,
    to_store_error,
)

from .handlers import (
    handle_error,
    report_store_error,
    user_message_for,
    safe_execute,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "CopilotError",
    "ErrorKind",
    "StoreError",
    "NotConfiguredError",
    "UnavailableError",
    "PermissionDeniedError",
    "UnauthenticatedError",
    "NetworkError",
    "SessionInvalidError",
    "QuotaExceededError",
    "UnknownStoreError",
    "DocumentNotFoundError",
    "ValidationError",
    "ConfigurationError",
    # Classification
    "BackendErrorInfo",
    "describe_error",
    "classify_error",
    "recovery_signature",
    "to_store_error",
    # Handlers
    "handle_error",
    "report_store_error",
    "user_message_for",
    "safe_execute",
    "ErrorContext",
]
