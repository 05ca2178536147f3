# =============================================================================
# copilot_core/errors/exceptions.py
# Custom Exception Hierarchy for Startup Copilot
# =============================================================================

from enum import Enum
from typing import Optional, Dict, Any


class CopilotError(Exception):
    """
    Base exception for all Startup Copilot errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "STORE_UNAVAILABLE")
        details: Additional context as a dictionary
        recoverable: Whether the error can be recovered from
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "COPILOT_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# STORE ERROR TAXONOMY
# =============================================================================

class ErrorKind(Enum):
    """Closed set of failure kinds surfaced by the persistence layer."""
    NOT_CONFIGURED = "not-configured"
    UNAVAILABLE = "unavailable"
    PERMISSION_DENIED = "permission-denied"
    UNAUTHENTICATED = "unauthenticated"
    NETWORK_ERROR = "network-error"
    SESSION_INVALID = "session-invalid"
    QUOTA_EXCEEDED = "quota-exceeded"
    UNKNOWN = "unknown"

    @property
    def is_transient(self) -> bool:
        """Kinds the ConnectionManager may retry before surfacing."""
        return self in (ErrorKind.UNAVAILABLE, ErrorKind.NETWORK_ERROR)


class StoreError(CopilotError):
    """
    Typed failure raised by the DocumentStore and its collaborators.

    Every backend exception caught by the store is re-raised as exactly one
    subclass of this error; ``kind`` identifies which.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    retryable: bool = False

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection: Optional[str] = None,
        backend_code: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        if collection:
            details["collection"] = collection
        if backend_code:
            details["backend_code"] = backend_code

        kwargs.setdefault("recoverable", self.retryable)
        super().__init__(
            message=message,
            code=f"STORE_{self.kind.name}",
            details=details,
            **kwargs,
        )


class NotConfiguredError(StoreError):
    """Backing store or auth was never initialized (missing/placeholder credentials)"""
    kind = ErrorKind.NOT_CONFIGURED


class UnavailableError(StoreError):
    """Transient backend outage or timeout"""
    kind = ErrorKind.UNAVAILABLE
    retryable = True


class PermissionDeniedError(StoreError):
    """Caller lacks rights on the document or collection"""
    kind = ErrorKind.PERMISSION_DENIED


class UnauthenticatedError(StoreError):
    """Caller's session or token is invalid"""
    kind = ErrorKind.UNAUTHENTICATED


class NetworkError(StoreError):
    """Local connectivity problem"""
    kind = ErrorKind.NETWORK_ERROR
    retryable = True


class SessionInvalidError(StoreError):
    """Backend transport session is corrupted and must be re-established"""
    kind = ErrorKind.SESSION_INVALID


class QuotaExceededError(StoreError):
    """Rate or usage limit hit"""
    kind = ErrorKind.QUOTA_EXCEEDED


class UnknownStoreError(StoreError):
    """Anything the classifier does not recognise"""
    kind = ErrorKind.UNKNOWN


STORE_ERRORS_BY_KIND = {
    cls.kind: cls
    for cls in (
        NotConfiguredError,
        UnavailableError,
        PermissionDeniedError,
        UnauthenticatedError,
        NetworkError,
        SessionInvalidError,
        QuotaExceededError,
        UnknownStoreError,
    )
}


# =============================================================================
# DOCUMENT EXCEPTIONS
# =============================================================================

class DocumentNotFoundError(CopilotError):
    """Raised when a write targets a document id that does not exist"""

    def __init__(self, collection: str, document_id: str, **kwargs):
        details = kwargs.pop("details", {})
        details["collection"] = collection
        details["document_id"] = document_id

        super().__init__(
            message=f"Document '{document_id}' not found in '{collection}'",
            code="DOC_404",
            details=details,
            **kwargs,
        )
        self.collection = collection
        self.document_id = document_id


class ValidationError(CopilotError):
    """Raised when a document violates a data-model invariant"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value

        super().__init__(
            message=message,
            code="DOC_422",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(CopilotError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
