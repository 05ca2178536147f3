# =============================================================================
# copilot_core/errors/classification.py
# Backend Error Classification
# =============================================================================
"""
Single place where heterogeneous backend failures are mapped onto the closed
ErrorKind taxonomy.

Classification is substring/code based, never exception-type based (apart
from recognising httpx transport exceptions and already-typed StoreErrors).
Rules, in precedence order:

    1. code "not-configured"                                -> NOT_CONFIGURED
    2. HTTP 400, "Bad Request", "Unknown SID", "gsessionid"  -> SESSION_INVALID
    3. permission codes / HTTP 403                           -> PERMISSION_DENIED
    4. auth codes / HTTP 401                                 -> UNAUTHENTICATED
    5. quota codes / HTTP 429                                -> QUOTA_EXCEEDED
    6. "unavailable", timeouts, HTTP 502/503/504             -> UNAVAILABLE
    7. network codes or "network" in the message             -> NETWORK_ERROR
    8. anything else                                         -> UNKNOWN

A session marker wins over every other rule, so a message containing both
"Unknown SID" and "network" is a session failure.

The ConnectionManager does not dispatch on this taxonomy; it uses the
narrower ``recovery_signature`` so that a network marker is honoured even
when a permission or quota code came with it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

import httpx

from .exceptions import (
    ErrorKind,
    StoreError,
    STORE_ERRORS_BY_KIND,
)


SESSION_MARKERS = ("Bad Request", "Unknown SID", "gsessionid", "HTTP 400")

PERMISSION_CODES = {"permission-denied", "42501", "pgrst302"}
UNAUTHENTICATED_CODES = {"unauthenticated", "pgrst301", "pgrst303"}
QUOTA_CODES = {"resource-exhausted", "quota-exceeded", "over_request_rate_limit"}
UNAVAILABLE_CODES = {"unavailable", "deadline-exceeded", "service-unavailable", "pgrst000"}
NETWORK_CODES = {"network-error", "network-request-failed"}


@dataclass(frozen=True)
class BackendErrorInfo:
    """Structured view of a backend failure: code + message (+ HTTP status)."""
    code: Optional[str] = None
    message: str = ""
    status: Optional[int] = None

    @property
    def normalized_code(self) -> str:
        return (self.code or "").strip().lower()


def describe_error(error: BaseException) -> BackendErrorInfo:
    """
    Extract (code, message, status) from an arbitrary backend exception.

    httpx timeouts are reported as "deadline-exceeded" and other httpx
    transport failures as "network-error" so that explicit per-call timeouts
    and connectivity drops feed the same taxonomy as PostgREST errors.
    """
    if isinstance(error, httpx.TimeoutException):
        return BackendErrorInfo(code="deadline-exceeded", message=str(error) or "request timed out")
    if isinstance(error, httpx.TransportError):
        return BackendErrorInfo(code="network-error", message=str(error) or "network error")

    code = getattr(error, "code", None)
    message = getattr(error, "message", None) or str(error)
    status = getattr(error, "status", None) or getattr(error, "status_code", None)

    if isinstance(code, int):
        status = status or code
    if isinstance(status, str) and status.isdigit():
        status = int(status)
    if not isinstance(status, int):
        status = None

    return BackendErrorInfo(
        code=str(code) if code is not None else None,
        message=str(message),
        status=status,
    )


def _has_session_marker(info: BackendErrorInfo) -> bool:
    return (
        info.normalized_code in (ErrorKind.SESSION_INVALID.value, "400")
        or info.status == 400
        or any(marker in (info.message or "") for marker in SESSION_MARKERS)
    )


def _transient_kind(info: BackendErrorInfo) -> Optional[ErrorKind]:
    code = info.normalized_code
    if code in UNAVAILABLE_CODES or info.status in (502, 503, 504):
        return ErrorKind.UNAVAILABLE
    if code in NETWORK_CODES or "network" in (info.message or "").lower():
        return ErrorKind.NETWORK_ERROR
    return None


def classify_info(info: BackendErrorInfo) -> ErrorKind:
    """Map a structured backend failure onto the closed taxonomy."""
    code = info.normalized_code
    status = info.status

    if code == ErrorKind.NOT_CONFIGURED.value:
        return ErrorKind.NOT_CONFIGURED

    if _has_session_marker(info):
        return ErrorKind.SESSION_INVALID

    if code in PERMISSION_CODES or status == 403:
        return ErrorKind.PERMISSION_DENIED

    if code in UNAUTHENTICATED_CODES or status == 401:
        return ErrorKind.UNAUTHENTICATED

    if code in QUOTA_CODES or status == 429:
        return ErrorKind.QUOTA_EXCEEDED

    return _transient_kind(info) or ErrorKind.UNKNOWN


def classify_error(error: Union[BaseException, BackendErrorInfo]) -> ErrorKind:
    """
    Classify an exception (or pre-extracted info) into an ErrorKind.

    Already-typed StoreErrors keep their kind.
    """
    if isinstance(error, StoreError):
        return error.kind
    if isinstance(error, BackendErrorInfo):
        return classify_info(error)
    return classify_info(describe_error(error))


def to_store_error(
    error: BaseException,
    operation: Optional[str] = None,
    collection: Optional[str] = None,
) -> StoreError:
    """
    Wrap any exception into the matching StoreError subclass.

    StoreErrors pass through unchanged.
    """
    if isinstance(error, StoreError):
        return error

    info = describe_error(error)
    kind = classify_info(info)
    error_cls = STORE_ERRORS_BY_KIND[kind]

    where = f" during {operation}" if operation else ""
    store_error = error_cls(
        f"{kind.value}{where}: {info.message}",
        operation=operation,
        collection=collection,
        backend_code=info.code,
    )
    store_error.__cause__ = error
    return store_error


def recovery_signature(error: Union[BaseException, BackendErrorInfo]) -> Optional[ErrorKind]:
    """
    Which recovery, if any, a failure calls for.

    Only two signatures are recognised, checked in this order:

        1. session markers (HTTP 400, "Bad Request", "Unknown SID",
           "gsessionid")                               -> SESSION_INVALID
        2. unavailable codes, HTTP 502/503/504, network
           codes or "network" in the message           -> UNAVAILABLE / NETWORK_ERROR

    Anything else returns None. Unlike ``classify_info`` the permission,
    auth and quota rules do not run first, so "permission-denied" with the
    message "network request blocked" still calls for a retry.
    """
    if isinstance(error, StoreError):
        if error.kind in (ErrorKind.SESSION_INVALID, ErrorKind.UNAVAILABLE, ErrorKind.NETWORK_ERROR):
            return error.kind
        cause = error.__cause__
        if cause is not None and not isinstance(cause, StoreError):
            info = describe_error(cause)
        else:
            info = BackendErrorInfo(code=error.details.get("backend_code"), message=error.message)
    elif isinstance(error, BackendErrorInfo):
        info = error
    else:
        info = describe_error(error)

    if _has_session_marker(info):
        return ErrorKind.SESSION_INVALID
    return _transient_kind(info)
