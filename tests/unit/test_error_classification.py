# =============================================================================
# tests/unit/test_error_classification.py
# Unit Tests for Backend Error Classification
# =============================================================================

import httpx
import pytest

from copilot_core.errors import (
    BackendErrorInfo,
    ErrorKind,
    NetworkError,
    SessionInvalidError,
    UnavailableError,
    UnknownStoreError,
    classify_error,
    describe_error,
    recovery_signature,
    to_store_error,
)


class TestClassifyByCode:
    """Backend codes map onto the closed taxonomy"""

    @pytest.mark.parametrize("code, expected", [
        ("not-configured", ErrorKind.NOT_CONFIGURED),
        ("permission-denied", ErrorKind.PERMISSION_DENIED),
        ("42501", ErrorKind.PERMISSION_DENIED),
        ("PGRST301", ErrorKind.UNAUTHENTICATED),
        ("unauthenticated", ErrorKind.UNAUTHENTICATED),
        ("resource-exhausted", ErrorKind.QUOTA_EXCEEDED),
        ("unavailable", ErrorKind.UNAVAILABLE),
        ("deadline-exceeded", ErrorKind.UNAVAILABLE),
        ("network-request-failed", ErrorKind.NETWORK_ERROR),
        ("23505", ErrorKind.UNKNOWN),
    ])
    def test_code_mapping(self, code, expected):
        assert classify_error(BackendErrorInfo(code=code, message="boom")) is expected

    @pytest.mark.parametrize("status, expected", [
        (400, ErrorKind.SESSION_INVALID),
        (401, ErrorKind.UNAUTHENTICATED),
        (403, ErrorKind.PERMISSION_DENIED),
        (429, ErrorKind.QUOTA_EXCEEDED),
        (503, ErrorKind.UNAVAILABLE),
        (500, ErrorKind.UNKNOWN),
    ])
    def test_status_mapping(self, status, expected):
        assert classify_error(BackendErrorInfo(status=status, message="boom")) is expected


class TestClassifyByMessage:
    """Message markers and their precedence"""

    @pytest.mark.parametrize("message", [
        "Bad Request",
        "Unknown SID for this listen stream",
        "channel gsessionid expired",
        "WebChannel transport errored: HTTP 400",
    ])
    def test_session_markers(self, message):
        assert classify_error(BackendErrorInfo(message=message)) is ErrorKind.SESSION_INVALID

    def test_session_marker_wins_over_network(self):
        """A message carrying both markers is a session failure"""
        info = BackendErrorInfo(message="Network request failed: Unknown SID")
        assert classify_error(info) is ErrorKind.SESSION_INVALID

    def test_session_marker_wins_over_code(self):
        info = BackendErrorInfo(code="unavailable", message="Bad Request")
        assert classify_error(info) is ErrorKind.SESSION_INVALID

    def test_network_in_message_is_case_insensitive(self):
        assert classify_error(BackendErrorInfo(message="Network timeout")) is ErrorKind.NETWORK_ERROR
        assert classify_error(BackendErrorInfo(message="a network blip")) is ErrorKind.NETWORK_ERROR

    def test_unrecognised_is_unknown(self):
        assert classify_error(BackendErrorInfo(message="something odd")) is ErrorKind.UNKNOWN


class TestDescribeError:
    """Extraction from concrete exceptions"""

    def test_httpx_timeout_is_deadline_exceeded(self):
        info = describe_error(httpx.ReadTimeout("timed out"))
        assert info.code == "deadline-exceeded"
        assert classify_error(httpx.ReadTimeout("timed out")) is ErrorKind.UNAVAILABLE

    def test_httpx_connect_error_is_network(self):
        assert classify_error(httpx.ConnectError("refused")) is ErrorKind.NETWORK_ERROR

    def test_code_and_status_attributes(self, backend_failure):
        info = describe_error(backend_failure("denied", code="42501", status=403))
        assert info.code == "42501"
        assert info.status == 403
        assert info.message == "denied"

    def test_integer_code_is_treated_as_status(self, backend_failure):
        info = describe_error(backend_failure("service down", code=503))
        assert info.status == 503
        assert classify_error(backend_failure("service down", code=503)) is ErrorKind.UNAVAILABLE

    def test_plain_exception_uses_str(self):
        info = describe_error(RuntimeError("plain failure"))
        assert info.code is None
        assert info.message == "plain failure"


class TestToStoreError:
    """Wrapping into the typed hierarchy"""

    def test_wraps_with_cause_and_context(self, backend_failure):
        original = backend_failure("Unknown SID", code="unknown")
        error = to_store_error(original, operation="get_many", collection="projects")

        assert isinstance(error, SessionInvalidError)
        assert error.kind is ErrorKind.SESSION_INVALID
        assert error.__cause__ is original
        assert error.details["operation"] == "get_many"
        assert error.details["collection"] == "projects"
        assert error.code == "STORE_SESSION_INVALID"

    def test_store_error_passes_through(self):
        error = NetworkError("offline")
        assert to_store_error(error) is error

    def test_transient_errors_are_recoverable(self):
        assert to_store_error(httpx.ConnectError("down")).recoverable
        assert isinstance(to_store_error(httpx.ConnectTimeout("slow")), UnavailableError)
        assert not to_store_error(RuntimeError("odd")).recoverable

    def test_unknown_kind(self):
        assert isinstance(to_store_error(ValueError("odd")), UnknownStoreError)


class TestRecoverySignature:
    """Only session and unavailable/network signatures call for recovery"""

    @pytest.mark.parametrize("info, expected", [
        (BackendErrorInfo(message="Unknown SID"), ErrorKind.SESSION_INVALID),
        (BackendErrorInfo(code="permission-denied", message="Bad Request"), ErrorKind.SESSION_INVALID),
        (BackendErrorInfo(code="unavailable"), ErrorKind.UNAVAILABLE),
        (BackendErrorInfo(code="permission-denied", message="network request blocked"), ErrorKind.NETWORK_ERROR),
        (BackendErrorInfo(code="resource-exhausted", message="network quota"), ErrorKind.NETWORK_ERROR),
        (BackendErrorInfo(code="permission-denied", message="denied"), None),
        (BackendErrorInfo(message="something odd"), None),
    ])
    def test_signatures(self, info, expected):
        assert recovery_signature(info) is expected

    def test_typed_error_is_matched_on_its_cause(self, backend_failure):
        error = to_store_error(backend_failure("network request blocked", code="permission-denied"))
        assert error.kind is ErrorKind.PERMISSION_DENIED
        assert recovery_signature(error) is ErrorKind.NETWORK_ERROR

    def test_typed_transient_error_keeps_its_kind(self):
        assert recovery_signature(UnavailableError("down")) is ErrorKind.UNAVAILABLE
        assert recovery_signature(SessionInvalidError("stale")) is ErrorKind.SESSION_INVALID
