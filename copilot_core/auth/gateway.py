# =============================================================================
# copilot_core/auth/gateway.py
# Supabase Auth Gateway
# =============================================================================
"""
Thin wrapper over Supabase Auth.

The rest of the core only needs a stable principal id (``uid``) plus the
email and display name; it gets them from ``current_user()`` or from an
``on_auth_state_changed`` subscription (called on every sign-in, sign-out
and token refresh).

One gateway belongs to one browser session and owns its own Supabase
client. Signing in therefore never touches the data backend's shared
client; the page binds ``access_token()`` to its data requests instead
(see ``copilot_core.data.bind_access_token``).

Authorization is not enforced here: row level security on the Supabase
tables decides what a principal may read or write, and callers compare
``project.user_id`` with ``current_user().uid`` before rendering.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx
from supabase import Client

from copilot_core.config import Settings
from copilot_core.data.supabase_client import get_supabase_client
from copilot_core.errors import (
    NotConfiguredError,
    QuotaExceededError,
    StoreError,
    UnauthenticatedError,
    describe_error,
    to_store_error,
)
from copilot_core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated identity on whose behalf requests are made."""
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None

    @classmethod
    def from_user(cls, user: Any) -> Optional[Principal]:
        if user is None:
            return None
        metadata = getattr(user, "user_metadata", None) or {}
        return cls(
            uid=user.id,
            email=getattr(user, "email", None),
            display_name=metadata.get("display_name") or metadata.get("full_name"),
        )


class AuthGateway:
    """
    Usage:
        auth = AuthGateway(settings)
        auth.sign_in("founder@example.com", "secret")
        bind_access_token(auth.access_token())
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[[Settings], Optional[Client]] = get_supabase_client,
    ):
        self.settings = settings
        self._client_factory = client_factory
        self._client: Optional[Client] = None
        self._lock = threading.Lock()

    @property
    def is_configured(self) -> bool:
        """True when Supabase credentials are set; independent of connectivity."""
        return self.settings.backend == "supabase" and self.settings.is_store_configured

    def _auth(self, operation: str):
        client = None
        if self.is_configured:
            with self._lock:
                if self._client is None:
                    self._client = self._client_factory(self.settings)
                client = self._client
        if client is None:
            raise NotConfiguredError(
                "Authentication is not configured. Please check your environment variables.",
                operation=operation,
            )
        return client.auth

    @staticmethod
    def _to_error(error: Exception, operation: str) -> StoreError:
        """Auth failures are credential problems unless the transport failed."""
        if isinstance(error, httpx.TransportError):
            return to_store_error(error, operation=operation)
        info = describe_error(error)
        if info.status == 429:
            return QuotaExceededError(info.message, operation=operation, backend_code=info.code)
        return UnauthenticatedError(info.message, operation=operation, backend_code=info.code)

    def _session(self, operation: str) -> Any:
        auth = self._auth(operation)
        try:
            return auth.get_session()
        except Exception as e:
            raise self._to_error(e, operation) from e

    def current_user(self) -> Optional[Principal]:
        session = self._session("current_user")
        if not session:
            return None
        return Principal.from_user(session.user)

    def access_token(self) -> Optional[str]:
        """
        JWT of the signed-in user, or None when signed out.

        The auth client refreshes an expired session before returning it, so
        the token is good for the data requests of the current run.
        """
        session = self._session("access_token")
        return session.access_token if session else None

    def on_auth_state_changed(
        self,
        callback: Callable[[Optional[Principal]], None],
    ) -> Callable[[], None]:
        """
        Subscribe to sign-in/sign-out/token-refresh transitions.

        Returns:
            Function that cancels the subscription
        """
        def _listener(event: str, session: Any) -> None:
            logger.debug(f"Auth state changed: {event}")
            callback(Principal.from_user(getattr(session, "user", None)) if session else None)

        subscription = self._auth("on_auth_state_changed").on_auth_state_change(_listener)
        return subscription.unsubscribe

    def sign_in(self, email: str, password: str) -> Principal:
        auth = self._auth("sign_in")
        try:
            response = auth.sign_in_with_password({"email": email, "password": password})
        except Exception as e:
            raise self._to_error(e, "sign_in") from e
        logger.info(f"Signed in {email}")
        return Principal.from_user(response.user)

    def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Principal:
        auth = self._auth("sign_up")
        payload = {"email": email, "password": password}
        if display_name:
            payload["options"] = {"data": {"display_name": display_name}}
        try:
            response = auth.sign_up(payload)
        except Exception as e:
            raise self._to_error(e, "sign_up") from e
        logger.info(f"Signed up {email}")
        return Principal.from_user(response.user)

    def sign_out(self) -> None:
        auth = self._auth("sign_out")
        try:
            auth.sign_out()
        except Exception as e:
            raise self._to_error(e, "sign_out") from e

    def reset_password(self, email: str) -> None:
        auth = self._auth("reset_password")
        try:
            auth.reset_password_for_email(email)
        except Exception as e:
            raise self._to_error(e, "reset_password") from e
