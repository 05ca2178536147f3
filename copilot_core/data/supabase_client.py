# =============================================================================
# copilot_core/data/supabase_client.py
# Supabase Client Configuration and Document Backend
# =============================================================================

from __future__ import annotations
import threading
import uuid
from collections import OrderedDict
from contextvars import ContextVar
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from supabase import Client, ClientOptions, create_client

from copilot_core.config import Settings
from copilot_core.logging import get_logger
from .backend import DocumentBackend, Query, QueryFilter

logger = get_logger(__name__)

# Columns holding timestamptz values, parsed back into datetimes on read
TIMESTAMP_FIELDS = ("created_at", "updated_at", "scheduled_at")

# Per-user clients kept alive at once (one per distinct access token)
USER_CLIENT_CACHE_SIZE = 64

# Access token of the user the current script run acts for. Streamlit runs
# every script run on its own thread, which starts with an empty context, so
# a binding never leaks into another browser session.
_access_token: ContextVar[Optional[str]] = ContextVar("supabase_access_token", default=None)


def bind_access_token(access_token: Optional[str]) -> None:
    """
    Make data requests on the current thread act for ``access_token``.

    Pass None to fall back to the anon key. Call once per script run, after
    the session's AuthGateway has produced a fresh token.
    """
    _access_token.set(access_token)


def bound_access_token() -> Optional[str]:
    return _access_token.get()


def get_supabase_client(settings: Settings) -> Optional[Client]:
    """
    Create a Supabase client from settings.

    Expects SUPABASE_URL / SUPABASE_KEY in the environment or in
    .streamlit/secrets.toml:
        [supabase]
        url = "https://your-project.supabase.co"
        key = "your-anon-key"

    Returns:
        Supabase client instance or None if not configured
    """
    missing = settings.missing_store_settings()
    if missing:
        logger.warning(f"Supabase credentials not configured ({', '.join(missing)})")
        return None

    options = ClientOptions(
        postgrest_client_timeout=settings.request_timeout,
        storage_client_timeout=int(settings.request_timeout),
    )
    return create_client(settings.supabase_url, settings.supabase_key, options=options)


def close_supabase_client(client: Optional[Client]) -> None:
    """Close the HTTP session underneath a Supabase client."""
    if client is None:
        return
    try:
        postgrest = getattr(client, "postgrest", None)
        session = getattr(postgrest, "session", None)
        if session is not None:
            session.close()
    except Exception as e:
        logger.debug(f"Ignoring error while closing Supabase session: {e}")


def _encode(value: Any) -> Any:
    """Make a document JSON-serialisable for PostgREST."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, set):
        return sorted(_encode(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_encode(v) for v in value]
    return value


def _decode(record: Dict[str, Any]) -> Dict[str, Any]:
    decoded = dict(record)
    for name in TIMESTAMP_FIELDS:
        value = decoded.get(name)
        if isinstance(value, str):
            decoded[name] = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return decoded


def _apply_filter(builder, query_filter: QueryFilter):
    name, op, value = query_filter.field, query_filter.op, _encode(query_filter.value)
    if op == "==":
        return builder.eq(name, value)
    if op == "!=":
        return builder.neq(name, value)
    if op == "<":
        return builder.lt(name, value)
    if op == "<=":
        return builder.lte(name, value)
    if op == ">":
        return builder.gt(name, value)
    if op == ">=":
        return builder.gte(name, value)
    if op == "in":
        return builder.in_(name, list(value))
    return builder.contains(name, [value])


class SupabaseBackend(DocumentBackend):
    """
    Document backend on top of Supabase (PostgREST).

    Each collection is a table with a text ``id`` primary key. Ids are UUIDs
    generated here so ``insert`` can return them without a second round trip.
    Access control is left to the table's row level security policies.

    The backend is shared by every browser session, so it never signs in.
    Requests made while an access token is bound (``bind_access_token``) go
    through a client authorised with that token; everything else uses the
    anon client. Tokens live with the caller, which is why cycling the
    transport keeps signed-in users signed in.
    """

    name = "supabase"

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[[Settings], Optional[Client]] = get_supabase_client,
    ):
        self.settings = settings
        self._client_factory = client_factory
        self._client: Optional[Client] = None
        self._user_clients: OrderedDict[str, Client] = OrderedDict()
        self._user_clients_lock = threading.Lock()
        self._network_enabled = True

    @property
    def is_configured(self) -> bool:
        return self.settings.is_store_configured

    @property
    def client(self) -> Optional[Client]:
        """Lazily created anon client; None while offline or unconfigured."""
        if self._client is None and self._network_enabled and self.is_configured:
            self._client = self._client_factory(self.settings)
        return self._client

    def _user_client(self, access_token: str) -> Optional[Client]:
        with self._user_clients_lock:
            client = self._user_clients.get(access_token)
            if client is not None:
                self._user_clients.move_to_end(access_token)
                return client

        client = self._client_factory(self.settings)
        if client is None:
            return None
        client.postgrest.auth(access_token)

        with self._user_clients_lock:
            self._user_clients[access_token] = client
            while len(self._user_clients) > USER_CLIENT_CACHE_SIZE:
                _, stale = self._user_clients.popitem(last=False)
                close_supabase_client(stale)
        return client

    def _drop_user_clients(self) -> None:
        with self._user_clients_lock:
            stale, self._user_clients = list(self._user_clients.values()), OrderedDict()
        for client in stale:
            close_supabase_client(client)

    def _table(self, collection: str):
        client = self.client
        if client is None:
            if not self._network_enabled:
                raise ConnectionError("network is disabled (offline mode)")
            raise RuntimeError("Supabase client is not available")

        access_token = bound_access_token()
        if access_token:
            client = self._user_client(access_token) or client
        return client.table(collection)

    # =========================================================================
    # CRUD
    # =========================================================================

    def insert(self, collection: str, data: Dict[str, Any]) -> str:
        document_id = str(uuid.uuid4())
        payload = _encode({**data, "id": document_id})
        self._table(collection).insert(payload).execute()
        return document_id

    def fetch(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        response = (
            self._table(collection)
            .select("*")
            .eq("id", document_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _decode(response.data[0])
        return None

    def query(self, collection: str, query: Query) -> List[Dict[str, Any]]:
        builder = self._table(collection).select("*")

        for query_filter in query.filters:
            builder = _apply_filter(builder, query_filter)

        if query.order_by is not None:
            builder = builder.order(query.order_by.field, desc=query.order_by.descending)

        if query.limit is not None:
            builder = builder.limit(query.limit)

        response = builder.execute()
        return [_decode(row) for row in response.data or []]

    def update(self, collection: str, document_id: str, data: Dict[str, Any]) -> bool:
        response = (
            self._table(collection)
            .update(_encode(data))
            .eq("id", document_id)
            .execute()
        )
        return bool(response.data)

    def delete(self, collection: str, document_id: str) -> bool:
        response = self._table(collection).delete().eq("id", document_id).execute()
        return bool(response.data)

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def disable_network(self) -> None:
        if self._network_enabled:
            logger.info("Supabase network disabled")
        self._network_enabled = False
        close_supabase_client(self._client)
        self._client = None
        self._drop_user_clients()

    def enable_network(self) -> None:
        """
        Rebuild the client and probe the health table.

        Raises whatever the probe raises and leaves the previous state
        untouched in that case. Per-user clients are rebuilt on demand from
        the token bound to the next request.
        """
        client = self._client_factory(self.settings)
        if client is None:
            raise RuntimeError("Supabase is not configured")

        client.table(self.settings.health_table).select("id").limit(1).execute()

        close_supabase_client(self._client)
        self._client = client
        self._drop_user_clients()
        if not self._network_enabled:
            logger.info("Supabase network enabled")
        self._network_enabled = True
