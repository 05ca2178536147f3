# =============================================================================
# copilot_core/data/document_store.py
# Generic CRUD over Named Collections
# =============================================================================
"""
DocumentStore - uniform create/read/query/update/delete with a closed error
taxonomy and store-owned timestamps.

Guarantees:
- Every operation checks configuration first and raises NotConfiguredError
  without touching the backend when credentials are missing.
- ``create`` stamps created_at == updated_at; ``update`` re-stamps
  updated_at (strictly increasing) and never touches created_at or id.
- Reading an absent id returns None; a query with no matches returns [].
- Updating an absent id raises DocumentNotFoundError; deleting an absent id
  returns False.
- Every backend exception is re-raised as exactly one StoreError subclass.
  Session, unavailable and network failures are first handed to the
  ConnectionManager; reads are re-run once if it restores the connection.
"""

from __future__ import annotations
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from copilot_core.errors import (
    DocumentNotFoundError,
    NotConfiguredError,
    StoreError,
    recovery_signature,
    to_store_error,
)
from copilot_core.logging import get_logger
from copilot_core.models import STORE_MANAGED_FIELDS
from .backend import DocumentBackend, Query

if TYPE_CHECKING:
    from copilot_core.connection import ConnectionManager

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore:
    """
    Generic CRUD facade over a DocumentBackend.

    Usage:
        store = DocumentStore(backend, connection_manager=manager)
        project_id = store.create("projects", {"name": "EcoTech", ...})
        project = store.get_by_id("projects", project_id)
    """

    def __init__(
        self,
        backend: DocumentBackend,
        connection_manager: Optional[ConnectionManager] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.backend = backend
        self.connection_manager = connection_manager
        self._clock = clock
        self._stamp_lock = threading.Lock()
        self._last_stamp: Optional[datetime] = None

    @property
    def is_configured(self) -> bool:
        return self.backend.is_configured

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _require_configured(self, operation: str, collection: str) -> None:
        if not self.backend.is_configured:
            raise NotConfiguredError(
                "Document store is not configured. Set SUPABASE_URL and SUPABASE_KEY.",
                operation=operation,
                collection=collection,
            )

    def _stamp(self) -> datetime:
        """Current time, nudged forward so consecutive stamps strictly increase."""
        with self._stamp_lock:
            now = self._clock()
            if self._last_stamp is not None and now <= self._last_stamp:
                now = self._last_stamp + timedelta(microseconds=1)
            self._last_stamp = now
            return now

    def _run(
        self,
        operation: str,
        collection: str,
        func: Callable[[], Any],
        idempotent: bool = False,
    ) -> Any:
        """
        Execute a backend call, classifying any failure.

        Idempotent reads get one more attempt when the ConnectionManager
        reports a successful recovery; writes never re-run because the first
        attempt may already have been applied.
        """
        self._require_configured(operation, collection)
        try:
            return func()
        except (DocumentNotFoundError, NotConfiguredError):
            raise
        except Exception as e:
            error = to_store_error(e, operation=operation, collection=collection)
            logger.warning(f"{operation} on '{collection}' failed: {error.message}")

            recovered = self._recover(error)
            if recovered and idempotent:
                logger.info(f"Connection restored, retrying {operation} on '{collection}'")
                try:
                    return func()
                except Exception as retry_error:
                    raise to_store_error(retry_error, operation=operation, collection=collection) from retry_error
            raise error from e

    def _recover(self, error: StoreError) -> bool:
        if self.connection_manager is None:
            return False
        if recovery_signature(error) is None:
            return False
        return bool(self.connection_manager.handle_connection_error(error))

    @staticmethod
    def _strip_managed(data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in data.items() if k not in STORE_MANAGED_FIELDS}

    # =========================================================================
    # CRUD
    # =========================================================================

    def create(self, collection: str, data: Dict[str, Any]) -> str:
        """Persist a new document; returns the backend-assigned id."""
        self._require_configured("create", collection)
        now = self._stamp()
        payload = {**self._strip_managed(data), "created_at": now, "updated_at": now}

        document_id = self._run("create", collection, lambda: self.backend.insert(collection, payload))
        logger.debug(f"Created {collection}/{document_id}")
        return document_id

    def get_by_id(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Return the document or None when it does not exist."""
        return self._run(
            "get_by_id",
            collection,
            lambda: self.backend.fetch(collection, document_id),
            idempotent=True,
        )

    def get_many(self, collection: str, query: Optional[Query] = None) -> List[Dict[str, Any]]:
        """Return documents matching ``query`` (all documents when None)."""
        query = query or Query()
        return self._run(
            "get_many",
            collection,
            lambda: self.backend.query(collection, query),
            idempotent=True,
        )

    def update(self, collection: str, document_id: str, data: Dict[str, Any]) -> None:
        """
        Merge ``data`` into an existing document and re-stamp updated_at.

        Raises:
            DocumentNotFoundError: if no document has ``document_id``
        """
        self._require_configured("update", collection)
        payload = {**self._strip_managed(data), "updated_at": self._stamp()}

        def _update() -> None:
            if not self.backend.update(collection, document_id, payload):
                raise DocumentNotFoundError(collection, document_id)

        self._run("update", collection, _update)
        logger.debug(f"Updated {collection}/{document_id}")

    def delete(self, collection: str, document_id: str) -> bool:
        """
        Remove a document.

        Returns False (without raising) when the document was already absent.
        """
        deleted = self._run("delete", collection, lambda: self.backend.delete(collection, document_id))
        if not deleted:
            logger.debug(f"Delete of {collection}/{document_id}: already absent")
        return deleted
