# =============================================================================
# copilot_core/data/memory_backend.py
# In-Process Document Backend
# =============================================================================
"""
MemoryBackend - thread-safe, in-process document storage.

Mirrors the SupabaseBackend contract so the app can run without cloud
credentials (COPILOT_BACKEND=memory) and so the store can be exercised in
tests. Failures can be queued with ``fail_next`` / ``fail_enable`` to
simulate outages.
"""

from __future__ import annotations
import copy
import threading
import uuid
from collections import Counter, deque
from typing import Any, Deque, Dict, List, Optional

import httpx

from copilot_core.logging import get_logger
from .backend import DocumentBackend, Query

logger = get_logger(__name__)


class MemoryBackend(DocumentBackend):
    """Dictionary-backed implementation of DocumentBackend."""

    name = "memory"

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = threading.RLock()
        self._network_enabled = True
        self._pending_failures: Deque[BaseException] = deque()
        self._pending_enable_failures: Deque[BaseException] = deque()
        self.calls: Counter = Counter()

    @property
    def is_configured(self) -> bool:
        return True

    @property
    def network_enabled(self) -> bool:
        return self._network_enabled

    # =========================================================================
    # FAILURE INJECTION
    # =========================================================================

    def fail_next(self, error: BaseException, times: int = 1) -> None:
        """Raise ``error`` on the next ``times`` document operations."""
        with self._lock:
            self._pending_failures.extend([error] * times)

    def fail_enable(self, error: BaseException, times: int = 1) -> None:
        """Raise ``error`` on the next ``times`` enable_network calls."""
        with self._lock:
            self._pending_enable_failures.extend([error] * times)

    def _check(self, operation: str) -> None:
        self.calls[operation] += 1
        if self._pending_failures:
            raise self._pending_failures.popleft()
        if not self._network_enabled:
            raise httpx.ConnectError("network is disabled (offline mode)")

    # =========================================================================
    # CRUD
    # =========================================================================

    def insert(self, collection: str, data: Dict[str, Any]) -> str:
        with self._lock:
            self._check("insert")
            document_id = uuid.uuid4().hex
            record = copy.deepcopy(data)
            record["id"] = document_id
            self._collections.setdefault(collection, {})[document_id] = record
            return document_id

    def fetch(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            self._check("fetch")
            record = self._collections.get(collection, {}).get(document_id)
            return copy.deepcopy(record) if record is not None else None

    def query(self, collection: str, query: Query) -> List[Dict[str, Any]]:
        with self._lock:
            self._check("query")
            records = [
                record
                for record in self._collections.get(collection, {}).values()
                if all(f.matches(record) for f in query.filters)
            ]

            if query.order_by is not None:
                key = query.order_by.field
                present = [r for r in records if r.get(key) is not None]
                missing = [r for r in records if r.get(key) is None]
                present.sort(key=lambda r: r[key], reverse=query.order_by.descending)
                records = present + missing

            if query.limit is not None:
                records = records[:query.limit]

            return copy.deepcopy(records)

    def update(self, collection: str, document_id: str, data: Dict[str, Any]) -> bool:
        with self._lock:
            self._check("update")
            record = self._collections.get(collection, {}).get(document_id)
            if record is None:
                return False
            record.update(copy.deepcopy(data))
            record["id"] = document_id
            return True

    def delete(self, collection: str, document_id: str) -> bool:
        with self._lock:
            self._check("delete")
            return self._collections.get(collection, {}).pop(document_id, None) is not None

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def disable_network(self) -> None:
        with self._lock:
            self.calls["disable_network"] += 1
            if self._network_enabled:
                logger.info("Memory backend network disabled")
            self._network_enabled = False

    def enable_network(self) -> None:
        with self._lock:
            self.calls["enable_network"] += 1
            if self._pending_enable_failures:
                raise self._pending_enable_failures.popleft()
            if not self._network_enabled:
                logger.info("Memory backend network enabled")
            self._network_enabled = True

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._collections.get(collection, {}))
