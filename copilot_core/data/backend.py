# =============================================================================
# copilot_core/data/backend.py
# Backend Contract and Declarative Queries
# =============================================================================
"""
Contract every document backend implements, plus the declarative query
objects the DocumentStore hands to it.

A query is a list of (field, operator, value) predicates, an optional
single-field ordering and an optional limit:

    Query(
        filters=[QueryFilter("user_id", "==", uid)],
        order_by=OrderBy("updated_at", descending=True),
        limit=20,
    )
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


OPERATORS = ("==", "!=", "<", "<=", ">", ">=", "in", "array-contains")


@dataclass(frozen=True)
class QueryFilter:
    """Single predicate on a document field."""
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator {self.op!r}; expected one of {OPERATORS}")

    def matches(self, record: Dict[str, Any]) -> bool:
        """Evaluate the predicate in-process (used by MemoryBackend)."""
        if self.field not in record:
            return False
        actual = record[self.field]

        if self.op == "==":
            return actual == self.value
        if self.op == "!=":
            return actual != self.value
        if self.op == "in":
            return actual in self.value
        if self.op == "array-contains":
            return isinstance(actual, (list, tuple, set)) and self.value in actual

        if actual is None:
            return False
        try:
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            return actual >= self.value
        except TypeError:
            return False


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class Query:
    filters: List[QueryFilter] = field(default_factory=list)
    order_by: Optional[OrderBy] = None
    limit: Optional[int] = None

    def __post_init__(self) -> None:
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit must be >= 0")

    def where(self, field_name: str, op: str, value: Any) -> Query:
        return Query(
            filters=[*self.filters, QueryFilter(field_name, op, value)],
            order_by=self.order_by,
            limit=self.limit,
        )


class DocumentBackend(ABC):
    """
    Abstract document database.

    Backends raise their native exceptions; classification into the closed
    error taxonomy is the DocumentStore's job.
    """

    name: str = "backend"

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials/connection parameters are present."""

    @abstractmethod
    def insert(self, collection: str, data: Dict[str, Any]) -> str:
        """Persist a new document and return its id."""

    @abstractmethod
    def fetch(self, collection: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Return the document (including ``id``) or None when absent."""

    @abstractmethod
    def query(self, collection: str, query: Query) -> List[Dict[str, Any]]:
        """Return matching documents in query order."""

    @abstractmethod
    def update(self, collection: str, document_id: str, data: Dict[str, Any]) -> bool:
        """Merge fields into an existing document; False when it does not exist."""

    @abstractmethod
    def delete(self, collection: str, document_id: str) -> bool:
        """Remove a document; False when it was already absent."""

    # -------------------------------------------------------------------------
    # Transport toggles used by the ConnectionManager
    # -------------------------------------------------------------------------

    @abstractmethod
    def disable_network(self) -> None:
        """Drop the live connection; idempotent."""

    @abstractmethod
    def enable_network(self) -> None:
        """(Re)establish the connection; raises on failure; idempotent."""
