# =============================================================================
# copilot_core/services/base_service.py
# Base Service Classes with Common Functionality
# =============================================================================

from __future__ import annotations
from abc import ABC
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from copilot_core.data import DocumentStore, OrderBy, Query, QueryFilter
from copilot_core.errors import ValidationError
from copilot_core.logging import get_logger, LogContext
from copilot_core.models import Document, ProjectContent

D = TypeVar("D", bound=Document)


def to_storable(value: Any) -> Any:
    """Convert enums, sets, content and nested dataclasses to plain values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, ProjectContent):
        return value.to_record()
    if isinstance(value, set):
        return sorted(to_storable(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [to_storable(v) for v in value]
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return value


class BaseService(ABC):
    """
    Abstract base class for all services.

    Provides common functionality:
    - Logging
    - Operation timing via log_operation

    Usage:
        class MyService(BaseService):
            def do_something(self):
                with self.log_operation("Doing something"):
                    ...
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def log_operation(self, operation: str) -> LogContext:
        """
        Create a logging context for an operation.

        Usage:
            with self.log_operation("Loading projects"):
                projects = ...
        """
        return LogContext(self.logger, operation)


class CollectionService(BaseService, Generic[D]):
    """
    Typed specialization of the DocumentStore for one collection.

    Subclasses fix ``collection``, ``model`` and ``default_order``; store
    errors propagate unchanged to the caller.
    """

    collection: str = ""
    model: Type[D]
    default_order: Optional[OrderBy] = OrderBy("updated_at", descending=True)

    # Fields callers may never write through update helpers
    immutable_fields = ("id", "created_at", "updated_at")

    def __init__(self, store: DocumentStore):
        super().__init__()
        self.store = store

    def _create(self, document: D) -> str:
        return self.store.create(self.collection, document.to_record())

    def _get(self, document_id: str) -> Optional[D]:
        record = self.store.get_by_id(self.collection, document_id)
        return self.model.from_record(record) if record is not None else None

    def _find(
        self,
        *filters: QueryFilter,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        use_default_order: bool = True,
    ) -> List[D]:
        if order_by is None and use_default_order:
            order_by = self.default_order
        query = Query(filters=list(filters), order_by=order_by, limit=limit)
        return [self.model.from_record(r) for r in self.store.get_many(self.collection, query)]

    def _update(self, document_id: str, fields: Dict[str, Any]) -> None:
        blocked = [name for name in fields if name in self.immutable_fields]
        if blocked:
            raise ValidationError(
                f"Fields cannot be updated: {', '.join(blocked)}",
                field=blocked[0],
            )
        self.store.update(
            self.collection,
            document_id,
            {name: to_storable(value) for name, value in fields.items()},
        )

    def _delete(self, document_id: str) -> bool:
        return self.store.delete(self.collection, document_id)
