# =============================================================================
# copilot_core/data/__init__.py
# Document Backends and the Generic DocumentStore
# =============================================================================

from .backend import (
    DocumentBackend,
    Query,
    QueryFilter,
    OrderBy,
)
from .memory_backend import MemoryBackend
from .supabase_client import (
    SupabaseBackend,
    bind_access_token,
    get_supabase_client,
    close_supabase_client,
)
from .document_store import DocumentStore

__all__ = [
    "DocumentBackend",
    "Query",
    "QueryFilter",
    "OrderBy",
    "MemoryBackend",
    "SupabaseBackend",
    "bind_access_token",
    "get_supabase_client",
    "close_supabase_client",
    "DocumentStore",
]
