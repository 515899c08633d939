"""Vector store adapters."""

from .in_memory_vector_store import InMemoryVectorStore
from .postgres_vector_store import PostgresVectorStore

__all__ = ["InMemoryVectorStore", "PostgresVectorStore"]
