"""Domain layer: entities and collaborator ports."""

from .entities import (
    Document,
    DocumentId,
    EmbeddingKind,
    EmbeddingVector,
    GenerationOptions,
    Query,
    QueryResult,
    RetrievalResult,
    ScoredDocument,
)
from .services import EmbeddingService, GenerationService, VectorStore

__all__ = [
    "Document",
    "DocumentId",
    "EmbeddingKind",
    "EmbeddingVector",
    "GenerationOptions",
    "Query",
    "QueryResult",
    "RetrievalResult",
    "ScoredDocument",
    "EmbeddingService",
    "GenerationService",
    "VectorStore",
]
