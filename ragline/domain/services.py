"""
Name: Collaborator Ports (Protocols)

Responsibilities:
  - Define contracts for the three external collaborators
    (embedding, vector store, generation)
  - Keep the pipeline independent of any SDK or database driver

Collaborators:
  - infrastructure.services / infrastructure.stores: implementations
  - application.pipeline: consumes these ports

Constraints:
  - Interfaces only, no implementation
  - All calls are coroutines so the pipeline can bound and cancel them
  - Implementations must be safe for concurrent use by in-flight requests

Notes:
  - typing.Protocol gives structural subtyping; adapters do not inherit
"""

from __future__ import annotations

from typing import List, Protocol, Sequence

from .entities import (
    Document,
    DocumentId,
    EmbeddingKind,
    EmbeddingVector,
    GenerationOptions,
    ScoredDocument,
)


class EmbeddingService(Protocol):
    """R: Turns text (documents and queries) into fixed-length vectors."""

    async def embed(self, text: str, *, kind: EmbeddingKind = "query") -> EmbeddingVector:
        """
        R: Embed a single text.

        kind tells asymmetric models whether text is a search query or a
        document being stored; symmetric models may ignore it.

        Returns:
            Vector whose length matches the configured embedding dimension
        """
        ...


class VectorStore(Protocol):
    """R: Persists document vectors and answers nearest-neighbour queries."""

    async def search(
        self, vector: Sequence[float], k: int
    ) -> List[ScoredDocument]:
        """
        R: Return up to k documents most similar to vector.

        Hits carry the stored Document so no second round-trip is needed.
        """
        ...

    async def upsert(self, document: Document) -> None:
        """R: Insert or replace a document by id."""
        ...

    async def delete(self, document_id: DocumentId) -> bool:
        """R: Remove a document; True if it existed."""
        ...

    async def count(self) -> int:
        """R: Number of stored documents."""
        ...


class GenerationService(Protocol):
    """R: Text-generation backend."""

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        """
        R: Generate text for a fully assembled prompt.

        options are passed through to the provider uninterpreted.
        """
        ...
