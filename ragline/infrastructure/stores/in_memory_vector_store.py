"""
Name: In-Memory Vector Store

Responsibilities:
  - Hold documents and embeddings in process memory (tests / local dev)
  - Cosine similarity search with numpy
  - Upsert / delete / count by document id

Collaborators:
  - domain.services.VectorStore: contract implemented
  - domain.entities: Document, ScoredDocument

Constraints:
  - Writes are serialized with an asyncio.Lock
  - Search works on a snapshot, so concurrent writes never tear a result
  - Ordering matches the Postgres store: score DESC, id ASC
"""

from __future__ import annotations

import asyncio
from typing import Dict, List

import numpy as np

from ...domain.entities import Document, DocumentId, ScoredDocument


def _cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """R: Cosine similarity of every row of matrix against query (0 for zero norms)."""
    row_norms = np.linalg.norm(matrix, axis=1)
    query_norm = np.linalg.norm(query)
    denom = row_norms * query_norm
    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(denom > 0, dots / denom, 0.0)
    return scores


class InMemoryVectorStore:
    """R: VectorStore kept in a dict (id -> Document)."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._documents: Dict[DocumentId, Document] = {}

    async def search(self, vector: List[float], k: int) -> List[ScoredDocument]:
        if k <= 0:
            return []
        documents = list(self._documents.values())
        if not documents:
            return []

        query = np.asarray(vector, dtype=np.float64)
        candidates = [d for d in documents if len(d.embedding) == query.size]
        if not candidates:
            return []

        matrix = np.asarray([d.embedding for d in candidates], dtype=np.float64)
        scores = _cosine_scores(matrix, query)

        hits = [
            ScoredDocument(document=doc, score=float(score))
            for doc, score in zip(candidates, scores)
        ]
        hits.sort(key=lambda h: (-h.score, h.document_id))
        return hits[:k]

    async def upsert(self, document: Document) -> None:
        async with self._lock:
            self._documents[document.id] = document

    async def delete(self, document_id: DocumentId) -> bool:
        async with self._lock:
            return self._documents.pop(document_id, None) is not None

    async def count(self) -> int:
        return len(self._documents)
