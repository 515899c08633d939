"""
Name: Fake Embeddings Service (Deterministic Test Double)

Responsibilities:
  - Deterministic embeddings for tests/CI (no network, no credentials)
  - Keep dimensionality configurable to match production

Constraints:
  - Same input -> same vector
"""

from __future__ import annotations

import hashlib
import struct
from typing import List

from ...domain.entities import EmbeddingKind
from ...logger import logger

DEFAULT_EMBEDDING_DIMENSION = 768


def _hash_to_signed_float(text: str, index: int) -> float:
    """R: Map (text, index) deterministically to [-1, 1)."""
    digest = hashlib.sha256(f"{text}|{index}".encode("utf-8")).digest()
    value_u64 = struct.unpack(">Q", digest[:8])[0]
    return (value_u64 / 2**64) * 2.0 - 1.0


def build_embedding(text: str, dimension: int) -> List[float]:
    normalized = (text or "").strip()
    return [_hash_to_signed_float(normalized, i) for i in range(dimension)]


class FakeEmbeddingService:
    """R: Deterministic EmbeddingService for tests/CI."""

    MODEL_ID = "fake-embedding-v1"

    def __init__(self, *, dimension: int = DEFAULT_EMBEDDING_DIMENSION) -> None:
        if dimension <= 0:
            raise ValueError("dimension must be > 0")
        self._dimension = dimension
        logger.debug(
            "FakeEmbeddingService initialized",
            extra={"dimension": dimension, "model_id": self.MODEL_ID},
        )

    async def embed(self, text: str, *, kind: EmbeddingKind = "query") -> List[float]:
        return build_embedding(text, self._dimension)

    @property
    def dimension(self) -> int:
        return self._dimension
