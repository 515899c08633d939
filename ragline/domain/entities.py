"""
Name: Domain Entities

Responsibilities:
  - Define the data the pipeline moves between collaborators
  - Keep Document immutable once built
  - Keep RetrievalResult ordering explicit (descending score)

Collaborators:
  - domain.services: ports exchange these types
  - application: builds Query/RetrievalResult/QueryResult per request
  - infrastructure: stores and returns Document / ScoredDocument

Notes:
  - No dependencies on FastAPI, psycopg or any SDK
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Sequence, Tuple

# R: Fixed-length float vector; length must match the configured dimension
EmbeddingVector = List[float]
DocumentId = str

# R: Which side of retrieval a text is embedded for
EmbeddingKind = Literal["query", "document"]


@dataclass(frozen=True)
class GenerationOptions:
    """
    R: Pass-through generation controls.

    The pipeline forwards these to the generation collaborator untouched.
    """

    max_output_tokens: int = 512
    temperature: float = 0.2


@dataclass(frozen=True)
class Document:
    """
    R: A unit of ingested text and its embedding.

    Created during ingestion, removed only by explicit deletion.
    """

    id: DocumentId
    text: str
    embedding: Tuple[float, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class ScoredDocument:
    """R: A retrieved Document with its similarity to the query."""

    document: Document
    score: float

    @property
    def document_id(self) -> DocumentId:
        return self.document.id


@dataclass(frozen=True)
class RetrievalResult:
    """
    R: Ordered retrieval output (descending score, ties by id ascending).

    Produced per request; never persisted.
    """

    items: Tuple[ScoredDocument, ...] = ()

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def document_ids(self) -> List[DocumentId]:
        return [item.document_id for item in self.items]


@dataclass(frozen=True)
class Query:
    """R: Per-request query text and its embedding."""

    text: str
    embedding: Sequence[float] = ()


@dataclass
class QueryResult:
    """
    R: Result of RagPipeline.answer().

    - answer: generation output, unmodified
    - retrieval: documents that were placed in the prompt
    - metadata: top_k, documents_found, stage timings
    """

    answer: str
    retrieval: RetrievalResult
    query: str
    metadata: Dict[str, Any] = field(default_factory=dict)
