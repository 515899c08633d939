"""
Name: RAG Pipeline

Responsibilities:
  - Orchestrate embed -> retrieve -> build prompt -> generate
  - Ingest documents (embed + upsert) and delete them
  - Validate caller input and collaborator output
  - Guard every collaborator call with timeout + bounded retry
  - Measure and report stage timings

Collaborators:
  - domain.services: EmbeddingService, VectorStore, GenerationService
  - application.guard.CollaboratorGuard: timeout + retry + error mapping
  - application.ranking.rank_results: deterministic top-k ordering
  - application.prompt_builder.build_prompt: pure prompt assembly
  - timing.StageTimings / metrics: observability

Constraints:
  - No HTTP concerns (that's the presentation layer's job)
  - No knowledge of PostgreSQL, Google API, etc. (abstracted by ports)
  - No mutable state shared between calls; concurrent calls are independent
  - Never returns a silent default answer: every failure is a taxonomy error

Notes:
  - An empty retrieval is not an error; generation still runs
  - The generated answer is returned exactly as produced
"""

import math
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

import numpy as np

from ..config import RagConfig
from ..domain.entities import (
    Document,
    DocumentId,
    EmbeddingKind,
    Query,
    QueryResult,
    RetrievalResult,
    ScoredDocument,
)
from ..domain.services import EmbeddingService, GenerationService, VectorStore
from ..exceptions import (
    EmbeddingUnavailableError,
    GenerationUnavailableError,
    InvalidInputError,
    RetrievalUnavailableError,
    StoreUnavailableError,
)
from ..logger import logger
from ..metrics import record_stage_metrics
from ..timing import StageTimings
from .guard import CollaboratorGuard
from .prompt_builder import build_prompt
from .ranking import rank_results


class RagPipeline:
    """
    R: Retrieval-augmented answer pipeline.

    Built once at startup from explicit collaborators and a RagConfig.
    """

    def __init__(
        self,
        *,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        generation_service: GenerationService,
        config: RagConfig,
        instruction: str,
        guard: Optional[CollaboratorGuard] = None,
    ):
        """
        R: Initialize pipeline with injected dependencies.

        Args:
            embedding_service: Produces query/document embeddings
            vector_store: Similarity search and document persistence
            generation_service: Produces the answer text
            config: Immutable pipeline configuration
            instruction: Fixed instruction placed at the top of every prompt
            guard: Optional override (defaults to one built from config)
        """
        if not instruction or not instruction.strip():
            raise ValueError("instruction must not be empty")
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.generation_service = generation_service
        self.config = config
        self.instruction = instruction
        self.guard = guard or CollaboratorGuard.from_config(config)

    async def answer(self, query_text: str, *, top_k: Optional[int] = None) -> QueryResult:
        """
        R: Execute RAG flow: embed query -> retrieve -> prompt -> generate.

        Raises:
            InvalidInputError: empty/oversized query or bad top_k
            EmbeddingUnavailableError: embedding failed or malformed
            RetrievalUnavailableError: vector store search failed or malformed
            GenerationUnavailableError: generation failed or returned no text
            (timeouts raise the matching *TimeoutError subclass)
        """
        self._validate_query(query_text)
        k = self._resolve_top_k(top_k)
        timings = StageTimings()

        retrieval = await self._retrieve(query_text, k, timings)

        prompt = build_prompt(
            query_text,
            retrieval,
            instruction=self.instruction,
            max_context_chars=self.config.max_context_chars,
        )

        with timings.measure("generate"):
            answer = await self.guard.call(
                "generation",
                lambda: self.generation_service.generate(prompt, self.config.generation),
                error_cls=GenerationUnavailableError,
            )

        if not isinstance(answer, str) or not answer.strip():
            logger.error(
                "generation returned empty answer",
                extra={"documents_found": len(retrieval)},
            )
            raise GenerationUnavailableError("Generation returned an empty answer")

        timing_data = timings.to_dict()
        logger.info(
            "query answered",
            extra={
                "top_k": k,
                "documents_found": len(retrieval),
                "prompt_chars": len(prompt),
                **timing_data,
            },
        )
        record_stage_metrics(
            embed=timings.seconds("embed"),
            retrieve=timings.seconds("retrieve"),
            generate=timings.seconds("generate"),
        )

        return QueryResult(
            answer=answer,
            retrieval=retrieval,
            query=query_text,
            metadata={
                "top_k": k,
                "documents_found": len(retrieval),
                **timing_data,
            },
        )

    async def retrieve(self, query_text: str, top_k: Optional[int] = None) -> RetrievalResult:
        """R: Embed + search only (no generation)."""
        self._validate_query(query_text)
        k = self._resolve_top_k(top_k)
        timings = StageTimings()

        retrieval = await self._retrieve(query_text, k, timings)

        logger.info(
            "search completed",
            extra={"top_k": k, "documents_found": len(retrieval), **timings.to_dict()},
        )
        record_stage_metrics(
            embed=timings.seconds("embed"),
            retrieve=timings.seconds("retrieve"),
        )
        return retrieval

    async def ingest(
        self,
        document_text: str,
        metadata: Optional[Dict[str, Any]] = None,
        *,
        document_id: Optional[DocumentId] = None,
    ) -> DocumentId:
        """
        R: Embed and store a document.

        A fresh UUID4 id is generated unless document_id is given, in which
        case the stored document with that id is replaced.

        Raises:
            InvalidInputError: empty/oversized text or blank document_id
            EmbeddingUnavailableError: embedding failed or malformed
            StoreUnavailableError: upsert failed
        """
        if not isinstance(document_text, str) or not document_text.strip():
            raise InvalidInputError("Document text must not be empty")
        if len(document_text) > self.config.max_document_chars:
            raise InvalidInputError(
                f"Document text exceeds {self.config.max_document_chars} characters"
            )
        if document_id is not None and not str(document_id).strip():
            raise InvalidInputError("Document id must not be blank")

        doc_id = document_id or str(uuid4())
        timings = StageTimings()

        with timings.measure("embed"):
            vector = await self._embed(document_text, kind="document")

        document = Document(
            id=doc_id,
            text=document_text,
            embedding=vector,
            metadata=dict(metadata or {}),
        )

        with timings.measure("store"):
            await self.guard.call(
                "store",
                lambda: self.vector_store.upsert(document),
                error_cls=StoreUnavailableError,
            )

        logger.info(
            "document ingested",
            extra={
                "document_id": doc_id,
                "text_chars": len(document_text),
                **timings.to_dict(),
            },
        )
        return doc_id

    async def delete(self, document_id: DocumentId) -> bool:
        """
        R: Remove a document by id.

        Returns:
            True if a document was removed, False if it did not exist
        """
        if not document_id or not str(document_id).strip():
            raise InvalidInputError("Document id must not be blank")

        removed = await self.guard.call(
            "store",
            lambda: self.vector_store.delete(document_id),
            error_cls=StoreUnavailableError,
        )
        logger.info(
            "document delete",
            extra={"document_id": document_id, "removed": bool(removed)},
        )
        return bool(removed)

    async def count(self) -> int:
        """R: Number of stored documents (health/stats)."""
        return await self.guard.call(
            "store",
            self.vector_store.count,
            error_cls=StoreUnavailableError,
        )

    async def _retrieve(
        self, query_text: str, k: int, timings: StageTimings
    ) -> RetrievalResult:
        with timings.measure("embed"):
            vector = await self._embed(query_text, kind="query")

        query = Query(text=query_text, embedding=vector)

        with timings.measure("retrieve"):
            hits = await self.guard.call(
                "retrieval",
                lambda: self.vector_store.search(list(query.embedding), k),
                error_cls=RetrievalUnavailableError,
            )

        return rank_results(self._validate_hits(hits), k)

    async def _embed(self, text: str, *, kind: EmbeddingKind) -> tuple[float, ...]:
        raw = await self.guard.call(
            "embedding",
            lambda: self.embedding_service.embed(text, kind=kind),
            error_cls=EmbeddingUnavailableError,
        )
        return self._validate_vector(raw)

    def _validate_vector(self, raw: Sequence[float]) -> tuple[float, ...]:
        """
        R: Reject empty, wrong-length, non-finite or all-zero embeddings.
        """
        try:
            array = np.asarray(raw, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise EmbeddingUnavailableError(
                f"Embedding is not a numeric vector: {exc}"
            ) from exc

        if array.ndim != 1 or array.size == 0:
            raise EmbeddingUnavailableError("Embedding is empty or not one-dimensional")
        if array.size != self.config.embedding_dimension:
            raise EmbeddingUnavailableError(
                f"Embedding has dimension {array.size}, "
                f"expected {self.config.embedding_dimension}"
            )
        if not np.isfinite(array).all():
            raise EmbeddingUnavailableError("Embedding contains non-finite values")
        # R: Cosine similarity is undefined for a zero vector
        if not np.any(array):
            raise EmbeddingUnavailableError("Embedding has zero norm")

        return tuple(float(x) for x in array)

    @staticmethod
    def _validate_hits(hits: Any) -> List[ScoredDocument]:
        """R: Store output must be ScoredDocuments with finite scores."""
        if hits is None:
            return []
        try:
            items = list(hits)
        except TypeError as exc:
            raise RetrievalUnavailableError(
                f"Vector store returned a non-iterable result: {exc}"
            ) from exc

        for hit in items:
            if not isinstance(hit, ScoredDocument) or not isinstance(hit.document, Document):
                raise RetrievalUnavailableError(
                    f"Vector store returned malformed hit {type(hit).__name__}"
                )
            if isinstance(hit.score, bool) or not isinstance(hit.score, (int, float)):
                raise RetrievalUnavailableError(
                    f"Hit {hit.document_id!r} has a non-numeric score"
                )
            if not math.isfinite(hit.score):
                raise RetrievalUnavailableError(
                    f"Hit {hit.document_id!r} has a non-finite score"
                )
        return items

    def _validate_query(self, query_text: str) -> None:
        if not isinstance(query_text, str) or not query_text.strip():
            raise InvalidInputError("Query must not be empty")
        if len(query_text) > self.config.max_query_chars:
            raise InvalidInputError(
                f"Query exceeds {self.config.max_query_chars} characters"
            )

    def _resolve_top_k(self, top_k: Optional[int]) -> int:
        k = self.config.top_k if top_k is None else top_k
        if k <= 0:
            raise InvalidInputError("top_k must be greater than 0")
        return k
