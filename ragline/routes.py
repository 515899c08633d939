"""
Name: RAG API Controllers

Responsibilities:
  - Expose HTTP endpoints for querying, searching, ingesting and deleting
  - Delegate all behavior to RagPipeline
  - Validate requests and serialize responses using Pydantic models

Collaborators:
  - application.pipeline.RagPipeline: the only business entry point
  - container.get_rag_pipeline: Dependency provider
  - exception_handlers: turns taxonomy errors into Problem Details

Notes:
  - This module stays thin (controllers only)
  - Blank text is rejected by the pipeline (INVALID_INPUT), not here
"""

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from .application.pipeline import RagPipeline
from .config import get_settings
from .container import get_rag_pipeline
from .domain.entities import RetrievalResult
from .error_responses import OPENAPI_ERROR_RESPONSES
from .exceptions import DocumentNotFoundError

# R: Create API router for RAG endpoints
router = APIRouter(responses=OPENAPI_ERROR_RESPONSES)

# R: Limits are loaded from Settings at module load time for Pydantic schema
_settings = get_settings()


class QueryReq(BaseModel):
    query: str = Field(
        ...,
        min_length=1,
        max_length=_settings.max_query_chars,
        description="Natural language question",
    )
    top_k: int | None = Field(
        default=None,
        ge=1,
        le=_settings.max_top_k,
        description="Documents to retrieve (defaults to TOP_K)",
    )


class SourceRes(BaseModel):
    document_id: str
    score: float
    text: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class QueryRes(BaseModel):
    answer: str
    sources: list[SourceRes]


class SearchRes(BaseModel):
    matches: list[SourceRes]


class IngestReq(BaseModel):
    text: str = Field(
        ...,
        min_length=1,
        max_length=_settings.max_document_chars,
        description="Document text (stored as a single unit, no chunking)",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Additional custom metadata"
    )
    id: str | None = Field(
        default=None,
        min_length=1,
        max_length=200,
        description="Optional document id; an existing document is replaced",
    )


class IngestRes(BaseModel):
    document_id: str


def _to_sources(retrieval: RetrievalResult, *, with_text: bool) -> list[SourceRes]:
    return [
        SourceRes(
            document_id=item.document_id,
            score=item.score,
            text=item.document.text if with_text else None,
            metadata=item.document.metadata,
        )
        for item in retrieval
    ]


@router.post("/query", response_model=QueryRes, tags=["query"])
async def query(
    req: QueryReq, pipeline: RagPipeline = Depends(get_rag_pipeline)
) -> QueryRes:
    """R: Full RAG flow: retrieve context and generate an answer."""
    result = await pipeline.answer(req.query, top_k=req.top_k)
    return QueryRes(
        answer=result.answer,
        sources=_to_sources(result.retrieval, with_text=False),
    )


@router.post("/search", response_model=SearchRes, tags=["query"])
async def search(
    req: QueryReq, pipeline: RagPipeline = Depends(get_rag_pipeline)
) -> SearchRes:
    """R: Retrieval only (no generation)."""
    retrieval = await pipeline.retrieve(req.query, top_k=req.top_k)
    return SearchRes(matches=_to_sources(retrieval, with_text=True))


@router.post(
    "/documents",
    response_model=IngestRes,
    status_code=status.HTTP_201_CREATED,
    tags=["documents"],
)
async def ingest(
    req: IngestReq, pipeline: RagPipeline = Depends(get_rag_pipeline)
) -> IngestRes:
    document_id = await pipeline.ingest(req.text, req.metadata, document_id=req.id)
    return IngestRes(document_id=document_id)


@router.delete(
    "/documents/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["documents"],
)
async def delete_document(
    document_id: str, pipeline: RagPipeline = Depends(get_rag_pipeline)
) -> Response:
    if not await pipeline.delete(document_id):
        raise DocumentNotFoundError(f"Document '{document_id}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
