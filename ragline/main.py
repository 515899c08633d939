"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Configure middleware (CORS, request context)
  - Mount router with RAG endpoints under /api prefix
  - Expose health check and metrics endpoints

Collaborators:
  - routes.router: query / search / documents endpoints
  - RequestContextMiddleware: Request ID, logging context, request metrics
  - exception_handlers: taxonomy -> Problem Details
  - infrastructure.db.pool: Postgres pool lifecycle (postgres store only)

Constraints:
  - CORS configurable via ALLOWED_ORIGINS env var (comma-separated)
  - No authentication or rate limiting

Notes:
  - Env validation enforced at startup (via lifespan)
  - /healthz follows Kubernetes health check convention
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .application.pipeline import RagPipeline
from .config import get_settings
from .container import get_rag_pipeline
from .exception_handlers import register_exception_handlers
from .infrastructure.db.pool import close_pool, ensure_schema, init_pool
from .logger import logger
from .metrics import get_metrics_response
from .middleware import REQUEST_ID_HEADER, RequestContextMiddleware
from .routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Validates settings and initializes pool."""
    # This will raise ValidationError if env vars are missing/invalid
    settings = get_settings()
    logger.setLevel(settings.log_level.upper())

    uses_postgres = settings.vector_store_backend == "postgres"
    if uses_postgres:
        await ensure_schema(settings.database_url, settings.embedding_dimension)
        await init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    logger.info(
        "ragline API starting up",
        extra={
            "embedding_backend": settings.embedding_backend,
            "generation_backend": settings.generation_backend,
            "vector_store_backend": settings.vector_store_backend,
            "top_k": settings.top_k,
            "timeout_ms": settings.timeout_ms,
            "retry_count": settings.retry_count,
        },
    )
    yield

    if uses_postgres:
        await close_pool()
    logger.info("ragline API shutting down")


def _get_allowed_origins() -> list[str]:
    return get_settings().get_allowed_origins_list()


# R: Create FastAPI application instance with API metadata
app = FastAPI(
    title="ragline API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "query", "description": "Retrieval and answer generation"},
        {"name": "documents", "description": "Document ingestion and deletion"},
    ],
)

# R: Middleware order (bottom = first to execute):
# 1. CORSMiddleware - handles preflight
# 2. RequestContextMiddleware - sets request_id
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_allowed_origins(),
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", REQUEST_ID_HEADER],
    expose_headers=[REQUEST_ID_HEADER],
)

app.include_router(router, prefix="/api")

register_exception_handlers(app)


@app.get("/healthz")
async def healthz(request: Request, pipeline: RagPipeline = Depends(get_rag_pipeline)):
    """
    R: Health check that verifies the vector store answers.

    Returns:
        ok: True if the store responded
        store: configured backend
        documents: stored document count (None if unavailable)
        request_id: Correlation ID for this request
    """
    settings = get_settings()
    documents = None
    try:
        documents = await pipeline.count()
    except Exception as e:
        logger.warning("Health check: store unavailable", extra={"error": str(e)})

    return {
        "ok": documents is not None,
        "store": settings.vector_store_backend,
        "documents": documents,
        "request_id": getattr(request.state, "request_id", None),
    }


# R: Prometheus metrics endpoint
@app.get("/metrics")
def metrics():
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)
