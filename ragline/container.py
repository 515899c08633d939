"""
Name: Dependency Injection Container

Responsibilities:
  - Wire up the collaborators selected in Settings
  - Build the single RagPipeline instance
  - Enable dependency injection in FastAPI endpoints

Collaborators:
  - config: backend selection and RagConfig
  - infrastructure.services: Google / Ollama / fake adapters
  - infrastructure.stores: in-memory / Postgres vector stores
  - infrastructure.prompts: instruction template
  - FastAPI Depends(): Dependency injection mechanism

Constraints:
  - Manual DI (no library like dependency-injector)
  - Singletons via functools.lru_cache

Notes:
  - This is the composition root (where dependencies are wired)
  - Tests override get_rag_pipeline via app.dependency_overrides
"""

from functools import lru_cache

from .application.pipeline import RagPipeline
from .config import get_settings
from .domain.services import EmbeddingService, GenerationService, VectorStore
from .infrastructure.prompts import get_prompt_loader
from .infrastructure.services import (
    FakeEmbeddingService,
    FakeGenerationService,
    GoogleEmbeddingService,
    GoogleGenerationService,
    OllamaEmbeddingService,
    OllamaGenerationService,
)
from .infrastructure.stores import InMemoryVectorStore, PostgresVectorStore


@lru_cache
def get_embedding_service() -> EmbeddingService:
    """R: Embedding adapter chosen by EMBEDDING_BACKEND."""
    settings = get_settings()
    backend = settings.embedding_backend
    if backend == "fake":
        return FakeEmbeddingService(dimension=settings.embedding_dimension)
    if backend == "ollama":
        return OllamaEmbeddingService(
            settings.ollama_base_url, model=settings.embedding_model
        )
    return GoogleEmbeddingService(
        api_key=settings.google_api_key, model_id=settings.embedding_model
    )


@lru_cache
def get_generation_service() -> GenerationService:
    """R: Generation adapter chosen by GENERATION_BACKEND."""
    settings = get_settings()
    backend = settings.generation_backend
    if backend == "fake":
        return FakeGenerationService()
    if backend == "ollama":
        return OllamaGenerationService(
            settings.ollama_base_url, model=settings.generation_model
        )
    return GoogleGenerationService(
        api_key=settings.google_api_key, model_id=settings.generation_model
    )


@lru_cache
def get_vector_store() -> VectorStore:
    """R: Vector store chosen by VECTOR_STORE_BACKEND."""
    if get_settings().vector_store_backend == "postgres":
        return PostgresVectorStore()
    return InMemoryVectorStore()


@lru_cache
def get_rag_pipeline() -> RagPipeline:
    """R: The pipeline singleton shared by all requests."""
    settings = get_settings()
    return RagPipeline(
        embedding_service=get_embedding_service(),
        vector_store=get_vector_store(),
        generation_service=get_generation_service(),
        config=settings.rag_config(),
        instruction=get_prompt_loader().get_template(),
    )
