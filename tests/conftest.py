"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (fake backends, no .env)
  - Provide collaborator mocks (embedding, vector store, generation)
  - Provide a small RagConfig and a pipeline wired to the mocks

Collaborators:
  - pytest / pytest-asyncio: Test framework
  - unittest.mock: Mock(spec=...) + AsyncMock for async ports
  - ragline.domain: entities and ports

Notes:
  - Env vars are set BEFORE importing ragline modules that read Settings
  - Retry delays are zero so retry tests run fast
"""

import os
from typing import List
from unittest.mock import AsyncMock, Mock

import pytest

os.environ.setdefault("EMBEDDING_BACKEND", "fake")
os.environ.setdefault("GENERATION_BACKEND", "fake")
os.environ.setdefault("VECTOR_STORE_BACKEND", "memory")
os.environ.setdefault("EMBEDDING_DIMENSION", "8")

from ragline import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from ragline.application.pipeline import RagPipeline  # noqa: E402
from ragline.config import RagConfig  # noqa: E402
from ragline.domain.entities import Document, ScoredDocument  # noqa: E402
from ragline.domain.services import (  # noqa: E402
    EmbeddingService,
    GenerationService,
    VectorStore,
)

TEST_DIMENSION = 4
TEST_INSTRUCTION = "Answer using only the context."


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (need PostgreSQL + pgvector)"
    )


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def _make_document(doc_id: str, text: str = "", embedding=None, **metadata) -> Document:
    return Document(
        id=doc_id,
        text=text or f"content of {doc_id}",
        embedding=tuple(embedding or (0.1,) * TEST_DIMENSION),
        metadata=metadata,
    )


def _make_hit(doc_id: str, score: float, text: str = "") -> ScoredDocument:
    return ScoredDocument(document=_make_document(doc_id, text), score=score)


@pytest.fixture
def sample_hits() -> List[ScoredDocument]:
    """Five hits with a tie at the top (unordered on purpose)."""
    return [
        _make_hit("d4", 0.5),
        _make_hit("d2", 0.9),
        _make_hit("d5", 0.1),
        _make_hit("d1", 0.9),
        _make_hit("d3", 0.7),
    ]


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def rag_config() -> RagConfig:
    return RagConfig(
        embedding_model="test-embed",
        generation_model="test-gen",
        top_k=3,
        max_context_chars=50,
        timeout_ms=200,
        retry_count=1,
        retry_base_delay_ms=0,
        retry_max_delay_ms=0,
        embedding_dimension=TEST_DIMENSION,
        max_query_chars=200,
        max_document_chars=1000,
    )


# ============================================================================
# Collaborator Mock Fixtures
# ============================================================================


@pytest.fixture
def mock_embedding_service() -> Mock:
    service = Mock(spec=EmbeddingService)
    service.embed = AsyncMock(return_value=[0.1, 0.2, 0.3, 0.4])
    return service


@pytest.fixture
def mock_vector_store() -> Mock:
    store = Mock(spec=VectorStore)
    store.search = AsyncMock(return_value=[])
    store.upsert = AsyncMock(return_value=None)
    store.delete = AsyncMock(return_value=True)
    store.count = AsyncMock(return_value=0)
    return store


@pytest.fixture
def mock_generation_service() -> Mock:
    service = Mock(spec=GenerationService)
    service.generate = AsyncMock(return_value="The answer.")
    return service


@pytest.fixture
def pipeline(
    mock_embedding_service, mock_vector_store, mock_generation_service, rag_config
) -> RagPipeline:
    return RagPipeline(
        embedding_service=mock_embedding_service,
        vector_store=mock_vector_store,
        generation_service=mock_generation_service,
        config=rag_config,
        instruction=TEST_INSTRUCTION,
    )
