"""Collaborator adapters: embedding and generation services."""

from .fake_embedding_service import FakeEmbeddingService
from .fake_generation_service import FakeGenerationService
from .google_embedding_service import GoogleEmbeddingService
from .google_generation_service import GoogleGenerationService
from .ollama_service import OllamaEmbeddingService, OllamaGenerationService

__all__ = [
    "FakeEmbeddingService",
    "FakeGenerationService",
    "GoogleEmbeddingService",
    "GoogleGenerationService",
    "OllamaEmbeddingService",
    "OllamaGenerationService",
]
