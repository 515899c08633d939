"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Build the immutable RagConfig handed to the pipeline

Collaborators:
  - main.py: reads settings for CORS, logging and startup validation
  - container.py: picks adapters (embedding, generation, vector store)
  - routes.py: reads request validation limits

Constraints:
  - Lives in API/infrastructure layer, NOT in domain/application
  - No business logic, pure configuration

Notes:
  - Singleton via lru_cache
  - The pipeline never reads Settings directly; it receives a RagConfig
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.entities import GenerationOptions


@dataclass(frozen=True)
class RagConfig:
    """
    R: Explicit configuration struct for RagPipeline.

    Attributes:
        embedding_model: Model id used by the embedding collaborator
        generation_model: Model id used by the generation collaborator
        top_k: Documents retrieved per query
        max_context_chars: Per-document character budget inside the prompt
        timeout_ms: Bound for each collaborator call
        retry_count: Extra attempts per collaborator call (0 or 1)
        embedding_dimension: Expected vector length
    """

    embedding_model: str = "text-embedding-004"
    generation_model: str = "gemini-2.0-flash"
    top_k: int = 5
    max_context_chars: int = 2000
    timeout_ms: int = 10_000
    retry_count: int = 1
    retry_base_delay_ms: int = 200
    retry_max_delay_ms: int = 2000
    embedding_dimension: int = 768
    max_query_chars: int = 2000
    max_document_chars: int = 100_000
    generation: GenerationOptions = GenerationOptions()

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        embedding_backend: google | ollama | fake
        generation_backend: google | ollama | fake
        vector_store_backend: memory | postgres
        google_api_key: Google GenAI API key (required for google backends)
        ollama_base_url: Ollama server URL (ollama backends)
        database_url: PostgreSQL connection string (postgres store)
        top_k: Default documents per query (default: 5)
        max_context_chars: Per-document prompt budget (default: 2000)
        timeout_ms: Per collaborator call timeout (default: 10000)
        retry_count: Retries per collaborator call, 0 or 1 (default: 1)
        prompt_version: Instruction template version (default: v1)
        log_level: Root log level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )

    # Backends
    embedding_backend: Literal["google", "ollama", "fake"] = "google"
    generation_backend: Literal["google", "ollama", "fake"] = "google"
    vector_store_backend: Literal["memory", "postgres"] = "memory"

    # Providers
    google_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"
    database_url: str = ""

    # Models
    embedding_model: str = "text-embedding-004"
    generation_model: str = "gemini-2.0-flash"
    embedding_dimension: int = 768

    # Pipeline
    top_k: int = 5
    max_context_chars: int = 2000
    timeout_ms: int = 10_000
    retry_count: int = 1
    retry_base_delay_ms: int = 200
    retry_max_delay_ms: int = 2000
    prompt_version: str = "v1"

    # Generation (pass-through)
    generation_max_tokens: int = 512
    generation_temperature: float = 0.2

    # API limits
    max_top_k: int = 20
    max_query_chars: int = 2_000
    max_document_chars: int = 100_000
    allowed_origins: str = "http://localhost:3000"

    # Database - Connection Pool
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    log_level: str = "INFO"

    @field_validator(
        "top_k",
        "max_context_chars",
        "timeout_ms",
        "embedding_dimension",
        "generation_max_tokens",
        "max_top_k",
        "max_query_chars",
        "max_document_chars",
    )
    @classmethod
    def must_be_positive(cls, v: int, info) -> int:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be greater than 0")
        return v

    @field_validator("retry_count")
    @classmethod
    def retry_count_in_range(cls, v: int) -> int:
        # R: A collaborator call gets at most one bounded retry
        if v not in (0, 1):
            raise ValueError("retry_count must be 0 or 1")
        return v

    @field_validator("retry_base_delay_ms", "retry_max_delay_ms")
    @classmethod
    def delay_must_be_non_negative(cls, v: int, info) -> int:
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_backend_requirements(self):
        uses_google = "google" in (self.embedding_backend, self.generation_backend)
        if uses_google and not self.google_api_key:
            raise ValueError(
                "GOOGLE_API_KEY is required when a google backend is selected"
            )
        if self.vector_store_backend == "postgres" and not self.database_url:
            raise ValueError(
                "DATABASE_URL is required when VECTOR_STORE_BACKEND=postgres"
            )
        if self.top_k > self.max_top_k:
            raise ValueError(
                f"top_k ({self.top_k}) must not exceed max_top_k ({self.max_top_k})"
            )
        return self

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def rag_config(self) -> RagConfig:
        """R: Snapshot the pipeline-relevant settings into a RagConfig."""
        return RagConfig(
            embedding_model=self.embedding_model,
            generation_model=self.generation_model,
            top_k=self.top_k,
            max_context_chars=self.max_context_chars,
            timeout_ms=self.timeout_ms,
            retry_count=self.retry_count,
            retry_base_delay_ms=self.retry_base_delay_ms,
            retry_max_delay_ms=self.retry_max_delay_ms,
            embedding_dimension=self.embedding_dimension,
            max_query_chars=self.max_query_chars,
            max_document_chars=self.max_document_chars,
            generation=GenerationOptions(
                max_output_tokens=self.generation_max_tokens,
                temperature=self.generation_temperature,
            ),
        )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()
