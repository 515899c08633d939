"""
Unit tests for ragline/config.py (Settings validation).

Tests:
  - Default values are applied correctly
  - Positive-size validation and retry_count range
  - Backend requirements (Google key, database URL)
  - rag_config() snapshot and get_allowed_origins_list parsing

Note:
  - Uses monkeypatch to set environment variables
  - conftest selects fake backends, so no key/URL is needed by default
"""

import pytest
from pydantic import ValidationError

from ragline.config import RagConfig, Settings, get_settings
from ragline.domain.entities import GenerationOptions

pytestmark = pytest.mark.unit  # Apply to all tests in this module


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("EMBEDDING_DIMENSION", raising=False)

        settings = Settings()

        assert settings.top_k == 5
        assert settings.max_context_chars == 2000
        assert settings.timeout_ms == 10_000
        assert settings.retry_count == 1
        assert settings.embedding_dimension == 768
        assert settings.max_top_k == 20
        assert settings.prompt_version == "v1"

    @pytest.mark.parametrize(
        "name", ["TOP_K", "MAX_CONTEXT_CHARS", "TIMEOUT_MS", "EMBEDDING_DIMENSION"]
    )
    def test_sizes_must_be_positive(self, monkeypatch, name):
        monkeypatch.setenv(name, "0")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert f"{name.lower()} must be greater than 0" in str(exc_info.value)

    def test_retry_count_at_most_one(self, monkeypatch):
        monkeypatch.setenv("RETRY_COUNT", "2")

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "retry_count must be 0 or 1" in str(exc_info.value)

    def test_google_backend_requires_key(self, monkeypatch):
        monkeypatch.setenv("GENERATION_BACKEND", "google")
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "GOOGLE_API_KEY is required" in str(exc_info.value)

    def test_postgres_store_requires_database_url(self, monkeypatch):
        monkeypatch.setenv("VECTOR_STORE_BACKEND", "postgres")
        monkeypatch.delenv("DATABASE_URL", raising=False)

        with pytest.raises(ValidationError) as exc_info:
            Settings()

        assert "DATABASE_URL is required" in str(exc_info.value)

    def test_top_k_cannot_exceed_max(self, monkeypatch):
        monkeypatch.setenv("TOP_K", "30")

        with pytest.raises(ValidationError):
            Settings()

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("EMBEDDING_BACKEND", "openai")

        with pytest.raises(ValidationError):
            Settings()

    def test_allowed_origins_list(self, monkeypatch):
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.test, http://b.test,,")

        assert Settings().get_allowed_origins_list() == ["http://a.test", "http://b.test"]

    def test_rag_config_snapshot(self, monkeypatch):
        monkeypatch.setenv("TOP_K", "3")
        monkeypatch.setenv("TIMEOUT_MS", "1500")
        monkeypatch.setenv("GENERATION_MAX_TOKENS", "128")
        monkeypatch.setenv("GENERATION_TEMPERATURE", "0.7")

        config = Settings().rag_config()

        assert isinstance(config, RagConfig)
        assert config.top_k == 3
        assert config.timeout_seconds == 1.5
        assert config.generation == GenerationOptions(max_output_tokens=128, temperature=0.7)

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()

        assert get_settings() is get_settings()
        get_settings.cache_clear()
