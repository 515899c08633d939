"""
Name: Ollama Services (self-hosted embeddings + generation)

Responsibilities:
  - Implement EmbeddingService via POST /api/embeddings
  - Implement GenerationService via POST /api/generate (non-streaming)
  - Map GenerationOptions onto Ollama request options

Collaborators:
  - httpx.AsyncClient: HTTP transport
  - domain.services: EmbeddingService / GenerationService contracts

Constraints:
  - HTTP errors propagate (raise_for_status) so the guard can classify them
  - No retries here

Notes:
  - transport can be injected (httpx.MockTransport) for tests
"""

from __future__ import annotations

from typing import Any, Dict

import httpx

from ...domain.entities import EmbeddingKind, GenerationOptions
from ...exceptions import EmbeddingUnavailableError, GenerationUnavailableError
from ...logger import logger

DEFAULT_OLLAMA_URL = "http://localhost:11434"


class _OllamaClient:
    """R: Thin async JSON client shared by the Ollama services."""

    def __init__(
        self,
        base_url: str = DEFAULT_OLLAMA_URL,
        *,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(path, json=payload)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    "ollama http error",
                    extra={"path": path, "status_code": e.response.status_code},
                )
                raise
            except httpx.TransportError as e:
                logger.error(
                    "ollama connection error",
                    extra={"path": path, "base_url": self.base_url, "error": str(e)},
                )
                raise
            return response.json()


class OllamaEmbeddingService(_OllamaClient):
    """R: EmbeddingService backed by a local Ollama server."""

    DEFAULT_MODEL = "nomic-embed-text"

    def __init__(self, base_url: str = DEFAULT_OLLAMA_URL, *, model: str | None = None, **kwargs):
        super().__init__(base_url, **kwargs)
        self.model = model or self.DEFAULT_MODEL

    async def embed(self, text: str, *, kind: EmbeddingKind = "query") -> list[float]:
        # R: nomic-style models served by Ollama embed both sides the same way
        data = await self.post("/api/embeddings", {"model": self.model, "prompt": text})
        embedding = data.get("embedding")
        if not embedding:
            raise EmbeddingUnavailableError("Ollama returned no embedding")
        return list(embedding)


class OllamaGenerationService(_OllamaClient):
    """R: GenerationService backed by a local Ollama server."""

    DEFAULT_MODEL = "llama3.1"

    def __init__(self, base_url: str = DEFAULT_OLLAMA_URL, *, model: str | None = None, **kwargs):
        super().__init__(base_url, **kwargs)
        self.model = model or self.DEFAULT_MODEL

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "num_predict": options.max_output_tokens,
                "temperature": options.temperature,
            },
        }
        data = await self.post("/api/generate", payload)
        text = data.get("response")
        if not isinstance(text, str):
            raise GenerationUnavailableError("Ollama response has no text")

        logger.info(
            "ollama generation completed",
            extra={"model": self.model, "answer_chars": len(text)},
        )
        return text
