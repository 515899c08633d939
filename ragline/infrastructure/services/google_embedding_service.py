"""
Name: Google Embeddings Service Implementation

Responsibilities:
  - Implement EmbeddingService over the Google GenAI SDK (async client)
  - Differentiate task_type for documents vs queries
  - Reject empty provider responses

Collaborators:
  - domain.services.EmbeddingService: Interface implementation
  - google.genai: Google Gen AI SDK (client.aio.models.embed_content)

Constraints:
  - No retries here; the pipeline guard owns timeout + retry
  - Provider exceptions propagate unchanged so the guard can classify them

Notes:
  - Adapter pattern over the Google GenAI SDK
  - Dimensionality is checked by the pipeline against its configuration
"""

from __future__ import annotations

from google import genai

from ...domain.entities import EmbeddingKind
from ...exceptions import EmbeddingUnavailableError
from ...logger import logger


class GoogleEmbeddingService:
    """
    R: Google implementation of EmbeddingService.

    Implements domain.services.EmbeddingService using text-embedding-004
    (or any model id the SDK accepts).
    """

    MODEL_ID = "text-embedding-004"

    TASK_DOCUMENT = "retrieval_document"
    TASK_QUERY = "retrieval_query"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        client: genai.Client | None = None,
        model_id: str | None = None,
    ):
        """
        R: Initialize Google Embedding Service.

        Args:
            api_key: Google API key (inject via container/config)
            client: Optional pre-built genai.Client (useful for tests)
            model_id: Override model id (default: text-embedding-004)

        Raises:
            EmbeddingUnavailableError: If API key not configured
        """
        resolved_key = (api_key or "").strip()
        if not resolved_key and client is None:
            logger.error("GoogleEmbeddingService: GOOGLE_API_KEY not configured")
            raise EmbeddingUnavailableError("GOOGLE_API_KEY not configured")

        self._model_id = (model_id or self.MODEL_ID).strip()

        # R: Allow injecting a client for tests; otherwise build one from key
        self._client = client or genai.Client(api_key=resolved_key)

        logger.info(
            "GoogleEmbeddingService initialized",
            extra={"model_id": self._model_id},
        )

    async def embed(self, text: str, *, kind: EmbeddingKind = "query") -> list[float]:
        """R: Embed one text; documents and queries use different task types."""
        task_type = self.TASK_DOCUMENT if kind == "document" else self.TASK_QUERY
        resp = await self._client.aio.models.embed_content(
            model=self._model_id,
            contents=[text],
            config={"task_type": task_type},
        )

        embeddings = getattr(resp, "embeddings", None) or []
        if len(embeddings) != 1:
            raise EmbeddingUnavailableError(
                f"Embedding response size mismatch: expected 1, got {len(embeddings)}"
            )

        values = getattr(embeddings[0], "values", None)
        if not values:
            raise EmbeddingUnavailableError("Empty embedding response")

        return list(values)

    @property
    def model_id(self) -> str:
        return self._model_id
