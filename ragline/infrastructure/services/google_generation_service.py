"""
Name: Google Gemini Generation Service Implementation

Responsibilities:
  - Implement GenerationService over the Google GenAI SDK (async client)
  - Forward GenerationOptions as GenerateContentConfig

Collaborators:
  - domain.services.GenerationService: Interface implementation
  - google.genai: Google Gen AI SDK (client.aio.models.generate_content)

Constraints:
  - Returns response text exactly as produced (no stripping)
  - No retries here; the pipeline guard owns timeout + retry
"""

from __future__ import annotations

from google import genai
from google.genai import types

from ...domain.entities import GenerationOptions
from ...exceptions import GenerationUnavailableError
from ...logger import logger


class GoogleGenerationService:
    """
    R: Google Gemini implementation of GenerationService.
    """

    DEFAULT_MODEL_ID = "gemini-2.0-flash"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        client: genai.Client | None = None,
        model_id: str | None = None,
    ) -> None:
        """
        R: Initialize the service (preferably via DI).

        Raises:
            GenerationUnavailableError: If no API key and no injected client
        """
        resolved_key = (api_key or "").strip()
        if not resolved_key and client is None:
            logger.error("GoogleGenerationService: GOOGLE_API_KEY not configured")
            raise GenerationUnavailableError("GOOGLE_API_KEY not configured")

        self._client = client or genai.Client(api_key=resolved_key)
        self._model_id = (model_id or self.DEFAULT_MODEL_ID).strip()

        logger.info(
            "GoogleGenerationService initialized",
            extra={"model_id": self._model_id},
        )

    @property
    def model_id(self) -> str:
        return self._model_id

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        response = await self._client.aio.models.generate_content(
            model=self._model_id,
            contents=prompt,
            config=types.GenerateContentConfig(
                max_output_tokens=options.max_output_tokens,
                temperature=options.temperature,
            ),
        )
        text = getattr(response, "text", None) or ""

        logger.info(
            "GoogleGenerationService: Response generated",
            extra={
                "model_id": self._model_id,
                "prompt_chars": len(prompt),
                "answer_chars": len(text),
            },
        )
        return text
