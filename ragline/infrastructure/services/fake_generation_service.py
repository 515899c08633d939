"""
Name: Fake Generation Service (Deterministic)

Responsibilities:
  - Provide deterministic answers for testing/CI
  - Avoid external dependencies (no API calls)
"""

from __future__ import annotations

import hashlib

from ...domain.entities import GenerationOptions
from ...logger import logger


def _build_answer(prompt: str) -> str:
    digest = hashlib.sha256(prompt.encode("utf-8")).hexdigest()[:16]
    return f"Simulated answer ({digest})"


class FakeGenerationService:
    """R: Deterministic GenerationService for tests/CI."""

    MODEL_ID = "fake-generation-v1"

    def __init__(self) -> None:
        logger.info("FakeGenerationService initialized")

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        return _build_answer(prompt)
