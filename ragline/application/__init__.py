"""Application layer: pipeline orchestration and pure helpers."""

from .guard import CollaboratorGuard, is_transient_error
from .pipeline import RagPipeline
from .prompt_builder import build_prompt
from .ranking import rank_results

__all__ = [
    "CollaboratorGuard",
    "RagPipeline",
    "build_prompt",
    "is_transient_error",
    "rank_results",
]
