"""
Name: Stage Timing

Responsibilities:
  - Measure wall-clock duration of pipeline stages (embed, retrieve, generate)
  - Expose measurements as {stage}_ms entries for logs and metadata

Collaborators:
  - application.pipeline: wraps each collaborator call
  - metrics.py: consumes the seconds values for histograms

Notes:
  - One StageTimings per request; never shared across tasks
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class StageTimings:
    """
    R: Container for multi-stage timing measurements.

    Usage:
        timings = StageTimings()
        with timings.measure("embed"):
            vector = await embed(q)
        timings.to_dict()
        # {"embed_ms": 45.2, "total_ms": 45.9}
    """

    _stages: dict[str, float] = field(default_factory=dict)
    _started_at: float = field(default_factory=time.perf_counter)

    @contextmanager
    def measure(self, stage_name: str) -> Iterator[None]:
        """R: Record the duration of the enclosed block, even if it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self._stages[stage_name] = time.perf_counter() - start

    def seconds(self, stage_name: str) -> float:
        return self._stages.get(stage_name, 0.0)

    def to_dict(self) -> dict[str, float]:
        """
        R: Get all timings in milliseconds.

        Returns:
            Dict with {stage}_ms keys and total_ms
        """
        result = {
            f"{name}_ms": round(seconds * 1000, 2)
            for name, seconds in self._stages.items()
        }
        result["total_ms"] = round((time.perf_counter() - self._started_at) * 1000, 2)
        return result
