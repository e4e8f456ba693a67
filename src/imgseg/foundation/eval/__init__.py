from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Protocol, Sequence, TypeVar

import numpy as np

if TYPE_CHECKING:
    from imgseg.foundation.genotype import Individual

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class EvaluationResult:
    """Objective matrix (minimization form) for a batch of individuals."""

    F: np.ndarray


class EvaluationBackend(Protocol):
    """Protocol for evaluation backends."""

    def evaluate(self, individuals: Sequence["Individual"]) -> EvaluationResult: ...

    def map(self, fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
        """Apply ``fn`` to every item, keeping input order."""
        return [fn(item) for item in items]

    def close(self) -> None:  # pragma: no cover - optional for pooled backends
        """Clean up any resources (executors, pools)."""
        return None


__all__ = ["EvaluationBackend", "EvaluationResult"]
