from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence, TypeVar

from imgseg.foundation.genotype import Individual
from imgseg.foundation.objectives import Objectives, objective_matrix
from . import EvaluationBackend, EvaluationResult

T = TypeVar("T")
R = TypeVar("R")


def _evaluate_one(individual: Individual) -> Objectives:
    """Decode and score one individual; the result stays cached on it."""
    return individual.objectives


class SerialEvalBackend(EvaluationBackend):
    """Synchronous in-process evaluation (default)."""

    def evaluate(self, individuals: Sequence[Individual]) -> EvaluationResult:
        return EvaluationResult(F=objective_matrix([_evaluate_one(ind) for ind in individuals]))


class ThreadPoolEvalBackend(EvaluationBackend):
    """
    Parallel evaluation on a thread pool.

    Notes:
        - Individuals are evaluated in place, so cached objectives survive the call.
        - numpy releases the GIL in the heavy array kernels; speed-ups are
          best on large images.
    """

    def __init__(self, n_workers: Optional[int] = None):
        self.n_workers = max(1, n_workers or os.cpu_count() or 1)
        self._executor: ThreadPoolExecutor | None = None

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.n_workers, thread_name_prefix="imgseg-eval")
        return self._executor

    def evaluate(self, individuals: Sequence[Individual]) -> EvaluationResult:
        pending = [ind for ind in individuals if not ind.is_evaluated]
        if self.n_workers <= 1 or len(pending) <= 1:
            return SerialEvalBackend().evaluate(individuals)

        # Shared graph tables are built once here rather than raced by workers.
        graph = pending[0].graph
        graph.symbol_targets
        graph.offset_distances

        # map preserves input order and re-raises the first worker exception.
        list(self._pool().map(_evaluate_one, pending))
        return EvaluationResult(F=objective_matrix([ind.objectives for ind in individuals]))

    def map(self, fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
        if self.n_workers <= 1 or len(items) <= 1:
            return [fn(item) for item in items]
        return list(self._pool().map(fn, items))

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def resolve_eval_backend(name: str, *, n_workers: Optional[int] = None) -> EvaluationBackend:
    key = (name or "serial").lower()
    if key in {"thread", "threads", "threadpool"}:
        return ThreadPoolEvalBackend(n_workers=n_workers)
    return SerialEvalBackend()


__all__ = ["SerialEvalBackend", "ThreadPoolEvalBackend", "resolve_eval_backend"]
