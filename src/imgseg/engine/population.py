"""
Population container and initialization.

A Population is rebuilt every generation; the individuals it holds are
immutable, so merging and subsetting never copy chromosomes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np

from imgseg.foundation.eval import EvaluationBackend
from imgseg.foundation.eval.backends import SerialEvalBackend
from imgseg.foundation.genotype import Individual
from imgseg.foundation.graph import PixelGraph
from imgseg.foundation.objectives import N_OBJECTIVES


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Population:
    """Ordered individuals plus their objective matrix in minimization form."""

    individuals: tuple[Individual, ...]
    F: np.ndarray

    @classmethod
    def evaluate(cls, individuals: Sequence[Individual], backend: EvaluationBackend | None = None) -> "Population":
        backend = backend or SerialEvalBackend()
        individuals = tuple(individuals)
        result = backend.evaluate(individuals)
        return cls(individuals=individuals, F=result.F)

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self.individuals)

    def __getitem__(self, index: int) -> Individual:
        return self.individuals[index]

    @property
    def chromosomes(self) -> np.ndarray:
        if not self.individuals:
            return np.empty((0, 0), dtype=np.int8)
        return np.vstack([ind.chromosome for ind in self.individuals])

    def merge(self, other: "Population") -> "Population":
        F = np.vstack([self.F.reshape(-1, N_OBJECTIVES), other.F.reshape(-1, N_OBJECTIVES)])
        return Population(individuals=self.individuals + other.individuals, F=F)

    def subset(self, indices: Sequence[int] | np.ndarray) -> "Population":
        idx = np.asarray(indices, dtype=int)
        return Population(individuals=tuple(self.individuals[i] for i in idx), F=self.F[idx])


def initial_tree_counts(pop_size: int, segments: tuple[int, int], rng: np.random.Generator) -> np.ndarray:
    """Tree count per seed forest: uniform in ``[lower, upper)``, or ``lower`` when the bounds are equal."""
    lower, upper = int(segments[0]), int(segments[1])
    if upper <= lower:
        return np.full(pop_size, lower, dtype=int)
    return rng.integers(lower, upper, size=pop_size)


def initialize_population(
    graph: PixelGraph,
    pop_size: int,
    segments: tuple[int, int],
    rng: np.random.Generator,
    backend: EvaluationBackend | None = None,
) -> Population:
    """
    Seed ``pop_size`` individuals from random spanning forests and evaluate them.

    Each forest draws from its own generator, spawned from ``rng`` up front, so
    the population is the same whether the backend seeds serially or on a pool.
    """
    backend = backend or SerialEvalBackend()
    counts = initial_tree_counts(pop_size, segments, rng)
    child_seeds = rng.integers(0, np.iinfo(np.int64).max, size=pop_size)
    # Shared graph tables are built once here rather than raced by workers.
    graph.symbol_weights

    def _seed(task: tuple[int, int]) -> Individual:
        tree_count, child_seed = task
        return Individual.seeded(graph, tree_count, np.random.default_rng(child_seed))

    individuals = backend.map(_seed, [(int(t), int(s)) for t, s in zip(counts, child_seeds)])
    _logger().debug("Seeded %d individuals with tree counts %s.", pop_size, counts.tolist())
    return Population.evaluate(individuals, backend)


def unique_individuals(individuals: Sequence[Individual]) -> list[Individual]:
    """Drop individuals whose chromosome repeats an earlier one; order is kept."""
    seen: set[bytes] = set()
    out = []
    for ind in individuals:
        key = ind.chromosome.tobytes()
        if key in seen:
            continue
        seen.add(key)
        out.append(ind)
    return out


__all__ = [
    "Population",
    "initial_tree_counts",
    "initialize_population",
    "unique_individuals",
]
