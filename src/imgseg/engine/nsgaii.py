"""
NSGA-II over graph-encoded segmentations.

Each generation ranks the population, fills a mating pool with the configured
parent selection, produces one child per pool slot, evaluates the children
and keeps the best ``pop_size`` of parents + children by rank and crowding.
The run stops after a fixed number of generations.

Based on:
    Deb, K., Pratap, A., Agarwal, S., & Meyarivan, T. (2002). A fast and
    elitist multiobjective genetic algorithm: NSGA-II. IEEE Transactions on
    Evolutionary Computation, 6(2), 182-197. https://doi.org/10.1109/4235.996017
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from imgseg.foundation.eval import EvaluationBackend
from imgseg.foundation.eval.backends import resolve_eval_backend
from imgseg.foundation.genotype import Individual
from imgseg.foundation.graph import PixelGraph

from .config import SegmentationConfigData
from .population import Population, initialize_population, unique_individuals
from .ranking import fast_non_dominated_sort, rank_and_crowding
from .selection import elitist_truncation, resolve_parent_selection
from .variation import VariationPipeline


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


@dataclass
class GenerationStats:
    """Averages over the leading individuals of one generation."""

    generation: int
    front_size: int
    mean_edge_value: float
    mean_connectivity: float
    mean_deviation: float
    mean_segments: float
    best_fitness: float | None = None

    @classmethod
    def from_individuals(cls, generation: int, leaders: Sequence[Individual], best_fitness: float | None = None) -> "GenerationStats":
        return cls(
            generation=generation,
            front_size=len(leaders),
            mean_edge_value=float(np.mean([ind.edge_value for ind in leaders])),
            mean_connectivity=float(np.mean([ind.connectivity_measure for ind in leaders])),
            mean_deviation=float(np.mean([ind.overall_deviation for ind in leaders])),
            mean_segments=float(np.mean([ind.n_segments for ind in leaders])),
            best_fitness=best_fitness,
        )

    def log(self) -> None:
        _logger().info(
            "Gen %d - leaders %d - avg EV %.3f - avg CM %.3f - avg OD %.3f - avg segments %.3f",
            self.generation,
            self.front_size,
            self.mean_edge_value,
            self.mean_connectivity,
            self.mean_deviation,
            self.mean_segments,
        )


@dataclass
class SegmentationResult:
    """
    Final state of a run.

    ``front`` holds the individuals chosen for output: the first Pareto front
    in NSGA-II mode, the best individuals by weighted fitness in weighted mode.
    """

    population: Population
    front: list[Individual]
    F: np.ndarray
    history: list[GenerationStats] = field(default_factory=list)
    mode: str = "nsga2"


def first_front(population: Population) -> list[Individual]:
    fronts, _ = fast_non_dominated_sort(population.F)
    return [population.individuals[i] for i in fronts[0]]


class SegmentationNSGAII:
    """
    Pareto-mode evolution loop.

    Args:
        config: Frozen run configuration.
        eval_backend: Backend used for every evaluation. When omitted, one is
            built from ``config.eval_backend`` and closed at the end of ``run``.
    """

    def __init__(self, config: SegmentationConfigData, eval_backend: EvaluationBackend | None = None) -> None:
        self.cfg = config
        self._eval_backend = eval_backend
        self.variation = VariationPipeline.from_config(config.crossover, config.mutation)
        self.parent_selection = resolve_parent_selection(*config.selection)

    def run(self, graph: PixelGraph, seed: int | None = None) -> SegmentationResult:
        """Run the NSGA-II algorithm."""
        rng = np.random.default_rng(seed)
        owns_backend = self._eval_backend is None
        backend = self._eval_backend or resolve_eval_backend(self.cfg.eval_backend, n_workers=self.cfg.n_workers)
        try:
            return self._run(graph, rng, backend)
        finally:
            if owns_backend:
                backend.close()

    def _run(self, graph: PixelGraph, rng: np.random.Generator, backend: EvaluationBackend) -> SegmentationResult:
        cfg = self.cfg
        population = initialize_population(graph, cfg.pop_size, cfg.segments, rng, backend)
        _logger().info("Initial population of %d individuals generated.", len(population))
        history: list[GenerationStats] = []

        for generation in range(1, cfg.generations + 1):
            fronts, rank, crowding = rank_and_crowding(population.F)
            stats = GenerationStats.from_individuals(generation, [population[i] for i in fronts[0]])
            stats.log()
            history.append(stats)

            offspring = self.offspring(population, fronts, rank, crowding, graph, rng, backend)
            merged = population.merge(offspring)
            m_fronts, _, m_crowding = rank_and_crowding(merged.F)
            population = merged.subset(elitist_truncation(m_fronts, m_crowding, cfg.pop_size))

        front = first_front(population)
        _logger().info("Size of first front before reduction: %d", len(front))
        population = Population.evaluate(unique_individuals(population.individuals), backend)
        _logger().info("Reduced population to %d unique individuals.", len(population))
        front = first_front(population)
        final = GenerationStats.from_individuals(cfg.generations + 1, front)
        final.log()
        history.append(final)
        return SegmentationResult(population=population, front=front, F=population.F, history=history, mode="nsga2")

    def offspring(
        self,
        population: Population,
        fronts: list[np.ndarray],
        rank: np.ndarray,
        crowding: np.ndarray,
        graph: PixelGraph,
        rng: np.random.Generator,
        backend: EvaluationBackend,
    ) -> Population:
        """One generation of children, evaluated."""
        n_parents = len(population)
        parent_idx = self.parent_selection(fronts, rank, crowding, n_parents, rng)
        X_parents = population.chromosomes[parent_idx]
        X_children = self.variation.produce_offspring(X_parents, graph, rng)
        children = [Individual(x, graph) for x in X_children]
        _logger().debug("Produced %d children from %d parents.", len(children), n_parents)
        return Population.evaluate(children, backend)


__all__ = [
    "GenerationStats",
    "SegmentationResult",
    "SegmentationNSGAII",
    "first_front",
]
