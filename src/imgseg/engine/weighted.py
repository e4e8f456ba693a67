"""
Weighted single-objective evolution mode.

Scores every individual with ``w_e * edge - w_c * connectivity - w_d * deviation``
and runs a (mu + lambda) GA: random distinct parent pairs produce
``offspring_factor * pop_size`` children, and the best ``pop_size`` of
parents + children survive.
"""

from __future__ import annotations

import logging

import numpy as np

from imgseg.foundation.eval import EvaluationBackend
from imgseg.foundation.eval.backends import resolve_eval_backend
from imgseg.foundation.genotype import Individual
from imgseg.foundation.graph import PixelGraph

from .config import SegmentationConfigData
from .nsgaii import GenerationStats, SegmentationResult
from .population import Population, initialize_population, unique_individuals
from .variation import VariationPipeline


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def random_distinct_pairs(n: int, n_pairs: int, rng: np.random.Generator) -> np.ndarray:
    """``(n_pairs, 2)`` index pairs with two different members each."""
    if n < 2:
        raise ValueError("need at least two individuals to form distinct pairs.")
    first = rng.integers(0, n, size=n_pairs)
    second = rng.integers(0, n - 1, size=n_pairs)
    second = second + (second >= first)
    return np.stack([first, second], axis=1)


def fitness_order(population: Population, weights) -> tuple[np.ndarray, np.ndarray]:
    """Indices sorted by descending weighted fitness, and the fitness values."""
    fitness = np.array([ind.weighted_fitness(weights) for ind in population], dtype=float)
    return np.argsort(-fitness, kind="stable"), fitness


class WeightedSegmentationGA:
    """Weighted-sum evolution loop sharing the NSGA-II evaluators and operators."""

    def __init__(self, config: SegmentationConfigData, eval_backend: EvaluationBackend | None = None) -> None:
        self.cfg = config
        self._eval_backend = eval_backend
        self.variation = VariationPipeline.from_config(config.crossover, config.mutation)

    @property
    def n_pairs(self) -> int:
        return max(1, (self.cfg.offspring_factor * self.cfg.pop_size) // 2)

    def run(self, graph: PixelGraph, seed: int | None = None) -> SegmentationResult:
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
        order, fitness = fitness_order(population, cfg.weights)
        population = population.subset(order)
        _logger().info("Initial population generated; best weighted fitness %.3f.", fitness[order[0]])
        history: list[GenerationStats] = []

        for generation in range(1, cfg.generations + 1):
            pairs = random_distinct_pairs(len(population), self.n_pairs, rng)
            X_parents = population.chromosomes[pairs]
            X_children = self.variation.produce_offspring(X_parents, graph, rng)
            children = Population.evaluate([Individual(x, graph) for x in X_children], backend)

            merged = population.merge(children)
            order, fitness = fitness_order(merged, cfg.weights)
            population = merged.subset(order[: cfg.pop_size])

            stats = GenerationStats.from_individuals(generation, [population[0]], best_fitness=float(fitness[order[0]]))
            stats.log()
            history.append(stats)

        population = Population.evaluate(unique_individuals(population.individuals), backend)
        _logger().info("Reduced population to %d unique individuals.", len(population))
        order, _ = fitness_order(population, cfg.weights)
        population = population.subset(order)
        leaders = list(population.individuals[: max(1, cfg.pop_size // 10)])
        return SegmentationResult(population=population, front=leaders, F=population.F, history=history, mode="weighted")


__all__ = [
    "random_distinct_pairs",
    "fitness_order",
    "WeightedSegmentationGA",
]
