"""
Genotype encoding and decoding.

A chromosome holds one direction symbol per pixel (0 = no outgoing edge,
1..8 = a Moore direction, see ``graph.DIRECTION_OFFSETS``). Decoding treats
every non-zero gene as an undirected edge and returns the connected components
as segments.

Seed chromosomes come from a randomized minimum spanning forest grown with
Prim's algorithm from several seed pixels at once.

Based on:
    Ripon, K. S. N., Ali, L. E., Newaz, S., & Ma, J. (2017). A multi-objective
    evolutionary algorithm for color image segmentation.
    https://doi.org/10.1007/978-3-319-71928-3_17
"""

from __future__ import annotations

import heapq
import logging
from functools import cached_property

import numpy as np

from .disjoint_set import DisjointSet
from .exceptions import ConfigurationError, DecodeError
from .graph import DIRECTION_OFFSETS, N_SYMBOLS, NO_EDGE, PixelGraph, WeightedEdge
from .objectives import Objectives, ObjectiveWeights, evaluate_objectives, weighted_fitness

CHROMOSOME_DTYPE = np.int8


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def _push_frontier(heap: list[WeightedEdge], graph: PixelGraph, node: int, visited: np.ndarray) -> None:
    targets = graph.symbol_targets[node]
    weights = graph.symbol_weights[node]
    for code in DIRECTION_OFFSETS:
        target = int(targets[code])
        if target >= 0 and not visited[target]:
            heapq.heappush(heap, WeightedEdge(float(weights[code]), node, target))


def build_seed_chromosome(
    graph: PixelGraph,
    tree_count: int,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """
    Chromosome of a randomized minimum spanning forest with ``tree_count`` trees.

    All trees share one min-heap of frontier edges keyed by RGB distance. When
    edge ``(source, target)`` is accepted, the gene of ``source`` points at
    ``target`` unless ``source`` already has an edge, in which case the gene of
    ``target`` points back at ``source``.
    """
    tree_count = int(tree_count)
    if tree_count < 1:
        raise ConfigurationError(f"tree_count must be at least 1; got {tree_count}.")
    rng = rng or np.random.default_rng()
    n = graph.size
    chromosome = np.zeros(n, dtype=CHROMOSOME_DTYPE)
    visited = np.zeros(n, dtype=bool)
    heap: list[WeightedEdge] = []

    seeds = rng.choice(n, size=min(tree_count, n), replace=False)
    for seed in seeds:
        visited[seed] = True
    for seed in seeds:
        _push_frontier(heap, graph, int(seed), visited)
    n_visited = len(seeds)

    while n_visited < n and heap:
        edge = heapq.heappop(heap)
        if visited[edge.target]:
            continue
        visited[edge.target] = True
        n_visited += 1
        _push_frontier(heap, graph, edge.target, visited)

        if chromosome[edge.source] == NO_EDGE:
            chromosome[edge.source] = graph.direction_of(edge.source, edge.target)
        else:
            chromosome[edge.target] = graph.direction_of(edge.target, edge.source)

    if n_visited < n:
        _logger().debug("Seed forest stopped with %d of %d pixels visited.", n_visited, n)
    return chromosome


def decode_segments(chromosome: np.ndarray, graph: PixelGraph) -> tuple[list[np.ndarray], np.ndarray]:
    """
    Decode a chromosome into ``(segments, segment_of)``.

    ``segments`` are sorted pixel-index arrays; ``segment_of`` maps each pixel
    to a dense segment id assigned in first-seen pixel order.

    Raises:
        DecodeError: wrong chromosome length, a symbol outside 0..8, or a
            direction pointing outside the image.
    """
    genes = np.asarray(chromosome)
    if genes.shape != (graph.size,):
        raise DecodeError(f"chromosome must have length {graph.size}; got shape {genes.shape}.")
    genes = genes.astype(np.int64)
    out_of_alphabet = (genes < 0) | (genes >= N_SYMBOLS)
    if out_of_alphabet.any():
        pixel = int(np.flatnonzero(out_of_alphabet)[0])
        raise DecodeError(f"pixel {pixel} has symbol {int(genes[pixel])} outside 0..8.", pixel, int(genes[pixel]))

    targets = graph.symbol_targets[np.arange(graph.size), genes]
    has_edge = genes != NO_EDGE
    broken = has_edge & (targets < 0)
    if broken.any():
        pixel = int(np.flatnonzero(broken)[0])
        raise DecodeError(
            f"pixel {pixel} has direction {int(genes[pixel])} pointing outside the image.",
            pixel,
            int(genes[pixel]),
        )

    ds = DisjointSet(graph.size)
    sources = np.flatnonzero(has_edge)
    ds.union_many(sources, targets[sources])
    return ds.groups()


class Individual:
    """
    One candidate segmentation.

    The chromosome is read-only. Segments and objectives are derived from it
    on first access and never change afterwards; use ``with_chromosome`` to
    obtain an individual for a different genotype.
    """

    def __init__(self, chromosome: np.ndarray, graph: PixelGraph) -> None:
        genes = np.array(chromosome, dtype=CHROMOSOME_DTYPE, copy=True)
        genes.flags.writeable = False
        self._chromosome = genes
        self._graph = graph

    @classmethod
    def seeded(cls, graph: PixelGraph, tree_count: int, rng: np.random.Generator | None = None) -> "Individual":
        return cls(build_seed_chromosome(graph, tree_count, rng), graph)

    def __repr__(self) -> str:
        state = f"segments={self.n_segments}" if "_decoded" in self.__dict__ else "undecoded"
        return f"Individual(n_genes={self._chromosome.size}, {state})"

    @property
    def chromosome(self) -> np.ndarray:
        return self._chromosome

    @property
    def graph(self) -> PixelGraph:
        return self._graph

    def with_chromosome(self, chromosome: np.ndarray) -> "Individual":
        return Individual(chromosome, self._graph)

    @cached_property
    def _decoded(self) -> tuple[list[np.ndarray], np.ndarray]:
        return decode_segments(self._chromosome, self._graph)

    @property
    def segments(self) -> list[np.ndarray]:
        return self._decoded[0]

    @property
    def segment_of(self) -> np.ndarray:
        return self._decoded[1]

    @property
    def n_segments(self) -> int:
        return len(self._decoded[0])

    @cached_property
    def objectives(self) -> Objectives:
        return evaluate_objectives(self.segment_of, self._graph)

    @property
    def is_evaluated(self) -> bool:
        return "objectives" in self.__dict__

    @property
    def edge_value(self) -> float:
        return self.objectives.edge_value

    @property
    def connectivity_measure(self) -> float:
        return self.objectives.connectivity_measure

    @property
    def overall_deviation(self) -> float:
        return self.objectives.overall_deviation

    def weighted_fitness(self, weights: ObjectiveWeights) -> float:
        return weighted_fitness(self.objectives, weights)


__all__ = [
    "CHROMOSOME_DTYPE",
    "build_seed_chromosome",
    "decode_segments",
    "Individual",
]
