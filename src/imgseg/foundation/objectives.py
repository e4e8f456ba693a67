"""
Segmentation objectives.

All three objectives are pure functions of a segment labelling and the pixel graph:

- edge value (maximize): sum of RGB distances over ordered neighbour pairs
  that straddle a segment boundary;
- connectivity measure (minimize): 1/8 per such pair;
- overall deviation (minimize): sum of distances from each pixel to its
  segment's integer-truncated RGB centroid.

Ordered pairs are counted once per direction, so every unordered boundary
pair contributes twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from .graph import NEIGHBOR_OFFSETS, PixelGraph, shift_slices

CONNECTIVITY_PENALTY = 1.0 / 8.0
N_OBJECTIVES = 3


class Objectives(NamedTuple):
    edge_value: float
    connectivity_measure: float
    overall_deviation: float

    def minimization_vector(self) -> np.ndarray:
        """Objective vector with every component to be minimized (edge value negated)."""
        return np.array([-self.edge_value, self.connectivity_measure, self.overall_deviation], dtype=float)


@dataclass(frozen=True)
class ObjectiveWeights:
    """Weights for the single-objective (weighted) evolution mode."""

    edge: float = 1.0
    connectivity: float = 1.0
    deviation: float = 1.0


def _label_grid(segment_of: np.ndarray, graph: PixelGraph) -> np.ndarray:
    labels = np.asarray(segment_of)
    if labels.shape != (graph.size,):
        raise ValueError(f"segment_of must have length {graph.size}; got shape {labels.shape}.")
    return labels.reshape(graph.shape)


def _boundary_masks(grid: np.ndarray, graph: PixelGraph):
    for dr, dc in NEIGHBOR_OFFSETS:
        src, dst = shift_slices(dr, dc, graph.height, graph.width)
        yield (dr, dc), grid[src] != grid[dst]


def edge_value(segment_of: np.ndarray, graph: PixelGraph) -> float:
    grid = _label_grid(segment_of, graph)
    weights = graph.offset_distances
    return float(sum(weights[offset][mask].sum() for offset, mask in _boundary_masks(grid, graph)))


def connectivity_measure(segment_of: np.ndarray, graph: PixelGraph) -> float:
    grid = _label_grid(segment_of, graph)
    pairs = sum(int(mask.sum()) for _, mask in _boundary_masks(grid, graph))
    return pairs * CONNECTIVITY_PENALTY


def segment_centroids(segment_of: np.ndarray, graph: PixelGraph) -> np.ndarray:
    """``(n_segments, 3)`` integer-truncated per-channel mean colour of each segment."""
    labels = np.asarray(segment_of, dtype=np.int64)
    n_segments = int(labels.max()) + 1 if labels.size else 0
    counts = np.bincount(labels, minlength=n_segments)
    pixels = graph.pixels.astype(np.int64)
    centroids = np.empty((n_segments, 3), dtype=np.int64)
    for channel in range(3):
        sums = np.bincount(labels, weights=pixels[:, channel], minlength=n_segments)
        centroids[:, channel] = np.rint(sums).astype(np.int64) // counts
    return centroids


def overall_deviation(segment_of: np.ndarray, graph: PixelGraph) -> float:
    labels = _label_grid(segment_of, graph).reshape(-1).astype(np.int64)
    centroids = segment_centroids(labels, graph)
    diff = graph.pixels.astype(np.int64) - centroids[labels]
    return float(np.sqrt(np.sum(diff * diff, axis=1)).sum())


def evaluate_objectives(segment_of: np.ndarray, graph: PixelGraph) -> Objectives:
    """Compute all three objectives with a single pass over the boundary masks."""
    grid = _label_grid(segment_of, graph)
    weights = graph.offset_distances
    edge = 0.0
    pairs = 0
    for offset, mask in _boundary_masks(grid, graph):
        edge += float(weights[offset][mask].sum())
        pairs += int(mask.sum())
    return Objectives(
        edge_value=edge,
        connectivity_measure=pairs * CONNECTIVITY_PENALTY,
        overall_deviation=overall_deviation(segment_of, graph),
    )


def weighted_fitness(objectives: Objectives, weights: ObjectiveWeights) -> float:
    """``w_e * edge - w_c * connectivity - w_d * deviation`` (higher is better)."""
    return (
        weights.edge * objectives.edge_value
        - weights.connectivity * objectives.connectivity_measure
        - weights.deviation * objectives.overall_deviation
    )


def objective_matrix(objectives: list[Objectives]) -> np.ndarray:
    """Stack objective triples into an ``(N, 3)`` minimization-form matrix."""
    if not objectives:
        return np.empty((0, N_OBJECTIVES), dtype=float)
    return np.vstack([obj.minimization_vector() for obj in objectives])


__all__ = [
    "CONNECTIVITY_PENALTY",
    "N_OBJECTIVES",
    "Objectives",
    "ObjectiveWeights",
    "edge_value",
    "connectivity_measure",
    "segment_centroids",
    "overall_deviation",
    "evaluate_objectives",
    "weighted_fitness",
    "objective_matrix",
]
