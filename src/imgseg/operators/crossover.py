"""
Crossover on chromosome matrices.

Genes never move between pixels, so a child of two legal chromosomes is
always legal.
"""

from __future__ import annotations

from typing import Any

import numpy as np


def _as_pairs(X_parents: np.ndarray) -> tuple[np.ndarray, int]:
    """
    Validate parent array and reshape into mating pairs.
    Accepts either (n_parents, n_genes) or already-paired (n_pairs, 2, n_genes).
    """
    X_parents = np.asarray(X_parents)
    if X_parents.ndim == 3 and X_parents.shape[1] == 2:
        return X_parents.copy(), X_parents.shape[2]

    Np, D = X_parents.shape
    if Np == 0:
        return np.empty((0, 2, D), dtype=X_parents.dtype), D
    # Handle odd parent count by duplicating the last parent
    if Np % 2 != 0:
        X_parents = np.vstack([X_parents, X_parents[-1:]])
        Np += 1
    return X_parents.reshape(Np // 2, 2, D).copy(), D


def _reshape_offspring(pairs: np.ndarray, parents: np.ndarray) -> np.ndarray:
    parents = np.asarray(parents)
    if parents.ndim == 2 and parents.shape[0] % 2 != 0:
        return pairs.reshape(-1, pairs.shape[2])[: parents.shape[0]]
    return pairs.reshape(parents.shape)


def _active_pairs(n_pairs: int, prob: float, rng: np.random.Generator) -> np.ndarray:
    prob = float(np.clip(prob, 0.0, 1.0))
    if prob <= 0.0 or n_pairs == 0:
        return np.empty(0, dtype=int)
    return np.flatnonzero(rng.random(n_pairs) <= prob)


def one_point_crossover(X_parents: np.ndarray, prob: float, rng: np.random.Generator) -> np.ndarray:
    """
    One-point crossover; the cut is uniform in ``[1, L-1]``.
    Pairs skipped by ``prob`` are copied unchanged.
    """
    pairs, D = _as_pairs(X_parents)
    if pairs.size == 0 or D < 2:
        return _reshape_offspring(pairs, X_parents)
    idx = _active_pairs(pairs.shape[0], prob, rng)
    if idx.size == 0:
        return _reshape_offspring(pairs, X_parents)

    cuts = rng.integers(1, D, size=idx.size)
    for row, cut in zip(idx, cuts):
        p1, p2 = pairs[row, 0], pairs[row, 1]
        child1 = np.concatenate([p1[:cut], p2[cut:]])
        child2 = np.concatenate([p2[:cut], p1[cut:]])
        pairs[row, 0], pairs[row, 1] = child1, child2
    return _reshape_offspring(pairs, X_parents)


def two_point_crossover(X_parents: np.ndarray, prob: float, rng: np.random.Generator) -> np.ndarray:
    """
    Two-point crossover; the genes in ``[lo, hi)`` are swapped, with
    ``1 <= lo < hi <= L-1``. Chromosomes of length 2 fall back to one cut.
    """
    pairs, D = _as_pairs(X_parents)
    if pairs.size == 0 or D < 2:
        return _reshape_offspring(pairs, X_parents)
    if D < 3:
        return one_point_crossover(X_parents, prob, rng)
    idx = _active_pairs(pairs.shape[0], prob, rng)
    if idx.size == 0:
        return _reshape_offspring(pairs, X_parents)

    for row in idx:
        lo, hi = np.sort(rng.choice(np.arange(1, D), size=2, replace=False))
        p1, p2 = pairs[row, 0], pairs[row, 1]
        child1 = p1.copy()
        child2 = p2.copy()
        child1[lo:hi] = p2[lo:hi]
        child2[lo:hi] = p1[lo:hi]
        pairs[row, 0], pairs[row, 1] = child1, child2
    return _reshape_offspring(pairs, X_parents)


class OnePointCrossover:
    def __init__(self, prob: float = 1.0, **kwargs: Any) -> None:
        self.prob = float(prob)

    def __call__(self, parents: np.ndarray, rng: np.random.Generator, **kwargs: Any) -> np.ndarray:
        return one_point_crossover(parents, self.prob, rng)


class TwoPointCrossover:
    def __init__(self, prob: float = 1.0, **kwargs: Any) -> None:
        self.prob = float(prob)

    def __call__(self, parents: np.ndarray, rng: np.random.Generator, **kwargs: Any) -> np.ndarray:
        return two_point_crossover(parents, self.prob, rng)


__all__ = [
    "one_point_crossover",
    "two_point_crossover",
    "OnePointCrossover",
    "TwoPointCrossover",
]
