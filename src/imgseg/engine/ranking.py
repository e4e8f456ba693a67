"""Pareto ranking for the segmentation objectives.

Performance-sensitive: dominance is computed as one vectorized (N, N) matrix.
Assumes F is float64 of shape (N, M) in minimization form.
"""

from __future__ import annotations

import numpy as np

from imgseg.foundation.exceptions import EmptyFrontError


def _as_matrix(F: np.ndarray) -> np.ndarray:
    F = np.asarray(F, dtype=float)
    if F.ndim != 2:
        raise ValueError(f"F must be a 2D (N, M) objective matrix; got shape {F.shape}.")
    if F.shape[0] == 0:
        raise EmptyFrontError()
    return F


def dominates(a: np.ndarray, b: np.ndarray) -> bool:
    """True when ``a`` is no worse than ``b`` on every objective and strictly better on one."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return bool(np.all(a <= b) and np.any(a < b))


def dominance_matrix(F: np.ndarray) -> np.ndarray:
    """``D[i, j]`` is True when row ``i`` dominates row ``j``."""
    less_equal = F[:, None, :] <= F[None, :, :]
    strictly_less = F[:, None, :] < F[None, :, :]
    return np.logical_and(np.all(less_equal, axis=2), np.any(strictly_less, axis=2))


def fast_non_dominated_sort(F: np.ndarray) -> tuple[list[np.ndarray], np.ndarray]:
    """
    Classic O(N^2) fast non-dominated sort.
    Args:
        F: objective matrix (N, M), float64.
    Returns:
      - fronts: list of index arrays per front (0, 1, ...)
      - rank: array with the front rank for each solution
    Raises:
        EmptyFrontError: F has no rows.
    """
    F = _as_matrix(F)
    N = F.shape[0]
    dom_matrix = dominance_matrix(F)

    dominated_count = dom_matrix.sum(axis=0).astype(np.int64)
    rank = np.empty(N, dtype=int)
    fronts: list[np.ndarray] = []

    current = np.flatnonzero(dominated_count == 0)
    level = 0
    while current.size > 0:
        fronts.append(current)
        rank[current] = level
        dominated_count -= dom_matrix[current].sum(axis=0)
        dominated_count[current] = -1
        dom_matrix[current] = False
        level += 1
        current = np.flatnonzero(dominated_count == 0)

    return fronts, rank


def crowding_distance(F_front: np.ndarray) -> np.ndarray:
    """
    Crowding distance of every member of one front.

    Extremes of each objective are infinite; interior members accumulate
    ``(next - prev) / (max - min)`` per objective, and objectives with zero
    spread contribute nothing. Fronts of one or two members are all infinite.
    """
    F_front = _as_matrix(F_front)
    k, n_obj = F_front.shape
    if k <= 2:
        return np.full(k, np.inf)

    d = np.zeros(k, dtype=float)
    for m in range(n_obj):
        order = np.argsort(F_front[:, m], kind="mergesort")
        sorted_vals = F_front[order, m]

        d[order[0]] = np.inf
        d[order[-1]] = np.inf

        span = sorted_vals[-1] - sorted_vals[0]
        if span <= 0.0:
            continue
        d[order[1:-1]] += (sorted_vals[2:] - sorted_vals[:-2]) / span
    return d


def rank_and_crowding(F: np.ndarray) -> tuple[list[np.ndarray], np.ndarray, np.ndarray]:
    """Fronts, per-row rank and per-row crowding distance (computed front by front)."""
    F = _as_matrix(F)
    fronts, rank = fast_non_dominated_sort(F)
    crowding = np.zeros(F.shape[0], dtype=float)
    for front in fronts:
        crowding[front] = crowding_distance(F[front])
    return fronts, rank, crowding


__all__ = [
    "dominates",
    "dominance_matrix",
    "fast_non_dominated_sort",
    "crowding_distance",
    "rank_and_crowding",
]
