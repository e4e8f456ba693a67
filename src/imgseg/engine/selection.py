"""
Parent and survivor selection driven by front rank and crowding distance.

Both strategies consume the output of ``ranking.rank_and_crowding``; crowding
must already have been computed over each whole front.
"""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

from imgseg.foundation.exceptions import ConfigurationError
from imgseg.foundation.registry import Registry


def elitist_truncation(fronts: Sequence[np.ndarray], crowding: np.ndarray, target: int) -> np.ndarray:
    """
    NSGA-II elitist selection based on fronts + crowding.

    Whole fronts are taken in rank order while they fit; the first front that
    would overflow is sorted by descending crowding and cut to hit ``target``
    exactly.
    """
    target = int(target)
    available = sum(len(front) for front in fronts)
    if target < 0:
        raise ConfigurationError(f"truncation target must be non-negative; got {target}.")
    if target > available:
        raise ConfigurationError(
            f"Cannot keep {target} individuals out of {available}.",
            suggestion="Use a target no larger than the merged population.",
        )
    selected: list[int] = []
    for front in fronts:
        if len(selected) == target:
            break
        front_arr = np.asarray(front, dtype=int)
        if len(selected) + front_arr.size <= target:
            selected.extend(front_arr.tolist())
        else:
            rem = target - len(selected)
            order = np.argsort(-crowding[front_arr], kind="stable")
            selected.extend(front_arr[order[:rem]].tolist())
            break
    return np.array(selected, dtype=int)


def crowded_tournament(
    rank: np.ndarray,
    crowding: np.ndarray,
    n_select: int,
    size: int,
    replacement: bool,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Crowded-comparison tournament.

    Each tournament samples ``size`` contenders (with or without replacement
    inside one tournament); the lowest rank wins, ties go to the highest
    crowding distance and remaining ties are broken at random.
    """
    N = rank.shape[0]
    if size <= 0:
        raise ConfigurationError(f"tournament size must be a positive integer; got {size}.")
    if n_select <= 0 or N == 0:
        return np.empty(0, dtype=int)
    if not replacement and size > N:
        raise ConfigurationError(
            f"Tournament size {size} exceeds population size {N}.",
            suggestion="Lower the tournament size or allow replacement.",
        )

    winners = np.empty(n_select, dtype=int)
    for i in range(n_select):
        row = rng.choice(N, size=size, replace=bool(replacement))
        row_ranks = rank[row]
        best = row[row_ranks == row_ranks.min()]
        if best.size > 1:
            best_crowd = np.nan_to_num(crowding[best], nan=-np.inf)
            best = best[best_crowd == best_crowd.max()]
        winners[i] = int(rng.choice(best)) if best.size > 1 else int(best[0])
    return winners


class ParentSelection(Protocol):
    def __call__(
        self,
        fronts: Sequence[np.ndarray],
        rank: np.ndarray,
        crowding: np.ndarray,
        n_parents: int,
        rng: np.random.Generator,
    ) -> np.ndarray: ...


class TournamentParentSelection:
    """Fill the mating pool with crowded tournament winners."""

    def __init__(self, size: int = 2, replacement: bool = True) -> None:
        if int(size) <= 0:
            raise ConfigurationError(f"tournament size must be a positive integer; got {size}.")
        self.size = int(size)
        self.replacement = bool(replacement)

    def __call__(self, fronts, rank, crowding, n_parents, rng):
        return crowded_tournament(rank, crowding, n_parents, self.size, self.replacement, rng)


class ElitistParentSelection:
    """Take the best ``n_parents`` individuals by rank and crowding, then shuffle them into pairs."""

    def __call__(self, fronts, rank, crowding, n_parents, rng):
        available = rank.shape[0]
        pool = elitist_truncation(fronts, crowding, min(n_parents, available))
        if pool.size < n_parents:
            # Pool smaller than the request: cycle through the elite.
            pool = np.resize(pool, n_parents)
        return rng.permutation(pool)


selection_registry: Registry = Registry("selection")
selection_registry.register("tournament", TournamentParentSelection)
selection_registry.register("elitist", ElitistParentSelection)


def resolve_parent_selection(method: str, params: dict | None = None) -> ParentSelection:
    factory = selection_registry.factory(method or "tournament")
    params = dict(params or {})
    if factory is ElitistParentSelection:
        return factory()
    return factory(size=params.get("size", 2), replacement=params.get("replacement", True))


__all__ = [
    "elitist_truncation",
    "crowded_tournament",
    "ParentSelection",
    "TournamentParentSelection",
    "ElitistParentSelection",
    "selection_registry",
    "resolve_parent_selection",
]
