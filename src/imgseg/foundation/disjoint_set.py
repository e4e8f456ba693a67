"""
Shared union-find used by the chromosome decoder.

Single unions go through ``find``/``union``. Whole edge lists go through
``union_many``, which hooks roots onto the smallest root of each edge and
then flattens with pointer jumping, so a decode never loops per pixel in Python.
"""

from __future__ import annotations

import numpy as np


class DisjointSet:
    """Union-find over ``size`` integer elements."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("size must be non-negative.")
        self._parent = np.arange(size, dtype=np.int64)

    def __len__(self) -> int:
        return int(self._parent.shape[0])

    def find(self, x: int) -> int:
        parent = self._parent
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return int(x)

    def union(self, x: int, y: int) -> bool:
        """Merge the sets of x and y; returns False when they were already joined."""
        rx = self.find(x)
        ry = self.find(y)
        if rx == ry:
            return False
        # Larger root hooks onto the smaller one; keeps union_many's invariant.
        lo, hi = (rx, ry) if rx < ry else (ry, rx)
        self._parent[hi] = lo
        return True

    def _flatten(self) -> None:
        parent = self._parent
        while True:
            grand = parent[parent]
            if np.array_equal(grand, parent):
                return
            parent[:] = grand

    def union_many(self, xs: np.ndarray, ys: np.ndarray) -> None:
        """Union every pair ``(xs[k], ys[k])``."""
        xs = np.asarray(xs, dtype=np.int64)
        ys = np.asarray(ys, dtype=np.int64)
        if xs.shape != ys.shape:
            raise ValueError("xs and ys must have the same shape.")
        if xs.size == 0:
            return
        parent = self._parent
        self._flatten()
        while True:
            rx = parent[xs]
            ry = parent[ys]
            pending = rx != ry
            if not pending.any():
                return
            lo = np.minimum(rx[pending], ry[pending])
            hi = np.maximum(rx[pending], ry[pending])
            # hi is a root after flattening; parent only ever points to a smaller index.
            np.minimum.at(parent, hi, lo)
            self._flatten()

    def roots(self) -> np.ndarray:
        """Representative of every element."""
        self._flatten()
        return self._parent.copy()

    def groups(self) -> tuple[list[np.ndarray], np.ndarray]:
        """
        Equivalence classes (each sorted ascending) and a dense label per element.
        Labels are assigned in first-seen order of the elements.
        """
        roots = self.roots()
        if roots.size == 0:
            return [], np.empty(0, dtype=np.int64)
        _, first_idx, inverse = np.unique(roots, return_index=True, return_inverse=True)
        order = np.argsort(first_idx, kind="stable")
        relabel = np.empty_like(order)
        relabel[order] = np.arange(order.size)
        labels = relabel[inverse.reshape(-1)].astype(np.int64)
        members = np.argsort(labels, kind="stable")
        counts = np.bincount(labels, minlength=order.size)
        groups = np.split(members, np.cumsum(counts)[:-1])
        return list(groups), labels


__all__ = ["DisjointSet"]
