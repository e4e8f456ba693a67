"""
In-place mutation of chromosome matrices.

Every operator takes the graph's ``valid_symbols`` table (``(n_genes, 9)``
bool) and only ever writes symbols that are legal at the mutated pixel.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from imgseg.foundation.graph import N_SYMBOLS


def _check_shapes(X: np.ndarray, valid: np.ndarray) -> None:
    if X.ndim != 2:
        raise ValueError("X must be a 2D (n_individuals, n_genes) chromosome matrix.")
    if valid.shape != (X.shape[1], N_SYMBOLS):
        raise ValueError(f"valid must have shape ({X.shape[1]}, {N_SYMBOLS}); got {valid.shape}.")


def sample_legal_symbols(valid: np.ndarray, genes: np.ndarray, rng: np.random.Generator) -> np.ndarray:
    """Draw one symbol uniformly from the legal symbols of each gene position in ``genes``."""
    legal = valid[genes]
    counts = legal.sum(axis=1)
    picks = np.floor(rng.random(genes.size) * counts).astype(np.int64)
    cumulative = np.cumsum(legal, axis=1)
    return np.argmax(cumulative > picks[:, None], axis=1)


def random_reset_mutation(X: np.ndarray, prob: float, valid: np.ndarray, rng: np.random.Generator) -> None:
    """
    Per-gene random reset to a uniformly drawn symbol legal at that pixel.
    """
    if X.size == 0:
        return
    prob = float(np.clip(prob, 0.0, 1.0))
    if prob <= 0.0:
        return
    _check_shapes(X, valid)
    mask = rng.random(X.shape) <= prob
    if not np.any(mask):
        return
    rows, genes = np.nonzero(mask)
    X[rows, genes] = sample_legal_symbols(valid, genes, rng)


def creep_mutation(X: np.ndarray, prob: float, step: float, valid: np.ndarray, rng: np.random.Generator) -> None:
    """
    Triangular creep: ``sqrt(u)`` for ``u < 0.5`` else ``-sqrt(1 - u)``, scaled
    by ``step``, rounded and clamped to [0, 8]. A step onto an illegal symbol
    leaves the gene as it was.
    """
    if X.size == 0:
        return
    prob = float(np.clip(prob, 0.0, 1.0))
    if prob <= 0.0:
        return
    _check_shapes(X, valid)
    mask = rng.random(X.shape) <= prob
    if not np.any(mask):
        return
    rows, genes = np.nonzero(mask)
    u = rng.random(rows.size)
    shape = np.where(u < 0.5, np.sqrt(u), -np.sqrt(1.0 - u))
    delta = np.rint(shape * float(step)).astype(np.int64)
    current = X[rows, genes].astype(np.int64)
    proposed = np.clip(current + delta, 0, N_SYMBOLS - 1)
    X[rows, genes] = np.where(valid[genes, proposed], proposed, current)


def single_gene_mutation(X: np.ndarray, prob: float, valid: np.ndarray, rng: np.random.Generator) -> None:
    """
    With probability ``prob`` per chromosome, reset one random gene to a legal symbol.
    """
    if X.size == 0:
        return
    prob = float(np.clip(prob, 0.0, 1.0))
    if prob <= 0.0:
        return
    _check_shapes(X, valid)
    rows = np.flatnonzero(rng.random(X.shape[0]) < prob)
    if rows.size == 0:
        return
    genes = rng.integers(0, X.shape[1], size=rows.size)
    X[rows, genes] = sample_legal_symbols(valid, genes, rng)


def _valid_from(kwargs: dict[str, Any], name: str) -> np.ndarray:
    valid = kwargs.get("valid")
    if valid is None:
        raise ValueError(f"{name} requires the 'valid' symbol table in kwargs.")
    return np.asarray(valid, dtype=bool)


class RandomResetMutation:
    def __init__(self, prob: float = 0.01, **kwargs: Any) -> None:
        self.prob = float(prob)

    def __call__(self, X: np.ndarray, rng: np.random.Generator, **kwargs: Any) -> None:
        random_reset_mutation(X, self.prob, _valid_from(kwargs, "RandomResetMutation"), rng)


class CreepMutation:
    def __init__(self, prob: float = 0.01, step: float = 4.0, **kwargs: Any) -> None:
        self.prob = float(prob)
        self.step = float(step)

    def __call__(self, X: np.ndarray, rng: np.random.Generator, **kwargs: Any) -> None:
        creep_mutation(X, self.prob, self.step, _valid_from(kwargs, "CreepMutation"), rng)


class SingleGeneMutation:
    def __init__(self, prob: float = 0.2, **kwargs: Any) -> None:
        self.prob = float(prob)

    def __call__(self, X: np.ndarray, rng: np.random.Generator, **kwargs: Any) -> None:
        single_gene_mutation(X, self.prob, _valid_from(kwargs, "SingleGeneMutation"), rng)


__all__ = [
    "sample_legal_symbols",
    "random_reset_mutation",
    "creep_mutation",
    "single_gene_mutation",
    "RandomResetMutation",
    "CreepMutation",
    "SingleGeneMutation",
]
