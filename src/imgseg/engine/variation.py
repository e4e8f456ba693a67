"""
Crossover + mutation over chromosome matrices for one pixel graph.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from imgseg.foundation.genotype import CHROMOSOME_DTYPE
from imgseg.foundation.graph import PixelGraph
from imgseg.operators.registry import resolve_crossover, resolve_mutation


class VariationPipeline:
    """
    Encapsulates the configured crossover and mutation operators.

    Crossover consumes parent rows pairwise and returns one child per parent
    row; mutation then edits the children in place under the graph's legal
    symbol table.
    """

    def __init__(
        self,
        *,
        cross_method: str,
        cross_params: dict[str, Any],
        mut_method: str,
        mut_params: dict[str, Any],
    ) -> None:
        self.cross_method = cross_method
        self.cross_params = dict(cross_params)
        self.mut_method = mut_method
        self.mut_params = dict(mut_params)
        self.crossover_op = resolve_crossover(cross_method, self.cross_params)
        self.mutation_op = resolve_mutation(mut_method, self.mut_params)

    @classmethod
    def from_config(cls, crossover: tuple[str, dict[str, Any]], mutation: tuple[str, dict[str, Any]]) -> "VariationPipeline":
        return cls(
            cross_method=crossover[0],
            cross_params=crossover[1],
            mut_method=mutation[0],
            mut_params=mutation[1],
        )

    def produce_offspring(self, X_parents: np.ndarray, graph: PixelGraph, rng: np.random.Generator) -> np.ndarray:
        """Children as an ``(n_children, n_genes)`` chromosome matrix."""
        children = np.asarray(self.crossover_op(X_parents, rng))
        children = children.reshape(-1, graph.size).astype(CHROMOSOME_DTYPE, copy=True)
        self.mutation_op(children, rng, valid=graph.valid_symbols)
        return children


__all__ = ["VariationPipeline"]
