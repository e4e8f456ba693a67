"""
Registries for variation operators.

Keys are the operator names accepted in run configurations; values are the
adapter classes, constructed with the configured params.
"""

from __future__ import annotations

from typing import Any, Mapping

from imgseg.foundation.registry import Registry

from .crossover import OnePointCrossover, TwoPointCrossover
from .mutation import CreepMutation, RandomResetMutation, SingleGeneMutation

crossover_registry: Registry = Registry("crossover")
crossover_registry.register("one_point", OnePointCrossover)
crossover_registry.register("two_point", TwoPointCrossover)

mutation_registry: Registry = Registry("mutation")
mutation_registry.register("random_reset", RandomResetMutation)
mutation_registry.register("creep", CreepMutation)
mutation_registry.register("single_gene", SingleGeneMutation)


def resolve_crossover(name: str, params: Mapping[str, Any] | None = None) -> Any:
    return crossover_registry.create(name, params)


def resolve_mutation(name: str, params: Mapping[str, Any] | None = None) -> Any:
    return mutation_registry.create(name, params)


__all__ = [
    "crossover_registry",
    "mutation_registry",
    "resolve_crossover",
    "resolve_mutation",
]
