from .crossover import OnePointCrossover, TwoPointCrossover, one_point_crossover, two_point_crossover
from .mutation import (
    CreepMutation,
    RandomResetMutation,
    SingleGeneMutation,
    creep_mutation,
    random_reset_mutation,
    single_gene_mutation,
)
from .registry import crossover_registry, mutation_registry, resolve_crossover, resolve_mutation

__all__ = [
    "OnePointCrossover",
    "TwoPointCrossover",
    "one_point_crossover",
    "two_point_crossover",
    "CreepMutation",
    "RandomResetMutation",
    "SingleGeneMutation",
    "creep_mutation",
    "random_reset_mutation",
    "single_gene_mutation",
    "crossover_registry",
    "mutation_registry",
    "resolve_crossover",
    "resolve_mutation",
]
