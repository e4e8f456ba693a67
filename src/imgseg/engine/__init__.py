from .config import SegmentationConfig, SegmentationConfigData
from .nsgaii import GenerationStats, SegmentationNSGAII, SegmentationResult
from .population import Population, initialize_population, unique_individuals
from .ranking import crowding_distance, dominates, fast_non_dominated_sort, rank_and_crowding
from .selection import crowded_tournament, elitist_truncation
from .weighted import WeightedSegmentationGA

__all__ = [
    "SegmentationConfig",
    "SegmentationConfigData",
    "GenerationStats",
    "SegmentationNSGAII",
    "SegmentationResult",
    "Population",
    "initialize_population",
    "unique_individuals",
    "crowding_distance",
    "dominates",
    "fast_non_dominated_sort",
    "rank_and_crowding",
    "crowded_tournament",
    "elitist_truncation",
    "WeightedSegmentationGA",
]
