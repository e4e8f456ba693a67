from .exceptions import ImgSegError
from .genotype import Individual, build_seed_chromosome, decode_segments
from .graph import PixelGraph
from .objectives import Objectives, ObjectiveWeights, evaluate_objectives

__all__ = [
    "ImgSegError",
    "Individual",
    "build_seed_chromosome",
    "decode_segments",
    "PixelGraph",
    "Objectives",
    "ObjectiveWeights",
    "evaluate_objectives",
]
