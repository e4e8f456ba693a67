"""
imgseg: multi-objective evolutionary image segmentation.
"""

from imgseg.api import segment, build_algorithm, load_image, write_results
from imgseg.engine.config import SegmentationConfig, SegmentationConfigData
from imgseg.engine.nsgaii import SegmentationResult
from imgseg.foundation.genotype import Individual
from imgseg.foundation.graph import PixelGraph
from imgseg.foundation.logging import configure_imgseg_logging

__version__ = "0.1.0"

__all__ = [
    "segment",
    "build_algorithm",
    "load_image",
    "write_results",
    "SegmentationConfig",
    "SegmentationConfigData",
    "SegmentationResult",
    "Individual",
    "PixelGraph",
    "configure_imgseg_logging",
    "__version__",
]
