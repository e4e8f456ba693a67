"""
User-facing API surface for imgseg.

- Programmatic runs via `segment` with a `SegmentationConfig`.
- Image loading and result writing via `load_image` / `write_results`.

For lower-level control, import from the layered packages:
`imgseg.foundation.*`, `imgseg.engine.*`, `imgseg.operators.*`, `imgseg.experiment.*`.
"""

from __future__ import annotations

from dataclasses import is_dataclass
from typing import Any, Mapping

from imgseg.engine.config import SegmentationConfig, SegmentationConfigData
from imgseg.engine.nsgaii import SegmentationNSGAII, SegmentationResult
from imgseg.engine.weighted import WeightedSegmentationGA
from imgseg.experiment.io import load_image, write_results
from imgseg.foundation.eval import EvaluationBackend
from imgseg.foundation.graph import PixelGraph


def build_algorithm(config: SegmentationConfigData, eval_backend: EvaluationBackend | None = None):
    """Evolution loop for ``config.mode``."""
    if config.mode == "weighted":
        return WeightedSegmentationGA(config, eval_backend=eval_backend)
    return SegmentationNSGAII(config, eval_backend=eval_backend)


def segment(
    graph: PixelGraph,
    config: SegmentationConfigData | Mapping[str, Any] | None = None,
    seed: int | None = None,
    eval_backend: EvaluationBackend | None = None,
) -> SegmentationResult:
    """
    Run one segmentation of ``graph``.

    Args:
        graph: Pixel graph of the input image (see ``load_image``).
        config: Frozen config, a mapping accepted by ``SegmentationConfig.from_dict``,
            or None for the defaults.
        seed: RNG seed for initialization and variation.
        eval_backend: Optional evaluation backend; the caller keeps ownership.
    """
    if config is None:
        cfg = SegmentationConfig.default()
    elif isinstance(config, SegmentationConfigData) or is_dataclass(config):
        cfg = config
    else:
        cfg = SegmentationConfig.from_dict(dict(config))
    return build_algorithm(cfg, eval_backend=eval_backend).run(graph, seed=seed)


__all__ = [
    "build_algorithm",
    "segment",
    "load_image",
    "write_results",
    "SegmentationConfig",
    "SegmentationConfigData",
    "SegmentationResult",
]
