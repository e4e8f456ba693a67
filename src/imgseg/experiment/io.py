"""
Image loading and persistence of segmentation results.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
from PIL import Image, UnidentifiedImageError

from imgseg.foundation.exceptions import ImageLoadError
from imgseg.foundation.genotype import Individual
from imgseg.foundation.graph import PixelGraph

GREEN = (0, 255, 0)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


def _logger() -> logging.Logger:
    return logging.getLogger(__name__)


def ensure_dir(path: str | Path) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_image(path: str | Path) -> PixelGraph:
    """Read a raster image with Pillow and build its pixel graph (alpha dropped, palettes expanded)."""
    path = Path(path)
    try:
        with Image.open(path) as img:
            rgb = np.array(img.convert("RGB"), dtype=np.uint8)
    except FileNotFoundError as exc:
        raise ImageLoadError(str(path), "File does not exist.") from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageLoadError(str(path), str(exc)) from exc
    _logger().debug("Loaded %s with shape %s.", path, rgb.shape)
    return PixelGraph.from_rgb_array(rgb)


def border_mask(individual: Individual, graph: PixelGraph) -> np.ndarray:
    """
    ``(H, W)`` bool mask of pixels drawn as segment borders: the image frame
    plus every pixel whose right or lower neighbour lies in another segment.
    No thinning pass is applied: a pixel is marked even when an adjacent
    pixel is already part of the border.
    """
    grid = individual.segment_of.reshape(graph.shape)
    mask = np.zeros(graph.shape, dtype=bool)
    mask[:, :-1] |= grid[:, :-1] != grid[:, 1:]
    mask[:-1, :] |= grid[:-1, :] != grid[1:, :]
    mask[0, :] = mask[-1, :] = True
    mask[:, 0] = mask[:, -1] = True
    return mask


def render_segment_borders(individual: Individual, graph: PixelGraph, on_white: bool = False) -> Image.Image:
    """
    Border image of one segmentation: green borders over the original pixels,
    or black borders on a white canvas when ``on_white`` is set.
    """
    if on_white:
        canvas = np.full((graph.height, graph.width, 3), WHITE, dtype=np.uint8)
        color = BLACK
    else:
        canvas = graph.pixels.reshape(graph.height, graph.width, 3).copy()
        color = GREEN
    canvas[border_mask(individual, graph)] = color
    return Image.fromarray(canvas)


def _clear_previous_results(output_dir: Path) -> int:
    """Delete label grids and border images left by an earlier write to ``output_dir``."""
    stale = list(output_dir.glob("SEGMENTS_*.csv"))
    for kind in ("type_1", "type_2"):
        stale.extend((output_dir / kind).glob("*.png"))
    for path in stale:
        path.unlink()
    return len(stale)


def write_results(
    output_dir: str | Path,
    individuals: Sequence[Individual],
    graph: PixelGraph,
    borders: bool = True,
) -> dict:
    """
    Save objectives, label grids and (optionally) border images.

    Label grids and border images from an earlier write to the same
    directory are removed first, so every file matches a row of FUN.csv.

    Files:
        FUN.csv: one ``edge_value,connectivity_measure,overall_deviation`` row per individual.
        SEGMENTS_<k>.csv: ``H x W`` segment-id grid of individual ``k``.
        type_1/<k>.png, type_2/<k>.png: green-on-original and black-on-white borders.

    Returns:
        dict: artifact names keyed by a short label.
    """
    out: dict = {}
    output_dir = ensure_dir(output_dir)
    removed = _clear_previous_results(output_dir)
    if removed:
        _logger().debug("Removed %d files from a previous run in %s.", removed, output_dir)

    fun_path = output_dir / "FUN.csv"
    F = np.array([list(ind.objectives) for ind in individuals], dtype=float).reshape(-1, 3)
    np.savetxt(fun_path, F, delimiter=",")
    out["fun"] = fun_path.name

    segments = []
    for k, ind in enumerate(individuals):
        seg_path = output_dir / f"SEGMENTS_{k}.csv"
        np.savetxt(seg_path, ind.segment_of.reshape(graph.shape), delimiter=",", fmt="%d")
        segments.append(seg_path.name)
    out["segments"] = segments

    if borders:
        type_1 = ensure_dir(output_dir / "type_1")
        type_2 = ensure_dir(output_dir / "type_2")
        for k, ind in enumerate(individuals):
            render_segment_borders(ind, graph, on_white=False).save(type_1 / f"{k}.png")
            render_segment_borders(ind, graph, on_white=True).save(type_2 / f"{k}.png")
        out["borders"] = ["type_1", "type_2"]

    _logger().info("Wrote %d segmentations to %s.", len(individuals), output_dir)
    return out


__all__ = [
    "ensure_dir",
    "load_image",
    "border_mask",
    "render_segment_borders",
    "write_results",
]
