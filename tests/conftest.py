from __future__ import annotations

import numpy as np
import pytest

from imgseg.foundation.graph import PixelGraph

FIXTURE_PIXELS = [(1, 2, 3), (4, 5, 6), (7, 8, 9), (10, 11, 12)]


@pytest.fixture
def tiny_graph() -> PixelGraph:
    """2x2 image used for hand-computed objective values."""
    return PixelGraph(2, 2, FIXTURE_PIXELS)


@pytest.fixture
def make_graph():
    def _make(height: int = 6, width: int = 7, seed: int = 0) -> PixelGraph:
        rng = np.random.default_rng(seed)
        return PixelGraph.from_rgb_array(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))

    return _make
