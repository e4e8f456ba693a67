"""
Read-only pixel graph over an RGB image grid (Moore / 8-neighbourhood).

Pixels are addressed by their linear index ``i = row * width + col``. Neighbour
indices are never stored; they are derived from ``(row, col)`` bounds checks.
Everything cached on the graph (symbol tables, per-offset edge weights) is a
pure function of the immutable pixel array.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property

import numpy as np

N_SYMBOLS = 9
NO_EDGE = 0

# Direction codes 1..8 -> (delta_row, delta_col).
DIRECTION_OFFSETS: dict[int, tuple[int, int]] = {
    1: (0, 1),  # right
    2: (0, -1),  # left
    3: (-1, 0),  # up
    4: (1, 0),  # down
    5: (-1, 1),  # top right
    6: (1, 1),  # bottom right
    7: (-1, -1),  # top left
    8: (1, -1),  # bottom left
}
_OFFSET_DIRECTIONS: dict[tuple[int, int], int] = {offset: code for code, offset in DIRECTION_OFFSETS.items()}

# Row-major scan order used by neighbors().
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = tuple(
    (dr, dc) for dr in (-1, 0, 1) for dc in (-1, 0, 1) if (dr, dc) != (0, 0)
)


@dataclass(frozen=True, order=True)
class WeightedEdge:
    """Directed edge between two pixels, ordered by weight first."""

    weight: float
    source: int
    target: int


def shift_slices(dr: int, dc: int, height: int, width: int) -> tuple[tuple[slice, slice], tuple[slice, slice]]:
    """Return (source, target) 2D slices pairing every pixel with its neighbour at (dr, dc)."""
    src_rows = slice(max(0, -dr), height - max(0, dr))
    dst_rows = slice(max(0, dr), height - max(0, -dr))
    src_cols = slice(max(0, -dc), width - max(0, dc))
    dst_cols = slice(max(0, dc), width - max(0, -dc))
    return (src_rows, src_cols), (dst_rows, dst_cols)


class PixelGraph:
    """
    Immutable adjacency view over a ``height x width`` RGB image.

    Args:
        width: Number of columns.
        height: Number of rows.
        pixels: ``width * height`` RGB triples in row-major order, each channel in [0, 255].
    """

    def __init__(self, width: int, height: int, pixels) -> None:
        width = int(width)
        height = int(height)
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be positive integers.")
        arr = np.asarray(pixels, dtype=np.int64)
        if arr.shape != (width * height, 3):
            raise ValueError(f"pixels must have shape ({width * height}, 3); got {arr.shape}.")
        if arr.size and (arr.min() < 0 or arr.max() > 255):
            raise ValueError("pixel channels must be 8-bit unsigned integers in [0, 255].")
        rgb = arr.astype(np.uint8)
        rgb.flags.writeable = False
        self._width = width
        self._height = height
        self._pixels = rgb

    @classmethod
    def from_rgb_array(cls, array: np.ndarray) -> "PixelGraph":
        """Build a graph from an ``(height, width, 3)`` array."""
        arr = np.asarray(array)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ValueError(f"expected an (height, width, 3) array; got shape {arr.shape}.")
        height, width = arr.shape[:2]
        return cls(width, height, arr.reshape(-1, 3))

    def __repr__(self) -> str:
        return f"PixelGraph(width={self._width}, height={self._height})"

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> int:
        return self._width * self._height

    @property
    def pixels(self) -> np.ndarray:
        """Read-only ``(size, 3)`` uint8 array."""
        return self._pixels

    @property
    def shape(self) -> tuple[int, int]:
        return self._height, self._width

    def _check_index(self, i: int) -> None:
        if not 0 <= i < self.size:
            raise IndexError(f"pixel index {i} out of range for {self._height}x{self._width} image.")

    def position(self, i: int) -> tuple[int, int]:
        self._check_index(i)
        return divmod(int(i), self._width)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self._height and 0 <= col < self._width

    def neighbors(self, i: int) -> list[int]:
        """In-bounds Moore neighbours of ``i`` in row-major offset order."""
        row, col = self.position(i)
        out = []
        for dr, dc in NEIGHBOR_OFFSETS:
            r, c = row + dr, col + dc
            if self.in_bounds(r, c):
                out.append(r * self._width + c)
        return out

    def distance(self, i: int, j: int) -> float:
        """Euclidean distance between the RGB triples of pixels ``i`` and ``j``."""
        self._check_index(i)
        self._check_index(j)
        diff = self._pixels[i].astype(np.int64) - self._pixels[j].astype(np.int64)
        return float(np.sqrt(np.dot(diff, diff)))

    def edges_from(self, i: int) -> list[WeightedEdge]:
        """Weighted edges to every in-bounds neighbour, in row-major offset order."""
        row, col = self.position(i)
        targets = self.symbol_targets[i]
        weights = self.symbol_weights[i]
        out = []
        for offset in NEIGHBOR_OFFSETS:
            code = _OFFSET_DIRECTIONS[offset]
            if targets[code] >= 0:
                out.append(WeightedEdge(float(weights[code]), int(i), int(targets[code])))
        return out

    def target(self, i: int, symbol: int) -> int | None:
        """
        Pixel reached from ``i`` by direction ``symbol``.
        Returns None for symbol 0, an unknown symbol or an out-of-bounds target.
        """
        offset = DIRECTION_OFFSETS.get(int(symbol))
        if offset is None:
            return None
        row, col = self.position(i)
        r, c = row + offset[0], col + offset[1]
        if not self.in_bounds(r, c):
            return None
        return r * self._width + c

    def direction_of(self, source: int, target: int) -> int:
        """Direction code pointing from ``source`` to ``target``."""
        r0, c0 = self.position(source)
        r1, c1 = self.position(target)
        code = _OFFSET_DIRECTIONS.get((r1 - r0, c1 - c0))
        if code is None:
            raise ValueError(f"pixel {target} is not a Moore neighbour of pixel {source}.")
        return code

    @cached_property
    def symbol_targets(self) -> np.ndarray:
        """
        ``(size, 9)`` table of target indices per symbol; -1 where the symbol has no target.
        Column 0 (no edge) is always -1.
        """
        rows, cols = np.divmod(np.arange(self.size, dtype=np.int64), self._width)
        table = np.full((self.size, N_SYMBOLS), -1, dtype=np.int64)
        for code, (dr, dc) in DIRECTION_OFFSETS.items():
            r = rows + dr
            c = cols + dc
            ok = (r >= 0) & (r < self._height) & (c >= 0) & (c < self._width)
            table[ok, code] = r[ok] * self._width + c[ok]
        table.flags.writeable = False
        return table

    @cached_property
    def symbol_weights(self) -> np.ndarray:
        """``(size, 9)`` edge weight per symbol; NaN where the symbol has no target."""
        targets = self.symbol_targets
        weights = np.full(targets.shape, np.nan, dtype=np.float64)
        src = self._pixels.astype(np.float64)
        for code in DIRECTION_OFFSETS:
            ok = targets[:, code] >= 0
            diff = src[ok] - src[targets[ok, code]]
            weights[ok, code] = np.sqrt(np.sum(diff * diff, axis=1))
        weights.flags.writeable = False
        return weights

    @cached_property
    def valid_symbols(self) -> np.ndarray:
        """``(size, 9)`` boolean table of symbols legal at each pixel (symbol 0 always legal)."""
        mask = self.symbol_targets >= 0
        mask[:, NO_EDGE] = True
        mask.flags.writeable = False
        return mask

    @cached_property
    def offset_distances(self) -> dict[tuple[int, int], np.ndarray]:
        """
        Edge weights per neighbour offset, as 2D arrays aligned with the
        source slice returned by ``shift_slices`` for that offset.
        """
        grid = self._pixels.reshape(self._height, self._width, 3).astype(np.float64)
        weights = {}
        for dr, dc in NEIGHBOR_OFFSETS:
            src, dst = shift_slices(dr, dc, self._height, self._width)
            diff = grid[src] - grid[dst]
            w = np.sqrt(np.sum(diff * diff, axis=2))
            w.flags.writeable = False
            weights[(dr, dc)] = w
        return weights


__all__ = [
    "N_SYMBOLS",
    "NO_EDGE",
    "DIRECTION_OFFSETS",
    "NEIGHBOR_OFFSETS",
    "WeightedEdge",
    "shift_slices",
    "PixelGraph",
]
