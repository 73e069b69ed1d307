from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, NamedTuple

import numpy as np

from blockpic.errors import InvalidChunkDimension
from blockpic.pixels import Pixel, PixelSource, channels, source_bits

LOG = logging.getLogger(__name__)


class MeanColor(NamedTuple):
    r: int
    g: int
    b: int


def to_8bit(value: int, bits: int) -> int:
    """Truncate a channel value of the given bit depth to 0-255, keeping the high byte."""
    if bits > 8:
        value >>= bits - 8
    return value & 0xFF


@dataclass
class ColorAccumulator:
    r: int = 0
    g: int = 0
    b: int = 0
    count: int = 0

    def add(self, pixel: Pixel) -> None:
        # alpha, when present, does not contribute
        r, g, b = channels(pixel)
        self.r += r
        self.g += g
        self.b += b
        self.count += 1

    def mean(self, bits: int = 8) -> MeanColor:
        return MeanColor(
            to_8bit(self.r // self.count, bits),
            to_8bit(self.g // self.count, bits),
            to_8bit(self.b // self.count, bits),
        )


class ColorGrid:
    """Block mean colours in scan order, stored as a (rows, cols, 3) uint8 array."""

    def __init__(self, colors: np.ndarray):
        self.colors = colors

    @classmethod
    def from_rows(cls, rows: list[list[tuple[int, int, int]]]) -> "ColorGrid":
        cols = len(rows[0]) if rows else 0
        return cls(np.array(rows, dtype=np.uint8).reshape(len(rows), cols, 3))

    @property
    def rows(self) -> int:
        return self.colors.shape[0]

    @property
    def cols(self) -> int:
        return self.colors.shape[1]

    @property
    def is_empty(self) -> bool:
        return self.rows == 0 or self.cols == 0

    def row(self, index: int) -> list[MeanColor]:
        return [MeanColor(int(r), int(g), int(b)) for r, g, b in self.colors[index]]

    def __getitem__(self, pos: tuple[int, int]) -> MeanColor:
        r, g, b = self.colors[pos[0], pos[1]]
        return MeanColor(int(r), int(g), int(b))

    def __iter__(self) -> Iterator[list[MeanColor]]:
        for index in range(self.rows):
            yield self.row(index)

    def __len__(self) -> int:
        return self.rows

    def __eq__(self, other) -> bool:
        if not isinstance(other, ColorGrid):
            return NotImplemented
        return np.array_equal(self.colors, other.colors)

    def __repr__(self) -> str:
        return f"ColorGrid(rows={self.rows}, cols={self.cols})"


def validate_chunk_size(chunk_width: int, chunk_height: int) -> None:
    if chunk_width <= 0 or chunk_height <= 0:
        raise InvalidChunkDimension(chunk_width, chunk_height)


def grid_shape(width: int, height: int, chunk_width: int, chunk_height: int) -> tuple[int, int]:
    """Return (rows, cols) of full blocks; partial blocks at the edges are dropped."""
    return height // chunk_height, width // chunk_width


def _sum_row(source: PixelSource, chunk_width: int, y: int, target: list[ColorAccumulator]) -> None:
    """Add pixel row ``y`` into one accumulator per block column."""
    for idx, acc in enumerate(target):
        start = idx * chunk_width
        for x in range(start, start + chunk_width):
            acc.add(source.get_pixel(x, y))


def aggregate_pixels(
    source: PixelSource, chunk_width: int, chunk_height: int, bits: int | None = None
) -> ColorGrid:
    """Per-pixel aggregation through ``get_pixel``, band by band, top to bottom."""
    if bits is None:
        bits = source_bits(source)
    rows, cols = grid_shape(source.width(), source.height(), chunk_width, chunk_height)
    colors = np.zeros((rows, cols, 3), dtype=np.uint8)
    for y_chunk in range(rows):
        accumulators = [ColorAccumulator() for _ in range(cols)]
        start = y_chunk * chunk_height
        for y in range(start, start + chunk_height):
            _sum_row(source, chunk_width, y, accumulators)
        for x_chunk, acc in enumerate(accumulators):
            colors[y_chunk, x_chunk] = acc.mean(bits)
    return ColorGrid(colors)


def aggregate_array(arr: np.ndarray, chunk_width: int, chunk_height: int, bits: int = 8) -> ColorGrid:
    """Aggregate a whole (height, width, channels) buffer at once.

    Produces exactly the same grid as :func:`aggregate_pixels`: sums are exact
    ``uint64`` integers and the division floors.
    """
    rows, cols = grid_shape(arr.shape[1], arr.shape[0], chunk_width, chunk_height)

    # Trim to full blocks, drop alpha, reshape into (rows, cell_h, cols, cell_w, 3)
    trimmed = arr[: rows * chunk_height, : cols * chunk_width, :3].astype(np.uint64)
    cells = trimmed.reshape(rows, chunk_height, cols, chunk_width, 3)
    sums = cells.sum(axis=(1, 3), dtype=np.uint64)

    means = sums // np.uint64(chunk_width * chunk_height)
    if bits > 8:
        means >>= np.uint64(bits - 8)
    return ColorGrid((means & np.uint64(0xFF)).astype(np.uint8))


def aggregate(source: PixelSource, chunk_width: int, chunk_height: int) -> ColorGrid:
    """Reduce every full ``chunk_width`` x ``chunk_height`` block of ``source`` to its mean colour."""
    validate_chunk_size(chunk_width, chunk_height)
    rows, cols = grid_shape(source.width(), source.height(), chunk_width, chunk_height)
    LOG.debug(
        "Aggregating %dx%d image into %dx%d blocks of %dx%d pixels",
        source.width(),
        source.height(),
        cols,
        rows,
        chunk_width,
        chunk_height,
    )
    bits = source_bits(source)
    as_array = getattr(source, "as_array", None)
    if as_array is not None:
        return aggregate_array(as_array(), chunk_width, chunk_height, bits)
    return aggregate_pixels(source, chunk_width, chunk_height, bits)
