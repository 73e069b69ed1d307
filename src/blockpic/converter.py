from __future__ import annotations

import math
from pathlib import Path

from PIL import Image

from blockpic.aggregation import ColorGrid, aggregate
from blockpic.pixels import PixelSource, open_pixels
from blockpic.sink import DEFAULT_GLYPH, render_to_string
from blockpic.source import load_image

# Terminal cells are roughly twice as tall as they are wide
CELL_ASPECT = 2


def fit_chunk_size(image_width: int, columns: int, aspect: int = CELL_ASPECT) -> tuple[int, int]:
    """Smallest block size whose grid is at most ``columns`` wide, with height ``aspect`` times the width."""
    if columns <= 0:
        raise ValueError(f"columns must be positive, got {columns}")
    chunk_width = max(1, math.ceil(image_width / columns))
    return chunk_width, chunk_width * aspect


def to_pixel_source(image: Image.Image | PixelSource | str | Path) -> PixelSource:
    if isinstance(image, Path):
        image = load_image(str(image))
    elif isinstance(image, str):
        image = load_image(image)
    if isinstance(image, Image.Image):
        return open_pixels(image)
    return image


def image_to_grid(
    image: Image.Image | PixelSource | str | Path,
    chunk_width: int | None = None,
    chunk_height: int | None = None,
    columns: int | None = None,
) -> ColorGrid:
    source = to_pixel_source(image)
    if chunk_width is None:
        if columns is None:
            raise ValueError("Either chunk_width or columns is required")
        chunk_width, fitted_height = fit_chunk_size(source.width(), columns)
        if chunk_height is None:
            chunk_height = fitted_height
    elif chunk_height is None:
        chunk_height = chunk_width * CELL_ASPECT
    return aggregate(source, chunk_width, chunk_height)


def image_to_blocks(
    image: Image.Image | PixelSource | str | Path,
    chunk_width: int | None = None,
    chunk_height: int | None = None,
    columns: int | None = None,
    glyph: str = DEFAULT_GLYPH,
) -> str:
    """Render an image as rows of coloured glyphs, one glyph per block."""
    grid = image_to_grid(image, chunk_width, chunk_height, columns)
    return render_to_string(grid, glyph=glyph)
