from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np
from PIL import Image

from blockpic.errors import UnsupportedFormatError

# Pillow modes holding one 16-bit unsigned channel per pixel
GREY16_MODES = ("I;16", "I;16L", "I;16B", "I;16N")
# 32-bit signed grey, how Pillow decodes 16-bit PGM and PNG; clipped to 16 bits
GREY32_MODE = "I"
GREY16_MAX = 0xFFFF
DEFAULT_BITS = 8


class Pixel(Protocol):
    """Anything exposing its channel values by position: r, g, b and optionally alpha."""

    def __getitem__(self, index: int) -> int: ...

    def __len__(self) -> int: ...


class PixelSource(Protocol):
    """Rectangular pixel buffer.

    Sources with channels wider than 8 bits also set a ``bits`` attribute;
    without one the channels are taken as 8-bit.
    """

    def width(self) -> int: ...

    def height(self) -> int: ...

    def get_pixel(self, x: int, y: int) -> Pixel: ...


class ImagePixels:
    """Pixel source backed by a decoded Pillow image in RGB, RGBA or 16-bit grey mode."""

    def __init__(self, image: Image.Image):
        if image.mode in ("RGB", "RGBA"):
            self.bits = 8
        elif image.mode in GREY16_MODES or image.mode == GREY32_MODE:
            self.bits = 16
        else:
            raise UnsupportedFormatError(f"Unsupported pixel mode: {image.mode}")
        self.image = image
        self._pixels = image.load()

    def width(self) -> int:
        return self.image.width

    def height(self) -> int:
        return self.image.height

    def get_pixel(self, x: int, y: int) -> Pixel:
        value = self._pixels[x, y]
        if isinstance(value, int):
            value = min(max(value, 0), GREY16_MAX)
            return (value, value, value)
        return value

    def as_array(self) -> np.ndarray:
        arr = np.asarray(self.image)
        if arr.ndim == 2:
            # grey: replicate into three channels in native byte order
            arr = np.repeat(np.clip(arr, 0, GREY16_MAX).astype(np.uint16)[:, :, None], 3, axis=2)
        return arr


class ArrayPixels:
    """Pixel source over a (height, width, 3|4) unsigned integer array."""

    def __init__(self, array: np.ndarray, bits: int | None = None):
        array = np.asarray(array)
        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise UnsupportedFormatError(f"Expected an array of shape (h, w, 3|4), got {array.shape}")
        if array.dtype.kind != "u":
            raise UnsupportedFormatError(f"Expected unsigned integer channels, got {array.dtype}")
        self.array = array
        self.bits = bits if bits is not None else array.dtype.itemsize * 8

    def width(self) -> int:
        return self.array.shape[1]

    def height(self) -> int:
        return self.array.shape[0]

    def get_pixel(self, x: int, y: int) -> Pixel:
        return tuple(int(v) for v in self.array[y, x])

    def as_array(self) -> np.ndarray:
        return self.array


def open_pixels(image: Image.Image) -> ImagePixels:
    """Wrap a decoded image as a pixel source, converting modes without an RGB layout."""
    if image.mode not in ("RGB", "RGBA", GREY32_MODE) and image.mode not in GREY16_MODES:
        try:
            image = image.convert("RGB")
        except ValueError as e:
            raise UnsupportedFormatError(f"Cannot convert {image.mode} image to RGB") from e
    return ImagePixels(image)


def channels(pixel: Pixel) -> Sequence[int]:
    """First three channel values of a pixel as Python integers."""
    return (int(pixel[0]), int(pixel[1]), int(pixel[2]))


def source_bits(source: PixelSource) -> int:
    return getattr(source, "bits", DEFAULT_BITS)
