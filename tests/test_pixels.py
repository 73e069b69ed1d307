import numpy as np
import pytest
from PIL import Image

from blockpic.aggregation import MeanColor, aggregate, aggregate_pixels
from blockpic.errors import UnsupportedFormatError
from blockpic.pixels import ArrayPixels, ImagePixels, open_pixels


def test_rgb_image_is_used_as_is():
    img = Image.new("RGB", (3, 2), (1, 2, 3))
    source = open_pixels(img)
    assert source.image is img
    assert (source.width(), source.height(), source.bits) == (3, 2, 8)
    assert tuple(source.get_pixel(2, 1)) == (1, 2, 3)


def test_rgba_keeps_alpha_channel():
    source = open_pixels(Image.new("RGBA", (2, 2), (1, 2, 3, 4)))
    assert source.as_array().shape == (2, 2, 4)


def test_greyscale_is_converted_to_rgb():
    source = open_pixels(Image.new("L", (2, 2), 77))
    assert source.image.mode == "RGB"
    assert tuple(source.get_pixel(0, 0)) == (77, 77, 77)


def test_grey_alpha_is_converted_to_rgb():
    source = open_pixels(Image.new("LA", (2, 1), (200, 128)))
    assert source.image.mode == "RGB"
    assert tuple(source.get_pixel(1, 0)) == (200, 200, 200)


def test_sixteen_bit_grey_is_exposed_as_wide_rgb():
    source = open_pixels(Image.new("I;16", (2, 2), 0x1234))
    assert source.bits == 16
    assert tuple(source.get_pixel(1, 1)) == (0x1234, 0x1234, 0x1234)
    arr = source.as_array()
    assert arr.shape == (2, 2, 3)
    assert int(arr[0, 0, 2]) == 0x1234


def test_image_pixels_rejects_other_modes():
    with pytest.raises(UnsupportedFormatError):
        ImagePixels(Image.new("L", (1, 1)))


def test_unconvertible_mode_is_unsupported(monkeypatch):
    img = Image.new("L", (1, 1))

    def refuse(*args, **kwargs):
        raise ValueError("conversion not supported")

    monkeypatch.setattr(img, "convert", refuse)
    with pytest.raises(UnsupportedFormatError, match="Cannot convert L"):
        open_pixels(img)


def test_array_pixels_accessors():
    arr = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
    source = ArrayPixels(arr)
    assert (source.width(), source.height(), source.bits) == (3, 2, 8)
    assert source.get_pixel(1, 0) == (3, 4, 5)
    assert all(type(v) is int for v in source.get_pixel(0, 1))


def test_array_pixels_explicit_bit_depth():
    source = ArrayPixels(np.zeros((1, 1, 3), dtype=np.uint16), bits=12)
    assert source.bits == 12


@pytest.mark.parametrize(
    "array",
    [
        np.zeros((2, 2), dtype=np.uint8),
        np.zeros((2, 2, 2), dtype=np.uint8),
        np.zeros((2, 2, 3), dtype=np.float32),
        np.zeros((2, 2, 3), dtype=np.int16),
    ],
)
def test_array_pixels_rejects_bad_buffers(array):
    with pytest.raises(UnsupportedFormatError):
        ArrayPixels(array)


def test_sixteen_bit_pgm_keeps_high_byte(tmp_path):
    path = tmp_path / "grey16.pgm"
    path.write_bytes(b"P5\n2 2\n65535\n" + b"\x80\x00" * 4)
    source = open_pixels(Image.open(path))
    assert source.bits == 16
    assert aggregate(source, 2, 2)[0, 0] == MeanColor(128, 128, 128)
    assert aggregate_pixels(source, 2, 2)[0, 0] == MeanColor(128, 128, 128)


def test_thirty_two_bit_grey_is_clipped_to_sixteen_bits():
    source = open_pixels(Image.new("I", (2, 2), 0x8000))
    assert source.image.mode == "I"
    assert aggregate(source, 2, 2)[0, 0] == MeanColor(128, 128, 128)
    bright = open_pixels(Image.new("I", (1, 1), 0x12345))
    assert tuple(bright.get_pixel(0, 0)) == (0xFFFF, 0xFFFF, 0xFFFF)
    assert int(bright.as_array()[0, 0, 0]) == 0xFFFF
