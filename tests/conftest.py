from PIL import Image


def image_from_rows(rows, mode="RGB"):
    """Build an image from a list of pixel rows."""
    height = len(rows)
    width = len(rows[0]) if rows else 0
    img = Image.new(mode, (width, height))
    pixels = img.load()
    for y, row in enumerate(rows):
        for x, value in enumerate(row):
            pixels[x, y] = value
    return img


class ListPixels:
    """Pixel source without a bulk array, forcing per-pixel aggregation."""

    def __init__(self, rows, bits=8):
        self.rows = rows
        self.bits = bits

    def width(self):
        return len(self.rows[0]) if self.rows else 0

    def height(self):
        return len(self.rows)

    def get_pixel(self, x, y):
        return self.rows[y][x]
