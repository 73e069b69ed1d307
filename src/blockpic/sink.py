from __future__ import annotations

import io
import sys
from typing import Protocol, TextIO

from blockpic.aggregation import ColorGrid, MeanColor
from blockpic.encoding import encode_grid

RESET = "\033[0m"
DEFAULT_GLYPH = "$"


class RenderSink(Protocol):
    def write_run(self, color: MeanColor, count: int) -> None:
        """Emit ``count`` glyphs in ``color``."""
        ...

    def end_row(self) -> None:
        """Terminate the current output row."""
        ...


def paint(color: MeanColor, text: str) -> str:
    """Wrap text in an ANSI truecolor foreground escape."""
    r, g, b = color
    return f"\033[38;2;{r};{g};{b}m{text}{RESET}"


class AnsiSink:
    """Writes runs as truecolor foreground escapes, one reset per run."""

    def __init__(self, stream: TextIO | None = None, glyph: str = DEFAULT_GLYPH):
        if not glyph:
            raise ValueError("glyph must not be empty")
        self.stream = stream if stream is not None else sys.stdout
        self.glyph = glyph

    def write_run(self, color: MeanColor, count: int) -> None:
        self.stream.write(paint(color, self.glyph * count))

    def end_row(self) -> None:
        self.stream.write("\n")


def render_grid(grid: ColorGrid, sink: RenderSink) -> None:
    """Feed every row's runs to ``sink`` in order, ending each row before the next starts."""
    for runs in encode_grid(grid):
        for color, count in runs:
            sink.write_run(color, count)
        sink.end_row()


def render_to_string(grid: ColorGrid, glyph: str = DEFAULT_GLYPH) -> str:
    buf = io.StringIO()
    render_grid(grid, AnsiSink(buf, glyph=glyph))
    return buf.getvalue()
