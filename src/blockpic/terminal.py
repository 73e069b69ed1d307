import os
import sys
from typing import TextIO


def get_terminal_size(stream: TextIO | None = None, fallback: tuple[int, int] = (80, 24)) -> tuple[int, int]:
    """Return (columns, rows) of the terminal behind ``stream``, or ``fallback`` if it is not a tty."""
    stream = stream if stream is not None else sys.stdout
    if not stream.isatty():
        return fallback
    try:
        size = os.get_terminal_size(stream.fileno())
    except OSError:
        return fallback
    return (size.columns, size.lines)
