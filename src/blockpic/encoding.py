from __future__ import annotations

from typing import Iterable, Iterator, NamedTuple

from blockpic.aggregation import ColorGrid, MeanColor


class Run(NamedTuple):
    color: MeanColor
    count: int


def encode_row(row: Iterable[MeanColor]) -> Iterator[Run]:
    """Merge horizontally adjacent equal colours into maximal runs, left to right."""
    current = None
    count = 0
    for color in row:
        if count and color == current:
            count += 1
            continue
        if count:
            yield Run(current, count)
        current = color
        count = 1
    if count:
        yield Run(current, count)


def encode_grid(grid: ColorGrid) -> Iterator[list[Run]]:
    """Encode each grid row independently; runs never span rows."""
    if grid.is_empty:
        return
    for row in grid:
        yield list(encode_row(row))


def decode_runs(runs: Iterable[Run]) -> list[MeanColor]:
    out: list[MeanColor] = []
    for color, count in runs:
        out.extend([color] * count)
    return out
