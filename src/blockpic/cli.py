import argparse
import logging
import sys
import time

from blockpic.aggregation import aggregate
from blockpic.converter import CELL_ASPECT, fit_chunk_size
from blockpic.errors import ImageSourceError
from blockpic.pixels import open_pixels
from blockpic.sink import DEFAULT_GLYPH, AnsiSink, render_grid
from blockpic.source import load_image
from blockpic.terminal import get_terminal_size

LOG = logging.getLogger("blockpic")


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    LOG.handlers[:] = [handler]
    LOG.setLevel(level)
    LOG.propagate = False


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render an image as coloured terminal blocks")
    parser.add_argument("image", help="Path or URI of the input image (file://, http://, https://)")
    parser.add_argument(
        "-x",
        "--chunk-width",
        type=positive_int,
        default=None,
        help="Block width in pixels (default: fit the image to --size columns)",
    )
    parser.add_argument(
        "-y",
        "--chunk-height",
        type=positive_int,
        default=None,
        help=f"Block height in pixels (default: {CELL_ASPECT}x the block width)",
    )
    parser.add_argument(
        "-s", "--size", type=positive_int, default=None, help="Output width in columns (default: terminal width)"
    )
    parser.add_argument("-g", "--glyph", default=DEFAULT_GLYPH, help=f"Glyph printed per block (default: {DEFAULT_GLYPH})")
    parser.add_argument("-v", "--verbose", action="store_true", default=False, help="Log stage timings to stderr")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.glyph:
        parser.error("argument -g/--glyph: must not be empty")
    setup_logging(args.verbose)

    t0 = time.perf_counter()
    try:
        source = open_pixels(load_image(args.image))
    except ImageSourceError as e:
        print(f"Unable to open image for uri {args.image}: {e}", file=sys.stderr)
        sys.exit(1)
    t1 = time.perf_counter()

    if args.chunk_width is not None:
        chunk_width = args.chunk_width
        chunk_height = args.chunk_height if args.chunk_height is not None else chunk_width * CELL_ASPECT
    else:
        columns = args.size if args.size is not None else get_terminal_size()[0]
        chunk_width, chunk_height = fit_chunk_size(source.width(), columns)
        if args.chunk_height is not None:
            chunk_height = args.chunk_height

    grid = aggregate(source, chunk_width, chunk_height)
    t2 = time.perf_counter()

    render_grid(grid, AnsiSink(sys.stdout, glyph=args.glyph))
    sys.stdout.flush()
    t3 = time.perf_counter()

    LOG.debug("load: %.3fs aggregate: %.3fs render: %.3fs", t1 - t0, t2 - t1, t3 - t2)


if __name__ == "__main__":
    main()
