import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from svg2raster import export
from svg2raster.formats import OutputFormat, parse_formats
from svg2raster.resource_limits import ResourceLimits
from svg2raster.scene import SVGScene
from svg2raster.utils.color import parse_color
from svg2raster.version import __version__

logger = logging.getLogger(__name__)

STDIN = "-"
SVG_EXTENSIONS = (".svg", ".svgz")


def format_list(value: str) -> list[OutputFormat]:
    try:
        return parse_formats(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from e
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value!r}")
    return number


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="svg2raster",
        description="Convert an SVG file to several raster formats at once.",
    )
    parser.add_argument(
        "input",
        metavar="INPUT",
        type=str,
        help="Input SVG file path. Use '-' to read from stdin.",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="DIR",
        type=str,
        default=None,
        help="Output directory, created if missing. Default: current directory.",
    )
    parser.add_argument(
        "--filename",
        metavar="NAME",
        type=str,
        default=None,
        help="Output filename without extension. Required when reading from stdin.",
    )
    parser.add_argument(
        "-f",
        "--format",
        metavar="LIST",
        dest="formats",
        type=format_list,
        default=None,
        help="Comma-separated output formats (avif, jpeg, png, tiff, webp). "
        "Default: all formats.",
    )
    parser.add_argument(
        "--width",
        metavar="PIXELS",
        type=non_negative_int,
        default=None,
        help="Output width in pixels (overrides --scale).",
    )
    parser.add_argument(
        "--height",
        metavar="PIXELS",
        type=non_negative_int,
        default=None,
        help="Output height in pixels (overrides --scale).",
    )
    parser.add_argument(
        "--scale",
        metavar="FACTOR",
        type=float,
        default=1.0,
        help="Scale factor relative to the SVG's intrinsic size. Default: 1.0",
    )
    parser.add_argument(
        "--background",
        metavar="COLOR",
        type=str,
        default=None,
        help="Background color, '#RRGGBB' or '#RRGGBBAA'. Default: transparent "
        "for formats with alpha, white otherwise.",
    )
    parser.add_argument(
        "--loglevel",
        metavar="LEVEL",
        default=os.environ.get("SVG2RASTER_LOG_LEVEL", "INFO"),
        help="Logging level, default INFO (or SVG2RASTER_LOG_LEVEL).",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    return parser.parse_args(argv)


def is_svg_file(path: str) -> bool:
    """Check that the path is an existing file with an SVG extension."""
    return os.path.isfile(path) and path.lower().endswith(SVG_EXTENSIONS)


def read_input(path: str, limits: ResourceLimits) -> bytes:
    """Read the input document from a file or stdin."""
    if path == STDIN:
        data = sys.stdin.buffer.read()
    else:
        limits.check_file_size(os.path.getsize(path))
        with open(path, "rb") as f:
            data = f.read()
    limits.check_file_size(len(data))
    return data


def resolve_filename(args: argparse.Namespace) -> str:
    if args.filename:
        return args.filename
    if args.input == STDIN:
        raise ValueError("'--filename' is required because the input comes from stdin.")
    return os.path.splitext(os.path.basename(args.input))[0]


def run(args: argparse.Namespace) -> None:
    """Validate the arguments, load the scene and export every format."""
    if args.input != STDIN and not is_svg_file(args.input):
        raise ValueError(
            f"Invalid SVG file: '{args.input}'. Please provide a valid SVG input."
        )
    background = parse_color(args.background) if args.background else None
    filename = resolve_filename(args)
    output_dir = args.output or os.getcwd()

    limits = ResourceLimits.default()
    try:
        data = read_input(args.input, limits)
    except OSError as e:
        source = "stdin" if args.input == STDIN else f"file '{args.input}'"
        raise OSError(f"Failed to read from {source}: {e}") from e
    scene = SVGScene.from_bytes(data)

    export(
        scene,
        output_dir,
        filename,
        formats=args.formats,
        width=args.width,
        height=args.height,
        scale=args.scale,
        background=background,
        limits=limits,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command line entry point. Returns the process exit status."""
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.loglevel.upper(), logging.INFO))
    try:
        run(args)
    except (ValueError, OSError) as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
