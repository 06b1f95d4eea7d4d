"""CLI entry point for the fuzzpaint thumbnailer.

Meant to be run by a file manager through a ``.thumbnailer`` entry::

    fzp-thumbnailer %i %s %o %u
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

from . import __version__
from .config import ThumbnailerConfig
from .errors import ThumbnailerError
from .pipeline import generate_thumbnail

logger = logging.getLogger(__name__)


def _size_arg(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError("must be a non-negative integer") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fzp-thumbnailer",
        description="Write a PNG thumbnail for a fuzzpaint document",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress to stderr"
    )
    parser.add_argument("in_path", type=Path, help="Path to the .fzp document")
    parser.add_argument("size", type=_size_arg, help="Size in px of the square to fit into")
    parser.add_argument("out_path", type=Path, help="Where to write the PNG")
    parser.add_argument(
        "in_uri",
        nargs="?",
        default=None,
        help="URI of the document for Thumb::URI (default: file URI of in_path)",
    )
    return parser


def main(argv: List[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )

    try:
        config = ThumbnailerConfig.from_env()
    except ValueError as exc:
        parser.error(str(exc))

    if args.size == 0:
        parser.error("<size> parameter must not be zero")
    if args.size < 0:
        parser.error("<size> parameter must be a non-negative integer")
    # We only have so much input data to work with.
    if args.size > config.max_requested_size:
        parser.error("<size> parameter larger than reasonable")

    try:
        result = generate_thumbnail(
            args.in_path,
            args.size,
            args.out_path,
            uri=args.in_uri,
            config=config,
        )
    except ThumbnailerError as exc:
        logger.debug("thumbnail failed (%s)", exc.kind.value)
        parser.exit(1, f"{parser.prog}: {exc}\n")

    logger.info(
        "%s: %dx%d thumbnail from %dx%d source",
        result.output_path,
        result.render.width,
        result.render.height,
        result.render.source_width,
        result.render.source_height,
    )


if __name__ == "__main__":
    main()
