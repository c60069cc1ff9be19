"""
Command-line harness around the pipeline builder.

    image-pipeline in.png out.jpg --grayscale --rotate 90 --resize 320x240

Steps run in the order they appear on the command line.
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import List, Sequence

from dotenv import load_dotenv

from models.errors import PipelineError
from pipeline.builder import PipelineBuilder

# Load environment variables first
load_dotenv()

logger = logging.getLogger(__name__)


def _parse_size(text: str):
    try:
        width, height = (int(part) for part in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got '{text}'") from None
    return width, height


class _Step(argparse.Action):
    """Collects transform flags into one ordered list."""
    def __init__(self, option_strings, dest, step, **kwargs):
        self.step = step
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        steps = getattr(namespace, self.dest, None) or []
        if values is None:
            args = ()
        elif isinstance(values, (list, tuple)):
            args = tuple(values)
        else:
            args = (values,)
        steps.append((self.step, args))
        setattr(namespace, self.dest, steps)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="image-pipeline",
                                     description="Apply raster transforms to an image file.")
    parser.add_argument("input", help="source image file")
    parser.add_argument("output", help="destination image file")
    parser.add_argument("--format", dest="fmt", default=None,
                        help="output format (default: output suffix)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    steps = parser.add_argument_group("transforms (applied in command-line order)")
    steps.add_argument("--grayscale", dest="steps", action=_Step, step="grayscale", nargs=0)
    steps.add_argument("--invert", dest="steps", action=_Step, step="invert_colors", nargs=0)
    steps.add_argument("--resize", dest="steps", action=_Step, step="resize",
                       type=_parse_size, metavar="WxH")
    steps.add_argument("--rotate", dest="steps", action=_Step, step="rotate",
                       type=float, metavar="DEG")
    steps.add_argument("--flip-h", dest="steps", action=_Step, step="flip_horizontal", nargs=0)
    steps.add_argument("--flip-v", dest="steps", action=_Step, step="flip_vertical", nargs=0)
    parser.set_defaults(steps=None)
    return parser


def run(input_path: str, output_path: str, steps: List, fmt: str | None = None):
    builder = PipelineBuilder().load(input_path)
    for name, args in steps:
        builder.apply(name, *args)
        logger.info("Applied %s%s", name, args if args else "")
    return builder.build().save(output_path, fmt)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    level = logging.DEBUG if args.verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        written = run(args.input, args.output, args.steps or [], args.fmt)
    except (PipelineError, ValueError) as err:
        logger.error("%s", err)
        return 1
    logger.info("Pipeline complete: %s", written)
    return 0


if __name__ == "__main__":
    sys.exit(main())
