from __future__ import annotations

import argparse
import logging
import re
from pathlib import Path
from typing import Optional

from . import __version__
from .batch import process_path
from .errors import ConversionError
from .report import build_report, save_report_json
from .settings import DEFAULT_QUALITY, ConvertSettings


logger = logging.getLogger(__name__)

EPILOG = """\
Examples:
  webp-optimizer ./images
  webp-optimizer ./images 60
  webp-optimizer ./logo.png 90
  webp-optimizer ./images 75 false
"""

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_quality(text: Optional[str]) -> int:
    """
    Read the leading integer of text, e.g. "75" or "75abc" -> 75.

    Anything without one, and 0, falls back to the default quality.
    Out-of-range values are returned as-is for the encoder to judge.
    """
    if text is None:
        return DEFAULT_QUALITY
    m = _LEADING_INT.match(text)
    if not m:
        return DEFAULT_QUALITY
    return int(m.group(1)) or DEFAULT_QUALITY


def parse_recursive(text: Optional[str]) -> bool:
    # Only the literal "false" turns recursion off.
    return text != "false"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="webp-optimizer",
        description="WebP Image Optimizer - Convert images to WebP format with optimized size",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )

    p.add_argument("path", nargs="?", help="Path to file or directory")
    p.add_argument("quality", nargs="?", help="Quality (1-100, default 80)")
    p.add_argument("recursive", nargs="?", help="Process subdirectories (true/false, default true)")

    p.add_argument("-h", "--help", action="store_true", help="Show this help and exit")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # Encoder knobs
    p.add_argument("--effort", type=int, default=6, help="WebP compression effort (0-6), default 6")
    p.add_argument("--lossless", action="store_true", help="WebP lossless mode")

    # Output handling
    p.add_argument(
        "--on-collision",
        choices=("overwrite", "rename", "fail"),
        default="overwrite",
        help="When <name>.webp already exists (default: overwrite)",
    )
    p.add_argument(
        "--summary",
        choices=("directory", "tree"),
        default="directory",
        help="One summary per directory, or one for the whole tree (default: directory)",
    )
    p.add_argument("--report", type=str, default=None, help="Write a JSON report to this path")

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    # Extra arguments are ignored rather than rejected; bad input falls back to defaults.
    args, extra = parser.parse_known_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    if extra:
        logger.debug("Ignoring extra arguments: %s", " ".join(extra))

    if args.help or args.path is None:
        parser.print_help()
        return 0

    settings = ConvertSettings(
        quality=parse_quality(args.quality),
        effort=int(args.effort),
        lossless=bool(args.lossless),
        recursive=parse_recursive(args.recursive),
        summary_mode=args.summary,
        on_collision=args.on_collision,
    )
    logger.debug("Settings: %s", settings)

    print(f"Starting conversion with quality {settings.quality}%...")

    try:
        results, totals = process_path(Path(args.path), settings)

        if args.report:
            report_path = Path(args.report)
            save_report_json(build_report(results, totals, settings), report_path)
            print("Report written:", report_path)
    except (OSError, ConversionError) as e:
        logger.error("Error: %s", e)
        return 1

    print("Conversion process completed.")
    return 0
