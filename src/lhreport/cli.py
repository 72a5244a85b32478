"""
CLI argument parsing.
"""

import argparse
from pathlib import Path
from typing import Optional

from .renderers import OUTPUT_FORMATS
from .renderers.ui_features import THEMES


def _formats(value: str) -> list[str]:
    formats = [part.strip() for part in value.split(",") if part.strip()]
    unknown = [f for f in formats if f not in OUTPUT_FORMATS]
    if not formats or unknown:
        raise argparse.ArgumentTypeError(
            f"invalid output format list {value!r} (choose from {', '.join(OUTPUT_FORMATS)})"
        )
    return formats


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lhreport",
        description="Render a Lighthouse-style audit result as an HTML report.",
    )
    parser.add_argument(
        "result",
        type=Path,
        metavar="RESULT.json",
        help="Audit result JSON to render",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        dest="output_dir",
        type=Path,
        default=Path("./output"),
        help="Output directory for the report (default: ./output)",
    )
    parser.add_argument(
        "--output",
        dest="formats",
        type=_formats,
        default=["html"],
        metavar="FORMATS",
        help="Comma-separated output formats: html, json (default: html)",
    )
    parser.add_argument(
        "--theme",
        choices=THEMES,
        default="light",
        help="Report colour theme (default: light)",
    )
    parser.add_argument(
        "--templates",
        dest="template_path",
        type=Path,
        metavar="FILE",
        help="HTML document with the report's <template> elements "
             "(default: the bundled templates.html)",
    )
    return parser.parse_args(argv)
