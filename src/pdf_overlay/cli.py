# SPDX-License-Identifier: Apache-2.0
"""
PDF Overlay - CLI Tool

Burns text elements described in a JSON file into a PDF. Optionally writes
a PNG preview of one page of the result.

Usage:
    overlay-pdf <input.pdf> <elements.json> [options]

Examples:
    overlay-pdf form.pdf elements.json                    # Basic overlay
    overlay-pdf form.pdf elements.json -o filled.pdf
    overlay-pdf form.pdf elements.json --preview-png page1.png --page 1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from pdf_overlay.core.compositor import PDFCompositor
from pdf_overlay.core.errors import DocumentLoadError
from pdf_overlay.core.models import elements_from_json
from pdf_overlay.output.page_renderer import PageRenderer

logger = logging.getLogger(__name__)

# Default output directory
DEFAULT_OUTPUT_DIR = "./output/"


def parse_args() -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument Namespace.
    """
    parser = argparse.ArgumentParser(
        prog="overlay-pdf",
        description="PDF Overlay Tool - Burns positioned text elements into a PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s form.pdf elements.json                      # Write ./output/modified-form.pdf
  %(prog)s form.pdf elements.json -o filled.pdf        # Specify output file
  %(prog)s form.pdf elements.json --preview-png p.png  # Also render page 1
  %(prog)s form.pdf elements.json --preview-png p.png --page 2 --scale 2.0
""",
    )

    # Input files
    parser.add_argument(
        "input",
        type=Path,
        help="Path to source PDF file",
    )
    parser.add_argument(
        "elements",
        type=Path,
        help="Path to JSON file with text elements",
    )

    # Output options
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help=f"Output file path (default: {DEFAULT_OUTPUT_DIR}modified-<input>)",
    )

    # Preview options
    preview_group = parser.add_argument_group("Preview options")
    preview_group.add_argument(
        "--preview-png",
        type=Path,
        help="Write a PNG rendering of one page of the result",
    )
    preview_group.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page to render for --preview-png (1-based, default: 1)",
    )
    preview_group.add_argument(
        "--scale",
        type=float,
        default=None,
        help="Render scale for --preview-png (default: 1.2)",
    )

    # Debug options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )

    return parser.parse_args()


def run(args: argparse.Namespace) -> int:
    """Compose the elements onto the input PDF.

    Args:
        args: Command line arguments.

    Returns:
        Exit code (0: success, 1: failure).
    """
    input_path: Path = args.input
    elements_path: Path = args.elements

    # Validate input files
    if not input_path.exists():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    if input_path.suffix.lower() != ".pdf":
        print(f"Error: Not a PDF file: {input_path}", file=sys.stderr)
        return 1

    if not elements_path.exists():
        print(f"Error: File not found: {elements_path}", file=sys.stderr)
        return 1

    try:
        elements = elements_from_json(elements_path.read_text(encoding="utf-8"))
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        print(f"Error: Invalid elements file: {e}", file=sys.stderr)
        return 1

    # Determine output path
    if args.output:
        output_path: Path = args.output
    else:
        output_path = Path(DEFAULT_OUTPUT_DIR) / f"modified-{input_path.name}"

    print(f"Input: {input_path}")
    print(f"Elements: {elements_path} ({len(elements)})")
    print(f"Output: {output_path}")
    print()

    compositor = PDFCompositor()
    try:
        result = compositor.compose_with_stats(input_path.read_bytes(), elements)
    except DocumentLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(result.pdf_bytes)

    print(f"Complete: {output_path}")
    stats = result.stats
    print(f"  Drawn: {stats.get('drawn', 0)}")
    skipped = (
        stats.get("skipped_invalid", 0)
        + stats.get("skipped_page", 0)
        + stats.get("skipped_empty", 0)
        + stats.get("failed", 0)
    )
    if skipped:
        print(f"  Skipped: {skipped}")

    if args.preview_png:
        renderer = PageRenderer(compositor.calibration)
        try:
            rendered = renderer.render_page(result.pdf_bytes, args.page, args.scale)
        except (IndexError, ValueError) as e:
            print(f"Error: Preview failed: {e}", file=sys.stderr)
            return 1
        args.preview_png.parent.mkdir(parents=True, exist_ok=True)
        args.preview_png.write_bytes(rendered.png_bytes)
        print(f"  Preview: {args.preview_png} ({rendered.width}x{rendered.height})")

    return 0


def main() -> NoReturn:
    """Main entry point."""
    args = parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    exit_code = run(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
