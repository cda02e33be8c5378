"""
Command-line entry point.

Usage:
    qudrat reference exam.pdf -o reference.png
    qudrat calibrate question 40 120 1150 900
    qudrat calibrate answer 40 950 600 1020
    qudrat convert "Quant 1 - 2023.pdf" "Quant 2 - 2023.pdf"
    qudrat list
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from qudrat_toolkit.calibration import CalibrationStore, draw_calibration_overlay, render_reference_page
from qudrat_toolkit.core.models import BoxKind, CropBox
from qudrat_toolkit.extractor import (
    BatchConverter,
    BatchProgress,
    ExtractionConfig,
    ExtractionError,
    SourceDocument,
)
from qudrat_toolkit.storage import JsonTestRepository, TestNotFoundError

logger = logging.getLogger("qudrat_toolkit")

DEFAULT_SETTINGS = Path("qudrat_settings.json")
DEFAULT_STORE = Path("qudrat_tests.json")


def _print_progress(progress: BatchProgress) -> None:
    print(
        f"\r[{progress.percent:3d}%] {progress.processed}/{progress.total} pages  {progress.document_name}",
        end="",
        flush=True,
    )
    if progress.processed >= progress.total:
        print()


def cmd_reference(args: argparse.Namespace) -> int:
    store = CalibrationStore(args.settings)
    image = render_reference_page(SourceDocument.from_path(args.pdf))
    draw_calibration_overlay(image, store.current()).save(args.output)
    print(f"Reference page written to {args.output} ({image.width}x{image.height})")
    return 0


def cmd_calibrate(args: argparse.Namespace) -> int:
    store = CalibrationStore(args.settings)
    kind = BoxKind(args.kind)
    try:
        box = CropBox.from_corners(args.x0, args.y0, args.x1, args.y1)
    except ValueError as e:
        print(f"Invalid box: {e}")
        return 1
    if not store.define(kind, box):
        print(f"Box too small, ignored: {box.width:.0f}x{box.height:.0f}")
        return 1
    print(f"{kind.value} box set to {box}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    store = CalibrationStore(args.settings)
    if store.load_error:
        print(f"Warning: {store.load_error}")
    config = store.current()
    for kind in BoxKind:
        print(f"{kind.value:>8}: {config.box(kind) or 'not set'}")
    if not config.is_complete:
        print("Calibration incomplete: define both boxes before converting.")
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    store = CalibrationStore(args.settings)
    store.clear(BoxKind(args.kind) if args.kind else None)
    print("Calibration cleared.")
    return 0


def cmd_convert(args: argparse.Namespace) -> int:
    calibration = CalibrationStore(args.settings).current()
    config = ExtractionConfig(tesseract_cmd=args.tesseract_cmd, section=args.section)
    documents = [SourceDocument.from_path(path) for path in args.pdfs]
    converter = BatchConverter(JsonTestRepository(args.store), config=config)

    tests = converter.run(documents, calibration, _print_progress)

    for test in tests:
        print(f"{test.id}  {test.name}  ({len(test.questions)} questions)")
    print(f"Created {len(tests)} test(s) in {args.store}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    tests = JsonTestRepository(args.store).list_tests(args.section)
    if not tests:
        print("No tests stored.")
    for test in tests:
        print(f"{test.id}  {test.name}  ({len(test.questions)} questions)")
    return 0


def cmd_delete(args: argparse.Namespace) -> int:
    repository = JsonTestRepository(args.store)
    try:
        repository.get_test(args.section, args.test_id)
    except TestNotFoundError:
        print(f"No test {args.test_id} in {args.section}")
        return 1
    repository.delete_test(args.section, args.test_id)
    print(f"Deleted {args.test_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qudrat",
        description="Extract multiple-choice questions from calibrated exam PDFs",
    )
    parser.add_argument("--settings", type=Path, default=DEFAULT_SETTINGS, help="Settings JSON holding the calibration")
    parser.add_argument("--store", type=Path, default=DEFAULT_STORE, help="Test store JSON")
    parser.add_argument("--section", default="quantitative", help="Section tests are filed under")
    parser.add_argument("--tesseract-cmd", default=None, help="Path to the tesseract binary")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("reference", help="Render the calibration page with current boxes")
    p.add_argument("pdf", type=Path)
    p.add_argument("-o", "--output", type=Path, default=Path("reference.png"))
    p.set_defaults(func=cmd_reference)

    p = sub.add_parser("calibrate", help="Define a crop box from two corners (reference-page pixels)")
    p.add_argument("kind", choices=[k.value for k in BoxKind])
    for name in ("x0", "y0", "x1", "y1"):
        p.add_argument(name, type=float)
    p.set_defaults(func=cmd_calibrate)

    p = sub.add_parser("show", help="Print the stored calibration")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("clear", help="Forget one or both crop boxes")
    p.add_argument("kind", nargs="?", choices=[k.value for k in BoxKind])
    p.set_defaults(func=cmd_clear)

    p = sub.add_parser("convert", help="Convert PDFs into tests")
    p.add_argument("pdfs", type=Path, nargs="+")
    p.set_defaults(func=cmd_convert)

    p = sub.add_parser("list", help="List stored tests")
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("delete", help="Delete a stored test")
    p.add_argument("test_id")
    p.set_defaults(func=cmd_delete)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except ExtractionError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
