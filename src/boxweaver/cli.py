from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from boxweaver.batch import run_batch
from boxweaver.capacity import adjust_box, grid_estimate
from boxweaver.config import get_settings
from boxweaver.io.workbook import (
    Workbook,
    WorkbookError,
    load_json,
    read_workbook,
    write_estimates,
    write_json,
    write_results,
    write_template,
)

logger = logging.getLogger(__name__)


def load_input(path: Path, max_rows: int) -> Workbook:
    """Read an .xlsx workbook or a .json file into validated specs."""
    if not path.exists():
        raise WorkbookError(f"Input file not found: {path}")
    if path.suffix.lower() == ".json":
        return load_json(path, max_rows=max_rows)
    return read_workbook(path, max_rows=max_rows)


def print_progress(percent: float) -> None:
    print(f"\rProgress: {percent:5.1f}%", end="", file=sys.stderr, flush=True)
    if percent >= 100:
        print(file=sys.stderr)


def run_estimate(workbook: Workbook, dimension_tolerance: float, weight_tolerance: float) -> list[dict]:
    """Grid estimate for every pair; informational only."""
    results = []
    for item in workbook.items:
        for box in workbook.boxes:
            estimate = grid_estimate(item, adjust_box(box, dimension_tolerance, weight_tolerance))
            estimate["box_type"] = box.label
            results.append(estimate)
    return results


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Boxweaver box capacity CLI")
    parser.add_argument("--input", help="Input .xlsx workbook (Items, Boxes sheets) or .json file")
    parser.add_argument("--output", required=True, help="Output .xlsx or .json file")
    parser.add_argument(
        "--mode",
        choices=["capacity", "estimate", "template"],
        default="capacity",
        help="capacity = packing engine per item/box pair, estimate = quick grid estimate, template = write an input template",
    )
    parser.add_argument(
        "--dimension-tolerance",
        type=float,
        default=None,
        help=f"Margin subtracted from every box dimension (default {settings.dimension_tolerance})",
    )
    parser.add_argument(
        "--weight-tolerance",
        type=float,
        default=None,
        help=f"Margin subtracted from every box weight limit (default {settings.weight_tolerance})",
    )
    parser.add_argument(
        "--hard-cap",
        type=int,
        default=settings.hard_cap,
        help="Upper limit on any single capacity",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    output = Path(args.output)

    if args.mode == "template":
        write_template(output)
        print(f"✅ Template written to {output}")
        return 0

    if not args.input:
        parser.error("--input is required for capacity and estimate modes")

    try:
        workbook = load_input(Path(args.input), settings.max_rows)
    except WorkbookError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    # explicit flags > values in the input file > settings
    dimension_tolerance = next(
        v for v in (args.dimension_tolerance, workbook.dimension_tolerance, settings.dimension_tolerance) if v is not None
    )
    weight_tolerance = next(
        v for v in (args.weight_tolerance, workbook.weight_tolerance, settings.weight_tolerance) if v is not None
    )
    if dimension_tolerance < 0 or weight_tolerance < 0:
        print("❌ Tolerances must be non-negative", file=sys.stderr)
        return 1

    if args.mode == "estimate":
        estimates = run_estimate(workbook, dimension_tolerance, weight_tolerance)
        if output.suffix.lower() == ".json":
            output.write_text(json.dumps(estimates, indent=2), encoding="utf-8")
        else:
            write_estimates(estimates, output)
        print(f"✅ {len(estimates)} estimates written to {output}")
        return 0

    rows = run_batch(
        workbook.items,
        workbook.boxes,
        dimension_tolerance=dimension_tolerance,
        weight_tolerance=weight_tolerance,
        progress=print_progress,
        hard_cap=args.hard_cap,
    )

    if output.suffix.lower() == ".json":
        write_json(rows, output)
    else:
        write_results(rows, output)

    print(f"✅ {len(rows)} items x {len(workbook.boxes)} boxes written to {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
