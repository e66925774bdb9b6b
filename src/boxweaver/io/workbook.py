"""Spreadsheet and JSON input/output around the capacity engine."""

from __future__ import annotations

import io
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Iterable, Sequence, Type, TypeVar, Union

import pandas as pd
from pydantic import ValidationError

from boxweaver.boxes import SAMPLE_ITEMS, sample_boxes
from boxweaver.io.schemas import BoxRow, ItemRow, ToleranceSchema
from boxweaver.models import BoxSpec, CapacityRow, ItemSpec

logger = logging.getLogger(__name__)

ITEMS_SHEET = "Items"
BOXES_SHEET = "Boxes"
RESULTS_SHEET = "Results"
ESTIMATES_SHEET = "Estimates"
DEFAULT_MAX_ROWS = 1000

Source = Union[str, Path, bytes, BinaryIO]
RowT = TypeVar("RowT", ItemRow, BoxRow)


class WorkbookError(ValueError):
    """Raised for unreadable or invalid input workbooks."""


@dataclass
class Workbook:
    """Validated contents of an input file."""

    items: list[ItemSpec] = field(default_factory=list)
    boxes: list[BoxSpec] = field(default_factory=list)
    dimension_tolerance: float | None = None
    weight_tolerance: float | None = None


def _format_error(exc: ValidationError, row_index: int) -> str:
    err = exc.errors()[0]
    name = str(err["loc"][0]) if err.get("loc") else "row"
    msg = err["msg"].removeprefix("Value error, ")
    if err["type"] in ("missing", "string_too_short"):
        msg = "is required"
    return f"Validation error: {name} {msg} (row {row_index + 1})"


def validate_rows(records: Iterable[dict[str, Any]], schema: Type[RowT]) -> list[RowT]:
    """Validate raw records against a row schema; the first bad row raises WorkbookError."""
    rows: list[RowT] = []
    for index, record in enumerate(records):
        try:
            rows.append(schema.model_validate(record))
        except ValidationError as e:
            raise WorkbookError(_format_error(e, index)) from e
    return rows


def _sheet_records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    frame = frame.dropna(how="all")
    frame = frame.astype(object).where(pd.notna(frame), None)
    return frame.to_dict(orient="records")


def read_workbook(source: Source, max_rows: int = DEFAULT_MAX_ROWS) -> Workbook:
    """
    Read and validate the Items and Boxes sheets of an .xlsx workbook.

    Args:
        source: Path, raw bytes or binary file object
        max_rows: Maximum data rows allowed per sheet

    Returns:
        Workbook with validated item and box specs, in sheet order

    Raises:
        WorkbookError: if a sheet is missing, too long, or a row is invalid
    """
    if isinstance(source, bytes):
        source = io.BytesIO(source)

    try:
        sheets = pd.read_excel(source, sheet_name=None, engine="openpyxl")
    except Exception as e:
        raise WorkbookError(f"Could not read workbook: {e}") from e

    if ITEMS_SHEET not in sheets or BOXES_SHEET not in sheets:
        raise WorkbookError(f"Missing required sheets: {ITEMS_SHEET} and/or {BOXES_SHEET}")

    raw_items = _sheet_records(sheets[ITEMS_SHEET])
    raw_boxes = _sheet_records(sheets[BOXES_SHEET])

    if len(raw_items) > max_rows:
        raise WorkbookError(f"Too many items: {len(raw_items)} rows. Maximum allowed is {max_rows} rows.")
    if len(raw_boxes) > max_rows:
        raise WorkbookError(f"Too many boxes: {len(raw_boxes)} rows. Maximum allowed is {max_rows} rows.")

    items = [row.to_spec() for row in validate_rows(raw_items, ItemRow)]
    boxes = [row.to_spec() for row in validate_rows(raw_boxes, BoxRow)]
    logger.info(f"Read workbook: {len(items)} items, {len(boxes)} boxes")

    return Workbook(items=items, boxes=boxes)


def load_json(path: Path, max_rows: int = DEFAULT_MAX_ROWS) -> Workbook:
    """
    Load a JSON input file:
        {"items": [...], "boxes": [...], "dimension_tolerance"?: x, "weight_tolerance"?: x}
    Rows use the same headers as the sheets (SKU, Height, ...).
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise WorkbookError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict) or "items" not in data or "boxes" not in data:
        raise WorkbookError("Input must include both 'items' and 'boxes'")

    for key in ("items", "boxes"):
        if not isinstance(data[key], list):
            raise WorkbookError(f"'{key}' must be a list of rows")
        if len(data[key]) > max_rows:
            raise WorkbookError(f"Too many {key}: {len(data[key])} rows. Maximum allowed is {max_rows} rows.")

    try:
        tolerances = ToleranceSchema.model_validate(
            {key: data.get(key) for key in ("dimension_tolerance", "weight_tolerance")}
        )
    except ValidationError as e:
        err = e.errors()[0]
        raise WorkbookError(f"Validation error: {err['loc'][0]} {err['msg']}") from e

    return Workbook(
        items=[row.to_spec() for row in validate_rows(data["items"], ItemRow)],
        boxes=[row.to_spec() for row in validate_rows(data["boxes"], BoxRow)],
        dimension_tolerance=tolerances.dimension_tolerance,
        weight_tolerance=tolerances.weight_tolerance,
    )


def results_frame(rows: Sequence[CapacityRow]) -> pd.DataFrame:
    return pd.DataFrame([row.to_record() for row in rows])


def write_results(rows: Sequence[CapacityRow], dest: Union[str, Path, BinaryIO]) -> None:
    """Write result rows to a single Results sheet."""
    with pd.ExcelWriter(dest, engine="openpyxl") as writer:
        results_frame(rows).to_excel(writer, index=False, sheet_name=RESULTS_SHEET)


def results_to_bytes(rows: Sequence[CapacityRow]) -> bytes:
    buffer = io.BytesIO()
    write_results(rows, buffer)
    return buffer.getvalue()


def write_template(dest: Union[str, Path, BinaryIO]) -> None:
    """Write an input template with sample Items and Boxes rows."""
    items = pd.DataFrame(
        [
            {"SKU": i.name, "Height": i.height, "Width": i.width, "Length": i.depth, "Weight": i.weight}
            for i in SAMPLE_ITEMS
        ]
    )
    boxes = pd.DataFrame(
        [
            {"BoxType": b.label, "Height": b.height, "Width": b.width, "Length": b.depth, "MaxWeight": b.max_weight}
            for b in sample_boxes()
        ]
    )
    with pd.ExcelWriter(dest, engine="openpyxl") as writer:
        items.to_excel(writer, index=False, sheet_name=ITEMS_SHEET)
        boxes.to_excel(writer, index=False, sheet_name=BOXES_SHEET)


def template_to_bytes() -> bytes:
    buffer = io.BytesIO()
    write_template(buffer)
    return buffer.getvalue()


def write_json(rows: Sequence[CapacityRow], dest: Path) -> None:
    Path(dest).write_text(json.dumps([row.to_record() for row in rows], indent=2), encoding="utf-8")


def write_estimates(estimates: Sequence[dict[str, Any]], dest: Union[str, Path, BinaryIO]) -> None:
    """Write grid estimates to an Estimates sheet, one row per item/box pair."""
    records = []
    for estimate in estimates:
        grid = estimate.get("grid") or {}
        records.append(
            {
                "SKU": estimate["sku"],
                "BoxType": estimate.get("box_type"),
                "MaxUnits": estimate["max_units"],
                "Orientation": estimate["orientation"],
                "nx": grid.get("nx"),
                "ny": grid.get("ny"),
                "nz": grid.get("nz"),
                "Limiter": estimate["limiter"],
            }
        )
    with pd.ExcelWriter(dest, engine="openpyxl") as writer:
        pd.DataFrame(records).to_excel(writer, index=False, sheet_name=ESTIMATES_SHEET)
