"""FastAPI endpoint for box capacity planning."""

from __future__ import annotations

import logging
import secrets
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from boxweaver.batch import run_batch
from boxweaver.capacity import adjust_box, pack_trial, pair_capacity
from boxweaver.config import get_settings
from boxweaver.io.schemas import CapacityRequestSchema, LayoutRequestSchema
from boxweaver.io.workbook import WorkbookError, read_workbook, results_to_bytes, template_to_bytes
from boxweaver.models import CapacityRow

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class LoginRequest(BaseModel):
    """Credentials posted by the login form."""
    username: str = Field(default="", description="Username")
    password: str = Field(default="", description="Password")


app = FastAPI(
    title="Boxweaver API",
    description="Box capacity planning service",
)


def _friendly_422(errors: list[str]) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"error": "invalid_input", "message": "; ".join(errors), "errors": errors},
    )


def _validation_messages(e: ValidationError) -> list[str]:
    messages = []
    for err in e.errors():
        loc = ".".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return messages


def _tolerances(dimension: float | None, weight: float | None) -> tuple[float, float]:
    settings = get_settings()
    return (
        settings.dimension_tolerance if dimension is None else dimension,
        settings.weight_tolerance if weight is None else weight,
    )


def format_output(rows: list[CapacityRow], box_types: list[str]) -> dict[str, Any]:
    return {
        "rows": [row.to_record() for row in rows],
        "box_types": box_types,
    }


@app.get("/health")
async def health() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "ok": True,
        "login_configured": get_settings().login_configured,
    }


@app.post("/api/login")
async def login(request: LoginRequest) -> JSONResponse:
    settings = get_settings()

    valid = settings.login_configured and (
        secrets.compare_digest(request.username.encode(), settings.login_username.encode())
        and secrets.compare_digest(request.password.encode(), settings.login_password.encode())
    )
    logger.info(f"Login attempt for {request.username!r}: {'ok' if valid else 'rejected'}")

    if valid:
        return JSONResponse({"success": True})
    return JSONResponse({"success": False, "message": "Invalid credentials"}, status_code=401)


@app.post("/capacity")
def capacity(request: dict[str, Any]) -> dict[str, Any]:
    """
    Capacity of every item in every box.

    Body: {"items": [...], "boxes": [...], "dimension_tolerance"?: x, "weight_tolerance"?: x}
    Rows use the sheet headers (SKU/BoxType, Height, Width, Length, Weight/MaxWeight).
    """
    missing = [key for key in ("items", "boxes") if request.get(key) is None]
    if missing:
        raise _friendly_422([f"Missing required field: {key}" for key in missing])

    try:
        payload = CapacityRequestSchema.model_validate(request)
    except ValidationError as e:
        raise _friendly_422(_validation_messages(e))

    settings = get_settings()
    if len(payload.items) > settings.max_rows or len(payload.boxes) > settings.max_rows:
        raise _friendly_422([f"At most {settings.max_rows} items and {settings.max_rows} boxes are allowed"])

    dimension_tolerance, weight_tolerance = _tolerances(payload.dimension_tolerance, payload.weight_tolerance)
    boxes = [row.to_spec() for row in payload.boxes]

    try:
        rows = run_batch(
            [row.to_spec() for row in payload.items],
            boxes,
            dimension_tolerance=dimension_tolerance,
            weight_tolerance=weight_tolerance,
            hard_cap=settings.hard_cap,
        )
    except Exception as e:
        logger.error(f"ERROR in /capacity endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Capacity computation failed")

    return format_output(rows, [box.label for box in boxes])


@app.post("/capacity/upload")
async def capacity_upload(
    request: Request,
    dimension_tolerance: float | None = Query(default=None, ge=0),
    weight_tolerance: float | None = Query(default=None, ge=0),
    format: str = Query(default="json", pattern="^(json|xlsx)$"),
) -> Any:
    """Capacity table for an uploaded .xlsx workbook (raw request body)."""
    body = await request.body()
    if not body:
        raise _friendly_422(["Request body must be an .xlsx workbook"])

    settings = get_settings()
    try:
        workbook = read_workbook(body, max_rows=settings.max_rows)
    except WorkbookError as e:
        raise _friendly_422([str(e)])

    dimension_tolerance, weight_tolerance = _tolerances(dimension_tolerance, weight_tolerance)
    rows = await run_in_threadpool(
        run_batch,
        workbook.items,
        workbook.boxes,
        dimension_tolerance=dimension_tolerance,
        weight_tolerance=weight_tolerance,
        hard_cap=settings.hard_cap,
    )
    logger.info(f"/capacity/upload: {len(workbook.items)} items x {len(workbook.boxes)} boxes")

    if format == "xlsx":
        return Response(
            content=results_to_bytes(rows),
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="box_capacity_results.xlsx"'},
        )
    return format_output(rows, [box.label for box in workbook.boxes])


@app.post("/layout")
def layout(request: dict[str, Any]) -> dict[str, Any]:
    """Capacity of one item in one box, plus the placements at that capacity for rendering."""
    try:
        payload = LayoutRequestSchema.model_validate(request)
    except ValidationError as e:
        raise _friendly_422(_validation_messages(e))

    dimension_tolerance, weight_tolerance = _tolerances(payload.dimension_tolerance, payload.weight_tolerance)
    item = payload.item.to_spec()
    box = adjust_box(payload.box.to_spec(), dimension_tolerance, weight_tolerance)

    units = pair_capacity(item, box, get_settings().hard_cap)
    result = pack_trial(box, item, units)

    return {
        "sku": item.name,
        "box_type": box.label,
        "units": units,
        "box": {"width": box.width, "height": box.height, "length": box.depth, "max_weight": box.max_weight},
        "fill_rate": result.fill_rate,
        "used_volume": result.used_volume,
        "placements": [
            {
                "id": p.item.name,
                "x": p.position.x,
                "y": p.position.y,
                "z": p.position.z,
                "width": p.dims[0],
                "height": p.dims[1],
                "length": p.dims[2],
                "orientation": p.orientation.name,
            }
            for p in result.placements
        ],
    }


@app.get("/template")
async def template() -> Response:
    """Input template workbook with sample rows."""
    return Response(
        content=template_to_bytes(),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="box_capacity_template.xlsx"'},
    )
