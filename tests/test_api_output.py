"""Tests for API output formatting and input validation."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from boxweaver.api import XLSX_MEDIA_TYPE, app
from boxweaver.io.workbook import read_workbook, template_to_bytes

client = TestClient(app)

ITEMS = [
    {"SKU": "ITEM001", "Height": 10, "Width": 8, "Length": 12, "Weight": 2.5},
    {"SKU": "ITEM002", "Height": 5, "Width": 5, "Length": 5, "Weight": 0.5},
]
BOXES = [
    {"BoxType": "Small", "Height": 9, "Width": 12, "Length": 9, "MaxWeight": 50},
    {"BoxType": "Medium", "Height": 12, "Width": 18, "Length": 12, "MaxWeight": 50},
    {"BoxType": "Large", "Height": 18, "Width": 24, "Length": 18, "MaxWeight": 50},
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for var in ("LOGIN_USERNAME", "LOGIN_PASSWORD", "BOXWEAVER_DIMENSION_TOLERANCE", "BOXWEAVER_WEIGHT_TOLERANCE"):
        monkeypatch.delenv(var, raising=False)


def test_health() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "login_configured": False}


def test_login_success(monkeypatch) -> None:
    monkeypatch.setenv("LOGIN_USERNAME", "planner")
    monkeypatch.setenv("LOGIN_PASSWORD", "s3cret")

    response = client.post("/api/login", json={"username": "planner", "password": "s3cret"})

    assert response.status_code == 200
    assert response.json() == {"success": True}


def test_login_wrong_password(monkeypatch) -> None:
    monkeypatch.setenv("LOGIN_USERNAME", "planner")
    monkeypatch.setenv("LOGIN_PASSWORD", "s3cret")

    response = client.post("/api/login", json={"username": "planner", "password": "nope"})

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Invalid credentials"}


def test_login_rejected_when_unconfigured() -> None:
    response = client.post("/api/login", json={"username": "", "password": ""})

    assert response.status_code == 401


def test_capacity_rows() -> None:
    """Success responses carry one row per item and the box columns in order."""
    request = {"items": ITEMS, "boxes": BOXES, "dimension_tolerance": 0, "weight_tolerance": 0}

    response = client.post("/capacity", json=request)

    assert response.status_code == 200
    data = response.json()
    assert data["box_types"] == ["Small", "Medium", "Large"]
    assert [row["SKU"] for row in data["rows"]] == ["ITEM001", "ITEM002"]
    assert data["rows"][0]["Units_in_Large"] == 5
    assert data["rows"][1]["Units_in_Medium"] == 12


def test_capacity_uses_configured_default_tolerance(monkeypatch) -> None:
    monkeypatch.setenv("BOXWEAVER_DIMENSION_TOLERANCE", "3.5")

    response = client.post("/capacity", json={"items": ITEMS[1:], "boxes": BOXES[2:]})

    assert response.status_code == 200
    assert response.json()["rows"][0]["Units_in_Large"] == 16


def test_capacity_empty_items() -> None:
    response = client.post("/capacity", json={"items": [], "boxes": BOXES})

    assert response.status_code == 200
    assert response.json()["rows"] == []


def test_missing_input_returns_friendly_422() -> None:
    """Missing boxes is a hard failure with a readable message."""
    response = client.post("/capacity", json={"items": ITEMS})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "invalid_input"
    assert "Missing required field: boxes" in detail["message"]


def test_invalid_row_returns_422() -> None:
    bad = [{**ITEMS[0], "Height": 0}]

    response = client.post("/capacity", json={"items": bad, "boxes": BOXES})

    assert response.status_code == 422
    assert any("Height" in message for message in response.json()["detail"]["errors"])


def test_upload_json() -> None:
    response = client.post("/capacity/upload?dimension_tolerance=0", content=template_to_bytes())

    assert response.status_code == 200
    rows = response.json()["rows"]
    assert [row["Units_in_Small"] for row in rows] == [0, 2]


def test_upload_xlsx() -> None:
    response = client.post("/capacity/upload?dimension_tolerance=0&format=xlsx", content=template_to_bytes())

    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    assert response.content[:2] == b"PK"


def test_upload_garbage_returns_422() -> None:
    response = client.post("/capacity/upload", content=b"not a workbook")

    assert response.status_code == 422
    assert "Could not read workbook" in response.json()["detail"]["message"]


def test_upload_empty_body_returns_422() -> None:
    response = client.post("/capacity/upload", content=b"")

    assert response.status_code == 422


def test_layout_placements() -> None:
    request = {"item": ITEMS[1], "box": BOXES[1], "dimension_tolerance": 0, "weight_tolerance": 0}

    response = client.post("/layout", json=request)

    assert response.status_code == 200
    data = response.json()
    assert data["units"] == 12
    assert len(data["placements"]) == 12
    assert data["fill_rate"] == pytest.approx(1500 / 2592)
    first = data["placements"][0]
    assert set(first) == {"id", "x", "y", "z", "width", "height", "length", "orientation"}
    assert (first["x"], first["y"], first["z"]) == (0, 0, 0)
    assert first["orientation"] == "WHD"


def test_layout_nothing_fits() -> None:
    request = {"item": ITEMS[0], "box": BOXES[0], "dimension_tolerance": 0}

    response = client.post("/layout", json=request)

    assert response.status_code == 200
    assert response.json()["units"] == 0
    assert response.json()["placements"] == []


def test_template_download() -> None:
    response = client.get("/template")

    assert response.status_code == 200
    assert response.headers["content-type"] == XLSX_MEDIA_TYPE
    workbook = read_workbook(response.content)
    assert len(workbook.items) == 2
    assert len(workbook.boxes) == 3
