"""Data schemas for spreadsheet/JSON rows."""

from __future__ import annotations

import math
import numbers
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from boxweaver.models import BoxSpec, ItemSpec

_FORMULA_START = re.compile(r"^[=@+\-]")
_CONTROL_CHARS = re.compile(r"[\r\n\t]")


def sanitize_cell(value: Any) -> Any:
    """
    Neutralize spreadsheet formula injection in text cells.

    Control characters are removed; a leading = @ + - is stripped and the
    text prefixed with a single quote so it can only ever be read as text.
    Non-text values pass through unchanged.
    """
    if not isinstance(value, str):
        return value
    sanitized = _CONTROL_CHARS.sub("", _FORMULA_START.sub("", value)).strip()
    if _FORMULA_START.match(value):
        return f"'{sanitized}"
    return sanitized


def _text(value: Any) -> str:
    value = sanitize_cell(value)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    if isinstance(value, bool):
        raise ValueError(f"must be text, got: {value}")
    if isinstance(value, numbers.Integral):
        return str(int(value))
    if isinstance(value, numbers.Real):
        number = float(value)
        # Whole-number cells come back from Excel as floats
        return str(int(number)) if number.is_integer() else repr(number)
    if not isinstance(value, str):
        raise ValueError(f"must be text, got: {type(value).__name__}")
    return value


def _number(value: Any) -> float:
    value = sanitize_cell(value)
    if value is None or value == "" or (isinstance(value, float) and math.isnan(value)):
        raise ValueError("is required")
    if isinstance(value, bool):
        raise ValueError(f"must be a positive number, got: {value}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"must be a positive number, got: {value}") from None
    if math.isnan(number) or number < 0:
        raise ValueError(f"must be a positive number, got: {value}")
    return number


class _Row(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("height", "width", "length", mode="before", check_fields=False)
    @classmethod
    def _dimension(cls, value: Any) -> float:
        return _number(value)


class ItemRow(_Row):
    """One row of the Items sheet."""

    sku: str = Field(alias="SKU", min_length=1, description="SKU identifier")
    height: float = Field(alias="Height", ge=0.1, le=1000)
    width: float = Field(alias="Width", ge=0.1, le=1000)
    length: float = Field(alias="Length", ge=0.1, le=1000)
    weight: float = Field(alias="Weight", ge=0.01, le=10000)

    @field_validator("sku", mode="before")
    @classmethod
    def _sku(cls, value: Any) -> str:
        return _text(value)

    @field_validator("weight", mode="before")
    @classmethod
    def _weight(cls, value: Any) -> float:
        return _number(value)

    def to_spec(self) -> ItemSpec:
        return ItemSpec(
            name=self.sku,
            width=self.width,
            height=self.height,
            depth=self.length,
            weight=self.weight,
        )


class BoxRow(_Row):
    """One row of the Boxes sheet."""

    box_type: str = Field(alias="BoxType", min_length=1, description="Box type label")
    height: float = Field(alias="Height", ge=0.1, le=1000)
    width: float = Field(alias="Width", ge=0.1, le=1000)
    length: float = Field(alias="Length", ge=0.1, le=1000)
    max_weight: float = Field(alias="MaxWeight", ge=0.1, le=10000)

    @field_validator("box_type", mode="before")
    @classmethod
    def _box_type(cls, value: Any) -> str:
        return _text(value)

    @field_validator("max_weight", mode="before")
    @classmethod
    def _max_weight(cls, value: Any) -> float:
        return _number(value)

    def to_spec(self) -> BoxSpec:
        return BoxSpec(
            label=self.box_type,
            width=self.width,
            height=self.height,
            depth=self.length,
            max_weight=self.max_weight,
        )


class ToleranceSchema(BaseModel):
    """Optional safety margins; None falls back to the configured defaults."""

    dimension_tolerance: float | None = Field(default=None, ge=0, description="Margin subtracted from box dimensions")
    weight_tolerance: float | None = Field(default=None, ge=0, description="Margin subtracted from box weight limits")


class CapacityRequestSchema(ToleranceSchema):
    """Schema for a capacity request over JSON."""

    items: list[ItemRow] = Field(description="Item rows, one result row each")
    boxes: list[BoxRow] = Field(description="Box rows, one capacity column each")


class LayoutRequestSchema(ToleranceSchema):
    """Schema for a single item/box layout request."""

    item: ItemRow
    box: BoxRow
