from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Orientation(Enum):
    """
    The 6 axis-aligned orientations of an item.

    Each variant carries the permutation triple that maps the item's
    (width, height, depth) onto the box's (x, y, z) axes. Variants are
    declared in search order.
    """

    WHD = (0, (0, 1, 2))
    WDH = (1, (0, 2, 1))
    HWD = (2, (1, 0, 2))
    HDW = (3, (1, 2, 0))
    DWH = (4, (2, 0, 1))
    DHW = (5, (2, 1, 0))

    def __init__(self, index: int, axes: tuple[int, int, int]) -> None:
        self.index = index
        self.axes = axes

    def apply(self, dims: tuple[float, float, float]) -> tuple[float, float, float]:
        """Oriented dims (w, h, d) for the given (width, height, depth)."""
        a, b, c = self.axes
        return (dims[a], dims[b], dims[c])


class ItemSpec(BaseModel):
    """Item type to be packed; one template per SKU."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="SKU or other identifier of the item")
    width: float = Field(description="Extent along the box width (x) axis")
    height: float = Field(description="Extent along the box height (y) axis")
    depth: float = Field(description="Extent along the box depth (z) axis, 'Length' in sheets")
    weight: float = Field(description="Weight of a single item")

    @property
    def dims(self) -> tuple[float, float, float]:
        return (self.width, self.height, self.depth)

    @property
    def volume(self) -> float:
        return self.width * self.height * self.depth


class BoxSpec(BaseModel):
    """
    Box type items are packed into.

    Fields are not constrained here: a tolerance-adjusted box may end up with
    zero or negative dimensions and the engine must still accept it.
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(description="Box type label, used as the result column key")
    width: float = Field(description="Inner width (x)")
    height: float = Field(description="Inner height (y)")
    depth: float = Field(description="Inner depth (z), 'Length' in sheets")
    max_weight: float = Field(description="Maximum total weight of the contents")

    @property
    def dims(self) -> tuple[float, float, float]:
        return (self.width, self.height, self.depth)

    @property
    def volume(self) -> float:
        return self.width * self.height * self.depth

    def is_degenerate(self) -> bool:
        return min(self.width, self.height, self.depth, self.max_weight) <= 0


class Position(BaseModel):
    """Minimum corner of a placed item."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0, description="Offset along the width axis")
    y: float = Field(ge=0, description="Offset along the height axis")
    z: float = Field(ge=0, description="Offset along the depth axis")


class PlacedItem(BaseModel):
    """An item bound to an orientation and position inside one trial."""

    model_config = ConfigDict(frozen=True)

    item: ItemSpec
    orientation: Orientation
    position: Position

    @property
    def dims(self) -> tuple[float, float, float]:
        return self.orientation.apply(self.item.dims)

    @property
    def bounds(self) -> tuple[float, float, float, float, float, float]:
        w, h, d = self.dims
        p = self.position
        return (p.x, p.y, p.z, p.x + w, p.y + h, p.z + d)


class PackingResult(BaseModel):
    """Outcome of packing a fixed number of copies of one item into one box."""

    placements: list[PlacedItem] = Field(default_factory=list)
    unpacked: int = 0
    used_volume: float = 0.0
    box_volume: float = 0.0
    fill_rate: float = 0.0


class CapacityRow(BaseModel):
    """Result row for one item: its own fields plus one capacity per box type."""

    sku: str
    height: float
    width: float
    length: float
    weight: float
    # box label -> capacity, in box input order
    capacities: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def for_item(cls, item: ItemSpec) -> "CapacityRow":
        return cls(
            sku=item.name,
            height=item.height,
            width=item.width,
            length=item.depth,
            weight=item.weight,
        )

    def to_record(self) -> dict[str, str | float | int]:
        """Flatten to the tabular export shape (sheet headers as keys)."""
        record: dict[str, str | float | int] = {
            "SKU": self.sku,
            "Height": self.height,
            "Width": self.width,
            "Length": self.length,
            "Weight": self.weight,
        }
        for label, units in self.capacities.items():
            record[f"Units_in_{label}"] = units
        return record
