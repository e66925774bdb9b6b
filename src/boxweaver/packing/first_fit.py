# src/boxweaver/packing/first_fit.py

from __future__ import annotations

from boxweaver.geometry import Bounds, boxes_overlap, placement_bounds, within_bounds
from boxweaver.models import BoxSpec, ItemSpec, Orientation, PlacedItem, Position


def generate_candidate_points(placements: list[PlacedItem]) -> list[tuple[float, float, float]]:
    """
    Extreme-points style candidates:
      start with origin,
      add (x+w, y, z), (x, y+h, z), (x, y, z+d) for each placed item.
    Duplicates are kept; they cannot change the chosen point.
    """
    points: list[tuple[float, float, float]] = [(0.0, 0.0, 0.0)]

    for p in placements:
        w, h, d = p.dims
        x, y, z = p.position.x, p.position.y, p.position.z

        points.append((x + w, y, z))
        points.append((x, y + h, z))
        points.append((x, y, z + d))

    return points


class Bin:
    """
    Trial state for one box: placed items in insertion order plus running weight.

    A Bin is owned by a single capacity search and reset before every probe.
    """

    def __init__(self, box: BoxSpec) -> None:
        self.box = box
        self.placed: list[PlacedItem] = []
        self.current_weight = 0.0
        # parallel to self.placed
        self._bounds: list[Bounds] = []

    def __repr__(self) -> str:
        return f"Bin({self.box.label!r}, items={len(self.placed)}, weight={self.current_weight})"

    def reset(self) -> None:
        self.placed = []
        self.current_weight = 0.0
        self._bounds = []

    def can_add_weight(self, item: ItemSpec) -> bool:
        return self.current_weight + item.weight <= self.box.max_weight

    def _collides(self, bounds: Bounds) -> bool:
        return any(boxes_overlap(bounds, other) for other in self._bounds)

    def try_place(self, item: ItemSpec) -> PlacedItem | None:
        """
        Find where `item` would go next, without mutating the bin.

        - Fails immediately if the weight limit would be exceeded
        - Tries orientations in index order; the FIRST orientation with a
          legal point wins, later ones are never compared
        - Within an orientation picks the lowest, then back-most, then
          left-most point: minimum by (y, z, x)
        """
        if not self.can_add_weight(item):
            return None

        limits = self.box.dims
        points = generate_candidate_points(self.placed)

        for orientation in Orientation:
            dims = orientation.apply(item.dims)
            if dims[0] > limits[0] or dims[1] > limits[1] or dims[2] > limits[2]:
                continue

            best: tuple[float, float, float] | None = None
            for (x, y, z) in points:
                bounds = placement_bounds(x, y, z, dims)
                if not within_bounds(bounds, limits):
                    continue
                if self._collides(bounds):
                    continue
                if best is None or (y, z, x) < (best[1], best[2], best[0]):
                    best = (x, y, z)

            if best is not None:
                x, y, z = best
                return PlacedItem(
                    item=item,
                    orientation=orientation,
                    position=Position(x=x, y=y, z=z),
                )

        return None

    def add_item(self, item: ItemSpec) -> bool:
        """Place `item` if possible. On failure the bin is left unchanged."""
        placed = self.try_place(item)
        if placed is None:
            return False

        self.placed.append(placed)
        self._bounds.append(placed.bounds)
        self.current_weight += item.weight
        return True
