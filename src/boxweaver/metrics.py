from __future__ import annotations
from boxweaver.models import BoxSpec, PlacedItem


def placement_volume(p: PlacedItem) -> float:
    w, h, d = p.dims
    return float(w) * float(h) * float(d)


def compute_metrics(box: BoxSpec, placements: list[PlacedItem]) -> tuple[float, float, float]:
    used_volume = sum(placement_volume(p) for p in placements)
    box_volume = 0.0 if box.is_degenerate() else box.volume
    fill_rate = 0.0 if box_volume == 0 else used_volume / box_volume
    return used_volume, box_volume, fill_rate
