# src/boxweaver/boxes.py
from __future__ import annotations

from boxweaver.models import BoxSpec, ItemSpec

# Sample rows of the input template. Units are whatever the sheet uses; the engine is unit-agnostic.
BOX_PRESETS: dict[str, dict[str, float]] = {
    "SMALL":  {"width": 12.0, "height": 9.0,  "depth": 9.0,  "max_weight": 50.0},
    "MEDIUM": {"width": 18.0, "height": 12.0, "depth": 12.0, "max_weight": 50.0},
    "LARGE":  {"width": 24.0, "height": 18.0, "depth": 18.0, "max_weight": 50.0},
}

SAMPLE_ITEMS: list[ItemSpec] = [
    ItemSpec(name="ITEM001", width=8.0, height=10.0, depth=12.0, weight=2.5),
    ItemSpec(name="ITEM002", width=5.0, height=5.0, depth=5.0, weight=0.5),
]


def get_box_preset(preset: str) -> BoxSpec:
    key = preset.strip().upper()
    if key not in BOX_PRESETS:
        raise ValueError(f"Unknown box preset '{preset}'. Valid: {sorted(BOX_PRESETS.keys())}")
    return BoxSpec(label=key.capitalize(), **BOX_PRESETS[key])


def sample_boxes() -> list[BoxSpec]:
    return [get_box_preset(name) for name in BOX_PRESETS]
