"""Capacity analysis: maximum count of one item type per (tolerance-adjusted) box."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterator

from boxweaver.geometry import fits_any_orientation
from boxweaver.metrics import compute_metrics
from boxweaver.models import BoxSpec, ItemSpec, Orientation, PackingResult
from boxweaver.packing.first_fit import Bin

logger = logging.getLogger(__name__)

DEFAULT_HARD_CAP = 1000


class InvalidTemplateError(ValueError):
    """Raised when an item template has no positive weight to bound the search with."""


def adjust_box(box: BoxSpec, dimension_tolerance: float = 0.0, weight_tolerance: float = 0.0) -> BoxSpec:
    """
    Subtract the safety margins from a box.

    The result may have zero or negative fields; callers treat such a box as
    holding nothing.
    """
    return box.model_copy(
        update={
            "width": box.width - dimension_tolerance,
            "height": box.height - dimension_tolerance,
            "depth": box.depth - dimension_tolerance,
            "max_weight": box.max_weight - weight_tolerance,
        }
    )


def make_copies(item: ItemSpec, count: int) -> Iterator[ItemSpec]:
    """Fresh items with the template's dims and weight, named `<name>_<i>`."""
    for i in range(count):
        yield item.model_copy(update={"name": f"{item.name}_{i}"})


def weight_bound(box: BoxSpec, item: ItemSpec, hard_cap: int = DEFAULT_HARD_CAP) -> int:
    if item.weight <= 0:
        raise InvalidTemplateError(f"Item {item.name} must have a positive weight, got {item.weight}")
    return min(hard_cap, math.floor(box.max_weight / item.weight))


def max_capacity(box: BoxSpec, item: ItemSpec, hard_cap: int = DEFAULT_HARD_CAP) -> int:
    """
    Use binary search to find the maximum count of `item` that can be packed into `box`.

    For each mid value:
    - Reset the bin
    - Add mid fresh copies one by one, stopping at the first failure
    - Feasible if every copy was placed

    Feasibility is assumed monotonic in the count. The greedy placer does not
    guarantee it in general; the search keeps the assumption as is.

    Args:
        box: Tolerance-adjusted box
        item: Item template
        hard_cap: Upper limit on the count, regardless of weight

    Returns:
        Best feasible count (0 if none feasible)

    Raises:
        InvalidTemplateError: if the item weight is not strictly positive
    """
    low, high = 0, weight_bound(box, item, hard_cap)
    best = 0
    trial = Bin(box)

    while low <= high:
        mid = (low + high) // 2
        trial.reset()

        all_fit = True
        for copy in make_copies(item, mid):
            if not trial.add_item(copy):
                all_fit = False
                break

        if all_fit:
            best = mid
            low = mid + 1
        else:
            high = mid - 1

    return best


def infeasible_reason(item: ItemSpec, box: BoxSpec) -> str | None:
    """Why a pair trivially holds nothing, or None if a search is needed."""
    if item.weight <= 0 or min(item.dims) <= 0:
        return "invalid_template"
    if box.is_degenerate():
        return "degenerate_box"
    if not fits_any_orientation(item.dims, box.dims):
        return "no_orientation_fits"
    if item.weight > box.max_weight:
        return "overweight"
    return None


def pair_capacity(item: ItemSpec, box: BoxSpec, hard_cap: int = DEFAULT_HARD_CAP) -> int:
    """
    Capacity of an already adjusted box for one item; 0 for infeasible pairs.

    Never raises for bad templates or degenerate boxes, so a batch is not
    aborted by one pair.
    """
    reason = infeasible_reason(item, box)
    if reason is not None:
        logger.debug(f"{item.name} in {box.label}: 0 ({reason})")
        return 0
    return max_capacity(box, item, hard_cap)


def pack_trial(box: BoxSpec, item: ItemSpec, count: int) -> PackingResult:
    """Pack `count` copies of `item` into a fresh bin and report the layout."""
    trial = Bin(box)
    unpacked = 0
    for copy in make_copies(item, count):
        if not trial.add_item(copy):
            unpacked += 1

    used_volume, box_volume, fill_rate = compute_metrics(box, trial.placed)

    return PackingResult(
        placements=list(trial.placed),
        unpacked=unpacked,
        used_volume=used_volume,
        box_volume=box_volume,
        fill_rate=fill_rate,
    )


def grid_estimate(item: ItemSpec, box: BoxSpec) -> dict[str, Any]:
    """
    Quick closed-form estimate of how many units fit, by regular grid stacking.

    Tests all 6 orientations and keeps the one with the most units; each is
    capped by the weight limit. Much faster than `max_capacity` and not
    comparable with it: the greedy placer may do better or worse.

    Returns:
        dict with:
            - sku: Item identifier
            - max_units: Maximum number of units that fit
            - orientation: Name of the best orientation (None if nothing fits)
            - grid: Dict with nx, ny, nz grid dimensions
            - limiter: "geometry" or "weight" indicating the constraining factor
    """
    result: dict[str, Any] = {
        "sku": item.name,
        "max_units": 0,
        "orientation": None,
        "grid": None,
        "limiter": "geometry",
    }
    if item.weight <= 0 or min(item.dims) <= 0 or box.is_degenerate():
        return result

    weight_units = math.floor(box.max_weight / item.weight)

    for orientation in Orientation:
        w, h, d = orientation.apply(item.dims)
        nx = math.floor(box.width / w)
        ny = math.floor(box.height / h)
        nz = math.floor(box.depth / d)

        geometry_units = nx * ny * nz
        feasible = min(geometry_units, weight_units)
        limiter = "geometry" if geometry_units <= weight_units else "weight"

        if feasible > result["max_units"]:
            result.update(
                max_units=feasible,
                orientation=orientation.name,
                grid={"nx": nx, "ny": ny, "nz": nz},
                limiter=limiter,
            )

    if result["max_units"] == 0 and weight_units == 0:
        result["limiter"] = "weight"

    return result
