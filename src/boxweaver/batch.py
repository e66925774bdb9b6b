"""Batch driver: capacity of every item type in every box type."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from boxweaver.capacity import DEFAULT_HARD_CAP, adjust_box, pair_capacity
from boxweaver.models import BoxSpec, CapacityRow, ItemSpec

logger = logging.getLogger(__name__)

ProgressSink = Callable[[float], None]
CancelCheck = Callable[[], bool]


class MissingCollectionError(ValueError):
    """Raised when the item or box list is absent altogether (not merely empty)."""


class BatchCancelled(Exception):
    """Raised between pairs when the caller asked the batch to stop."""

    def __init__(self, completed: int, total: int) -> None:
        super().__init__(f"Batch cancelled after {completed} of {total} pairs")
        self.completed = completed
        self.total = total


def run_batch(
    items: Sequence[ItemSpec] | None,
    boxes: Sequence[BoxSpec] | None,
    dimension_tolerance: float = 0.0,
    weight_tolerance: float = 0.0,
    progress: ProgressSink | None = None,
    should_cancel: CancelCheck | None = None,
    hard_cap: int = DEFAULT_HARD_CAP,
) -> list[CapacityRow]:
    """
    Compute the capacity of every (item, box) pair.

    Items are the outer loop and boxes the inner loop, both in input order;
    the order is visible in row order and in the progress values.

    Args:
        items: Item templates, one result row each
        boxes: Box types, one capacity column each
        dimension_tolerance: Subtracted from every box dimension
        weight_tolerance: Subtracted from every box weight limit
        progress: Called with the completed percentage after every pair
        should_cancel: Checked before every pair; True stops the batch
        hard_cap: Upper limit on any single capacity

    Returns:
        One CapacityRow per item

    Raises:
        MissingCollectionError: if items or boxes is None
        BatchCancelled: if should_cancel returned True
    """
    if items is None:
        raise MissingCollectionError("Item list is required")
    if boxes is None:
        raise MissingCollectionError("Box list is required")
    if dimension_tolerance < 0 or weight_tolerance < 0:
        raise ValueError(
            f"Tolerances must be non-negative, got dimension={dimension_tolerance}, weight={weight_tolerance}"
        )

    total = len(items) * len(boxes)
    logger.info(f"Computing {len(items)} items x {len(boxes)} boxes ({total} pairs)")

    adjusted = [adjust_box(box, dimension_tolerance, weight_tolerance) for box in boxes]
    rows: list[CapacityRow] = []
    completed = 0

    for item in items:
        row = CapacityRow.for_item(item)

        for box in adjusted:
            if should_cancel is not None and should_cancel():
                logger.info(f"Batch cancelled after {completed}/{total} pairs")
                raise BatchCancelled(completed, total)

            units = pair_capacity(item, box, hard_cap)
            row.capacities[box.label] = units
            logger.debug(f"{item.name} in {box.label}: {units}")

            completed += 1
            if progress is not None:
                progress(completed / total * 100)

        rows.append(row)

    if total == 0 and progress is not None:
        progress(100.0)

    return rows
