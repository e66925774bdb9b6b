"""Geometry utilities for box capacity planning."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ItemSpec, Orientation

Bounds = tuple[float, float, float, float, float, float]


def boxes_overlap(a: Bounds, b: Bounds) -> bool:
    """
    Axis-aligned bounding box (AABB) overlap test.

    a, b are bounds: (x1, y1, z1, x2, y2, z2)

    Two boxes do NOT overlap iff they are separated along at least one axis.
    Touching faces/edges (ax2 == bx1) is NOT considered overlap.
    """
    ax1, ay1, az1, ax2, ay2, az2 = a
    bx1, by1, bz1, bx2, by2, bz2 = b

    return not (
        ax2 <= bx1 or bx2 <= ax1
        or ay2 <= by1 or by2 <= ay1
        or az2 <= bz1 or bz2 <= az1
    )


def effective_dim(item: "ItemSpec", orientation: "Orientation", axis: int) -> float:
    """Extent of `item` along box axis 0 (x), 1 (y) or 2 (z) under `orientation`."""
    return item.dims[orientation.axes[axis]]


def placement_bounds(
    x: float, y: float, z: float, dims: tuple[float, float, float]
) -> Bounds:
    w, h, d = dims
    return (x, y, z, x + w, y + h, z + d)


def within_bounds(bounds: Bounds, limits: tuple[float, float, float]) -> bool:
    """True if `bounds` lies inside [0, W] x [0, H] x [0, D]."""
    x1, y1, z1, x2, y2, z2 = bounds
    width, height, depth = limits
    return (
        x1 >= 0 and y1 >= 0 and z1 >= 0
        and x2 <= width and y2 <= height and z2 <= depth
    )


def fits_any_orientation(
    dims: tuple[float, float, float], limits: tuple[float, float, float]
) -> bool:
    """Whether some axis permutation of `dims` fits inside `limits`."""
    # Sorted extents fit iff some permutation fits.
    return all(a <= b for a, b in zip(sorted(dims), sorted(limits)))
