"""Lattice and ray geometry shared by the placement rules and the laser tracer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .types import OpenSide, Point, Segment, Vector

PARALLEL_EPSILON = 1e-10
SEGMENT_PARAM_EPSILON = 1e-12
CELL_EPSILON = 1e-9
TOUCH_EPSILON = 1e-6

# Right, down, down-right, down-left: each lattice step is produced once.
UNIT_STEPS: Tuple[Point, ...] = ((1, 0), (0, 1), (1, 1), (-1, 1))


def orientation(p: Vector, q: Vector, r: Vector) -> float:
    """Cross product of ``pq`` and ``pr``; the sign says which side of ``pq`` ``r`` is on."""

    return (q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0])


def shares_endpoint(a: Segment, b: Segment) -> bool:
    return a[0] in b or a[1] in b


def segments_intersect(a: Segment, b: Segment) -> bool:
    """True iff the segments cross transversally away from a shared endpoint."""

    if shares_endpoint(a, b):
        return False
    d1 = orientation(b[0], b[1], a[0])
    d2 = orientation(b[0], b[1], a[1])
    d3 = orientation(a[0], a[1], b[0])
    d4 = orientation(a[0], a[1], b[1])
    return ((d1 > 0 > d2) or (d1 < 0 < d2)) and ((d3 > 0 > d4) or (d3 < 0 < d4))


def _within_box(p: Vector, q: Vector, r: Vector, eps: float) -> bool:
    return (
        min(p[0], q[0]) - eps <= r[0] <= max(p[0], q[0]) + eps
        and min(p[1], q[1]) - eps <= r[1] <= max(p[1], q[1]) + eps
    )


def segments_touch(a: Tuple[Vector, Vector], b: Tuple[Vector, Vector], eps: float = TOUCH_EPSILON) -> bool:
    """Inclusive, tolerant intersection test for float segments.

    Unlike :func:`segments_intersect` this also reports shared endpoints,
    T-junctions and collinear overlaps, and it errs towards ``True`` when the
    geometry is within ``eps`` of touching.
    """

    p1, p2 = a
    p3, p4 = b
    d1 = orientation(p3, p4, p1)
    d2 = orientation(p3, p4, p2)
    d3 = orientation(p1, p2, p3)
    d4 = orientation(p1, p2, p4)
    if ((d1 > eps and d2 < -eps) or (d1 < -eps and d2 > eps)) and (
        (d3 > eps and d4 < -eps) or (d3 < -eps and d4 > eps)
    ):
        return True
    if abs(d1) <= eps and _within_box(p3, p4, p1, eps):
        return True
    if abs(d2) <= eps and _within_box(p3, p4, p2, eps):
        return True
    if abs(d3) <= eps and _within_box(p1, p2, p3, eps):
        return True
    if abs(d4) <= eps and _within_box(p1, p2, p4, eps):
        return True
    return False


def chebyshev(a: Point, b: Point) -> int:
    return max(abs(a[0] - b[0]), abs(a[1] - b[1]))


def distance(a: Vector, b: Vector) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def cell_corners(cell: Point) -> Tuple[Point, Point, Point, Point]:
    x, y = cell
    return ((x, y), (x + 1, y), (x, y + 1), (x + 1, y + 1))


def point_in_cell(point: Point, cell: Point) -> bool:
    """True iff ``point`` is one of the four corners of ``cell``."""

    return point in cell_corners(cell)


def cell_edges(cell: Point) -> Dict[OpenSide, Segment]:
    x, y = cell
    return {
        OpenSide.TOP: ((x, y), (x + 1, y)),
        OpenSide.BOTTOM: ((x, y + 1), (x + 1, y + 1)),
        OpenSide.LEFT: ((x, y), (x, y + 1)),
        OpenSide.RIGHT: ((x + 1, y), (x + 1, y + 1)),
    }


def segment_key(segment: Segment) -> Segment:
    a, b = segment
    return (a, b) if a <= b else (b, a)


def same_segment(a: Segment, b: Segment) -> bool:
    """Endpoint-pair equality regardless of direction."""

    return segment_key(a) == segment_key(b)


@dataclass(frozen=True)
class RayHit:
    """Intersection of a ray with a segment.

    ``t`` is the ray parameter (a distance when the direction is a unit
    vector) and ``u`` the position along the segment, ``0`` at its start.
    """

    point: Vector
    t: float
    u: float


def line_ray_intersection(origin: Vector, direction: Vector, seg_start: Vector, seg_end: Vector) -> Optional[RayHit]:
    """Solve ``origin + t * direction == seg_start + u * (seg_end - seg_start)``.

    Returns ``None`` when the ray and segment are parallel, when the crossing
    lies behind the origin, or when it falls outside the segment.
    """

    ox, oy = origin
    dx, dy = direction
    ex = seg_end[0] - seg_start[0]
    ey = seg_end[1] - seg_start[1]
    denom = dx * ey - dy * ex
    if abs(denom) < PARALLEL_EPSILON:
        return None
    wx = seg_start[0] - ox
    wy = seg_start[1] - oy
    t = (wx * ey - wy * ex) / denom
    u = (wx * dy - wy * dx) / denom
    if t < 0 or u < -SEGMENT_PARAM_EPSILON or u > 1 + SEGMENT_PARAM_EPSILON:
        return None
    return RayHit(point=(ox + t * dx, oy + t * dy), t=t, u=u)


def normalize(vector: Vector) -> Vector:
    length = math.hypot(vector[0], vector[1])
    if length == 0:
        raise ValueError("cannot normalize a zero vector")
    return (vector[0] / length, vector[1] / length)


def reflect(direction: Vector, seg_start: Vector, seg_end: Vector) -> Vector:
    """Mirror ``direction`` about the line through the segment: ``d - 2(d.n)n``."""

    ex, ey = normalize((seg_end[0] - seg_start[0], seg_end[1] - seg_start[1]))
    nx, ny = -ey, ex
    dot = direction[0] * nx + direction[1] * ny
    return normalize((direction[0] - 2 * dot * nx, direction[1] - 2 * dot * ny))


def cell_entry(start: Vector, end: Vector, cell: Point, eps: float = CELL_EPSILON) -> Optional[Vector]:
    """First point of the segment ``start-end`` lying in ``cell``, or ``None``.

    Cells are half-open, ``[x, x + 1) x [y, y + 1)``: a path running along the
    top or left border belongs to the cell, one along the bottom or right
    border belongs to the neighbour.
    """

    cx, cy = cell
    x0, y0 = start
    dx = end[0] - x0
    dy = end[1] - y0
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x0 - cx), (dx, cx + 1 - x0), (-dy, y0 - cy), (dy, cy + 1 - y0)):
        if abs(p) < eps:
            if q < -eps:
                return None
            continue
        r = q / p
        if p < 0:
            t0 = max(t0, r)
        else:
            t1 = min(t1, r)
        if t0 > t1 + eps:
            return None
    mid = (t0 + t1) / 2.0
    mx, my = x0 + mid * dx, y0 + mid * dy
    if not (cx - eps <= mx < cx + 1 - eps and cy - eps <= my < cy + 1 - eps):
        return None
    return (x0 + t0 * dx, y0 + t0 * dy)


DEFAULT_GRID_SIZE = 50
MIN_GRID_SIZE = 3
MAX_GRID_SIZE = 100


def check_grid_size(grid_size: int) -> int:
    if not isinstance(grid_size, int) or isinstance(grid_size, bool):
        raise ValueError(f"grid size must be an integer, got {grid_size!r}")
    if not MIN_GRID_SIZE <= grid_size <= MAX_GRID_SIZE:
        raise ValueError(f"grid size must be within {MIN_GRID_SIZE}..{MAX_GRID_SIZE}, got {grid_size}")
    return grid_size
