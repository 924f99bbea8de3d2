"""Base placement for computer players.

The first side to place prefers a cell near the centre but off the border;
the second side wants distance from the first base while staying central.
The open side is turned towards the opponent so the base can shoot out.
"""

from __future__ import annotations

import random
from typing import List, Mapping, Optional, Sequence, Tuple

from .engine import is_base_position_allowed
from .geometry import check_grid_size, distance
from .shield import build_base_shield
from .types import Base, Mirror, OpenSide, Player, Point

OPPONENT_DISTANCE_WEIGHT = 2.0
CENTER_DISTANCE_WEIGHT = 0.3
EDGE_DISTANCE_WEIGHT = 0.4
RANDOM_WEIGHT = 0.1
FALLBACK_OPEN_ORDER: Tuple[OpenSide, ...] = (OpenSide.TOP, OpenSide.RIGHT, OpenSide.BOTTOM, OpenSide.LEFT)


def base_position_candidates(
    player: Player,
    bases: Mapping[Player, Base],
    grid_size: int,
    mirrors: Sequence[Mirror] = (),
) -> List[Point]:
    """Cells where ``player`` may put its base with a buildable shield."""

    cells = []
    for x in range(grid_size):
        for y in range(grid_size):
            point = (x, y)
            if not is_base_position_allowed(point, player, bases, grid_size):
                continue
            if build_base_shield(point, player, mirrors) is None:
                continue
            cells.append(point)
    return cells


def _cell_center(point: Point) -> Tuple[float, float]:
    return (point[0] + 0.5, point[1] + 0.5)


def score_base_position(
    point: Point,
    player: Player,
    bases: Mapping[Player, Base],
    grid_size: int,
    rng: Optional[random.Random] = None,
) -> float:
    center = (grid_size / 2.0, grid_size / 2.0)
    center_dist = distance(_cell_center(point), center)
    other = bases.get(player.opponent())
    if other is not None:
        return distance(_cell_center(point), other.center) * OPPONENT_DISTANCE_WEIGHT - center_dist * CENTER_DISTANCE_WEIGHT
    x, y = point
    edge_dist = min(x, y, grid_size - 1 - x, grid_size - 1 - y)
    score = -center_dist + edge_dist * EDGE_DISTANCE_WEIGHT
    if rng is not None:
        score += rng.random() * RANDOM_WEIGHT
    return score


def choose_base_position(
    player: Player,
    bases: Mapping[Player, Base],
    grid_size: int,
    mirrors: Sequence[Mirror] = (),
    rng: Optional[random.Random] = None,
) -> Optional[Point]:
    """Best-scoring allowed cell for ``player``'s base, or ``None`` if there is none."""

    check_grid_size(grid_size)
    best: Optional[Point] = None
    best_score = float("-inf")
    for point in base_position_candidates(player, bases, grid_size, mirrors):
        score = score_base_position(point, player, bases, grid_size, rng)
        if score > best_score:
            best, best_score = point, score
    return best


def _facing_score(side: OpenSide, point: Point, target: Point) -> int:
    dx = point[0] - target[0]
    dy = point[1] - target[1]
    if side is OpenSide.TOP:
        return abs(dy) if dy >= 0 else -abs(dy)
    if side is OpenSide.BOTTOM:
        return abs(dy) if dy <= 0 else -abs(dy)
    if side is OpenSide.LEFT:
        return abs(dx) if dx >= 0 else -abs(dx)
    return abs(dx) if dx <= 0 else -abs(dx)


def pick_open_side(
    point: Point,
    player: Player,
    bases: Mapping[Player, Base],
    mirrors: Sequence[Mirror] = (),
) -> Optional[OpenSide]:
    """Open side for a base at ``point``, turned towards the opponent when possible."""

    other = bases.get(player.opponent())
    order = list(FALLBACK_OPEN_ORDER)
    if other is not None:
        # Stable sort keeps the fallback order between equally good sides.
        order.sort(key=lambda side: -_facing_score(side, point, other.cell))
    for side in order:
        if build_base_shield(point, player, mirrors, side) is not None:
            return side
    return None
