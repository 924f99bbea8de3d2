"""Three-sided shields built around a base when it is placed."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .geometry import cell_edges, segment_key
from .rules import SHIELD_RULES, validate_placement
from .types import Mirror, OpenSide, Player, Point

CANONICAL_OPEN_ORDER: Tuple[OpenSide, ...] = (OpenSide.TOP, OpenSide.BOTTOM, OpenSide.LEFT, OpenSide.RIGHT)


@dataclass(frozen=True)
class Shield:
    segments: Tuple[Mirror, Mirror, Mirror]
    open_side: OpenSide


def edge_mirror(cell: Point, side: OpenSide, owner: Player) -> Mirror:
    start, end = cell_edges(cell)[side]
    return Mirror.between(start, end, owner)


def is_edge_free(cell: Point, side: OpenSide, mirrors: Sequence[Mirror]) -> bool:
    key = segment_key(cell_edges(cell)[side])
    return all(m.key() != key for m in mirrors)


def _shield_for(cell: Point, owner: Player, open_side: OpenSide, mirrors: Sequence[Mirror]) -> Optional[Shield]:
    if not is_edge_free(cell, open_side, mirrors):
        return None
    segments = []
    for side in CANONICAL_OPEN_ORDER:
        if side is open_side:
            continue
        segment = edge_mirror(cell, side, owner)
        if validate_placement(segment, {}, mirrors, rules=SHIELD_RULES) is not None:
            return None
        segments.append(segment)
    return Shield(segments=tuple(segments), open_side=open_side)  # type: ignore[arg-type]


def build_base_shield(
    base_point: Point,
    owner: Player,
    mirrors: Sequence[Mirror] = (),
    preferred_open_side: Optional[OpenSide] = None,
) -> Optional[Shield]:
    """Find the shield for a base at ``base_point``.

    A preferred open side is the only side tried; otherwise sides are tried in
    :data:`CANONICAL_OPEN_ORDER`. Returns ``None`` when nothing fits. The
    caller's ``mirrors`` are never modified; committing the segments is the
    caller's job.
    """

    sides = (preferred_open_side,) if preferred_open_side is not None else CANONICAL_OPEN_ORDER
    for side in sides:
        shield = _shield_for(base_point, owner, side, mirrors)
        if shield is not None:
            return shield
    return None


def can_build_shield(base_point: Point, owner: Player, mirrors: Sequence[Mirror] = ()) -> bool:
    return build_base_shield(base_point, owner, mirrors) is not None
