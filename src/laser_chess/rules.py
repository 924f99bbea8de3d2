"""Placement rules for mirrors.

Every rule has its own predicate so a rejection can always be traced to a
single :class:`PlacementRule`. :func:`validate_placement` runs them in order
and reports the first one that fails.

:class:`PlacementIndex` answers the same questions in constant time per
candidate and is what the move generator uses to sweep the whole lattice.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Sequence, Set, Tuple

from .geometry import cell_corners, cell_edges, chebyshev, segment_key, segments_intersect
from .types import Base, Mirror, Player, Point, Segment


class PlacementRule(str, Enum):
    """Reason a mirror placement is rejected, in the order rules are checked."""

    DEGENERATE = "degenerate"
    NOT_ADJACENT = "not_adjacent"
    BASE_OCCUPIED = "base_occupied"
    OPEN_EDGE = "open_edge"
    OVERLAP = "overlap"
    CROSSING = "crossing"
    ENCLOSURE = "enclosure"


ALL_RULES: Tuple[PlacementRule, ...] = tuple(PlacementRule)
# Rules a shield segment must pass; the base being shielded is not placed yet.
SHIELD_RULES: Tuple[PlacementRule, ...] = (
    PlacementRule.DEGENERATE,
    PlacementRule.NOT_ADJACENT,
    PlacementRule.OVERLAP,
    PlacementRule.CROSSING,
)

MAX_COVERED_EDGES = 3


def open_edge(base: Base) -> Segment:
    return cell_edges(base.cell)[base.open_side]


def _direction_class(delta: Point) -> Point:
    # (1, 0) and (-1, 0) describe the same line.
    return delta if delta > (0, 0) else (-delta[0], -delta[1])


def is_degenerate(candidate: Mirror) -> bool:
    return candidate.start == candidate.end


def is_not_adjacent(candidate: Mirror, grid_size: Optional[int] = None) -> bool:
    """True when the endpoints are not one lattice step apart.

    With ``grid_size`` given, endpoints off the lattice also fail this rule.
    """

    if chebyshev(candidate.start, candidate.end) != 1:
        return True
    if grid_size is None:
        return False
    return any(not (0 <= v <= grid_size) for v in (candidate.x1, candidate.y1, candidate.x2, candidate.y2))


def touches_base_corner(candidate: Mirror, bases: Mapping[Player, Base]) -> bool:
    for base in bases.values():
        corners = cell_corners(base.cell)
        if candidate.start in corners or candidate.end in corners:
            return True
    return False


def matches_open_edge(candidate: Mirror, bases: Mapping[Player, Base]) -> bool:
    key = candidate.key()
    return any(segment_key(open_edge(base)) == key for base in bases.values())


def mirrors_overlap(a: Mirror, b: Mirror) -> bool:
    """Identical, reversed, or collinear neighbours meeting at a shared point."""

    if a.key() == b.key():
        return True
    if not a.shares_endpoint(b):
        return False
    (adx, ady), (bdx, bdy) = a.delta, b.delta
    return adx * bdy - ady * bdx == 0


def mirrors_cross(a: Mirror, b: Mirror) -> bool:
    return segments_intersect(a.points, b.points)


def overlaps_existing(candidate: Mirror, mirrors: Iterable[Mirror]) -> bool:
    return any(mirrors_overlap(candidate, m) for m in mirrors)


def crosses_existing(candidate: Mirror, mirrors: Iterable[Mirror]) -> bool:
    return any(mirrors_cross(candidate, m) for m in mirrors)


def covered_edge_count(base: Base, mirrors: Iterable[Mirror]) -> int:
    """Number of distinct border edges of ``base`` covered by any mirror."""

    edges = {segment_key(edge) for edge in cell_edges(base.cell).values()}
    return len(edges & {m.key() for m in mirrors})


def would_enclose_base(candidate: Mirror, bases: Mapping[Player, Base], mirrors: Sequence[Mirror]) -> bool:
    key = candidate.key()
    for base in bases.values():
        edges = {segment_key(edge) for edge in cell_edges(base.cell).values()}
        if key not in edges:
            continue
        if covered_edge_count(base, list(mirrors) + [candidate]) > MAX_COVERED_EDGES:
            return True
    return False


def validate_placement(
    candidate: Mirror,
    bases: Mapping[Player, Base],
    mirrors: Sequence[Mirror],
    rules: Iterable[PlacementRule] = ALL_RULES,
    grid_size: Optional[int] = None,
) -> Optional[PlacementRule]:
    """Return the first rule ``candidate`` breaks, or ``None`` when it is legal."""

    checks = {
        PlacementRule.DEGENERATE: lambda: is_degenerate(candidate),
        PlacementRule.NOT_ADJACENT: lambda: is_not_adjacent(candidate, grid_size),
        PlacementRule.BASE_OCCUPIED: lambda: touches_base_corner(candidate, bases),
        PlacementRule.OPEN_EDGE: lambda: matches_open_edge(candidate, bases),
        PlacementRule.OVERLAP: lambda: overlaps_existing(candidate, mirrors),
        PlacementRule.CROSSING: lambda: crosses_existing(candidate, mirrors),
        PlacementRule.ENCLOSURE: lambda: would_enclose_base(candidate, bases, mirrors),
    }
    wanted = set(rules)
    for rule in ALL_RULES:
        if rule in wanted and checks[rule]():
            return rule
    return None


def is_placement_legal(
    candidate: Mirror,
    bases: Mapping[Player, Base],
    mirrors: Sequence[Mirror],
    grid_size: Optional[int] = None,
) -> Tuple[bool, Optional[PlacementRule]]:
    """Return ``(legal, reason)``; ``reason`` is ``None`` for legal placements."""

    reason = validate_placement(candidate, bases, mirrors, grid_size=grid_size)
    return reason is None, reason


class PlacementIndex:
    """Hash-based view of a position for bulk legality checks.

    Gives the same answers as :func:`validate_placement` for unit-step
    candidates against a field of unit-step mirrors. The only proper crossing
    possible between two such segments is the two diagonals of one cell.
    """

    def __init__(self, bases: Mapping[Player, Base], mirrors: Iterable[Mirror] = ()) -> None:
        self.bases = dict(bases)
        self.keys: Set[Segment] = set()
        self.lines: Dict[Point, Set[Point]] = {}
        self.blocked_points: Set[Point] = set()
        self.open_edges: Set[Segment] = set()
        self.base_edges: Dict[Player, Set[Segment]] = {}
        self.covered: Dict[Player, int] = {}
        for player, base in self.bases.items():
            self.blocked_points.update(cell_corners(base.cell))
            self.open_edges.add(segment_key(open_edge(base)))
            self.base_edges[player] = {segment_key(edge) for edge in cell_edges(base.cell).values()}
            self.covered[player] = 0
        for mirror in mirrors:
            self.add(mirror)

    def copy(self) -> "PlacementIndex":
        clone = PlacementIndex.__new__(PlacementIndex)
        clone.bases = dict(self.bases)
        clone.keys = set(self.keys)
        clone.lines = {point: set(dirs) for point, dirs in self.lines.items()}
        clone.blocked_points = self.blocked_points
        clone.open_edges = self.open_edges
        clone.base_edges = self.base_edges
        clone.covered = dict(self.covered)
        return clone

    def add(self, mirror: Mirror) -> None:
        key = mirror.key()
        if key in self.keys:
            return
        self.keys.add(key)
        direction = _direction_class(mirror.delta)
        for point in mirror.points:
            self.lines.setdefault(point, set()).add(direction)
        for player, edges in self.base_edges.items():
            if key in edges:
                self.covered[player] += 1

    def rejection(
        self, candidate: Mirror, check_enclosure: bool = True, grid_size: Optional[int] = None
    ) -> Optional[PlacementRule]:
        if is_degenerate(candidate):
            return PlacementRule.DEGENERATE
        if is_not_adjacent(candidate, grid_size):
            return PlacementRule.NOT_ADJACENT
        if candidate.start in self.blocked_points or candidate.end in self.blocked_points:
            return PlacementRule.BASE_OCCUPIED
        key = candidate.key()
        if key in self.open_edges:
            return PlacementRule.OPEN_EDGE
        if key in self.keys:
            return PlacementRule.OVERLAP
        direction = _direction_class(candidate.delta)
        for point in candidate.points:
            if direction in self.lines.get(point, ()):
                return PlacementRule.OVERLAP
        if candidate.is_diagonal:
            (x1, y1), (x2, y2) = key
            if segment_key(((x1, y2), (x2, y1))) in self.keys:
                return PlacementRule.CROSSING
        if check_enclosure:
            for player, edges in self.base_edges.items():
                if key in edges and self.covered[player] >= MAX_COVERED_EDGES:
                    return PlacementRule.ENCLOSURE
        return None

    def allows(self, candidate: Mirror, check_enclosure: bool = True) -> bool:
        return self.rejection(candidate, check_enclosure) is None
