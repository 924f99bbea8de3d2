"""Laser propagation through the mirror field.

A shot starts at the centre of the attacker's base cell and is fired in each
of the four axis directions independently. The ray travels in a straight line
to the nearest mirror ahead, changes direction there and continues until it
leaves the board, repeats a state it has already been in, or runs out of
steps. Every one of those endings is a miss.

Mirrors of the other colour reflect the beam. Mirrors of the beam's own colour
would both reflect and transmit it; a single branch is followed, chosen by
:func:`follow_branch`, and the hit test and path recovery share that choice.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Set, Tuple

from .geometry import (
    TOUCH_EPSILON,
    UNIT_STEPS,
    cell_entry,
    line_ray_intersection,
    reflect,
    segment_key,
    segments_touch,
)
from .types import Base, Mirror, Player, Segment, Vector

logger = logging.getLogger(__name__)

# Firing order: right, left, down, up (y grows downward).
DIRECTIONS: Tuple[Vector, ...] = ((1.0, 0.0), (-1.0, 0.0), (0.0, 1.0), (0.0, -1.0))
MAX_STEPS = 4096
COLLISION_TOLERANCE = 1e-6
_STATE_DIGITS = 6

Leg = Tuple[Vector, Vector]


@dataclass(frozen=True)
class Collision:
    point: Vector
    t: float
    mirror: Mirror


def find_collision(position: Vector, direction: Vector, mirrors: Sequence[Mirror]) -> Optional[Collision]:
    """Nearest mirror crossing strictly ahead of ``position``.

    Crossings closer than :data:`COLLISION_TOLERANCE` are ignored so the
    mirror just bounced off is not hit again. Equal distances go to the
    mirror that comes first in ``mirrors``.
    """

    best: Optional[Collision] = None
    for mirror in mirrors:
        hit = line_ray_intersection(position, direction, mirror.start, mirror.end)
        if hit is None or hit.t <= COLLISION_TOLERANCE:
            continue
        if best is None or hit.t < best.t:
            best = Collision(point=hit.point, t=hit.t, mirror=mirror)
    return best


def outgoing_directions(direction: Vector, mirror: Mirror, laser_owner: Player) -> Tuple[Vector, ...]:
    """Directions leaving ``mirror``, preferred branch first."""

    reflected = reflect(direction, mirror.start, mirror.end)
    if mirror.owner is laser_owner:
        return (reflected, direction)
    return (reflected,)


def follow_branch(direction: Vector, mirror: Mirror, laser_owner: Player) -> Vector:
    return outgoing_directions(direction, mirror, laser_owner)[0]


def _exit_distance(position: Vector, direction: Vector, grid_size: int) -> float:
    best = float("inf")
    for p, d in zip(position, direction):
        if d > 1e-12:
            best = min(best, (grid_size - p) / d)
        elif d < -1e-12:
            best = min(best, -p / d)
    return max(best, 0.0)


def iter_legs(
    origin: Vector,
    direction: Vector,
    laser_owner: Player,
    mirrors: Sequence[Mirror],
    grid_size: int,
    max_steps: int = MAX_STEPS,
) -> Iterator[Leg]:
    """Yield the straight pieces of one beam, in travel order."""

    position, heading = origin, direction
    seen = set()
    for _ in range(max_steps + 1):
        state = tuple(round(v, _STATE_DIGITS) for v in (*position, *heading))
        if state in seen:
            return
        seen.add(state)
        exit_t = _exit_distance(position, heading, grid_size)
        collision = find_collision(position, heading, mirrors)
        if collision is None or collision.t > exit_t + COLLISION_TOLERANCE:
            yield position, (position[0] + exit_t * heading[0], position[1] + exit_t * heading[1])
            return
        yield position, collision.point
        heading = follow_branch(heading, collision.mirror, laser_owner)
        position = collision.point
    logger.debug("beam from %s gave up after %d reflections", origin, max_steps)


def trace_laser(
    origin: Vector,
    direction: Vector,
    laser_owner: Player,
    mirrors: Sequence[Mirror],
    grid_size: int,
) -> List[Vector]:
    """Breakpoints of one beam, starting with ``origin``."""

    points = [origin]
    for _, end in iter_legs(origin, direction, laser_owner, mirrors, grid_size):
        points.append(end)
    return points


def _require_bases(attacker_base: Optional[Base], defender_base: Optional[Base]) -> None:
    if attacker_base is None or defender_base is None:
        raise ValueError("both bases must be placed before firing")


@dataclass
class _Beam:
    legs: List[Leg] = field(default_factory=list)
    hit_point: Optional[Vector] = None

    @property
    def hit(self) -> bool:
        return self.hit_point is not None


def _fire(
    attacker_base: Base,
    attacker_color: Player,
    defender_base: Base,
    mirrors: Sequence[Mirror],
    grid_size: int,
    direction: Vector,
) -> _Beam:
    beam = _Beam()
    for start, end in iter_legs(attacker_base.center, direction, attacker_color, mirrors, grid_size):
        entry = cell_entry(start, end, defender_base.cell)
        if entry is not None:
            beam.legs.append((start, entry))
            beam.hit_point = entry
            break
        beam.legs.append((start, end))
    return beam


def can_laser_hit_base(
    attacker_base: Optional[Base],
    attacker_color: Player,
    defender_base: Optional[Base],
    mirrors: Sequence[Mirror],
    grid_size: int,
) -> bool:
    """True when any of the four beams from the attacker reaches the defender's cell."""

    _require_bases(attacker_base, defender_base)
    return any(
        _fire(attacker_base, attacker_color, defender_base, mirrors, grid_size, d).hit for d in DIRECTIONS
    )


def find_laser_hit_path(
    attacker_base: Optional[Base],
    attacker_color: Player,
    defender_base: Optional[Base],
    mirrors: Sequence[Mirror],
    grid_size: int,
) -> Optional[List[Vector]]:
    """Breakpoints of the first hitting beam, ending where it enters the defender's cell."""

    _require_bases(attacker_base, defender_base)
    for direction in DIRECTIONS:
        beam = _fire(attacker_base, attacker_color, defender_base, mirrors, grid_size, direction)
        if beam.hit:
            return [beam.legs[0][0]] + [end for _, end in beam.legs]
    return None


def find_winning_path(
    attacker_base: Optional[Base],
    attacker_color: Player,
    defender_base: Optional[Base],
    mirrors: Sequence[Mirror],
    grid_size: int,
) -> Optional[List[Vector]]:
    path = find_laser_hit_path(attacker_base, attacker_color, defender_base, mirrors, grid_size)
    if path is not None:
        logger.debug("%s hits with %d breakpoints", attacker_color.name, len(path))
    return path


Box = Tuple[float, float, float, float]


def _leg_box(leg: Leg) -> Box:
    (x1, y1), (x2, y2) = leg
    eps = TOUCH_EPSILON
    return (min(x1, x2) - eps, max(x1, x2) + eps, min(y1, y2) - eps, max(y1, y2) + eps)


def _meets_leg(segment: Segment, leg: Leg, box: Box) -> bool:
    (x1, y1), (x2, y2) = segment
    if max(x1, x2) < box[0] or min(x1, x2) > box[1] or max(y1, y2) < box[2] or min(y1, y2) > box[3]:
        return False
    return segments_touch(leg, segment)


def _touched_steps(leg: Leg, box: Box) -> Iterator[Segment]:
    """Keys of the unit lattice segments that touch ``leg``."""

    min_x, max_x, min_y, max_y = box
    for x in range(math.ceil(min_x) - 1, math.floor(max_x) + 2):
        for y in range(math.ceil(min_y) - 1, math.floor(max_y) + 1):
            for dx, dy in UNIT_STEPS:
                segment = ((x, y), (x + dx, y + dy))
                if _meets_leg(segment, leg, box):
                    yield segment_key(segment)


def _is_unit_step(mirror: Mirror) -> bool:
    dx, dy = mirror.delta
    return max(abs(dx), abs(dy)) == 1


class ShotProbe:
    """One side's four beams, traced once and reused.

    ``hits_with(*extra)`` answers "would the shot land if these mirrors were
    added" and only re-traces the beams whose recorded legs the new mirrors
    touch. Extra mirrors are appended after the existing ones, exactly as
    :func:`can_laser_hit_base` would see them after the moves are played.

    For sweeps over many candidates call :meth:`touch_keys` once; after that a
    single unit mirror off every beam is answered with a set lookup.
    """

    def __init__(
        self,
        attacker_base: Optional[Base],
        attacker_color: Player,
        defender_base: Optional[Base],
        mirrors: Sequence[Mirror],
        grid_size: int,
        beams: Optional[List[_Beam]] = None,
    ) -> None:
        _require_bases(attacker_base, defender_base)
        self.attacker_base = attacker_base
        self.attacker_color = attacker_color
        self.defender_base = defender_base
        self.mirrors = list(mirrors)
        self.grid_size = grid_size
        if beams is None:
            beams = [
                _fire(attacker_base, attacker_color, defender_base, self.mirrors, grid_size, d) for d in DIRECTIONS
            ]
        self.beams = beams
        self._boxes = [[_leg_box(leg) for leg in beam.legs] for beam in beams]
        self._touch_keys: Optional[Set[Segment]] = None
        self.retraces = 0

    @property
    def hit(self) -> bool:
        return any(beam.hit for beam in self.beams)

    def _beam_touched(self, index: int, mirror: Mirror) -> bool:
        segment = mirror.points
        return any(_meets_leg(segment, leg, box) for leg, box in zip(self.beams[index].legs, self._boxes[index]))

    def _retrace(self, mirrors: List[Mirror], direction: Vector) -> _Beam:
        self.retraces += 1
        return _fire(self.attacker_base, self.attacker_color, self.defender_base, mirrors, self.grid_size, direction)

    def touch_keys(self) -> Set[Segment]:
        """Keys of every unit lattice segment lying on a recorded beam."""

        if self._touch_keys is None:
            keys: Set[Segment] = set()
            for beam, boxes in zip(self.beams, self._boxes):
                for leg, box in zip(beam.legs, boxes):
                    keys.update(_touched_steps(leg, box))
            self._touch_keys = keys
        return self._touch_keys

    def touches(self, mirror: Mirror) -> bool:
        """True when ``mirror`` lies on any recorded beam, so the outcome may change."""

        if self._touch_keys is not None and _is_unit_step(mirror):
            return mirror.key() in self._touch_keys
        return any(self._beam_touched(i, mirror) for i in range(len(self.beams)))

    def hits_with(self, *extra: Mirror) -> bool:
        if not extra:
            return self.hit
        if self._touch_keys is not None and not any(self.touches(m) for m in extra):
            return self.hit
        mirrors = None
        for index, direction in enumerate(DIRECTIONS):
            if not any(self._beam_touched(index, m) for m in extra):
                if self.beams[index].hit:
                    return True
                continue
            if mirrors is None:
                mirrors = self.mirrors + list(extra)
            if self._retrace(mirrors, direction).hit:
                return True
        return False

    def extended(self, *extra: Mirror) -> "ShotProbe":
        """A probe for the position with ``extra`` appended; untouched beams are reused."""

        mirrors = self.mirrors + list(extra)
        beams = []
        for index, direction in enumerate(DIRECTIONS):
            beam = self.beams[index]
            if any(self._beam_touched(index, m) for m in extra):
                beam = self._retrace(mirrors, direction)
            beams.append(beam)
        return ShotProbe(
            self.attacker_base,
            self.attacker_color,
            self.defender_base,
            mirrors,
            self.grid_size,
            beams=beams,
        )
