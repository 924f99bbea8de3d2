"""Core data structures for the laser mirror game.

Rule reminders:
- The board is a square lattice of ``grid_size`` x ``grid_size`` cells; lattice
  points run from ``0`` to ``grid_size`` on both axes.
- ``x`` grows to the right and ``y`` grows downward, so the *top* edge of cell
  ``(x, y)`` is the segment ``(x, y)-(x + 1, y)``.
- Mirrors join two lattice points one step apart (a cell edge or a cell diagonal).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple


Point = Tuple[int, int]
Vector = Tuple[float, float]
Segment = Tuple[Point, Point]


class Player(Enum):
    """Sides in the game."""

    RED = auto()
    BLUE = auto()

    def opponent(self) -> "Player":
        """Return the opposing side."""

        return Player.RED if self is Player.BLUE else Player.BLUE


class OpenSide(str, Enum):
    """Border edge of a base cell left without a shield segment."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class Phase(Enum):
    PLACING_BASES = auto()
    PLACING_MIRRORS = auto()
    OVER = auto()


@dataclass(frozen=True, eq=False)
class Mirror:
    """An owned reflective segment between two lattice points.

    Identity is endpoint-unordered: ``Mirror(0, 0, 1, 1, RED)`` equals
    ``Mirror(1, 1, 0, 0, RED)``.
    """

    x1: int
    y1: int
    x2: int
    y2: int
    owner: Player

    @classmethod
    def between(cls, start: Point, end: Point, owner: Player) -> "Mirror":
        return cls(start[0], start[1], end[0], end[1], owner)

    @property
    def start(self) -> Point:
        return (self.x1, self.y1)

    @property
    def end(self) -> Point:
        return (self.x2, self.y2)

    @property
    def points(self) -> Segment:
        return (self.start, self.end)

    @property
    def delta(self) -> Point:
        return (self.x2 - self.x1, self.y2 - self.y1)

    @property
    def is_diagonal(self) -> bool:
        return self.x1 != self.x2 and self.y1 != self.y2

    @property
    def midpoint(self) -> Vector:
        return ((self.x1 + self.x2) / 2.0, (self.y1 + self.y2) / 2.0)

    def key(self) -> Segment:
        """Endpoints in sorted order, independent of how the mirror was drawn."""

        a, b = self.start, self.end
        return (a, b) if a <= b else (b, a)

    def reversed(self) -> "Mirror":
        return Mirror(self.x2, self.y2, self.x1, self.y1, self.owner)

    def with_owner(self, owner: Player) -> "Mirror":
        return Mirror(self.x1, self.y1, self.x2, self.y2, owner)

    def shares_endpoint(self, other: "Mirror") -> bool:
        return self.start in other.points or self.end in other.points

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mirror):
            return NotImplemented
        return self.owner is other.owner and self.key() == other.key()

    def __hash__(self) -> int:
        return hash((self.key(), self.owner))


@dataclass(frozen=True)
class Base:
    """A side's home cell, identified by its top-left lattice point."""

    x: int
    y: int
    owner: Player
    open_side: OpenSide

    @property
    def cell(self) -> Point:
        return (self.x, self.y)

    @property
    def center(self) -> Vector:
        return (self.x + 0.5, self.y + 0.5)


@dataclass
class GameState:
    """Complete game state.

    ``mirrors`` keeps insertion order: shield segments first, then played
    mirrors in play order. ``history`` is the undo stack of played turns, with
    ``None`` marking a forced pass.
    """

    grid_size: int
    bases: Dict[Player, Base]
    mirrors: List[Mirror]
    turn: Player
    phase: Phase
    first: Player = Player.RED
    history: List[Optional[Mirror]] = field(default_factory=list)
    winner: Optional[Player] = None

    def clone(self) -> "GameState":
        """Return a copy whose containers can be changed independently."""

        return GameState(
            grid_size=self.grid_size,
            bases=dict(self.bases),
            mirrors=list(self.mirrors),
            turn=self.turn,
            phase=self.phase,
            first=self.first,
            history=list(self.history),
            winner=self.winner,
        )

    def base_of(self, player: Player) -> Optional[Base]:
        return self.bases.get(player)
