"""Game engine for the laser mirror game.

Rules:
- Board is ``grid_size`` x ``grid_size`` cells; lattice points run 0..grid_size.
- Each side places one base cell; it gets a three-sided shield of its own
  mirrors and keeps one edge open for good.
- Sides then alternate placing one mirror per turn on a cell edge or diagonal.
- At the start of its turn a side fires its laser; if the beam reaches the
  other base, that side wins. A side with no legal mirror passes.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence, Tuple

from .geometry import (
    DEFAULT_GRID_SIZE,
    MAX_GRID_SIZE,
    MIN_GRID_SIZE,
    UNIT_STEPS,
    check_grid_size,
    chebyshev,
)
from .laser import can_laser_hit_base
from .rules import PlacementIndex, validate_placement
from .shield import build_base_shield
from .types import Base, GameState, Mirror, OpenSide, Phase, Player, Point

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_GRID_SIZE",
    "MAX_GRID_SIZE",
    "MIN_GRID_SIZE",
    "NEIGHBOR_OFFSETS",
    "apply_move",
    "check_grid_size",
    "generate_candidates",
    "is_base_position_allowed",
    "is_terminal",
    "legal_moves",
    "new_game",
    "pass_turn",
    "place_base",
    "require_bases",
    "undo_last_move",
    "winner",
]

NEIGHBOR_OFFSETS = UNIT_STEPS


def require_bases(bases: Mapping[Player, Base]) -> Tuple[Base, Base]:
    """Return ``(red, blue)`` bases or raise when either is missing."""

    red = bases.get(Player.RED)
    blue = bases.get(Player.BLUE)
    if red is None or blue is None:
        raise ValueError("both bases must be placed first")
    return red, blue


def new_game(grid_size: int = DEFAULT_GRID_SIZE, first: Player = Player.RED) -> GameState:
    """Create an empty board waiting for ``first`` to place a base."""

    check_grid_size(grid_size)
    return GameState(
        grid_size=grid_size,
        bases={},
        mirrors=[],
        turn=first,
        phase=Phase.PLACING_BASES,
        first=first,
    )


def is_base_position_allowed(point: Point, player: Player, bases: Mapping[Player, Base], grid_size: int) -> bool:
    """A base must be on the board and not touch another base, diagonals included."""

    x, y = point
    if not (0 <= x < grid_size and 0 <= y < grid_size):
        return False
    for owner, base in bases.items():
        if owner is player:
            continue
        if chebyshev(point, base.cell) <= 1:
            return False
    return True


def place_base(state: GameState, point: Point, open_side: Optional[OpenSide] = None) -> Optional[GameState]:
    """Place the base of the side to move, with its shield.

    Returns ``None`` when the cell is not allowed or no shield fits.
    """

    if state.phase is not Phase.PLACING_BASES:
        raise ValueError("bases can only be placed during setup")
    player = state.turn
    if player in state.bases:
        raise ValueError(f"{player.name} already has a base")
    if not is_base_position_allowed(point, player, state.bases, state.grid_size):
        return None
    shield = build_base_shield(point, player, state.mirrors, open_side)
    if shield is None:
        return None

    next_state = state.clone()
    next_state.bases[player] = Base(point[0], point[1], player, shield.open_side)
    next_state.mirrors.extend(shield.segments)
    if player.opponent() in next_state.bases:
        next_state.phase = Phase.PLACING_MIRRORS
        next_state.turn = next_state.first
        _fire_at_turn_start(next_state)
    else:
        next_state.turn = player.opponent()
    logger.debug("%s base at %s, open %s", player.name, point, shield.open_side.value)
    return next_state


def generate_candidates(
    player: Player,
    bases: Mapping[Player, Base],
    mirrors: Sequence[Mirror],
    grid_size: int,
    check_enclosure: bool = True,
    index: Optional[PlacementIndex] = None,
) -> List[Mirror]:
    """Every legal mirror for ``player``, scanning x then y.

    ``check_enclosure=False`` skips the enclosure rule; such lists must be
    re-checked before a move is committed.
    """

    if index is None:
        index = PlacementIndex(bases, mirrors)
    candidates: List[Mirror] = []
    for x in range(grid_size + 1):
        for y in range(grid_size + 1):
            for dx, dy in NEIGHBOR_OFFSETS:
                nx, ny = x + dx, y + dy
                if not (0 <= nx <= grid_size and 0 <= ny <= grid_size):
                    continue
                candidate = Mirror(x, y, nx, ny, player)
                if index.allows(candidate, check_enclosure):
                    candidates.append(candidate)
    return candidates


def legal_moves(state: GameState) -> List[Mirror]:
    if state.phase is not Phase.PLACING_MIRRORS:
        return []
    return generate_candidates(state.turn, state.bases, state.mirrors, state.grid_size)


def _fire_at_turn_start(state: GameState) -> None:
    shooter = state.turn
    if can_laser_hit_base(
        state.bases[shooter], shooter, state.bases[shooter.opponent()], state.mirrors, state.grid_size
    ):
        state.winner = shooter
        state.phase = Phase.OVER
        logger.info("%s laser reaches the %s base", shooter.name, shooter.opponent().name)


def _require_mirror_phase(state: GameState) -> None:
    if state.phase is not Phase.PLACING_MIRRORS:
        raise ValueError(f"no moves allowed in phase {state.phase.name}")


def apply_move(state: GameState, mirror: Mirror) -> GameState:
    """Play ``mirror`` for the side to move and return the resulting state."""

    _require_mirror_phase(state)
    if mirror.owner is not state.turn:
        raise ValueError(f"it is {state.turn.name}'s turn, not {mirror.owner.name}'s")
    reason = validate_placement(mirror, state.bases, state.mirrors, grid_size=state.grid_size)
    if reason is not None:
        raise ValueError(f"illegal mirror {mirror.points}: {reason.value}")

    next_state = state.clone()
    next_state.mirrors.append(mirror)
    next_state.history.append(mirror)
    next_state.turn = state.turn.opponent()
    _fire_at_turn_start(next_state)
    return next_state


def pass_turn(state: GameState) -> GameState:
    """Forfeit the turn; used when the side to move has no legal mirror."""

    _require_mirror_phase(state)
    next_state = state.clone()
    next_state.history.append(None)
    next_state.turn = state.turn.opponent()
    logger.info("%s passes", state.turn.name)
    _fire_at_turn_start(next_state)
    return next_state


def undo_last_move(state: GameState) -> GameState:
    """Take back the last mirror or pass, reopening a finished game."""

    if not state.history:
        raise ValueError("nothing to undo")
    next_state = state.clone()
    last = next_state.history.pop()
    if last is not None:
        next_state.mirrors.pop()
    next_state.turn = state.turn.opponent()
    next_state.winner = None
    next_state.phase = Phase.PLACING_MIRRORS
    return next_state


def winner(state: GameState) -> Optional[Player]:
    """Return the winner if the game is terminal."""

    return state.winner


def is_terminal(state: GameState) -> bool:
    return state.phase is Phase.OVER
