"""Heuristic scoring of mirror moves and positions."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence, Tuple

from .geometry import cell_edges, distance, segment_key
from .laser import ShotProbe
from .types import Base, Mirror, Player

WIN_SCORE = 100000.0
DEFENSE_BONUS = 1000.0
ATTACK_BONUS = 1500.0
EXPOSURE_PENALTY = 1200.0
THREAT_PENALTY = 1500.0
CENTER_WEIGHT = 2.0
OWN_BASE_RADIUS = 5.0
OWN_BASE_BONUS = 100.0
OPPONENT_BASE_RADIUS = 5.0
OPPONENT_BASE_BONUS = 50.0
DIAGONAL_BONUS = 20.0
CONNECTION_BONUS = 10.0
DEFAULT_JITTER = 5.0
CLUSTER_RADIUS = 1.5
CLUSTER_PENALTY = 15.0

REASON_DEFENSE = "defense"
REASON_ATTACK = "attack"
REASON_EXPOSURE = "exposure"
REASON_CENTER = "center"
REASON_NEAR_OWN_BASE = "near_own_base"
REASON_PRESSURE = "pressure"
REASON_DIAGONAL = "diagonal"
REASON_CONNECTION = "connection"


@dataclass
class ShotProbes:
    """Both shots of a position from the mover's point of view."""

    attack: ShotProbe
    defense: ShotProbe

    @classmethod
    def build(
        cls, player: Player, bases: Mapping[Player, Base], mirrors: Sequence[Mirror], grid_size: int
    ) -> "ShotProbes":
        own = bases.get(player)
        other = bases.get(player.opponent())
        return cls(
            attack=ShotProbe(own, player, other, mirrors, grid_size),
            defense=ShotProbe(other, player.opponent(), own, mirrors, grid_size),
        )

    def extended(self, *extra: Mirror) -> "ShotProbes":
        return ShotProbes(attack=self.attack.extended(*extra), defense=self.defense.extended(*extra))

    def swapped(self) -> "ShotProbes":
        """The same shots seen from the other side."""

        return ShotProbes(attack=self.defense, defense=self.attack)


@dataclass(frozen=True)
class MoveEvaluation:
    move: Mirror
    score: float
    reasons: Tuple[str, ...] = ()


def _center(grid_size: int) -> Tuple[float, float]:
    return (grid_size / 2.0, grid_size / 2.0)


def center_score(mirror: Mirror, grid_size: int) -> float:
    return (grid_size - distance(mirror.midpoint, _center(grid_size))) * CENTER_WEIGHT


def prerank_score(candidate: Mirror, bases: Mapping[Player, Base], player: Player, grid_size: int) -> float:
    """Cheap ordering key: close to the centre and to the opponent's base."""

    score = center_score(candidate, grid_size)
    other = bases.get(player.opponent())
    if other is not None:
        score += grid_size - distance(candidate.midpoint, other.center)
    return score


def evaluate_move_detailed(
    candidate: Mirror,
    bases: Mapping[Player, Base],
    mirrors: Sequence[Mirror],
    player: Player,
    grid_size: int,
    rng: Optional[random.Random] = None,
    probes: Optional[ShotProbes] = None,
    jitter: float = DEFAULT_JITTER,
) -> MoveEvaluation:
    """Score ``candidate`` for ``player`` and list the signals that contributed.

    Pass ``probes`` built for ``mirrors`` to reuse traces across many
    candidates. Without ``rng`` the score is deterministic.
    """

    if probes is None:
        probes = ShotProbes.build(player, bases, mirrors, grid_size)
    own = bases[player]
    other = bases[player.opponent()]
    score = 0.0
    reasons = []

    threatened = probes.defense.hit
    threatened_after = probes.defense.hits_with(candidate)
    if threatened and not threatened_after:
        score += DEFENSE_BONUS
        reasons.append(REASON_DEFENSE)
    elif not threatened and threatened_after:
        score -= EXPOSURE_PENALTY
        reasons.append(REASON_EXPOSURE)

    if not probes.attack.hit and probes.attack.hits_with(candidate):
        score += ATTACK_BONUS
        reasons.append(REASON_ATTACK)

    score += center_score(candidate, grid_size)
    reasons.append(REASON_CENTER)

    midpoint = candidate.midpoint
    if distance(midpoint, own.center) < OWN_BASE_RADIUS:
        score += OWN_BASE_BONUS
        reasons.append(REASON_NEAR_OWN_BASE)
    if distance(midpoint, other.center) < OPPONENT_BASE_RADIUS:
        score += OPPONENT_BASE_BONUS
        reasons.append(REASON_PRESSURE)
    if candidate.is_diagonal:
        score += DIAGONAL_BONUS
        reasons.append(REASON_DIAGONAL)

    connections = sum(1 for m in mirrors if m.owner is player and candidate.shares_endpoint(m))
    if connections:
        score += connections * CONNECTION_BONUS
        reasons.append(REASON_CONNECTION)

    if rng is not None and jitter > 0:
        score += rng.random() * jitter
    return MoveEvaluation(move=candidate, score=score, reasons=tuple(reasons))


def evaluate_move(
    candidate: Mirror,
    bases: Mapping[Player, Base],
    mirrors: Sequence[Mirror],
    player: Player,
    grid_size: int,
    rng: Optional[random.Random] = None,
    probes: Optional[ShotProbes] = None,
    jitter: float = DEFAULT_JITTER,
) -> float:
    return evaluate_move_detailed(candidate, bases, mirrors, player, grid_size, rng, probes, jitter).score


def mirror_weight(mirror: Mirror, player: Player, bases: Mapping[Player, Base], grid_size: int) -> float:
    """Contribution of one mirror to :func:`evaluate_position` for ``player``.

    Mirrors count for their owner by closeness to the centre. The player's own
    mirrors crowded next to its base, shield excluded, cost a penalty.
    """

    weight = center_score(mirror, grid_size)
    if mirror.owner is not player:
        return -weight
    own = bases.get(player)
    if own is not None and distance(mirror.midpoint, own.center) <= CLUSTER_RADIUS:
        if mirror.key() not in {segment_key(edge) for edge in cell_edges(own.cell).values()}:
            weight -= CLUSTER_PENALTY
    return weight


def material_score(mirrors: Iterable[Mirror], player: Player, bases: Mapping[Player, Base], grid_size: int) -> float:
    return sum(mirror_weight(m, player, bases, grid_size) for m in mirrors)


def evaluate_position(
    player: Player,
    bases: Mapping[Player, Base],
    mirrors: Sequence[Mirror],
    grid_size: int,
    probes: Optional[ShotProbes] = None,
    material: Optional[float] = None,
) -> float:
    """Static value of a position for ``player``, the side about to move.

    ``player`` fires first, so its own landing shot wins outright. An
    opposing shot only lands after ``player`` has had a move to block it and
    costs :data:`THREAT_PENALTY` instead. ``material`` may be passed when the
    caller already knows ``material_score`` for ``mirrors``.
    """

    if probes is None:
        probes = ShotProbes.build(player, bases, mirrors, grid_size)
    if probes.attack.hit:
        return WIN_SCORE
    if material is None:
        material = material_score(mirrors, player, bases, grid_size)
    if probes.defense.hit:
        return material - THREAT_PENALTY
    return material
