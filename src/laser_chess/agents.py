"""Agents for playing the laser mirror game."""

from __future__ import annotations

import heapq
import logging
import random
import time
from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence, Tuple

from . import engine
from .evaluation import (
    WIN_SCORE,
    MoveEvaluation,
    ShotProbes,
    evaluate_move_detailed,
    evaluate_position,
    material_score,
    mirror_weight,
    prerank_score,
)
from .geometry import check_grid_size
from .laser import ShotProbe
from .opening import choose_base_position, pick_open_side
from .rules import PlacementIndex
from .search_config import SearchConfig
from .types import Base, GameState, Mirror, OpenSide, Phase, Player, Point

logger = logging.getLogger(__name__)


@dataclass
class SearchStats:
    """Aggregated statistics from a single search."""

    candidates: int = 0
    shortlisted: int = 0
    searched: int = 0
    branches: int = 0
    replies: int = 0
    retraces: int = 0
    truncated: bool = False
    outcome: str = ""
    elapsed_ms: float = 0.0


class Agent:
    """Base class for agents."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def choose_move(self, state: GameState, time_budget_ms: Optional[int] = None) -> Optional[Mirror]:  # noqa: D401
        """Return a mirror for the side to move, or ``None`` to pass."""

        raise NotImplementedError

    def choose_base(self, state: GameState) -> Optional[Tuple[Point, OpenSide]]:
        """Return a base cell and open side for the side to move."""

        player = state.turn
        point = choose_base_position(player, state.bases, state.grid_size, state.mirrors, rng=self._rng)
        if point is None:
            return None
        side = pick_open_side(point, player, state.bases, state.mirrors)
        if side is None:
            return None
        return point, side


class RandomAgent(Agent):
    """Agent that selects a random legal mirror with reproducible seeding."""

    def choose_move(self, state: GameState, time_budget_ms: Optional[int] = None) -> Optional[Mirror]:
        moves = engine.legal_moves(state)
        if not moves:
            return None
        return self._rng.choice(moves)


class HeuristicAgent(Agent):
    """Greedy agent: plays the single best-scoring mirror, no look-ahead."""

    def __init__(self, seed: Optional[int] = None, candidate_cap: int = 400, jitter: float = 5.0):
        super().__init__(seed)
        self.candidate_cap = candidate_cap
        self.jitter = jitter

    def rank_moves(self, state: GameState) -> List[MoveEvaluation]:
        """Every considered move with its score and reasons, best first."""

        player = state.turn
        moves = engine.legal_moves(state)
        if len(moves) > self.candidate_cap:
            moves = heapq.nlargest(
                self.candidate_cap, moves, key=lambda m: prerank_score(m, state.bases, player, state.grid_size)
            )
        probes = ShotProbes.build(player, state.bases, state.mirrors, state.grid_size)
        ranked = [
            evaluate_move_detailed(
                m, state.bases, state.mirrors, player, state.grid_size, self._rng, probes, self.jitter
            )
            for m in moves
        ]
        ranked.sort(key=lambda e: -e.score)
        return ranked

    def choose_move(self, state: GameState, time_budget_ms: Optional[int] = None) -> Optional[Mirror]:
        ranked = self.rank_moves(state)
        if not ranked:
            return None
        return ranked[0].move


class SearchAgent(Agent):
    """Two-ply search over pruned candidate lists.

    Order of business: a move that lands a shot, then a move that blocks the
    opponent's shot, then the best worst case over the opponent's strongest
    replies. ``config`` sets the pruning widths and the default deadline.
    """

    def __init__(self, config: Optional[SearchConfig] = None, seed: Optional[int] = None,
                 rng: Optional[random.Random] = None):
        super().__init__(seed)
        if rng is not None:
            self._rng = rng
        self.config = config or SearchConfig()
        self.last_stats: Optional[SearchStats] = None

    def choose_move(self, state: GameState, time_budget_ms: Optional[int] = None) -> Optional[Mirror]:
        if state.phase is not Phase.PLACING_MIRRORS:
            return None
        return self.search(state.turn, state.bases, state.mirrors, state.grid_size, time_budget_ms)

    def _finish(self, stats: SearchStats, start: float, outcome: str, move: Optional[Mirror]) -> Optional[Mirror]:
        stats.outcome = outcome
        stats.elapsed_ms = (time.monotonic() - start) * 1000.0
        self.last_stats = stats
        logger.debug(
            "search %s: move=%s candidates=%d shortlisted=%d searched=%d replies=%d truncated=%s %.1fms",
            outcome,
            move.points if move is not None else None,
            stats.candidates,
            stats.shortlisted,
            stats.searched,
            stats.replies,
            stats.truncated,
            stats.elapsed_ms,
        )
        return move

    def search(
        self,
        player: Player,
        bases: Mapping[Player, Base],
        mirrors: Sequence[Mirror],
        grid_size: int,
        time_budget_ms: Optional[int] = None,
    ) -> Optional[Mirror]:
        """Pick a mirror for ``player``; ``None`` means there is no legal move.

        The deadline only shortens the reply lists. Every shortlisted
        candidate is still answered by at least one reply.
        """

        check_grid_size(grid_size)
        engine.require_bases(bases)
        start = time.monotonic()
        budget = self.config.deadline_ms if time_budget_ms is None else time_budget_ms
        deadline = start + budget / 1000.0
        stats = SearchStats()
        opponent = player.opponent()
        mirrors = list(mirrors)
        jitter = self.config.jitter

        index = PlacementIndex(bases, mirrors)
        raw = engine.generate_candidates(player, bases, mirrors, grid_size, check_enclosure=False, index=index)
        stats.candidates = len(raw)
        if not raw:
            return self._finish(stats, start, "no_move", None)

        probes = ShotProbes.build(player, bases, mirrors, grid_size)
        # Key sets turn the many single-mirror checks below into lookups.
        probes.attack.touch_keys()
        probes.defense.touch_keys()
        threatened = probes.defense.hit

        # The opponent fires first after our move, so a shot only counts if
        # our own base is safe too.
        shooters = raw if probes.attack.hit else _on_beam(probes.attack, player, index, grid_size)
        for candidate in shooters:
            if not probes.attack.hits_with(candidate):
                continue
            if probes.defense.hits_with(candidate):
                continue
            if index.allows(candidate):
                stats.retraces = probes.attack.retraces + probes.defense.retraces
                return self._finish(stats, start, "win", candidate)

        pool = raw
        defending = False
        if threatened:
            blockers = [
                c
                for c in _on_beam(probes.defense, player, index, grid_size)
                if not probes.defense.hits_with(c) and index.allows(c)
            ]
            if blockers:
                pool = blockers
                defending = True
            else:
                logger.debug("no move blocks the %s shot", opponent.name)

        if len(pool) > self.config.candidate_cap:
            pool = heapq.nlargest(
                self.config.candidate_cap, pool, key=lambda m: prerank_score(m, bases, player, grid_size)
            )

        ranked = [
            evaluate_move_detailed(c, bases, mirrors, player, grid_size, self._rng, probes, jitter) for c in pool
        ]
        ranked.sort(key=lambda e: -e.score)
        top = [e.move for e in ranked if index.allows(e.move)][: self.config.top_k]
        stats.shortlisted = len(top)
        if not top:
            return self._finish(stats, start, "no_move", None)

        # Replies are ranked once here and re-ranked per branch while time allows.
        reply_pool = heapq.nlargest(
            self.config.reply_candidate_cap, raw, key=lambda m: prerank_score(m, bases, opponent, grid_size)
        )
        opponent_view = probes.swapped()
        scored = [
            evaluate_move_detailed(
                r.with_owner(opponent), bases, mirrors, opponent, grid_size, self._rng, opponent_view, jitter
            )
            for r in reply_pool
        ]
        scored.sort(key=lambda e: -e.score)
        replies = [e.move for e in scored]
        base_material = material_score(mirrors, player, bases, grid_size)

        best_move: Optional[Mirror] = None
        best_value = float("-inf")
        for candidate in top:
            value = self._branch_value(
                candidate, player, bases, mirrors, grid_size, index, probes, replies, base_material, deadline, stats
            )
            stats.searched += 1
            if best_move is None or value > best_value:
                best_move, best_value = candidate, value

        stats.retraces = probes.attack.retraces + probes.defense.retraces
        return self._finish(stats, start, "defense" if defending else "search", best_move)

    def _branch_value(
        self,
        candidate: Mirror,
        player: Player,
        bases: Mapping[Player, Base],
        mirrors: List[Mirror],
        grid_size: int,
        index: PlacementIndex,
        probes: ShotProbes,
        replies: Sequence[Mirror],
        base_material: float,
        deadline: float,
        stats: SearchStats,
    ) -> float:
        opponent = player.opponent()
        branch_mirrors = mirrors + [candidate]
        branch_index = index.copy()
        branch_index.add(candidate)
        branch_probes = probes.extended(candidate)
        stats.branches += 1
        # The opponent fires before replying.
        if branch_probes.defense.hit:
            return -WIN_SCORE
        material = base_material + mirror_weight(candidate, player, bases, grid_size)

        legal = [r for r in replies if branch_index.allows(r)]
        if not legal:
            # The opponent must pass and we move again.
            return evaluate_position(player, bases, branch_mirrors, grid_size, branch_probes, material)
        if time.monotonic() <= deadline:
            opponent_view = branch_probes.swapped()
            scored = [
                evaluate_move_detailed(
                    r, bases, branch_mirrors, opponent, grid_size, self._rng, opponent_view, self.config.jitter
                )
                for r in legal
            ]
            scored.sort(key=lambda e: -e.score)
            legal = [e.move for e in scored]
        else:
            stats.truncated = True

        worst: Optional[float] = None
        for reply in legal[: self.config.reply_cap]:
            if worst is not None and time.monotonic() > deadline:
                stats.truncated = True
                break
            stats.replies += 1
            value = evaluate_position(
                player,
                bases,
                branch_mirrors + [reply],
                grid_size,
                branch_probes.extended(reply),
                material + mirror_weight(reply, player, bases, grid_size),
            )
            if worst is None or value < worst:
                worst = value
        return worst


def _on_beam(probe: ShotProbe, player: Player, index: PlacementIndex, grid_size: int) -> List[Mirror]:
    """Candidates for ``player`` lying on one of ``probe``'s beams, in key order.

    Matches the members of ``generate_candidates(..., check_enclosure=False)``
    that touch the beams; no other candidate can change the shot.
    """

    moves = (Mirror(a[0], a[1], b[0], b[1], player) for a, b in sorted(probe.touch_keys()))
    return [m for m in moves if index.rejection(m, check_enclosure=False, grid_size=grid_size) is None]


def choose_move(
    side: Player,
    bases: Mapping[Player, Base],
    mirrors: Sequence[Mirror],
    grid_size: int,
    time_budget_ms: Optional[int] = None,
    config: Optional[SearchConfig] = None,
    rng: Optional[random.Random] = None,
) -> Optional[Mirror]:
    """Pick a mirror for ``side`` with :class:`SearchAgent`; ``None`` means pass."""

    agent = SearchAgent(config=config, rng=rng)
    return agent.search(side, bases, mirrors, grid_size, time_budget_ms)
