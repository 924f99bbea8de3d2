"""Game controller utilities for UI-driven or scripted play.

This module keeps UI concerns separate from core game logic so the
underlying sequencing and validation can be tested without driving a GUI.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from . import engine
from .agents import HeuristicAgent
from .i18n import t
from .laser import find_winning_path
from .rules import PlacementRule, validate_placement
from .types import GameState, Mirror, OpenSide, Phase, Player, Point, Vector

logger = logging.getLogger(__name__)


class GameController:
    """Manage a single game: setup, human and AI turns, passes and undo.

    An agent of ``None`` means that side is played by a human.
    """

    def __init__(
        self,
        red_agent=None,
        blue_agent=None,
        grid_size: int = engine.DEFAULT_GRID_SIZE,
        first: Player = Player.RED,
        lang: str = "en",
    ) -> None:
        self.red_agent = red_agent
        self.blue_agent = blue_agent
        self.lang = lang
        self._grid_size = grid_size
        self._initial_turn = first
        self.state: GameState
        self.messages: List[str]
        self.new_game()

    def new_game(self, grid_size: Optional[int] = None, first: Optional[Player] = None) -> None:
        """Start over, optionally on a different board size."""

        self._grid_size = self._grid_size if grid_size is None else grid_size
        self._initial_turn = self._initial_turn if first is None else first
        self.state = engine.new_game(self._grid_size, first=self._initial_turn)
        self.messages = []
        self._say("new_game_started")

    def _player_name(self, player: Player) -> str:
        return t(f"player_{player.name.lower()}", self.lang)

    def _say(self, key: str, **kwargs) -> str:
        message = t(key, self.lang).format(**kwargs)
        self.messages.append(message)
        return message

    @property
    def last_message(self) -> Optional[str]:
        return self.messages[-1] if self.messages else None

    @property
    def winner(self) -> Optional[Player]:
        return engine.winner(self.state)

    def is_over(self) -> bool:
        return engine.is_terminal(self.state)

    def status(self) -> str:
        """Whose turn it is, or who has won."""

        victor = engine.winner(self.state)
        if victor is not None:
            return t("winner", self.lang).format(player=self._player_name(victor))
        return t("turn_label", self.lang).format(player=self._player_name(self.state.turn))

    def move_hints(self, limit: int = 3) -> List[str]:
        """The greedy agent's best mirrors for the side to move, with reasons."""

        if self.state.phase is not Phase.PLACING_MIRRORS:
            return []
        separator = "，" if self.lang == "zh" else ", "
        hints = []
        for evaluation in HeuristicAgent(jitter=0.0).rank_moves(self.state)[:limit]:
            move = evaluation.move
            reasons = separator.join(t(f"reason_{reason}", self.lang) for reason in evaluation.reasons)
            hints.append(
                t("move_hint", self.lang).format(
                    x1=move.x1, y1=move.y1, x2=move.x2, y2=move.y2, score=evaluation.score, reasons=reasons
                )
            )
        return hints

    def _current_agent(self):
        return self.red_agent if self.state.turn is Player.RED else self.blue_agent

    def _after_turn(self) -> None:
        victor = engine.winner(self.state)
        if victor is not None:
            self._say("winner", player=self._player_name(victor))

    def place_base(self, point: Point, open_side: Optional[OpenSide] = None) -> bool:
        player = self.state.turn
        placed = engine.place_base(self.state, point, open_side)
        if placed is None:
            self._say("base_rejected")
            return False
        self.state = placed
        base = placed.bases[player]
        self._say(
            "base_placed",
            player=self._player_name(player),
            x=base.x,
            y=base.y,
            side=t(f"side_{base.open_side.value}", self.lang),
        )
        self._after_turn()
        return True

    def step_ai_base(self) -> Optional[Tuple[Point, OpenSide]]:
        agent = self._current_agent()
        if agent is None:
            raise ValueError("No agent configured for current player")
        choice = agent.choose_base(self.state)
        if choice is None or not self.place_base(*choice):
            return None
        return choice

    def legal_moves(self) -> List[Mirror]:
        return engine.legal_moves(self.state)

    def check_mirror(self, start: Point, end: Point) -> Optional[PlacementRule]:
        """Reason a mirror from ``start`` to ``end`` would be refused, if any."""

        candidate = Mirror.between(start, end, self.state.turn)
        return validate_placement(candidate, self.state.bases, self.state.mirrors, grid_size=self.state.grid_size)

    def place_mirror(self, start: Point, end: Point) -> Optional[PlacementRule]:
        """Play a human mirror; returns the broken rule instead of raising."""

        if self.state.phase is not Phase.PLACING_MIRRORS:
            raise ValueError("mirrors can only be placed once both bases are down")
        reason = self.check_mirror(start, end)
        if reason is not None:
            self._say("mirror_rejected", reason=t(f"rule_{reason.value}", self.lang))
            return reason
        self._apply(Mirror.between(start, end, self.state.turn))
        return None

    def _apply(self, mirror: Mirror) -> None:
        self.state = engine.apply_move(self.state, mirror)
        self._say(
            "mirror_placed",
            player=self._player_name(mirror.owner),
            x1=mirror.x1,
            y1=mirror.y1,
            x2=mirror.x2,
            y2=mirror.y2,
        )
        self._after_turn()

    def pass_turn(self) -> None:
        """Pass for the side to move; only allowed when it has no legal mirror."""

        if self.legal_moves():
            raise ValueError("cannot pass while a legal mirror exists")
        player = self.state.turn
        self.state = engine.pass_turn(self.state)
        self._say("pass", player=self._player_name(player))
        self._after_turn()

    def compute_ai_move(self, time_budget_ms: Optional[int] = None) -> Optional[Mirror]:
        agent = self._current_agent()
        if agent is None:
            raise ValueError("No agent configured for current player")
        move = agent.choose_move(self.state, time_budget_ms=time_budget_ms)
        if move is not None and self.check_mirror(move.start, move.end) is not None:
            logger.warning("%s proposed an illegal mirror %s", type(agent).__name__, move.points)
            move = HeuristicAgent().choose_move(self.state, time_budget_ms=time_budget_ms)
        return move

    def step_ai(self, time_budget_ms: Optional[int] = None) -> Optional[Mirror]:
        """Let the current agent move; passes when it finds nothing to play."""

        move = self.compute_ai_move(time_budget_ms=time_budget_ms)
        if move is None:
            self.pass_turn()
            return None
        self._apply(move)
        return move

    def undo(self) -> bool:
        if not self.state.history:
            self._say("nothing_to_undo")
            return False
        self.state = engine.undo_last_move(self.state)
        self._say("undo_done")
        return True

    def winning_path(self) -> Optional[List[Vector]]:
        victor = engine.winner(self.state)
        if victor is None:
            return None
        return find_winning_path(
            self.state.bases[victor],
            victor,
            self.state.bases[victor.opponent()],
            self.state.mirrors,
            self.state.grid_size,
        )
