"""CLI runner for the laser mirror game.

Usage examples:
- Single game: ``python -m laser_chess.runner --mode game --red search --blue heuristic --grid-size 12 --seed 42``
- Match (best of 5): ``python -m laser_chess.runner --mode match --red search --blue random --preset fast``
"""

from __future__ import annotations

import argparse
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .agents import HeuristicAgent, RandomAgent, SearchAgent, SearchStats
from .game_controller import GameController
from .geometry import DEFAULT_GRID_SIZE
from .i18n import available_langs
from .search_config import SearchConfig, preset_search_config
from .types import Phase, Player

logger = logging.getLogger(__name__)

AGENT_NAMES = ["random", "heuristic", "search"]
MATCH_GAMES = 5


@dataclass
class GameSummary:
    winner: Optional[Player]
    turns: int
    passes: int
    move_times: Dict[Player, List[float]] = field(default_factory=dict)
    search_stats: Dict[Player, List[SearchStats]] = field(default_factory=dict)


def _build_agent(name: str, seed: Optional[int], config: Optional[SearchConfig] = None):
    if name == "random":
        return RandomAgent(seed=seed)
    if name == "heuristic":
        return HeuristicAgent(seed=seed)
    if name == "search":
        return SearchAgent(config=config, seed=seed)
    raise ValueError(f"Unknown agent '{name}'")


def play_game(
    red_agent,
    blue_agent,
    grid_size: int,
    first: Player = Player.RED,
    budget_ms: Optional[int] = None,
    max_turns: int = 200,
    emit_moves: bool = False,
    lang: str = "en",
) -> GameSummary:
    """Play one AI-vs-AI game; ``winner`` is ``None`` when ``max_turns`` runs out."""

    controller = GameController(red_agent, blue_agent, grid_size=grid_size, first=first, lang=lang)
    move_times: Dict[Player, List[float]] = {Player.RED: [], Player.BLUE: []}
    search_stats: Dict[Player, List[SearchStats]] = {Player.RED: [], Player.BLUE: []}

    while controller.state.phase is Phase.PLACING_BASES:
        if controller.step_ai_base() is None:
            raise ValueError(f"no room for the {controller.state.turn.name} base on a {grid_size} grid")
        if emit_moves:
            print(controller.last_message)

    turns = 0
    passes = 0
    while not controller.is_over() and turns < max_turns:
        player = controller.state.turn
        agent = controller.red_agent if player is Player.RED else controller.blue_agent
        seen = len(controller.messages)
        start = time.monotonic()
        move = controller.step_ai(time_budget_ms=budget_ms)
        move_times[player].append((time.monotonic() - start) * 1000.0)
        stats = getattr(agent, "last_stats", None)
        if stats is not None:
            search_stats[player].append(stats)
        turns += 1
        if move is None:
            passes += 1
        if emit_moves:
            for message in controller.messages[seen:]:
                print(f"Turn {turns}: {message}")

    victor = controller.winner
    if victor is not None:
        logger.info("%s wins after %d turns", victor.name, turns)
    else:
        logger.info("no winner after %d turns", turns)
    return GameSummary(
        winner=victor,
        turns=turns,
        passes=passes,
        move_times=move_times,
        search_stats=search_stats,
    )


def play_match(
    red_agent,
    blue_agent,
    grid_size: int,
    budget_ms: Optional[int] = None,
    max_turns: int = 200,
    verbose: bool = False,
    games: int = MATCH_GAMES,
    lang: str = "en",
) -> Dict[Optional[Player], int]:
    """Alternate the first player over ``games`` games and tally results (``None`` = draw)."""

    tally: Dict[Optional[Player], int] = {Player.RED: 0, Player.BLUE: 0, None: 0}
    first = Player.RED
    for game_index in range(1, games + 1):
        if verbose:
            print(f"=== Game {game_index} (first: {first.name}) ===")
        summary = play_game(
            red_agent,
            blue_agent,
            grid_size,
            first=first,
            budget_ms=budget_ms,
            max_turns=max_turns,
            emit_moves=verbose,
            lang=lang,
        )
        tally[summary.winner] += 1
        result = summary.winner.name if summary.winner is not None else "DRAW"
        print(f"Result: {result} (score {tally[Player.RED]}-{tally[Player.BLUE]}, draws {tally[None]})")
        first = first.opponent()

    if tally[Player.RED] == tally[Player.BLUE]:
        print("Match drawn")
    else:
        overall = Player.RED if tally[Player.RED] > tally[Player.BLUE] else Player.BLUE
        print(f"Match winner: {overall.name}")
    return tally


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Laser mirror game runner")
    parser.add_argument("--mode", choices=["game", "match"], required=True)
    parser.add_argument("--red", choices=AGENT_NAMES, default="search")
    parser.add_argument("--blue", choices=AGENT_NAMES, default="heuristic")
    parser.add_argument("--grid-size", type=int, default=DEFAULT_GRID_SIZE)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--budget-ms", type=int, default=None, help="Search deadline per move")
    parser.add_argument("--preset", choices=["fast", "default", "slow"], default="default")
    parser.add_argument("--max-turns", type=int, default=200)
    parser.add_argument("--lang", choices=available_langs(), default="en")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    config = preset_search_config(args.preset)
    red_agent = _build_agent(args.red, seed=args.seed, config=config)
    blue_agent = _build_agent(args.blue, seed=None if args.seed is None else args.seed + 1, config=config)

    try:
        if args.mode == "game":
            summary = play_game(
                red_agent,
                blue_agent,
                args.grid_size,
                budget_ms=args.budget_ms,
                max_turns=args.max_turns,
                emit_moves=True,
                lang=args.lang,
            )
            result = summary.winner.name if summary.winner is not None else "none"
            print(f"Game winner: {result} after {summary.turns} turns")
        else:
            play_match(
                red_agent,
                blue_agent,
                args.grid_size,
                budget_ms=args.budget_ms,
                max_turns=args.max_turns,
                verbose=args.verbose,
                lang=args.lang,
            )
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
