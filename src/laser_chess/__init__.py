"""Laser mirror game package."""

from .types import Base, GameState, Mirror, OpenSide, Phase, Player
from .engine import (
    DEFAULT_GRID_SIZE,
    apply_move,
    generate_candidates,
    is_terminal,
    legal_moves,
    new_game,
    pass_turn,
    place_base,
    undo_last_move,
    winner,
)
from .rules import PlacementRule, is_placement_legal, validate_placement
from .shield import Shield, build_base_shield
from .laser import can_laser_hit_base, find_laser_hit_path, find_winning_path
from .agents import Agent, HeuristicAgent, RandomAgent, SearchAgent, SearchStats, choose_move
from .opening import choose_base_position, pick_open_side
from .search_config import SearchConfig, preset_search_config

__all__ = [
    "Agent",
    "Base",
    "DEFAULT_GRID_SIZE",
    "GameState",
    "HeuristicAgent",
    "Mirror",
    "OpenSide",
    "Phase",
    "PlacementRule",
    "Player",
    "RandomAgent",
    "SearchAgent",
    "SearchConfig",
    "SearchStats",
    "Shield",
    "apply_move",
    "build_base_shield",
    "can_laser_hit_base",
    "choose_base_position",
    "choose_move",
    "find_laser_hit_path",
    "find_winning_path",
    "generate_candidates",
    "is_placement_legal",
    "is_terminal",
    "legal_moves",
    "new_game",
    "pass_turn",
    "pick_open_side",
    "place_base",
    "preset_search_config",
    "undo_last_move",
    "validate_placement",
    "winner",
]
