import pytest

from laser_chess import engine
from laser_chess.rules import validate_placement
from laser_chess.types import Base, GameState, Mirror, OpenSide, Phase, Player


def build_state():
    state = engine.new_game(8)
    state = engine.place_base(state, (1, 1), OpenSide.RIGHT)
    state = engine.place_base(state, (6, 6), OpenSide.LEFT)
    return state


def crowded_state():
    """3x3 board where no lattice step is left for either side."""

    bases = {
        Player.RED: Base(0, 0, Player.RED, OpenSide.TOP),
        Player.BLUE: Base(2, 2, Player.BLUE, OpenSide.TOP),
    }
    mirrors = [
        Mirror(0, 1, 1, 1, Player.RED),
        Mirror(0, 0, 0, 1, Player.RED),
        Mirror(1, 0, 1, 1, Player.RED),
        Mirror(2, 3, 3, 3, Player.BLUE),
        Mirror(2, 2, 2, 3, Player.BLUE),
        Mirror(3, 2, 3, 3, Player.BLUE),
    ]
    fill = [
        Mirror(2, 0, 3, 0, Player.RED),
        Mirror(2, 1, 3, 1, Player.BLUE),
        Mirror(2, 0, 2, 1, Player.RED),
        Mirror(3, 0, 3, 1, Player.BLUE),
        Mirror(2, 0, 3, 1, Player.RED),
        Mirror(0, 2, 1, 2, Player.BLUE),
        Mirror(0, 3, 1, 3, Player.RED),
        Mirror(0, 2, 0, 3, Player.BLUE),
        Mirror(1, 2, 1, 3, Player.RED),
        Mirror(0, 2, 1, 3, Player.BLUE),
        Mirror(2, 1, 1, 2, Player.RED),
    ]
    for mirror in fill:
        assert validate_placement(mirror, bases, mirrors, grid_size=3) is None, mirror
        mirrors.append(mirror)
    return GameState(grid_size=3, bases=bases, mirrors=mirrors, turn=Player.RED, phase=Phase.PLACING_MIRRORS)


def test_new_game_validates_grid_size():
    state = engine.new_game(8)
    assert state.phase is Phase.PLACING_BASES
    assert state.turn is Player.RED
    with pytest.raises(ValueError):
        engine.new_game(2)
    with pytest.raises(ValueError):
        engine.new_game(101)


def test_base_placement_sequence():
    state = engine.new_game(8, first=Player.BLUE)
    state = engine.place_base(state, (6, 6))
    assert state.turn is Player.RED
    assert state.phase is Phase.PLACING_BASES
    assert state.bases[Player.BLUE].open_side is OpenSide.TOP
    state = engine.place_base(state, (1, 1), OpenSide.RIGHT)
    assert state.phase is Phase.PLACING_MIRRORS
    assert state.turn is Player.BLUE
    assert len(state.mirrors) == 6
    assert state.history == []


def test_base_position_rules():
    state = engine.new_game(8)
    state = engine.place_base(state, (3, 3))
    assert engine.place_base(state, (4, 4)) is None
    assert engine.place_base(state, (3, 3)) is None
    assert engine.place_base(state, (8, 0)) is None
    assert engine.place_base(state, (5, 5)) is not None
    assert not engine.is_base_position_allowed((2, 4), Player.BLUE, state.bases, 8)
    assert engine.is_base_position_allowed((0, 7), Player.BLUE, state.bases, 8)


def test_place_base_in_wrong_phase_raises():
    state = build_state()
    with pytest.raises(ValueError):
        engine.place_base(state, (4, 0))


def test_generator_matches_validator():
    state = build_state()
    generated = set(engine.generate_candidates(Player.RED, state.bases, state.mirrors, 8))
    expected = set()
    for x in range(9):
        for y in range(9):
            for dx, dy in engine.NEIGHBOR_OFFSETS:
                candidate = Mirror(x, y, x + dx, y + dy, Player.RED)
                if validate_placement(candidate, state.bases, state.mirrors, grid_size=8) is None:
                    expected.add(candidate)
    assert generated == expected
    assert len(engine.generate_candidates(Player.RED, state.bases, state.mirrors, 8)) == len(expected)


def test_apply_move_switches_turn_and_records_history():
    state = build_state()
    mirror = Mirror(3, 3, 4, 4, Player.RED)
    after = engine.apply_move(state, mirror)
    assert after.turn is Player.BLUE
    assert after.mirrors[-1] == mirror
    assert after.history == [mirror]
    assert state.history == []
    assert len(state.mirrors) == 6


def test_apply_move_rejects_bad_moves():
    state = build_state()
    with pytest.raises(ValueError):
        engine.apply_move(state, Mirror(3, 3, 4, 4, Player.BLUE))
    with pytest.raises(ValueError):
        engine.apply_move(state, Mirror(1, 1, 1, 0, Player.RED))
    with pytest.raises(ValueError):
        engine.apply_move(engine.new_game(8), Mirror(3, 3, 4, 4, Player.RED))


def test_laser_fires_at_start_of_turn():
    state = build_state()
    state = engine.apply_move(state, Mirror(6, 1, 7, 2, Player.RED))
    assert engine.winner(state) is None
    state = engine.apply_move(state, Mirror(0, 7, 1, 7, Player.BLUE))
    assert engine.winner(state) is Player.RED
    assert engine.is_terminal(state)
    assert state.phase is Phase.OVER


def test_blocking_the_shot_keeps_game_going():
    state = build_state()
    state = engine.apply_move(state, Mirror(6, 1, 7, 2, Player.RED))
    state = engine.apply_move(state, Mirror(6, 3, 7, 3, Player.BLUE))
    assert engine.winner(state) is None
    assert state.turn is Player.RED


def test_undo_reopens_finished_game():
    state = build_state()
    state = engine.apply_move(state, Mirror(6, 1, 7, 2, Player.RED))
    state = engine.apply_move(state, Mirror(0, 7, 1, 7, Player.BLUE))
    undone = engine.undo_last_move(state)
    assert undone.phase is Phase.PLACING_MIRRORS
    assert undone.winner is None
    assert undone.turn is Player.BLUE
    assert Mirror(0, 7, 1, 7, Player.BLUE) not in undone.mirrors
    assert len(undone.history) == 1


def test_undo_without_history_raises():
    with pytest.raises(ValueError):
        engine.undo_last_move(build_state())


def test_crowded_board_has_no_moves_and_passes():
    state = crowded_state()
    assert engine.legal_moves(state) == []
    passed = engine.pass_turn(state)
    assert passed.turn is Player.BLUE
    assert passed.history == [None]
    assert passed.mirrors == state.mirrors
    assert not engine.is_terminal(passed)
    back = engine.undo_last_move(passed)
    assert back.turn is Player.RED
    assert back.history == []
    assert back.mirrors == state.mirrors


def test_require_bases():
    with pytest.raises(ValueError):
        engine.require_bases({})
    red, blue = engine.require_bases(build_state().bases)
    assert red.owner is Player.RED and blue.owner is Player.BLUE
