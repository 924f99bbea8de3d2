import random

from laser_chess import engine
from laser_chess.opening import base_position_candidates, choose_base_position, pick_open_side
from laser_chess.shield import build_base_shield
from laser_chess.types import Base, OpenSide, Player


def test_first_base_goes_near_the_centre():
    point = choose_base_position(Player.RED, {}, 10)
    assert point == (4, 4)
    seeded = choose_base_position(Player.RED, {}, 10, rng=random.Random(7))
    assert seeded in {(4, 4), (4, 5), (5, 4), (5, 5)}


def test_second_base_keeps_its_distance():
    state = engine.place_base(engine.new_game(10), (4, 4))
    point = choose_base_position(Player.BLUE, state.bases, 10, state.mirrors)
    assert point is not None
    assert engine.is_base_position_allowed(point, Player.BLUE, state.bases, 10)
    assert max(abs(point[0] - 4), abs(point[1] - 4)) >= 4


def test_candidates_all_take_a_shield():
    state = engine.place_base(engine.new_game(6), (2, 2))
    cells = base_position_candidates(Player.BLUE, state.bases, 6, state.mirrors)
    assert cells
    assert (3, 3) not in cells
    for cell in cells:
        assert build_base_shield(cell, Player.BLUE, state.mirrors) is not None


def test_no_room_on_a_tiny_board():
    bases = {Player.RED: Base(1, 1, Player.RED, OpenSide.TOP)}
    assert choose_base_position(Player.BLUE, bases, 3) is None


def test_open_side_faces_the_opponent():
    red = Base(1, 1, Player.RED, OpenSide.RIGHT)
    blue = Base(6, 6, Player.BLUE, OpenSide.LEFT)
    assert pick_open_side((1, 1), Player.RED, {Player.BLUE: blue}) is OpenSide.RIGHT
    assert pick_open_side((6, 6), Player.BLUE, {Player.RED: red}) is OpenSide.TOP


def test_open_side_without_opponent_uses_fallback_order():
    assert pick_open_side((3, 3), Player.RED, {}) is OpenSide.TOP
