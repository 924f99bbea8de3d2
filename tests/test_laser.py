import math

import pytest

from laser_chess import engine
from laser_chess.laser import (
    DIRECTIONS,
    ShotProbe,
    can_laser_hit_base,
    find_laser_hit_path,
    find_winning_path,
    follow_branch,
    iter_legs,
    outgoing_directions,
    trace_laser,
)
from laser_chess.types import Base, Mirror, OpenSide, Player


def build_state():
    state = engine.new_game(8)
    state = engine.place_base(state, (1, 1), OpenSide.RIGHT)
    state = engine.place_base(state, (6, 6), OpenSide.LEFT)
    return state


def red_hits(state, extra=()):
    return can_laser_hit_base(
        state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], list(state.mirrors) + list(extra), 8
    )


def test_no_line_of_sight_without_mirrors():
    state = build_state()
    assert not red_hits(state)
    assert not can_laser_hit_base(
        state.bases[Player.BLUE], Player.BLUE, state.bases[Player.RED], state.mirrors, 8
    )


def test_single_diagonal_turns_beam_onto_blue_base():
    state = build_state()
    assert red_hits(state, [Mirror(6, 1, 7, 2, Player.RED)])


def test_two_diagonals_route_beam_through_open_side():
    state = build_state()
    extra = [Mirror(4, 1, 5, 2, Player.RED), Mirror(4, 6, 5, 7, Player.BLUE)]
    assert red_hits(state, extra)
    path = find_laser_hit_path(
        state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], state.mirrors + extra, 8
    )
    assert path is not None
    assert len(path) == 4
    assert path[0] == pytest.approx((1.5, 1.5))
    assert path[1] == pytest.approx((4.5, 1.5), abs=1e-9)
    assert path[2] == pytest.approx((4.5, 6.5), abs=1e-9)
    assert path[3] == pytest.approx((6.0, 6.5), abs=1e-9)


def test_winning_path_is_none_without_a_hit():
    state = build_state()
    assert find_winning_path(state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], state.mirrors, 8) is None


def test_path_and_hit_test_agree():
    state = build_state()
    layouts = [
        [],
        [Mirror(6, 1, 7, 2, Player.RED)],
        [Mirror(6, 1, 7, 2, Player.BLUE)],
        [Mirror(6, 1, 7, 2, Player.RED), Mirror(6, 3, 7, 3, Player.BLUE)],
        [Mirror(4, 1, 5, 2, Player.RED), Mirror(4, 6, 5, 7, Player.RED)],
        [Mirror(3, 1, 4, 2, Player.BLUE), Mirror(3, 6, 4, 7, Player.RED)],
    ]
    for extra in layouts:
        mirrors = state.mirrors + extra
        for attacker, defender in ((Player.RED, Player.BLUE), (Player.BLUE, Player.RED)):
            hit = can_laser_hit_base(state.bases[attacker], attacker, state.bases[defender], mirrors, 8)
            path = find_laser_hit_path(state.bases[attacker], attacker, state.bases[defender], mirrors, 8)
            assert hit == (path is not None), (extra, attacker)


def test_blocking_mirror_stops_the_shot():
    state = build_state()
    assert not red_hits(state, [Mirror(6, 1, 7, 2, Player.RED), Mirror(6, 3, 7, 3, Player.BLUE)])


def test_same_owner_prefers_reflection():
    mirror = Mirror(0, 0, 1, 1, Player.RED)
    own = outgoing_directions((1.0, 0.0), mirror, Player.RED)
    foreign = outgoing_directions((1.0, 0.0), mirror, Player.BLUE)
    assert len(own) == 2
    assert len(foreign) == 1
    assert own[0] == pytest.approx(foreign[0])
    assert own[1] == (1.0, 0.0)
    assert follow_branch((1.0, 0.0), mirror, Player.RED) == pytest.approx((0.0, 1.0), abs=1e-12)


def test_bouncing_between_own_shields_terminates():
    base = Base(1, 1, Player.RED, OpenSide.RIGHT)
    mirrors = [Mirror(1, 1, 2, 1, Player.RED), Mirror(1, 2, 2, 2, Player.RED)]
    legs = list(iter_legs(base.center, (0.0, -1.0), Player.RED, mirrors, 8))
    assert 2 <= len(legs) <= 4


def test_step_budget_caps_the_trace():
    mirrors = [Mirror(1, 1, 2, 1, Player.RED), Mirror(1, 2, 2, 2, Player.RED)]
    legs = list(iter_legs((1.5, 1.5), (0.0, -1.0), Player.RED, mirrors, 8, max_steps=1))
    assert len(legs) <= 2


def test_trace_exits_the_board():
    points = trace_laser((1.5, 1.5), (1.0, 0.0), Player.RED, [], 8)
    assert points == [(1.5, 1.5), (8.0, 1.5)]


def test_directions_are_unit_and_ordered():
    assert DIRECTIONS[0] == (1.0, 0.0)
    assert DIRECTIONS[1] == (-1.0, 0.0)
    assert DIRECTIONS[2] == (0.0, 1.0)
    assert DIRECTIONS[3] == (0.0, -1.0)
    assert all(math.hypot(*d) == 1.0 for d in DIRECTIONS)


def test_missing_base_raises():
    base = Base(1, 1, Player.RED, OpenSide.RIGHT)
    with pytest.raises(ValueError):
        can_laser_hit_base(base, Player.RED, None, [], 8)
    with pytest.raises(ValueError):
        find_laser_hit_path(None, Player.RED, base, [], 8)


def test_probe_matches_full_trace_for_every_candidate():
    state = build_state()
    mirrors = state.mirrors + [Mirror(4, 1, 5, 2, Player.RED)]
    probe = ShotProbe(state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], mirrors, 8)
    assert not probe.hit
    found_hit = False
    for candidate in engine.generate_candidates(Player.BLUE, state.bases, mirrors, 8):
        expected = can_laser_hit_base(
            state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], mirrors + [candidate], 8
        )
        assert probe.hits_with(candidate) == expected, candidate
        found_hit = found_hit or expected
    assert found_hit


def test_probe_with_two_extra_mirrors():
    state = build_state()
    probe = ShotProbe(state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], state.mirrors, 8)
    first = Mirror(4, 1, 5, 2, Player.RED)
    second = Mirror(4, 6, 5, 7, Player.BLUE)
    assert not probe.hits_with(first)
    assert probe.hits_with(first, second)
    assert probe.extended(first).hits_with(second)
    assert not probe.touches(Mirror(0, 7, 1, 7, Player.BLUE))


def test_touch_keys_agree_with_leg_checks():
    state = build_state()
    mirrors = state.mirrors + [Mirror(4, 1, 5, 2, Player.RED)]
    plain = ShotProbe(state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], mirrors, 8)
    keyed = ShotProbe(state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], mirrors, 8)
    assert keyed.touch_keys()
    for candidate in engine.generate_candidates(Player.BLUE, state.bases, mirrors, 8, check_enclosure=False):
        assert keyed.touches(candidate) == plain.touches(candidate), candidate
        assert keyed.hits_with(candidate) == plain.hits_with(candidate), candidate


def test_extended_shot_matches_a_fresh_trace():
    state = build_state()
    mirrors = state.mirrors + [Mirror(4, 1, 5, 2, Player.RED)]
    shot = ShotProbe(state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], mirrors, 8)
    for candidate in engine.generate_candidates(Player.BLUE, state.bases, mirrors, 8):
        extended = shot.extended(candidate)
        fresh = ShotProbe(state.bases[Player.RED], Player.RED, state.bases[Player.BLUE], mirrors + [candidate], 8)
        assert extended.hit == fresh.hit, candidate
        assert [beam.legs for beam in extended.beams] == [beam.legs for beam in fresh.beams], candidate
    untouched = Mirror(0, 7, 1, 7, Player.BLUE)
    assert not shot.touches(untouched)
    assert shot.extended(untouched).beams == shot.beams
