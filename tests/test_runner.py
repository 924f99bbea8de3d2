import pytest

from laser_chess.agents import RandomAgent
from laser_chess.runner import main, parse_args, play_game, play_match
from laser_chess.types import Player


def test_parse_args_defaults():
    args = parse_args(["--mode", "game"])
    assert args.red == "search"
    assert args.blue == "heuristic"
    assert args.grid_size == 50
    assert args.preset == "default"
    assert args.lang == "en"
    with pytest.raises(SystemExit):
        parse_args(["--mode", "game", "--red", "alphazero"])


def test_play_game_respects_turn_limit():
    summary = play_game(RandomAgent(seed=1), RandomAgent(seed=2), 8, max_turns=30)
    assert summary.turns <= 30
    assert summary.passes <= summary.turns
    assert len(summary.move_times[Player.RED]) + len(summary.move_times[Player.BLUE]) == summary.turns
    if summary.winner is None:
        assert summary.turns == 30


def test_play_match_tallies_every_game(capsys):
    tally = play_match(RandomAgent(seed=3), RandomAgent(seed=4), 8, max_turns=10, games=2)
    assert sum(tally.values()) == 2
    out = capsys.readouterr().out
    assert out.count("Result:") == 2


def test_main_runs_a_game(capsys):
    main(["--mode", "game", "--red", "random", "--blue", "random", "--grid-size", "8", "--seed", "3",
          "--max-turns", "10"])
    out = capsys.readouterr().out
    assert "Game winner:" in out
    assert "base at" in out


def test_main_rejects_bad_grid(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--mode", "game", "--red", "random", "--blue", "random", "--grid-size", "2"])
    assert excinfo.value.code == 1
    assert "Invalid configuration" in capsys.readouterr().out
