import pytest

from main import build_rules, parse_args
from timed_snake.config import GameRules


def test_defaults_match_the_classic_round() -> None:
    rules = GameRules()
    assert rules.grid_size == 40
    assert rules.reserved_top_rows == 3
    assert rules.base_tick_ms == 195
    assert rules.min_tick_ms == 70
    assert rules.speedup_factor == 0.995
    assert rules.round_duration_ms == 90_000
    assert rules.countdown_interval_ms == 250
    assert rules.initial_body == ((8, 10), (7, 10), (6, 10))
    assert rules.initial_heading == (1, 0)


@pytest.mark.parametrize("overrides", [
    {"grid_size": 0},
    {"reserved_top_rows": 40},
    {"min_tick_ms": 300},
    {"speedup_factor": 1.5},
    {"speedup_factor": 0},
    {"round_duration_ms": 0},
    {"initial_body": ()},
    {"initial_body": ((1, 1), (1, 1))},
    {"grid_size": 8},
])
def test_nonsense_overrides_are_rejected(overrides) -> None:
    with pytest.raises(ValueError):
        GameRules(**overrides)


def test_command_line_overrides() -> None:
    rules = build_rules(parse_args(["--duration", "30", "--grid-size", "20"]))
    assert rules.round_duration_ms == 30_000
    assert rules.grid_size == 20
    assert rules.base_tick_ms == 195


def test_command_line_defaults() -> None:
    args = parse_args([])
    assert build_rules(args) == GameRules()
    assert args.seed is None
    assert not args.mute
