"""
main.py — Entry point.

Run with:
    python main.py [--duration SECONDS] [--grid-size N] [--seed N] [--mute]

Requires:
    pip install -e .
"""

import argparse
import logging

from timed_snake.config import GameRules
from timed_snake.controller import GameController


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Timed snake: eat as much as you can in one round.")
    parser.add_argument("--duration", type=int, default=None,
                        help="round length in seconds (default 90)")
    parser.add_argument("--grid-size", type=int, default=None,
                        help="cells per side (default 40)")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for target placement")
    parser.add_argument("--mute", action="store_true", help="start with sound off")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def build_rules(args: argparse.Namespace) -> GameRules:
    overrides = {}
    if args.duration is not None:
        overrides["round_duration_ms"] = args.duration * 1000
    if args.grid_size is not None:
        overrides["grid_size"] = args.grid_size
    return GameRules(**overrides)


def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    GameController(build_rules(args), seed=args.seed, muted=args.mute).run()


if __name__ == "__main__":
    main()
