"""
Generate pentomino puzzles from the command line.

Prints one puzzle per line as JSON (camelCase keys).
"""

import argparse
import asyncio
import json
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from agents.move_oracle import HttpMoveOracle
from engine.board import Board
from engine.puzzle_generator import PuzzleGenerationError, PuzzleGenerator
from schemas.game_config import load_config
from schemas.puzzle import PuzzleDifficulty
from utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def generate_many(generator: PuzzleGenerator, difficulty: PuzzleDifficulty, count: int):
    puzzles = []
    for _ in range(count):
        puzzles.append(await generator.generate_for_difficulty(difficulty))
    return puzzles


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate puzzles guaranteed to have a legal move")
    parser.add_argument("--difficulty", default=None, choices=[d.value for d in PuzzleDifficulty],
                        help="Puzzle tier (defaults to the configured one)")
    parser.add_argument("--count", type=int, default=1)
    parser.add_argument("--config", default=None, help="YAML/JSON config file")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-attempts", type=int, default=None)
    parser.add_argument("--show", action="store_true", help="Also print the board to stderr")
    args = parser.parse_args()

    config = load_config(args.config)
    updates = {}
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.max_attempts is not None:
        updates["puzzle_max_attempts"] = args.max_attempts
    config = config.model_copy(update=updates)
    setup_logging(config.log_level)

    oracle = None
    if config.oracle_url:
        oracle = HttpMoveOracle(config.oracle_url, timeout=config.oracle_timeout_seconds)
    generator = PuzzleGenerator.from_config(config, oracle=oracle)
    difficulty = PuzzleDifficulty(args.difficulty) if args.difficulty else config.puzzle_difficulty

    try:
        puzzles = asyncio.run(generate_many(generator, difficulty, args.count))
    except PuzzleGenerationError as e:
        logger.error(str(e))
        return 1

    for puzzle in puzzles:
        print(json.dumps(puzzle.model_dump(by_alias=True, exclude_none=True)))
        if args.show:
            print(str(Board.from_state_string(puzzle.board_state)), file=sys.stderr)
    logger.info(f"Generation stats: {generator.stats}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
