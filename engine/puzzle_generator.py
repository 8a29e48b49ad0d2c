"""
Puzzle generation and validation.

A puzzle is a mid-game board built by placing ``12 - moves_remaining`` random
pieces on an empty board. Generation retries from scratch until the final
board still admits at least one placement, up to a fixed attempt budget.
Random placements are drawn among the moves that leave the next player a
placement, so a play-out rarely dead-ends before the target. An optional
move-suggestion oracle may pick the placements; anything it gets wrong
(timeouts, errors, garbled or illegal replies) falls back to a random move.
Every puzzle carries a solution: one known continuation to the end of the game.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

from agents.move_oracle import MoveOracle, OracleRequest, parse_oracle_response
from schemas.move import Move as MoveSchema
from schemas.puzzle import PUZZLE_MOVES_REMAINING, Puzzle, PuzzleDifficulty

from .board import Board, Player
from .move_generator import LegalMoveGenerator, Move
from .pieces import TOTAL_PIECES, Orientation

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_ORACLE_TIMEOUT = 5.0
DEFAULT_SAMPLE_SIZE = 30

VALID_MOVES_REMAINING = frozenset(PUZZLE_MOVES_REMAINING.values())


class PuzzleGenerationError(RuntimeError):
    """Raised when no valid puzzle was produced within the attempt budget."""


@dataclass
class GenerationStats:
    attempts: int = 0
    dead_ends: int = 0
    unsolvable: int = 0
    oracle_moves: int = 0
    oracle_fallbacks: int = 0


BUILTIN_PUZZLES = {
    "endgame_position": Puzzle(
        board_state="GGGXGGGGGIXXXGNGGIGXGNNHGIUUUNHHGIUWUNGHGIWWFFGHGWWGGFFGGGGGGFGG",
        used_pieces=["X", "I", "N", "Y", "U", "W", "F"],
        moves_remaining=5,
    ),
}


class PuzzleGenerator:
    """Builds puzzles that are guaranteed to have a legal move left."""

    def __init__(self, oracle: Optional[MoveOracle] = None,
                 max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                 oracle_timeout: float = DEFAULT_ORACLE_TIMEOUT,
                 sample_size: int = DEFAULT_SAMPLE_SIZE,
                 seed: Optional[int] = None,
                 move_generator: Optional[LegalMoveGenerator] = None):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.oracle = oracle
        self.max_attempts = max_attempts
        self.oracle_timeout = oracle_timeout
        self.sample_size = sample_size
        self.rng = np.random.RandomState(seed)
        self.move_generator = move_generator or LegalMoveGenerator()
        self.stats = GenerationStats()

    @classmethod
    def from_config(cls, config, oracle: Optional[MoveOracle] = None) -> "PuzzleGenerator":
        """Build a generator from a ``schemas.game_config.EngineConfig``."""
        return cls(
            oracle=oracle,
            max_attempts=config.puzzle_max_attempts,
            oracle_timeout=config.oracle_timeout_seconds,
            sample_size=config.oracle_sample_size,
            seed=config.seed,
        )

    async def generate(self, target_moves_remaining: int) -> Puzzle:
        """
        Generate a puzzle with ``target_moves_remaining`` pieces left to place.

        Args:
            target_moves_remaining: 3 (easy), 5 (medium) or 7 (hard)

        Returns:
            A validated Puzzle

        Raises:
            ValueError: for an unsupported target
            PuzzleGenerationError: when every attempt failed
        """
        if target_moves_remaining not in VALID_MOVES_REMAINING:
            raise ValueError(
                f"target_moves_remaining must be one of {sorted(VALID_MOVES_REMAINING)}, "
                f"got {target_moves_remaining}"
            )
        pieces_to_place = TOTAL_PIECES - target_moves_remaining
        start = time.perf_counter()

        for attempt in range(1, self.max_attempts + 1):
            self.stats.attempts += 1
            result = await self._play_out(pieces_to_place)
            if result is None:
                self.stats.dead_ends += 1
                logger.debug(f"Puzzle attempt {attempt}: ran out of moves before {pieces_to_place} placements")
                continue

            board, used, to_move = result
            if not self.move_generator.has_legal_moves(board, used):
                self.stats.unsolvable += 1
                logger.debug(f"Puzzle attempt {attempt}: final board has no legal move, retrying")
                continue

            solution = self._continuation(board, used, to_move)
            puzzle = Puzzle.from_board(board, solution=[MoveSchema.from_engine(m) for m in solution])
            elapsed = time.perf_counter() - start
            logger.info(f"Puzzle generated: moves_remaining={puzzle.moves_remaining}, "
                        f"solution_length={len(solution)}, attempts={attempt}, elapsed={elapsed:.3f}s")
            return puzzle

        raise PuzzleGenerationError(
            f"Failed to generate a puzzle with {target_moves_remaining} moves remaining "
            f"after {self.max_attempts} attempts"
        )

    async def generate_for_difficulty(self, difficulty: PuzzleDifficulty) -> Puzzle:
        return await self.generate(PuzzleDifficulty(difficulty).moves_remaining)

    async def generate_with_fallback(self, difficulties: Sequence[PuzzleDifficulty]) -> Puzzle:
        """
        Try each difficulty in order, e.g. easy then medium then hard.

        Raises:
            PuzzleGenerationError: when every difficulty failed
        """
        if not difficulties:
            raise ValueError("At least one difficulty is required")
        last_error: Optional[PuzzleGenerationError] = None
        for difficulty in difficulties:
            try:
                return await self.generate_for_difficulty(difficulty)
            except PuzzleGenerationError as e:
                logger.warning(f"{e}; degrading difficulty")
                last_error = e
        raise last_error

    def validate_puzzle(self, puzzle: Puzzle) -> bool:
        """True iff some unused piece can still be placed on the puzzle board."""
        return self.move_generator.has_legal_moves(puzzle.to_board(), puzzle.used_pieces)

    async def _play_out(self, pieces_to_place: int) -> Optional[Tuple[Board, FrozenSet[str], Player]]:
        board = Board.create_empty()
        used: FrozenSet[str] = frozenset()
        player = Player.ONE

        for _ in range(pieces_to_place):
            legal_moves = self.move_generator.get_legal_moves(board, used)
            if not legal_moves:
                return None
            move = await self._choose_move(board, used, legal_moves)
            if move is None:
                return None
            board = move.apply(board, player)
            used = used | {move.piece_id}
            player = player.opponent()
        return board, used, player

    async def _choose_move(self, board: Board, used: FrozenSet[str],
                           legal_moves: List[Move]) -> Optional[Move]:
        if self.oracle is not None:
            move = await self._ask_oracle(board, used, legal_moves)
            if move is not None:
                self.stats.oracle_moves += 1
                return move
            self.stats.oracle_fallbacks += 1
        return self._random_surviving_move(board, used, legal_moves)

    def _random_surviving_move(self, board: Board, used: FrozenSet[str],
                               legal_moves: List[Move]) -> Optional[Move]:
        """A random legal move after which the next player can still place a piece."""
        for index in self.rng.permutation(len(legal_moves)):
            move = legal_moves[index]
            after = move.apply(board, Player.ONE)
            if self.move_generator.has_legal_moves(after, used | {move.piece_id}):
                return move
        return None

    def _continuation(self, board: Board, used: FrozenSet[str], player: Player) -> List[Move]:
        """Random legal moves from ``board`` until the side to move is stuck."""
        moves = []
        legal_moves = self.move_generator.get_legal_moves(board, used)
        while legal_moves:
            move = legal_moves[self.rng.randint(len(legal_moves))]
            moves.append(move)
            board = move.apply(board, player)
            used = used | {move.piece_id}
            player = player.opponent()
            legal_moves = self.move_generator.get_legal_moves(board, used)
        return moves

    async def _ask_oracle(self, board: Board, used: FrozenSet[str],
                          legal_moves: List[Move]) -> Optional[Move]:
        request = OracleRequest.build(board, used, legal_moves, self.sample_size, self.rng)
        try:
            text = await asyncio.wait_for(self.oracle.suggest_move(request), timeout=self.oracle_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Move oracle timed out after {self.oracle_timeout}s, using a random move")
            return None
        except Exception as e:
            logger.warning(f"Move oracle failed ({e}), using a random move")
            return None

        suggestion = parse_oracle_response(text)
        if suggestion is None:
            logger.warning("Move oracle returned no usable move, using a random move")
            return None

        move = self.move_generator.find_move(board, used, suggestion.piece,
                                             Orientation(suggestion.rotation, suggestion.flip),
                                             suggestion.row, suggestion.col)
        if move is None:
            logger.warning(f"Move oracle suggested an unplayable move {suggestion.model_dump()}, "
                           f"using a random move")
        return move
