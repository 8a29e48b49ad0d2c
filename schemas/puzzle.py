"""
Pydantic schemas for puzzles.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from engine.board import EMPTY_CHAR, LEGACY_ALIASES, Board, BoardStateError, Player
from engine.move_generator import LegalMoveGenerator
from engine.pieces import PIECE_IDS, TOTAL_PIECES

from .move import Move


class PuzzleDifficulty(str, Enum):
    """Puzzle tiers, named by how many pieces remain to be placed."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def moves_remaining(self) -> int:
        return PUZZLE_MOVES_REMAINING[self]

    @classmethod
    def from_moves_remaining(cls, moves_remaining: int) -> "PuzzleDifficulty":
        for difficulty, moves in PUZZLE_MOVES_REMAINING.items():
            if moves == moves_remaining:
                return difficulty
        raise ValueError(f"No puzzle difficulty with {moves_remaining} moves remaining")


PUZZLE_MOVES_REMAINING = {
    PuzzleDifficulty.EASY: 3,
    PuzzleDifficulty.MEDIUM: 5,
    PuzzleDifficulty.HARD: 7,
}


class Puzzle(BaseModel):
    """A mid-game position: board string, used pieces and remaining move count."""
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "boardState": "GGGXGGGGGIXXXGNGGIGXGNNYGIUUUNYYGIUWUNGYGIWWFFGYGWWGGFFGGGGGGFGG",
                "usedPieces": ["X", "I", "N", "Y", "U", "W", "F"],
                "movesRemaining": 5,
            }
        },
    )

    board_state: str = Field(..., alias="boardState", description="64-char row-major board")
    used_pieces: List[str] = Field(default_factory=list, alias="usedPieces")
    moves_remaining: int = Field(..., alias="movesRemaining", ge=0, le=TOTAL_PIECES)
    solution: Optional[List[Move]] = Field(
        default=None, description="A known legal continuation from this position"
    )

    @field_validator("board_state")
    @classmethod
    def _normalize_board_state(cls, value: str) -> str:
        # Decoding validates length and characters
        try:
            return Board.from_state_string(value).to_state_string()
        except BoardStateError as e:
            raise ValueError(str(e)) from e

    @field_validator("used_pieces")
    @classmethod
    def _check_used_pieces(cls, value: List[str]) -> List[str]:
        normalized = [LEGACY_ALIASES.get(p, p) for p in value]
        unknown = [p for p in normalized if p not in PIECE_IDS]
        if unknown:
            raise ValueError(f"Unknown piece identifiers: {unknown}")
        if len(set(normalized)) != len(normalized):
            raise ValueError("usedPieces contains duplicates")
        return normalized

    @model_validator(mode="after")
    def _check_consistency(self) -> "Puzzle":
        if self.moves_remaining != TOTAL_PIECES - len(self.used_pieces):
            raise ValueError(
                f"movesRemaining must be {TOTAL_PIECES - len(self.used_pieces)} "
                f"for {len(self.used_pieces)} used pieces, got {self.moves_remaining}"
            )
        on_board = {c for c in self.board_state if c != EMPTY_CHAR}
        if on_board != set(self.used_pieces):
            raise ValueError(
                f"Pieces on board {sorted(on_board)} do not match usedPieces {sorted(self.used_pieces)}"
            )
        if self.solution is not None:
            self._check_solution()
        return self

    def _check_solution(self):
        """The solution must replay legally from the puzzle board."""
        if not self.solution:
            raise ValueError("solution must contain at least one move")
        generator = LegalMoveGenerator()
        board = self.to_board()
        used = set(self.used_pieces)
        player = Player.ONE
        for step in self.solution:
            candidate = step.to_engine()
            move = generator.find_move(board, used, candidate.piece_id, candidate.orientation,
                                       candidate.anchor_row, candidate.anchor_col)
            if move is None:
                raise ValueError(f"solution move {step.model_dump()} is not legal here")
            board = move.apply(board, player)
            used.add(move.piece_id)
            player = player.opponent()

    def to_board(self, owner: Player = Player.ONE) -> Board:
        return Board.from_state_string(self.board_state, owner=owner)

    @classmethod
    def from_board(cls, board: Board, solution: Optional[List[Move]] = None) -> "Puzzle":
        used = sorted(board.pieces_on_board(), key=PIECE_IDS.index)
        return cls(
            board_state=board.to_state_string(),
            used_pieces=used,
            moves_remaining=TOTAL_PIECES - len(used),
            solution=solution,
        )

    @property
    def difficulty(self) -> PuzzleDifficulty:
        return PuzzleDifficulty.from_moves_remaining(self.moves_remaining)
