"""
Game session state machine.

Phases: AWAITING_SELECTION -> PIECE_PENDING -> (commit | cancel) ->
AWAITING_SELECTION, with GAME_OVER once the side to move has no placement.
The last player able to move wins.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional

from .board import Board, Player
from .move_generator import LegalMoveGenerator, Move
from .pieces import PIECE_IDS, Orientation

logger = logging.getLogger(__name__)

DIRECTIONS = {
    "up": (-1, 0),
    "down": (1, 0),
    "left": (0, -1),
    "right": (0, 1),
}


class GamePhase(str, Enum):
    AWAITING_SELECTION = "awaiting_selection"
    PIECE_PENDING = "piece_pending"
    GAME_OVER = "game_over"


@dataclass
class PendingMove:
    """A staged placement the active player is still positioning."""
    piece_id: str
    orientation: Orientation = Orientation()
    anchor_row: Optional[int] = None
    anchor_col: Optional[int] = None

    @property
    def has_anchor(self) -> bool:
        return self.anchor_row is not None and self.anchor_col is not None

    def to_move(self) -> Optional[Move]:
        if not self.has_anchor:
            return None
        return Move(self.piece_id, self.orientation, self.anchor_row, self.anchor_col)


@dataclass(frozen=True)
class MoveRecord:
    """A committed move plus the exact state before it."""
    move: Move
    player: Player
    board_before: Board
    used_pieces_before: FrozenSet[str]


class PentominoGame:
    """
    One game session: board, shared used-piece set, turn order and history.

    All methods that react to user input return ``False`` instead of raising
    when the input is rejected; the state is left unchanged in that case.
    """

    def __init__(self, board: Optional[Board] = None,
                 used_pieces: Optional[Iterable[str]] = None,
                 current_player: Player = Player.ONE,
                 move_generator: Optional[LegalMoveGenerator] = None):
        self.board = board.copy() if board is not None else Board.create_empty()
        self.used_pieces: FrozenSet[str] = frozenset(used_pieces or ())
        self.current_player = current_player
        self.move_generator = move_generator or LegalMoveGenerator()
        self.phase = GamePhase.AWAITING_SELECTION
        self.pending: Optional[PendingMove] = None
        self.history: List[MoveRecord] = []
        self.winner: Optional[Player] = None
        self._check_game_over()

    @classmethod
    def from_puzzle(cls, puzzle, move_generator: Optional[LegalMoveGenerator] = None) -> "PentominoGame":
        """Start a session from a validated ``schemas.puzzle.Puzzle``."""
        return cls(board=puzzle.to_board(), used_pieces=puzzle.used_pieces,
                   move_generator=move_generator)

    @property
    def game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def available_pieces(self) -> List[str]:
        return [piece_id for piece_id in PIECE_IDS if piece_id not in self.used_pieces]

    def get_legal_moves(self, dedupe: bool = False) -> List[Move]:
        return self.move_generator.get_legal_moves(self.board, self.used_pieces, dedupe=dedupe)

    # Pending-move workflow

    def select_piece(self, piece_id: str) -> bool:
        """Stage a fresh pending move for an unused piece."""
        if self.game_over:
            return False
        if piece_id not in PIECE_IDS or piece_id in self.used_pieces:
            logger.debug(f"Rejected selection of piece {piece_id!r}")
            return False
        self.pending = PendingMove(piece_id)
        self.phase = GamePhase.PIECE_PENDING
        return True

    def rotate_pending(self, steps: int = 1) -> bool:
        if self.phase != GamePhase.PIECE_PENDING:
            return False
        self.pending.orientation = self.pending.orientation.rotated(steps)
        return True

    def flip_pending(self) -> bool:
        if self.phase != GamePhase.PIECE_PENDING:
            return False
        self.pending.orientation = self.pending.orientation.toggled()
        return True

    def set_pending_anchor(self, row: int, col: int) -> bool:
        if self.phase != GamePhase.PIECE_PENDING:
            return False
        if not self.board.is_valid_position(row, col):
            return False
        self.pending.anchor_row = row
        self.pending.anchor_col = col
        return True

    def move_pending(self, direction: str) -> bool:
        """Nudge the pending anchor one cell, clamped to the board."""
        if self.phase != GamePhase.PIECE_PENDING or not self.pending.has_anchor:
            return False
        if direction not in DIRECTIONS:
            return False
        d_row, d_col = DIRECTIONS[direction]
        last = Board.SIZE - 1
        self.pending.anchor_row = min(last, max(0, self.pending.anchor_row + d_row))
        self.pending.anchor_col = min(last, max(0, self.pending.anchor_col + d_col))
        return True

    def is_pending_legal(self) -> bool:
        if self.phase != GamePhase.PIECE_PENDING or not self.pending.has_anchor:
            return False
        return self.board.is_legal(self.pending.piece_id, self.pending.orientation,
                                   self.pending.anchor_row, self.pending.anchor_col)

    def confirm_pending(self) -> bool:
        """Commit the pending move if it is legal. Illegal confirms change nothing."""
        if not self.is_pending_legal():
            logger.debug(f"Rejected confirm of pending move {self.pending}")
            return False
        self._commit(self.pending.to_move())
        return True

    def cancel_pending(self) -> bool:
        if self.phase != GamePhase.PIECE_PENDING:
            return False
        self.pending = None
        self.phase = GamePhase.AWAITING_SELECTION
        return True

    # Direct commits and history

    def apply_move(self, move: Move) -> bool:
        """Commit a fully specified move (AI turns). Clears any pending move."""
        if self.game_over:
            return False
        legal = self.move_generator.find_move(self.board, self.used_pieces, move.piece_id,
                                              move.orientation, move.anchor_row, move.anchor_col)
        if legal is None:
            return False
        self._commit(legal)
        return True

    def undo(self) -> bool:
        """Restore the state before the last committed move."""
        if self.game_over or not self.history:
            return False
        record = self.history.pop()
        self.board = record.board_before
        self.used_pieces = record.used_pieces_before
        self.current_player = record.player
        self.pending = None
        self.phase = GamePhase.AWAITING_SELECTION
        logger.debug(f"Undid {record.move} by {record.player.name}")
        return True

    def _commit(self, move: Move):
        mover = self.current_player
        self.history.append(MoveRecord(
            move=move,
            player=mover,
            board_before=self.board,
            used_pieces_before=self.used_pieces,
        ))
        self.board = move.apply(self.board, mover)
        self.used_pieces = self.used_pieces | {move.piece_id}
        self.pending = None
        self.phase = GamePhase.AWAITING_SELECTION
        self.current_player = mover.opponent()
        logger.debug(f"Player {mover.name} placed {move}")
        self._check_game_over()

    def _check_game_over(self):
        """End the game when the side to move has no placement; the other side wins."""
        if self.move_generator.has_legal_moves(self.board, self.used_pieces):
            return
        self.phase = GamePhase.GAME_OVER
        self.pending = None
        self.winner = self.current_player.opponent()
        logger.info(f"Game over: {self.current_player.name} cannot move, winner={self.winner.name}")
