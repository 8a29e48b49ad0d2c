"""
Board implementation for the 8x8 pentomino game.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from .bitboard import FULL_MASK, NUM_CELLS, coord_to_bit, coords_to_mask, index_to_coord, popcount
from .pieces import PIECES, Orientation, get_piece_coords

logger = logging.getLogger(__name__)

EMPTY_CHAR = "G"
# Legacy puzzles spell Y as H
LEGACY_ALIASES: Dict[str, str] = {"H": "Y"}


class Player(Enum):
    """Player enumeration."""
    ONE = 1
    TWO = 2

    def opponent(self) -> "Player":
        return Player.TWO if self is Player.ONE else Player.ONE


class BoardStateError(ValueError):
    """Raised when a board-state string cannot be decoded."""


class Board:
    """
    Pentomino game board.

    The board is an 8x8 grid where:
    - 0 represents an empty cell
    - 1-2 represent the owning player
    A parallel grid records which piece identifier covers each cell.

    Boards are copy-on-write: ``place_piece`` returns a new board and never
    mutates the receiver, so callers can keep any board as a snapshot.
    """

    SIZE = 8

    def __init__(self):
        self.grid = np.zeros((self.SIZE, self.SIZE), dtype=int)
        self.pieces = np.full((self.SIZE, self.SIZE), "", dtype="<U1")
        self.occupied_bits = 0

    @classmethod
    def create_empty(cls) -> "Board":
        """Create a board with every cell empty."""
        return cls()

    def is_valid_position(self, row: int, col: int) -> bool:
        """Check if position is within board bounds."""
        return 0 <= row < self.SIZE and 0 <= col < self.SIZE

    def is_empty(self, row: int, col: int) -> bool:
        return self.grid[row, col] == 0

    def get_player_at(self, row: int, col: int) -> Optional[Player]:
        """Get the player at a position, or None if empty."""
        value = int(self.grid[row, col])
        if value == 0:
            return None
        return Player(value)

    def get_piece_at(self, row: int, col: int) -> Optional[str]:
        piece_id = str(self.pieces[row, col])
        return piece_id or None

    def get_piece_positions(self, piece_id: str, orientation: Orientation,
                            anchor_row: int, anchor_col: int) -> List[Tuple[int, int]]:
        """Absolute (row, col) cells covered by a placement. May be off-board."""
        return [(anchor_row + dy, anchor_col + dx)
                for dx, dy in get_piece_coords(piece_id, orientation)]

    def is_legal(self, piece_id: str, orientation: Orientation,
                 anchor_row: int, anchor_col: int) -> bool:
        """
        Check whether a piece can be placed.

        A placement is legal iff all 5 absolute cells are on the board and empty.
        """
        grid = self.grid
        for r, c in self.get_piece_positions(piece_id, orientation, anchor_row, anchor_col):
            if r < 0 or r >= self.SIZE or c < 0 or c >= self.SIZE:
                return False
            if grid[r, c] != 0:
                return False
        return True

    def place_piece(self, piece_id: str, orientation: Orientation,
                    anchor_row: int, anchor_col: int, player: Player) -> "Board":
        """
        Return a new board with the piece placed for ``player``.

        The caller must check ``is_legal`` first. An illegal placement fails the
        assertion in debug runs and is a no-op (unchanged copy) otherwise.
        """
        new_board = self.copy()
        legal = self.is_legal(piece_id, orientation, anchor_row, anchor_col)
        assert legal, (
            f"Illegal placement: piece={piece_id} {orientation} at ({anchor_row}, {anchor_col})"
        )
        if not legal:
            logger.error(f"Ignoring illegal placement of {piece_id} at ({anchor_row}, {anchor_col})")
            return new_board

        positions = self.get_piece_positions(piece_id, orientation, anchor_row, anchor_col)
        for r, c in positions:
            new_board.grid[r, c] = player.value
            new_board.pieces[r, c] = piece_id
        new_board.occupied_bits |= coords_to_mask(positions)
        return new_board

    def pieces_on_board(self) -> set:
        """Set of piece identifiers with at least one occupied cell."""
        return {str(p) for p in np.unique(self.pieces) if p}

    def empty_count(self) -> int:
        return NUM_CELLS - popcount(self.occupied_bits)

    def is_full(self) -> bool:
        return self.occupied_bits == FULL_MASK

    def copy(self) -> "Board":
        """Create a deep copy of the board."""
        new_board = Board()
        new_board.grid = self.grid.copy()
        new_board.pieces = self.pieces.copy()
        new_board.occupied_bits = self.occupied_bits
        return new_board

    def to_state_string(self) -> str:
        """
        Encode the board as a 64-char row-major string.

        'G' marks an empty cell, any other character is the covering piece.
        """
        chars = []
        for row in range(self.SIZE):
            for col in range(self.SIZE):
                piece_id = self.pieces[row, col]
                chars.append(str(piece_id) if piece_id else EMPTY_CHAR)
        return "".join(chars)

    @classmethod
    def from_state_string(cls, state: str, owner: Player = Player.ONE) -> "Board":
        """
        Decode a 64-char board-state string.

        The string carries no ownership, so every occupied cell is given to
        ``owner``. 'H' is read as 'Y'.

        Raises:
            BoardStateError: on wrong length or unknown characters
        """
        if len(state) != NUM_CELLS:
            raise BoardStateError(
                f"Board state must be {NUM_CELLS} characters, got {len(state)}"
            )

        board = cls()
        for index, char in enumerate(state):
            if char == EMPTY_CHAR:
                continue
            piece_id = LEGACY_ALIASES.get(char, char)
            if piece_id not in PIECES:
                raise BoardStateError(f"Unknown piece character {char!r} at index {index}")
            row, col = index_to_coord(index)
            board.grid[row, col] = owner.value
            board.pieces[row, col] = piece_id
            board.occupied_bits |= coord_to_bit(row, col)
        return board

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return (np.array_equal(self.grid, other.grid)
                and np.array_equal(self.pieces, other.pieces))

    def __str__(self) -> str:
        """String representation of the board."""
        result = []
        for row in range(self.SIZE):
            row_str = ""
            for col in range(self.SIZE):
                piece_id = self.pieces[row, col]
                row_str += str(piece_id) if piece_id else "."
            result.append(row_str)
        return "\n".join(result)
