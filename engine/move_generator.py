"""
Legal move generator for the pentomino game.
"""

import os
import time
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .bitboard import coords_to_mask, in_bounds
from .board import Board, Player
from .pieces import ALL_ORIENTATIONS, PIECE_IDS, Orientation, get_piece_coords, unique_orientations

logger = logging.getLogger(__name__)

# Debug flag for move generation timing (controlled via environment variable)
MOVEGEN_DEBUG = bool(os.getenv("DEADBLOCK_MOVEGEN_DEBUG", ""))


@dataclass(frozen=True)
class Move:
    """A placement: piece, orientation and anchor cell."""
    piece_id: str
    orientation: Orientation
    anchor_row: int
    anchor_col: int

    @property
    def rotation(self) -> int:
        return self.orientation.rotation

    @property
    def flipped(self) -> bool:
        return self.orientation.flipped

    def get_positions(self) -> List[Tuple[int, int]]:
        """Get the board positions this move would occupy."""
        return [(self.anchor_row + dy, self.anchor_col + dx)
                for dx, dy in get_piece_coords(self.piece_id, self.orientation)]

    def apply(self, board: Board, player: Player) -> Board:
        return board.place_piece(self.piece_id, self.orientation,
                                 self.anchor_row, self.anchor_col, player)

    def __str__(self):
        return (f"Move(piece={self.piece_id}, rotation={self.rotation}, flipped={self.flipped}, "
                f"anchor=({self.anchor_row}, {self.anchor_col}))")


def _build_placement_table() -> Dict[str, List[Tuple[Move, int]]]:
    """
    Precompute every in-bounds placement per piece with its cell mask.

    Order matches the exhaustive scan: flip, rotation, anchor row, anchor col.
    """
    table: Dict[str, List[Tuple[Move, int]]] = {}
    for piece_id in PIECE_IDS:
        entries = []
        for orientation in ALL_ORIENTATIONS:
            for anchor_row in range(Board.SIZE):
                for anchor_col in range(Board.SIZE):
                    move = Move(piece_id, orientation, anchor_row, anchor_col)
                    positions = move.get_positions()
                    if all(in_bounds(r, c) for r, c in positions):
                        entries.append((move, coords_to_mask(positions)))
        table[piece_id] = entries
    return table


def _distinct_placements(
    table: Dict[str, List[Tuple[Move, int]]]
) -> Dict[str, List[Tuple[Move, int]]]:
    """
    Keep only placements of geometrically distinct orientations.

    Two orientations with the same shape cover the same cell sets over all
    anchors, so this drops exactly the duplicate masks.
    """
    distinct = {}
    for piece_id, entries in table.items():
        keep = set(unique_orientations(piece_id))
        distinct[piece_id] = [(move, mask) for move, mask in entries if move.orientation in keep]
    return distinct


PLACEMENT_TABLE: Dict[str, List[Tuple[Move, int]]] = _build_placement_table()
DISTINCT_PLACEMENT_TABLE: Dict[str, List[Tuple[Move, int]]] = _distinct_placements(PLACEMENT_TABLE)


class LegalMoveGenerator:
    """Generates all legal moves for a board and a set of used pieces."""

    def __init__(self):
        self.placements = PLACEMENT_TABLE
        self.distinct_placements = DISTINCT_PLACEMENT_TABLE

    def _available_pieces(self, used_pieces: Iterable[str]) -> List[str]:
        used = set(used_pieces)
        return [piece_id for piece_id in PIECE_IDS if piece_id not in used]

    def get_legal_moves(self, board: Board, used_pieces: Iterable[str],
                        dedupe: bool = False) -> List[Move]:
        """
        Get every legal placement of every unused piece.

        Args:
            board: Current board state
            used_pieces: Piece identifiers already placed by either player
            dedupe: Drop placements that cover the same cells with the same piece

        Returns:
            List of legal moves (empty when the position is terminal)
        """
        start = time.perf_counter()
        occupied = board.occupied_bits
        available = self._available_pieces(used_pieces)
        legal_moves = []

        table = self.distinct_placements if dedupe else self.placements
        for piece_id in available:
            for move, mask in table[piece_id]:
                if not mask & occupied:
                    legal_moves.append(move)

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if MOVEGEN_DEBUG:
            logger.info(f"MoveGen: legal_moves={len(legal_moves)}, pieces_checked={len(available)}, "
                        f"dedupe={dedupe}, elapsed_ms={elapsed_ms:.2f}")
        return legal_moves

    def has_legal_moves(self, board: Board, used_pieces: Iterable[str]) -> bool:
        """Check if any unused piece can be placed. Stops at the first hit."""
        occupied = board.occupied_bits
        for piece_id in self._available_pieces(used_pieces):
            for _, mask in self.distinct_placements[piece_id]:
                if not mask & occupied:
                    return True
        return False

    def count_legal_moves(self, board: Board, used_pieces: Iterable[str],
                          dedupe: bool = True) -> int:
        """Number of legal placements (distinct cell sets per piece when deduped)."""
        occupied = board.occupied_bits
        table = self.distinct_placements if dedupe else self.placements
        return sum(1 for piece_id in self._available_pieces(used_pieces)
                   for _, mask in table[piece_id] if not mask & occupied)

    def count_placeable_pieces(self, board: Board, used_pieces: Iterable[str]) -> int:
        """Number of unused pieces that still have at least one placement."""
        occupied = board.occupied_bits
        count = 0
        for piece_id in self._available_pieces(used_pieces):
            if any(not mask & occupied for _, mask in self.distinct_placements[piece_id]):
                count += 1
        return count

    def find_move(self, board: Board, used_pieces: Iterable[str],
                  piece_id: str, orientation: Orientation,
                  anchor_row: int, anchor_col: int) -> Optional[Move]:
        """Return the move if it is legal for this position, else None."""
        if piece_id not in PIECE_IDS or piece_id in set(used_pieces):
            return None
        if not board.is_legal(piece_id, orientation, anchor_row, anchor_col):
            return None
        return Move(piece_id, orientation, anchor_row, anchor_col)
