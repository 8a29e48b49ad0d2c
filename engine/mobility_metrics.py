"""
Mobility metrics: how much freedom a position leaves the side to move.

P_i = placements available for piece i (distinct cell sets),
placeable pieces = number of unused pieces with P_i > 0.
"""

from enum import Enum
from typing import Iterable, Optional

from .board import Board
from .move_generator import LegalMoveGenerator


class MobilityEstimate(str, Enum):
    """How precisely opponent mobility is counted."""
    PLACEABLE_PIECES = "placeable_pieces"  # coarse: pieces with >= 1 placement
    PLACEMENTS = "placements"              # exact: distinct legal placements


def estimate_mobility(
    board: Board,
    used_pieces: Iterable[str],
    estimate: MobilityEstimate,
    move_generator: Optional[LegalMoveGenerator] = None,
) -> int:
    """Single-number mobility at the requested precision."""
    gen = move_generator or LegalMoveGenerator()
    if estimate == MobilityEstimate.PLACEABLE_PIECES:
        return gen.count_placeable_pieces(board, used_pieces)
    return gen.count_legal_moves(board, used_pieces, dedupe=True)
