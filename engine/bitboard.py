"""
Bitboard utilities for the 8x8 board.

Each cell maps to one bit of a Python int (row-major, bit 0 = (0, 0)), so an
overlap test is a single AND between a placement mask and the occupancy mask.
"""

from typing import Iterable, Tuple

BOARD_WIDTH = 8
BOARD_HEIGHT = 8
NUM_CELLS = BOARD_WIDTH * BOARD_HEIGHT
FULL_MASK = (1 << NUM_CELLS) - 1


def coord_to_index(row: int, col: int) -> int:
    """Convert board coordinates to a linear index in [0, NUM_CELLS)."""
    return row * BOARD_WIDTH + col


def index_to_coord(index: int) -> Tuple[int, int]:
    """Convert a linear index back to (row, col)."""
    return (index // BOARD_WIDTH, index % BOARD_WIDTH)


def in_bounds(row: int, col: int) -> bool:
    return 0 <= row < BOARD_HEIGHT and 0 <= col < BOARD_WIDTH


def coord_to_bit(row: int, col: int) -> int:
    """Bit mask with the single bit for (row, col) set."""
    return 1 << coord_to_index(row, col)


def coords_to_mask(coords: Iterable[Tuple[int, int]]) -> int:
    """
    Convert a collection of (row, col) coordinates to a bitmask.

    Raises:
        ValueError: if any coordinate is off the board
    """
    mask = 0
    for row, col in coords:
        if not in_bounds(row, col):
            raise ValueError(f"Coordinate ({row}, {col}) is off the board")
        mask |= coord_to_bit(row, col)
    return mask


def popcount(mask: int) -> int:
    return bin(mask).count("1")
