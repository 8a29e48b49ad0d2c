"""
Pentomino piece definitions with all rotations/reflections.

Offsets are ``(x, y)`` pairs, i.e. ``(col_delta, row_delta)`` relative to the
piece anchor ``(0, 0)``. Transforms never re-normalize: a rotated piece keeps
its anchor cell at ``(0, 0)`` and may extend into negative deltas.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

Offset = Tuple[int, int]
Offsets = Tuple[Offset, ...]

PIECE_SIZE = 5


@dataclass(frozen=True)
class Piece:
    """Represents a catalog pentomino."""
    id: str
    offsets: Offsets

    def __post_init__(self):
        """Validate piece after initialization."""
        if len(self.offsets) != PIECE_SIZE or len(set(self.offsets)) != PIECE_SIZE:
            raise ValueError(f"Piece {self.id} must have exactly {PIECE_SIZE} distinct cells")
        if (0, 0) not in self.offsets:
            raise ValueError(f"Piece {self.id} must contain its anchor (0, 0)")


@dataclass(frozen=True)
class Orientation:
    """A rotation (quarter turns) plus an optional horizontal flip."""
    rotation: int = 0
    flipped: bool = False

    def __post_init__(self):
        if self.rotation not in (0, 1, 2, 3):
            raise ValueError(f"rotation must be in 0..3, got {self.rotation}")

    def rotated(self, steps: int = 1) -> "Orientation":
        return Orientation((self.rotation + steps) % 4, self.flipped)

    def toggled(self) -> "Orientation":
        return Orientation(self.rotation, not self.flipped)


# Enumeration order: unflipped rotations first, then flipped
ALL_ORIENTATIONS: Tuple[Orientation, ...] = tuple(
    Orientation(rotation, flipped)
    for flipped in (False, True)
    for rotation in range(4)
)


def _anchored(cells: Sequence[Offset]) -> Offsets:
    """Translate cells so that the first one sits on (0, 0)."""
    ax, ay = cells[0]
    return tuple((x - ax, y - ay) for x, y in cells)


# Base shapes; N, X and Y are re-anchored on their first cell
_BASE_SHAPES: Dict[str, Sequence[Offset]] = {
    "F": [(0, 0), (0, 1), (1, 1), (2, 1), (1, 2)],
    "I": [(0, 0), (0, 1), (0, 2), (0, 3), (0, 4)],
    "L": [(0, 0), (0, 1), (0, 2), (0, 3), (1, 3)],
    "N": [(0, 1), (0, 2), (0, 3), (1, 0), (1, 1)],
    "P": [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2)],
    "T": [(0, 0), (1, 0), (2, 0), (1, 1), (1, 2)],
    "U": [(0, 0), (0, 1), (1, 1), (2, 0), (2, 1)],
    "V": [(0, 0), (0, 1), (0, 2), (1, 2), (2, 2)],
    "W": [(0, 0), (0, 1), (1, 1), (1, 2), (2, 2)],
    "X": [(1, 0), (0, 1), (1, 1), (2, 1), (1, 2)],
    "Y": [(0, 1), (1, 0), (1, 1), (1, 2), (1, 3)],
    "Z": [(0, 0), (1, 0), (1, 1), (1, 2), (2, 2)],
}

PIECES: Dict[str, Piece] = {
    piece_id: Piece(piece_id, _anchored(cells)) for piece_id, cells in _BASE_SHAPES.items()
}
PIECE_IDS: Tuple[str, ...] = tuple(PIECES)
TOTAL_PIECES = len(PIECE_IDS)


def flip_offsets(offsets: Sequence[Offset]) -> Offsets:
    """Mirror horizontally: (x, y) -> (-x, y)."""
    arr = np.asarray(offsets, dtype=int).reshape(-1, 2)
    arr = arr * np.array([-1, 1])
    return tuple((int(x), int(y)) for x, y in arr)


def rotate_offsets(offsets: Sequence[Offset], times: int = 1) -> Offsets:
    """Rotate by 90 degrees ``times`` times: (x, y) -> (-y, x)."""
    arr = np.asarray(offsets, dtype=int).reshape(-1, 2)
    for _ in range(times % 4):
        arr = arr[:, ::-1] * np.array([-1, 1])
    return tuple((int(x), int(y)) for x, y in arr)


def transform_offsets(offsets: Sequence[Offset], orientation: Orientation) -> Offsets:
    """Apply an orientation: flip first, then rotate."""
    if orientation.flipped:
        offsets = flip_offsets(offsets)
    return rotate_offsets(offsets, orientation.rotation)


def _shape_key(offsets: Sequence[Offset]) -> Tuple[Offset, ...]:
    """Translation-independent key for comparing shapes."""
    min_x = min(x for x, _ in offsets)
    min_y = min(y for _, y in offsets)
    return tuple(sorted((x - min_x, y - min_y) for x, y in offsets))


# Global registry of transformed offsets, keyed by (piece_id, orientation)
PIECE_COORDS: Dict[Tuple[str, Orientation], Offsets] = {}
UNIQUE_ORIENTATIONS: Dict[str, List[Orientation]] = {}


def init_piece_orientations():
    """
    Initialize the global orientation registries.

    This is called once during module import.
    """
    if PIECE_COORDS:
        return

    for piece_id, piece in PIECES.items():
        seen = set()
        unique = []
        for orientation in ALL_ORIENTATIONS:
            coords = transform_offsets(piece.offsets, orientation)
            PIECE_COORDS[(piece_id, orientation)] = coords
            key = _shape_key(coords)
            if key not in seen:
                seen.add(key)
                unique.append(orientation)
        UNIQUE_ORIENTATIONS[piece_id] = unique


def get_piece_coords(piece_id: str, orientation: Orientation = Orientation()) -> Offsets:
    """Get the 5 offsets of a catalog piece in the given orientation."""
    return PIECE_COORDS[(piece_id, orientation)]


def unique_orientations(piece_id: str) -> List[Orientation]:
    """Orientations of a piece that produce geometrically distinct shapes."""
    return list(UNIQUE_ORIENTATIONS[piece_id])


init_piece_orientations()
