"""
Pentomino game engine package.

This package contains the core game logic, including:
- Piece catalog and orientation transforms
- Board model and board-state encoding
- Legal move generation and terminal detection
- Game session state machine
- Puzzle generation (engine.puzzle_generator)
"""

from .board import Board, BoardStateError, Player
from .game import GamePhase, MoveRecord, PendingMove, PentominoGame
from .move_generator import LegalMoveGenerator, Move
from .pieces import PIECE_IDS, PIECES, Orientation, Piece, get_piece_coords

__all__ = [
    'Board', 'BoardStateError', 'Player',
    'Piece', 'PIECES', 'PIECE_IDS', 'Orientation', 'get_piece_coords',
    'Move', 'LegalMoveGenerator',
    'PentominoGame', 'GamePhase', 'PendingMove', 'MoveRecord',
]
