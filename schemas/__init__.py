"""
Pydantic schemas for puzzles, moves, configuration and the web API.
"""

from .puzzle import Puzzle, PuzzleDifficulty
from .move import Move, MoveSuggestion, SelectPieceRequest, OrientRequest, AnchorRequest
from .game_config import EngineConfig, load_config
from .game_state import GameState, GameCreateRequest, ActionResponse, PuzzleRequest

__all__ = [
    "Puzzle",
    "PuzzleDifficulty",
    "Move",
    "MoveSuggestion",
    "SelectPieceRequest",
    "OrientRequest",
    "AnchorRequest",
    "EngineConfig",
    "load_config",
    "GameState",
    "GameCreateRequest",
    "ActionResponse",
    "PuzzleRequest",
]
