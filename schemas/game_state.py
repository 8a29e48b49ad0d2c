"""
Game state schemas
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agents.heuristic_agent import AIDifficulty
from engine.game import GamePhase

from .move import Move
from .puzzle import Puzzle, PuzzleDifficulty


class OpponentType(str, Enum):
    """Who plays the second seat."""
    HUMAN = "human"
    AI = "ai"


class PendingMoveState(BaseModel):
    piece: str
    rotation: int
    flip: bool
    row: Optional[int] = None
    col: Optional[int] = None
    legal: bool = False


class MoveRecordState(BaseModel):
    player: int = Field(ge=1, le=2)
    move: Move


class GameState(BaseModel):
    """Current state of a game session."""
    game_id: str
    phase: GamePhase
    current_player: int = Field(ge=1, le=2)
    board: List[List[int]] = Field(description="8x8 owners, 0 = empty")
    board_pieces: List[List[Optional[str]]] = Field(description="8x8 piece identifiers")
    board_state: str = Field(description="64-char encoding")
    used_pieces: List[str]
    available_pieces: List[str]
    pending: Optional[PendingMoveState] = None
    history: List[MoveRecordState] = Field(default_factory=list)
    legal_move_count: int
    game_over: bool
    winner: Optional[int] = None
    opponent: OpponentType = OpponentType.HUMAN
    ai_difficulty: Optional[AIDifficulty] = None
    created_at: datetime
    updated_at: datetime


class GameCreateRequest(BaseModel):
    """Request to start a new session."""
    opponent: OpponentType = OpponentType.HUMAN
    ai_difficulty: Optional[AIDifficulty] = Field(default=None, description="Defaults to the configured difficulty")
    ai_seed: Optional[int] = None
    puzzle: Optional[Puzzle] = Field(default=None, description="Start from this position instead of an empty board")


class ActionResponse(BaseModel):
    """Response to any session action."""
    success: bool
    message: str
    game_state: Optional[GameState] = None


class PuzzleRequest(BaseModel):
    difficulty: Optional[PuzzleDifficulty] = Field(default=None, description="Defaults to the configured difficulty")
    allow_fallback: bool = Field(default=False, description="Degrade to fewer placed pieces on failure")


class PuzzleValidationResponse(BaseModel):
    valid: bool
    legal_move_count: int


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[List[Dict[str, Any]]] = None
