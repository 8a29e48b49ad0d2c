"""
Pydantic schemas for moves.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from engine.board import LEGACY_ALIASES
from engine.move_generator import Move as EngineMove
from engine.pieces import PIECE_IDS, Orientation


class Move(BaseModel):
    """A placement as exchanged with clients and the suggestion oracle."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {"piece": "I", "row": 0, "col": 0, "rotation": 0, "flip": False}
        }
    )

    piece: str = Field(..., description="Piece identifier")
    row: int = Field(..., ge=0, le=7, description="Anchor row")
    col: int = Field(..., ge=0, le=7, description="Anchor column")
    rotation: int = Field(default=0, ge=0, le=3, description="Quarter turns")
    flip: bool = Field(default=False, description="Mirror before rotating")

    @field_validator("piece", mode="before")
    @classmethod
    def _check_piece(cls, value):
        if not isinstance(value, str):
            raise ValueError("piece must be a letter")
        value = value.strip().upper()
        value = LEGACY_ALIASES.get(value, value)
        if value not in PIECE_IDS:
            raise ValueError(f"Unknown piece {value!r}")
        return value

    def to_engine(self) -> EngineMove:
        return EngineMove(self.piece, Orientation(self.rotation, self.flip), self.row, self.col)

    @classmethod
    def from_engine(cls, move: EngineMove) -> "Move":
        return cls(piece=move.piece_id, row=move.anchor_row, col=move.anchor_col,
                   rotation=move.rotation, flip=move.flipped)


# Oracle responses share the move shape
MoveSuggestion = Move


class SelectPieceRequest(BaseModel):
    piece: str

    @field_validator("piece")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.strip().upper()


class OrientRequest(BaseModel):
    """Rotate and/or flip the pending piece."""
    rotate: int = Field(default=0, ge=-3, le=3, description="Quarter turns to add")
    flip: bool = False


class AnchorRequest(BaseModel):
    row: Optional[int] = Field(default=None, ge=0, le=7)
    col: Optional[int] = Field(default=None, ge=0, le=7)
    direction: Optional[str] = Field(default=None, description="up/down/left/right nudge")
