"""
Move-suggestion oracle interface.

An oracle is an external, unreliable service (typically LLM-backed) that
proposes one move for a position. Responses are free text; nothing it returns
is trusted until ``parse_oracle_response`` and a legality check accept it.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import urllib.request
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol

import numpy as np
from pydantic import ValidationError

from engine.board import Board
from engine.move_generator import Move
from schemas.move import MoveSuggestion

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[^{}]*\}")


@dataclass
class OracleRequest:
    """Context sent to the oracle: board display plus sampled legal moves."""
    board_display: str
    used_pieces: List[str]
    legal_moves_by_piece: Dict[str, List[Move]] = field(default_factory=dict)

    @classmethod
    def build(cls, board: Board, used_pieces: Iterable[str], legal_moves: List[Move],
              sample_size: int, rng: np.random.RandomState) -> "OracleRequest":
        if len(legal_moves) > sample_size:
            indices = sorted(rng.choice(len(legal_moves), size=sample_size, replace=False))
            sample = [legal_moves[i] for i in indices]
        else:
            sample = list(legal_moves)

        grouped: Dict[str, List[Move]] = {}
        for move in sample:
            grouped.setdefault(move.piece_id, []).append(move)
        return cls(board_display=str(board), used_pieces=sorted(used_pieces),
                   legal_moves_by_piece=grouped)

    def to_prompt(self) -> str:
        lines = [
            "Pentomino placement game on an 8x8 board ('.' = empty, letters = placed pieces).",
            self.board_display,
            f"Used pieces: {', '.join(self.used_pieces) or 'none'}",
            "Some legal moves, grouped by piece (row, col, rotation, flip):",
        ]
        for piece_id, moves in self.legal_moves_by_piece.items():
            options = "; ".join(
                f"({m.anchor_row}, {m.anchor_col}, {m.rotation}, {str(m.flipped).lower()})"
                for m in moves
            )
            lines.append(f"  {piece_id}: {options}")
        lines.append('Reply with one JSON object: {"piece": "X", "row": 0, "col": 0, '
                     '"rotation": 0, "flip": false}')
        return "\n".join(lines)


class MoveOracle(Protocol):
    """Anything that can propose a move as free text."""

    async def suggest_move(self, request: OracleRequest) -> Optional[str]:
        ...


def parse_oracle_response(text: Optional[str]) -> Optional[MoveSuggestion]:
    """
    Extract the first valid move object from an oracle reply.

    Returns:
        MoveSuggestion, or None if the reply is empty or unusable
    """
    if not text:
        return None
    for candidate in _JSON_OBJECT.findall(text):
        try:
            data = json.loads(candidate)
            return MoveSuggestion.model_validate(data)
        except (ValueError, ValidationError) as e:
            logger.debug(f"Discarding oracle fragment {candidate!r}: {e}")
    return None


class HttpMoveOracle:
    """
    Oracle reached over HTTP.

    POSTs ``{"prompt": ...}`` as JSON and expects ``{"text": ...}`` back.
    """

    def __init__(self, url: str, timeout: float = 5.0):
        self.url = url
        self.timeout = timeout

    def _post(self, prompt: str) -> Optional[str]:
        body = json.dumps({"prompt": prompt}).encode("utf-8")
        req = urllib.request.Request(self.url, data=body,
                                     headers={"Content-Type": "application/json"}, method="POST")
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            payload = json.loads(resp.read().decode("utf-8"))
        if isinstance(payload, dict):
            text = payload.get("text")
            return text if isinstance(text, str) else None
        return None

    async def suggest_move(self, request: OracleRequest) -> Optional[str]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._post, request.to_prompt())
