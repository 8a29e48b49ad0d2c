"""
Random agent: uniform choice among legal moves.
"""

from typing import Iterable, List, Optional

import numpy as np

from engine.board import Board, Player
from engine.move_generator import LegalMoveGenerator, Move


class RandomAgent:
    """Picks uniformly at random from the legal moves."""

    def __init__(self, seed: Optional[int] = None,
                 move_generator: Optional[LegalMoveGenerator] = None):
        self.rng = np.random.RandomState(seed)
        self.move_generator = move_generator or LegalMoveGenerator()

    def choose(self, legal_moves: List[Move]) -> Optional[Move]:
        if not legal_moves:
            return None
        return legal_moves[self.rng.randint(len(legal_moves))]

    def select_action(self, board: Board, used_pieces: Iterable[str],
                      player: Player = Player.TWO) -> Optional[Move]:
        return self.choose(self.move_generator.get_legal_moves(board, used_pieces))

    def set_seed(self, seed: int):
        self.rng = np.random.RandomState(seed)
