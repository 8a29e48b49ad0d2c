"""
Heuristic agent: single-ply move scoring with randomized tie-breaking.
"""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np

from engine.board import Board, Player
from engine.mobility_metrics import MobilityEstimate, estimate_mobility
from engine.move_generator import LegalMoveGenerator, Move

logger = logging.getLogger(__name__)

WIN_SCORE = 100000.0
BASE_SCORE = 1000.0
EARLY_GAME_PIECES = 4
CENTER = 3.5


class AIDifficulty(str, Enum):
    """AI strength levels, weakest first."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


@dataclass(frozen=True)
class DifficultyProfile:
    """Scoring constants for one difficulty level."""
    mobility_estimate: MobilityEstimate
    mobility_weight: float
    center_weight: float
    edge_penalty: float
    jitter: float
    early_bonus: float
    early_margin: float
    late_margin: float
    early_pool: int
    late_pool: int


DIFFICULTY_PROFILES: Dict[AIDifficulty, DifficultyProfile] = {
    AIDifficulty.BEGINNER: DifficultyProfile(
        mobility_estimate=MobilityEstimate.PLACEABLE_PIECES,
        mobility_weight=100.0,
        center_weight=1.0,
        edge_penalty=1.0,
        jitter=150.0,
        early_bonus=400.0,
        early_margin=600.0,
        late_margin=200.0,
        early_pool=8,
        late_pool=4,
    ),
    AIDifficulty.INTERMEDIATE: DifficultyProfile(
        mobility_estimate=MobilityEstimate.PLACEABLE_PIECES,
        mobility_weight=100.0,
        center_weight=2.0,
        edge_penalty=2.0,
        jitter=50.0,
        early_bonus=400.0,
        early_margin=400.0,
        late_margin=50.0,
        early_pool=6,
        late_pool=3,
    ),
    AIDifficulty.EXPERT: DifficultyProfile(
        mobility_estimate=MobilityEstimate.PLACEMENTS,
        mobility_weight=1.0,
        center_weight=2.0,
        edge_penalty=2.0,
        jitter=5.0,
        early_bonus=60.0,
        early_margin=30.0,
        late_margin=5.0,
        early_pool=3,
        late_pool=2,
    ),
}


class HeuristicAgent:
    """
    Heuristic agent with strategic preferences:
    - Take a move that leaves the opponent without a placement
    - Minimize the opponent's remaining mobility
    - Prefer central cells, avoid the border
    """

    def __init__(self, difficulty: AIDifficulty = AIDifficulty.INTERMEDIATE,
                 seed: Optional[int] = None,
                 move_generator: Optional[LegalMoveGenerator] = None):
        """
        Initialize heuristic agent.

        Args:
            difficulty: Strength level selecting a DifficultyProfile
            seed: Random seed for reproducible behavior
            move_generator: Shared generator (a new one is built if omitted)
        """
        self.difficulty = AIDifficulty(difficulty)
        self.profile = DIFFICULTY_PROFILES[self.difficulty]
        self.rng = np.random.RandomState(seed)
        self.move_generator = move_generator or LegalMoveGenerator()

    def select_action(self, board: Board, used_pieces: Iterable[str],
                      player: Player = Player.TWO) -> Optional[Move]:
        """
        Select a move for ``player``.

        Returns:
            Selected move, or None if no legal moves are available
        """
        used = frozenset(used_pieces)
        legal_moves = self.move_generator.get_legal_moves(board, used, dedupe=True)
        if not legal_moves:
            return None
        if len(legal_moves) == 1:
            return legal_moves[0]

        early_game = len(used) < EARLY_GAME_PIECES
        scored = [(self.evaluate_move(board, used, move, player), move) for move in legal_moves]

        winning = [move for score, move in scored if score >= WIN_SCORE]
        if winning:
            logger.debug(f"AI[{self.difficulty.value}]: {len(winning)} winning moves")
            return winning[self.rng.randint(len(winning))]

        noisy = [(score + self._noise(early_game), move) for score, move in scored]
        choice = self._pick_from_top(noisy, early_game)
        logger.debug(f"AI[{self.difficulty.value}]: chose {choice} from {len(legal_moves)} candidates")
        return choice

    def evaluate_move(self, board: Board, used_pieces: Iterable[str],
                      move: Move, player: Player = Player.TWO) -> float:
        """
        Deterministic score of a move (no randomness).

        Returns:
            WIN_SCORE if the opponent is left without a move, otherwise
            BASE_SCORE minus weighted opponent mobility plus a positional bonus
        """
        used = frozenset(used_pieces) | {move.piece_id}
        sim_board = move.apply(board, player)

        # Immediate win dominates every other term
        if not self.move_generator.has_legal_moves(sim_board, used):
            return WIN_SCORE

        mobility = estimate_mobility(sim_board, used, self.profile.mobility_estimate,
                                     self.move_generator)
        score = BASE_SCORE - self.profile.mobility_weight * mobility
        score += self._positional_bonus(move)
        return score

    def _positional_bonus(self, move: Move) -> float:
        bonus = 0.0
        last = Board.SIZE - 1
        for r, c in move.get_positions():
            bonus += self.profile.center_weight * ((CENTER - abs(r - CENTER)) + (CENTER - abs(c - CENTER)))
            if r in (0, last) or c in (0, last):
                bonus -= self.profile.edge_penalty
        return bonus

    def _noise(self, early_game: bool) -> float:
        noise = self.rng.uniform(0.0, self.profile.jitter)
        if early_game:
            noise += self.rng.uniform(0.0, self.profile.early_bonus)
        return noise

    def _pick_from_top(self, scored: List[Tuple[float, Move]], early_game: bool) -> Move:
        margin = self.profile.early_margin if early_game else self.profile.late_margin
        pool_size = self.profile.early_pool if early_game else self.profile.late_pool

        ranked = sorted(scored, key=lambda item: item[0], reverse=True)
        best = ranked[0][0]
        eligible = [move for score, move in ranked if score >= best - margin][:pool_size]
        return eligible[self.rng.randint(len(eligible))]

    def get_action_info(self) -> Dict[str, Any]:
        """Get information about the agent."""
        profile = asdict(self.profile)
        profile["mobility_estimate"] = self.profile.mobility_estimate.value
        return {
            "name": "HeuristicAgent",
            "type": "heuristic",
            "difficulty": self.difficulty.value,
            "description": "Single-ply agent minimizing opponent mobility",
            "profile": profile,
        }

    def reset(self):
        """Reset agent state (no-op for heuristic agent)."""
        pass

    def set_seed(self, seed: int):
        """Set random seed for reproducible behavior."""
        self.rng = np.random.RandomState(seed)
