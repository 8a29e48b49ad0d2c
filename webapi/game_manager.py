"""
Game manager for handling concurrent game sessions.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import HTTPException

from agents.heuristic_agent import HeuristicAgent
from engine.board import Player
from engine.game import PentominoGame
from engine.move_generator import LegalMoveGenerator, Move as EngineMove
from schemas.game_config import EngineConfig
from schemas.game_state import (
    GameCreateRequest, GameState, MoveRecordState, OpponentType, PendingMoveState
)
from schemas.move import Move

logger = logging.getLogger(__name__)

AI_MOVE_TIMEOUT_SECONDS = 5.0


@dataclass
class GameSession:
    """Represents an active game session."""
    game_id: str
    game: PentominoGame
    opponent: OpponentType
    agent: HeuristicAgent
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def touch(self):
        self.updated_at = datetime.now()


class GameManager:
    """Owns every session; each session exclusively owns its game state."""

    def __init__(self, config: Optional[EngineConfig] = None,
                 ai_timeout: float = AI_MOVE_TIMEOUT_SECONDS):
        self.config = config or EngineConfig()
        self.ai_timeout = ai_timeout
        self.move_generator = LegalMoveGenerator()
        self.sessions: Dict[str, GameSession] = {}

    def create_game(self, request: GameCreateRequest) -> GameSession:
        """
        Create a new session, from an empty board or from a puzzle.

        Args:
            request: Opponent type, AI settings and an optional puzzle

        Returns:
            The stored GameSession
        """
        game_id = str(uuid.uuid4())
        if request.puzzle is not None:
            game = PentominoGame.from_puzzle(request.puzzle, move_generator=self.move_generator)
        else:
            game = PentominoGame(move_generator=self.move_generator)

        seed = request.ai_seed if request.ai_seed is not None else self.config.seed
        difficulty = request.ai_difficulty or self.config.ai_difficulty
        agent = HeuristicAgent(difficulty=difficulty, seed=seed,
                               move_generator=self.move_generator)
        session = GameSession(game_id=game_id, game=game, opponent=request.opponent, agent=agent)
        self.sessions[game_id] = session
        logger.info(f"Game created: {game_id} (opponent={request.opponent.value}, "
                    f"ai={difficulty.value}, puzzle={request.puzzle is not None})")
        return session

    def get_session(self, game_id: str) -> GameSession:
        session = self.sessions.get(game_id)
        if session is None:
            raise HTTPException(status_code=404, detail="Game not found")
        return session

    async def make_ai_move(self, session: GameSession) -> Optional[EngineMove]:
        """
        Let the AI play for the side to move.

        The agent runs in the default executor on a snapshot of the board,
        and the chosen move is committed back through the session.

        Returns:
            The committed move, or None if the AI produced nothing in time
        """
        game = session.game
        if game.game_over:
            return None

        board = game.board.copy()
        used = game.used_pieces
        player = game.current_player
        start = time.perf_counter()
        loop = asyncio.get_running_loop()
        try:
            move = await asyncio.wait_for(
                loop.run_in_executor(None, session.agent.select_action, board, used, player),
                timeout=self.ai_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"AI move timed out after {self.ai_timeout}s in game {session.game_id}")
            return None

        elapsed = time.perf_counter() - start
        if move is None:
            logger.info(f"AI found no move for {player.name} in game {session.game_id}")
            return None
        if not game.apply_move(move):
            # State moved on while the agent was thinking
            logger.warning(f"AI move {move} rejected in game {session.game_id}")
            return None
        session.touch()
        logger.info(f"AI ({session.agent.difficulty.value}) played {move} for {player.name} "
                    f"in {elapsed:.3f}s, game {session.game_id}")
        return move

    def should_ai_respond(self, session: GameSession) -> bool:
        return (session.opponent == OpponentType.AI
                and not session.game.game_over
                and session.game.current_player == Player.TWO)

    def is_human_turn(self, session: GameSession) -> bool:
        """Against the AI, the human only ever moves for Player.ONE."""
        return session.opponent == OpponentType.HUMAN or session.game.current_player == Player.ONE

    def undo_turn(self, session: GameSession) -> bool:
        """
        Undo the last move and hand the turn back to a human.

        Against the AI this also takes back the human move the AI answered,
        so Player.ONE is to move again.
        """
        game = session.game
        if not game.undo():
            return False
        if session.opponent == OpponentType.AI and game.current_player == Player.TWO and game.history:
            game.undo()
        session.touch()
        logger.info(f"Undo in game {session.game_id}: {len(game.history)} moves left, "
                    f"{game.current_player.name} to move")
        return True

    def get_game_state(self, game_id: str) -> GameState:
        return self.to_game_state(self.get_session(game_id))

    def to_game_state(self, session: GameSession) -> GameState:
        """Convert a session into its API representation."""
        game = session.game
        board = game.board

        owners: List[List[int]] = []
        pieces: List[List[Optional[str]]] = []
        for row in range(board.SIZE):
            owners.append([int(v) for v in board.grid[row]])
            pieces.append([board.get_piece_at(row, col) for col in range(board.SIZE)])

        pending = None
        if game.pending is not None:
            pending = PendingMoveState(
                piece=game.pending.piece_id,
                rotation=game.pending.orientation.rotation,
                flip=game.pending.orientation.flipped,
                row=game.pending.anchor_row,
                col=game.pending.anchor_col,
                legal=game.is_pending_legal(),
            )

        history = [
            MoveRecordState(player=record.player.value, move=Move.from_engine(record.move))
            for record in game.history
        ]

        return GameState(
            game_id=session.game_id,
            phase=game.phase,
            current_player=game.current_player.value,
            board=owners,
            board_pieces=pieces,
            board_state=board.to_state_string(),
            used_pieces=sorted(game.used_pieces),
            available_pieces=game.available_pieces,
            pending=pending,
            history=history,
            legal_move_count=self.move_generator.count_legal_moves(board, game.used_pieces),
            game_over=game.game_over,
            winner=game.winner.value if game.winner is not None else None,
            opponent=session.opponent,
            ai_difficulty=session.agent.difficulty if session.opponent == OpponentType.AI else None,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )

