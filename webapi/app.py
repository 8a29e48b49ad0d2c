"""
FastAPI application for the pentomino placement game.

Exposes game sessions (piece selection, positioning, confirm/cancel/undo,
AI turns) and puzzle generation/validation over REST.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agents.move_oracle import HttpMoveOracle, MoveOracle
from engine.puzzle_generator import BUILTIN_PUZZLES, PuzzleGenerationError, PuzzleGenerator
from schemas.game_config import EngineConfig, load_config
from schemas.game_state import (
    ActionResponse, ErrorResponse, GameCreateRequest, GameState, PuzzleRequest,
    PuzzleValidationResponse
)
from schemas.move import AnchorRequest, Move, OrientRequest, SelectPieceRequest
from schemas.puzzle import Puzzle, PuzzleDifficulty
from webapi.game_manager import GameManager
from webapi.routes_gameplay import register_gameplay_routes, register_puzzle_routes

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"
AI_TURN_MESSAGE = "It is the AI's turn"

# Tiers tried in order when a request allows degrading
FALLBACK_ORDER = [PuzzleDifficulty.EASY, PuzzleDifficulty.MEDIUM, PuzzleDifficulty.HARD]


def _fallback_chain(difficulty: PuzzleDifficulty):
    return FALLBACK_ORDER[FALLBACK_ORDER.index(difficulty):]


def create_app(config: Optional[EngineConfig] = None,
               oracle: Optional[MoveOracle] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Engine configuration (defaults to ``load_config()``)
        oracle: Move-suggestion oracle for puzzle generation; when omitted,
            an HttpMoveOracle is used if ``config.oracle_url`` is set

    Returns:
        Configured FastAPI app
    """
    config = config or load_config()
    if oracle is None and config.oracle_url:
        oracle = HttpMoveOracle(config.oracle_url, timeout=config.oracle_timeout_seconds)

    game_manager = GameManager(config)
    puzzle_generator = PuzzleGenerator.from_config(config, oracle=oracle)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting pentomino web API (ai={config.ai_difficulty.value}, "
                    f"oracle={'on' if oracle is not None else 'off'})")
        yield
        logger.info(f"Shutting down pentomino web API ({len(game_manager.sessions)} sessions)")

    app = FastAPI(
        title="Deadblock Web API",
        description="REST API for the two-player pentomino placement game",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.game_manager = game_manager
    app.state.puzzle_generator = puzzle_generator

    origins = os.getenv("DEADBLOCK_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _respond(game_id: str, success: bool, ok_message: str, fail_message: str) -> ActionResponse:
        state = game_manager.get_game_state(game_id)
        return ActionResponse(success=success,
                              message=ok_message if success else fail_message,
                              game_state=state)

    def _human_session(game_id: str):
        """The session, or None when the AI seat is to move."""
        session = game_manager.get_session(game_id)
        return session if game_manager.is_human_turn(session) else None

    # Gameplay endpoints

    def health():
        return {"status": "ok", "games": len(game_manager.sessions)}

    async def create_game(request: GameCreateRequest) -> GameState:
        session = game_manager.create_game(request)
        return game_manager.to_game_state(session)

    async def get_game(game_id: str) -> GameState:
        return game_manager.get_game_state(game_id)

    async def select_piece(game_id: str, request: SelectPieceRequest) -> ActionResponse:
        session = _human_session(game_id)
        if session is None:
            return _respond(game_id, False, "", AI_TURN_MESSAGE)
        ok = session.game.select_piece(request.piece)
        if ok:
            session.touch()
        return _respond(game_id, ok, f"Selected {request.piece}",
                        f"Piece {request.piece} cannot be selected")

    async def orient_piece(game_id: str, request: OrientRequest) -> ActionResponse:
        session = _human_session(game_id)
        if session is None:
            return _respond(game_id, False, "", AI_TURN_MESSAGE)
        game = session.game
        ok = game.pending is not None
        if ok and request.rotate:
            ok = game.rotate_pending(request.rotate)
        if ok and request.flip:
            ok = game.flip_pending()
        if ok:
            session.touch()
        return _respond(game_id, ok, "Orientation updated", "No piece is pending")

    async def anchor_piece(game_id: str, request: AnchorRequest) -> ActionResponse:
        session = _human_session(game_id)
        if session is None:
            return _respond(game_id, False, "", AI_TURN_MESSAGE)
        game = session.game
        if request.direction is not None:
            ok = game.move_pending(request.direction.lower())
        elif request.row is not None and request.col is not None:
            ok = game.set_pending_anchor(request.row, request.col)
        else:
            raise HTTPException(status_code=400, detail="Provide row and col, or a direction")
        if ok:
            session.touch()
        return _respond(game_id, ok, "Anchor updated", "Anchor cannot be changed now")

    async def confirm_move(game_id: str) -> ActionResponse:
        session = _human_session(game_id)
        if session is None:
            return _respond(game_id, False, "", AI_TURN_MESSAGE)
        ok = session.game.confirm_pending()
        if not ok:
            return _respond(game_id, False, "", "Placement is not legal")
        session.touch()
        message = "Move placed"
        if game_manager.should_ai_respond(session):
            reply = await game_manager.make_ai_move(session)
            if reply is not None:
                message = f"Move placed; AI played {reply}"
        return _respond(game_id, True, message, "")

    async def cancel_move(game_id: str) -> ActionResponse:
        session = _human_session(game_id)
        if session is None:
            return _respond(game_id, False, "", AI_TURN_MESSAGE)
        ok = session.game.cancel_pending()
        if ok:
            session.touch()
        return _respond(game_id, ok, "Pending move cancelled", "No piece is pending")

    async def undo_move(game_id: str) -> ActionResponse:
        session = game_manager.get_session(game_id)
        ok = game_manager.undo_turn(session)
        return _respond(game_id, ok, "Last move undone", "Nothing to undo")

    async def ai_move(game_id: str) -> ActionResponse:
        session = game_manager.get_session(game_id)
        move = await game_manager.make_ai_move(session)
        if move is None:
            return _respond(game_id, False, "", "AI could not move")
        message = f"AI played {Move.from_engine(move).model_dump()}"
        # A suggested move for the human seat still gets the AI's reply
        if game_manager.should_ai_respond(session):
            reply = await game_manager.make_ai_move(session)
            if reply is not None:
                message += f"; AI replied {Move.from_engine(reply).model_dump()}"
        return _respond(game_id, True, message, "")

    # Puzzle endpoints

    async def generate_puzzle(request: PuzzleRequest) -> Puzzle:
        difficulty = request.difficulty or config.puzzle_difficulty
        difficulties = _fallback_chain(difficulty) if request.allow_fallback else [difficulty]
        try:
            return await puzzle_generator.generate_with_fallback(difficulties)
        except PuzzleGenerationError as e:
            logger.error(f"Puzzle generation failed: {e}")
            raise HTTPException(status_code=503, detail=str(e))

    async def validate_puzzle(puzzle: Puzzle) -> PuzzleValidationResponse:
        valid = puzzle_generator.validate_puzzle(puzzle)
        count = 0
        if valid:
            count = game_manager.move_generator.count_legal_moves(puzzle.to_board(), puzzle.used_pieces)
        return PuzzleValidationResponse(valid=valid, legal_move_count=count)

    async def builtin_puzzle(name: str) -> Puzzle:
        puzzle = BUILTIN_PUZZLES.get(name)
        if puzzle is None:
            raise HTTPException(status_code=404, detail=f"Unknown puzzle: {name}")
        return puzzle

    register_gameplay_routes(
        app,
        health=health,
        create_game=create_game,
        get_game=get_game,
        select_piece=select_piece,
        orient_piece=orient_piece,
        anchor_piece=anchor_piece,
        confirm_move=confirm_move,
        cancel_move=cancel_move,
        undo_move=undo_move,
        ai_move=ai_move,
    )
    register_puzzle_routes(
        app,
        generate_puzzle=generate_puzzle,
        validate_puzzle=validate_puzzle,
        builtin_puzzle=builtin_puzzle,
    )

    # Error handlers

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error="HTTP Error", message=str(exc.detail)).model_dump()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        """Malformed request bodies (bad puzzles, unknown pieces) are client errors."""
        details = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""),
             "type": err.get("type", "")}
            for err in exc.errors()
        ]
        logger.debug(f"Rejected request to {request.url.path}: {details}")
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Validation Error", message="Invalid request",
                                  details=details).model_dump()
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request, exc):
        """Handle general exceptions."""
        logger.exception(f"Unhandled error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error="Internal Server Error",
                                  message="An unexpected error occurred").model_dump()
        )

    return app
