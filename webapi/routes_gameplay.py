"""
Route registration for gameplay and puzzle endpoints.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from fastapi import FastAPI

from schemas.game_state import ActionResponse, GameState, PuzzleValidationResponse
from schemas.puzzle import Puzzle


AsyncHandler = Callable[..., Awaitable[Any]]
SyncHandler = Callable[..., Any]


def register_gameplay_routes(
    app: FastAPI,
    *,
    health: SyncHandler,
    create_game: AsyncHandler,
    get_game: AsyncHandler,
    select_piece: AsyncHandler,
    orient_piece: AsyncHandler,
    anchor_piece: AsyncHandler,
    confirm_move: AsyncHandler,
    cancel_move: AsyncHandler,
    undo_move: AsyncHandler,
    ai_move: AsyncHandler,
) -> None:
    app.add_api_route("/health", health, methods=["GET"])
    app.add_api_route("/api/games", create_game, methods=["POST"], response_model=GameState)
    app.add_api_route("/api/games/{game_id}", get_game, methods=["GET"], response_model=GameState)
    app.add_api_route("/api/games/{game_id}/select", select_piece, methods=["POST"], response_model=ActionResponse)
    app.add_api_route("/api/games/{game_id}/orient", orient_piece, methods=["POST"], response_model=ActionResponse)
    app.add_api_route("/api/games/{game_id}/anchor", anchor_piece, methods=["POST"], response_model=ActionResponse)
    app.add_api_route("/api/games/{game_id}/confirm", confirm_move, methods=["POST"], response_model=ActionResponse)
    app.add_api_route("/api/games/{game_id}/cancel", cancel_move, methods=["POST"], response_model=ActionResponse)
    app.add_api_route("/api/games/{game_id}/undo", undo_move, methods=["POST"], response_model=ActionResponse)
    app.add_api_route("/api/games/{game_id}/ai-move", ai_move, methods=["POST"], response_model=ActionResponse)


def register_puzzle_routes(
    app: FastAPI,
    *,
    generate_puzzle: AsyncHandler,
    validate_puzzle: AsyncHandler,
    builtin_puzzle: AsyncHandler,
) -> None:
    app.add_api_route("/api/puzzles", generate_puzzle, methods=["POST"], response_model=Puzzle,
                      response_model_by_alias=True, response_model_exclude_none=True)
    app.add_api_route("/api/puzzles/validate", validate_puzzle, methods=["POST"],
                      response_model=PuzzleValidationResponse)
    app.add_api_route("/api/puzzles/builtin/{name}", builtin_puzzle, methods=["GET"], response_model=Puzzle,
                      response_model_by_alias=True, response_model_exclude_none=True)
