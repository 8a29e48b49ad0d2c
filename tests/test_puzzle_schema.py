"""
Tests for the Puzzle schema and difficulty tiers.
"""

import pytest
from pydantic import ValidationError

from engine.board import Board, Player
from engine.pieces import Orientation
from engine.puzzle_generator import BUILTIN_PUZZLES
from schemas.puzzle import Puzzle, PuzzleDifficulty

BUILTIN_STATE = "GGGXGGGGGIXXXGNGGIGXGNNHGIUUUNHHGIUWUNGHGIWWFFGHGWWGGFFGGGGGGFGG"


def _payload(**overrides):
    payload = {
        "boardState": BUILTIN_STATE,
        "usedPieces": ["X", "I", "N", "Y", "U", "W", "F"],
        "movesRemaining": 5,
    }
    payload.update(overrides)
    return payload


def test_builtin_puzzle_normalizes_legacy_letter():
    puzzle = BUILTIN_PUZZLES["endgame_position"]
    assert "H" not in puzzle.board_state
    assert puzzle.board_state == BUILTIN_STATE.replace("H", "Y")
    assert puzzle.difficulty == PuzzleDifficulty.MEDIUM


def test_camel_case_payload_accepted():
    puzzle = Puzzle.model_validate(_payload(usedPieces=["X", "I", "N", "H", "U", "W", "F"]))
    assert "Y" in puzzle.used_pieces
    dumped = puzzle.model_dump(by_alias=True, exclude_none=True)
    assert set(dumped) == {"boardState", "usedPieces", "movesRemaining"}


def test_solution_is_optional_and_replayed():
    assert BUILTIN_PUZZLES["endgame_position"].solution is None

    # V tucked into the empty bottom-left corner
    puzzle = Puzzle.model_validate(_payload(solution=[{"piece": "V", "row": 5, "col": 0}]))
    assert puzzle.solution[0].piece == "V"

    with pytest.raises(ValidationError):
        Puzzle.model_validate(_payload(solution=[{"piece": "V", "row": 0, "col": 0}]))
    with pytest.raises(ValidationError):
        Puzzle.model_validate(_payload(solution=[{"piece": "X", "row": 5, "col": 0}]))
    with pytest.raises(ValidationError):
        Puzzle.model_validate(_payload(solution=[]))


def test_wrong_length_rejected():
    with pytest.raises(ValidationError):
        Puzzle.model_validate(_payload(boardState=BUILTIN_STATE[:-1]))


def test_unknown_character_rejected():
    with pytest.raises(ValidationError):
        Puzzle.model_validate(_payload(boardState="Q" + BUILTIN_STATE[1:]))


def test_moves_remaining_must_match_used_pieces():
    with pytest.raises(ValidationError):
        Puzzle.model_validate(_payload(movesRemaining=4))


def test_board_must_match_used_pieces():
    with pytest.raises(ValidationError):
        Puzzle.model_validate(_payload(usedPieces=["X", "I", "N", "Y", "U", "W", "L"]))


def test_duplicate_used_pieces_rejected():
    with pytest.raises(ValidationError):
        Puzzle.model_validate(_payload(usedPieces=["X", "I", "N", "Y", "U", "W", "W"],
                                       movesRemaining=5))


def test_from_board():
    board = Board.create_empty()
    board = board.place_piece("I", Orientation(), 0, 0, Player.ONE)
    board = board.place_piece("L", Orientation(), 0, 1, Player.TWO)
    puzzle = Puzzle.from_board(board)
    assert puzzle.used_pieces == ["I", "L"]
    assert puzzle.moves_remaining == 10
    assert puzzle.to_board().to_state_string() == board.to_state_string()


def test_difficulty_tiers():
    assert PuzzleDifficulty.EASY.moves_remaining == 3
    assert PuzzleDifficulty.MEDIUM.moves_remaining == 5
    assert PuzzleDifficulty.HARD.moves_remaining == 7
    assert PuzzleDifficulty.from_moves_remaining(7) == PuzzleDifficulty.HARD
    with pytest.raises(ValueError):
        PuzzleDifficulty.from_moves_remaining(4)
