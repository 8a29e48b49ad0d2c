"""
Tests for the web API.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from engine.puzzle_generator import PuzzleGenerationError
from schemas.game_config import EngineConfig
from webapi.app import create_app

BUILTIN_PAYLOAD = {
    "boardState": "GGGXGGGGGIXXXGNGGIGXGNNHGIUUUNHHGIUWUNGHGIWWFFGHGWWGGFFGGGGGGFGG",
    "usedPieces": ["X", "I", "N", "Y", "U", "W", "F"],
    "movesRemaining": 5,
}


def _client():
    return TestClient(create_app(EngineConfig(seed=1, puzzle_max_attempts=200)))


def _new_game(client, **body):
    resp = client.post("/api/games", json=body)
    assert resp.status_code == 200
    return resp.json()["game_id"]


def _place(client, game_id, piece, row, col):
    assert client.post(f"/api/games/{game_id}/select", json={"piece": piece}).json()["success"]
    assert client.post(f"/api/games/{game_id}/anchor", json={"row": row, "col": col}).json()["success"]
    return client.post(f"/api/games/{game_id}/confirm")


def test_health():
    resp = _client().get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_create_and_get_game():
    client = _client()
    game_id = _new_game(client)
    state = client.get(f"/api/games/{game_id}").json()
    assert state["phase"] == "awaiting_selection"
    assert state["current_player"] == 1
    assert state["board_state"] == "G" * 64
    assert len(state["available_pieces"]) == 12
    assert state["game_over"] is False


def test_unknown_game_is_404():
    resp = _client().get("/api/games/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"] == "HTTP Error"


def test_legal_confirm_switches_player():
    client = _client()
    game_id = _new_game(client)
    resp = _place(client, game_id, "i", 0, 0)
    body = resp.json()
    assert body["success"] is True
    assert body["game_state"]["current_player"] == 2
    assert body["game_state"]["used_pieces"] == ["I"]
    assert body["game_state"]["board"][4][0] == 1


def test_illegal_confirm_changes_nothing():
    client = _client()
    game_id = _new_game(client)
    body = _place(client, game_id, "I", 4, 0).json()
    assert body["success"] is False
    state = body["game_state"]
    assert state["phase"] == "piece_pending"
    assert state["pending"]["legal"] is False
    assert state["board_state"] == "G" * 64
    assert state["current_player"] == 1


def test_orient_nudge_cancel_and_undo():
    client = _client()
    game_id = _new_game(client)
    client.post(f"/api/games/{game_id}/select", json={"piece": "L"})
    body = client.post(f"/api/games/{game_id}/orient", json={"rotate": 1, "flip": True}).json()
    assert body["game_state"]["pending"]["rotation"] == 1
    assert body["game_state"]["pending"]["flip"] is True

    client.post(f"/api/games/{game_id}/anchor", json={"row": 0, "col": 0})
    body = client.post(f"/api/games/{game_id}/anchor", json={"direction": "up"}).json()
    assert body["game_state"]["pending"]["row"] == 0

    body = client.post(f"/api/games/{game_id}/cancel").json()
    assert body["success"] is True
    assert body["game_state"]["pending"] is None

    assert _place(client, game_id, "I", 0, 0).json()["success"]
    body = client.post(f"/api/games/{game_id}/undo").json()
    assert body["success"] is True
    assert body["game_state"]["board_state"] == "G" * 64
    assert client.post(f"/api/games/{game_id}/undo").json()["success"] is False


def test_anchor_requires_coordinates():
    client = _client()
    game_id = _new_game(client)
    client.post(f"/api/games/{game_id}/select", json={"piece": "T"})
    resp = client.post(f"/api/games/{game_id}/anchor", json={})
    assert resp.status_code == 400


def test_select_unknown_piece_is_rejected():
    client = _client()
    game_id = _new_game(client)
    body = client.post(f"/api/games/{game_id}/select", json={"piece": "Q"}).json()
    assert body["success"] is False


def test_ai_opponent_replies_after_confirm():
    client = _client()
    game_id = _new_game(client, opponent="ai", ai_difficulty="beginner", ai_seed=3)
    body = _place(client, game_id, "I", 0, 0).json()
    state = body["game_state"]
    assert len(state["history"]) == 2
    assert state["history"][1]["player"] == 2
    assert state["current_player"] == 1
    assert state["ai_difficulty"] == "beginner"


def test_ai_move_endpoint():
    client = _client()
    game_id = _new_game(client)
    body = client.post(f"/api/games/{game_id}/ai-move").json()
    assert body["success"] is True
    assert len(body["game_state"]["history"]) == 1


def test_game_from_puzzle():
    client = _client()
    game_id = _new_game(client, puzzle=BUILTIN_PAYLOAD)
    state = client.get(f"/api/games/{game_id}").json()
    assert sorted(state["used_pieces"]) == sorted(BUILTIN_PAYLOAD["usedPieces"])
    assert "H" not in state["board_state"]


def test_validate_puzzle():
    client = _client()
    resp = client.post("/api/puzzles/validate", json=BUILTIN_PAYLOAD)
    assert resp.status_code == 200
    assert resp.json()["valid"] is True
    assert resp.json()["legal_move_count"] > 0


def test_malformed_puzzle_is_400():
    client = _client()
    bad = dict(BUILTIN_PAYLOAD, boardState=BUILTIN_PAYLOAD["boardState"][:63])
    resp = client.post("/api/puzzles/validate", json=bad)
    assert resp.status_code == 400
    assert resp.json()["error"] == "Validation Error"


def test_generate_puzzle():
    client = _client()
    resp = client.post("/api/puzzles", json={"difficulty": "hard"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["movesRemaining"] == 7
    assert len(body["usedPieces"]) == 5
    assert body["solution"]
    assert client.post("/api/puzzles/validate", json=body).json()["valid"] is True


def test_builtin_puzzle_lookup():
    client = _client()
    resp = client.get("/api/puzzles/builtin/endgame_position")
    assert resp.status_code == 200
    assert resp.json()["movesRemaining"] == 5
    assert "solution" not in resp.json()
    assert client.get("/api/puzzles/builtin/nope").status_code == 404


def test_generation_failure_is_503():
    app = create_app(EngineConfig(seed=1))
    client = TestClient(app)
    failing = AsyncMock(side_effect=PuzzleGenerationError("no luck"))
    with patch.object(app.state.puzzle_generator, "generate", failing):
        resp = client.post("/api/puzzles", json={"difficulty": "easy", "allow_fallback": True})
    assert resp.status_code == 503
    # easy, then medium, then hard
    assert [c.args[0] for c in failing.call_args_list] == [3, 5, 7]


def test_configured_defaults_apply():
    client = TestClient(create_app(EngineConfig(ai_difficulty="expert", puzzle_difficulty="hard",
                                                seed=2)))
    game_id = _new_game(client, opponent="ai")
    assert client.get(f"/api/games/{game_id}").json()["ai_difficulty"] == "expert"
    assert client.post("/api/puzzles", json={}).json()["movesRemaining"] == 7


def test_undo_against_ai_returns_turn_to_human():
    client = _client()
    game_id = _new_game(client, opponent="ai", ai_difficulty="beginner", ai_seed=3)
    assert len(_place(client, game_id, "I", 0, 0).json()["game_state"]["history"]) == 2

    body = client.post(f"/api/games/{game_id}/undo").json()
    assert body["success"] is True
    state = body["game_state"]
    assert state["current_player"] == 1
    assert state["history"] == []
    assert state["board_state"] == "G" * 64
    assert client.post(f"/api/games/{game_id}/select", json={"piece": "I"}).json()["success"]


def test_human_cannot_move_for_ai_seat():
    app = create_app(EngineConfig(seed=1))
    client = TestClient(app)
    game_id = _new_game(client, opponent="ai", ai_seed=3)
    # The AI produces nothing in time, leaving its seat to move
    with patch.object(app.state.game_manager, "make_ai_move", AsyncMock(return_value=None)):
        state = _place(client, game_id, "I", 0, 0).json()["game_state"]
    assert state["current_player"] == 2

    for action, body in [("select", {"piece": "L"}), ("anchor", {"row": 3, "col": 3}),
                         ("orient", {"rotate": 1}), ("cancel", None)]:
        resp = client.post(f"/api/games/{game_id}/{action}", json=body)
        assert resp.json()["success"] is False
        assert resp.json()["message"] == "It is the AI's turn"
    assert client.post(f"/api/games/{game_id}/confirm").json()["success"] is False
    assert len(client.get(f"/api/games/{game_id}").json()["history"]) == 1

    # Undo hands the turn straight back to the human
    state = client.post(f"/api/games/{game_id}/undo").json()["game_state"]
    assert state["current_player"] == 1
    assert state["history"] == []


def test_ai_move_for_stalled_ai_seat():
    app = create_app(EngineConfig(seed=1))
    client = TestClient(app)
    game_id = _new_game(client, opponent="ai", ai_seed=3)
    with patch.object(app.state.game_manager, "make_ai_move", AsyncMock(return_value=None)):
        _place(client, game_id, "I", 0, 0)
    body = client.post(f"/api/games/{game_id}/ai-move").json()
    assert body["success"] is True
    assert body["game_state"]["current_player"] == 1
    assert [h["player"] for h in body["game_state"]["history"]] == [1, 2]


def test_validation_delegates_to_generator():
    app = create_app(EngineConfig(seed=1))
    client = TestClient(app)
    with patch.object(app.state.puzzle_generator, "validate_puzzle", return_value=False) as check:
        body = client.post("/api/puzzles/validate", json=BUILTIN_PAYLOAD).json()
    assert check.call_count == 1
    assert body == {"valid": False, "legal_move_count": 0}


def test_default_puzzle_request_succeeds():
    for seed in range(5):
        client = TestClient(create_app(EngineConfig(seed=seed)))
        resp = client.post("/api/puzzles", json={})
        assert resp.status_code == 200
        assert resp.json()["movesRemaining"] == 3
