from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from chessrules.engine.types import Variant
from chessrules.protocol.http.app import create_app
from chessrules.protocol.http.session import GameSession, InMemorySessionStore

START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def _client() -> TestClient:
    return TestClient(create_app())


def test_create_game_and_get_state() -> None:
    client = _client()
    r = client.post("/api/games")
    assert r.status_code == 200
    body = r.json()
    assert "game_id" in body and isinstance(body["game_id"], str) and body["game_id"]
    game_id = body["game_id"]
    assert body["fen"] == START_FEN
    assert body["variant"] == "chess"

    # Fetch state
    r2 = client.get(f"/api/games/{game_id}/state")
    assert r2.status_code == 200
    state = r2.json()
    assert state["game_id"] == game_id
    assert state["turn"] == "w"
    assert len(state["legal_moves"]) == 20
    assert state["result"] == "*"
    assert not state["game_over"]


def test_create_variant_game() -> None:
    client = _client()
    r = client.post("/api/games", json={"variant": "3check"})
    assert r.status_code == 200
    assert r.json()["fen"] == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 3+3 0 1"

    r960 = client.post("/api/games", json={"variant": "chess960", "chess960_index": 0})
    assert r960.json()["fen"].startswith("bbqnnrkr/")

    r_bad = client.post("/api/games", json={"variant": "bughouse"})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "bad_request"


def test_create_game_from_fen() -> None:
    client = _client()
    fen = "4k3/8/8/8/8/8/8/4K2R w K - 0 1"
    r = client.post("/api/games", json={"fen": fen})
    assert r.status_code == 200
    assert r.json()["fen"] == fen


def test_get_state_unknown_id_404() -> None:
    client = _client()
    r = client.get("/api/games/does-not-exist/state")
    assert r.status_code == 404
    body = r.json()
    assert "error" in body
    assert body["error"]["code"] == "not_found"


def test_set_position_validation_and_success() -> None:
    client = _client()
    # Create
    r = client.post("/api/games")
    game_id = r.json()["game_id"]

    # Invalid FEN
    r_bad = client.post(f"/api/games/{game_id}/position", json={"fen": ""})
    assert r_bad.status_code == 400
    assert r_bad.json()["error"]["code"] == "invalid_fen"

    r_board = client.post(f"/api/games/{game_id}/position", json={"fen": "8/8/8/8/8/8/8/8 w - - 0 1"})
    assert r_board.status_code == 400
    assert r_board.json()["error"]["code"] == "invalid_board"

    fen = "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1"
    r_ok = client.post(f"/api/games/{game_id}/position", json={"fen": fen})
    assert r_ok.status_code == 200
    state = r_ok.json()
    assert state["fen"] == fen
    assert "e1g1" in state["legal_moves"]


def test_moves_in_uci_and_san() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r1 = client.post(f"/api/games/{game_id}/move", json={"move": "e2e4"})
    assert r1.status_code == 200
    r2 = client.post(f"/api/games/{game_id}/move", json={"move": "e5", "notation": "san"})
    assert r2.status_code == 200
    r3 = client.post(f"/api/games/{game_id}/move", json={"move": "Nf3"})
    state = r3.json()
    assert state["move_history"] == ["e2e4", "e7e5", "g1f3"]
    assert state["san_history"] == ["e4", "e5", "Nf3"]
    assert state["last_move"] == "g1f3"
    assert state["turn"] == "b"


def test_bad_moves_are_rejected() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]

    r_illegal = client.post(f"/api/games/{game_id}/move", json={"move": "e2e5"})
    assert r_illegal.status_code == 400
    assert r_illegal.json()["error"]["code"] == "illegal_move"

    r_garbage = client.post(f"/api/games/{game_id}/move", json={"move": "zz", "notation": "san"})
    assert r_garbage.json()["error"]["code"] == "parse_error"

    r_uci_only = client.post(f"/api/games/{game_id}/move", json={"move": "Nf3", "notation": "uci"})
    assert r_uci_only.json()["error"]["code"] == "parse_error"


def test_checkmate_state() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    for san in ("f3", "e5", "g4", "Qh4"):
        r = client.post(f"/api/games/{game_id}/move", json={"move": san, "notation": "san"})
        assert r.status_code == 200
    state = r.json()
    assert state["checkmate"] and state["in_check"] and state["game_over"]
    assert state["result"] == "0-1"
    assert state["legal_moves"] == []
    assert state["san_history"][-1] == "Qh4#"


def test_delete_game() -> None:
    client = _client()
    game_id = client.post("/api/games").json()["game_id"]
    assert client.delete(f"/api/games/{game_id}").status_code == 204
    assert client.get(f"/api/games/{game_id}/state").status_code == 404
    assert client.delete(f"/api/games/{game_id}").status_code == 404


def test_store_lifecycle() -> None:
    store = InMemorySessionStore()
    gid = store.create()
    assert len(store) == 1
    game = store.get(gid)
    assert game is not None and game.position.variant is Variant.STANDARD
    store.set(gid, GameSession.new(Variant.ATOMIC))
    assert store.get(gid).position.variant is Variant.ATOMIC  # type: ignore[union-attr]
    with pytest.raises(KeyError):
        store.set("missing", GameSession.new())
    assert store.delete(gid)
    assert not store.delete(gid)
    assert store.get(gid) is None
