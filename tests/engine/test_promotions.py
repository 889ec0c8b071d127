from __future__ import annotations

import pytest

from chessrules.engine.errors import IllegalMove
from chessrules.engine.move import Normal
from chessrules.engine.position import Position
from chessrules.engine.types import Role


def pawn_moves(pos: Position) -> list[str]:
    return [pos.uci(m) for m in pos.legal_moves() if isinstance(m, Normal) and m.role is Role.PAWN]


def test_push_promotion_generates_four_choices() -> None:
    pos = Position.from_fen("8/P6k/8/8/8/8/8/K7 w - - 0 1")
    assert sorted(pawn_moves(pos)) == ["a7a8b", "a7a8n", "a7a8q", "a7a8r"]


def test_capture_promotion() -> None:
    pos = Position.from_fen("1n5k/P7/8/8/8/8/8/K7 w - - 0 1")
    moves = pawn_moves(pos)
    assert len(moves) == 8
    assert "a7b8q" in moves and "a7b8n" in moves


def test_promotion_changes_piece_and_resets_clock() -> None:
    pos = Position.from_fen("8/P6k/8/8/8/8/8/K7 w - - 7 30")
    after = pos.play_uci("a7a8q")
    assert after.fen() == "Q7/7k/8/8/8/8/8/K7 b - - 0 30"


def test_promotion_requires_piece_in_uci() -> None:
    pos = Position.from_fen("8/P6k/8/8/8/8/8/K7 w - - 0 1")
    with pytest.raises(IllegalMove):
        pos.play_uci("a7a8")


def test_underpromotion_san() -> None:
    pos = Position.from_fen("8/P6k/8/8/8/8/8/K7 w - - 0 1")
    after = pos.play_san("a8=N")
    assert after.board.board_fen().startswith("N7")
