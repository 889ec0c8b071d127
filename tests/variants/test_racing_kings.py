from __future__ import annotations

import pytest

from chessrules.engine.errors import InvalidBoard
from chessrules.engine.outcome import Decisive, Draw
from chessrules.engine.perft import perft
from chessrules.engine.position import Position
from chessrules.engine.types import Color, Variant

RK = Variant.RACING_KINGS


def test_start_perft() -> None:
    assert perft(Position.initial(RK), 1) == 21


def test_no_move_gives_check() -> None:
    pos = Position.initial(RK)
    for move in pos.legal_moves():
        assert not pos.play(move).is_check()


def test_white_reaching_goal_wins_when_black_cannot_follow() -> None:
    pos = Position.from_fen("8/K7/8/8/8/8/8/7k w - - 0 1", RK)
    after = pos.play_uci("a7a8")
    assert after.is_variant_end()
    assert after.outcome() == Decisive(Color.WHITE)


def test_black_catching_up_draws() -> None:
    pos = Position.from_fen("8/K6k/8/8/8/8/8/8 w - - 0 1", RK)
    after = pos.play_uci("a7a8")
    assert not after.is_variant_end()
    assert "h7h8" in [after.uci(m) for m in after.legal_moves()]
    final = after.play_uci("h7h8")
    assert final.outcome() == Draw()


def test_black_reaching_goal_wins() -> None:
    pos = Position.from_fen("8/k7/8/8/8/8/8/7K b - - 0 1", RK)
    assert pos.play_uci("a7a8").outcome() == Decisive(Color.BLACK)


def test_check_is_rejected() -> None:
    with pytest.raises(InvalidBoard):
        Position.from_fen("8/8/8/8/8/K7/8/k6R w - - 0 1", RK)
