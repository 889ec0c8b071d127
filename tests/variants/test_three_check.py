from __future__ import annotations

import pytest

from chessrules.engine.errors import InvalidBoard
from chessrules.engine.outcome import Decisive
from chessrules.engine.perft import perft
from chessrules.engine.position import Position
from chessrules.engine.types import Color, Variant

TC = Variant.THREE_CHECK


def test_start_fen_and_perft() -> None:
    pos = Position.initial(TC)
    assert pos.fen() == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 3+3 0 1"
    assert perft(pos, 3) == 8902


def test_check_is_counted() -> None:
    pos = Position.initial(TC)
    for uci in ("e2e4", "f7f6", "d1h5"):
        pos = pos.play_uci(uci)
    assert pos.is_check()
    assert pos.checks_given == (1, 0)
    assert pos.fen() == "rnbqkbnr/ppppp1pp/5p2/7Q/4P3/8/PPPP1PPP/RNB1KBNR b KQkq - 2+3 1 2"


def test_lichess_checks_given_suffix() -> None:
    pos = Position.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1 +2+0", TC)
    assert pos.checks_given == (2, 0)
    assert " 1+3 " in pos.fen()


def test_third_check_wins() -> None:
    pos = Position.from_fen("4k3/8/8/8/8/8/8/R3K3 w - - 1+3 0 1", TC)
    after = pos.play_uci("a1a8")
    assert after.checks_given == (3, 0)
    assert after.is_variant_end()
    assert after.legal_moves() == []
    assert after.outcome() == Decisive(Color.WHITE)


def test_game_already_over_for_both_is_invalid() -> None:
    with pytest.raises(InvalidBoard):
        Position.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0+0 0 1", TC)


def test_counters_ignored_outside_three_check() -> None:
    pos = Position.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 1+2 0 1")
    assert pos.checks_given == (0, 0)
    assert pos.fen() == "4k3/8/8/8/8/8/8/4K3 w - - 0 1"


def test_only_bare_kings_are_insufficient() -> None:
    assert Position.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 3+3 0 1", TC).is_insufficient_material()
    assert not Position.from_fen("4k3/8/8/8/8/8/8/3NK3 w - - 3+3 0 1", TC).is_insufficient_material()
