from __future__ import annotations

from chessrules.engine.outcome import Decisive
from chessrules.engine.perft import perft
from chessrules.engine.position import Position
from chessrules.engine.types import Color, Variant

ATOMIC = Variant.ATOMIC


def ucis(pos: Position) -> list[str]:
    return [pos.uci(m) for m in pos.legal_moves()]


def test_start_matches_standard_perft() -> None:
    assert perft(Position.initial(ATOMIC), 3) == 8902


def test_capture_next_to_king_explodes_it() -> None:
    pos = Position.from_fen("rnbqkbnr/pppppppp/8/6N1/8/8/PPPPPPPP/RNBQKB1R w KQkq - 0 1", ATOMIC)
    after = pos.play_uci("g5f7")
    assert after.fen() == "rnbq3r/ppppp1pp/8/8/8/8/PPPPPPPP/RNBQKB1R b KQ - 0 1"
    assert after.is_variant_end()
    assert after.legal_moves() == []
    assert after.outcome() == Decisive(Color.WHITE)


def test_explosion_spares_pawns_and_removes_capturer() -> None:
    pos = Position.from_fen("4k3/8/8/3p4/2B5/8/8/4K3 w - - 0 1", ATOMIC)
    assert pos.play_uci("c4d5").fen() == "4k3/8/8/8/8/8/8/4K3 b - - 0 1"


def test_king_cannot_capture() -> None:
    pos = Position.from_fen("4k3/8/8/8/8/8/4p3/4K3 w - - 0 1", ATOMIC)
    assert "e1e2" not in ucis(pos)


def test_kings_may_touch() -> None:
    pos = Position.from_fen("8/8/8/8/8/4k3/8/4K3 w - - 0 1", ATOMIC)
    assert "e1e2" in ucis(pos)
    after = pos.play_uci("e1e2")
    assert not after.is_check()


def test_exploded_king_position_round_trips() -> None:
    pos = Position.from_fen("2k5/3B4/8/8/8/3q4/8/3NK3 b - - 0 1", ATOMIC)
    after = pos.play_uci("d3d1")
    assert after.fen() == "2k5/3B4/8/8/8/8/8/8 w - - 0 2"
    assert Position.from_fen(after.fen(), ATOMIC) == after
    assert after.outcome() == Decisive(Color.BLACK)


def test_finished_game_fen_is_accepted() -> None:
    fen = "2kq4/3B3p/3p4/p1p5/8/P5P1/1P5P/RN6 w - - 0 22"
    pos = Position.from_fen(fen, ATOMIC)
    assert pos.fen() == fen
    assert pos.legal_moves() == []
    assert pos.outcome() == Decisive(Color.BLACK)
