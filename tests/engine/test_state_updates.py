from __future__ import annotations

import pytest

from chessrules.engine.bitboard import parse_square
from chessrules.engine.errors import IllegalMove
from chessrules.engine.move import Normal
from chessrules.engine.position import Position
from chessrules.engine.types import Color, Role


def test_quiet_moves_increment_halfmove_and_fullmove() -> None:
    p1 = Position.initial().play_uci("g1f3")
    assert (p1.turn, p1.halfmove_clock, p1.fullmove_number) == (Color.BLACK, 1, 1)
    p2 = p1.play_uci("g8f6")
    assert (p2.turn, p2.halfmove_clock, p2.fullmove_number) == (Color.WHITE, 2, 2)


def test_pawn_move_resets_halfmove() -> None:
    pos = Position.initial().play_uci("g1f3").play_uci("e7e5")
    assert pos.halfmove_clock == 0


def test_capture_resets_halfmove() -> None:
    pos = Position.initial()
    for uci in ("g1f3", "b8c6", "f3g5", "c6d4", "g5f7"):
        pos = pos.play_uci(uci)
    assert pos.halfmove_clock == 0
    assert pos.board.role_at(parse_square("f7")) is Role.KNIGHT


def test_play_does_not_mutate() -> None:
    pos = Position.initial()
    before = pos.fen()
    after = pos.play_uci("e2e4")
    assert pos.fen() == before
    assert after is not pos
    assert after != pos


def test_illegal_move_rejected() -> None:
    pos = Position.initial()
    bogus = Normal(Role.PAWN, parse_square("e2"), parse_square("e5"))
    assert not pos.is_legal(bogus)
    with pytest.raises(IllegalMove):
        pos.play(bogus)


def test_move_into_check_rejected() -> None:
    # The e2 bishop is pinned against the king by the e8 rook
    pos = Position.from_fen("4r1k1/8/8/8/8/8/4B3/4K3 w - - 0 1")
    assert not any(pos.uci(m).startswith("e2") for m in pos.legal_moves())
