from __future__ import annotations

import pytest

from chessrules.engine.bitboard import BB_SQUARES, parse_square
from chessrules.engine.board import STANDARD_BOARD_FEN, Board
from chessrules.engine.errors import InvalidBoard, InvalidFen
from chessrules.engine.types import Color, Piece, Role


def test_standard_board_fen_round_trip() -> None:
    b = Board.standard()
    assert b.board_fen() == STANDARD_BOARD_FEN
    assert Board.from_board_fen(STANDARD_BOARD_FEN) == b


def test_standard_board_queries() -> None:
    b = Board.standard()
    assert b.piece_at(parse_square("e1")) == Piece(Role.KING, Color.WHITE)
    assert b.piece_at(parse_square("d8")) == Piece(Role.QUEEN, Color.BLACK)
    assert b.piece_at(parse_square("e4")) is None
    assert b.king_of(Color.BLACK) == parse_square("e8")
    assert b.material(Color.WHITE) == (8, 2, 2, 2, 1, 1)
    assert len(b.piece_map()) == 32


@pytest.mark.parametrize(
    "text",
    [
        "8/8/8",
        "rnbqkbnr/pppppppp/9/8/8/8/PPPPPPPP/RNBQKBNR",
        "rnbqkbnx/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
        "rnbqkbnr/ppppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
        "rnbqkbnr/ppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
    ],
)
def test_from_board_fen_rejects_malformed(text: str) -> None:
    with pytest.raises(InvalidFen):
        Board.from_board_fen(text)


def test_promoted_markers() -> None:
    text = "4k3/8/8/8/8/8/8/Q~3K3"
    with pytest.raises(InvalidFen):
        Board.from_board_fen(text)
    b = Board.from_board_fen(text, allow_promoted=True)
    assert b.promoted == BB_SQUARES[parse_square("a1")]
    assert b.board_fen(promoted=True) == text
    assert b.board_fen() == "4k3/8/8/8/8/8/8/Q3K3"


def test_inconsistent_bitboards_rejected() -> None:
    with pytest.raises(InvalidBoard):
        Board((1, 0, 0, 0, 0, 0), (1, 1))
    with pytest.raises(InvalidBoard):
        Board((1, 1, 0, 0, 0, 0), (1, 0))
    with pytest.raises(InvalidBoard):
        Board((1, 0, 0, 0, 0, 0), (3, 0))


def test_attacks_to() -> None:
    b = Board.standard()
    f3 = parse_square("f3")
    expected = BB_SQUARES[parse_square("e2")] | BB_SQUARES[parse_square("g2")] | BB_SQUARES[parse_square("g1")]
    assert b.attacks_to(f3, Color.WHITE, b.occupied) == expected
    assert not b.attacks_to(f3, Color.BLACK, b.occupied)
