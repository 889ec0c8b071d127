from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..engine.bitboard import parse_square, square_name
from ..engine.errors import IllegalMove, ParseError
from ..engine.move import Castle, Drop, Move
from ..engine.position import Position
from ..engine.types import Role, Variant


PROMOTION_CHARS = {"q", "r", "b", "n", "k"}


@dataclass(frozen=True)
class UciMove:
    """Context-free UCI move text, decoded.

    Attributes:
        from_sq (Optional[int]): Origin square; None for drops and null moves.
        to_sq (Optional[int]): Destination square; None for the null move.
        promotion (Optional[Role]): Promotion role, if any.
        drop (Optional[Role]): Dropped role for ``N@f3`` style moves.
    """

    from_sq: Optional[int]
    to_sq: Optional[int]
    promotion: Optional[Role] = None
    drop: Optional[Role] = None

    @property
    def is_null(self) -> bool:
        return self.to_sq is None

    def __str__(self) -> str:
        if self.to_sq is None:
            return "0000"
        if self.drop is not None:
            return f"{self.drop.upper}@{square_name(self.to_sq)}"
        assert self.from_sq is not None
        promo = self.promotion.symbol if self.promotion is not None else ""
        return square_name(self.from_sq) + square_name(self.to_sq) + promo


def parse_uci(text: str) -> UciMove:
    """Parse a UCI move string.

    Args:
        text (str): Move such as ``"e2e4"``, ``"e7e8q"``, ``"Q@d4"`` or ``"0000"``.

    Returns:
        UciMove: Parsed move.

    Raises:
        ParseError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if text == "0000":
        return UciMove(None, None)
    try:
        if len(text) == 4 and text[1] == "@":
            role = Role.from_symbol(text[0])
            if role is Role.KING or not text[0].isupper():
                raise ValueError(f"invalid drop piece: {text[0]!r}")
            return UciMove(None, parse_square(text[2:4]), drop=role)
        if len(text) not in (4, 5):
            raise ValueError(f"invalid UCI move length: {text!r}")
        from_sq = parse_square(text[0:2])
        to_sq = parse_square(text[2:4])
        promotion: Optional[Role] = None
        if len(text) == 5:
            if text[4] not in PROMOTION_CHARS:
                raise ValueError(f"invalid promotion piece: {text[4]!r}")
            promotion = Role.from_symbol(text[4])
    except ValueError as e:
        raise ParseError(str(e)) from None
    if from_sq == to_sq:
        raise ParseError(f"origin equals destination: {text!r}")
    return UciMove(from_sq, to_sq, promotion)


def move_to_uci(move: Move, chess960: bool = False) -> str:
    """Serialize ``move``; castling is king-to-rook only with ``chess960``."""
    if isinstance(move, Drop):
        return str(UciMove(None, move.to_sq, drop=move.role))
    if isinstance(move, Castle):
        to_sq = move.rook_from if chess960 else move.king_to
        return square_name(move.king_from) + square_name(to_sq)
    return str(UciMove(move.from_sq, move.to_sq, move.promotion))


def uci_to_move(pos: Position, text: str) -> Move:
    """Resolve UCI text to the legal move it denotes in ``pos``.

    Castling is accepted as king-to-rook everywhere and as the king's
    two-square step outside Chess960.

    Raises:
        ParseError: If ``text`` is malformed.
        IllegalMove: If no legal move matches.
    """
    uci = parse_uci(text)
    if uci.is_null:
        raise IllegalMove("null move is not playable")
    legal = pos.legal_moves()

    for m in legal:
        if isinstance(m, Drop):
            if uci.drop is m.role and uci.to_sq == m.to_sq:
                return m
        elif isinstance(m, Castle):
            continue
        elif uci.drop is None and m.from_sq == uci.from_sq and m.to_sq == uci.to_sq:
            if m.promotion is uci.promotion:
                return m

    if uci.drop is None and uci.promotion is None:
        standard_notation = pos.variant is not Variant.CHESS960
        for m in legal:
            if not isinstance(m, Castle) or m.king_from != uci.from_sq:
                continue
            if uci.to_sq == m.rook_from or (standard_notation and uci.to_sq == m.king_to):
                return m

    raise IllegalMove(f"illegal move: {text!r}")
