"""SAN (Standard Algebraic Notation) conversion and parsing."""

from __future__ import annotations

import re
from typing import List, Optional

from ..engine.bitboard import parse_square, square_file, square_name, square_rank
from ..engine.errors import AmbiguousSan, IllegalMove, ParseError
from ..engine.move import Castle, Drop, Move, Normal
from ..engine.position import Position
from ..engine.types import Role


_SAN_MOVE = re.compile(r"^([NBKRQ])?([a-h])?([1-8])?[\-x]?([a-h][1-8])(=?[nbrqkNBRQK])?[\+#]?\Z")
_SAN_DROP = re.compile(r"^([PNBRQ])?@([a-h][1-8])[\+#]?\Z")
_SAN_CASTLE = re.compile(r"^([O0])-\1(-\1)?[\+#]?\Z")


def _suffix(pos: Position, move: Move) -> str:
    after = pos.play_unchecked(move)
    if after.is_checkmate():
        return "#"
    if after.is_check():
        return "+"
    return ""


def move_to_san(pos: Position, move: Move) -> str:
    """Convert a legal *move* to SAN given the position *pos* before the move."""
    if isinstance(move, Castle):
        return ("O-O" if move.is_kingside else "O-O-O") + _suffix(pos, move)

    if isinstance(move, Drop):
        return f"{move.role.upper}@{square_name(move.to_sq)}" + _suffix(pos, move)

    san = ""
    if move.role is Role.PAWN:
        if move.is_capture:
            san += "abcdefgh"[square_file(move.from_sq)]
    else:
        san += move.role.upper
        # Disambiguation
        others = [
            m.from_sq
            for m in pos.legal_moves()
            if isinstance(m, Normal)
            and m.role is move.role
            and m.to_sq == move.to_sq
            and m.from_sq != move.from_sq
        ]
        if others:
            same_file = any(square_file(sq) == square_file(move.from_sq) for sq in others)
            same_rank = any(square_rank(sq) == square_rank(move.from_sq) for sq in others)
            if not same_file:
                san += "abcdefgh"[square_file(move.from_sq)]
            elif not same_rank:
                san += str(square_rank(move.from_sq) + 1)
            else:
                san += square_name(move.from_sq)

    if move.is_capture:
        san += "x"
    san += square_name(move.to_sq)
    if move.promotion is not None:
        san += "=" + move.promotion.upper
    return san + _suffix(pos, move)


def _pick(san: str, candidates: List[Move]) -> Move:
    if not candidates:
        raise IllegalMove(f"illegal move: {san!r}")
    if len(candidates) > 1:
        raise AmbiguousSan(f"ambiguous move: {san!r}")
    return candidates[0]


def parse_san(pos: Position, san: str) -> Move:
    """Parse a SAN string into a legal move of ``pos``.

    Raises:
        ParseError: If ``san`` is not SAN at all.
        IllegalMove: If no legal move matches.
        AmbiguousSan: If more than one legal move matches.
    """
    clean = san.strip().rstrip("!?")
    legal = pos.legal_moves()

    m = _SAN_CASTLE.match(clean)
    if m:
        kingside = m.group(2) is None
        return _pick(san, [mv for mv in legal if isinstance(mv, Castle) and mv.is_kingside == kingside])

    m = _SAN_DROP.match(clean)
    if m:
        role = Role.from_symbol(m.group(1) or "P")
        to_sq = parse_square(m.group(2))
        return _pick(san, [mv for mv in legal if isinstance(mv, Drop) and mv.role is role and mv.to_sq == to_sq])

    m = _SAN_MOVE.match(clean)
    if not m:
        raise ParseError(f"invalid san: {san!r}")

    role = Role.from_symbol(m.group(1)) if m.group(1) else Role.PAWN
    from_file: Optional[int] = "abcdefgh".index(m.group(2)) if m.group(2) else None
    from_rank: Optional[int] = int(m.group(3)) - 1 if m.group(3) else None
    to_sq = parse_square(m.group(4))
    promotion: Optional[Role] = Role.from_symbol(m.group(5)[-1]) if m.group(5) else None
    if promotion is not None and role is not Role.PAWN:
        raise ParseError(f"only pawns promote: {san!r}")

    if role is Role.PAWN and from_file is None:
        # Pawn moves without an origin file are pushes along the file.
        from_file = square_file(to_sq)

    candidates: List[Move] = []
    for mv in legal:
        if isinstance(mv, (Castle, Drop)):
            continue
        if mv.role is not role or mv.to_sq != to_sq or mv.promotion is not promotion:
            continue
        if from_file is not None and square_file(mv.from_sq) != from_file:
            continue
        if from_rank is not None and square_rank(mv.from_sq) != from_rank:
            continue
        candidates.append(mv)
    return _pick(san, candidates)
