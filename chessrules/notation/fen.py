"""FEN reading and writing, including variant extensions.

Extensions understood on input:
- Crazyhouse pockets as ``[QNp]`` after the placement or as a ninth rank,
  and ``~`` after promoted pieces.
- X-FEN and Shredder-FEN castling (rook files instead of ``KQkq``).
- Three-Check counters as a ``2+3`` remaining-checks field after the en
  passant square, or a trailing ``+1+0`` checks-given field.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ..engine.bitboard import (
    BB_FILES,
    BB_RANK_1,
    BB_RANK_8,
    lsb,
    msb,
    parse_square,
    scan_reversed,
    square_file,
    square_name,
)
from ..engine.board import Board
from ..engine.errors import InvalidFen
from ..engine.position import Position
from ..engine.types import COLORS, Color, Pockets, Variant


STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

STARTING_FENS = {
    Variant.STANDARD: STARTING_FEN,
    Variant.CHESS960: STARTING_FEN,
    Variant.CRAZYHOUSE: "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR[] w KQkq - 0 1",
    Variant.KING_OF_THE_HILL: STARTING_FEN,
    Variant.ANTICHESS: "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w - - 0 1",
    Variant.THREE_CHECK: "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 3+3 0 1",
    Variant.HORDE: "rnbqkbnr/pppppppp/8/1PP2PP1/PPPPPPPP/PPPPPPPP/PPPPPPPP/PPPPPPPP w kq - 0 1",
    Variant.ATOMIC: STARTING_FEN,
    Variant.RACING_KINGS: "8/8/8/8/8/8/krbnNBRK/qrbnNBRQ w - - 0 1",
}

_REMAINING_CHECKS = re.compile(r"^([0-3])\+([0-3])$")
_CHECKS_GIVEN = re.compile(r"^\+([0-3])\+([0-3])$")


def _split_pockets(placement: str) -> Tuple[str, Optional[str]]:
    if placement.endswith("]"):
        start = placement.find("[")
        if start < 0:
            raise InvalidFen("unmatched ']' in FEN board")
        return placement[:start], placement[start + 1 : -1]
    ranks = placement.split("/")
    if len(ranks) == 9:
        return "/".join(ranks[:8]), ranks[8]
    return placement, None


def _parse_castling(board: Board, text: str) -> int:
    rights = 0
    if text == "-":
        return rights
    for ch in text:
        color = Color.WHITE if ch.isupper() else Color.BLACK
        rank = BB_RANK_1 if color is Color.WHITE else BB_RANK_8
        candidates = board.rooks & board.by_color[color] & rank
        key = ch.lower()
        if key == "k":
            flag = msb(candidates) if candidates else None
        elif key == "q":
            flag = lsb(candidates) if candidates else None
        elif "a" <= key <= "h":
            on_file = candidates & BB_FILES[ord(key) - ord("a")]
            flag = lsb(on_file) if on_file else None
        else:
            raise InvalidFen(f"invalid castling character: {ch!r}")
        if flag is None:
            raise InvalidFen(f"no rook for castling right {ch!r}")
        rights |= 1 << flag
    return rights


def _parse_int(text: str, what: str) -> int:
    if not re.fullmatch(r"[0-9]+", text):
        raise InvalidFen(f"invalid {what}: {text!r}")
    return int(text)


def parse_fen(fen: str, variant: Variant = Variant.STANDARD) -> Position:
    """Create a position from a Forsyth–Edwards Notation (FEN) string.

    Args:
        fen (str): FEN string; halfmove clock and fullmove number may be
            omitted.
        variant (Variant): Rule set the position is validated against.

    Returns:
        Position: Position encoded by ``fen``.

    Raises:
        InvalidFen: If ``fen`` is empty, has the wrong number of fields, or
            contains invalid piece placement, castling rights, en passant
            square, check counters or move counters.
        InvalidBoard: If the text is well formed but the setup is not
            possible in ``variant``.
    """
    if not fen or not isinstance(fen, str):
        raise InvalidFen("FEN must be a non-empty string")
    parts = fen.strip().split()
    if len(parts) < 4:
        raise InvalidFen("FEN must have at least 4 fields")
    placement, stm, castling, ep = parts[:4]
    rest: List[str] = parts[4:]

    checks_given = (0, 0)
    if rest:
        m = _REMAINING_CHECKS.match(rest[0])
        if m:
            checks_given = (3 - int(m.group(1)), 3 - int(m.group(2)))
            rest = rest[1:]
    if rest:
        m = _CHECKS_GIVEN.match(rest[-1])
        if m:
            checks_given = (int(m.group(1)), int(m.group(2)))
            rest = rest[:-1]
    if len(rest) > 2:
        raise InvalidFen("FEN has too many fields")

    board_part, pocket_part = _split_pockets(placement)
    board = Board.from_board_fen(board_part, allow_promoted=True)

    pockets: Optional[Pockets] = None
    if variant is Variant.CRAZYHOUSE:
        try:
            pockets = Pockets.from_str(pocket_part or "")
        except ValueError:
            raise InvalidFen(f"invalid pocket: {pocket_part!r}") from None
    elif board.promoted:
        board = Board(board.by_role, board.by_color)

    if stm not in ("w", "b"):
        raise InvalidFen("side to move must be 'w' or 'b'")
    turn = Color.from_char(stm)

    castling_rights = _parse_castling(board, castling)

    ep_square: Optional[int] = None
    if ep != "-":
        try:
            ep_square = parse_square(ep)
        except ValueError:
            raise InvalidFen(f"invalid en passant square: {ep!r}") from None

    halfmove_clock = _parse_int(rest[0], "halfmove clock") if len(rest) > 0 else 0
    fullmove_number = _parse_int(rest[1], "fullmove number") if len(rest) > 1 else 1

    return Position.from_board(
        board,
        turn=turn,
        castling_rights=castling_rights,
        ep_square=ep_square,
        halfmove_clock=halfmove_clock,
        fullmove_number=max(fullmove_number, 1),
        variant=variant,
        pockets=pockets,
        checks_given=checks_given if variant is Variant.THREE_CHECK else (0, 0),
    )


def castling_fen(board: Board, castling_rights: int, shredder: bool = False) -> str:
    """Castling field; ``KQkq`` where unambiguous, rook files otherwise."""
    out = []
    for color in COLORS:
        rank = BB_RANK_1 if color is Color.WHITE else BB_RANK_8
        king = board.king_of(color)
        candidates = board.rooks & board.by_color[color] & rank
        for rook in scan_reversed(candidates & castling_rights):
            if not shredder and rook == lsb(candidates) and king is not None and rook < king:
                ch = "q"
            elif not shredder and rook == msb(candidates) and king is not None and king < rook:
                ch = "k"
            else:
                ch = "abcdefgh"[square_file(rook)]
            out.append(ch.upper() if color is Color.WHITE else ch)
    return "".join(out) or "-"


def to_fen(pos: Position, shredder: bool = False) -> str:
    """Serialize ``pos``; variant fields are written only where they apply."""
    crazyhouse = pos.variant is Variant.CRAZYHOUSE
    placement = pos.board.board_fen(promoted=crazyhouse)
    if crazyhouse and pos.pockets is not None:
        placement += f"[{pos.pockets}]"
    fields = [
        placement,
        pos.turn.char,
        castling_fen(pos.board, pos.castling_rights, shredder),
        square_name(pos.ep_square) if pos.ep_square is not None else "-",
    ]
    if pos.variant is Variant.THREE_CHECK:
        white, black = pos.checks_given
        fields.append(f"{3 - white}+{3 - black}")
    fields.append(str(pos.halfmove_clock))
    fields.append(str(pos.fullmove_number))
    return " ".join(fields)
