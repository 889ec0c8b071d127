from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from .attacks import (
    KING_ATTACKS,
    KNIGHT_ATTACKS,
    PAWN_ATTACKS,
    bishop_attacks,
    rook_attacks,
)
from .bitboard import (
    BB_ALL,
    BB_RANK_1,
    BB_RANK_2,
    BB_RANK_7,
    BB_RANK_8,
    BB_SQUARES,
    scan_forward,
    single_square,
    square,
)
from .errors import InvalidBoard, InvalidFen
from .types import ROLES, Color, Piece, Role


STANDARD_BOARD_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
HORDE_BOARD_FEN = "rnbqkbnr/pppppppp/8/1PP2PP1/PPPPPPPP/PPPPPPPP/PPPPPPPP/PPPPPPPP"
RACING_KINGS_BOARD_FEN = "8/8/8/8/8/8/krbnNBRK/qrbnNBRQ"


@dataclass(frozen=True)
class Board:
    """Piece placement as one bitboard per role and one per color.

    Notes:
    - Squares are 0..63 (a1=0 .. h8=63), rank-major from white's perspective.
    - ``promoted`` marks pieces that came from a promotion; only Crazyhouse
      looks at it (captured promoted pieces return to the pocket as pawns).
    - Boards are immutable values; editing helpers return new boards.
    """

    by_role: Tuple[int, int, int, int, int, int]
    by_color: Tuple[int, int]
    promoted: int = 0

    def __post_init__(self) -> None:
        if len(self.by_role) != 6 or len(self.by_color) != 2:
            raise InvalidBoard("board needs 6 role and 2 color bitboards")
        white, black = self.by_color
        if (white | black) & ~BB_ALL or white < 0 or black < 0:
            raise InvalidBoard("bitboard exceeds 64 squares")
        if white & black:
            raise InvalidBoard("square occupied by both colors")
        union = 0
        for bb in self.by_role:
            if union & bb:
                raise InvalidBoard("square occupied by more than one role")
            union |= bb
        if union != white | black:
            raise InvalidBoard("role and color occupancy differ")
        if self.promoted & ~union:
            raise InvalidBoard("promoted marker on an empty square")

    # --- Construction -----------------------------------------------------

    @classmethod
    def standard(cls) -> "Board":
        return cls.from_board_fen(STANDARD_BOARD_FEN)

    @classmethod
    def horde(cls) -> "Board":
        return cls.from_board_fen(HORDE_BOARD_FEN)

    @classmethod
    def racing_kings(cls) -> "Board":
        return cls.from_board_fen(RACING_KINGS_BOARD_FEN)

    @classmethod
    def from_back_rank(cls, back_rank: Sequence[Role]) -> "Board":
        """Build a start position with ``back_rank`` (files a..h) for both sides."""
        if len(back_rank) != 8:
            raise InvalidBoard("back rank must list 8 roles")
        roles = [0] * 6
        for f, role in enumerate(back_rank):
            roles[role] |= BB_SQUARES[square(f, 0)] | BB_SQUARES[square(f, 7)]
        roles[Role.PAWN] |= BB_RANK_2 | BB_RANK_7
        return cls(
            tuple(roles),  # type: ignore[arg-type]
            (BB_RANK_1 | BB_RANK_2, BB_RANK_7 | BB_RANK_8),
        )

    @classmethod
    def from_board_fen(cls, text: str, *, allow_promoted: bool = False) -> "Board":
        """Parse the piece-placement field of a FEN.

        Args:
            text (str): Eight ``/``-separated ranks, rank 8 first.
            allow_promoted (bool): Accept ``~`` promoted markers after pieces.

        Returns:
            Board: The parsed placement.

        Raises:
            InvalidFen: On a wrong rank count, bad characters or a rank that
                does not describe exactly eight squares.
        """
        ranks = text.split("/")
        if len(ranks) != 8:
            raise InvalidFen("board must have 8 ranks")
        roles = [0] * 6
        colors = [0, 0]
        promoted = 0
        for rank_idx, row in enumerate(reversed(ranks)):
            file_idx = 0
            prev_piece = False
            for ch in row:
                if ch in "0123456789":
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise InvalidFen("invalid empty count in FEN rank")
                    file_idx += n
                    prev_piece = False
                elif ch == "~":
                    if not allow_promoted or not prev_piece:
                        raise InvalidFen("unexpected '~' in FEN rank")
                    promoted |= BB_SQUARES[square(file_idx - 1, rank_idx)]
                    prev_piece = False
                else:
                    try:
                        piece = Piece.from_symbol(ch)
                    except ValueError:
                        raise InvalidFen(f"invalid piece in FEN: {ch!r}") from None
                    if file_idx >= 8:
                        raise InvalidFen("too many squares in FEN rank")
                    bb = BB_SQUARES[square(file_idx, rank_idx)]
                    roles[piece.role] |= bb
                    colors[piece.color] |= bb
                    file_idx += 1
                    prev_piece = True
                if file_idx > 8:
                    raise InvalidFen("too many squares in FEN rank")
            if file_idx != 8:
                raise InvalidFen("FEN rank does not cover 8 files")
        return cls(tuple(roles), tuple(colors), promoted)  # type: ignore[arg-type]

    def board_fen(self, promoted: bool = False) -> str:
        rows = []
        for rank in range(7, -1, -1):
            row = []
            empty = 0
            for f in range(8):
                sq = square(f, rank)
                piece = self.piece_at(sq)
                if piece is None:
                    empty += 1
                    continue
                if empty:
                    row.append(str(empty))
                    empty = 0
                row.append(piece.symbol)
                if promoted and self.promoted & BB_SQUARES[sq]:
                    row.append("~")
            if empty:
                row.append(str(empty))
            rows.append("".join(row))
        return "/".join(rows)

    # --- Queries ----------------------------------------------------------

    @property
    def occupied(self) -> int:
        return self.by_color[0] | self.by_color[1]

    @property
    def white(self) -> int:
        return self.by_color[Color.WHITE]

    @property
    def black(self) -> int:
        return self.by_color[Color.BLACK]

    @property
    def pawns(self) -> int:
        return self.by_role[Role.PAWN]

    @property
    def knights(self) -> int:
        return self.by_role[Role.KNIGHT]

    @property
    def bishops(self) -> int:
        return self.by_role[Role.BISHOP]

    @property
    def rooks(self) -> int:
        return self.by_role[Role.ROOK]

    @property
    def queens(self) -> int:
        return self.by_role[Role.QUEEN]

    @property
    def kings(self) -> int:
        return self.by_role[Role.KING]

    @property
    def rooks_and_queens(self) -> int:
        return self.by_role[Role.ROOK] | self.by_role[Role.QUEEN]

    @property
    def bishops_and_queens(self) -> int:
        return self.by_role[Role.BISHOP] | self.by_role[Role.QUEEN]

    def pieces(self, role: Role, color: Color) -> int:
        return self.by_role[role] & self.by_color[color]

    def king_of(self, color: Color) -> Optional[int]:
        """Square of ``color``'s king, or None if there is not exactly one."""
        return single_square(self.by_role[Role.KING] & self.by_color[color])

    def role_at(self, sq: int) -> Optional[Role]:
        bb = BB_SQUARES[sq]
        for role in ROLES:
            if self.by_role[role] & bb:
                return role
        return None

    def color_at(self, sq: int) -> Optional[Color]:
        bb = BB_SQUARES[sq]
        if self.by_color[0] & bb:
            return Color.WHITE
        if self.by_color[1] & bb:
            return Color.BLACK
        return None

    def piece_at(self, sq: int) -> Optional[Piece]:
        role = self.role_at(sq)
        if role is None:
            return None
        color = self.color_at(sq)
        assert color is not None
        return Piece(role, color)

    def piece_map(self) -> Dict[int, Piece]:
        out: Dict[int, Piece] = {}
        for sq in scan_forward(self.occupied):
            piece = self.piece_at(sq)
            assert piece is not None
            out[sq] = piece
        return out

    def attacks_to(self, sq: int, attacker: Color, occupied: int) -> int:
        """Squares of ``attacker``'s pieces that attack ``sq``.

        Args:
            sq (int): Target square.
            attacker (Color): Side whose attackers are collected.
            occupied (int): Occupancy used to block sliders; callers pass a
                modified occupancy to look through moving pieces.
        """
        roles = self.by_role
        return self.by_color[attacker] & (
            (rook_attacks(sq, occupied) & (roles[Role.ROOK] | roles[Role.QUEEN]))
            | (bishop_attacks(sq, occupied) & (roles[Role.BISHOP] | roles[Role.QUEEN]))
            | (KNIGHT_ATTACKS[sq] & roles[Role.KNIGHT])
            | (KING_ATTACKS[sq] & roles[Role.KING])
            | (PAWN_ATTACKS[attacker.other][sq] & roles[Role.PAWN])
        )

    def material(self, color: Color) -> Tuple[int, ...]:
        """Per-role piece counts for ``color``."""
        own = self.by_color[color]
        return tuple(bin(bb & own).count("1") for bb in self.by_role)

    def __str__(self) -> str:
        rows = []
        for rank in range(7, -1, -1):
            cells = []
            for f in range(8):
                piece = self.piece_at(square(f, rank))
                cells.append(piece.symbol if piece else ".")
            rows.append(" ".join(cells))
        return "\n".join(rows)

