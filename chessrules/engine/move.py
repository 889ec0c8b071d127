from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .bitboard import square, square_file, square_rank
from .types import Role


@dataclass(frozen=True)
class Normal:
    """A piece moving from one square to another, possibly capturing.

    Attributes:
        role (Role): Role of the moving piece.
        from_sq (int): Origin square index (0-based).
        to_sq (int): Destination square index (0-based).
        capture (Optional[Role]): Role of the captured piece, if any.
        promotion (Optional[Role]): Role a pawn promotes to, if any.
    """

    role: Role
    from_sq: int
    to_sq: int
    capture: Optional[Role] = None
    promotion: Optional[Role] = None

    @property
    def is_capture(self) -> bool:
        return self.capture is not None


@dataclass(frozen=True)
class EnPassant:
    from_sq: int
    to_sq: int

    role = Role.PAWN
    capture = Role.PAWN
    promotion = None
    is_capture = True

    @property
    def captured_sq(self) -> int:
        """Square of the pawn taken en passant (beside the origin)."""
        return square(square_file(self.to_sq), square_rank(self.from_sq))


@dataclass(frozen=True)
class Castle:
    """Castling, identified by the king's and the rook's origin squares.

    Destinations follow the Chess960 convention, which also covers standard
    chess: the king lands on the c- or g-file and the rook on the d- or
    f-file of its own back rank.
    """

    king_from: int
    rook_from: int

    role = Role.KING
    capture = None
    promotion = None
    is_capture = False

    @property
    def is_kingside(self) -> bool:
        return self.rook_from > self.king_from

    @property
    def king_to(self) -> int:
        return square(6 if self.is_kingside else 2, square_rank(self.king_from))

    @property
    def rook_to(self) -> int:
        return square(5 if self.is_kingside else 3, square_rank(self.king_from))

    @property
    def from_sq(self) -> int:
        return self.king_from

    @property
    def to_sq(self) -> int:
        return self.king_to


@dataclass(frozen=True)
class Drop:
    role: Role
    to_sq: int

    capture = None
    promotion = None
    is_capture = False

    @property
    def from_sq(self) -> Optional[int]:
        return None


Move = Union[Normal, EnPassant, Castle, Drop]


def is_zeroing(move: Move) -> bool:
    """True if the move resets the halfmove clock (capture or pawn move)."""
    return move.is_capture or move.role is Role.PAWN and not isinstance(move, Drop)
