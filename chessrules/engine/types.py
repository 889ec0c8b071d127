from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Tuple


class Color(IntEnum):
    WHITE = 0
    BLACK = 1

    @property
    def other(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def char(self) -> str:
        return "w" if self is Color.WHITE else "b"

    @classmethod
    def from_char(cls, ch: str) -> "Color":
        if ch == "w":
            return cls.WHITE
        if ch == "b":
            return cls.BLACK
        raise ValueError(f"invalid color: {ch!r}")


class Role(IntEnum):
    PAWN = 0
    KNIGHT = 1
    BISHOP = 2
    ROOK = 3
    QUEEN = 4
    KING = 5

    @property
    def symbol(self) -> str:
        """Lowercase one-letter symbol (``"p"``, ``"n"``, ...)."""
        return "pnbrqk"[self]

    @property
    def upper(self) -> str:
        return self.symbol.upper()

    @classmethod
    def from_symbol(cls, ch: str) -> "Role":
        idx = "pnbrqk".find(ch.lower())
        if len(ch) != 1 or idx < 0:
            raise ValueError(f"invalid role: {ch!r}")
        return cls(idx)


ROLES: Tuple[Role, ...] = (
    Role.PAWN,
    Role.KNIGHT,
    Role.BISHOP,
    Role.ROOK,
    Role.QUEEN,
    Role.KING,
)
COLORS: Tuple[Color, ...] = (Color.WHITE, Color.BLACK)


@dataclass(frozen=True)
class Piece:
    role: Role
    color: Color

    @property
    def symbol(self) -> str:
        s = self.role.symbol
        return s.upper() if self.color is Color.WHITE else s

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        role = Role.from_symbol(ch)
        return cls(role, Color.WHITE if ch.isupper() else Color.BLACK)


@dataclass(frozen=True)
class Pockets:
    """Crazyhouse reserves: per-color counts indexed by role.

    Kings are never pocketed; the slot exists only to keep indices aligned
    with :class:`Role`.
    """

    white: Tuple[int, ...] = (0, 0, 0, 0, 0, 0)
    black: Tuple[int, ...] = (0, 0, 0, 0, 0, 0)

    def of(self, color: Color) -> Tuple[int, ...]:
        return self.white if color is Color.WHITE else self.black

    def count(self, color: Color, role: Role) -> int:
        return self.of(color)[role]

    def total(self, color: Color) -> int:
        return sum(self.of(color))

    def add(self, color: Color, role: Role) -> "Pockets":
        counts = list(self.of(color))
        counts[role] += 1
        return self._with(color, tuple(counts))

    def remove(self, color: Color, role: Role) -> "Pockets":
        counts = list(self.of(color))
        if counts[role] <= 0:
            raise ValueError(f"no {role.name.lower()} in {color.name.lower()} pocket")
        counts[role] -= 1
        return self._with(color, tuple(counts))

    def _with(self, color: Color, counts: Tuple[int, ...]) -> "Pockets":
        if color is Color.WHITE:
            return Pockets(white=counts, black=self.black)
        return Pockets(white=self.white, black=counts)

    def __str__(self) -> str:
        out = []
        for color in COLORS:
            counts = self.of(color)
            for role in (Role.QUEEN, Role.ROOK, Role.BISHOP, Role.KNIGHT, Role.PAWN):
                sym = role.upper if color is Color.WHITE else role.symbol
                out.append(sym * counts[role])
        return "".join(out)

    @classmethod
    def from_str(cls, text: str) -> "Pockets":
        pockets = cls()
        for ch in text:
            piece = Piece.from_symbol(ch)
            if piece.role is Role.KING:
                raise ValueError("kings cannot be pocketed")
            pockets = pockets.add(piece.color, piece.role)
        return pockets


class Variant(Enum):
    """Rule sets, valued by their UCI/lichess names."""

    STANDARD = "chess"
    CHESS960 = "chess960"
    CRAZYHOUSE = "crazyhouse"
    KING_OF_THE_HILL = "kingofthehill"
    ANTICHESS = "antichess"
    THREE_CHECK = "3check"
    HORDE = "horde"
    ATOMIC = "atomic"
    RACING_KINGS = "racingkings"

    @classmethod
    def from_name(cls, name: str) -> "Variant":
        key = name.strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        try:
            return _VARIANT_ALIASES[key]
        except KeyError:
            raise ValueError(f"unknown variant: {name!r}") from None

    @property
    def uses_pockets(self) -> bool:
        return self is Variant.CRAZYHOUSE


_VARIANT_ALIASES: Dict[str, Variant] = {v.value: v for v in Variant}
_VARIANT_ALIASES.update(
    {
        "standard": Variant.STANDARD,
        "fromposition": Variant.STANDARD,
        "fischerrandom": Variant.CHESS960,
        "giveaway": Variant.ANTICHESS,
        "koth": Variant.KING_OF_THE_HILL,
        "threecheck": Variant.THREE_CHECK,
        "racingking": Variant.RACING_KINGS,
    }
)
