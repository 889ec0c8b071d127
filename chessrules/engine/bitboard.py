from __future__ import annotations

from typing import Iterator, List, Optional


BB_EMPTY = 0
BB_ALL = 0xFFFF_FFFF_FFFF_FFFF

BB_SQUARES: List[int] = [1 << sq for sq in range(64)]
BB_FILES: List[int] = [0x0101_0101_0101_0101 << f for f in range(8)]
BB_RANKS: List[int] = [0xFF << (8 * r) for r in range(8)]

BB_FILE_A, BB_FILE_B, BB_FILE_C, BB_FILE_D, BB_FILE_E, BB_FILE_F, BB_FILE_G, BB_FILE_H = BB_FILES
BB_RANK_1, BB_RANK_2, BB_RANK_3, BB_RANK_4, BB_RANK_5, BB_RANK_6, BB_RANK_7, BB_RANK_8 = BB_RANKS

BB_BACKRANKS = BB_RANK_1 | BB_RANK_8
BB_LIGHT_SQUARES = 0x55AA_55AA_55AA_55AA
BB_DARK_SQUARES = 0xAA55_AA55_AA55_AA55
BB_CORNERS = 0x8100_0000_0000_0081
# d4, e4, d5, e5
BB_CENTER = 0x0000_0018_1800_0000

FILE_NAMES = "abcdefgh"
RANK_NAMES = "12345678"

A1, B1, C1, D1, E1, F1, G1, H1 = range(0, 8)
A8, B8, C8, D8, E8, F8, G8, H8 = range(56, 64)


def square(file: int, rank: int) -> int:
    return rank * 8 + file


def square_file(sq: int) -> int:
    return sq & 7


def square_rank(sq: int) -> int:
    return sq >> 3


def parse_square(s: str) -> int:
    """Convert algebraic notation into a 0-based square index.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        int: Zero-based square index.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] not in FILE_NAMES or s[1] not in RANK_NAMES:
        raise ValueError(f"invalid square: {s!r}")
    return square(FILE_NAMES.index(s[0]), RANK_NAMES.index(s[1]))


def square_name(sq: int) -> str:
    """Convert a 0-based square index into algebraic notation.

    Raises:
        ValueError: If ``sq`` is outside the valid square range.
    """
    if sq < 0 or sq > 63:
        raise ValueError(f"invalid square index: {sq}")
    return FILE_NAMES[square_file(sq)] + RANK_NAMES[square_rank(sq)]


def popcount(bb: int) -> int:
    return bin(bb).count("1")


def lsb(bb: int) -> int:
    return (bb & -bb).bit_length() - 1


def msb(bb: int) -> int:
    return bb.bit_length() - 1


def scan_forward(bb: int) -> Iterator[int]:
    """Yield set squares from a1 towards h8."""
    while bb:
        low = bb & -bb
        yield low.bit_length() - 1
        bb ^= low


def scan_reversed(bb: int) -> Iterator[int]:
    """Yield set squares from h8 towards a1."""
    while bb:
        sq = bb.bit_length() - 1
        yield sq
        bb ^= 1 << sq


def more_than_one(bb: int) -> bool:
    return bb & (bb - 1) != 0


def single_square(bb: int) -> Optional[int]:
    """Return the only square of ``bb``, or None unless exactly one is set."""
    if bb and not more_than_one(bb):
        return bb.bit_length() - 1
    return None


def backrank(color: int) -> int:
    return BB_RANK_1 if color == 0 else BB_RANK_8
