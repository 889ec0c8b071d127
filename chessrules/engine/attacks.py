from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence, Tuple

from .bitboard import BB_ALL, BB_SQUARES, popcount, square_file, square_rank


logger = logging.getLogger(__name__)

MASK64 = BB_ALL

_ROOK_DELTAS = ((1, 0), (-1, 0), (0, 1), (0, -1))
_BISHOP_DELTAS = ((1, 1), (1, -1), (-1, 1), (-1, -1))
_KNIGHT_DELTAS = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
_KING_DELTAS = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))

# Multipliers for the fixed-shift magic lookup, indexed by square (a1 = 0).
# Each one is checked against every blocker subset while its table is filled.
ROOK_MAGICS: Tuple[int, ...] = (
    0xA080041440042080, 0xA840200410004001, 0x0C800C1000200081, 0x0100081001000420,
    0x0200020010080420, 0x03001C0002010008, 0x8480008002000100, 0x2080088004402900,
    0x0000800098204000, 0x2024401000200040, 0x0100802000801000, 0x0120800800801000,
    0x0208808088000400, 0x0002802200800400, 0x2200800100020080, 0x0801000060821100,
    0x0080044006422000, 0x0100808020004000, 0x12108A0010204200, 0x0140848010000802,
    0x0481828014002800, 0x8094004002004100, 0x4010040010010802, 0x0000020008806104,
    0x0100400080208000, 0x2040002120081000, 0x0021200680100081, 0x0020100080080080,
    0x0002000A00200410, 0x0000020080800400, 0x0080088400100102, 0x0080004600042881,
    0x4040008040800020, 0x0440003000200801, 0x0004200011004500, 0x0188020010100100,
    0x0014800401802800, 0x2080040080800200, 0x0124080204001001, 0x0200046502000484,
    0x0480400080088020, 0x1000422010034000, 0x0030200100110040, 0x0000100021010009,
    0x2002080100110004, 0x0202008004008002, 0x0020020004010100, 0x2048440040820001,
    0x0101002200408200, 0x0040802000401080, 0x4008142004410100, 0x02060820C0120200,
    0x0001001004080100, 0x020C020080040080, 0x2935610830022400, 0x0044440041009200,
    0x0280001040802101, 0x2100190040002085, 0x80C0084100102001, 0x4024081001000421,
    0x00020030A0244872, 0x0012001008414402, 0x02006104900A0804, 0x0001004081002402,
)

BISHOP_MAGICS: Tuple[int, ...] = (
    0x0040040822862081, 0x00040810A4108000, 0x2008008400920040, 0x0061050104000008,
    0x8282021010016100, 0x41008210400A0001, 0x03004202104050C0, 0x0022010108410402,
    0x0060400862888605, 0x0006311401040228, 0x0000080801082000, 0x802A082080240100,
    0x1860061210016800, 0x000401016010A810, 0x1000060545201005, 0x21000C2098280819,
    0x2020004242020200, 0x4102100490040101, 0x0114012208001500, 0x0108000682004460,
    0x7809000490401000, 0x420B001601052912, 0x00408C8206100300, 0x2231001041180110,
    0x8010102008A02100, 0x0204201004080084, 0x0410500058008811, 0x480A040008010820,
    0x2194082044002002, 0x2008A20001004200, 0x0040908041041004, 0x0881002200540404,
    0x4001082002082101, 0x0008110408880880, 0x8000404040080200, 0x0200020082180080,
    0x1184440400114100, 0xC220008020110412, 0x4088084040090100, 0x8822104100121080,
    0x100111884008200A, 0x2844040288820200, 0x0090901088003010, 0x001000A218000400,
    0x0001102010420204, 0x08414A3483000200, 0x6410849901420400, 0x0201080200901040,
    0x0204880808050002, 0x1001008201210000, 0x016A6300A890040A, 0x8049000441108600,
    0x2212002060410044, 0x0100086308020020, 0x0484241408020421, 0x105084028429C085,
    0x004282480801080C, 0x081C098488088240, 0x1400000090480820, 0x4444000030208810,
    0x1020142010820200, 0x2234802004018200, 0x00C2040450820A00, 0x0002101021090020,
)


class _SplitMix64:
    def __init__(self, seed: int) -> None:
        self.state = seed & MASK64

    def next(self) -> int:
        self.state = (self.state + 0x9E3779B97F4A7C15) & MASK64
        z = self.state
        z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & MASK64
        z = (z ^ (z >> 27)) * 0x94D049BB133111EB & MASK64
        z = z ^ (z >> 31)
        return z & MASK64

    def sparse(self) -> int:
        return self.next() & self.next() & self.next()


def _step_attacks(sq: int, deltas: Sequence[Tuple[int, int]]) -> int:
    f, r = square_file(sq), square_rank(sq)
    bb = 0
    for df, dr in deltas:
        nf, nr = f + df, r + dr
        if 0 <= nf < 8 and 0 <= nr < 8:
            bb |= 1 << (nr * 8 + nf)
    return bb


def sliding_attacks(sq: int, occupied: int, deltas: Sequence[Tuple[int, int]]) -> int:
    """Ray-walk attacks from ``sq``, stopping at (and including) blockers."""
    f, r = square_file(sq), square_rank(sq)
    bb = 0
    for df, dr in deltas:
        nf, nr = f + df, r + dr
        while 0 <= nf < 8 and 0 <= nr < 8:
            target = 1 << (nr * 8 + nf)
            bb |= target
            if occupied & target:
                break
            nf += df
            nr += dr
    return bb


def _relevant_mask(sq: int, deltas: Sequence[Tuple[int, int]]) -> int:
    # Ray squares whose occupancy can change the attack set: edges excluded.
    f, r = square_file(sq), square_rank(sq)
    bb = 0
    for df, dr in deltas:
        nf, nr = f + df, r + dr
        while 0 <= nf + df < 8 and 0 <= nr + dr < 8:
            bb |= 1 << (nr * 8 + nf)
            nf += df
            nr += dr
    return bb


def _fill_table(
    sq: int, mask: int, magic: int, deltas: Sequence[Tuple[int, int]]
) -> Optional[List[int]]:
    """Index every blocker subset of ``mask``; None on a destructive collision."""
    bits = popcount(mask)
    shift = 64 - bits
    table: List[Optional[int]] = [None] * (1 << bits)
    subset = 0
    while True:
        attacks = sliding_attacks(sq, subset, deltas)
        idx = ((subset * magic) & MASK64) >> shift
        seen = table[idx]
        if seen is None:
            table[idx] = attacks
        elif seen != attacks:
            return None
        subset = (subset - mask) & mask
        if subset == 0:
            break
    return [a if a is not None else 0 for a in table]


def _find_magic(sq: int, mask: int, deltas: Sequence[Tuple[int, int]]) -> Tuple[int, List[int]]:
    prng = _SplitMix64(0xC0FFEE_F00D_DEAD ^ (sq * 0x9E37) ^ len(deltas))
    while True:
        magic = prng.sparse()
        if popcount((mask * magic) & 0xFF00_0000_0000_0000) < 6:
            continue
        table = _fill_table(sq, mask, magic, deltas)
        if table is not None:
            return magic, table


def _build_sliders(
    deltas: Sequence[Tuple[int, int]], magics: Sequence[int], name: str
) -> Tuple[List[int], List[int], List[int], List[List[int]]]:
    masks: List[int] = []
    mults: List[int] = []
    shifts: List[int] = []
    tables: List[List[int]] = []
    for sq in range(64):
        mask = _relevant_mask(sq, deltas)
        magic = magics[sq]
        table = _fill_table(sq, mask, magic, deltas)
        if table is None:
            magic, table = _find_magic(sq, mask, deltas)
            logger.debug("replaced %s magic for square %d with %#x", name, sq, magic)
        masks.append(mask)
        mults.append(magic)
        shifts.append(64 - popcount(mask))
        tables.append(table)
    return masks, mults, shifts, tables


_t0 = time.perf_counter()

KNIGHT_ATTACKS: List[int] = [_step_attacks(sq, _KNIGHT_DELTAS) for sq in range(64)]
KING_ATTACKS: List[int] = [_step_attacks(sq, _KING_DELTAS) for sq in range(64)]
# PAWN_ATTACKS[color][square]: squares a pawn of ``color`` on ``square`` attacks.
PAWN_ATTACKS: List[List[int]] = [
    [_step_attacks(sq, ((-1, 1), (1, 1))) for sq in range(64)],
    [_step_attacks(sq, ((-1, -1), (1, -1))) for sq in range(64)],
]

_ROOK_MASKS, _ROOK_MULTS, _ROOK_SHIFTS, _ROOK_TABLES = _build_sliders(
    _ROOK_DELTAS, ROOK_MAGICS, "rook"
)
_BISHOP_MASKS, _BISHOP_MULTS, _BISHOP_SHIFTS, _BISHOP_TABLES = _build_sliders(
    _BISHOP_DELTAS, BISHOP_MAGICS, "bishop"
)


def rook_attacks(sq: int, occupied: int) -> int:
    return _ROOK_TABLES[sq][
        (((occupied & _ROOK_MASKS[sq]) * _ROOK_MULTS[sq]) & MASK64) >> _ROOK_SHIFTS[sq]
    ]


def bishop_attacks(sq: int, occupied: int) -> int:
    return _BISHOP_TABLES[sq][
        (((occupied & _BISHOP_MASKS[sq]) * _BISHOP_MULTS[sq]) & MASK64) >> _BISHOP_SHIFTS[sq]
    ]


def queen_attacks(sq: int, occupied: int) -> int:
    return rook_attacks(sq, occupied) | bishop_attacks(sq, occupied)


def _ray(a: int, b: int) -> int:
    if a == b:
        return 0
    if rook_attacks(a, 0) & BB_SQUARES[b]:
        return (rook_attacks(a, 0) & rook_attacks(b, 0)) | BB_SQUARES[a] | BB_SQUARES[b]
    if bishop_attacks(a, 0) & BB_SQUARES[b]:
        return (bishop_attacks(a, 0) & bishop_attacks(b, 0)) | BB_SQUARES[a] | BB_SQUARES[b]
    return 0


def _between(a: int, b: int) -> int:
    bb = BB_RAYS[a][b] & ((MASK64 << a) ^ (MASK64 << b)) & MASK64
    return bb & (bb - 1)


# BB_RAYS[a][b]: the whole line through two aligned squares (edge to edge).
BB_RAYS: List[List[int]] = [[_ray(a, b) for b in range(64)] for a in range(64)]
# BB_BETWEEN[a][b]: squares strictly between a and b on their shared line.
BB_BETWEEN: List[List[int]] = [[_between(a, b) for b in range(64)] for a in range(64)]

logger.debug("attack tables built in %.1f ms", (time.perf_counter() - _t0) * 1000)


def aligned(a: int, b: int, c: int) -> bool:
    """True if ``c`` lies on the line through ``a`` and ``b``."""
    return bool(BB_RAYS[a][b] & BB_SQUARES[c])
