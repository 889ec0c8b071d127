from __future__ import annotations

import random

from chessrules.engine.attacks import (
    BB_BETWEEN,
    BB_RAYS,
    KING_ATTACKS,
    KNIGHT_ATTACKS,
    PAWN_ATTACKS,
    aligned,
    bishop_attacks,
    queen_attacks,
    rook_attacks,
    sliding_attacks,
)
from chessrules.engine.bitboard import BB_SQUARES, parse_square, popcount


ROOK_DIRS = ((1, 0), (-1, 0), (0, 1), (0, -1))
BISHOP_DIRS = ((1, 1), (1, -1), (-1, 1), (-1, -1))


def bb(*names: str) -> int:
    out = 0
    for n in names:
        out |= BB_SQUARES[parse_square(n)]
    return out


def test_leaper_tables() -> None:
    assert KNIGHT_ATTACKS[parse_square("a1")] == bb("b3", "c2")
    assert popcount(KNIGHT_ATTACKS[parse_square("d4")]) == 8
    assert popcount(KING_ATTACKS[parse_square("e1")]) == 5
    assert popcount(KING_ATTACKS[parse_square("h8")]) == 3


def test_pawn_attacks_by_color() -> None:
    e4 = parse_square("e4")
    assert PAWN_ATTACKS[0][e4] == bb("d5", "f5")
    assert PAWN_ATTACKS[1][e4] == bb("d3", "f3")
    assert PAWN_ATTACKS[0][parse_square("a2")] == bb("b3")


def test_empty_board_slider_counts() -> None:
    assert popcount(rook_attacks(parse_square("a1"), 0)) == 14
    assert popcount(bishop_attacks(parse_square("d4"), 0)) == 13
    assert popcount(queen_attacks(parse_square("d4"), 0)) == 27


def test_rook_stops_at_blockers() -> None:
    occ = bb("e6", "c4")
    att = rook_attacks(parse_square("e4"), occ)
    assert att & bb("e6", "c4", "d4", "e5", "h4", "e1")
    assert not att & bb("e7", "b4")


def test_magic_lookup_matches_ray_walk() -> None:
    rng = random.Random(1234)
    for sq in range(64):
        for _ in range(24):
            occ = rng.getrandbits(64) & rng.getrandbits(64)
            assert rook_attacks(sq, occ) == sliding_attacks(sq, occ, ROOK_DIRS)
            assert bishop_attacks(sq, occ) == sliding_attacks(sq, occ, BISHOP_DIRS)


def test_between_and_rays() -> None:
    a1, h8 = parse_square("a1"), parse_square("h8")
    assert popcount(BB_BETWEEN[a1][h8]) == 6
    assert BB_BETWEEN[a1][h8] == BB_BETWEEN[h8][a1]
    assert BB_BETWEEN[a1][parse_square("b3")] == 0
    assert popcount(BB_BETWEEN[parse_square("e1")][parse_square("e8")]) == 6
    assert popcount(BB_RAYS[a1][h8]) == 8
    assert aligned(a1, h8, parse_square("d4"))
    assert not aligned(a1, h8, parse_square("d5"))
    assert BB_RAYS[a1][parse_square("b3")] == 0
