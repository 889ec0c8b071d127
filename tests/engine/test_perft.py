from __future__ import annotations

import pytest

from chessrules.engine.perft import divide, perft
from chessrules.engine.position import Position
from chessrules.engine.types import Variant


KIWIPETE = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
POSITION_3 = "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"
POSITION_4 = "r3k2r/Pppp1ppp/1b3nbN/nP6/BBP1P3/q4N2/Pp1P2PP/R2Q1RK1 w kq - 0 1"
POSITION_5 = "rnbq1k1r/pp1Pbppp/2p5/8/2B5/8/PPP1NnPP/RNBQK2R w KQ - 1 8"
POSITION_6 = "r4rk1/1pp1qppp/p1np1n2/2b1p1B1/2B1P1b1/P1NP1N2/1PP1QPPP/R4RK1 w - - 0 10"


@pytest.mark.parametrize(
    ("depth", "expected"),
    [
        (0, 1),
        (1, 20),
        (2, 400),
        (3, 8902),
        pytest.param(4, 197281, marks=pytest.mark.slow),
        pytest.param(5, 4865609, marks=pytest.mark.slow),
    ],
)
def test_startpos_perft(depth: int, expected: int) -> None:
    assert perft(Position.initial(), depth) == expected


@pytest.mark.parametrize(
    ("fen", "depth", "expected"),
    [
        (KIWIPETE, 1, 48),
        (KIWIPETE, 2, 2039),
        pytest.param(KIWIPETE, 3, 97862, marks=pytest.mark.slow),
        (POSITION_3, 1, 14),
        (POSITION_3, 2, 191),
        (POSITION_3, 3, 2812),
        pytest.param(POSITION_3, 4, 43238, marks=pytest.mark.slow),
        (POSITION_4, 1, 6),
        (POSITION_4, 2, 264),
        (POSITION_4, 3, 9467),
        (POSITION_5, 1, 44),
        (POSITION_5, 2, 1486),
        pytest.param(POSITION_5, 3, 62379, marks=pytest.mark.slow),
        (POSITION_6, 1, 46),
        (POSITION_6, 2, 2079),
        pytest.param(POSITION_6, 3, 89890, marks=pytest.mark.slow),
    ],
)
def test_reference_positions(fen: str, depth: int, expected: int) -> None:
    assert perft(Position.from_fen(fen), depth) == expected


@pytest.mark.parametrize(("depth", "expected"), [(1, 21), (2, 528), (3, 12189)])
def test_chess960_reference_position(depth: int, expected: int) -> None:
    pos = Position.from_fen(
        "bqnb1rkr/pp3ppp/3ppn2/2p5/5P2/P2P4/NPP1P1PP/BQ1BNRKR w HFhf - 2 9", Variant.CHESS960
    )
    assert perft(pos, depth) == expected


def test_divide_sums_to_perft() -> None:
    pos = Position.initial()
    counts = divide(pos, 2)
    assert len(counts) == 20
    assert counts["e2e4"] == 20
    assert sum(counts.values()) == 400


def test_negative_depth_rejected() -> None:
    with pytest.raises(ValueError):
        perft(Position.initial(), -1)
    with pytest.raises(ValueError):
        divide(Position.initial(), 0)
