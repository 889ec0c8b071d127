from __future__ import annotations

import pytest

from chessrules.engine.types import Variant


@pytest.mark.parametrize(
    ("name", "variant"),
    [
        ("chess", Variant.STANDARD),
        ("Standard", Variant.STANDARD),
        ("fromPosition", Variant.STANDARD),
        ("chess960", Variant.CHESS960),
        ("fischerrandom", Variant.CHESS960),
        ("crazyhouse", Variant.CRAZYHOUSE),
        ("kingOfTheHill", Variant.KING_OF_THE_HILL),
        ("koth", Variant.KING_OF_THE_HILL),
        ("antichess", Variant.ANTICHESS),
        ("giveaway", Variant.ANTICHESS),
        ("3check", Variant.THREE_CHECK),
        ("three-check", Variant.THREE_CHECK),
        ("horde", Variant.HORDE),
        ("atomic", Variant.ATOMIC),
        ("racingKings", Variant.RACING_KINGS),
    ],
)
def test_from_name(name: str, variant: Variant) -> None:
    assert Variant.from_name(name) is variant


def test_unknown_variant() -> None:
    with pytest.raises(ValueError):
        Variant.from_name("bughouse")
