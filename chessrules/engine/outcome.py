from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .types import Color


@dataclass(frozen=True)
class Decisive:
    winner: Color

    def result(self) -> str:
        return "1-0" if self.winner is Color.WHITE else "0-1"


@dataclass(frozen=True)
class Draw:
    def result(self) -> str:
        return "1/2-1/2"


@dataclass(frozen=True)
class Ongoing:
    def result(self) -> str:
        return "*"


Outcome = Union[Decisive, Draw, Ongoing]
