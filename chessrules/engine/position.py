from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import FrozenSet, List, Optional, Tuple

from . import movegen, variants
from .board import Board
from .errors import IllegalMove
from .move import Move
from .outcome import Decisive, Draw, Ongoing, Outcome
from .types import Color, Pockets, Variant


@dataclass(frozen=True)
class Position:
    """Immutable game state: placement plus everything needed to continue.

    Notes:
    - ``castling_rights`` is a bitboard of rook squares that may still castle.
    - ``pockets`` is set only in Crazyhouse, ``checks_given`` counts only in
      Three-Check; both keep their neutral value elsewhere.
    - Direct construction skips validation; use :meth:`initial`,
      :meth:`from_board` or :meth:`from_fen` for untrusted input.
    """

    board: Board
    turn: Color = Color.WHITE
    castling_rights: int = 0
    ep_square: Optional[int] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    variant: Variant = Variant.STANDARD
    pockets: Optional[Pockets] = None
    checks_given: Tuple[int, int] = field(default=(0, 0))

    # --- Construction -----------------------------------------------------

    @classmethod
    def initial(cls, variant: Variant = Variant.STANDARD, chess960_index: Optional[int] = None) -> "Position":
        """Start position of ``variant``.

        Args:
            variant (Variant): Rule set.
            chess960_index (Optional[int]): Scharnagl number for Chess960;
                random when omitted. Ignored by other variants.
        """
        setup = variants.initial_setup(variant, chess960_index)
        return cls(
            board=setup["board"],  # type: ignore[arg-type]
            castling_rights=setup["castling_rights"],  # type: ignore[arg-type]
            variant=variant,
            pockets=setup["pockets"],  # type: ignore[arg-type]
        )

    @classmethod
    def from_board(
        cls,
        board: Board,
        turn: Color = Color.WHITE,
        castling_rights: int = 0,
        ep_square: Optional[int] = None,
        halfmove_clock: int = 0,
        fullmove_number: int = 1,
        variant: Variant = Variant.STANDARD,
        pockets: Optional[Pockets] = None,
        checks_given: Tuple[int, int] = (0, 0),
    ) -> "Position":
        """Build and validate a position from its parts.

        Raises:
            InvalidBoard: If the setup breaks a rule of ``variant``.
        """
        if pockets is None and variant.uses_pockets:
            pockets = Pockets()
        pos = cls(
            board=board,
            turn=turn,
            castling_rights=castling_rights,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
            variant=variant,
            pockets=pockets,
            checks_given=checks_given,
        )
        variants.validate(pos)
        return pos

    @classmethod
    def from_fen(cls, fen: str, variant: Variant = Variant.STANDARD) -> "Position":
        from ..notation.fen import parse_fen

        return parse_fen(fen, variant)

    def fen(self, shredder: bool = False) -> str:
        from ..notation.fen import to_fen

        return to_fen(self, shredder=shredder)

    # --- Move generation --------------------------------------------------

    @cached_property
    def _legal(self) -> Tuple[Move, ...]:
        return tuple(variants.legal_moves(self))

    @cached_property
    def _legal_set(self) -> FrozenSet[Move]:
        return frozenset(self._legal)

    def legal_moves(self) -> List[Move]:
        """Legal moves for the side to move, in deterministic order."""
        return list(self._legal)

    def is_legal(self, move: Move) -> bool:
        return move in self._legal_set

    def checkers(self) -> int:
        """Bitboard of pieces giving check to the side to move."""
        return movegen.checkers(self)

    def is_check(self) -> bool:
        return bool(self.checkers())

    # --- Game state -------------------------------------------------------

    def is_checkmate(self) -> bool:
        return self.is_check() and not self._legal

    def is_stalemate(self) -> bool:
        return not self.is_check() and not self.is_variant_end() and not self._legal

    def is_variant_end(self) -> bool:
        return variants.is_variant_end(self)

    def variant_outcome(self) -> Optional[Outcome]:
        return variants.variant_outcome(self)

    def is_insufficient_material(self) -> bool:
        return variants.is_insufficient_material(self)

    def is_game_over(self) -> bool:
        return not self._legal or self.is_insufficient_material()

    def outcome(self) -> Outcome:
        """Variant rules first, then checkmate, stalemate and material."""
        decided = self.variant_outcome()
        if decided is not None:
            return decided
        if self.is_checkmate():
            return Decisive(self.turn.other)
        if self.is_stalemate() or self.is_insufficient_material():
            return Draw()
        return Ongoing()

    # --- Playing ----------------------------------------------------------

    def play(self, move: Move) -> "Position":
        """Return the position after ``move``.

        Raises:
            IllegalMove: If ``move`` is not among :meth:`legal_moves`.
        """
        if not self.is_legal(move):
            raise IllegalMove(f"illegal move: {move!r}")
        return self.play_unchecked(move)

    def play_unchecked(self, move: Move) -> "Position":
        """Apply ``move`` trusting the caller that it is legal."""
        return variants.play(self, move)

    def play_uci(self, text: str) -> "Position":
        from ..notation.uci import uci_to_move

        return self.play_unchecked(uci_to_move(self, text))

    def play_san(self, text: str) -> "Position":
        from ..notation.san import parse_san

        return self.play_unchecked(parse_san(self, text))

    def san(self, move: Move) -> str:
        from ..notation.san import move_to_san

        return move_to_san(self, move)

    def uci(self, move: Move) -> str:
        from ..notation.uci import move_to_uci

        return move_to_uci(move, chess960=self.variant is Variant.CHESS960)

    def __str__(self) -> str:
        return str(self.board)
