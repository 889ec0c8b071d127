from __future__ import annotations


class ChessError(ValueError):
    """Base class for rejected user input (FEN, SAN, UCI, moves, setups)."""

    code = "chess_error"


class InvalidFen(ChessError):
    code = "invalid_fen"


class InvalidBoard(ChessError):
    """A setup that violates board consistency or the variant's rules."""

    code = "invalid_board"


class IllegalMove(ChessError):
    code = "illegal_move"


class AmbiguousSan(ChessError):
    code = "ambiguous_san"


class ParseError(ChessError):
    """Malformed SAN or UCI token."""

    code = "parse_error"
