"""Per-variant setup, legality, play and outcome rules.

Every entry point takes the variant from the position and branches on the
:class:`Variant` enum, so the orthodox generators in :mod:`.movegen` stay
free of variant objects.
"""

from __future__ import annotations

import dataclasses
import random
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .attacks import BB_BETWEEN, KING_ATTACKS
from .bitboard import (
    BB_ALL,
    BB_BACKRANKS,
    BB_CENTER,
    BB_DARK_SQUARES,
    BB_LIGHT_SQUARES,
    BB_RANK_1,
    BB_RANK_6,
    BB_RANK_3,
    BB_RANK_8,
    BB_SQUARES,
    backrank,
    lsb,
    more_than_one,
    popcount,
    scan_forward,
)
from .board import Board
from .errors import InvalidBoard
from .move import Drop, EnPassant, Move, Normal, is_zeroing
from .movegen import (
    checkers,
    do_move,
    gen_castling_moves,
    gen_en_passant,
    gen_non_king,
    gen_piece_moves,
    gen_standard,
    king_attackers,
    our_king,
)
from .outcome import Decisive, Draw, Outcome
from .types import COLORS, Color, Pockets, Role, Variant

if TYPE_CHECKING:  # pragma: no cover
    from .position import Position


STANDARD_INDEX = 518

_KNIGHT_PLACEMENTS: Tuple[Tuple[int, int], ...] = (
    (0, 1), (0, 2), (0, 3), (0, 4), (1, 2), (1, 3), (1, 4), (2, 3), (2, 4), (3, 4),
)

# Squares of the rooks that may castle in the orthodox start position.
_CORNER_RIGHTS = BB_SQUARES[0] | BB_SQUARES[7] | BB_SQUARES[56] | BB_SQUARES[63]


# --- Setup ----------------------------------------------------------------


def chess960_back_rank(index: Optional[int] = None) -> List[Role]:
    """Back rank of Chess960 start position ``index`` (Scharnagl numbering).

    Args:
        index (Optional[int]): 0..959; 518 is the orthodox array. A random
            index is drawn when omitted.

    Raises:
        ValueError: If ``index`` is out of range.
    """
    if index is None:
        index = random.randrange(960)
    if not 0 <= index < 960:
        raise ValueError(f"chess960 index out of range: {index}")
    rank: List[Optional[Role]] = [None] * 8
    n, light = divmod(index, 4)
    n, dark = divmod(n, 4)
    n, queen = divmod(n, 6)
    rank[2 * light + 1] = Role.BISHOP
    rank[2 * dark] = Role.BISHOP
    empty = [f for f in range(8) if rank[f] is None]
    rank[empty.pop(queen)] = Role.QUEEN
    first, second = _KNIGHT_PLACEMENTS[n]
    rank[empty[first]] = Role.KNIGHT
    rank[empty[second]] = Role.KNIGHT
    rest = [f for f in range(8) if rank[f] is None]
    for f, role in zip(rest, (Role.ROOK, Role.KING, Role.ROOK)):
        rank[f] = role
    return [r for r in rank if r is not None]


def initial_setup(variant: Variant, chess960_index: Optional[int] = None) -> Dict[str, object]:
    """Field values of ``variant``'s start position (board, castling, pockets)."""
    fields: Dict[str, object] = {"pockets": None}
    if variant is Variant.CHESS960:
        back_rank = chess960_back_rank(chess960_index)
        fields["board"] = Board.from_back_rank(back_rank)
        rooks = [f for f, role in enumerate(back_rank) if role is Role.ROOK]
        rights = 0
        for f in rooks:
            rights |= BB_SQUARES[f] | BB_SQUARES[56 + f]
        fields["castling_rights"] = rights
    elif variant is Variant.HORDE:
        fields["board"] = Board.horde()
        fields["castling_rights"] = BB_SQUARES[56] | BB_SQUARES[63]
    elif variant is Variant.RACING_KINGS:
        fields["board"] = Board.racing_kings()
        fields["castling_rights"] = 0
    elif variant is Variant.ANTICHESS:
        fields["board"] = Board.standard()
        fields["castling_rights"] = 0
    else:
        fields["board"] = Board.standard()
        fields["castling_rights"] = _CORNER_RIGHTS
        if variant is Variant.CRAZYHOUSE:
            fields["pockets"] = Pockets()
    return fields


# --- Validation -----------------------------------------------------------


def clean_castling_rights(board: Board, castling_rights: int) -> int:
    """Subset of ``castling_rights`` that is consistent with ``board``.

    A right survives if its square holds an own rook on the back rank, the
    own (unpromoted) king stands on that back rank, and it is the only
    right on that side of the king.
    """
    clean = 0
    for color in COLORS:
        rank = backrank(color)
        own = board.by_color[color]
        king = board.kings & own & rank & ~board.promoted
        if not king or more_than_one(king):
            continue
        king_bb = king
        candidates = castling_rights & board.rooks & own & rank
        below = candidates & (king_bb - 1)
        above = candidates & ~((king_bb << 1) - 1) & BB_ALL
        if below and not more_than_one(below):
            clean |= below
        if above and not more_than_one(above):
            clean |= above
    return clean


def _validate_ep(pos: "Position") -> None:
    ep = pos.ep_square
    if ep is None:
        return
    turn = pos.turn
    sixth = BB_RANK_6 if turn is Color.WHITE else BB_RANK_3
    if not sixth & BB_SQUARES[ep]:
        raise InvalidBoard("invalid en passant square")
    pushed = ep - 8 if turn is Color.WHITE else ep + 8
    origin = ep + 8 if turn is Color.WHITE else ep - 8
    board = pos.board
    if not board.pieces(Role.PAWN, turn.other) & BB_SQUARES[pushed]:
        raise InvalidBoard("invalid en passant square")
    if board.occupied & (BB_SQUARES[ep] | BB_SQUARES[origin]):
        raise InvalidBoard("invalid en passant square")


def _validate_basic(pos: "Position") -> None:
    board = pos.board
    if not board.occupied:
        raise InvalidBoard("empty board")

    if pos.pockets is not None:
        pocket_pawns = pos.pockets.count(Color.WHITE, Role.PAWN) + pos.pockets.count(
            Color.BLACK, Role.PAWN
        )
        if popcount(board.pawns) + pocket_pawns > 16:
            raise InvalidBoard("too many pawns")
        if popcount(board.occupied) + pos.pockets.total(Color.WHITE) + pos.pockets.total(
            Color.BLACK
        ) > 32:
            raise InvalidBoard("too many pieces")
    else:
        for color in COLORS:
            if popcount(board.by_color[color]) > 16:
                raise InvalidBoard("too many pieces")
            if popcount(board.pieces(Role.PAWN, color)) > 8:
                raise InvalidBoard("too many pawns")

    if board.pawns & BB_BACKRANKS:
        raise InvalidBoard("pawns on back rank")

    if clean_castling_rights(board, pos.castling_rights) != pos.castling_rights:
        raise InvalidBoard("bad castling rights")

    _validate_ep(pos)


def _validate_kings(pos: "Position") -> None:
    board = pos.board
    for color in COLORS:
        if not board.pieces(Role.KING, color) & ~board.promoted:
            raise InvalidBoard(f"missing {color.name.lower()} king")
    if popcount(board.kings) > 2:
        raise InvalidBoard("too many kings")
    their_king = board.king_of(pos.turn.other)
    if their_king is not None and king_attackers(pos, their_king, pos.turn, board.occupied):
        raise InvalidBoard("opponent is in check")


def _validate_horde(pos: "Position") -> None:
    board = pos.board
    if not board.occupied:
        raise InvalidBoard("empty board")
    if not board.pieces(Role.KING, Color.BLACK):
        raise InvalidBoard("missing black king")
    if popcount(board.kings) > 1:
        raise InvalidBoard("too many kings")
    if popcount(board.black) > 16 or popcount(board.white) > 36:
        raise InvalidBoard("too many pieces")
    if popcount(board.pieces(Role.PAWN, Color.BLACK)) > 8:
        raise InvalidBoard("too many pawns")
    if board.pieces(Role.PAWN, Color.WHITE) & BB_RANK_8 or board.pieces(Role.PAWN, Color.BLACK) & BB_RANK_1:
        raise InvalidBoard("pawns on back rank")
    if pos.castling_rights != clean_castling_rights(board, pos.castling_rights) & BB_RANK_8:
        raise InvalidBoard("bad castling rights")
    _validate_ep(pos)


def _validate_racing_kings(pos: "Position") -> None:
    board = pos.board
    if pos.castling_rights:
        raise InvalidBoard("bad castling rights")
    if checkers(pos):
        raise InvalidBoard("racing kings position with check")
    if (
        pos.turn is Color.BLACK
        and board.pieces(Role.KING, Color.BLACK) & BB_RANK_8
        and board.pieces(Role.KING, Color.WHITE) & BB_RANK_8
    ):
        raise InvalidBoard("race is already over")
    _validate_basic(pos)
    _validate_kings(pos)
    if board.pawns:
        raise InvalidBoard("racing kings material")
    for color in COLORS:
        counts = board.material(color)
        if (
            counts[Role.KNIGHT] > 2
            or counts[Role.BISHOP] > 2
            or counts[Role.ROOK] > 2
            or counts[Role.QUEEN] > 1
        ):
            raise InvalidBoard("racing kings material")


def validate(pos: "Position") -> None:
    """Reject setups that cannot arise in ``pos.variant``.

    Raises:
        InvalidBoard: Naming the first rule the setup breaks.
    """
    variant = pos.variant
    if (pos.pockets is not None) != variant.uses_pockets:
        raise InvalidBoard("pockets are only used in crazyhouse")
    if pos.pockets is not None and (
        pos.pockets.count(Color.WHITE, Role.KING) or pos.pockets.count(Color.BLACK, Role.KING)
    ):
        raise InvalidBoard("kings cannot be pocketed")
    if pos.board.promoted and variant is not Variant.CRAZYHOUSE:
        raise InvalidBoard("promoted markers are only used in crazyhouse")
    if pos.halfmove_clock < 0 or pos.fullmove_number < 1:
        raise InvalidBoard("invalid move counters")

    if variant is Variant.HORDE:
        _validate_horde(pos)
    elif variant is Variant.RACING_KINGS:
        _validate_racing_kings(pos)
    elif variant is Variant.ANTICHESS:
        if pos.castling_rights:
            raise InvalidBoard("bad castling rights")
        _validate_basic(pos)
    elif variant is Variant.ATOMIC:
        board = pos.board
        if popcount(board.kings) > 2:
            raise InvalidBoard("too many kings")
        their_king = board.king_of(pos.turn.other)
        if their_king is None:
            raise InvalidBoard(f"missing {pos.turn.other.name.lower()} king")
        # Skipped once the side to move has been exploded.
        if board.king_of(pos.turn) is not None and king_attackers(
            pos, their_king, pos.turn, board.occupied
        ):
            raise InvalidBoard("opponent is in check")
        _validate_basic(pos)
    elif variant is Variant.THREE_CHECK:
        white, black = pos.checks_given
        if not (0 <= white <= 3 and 0 <= black <= 3):
            raise InvalidBoard("check counters out of range")
        if white == 3 and black == 3:
            raise InvalidBoard("three-check game is already over")
        _validate_basic(pos)
        _validate_kings(pos)
    else:
        _validate_basic(pos)
        _validate_kings(pos)

    if variant is not Variant.THREE_CHECK and pos.checks_given != (0, 0):
        raise InvalidBoard("check counters are only used in three-check")


# --- Legal moves ----------------------------------------------------------


def _drop_squares(pos: "Position") -> int:
    checking = checkers(pos)
    if not checking:
        return ~pos.board.occupied & BB_ALL
    if more_than_one(checking):
        return 0
    king = our_king(pos)
    assert king is not None
    return BB_BETWEEN[lsb(checking)][king]


def _gen_drops(pos: "Position", moves: List[Move]) -> None:
    pockets = pos.pockets
    assert pockets is not None
    counts = pockets.of(pos.turn)
    if not any(counts):
        return
    for to_sq in scan_forward(_drop_squares(pos)):
        for role in (Role.KNIGHT, Role.BISHOP, Role.ROOK, Role.QUEEN):
            if counts[role]:
                moves.append(Drop(role, to_sq))
        if counts[Role.PAWN] and not BB_SQUARES[to_sq] & BB_BACKRANKS:
            moves.append(Drop(Role.PAWN, to_sq))


def _gen_antichess(pos: "Position", moves: List[Move]) -> None:
    board = pos.board
    them = board.by_color[pos.turn.other]
    gen_en_passant(board, pos.turn, pos.ep_square, None, moves)
    gen_non_king(pos, them, moves)
    gen_piece_moves(pos, Role.KING, them, moves)
    if not moves:
        empty = ~board.occupied & BB_ALL
        gen_non_king(pos, empty, moves)
        gen_piece_moves(pos, Role.KING, empty, moves)


def _atomic_survives(pos: "Position", move: Move) -> bool:
    after = pos.play_unchecked(move)
    king = after.board.king_of(pos.turn)
    if king is None:
        return False
    if not after.board.pieces(Role.KING, pos.turn.other):
        return True
    return not king_attackers(after, king, pos.turn.other, after.board.occupied)


def _gen_atomic(pos: "Position", moves: List[Move]) -> None:
    board = pos.board
    candidates: List[Move] = []
    gen_en_passant(board, pos.turn, pos.ep_square, None, candidates)
    gen_non_king(pos, ~board.by_color[pos.turn] & BB_ALL, candidates)
    gen_piece_moves(pos, Role.KING, ~board.occupied & BB_ALL, candidates)
    king = board.king_of(pos.turn)
    if king is not None:
        gen_castling_moves(pos, king, candidates)
    moves.extend(m for m in candidates if _atomic_survives(pos, m))


def legal_moves(pos: "Position") -> List[Move]:
    """All legal moves of ``pos`` in generation order."""
    variant = pos.variant
    moves: List[Move] = []
    if variant is Variant.ANTICHESS:
        _gen_antichess(pos, moves)
    elif variant is Variant.ATOMIC:
        _gen_atomic(pos, moves)
    elif variant is Variant.RACING_KINGS:
        if not is_variant_end(pos):
            candidates: List[Move] = []
            gen_standard(pos, candidates)
            moves.extend(m for m in candidates if not checkers(pos.play_unchecked(m)))
    elif variant in (Variant.KING_OF_THE_HILL, Variant.THREE_CHECK):
        if not is_variant_end(pos):
            gen_standard(pos, moves)
    else:
        gen_standard(pos, moves)
        if variant is Variant.CRAZYHOUSE:
            _gen_drops(pos, moves)
    return moves


# --- Playing moves --------------------------------------------------------


def _explode(board: Board, castling_rights: int, target: int) -> Tuple[Board, int]:
    # The capturer on ``target`` and every adjacent piece except pawns go.
    blast = KING_ATTACKS[target] & board.occupied & ~board.pawns
    removed = ~(blast | BB_SQUARES[target])
    exploded = Board(
        tuple(bb & removed for bb in board.by_role),  # type: ignore[arg-type]
        (board.by_color[0] & removed, board.by_color[1] & removed),
        board.promoted & removed,
    )
    return exploded, castling_rights & ~blast


def play(pos: "Position", move: Move) -> "Position":
    """Apply ``move`` without checking legality; returns the next position."""
    variant = pos.variant
    turn = pos.turn
    board, castling_rights, ep_square = do_move(
        pos.board, turn, pos.castling_rights, move, track_promoted=variant is Variant.CRAZYHOUSE
    )

    pockets = pos.pockets
    if variant is Variant.CRAZYHOUSE:
        assert pockets is not None
        if isinstance(move, Drop):
            pockets = pockets.remove(turn, move.role)
        elif isinstance(move, EnPassant):
            pockets = pockets.add(turn, Role.PAWN)
        elif isinstance(move, Normal) and move.capture is not None:
            was_promoted = pos.board.promoted & BB_SQUARES[move.to_sq]
            pockets = pockets.add(turn, Role.PAWN if was_promoted else move.capture)
    elif variant is Variant.ATOMIC and move.is_capture:
        board, castling_rights = _explode(board, castling_rights, move.to_sq)
        castling_rights = clean_castling_rights(board, castling_rights)

    after = dataclasses.replace(
        pos,
        board=board,
        turn=turn.other,
        castling_rights=castling_rights,
        ep_square=ep_square,
        halfmove_clock=0 if is_zeroing(move) else pos.halfmove_clock + 1,
        fullmove_number=pos.fullmove_number + (1 if turn is Color.BLACK else 0),
        pockets=pockets,
    )

    if variant is Variant.THREE_CHECK and checkers(after):
        given = list(pos.checks_given)
        given[turn] += 1
        after = dataclasses.replace(after, checks_given=(given[0], given[1]))
    return after


# --- Game end -------------------------------------------------------------


def _racing_kings_end(pos: "Position") -> bool:
    board = pos.board
    in_goal = board.kings & BB_RANK_8
    if not in_goal:
        return False
    if pos.turn is Color.WHITE or in_goal & board.black:
        return True
    # White reached the goal; black may still draw by reaching it next move.
    black_king = board.king_of(Color.BLACK)
    if black_king is None:
        return True
    targets = KING_ATTACKS[black_king] & BB_RANK_8 & ~board.black
    for target in scan_forward(targets):
        if not king_attackers(pos, target, Color.WHITE, board.occupied):
            return False
    return True


def is_variant_end(pos: "Position") -> bool:
    """True if a variant-specific rule has ended the game."""
    variant = pos.variant
    board = pos.board
    if variant is Variant.KING_OF_THE_HILL:
        return bool(board.kings & BB_CENTER)
    if variant is Variant.THREE_CHECK:
        return 3 in pos.checks_given
    if variant in (Variant.ANTICHESS, Variant.HORDE):
        return not board.white or not board.black
    if variant is Variant.ATOMIC:
        return not board.pieces(Role.KING, Color.WHITE) or not board.pieces(Role.KING, Color.BLACK)
    if variant is Variant.RACING_KINGS:
        return _racing_kings_end(pos)
    return False


def variant_outcome(pos: "Position") -> Optional[Outcome]:
    """Outcome decided by variant rules, checked before mate and stalemate."""
    variant = pos.variant
    board = pos.board
    if variant is Variant.KING_OF_THE_HILL:
        for color in COLORS:
            if board.pieces(Role.KING, color) & BB_CENTER:
                return Decisive(color)
    elif variant is Variant.THREE_CHECK:
        for color in COLORS:
            if pos.checks_given[color] >= 3:
                return Decisive(color)
    elif variant is Variant.ANTICHESS:
        if not board.by_color[pos.turn] or not pos.legal_moves():
            return Decisive(pos.turn)
    elif variant is Variant.HORDE:
        if not board.black:
            return Decisive(Color.WHITE)
        if not board.white:
            return Decisive(Color.BLACK)
    elif variant is Variant.ATOMIC:
        for color in COLORS:
            if not board.pieces(Role.KING, color):
                return Decisive(color.other)
    elif variant is Variant.RACING_KINGS:
        if _racing_kings_end(pos):
            in_goal = board.kings & BB_RANK_8
            if in_goal & board.white and in_goal & board.black:
                return Draw()
            if in_goal & board.white:
                return Decisive(Color.WHITE)
            return Decisive(Color.BLACK)
    return None


def _bishops_on_one_complex(bishops: int) -> bool:
    return not bishops & BB_DARK_SQUARES or not bishops & BB_LIGHT_SQUARES


def is_insufficient_material(pos: "Position") -> bool:
    variant = pos.variant
    board = pos.board
    if variant in (
        Variant.CRAZYHOUSE,
        Variant.KING_OF_THE_HILL,
        Variant.HORDE,
        Variant.RACING_KINGS,
    ):
        return False

    if variant is Variant.THREE_CHECK:
        return board.occupied == board.kings

    if variant is Variant.ANTICHESS:
        if board.knights or board.rooks_and_queens or board.kings or board.pawns:
            return False
        # Each side's bishops stay on a color complex the other cannot reach.
        if not board.white & BB_DARK_SQUARES:
            return not board.black & BB_LIGHT_SQUARES
        if not board.white & BB_LIGHT_SQUARES:
            return not board.black & BB_DARK_SQUARES
        return False

    if variant is Variant.ATOMIC:
        if is_variant_end(pos):
            return False
        if board.pawns or board.queens:
            return False
        if popcount(board.knights | board.bishops | board.rooks) == 1:
            return True
        if board.occupied == board.kings | board.knights:
            return popcount(board.knights) <= 2
        if board.occupied == board.kings | board.bishops:
            white_bishops = board.pieces(Role.BISHOP, Color.WHITE)
            black_bishops = board.pieces(Role.BISHOP, Color.BLACK)
            if not white_bishops & BB_DARK_SQUARES:
                return not black_bishops & BB_LIGHT_SQUARES
            if not white_bishops & BB_LIGHT_SQUARES:
                return not black_bishops & BB_DARK_SQUARES
        return False

    if board.pawns or board.rooks_and_queens:
        return False
    # Kings plus at most one minor piece.
    if popcount(board.occupied) <= 3:
        return True
    if board.knights:
        return False
    return _bishops_on_one_complex(board.bishops)

