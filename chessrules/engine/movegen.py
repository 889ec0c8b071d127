"""Pseudo-legal and legal move generation primitives.

The generators append to a caller-owned list and take the position as a
duck-typed value exposing ``board``, ``turn``, ``castling_rights``,
``ep_square`` and ``variant``. Variant overlays in :mod:`.variants` combine
them into the final legal move list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from .attacks import (
    BB_BETWEEN,
    BB_RAYS,
    KING_ATTACKS,
    KNIGHT_ATTACKS,
    PAWN_ATTACKS,
    aligned,
    bishop_attacks,
    queen_attacks,
    rook_attacks,
)
from .bitboard import (
    BB_ALL,
    BB_BACKRANKS,
    BB_RANK_3,
    BB_RANK_4,
    BB_RANK_5,
    BB_RANK_6,
    BB_RANKS,
    BB_SQUARES,
    backrank,
    lsb,
    more_than_one,
    scan_forward,
    square,
    square_file,
    square_rank,
)
from .board import Board
from .move import Castle, Drop, EnPassant, Move, Normal
from .types import Color, Role, Variant

if TYPE_CHECKING:  # pragma: no cover
    from .position import Position


PROMOTION_ROLES = (Role.QUEEN, Role.ROOK, Role.BISHOP, Role.KNIGHT)


def our_king(pos: "Position") -> Optional[int]:
    kings = pos.board.kings & pos.board.by_color[pos.turn]
    return lsb(kings) if kings else None


def king_attackers(pos: "Position", sq: int, attacker: Color, occupied: int) -> int:
    """Pieces of ``attacker`` a king standing on ``sq`` would have to deal with."""
    variant = pos.variant
    if variant is Variant.ANTICHESS:
        return 0
    board = pos.board
    if variant is Variant.ATOMIC and KING_ATTACKS[sq] & board.kings & board.by_color[attacker]:
        # Kings touching each other cannot be captured: the capturer would explode too.
        return 0
    return board.attacks_to(sq, attacker, occupied)


def checkers(pos: "Position") -> int:
    king = our_king(pos)
    if king is None:
        return 0
    return king_attackers(pos, king, pos.turn.other, pos.board.occupied)


def slider_blockers(board: Board, enemy: int, king: int) -> int:
    """Pieces that alone stand between ``king`` and an ``enemy`` slider."""
    snipers = (
        (rook_attacks(king, 0) & board.rooks_and_queens)
        | (bishop_attacks(king, 0) & board.bishops_and_queens)
    ) & enemy
    occupied = board.occupied
    blockers = 0
    for sniper in scan_forward(snipers):
        b = BB_BETWEEN[king][sniper] & occupied
        if b and not more_than_one(b):
            blockers |= b
    return blockers


def _captured(board: Board, sq: int) -> Optional[Role]:
    return board.role_at(sq) if board.occupied & BB_SQUARES[sq] else None


def _push_pawn_move(
    moves: List[Move], from_sq: int, to_sq: int, capture: Optional[Role], king_promotions: bool
) -> None:
    if BB_SQUARES[to_sq] & BB_BACKRANKS:
        if king_promotions:
            moves.append(Normal(Role.PAWN, from_sq, to_sq, capture, Role.KING))
        for role in PROMOTION_ROLES:
            moves.append(Normal(Role.PAWN, from_sq, to_sq, capture, role))
    else:
        moves.append(Normal(Role.PAWN, from_sq, to_sq, capture))


def gen_pawn_moves(
    pos: "Position", target: int, moves: List[Move], king: Optional[int] = None, blockers: int = 0
) -> None:
    """Pawn captures then pushes into ``target``; pinned pawns stay on their pin line."""
    board = pos.board
    turn = pos.turn
    pawns = board.by_role[Role.PAWN] & board.by_color[turn]
    if not pawns:
        return
    occupied = board.occupied
    king_promotions = pos.variant is Variant.ANTICHESS

    capture_targets = board.by_color[turn.other] & target
    if capture_targets:
        for from_sq in scan_forward(pawns):
            hits = PAWN_ATTACKS[turn][from_sq] & capture_targets
            if not hits:
                continue
            pinned = blockers & BB_SQUARES[from_sq]
            for to_sq in scan_forward(hits):
                if pinned and not aligned(from_sq, to_sq, king):  # type: ignore[arg-type]
                    continue
                _push_pawn_move(moves, from_sq, to_sq, board.role_at(to_sq), king_promotions)

    if turn is Color.WHITE:
        single = (pawns << 8) & BB_ALL & ~occupied
        double = (single << 8) & BB_ALL & ~occupied & (BB_RANK_3 | BB_RANK_4)
        step = 8
    else:
        single = (pawns >> 8) & ~occupied
        double = (single >> 8) & ~occupied & (BB_RANK_6 | BB_RANK_5)
        step = -8

    for to_sq in scan_forward(single & target):
        from_sq = to_sq - step
        if blockers & BB_SQUARES[from_sq] and not aligned(from_sq, to_sq, king):  # type: ignore[arg-type]
            continue
        _push_pawn_move(moves, from_sq, to_sq, None, king_promotions)

    for to_sq in scan_forward(double & target):
        from_sq = to_sq - 2 * step
        if blockers & BB_SQUARES[from_sq] and not aligned(from_sq, to_sq, king):  # type: ignore[arg-type]
            continue
        moves.append(Normal(Role.PAWN, from_sq, to_sq))


def _piece_attacks(role: Role, sq: int, occupied: int) -> int:
    if role is Role.KNIGHT:
        return KNIGHT_ATTACKS[sq]
    if role is Role.BISHOP:
        return bishop_attacks(sq, occupied)
    if role is Role.ROOK:
        return rook_attacks(sq, occupied)
    if role is Role.QUEEN:
        return queen_attacks(sq, occupied)
    return KING_ATTACKS[sq]


def gen_piece_moves(
    pos: "Position",
    role: Role,
    target: int,
    moves: List[Move],
    king: Optional[int] = None,
    blockers: int = 0,
) -> None:
    board = pos.board
    occupied = board.occupied
    pieces = board.by_role[role] & board.by_color[pos.turn]
    for from_sq in scan_forward(pieces):
        dests = _piece_attacks(role, from_sq, occupied) & target
        if blockers & BB_SQUARES[from_sq]:
            # A pinned knight can never stay on the line; sliders may move along it.
            dests &= BB_RAYS[from_sq][king] if role is not Role.KNIGHT else 0  # type: ignore[index]
        for to_sq in scan_forward(dests):
            moves.append(Normal(role, from_sq, to_sq, _captured(board, to_sq)))


def gen_non_king(pos: "Position", target: int, moves: List[Move]) -> None:
    gen_pawn_moves(pos, target, moves)
    for role in (Role.KNIGHT, Role.BISHOP, Role.ROOK, Role.QUEEN):
        gen_piece_moves(pos, role, target, moves)


def gen_safe_non_king(pos: "Position", target: int, king: int, moves: List[Move]) -> None:
    blockers = slider_blockers(pos.board, pos.board.by_color[pos.turn.other], king)
    gen_pawn_moves(pos, target, moves, king, blockers)
    for role in (Role.KNIGHT, Role.BISHOP, Role.ROOK, Role.QUEEN):
        gen_piece_moves(pos, role, target, moves, king, blockers)


def gen_safe_king(pos: "Position", target: int, moves: List[Move]) -> None:
    board = pos.board
    them = pos.turn.other
    occupied = board.occupied
    for from_sq in scan_forward(board.kings & board.by_color[pos.turn]):
        for to_sq in scan_forward(KING_ATTACKS[from_sq] & target):
            if not board.attacks_to(to_sq, them, occupied):
                moves.append(Normal(Role.KING, from_sq, to_sq, _captured(board, to_sq)))


def evasions(pos: "Position", king: int, checking: int, moves: List[Move]) -> None:
    board = pos.board
    sliders = checking & (board.bishops | board.rooks | board.queens)
    attacked = 0
    for checker in scan_forward(sliders):
        attacked |= BB_RAYS[checker][king] ^ BB_SQUARES[checker]

    gen_safe_king(pos, ~board.by_color[pos.turn] & ~attacked & BB_ALL, moves)

    if not more_than_one(checking):
        checker = lsb(checking)
        target = BB_BETWEEN[king][checker] | BB_SQUARES[checker]
        gen_safe_non_king(pos, target, king, moves)


def gen_en_passant(
    board: Board, turn: Color, ep_square: Optional[int], safe_king: Optional[int], moves: List[Move]
) -> None:
    """En passant captures onto ``ep_square``.

    With ``safe_king`` given, captures that leave that king attacked are
    skipped. Removing two pawns from one rank can expose the king to a
    slider, which ordinary pin detection does not see.
    """
    if ep_square is None:
        return
    them_color = turn.other
    them = board.by_color[them_color]
    candidates = board.by_role[Role.PAWN] & board.by_color[turn] & PAWN_ATTACKS[them_color][ep_square]
    for from_sq in scan_forward(candidates):
        if safe_king is not None:
            captured = square(square_file(ep_square), square_rank(from_sq))
            if (
                KING_ATTACKS[safe_king] & them & board.kings
                or KNIGHT_ATTACKS[safe_king] & them & board.knights
                or PAWN_ATTACKS[turn][safe_king] & (them & ~BB_SQUARES[captured]) & board.pawns
            ):
                continue
            occupied = (board.occupied ^ BB_SQUARES[from_sq] ^ BB_SQUARES[captured]) | BB_SQUARES[ep_square]
            if (
                rook_attacks(safe_king, occupied) & them & board.rooks_and_queens
                or bishop_attacks(safe_king, occupied) & them & board.bishops_and_queens
            ):
                continue
        moves.append(EnPassant(from_sq, ep_square))


def castling_uncovers_rank_attack(pos: "Position", rook: int, king_to: int) -> bool:
    """True if the castling rook was shielding ``king_to`` from a rank attack."""
    board = pos.board
    them = board.by_color[pos.turn.other]
    if pos.variant is Variant.ATOMIC and KING_ATTACKS[king_to] & board.kings & them:
        return False
    return bool(
        rook_attacks(king_to, board.occupied & ~BB_SQUARES[rook])
        & them
        & board.rooks_and_queens
        & BB_RANKS[square_rank(king_to)]
    )


def castle_squares(king: int, rook: int) -> Tuple[int, int]:
    """(king_to, rook_to) for castling with ``rook`` on the king's back rank."""
    rank = square_rank(king)
    if rook > king:
        return square(6, rank), square(5, rank)
    return square(2, rank), square(3, rank)


def gen_castling_moves(pos: "Position", king: int, moves: List[Move]) -> None:
    board = pos.board
    them = pos.turn.other
    occupied = board.occupied
    king_bb = BB_SQUARES[king]
    for rook in scan_forward(pos.castling_rights & backrank(pos.turn)):
        king_to, rook_to = castle_squares(king, rook)
        rook_bb = BB_SQUARES[rook]
        king_path = BB_BETWEEN[king][king_to] | BB_SQUARES[king_to]
        rook_path = BB_BETWEEN[rook][rook_to] | BB_SQUARES[rook_to]
        if (occupied ^ king_bb ^ rook_bb) & (king_path | rook_path):
            continue
        if any(
            king_attackers(pos, sq, them, occupied ^ king_bb)
            for sq in scan_forward(king_path | king_bb)
        ):
            continue
        if castling_uncovers_rank_attack(pos, rook, king_to):
            continue
        moves.append(Castle(king, rook))


def gen_standard(pos: "Position", moves: List[Move]) -> None:
    """Legal moves under the orthodox rules (check, pins, castling)."""
    king = our_king(pos)
    gen_en_passant(pos.board, pos.turn, pos.ep_square, king, moves)

    if king is None:
        gen_non_king(pos, ~pos.board.by_color[pos.turn] & BB_ALL, moves)
        return

    checking = checkers(pos)
    if not checking:
        target = ~pos.board.by_color[pos.turn] & BB_ALL
        gen_safe_non_king(pos, target, king, moves)
        gen_safe_king(pos, target, moves)
        gen_castling_moves(pos, king, moves)
    else:
        evasions(pos, king, checking, moves)


def do_move(
    board: Board,
    turn: Color,
    castling_rights: int,
    move: Move,
    track_promoted: bool = False,
) -> Tuple[Board, int, Optional[int]]:
    """Apply ``move`` to the placement without any legality checks.

    Returns:
        Tuple[Board, int, Optional[int]]: The new board, the remaining
        castling rights and the new en-passant target (or None).
    """
    roles = list(board.by_role)
    colors = list(board.by_color)
    promoted = board.promoted
    us = int(turn)
    ep_square: Optional[int] = None

    if isinstance(move, Normal):
        from_bb = BB_SQUARES[move.from_sq]
        to_bb = BB_SQUARES[move.to_sq]
        if move.role is Role.PAWN and abs(move.to_sq - move.from_sq) == 16:
            rank = square_rank(move.from_sq)
            if rank == (1 if turn is Color.WHITE else 6):
                ep_square = (move.from_sq + move.to_sq) // 2
        if move.role is Role.KING:
            castling_rights &= ~backrank(turn)
        castling_rights &= ~(from_bb | to_bb)
        is_promoted = track_promoted and bool(promoted & from_bb or move.promotion is not None)
        clear = ~(from_bb | to_bb)
        roles = [bb & clear for bb in roles]
        colors = [bb & clear for bb in colors]
        roles[move.promotion if move.promotion is not None else move.role] |= to_bb
        colors[us] |= to_bb
        promoted &= clear
        if is_promoted:
            promoted |= to_bb
    elif isinstance(move, Castle):
        king_to, rook_to = castle_squares(move.king_from, move.rook_from)
        clear = ~(BB_SQUARES[move.king_from] | BB_SQUARES[move.rook_from])
        roles = [bb & clear for bb in roles]
        colors = [bb & clear for bb in colors]
        promoted &= clear & ~(BB_SQUARES[king_to] | BB_SQUARES[rook_to])
        roles[Role.KING] |= BB_SQUARES[king_to]
        roles[Role.ROOK] |= BB_SQUARES[rook_to]
        colors[us] |= BB_SQUARES[king_to] | BB_SQUARES[rook_to]
        castling_rights &= ~backrank(turn)
    elif isinstance(move, EnPassant):
        clear = ~(BB_SQUARES[move.from_sq] | BB_SQUARES[move.captured_sq])
        roles = [bb & clear for bb in roles]
        colors = [bb & clear for bb in colors]
        promoted &= clear
        roles[Role.PAWN] |= BB_SQUARES[move.to_sq]
        colors[us] |= BB_SQUARES[move.to_sq]
    elif isinstance(move, Drop):
        roles[move.role] |= BB_SQUARES[move.to_sq]
        colors[us] |= BB_SQUARES[move.to_sq]
    else:  # pragma: no cover
        raise TypeError(f"not a move: {move!r}")

    new_board = Board(tuple(roles), tuple(colors), promoted)  # type: ignore[arg-type]
    return new_board, castling_rights, ep_square
