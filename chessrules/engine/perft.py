from __future__ import annotations

from typing import Dict

from .position import Position


def perft(pos: Position, depth: int) -> int:
    """Compute perft node count for ``pos`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    At depth 1 the legal moves are counted without playing them (bulk
    counting).

    Raises:
        ValueError: If ``depth`` is negative.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1
    moves = pos.legal_moves()
    if depth == 1:
        return len(moves)
    return sum(perft(pos.play_unchecked(m), depth - 1) for m in moves)


def divide(pos: Position, depth: int) -> Dict[str, int]:
    """Per-move perft counts at ``depth``, keyed by UCI move text.

    Raises:
        ValueError: If ``depth`` is less than 1.
    """
    if depth < 1:
        raise ValueError("depth must be >= 1")
    return {pos.uci(m): perft(pos.play_unchecked(m), depth - 1) for m in pos.legal_moves()}
