from __future__ import annotations

from typing import Dict

from .commit import commit_move
from .legality import legal_moves
from .position import Position


def perft(pos: Position, depth: int) -> int:
    """Compute perft node count for ``pos`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Each child is played on a copy, so ``pos`` is left unchanged.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    if depth == 0:
        return 1

    moves = legal_moves(pos)
    if depth == 1:
        return len(moves)

    nodes = 0
    for m in moves:
        child = pos.copy()
        commit_move(child, m)
        nodes += perft(child, depth - 1)
    return nodes


def divide(pos: Position, depth: int) -> Dict[str, int]:
    """Return perft(depth - 1) of each root move, keyed by UCI string."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    out: Dict[str, int] = {}
    for m in legal_moves(pos):
        child = pos.copy()
        commit_move(child, m)
        out[m.to_uci()] = perft(child, depth - 1)
    return out
