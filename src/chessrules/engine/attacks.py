from __future__ import annotations

from typing import Any, FrozenSet, List, Optional, Set

from .board import Board
from .move import Square, is_valid_square
from .movegen import attacked_squares
from .pieces import Color


_NO_ATTACKERS: FrozenSet[Color] = frozenset()


class AttackMap:
    """Per-square set of colors attacking that square.

    Derived state: built from a Board by :func:`rebuild` and never mutated
    afterwards. A square may be attacked by both colors at once.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Optional[List[List[FrozenSet[Color]]]] = None) -> None:
        if cells is None:
            cells = [[_NO_ATTACKERS] * 8 for _ in range(8)]
        self._cells = cells

    def attackers(self, square: Any) -> FrozenSet[Color]:
        if not is_valid_square(square):
            return _NO_ATTACKERS
        return self._cells[square[0]][square[1]]

    def is_attacked_by(self, square: Any, color: Color) -> bool:
        return color in self.attackers(square)

    def squares_attacked_by(self, color: Color) -> Set[Square]:
        return {
            Square(r, f) for r in range(8) for f in range(8) if color in self._cells[r][f]
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AttackMap):
            return NotImplemented
        return self._cells == other._cells

    def __repr__(self) -> str:
        rows = []
        for row in self._cells:
            cells = []
            for colors in row:
                if len(colors) == 2:
                    cells.append("x")
                elif Color.WHITE in colors:
                    cells.append("w")
                elif Color.BLACK in colors:
                    cells.append("b")
                else:
                    cells.append(".")
            rows.append("".join(cells))
        return f"AttackMap({'/'.join(rows)})"


def rebuild(board: Board) -> AttackMap:
    """Compute the attack map for every piece on ``board`` from scratch."""
    cells: List[List[Set[Color]]] = [[set() for _ in range(8)] for _ in range(8)]
    for square, piece in board.pieces():
        for target in attacked_squares(board, square, piece):
            cells[target.rank][target.file].add(piece.color)
    return AttackMap([[frozenset(c) for c in row] for row in cells])
