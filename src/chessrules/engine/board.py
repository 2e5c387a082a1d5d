from __future__ import annotations

from typing import Any, Iterator, List, Optional, Sequence, Tuple

from .move import Square, is_valid_square
from .pieces import Color, Piece, PieceKind


EMPTY = "."

# Rank 0 first: Black's back rank at the top, White's at the bottom.
INITIAL_ROWS: Tuple[str, ...] = (
    "rnbqkbnr",
    "pppppppp",
    "........",
    "........",
    "........",
    "........",
    "PPPPPPPP",
    "RNBQKBNR",
)


class Board:
    """8x8 grid of optional pieces.

    Notes:
    - Indexed by ``Square(rank, file)``; rank 0 is Black's back rank.
    - The grid is the single source of truth. Every write updates the
      ``square`` cache of the piece written and of the piece displaced.
    """

    def __init__(self) -> None:
        self._grid: List[List[Optional[Piece]]] = [[None] * 8 for _ in range(8)]

    @classmethod
    def initial(cls) -> "Board":
        """Create a board set up in the standard opening position."""
        return cls.from_rows(INITIAL_ROWS)

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> "Board":
        """Create a board from 8 strings of 8 characters.

        Uppercase letters are White pieces, lowercase Black, ``.`` empty.

        Raises:
            ValueError: If the shape is wrong or a character is unknown.
        """
        if len(rows) != 8:
            raise ValueError("board must have 8 rows")
        board = cls()
        for rank, row in enumerate(rows):
            if len(row) != 8:
                raise ValueError(f"row {rank} must have 8 squares")
            for file, ch in enumerate(row):
                if ch == EMPTY:
                    continue
                board.set(Square(rank, file), Piece.from_symbol(ch))
        return board

    def to_rows(self) -> List[str]:
        return [
            "".join(p.symbol if p is not None else EMPTY for p in row) for row in self._grid
        ]

    @classmethod
    def from_placement(cls, placement: str) -> "Board":
        """Create a board from the piece-placement field of a FEN string.

        Raises:
            ValueError: On a malformed placement.
        """
        ranks = placement.split("/")
        if len(ranks) != 8:
            raise ValueError("FEN board must have 8 ranks")
        rows: List[str] = []
        for text in ranks:
            row = []
            for ch in text:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > 8:
                        raise ValueError("invalid empty count in FEN rank")
                    row.append(EMPTY * n)
                else:
                    row.append(ch)
            joined = "".join(row)
            if len(joined) != 8:
                raise ValueError("rank does not sum to 8 squares in FEN")
            rows.append(joined)
        return cls.from_rows(rows)

    def to_placement(self) -> str:
        out: List[str] = []
        for row in self.to_rows():
            run = 0
            parts = []
            for ch in row:
                if ch == EMPTY:
                    run += 1
                    continue
                if run:
                    parts.append(str(run))
                    run = 0
                parts.append(ch)
            if run:
                parts.append(str(run))
            out.append("".join(parts))
        return "/".join(out)

    # --- grid access ---
    @staticmethod
    def is_valid_square(square: Any) -> bool:
        return is_valid_square(square)

    def get(self, square: Any) -> Optional[Piece]:
        if not is_valid_square(square):
            return None
        return self._grid[square[0]][square[1]]

    def set(self, square: Any, piece: Optional[Piece]) -> bool:
        """Write ``piece`` (or clear with None) at ``square``.

        Returns:
            bool: False, with no effect, when ``square`` is off the board.
        """
        if not is_valid_square(square):
            return False
        sq = Square(square[0], square[1])
        displaced = self._grid[sq.rank][sq.file]
        if displaced is not None and displaced is not piece and displaced.square == sq:
            displaced.square = None
        self._grid[sq.rank][sq.file] = piece
        if piece is not None:
            piece.square = sq
        return True

    def is_occupied(self, square: Any) -> bool:
        return self.get(square) is not None

    def move_piece(self, from_sq: Square, to_sq: Square) -> Optional[Piece]:
        """Move whatever stands on ``from_sq`` to ``to_sq``; return the piece displaced."""
        piece = self.get(from_sq)
        captured = self.get(to_sq)
        self.set(from_sq, None)
        self.set(to_sq, piece)
        return captured

    # --- scans ---
    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Square, Piece]]:
        """Yield ``(square, piece)`` for every occupied square, optionally by color."""
        for rank in range(8):
            for file in range(8):
                piece = self._grid[rank][file]
                if piece is None:
                    continue
                if color is not None and piece.color is not color:
                    continue
                yield Square(rank, file), piece

    def find_king(self, color: Color) -> Optional[Square]:
        for square, piece in self.pieces(color):
            if piece.kind is PieceKind.KING:
                return square
        return None

    def count(self, color: Color, kind: PieceKind) -> int:
        return sum(1 for _, p in self.pieces(color) if p.kind is kind)

    def copy(self) -> "Board":
        """Deep copy: the clone holds its own Piece objects."""
        clone = Board()
        for square, piece in self.pieces():
            clone.set(square, piece.clone())
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self.to_rows() == other.to_rows()

    def __str__(self) -> str:
        lines = [f"{8 - r} {' '.join(row)}" for r, row in enumerate(self.to_rows())]
        lines.append("  a b c d e f g h")
        return "\n".join(lines)
