from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

if TYPE_CHECKING:
    from .pieces import PieceKind


FILES = "abcdefgh"


class Square(NamedTuple):
    """Board coordinate.

    Attributes:
        rank (int): Row index 0..7; 0 is Black's back rank (chess rank 8) and
            7 is White's back rank (chess rank 1).
        file (int): Column index 0..7; 0 is the a-file.
    """

    rank: int
    file: int

    def offset(self, d_rank: int, d_file: int) -> "Square":
        return Square(self.rank + d_rank, self.file + d_file)

    def __str__(self) -> str:
        if not is_valid_square(self):
            return f"({self.rank},{self.file})"
        return square_to_str(self)


class MoveKind(str, Enum):
    NORMAL = "normal"
    CASTLE = "castle"
    EN_PASSANT = "en_passant"
    PROMOTION = "promotion"


class CastleSide(str, Enum):
    KINGSIDE = "kingside"
    QUEENSIDE = "queenside"


@dataclass(frozen=True)
class Move:
    """Engine-internal move representation.

    Attributes:
        from_sq (Square): Origin square.
        to_sq (Square): Destination square.
        kind (MoveKind): Normal move or one of the special moves.
        castle_side (Optional[CastleSide]): Set for castling moves.
        promotion (Optional[PieceKind]): Replacement kind for promotions.
    """

    from_sq: Square
    to_sq: Square
    kind: MoveKind = MoveKind.NORMAL
    castle_side: Optional[CastleSide] = None
    promotion: Optional["PieceKind"] = None

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        suffix = ""
        if self.promotion is not None:
            suffix = "n" if self.promotion.value == "knight" else self.promotion.value[0]
        return square_to_str(self.from_sq) + square_to_str(self.to_sq) + suffix


def is_valid_square(square: Any) -> bool:
    """Return True if ``square`` is an in-range ``(rank, file)`` pair.

    Never raises: anything that is not a pair of ints in 0..7 is simply
    reported as invalid.
    """
    if not isinstance(square, tuple) or len(square) != 2:
        return False
    rank, file = square
    if isinstance(rank, bool) or isinstance(file, bool):
        return False
    if not isinstance(rank, int) or not isinstance(file, int):
        return False
    return 0 <= rank < 8 and 0 <= file < 8


def as_square(value: Any) -> Optional[Square]:
    """Coerce a pair (tuple or list) into a valid Square, or return None."""
    if isinstance(value, list):
        value = tuple(value)
    if not is_valid_square(value):
        return None
    return Square(value[0], value[1])


def str_to_square(s: str) -> Square:
    """Convert algebraic notation into a Square.

    Args:
        s (str): Square name such as ``"e4"``.

    Returns:
        Square: ``e4`` becomes ``Square(4, 4)``.

    Raises:
        ValueError: If ``s`` is not a valid square.
    """
    if len(s) != 2 or s[0] < "a" or s[0] > "h" or s[1] < "1" or s[1] > "8":
        raise ValueError(f"invalid square: {s!r}")
    file = ord(s[0]) - ord("a")
    rank = 8 - int(s[1])
    return Square(rank, file)


def square_to_str(square: Square) -> str:
    """Convert a Square into algebraic notation.

    Raises:
        ValueError: If ``square`` is outside the board.
    """
    if not is_valid_square(square):
        raise ValueError(f"invalid square: {square!r}")
    rank, file = square
    return FILES[file] + str(8 - rank)
