from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .move import Square


class Color(str, Enum):
    WHITE = "white"
    BLACK = "black"

    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def forward(self) -> int:
        """Rank delta of a pawn step (White moves toward rank 0)."""
        return -1 if self is Color.WHITE else 1

    @property
    def home_rank(self) -> int:
        return 7 if self is Color.WHITE else 0

    @property
    def pawn_rank(self) -> int:
        return 6 if self is Color.WHITE else 1

    @property
    def last_rank(self) -> int:
        return 0 if self is Color.WHITE else 7


class PieceKind(str, Enum):
    PAWN = "pawn"
    ROOK = "rook"
    KNIGHT = "knight"
    BISHOP = "bishop"
    QUEEN = "queen"
    KING = "king"

    @classmethod
    def parse(cls, value: object) -> Optional["PieceKind"]:
        """Return the kind named by ``value`` (enum, name or letter), else None."""
        if isinstance(value, PieceKind):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip().lower()
        for kind in cls:
            if text == kind.value:
                return kind
        return _LETTER_TO_KIND.get(text)


PROMOTION_KINDS = (PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT)

_KIND_TO_LETTER = {
    PieceKind.PAWN: "p",
    PieceKind.ROOK: "r",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
_LETTER_TO_KIND = {v: k for k, v in _KIND_TO_LETTER.items()}


@dataclass(eq=False)
class Piece:
    """A chess man.

    ``color`` and ``kind`` never change after construction; ``square`` is a
    cache of where the owning Board currently holds the piece and is only
    written by Board operations.
    """

    color: Color
    kind: PieceKind
    square: Optional[Square] = None

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black."""
        letter = _KIND_TO_LETTER[self.kind]
        return letter.upper() if self.color is Color.WHITE else letter

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        """Build a piece from its FEN letter.

        Raises:
            ValueError: If ``ch`` is not one of ``pnbrqkPNBRQK``.
        """
        kind = _LETTER_TO_KIND.get(ch.lower()) if len(ch) == 1 else None
        if kind is None:
            raise ValueError(f"invalid piece symbol: {ch!r}")
        color = Color.WHITE if ch.isupper() else Color.BLACK
        return cls(color=color, kind=kind)

    def clone(self) -> "Piece":
        return Piece(color=self.color, kind=self.kind, square=self.square)

    def __repr__(self) -> str:
        return f"Piece({self.symbol}@{self.square})"
