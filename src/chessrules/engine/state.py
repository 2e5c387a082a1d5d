from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from .move import CastleSide, Square
from .pieces import Color


@dataclass(frozen=True)
class DoublePawnMove:
    """A pawn's two-square advance, remembered for exactly one ply."""

    color: Color
    square: Square


@dataclass(frozen=True)
class PendingPromotion:
    from_sq: Square
    to_sq: Square


def _per_color(value: bool) -> Dict[Color, bool]:
    return {Color.WHITE: value, Color.BLACK: value}


def _rook_flags() -> Dict[Color, Dict[CastleSide, bool]]:
    return {
        c: {CastleSide.KINGSIDE: False, CastleSide.QUEENSIDE: False}
        for c in (Color.WHITE, Color.BLACK)
    }


@dataclass
class GameState:
    """Turn bookkeeping that the board alone does not capture.

    Castling rights are explicit "has moved" flags; they become True the first
    time a king or rook leaves its home square and are only cleared by a reset.
    """

    current_player: Color = Color.WHITE
    king_square: Dict[Color, Square] = field(
        default_factory=lambda: {Color.WHITE: Square(7, 4), Color.BLACK: Square(0, 4)}
    )
    last_double_pawn_move: Optional[DoublePawnMove] = None
    en_passant_target: Optional[Square] = None
    promotion_pending: Optional[PendingPromotion] = None
    king_moved: Dict[Color, bool] = field(default_factory=lambda: _per_color(False))
    rook_moved: Dict[Color, Dict[CastleSide, bool]] = field(default_factory=_rook_flags)
    halfmove_clock: int = 0
    fullmove_number: int = 1

    def switch_player(self) -> None:
        if self.current_player is Color.BLACK:
            self.fullmove_number += 1
        self.current_player = self.current_player.opponent()

    def clear_en_passant(self) -> None:
        self.last_double_pawn_move = None
        self.en_passant_target = None

    def has_castling_right(self, color: Color, side: CastleSide) -> bool:
        return not self.king_moved[color] and not self.rook_moved[color][side]

    def copy(self) -> "GameState":
        return GameState(
            current_player=self.current_player,
            king_square=dict(self.king_square),
            last_double_pawn_move=self.last_double_pawn_move,
            en_passant_target=self.en_passant_target,
            promotion_pending=self.promotion_pending,
            king_moved=dict(self.king_moved),
            rook_moved={c: dict(sides) for c, sides in self.rook_moved.items()},
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
        )
