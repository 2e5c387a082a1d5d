from __future__ import annotations

from enum import Enum


class RejectReason(str, Enum):
    """Why the engine refused an input. Every rejection leaves the game untouched."""

    INVALID_COORDINATE = "invalid_coordinate"
    NO_PIECE = "no_piece"
    NOT_YOUR_PIECE = "not_your_piece"
    ILLEGAL_MOVE = "illegal_move"
    UNSAFE_MOVE = "unsafe_move"
    ILLEGAL_CASTLE = "illegal_castle"
    ILLEGAL_EN_PASSANT = "illegal_en_passant"
    PROMOTION_PENDING = "promotion_pending"
    NO_PROMOTION_PENDING = "no_promotion_pending"
    INVALID_PROMOTION = "invalid_promotion"
    GAME_OVER = "game_over"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    RejectReason.INVALID_COORDINATE: "square is outside the board",
    RejectReason.NO_PIECE: "no piece on that square",
    RejectReason.NOT_YOUR_PIECE: "piece belongs to the opponent",
    RejectReason.ILLEGAL_MOVE: "piece cannot move there",
    RejectReason.UNSAFE_MOVE: "move would leave own king in check",
    RejectReason.ILLEGAL_CASTLE: "castling is not allowed",
    RejectReason.ILLEGAL_EN_PASSANT: "en passant capture is not available",
    RejectReason.PROMOTION_PENDING: "a promotion choice is required first",
    RejectReason.NO_PROMOTION_PENDING: "no promotion is pending",
    RejectReason.INVALID_PROMOTION: "promotion must be queen, rook, bishop or knight",
    RejectReason.GAME_OVER: "the game is over",
}
