from __future__ import annotations

from .engine.errors import RejectReason
from .engine.game import Game, GameStatus, MoveResult, SelectionResult, TurnPhase
from .engine.move import Move, MoveKind, Square
from .engine.pieces import Color, Piece, PieceKind
from .engine.position import Position


__version__ = "0.1.0"

__all__ = [
    "Color",
    "Game",
    "GameStatus",
    "Move",
    "MoveKind",
    "MoveResult",
    "Piece",
    "PieceKind",
    "Position",
    "RejectReason",
    "SelectionResult",
    "Square",
    "TurnPhase",
]
