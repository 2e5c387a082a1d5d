from __future__ import annotations

from typing import List, Optional

from .move import CastleSide, Move, MoveKind, Square, is_valid_square
from .movegen import pseudo_legal_moves
from .pieces import PROMOTION_KINDS, Color, Piece, PieceKind
from .position import Position
from .special import (
    castle_side,
    en_passant_capture_square,
    is_castle_attempt,
    is_promotion_move,
)


def is_in_check(pos: Position, color: Color) -> bool:
    return pos.is_in_check(color)


def is_valid_move(pos: Position, from_sq: Square, to_sq: Square, piece: Piece) -> bool:
    """Return True if ``to_sq`` is among the shape-legal destinations of ``piece``."""
    if not is_valid_square(to_sq):
        return False
    return Square(*to_sq) in pseudo_legal_moves(pos, from_sq, piece)


def is_move_safe(pos: Position, from_sq: Square, to_sq: Square, color: Color) -> bool:
    """Return True if moving ``from_sq`` -> ``to_sq`` leaves ``color``'s king safe.

    The move is played on the live board, the attack map is rebuilt and the
    king tested, then board, king square and attack map are put back exactly
    as they were, whatever the outcome.
    """
    if not is_valid_square(from_sq) or not is_valid_square(to_sq):
        return False
    from_sq, to_sq = Square(*from_sq), Square(*to_sq)
    board, state = pos.board, pos.state
    moving = board.get(from_sq)
    if moving is None:
        return False
    captured = board.get(to_sq)
    ep_square = en_passant_capture_square(pos, from_sq, to_sq)
    ep_victim = board.get(ep_square) if ep_square is not None else None
    saved_king = state.king_square.get(color)
    saved_attacks = pos.attacks

    try:
        board.set(from_sq, None)
        board.set(to_sq, moving)
        if ep_square is not None:
            board.set(ep_square, None)
        if moving.kind is PieceKind.KING:
            state.king_square[color] = to_sq
        pos.refresh_attacks()
        return not pos.is_in_check(color)
    finally:
        board.set(to_sq, captured)
        board.set(from_sq, moving)
        if ep_square is not None:
            board.set(ep_square, ep_victim)
        if saved_king is not None:
            state.king_square[color] = saved_king
        pos.attacks = saved_attacks


def legal_destinations(pos: Position, square: Square) -> List[Square]:
    """Return pseudo-legal destinations of the piece on ``square`` that keep its king safe."""
    piece = pos.board.get(square)
    if piece is None:
        return []
    return [
        t for t in pseudo_legal_moves(pos, square, piece) if is_move_safe(pos, square, t, piece.color)
    ]


def classify_move(
    pos: Position, from_sq: Square, to_sq: Square, promotion: Optional[PieceKind] = None
) -> Move:
    """Describe ``from_sq`` -> ``to_sq`` as a Move of the right kind.

    Only inspects the position; legality is checked separately.
    """
    from_sq, to_sq = Square(*from_sq), Square(*to_sq)
    piece = pos.board.get(from_sq)
    if is_castle_attempt(piece, from_sq, to_sq):
        side: CastleSide = castle_side(from_sq, to_sq)
        return Move(from_sq, to_sq, MoveKind.CASTLE, castle_side=side)
    if en_passant_capture_square(pos, from_sq, to_sq) is not None:
        return Move(from_sq, to_sq, MoveKind.EN_PASSANT)
    if is_promotion_move(piece, to_sq):
        return Move(from_sq, to_sq, MoveKind.PROMOTION, promotion=promotion)
    return Move(from_sq, to_sq)


def legal_moves(pos: Position, color: Optional[Color] = None) -> List[Move]:
    """Return every legal move for ``color`` (default: side to move).

    Pieces are found by scanning the board. A promotion appears once per
    replacement kind.
    """
    if color is None:
        color = pos.state.current_player
    moves: List[Move] = []
    for square, _ in list(pos.board.pieces(color)):
        for target in legal_destinations(pos, square):
            mv = classify_move(pos, square, target)
            if mv.kind is MoveKind.PROMOTION:
                moves.extend(
                    Move(square, target, MoveKind.PROMOTION, promotion=k) for k in PROMOTION_KINDS
                )
            else:
                moves.append(mv)
    return moves


def has_legal_moves(pos: Position, color: Color) -> bool:
    for square, piece in list(pos.board.pieces(color)):
        for target in pseudo_legal_moves(pos, square, piece):
            if is_move_safe(pos, square, target, color):
                return True
    return False


def is_checkmate(pos: Position, color: Color) -> bool:
    return pos.is_in_check(color) and not has_legal_moves(pos, color)


def is_stalemate(pos: Position, color: Color) -> bool:
    return not pos.is_in_check(color) and not has_legal_moves(pos, color)
