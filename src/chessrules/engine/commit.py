from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .move import Move, MoveKind, Square
from .pieces import Color, PieceKind
from .position import Position
from .special import (
    en_passant_capture_square,
    execute_castle,
    promote,
    record_double_pawn_move,
    spend_castling_rights,
)


@dataclass(frozen=True)
class CommitOutcome:
    """What a committed move changed on the board.

    Attributes:
        move (Move): The move as committed.
        mover (Color): Side that made the move.
        captured_square (Optional[Square]): Square a captured piece was removed
            from; differs from ``move.to_sq`` for en passant.
        captured_kind (Optional[PieceKind]): Kind of the captured piece.
        rook_move (Optional[Tuple[Square, Square]]): Rook origin/destination
            when castling.
        gives_check (bool): Whether the opponent is now in check.
    """

    move: Move
    mover: Color
    captured_square: Optional[Square] = None
    captured_kind: Optional[PieceKind] = None
    rook_move: Optional[Tuple[Square, Square]] = None
    gives_check: bool = False


def commit_move(pos: Position, move: Move) -> CommitOutcome:
    """Apply an already validated ``move`` to ``pos`` in place.

    Order: en passant bookkeeping, capture removal, board write, king square,
    attack map rebuild, opponent check test, turn switch.

    Raises:
        ValueError: If there is no piece on the origin square or a promotion
            move carries no replacement kind.
    """
    board, state = pos.board, pos.state
    piece = board.get(move.from_sq)
    if piece is None:
        raise ValueError("no piece to move from from_sq")
    if move.kind is MoveKind.PROMOTION and move.promotion is None:
        raise ValueError("promotion move needs a piece kind")
    color = piece.color
    captured_square: Optional[Square] = None
    captured_kind: Optional[PieceKind] = None
    rook_move: Optional[Tuple[Square, Square]] = None

    if move.kind is MoveKind.CASTLE:
        state.clear_en_passant()
        rook_move = execute_castle(pos, move.from_sq, move.to_sq, color)
        state.halfmove_clock += 1
    else:
        # Read before the bookkeeping below forgets the previous double advance
        ep_square = (
            en_passant_capture_square(pos, move.from_sq, move.to_sq)
            if move.kind is MoveKind.EN_PASSANT
            else None
        )
        record_double_pawn_move(state, move.from_sq, move.to_sq, piece)

        victim_square = ep_square if ep_square is not None else move.to_sq
        victim = board.get(victim_square)
        if victim is not None:
            captured_square = Square(*victim_square)
            captured_kind = victim.kind
            board.set(victim_square, None)

        board.move_piece(move.from_sq, move.to_sq)
        if move.kind is MoveKind.PROMOTION:
            assert move.promotion is not None
            promote(pos, move.to_sq, move.promotion)

        if piece.kind is PieceKind.KING:
            state.king_square[color] = Square(*move.to_sq)
        spend_castling_rights(state, piece, move.from_sq, captured_square, victim)

        if piece.kind is PieceKind.PAWN or victim is not None:
            state.halfmove_clock = 0
        else:
            state.halfmove_clock += 1

    state.promotion_pending = None
    pos.refresh_attacks()
    gives_check = pos.is_in_check(color.opponent())
    state.switch_player()
    return CommitOutcome(
        move=move,
        mover=color,
        captured_square=captured_square,
        captured_kind=captured_kind,
        rook_move=rook_move,
        gives_check=gives_check,
    )
