from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from .board import Board
from .move import Square, is_valid_square
from .pieces import Piece, PieceKind
from .special import castling_destinations, en_passant_destinations

if TYPE_CHECKING:
    from .position import Position


Direction = Tuple[int, int]

ROOK_DIRECTIONS: Tuple[Direction, ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))
BISHOP_DIRECTIONS: Tuple[Direction, ...] = ((1, 1), (-1, -1), (1, -1), (-1, 1))
QUEEN_DIRECTIONS: Tuple[Direction, ...] = ROOK_DIRECTIONS + BISHOP_DIRECTIONS
KNIGHT_OFFSETS: Tuple[Direction, ...] = (
    (-2, -1), (-2, 1), (2, -1), (2, 1),
    (-1, -2), (-1, 2), (1, -2), (1, 2),
)  # fmt: skip
KING_OFFSETS: Tuple[Direction, ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)  # fmt: skip

_SLIDER_DIRECTIONS = {
    PieceKind.ROOK: ROOK_DIRECTIONS,
    PieceKind.BISHOP: BISHOP_DIRECTIONS,
    PieceKind.QUEEN: QUEEN_DIRECTIONS,
}


def sliding_squares(board: Board, square: Square, directions: Sequence[Direction]) -> List[Square]:
    """Cast rays from ``square``; each ray stops on (and includes) the first piece."""
    out: List[Square] = []
    for dr, df in directions:
        target = square.offset(dr, df)
        while is_valid_square(target):
            out.append(target)
            if board.is_occupied(target):
                break
            target = target.offset(dr, df)
    return out


def _offset_squares(square: Square, offsets: Sequence[Direction]) -> List[Square]:
    return [t for t in (square.offset(dr, df) for dr, df in offsets) if is_valid_square(t)]


def attacked_squares(board: Board, square: Square, piece: Piece) -> List[Square]:
    """Return the squares ``piece`` on ``square`` controls.

    Unlike :func:`pseudo_legal_moves`, squares held by the piece's own side are
    included (a defended piece is a controlled square), pawns only count their
    two forward diagonals, and kings never count castling.
    """
    square = Square(*square)
    kind = piece.kind
    if kind is PieceKind.PAWN:
        fwd = piece.color.forward
        return _offset_squares(square, ((fwd, -1), (fwd, 1)))
    if kind is PieceKind.KNIGHT:
        return _offset_squares(square, KNIGHT_OFFSETS)
    if kind is PieceKind.KING:
        return _offset_squares(square, KING_OFFSETS)
    return sliding_squares(board, square, _SLIDER_DIRECTIONS[kind])


def _is_enemy_target(piece: Piece, target: Optional[Piece]) -> bool:
    # Kings are never captured: the legality filter keeps them out of reach.
    return target is not None and target.color is not piece.color and target.kind is not PieceKind.KING


def pseudo_legal_moves(pos: "Position", square: Square, piece: Optional[Piece] = None) -> List[Square]:
    """Return the destinations ``piece`` on ``square`` may reach by shape alone.

    Args:
        pos (Position): Position to generate in.
        square (Square): Origin square.
        piece (Optional[Piece]): Piece to move; defaults to the occupant of
            ``square``.

    Returns:
        List[Square]: Destinations obeying movement shape and blocking. King
            safety is not considered. Empty for an invalid or empty square.
    """
    if not is_valid_square(square):
        return []
    square = Square(*square)
    if piece is None:
        piece = pos.board.get(square)
        if piece is None:
            return []
    board = pos.board
    kind = piece.kind

    if kind is PieceKind.PAWN:
        return _pawn_moves(pos, square, piece)

    if kind in _SLIDER_DIRECTIONS:
        rays = sliding_squares(board, square, _SLIDER_DIRECTIONS[kind])
        return [t for t in rays if not board.is_occupied(t) or _is_enemy_target(piece, board.get(t))]

    table = KNIGHT_OFFSETS if kind is PieceKind.KNIGHT else KING_OFFSETS
    moves = [
        t
        for t in _offset_squares(square, table)
        if not board.is_occupied(t) or _is_enemy_target(piece, board.get(t))
    ]
    if kind is PieceKind.KING:
        moves.extend(castling_destinations(pos, square, piece))
    return moves


def _pawn_moves(pos: "Position", square: Square, piece: Piece) -> List[Square]:
    board = pos.board
    fwd = piece.color.forward
    moves: List[Square] = []

    one = square.offset(fwd, 0)
    if is_valid_square(one) and not board.is_occupied(one):
        moves.append(one)
        two = square.offset(2 * fwd, 0)
        if square.rank == piece.color.pawn_rank and not board.is_occupied(two):
            moves.append(two)

    for df in (-1, 1):
        diag = square.offset(fwd, df)
        if is_valid_square(diag) and _is_enemy_target(piece, board.get(diag)):
            moves.append(diag)

    moves.extend(en_passant_destinations(pos, square, piece))
    return moves
