"""Castling, en passant and promotion.

These are the three rules that need more than the piece's movement shape:
castling reads the attack map and the "has moved" flags, en passant reads the
previous ply, and promotion needs a choice from the player.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from .move import CastleSide, Square, is_valid_square
from .pieces import PROMOTION_KINDS, Color, Piece, PieceKind
from .state import DoublePawnMove, GameState

if TYPE_CHECKING:
    from .position import Position


KING_HOME_FILE = 4
ROOK_HOME_FILE = {CastleSide.KINGSIDE: 7, CastleSide.QUEENSIDE: 0}
KING_CASTLED_FILE = {CastleSide.KINGSIDE: 6, CastleSide.QUEENSIDE: 2}
ROOK_CASTLED_FILE = {CastleSide.KINGSIDE: 5, CastleSide.QUEENSIDE: 3}
# Squares strictly between king and rook
_BETWEEN_FILES = {CastleSide.KINGSIDE: (5, 6), CastleSide.QUEENSIDE: (1, 2, 3)}
# Squares the king stands on, crosses and lands on
_KING_PATH_FILES = {CastleSide.KINGSIDE: (4, 5, 6), CastleSide.QUEENSIDE: (4, 3, 2)}


# --- castling ---
def castle_side(from_sq: Square, to_sq: Square) -> CastleSide:
    return CastleSide.KINGSIDE if to_sq[1] > from_sq[1] else CastleSide.QUEENSIDE


def is_castle_attempt(piece: Optional[Piece], from_sq: Square, to_sq: Square) -> bool:
    """Return True for a king stepping two files along its home rank."""
    if piece is None or piece.kind is not PieceKind.KING:
        return False
    return (
        from_sq == Square(piece.color.home_rank, KING_HOME_FILE)
        and to_sq[0] == from_sq[0]
        and abs(to_sq[1] - from_sq[1]) == 2
    )


def can_castle(pos: "Position", from_sq: Square, to_sq: Square, color: Color) -> bool:
    """Return True if ``color`` may castle with the king going ``from_sq`` -> ``to_sq``.

    Requires: king and rook unmoved (explicit flags, and the rook still on its
    corner), empty squares between them, king not in check, and no square the
    king stands on, crosses or lands on attacked by the opponent.
    """
    if not is_valid_square(from_sq) or not is_valid_square(to_sq):
        return False
    board, state = pos.board, pos.state
    if not is_castle_attempt(board.get(from_sq), from_sq, to_sq):
        return False
    king = board.get(from_sq)
    assert king is not None
    if king.color is not color:
        return False

    side = castle_side(from_sq, to_sq)
    if to_sq[1] != KING_CASTLED_FILE[side]:
        return False
    if not state.has_castling_right(color, side):
        return False

    rank = color.home_rank
    rook = board.get(Square(rank, ROOK_HOME_FILE[side]))
    if rook is None or rook.kind is not PieceKind.ROOK or rook.color is not color:
        return False

    if any(board.is_occupied(Square(rank, f)) for f in _BETWEEN_FILES[side]):
        return False

    if pos.is_in_check(color):
        return False

    opponent = color.opponent()
    return not any(
        pos.attacks.is_attacked_by(Square(rank, f), opponent) for f in _KING_PATH_FILES[side]
    )


def castling_destinations(pos: "Position", square: Square, piece: Piece) -> List[Square]:
    out: List[Square] = []
    for side in (CastleSide.KINGSIDE, CastleSide.QUEENSIDE):
        target = Square(square[0], KING_CASTLED_FILE[side])
        if can_castle(pos, square, target, piece.color):
            out.append(target)
    return out


def execute_castle(
    pos: "Position", from_sq: Square, to_sq: Square, color: Color
) -> Tuple[Square, Square]:
    """Move king and rook in one step and spend the castling rights.

    Returns:
        Tuple[Square, Square]: The rook's origin and destination squares.
    """
    side = castle_side(from_sq, to_sq)
    rank = from_sq[0]
    rook_from = Square(rank, ROOK_HOME_FILE[side])
    rook_to = Square(rank, ROOK_CASTLED_FILE[side])
    to_sq = Square(*to_sq)

    pos.board.move_piece(from_sq, to_sq)
    pos.board.move_piece(rook_from, rook_to)

    state = pos.state
    state.king_square[color] = to_sq
    state.king_moved[color] = True
    state.rook_moved[color][side] = True
    return rook_from, rook_to


def spend_castling_rights(
    state: GameState,
    piece: Piece,
    from_sq: Square,
    captured_on: Optional[Square],
    captured: Optional[Piece],
) -> None:
    """Mark kings and corner rooks as moved when they move or are captured at home."""
    if piece.kind is PieceKind.KING:
        state.king_moved[piece.color] = True
    elif piece.kind is PieceKind.ROOK:
        _mark_corner_rook(state, piece.color, from_sq)
    if captured is not None and captured.kind is PieceKind.ROOK and captured_on is not None:
        _mark_corner_rook(state, captured.color, captured_on)


def _mark_corner_rook(state: GameState, color: Color, square: Square) -> None:
    if square[0] != color.home_rank:
        return
    for side, file in ROOK_HOME_FILE.items():
        if square[1] == file:
            state.rook_moved[color][side] = True


# --- en passant ---
def en_passant_destinations(pos: "Position", square: Square, piece: Piece) -> List[Square]:
    """Return the en passant capture square available to ``piece``, if any.

    Only the pawn that just advanced two squares may be taken, only on the
    very next ply, and only by a pawn standing beside it on the same rank.
    """
    if piece.kind is not PieceKind.PAWN:
        return []
    dpm = pos.state.last_double_pawn_move
    if dpm is None or dpm.color is piece.color:
        return []
    if square[0] != dpm.square.rank or abs(square[1] - dpm.square.file) != 1:
        return []
    victim = pos.board.get(dpm.square)
    if victim is None or victim.kind is not PieceKind.PAWN or victim.color is piece.color:
        return []
    dest = Square(square[0] + piece.color.forward, dpm.square.file)
    if not is_valid_square(dest) or pos.board.is_occupied(dest):
        return []
    return [dest]


def en_passant_capture_square(pos: "Position", from_sq: Square, to_sq: Square) -> Optional[Square]:
    """Return the square of the pawn removed if ``from_sq`` -> ``to_sq`` is en passant."""
    piece = pos.board.get(from_sq)
    if piece is None or piece.kind is not PieceKind.PAWN:
        return None
    if Square(*to_sq) not in en_passant_destinations(pos, Square(*from_sq), piece):
        return None
    dpm = pos.state.last_double_pawn_move
    assert dpm is not None
    return dpm.square


def is_en_passant_attempt(
    piece: Optional[Piece], from_sq: Square, to_sq: Square, target_occupied: bool
) -> bool:
    """Return True for a pawn stepping diagonally onto an empty square."""
    if piece is None or piece.kind is not PieceKind.PAWN or target_occupied:
        return False
    return to_sq[0] - from_sq[0] == piece.color.forward and abs(to_sq[1] - from_sq[1]) == 1


def record_double_pawn_move(state: GameState, from_sq: Square, to_sq: Square, piece: Piece) -> None:
    """Remember a two-square pawn advance; any other move forgets the previous one."""
    if (
        piece.kind is PieceKind.PAWN
        and from_sq[0] == piece.color.pawn_rank
        and abs(to_sq[0] - from_sq[0]) == 2
        and from_sq[1] == to_sq[1]
    ):
        landing = Square(*to_sq)
        state.last_double_pawn_move = DoublePawnMove(color=piece.color, square=landing)
        state.en_passant_target = landing
    else:
        state.clear_en_passant()


# --- promotion ---
def is_promotion_move(piece: Optional[Piece], to_sq: Square) -> bool:
    return piece is not None and piece.kind is PieceKind.PAWN and to_sq[0] == piece.color.last_rank


def promote(pos: "Position", square: Square, kind: PieceKind) -> Piece:
    """Replace the pawn on ``square`` with a new piece of ``kind``.

    Raises:
        ValueError: If ``kind`` is not a promotion kind or no pawn stands there.
    """
    if kind not in PROMOTION_KINDS:
        raise ValueError(f"cannot promote to {kind.value}")
    pawn = pos.board.get(square)
    if pawn is None or pawn.kind is not PieceKind.PAWN:
        raise ValueError("no pawn to promote")
    promoted = Piece(color=pawn.color, kind=kind)
    pos.board.set(square, promoted)
    return promoted
