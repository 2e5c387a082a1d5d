from __future__ import annotations

from dataclasses import dataclass, field

from .attacks import AttackMap, rebuild
from .board import Board
from .move import CastleSide, square_to_str, str_to_square
from .pieces import Color, PieceKind
from .state import DoublePawnMove, GameState


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_CASTLING_LETTERS = (
    ("K", Color.WHITE, CastleSide.KINGSIDE),
    ("Q", Color.WHITE, CastleSide.QUEENSIDE),
    ("k", Color.BLACK, CastleSide.KINGSIDE),
    ("q", Color.BLACK, CastleSide.QUEENSIDE),
)


@dataclass
class Position:
    """Everything the rules engine reads and writes, passed around explicitly.

    Responsibility: own the Board, the GameState and the AttackMap derived
    from the Board, and keep the three consistent between moves.
    """

    board: Board
    state: GameState
    attacks: AttackMap = field(default_factory=AttackMap)

    def __post_init__(self) -> None:
        # The board wins over whatever king squares the state was built with
        for color in (Color.WHITE, Color.BLACK):
            king = self.board.find_king(color)
            if king is not None:
                self.state.king_square[color] = king
        self.refresh_attacks()

    @classmethod
    def initial(cls) -> "Position":
        """Create the standard opening position."""
        return cls(board=Board.initial(), state=GameState())

    def refresh_attacks(self) -> None:
        self.attacks = rebuild(self.board)

    def is_in_check(self, color: Color) -> bool:
        """Return True if ``color``'s king stands on a square the opponent attacks."""
        king = self.state.king_square.get(color)
        if king is None:
            return False
        return self.attacks.is_attacked_by(king, color.opponent())

    def copy(self) -> "Position":
        return Position(board=self.board.copy(), state=self.state.copy())

    # --- FEN I/O ---
    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        """Create a position from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Position: Position with board, side to move, castling flags and en
                passant bookkeeping taken from ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields,
                contains invalid placement, castling rights, en passant square
                or move counters, or does not have exactly one king per color.

        Notes:
            A missing castling right is recorded as the corresponding rook
            having moved; a color with no rights at all is recorded as its
            king having moved.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        board = Board.from_placement(placement)

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")
        state = GameState(current_player=Color.WHITE if stm == "w" else Color.BLACK)

        for color in (Color.WHITE, Color.BLACK):
            if board.count(color, PieceKind.KING) != 1:
                raise ValueError(f"FEN must have exactly one {color.value} king")
            king = board.find_king(color)
            assert king is not None
            state.king_square[color] = king

        if castling != "-":
            if not castling or any(ch not in "KQkq" for ch in castling):
                raise ValueError("invalid castling rights")
        for letter, color, side in _CASTLING_LETTERS:
            if letter not in castling:
                state.rook_moved[color][side] = True
        for color in (Color.WHITE, Color.BLACK):
            if all(state.rook_moved[color].values()):
                state.king_moved[color] = True

        if ep != "-":
            try:
                behind = str_to_square(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            pusher = state.current_player.opponent()
            # ep target must be on rank 3 (after White pushes) or rank 6
            expected_rank = pusher.pawn_rank + pusher.forward
            if behind.rank != expected_rank:
                raise ValueError("invalid en passant square rank")
            landing = behind.offset(pusher.forward, 0)
            state.last_double_pawn_move = DoublePawnMove(color=pusher, square=landing)
            state.en_passant_target = landing

        try:
            state.halfmove_clock = int(halfmove)
            state.fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if state.halfmove_clock < 0 or state.fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(board=board, state=state)

    def to_fen(self) -> str:
        """Serialize the position into a normalized FEN string."""
        st = self.state
        stm = "w" if st.current_player is Color.WHITE else "b"
        castling = "".join(
            letter
            for letter, color, side in _CASTLING_LETTERS
            if st.has_castling_right(color, side)
        )
        ep = "-"
        dpm = st.last_double_pawn_move
        if dpm is not None:
            ep = square_to_str(dpm.square.offset(-dpm.color.forward, 0))
        return (
            f"{self.board.to_placement()} {stm} {castling or '-'} {ep} "
            f"{st.halfmove_clock} {st.fullmove_number}"
        )
