from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .board import Board
from .commit import CommitOutcome, commit_move
from .errors import RejectReason
from .legality import (
    classify_move,
    has_legal_moves,
    is_move_safe,
    is_valid_move,
    legal_destinations,
    legal_moves,
)
from .move import Move, MoveKind, Square, as_square
from .pieces import PROMOTION_KINDS, Color, PieceKind
from .position import Position
from .special import is_castle_attempt, is_en_passant_attempt
from .state import GameState, PendingPromotion


logger = logging.getLogger(__name__)


class TurnPhase(str, Enum):
    AWAITING_SELECTION = "awaiting_selection"
    PIECE_SELECTED = "piece_selected"
    AWAITING_PROMOTION_CHOICE = "awaiting_promotion_choice"


@dataclass(frozen=True)
class SelectionResult:
    legal_destinations: Tuple[Square, ...] = ()
    rejected: Optional[RejectReason] = None

    @property
    def ok(self) -> bool:
        return self.rejected is None


@dataclass(frozen=True)
class MoveResult:
    """Outcome of a move attempt or promotion choice.

    Exactly one of ``committed``, ``promotion_required`` or ``rejected`` is set.
    """

    committed: bool = False
    promotion_required: bool = False
    rejected: Optional[RejectReason] = None
    move: Optional[Move] = None
    captured_square: Optional[Square] = None
    is_castle: bool = False
    is_en_passant: bool = False
    promoted_to: Optional[PieceKind] = None
    gives_check: bool = False

    @property
    def ok(self) -> bool:
        return self.rejected is None

    @classmethod
    def reject(cls, reason: RejectReason) -> "MoveResult":
        return cls(rejected=reason)

    @classmethod
    def from_outcome(cls, outcome: CommitOutcome) -> "MoveResult":
        mv = outcome.move
        return cls(
            committed=True,
            move=mv,
            captured_square=outcome.captured_square,
            is_castle=mv.kind is MoveKind.CASTLE,
            is_en_passant=mv.kind is MoveKind.EN_PASSANT,
            promoted_to=mv.promotion,
            gives_check=outcome.gives_check,
        )


@dataclass(frozen=True)
class GameStatus:
    current_player: Color
    check: bool
    checkmate: bool
    stalemate: bool

    @property
    def game_over(self) -> bool:
        return self.checkmate or self.stalemate


class Game:
    """Turn state machine around a Position.

    Responsibility: accept square selections, move attempts and promotion
    choices one at a time, reject anything illegal without touching the
    position, and report check, checkmate and stalemate after each commit.
    """

    def __init__(self, position: Optional[Position] = None) -> None:
        self.position = position if position is not None else Position.initial()
        self.phase = TurnPhase.AWAITING_SELECTION
        self.selected: Optional[Square] = None
        self._status = self._evaluate()

    @classmethod
    def new(cls) -> "Game":
        return cls(Position.initial())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(Position.from_fen(fen))

    def to_fen(self) -> str:
        return self.position.to_fen()

    @property
    def board(self) -> Board:
        return self.position.board

    @property
    def state(self) -> GameState:
        return self.position.state

    def reset(self) -> None:
        """Return to the standard opening position."""
        self.position = Position.initial()
        self.phase = TurnPhase.AWAITING_SELECTION
        self.selected = None
        self._status = self._evaluate()
        logger.debug("game reset")

    # --- queries ---
    def query_state(self) -> GameStatus:
        return self._status

    def legal_moves(self) -> List[Move]:
        if self.phase is TurnPhase.AWAITING_PROMOTION_CHOICE:
            return []
        return legal_moves(self.position)

    # --- inputs ---
    def select_square(self, square: Any) -> SelectionResult:
        """Select a piece of the side to move and list where it may go."""
        if self.phase is TurnPhase.AWAITING_PROMOTION_CHOICE:
            return SelectionResult(rejected=RejectReason.PROMOTION_PENDING)
        sq = as_square(square)
        if sq is None:
            return SelectionResult(rejected=RejectReason.INVALID_COORDINATE)
        if self._status.game_over:
            return SelectionResult(rejected=RejectReason.GAME_OVER)
        piece = self.board.get(sq)
        if piece is None:
            return SelectionResult(rejected=RejectReason.NO_PIECE)
        if piece.color is not self.state.current_player:
            return SelectionResult(rejected=RejectReason.NOT_YOUR_PIECE)

        self.phase = TurnPhase.PIECE_SELECTED
        self.selected = sq
        return SelectionResult(legal_destinations=tuple(legal_destinations(self.position, sq)))

    def attempt_move(self, from_sq: Any, to_sq: Any, promotion: Any = None) -> MoveResult:
        """Validate and play ``from_sq`` -> ``to_sq`` for the side to move.

        Args:
            from_sq: Origin square as a ``(rank, file)`` pair.
            to_sq: Destination square as a ``(rank, file)`` pair.
            promotion: Optional replacement kind; when given for a promotion
                move it is committed at once instead of asking for a choice.
                Ignored for any other move.

        Returns:
            MoveResult: committed, promotion required, or rejected with a reason.
        """
        if self.phase is TurnPhase.AWAITING_PROMOTION_CHOICE:
            return MoveResult.reject(RejectReason.PROMOTION_PENDING)

        src, dst = as_square(from_sq), as_square(to_sq)
        if src is None or dst is None:
            return self._reject(RejectReason.INVALID_COORDINATE)
        if self._status.game_over:
            return self._reject(RejectReason.GAME_OVER)

        pos = self.position
        piece = self.board.get(src)
        if piece is None:
            return self._reject(RejectReason.NO_PIECE)
        color = self.state.current_player
        if piece.color is not color:
            return self._reject(RejectReason.NOT_YOUR_PIECE)

        if not is_valid_move(pos, src, dst, piece):
            if is_castle_attempt(piece, src, dst):
                return self._reject(RejectReason.ILLEGAL_CASTLE)
            if is_en_passant_attempt(piece, src, dst, self.board.is_occupied(dst)):
                return self._reject(RejectReason.ILLEGAL_EN_PASSANT)
            return self._reject(RejectReason.ILLEGAL_MOVE)
        if not is_move_safe(pos, src, dst, color):
            return self._reject(RejectReason.UNSAFE_MOVE)

        move = classify_move(pos, src, dst)
        if move.kind is MoveKind.PROMOTION and promotion is not None:
            kind = PieceKind.parse(promotion)
            if kind not in PROMOTION_KINDS:
                return self._reject(RejectReason.INVALID_PROMOTION)
            move = Move(src, dst, MoveKind.PROMOTION, promotion=kind)
        if move.kind is MoveKind.PROMOTION and move.promotion is None:
            self.state.promotion_pending = PendingPromotion(from_sq=src, to_sq=dst)
            self.phase = TurnPhase.AWAITING_PROMOTION_CHOICE
            self.selected = src
            logger.debug("promotion pending %s->%s", src, dst)
            return MoveResult(promotion_required=True, move=move)
        return self._commit(move)

    def choose_promotion(self, kind: Any) -> MoveResult:
        """Complete a pending promotion with ``kind`` (queen, rook, bishop or knight)."""
        pending = self.state.promotion_pending
        if pending is None or self.phase is not TurnPhase.AWAITING_PROMOTION_CHOICE:
            return MoveResult.reject(RejectReason.NO_PROMOTION_PENDING)
        choice = PieceKind.parse(kind)
        if choice not in PROMOTION_KINDS:
            return MoveResult.reject(RejectReason.INVALID_PROMOTION)
        move = Move(pending.from_sq, pending.to_sq, MoveKind.PROMOTION, promotion=choice)
        return self._commit(move)

    # --- internals ---
    def _reject(self, reason: RejectReason) -> MoveResult:
        self.phase = TurnPhase.AWAITING_SELECTION
        self.selected = None
        logger.debug("move rejected: %s", reason.value)
        return MoveResult.reject(reason)

    def _commit(self, move: Move) -> MoveResult:
        outcome = commit_move(self.position, move)
        self.phase = TurnPhase.AWAITING_SELECTION
        self.selected = None
        self._status = self._evaluate()
        logger.debug(
            "committed %s (%s) check=%s checkmate=%s stalemate=%s",
            move.to_uci(),
            move.kind.value,
            self._status.check,
            self._status.checkmate,
            self._status.stalemate,
        )
        return MoveResult.from_outcome(outcome)

    def _evaluate(self) -> GameStatus:
        color = self.state.current_player
        check = self.position.is_in_check(color)
        can_move = has_legal_moves(self.position, color)
        return GameStatus(
            current_player=color,
            check=check,
            checkmate=check and not can_move,
            stalemate=not check and not can_move,
        )

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data view of the whole game: 64 optional pieces plus the state fields."""
        st = self.state
        board = [
            [
                None if p is None else {"color": p.color.value, "kind": p.kind.value}
                for p in (self.board.get(Square(r, f)) for f in range(8))
            ]
            for r in range(8)
        ]
        dpm = st.last_double_pawn_move
        pending = st.promotion_pending
        return {
            "board": board,
            "current_player": st.current_player.value,
            "king_square": {c.value: list(sq) for c, sq in st.king_square.items()},
            "last_double_pawn_move": (
                None if dpm is None else {"color": dpm.color.value, "square": list(dpm.square)}
            ),
            "en_passant_target": None if st.en_passant_target is None else list(st.en_passant_target),
            "promotion_pending": (
                None
                if pending is None
                else {"from": list(pending.from_sq), "to": list(pending.to_sq)}
            ),
            "king_moved": {c.value: v for c, v in st.king_moved.items()},
            "rook_moved": {
                c.value: {side.value: v for side, v in sides.items()}
                for c, sides in st.rook_moved.items()
            },
            "phase": self.phase.value,
            "selected": None if self.selected is None else list(self.selected),
        }
