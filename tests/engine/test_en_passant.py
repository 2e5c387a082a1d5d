from __future__ import annotations

from chessrules.engine.errors import RejectReason
from chessrules.engine.game import Game
from chessrules.engine.move import MoveKind, Square, str_to_square
from chessrules.engine.pieces import Color, PieceKind
from chessrules.engine.state import DoublePawnMove


def sq(name: str) -> Square:
    return str_to_square(name)


def test_double_push_records_landing_square() -> None:
    game = Game.new()
    res = game.attempt_move(Square(6, 4), Square(4, 4))
    assert res.committed and not res.is_en_passant

    st = game.state
    assert st.last_double_pawn_move == DoublePawnMove(color=Color.WHITE, square=Square(4, 4))
    assert st.en_passant_target == Square(4, 4)
    assert st.current_player is Color.BLACK
    assert game.to_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"


def test_single_push_clears_bookkeeping() -> None:
    game = Game.new()
    game.attempt_move(sq("e2"), sq("e4"))
    game.attempt_move(sq("e7"), sq("e6"))
    assert game.state.last_double_pawn_move is None
    assert game.state.en_passant_target is None


def test_white_captures_en_passant() -> None:
    game = Game.from_fen("4k3/2p5/8/3P4/8/8/8/4K3 b - - 0 1")
    assert game.attempt_move(Square(1, 2), Square(3, 2)).committed

    assert Square(2, 2) in game.select_square(Square(3, 3)).legal_destinations
    res = game.attempt_move(Square(3, 3), Square(2, 2))
    assert res.committed and res.is_en_passant
    assert res.move.kind is MoveKind.EN_PASSANT
    assert res.captured_square == Square(3, 2)

    assert game.board.get(Square(3, 2)) is None
    assert game.board.get(Square(3, 3)) is None
    pawn = game.board.get(Square(2, 2))
    assert pawn.kind is PieceKind.PAWN and pawn.color is Color.WHITE
    assert game.board.count(Color.BLACK, PieceKind.PAWN) == 0
    assert game.state.last_double_pawn_move is None


def test_black_captures_en_passant() -> None:
    game = Game.from_fen("4k3/8/8/8/3p4/8/4P3/4K3 w - - 0 1")
    game.attempt_move(sq("e2"), sq("e4"))
    res = game.attempt_move(Square(4, 3), Square(5, 4))
    assert res.committed and res.is_en_passant
    assert res.captured_square == Square(4, 4)
    assert game.board.get(Square(4, 4)) is None
    assert game.board.get(Square(5, 4)).color is Color.BLACK
    assert game.to_fen() == "4k3/8/8/8/8/4p3/8/4K3 w - - 0 2"


def test_right_expires_after_one_ply() -> None:
    game = Game.from_fen("4k3/2p5/8/3P4/8/8/8/4K3 b - - 0 1")
    game.attempt_move(sq("c7"), sq("c5"))
    game.attempt_move(sq("e1"), sq("e2"))
    game.attempt_move(sq("e8"), sq("e7"))

    res = game.attempt_move(sq("d5"), sq("c6"))
    assert res.rejected is RejectReason.ILLEGAL_EN_PASSANT
    assert game.board.get(sq("c5")).kind is PieceKind.PAWN


def test_rejected_attempt_keeps_the_right() -> None:
    game = Game.from_fen("4k3/2p5/8/3P4/8/8/8/4K3 b - - 0 1")
    game.attempt_move(sq("c7"), sq("c5"))
    assert game.attempt_move(sq("e1"), sq("e3")).rejected is RejectReason.ILLEGAL_MOVE
    assert game.attempt_move(sq("d5"), sq("c6")).is_en_passant


def test_pawn_that_did_not_just_advance_cannot_be_taken() -> None:
    game = Game.from_fen("4k3/8/8/2pP4/8/8/8/4K3 w - - 0 1")
    assert game.attempt_move(sq("d5"), sq("c6")).rejected is RejectReason.ILLEGAL_EN_PASSANT


def test_en_passant_that_exposes_king_is_unsafe() -> None:
    game = Game.from_fen("8/8/8/KPp4r/8/8/8/7k w - c6 0 1")
    assert game.attempt_move(sq("b5"), sq("c6")).rejected is RejectReason.UNSAFE_MOVE
