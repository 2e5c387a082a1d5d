from __future__ import annotations

from chessrules.engine.errors import RejectReason
from chessrules.engine.game import Game
from chessrules.engine.legality import legal_destinations
from chessrules.engine.move import CastleSide, MoveKind, Square, str_to_square
from chessrules.engine.pieces import Color, PieceKind
from chessrules.engine.position import Position


def sq(name: str) -> Square:
    return str_to_square(name)


def play(game: Game, *moves: str) -> None:
    for uci in moves:
        res = game.attempt_move(sq(uci[:2]), sq(uci[2:4]))
        assert res.committed, (uci, res.rejected)


def test_kingside_castle_after_clearing_the_path() -> None:
    game = Game.new()
    play(game, "e2e4", "e7e5", "g1f3", "b8c6", "f1c4", "g8f6")

    assert sq("g1") in game.select_square(sq("e1")).legal_destinations
    res = game.attempt_move(Square(7, 4), Square(7, 6))
    assert res.committed and res.is_castle
    assert res.move.kind is MoveKind.CASTLE
    assert res.move.castle_side is CastleSide.KINGSIDE

    king = game.board.get(Square(7, 6))
    rook = game.board.get(Square(7, 5))
    assert king.kind is PieceKind.KING and king.color is Color.WHITE
    assert rook.kind is PieceKind.ROOK and rook.color is Color.WHITE
    assert game.board.get(Square(7, 4)) is None
    assert game.board.get(Square(7, 7)) is None
    assert game.state.king_square[Color.WHITE] == Square(7, 6)
    assert game.state.king_moved[Color.WHITE]
    assert game.state.current_player is Color.BLACK
    assert game.to_fen().split()[2] == "kq"


def test_both_sides_available_with_clear_back_rank() -> None:
    pos = Position.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    dests = legal_destinations(pos, sq("e1"))
    assert sq("g1") in dests and sq("c1") in dests


def test_queenside_castle_moves_rook_to_d_file() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    res = game.attempt_move(sq("e8"), sq("c8"))
    assert res.committed and res.is_castle
    assert game.board.get(sq("c8")).kind is PieceKind.KING
    assert game.board.get(sq("d8")).kind is PieceKind.ROOK
    assert game.board.get(sq("a8")) is None
    assert game.to_fen().split()[2] == "KQ"


def test_cannot_castle_out_of_check() -> None:
    game = Game.from_fen("4rk1r/8/8/8/8/8/8/R3K2R w KQ - 0 1")
    assert game.query_state().check
    res = game.attempt_move(sq("e1"), sq("g1"))
    assert res.rejected is RejectReason.ILLEGAL_CASTLE
    assert game.board.get(sq("e1")).kind is PieceKind.KING


def test_cannot_castle_through_attacked_square() -> None:
    game = Game.from_fen("4k3/8/8/8/8/8/5r2/R3K2R w KQ - 0 1")
    dests = game.select_square(sq("e1")).legal_destinations
    assert sq("g1") not in dests
    assert sq("c1") in dests
    assert game.attempt_move(sq("e1"), sq("g1")).rejected is RejectReason.ILLEGAL_CASTLE


def test_cannot_castle_with_pieces_between() -> None:
    game = Game.new()
    assert game.attempt_move(sq("e1"), sq("g1")).rejected is RejectReason.ILLEGAL_CASTLE
    assert game.attempt_move(sq("e1"), sq("c1")).rejected is RejectReason.ILLEGAL_CASTLE


def test_king_that_moved_and_returned_cannot_castle() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    play(game, "e1f1", "a8a7", "f1e1", "a7a8")
    assert game.state.king_moved[Color.WHITE]
    assert game.attempt_move(sq("e1"), sq("g1")).rejected is RejectReason.ILLEGAL_CASTLE
    assert game.attempt_move(sq("e1"), sq("c1")).rejected is RejectReason.ILLEGAL_CASTLE
    assert game.to_fen().split()[2] == "k"


def test_rook_that_moved_and_returned_spends_only_its_side() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    play(game, "h1h2", "h8h7", "h2h1", "h7h8")
    assert game.state.rook_moved[Color.WHITE][CastleSide.KINGSIDE]
    assert game.attempt_move(sq("e1"), sq("g1")).rejected is RejectReason.ILLEGAL_CASTLE
    res = game.attempt_move(sq("e1"), sq("c1"))
    assert res.committed and res.is_castle


def test_capturing_a_corner_rook_spends_its_right() -> None:
    game = Game.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    play(game, "a1a8")
    assert game.to_fen().split()[2] == "Kk"
    assert sq("c8") not in game.select_square(sq("e8")).legal_destinations
