from __future__ import annotations

from chessrules.engine.board import INITIAL_ROWS, Board
from chessrules.engine.commit import commit_move
from chessrules.engine.legality import legal_moves
from chessrules.engine.move import Square, str_to_square
from chessrules.engine.pieces import Color, Piece, PieceKind
from chessrules.engine.position import Position


def test_initial_board_matches_encoding() -> None:
    b = Board.initial()
    assert b.to_rows() == list(INITIAL_ROWS)
    assert b.get(str_to_square("e1")).kind is PieceKind.KING
    assert b.get(str_to_square("e1")).color is Color.WHITE
    assert b.get(str_to_square("d8")).kind is PieceKind.QUEEN
    assert b.get(str_to_square("d8")).color is Color.BLACK
    assert b.get(str_to_square("e4")) is None


def test_one_king_per_color() -> None:
    b = Board.initial()
    assert b.count(Color.WHITE, PieceKind.KING) == 1
    assert b.count(Color.BLACK, PieceKind.KING) == 1
    assert b.find_king(Color.WHITE) == Square(7, 4)
    assert b.find_king(Color.BLACK) == Square(0, 4)


def test_out_of_range_squares_are_rejected_without_raising() -> None:
    b = Board.initial()
    for bad in [(-1, 0), (0, 8), (8, 8), (3,), "e4", None, (1.0, 2.0), (True, 0)]:
        assert not Board.is_valid_square(bad)
        assert b.get(bad) is None
        assert b.is_occupied(bad) is False
        assert b.set(bad, Piece(Color.WHITE, PieceKind.QUEEN)) is False
    assert b.to_rows() == list(INITIAL_ROWS)


def test_set_keeps_piece_square_in_sync() -> None:
    b = Board()
    rook = Piece(Color.WHITE, PieceKind.ROOK)
    knight = Piece(Color.BLACK, PieceKind.KNIGHT)
    b.set(Square(7, 0), rook)
    b.set(Square(3, 0), knight)
    assert rook.square == Square(7, 0)

    captured = b.move_piece(Square(7, 0), Square(3, 0))
    assert captured is knight
    assert knight.square is None
    assert rook.square == Square(3, 0)
    assert b.get(Square(7, 0)) is None
    assert b.get(Square(3, 0)) is rook


def test_pieces_scan_by_color() -> None:
    b = Board.initial()
    white = list(b.pieces(Color.WHITE))
    black = list(b.pieces(Color.BLACK))
    assert len(white) == 16 and len(black) == 16
    assert all(p.color is Color.WHITE for _, p in white)
    assert all(p.square == sq for sq, p in white)


def test_copy_is_independent() -> None:
    b = Board.initial()
    clone = b.copy()
    assert clone == b
    clone.move_piece(str_to_square("e2"), str_to_square("e4"))
    assert clone != b
    assert b.get(str_to_square("e2")) is not None
    assert b.get(str_to_square("e2")).square == str_to_square("e2")


def test_placement_round_trip() -> None:
    placement = "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R"
    b = Board.from_placement(placement)
    assert b.to_placement() == placement
    assert b.get(str_to_square("f3")).symbol == "Q"
    assert b.get(str_to_square("h3")).symbol == "p"


def test_one_king_per_color_after_every_move() -> None:
    root = Position.from_fen(
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1"
    )
    for first in legal_moves(root):
        child = root.copy()
        commit_move(child, first)
        _assert_kings(child)
        for second in legal_moves(child):
            grandchild = child.copy()
            commit_move(grandchild, second)
            _assert_kings(grandchild)


def _assert_kings(pos: Position) -> None:
    for color in Color:
        assert pos.board.count(color, PieceKind.KING) == 1
        assert pos.board.find_king(color) == pos.state.king_square[color]
