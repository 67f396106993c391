"""Unit tests for chessroom/chess/board.py"""

import pytest

from chessroom.chess.board import BACK_RANK_ORDER, Board
from chessroom.chess.pieces import Piece
from chessroom.chess.position import Position
from chessroom.core.shared_types import Color, PieceType

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
EMPTY_FEN = "/".join(["8"] * 8)


def test_starting_position(starting_board: Board) -> None:
    """16 pawns, and the back ranks in the order R N B Q K B N R for both colors"""
    pawns = [
        position
        for position, piece in starting_board.pieces()
        if piece.type == PieceType.PAWN
    ]
    assert len(pawns) == 16
    assert len(starting_board.locate_color(Color.WHITE)) == 16
    assert len(starting_board.locate_color(Color.BLACK)) == 16

    for col, piece_type in enumerate(BACK_RANK_ORDER):
        assert starting_board.piece(Position(7, col)) == Piece(piece_type, Color.WHITE)
        assert starting_board.piece(Position(0, col)) == Piece(piece_type, Color.BLACK)
        assert starting_board.piece(Position(6, col)) == Piece(PieceType.PAWN, Color.WHITE)
        assert starting_board.piece(Position(1, col)) == Piece(PieceType.PAWN, Color.BLACK)


def test_starting_position_matches_fen(starting_board: Board) -> None:
    assert starting_board == Board.from_fen(STARTING_POSITION)
    assert starting_board.to_fen() == STARTING_POSITION


@pytest.mark.parametrize(
    "fen",
    [
        STARTING_POSITION,
        EMPTY_FEN,
        "r3k2r/pppq1ppp/2npbn2/4p3/2B1P3/2NP1N2/PPP2PPP/R1BQ1RK1",
        "2kb1b1r/p1p1ppNp/2p2n2/3q2B1/6Q1/2NP4/PPP2PPP/R4RK1",
    ],
)
def test_fen_roundtrip(fen: str) -> None:
    assert Board.from_fen(fen).to_fen() == fen


def test_piece_outside_board_is_none(starting_board: Board) -> None:
    assert starting_board.piece(Position(-1, 0)) is None
    assert starting_board.piece(Position(0, 8)) is None


def test_move_piece_marks_piece_as_moved(starting_board: Board) -> None:
    e2 = Position.from_algebraic("e2")
    e4 = Position.from_algebraic("e4")
    starting_board.move_piece(e2, e4)
    assert starting_board.piece(e2) is None
    assert starting_board.piece(e4) == Piece(PieceType.PAWN, Color.WHITE, has_moved=True)


def test_remove_piece(starting_board: Board) -> None:
    d1 = Position.from_algebraic("d1")
    removed = starting_board.remove_piece(d1)
    assert removed == Piece(PieceType.QUEEN, Color.WHITE)
    assert starting_board.is_empty(d1)


def test_copy_is_independent(starting_board: Board) -> None:
    """Changing the copy must never show up on the original (no shared rows)."""
    copied = starting_board.copy()
    copied.move_piece(Position.from_algebraic("g1"), Position.from_algebraic("f3"))
    assert copied != starting_board
    assert starting_board.piece(Position.from_algebraic("g1")) == Piece(
        PieceType.KNIGHT, Color.WHITE
    )
    assert starting_board.is_empty(Position.from_algebraic("f3"))


def test_is_any_occupied(starting_board: Board) -> None:
    empty_squares = [Position.from_algebraic(sq) for sq in ["e4", "e5", "a3"]]
    assert not starting_board.is_any_occupied(empty_squares)
    assert starting_board.is_any_occupied(empty_squares + [Position.from_algebraic("a2")])


def test_find_king(starting_board: Board) -> None:
    assert starting_board.find_king(Color.WHITE) == Position.from_algebraic("e1")
    assert starting_board.find_king(Color.BLACK) == Position.from_algebraic("e8")


def test_missing_king_fails_loudly() -> None:
    """A board without a king is a programming error."""
    board = Board.from_fen("4k3/8/8/8/8/8/8/8")
    with pytest.raises(AssertionError):
        board.find_king(Color.WHITE)


def test_locate_pieces(starting_board: Board) -> None:
    knights = starting_board.locate_pieces(PieceType.KNIGHT, Color.BLACK)
    assert sorted(knights, key=lambda p: p.col) == [
        Position.from_algebraic("b8"),
        Position.from_algebraic("g8"),
    ]


def test_list_conversion_roundtrip(starting_board: Board) -> None:
    starting_board.move_piece(Position.from_algebraic("e2"), Position.from_algebraic("e4"))
    rows = starting_board.to_list()
    assert rows[4][4] == {"type": "pawn", "color": "white", "has_moved": True}
    assert rows[6][4] is None
    assert Board.from_list(rows) == starting_board
