"""Unit tests for chessroom/chess/game.py"""

import json

import pytest

from chessroom.chess.board import Board
from chessroom.chess.game import GameState, Move
from chessroom.chess.pieces import Piece
from chessroom.chess.position import Position
from chessroom.chess.rules import apply_move, create_initial_state
from chessroom.core.shared_types import CastlingSide, Color, PieceType, Status


def at(sq: str) -> Position:
    return Position.from_algebraic(sq)


@pytest.fixture
def simple_move() -> Move:
    return Move(
        from_position=at("g1"),
        to_position=at("f3"),
        piece=Piece(PieceType.KNIGHT, Color.WHITE),
        notation="Nf3",
    )


# -- MOVE --
def test_move_to_dict_leaves_out_absent_fields(simple_move: Move) -> None:
    assert simple_move.to_dict() == {
        "from": {"row": 7, "col": 6},
        "to": {"row": 5, "col": 5},
        "piece": {"type": "knight", "color": "white", "has_moved": False},
        "notation": "Nf3",
    }


def test_move_to_dict_with_all_fields() -> None:
    move = Move(
        from_position=at("e5"),
        to_position=at("d6"),
        piece=Piece(PieceType.PAWN, Color.WHITE, has_moved=True),
        captured=Piece(PieceType.PAWN, Color.BLACK, has_moved=True),
        promotion=PieceType.QUEEN,
        castling=CastlingSide.KINGSIDE,
        en_passant=True,
        notation="exd6",
    )
    data = move.to_dict()
    assert data["captured"] == {"type": "pawn", "color": "black", "has_moved": True}
    assert data["promotion"] == "queen"
    assert data["castling"] == "kingside"
    assert data["en_passant"] is True
    assert Move.from_dict(data) == move


def test_move_from_dict(simple_move: Move) -> None:
    assert Move.from_dict(simple_move.to_dict()) == simple_move


@pytest.mark.parametrize(
    "captured, en_passant, expected",
    [
        (None, False, False),
        (Piece(PieceType.PAWN, Color.BLACK), False, True),
        (None, True, True),
    ],
)
def test_is_capture(
    simple_move: Move, captured: Piece | None, en_passant: bool, expected: bool
) -> None:
    move = Move(
        simple_move.from_position,
        simple_move.to_position,
        simple_move.piece,
        captured=captured,
        en_passant=en_passant,
    )
    assert move.is_capture is expected


# -- GAME STATE --
def test_initial_state_to_dict() -> None:
    data = create_initial_state("5+0").to_dict()
    assert data["turn"] == "white"
    assert data["status"] == "waiting"
    assert data["moves"] == []
    assert data["white_time"] == 300
    assert data["black_time"] == 300
    assert len(data["board"]) == 8
    assert all(len(row) == 8 for row in data["board"])
    assert data["board"][0][4] == {"type": "king", "color": "black", "has_moved": False}
    assert data["board"][4][4] is None
    for absent in ("last_move", "en_passant_target", "winner", "draw_offer"):
        assert absent not in data


def test_state_survives_json_round_trip() -> None:
    state = create_initial_state()
    for uci in ("e2e4", "a7a6", "e4e5", "d7d5"):
        state = apply_move(state, at(uci[:2]), at(uci[2:]))
        assert state is not None

    data = json.loads(json.dumps(state.to_dict()))
    assert data["en_passant_target"] == {"row": 2, "col": 3}
    assert data["last_move"]["notation"] == "d5"

    restored = GameState.from_dict(data)
    assert restored == state

    # the restored state plays on like the original
    assert apply_move(restored, at("e5"), at("d6")) == apply_move(state, at("e5"), at("d6"))


def test_finished_state_round_trip() -> None:
    state = GameState(
        board=Board.from_fen("7k/8/8/8/8/8/8/4K3"),
        turn=Color.BLACK,
        status=Status.RESIGNED,
        white_time=12,
        black_time=0,
        winner=Color.WHITE,
        draw_offer=Color.BLACK,
    )
    data = state.to_dict()
    assert data["winner"] == "white"
    assert data["draw_offer"] == "black"
    assert GameState.from_dict(data) == state


@pytest.mark.parametrize(
    "status, is_over",
    [
        (Status.WAITING, False),
        (Status.PLAYING, False),
        (Status.CHECKMATE, True),
        (Status.STALEMATE, True),
        (Status.DRAW, True),
        (Status.RESIGNED, True),
    ],
)
def test_is_over(status: Status, is_over: bool) -> None:
    state = GameState(
        board=Board.starting_position(),
        turn=Color.WHITE,
        status=status,
        white_time=60,
        black_time=60,
    )
    assert state.is_over is is_over


def test_time_left() -> None:
    state = GameState(
        board=Board.starting_position(),
        turn=Color.WHITE,
        status=Status.PLAYING,
        white_time=100,
        black_time=42,
    )
    assert state.time_left(Color.WHITE) == 100
    assert state.time_left(Color.BLACK) == 42


def test_state_is_immutable() -> None:
    state = create_initial_state()
    with pytest.raises(AttributeError):
        state.turn = Color.BLACK  # type: ignore[misc]


def test_state_is_only_shallowly_frozen() -> None:
    """The board inside is a mutable Board: states are compared by value but cannot be hashed"""
    state = create_initial_state()
    assert state == create_initial_state()
    with pytest.raises(TypeError):
        hash(state)


@pytest.mark.parametrize(
    "status, winner, white_time, black_time, lost_on_time",
    [
        (Status.CHECKMATE, Color.WHITE, 30, 0, Color.BLACK),
        (Status.CHECKMATE, Color.BLACK, 0, 12, Color.WHITE),
        (Status.CHECKMATE, Color.WHITE, 30, 5, None),
        (Status.RESIGNED, Color.WHITE, 30, 0, None),
        (Status.PLAYING, None, 30, 0, None),
    ],
)
def test_lost_on_time(
    status: Status,
    winner: Color | None,
    white_time: int,
    black_time: int,
    lost_on_time: Color | None,
) -> None:
    state = GameState(
        board=Board.starting_position(),
        turn=Color.WHITE,
        status=status,
        white_time=white_time,
        black_time=black_time,
        winner=winner,
    )
    assert state.lost_on_time == lost_on_time
