"""
The rules engine: entrypoint into the domain layer for the service layer.

Every function here is pure. A state goes in, a new state (or None for an illegal move) comes out, the input is never
modified. The only thing that raises is the orchestration of events outside the board (resigning, draw offers, flag
fall) when the game is not in a state that allows them.
"""

from dataclasses import replace
from typing import Optional

from chessroom.chess.board import Board
from chessroom.chess.castling import castling_rule_for_king_move
from chessroom.chess.clock import parse_time_control
from chessroom.chess.game import GameState, Move
from chessroom.chess.moves import (
    candidate_moves,
    en_passant_victim,
    is_in_check,
)
from chessroom.chess.notation import move_notation
from chessroom.chess.pieces import (
    PROMOTION_OPTIONS,
    Piece,
    forward_direction,
    opponent,
    promotion_rank,
)
from chessroom.chess.position import Position
from chessroom.core.exceptions import GameStateError
from chessroom.core.shared_types import CastlingSide, Color, PieceType, Status

__all__ = [
    "accept_draw",
    "apply_move",
    "create_initial_state",
    "decline_draw",
    "flag_fall",
    "has_any_legal_move",
    "is_in_check",
    "legal_moves",
    "offer_draw",
    "resign",
]


def create_initial_state(time_control: str = "10+0") -> GameState:
    """A fresh board, white to move, waiting for the first move. Both clocks get the base time of the time control."""
    seconds = parse_time_control(time_control).base_seconds
    return GameState(
        board=Board.starting_position(),
        turn=Color.WHITE,
        status=Status.WAITING,
        white_time=seconds,
        black_time=seconds,
    )


# --- LEGAL MOVES ---
def legal_moves(
    board: Board, position: Position, en_passant_target: Optional[Position] = None
) -> set[Position]:
    """
    Target squares the piece on `position` may legally move to
    ----

    1. generate the candidate (pseudo-legal) squares
    2. play each one on a scratch copy of the board
    3. keep those that do not leave your own king in check

    This is the only check filter: pins, moving into check and not resolving a check are all caught here.
    """
    piece = board.piece(position)
    if piece is None:
        return set()

    legal: set[Position] = set()
    for target in candidate_moves(board, position, en_passant_target):
        scratch = board.copy()
        _execute_on_board(scratch, piece, position, target, en_passant_target)
        if not is_in_check(scratch, piece.color):
            legal.add(target)
    return legal


def has_any_legal_move(
    board: Board, color: Color, en_passant_target: Optional[Position] = None
) -> bool:
    return any(
        legal_moves(board, position, en_passant_target)
        for position in board.locate_color(color)
    )


# --- STATE TRANSITION ---
def apply_move(
    state: GameState,
    from_position: Position,
    to_position: Position,
    promotion: Optional[PieceType | str] = None,
) -> Optional[GameState]:
    """
    Attempt a move. Returns the new state, or None if the move is not allowed.
    -----

    Rejected (without distinction) when the game is over, there is no piece to move, the piece is not the
    turn player's, or the target square is not among its legal moves.

    1. update the board (castling: also the rook, en passant: remove the taken pawn, promotion: swap the piece)
    2. set the en passant square (only after a two-square pawn push)
    3. append to the move history, flip the turn and clear any draw offer
    4. waiting -> playing on the first move
    5. check for checkmate / stalemate of the side that moves next
    """
    if state.is_over:
        return None

    piece = state.board.piece(from_position)
    if piece is None or piece.color != state.turn:
        return None

    if to_position not in legal_moves(state.board, from_position, state.en_passant_target):
        return None

    board = state.board.copy()
    captured, castling, en_passant = _execute_on_board(
        board, piece, from_position, to_position, state.en_passant_target
    )

    promoted_to: Optional[PieceType] = None
    if piece.type == PieceType.PAWN and to_position.row == promotion_rank(piece.color):
        promoted_to = _promotion_choice(promotion)
        board.place_piece(piece.promote_to(promoted_to), to_position)

    move = Move(
        from_position=from_position,
        to_position=to_position,
        piece=piece,
        captured=captured,
        promotion=promoted_to,
        castling=castling,
        en_passant=en_passant,
    )
    move = replace(move, notation=move_notation(move))

    next_turn = opponent(state.turn)
    en_passant_target = _en_passant_target_after(piece, from_position, to_position)
    status = Status.PLAYING if state.status == Status.WAITING else state.status
    winner: Optional[Color] = None
    if not has_any_legal_move(board, next_turn, en_passant_target):
        if is_in_check(board, next_turn):
            status = Status.CHECKMATE
            winner = state.turn
        else:
            status = Status.STALEMATE

    return replace(
        state,
        board=board,
        turn=next_turn,
        status=status,
        moves=state.moves + (move,),
        last_move=move,
        en_passant_target=en_passant_target,
        winner=winner,
        draw_offer=None,
    )


def _execute_on_board(
    board: Board,
    piece: Piece,
    from_position: Position,
    to_position: Position,
    en_passant_target: Optional[Position],
) -> tuple[Optional[Piece], Optional[CastlingSide], bool]:
    """
    Move the piece (and the side effects of castling / en passant) on the given board, in place.
    Shared by the legality test on scratch boards and the real state transition.

    Returns (captured piece, castling side, is en passant).
    """
    captured = board.piece(to_position)
    board.move_piece(from_position, to_position)

    if piece.type == PieceType.KING:
        rule = castling_rule_for_king_move(piece.color, from_position, to_position)
        if rule is not None:
            board.move_piece(rule.rook_from, rule.rook_to)
            return captured, rule.side, False

    if (
        piece.type == PieceType.PAWN
        and en_passant_target is not None
        and to_position == en_passant_target
    ):
        victim = en_passant_victim(to_position, piece.color)
        return board.remove_piece(victim), None, True

    return captured, None, False


def _promotion_choice(promotion: Optional[PieceType | str]) -> PieceType:
    """Anything that is not a knight, bishop, rook or queen becomes a queen."""
    if promotion is None:
        return PieceType.QUEEN
    try:
        choice = PieceType(promotion)
    except ValueError:
        return PieceType.QUEEN
    return choice if choice in PROMOTION_OPTIONS else PieceType.QUEEN


def _en_passant_target_after(
    piece: Piece, from_position: Position, to_position: Position
) -> Optional[Position]:
    """The square a pawn skipped with a two-square push. Lives for exactly one reply."""
    if piece.type != PieceType.PAWN or abs(to_position.row - from_position.row) != 2:
        return None
    return from_position.shifted(forward_direction(piece.color), 0)


# --- EVENTS OUTSIDE THE BOARD ---
def _assert_playing(state: GameState) -> None:
    if state.status != Status.PLAYING:
        raise GameStateError(f"Game is not in progress. status: {state.status}")


def resign(state: GameState, color: Color) -> GameState:
    _assert_playing(state)
    return replace(
        state, status=Status.RESIGNED, winner=opponent(color), draw_offer=None
    )


def offer_draw(state: GameState, color: Color) -> GameState:
    """Only one offer can be pending at a time. Any applied move withdraws it."""
    _assert_playing(state)
    if state.draw_offer is not None:
        raise GameStateError(
            f"There is already a pending draw offer by {state.draw_offer}."
        )
    return replace(state, draw_offer=color)


def _assert_offer_from_opponent(state: GameState, color: Color) -> None:
    if state.draw_offer is None:
        raise GameStateError("There is no pending draw offer.")
    if state.draw_offer == color:
        raise GameStateError("Cannot answer your own draw offer.")


def accept_draw(state: GameState, color: Color) -> GameState:
    _assert_playing(state)
    _assert_offer_from_opponent(state, color)
    return replace(state, status=Status.DRAW, winner=None, draw_offer=None)


def decline_draw(state: GameState, color: Color) -> GameState:
    _assert_playing(state)
    _assert_offer_from_opponent(state, color)
    return replace(state, draw_offer=None)


def flag_fall(state: GameState, loser: Color) -> GameState:
    """
    The `loser`'s clock ran out. Recorded as a checkmate for the opponent with the `loser`'s clock at zero,
    see `GameState.lost_on_time`.
    """
    _assert_playing(state)
    state = replace(state, status=Status.CHECKMATE, winner=opponent(loser), draw_offer=None)
    if loser == Color.WHITE:
        return replace(state, white_time=0)
    return replace(state, black_time=0)
