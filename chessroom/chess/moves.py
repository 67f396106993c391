"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the candidate target squares for each piece type.
Candidates are "pseudo-legal": they follow the movement shape of the piece, but may leave your own king in check.

Legality is checked later in rules.py
"""

from typing import Callable, Optional

from chessroom.chess.board import Board
from chessroom.chess.castling import CASTLING_RULES, CastlingSquares
from chessroom.chess.pieces import forward_direction, opponent, pawn_start_rank
from chessroom.chess.position import Position
from chessroom.core.shared_types import CastlingSide, Color, PieceType

Vector = tuple[int, int]

KNIGHT_DELTAS: list[Vector] = [
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
]
DIAGONALS: list[Vector] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
STRAIGHTS: list[Vector] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
KING_DELTAS: list[Vector] = DIAGONALS + STRAIGHTS


# --- MOVEMENT RULES ---
def raycasting_move(
    position: Position, board: Board, directions: list[Vector]
) -> list[Position]:
    """
    Raycasting algorithm
    -----

    We define move directions and move along them until we hit another piece or the edge of the board.
    The first occupied square is included only if it holds an opponent's piece (it can be captured).
    """
    piece = board.piece(position)
    assert piece is not None
    targets: list[Position] = []
    for d_row, d_col in directions:
        target = position.shifted(d_row, d_col)
        while target.is_within_bounds():
            occupant = board.piece(target)
            if occupant is not None:
                if occupant.color != piece.color:
                    targets.append(target)
                break
            targets.append(target)
            target = target.shifted(d_row, d_col)
    return targets


def single_step_move(
    position: Position, board: Board, deltas: list[Vector]
) -> list[Position]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that just move a single step along a direction"""
    piece = board.piece(position)
    assert piece is not None
    targets: list[Position] = []
    for d_row, d_col in deltas:
        target = position.shifted(d_row, d_col)
        if not target.is_within_bounds():
            continue
        occupant = board.piece(target)
        if occupant is None or occupant.color != piece.color:
            targets.append(target)
    return targets


def candidate_pawn_moves(position: Position, board: Board) -> list[Position]:
    """
    A pawn:
    - moves by a single square forward (onto an empty square).
    - It can move by two in their first move (so when on their starting rank), if both squares are empty
    - takes diagonally

    NOTE: En passant is added separately (see `en_passant_moves()`)
    """
    pawn = board.piece(position)
    assert pawn is not None
    direction = forward_direction(pawn.color)
    targets: list[Position] = []

    one_step = position.shifted(direction, 0)
    if one_step.is_within_bounds() and board.is_empty(one_step):
        targets.append(one_step)
        two_steps = position.shifted(2 * direction, 0)
        if position.row == pawn_start_rank(pawn.color) and board.is_empty(two_steps):
            targets.append(two_steps)

    for d_col in (-1, 1):
        target = position.shifted(direction, d_col)
        occupant = board.piece(target)
        if occupant is not None and occupant.color != pawn.color:
            targets.append(target)
    return targets


def candidate_knight_moves(position: Position, board: Board) -> list[Position]:
    """Knights always move such that |delta_row| + |delta_col| = 3"""
    return single_step_move(position, board, KNIGHT_DELTAS)


def candidate_bishop_moves(position: Position, board: Board) -> list[Position]:
    """Bishops move diagonally: |delta_row| = |delta_col|"""
    return raycasting_move(position, board, DIAGONALS)


def candidate_rook_moves(position: Position, board: Board) -> list[Position]:
    """Rooks move either horizontally or vertically"""
    return raycasting_move(position, board, STRAIGHTS)


def candidate_queen_moves(position: Position, board: Board) -> list[Position]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return candidate_bishop_moves(position, board) + candidate_rook_moves(
        position, board
    )


def candidate_king_moves(position: Position, board: Board) -> list[Position]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a special king move (handled separately).
    """
    return single_step_move(position, board, KING_DELTAS)


# -- STRATEGY PATTERN: MOVEMENT RULES ---
CandidateMovesFn = Callable[[Position, Board], list[Position]]
MOVEMENT_RULES: dict[PieceType, CandidateMovesFn] = {
    PieceType.PAWN: candidate_pawn_moves,
    PieceType.KNIGHT: candidate_knight_moves,
    PieceType.BISHOP: candidate_bishop_moves,
    PieceType.ROOK: candidate_rook_moves,
    PieceType.QUEEN: candidate_queen_moves,
    PieceType.KING: candidate_king_moves,
}


def candidate_moves(
    board: Board, position: Position, en_passant_target: Optional[Position] = None
) -> list[Position]:
    """
    All pseudo-legal target squares for the piece standing on `position`
    ----

    1. basic movement rule of the piece type
    2. pawns: the en passant square, if one of them can reach it
    3. kings: castling destinations
    """
    piece = board.piece(position)
    if piece is None:
        return []

    targets = MOVEMENT_RULES[piece.type](position, board)
    if piece.type == PieceType.PAWN and en_passant_target is not None:
        targets.extend(en_passant_moves(position, board, en_passant_target))
    if piece.type == PieceType.KING:
        targets.extend(castling_moves(position, board))
    return targets


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    position: Position,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Vector],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_move()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and that
    is allowed to move along the given direction?"_
    """
    for d_row, d_col in directions:
        target = position.shifted(d_row, d_col)
        while target.is_within_bounds():
            piece_found = board.piece(target)
            if piece_found is not None:
                # only the first piece found along the ray can see the square
                if piece_found.color == by_color and piece_found.type in by_piece_types:
                    return True
                break
            target = target.shifted(d_row, d_col)
    return False


def single_step_attack(
    position: Position,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Vector],
) -> bool:
    """Equivalent of `raycasting_attack()` for pieces that move a single step."""
    for d_row, d_col in deltas:
        piece_found = board.piece(position.shifted(d_row, d_col))
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type == by_piece_type
        ):
            return True
    return False


def is_attacked_by_pawn(position: Position, by_color: Color, board: Board) -> bool:
    """
    Pawns take diagonally
    ----

    NOTE: Pawn moves are not symmetric. To check IF a white pawn (moving UP the board) could take on the square,
    look one row DOWN the board. Hence, the row delta is the opposite of the pawn's forward direction.
    Pushes never attack anything.
    """
    back = -forward_direction(by_color)
    return single_step_attack(
        position, by_color, PieceType.PAWN, board, [(back, -1), (back, 1)]
    )


def is_attacked_by_knight(position: Position, by_color: Color, board: Board) -> bool:
    return single_step_attack(position, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS)


def is_attacked_by_bishop(position: Position, by_color: Color, board: Board) -> bool:
    return raycasting_attack(position, by_color, (PieceType.BISHOP,), board, DIAGONALS)


def is_attacked_by_rook(position: Position, by_color: Color, board: Board) -> bool:
    return raycasting_attack(position, by_color, (PieceType.ROOK,), board, STRAIGHTS)


def is_attacked_by_queen(position: Position, by_color: Color, board: Board) -> bool:
    return raycasting_attack(
        position, by_color, (PieceType.QUEEN,), board, DIAGONALS + STRAIGHTS
    )


def is_attacked_by_king(position: Position, by_color: Color, board: Board) -> bool:
    """Castling never captures, so only the adjacent squares count."""
    return single_step_attack(position, by_color, PieceType.KING, board, KING_DELTAS)


# --- STRATEGY PATTERN: ATTACKING RULES ---
IsAttackedFn = Callable[[Position, Color, Board], bool]
ATTACK_RULES: dict[PieceType, IsAttackedFn] = {
    PieceType.PAWN: is_attacked_by_pawn,
    PieceType.KNIGHT: is_attacked_by_knight,
    PieceType.BISHOP: is_attacked_by_bishop,
    PieceType.ROOK: is_attacked_by_rook,
    PieceType.QUEEN: is_attacked_by_queen,
    PieceType.KING: is_attacked_by_king,
}


def is_square_attacked(board: Board, position: Position, by_color: Color) -> bool:
    """Could any piece of `by_color` capture on `position`? Never consults castling."""
    return any(
        is_attacked(position, by_color, board) for is_attacked in ATTACK_RULES.values()
    )


def is_in_check(board: Board, color: Color) -> bool:
    return is_square_attacked(board, board.find_king(color), opponent(color))


# -- CASTLING MOVES ---
def castling_moves(position: Position, board: Board) -> list[Position]:
    """
    Castling destinations for the king standing on `position`
    ---

    **you are allowed to castle if**

    * Neither the king nor the rook of that side has moved.
    * All squares in between the king and the rook are empty.
    * None of the king's start, transit and destination squares are attacked (so also: you cannot castle out of check).
    """
    king = board.piece(position)
    if king is None or king.type != PieceType.KING or king.has_moved:
        return []

    destinations: list[Position] = []
    for side in CastlingSide:
        rule = CASTLING_RULES[(king.color, side)]
        if rule.king_from != position:
            continue
        if _can_castle(rule, king.color, board):
            destinations.append(rule.king_to)
    return destinations


def _can_castle(rule: CastlingSquares, color: Color, board: Board) -> bool:
    rook = board.piece(rule.rook_from)
    if rook is None or rook.type != PieceType.ROOK or rook.color != color:
        return False
    if rook.has_moved:
        return False
    if board.is_any_occupied(rule.squares_between()):
        return False
    attacker = opponent(color)
    return not any(
        is_square_attacked(board, square, attacker) for square in rule.king_path()
    )


# -- EN PASSANT MOVES ---
def en_passant_moves(
    position: Position, board: Board, en_passant_target: Position
) -> list[Position]:
    """The pawn on `position` may move onto the (empty) en passant square if that square is one of its diagonal steps."""
    pawn = board.piece(position)
    assert pawn is not None
    direction = forward_direction(pawn.color)
    is_diagonal_step = en_passant_target.row == position.row + direction and abs(
        en_passant_target.col - position.col
    ) == 1
    if is_diagonal_step and board.is_empty(en_passant_target):
        return [en_passant_target]
    return []


def en_passant_victim(to_position: Position, color: Color) -> Position:
    """
    The pawn taken en passant stands 'behind' the en passant square, seen from the capturing pawn.
    NOTE: same file as the en passant square, same row the capturing pawn started from.
    """
    return to_position.shifted(-forward_direction(color), 0)
