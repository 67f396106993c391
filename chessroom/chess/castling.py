"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass
from typing import Self

from chessroom.chess.pieces import back_rank
from chessroom.chess.position import Position
from chessroom.core.shared_types import CastlingSide, Color

KING_START_COL = 4


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If neither piece has moved, they are still standing on their starting squares.
    """

    king_from: Position
    king_to: Position
    rook_from: Position
    rook_to: Position

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below more readable"""
        return cls(
            Position.from_algebraic(k_from),
            Position.from_algebraic(k_to),
            Position.from_algebraic(r_from),
            Position.from_algebraic(r_to),
        )

    @property
    def side(self) -> CastlingSide:
        return (
            CastlingSide.KINGSIDE
            if self.rook_from.col > self.king_from.col
            else CastlingSide.QUEENSIDE
        )

    def squares_between(self) -> list[Position]:
        """Everything strictly between king and rook. All of these must be empty."""
        low, high = sorted((self.king_from.col, self.rook_from.col))
        return [Position(self.king_from.row, col) for col in range(low + 1, high)]

    def king_path(self) -> list[Position]:
        """The king's start, transit and destination squares. None of these may be attacked."""
        step = 1 if self.king_to.col > self.king_from.col else -1
        return [
            Position(self.king_from.row, col)
            for col in range(self.king_from.col, self.king_to.col + step, step)
        ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[tuple[Color, CastlingSide], CastlingSquares] = {
    (Color.WHITE, CastlingSide.KINGSIDE): CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    (Color.WHITE, CastlingSide.QUEENSIDE): CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    (Color.BLACK, CastlingSide.KINGSIDE): CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    (Color.BLACK, CastlingSide.QUEENSIDE): CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def king_home(color: Color) -> Position:
    return Position(back_rank(color), KING_START_COL)


def castling_rule_for_king_move(
    color: Color, from_position: Position, to_position: Position
) -> CastlingSquares | None:
    """A king move from its home square by two files is a castling move. Returns the matching rule (or None)."""
    if from_position != king_home(color):
        return None
    for side in CastlingSide:
        rule = CASTLING_RULES[(color, side)]
        if rule.king_from == from_position and rule.king_to == to_position:
            return rule
    return None
