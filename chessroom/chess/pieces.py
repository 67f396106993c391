"""Defines the chess pieces and the per-color conventions (direction of play, home ranks)"""

from dataclasses import dataclass, replace
from typing import Any, Self

from chessroom.chess.position import BOARD_DIMENSIONS
from chessroom.core.shared_types import Color, PieceType

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# Letters used in algebraic notation. Pawns have none.
PIECE_LETTERS: dict[PieceType, str] = {
    PieceType.KING: "K",
    PieceType.QUEEN: "Q",
    PieceType.ROOK: "R",
    PieceType.BISHOP: "B",
    PieceType.KNIGHT: "N",
    PieceType.PAWN: "",
}

PROMOTION_OPTIONS: tuple[PieceType, ...] = (
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
)

BACK_RANK_ORDER: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


def opponent(color: Color) -> Color:
    return Color.WHITE if color == Color.BLACK else Color.BLACK


def forward_direction(color: Color) -> int:
    """
    Row delta of a pawn step. White moves UP the board (towards row 0), black moves DOWN.

    Every rule that depends on the direction of play (pushes, captures, attacks, en passant, promotion) goes through here.
    """
    return -1 if color == Color.WHITE else 1


def back_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[0] - 1 if color == Color.WHITE else 0


def pawn_start_rank(color: Color) -> int:
    return back_rank(color) + forward_direction(color)


def promotion_rank(color: Color) -> int:
    """The farthest rank, seen from the pawn's side of the board."""
    return back_rank(opponent(color))


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color
    has_moved: bool = False

    @classmethod
    def from_fen(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def moved(self) -> Self:
        """Pieces are values: moving one produces a copy with the flag set."""
        return replace(self, has_moved=True)

    def promote_to(self, new_type: PieceType) -> Self:
        return replace(self, type=new_type, has_moved=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "color": self.color.value,
            "has_moved": self.has_moved,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            PieceType(data["type"]),
            Color(data["color"]),
            bool(data.get("has_moved", False)),
        )
