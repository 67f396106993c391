"""Algebraic-style notation for display. Has no influence on legality."""

from chessroom.chess.game import Move
from chessroom.chess.pieces import PIECE_LETTERS
from chessroom.core.shared_types import CastlingSide, PieceType

CASTLING_NOTATION: dict[CastlingSide, str] = {
    CastlingSide.KINGSIDE: "O-O",
    CastlingSide.QUEENSIDE: "O-O-O",
}


def move_notation(move: Move) -> str:
    """
    <piece letter><source file, pawn captures only><x on capture><destination>[=<promotion letter>]

    ex. "e4", "Nf3", "exd5", "Qxh7", "e8=Q", "O-O"

    NOTE: No disambiguation when two identical pieces can reach the same square (ex. "Nbd2" is written "Nd2").
    """
    if move.castling is not None:
        return CASTLING_NOTATION[move.castling]

    is_pawn = move.piece.type == PieceType.PAWN
    notation = PIECE_LETTERS[move.piece.type]
    if move.is_capture:
        if is_pawn:
            notation += move.from_position.file
        notation += "x"
    notation += move.to_position.to_algebraic()
    if move.promotion is not None:
        notation += f"={PIECE_LETTERS[move.promotion]}"
    return notation
