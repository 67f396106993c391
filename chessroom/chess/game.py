"""
Records of a game: the Move history entries and the GameState itself.

Both are frozen records. A new GameState is produced for every transition (see rules.py), so an old state can be kept
around (ex. for a rollback in the service layer) without ever changing underneath you.

Serialization
----
`to_dict()` / `from_dict()` convert into plain JSON-safe data for the storage layer.
Optional fields are left out of the dict entirely when they are absent.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Self

from chessroom.chess.board import Board
from chessroom.chess.pieces import Piece, opponent
from chessroom.chess.position import Position
from chessroom.core.shared_types import (
    TERMINAL_STATUSES,
    CastlingSide,
    Color,
    PieceType,
    Status,
)


@dataclass(frozen=True)
class Move:
    """Historical record of an accepted move. `piece` is the snapshot from before the move."""

    from_position: Position
    to_position: Position
    piece: Piece
    captured: Optional[Piece] = None
    promotion: Optional[PieceType] = None
    castling: Optional[CastlingSide] = None
    en_passant: bool = False
    notation: str = ""

    @property
    def is_capture(self) -> bool:
        return self.captured is not None or self.en_passant

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "from": self.from_position.to_dict(),
            "to": self.to_position.to_dict(),
            "piece": self.piece.to_dict(),
            "notation": self.notation,
        }
        if self.captured is not None:
            data["captured"] = self.captured.to_dict()
        if self.promotion is not None:
            data["promotion"] = self.promotion.value
        if self.castling is not None:
            data["castling"] = self.castling.value
        if self.en_passant:
            data["en_passant"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        captured = data.get("captured")
        promotion = data.get("promotion")
        castling = data.get("castling")
        return cls(
            from_position=Position.from_dict(data["from"]),
            to_position=Position.from_dict(data["to"]),
            piece=Piece.from_dict(data["piece"]),
            captured=Piece.from_dict(captured) if captured is not None else None,
            promotion=PieceType(promotion) if promotion is not None else None,
            castling=CastlingSide(castling) if castling is not None else None,
            en_passant=bool(data.get("en_passant", False)),
            notation=data.get("notation", ""),
        )


@dataclass(frozen=True, eq=True, unsafe_hash=False)
class GameState:
    """
    One position of a game plus everything needed to continue it.

    NOTE: only shallowly frozen. `board` is a mutable Board, so treat it as read-only: the rules engine always works on
    `board.copy()`. Because of that Board, a GameState is not hashable.
    """

    board: Board
    turn: Color
    status: Status
    white_time: int
    black_time: int
    moves: tuple[Move, ...] = field(default_factory=tuple)
    last_move: Optional[Move] = None
    en_passant_target: Optional[Position] = None
    winner: Optional[Color] = None
    draw_offer: Optional[Color] = None

    @property
    def is_over(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def time_left(self, color: Color) -> int:
        return self.white_time if color == Color.WHITE else self.black_time

    @property
    def lost_on_time(self) -> Optional[Color]:
        """A flag fall is stored as a checkmate where the loser's clock reads zero."""
        if self.status != Status.CHECKMATE or self.winner is None:
            return None
        loser = opponent(self.winner)
        return loser if self.time_left(loser) == 0 else None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "board": self.board.to_list(),
            "turn": self.turn.value,
            "status": self.status.value,
            "moves": [move.to_dict() for move in self.moves],
            "white_time": self.white_time,
            "black_time": self.black_time,
        }
        if self.last_move is not None:
            data["last_move"] = self.last_move.to_dict()
        if self.en_passant_target is not None:
            data["en_passant_target"] = self.en_passant_target.to_dict()
        if self.winner is not None:
            data["winner"] = self.winner.value
        if self.draw_offer is not None:
            data["draw_offer"] = self.draw_offer.value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        last_move = data.get("last_move")
        en_passant_target = data.get("en_passant_target")
        winner = data.get("winner")
        draw_offer = data.get("draw_offer")
        return cls(
            board=Board.from_list(data["board"]),
            turn=Color(data["turn"]),
            status=Status(data["status"]),
            white_time=int(data["white_time"]),
            black_time=int(data["black_time"]),
            moves=tuple(Move.from_dict(move) for move in data.get("moves", [])),
            last_move=Move.from_dict(last_move) if last_move is not None else None,
            en_passant_target=(
                Position.from_dict(en_passant_target)
                if en_passant_target is not None
                else None
            ),
            winner=Color(winner) if winner is not None else None,
            draw_offer=Color(draw_offer) if draw_offer is not None else None,
        )
