"""Requests and Response models"""

import re
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from chessroom.core.config import get_settings
from chessroom.core.exceptions import InvalidRequestError
from chessroom.core.shared_types import Color, PieceType, Status

TIME_CONTROL_PATTERN = re.compile(r"^\d{1,3}\+\d{1,3}$")
MAX_CHAT_MESSAGE_LENGTH = 500


def _is_algebraic_notation(value: str) -> bool:
    if len(value) != 2:
        return False
    file, rank = value[0], value[1]
    return file in "abcdefgh" and rank in "12345678"


def _validate_square(value: str) -> str:
    value = value.strip().lower()
    if not _is_algebraic_notation(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


# --- REQUEST MODELS ---
class CreateRoomRequest(BaseModel):
    time_control: str = Field(default_factory=lambda: get_settings().default_time_control)
    allow_spectators: bool = True

    @field_validator("time_control")
    @classmethod
    def validate_time_control(cls, value: str) -> str:
        value = value.strip()
        if not TIME_CONTROL_PATTERN.match(value):
            raise InvalidRequestError(
                f"Time control must look like '<minutes>+<increment seconds>', got {value!r}."
            )
        return value


class RoomRequest(BaseModel):
    """Anything addressed to a room by one of its codes."""

    code: str

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value.isalnum():
            raise InvalidRequestError(f"Invalid room code: {value!r}")
        return value


class GetRoomRequest(RoomRequest):
    pass


class JoinRoomRequest(RoomRequest):
    player_id: str


class PlayerActionRequest(RoomRequest):
    """Resign / offer draw / accept draw / decline draw."""

    player_id: str


class TimeoutClaimRequest(RoomRequest):
    pass


class LegalMovesRequest(RoomRequest):
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class MoveRequest(RoomRequest):
    player_id: str
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class ChatMessageRequest(RoomRequest):
    sender_name: str
    text: str
    player_id: Optional[str] = None

    @field_validator("text")
    @classmethod
    def validate_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Cannot send an empty message.")
        if len(value) > MAX_CHAT_MESSAGE_LENGTH:
            raise InvalidRequestError(
                f"Message is too long ({len(value)} > {MAX_CHAT_MESSAGE_LENGTH} characters)."
            )
        return value

    @field_validator("sender_name")
    @classmethod
    def validate_sender_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Sender name is required.")
        return value


# --- RESPONSE MODELS ---
class RoomResponse(BaseModel):
    room_id: UUID
    time_control: str
    allow_spectators: bool
    white_joined: bool
    black_joined: bool
    turn: Color
    status: Status
    winner: Optional[Color]
    draw_offer: Optional[Color]
    in_check: bool
    lost_on_time: Optional[Color] = None
    white_clock: str
    black_clock: str
    version: int
    game_state: dict[str, Any]


class CreateRoomResponse(BaseModel):
    player_code: str
    spectator_code: str
    room: RoomResponse


class JoinRoomResponse(BaseModel):
    color: Optional[Color]
    is_spectator: bool
    room: RoomResponse


class LegalMovesResponse(BaseModel):
    code: str
    square: str
    legal_moves: list[str]


class ChatMessageResponse(BaseModel):
    sender: str
    text: str
    is_spectator: bool
    timestamp: datetime
