"""
Boundary layer data model(s).

These objects are passed between the Service and the persistence layer.
The game state travels as the plain dict produced by `GameState.to_dict()`, so the storage layer never needs to know chess.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

# Type aliases to make the models easier to read
PlayerId = str
RoomCode = str


@dataclass
class RoomModel:
    """Transport-safe representation of a room: access codes, seats and the serialized game state."""

    room_id: UUID
    player_code: RoomCode
    spectator_code: RoomCode
    time_control: str
    allow_spectators: bool
    game_state: dict[str, Any]
    player_white_id: Optional[PlayerId] = None
    player_black_id: Optional[PlayerId] = None
    version: int = 0
    turn_started_at: Optional[datetime] = None


@dataclass
class ChatMessageModel:
    room_id: UUID
    sender: str
    text: str
    is_spectator: bool
    timestamp: datetime


@dataclass
class RoomEvent:
    """What subscribers of a room receive. `kind` is either "state" or "message"."""

    room_id: UUID
    kind: str
    payload: dict[str, Any] = field(default_factory=dict)
