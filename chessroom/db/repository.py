"""Protocols for the persistence + notification ports (SQLAlchemy implementation in sql_repository.py)"""

from typing import Callable, Protocol
from uuid import UUID

from chessroom.core.models import ChatMessageModel, RoomEvent, RoomModel


class RoomRepository(Protocol):
    """Persistence layer orchestration"""

    def create_room(self, room: RoomModel) -> RoomModel:
        """Store a new room and return the stored data."""
        ...

    def get_room(self, room_id: UUID) -> RoomModel | None:
        """Get room by ID, if record exists."""
        ...

    def find_room_by_code(self, code: str) -> RoomModel | None:
        """Look up a room by either its player code or its spectator code."""
        ...

    def update_room(
        self, room_id: UUID, room: RoomModel, expected_version: int
    ) -> RoomModel | None:
        """
        Optimistic update: only write if the stored version still equals `expected_version`.
        Returns the stored data (with its version bumped), or None when the record is missing or was changed in the meantime.
        """
        ...

    def add_message(self, message: ChatMessageModel) -> ChatMessageModel:
        """Append a chat message to a room."""
        ...

    def list_messages(self, room_id: UUID) -> list[ChatMessageModel]:
        """All messages of a room, oldest first."""
        ...


RoomListener = Callable[[RoomEvent], None]
Unsubscribe = Callable[[], None]


class RoomNotifier(Protocol):
    """Fans out room changes to every connected party (players and spectators)."""

    def publish(self, event: RoomEvent) -> None: ...

    def subscribe(self, room_id: UUID, on_change: RoomListener) -> Unsubscribe: ...
