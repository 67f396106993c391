"""Implementation of RoomRepository using SQLAlchemy"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chessroom.core.exceptions import RepositoryError
from chessroom.core.models import ChatMessageModel, RoomModel
from chessroom.db.schema import DBMessage, DBRoom, utc_now

logger = logging.getLogger(__name__)


def _as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes. Everything in this application is UTC."""
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone.utc)


class SQLRoomRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def create_room(self, room: RoomModel) -> RoomModel:
        """Store new room and return the stored data."""
        room_db = DBRoom(
            id=room.room_id,
            player_code=room.player_code,
            spectator_code=room.spectator_code,
            time_control=room.time_control,
            allow_spectators=room.allow_spectators,
            player_white_id=room.player_white_id,
            player_black_id=room.player_black_id,
            game_state=room.game_state,
            version=room.version,
            turn_started_at=room.turn_started_at,
        )
        self.db.add(room_db)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise RepositoryError(
                f"Could not store room {room.room_id}: id or access code already in use."
            ) from exc
        self.db.refresh(room_db)
        logger.info("Stored new room %s", room.room_id)
        return self._to_model(room_db)

    def get_room(self, room_id: UUID) -> RoomModel | None:
        """Get room by ID, if record exists."""
        room_db = self._fetch_room(room_id)
        if room_db:
            return self._to_model(room_db)
        return None

    def find_room_by_code(self, code: str) -> RoomModel | None:
        query = select(DBRoom).where(
            or_(DBRoom.player_code == code, DBRoom.spectator_code == code)
        )
        room_db = self.db.scalar(query)
        if room_db:
            return self._to_model(room_db)
        return None

    def update_room(
        self, room_id: UUID, room: RoomModel, expected_version: int
    ) -> RoomModel | None:
        """
        Compare-and-set on the version column.
        If another writer got there first, no row matches and nothing gets written.
        """
        statement = (
            update(DBRoom)
            .where(DBRoom.id == room_id, DBRoom.version == expected_version)
            .values(
                time_control=room.time_control,
                allow_spectators=room.allow_spectators,
                player_white_id=room.player_white_id,
                player_black_id=room.player_black_id,
                game_state=room.game_state,
                turn_started_at=room.turn_started_at,
                version=expected_version + 1,
                updated_at=utc_now(),
            )
        )
        result = self.db.execute(statement)
        if result.rowcount != 1:
            self.db.rollback()
            logger.warning(
                "Rejected update of room %s: expected version %d is stale",
                room_id,
                expected_version,
            )
            return None
        self.db.commit()
        room_db = self._fetch_room(room_id)
        if room_db is None:
            return None
        self.db.refresh(room_db)
        return self._to_model(room_db)

    def add_message(self, message: ChatMessageModel) -> ChatMessageModel:
        message_db = DBMessage(
            room_id=message.room_id,
            sender_name=message.sender,
            message=message.text,
            is_spectator=message.is_spectator,
            created_at=message.timestamp,
        )
        self.db.add(message_db)
        self.db.commit()
        self.db.refresh(message_db)
        return self._message_to_model(message_db)

    def list_messages(self, room_id: UUID) -> list[ChatMessageModel]:
        query = (
            select(DBMessage)
            .where(DBMessage.room_id == room_id)
            .order_by(DBMessage.created_at, DBMessage.id)
        )
        return [self._message_to_model(message) for message in self.db.scalars(query)]

    def _fetch_room(self, room_id: UUID) -> DBRoom | None:
        query = select(DBRoom).where(DBRoom.id == room_id)
        return self.db.scalar(query)

    def _to_model(self, room_db: DBRoom) -> RoomModel:
        """Convert SQLAlchemy model to data transfer model."""
        return RoomModel(
            room_id=room_db.id,
            player_code=room_db.player_code,
            spectator_code=room_db.spectator_code,
            time_control=room_db.time_control,
            allow_spectators=room_db.allow_spectators,
            game_state=room_db.game_state,
            player_white_id=room_db.player_white_id,
            player_black_id=room_db.player_black_id,
            version=room_db.version,
            turn_started_at=_as_utc(room_db.turn_started_at),
        )

    def _message_to_model(self, message_db: DBMessage) -> ChatMessageModel:
        timestamp = _as_utc(message_db.created_at)
        assert timestamp is not None
        return ChatMessageModel(
            room_id=message_db.room_id,
            sender=message_db.sender_name,
            text=message_db.message,
            is_spectator=message_db.is_spectator,
            timestamp=timestamp,
        )
