"""Database tables / schema"""

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, ForeignKey
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBRoom(Base):
    __tablename__ = "chess_rooms"
    id: Mapped[UUID] = mapped_column(primary_key=True)
    player_code: Mapped[str] = mapped_column(unique=True, index=True)
    spectator_code: Mapped[str] = mapped_column(unique=True, index=True)
    time_control: Mapped[str] = mapped_column(default="10+0")
    allow_spectators: Mapped[bool] = mapped_column(default=True)
    player_white_id: Mapped[Optional[str]]
    player_black_id: Mapped[Optional[str]]
    game_state: Mapped[dict[str, Any]] = mapped_column(JSON)
    version: Mapped[int] = mapped_column(default=0)
    turn_started_at: Mapped[Optional[datetime]]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(default=utc_now, onupdate=utc_now)


class DBMessage(Base):
    __tablename__ = "chess_messages"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    room_id: Mapped[UUID] = mapped_column(
        ForeignKey("chess_rooms.id", ondelete="CASCADE"), index=True
    )
    sender_name: Mapped[str]
    message: Mapped[str]
    is_spectator: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
