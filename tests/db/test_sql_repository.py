"""Unit tests for chessroom/db/sql_repository.py"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from chessroom.chess.rules import create_initial_state
from chessroom.core.exceptions import RepositoryError
from chessroom.core.models import ChatMessageModel, RoomModel
from chessroom.db.sql_repository import SQLRoomRepository


def make_room(player_code: str = "PLAY23", spectator_code: str = "WATCH7") -> RoomModel:
    return RoomModel(
        room_id=uuid4(),
        player_code=player_code,
        spectator_code=spectator_code,
        time_control="5+3",
        allow_spectators=True,
        game_state=create_initial_state("5+3").to_dict(),
    )


def test_create_room(db_session_repo: Session) -> None:
    """Conversion from a RoomModel to DBRoom for a new entry to the database."""
    model = make_room()
    repo = SQLRoomRepository(db_session_repo)
    stored = repo.create_room(model)
    assert isinstance(stored, RoomModel)
    assert stored == model


def test_duplicate_code_is_rejected(db_session_repo: Session) -> None:
    repo = SQLRoomRepository(db_session_repo)
    repo.create_room(make_room())
    with pytest.raises(RepositoryError):
        repo.create_room(make_room(spectator_code="OTHER9"))

    # the session is still usable afterwards
    assert repo.create_room(make_room("FRESH2", "FRESH3")).player_code == "FRESH2"


def test_get_room_by_id(db_session_repo: Session) -> None:
    repo = SQLRoomRepository(db_session_repo)
    expected = repo.create_room(make_room())
    assert repo.get_room(expected.room_id) == expected


def test_get_unknown_room(db_session_repo: Session) -> None:
    """NOTE with an empty database, any id is a valid test case."""
    repo = SQLRoomRepository(db_session_repo)
    assert repo.get_room(uuid4()) is None

    repo.create_room(make_room())
    assert repo.get_room(uuid4()) is None


def test_find_room_by_either_code(db_session_repo: Session) -> None:
    repo = SQLRoomRepository(db_session_repo)
    room = repo.create_room(make_room())

    by_player_code = repo.find_room_by_code("PLAY23")
    by_spectator_code = repo.find_room_by_code("WATCH7")
    assert by_player_code is not None and by_player_code.room_id == room.room_id
    assert by_spectator_code is not None and by_spectator_code.room_id == room.room_id
    assert repo.find_room_by_code("NOPE42") is None


def test_update_room(db_session_repo: Session) -> None:
    repo = SQLRoomRepository(db_session_repo)
    room = repo.create_room(make_room())
    started = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

    changed = replace(
        room,
        player_white_id="white-id",
        game_state={**room.game_state, "status": "playing"},
        turn_started_at=started,
    )
    updated = repo.update_room(room.room_id, changed, expected_version=0)

    assert updated is not None
    assert updated.version == 1
    assert updated.player_white_id == "white-id"
    assert updated.game_state["status"] == "playing"
    assert updated.turn_started_at == started
    assert repo.get_room(room.room_id) == updated


def test_stale_update_is_rejected(db_session_repo: Session) -> None:
    repo = SQLRoomRepository(db_session_repo)
    room = repo.create_room(make_room())

    first = repo.update_room(room.room_id, replace(room, player_white_id="a"), 0)
    assert first is not None

    # second writer read the room before the first update
    second = repo.update_room(room.room_id, replace(room, player_white_id="b"), 0)
    assert second is None

    stored = repo.get_room(room.room_id)
    assert stored is not None
    assert stored.player_white_id == "a"
    assert stored.version == 1


def test_update_unknown_room(db_session_repo: Session) -> None:
    repo = SQLRoomRepository(db_session_repo)
    assert repo.update_room(uuid4(), make_room(), 0) is None


def test_codes_are_never_updated(db_session_repo: Session) -> None:
    repo = SQLRoomRepository(db_session_repo)
    room = repo.create_room(make_room())
    updated = repo.update_room(room.room_id, replace(room, player_code="HACKED"), 0)
    assert updated is not None
    assert updated.player_code == "PLAY23"


def test_messages_oldest_first(db_session_repo: Session) -> None:
    repo = SQLRoomRepository(db_session_repo)
    room = repo.create_room(make_room())
    other = repo.create_room(make_room("OTHER2", "OTHER3"))
    start = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)

    texts = ["hello", "good luck", "gg"]
    for offset, text in enumerate(texts):
        repo.add_message(
            ChatMessageModel(
                room_id=room.room_id,
                sender="Alice",
                text=text,
                is_spectator=offset == 1,
                timestamp=start + timedelta(seconds=offset),
            )
        )
    repo.add_message(
        ChatMessageModel(other.room_id, "Bob", "wrong room", False, start)
    )

    messages = repo.list_messages(room.room_id)
    assert [message.text for message in messages] == texts
    assert [message.is_spectator for message in messages] == [False, True, False]
    assert messages[0].timestamp == start
    assert messages[0].timestamp.tzinfo is not None
    assert repo.list_messages(uuid4()) == []
