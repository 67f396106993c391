"""In-process implementation of the RoomNotifier port."""

import logging
from collections import defaultdict
from threading import Lock
from uuid import UUID

from chessroom.core.models import RoomEvent
from chessroom.db.repository import RoomListener, Unsubscribe

logger = logging.getLogger(__name__)


class InMemoryNotifier:
    """Keeps listeners per room and calls them synchronously, in subscription order."""

    def __init__(self) -> None:
        self._listeners: dict[UUID, list[RoomListener]] = defaultdict(list)
        self._lock = Lock()

    def publish(self, event: RoomEvent) -> None:
        """The change is already stored when this runs: a failing listener is logged, the others still get the event."""
        with self._lock:
            listeners = list(self._listeners.get(event.room_id, []))
        logger.debug(
            "Publishing %s event for room %s to %d listener(s)",
            event.kind,
            event.room_id,
            len(listeners),
        )
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "Listener %r failed on %s event for room %s",
                    listener,
                    event.kind,
                    event.room_id,
                )

    def subscribe(self, room_id: UUID, on_change: RoomListener) -> Unsubscribe:
        with self._lock:
            self._listeners[room_id].append(on_change)

        def unsubscribe() -> None:
            with self._lock:
                listeners = self._listeners.get(room_id, [])
                if on_change in listeners:
                    listeners.remove(on_change)
                if not listeners:
                    self._listeners.pop(room_id, None)

        return unsubscribe

    def subscriber_count(self, room_id: UUID) -> int:
        with self._lock:
            return len(self._listeners.get(room_id, []))
