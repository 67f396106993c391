"""Custom exceptions shared by the domain, service and persistence layers."""


class ChessRoomError(Exception):
    """Base class for everything this application raises on purpose."""


# --- GAME ERRORS ---
class GameError(ChessRoomError):
    """Something about the game itself prevents the request."""


class GameStateError(GameError):
    """The game is not in a state that allows the request (ex. it already ended)."""


class IllegalMoveError(GameError):
    """The move is not legal in the current position."""


class NotYourTurnError(GameError):
    """The requesting player does not own the side to move."""


class TimeExpiredError(GameStateError):
    """The mover's clock ran out before the move arrived."""


# --- ROOM ERRORS ---
class RoomError(ChessRoomError):
    """Problems with joining / addressing a room."""


class RoomNotFoundError(RoomError):
    pass


class RoomFullError(RoomError):
    pass


class SpectatorsNotAllowedError(RoomError):
    pass


class ConcurrentUpdateError(RoomError):
    """The stored room changed after it was read. The caller should reload and retry."""


# --- OTHER LAYERS ---
class RepositoryError(ChessRoomError):
    pass


class InvalidRequestError(ChessRoomError):
    """Raised by request validators. Not a ValueError, so it surfaces as-is instead of inside a pydantic ValidationError."""
