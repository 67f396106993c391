"""
Orchestration of communication from the API models to the rules engine and the persistence/notification ports (and the
reverse direction).

Every mutation follows the same pattern:
1. load the room and rebuild the GameState from its stored dict
2. check that the requester owns the seat / the turn
3. run the pure transition from the rules engine
4. write back with an optimistic version check (a stale read is rejected, nothing gets written or published)
5. publish the new state to every subscriber of the room
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from chessroom.api.models import (
    ChatMessageRequest,
    ChatMessageResponse,
    CreateRoomRequest,
    CreateRoomResponse,
    GetRoomRequest,
    JoinRoomRequest,
    JoinRoomResponse,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    PlayerActionRequest,
    RoomResponse,
    TimeoutClaimRequest,
)
from chessroom.chess.clock import (
    charge_clock,
    format_time,
    parse_time_control,
    remaining_time,
)
from chessroom.chess.game import GameState
from chessroom.chess.position import Position
from chessroom.chess.rules import (
    accept_draw,
    apply_move,
    create_initial_state,
    decline_draw,
    flag_fall,
    is_in_check,
    legal_moves,
    offer_draw,
    resign,
)
from chessroom.core.config import get_settings
from chessroom.core.exceptions import (
    ConcurrentUpdateError,
    GameStateError,
    IllegalMoveError,
    NotYourTurnError,
    RoomFullError,
    RoomNotFoundError,
    SpectatorsNotAllowedError,
    TimeExpiredError,
)
from chessroom.core.models import ChatMessageModel, RoomEvent, RoomModel
from chessroom.core.shared_types import Color, Status
from chessroom.db.repository import RoomNotifier, RoomRepository
from chessroom.db.schema import utc_now
from chessroom.services.room_codes import generate_room_codes

logger = logging.getLogger(__name__)

GameTransition = Callable[[GameState, Color], GameState]


class RoomService:
    """Orchestration of layers for a chess room: two players, any number of spectators and a chat."""

    def __init__(
        self,
        repository: RoomRepository,
        notifier: Optional[RoomNotifier] = None,
        clock: Callable[[], datetime] = utc_now,
        code_length: Optional[int] = None,
    ) -> None:
        self.repo = repository
        self.notifier = notifier
        self.clock = clock
        self.code_length = code_length or get_settings().room_code_length

    # -- ROOM LIFECYCLE ---
    def create_room(self, request: CreateRoomRequest) -> CreateRoomResponse:
        """A new room with a fresh game waiting for its first move. Nobody is seated yet."""
        player_code, spectator_code = generate_room_codes(self.code_length)
        time_control = str(parse_time_control(request.time_control))
        state = create_initial_state(time_control)
        room = RoomModel(
            room_id=uuid4(),
            player_code=player_code,
            spectator_code=spectator_code,
            time_control=time_control,
            allow_spectators=request.allow_spectators,
            game_state=state.to_dict(),
        )
        stored = self.repo.create_room(room)
        logger.info(
            "Created room %s (time control %s)", stored.room_id, stored.time_control
        )
        return CreateRoomResponse(
            player_code=stored.player_code,
            spectator_code=stored.spectator_code,
            room=self._room_response(stored),
        )

    def join_room(self, request: JoinRoomRequest) -> JoinRoomResponse:
        """
        Join by code
        ----

        * spectator code: watch only (if the room allows spectators)
        * player code: the first free seat, white before black. Joining again with the same player id gives back the same seat.
        """
        room = self._fetch_room(request.code)

        if request.code == room.spectator_code:
            return JoinRoomResponse(
                color=None, is_spectator=True, room=self._room_response(room)
            )

        seat = self._seat_of(room, request.player_id)
        if seat is not None:
            return JoinRoomResponse(
                color=seat, is_spectator=False, room=self._room_response(room)
            )

        if room.player_white_id is None:
            room.player_white_id = request.player_id
            seat = Color.WHITE
        elif room.player_black_id is None:
            room.player_black_id = request.player_id
            seat = Color.BLACK
        else:
            raise RoomFullError("Both seats in this room are taken.")

        stored = self._store(room, expected_version=room.version)
        logger.info("Player %s took the %s seat in room %s", request.player_id, seat, room.room_id)
        return JoinRoomResponse(
            color=seat, is_spectator=False, room=self._room_response(stored)
        )

    def get_room(self, request: GetRoomRequest) -> RoomResponse:
        return self._room_response(self._fetch_room(request.code))

    # -- PLAYING ---
    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Move hints for the piece on the given square. Nothing is playable once the game is over."""
        room = self._fetch_room(request.code)
        state = GameState.from_dict(room.game_state)
        targets: set[Position] = set()
        if not state.is_over:
            targets = legal_moves(
                state.board,
                Position.from_algebraic(request.square),
                state.en_passant_target,
            )
        return LegalMovesResponse(
            code=request.code,
            square=request.square,
            legal_moves=sorted(target.to_algebraic() for target in targets),
        )

    def make_move(self, request: MoveRequest) -> RoomResponse:
        """
        Attempt a move
        -----

        1. the requester must hold the seat of the side to move
        2. the thinking time since the previous move is charged to the mover. A fallen flag ends the game instead.
        3. the rules engine decides if the move is legal
        4. the increment is added, the new state persisted and published
        """
        room = self._fetch_room(request.code)
        state = GameState.from_dict(room.game_state)
        color = self._assert_seated(room, request.player_id, request.code)

        if state.is_over:
            raise GameStateError(f"Game is not in progress. status: {state.status}")
        if state.turn != color:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for {state.turn} to make a move first."
            )

        now = self.clock()
        elapsed = self._elapsed(room, state, now)
        if state.status == Status.PLAYING and remaining_time(state, color, elapsed) == 0:
            self._commit(room, flag_fall(state, color), now)
            raise TimeExpiredError(f"{color} ran out of time.")

        new_state = apply_move(
            state,
            Position.from_algebraic(request.from_square),
            Position.from_algebraic(request.to_square),
            request.promote_to,
        )
        if new_state is None:
            logger.warning(
                "Rejected move %s%s by %s in room %s",
                request.from_square,
                request.to_square,
                color,
                room.room_id,
            )
            raise IllegalMoveError(
                f"Move not allowed: {request.from_square}{request.to_square}"
            )

        increment = parse_time_control(room.time_control).increment
        new_state = charge_clock(new_state, color, elapsed, increment)
        stored = self._commit(room, new_state, now)
        logger.debug(
            "Room %s: %s played %s", room.room_id, color, new_state.moves[-1].notation
        )
        return self._room_response(stored)

    def claim_timeout(self, request: TimeoutClaimRequest) -> RoomResponse:
        """Anyone watching a clock may claim the flag fall. The server clock decides if the claim holds."""
        room = self._fetch_room(request.code)
        state = GameState.from_dict(room.game_state)
        if state.status != Status.PLAYING:
            raise GameStateError(f"Game is not in progress. status: {state.status}")

        now = self.clock()
        elapsed = self._elapsed(room, state, now)
        if remaining_time(state, state.turn, elapsed) > 0:
            raise GameStateError(f"The {state.turn} clock has not run out.")

        stored = self._commit(room, flag_fall(state, state.turn), now)
        logger.info("Room %s: %s lost on time", room.room_id, state.turn)
        return self._room_response(stored)

    def resign(self, request: PlayerActionRequest) -> RoomResponse:
        return self._player_action(request, resign)

    def offer_draw(self, request: PlayerActionRequest) -> RoomResponse:
        return self._player_action(request, offer_draw)

    def accept_draw(self, request: PlayerActionRequest) -> RoomResponse:
        return self._player_action(request, accept_draw)

    def decline_draw(self, request: PlayerActionRequest) -> RoomResponse:
        return self._player_action(request, decline_draw)

    # -- CHAT ---
    def send_message(self, request: ChatMessageRequest) -> ChatMessageResponse:
        """Chat is independent of the game: allowed before, during and after it. Anyone not seated is a spectator."""
        room = self._fetch_room(request.code)
        is_spectator = (
            request.code == room.spectator_code
            or request.player_id is None
            or self._seat_of(room, request.player_id) is None
        )
        message = self.repo.add_message(
            ChatMessageModel(
                room_id=room.room_id,
                sender=request.sender_name,
                text=request.text,
                is_spectator=is_spectator,
                timestamp=self.clock(),
            )
        )
        response = self._message_response(message)
        self._publish(
            RoomEvent(room.room_id, "message", response.model_dump(mode="json"))
        )
        return response

    def list_messages(self, request: GetRoomRequest) -> list[ChatMessageResponse]:
        room = self._fetch_room(request.code)
        return [
            self._message_response(message)
            for message in self.repo.list_messages(room.room_id)
        ]

    # -- Internal helpers --
    def _player_action(
        self, request: PlayerActionRequest, transition: GameTransition
    ) -> RoomResponse:
        room = self._fetch_room(request.code)
        color = self._assert_seated(room, request.player_id, request.code)
        state = GameState.from_dict(room.game_state)
        new_state = transition(state, color)
        stored = self._commit(room, new_state, room.turn_started_at)
        logger.info(
            "Room %s: %s by %s, status %s",
            room.room_id,
            transition.__name__,
            color,
            new_state.status,
        )
        return self._room_response(stored)

    def _commit(
        self, room: RoomModel, state: GameState, turn_started_at: Optional[datetime]
    ) -> RoomModel:
        """Write the new state. The running clock only exists while the game is being played."""
        room.game_state = state.to_dict()
        room.turn_started_at = (
            turn_started_at if state.status == Status.PLAYING else None
        )
        return self._store(room, expected_version=room.version)

    def _store(self, room: RoomModel, expected_version: int) -> RoomModel:
        stored = self.repo.update_room(room.room_id, room, expected_version)
        if stored is None:
            raise ConcurrentUpdateError(
                f"Room {room.room_id} was changed by someone else. Reload and try again."
            )
        self._publish(
            RoomEvent(
                stored.room_id,
                "state",
                self._room_response(stored).model_dump(mode="json"),
            )
        )
        return stored

    def _publish(self, event: RoomEvent) -> None:
        if self.notifier is not None:
            self.notifier.publish(event)

    def _elapsed(self, room: RoomModel, state: GameState, now: datetime) -> float:
        """Seconds on the clock of the side to move. The clocks only run while the game is being played."""
        if state.status != Status.PLAYING or room.turn_started_at is None:
            return 0.0
        return max(0.0, (now - room.turn_started_at).total_seconds())

    def _seat_of(self, room: RoomModel, player_id: str) -> Optional[Color]:
        if player_id == room.player_white_id:
            return Color.WHITE
        if player_id == room.player_black_id:
            return Color.BLACK
        return None

    def _assert_seated(self, room: RoomModel, player_id: str, code: str) -> Color:
        """The spectator code never grants a seat, even to a seated player."""
        seat = self._seat_of(room, player_id)
        if seat is None or code == room.spectator_code:
            raise NotYourTurnError(f"Player {player_id} is not playing in this room.")
        return seat

    def _fetch_room(self, code: str) -> RoomModel:
        """
        Attempt to find the room by one of its codes and raise error if it fails.
        Every operation goes through here, so a closed room's spectator code is refused for all of them.
        """
        room = self.repo.find_room_by_code(code)
        if room is None:
            raise RoomNotFoundError(f"No room with code {code!r}.")
        self._assert_spectators_allowed(room, code)
        return room

    def _assert_spectators_allowed(self, room: RoomModel, code: str) -> None:
        if code == room.spectator_code and not room.allow_spectators:
            raise SpectatorsNotAllowedError("This room does not allow spectators.")

    def _room_response(self, room: RoomModel) -> RoomResponse:
        state = GameState.from_dict(room.game_state)
        return RoomResponse(
            room_id=room.room_id,
            time_control=room.time_control,
            allow_spectators=room.allow_spectators,
            white_joined=room.player_white_id is not None,
            black_joined=room.player_black_id is not None,
            turn=state.turn,
            status=state.status,
            winner=state.winner,
            draw_offer=state.draw_offer,
            in_check=is_in_check(state.board, state.turn),
            lost_on_time=state.lost_on_time,
            white_clock=format_time(state.white_time),
            black_clock=format_time(state.black_time),
            version=room.version,
            game_state=room.game_state,
        )

    def _message_response(self, message: ChatMessageModel) -> ChatMessageResponse:
        return ChatMessageResponse(
            sender=message.sender,
            text=message.text,
            is_spectator=message.is_spectator,
            timestamp=message.timestamp,
        )
