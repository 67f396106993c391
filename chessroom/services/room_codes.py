"""Room access codes. Players and spectators get different codes, so a spectator link never grants a seat."""

import secrets

# No 0/O, 1/I: codes get read out loud and typed over.
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6


def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def generate_room_codes(length: int = ROOM_CODE_LENGTH) -> tuple[str, str]:
    """(player code, spectator code). Drawn independently, but never equal."""
    player_code = generate_room_code(length)
    spectator_code = generate_room_code(length)
    while spectator_code == player_code:
        spectator_code = generate_room_code(length)
    return player_code, spectator_code
