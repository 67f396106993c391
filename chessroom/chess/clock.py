"""
Time controls and clock arithmetic.

The engine itself has no notion of time. These helpers are what the service layer uses to charge thinking time to
a player and to display the clocks. All times are whole seconds.
"""

import math
from dataclasses import dataclass, replace
from typing import Optional, Self

from chessroom.chess.game import GameState
from chessroom.core.shared_types import Color

DEFAULT_MINUTES = 10
DEFAULT_INCREMENT = 0


@dataclass(frozen=True)
class TimeControl:
    """A time control of "10+5" means 10 minutes on each clock and 5 seconds added after every move."""

    minutes: int = DEFAULT_MINUTES
    increment: int = DEFAULT_INCREMENT

    @property
    def base_seconds(self) -> int:
        return self.minutes * 60

    @classmethod
    def parse(cls, time_control: str) -> Self:
        """Malformed parts fall back to their defaults (10 minutes, no increment)."""
        parts = time_control.split("+")
        minutes = _parse_whole_number(parts[0])
        increment = _parse_whole_number(parts[1]) if len(parts) > 1 else None
        return cls(
            minutes=minutes if minutes else DEFAULT_MINUTES,
            increment=increment if increment is not None else DEFAULT_INCREMENT,
        )

    def __str__(self) -> str:
        return f"{self.minutes}+{self.increment}"


def _parse_whole_number(text: str) -> Optional[int]:
    text = text.strip()
    if not text.isdigit():
        return None
    return int(text)


def parse_time_control(time_control: str) -> TimeControl:
    return TimeControl.parse(time_control)


def format_time(seconds: float) -> str:
    """Seconds -> "M:SS". Negative values are shown as 0:00."""
    total = max(0, int(seconds))
    minutes, secs = divmod(total, 60)
    return f"{minutes}:{secs:02d}"


def whole_seconds(elapsed_seconds: float) -> int:
    return max(0, math.floor(elapsed_seconds))


def remaining_time(state: GameState, color: Color, elapsed_seconds: float = 0) -> int:
    """Time left for `color` if their clock had been running for `elapsed_seconds`."""
    return max(0, state.time_left(color) - whole_seconds(elapsed_seconds))


def charge_clock(
    state: GameState, color: Color, elapsed_seconds: float, increment: int = 0
) -> GameState:
    """
    Deduct the thinking time from `color`'s clock.
    The increment is only awarded while there is time left: a clock that hit zero stays at zero.
    """
    remaining = remaining_time(state, color, elapsed_seconds)
    if remaining > 0:
        remaining += increment
    if color == Color.WHITE:
        return replace(state, white_time=remaining)
    return replace(state, black_time=remaining)
