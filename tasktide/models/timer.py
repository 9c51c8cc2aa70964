"""
Pomodoro timer model for Tasktide.

The timer is tick driven: the caller owns the clock and calls tick() once per
elapsed second. Rendering the clock face and playing the expiry sound are left
to the caller.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


# Valid timer types
TIMER_TYPES = (
    "pomodoro",     # Focus session
    "short_break",  # Short break between sessions
    "long_break",   # Long break after several sessions
    "custom",       # User-chosen length
)

# Default preset lengths in minutes
DEFAULT_PRESETS = {
    "pomodoro": 25,
    "short_break": 5,
    "long_break": 15,
}


@dataclass
class PomodoroTimer:
    """
    A countdown timer with preset and custom durations.

    Attributes:
        timer_type: Active timer type (pomodoro, short_break, long_break, custom)
        presets: Preset lengths in minutes per non-custom type
        custom_minutes: Length used when timer_type is custom
        time_left: Remaining seconds
        is_running: Whether tick() currently counts down
    """

    timer_type: str = "pomodoro"
    presets: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PRESETS))
    custom_minutes: int = 25
    time_left: Optional[int] = None
    is_running: bool = False

    def __post_init__(self):
        if self.timer_type not in TIMER_TYPES:
            raise ValueError(
                f"Invalid timer type '{self.timer_type}'. "
                f"Must be one of: {', '.join(TIMER_TYPES)}"
            )
        if self.time_left is None:
            self.time_left = self.duration

    @classmethod
    def from_config(cls, timer_config) -> "PomodoroTimer":
        """Create a stopped pomodoro timer from a TimerConfig."""
        return cls(presets=dict(timer_config.presets), custom_minutes=timer_config.custom_minutes)

    @property
    def duration(self) -> int:
        """Full length of the active timer type in seconds."""
        if self.timer_type == "custom":
            return self.custom_minutes * 60
        return self.presets.get(self.timer_type, DEFAULT_PRESETS[self.timer_type]) * 60

    @property
    def is_expired(self) -> bool:
        return self.time_left == 0

    @property
    def fraction_remaining(self) -> float:
        """Remaining share of the full duration, for drawing the clock face."""
        if self.duration <= 0:
            return 0.0
        return self.time_left / self.duration

    @property
    def display(self) -> str:
        """Remaining time as MM:SS."""
        minutes, seconds = divmod(self.time_left, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def start(self) -> None:
        if self.time_left > 0:
            self.is_running = True

    def pause(self) -> None:
        self.is_running = False

    def reset(self) -> None:
        """Stop and rewind to the full duration."""
        self.is_running = False
        self.time_left = self.duration

    def change_type(self, timer_type: str) -> None:
        """Switch timer type; this stops and rewinds the timer."""
        if timer_type not in TIMER_TYPES:
            raise ValueError(
                f"Invalid timer type '{timer_type}'. "
                f"Must be one of: {', '.join(TIMER_TYPES)}"
            )
        self.timer_type = timer_type
        self.reset()

    def set_custom_minutes(self, minutes) -> None:
        """
        Set the custom length.

        Accepts an int or a numeric string as typed by the user. The new
        length applies to time_left immediately, as the timer screen does.

        Raises:
            ValueError: If minutes is not a positive whole number
        """
        try:
            value = int(str(minutes).strip())
        except ValueError:
            raise ValueError(f"Invalid custom time {minutes!r}: enter a whole number of minutes")
        if value <= 0:
            raise ValueError(f"Invalid custom time {minutes!r}: must be greater than zero")

        self.custom_minutes = value
        self.time_left = value * 60

    def tick(self, seconds: int = 1) -> bool:
        """
        Advance the countdown.

        Returns:
            True when this tick made the timer reach zero, False otherwise
        """
        if not self.is_running or self.time_left <= 0:
            return False

        self.time_left = max(0, self.time_left - seconds)
        if self.time_left == 0:
            self.is_running = False
            return True
        return False
