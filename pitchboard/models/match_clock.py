"""
Match clock snapshot for the pitch board substitution engine.

The clock itself lives outside the engine; this read-only value is what the
engine sees of it, and the place where "seconds since kickoff" is derived.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..utils import DEFAULT_MINUTES_PER_HALF


@dataclass
class MatchClockSnapshot:
    """
    Represents the state of the match timer at ``last_update_time``.

    Attributes:
        minutes_per_half: Configured length of each half
        current_half: Half currently being played (1 or 2)
        elapsed_seconds: Seconds elapsed in the current half at last update
        is_running: Whether the clock was running at last update
        last_update_time: Epoch seconds when the snapshot was taken
        sound_enabled: Operator preference carried with the timer
        team_name: Display name for banners
    """
    minutes_per_half: int = DEFAULT_MINUTES_PER_HALF
    current_half: int = 1
    elapsed_seconds: int = 0
    is_running: bool = False
    last_update_time: float = 0.0
    sound_enabled: bool = True
    team_name: Optional[str] = None

    @property
    def half_duration_seconds(self) -> int:
        return int(self.minutes_per_half) * 60

    @property
    def total_game_seconds(self) -> int:
        return self.half_duration_seconds * 2

    def current_elapsed_seconds(self, now: float) -> int:
        """
        Seconds elapsed in the current half, projected forward to ``now``.

        Args:
            now: Current epoch seconds

        Returns:
            Elapsed seconds, capped at the half duration while running
        """
        elapsed = int(self.elapsed_seconds or 0)
        if self.is_running and self.last_update_time:
            passed = int(now - self.last_update_time)
            elapsed = min(elapsed + max(0, passed), self.half_duration_seconds)
        return elapsed

    def current_total_seconds(self, now: float) -> int:
        """Seconds since kickoff, counting half 2 as offset by one half."""
        elapsed = self.current_elapsed_seconds(now)
        if self.current_half == 2:
            return self.half_duration_seconds + elapsed
        return elapsed

    def is_game_finished(self, now: float) -> bool:
        """Full time: second half and its clock has reached the half length."""
        return self.current_half == 2 and self.current_elapsed_seconds(now) >= self.half_duration_seconds

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "minutes_per_half": self.minutes_per_half,
            "current_half": self.current_half,
            "elapsed_seconds": self.elapsed_seconds,
            "is_running": self.is_running,
            "last_update_time": self.last_update_time,
            "sound_enabled": self.sound_enabled,
            "team_name": self.team_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchClockSnapshot':
        """
        Create a snapshot from a dictionary.

        Raises:
            ValueError: If the half is not 1 or 2
        """
        half = int(data.get("current_half", 1) or 1)
        if half not in (1, 2):
            raise ValueError(f"Invalid half: {half}")
        return cls(
            minutes_per_half=int(data.get("minutes_per_half") or DEFAULT_MINUTES_PER_HALF),
            current_half=half,
            elapsed_seconds=int(data.get("elapsed_seconds", 0) or 0),
            is_running=bool(data.get("is_running", False)),
            last_update_time=float(data.get("last_update_time", 0) or 0),
            sound_enabled=bool(data.get("sound_enabled", True)),
            team_name=data.get("team_name"),
        )
