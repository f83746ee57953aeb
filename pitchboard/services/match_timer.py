"""Match timer service for the pitch board."""

import logging
from dataclasses import replace
from typing import Dict, Optional, Tuple

from ..errors import ClockConfigurationError
from ..models import MatchClockSnapshot
from ..utils import MAX_MINUTES_PER_HALF, MIN_MINUTES_PER_HALF, fmt_mmss, now_ts
from .match_store import MatchStore

logger = logging.getLogger(__name__)


class MatchTimer:
    """
    Two-half match clock.

    The timer keeps a MatchClockSnapshot whose ``elapsed_seconds`` is folded up
    to date on every control action, and publishes it to the store (when one is
    given) so the live monitor sees the same clock.
    """

    def __init__(self, clock: Optional[MatchClockSnapshot] = None, store: Optional[MatchStore] = None):
        self.store = store
        if clock is None and store is not None:
            clock = store.read_clock()
        self.clock = clock or MatchClockSnapshot()

    # ------------------------------------------------------------------
    # Configuration helpers
    # ------------------------------------------------------------------
    def configure(
        self,
        *,
        minutes_per_half: Optional[int] = None,
        team_name: Optional[str] = None,
        sound_enabled: Optional[bool] = None,
    ) -> MatchClockSnapshot:
        """Configure half length and display settings.

        Raises:
            ClockConfigurationError: If the half length changes after kickoff
                                     or is out of range.
        """
        if minutes_per_half is not None:
            minutes = int(minutes_per_half)
            if self.has_started() and minutes != self.clock.minutes_per_half:
                raise ClockConfigurationError("Cannot change half length after kickoff")
            if not MIN_MINUTES_PER_HALF <= minutes <= MAX_MINUTES_PER_HALF:
                raise ClockConfigurationError(
                    f"Half length must be between {MIN_MINUTES_PER_HALF} and {MAX_MINUTES_PER_HALF} minutes"
                )
            self.clock.minutes_per_half = minutes

        if team_name is not None:
            self.clock.team_name = team_name or None
        if sound_enabled is not None:
            self.clock.sound_enabled = bool(sound_enabled)
        return self._publish()

    # ------------------------------------------------------------------
    # Core timer controls
    # ------------------------------------------------------------------
    def start(self) -> MatchClockSnapshot:
        """Start or resume the clock for the current half."""
        self._fold()
        if self.clock.elapsed_seconds >= self.clock.half_duration_seconds:
            logger.info("Half %d is already over", self.clock.current_half)
            return self._publish()
        self.clock.is_running = True
        self.clock.last_update_time = now_ts()
        return self._publish()

    def pause(self) -> MatchClockSnapshot:
        """Stop the clock, keeping the elapsed time."""
        self._fold()
        self.clock.is_running = False
        return self._publish()

    def start_second_half(self) -> MatchClockSnapshot:
        """Move to half 2 with the clock stopped at zero."""
        self._fold()
        if self.clock.current_half == 2:
            return self._publish()
        self.clock.current_half = 2
        self.clock.elapsed_seconds = 0
        self.clock.is_running = False
        self.clock.last_update_time = now_ts()
        return self._publish()

    def adjust(self, seconds: int) -> MatchClockSnapshot:
        """Apply a manual correction to the current half, kept within the half."""
        self._fold()
        elapsed = self.clock.elapsed_seconds + int(seconds)
        self.clock.elapsed_seconds = max(0, min(elapsed, self.clock.half_duration_seconds))
        return self._publish()

    def reset(self) -> MatchClockSnapshot:
        """Back to kickoff, keeping the configuration."""
        self.clock = MatchClockSnapshot(
            minutes_per_half=self.clock.minutes_per_half,
            sound_enabled=self.clock.sound_enabled,
            team_name=self.clock.team_name,
            last_update_time=now_ts(),
        )
        return self._publish()

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def snapshot(self) -> MatchClockSnapshot:
        """Current clock projected to now, without changing the timer."""
        now = now_ts()
        return replace(
            self.clock,
            elapsed_seconds=self.clock.current_elapsed_seconds(now),
            last_update_time=now,
        )

    def has_started(self) -> bool:
        return (
            self.clock.is_running
            or self.clock.elapsed_seconds > 0
            or self.clock.current_half == 2
        )

    def get_total_elapsed_seconds(self) -> int:
        return self.clock.current_total_seconds(now_ts())

    def get_remaining_seconds(self) -> int:
        return max(0, self.clock.total_game_seconds - self.get_total_elapsed_seconds())

    def get_half_info(self) -> Tuple[int, bool]:
        """Return the half number and whether the clock is running."""
        return (self.clock.current_half, self.clock.is_running)

    def should_suggest_halftime(self) -> bool:
        return (
            self.clock.current_half == 1
            and self.clock.current_elapsed_seconds(now_ts()) >= self.clock.half_duration_seconds
        )

    def is_game_over(self) -> bool:
        return self.clock.is_game_finished(now_ts())

    def to_dict(self) -> Dict[str, object]:
        snap = self.snapshot()
        data = snap.to_dict()
        data.update({
            "total_elapsed_seconds": snap.current_total_seconds(snap.last_update_time),
            "remaining_seconds": self.get_remaining_seconds(),
            "display": fmt_mmss(snap.elapsed_seconds),
            "halftime_due": self.should_suggest_halftime(),
            "game_over": self.is_game_over(),
        })
        return data

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _fold(self) -> None:
        now = now_ts()
        self.clock.elapsed_seconds = self.clock.current_elapsed_seconds(now)
        self.clock.last_update_time = now
        if self.clock.is_running and self.clock.elapsed_seconds >= self.clock.half_duration_seconds:
            # clock stops itself at the end of each half
            self.clock.is_running = False
            logger.info("End of half %d", self.clock.current_half)

    def _publish(self) -> MatchClockSnapshot:
        if self.store is not None:
            self.store.write_clock(self.clock)
        return self.clock
