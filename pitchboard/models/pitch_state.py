"""
PitchState model for the pitch board substitution engine.

This module contains the PitchState dataclass: the shared snapshot of roster,
substitution plan and rotation flags that the live monitor reads before every
action and writes back after it.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .player import Player
from .roster import players_on_field
from .substitution import SubstitutionEvent, plan_from_dicts, plan_to_dicts, unexecuted
from ..utils import DEFAULT_TEAM_SIZE


@dataclass
class PitchState:
    """
    Represents the persisted pitch board for one match.

    Attributes:
        players: Full roster with positions
        plan: Substitution events ordered by (half, time)
        plan_active: Whether the plan is being followed live
        plan_paused: Operator paused the plan; nothing is surfaced while paused
        team_size: Configured number of players on the pitch
        selected_formation: Index into the formation table for ``team_size``
        team_id: Owning team, if any
        last_update_time: Epoch seconds of the last write
        last_timer_seconds: Seconds since kickoff when minutes were last credited
        executed_subs: Audit copy of every executed or skipped event
    """
    players: List[Player] = field(default_factory=list)
    plan: List[SubstitutionEvent] = field(default_factory=list)
    plan_active: bool = False
    plan_paused: bool = False
    team_size: int = DEFAULT_TEAM_SIZE
    selected_formation: int = 0
    team_id: Optional[str] = None
    last_update_time: float = 0.0
    last_timer_seconds: Optional[int] = None
    executed_subs: List[SubstitutionEvent] = field(default_factory=list)

    def remaining_events(self) -> List[SubstitutionEvent]:
        return unexecuted(self.plan)

    def refresh_plan_active(self) -> None:
        """Clear ``plan_active`` once every event has been executed or skipped."""
        self.plan_active = self.plan_active and bool(self.remaining_events())

    def catch_up_minutes(self, current_total_seconds: int) -> int:
        """
        Credit playing time accrued since the last save to on-pitch players.

        Args:
            current_total_seconds: Seconds since kickoff now

        Returns:
            Seconds credited to each on-pitch player (0 if none)
        """
        credited = 0
        if self.last_timer_seconds is not None:
            credited = max(0, current_total_seconds - self.last_timer_seconds)
            if credited:
                for player in players_on_field(self.players):
                    player.minutes_played += credited
        self.last_timer_seconds = current_total_seconds
        return credited

    def to_json(self) -> dict:
        """
        Convert PitchState to JSON-serializable dictionary.

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        return {
            "players": [p.to_dict() for p in self.players],
            "plan": plan_to_dicts(self.plan),
            "plan_active": self.plan_active,
            "plan_paused": self.plan_paused,
            "team_size": self.team_size,
            "selected_formation": self.selected_formation,
            "team_id": self.team_id,
            "last_update_time": self.last_update_time,
            "last_timer_seconds": self.last_timer_seconds,
            "executed_subs": plan_to_dicts(self.executed_subs),
        }

    @staticmethod
    def from_json(data: dict) -> "PitchState":
        """
        Create PitchState from JSON dictionary.

        Args:
            data: Dictionary with pitch state data

        Returns:
            New PitchState instance

        Raises:
            KeyError, ValueError, TypeError: If the dictionary is malformed
        """
        last_timer = data.get("last_timer_seconds")
        return PitchState(
            players=[Player.from_dict(p) for p in data.get("players", [])],
            plan=plan_from_dicts(data.get("plan")),
            plan_active=bool(data.get("plan_active", False)),
            plan_paused=bool(data.get("plan_paused", False)),
            team_size=int(data.get("team_size", DEFAULT_TEAM_SIZE)),
            selected_formation=int(data.get("selected_formation", 0)),
            team_id=data.get("team_id"),
            last_update_time=float(data.get("last_update_time", 0) or 0),
            last_timer_seconds=int(last_timer) if last_timer is not None else None,
            executed_subs=plan_from_dicts(data.get("executed_subs")),
        )
