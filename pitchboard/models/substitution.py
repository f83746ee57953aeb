"""Substitution event model and plan ordering helpers."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple


@dataclass
class PositionSwap:
    """A third on-field player who changes position as a side effect of a sub."""
    player_id: str
    from_position: str
    to_position: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "player_id": self.player_id,
            "from_position": self.from_position,
            "to_position": self.to_position,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional[PositionSwap]:
        """Create from dictionary."""
        if not data:
            return None
        return cls(
            player_id=str(data["player_id"]),
            from_position=data["from_position"],
            to_position=data["to_position"],
        )


@dataclass
class SubstitutionEvent:
    """
    One planned swap: ``player_out_id`` leaves the pitch, ``player_in_id`` comes on.

    ``time`` is seconds elapsed within ``half`` (1 or 2).
    """
    half: int
    time: int
    player_out_id: str
    player_in_id: str
    position_swap: Optional[PositionSwap] = None
    executed: bool = False

    def total_seconds(self, half_duration_seconds: int) -> int:
        """Seconds since kickoff at which the event is scheduled."""
        if self.half == 1:
            return self.time
        return half_duration_seconds + self.time

    def key(self) -> Tuple[int, int, str, str]:
        """Identity used to find the same event in a freshly read plan."""
        return (self.half, self.time, self.player_out_id, self.player_in_id)

    def mark_executed(self) -> SubstitutionEvent:
        """Return an executed copy; the original is left untouched."""
        return replace(self, executed=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "half": self.half,
            "time": self.time,
            "player_out_id": self.player_out_id,
            "player_in_id": self.player_in_id,
            "position_swap": self.position_swap.to_dict() if self.position_swap else None,
            "executed": self.executed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SubstitutionEvent:
        """Create from dictionary."""
        half = int(data["half"])
        if half not in (1, 2):
            raise ValueError(f"Invalid half: {half}")
        return cls(
            half=half,
            time=int(data["time"]),
            player_out_id=str(data["player_out_id"]),
            player_in_id=str(data["player_in_id"]),
            position_swap=PositionSwap.from_dict(data.get("position_swap")),
            executed=bool(data.get("executed", False)),
        )


def plan_sort_key(event: SubstitutionEvent) -> Tuple[int, int, int]:
    # executed events stay ahead of unexecuted ones sharing a timestamp
    return (event.half, event.time, 0 if event.executed else 1)


def sort_plan(plan: Iterable[SubstitutionEvent]) -> List[SubstitutionEvent]:
    """Return a new plan totally ordered by ``(half, time)`` (stable)."""
    return sorted(plan, key=plan_sort_key)


def is_time_ordered(plan: List[SubstitutionEvent]) -> bool:
    """True when every event is at or after its predecessor's ``(half, time)``."""
    return all(
        (a.half, a.time) <= (b.half, b.time) for a, b in zip(plan, plan[1:])
    )


def unexecuted(plan: Iterable[SubstitutionEvent]) -> List[SubstitutionEvent]:
    """Events that have not been executed or skipped yet."""
    return [event for event in plan if not event.executed]


def plan_to_dicts(plan: Iterable[SubstitutionEvent]) -> List[Dict[str, Any]]:
    return [event.to_dict() for event in plan]


def plan_from_dicts(data: Optional[Iterable[Dict[str, Any]]]) -> List[SubstitutionEvent]:
    return [SubstitutionEvent.from_dict(item) for item in data or []]
