"""Dataclasses describing projected playing time for a substitution plan."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class PlayerTimeForecast:
    """Projected playing time for a single player."""

    player_id: str
    name: str
    number: Optional[int]
    predicted_seconds: int
    predicted_minutes: int
    percentage_of_game: int
    starts_on_pitch: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "number": self.number,
            "predicted_seconds": self.predicted_seconds,
            "predicted_minutes": self.predicted_minutes,
            "percentage_of_game": self.percentage_of_game,
            "starts_on_pitch": self.starts_on_pitch,
        }


@dataclass
class PlanForecast:
    """Forecast for a whole plan, sorted by predicted minutes descending."""

    minutes_per_half: int
    substitution_count: int
    players: List[PlayerTimeForecast] = field(default_factory=list)
    skipped_events: int = 0

    @property
    def total_player_seconds(self) -> int:
        return sum(p.predicted_seconds for p in self.players)

    def for_player(self, player_id: str) -> Optional[PlayerTimeForecast]:
        return next((p for p in self.players if p.player_id == player_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "minutes_per_half": self.minutes_per_half,
            "substitution_count": self.substitution_count,
            "skipped_events": self.skipped_events,
            "total_player_seconds": self.total_player_seconds,
            "players": [p.to_dict() for p in self.players],
        }
