"""
Models package for the pitch board substitution engine.

This package contains the value types and pure invariant checks used throughout
the application.
"""
from .player import Player, PitchCoordinate
from .substitution import (
    PositionSwap, SubstitutionEvent, sort_plan, is_time_ordered, unexecuted,
)
from .roster import (
    ValidationResult, players_on_field, players_on_bench, find_player,
    check_field_count, check_plan_realizable,
)
from .formation import FormationLayout, FORMATIONS, position_from_coords, build_lineup
from .match_clock import MatchClockSnapshot
from .pitch_state import PitchState
from .forecast import PlayerTimeForecast, PlanForecast

__all__ = [
    "Player", "PitchCoordinate", "PositionSwap", "SubstitutionEvent",
    "sort_plan", "is_time_ordered", "unexecuted", "ValidationResult",
    "players_on_field", "players_on_bench", "find_player",
    "check_field_count", "check_plan_realizable",
    "FormationLayout", "FORMATIONS", "position_from_coords", "build_lineup",
    "MatchClockSnapshot", "PitchState", "PlayerTimeForecast", "PlanForecast",
]
