"""
Pitch Board

Substitution scheduling for youth football: generates a rotation plan that
shares outfield minutes evenly, forecasts each player's playing time, lets the
coach edit the plan, and walks the sideline operator through it live.
"""
from .models import Player, SubstitutionEvent, PitchState, MatchClockSnapshot
from .services import (
    generate, replan_remaining, forecast, PlanEditor, LiveExecutionMonitor, MatchTimer,
)
from .ui import create_app, run_web_app
from .utils import fmt_mmss, now_ts, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "Player", "SubstitutionEvent", "PitchState", "MatchClockSnapshot",
    "generate", "replan_remaining", "forecast", "PlanEditor",
    "LiveExecutionMonitor", "MatchTimer", "create_app", "run_web_app",
    "fmt_mmss", "now_ts", "APP_TITLE",
]
