"""
Services package for the pitch board substitution engine.

This package contains the plan generator, forecaster, editor, live monitor and
the stores and timer they run against.
"""
from .plan_generator import generate, replan_remaining, ideal_seconds_per_player
from .time_forecaster import forecast, forecast_remaining
from .plan_editor import PlanEditor
from .live_monitor import (
    LiveExecutionMonitor, PendingSubstitution, ActionOutcome,
    find_pending, rebalance_remaining,
)
from .match_store import MatchStore, InMemoryMatchStore, JsonFileMatchStore, RemoteMatchStore
from .notifier import (
    NotificationKind, Notification, OperatorNotifier, LoggingNotifier, RecordingNotifier,
)
from .match_timer import MatchTimer
from .service_factory import ServiceFactory

__all__ = [
    "generate", "replan_remaining", "ideal_seconds_per_player", "forecast",
    "forecast_remaining",
    "PlanEditor", "LiveExecutionMonitor", "PendingSubstitution", "ActionOutcome",
    "find_pending", "rebalance_remaining", "MatchStore", "InMemoryMatchStore",
    "JsonFileMatchStore", "RemoteMatchStore", "NotificationKind", "Notification",
    "OperatorNotifier", "LoggingNotifier", "RecordingNotifier", "MatchTimer",
    "ServiceFactory",
]
