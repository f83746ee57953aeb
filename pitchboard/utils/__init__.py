"""
Utilities package for the pitch board substitution engine.

This package contains utility functions and configuration constants.
"""
from .time_utils import fmt_mmss, now_ts, round_half_up
from .constants import (
    APP_TITLE, DEFAULT_MINUTES_PER_HALF, MIN_MINUTES_PER_HALF, MAX_MINUTES_PER_HALF,
    DEFAULT_TEAM_SIZE, SUPPORTED_TEAM_SIZES,
    GOALKEEPER, DEFENDER, MIDFIELDER, FORWARD,
    LATE_SUB_TOLERANCE_SECONDS, MIN_REBALANCE_INTERVAL_SECONDS,
    MIN_SUB_WINDOW_GAP_SECONDS, REPLAN_MIN_SUB_INTERVAL_SECONDS,
    POLL_INTERVAL_SECONDS, SNOOZE_SECONDS, REMOTE_STORE_TIMEOUT_SECONDS,
)

__all__ = [
    "fmt_mmss", "now_ts", "round_half_up", "APP_TITLE",
    "DEFAULT_MINUTES_PER_HALF", "MIN_MINUTES_PER_HALF", "MAX_MINUTES_PER_HALF",
    "DEFAULT_TEAM_SIZE", "SUPPORTED_TEAM_SIZES",
    "GOALKEEPER", "DEFENDER", "MIDFIELDER", "FORWARD",
    "LATE_SUB_TOLERANCE_SECONDS",
    "MIN_REBALANCE_INTERVAL_SECONDS", "MIN_SUB_WINDOW_GAP_SECONDS",
    "REPLAN_MIN_SUB_INTERVAL_SECONDS", "POLL_INTERVAL_SECONDS", "SNOOZE_SECONDS",
    "REMOTE_STORE_TIMEOUT_SECONDS",
]
