"""
Constants for the pitch board substitution engine.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Pitch Board"

# Match timing defaults
DEFAULT_MINUTES_PER_HALF = 20
MIN_MINUTES_PER_HALF = 1
MAX_MINUTES_PER_HALF = 60

# Team sizes supported by the formation table
SUPPORTED_TEAM_SIZES = [4, 7, 9, 11]
DEFAULT_TEAM_SIZE = 7

# Position labels
GOALKEEPER = "GK"
DEFENDER = "DEF"
MIDFIELDER = "MID"
FORWARD = "FWD"

# Rotation speed knob
ROTATION_SLOW = 1
ROTATION_MEDIUM = 2
ROTATION_FAST = 3
DEFAULT_ROTATION_SPEED = ROTATION_MEDIUM

# Plan generation
MIN_SUB_WINDOW_GAP_SECONDS = 45
REPLAN_MIN_SUB_INTERVAL_SECONDS = 120
ILLEGAL_CANDIDATE_WEIGHT = 0.5

# Live execution
LATE_SUB_TOLERANCE_SECONDS = 30
MIN_REBALANCE_INTERVAL_SECONDS = 60
POLL_INTERVAL_SECONDS = 2.0
SNOOZE_SECONDS = 60

# External store
REMOTE_STORE_TIMEOUT_SECONDS = 5
CLOCK_FILE_NAME = "match_clock.json"
PITCH_STATE_FILE_NAME = "pitch_state.json"
