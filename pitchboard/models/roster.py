"""
Roster partitions and invariant checks for the pitch board.

These helpers never mutate their inputs. They answer the questions every other
component keeps asking: who is on the pitch, who is on the bench, and does a
plan describe a sequence of swaps that can actually be carried out.
"""
from __future__ import annotations

import copy
from typing import Iterable, List, Optional, Set

from .player import Player
from .substitution import SubstitutionEvent, sort_plan


class ValidationResult:
    """Result of a validation operation with success status and error messages."""

    def __init__(self, is_valid: bool = True, errors: Optional[List[str]] = None):
        self.is_valid = is_valid
        self.errors = errors or []

    def add_error(self, error: str) -> None:
        """Add an error message and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False


def players_on_field(players: Iterable[Player]) -> List[Player]:
    return [p for p in players if p.on_field]


def players_on_bench(players: Iterable[Player]) -> List[Player]:
    return [p for p in players if not p.on_field]


def find_player(players: Iterable[Player], player_id: str) -> Optional[Player]:
    """Look up a player by id."""
    for player in players:
        if player.id == player_id:
            return player
    return None


def copy_players(players: Iterable[Player]) -> List[Player]:
    """Deep copy so snapshots can be edited without touching the caller's list."""
    return [copy.deepcopy(p) for p in players]


def check_field_count(players: Iterable[Player], team_size: int) -> ValidationResult:
    """Validate that exactly ``team_size`` players are on the pitch."""
    result = ValidationResult()
    roster = list(players)
    count = len(players_on_field(roster))
    if count != team_size:
        result.add_error(f"Expected {team_size} players on the pitch, found {count}")

    ids = [p.id for p in roster]
    if len(ids) != len(set(ids)):
        result.add_error("Player ids must be unique")
    return result


def check_plan_realizable(
    players: Iterable[Player],
    plan: Iterable[SubstitutionEvent],
    team_size: Optional[int] = None,
    *,
    include_executed: bool = True,
) -> ValidationResult:
    """
    Replay a plan in ``(half, time)`` order and report every impossible step.

    A step is impossible when the outgoing player is not on the pitch or the
    incoming player is not on the bench at that point of the replay.

    Args:
        players: Lineup the replay starts from
        plan: Events to replay
        team_size: When given, the on-pitch count is checked after every step
        include_executed: Replay executed events too (kickoff lineup semantics)

    Returns:
        ValidationResult listing each failing step
    """
    roster = list(players)
    result = ValidationResult()
    known_ids = {p.id for p in roster}
    on_pitch: Set[str] = {p.id for p in players_on_field(roster)}

    if team_size is not None and len(on_pitch) != team_size:
        result.add_error(f"Lineup has {len(on_pitch)} players on the pitch, expected {team_size}")

    for step, event in enumerate(sort_plan(plan), start=1):
        if event.executed and not include_executed:
            continue
        label = f"Sub {step} (half {event.half}, {event.time}s)"
        if event.player_out_id not in known_ids or event.player_in_id not in known_ids:
            result.add_error(f"{label} references an unknown player")
            continue
        if event.player_out_id == event.player_in_id:
            result.add_error(f"{label} swaps a player with themselves")
            continue
        if event.player_out_id not in on_pitch:
            result.add_error(f"{label}: outgoing player {event.player_out_id} is not on the pitch")
            continue
        if event.player_in_id in on_pitch:
            result.add_error(f"{label}: incoming player {event.player_in_id} is not on the bench")
            continue
        on_pitch.discard(event.player_out_id)
        on_pitch.add(event.player_in_id)
        if team_size is not None and len(on_pitch) != team_size:
            result.add_error(f"{label} leaves {len(on_pitch)} players on the pitch")

    return result
