"""
Playing-time forecasts for a substitution plan.

Replays a plan against a lineup and reports how long every player would spend
on the pitch. The forecast depends only on its arguments, so it can be shown for
a freshly generated plan and for a hand-edited one alike.
"""
import logging
from typing import Dict, List, Sequence, Set

from ..models import PlanForecast, Player, PlayerTimeForecast, SubstitutionEvent, sort_plan
from ..utils import round_half_up

logger = logging.getLogger(__name__)


def _realizable(event: SubstitutionEvent, on_pitch: Set[str], seconds: Dict[str, int]) -> bool:
    return (
        event.player_out_id in on_pitch
        and event.player_in_id not in on_pitch
        and event.player_in_id in seconds
    )


def _replay_half(
    events: List[SubstitutionEvent],
    on_pitch: Set[str],
    seconds: Dict[str, int],
    half_duration_seconds: int,
) -> int:
    """Advance one half in place; returns the number of events that could not apply."""
    skipped = 0
    last_time = 0
    for event in events:
        event_time = max(last_time, min(event.time, half_duration_seconds))
        elapsed = event_time - last_time
        for player_id in on_pitch:
            seconds[player_id] += elapsed
        last_time = event_time

        if not _realizable(event, on_pitch, seconds):
            skipped += 1
            logger.debug("Forecast ignores unrealizable sub %s", event.key())
            continue
        on_pitch.discard(event.player_out_id)
        on_pitch.add(event.player_in_id)

    for player_id in on_pitch:
        seconds[player_id] += half_duration_seconds - last_time
    return skipped


def forecast(
    players: Sequence[Player],
    plan: Sequence[SubstitutionEvent],
    minutes_per_half: int,
) -> PlanForecast:
    """
    Predict each player's time on the pitch if the plan is followed.

    Args:
        players: Lineup at kickoff (on-pitch players have a position)
        plan: Substitution events; replayed in ``(half, time)`` order
        minutes_per_half: Length of each half in minutes

    Returns:
        PlanForecast with one entry per player, most minutes first
    """
    half_duration_seconds = int(minutes_per_half) * 60
    seconds: Dict[str, int] = {p.id: 0 for p in players}
    starters = {p.id for p in players if p.on_field}
    on_pitch = set(starters)

    ordered = sort_plan(plan)
    skipped = 0
    for half in (1, 2):
        skipped += _replay_half(
            [e for e in ordered if e.half == half], on_pitch, seconds, half_duration_seconds
        )
    return _summarize(players, plan, minutes_per_half, seconds, starters, skipped)


def forecast_remaining(
    players: Sequence[Player],
    plan: Sequence[SubstitutionEvent],
    minutes_per_half: int,
    played_until_seconds: int,
) -> PlanForecast:
    """
    Predict playing time part way through a match.

    Time already played comes from each player's ``minutes_played``; only the
    unexecuted events are replayed, starting from the live lineup. Overdue
    events are taken to happen at ``played_until_seconds``.

    Args:
        players: Live roster, credited up to ``played_until_seconds``
        plan: Substitution events; executed ones are history and are not replayed
        minutes_per_half: Length of each half in minutes
        played_until_seconds: Seconds since kickoff covered by ``minutes_played``

    Returns:
        PlanForecast; ``starts_on_pitch`` reports who is on the pitch now
    """
    half_duration_seconds = int(minutes_per_half) * 60
    full_time = 2 * half_duration_seconds
    seconds: Dict[str, int] = {p.id: p.minutes_played for p in players}
    on_now = {p.id for p in players if p.on_field}
    on_pitch = set(on_now)

    remaining = [e for e in sort_plan(plan) if not e.executed]
    skipped = 0
    last = min(max(0, played_until_seconds), full_time)
    for event in remaining:
        at = min(max(last, event.total_seconds(half_duration_seconds)), full_time)
        for player_id in on_pitch:
            seconds[player_id] += at - last
        last = at
        if not _realizable(event, on_pitch, seconds):
            skipped += 1
            logger.debug("Forecast ignores unrealizable sub %s", event.key())
            continue
        on_pitch.discard(event.player_out_id)
        on_pitch.add(event.player_in_id)

    for player_id in on_pitch:
        seconds[player_id] += full_time - last
    return _summarize(players, plan, minutes_per_half, seconds, on_now, skipped)


def _summarize(
    players: Sequence[Player],
    plan: Sequence[SubstitutionEvent],
    minutes_per_half: int,
    seconds: Dict[str, int],
    starters: Set[str],
    skipped: int,
) -> PlanForecast:
    total_game_minutes = 2 * minutes_per_half
    entries = []
    for player in players:
        played = seconds[player.id]
        minutes = played / 60
        percentage = round_half_up(minutes / total_game_minutes * 100) if total_game_minutes > 0 else 0
        entries.append(PlayerTimeForecast(
            player_id=player.id,
            name=player.name,
            number=player.number,
            predicted_seconds=played,
            predicted_minutes=round_half_up(minutes),
            percentage_of_game=percentage,
            starts_on_pitch=player.id in starters,
        ))
    entries.sort(key=lambda f: -f.predicted_minutes)

    if skipped:
        logger.info("Forecast skipped %d substitutions that could not be applied", skipped)
    return PlanForecast(
        minutes_per_half=minutes_per_half,
        substitution_count=len(plan),
        players=entries,
        skipped_events=skipped,
    )
