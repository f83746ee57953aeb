"""
Substitution plan generation for equal playing time.

The generator splits the match into evenly spaced sub windows and, at each one,
greedily swaps the most-played outfield player on the pitch for the least-played
player on the bench, honouring position eligibility where it can. Goalkeepers
are kept out of the rotation; a goalkeeper-only bench player replaces the
starting keeper at the start of the second half.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..models import Player, PositionSwap, SubstitutionEvent, sort_plan
from ..utils import (
    GOALKEEPER, MIN_SUB_WINDOW_GAP_SECONDS, REPLAN_MIN_SUB_INTERVAL_SECONDS,
)
from ..utils.constants import (
    ILLEGAL_CANDIDATE_WEIGHT, ROTATION_FAST, ROTATION_MEDIUM, ROTATION_SLOW,
)

logger = logging.getLogger(__name__)


@dataclass
class RosterSplit:
    """The roster partitioned the way the rotation problem needs it."""
    gk_on_pitch: Optional[Player]
    gk_on_bench: Optional[Player]
    outfield: List[Player]
    outfield_on_pitch: List[Player]
    outfield_on_bench: List[Player]

    def halftime_keeper_swap(self) -> Optional[SubstitutionEvent]:
        if self.gk_on_pitch is None or self.gk_on_bench is None:
            return None
        return SubstitutionEvent(
            half=2,
            time=0,
            player_out_id=self.gk_on_pitch.id,
            player_in_id=self.gk_on_bench.id,
        )


@dataclass
class _Entry:
    id: str
    time: int
    player: Player


@dataclass
class _Candidate:
    player_out: Player
    player_in: Player
    score: float
    position_valid: bool
    position_swap: Optional[PositionSwap] = None


def split_roster(players: Sequence[Player]) -> RosterSplit:
    """
    Separate goalkeepers from the outfield rotation pool.

    Injured bench players are left out entirely: they are never brought on.
    """
    on_pitch = [p for p in players if p.on_field]
    bench = [p for p in players if not p.on_field and not p.is_injured]

    gk_on_pitch = next((p for p in on_pitch if p.current_pitch_position == GOALKEEPER), None)
    gk_on_bench = next((p for p in bench if p.is_goalkeeper_only()), None)

    outfield = [
        p for p in players
        if p.current_pitch_position != GOALKEEPER
        and not p.is_goalkeeper_only()
        and not (p.is_injured and not p.on_field)
    ]
    outfield_ids = {p.id for p in outfield}
    return RosterSplit(
        gk_on_pitch=gk_on_pitch,
        gk_on_bench=gk_on_bench,
        outfield=outfield,
        outfield_on_pitch=[p for p in on_pitch if p.id in outfield_ids],
        outfield_on_bench=[p for p in bench if p.id in outfield_ids],
    )


def ideal_seconds_per_player(players: Sequence[Player], team_size: int, half_duration_seconds: int) -> int:
    """Equal share of outfield pitch time: ``floor(2 * half * (team_size - 1) / outfield)``."""
    split = split_roster(players)
    if not split.outfield or team_size <= 1:
        return 0
    total_field_seconds = 2 * half_duration_seconds * (team_size - 1)
    return total_field_seconds // len(split.outfield)


def subs_per_window(rotation_speed: int, bench_size: int, disable_batch_subs: bool) -> int:
    """How many simultaneous swaps each window may hold."""
    if disable_batch_subs or bench_size < 2:
        return 1
    if rotation_speed == ROTATION_MEDIUM:
        return min(2, bench_size)
    if rotation_speed == ROTATION_FAST:
        return min(3, bench_size)
    return 1


def windows_per_half(
    rotation_speed: int,
    bench_size: int,
    outfield_count: int,
    subs_at_once: int,
    half_duration_seconds: int,
) -> int:
    """Number of sub windows per half, clamped to keep windows 45 seconds apart."""
    min_subs_needed = max(bench_size, math.ceil(outfield_count / 2))
    if rotation_speed == ROTATION_SLOW:
        windows = max(2, math.ceil(min_subs_needed / subs_at_once))
    elif rotation_speed == ROTATION_FAST:
        windows = max(4, math.ceil(min_subs_needed * 1.5 / subs_at_once))
    else:
        windows = max(3, math.ceil(min_subs_needed * 1.2 / subs_at_once))

    max_windows = half_duration_seconds // MIN_SUB_WINDOW_GAP_SECONDS
    return min(windows, max_windows)


def window_times(half_duration_seconds: int, windows: int) -> List[int]:
    """Evenly spaced window times: ``floor(i * half / (windows + 1))``."""
    if windows <= 0:
        return []
    return [i * half_duration_seconds // (windows + 1) for i in range(1, windows + 1)]


class _RotationTracker:
    """Who is on the pitch, in which slot, and how long everyone has played."""

    def __init__(self, outfield: Sequence[Player], starters: Sequence[Player]):
        self.players: Dict[str, Player] = {p.id: p for p in outfield}
        self.playing_time: Dict[str, int] = {p.id: 0 for p in outfield}
        # insertion order matters: ties are broken by who has been on longest
        self.on_pitch: Dict[str, Optional[str]] = {
            p.id: p.current_pitch_position for p in starters
        }

    def advance(self, seconds: int) -> None:
        for player_id in self.on_pitch:
            self.playing_time[player_id] += seconds

    def pitch_sorted(self) -> List[_Entry]:
        entries = [
            _Entry(pid, self.playing_time[pid], self.players[pid])
            for pid in self.on_pitch if pid in self.players
        ]
        return sorted(entries, key=lambda e: -e.time)

    def bench_sorted(self) -> List[_Entry]:
        entries = [
            _Entry(p.id, self.playing_time[p.id], p)
            for p in self.players.values() if p.id not in self.on_pitch
        ]
        return sorted(entries, key=lambda e: e.time)

    def apply(self, player_out: Player, player_in: Player, swap: Optional[PositionSwap]) -> None:
        incoming = swap.from_position if swap else self.on_pitch.get(player_out.id)
        self.on_pitch.pop(player_out.id, None)
        self.on_pitch[player_in.id] = incoming
        if swap:
            self.on_pitch[swap.player_id] = swap.to_position


def _best_candidate(
    tracker: _RotationTracker,
    on_pitch_sorted: List[_Entry],
    bench_sorted: List[_Entry],
    used_out: Set[str],
    used_in: Set[str],
    disable_position_swaps: bool,
) -> Optional[_Candidate]:
    candidates: List[_Candidate] = []
    pitch_entries = [e for e in on_pitch_sorted if e.id not in used_out]
    bench_entries = [e for e in bench_sorted if e.id not in used_in]

    for bench_entry in bench_entries:
        incoming = bench_entry.player
        for pitch_entry in pitch_entries:
            slot = tracker.on_pitch.get(pitch_entry.id)
            advantage = pitch_entry.time - bench_entry.time
            if advantage <= 0:
                continue

            has_legal = False
            if incoming.can_play(slot):
                candidates.append(_Candidate(pitch_entry.player, incoming, advantage, True))
                has_legal = True

            if not disable_position_swaps and slot is not None:
                for swap_id, swap_slot in list(tracker.on_pitch.items()):
                    if swap_id == pitch_entry.id or swap_id in used_out or swap_id in used_in:
                        continue
                    swap_player = tracker.players.get(swap_id)
                    if swap_player is None or swap_slot is None:
                        continue
                    if swap_player.can_play(slot) and incoming.can_play(swap_slot):
                        candidates.append(_Candidate(
                            pitch_entry.player,
                            incoming,
                            advantage,
                            True,
                            PositionSwap(player_id=swap_id, from_position=swap_slot, to_position=slot),
                        ))
                        has_legal = True

            if not has_legal:
                candidates.append(_Candidate(
                    pitch_entry.player, incoming, advantage * ILLEGAL_CANDIDATE_WEIGHT, False
                ))

    if not candidates:
        return None
    # max() keeps the first of equal keys, so earlier (fresher) pairings win ties
    return max(candidates, key=lambda c: (c.position_valid, c.score))


def generate(
    players: Sequence[Player],
    team_size: int,
    half_duration_seconds: int,
    rotation_speed: int = ROTATION_MEDIUM,
    disable_position_swaps: bool = False,
    disable_batch_subs: bool = False,
) -> List[SubstitutionEvent]:
    """
    Build a substitution plan for both halves.

    Args:
        players: Roster; on-pitch players have a position, bench players do not
        team_size: Players on the pitch, goalkeeper included
        half_duration_seconds: Length of each half
        rotation_speed: 1 slow, 2 medium, 3 fast
        disable_position_swaps: Never move a third player to make a sub legal
        disable_batch_subs: One swap per window at most

    Returns:
        Events ordered by (half, time); empty when there is nothing to schedule
    """
    if not players or team_size <= 0 or half_duration_seconds <= 0:
        return []

    split = split_roster(players)
    if not split.outfield_on_bench and split.gk_on_bench is None:
        return []

    plan: List[SubstitutionEvent] = []
    keeper_swap = split.halftime_keeper_swap()

    if not split.outfield_on_bench:
        if keeper_swap:
            plan.append(keeper_swap)
        return plan

    logger.debug(
        "Ideal share %ss per outfield player (%d outfield, %d field positions)",
        (2 * half_duration_seconds * (team_size - 1)) // len(split.outfield),
        len(split.outfield),
        team_size - 1,
    )

    bench_size = len(split.outfield_on_bench)
    subs_at_once = subs_per_window(rotation_speed, bench_size, disable_batch_subs)
    windows = windows_per_half(
        rotation_speed, bench_size, len(split.outfield), subs_at_once, half_duration_seconds
    )

    tracker = _RotationTracker(split.outfield, split.outfield_on_pitch)

    for half in (1, 2):
        last_time = 0
        for sub_time in window_times(half_duration_seconds, windows):
            tracker.advance(sub_time - last_time)
            last_time = sub_time

            on_pitch_sorted = tracker.pitch_sorted()
            bench_sorted = tracker.bench_sorted()
            if not on_pitch_sorted or not bench_sorted:
                continue

            subs_this_window = min(subs_at_once, len(bench_sorted), len(on_pitch_sorted))
            used_out: Set[str] = set()
            used_in: Set[str] = set()

            for sub_idx in range(subs_this_window):
                available_pitch = [e for e in on_pitch_sorted if e.id not in used_out]
                available_bench = [e for e in bench_sorted if e.id not in used_in]
                if not available_pitch or not available_bench:
                    break
                # only the first swap of a window needs a time advantage
                if sub_idx == 0 and available_pitch[0].time <= available_bench[0].time:
                    break

                best = _best_candidate(
                    tracker, on_pitch_sorted, bench_sorted, used_out, used_in, disable_position_swaps
                )
                if best is None:
                    break

                plan.append(SubstitutionEvent(
                    half=half,
                    time=sub_time,
                    player_out_id=best.player_out.id,
                    player_in_id=best.player_in.id,
                    position_swap=best.position_swap,
                ))
                used_out.add(best.player_out.id)
                used_in.add(best.player_in.id)
                tracker.apply(best.player_out, best.player_in, best.position_swap)

        tracker.advance(half_duration_seconds - last_time)

    if keeper_swap:
        plan.append(keeper_swap)

    plan = sort_plan(plan)
    logger.info(
        "Generated %d substitutions (speed=%s, %d windows/half, up to %d at once)",
        len(plan), rotation_speed, windows, subs_at_once,
    )
    return plan


def _replan_times(
    subs_needed: int,
    half_duration_seconds: int,
    current_elapsed_seconds: int,
    current_half: int,
) -> List[Tuple[int, int]]:
    remaining_in_half = half_duration_seconds - current_elapsed_seconds
    total_remaining = remaining_in_half + (half_duration_seconds if current_half == 1 else 0)
    interval = total_remaining / (subs_needed + 1)

    times: List[Tuple[int, int]] = []
    accumulated = 0.0
    for _ in range(subs_needed):
        accumulated += interval
        if current_half == 1 and accumulated + current_elapsed_seconds <= half_duration_seconds:
            times.append((1, int(current_elapsed_seconds + accumulated)))
        elif current_half == 1:
            times.append((2, int(accumulated - remaining_in_half)))
        else:
            times.append((2, int(current_elapsed_seconds + accumulated)))
    return times


def replan_remaining(
    players: Sequence[Player],
    team_size: int,
    half_duration_seconds: int,
    current_elapsed_seconds: int,
    current_half: int,
) -> List[SubstitutionEvent]:
    """
    Rebuild the rest of the match from the live roster.

    Players are ranked by ``minutes_played``; at most one swap per bench player
    is scheduled, no closer than two minutes apart.

    Returns:
        Events ordered by (half, time); empty when there is nothing to schedule
    """
    if team_size <= 0 or half_duration_seconds <= 0:
        return []

    split = split_roster(players)
    if not split.outfield_on_bench and split.gk_on_bench is None:
        return []

    keeper_swap = split.halftime_keeper_swap() if current_half == 1 else None
    plan: List[SubstitutionEvent] = []

    if not split.outfield_on_bench:
        if keeper_swap:
            plan.append(keeper_swap)
        return plan

    current_elapsed_seconds = max(0, min(current_elapsed_seconds, half_duration_seconds))
    remaining = half_duration_seconds - current_elapsed_seconds
    if current_half == 1:
        remaining += half_duration_seconds
    subs_needed = min(len(split.outfield_on_bench), remaining // REPLAN_MIN_SUB_INTERVAL_SECONDS)
    if subs_needed <= 0:
        return []

    outfield = {p.id: p for p in split.outfield}
    on_pitch: Dict[str, Optional[str]] = {
        p.id: p.current_pitch_position for p in split.outfield_on_pitch
    }

    for half, time in _replan_times(subs_needed, half_duration_seconds, current_elapsed_seconds, current_half):
        pitch_sorted = sorted(
            (outfield[pid] for pid in on_pitch if pid in outfield),
            key=lambda p: -p.minutes_played,
        )
        bench_sorted = sorted(
            (p for p in split.outfield if p.id not in on_pitch),
            key=lambda p: p.minutes_played,
        )
        if not pitch_sorted or not bench_sorted:
            continue

        chosen: Optional[Tuple[Player, Player, Optional[PositionSwap]]] = None
        for incoming in bench_sorted:
            for outgoing in pitch_sorted:
                slot = on_pitch.get(outgoing.id)
                if incoming.can_play(slot):
                    chosen = (outgoing, incoming, None)
                    break
                for swap_id, swap_slot in on_pitch.items():
                    if swap_id == outgoing.id or swap_id not in outfield:
                        continue
                    passenger = outfield[swap_id]
                    if (passenger.eligible_positions and slot in passenger.eligible_positions
                            and incoming.eligible_positions and swap_slot in incoming.eligible_positions):
                        chosen = (outgoing, incoming, PositionSwap(swap_id, swap_slot, slot))
                        break
                if chosen:
                    break
            if chosen:
                break

        if chosen is None:
            chosen = (pitch_sorted[0], bench_sorted[0], None)

        outgoing, incoming, swap = chosen
        plan.append(SubstitutionEvent(
            half=half,
            time=time,
            player_out_id=outgoing.id,
            player_in_id=incoming.id,
            position_swap=swap,
        ))
        slot = swap.from_position if swap else on_pitch.get(outgoing.id)
        on_pitch.pop(outgoing.id, None)
        on_pitch[incoming.id] = slot
        if swap:
            on_pitch[swap.player_id] = swap.to_position

    if keeper_swap:
        plan.append(keeper_swap)

    logger.info("Re-planned %d remaining substitutions from half %d at %ss",
                len(plan), current_half, current_elapsed_seconds)
    return sort_plan(plan)
