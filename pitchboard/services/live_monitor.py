"""
Live execution of a substitution plan.

The monitor polls the match store, works out which substitution is due (or
next), and carries out the operator's decision: accept, skip or snooze. Every
action re-reads the store immediately before writing, validates the two players
involved, and writes the whole snapshot back.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models import MatchClockSnapshot, PitchState, SubstitutionEvent, find_player, sort_plan
from ..utils import (
    LATE_SUB_TOLERANCE_SECONDS, MIN_REBALANCE_INTERVAL_SECONDS,
    POLL_INTERVAL_SECONDS, SNOOZE_SECONDS, fmt_mmss, now_ts,
)
from .match_store import MatchStore
from .notifier import LoggingNotifier, NotificationKind, OperatorNotifier
from .plan_generator import replan_remaining

logger = logging.getLogger(__name__)


@dataclass
class PendingSubstitution:
    """The substitution currently surfaced to the operator."""
    event: SubstitutionEvent
    is_due: bool
    seconds_until: int = 0
    batch: List[SubstitutionEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event.to_dict(),
            "is_due": self.is_due,
            "seconds_until": self.seconds_until,
            "batch": [e.to_dict() for e in self.batch],
        }


@dataclass
class ActionOutcome:
    """What an accept/skip/regenerate did."""
    applied: bool
    rebalanced: bool = False
    message: str = ""
    state: Optional[PitchState] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": self.applied,
            "rebalanced": self.rebalanced,
            "message": self.message,
            "state": self.state.to_json() if self.state else None,
        }


def find_pending(
    plan: List[SubstitutionEvent],
    current_total_seconds: int,
    half_duration_seconds: int,
) -> Optional[PendingSubstitution]:
    """
    Classify unexecuted events against the clock.

    The first due event wins; otherwise the earliest upcoming one is returned
    with a countdown. Events due at the same stamp as the surfaced one form its
    batch.
    """
    remaining = [e for e in sort_plan(plan) if not e.executed]
    if not remaining:
        return None

    for event in remaining:
        if event.total_seconds(half_duration_seconds) <= current_total_seconds:
            batch = [
                other for other in remaining
                if other is not event
                and (other.half, other.time) == (event.half, event.time)
            ]
            return PendingSubstitution(event=event, is_due=True, batch=batch)

    upcoming = remaining[0]
    return PendingSubstitution(
        event=upcoming,
        is_due=False,
        seconds_until=upcoming.total_seconds(half_duration_seconds) - current_total_seconds,
    )


def rebalance_remaining(
    plan: List[SubstitutionEvent],
    current_total_seconds: int,
    half_duration_seconds: int,
) -> List[SubstitutionEvent]:
    """
    Spread every unexecuted event evenly over the rest of the match.

    Events keep their relative order. The interval is
    ``max(60, floor(remaining / (n + 1)))``; stamps that would land after full
    time are held at the final whistle.

    Returns:
        New plan ordered by (half, time)
    """
    pending = [e for e in plan if not e.executed]
    if not pending:
        return list(plan)

    total_game_seconds = half_duration_seconds * 2
    remaining_seconds = max(0, total_game_seconds - current_total_seconds)
    interval = max(MIN_REBALANCE_INTERVAL_SECONDS, remaining_seconds // (len(pending) + 1))

    next_total = current_total_seconds + interval
    rebalanced: List[SubstitutionEvent] = []
    for event in plan:
        if event.executed:
            rebalanced.append(event)
            continue
        if next_total < half_duration_seconds:
            half, time = 1, next_total
        else:
            half, time = 2, min(next_total - half_duration_seconds, half_duration_seconds)
        rebalanced.append(replace(event, half=half, time=time))
        next_total += interval

    logger.info("Rebalanced %d substitutions every %ss from %s", len(pending), interval, fmt_mmss(current_total_seconds))
    return sort_plan(rebalanced)


def apply_substitution(
    state: PitchState,
    event: SubstitutionEvent,
    player_out_id: str,
    player_in_id: str,
) -> Tuple[bool, str]:
    """
    Swap two players in ``state`` if the pitch allows it.

    The incoming player takes the outgoing player's spot and label. When the
    event carries a position swap for the same pair and the passenger is still
    on the pitch, the incoming player takes the passenger's spot instead and the
    passenger moves into the vacated one.

    Returns:
        Tuple of (applied, reason); nothing is changed when applied is False
    """
    player_out = find_player(state.players, player_out_id)
    player_in = find_player(state.players, player_in_id)
    if player_in is None or player_in.on_field:
        return False, "Incoming player is not on the bench"
    if player_out is None or not player_out.on_field:
        return False, "Outgoing player is not on the pitch"

    vacated = player_out.position
    vacated_label = player_out.current_pitch_position

    swap = event.position_swap
    passenger = None
    if swap and (player_out_id, player_in_id) == (event.player_out_id, event.player_in_id):
        passenger = find_player(state.players, swap.player_id)
        if passenger is not None and (not passenger.on_field or passenger.id in (player_out_id, player_in_id)):
            passenger = None

    player_out.position = None
    player_out.current_pitch_position = None
    if passenger is not None:
        player_in.position = passenger.position
        player_in.current_pitch_position = swap.from_position
        passenger.position = vacated
        passenger.current_pitch_position = swap.to_position
    else:
        player_in.position = vacated
        player_in.current_pitch_position = vacated_label
    return True, ""


class LiveExecutionMonitor:
    """
    Watches the match store and executes the plan with the operator.

    Nothing is surfaced unless the clock is running, the plan is active and not
    paused, and the operator has not snoozed the monitor.
    """

    def __init__(
        self,
        store: MatchStore,
        notifier: Optional[OperatorNotifier] = None,
        now_fn: Callable[[], float] = now_ts,
        snooze_seconds: int = SNOOZE_SECONDS,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ):
        self.store = store
        self.notifier = notifier or LoggingNotifier()
        self.now_fn = now_fn
        self.snooze_seconds = snooze_seconds
        self.poll_interval = poll_interval
        self.pending: Optional[PendingSubstitution] = None
        self._snoozed_until = 0.0
        self._last_alert_key: Optional[Tuple] = None
        self._attached = False

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def poll(self) -> Optional[PendingSubstitution]:
        """
        Re-evaluate what to show the operator.

        Returns:
            The due or upcoming substitution, or None when nothing is pending
        """
        self.pending = self._evaluate()
        if self.pending and self.pending.is_due:
            alert_key = (self.pending.event.key(), len(self.pending.batch))
            if alert_key != self._last_alert_key:
                self._last_alert_key = alert_key
                count = len(self.pending.batch) + 1
                logger.info("Substitution due: %s (%d in batch)", self.pending.event.key(), count)
        return self.pending

    def _evaluate(self) -> Optional[PendingSubstitution]:
        if self.is_snoozed():
            return None
        clock = self.store.read_clock()
        state = self.store.read_pitch_state()
        if clock is None or state is None:
            return None
        if not clock.is_running or not state.plan_active or state.plan_paused:
            return None
        now = self.now_fn()
        return find_pending(state.plan, clock.current_total_seconds(now), clock.half_duration_seconds)

    def attach(self) -> None:
        """Re-poll whenever the store reports a change."""
        self.store.on_external_change(self.poll)
        self._attached = True

    def run(self, stop_event: threading.Event) -> None:
        """Poll until ``stop_event`` is set."""
        logger.info("Live monitor started (every %ss)", self.poll_interval)
        while not stop_event.is_set():
            # an attached monitor already re-polled if the store saw an outside write
            if not (self.store.check_external_changes() and self._attached):
                self.poll()
            stop_event.wait(self.poll_interval)
        logger.info("Live monitor stopped")

    # ------------------------------------------------------------------
    # Snooze
    # ------------------------------------------------------------------

    def snooze(self) -> float:
        """Hide pending substitutions for a while; returns when the snooze ends."""
        self._snoozed_until = self.now_fn() + self.snooze_seconds
        self.pending = None
        logger.debug("Snoozed until %s", self._snoozed_until)
        return self._snoozed_until

    def is_snoozed(self) -> bool:
        return self.now_fn() < self._snoozed_until

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def accept(
        self,
        event: Optional[SubstitutionEvent] = None,
        player_out_id: Optional[str] = None,
        player_in_id: Optional[str] = None,
    ) -> ActionOutcome:
        """
        Carry out a substitution the operator confirmed.

        Args:
            event: Event to execute; defaults to the surfaced one
            player_out_id: Replacement outgoing player chosen by the operator
            player_in_id: Replacement incoming player chosen by the operator

        Returns:
            ActionOutcome; ``applied`` is False when the pitch did not match and
            the event was marked done without moving anyone

        Raises:
            StoreUnavailableError: If the updated state could not be written
        """
        loaded = self._load_for_action(event)
        if loaded is None:
            return ActionOutcome(applied=False, message="Nothing to accept")
        state, clock, index = loaded
        now = self.now_fn()
        current_total = clock.current_total_seconds(now) if clock else None

        target = state.plan[index]
        out_id = player_out_id or target.player_out_id
        in_id = player_in_id or target.player_in_id
        if current_total is not None:
            state.catch_up_minutes(current_total)

        applied, reason = apply_substitution(state, target, out_id, in_id)
        self._mark_done(state, index)

        rebalanced = False
        if not applied:
            logger.warning("Skipped %s: %s", target.key(), reason)
        elif current_total is not None and clock is not None:
            delay = max(0, current_total - target.total_seconds(clock.half_duration_seconds))
            if delay > LATE_SUB_TOLERANCE_SECONDS:
                logger.info("Substitution %ss late, rebalancing", delay)
                state.plan = rebalance_remaining(state.plan, current_total, clock.half_duration_seconds)
                rebalanced = True

        state.refresh_plan_active()
        self.store.write_pitch_state(state)
        self.pending = None
        self._last_alert_key = None

        if not applied:
            self.notifier.notify(
                NotificationKind.WARNING, "Substitution skipped", "Players are not in expected positions"
            )
            return ActionOutcome(applied=False, message=reason, state=state)

        player_in = find_player(state.players, in_id)
        player_out = find_player(state.players, out_id)
        detail = f"{player_in.display_name()} on for {player_out.display_name()}"
        self.notifier.notify(NotificationKind.SUCCESS, "Substitution made", detail)
        return ActionOutcome(applied=True, rebalanced=rebalanced, message=detail, state=state)

    def skip(self, event: Optional[SubstitutionEvent] = None) -> ActionOutcome:
        """
        Mark a substitution done without moving anyone and reschedule the rest.

        Raises:
            StoreUnavailableError: If the updated state could not be written
        """
        loaded = self._load_for_action(event)
        if loaded is None:
            return ActionOutcome(applied=False, message="Nothing to skip")
        state, clock, index = loaded
        logger.info("Operator skipped %s", state.plan[index].key())
        self._mark_done(state, index)

        rebalanced = False
        if clock is not None:
            current_total = clock.current_total_seconds(self.now_fn())
            state.catch_up_minutes(current_total)
            state.plan = rebalance_remaining(state.plan, current_total, clock.half_duration_seconds)
            rebalanced = True

        state.refresh_plan_active()
        self.store.write_pitch_state(state)
        self.pending = None
        self._last_alert_key = None
        self.notifier.notify(NotificationKind.INFO, "Substitution skipped", "Remaining subs have been rescheduled")
        return ActionOutcome(applied=False, rebalanced=rebalanced, message="skipped", state=state)

    def regenerate(self) -> ActionOutcome:
        """
        Replace every unexecuted event with a fresh plan built from the live roster.

        Raises:
            StoreUnavailableError: If the updated state could not be written
        """
        state = self.store.read_pitch_state()
        clock = self.store.read_clock()
        if state is None or clock is None:
            return ActionOutcome(applied=False, message="No match in progress")

        now = self.now_fn()
        state.catch_up_minutes(clock.current_total_seconds(now))
        fresh = replan_remaining(
            state.players,
            state.team_size,
            clock.half_duration_seconds,
            clock.current_elapsed_seconds(now),
            clock.current_half,
        )
        executed = [e for e in state.plan if e.executed]
        state.plan = sort_plan(executed + fresh)
        state.plan_active = bool(fresh)

        self.store.write_pitch_state(state)
        self.pending = None
        self._last_alert_key = None
        detail = f"{len(fresh)} substitutions remaining"
        self.notifier.notify(NotificationKind.INFO, "Plan regenerated", detail)
        return ActionOutcome(applied=True, rebalanced=True, message=detail, state=state)

    def is_game_finished(self, clock: Optional[MatchClockSnapshot] = None) -> bool:
        clock = clock or self.store.read_clock()
        return clock is not None and clock.is_game_finished(self.now_fn())

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_for_action(
        self, event: Optional[SubstitutionEvent]
    ) -> Optional[Tuple[PitchState, Optional[MatchClockSnapshot], int]]:
        if event is None:
            # only a due substitution can be acted on from the banner
            if self.pending is None or not self.pending.is_due:
                return None
            event = self.pending.event

        state = self.store.read_pitch_state()
        if state is None:
            return None
        if not state.plan_active or state.plan_paused:
            logger.info("Plan is paused or inactive; ignoring %s", event.key())
            self.pending = None
            return None
        key = event.key()
        for index, candidate in enumerate(state.plan):
            if candidate.key() == key and not candidate.executed:
                return state, self.store.read_clock(), index

        logger.info("Substitution %s is no longer pending", key)
        return None

    @staticmethod
    def _mark_done(state: PitchState, index: int) -> None:
        done = state.plan[index].mark_executed()
        state.plan[index] = done
        state.executed_subs.append(done)
