"""
Plan editing operations for the pitch board.

Every operation returns a new plan and leaves its input untouched. Edits that
would change an executed event, point at a missing index, or bring on a player
who cannot be brought on at that moment are rejected: the editor logs the reason,
keeps it in ``last_rejection`` and hands back an unchanged copy of the plan.
"""
import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Set, Tuple

from ..errors import PlanEditError
from ..models import Player, SubstitutionEvent, sort_plan
from ..models.roster import copy_players

logger = logging.getLogger(__name__)


class PlanEditor:
    """
    Edits a substitution plan against the live roster.

    The roster is the current state of the pitch; already executed events are
    assumed to be reflected in it, so only unexecuted events are replayed when
    working out who is available at a given time.
    """

    def __init__(self, players: Sequence[Player], minutes_per_half: int):
        """
        Initialize the editor.

        Args:
            players: Live roster (on-pitch players have a position)
            minutes_per_half: Length of each half in minutes
        """
        self.players = copy_players(players)
        self.minutes_per_half = minutes_per_half
        self.last_rejection: Optional[str] = None

    @property
    def half_duration_seconds(self) -> int:
        return self.minutes_per_half * 60

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def delete(self, plan: Sequence[SubstitutionEvent], index: int) -> List[SubstitutionEvent]:
        """Remove one unexecuted event."""
        self.last_rejection = None
        try:
            self._editable(plan, index)
        except PlanEditError as e:
            return self._reject("delete", plan, e)
        return [event for i, event in enumerate(plan) if i != index]

    def retime(
        self, plan: Sequence[SubstitutionEvent], index: int, new_minute: int, new_half: int
    ) -> List[SubstitutionEvent]:
        """
        Move an event to ``new_minute`` of ``new_half`` and re-sort the plan.

        Args:
            plan: Current plan
            index: Position of the event in ``plan``
            new_minute: Minute within the half (0 to minutes_per_half)
            new_half: 1 or 2

        Returns:
            New plan ordered by (half, time)
        """
        self.last_rejection = None
        try:
            event = self._editable(plan, index)
            if new_half not in (1, 2):
                raise PlanEditError(f"Invalid half: {new_half}")
            if not 0 <= new_minute <= self.minutes_per_half:
                raise PlanEditError(f"Minute {new_minute} is outside the half")
        except PlanEditError as e:
            return self._reject("retime", plan, e)

        edited = list(plan)
        edited[index] = replace(event, half=new_half, time=new_minute * 60)
        return sort_plan(edited)

    def reassign_players(
        self,
        plan: Sequence[SubstitutionEvent],
        index: int,
        new_player_out_id: str,
        new_player_in_id: str,
    ) -> List[SubstitutionEvent]:
        """
        Change who goes off and who comes on, keeping the event's time.

        A position swap attached to the event no longer applies to the new pair
        and is dropped.
        """
        self.last_rejection = None
        try:
            event = self._editable(plan, index)
            self._check_known(new_player_out_id, new_player_in_id)
        except PlanEditError as e:
            return self._reject("reassign", plan, e)

        edited = list(plan)
        edited[index] = replace(
            event,
            player_out_id=new_player_out_id,
            player_in_id=new_player_in_id,
            position_swap=None,
        )
        return edited

    def insert(
        self,
        plan: Sequence[SubstitutionEvent],
        half: int,
        minute: int,
        player_out_id: str,
        player_in_id: str,
    ) -> List[SubstitutionEvent]:
        """
        Add a substitution, provided both players are valid candidates then.

        Raises nothing; an invalid pairing leaves the plan unchanged.
        """
        self.last_rejection = None
        try:
            if half not in (1, 2):
                raise PlanEditError(f"Invalid half: {half}")
            if not 0 <= minute <= self.minutes_per_half:
                raise PlanEditError(f"Minute {minute} is outside the half")
            self._check_known(player_out_id, player_in_id)
            on_pitch, on_bench = self.candidates_at(plan, half, minute)
            if player_out_id not in {p.id for p in on_pitch}:
                raise PlanEditError(f"Player {player_out_id} is not on the pitch at {half}/{minute}'")
            if player_in_id not in {p.id for p in on_bench}:
                raise PlanEditError(f"Player {player_in_id} is not on the bench at {half}/{minute}'")
        except PlanEditError as e:
            return self._reject("insert", plan, e)

        edited = list(plan)
        edited.append(SubstitutionEvent(
            half=half,
            time=minute * 60,
            player_out_id=player_out_id,
            player_in_id=player_in_id,
        ))
        return sort_plan(edited)

    def reorder(self, plan: Sequence[SubstitutionEvent], from_index: int, to_index: int) -> List[SubstitutionEvent]:
        """
        Move an event to another position in the list without retiming it.

        The result may no longer be ordered by timestamp; that is the operator's
        call.
        """
        self.last_rejection = None
        try:
            self._editable(plan, from_index)
            self._editable(plan, to_index)
        except PlanEditError as e:
            return self._reject("reorder", plan, e)

        edited = list(plan)
        event = edited.pop(from_index)
        edited.insert(to_index, event)
        return edited

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def candidates_at(
        self, plan: Sequence[SubstitutionEvent], half: int, minute: int
    ) -> Tuple[List[Player], List[Player]]:
        """
        Work out who is on the pitch and who is on the bench at a moment.

        Unexecuted events scheduled strictly before the moment are replayed on
        top of the live roster.

        Returns:
            Tuple of (on_pitch, on_bench) players in roster order
        """
        check_time = minute * 60 if half == 1 else minute * 60 + self.half_duration_seconds
        on_pitch: Set[str] = {p.id for p in self.players if p.on_field}

        for event in sort_plan(plan):
            if event.executed:
                continue
            if event.total_seconds(self.half_duration_seconds) >= check_time:
                break
            on_pitch.discard(event.player_out_id)
            on_pitch.add(event.player_in_id)

        pitch = [p for p in self.players if p.id in on_pitch]
        bench = [p for p in self.players if p.id not in on_pitch and not p.is_injured]
        return pitch, bench

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _editable(self, plan: Sequence[SubstitutionEvent], index: int) -> SubstitutionEvent:
        if not 0 <= index < len(plan):
            raise PlanEditError(f"No substitution at index {index}")
        event = plan[index]
        if event.executed:
            raise PlanEditError(f"Substitution at index {index} has already happened")
        return event

    def _check_known(self, player_out_id: str, player_in_id: str) -> None:
        known = {p.id for p in self.players}
        for player_id in (player_out_id, player_in_id):
            if player_id not in known:
                raise PlanEditError(f"Unknown player: {player_id}")
        if player_out_id == player_in_id:
            raise PlanEditError("A player cannot replace themselves")

    def _reject(self, operation: str, plan: Sequence[SubstitutionEvent], error: Exception) -> List[SubstitutionEvent]:
        logger.warning("Rejected %s: %s", operation, error)
        self.last_rejection = str(error)
        return list(plan)
