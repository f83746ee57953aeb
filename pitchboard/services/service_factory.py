"""
Service factory for the pitch board.

Builds the store, notifier, timer and monitor with their dependencies wired
together, so the web app and tests share one way of assembling the engine.
"""
from typing import Callable, List, Optional

from ..models import Player
from ..utils import now_ts
from .live_monitor import LiveExecutionMonitor
from .match_store import InMemoryMatchStore, JsonFileMatchStore, MatchStore, RemoteMatchStore
from .match_timer import MatchTimer
from .notifier import OperatorNotifier, RecordingNotifier
from .plan_editor import PlanEditor


class ServiceFactory:
    """
    Factory for creating services around a single match store.

    The store is chosen from the arguments: a remote URL wins over a data
    directory, and with neither an in-memory store is used.
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        remote_url: Optional[str] = None,
        notifier: Optional[OperatorNotifier] = None,
        now_fn: Callable[[], float] = now_ts,
    ):
        self._data_dir = data_dir
        self._remote_url = remote_url
        self._store: Optional[MatchStore] = None
        self._notifier = notifier
        self._now_fn = now_fn

    def get_store(self) -> MatchStore:
        """Get the shared store, creating it on first use."""
        if self._store is None:
            if self._remote_url:
                self._store = RemoteMatchStore(self._remote_url)
            elif self._data_dir:
                self._store = JsonFileMatchStore(self._data_dir)
            else:
                self._store = InMemoryMatchStore()
        return self._store

    def get_notifier(self) -> OperatorNotifier:
        if self._notifier is None:
            self._notifier = RecordingNotifier()
        return self._notifier

    def create_match_timer(self) -> MatchTimer:
        """Create a timer that publishes to the shared store."""
        return MatchTimer(store=self.get_store())

    def create_live_monitor(self) -> LiveExecutionMonitor:
        """
        Create the live monitor.

        Returns:
            Monitor subscribed to the store's change notifications
        """
        monitor = LiveExecutionMonitor(
            store=self.get_store(),
            notifier=self.get_notifier(),
            now_fn=self._now_fn,
        )
        monitor.attach()
        return monitor

    def create_plan_editor(self, players: List[Player], minutes_per_half: int) -> PlanEditor:
        return PlanEditor(players, minutes_per_half)
