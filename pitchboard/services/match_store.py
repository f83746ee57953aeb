"""
Match store implementations for the pitch board.

The store holds the two pieces of shared state the engine works from: the match
clock snapshot and the pitch state (roster plus plan). Readers fail closed: a
store that cannot be reached, or that holds something unreadable, reads as
"nothing there" and the caller surfaces nothing pending.
"""
import copy
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

import requests

from ..errors import StoreUnavailableError
from ..models import MatchClockSnapshot, PitchState
from ..utils import REMOTE_STORE_TIMEOUT_SECONDS, now_ts
from ..utils.constants import CLOCK_FILE_NAME, PITCH_STATE_FILE_NAME

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


class MatchStore(ABC):
    """
    Abstract shared store for clock and pitch state.

    Subclasses implement the raw ``_load_*``/``_save_*`` methods and raise
    StoreUnavailableError on failure; the public readers turn that into None.

    Listeners fire after writes made through this store object. Writes made by
    another process are only seen through ``check_external_changes`` (where the
    backend can detect them) or by polling.
    """

    def __init__(self):
        self._listeners: List[ChangeListener] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read_clock(self) -> Optional[MatchClockSnapshot]:
        """Current clock snapshot, or None when absent or unreadable."""
        try:
            data = self._load_clock()
            return MatchClockSnapshot.from_dict(data) if data is not None else None
        except (StoreUnavailableError, KeyError, ValueError, TypeError):
            logger.warning("Could not read match clock", exc_info=True)
            return None

    def read_pitch_state(self) -> Optional[PitchState]:
        """Current pitch state, or None when absent or unreadable."""
        try:
            data = self._load_pitch_state()
            return PitchState.from_json(data) if data is not None else None
        except (StoreUnavailableError, KeyError, ValueError, TypeError):
            logger.warning("Could not read pitch state", exc_info=True)
            return None

    def write_clock(self, clock: MatchClockSnapshot) -> None:
        """
        Persist a clock snapshot and tell listeners.

        Raises:
            StoreUnavailableError: If the snapshot could not be written
        """
        self._save_clock(clock.to_dict())
        self._notify_listeners()

    def write_pitch_state(self, state: PitchState) -> None:
        """
        Persist the pitch state and tell listeners.

        Raises:
            StoreUnavailableError: If the state could not be written
        """
        state.last_update_time = now_ts()
        self._save_pitch_state(state.to_json())
        self._notify_listeners()

    def on_external_change(self, callback: ChangeListener) -> None:
        """Register a callback run after every write and every detected outside change."""
        self._listeners.append(callback)

    def check_external_changes(self) -> bool:
        """
        Look for writes made by someone else and tell listeners about them.

        Returns:
            True when a change was found; this base store cannot tell, so False
        """
        return False

    def _notify_listeners(self) -> None:
        for callback in list(self._listeners):
            callback()

    # ------------------------------------------------------------------
    # Storage backend
    # ------------------------------------------------------------------

    @abstractmethod
    def _load_clock(self) -> Optional[dict]:
        pass

    @abstractmethod
    def _save_clock(self, data: dict) -> None:
        pass

    @abstractmethod
    def _load_pitch_state(self) -> Optional[dict]:
        pass

    @abstractmethod
    def _save_pitch_state(self, data: dict) -> None:
        pass


class InMemoryMatchStore(MatchStore):
    """Single-process store; keeps plain dictionaries so reads never alias writes."""

    def __init__(self, clock: Optional[MatchClockSnapshot] = None, state: Optional[PitchState] = None):
        super().__init__()
        self._clock = clock.to_dict() if clock else None
        self._state = state.to_json() if state else None

    def _load_clock(self) -> Optional[dict]:
        return copy.deepcopy(self._clock)

    def _save_clock(self, data: dict) -> None:
        self._clock = copy.deepcopy(data)

    def _load_pitch_state(self) -> Optional[dict]:
        return copy.deepcopy(self._state)

    def _save_pitch_state(self, data: dict) -> None:
        self._state = copy.deepcopy(data)


class JsonFileMatchStore(MatchStore):
    """Stores clock and pitch state as two JSON files in one directory."""

    def __init__(self, directory: str):
        super().__init__()
        self.directory = directory
        self.clock_path = os.path.join(directory, CLOCK_FILE_NAME)
        self.state_path = os.path.join(directory, PITCH_STATE_FILE_NAME)
        self._stamps = {path: self._stamp(path) for path in (self.clock_path, self.state_path)}

    def check_external_changes(self) -> bool:
        """Fire listeners when either file changed on disk since this store last saw it."""
        try:
            stamps = {path: self._stamp(path) for path in self._stamps}
        except OSError:
            logger.warning("Could not check match files for changes", exc_info=True)
            return False
        if stamps == self._stamps:
            return False
        self._stamps = stamps
        logger.debug("Match files in %s changed on disk", self.directory)
        self._notify_listeners()
        return True

    def _load_clock(self) -> Optional[dict]:
        return self._read_json(self.clock_path)

    def _save_clock(self, data: dict) -> None:
        self._write_json(self.clock_path, data)

    def _load_pitch_state(self) -> Optional[dict]:
        return self._read_json(self.state_path)

    def _save_pitch_state(self, data: dict) -> None:
        self._write_json(self.state_path, data)

    @staticmethod
    def _stamp(file_path: str) -> Optional[int]:
        return os.stat(file_path).st_mtime_ns if os.path.exists(file_path) else None

    @staticmethod
    def _read_json(file_path: str) -> Optional[dict]:
        if not os.path.exists(file_path):
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreUnavailableError(f"Cannot read {file_path}: {e}") from e

    def _write_json(self, file_path: str, data: dict) -> None:
        try:
            if self.directory and not os.path.exists(self.directory):
                os.makedirs(self.directory)
            # write then rename so a reader never sees half a file
            tmp_path = file_path + ".tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, file_path)
            self._stamps[file_path] = self._stamp(file_path)
        except OSError as e:
            raise StoreUnavailableError(f"Cannot write {file_path}: {e}") from e


class RemoteMatchStore(MatchStore):
    """
    Key/value store behind an HTTP API.

    Expects ``GET {base_url}/{key}`` to return the JSON document (404 when
    absent) and ``PUT {base_url}/{key}`` to replace it.
    """

    CLOCK_KEY = "match-clock"
    PITCH_STATE_KEY = "pitch-state"

    def __init__(self, base_url: str, timeout: float = REMOTE_STORE_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def _get(self, key: str) -> Optional[dict]:
        try:
            response = self.session.get(self._url(key), timeout=self.timeout)
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise StoreUnavailableError(f"GET {key} failed: {e}") from e

    def _put(self, key: str, data: dict) -> None:
        try:
            response = self.session.put(self._url(key), json=data, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise StoreUnavailableError(f"PUT {key} failed: {e}") from e

    def _load_clock(self) -> Optional[dict]:
        return self._get(self.CLOCK_KEY)

    def _save_clock(self, data: dict) -> None:
        self._put(self.CLOCK_KEY, data)

    def _load_pitch_state(self) -> Optional[dict]:
        return self._get(self.PITCH_STATE_KEY)

    def _save_pitch_state(self, data: dict) -> None:
        self._put(self.PITCH_STATE_KEY, data)
