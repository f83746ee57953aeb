"""Tests for the match store implementations."""

import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

import requests

from pitchboard.models import MatchClockSnapshot, PitchCoordinate, PitchState, Player, SubstitutionEvent
from pitchboard.services import InMemoryMatchStore, JsonFileMatchStore, RemoteMatchStore


def _state():
    return PitchState(
        players=[
            Player(id="a", name="A", position=PitchCoordinate(50, 50), current_pitch_position="MID"),
            Player(id="b", name="B"),
        ],
        plan=[SubstitutionEvent(1, 300, "a", "b")],
        plan_active=True,
        team_size=1,
    )


class TestInMemoryStore(unittest.TestCase):

    def test_reads_are_independent_copies(self) -> None:
        store = InMemoryMatchStore(state=_state())
        first = store.read_pitch_state()
        first.players[0].position = None
        self.assertIsNotNone(store.read_pitch_state().players[0].position)

    def test_empty_store_reads_none(self) -> None:
        store = InMemoryMatchStore()
        self.assertIsNone(store.read_clock())
        self.assertIsNone(store.read_pitch_state())

    def test_writes_notify_listeners(self) -> None:
        store = InMemoryMatchStore()
        calls = []
        store.on_external_change(lambda: calls.append("changed"))
        store.write_clock(MatchClockSnapshot())
        store.write_pitch_state(_state())
        self.assertEqual(calls, ["changed", "changed"])


class TestJsonFileStore(unittest.TestCase):

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.directory = os.path.join(self.tmp.name, "match")
        self.store = JsonFileMatchStore(self.directory)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_round_trip(self) -> None:
        clock = MatchClockSnapshot(minutes_per_half=25, current_half=2, elapsed_seconds=90, team_name="Lions")
        self.store.write_clock(clock)
        self.store.write_pitch_state(_state())

        self.assertEqual(self.store.read_clock(), clock)
        state = self.store.read_pitch_state()
        self.assertEqual(state.plan, _state().plan)
        self.assertTrue(state.plan_active)
        self.assertTrue(os.path.exists(os.path.join(self.directory, "pitch_state.json")))

    def test_sees_writes_from_another_store(self) -> None:
        other = JsonFileMatchStore(self.directory)
        calls = []
        self.store.on_external_change(lambda: calls.append("changed"))

        other.write_pitch_state(_state())

        self.assertTrue(self.store.check_external_changes())
        self.assertEqual(calls, ["changed"])
        self.assertFalse(self.store.check_external_changes())
        self.assertEqual(calls, ["changed"])

    def test_own_writes_are_not_outside_changes(self) -> None:
        self.store.write_clock(MatchClockSnapshot())
        self.assertFalse(self.store.check_external_changes())
        self.assertFalse(InMemoryMatchStore().check_external_changes())

    def test_missing_files_read_none(self) -> None:
        self.assertIsNone(self.store.read_clock())
        self.assertIsNone(self.store.read_pitch_state())

    def test_corrupt_file_fails_closed(self) -> None:
        os.makedirs(self.directory)
        with open(os.path.join(self.directory, "pitch_state.json"), "w", encoding="utf-8") as f:
            f.write("{not json")
        self.assertIsNone(self.store.read_pitch_state())

    def test_malformed_document_fails_closed(self) -> None:
        os.makedirs(self.directory)
        with open(os.path.join(self.directory, "match_clock.json"), "w", encoding="utf-8") as f:
            json.dump({"current_half": 5}, f)
        self.assertIsNone(self.store.read_clock())


class TestRemoteStore(unittest.TestCase):

    def _response(self, status_code=200, payload=None):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = payload
        if status_code >= 400 and status_code != 404:
            response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code}")
        return response

    def test_read_clock(self) -> None:
        clock = MatchClockSnapshot(minutes_per_half=30, is_running=True, last_update_time=5.0)
        with patch("pitchboard.services.match_store.requests.Session") as session_cls:
            session = session_cls.return_value
            session.get.return_value = self._response(payload=clock.to_dict())
            store = RemoteMatchStore("http://store.local/api/", timeout=2)

            self.assertEqual(store.read_clock(), clock)
            session.get.assert_called_once_with("http://store.local/api/match-clock", timeout=2)

    def test_missing_key_reads_none(self) -> None:
        session = MagicMock()
        session.get.return_value = self._response(status_code=404)
        store = RemoteMatchStore("http://store.local", session=session)
        self.assertIsNone(store.read_pitch_state())

    def test_network_error_fails_closed(self) -> None:
        session = MagicMock()
        session.get.side_effect = requests.exceptions.ConnectionError("down")
        store = RemoteMatchStore("http://store.local", session=session)
        self.assertIsNone(store.read_pitch_state())
        self.assertIsNone(store.read_clock())

    def test_server_error_fails_closed(self) -> None:
        session = MagicMock()
        session.get.return_value = self._response(status_code=500)
        store = RemoteMatchStore("http://store.local", session=session)
        self.assertIsNone(store.read_clock())

    def test_write_puts_json(self) -> None:
        session = MagicMock()
        session.put.return_value = self._response()
        store = RemoteMatchStore("http://store.local", timeout=3, session=session)

        store.write_pitch_state(_state())

        url = session.put.call_args.args[0]
        kwargs = session.put.call_args.kwargs
        self.assertEqual(url, "http://store.local/pitch-state")
        self.assertEqual(kwargs["timeout"], 3)
        self.assertEqual(kwargs["json"]["plan"][0]["player_out_id"], "a")


if __name__ == '__main__':
    unittest.main()
