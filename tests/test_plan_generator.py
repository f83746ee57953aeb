"""Tests for substitution plan generation."""

import unittest
from collections import Counter

from pitchboard.models import (
    PitchCoordinate, Player, PositionSwap, build_lineup, check_plan_realizable,
)
from pitchboard.services import forecast, generate, ideal_seconds_per_player, replan_remaining
from pitchboard.services.plan_generator import subs_per_window, window_times, windows_per_half


def seven_a_side_squad():
    """Seven starters (keeper first), a spare keeper and two outfield subs."""
    squad = [Player(id="gk", name="Keeper", eligible_positions=["GK"])]
    squad += [Player(id=f"o{i}", name=f"Outfield {i}") for i in range(1, 7)]
    squad += [
        Player(id="gk2", name="Spare Keeper", eligible_positions=["GK"]),
        Player(id="b1", name="Bench 1"),
        Player(id="b2", name="Bench 2"),
    ]
    return build_lineup(squad, 7)


def on(pid, label, eligible=None, x=50, y=50):
    return Player(
        id=pid, name=pid, position=PitchCoordinate(x, y),
        current_pitch_position=label, eligible_positions=eligible or [],
    )


def off(pid, eligible=None, **kwargs):
    return Player(id=pid, name=pid, eligible_positions=eligible or [], **kwargs)


class TestGenerateBasicRotation(unittest.TestCase):

    def setUp(self) -> None:
        self.players = seven_a_side_squad()
        self.plan = generate(self.players, 7, 20 * 60, rotation_speed=2)

    def test_goalkeeper_swaps_at_half_time(self) -> None:
        keeper_events = [e for e in self.plan if e.player_out_id == "gk"]
        self.assertEqual(len(keeper_events), 1)
        event = keeper_events[0]
        self.assertEqual((event.half, event.time, event.player_in_id), (2, 0, "gk2"))

    def test_outfield_windows(self) -> None:
        outfield = [e for e in self.plan if e.player_out_id != "gk"]
        self.assertEqual(len(outfield), 12)
        stamps = Counter((e.half, e.time) for e in outfield)
        self.assertEqual(
            stamps,
            Counter({(1, 300): 2, (1, 600): 2, (1, 900): 2, (2, 300): 2, (2, 600): 2, (2, 900): 2}),
        )

    def test_first_window_brings_on_the_bench(self) -> None:
        first = self.plan[:2]
        self.assertEqual([(e.player_out_id, e.player_in_id) for e in first], [("o1", "b1"), ("o2", "b2")])

    def test_plan_is_sorted_and_realizable(self) -> None:
        stamps = [(e.half, e.time) for e in self.plan]
        self.assertEqual(stamps, sorted(stamps))
        result = check_plan_realizable(self.players, self.plan, team_size=7)
        self.assertTrue(result.is_valid, result.errors)

    def test_forecast_shares_outfield_time_equally(self) -> None:
        result = forecast(self.players, self.plan, 20)
        ideal = ideal_seconds_per_player(self.players, 7, 20 * 60)
        self.assertEqual(ideal, 1800)

        for player_id in ["o1", "o2", "o3", "o4", "o5", "o6", "b1", "b2"]:
            entry = result.for_player(player_id)
            self.assertEqual(entry.predicted_seconds, 1800)
            self.assertEqual(entry.predicted_minutes, 30)
            self.assertEqual(entry.percentage_of_game, 75)

        self.assertEqual(result.for_player("gk").predicted_minutes, 20)
        self.assertEqual(result.for_player("gk2").predicted_minutes, 20)
        self.assertEqual(result.total_player_seconds, 7 * 2 * 20 * 60)
        self.assertEqual(result.skipped_events, 0)


class TestGenerateEdgeCases(unittest.TestCase):

    def test_no_bench_returns_empty_plan(self) -> None:
        players = [p for p in seven_a_side_squad() if p.on_field]
        self.assertEqual(generate(players, 7, 1200), [])

    def test_invalid_inputs_return_empty_plan(self) -> None:
        players = seven_a_side_squad()
        self.assertEqual(generate(players, 0, 1200), [])
        self.assertEqual(generate(players, 7, 0), [])
        self.assertEqual(generate([], 7, 1200), [])

    def test_only_keeper_on_bench(self) -> None:
        players = [p for p in seven_a_side_squad() if p.id not in ("b1", "b2")]
        plan = generate(players, 7, 1200)
        self.assertEqual(len(plan), 1)
        self.assertEqual((plan[0].half, plan[0].time, plan[0].player_in_id), (2, 0, "gk2"))

    def test_injured_bench_player_is_never_brought_on(self) -> None:
        players = seven_a_side_squad()
        for player in players:
            if player.id == "b2":
                player.is_injured = True
        plan = generate(players, 7, 1200, rotation_speed=3)
        self.assertTrue(plan)
        self.assertNotIn("b2", {e.player_in_id for e in plan})
        self.assertTrue(check_plan_realizable(players, plan, team_size=7).is_valid)

    def test_disable_batch_subs_gives_one_sub_per_window(self) -> None:
        players = seven_a_side_squad()
        plan = generate(players, 7, 1200, rotation_speed=2, disable_batch_subs=True)
        outfield = [(e.half, e.time) for e in plan if e.player_out_id != "gk"]
        self.assertTrue(outfield)
        self.assertEqual(len(outfield), len(set(outfield)))

    def test_every_speed_keeps_the_pitch_full(self) -> None:
        players = seven_a_side_squad()
        for speed in (1, 2, 3):
            for swaps_off in (False, True):
                plan = generate(players, 7, 25 * 60, rotation_speed=speed, disable_position_swaps=swaps_off)
                result = check_plan_realizable(players, plan, team_size=7)
                self.assertTrue(result.is_valid, (speed, swaps_off, result.errors))


class TestPositionRules(unittest.TestCase):

    def setUp(self) -> None:
        self.players = [
            on("gk", "GK", ["GK"], y=90),
            on("p1", "FWD", y=20),
            on("p2", "DEF", y=70),
            off("b1", ["DEF"]),
        ]

    def test_position_swap_makes_room_for_restricted_player(self) -> None:
        plan = generate(self.players, 3, 600, rotation_speed=1)
        first = plan[0]
        self.assertEqual((first.half, first.time), (1, 200))
        self.assertEqual((first.player_out_id, first.player_in_id), ("p1", "b1"))
        self.assertEqual(first.position_swap, PositionSwap("p2", "DEF", "FWD"))

    def test_direct_swap_when_position_swaps_disabled(self) -> None:
        plan = generate(self.players, 3, 600, rotation_speed=1, disable_position_swaps=True)
        first = plan[0]
        self.assertEqual((first.player_out_id, first.player_in_id), ("p2", "b1"))
        self.assertIsNone(first.position_swap)

    def test_falls_back_to_out_of_position_sub(self) -> None:
        players = self.players[:3] + [off("b1", ["MID"])]
        plan = generate(players, 3, 600, rotation_speed=1)
        first = plan[0]
        self.assertEqual((first.player_out_id, first.player_in_id), ("p1", "b1"))
        self.assertIsNone(first.position_swap)


class TestWindowMaths(unittest.TestCase):

    def test_subs_per_window(self) -> None:
        self.assertEqual(subs_per_window(1, 3, False), 1)
        self.assertEqual(subs_per_window(2, 3, False), 2)
        self.assertEqual(subs_per_window(3, 2, False), 2)
        self.assertEqual(subs_per_window(3, 5, False), 3)
        self.assertEqual(subs_per_window(3, 5, True), 1)
        self.assertEqual(subs_per_window(3, 1, False), 1)

    def test_windows_are_clamped_to_45_second_gaps(self) -> None:
        self.assertEqual(windows_per_half(2, 2, 8, 2, 1200), 3)
        self.assertEqual(windows_per_half(3, 6, 12, 3, 1200), 4)
        self.assertEqual(windows_per_half(3, 6, 12, 1, 120), 2)

    def test_window_times_are_evenly_spaced(self) -> None:
        self.assertEqual(window_times(1200, 3), [300, 600, 900])
        self.assertEqual(window_times(1000, 3), [250, 500, 750])
        self.assertEqual(window_times(100, 0), [])


class TestReplanRemaining(unittest.TestCase):

    def setUp(self) -> None:
        self.players = seven_a_side_squad()
        minutes = {"o1": 600, "o2": 600, "o3": 650, "o4": 600, "o5": 600, "o6": 600, "b1": 0, "b2": 100}
        for player in self.players:
            player.minutes_played = minutes.get(player.id, 600)

    def test_replan_from_first_half(self) -> None:
        plan = replan_remaining(self.players, 7, 1200, 600, 1)
        stamps = [(e.half, e.time, e.player_out_id, e.player_in_id) for e in plan]
        self.assertEqual(stamps, [
            (1, 1200, "o3", "b1"),
            (2, 0, "gk", "gk2"),
            (2, 600, "o1", "b2"),
        ])

    def test_replan_in_second_half_has_no_keeper_swap(self) -> None:
        plan = replan_remaining(self.players, 7, 1200, 300, 2)
        self.assertTrue(plan)
        self.assertTrue(all(e.half == 2 and e.time > 300 for e in plan))
        self.assertNotIn("gk", {e.player_out_id for e in plan})

    def test_replan_near_full_time_schedules_nothing(self) -> None:
        self.assertEqual(replan_remaining(self.players, 7, 1200, 1150, 2), [])
