"""Tests for playing-time forecasts."""

from pitchboard.models import PitchCoordinate, Player, SubstitutionEvent
from pitchboard.services import forecast, forecast_remaining


def _roster():
    return [
        Player(id="a", name="Ava", number=4, position=PitchCoordinate(30, 70), current_pitch_position="DEF"),
        Player(id="b", name="Ben", number=9, position=PitchCoordinate(50, 20), current_pitch_position="FWD"),
        Player(id="c", name="Cal", number=12),
    ]


def test_forecast_replays_plan_across_halves():
    plan = [
        SubstitutionEvent(1, 300, "a", "c"),
        SubstitutionEvent(2, 300, "b", "a"),
    ]

    result = forecast(_roster(), plan, 10)

    seconds = {p.player_id: p.predicted_seconds for p in result.players}
    assert seconds == {"a": 600, "b": 900, "c": 900}
    assert result.total_player_seconds == 2 * 2 * 10 * 60
    assert [p.player_id for p in result.players] == ["b", "c", "a"]

    ava = result.for_player("a")
    assert ava.predicted_minutes == 10
    assert ava.percentage_of_game == 50
    assert ava.starts_on_pitch is True
    assert result.for_player("c").starts_on_pitch is False
    assert result.substitution_count == 2


def test_forecast_ignores_plan_order():
    plan = [
        SubstitutionEvent(2, 300, "b", "a"),
        SubstitutionEvent(1, 300, "a", "c"),
    ]

    result = forecast(_roster(), plan, 10)

    assert result.for_player("b").predicted_seconds == 900
    assert result.skipped_events == 0


def test_forecast_rounds_halves_up():
    roster = [
        Player(id="x", name="X", position=PitchCoordinate(50, 50), current_pitch_position="MID"),
        Player(id="y", name="Y"),
    ]

    result = forecast(roster, [SubstitutionEvent(1, 30, "x", "y")], 1)

    assert result.for_player("x").predicted_seconds == 30
    assert result.for_player("x").predicted_minutes == 1
    assert result.for_player("x").percentage_of_game == 25
    assert result.for_player("y").predicted_minutes == 2
    assert result.for_player("y").percentage_of_game == 75


def test_forecast_skips_impossible_substitutions():
    plan = [SubstitutionEvent(1, 300, "c", "a")]

    result = forecast(_roster(), plan, 10)

    assert result.skipped_events == 1
    assert result.for_player("a").predicted_seconds == 1200
    assert result.for_player("c").predicted_seconds == 0


def test_forecast_without_plan_gives_starters_full_game():
    result = forecast(_roster(), [], 20)

    assert result.for_player("a").percentage_of_game == 100
    assert result.for_player("c").predicted_minutes == 0
    assert result.to_dict()["players"][0]["predicted_minutes"] == 40


def _after_first_sub():
    # Ava went off for Cal at 5:00 and both have been credited up to then
    return [
        Player(id="a", name="Ava", minutes_played=300),
        Player(id="b", name="Ben", position=PitchCoordinate(50, 20), current_pitch_position="FWD",
               minutes_played=300),
        Player(id="c", name="Cal", position=PitchCoordinate(30, 70), current_pitch_position="DEF"),
    ]


def test_forecast_mid_match_keeps_time_already_played():
    plan = [SubstitutionEvent(1, 300, "a", "c", executed=True)]

    result = forecast_remaining(_after_first_sub(), plan, 10, 300)

    seconds = {p.player_id: p.predicted_seconds for p in result.players}
    assert seconds == {"a": 300, "b": 1200, "c": 900}
    assert result.skipped_events == 0
    assert result.total_player_seconds == 2 * 2 * 10 * 60
    assert result.for_player("c").starts_on_pitch is True


def test_forecast_mid_match_replays_remaining_events():
    plan = [
        SubstitutionEvent(1, 300, "a", "c", executed=True),
        SubstitutionEvent(2, 300, "b", "a"),
    ]

    result = forecast_remaining(_after_first_sub(), plan, 10, 300)

    seconds = {p.player_id: p.predicted_seconds for p in result.players}
    # Ben plays until 15:00, Ava returns for the last 5:00
    assert seconds == {"a": 600, "b": 900, "c": 900}


def test_forecast_mid_match_treats_overdue_events_as_now():
    plan = [
        SubstitutionEvent(1, 300, "a", "c", executed=True),
        SubstitutionEvent(1, 200, "b", "a"),
    ]

    result = forecast_remaining(_after_first_sub(), plan, 10, 300)

    seconds = {p.player_id: p.predicted_seconds for p in result.players}
    assert seconds == {"a": 1200, "b": 300, "c": 900}
