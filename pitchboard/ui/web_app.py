"""
Web application module for the pitch board.

This module contains the Flask server exposing the substitution engine as a
JSON API: roster and lineup, match clock controls, plan generation and
editing, and the live monitor's pending/accept/skip/snooze actions.
"""
import logging
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from ..models import PitchState, PlanForecast, Player, build_lineup, check_field_count
from ..services import (
    PlanEditor, RecordingNotifier, ServiceFactory, forecast, forecast_remaining, generate,
)
from ..utils import DEFAULT_TEAM_SIZE, SUPPORTED_TEAM_SIZES, now_ts
from ..utils.constants import DEFAULT_ROTATION_SPEED

logger = logging.getLogger(__name__)


class WebAppState:
    """
    State holder for the web application.

    Every service is built by the ServiceFactory around one shared store, so
    the timer and the monitor read and write the same clock and pitch state.
    """

    def __init__(self, service_factory: Optional[ServiceFactory] = None):
        self.service_factory = service_factory or ServiceFactory()
        self.store = self.service_factory.get_store()
        self.notifier = self.service_factory.get_notifier()
        self.timer = self.service_factory.create_match_timer()
        self.monitor = self.service_factory.create_live_monitor()

    def require_pitch_state(self) -> PitchState:
        """
        Read the pitch state.

        Raises:
            ValueError: If no roster has been loaded
        """
        state = self.store.read_pitch_state()
        if state is None:
            raise ValueError("No roster loaded")
        return state

    def match_seconds(self) -> int:
        """Seconds since kickoff on the shared clock (or the local timer before one is stored)."""
        clock = self.store.read_clock() or self.timer.clock
        return clock.current_total_seconds(now_ts())

    def save_pitch_state(self, state: PitchState) -> None:
        """Credit playing time up to now, then write the state."""
        state.catch_up_minutes(self.match_seconds())
        self.store.write_pitch_state(state)

    def forecast_for(self, state: PitchState) -> PlanForecast:
        """Kickoff forecast until a substitution has happened, then a live one."""
        minutes_per_half = self.timer.clock.minutes_per_half
        if any(e.executed for e in state.plan):
            return forecast_remaining(
                state.players, state.plan, minutes_per_half, state.last_timer_seconds or 0
            )
        return forecast(state.players, state.plan, minutes_per_half)

    def editor_for(self, state: PitchState) -> PlanEditor:
        return self.service_factory.create_plan_editor(state.players, self.timer.clock.minutes_per_half)

    def drain_notifications(self) -> list:
        if not isinstance(self.notifier, RecordingNotifier):
            return []
        return [n.to_dict() for n in self.notifier.drain()]


def _json_body() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _error(message: str, status: int = 400) -> Tuple[Any, int]:
    return jsonify({"success": False, "error": message}), status


def create_app(app_state: Optional[WebAppState] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        app_state: Services to serve; a fresh in-memory set when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    state_holder = app_state or WebAppState()
    app.config["PITCHBOARD_STATE"] = state_holder

    def _state_payload() -> Dict[str, Any]:
        state = state_holder.store.read_pitch_state()
        pending = state_holder.monitor.poll()
        return {
            "success": True,
            "clock": state_holder.timer.to_dict(),
            "pitch_state": state.to_json() if state else None,
            "pending": pending.to_dict() if pending else None,
            "game_finished": state_holder.monitor.is_game_finished(),
            "notifications": state_holder.drain_notifications(),
        }

    # ==================== State & Roster ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Clock, pitch state, pending substitution and notifications."""
        try:
            return jsonify(_state_payload())
        except Exception as e:
            logger.exception("State request failed")
            return _error(str(e), 500)

    @app.route("/api/roster", methods=["POST"])
    def load_roster():
        """Load a roster; players without positions are laid out on a formation."""
        try:
            data = _json_body()
            team_size = int(data.get("team_size", DEFAULT_TEAM_SIZE))
            if team_size not in SUPPORTED_TEAM_SIZES:
                return _error(f"Team size must be one of {SUPPORTED_TEAM_SIZES}")
            formation_index = int(data.get("formation_index", 0))
            players = [Player.from_dict(p) for p in data.get("players", [])]
            if not players:
                return _error("Roster is empty")

            if not any(p.on_field for p in players):
                players = build_lineup(players, team_size, formation_index)

            validation = check_field_count(players, team_size)
            if not validation.is_valid:
                return jsonify({"success": False, "error": "; ".join(validation.errors)}), 400

            state = PitchState(
                players=players,
                team_size=team_size,
                selected_formation=formation_index,
                team_id=data.get("team_id"),
            )
            state_holder.save_pitch_state(state)
            return jsonify({"success": True, "pitch_state": state.to_json()})
        except (KeyError, ValueError) as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Roster load failed")
            return _error(str(e), 500)

    # ==================== Match Clock ==================== #

    @app.route("/api/timer/configure", methods=["POST"])
    def configure_timer():
        try:
            data = _json_body()
            state_holder.timer.configure(
                minutes_per_half=data.get("minutes_per_half"),
                team_name=data.get("team_name"),
                sound_enabled=data.get("sound_enabled"),
            )
            return jsonify({"success": True, "clock": state_holder.timer.to_dict()})
        except ValueError as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Timer configuration failed")
            return _error(str(e), 500)

    @app.route("/api/timer/<action>", methods=["POST"])
    def timer_action(action: str):
        """start, pause, halftime, reset or adjustment."""
        try:
            timer = state_holder.timer
            if action == "start":
                timer.start()
            elif action == "pause":
                timer.pause()
            elif action == "halftime":
                timer.start_second_half()
            elif action == "reset":
                timer.reset()
            elif action == "adjustment":
                timer.adjust(int(_json_body().get("seconds", 0)))
            else:
                return _error(f"Unknown timer action: {action}", 404)
            return jsonify({"success": True, "clock": timer.to_dict()})
        except ValueError as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Timer action %s failed", action)
            return _error(str(e), 500)

    # ==================== Plan ==================== #

    @app.route("/api/plan/generate", methods=["POST"])
    def generate_plan():
        """Generate a fresh plan for the loaded roster; it starts inactive."""
        try:
            data = _json_body()
            state = state_holder.require_pitch_state()
            clock = state_holder.timer.clock
            state.plan = generate(
                state.players,
                state.team_size,
                clock.half_duration_seconds,
                rotation_speed=int(data.get("rotation_speed", DEFAULT_ROTATION_SPEED)),
                disable_position_swaps=bool(data.get("disable_position_swaps", False)),
                disable_batch_subs=bool(data.get("disable_batch_subs", False)),
            )
            state.plan_active = False
            state.plan_paused = False
            state.executed_subs = []
            state_holder.save_pitch_state(state)
            result = state_holder.forecast_for(state)
            return jsonify({
                "success": True,
                "plan": [e.to_dict() for e in state.plan],
                "forecast": result.to_dict(),
            })
        except ValueError as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Plan generation failed")
            return _error(str(e), 500)

    @app.route("/api/plan/forecast", methods=["GET"])
    def get_forecast():
        try:
            state = state_holder.require_pitch_state()
            result = state_holder.forecast_for(state)
            return jsonify({"success": True, "forecast": result.to_dict()})
        except ValueError as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Forecast failed")
            return _error(str(e), 500)

    @app.route("/api/plan/<action>", methods=["POST"])
    def plan_action(action: str):
        """start, pause or resume following the plan."""
        try:
            state = state_holder.require_pitch_state()
            if action == "start":
                if not state.remaining_events():
                    return _error("Plan has no remaining substitutions")
                state.plan_active = True
                state.plan_paused = False
            elif action == "pause":
                state.plan_paused = True
            elif action == "resume":
                state.plan_paused = False
            else:
                return _error(f"Unknown plan action: {action}", 404)
            state_holder.save_pitch_state(state)
            return jsonify({"success": True, "pitch_state": state.to_json()})
        except ValueError as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Plan action %s failed", action)
            return _error(str(e), 500)

    # ==================== Plan Editor ==================== #

    def _apply_edit(edit) -> Tuple[Any, int]:
        state = state_holder.require_pitch_state()
        editor = state_holder.editor_for(state)
        edited = edit(editor, state.plan)
        if editor.last_rejection:
            return _error(f"Edit rejected: {editor.last_rejection}")
        state.plan = edited
        state.refresh_plan_active()
        state_holder.save_pitch_state(state)
        return jsonify({"success": True, "plan": [e.to_dict() for e in edited]}), 200

    @app.route("/api/plan/events", methods=["POST"])
    def insert_event():
        try:
            data = _json_body()
            return _apply_edit(lambda editor, plan: editor.insert(
                plan,
                int(data["half"]),
                int(data["minute"]),
                str(data["player_out_id"]),
                str(data["player_in_id"]),
            ))
        except (KeyError, ValueError) as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Insert failed")
            return _error(str(e), 500)

    @app.route("/api/plan/events/<int:index>", methods=["DELETE"])
    def delete_event(index: int):
        try:
            return _apply_edit(lambda editor, plan: editor.delete(plan, index))
        except ValueError as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Delete failed")
            return _error(str(e), 500)

    @app.route("/api/plan/events/<int:index>/retime", methods=["POST"])
    def retime_event(index: int):
        try:
            data = _json_body()
            return _apply_edit(lambda editor, plan: editor.retime(
                plan, index, int(data["minute"]), int(data["half"])
            ))
        except (KeyError, ValueError) as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Retime failed")
            return _error(str(e), 500)

    @app.route("/api/plan/events/<int:index>/reassign", methods=["POST"])
    def reassign_event(index: int):
        try:
            data = _json_body()
            return _apply_edit(lambda editor, plan: editor.reassign_players(
                plan, index, str(data["player_out_id"]), str(data["player_in_id"])
            ))
        except (KeyError, ValueError) as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Reassign failed")
            return _error(str(e), 500)

    @app.route("/api/plan/reorder", methods=["POST"])
    def reorder_events():
        try:
            data = _json_body()
            return _apply_edit(lambda editor, plan: editor.reorder(
                plan, int(data["from_index"]), int(data["to_index"])
            ))
        except (KeyError, ValueError) as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Reorder failed")
            return _error(str(e), 500)

    @app.route("/api/plan/candidates", methods=["GET"])
    def insert_candidates():
        """Who may go off and who may come on at ``half``/``minute``."""
        try:
            half = int(request.args.get("half", 1))
            minute = int(request.args.get("minute", 0))
            state = state_holder.require_pitch_state()
            on_pitch, on_bench = state_holder.editor_for(state).candidates_at(state.plan, half, minute)
            return jsonify({
                "success": True,
                "on_pitch": [p.to_dict() for p in on_pitch],
                "on_bench": [p.to_dict() for p in on_bench],
            })
        except ValueError as e:
            return _error(str(e))
        except Exception as e:
            logger.exception("Candidate lookup failed")
            return _error(str(e), 500)

    # ==================== Live Monitor ==================== #

    @app.route("/api/monitor/pending", methods=["GET"])
    def get_pending():
        try:
            pending = state_holder.monitor.poll()
            return jsonify({
                "success": True,
                "pending": pending.to_dict() if pending else None,
                "snoozed": state_holder.monitor.is_snoozed(),
            })
        except Exception as e:
            logger.exception("Pending check failed")
            return _error(str(e), 500)

    @app.route("/api/monitor/accept", methods=["POST"])
    def accept_pending():
        try:
            data = _json_body()
            monitor = state_holder.monitor
            if monitor.pending is None:
                monitor.poll()
            outcome = monitor.accept(
                player_out_id=data.get("player_out_id"),
                player_in_id=data.get("player_in_id"),
            )
            return jsonify({
                "success": outcome.state is not None,
                "outcome": outcome.to_dict(),
                "notifications": state_holder.drain_notifications(),
            })
        except Exception as e:
            logger.exception("Accept failed")
            return _error(str(e), 500)

    @app.route("/api/monitor/skip", methods=["POST"])
    def skip_pending():
        try:
            monitor = state_holder.monitor
            if monitor.pending is None:
                monitor.poll()
            outcome = monitor.skip()
            return jsonify({
                "success": outcome.state is not None,
                "outcome": outcome.to_dict(),
                "notifications": state_holder.drain_notifications(),
            })
        except Exception as e:
            logger.exception("Skip failed")
            return _error(str(e), 500)

    @app.route("/api/monitor/snooze", methods=["POST"])
    def snooze_pending():
        try:
            until = state_holder.monitor.snooze()
            return jsonify({"success": True, "snoozed_until": until})
        except Exception as e:
            logger.exception("Snooze failed")
            return _error(str(e), 500)

    @app.route("/api/monitor/regenerate", methods=["POST"])
    def regenerate_plan():
        try:
            outcome = state_holder.monitor.regenerate()
            return jsonify({
                "success": outcome.applied,
                "outcome": outcome.to_dict(),
                "notifications": state_holder.drain_notifications(),
            })
        except Exception as e:
            logger.exception("Regenerate failed")
            return _error(str(e), 500)

    return app


def run_web_app(host: str = "127.0.0.1", port: int = 7122, data_dir: Optional[str] = None,
                remote_url: Optional[str] = None) -> None:
    """
    Run the web application.

    Args:
        host: Host address to bind to (default: localhost only)
        port: Port number to listen on
        data_dir: Directory for the JSON match store (in-memory when omitted)
        remote_url: Base URL of an HTTP key/value store; wins over data_dir
    """
    factory = ServiceFactory(data_dir=data_dir, remote_url=remote_url)
    app = create_app(WebAppState(factory))
    app.run(host=host, port=port, debug=False)
