"""Formation layouts and lineup helpers for the pitch board."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .player import PitchCoordinate, Player
from ..utils import GOALKEEPER, DEFENDER, MIDFIELDER, FORWARD


@dataclass(frozen=True)
class FormationLayout:
    """A named set of pitch coordinates, goalkeeper first where there is one."""
    name: str
    positions: Tuple[Tuple[float, float], ...]

    def coordinates(self) -> List[PitchCoordinate]:
        return [PitchCoordinate(x=x, y=y) for x, y in self.positions]


FORMATIONS: Dict[int, List[FormationLayout]] = {
    4: [
        FormationLayout("1-2-1", ((50, 85), (25, 55), (75, 55), (50, 25))),
        FormationLayout("2-1-1", ((35, 85), (65, 85), (50, 55), (50, 25))),
        FormationLayout("1-1-2", ((50, 85), (50, 55), (35, 25), (65, 25))),
    ],
    7: [
        FormationLayout("2-3-1", ((50, 90), (30, 70), (70, 70), (20, 45), (50, 45), (80, 45), (50, 20))),
        FormationLayout("3-2-1", ((50, 90), (25, 70), (50, 70), (75, 70), (35, 40), (65, 40), (50, 15))),
        FormationLayout("2-2-2", ((50, 90), (30, 70), (70, 70), (30, 40), (70, 40), (35, 15), (65, 15))),
    ],
    9: [
        FormationLayout("3-3-2", ((50, 90), (25, 72), (50, 72), (75, 72), (25, 48), (50, 48), (75, 48), (35, 20), (65, 20))),
        FormationLayout("3-2-3", ((50, 90), (25, 72), (50, 72), (75, 72), (35, 48), (65, 48), (25, 20), (50, 20), (75, 20))),
        FormationLayout("2-4-2", ((50, 90), (30, 72), (70, 72), (20, 48), (40, 48), (60, 48), (80, 48), (35, 20), (65, 20))),
    ],
    11: [
        FormationLayout("4-4-2", ((50, 92), (20, 75), (40, 75), (60, 75), (80, 75), (20, 50), (40, 50), (60, 50), (80, 50), (35, 22), (65, 22))),
        FormationLayout("4-3-3", ((50, 92), (20, 75), (40, 75), (60, 75), (80, 75), (30, 50), (50, 50), (70, 50), (25, 22), (50, 22), (75, 22))),
        FormationLayout("3-5-2", ((50, 92), (25, 75), (50, 75), (75, 75), (15, 50), (35, 50), (50, 50), (65, 50), (85, 50), (35, 22), (65, 22))),
        FormationLayout("4-2-3-1", ((50, 92), (20, 75), (40, 75), (60, 75), (80, 75), (35, 55), (65, 55), (25, 35), (50, 35), (75, 35), (50, 15))),
    ],
}


def position_from_coords(y: float, team_size: int) -> str:
    """
    Map a formation coordinate to a position label.

    4-a-side has no goalkeeper; every other size keeps the GK at the back.
    """
    if team_size == 4:
        if y > 70:
            return DEFENDER
        if y > 40:
            return MIDFIELDER
        return FORWARD
    if y > 80:
        return GOALKEEPER
    if y > 60:
        return DEFENDER
    if y > 30:
        return MIDFIELDER
    return FORWARD


def get_formation(team_size: int, formation_index: int = 0) -> FormationLayout:
    """
    Look up a formation layout.

    Raises:
        ValueError: If the team size or index is not in the table
    """
    layouts = FORMATIONS.get(team_size)
    if not layouts:
        raise ValueError(f"Unsupported team size: {team_size}")
    if not 0 <= formation_index < len(layouts):
        raise ValueError(f"Formation index {formation_index} out of range for {team_size}-a-side")
    return layouts[formation_index]


def build_lineup(players: Sequence[Player], team_size: int, formation_index: int = 0) -> List[Player]:
    """
    Place the first ``team_size`` players on the formation and bench the rest.

    Returns copies; the input players are not modified.

    Raises:
        ValueError: If there are fewer players than places on the pitch
    """
    layout = get_formation(team_size, formation_index)
    if len(players) < team_size:
        raise ValueError(f"Need at least {team_size} players, got {len(players)}")

    lineup: List[Player] = []
    for idx, player in enumerate(players):
        placed = copy.deepcopy(player)
        if idx < team_size:
            coord = layout.coordinates()[idx]
            placed.position = coord
            placed.current_pitch_position = position_from_coords(coord.y, team_size)
        else:
            placed.position = None
            placed.current_pitch_position = None
        lineup.append(placed)
    return lineup
