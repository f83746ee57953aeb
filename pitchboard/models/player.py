"""
Player model for the pitch board substitution engine.

This module contains the Player dataclass which represents an individual squad
member for one match: where they stand (on the pitch or on the bench), which
positions they may play, and how long they have been on the pitch so far.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils import GOALKEEPER


@dataclass
class PitchCoordinate:
    """A spot on the pitch drawing (0-100 on both axes)."""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for JSON serialization."""
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['PitchCoordinate']:
        """Create from dictionary; ``None`` means the player is on the bench."""
        if data is None:
            return None
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass
class Player:
    """
    Represents a squad member on the pitch board.

    Attributes:
        id: Stable identifier, unique within the roster
        name: Display name
        number: Jersey number (optional)
        position: Coordinate on the pitch, or None when the player is on the bench
        eligible_positions: Position labels the player may occupy (empty = any)
        current_pitch_position: Position label held while on the pitch
        minutes_played: Seconds played so far in this match
        is_injured: Injured players are never brought on from the bench
        is_fill_in: Temporary guest player, not part of the regular squad
    """
    id: str
    name: str
    number: Optional[int] = None
    position: Optional[PitchCoordinate] = None
    eligible_positions: List[str] = field(default_factory=list)
    current_pitch_position: Optional[str] = None
    minutes_played: int = 0
    is_injured: bool = False
    is_fill_in: bool = False

    @property
    def on_field(self) -> bool:
        """True when the player currently has a pitch coordinate."""
        return self.position is not None

    def can_play(self, position_label: Optional[str]) -> bool:
        """
        Check whether the player may occupy a position label.

        Args:
            position_label: Label such as "DEF"; None is treated as unrestricted

        Returns:
            True if the player has no restriction or lists the label
        """
        if not self.eligible_positions or position_label is None:
            return True
        return position_label in self.eligible_positions

    def is_goalkeeper_only(self) -> bool:
        """A player whose only eligible position is GK never rotates outfield."""
        return len(self.eligible_positions) == 1 and self.eligible_positions[0] == GOALKEEPER

    def display_name(self) -> str:
        """Name for banners, falling back to the jersey number."""
        if self.name:
            return self.name
        if self.number is not None:
            return f"#{self.number}"
        return self.id

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert player to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the player
        """
        return {
            "id": self.id,
            "name": self.name,
            "number": self.number,
            "position": self.position.to_dict() if self.position else None,
            "eligible_positions": list(self.eligible_positions),
            "current_pitch_position": self.current_pitch_position,
            "minutes_played": self.minutes_played,
            "is_injured": self.is_injured,
            "is_fill_in": self.is_fill_in,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Player':
        """
        Create player from dictionary for JSON deserialization.

        Args:
            data: Dictionary representation of player

        Returns:
            Player instance
        """
        number = data.get("number")
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            number=int(number) if number not in (None, "") else None,
            position=PitchCoordinate.from_dict(data.get("position")),
            eligible_positions=[p.strip().upper() for p in data.get("eligible_positions") or [] if p],
            current_pitch_position=data.get("current_pitch_position"),
            minutes_played=int(data.get("minutes_played", 0) or 0),
            is_injured=bool(data.get("is_injured", False)),
            is_fill_in=bool(data.get("is_fill_in", False)),
        )
