"""
Operator notifications for the pitch board.

Banners shown after the operator acts on a substitution. Nothing in the engine
depends on whether a notification was delivered.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class NotificationKind(Enum):
    """Banner style."""
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"


@dataclass
class Notification:
    kind: NotificationKind
    title: str
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "title": self.title, "detail": self.detail}


class OperatorNotifier(ABC):
    """Abstract sink for operator-facing messages."""

    @abstractmethod
    def notify(self, kind: NotificationKind, title: str, detail: str = "") -> None:
        """
        Show a message to the operator.

        Args:
            kind: Banner style
            title: Short headline, e.g. "Substitution made"
            detail: Optional second line
        """
        pass


class LoggingNotifier(OperatorNotifier):
    """Writes notifications to the application log."""

    def notify(self, kind: NotificationKind, title: str, detail: str = "") -> None:
        level = logging.WARNING if kind is NotificationKind.WARNING else logging.INFO
        logger.log(level, "%s: %s", title, detail)


class RecordingNotifier(OperatorNotifier):
    """Keeps notifications in memory so a UI or a test can read them back."""

    def __init__(self):
        self.notifications: List[Notification] = []

    def notify(self, kind: NotificationKind, title: str, detail: str = "") -> None:
        self.notifications.append(Notification(kind, title, detail))

    def last(self) -> Notification:
        """Most recent notification; raises IndexError when there is none."""
        return self.notifications[-1]

    def drain(self) -> List[Notification]:
        """Return and forget everything recorded so far."""
        drained, self.notifications = self.notifications, []
        return drained
