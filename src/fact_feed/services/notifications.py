"""User-visible notifications raised by the feed engine."""

from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from loguru import logger

from ..errors import ErrorKind

READ_FAILED_MESSAGE = "There was a problem retrieving the facts!"
SUBMIT_FAILED_MESSAGE = "Error uploading the fact!"
IMAGE_FAILED_MESSAGE = "Fact saved, but the image upload failed."
VOTE_FAILED_MESSAGE = "Error voting!"


@dataclass(frozen=True)
class Notification:
    """A message for the user, tagged with the failure it reports."""

    message: str
    kind: ErrorKind
    warning: bool = False


class Notifier(Protocol):
    """Sink for notifications; the presentation layer decides how to show them."""

    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Default notifier: writes notifications to the log."""

    def notify(self, notification: Notification) -> None:
        if notification.warning:
            logger.warning(f"[{notification.kind.value}] {notification.message}")
        else:
            logger.error(f"[{notification.kind.value}] {notification.message}")


@dataclass
class CollectingNotifier:
    """Keeps every notification in memory, e.g. for a UI to drain."""

    notifications: List[Notification] = field(default_factory=list)

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def last(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def drain(self) -> List[Notification]:
        drained, self.notifications = self.notifications, []
        return drained
