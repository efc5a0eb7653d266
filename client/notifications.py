import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notification:
    kind: str
    message: str


class Notifier:
    """Collects transient notifications until the view drains them."""

    def __init__(self):
        self._pending: list[Notification] = []

    def success(self, message: str) -> None:
        logger.info(message)
        self._pending.append(Notification(SUCCESS, message))

    def error(self, message: str) -> None:
        logger.error(message)
        self._pending.append(Notification(ERROR, message))

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        drained, self._pending = self._pending, []
        return drained
