# storefront/core/notifications.py
import logging
from typing import Literal

from sqlmodel import SQLModel

logger = logging.getLogger(__name__)

Variant = Literal["default", "destructive"]


class Notification(SQLModel):
    """
    A short user-facing message (toast) describing an action taken.
    """

    title: str
    description: str
    variant: Variant = "default"


class Notifier:
    """
    Collects notifications raised while handling one request.

    Routers return the drained list alongside their payload so the
    client can display them.
    """

    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def notify(self, title: str, description: str, variant: Variant = "default") -> None:
        level = logging.WARNING if variant == "destructive" else logging.INFO
        logger.log(level, f"{title}: {description}")
        self._pending.append(
            Notification(title=title, description=description, variant=variant)
        )

    def error(self, description: str) -> None:
        self.notify("Error", description, variant="destructive")

    def drain(self) -> list[Notification]:
        drained, self._pending = self._pending, []
        return drained
