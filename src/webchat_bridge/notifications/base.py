"""Notification channels for the webchat bridge."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console

from ..models import NotificationEvent

_LEVEL_STYLES = {
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "success": "green",
}


class Notifier(ABC):
    """Interface for surfacing session and interaction events to the user."""

    @abstractmethod
    def notify(self, event: NotificationEvent) -> None:
        """Send a notification event."""


class ConsoleNotifier(Notifier):
    """Print notifications to the console using Rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self._console = console or Console(stderr=True)

    def notify(self, event: NotificationEvent) -> None:
        style = _LEVEL_STYLES.get(event.level.value, "white")
        self._console.print(f"[{event.level.value.upper()}] {event.message}", style=style, markup=False)
        if event.data:
            self._console.print(event.data, style="dim")


class NullNotifier(Notifier):
    """Discard every event."""

    def notify(self, event: NotificationEvent) -> None:
        return None
