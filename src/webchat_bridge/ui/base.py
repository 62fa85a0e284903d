"""Interfaces for the host that presents the bridge to a user."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class HostUI(ABC):
    """Abstract interface to the user-facing shell."""

    @abstractmethod
    def get_user_input(self, prompt: str) -> Optional[str]:
        """Ask for a line of text. Return ``None`` when the user cancels."""

    @abstractmethod
    def log_output(self, message: str) -> None:
        """Append a line to the output log."""

    @abstractmethod
    def show_status_bar_message(
        self,
        message: str,
        loading: bool = False,
        duration: Optional[float] = None,
    ) -> None:
        """Show a short status message, optionally with a busy indicator."""

    @abstractmethod
    def show_response_webview(self, markdown: str, title: str) -> None:
        """Render a reply as markdown."""

    @abstractmethod
    def insert_into_editor(self, text: str) -> None:
        """Insert text at the active editing position."""

    @abstractmethod
    def confirm(self, message: str, detail: Optional[str] = None) -> bool:
        """Ask a yes/no question. Return ``True`` only on explicit approval."""

    @abstractmethod
    def show_warning(self, message: str) -> None:
        """Surface a warning."""

    @abstractmethod
    def show_error(self, message: str) -> None:
        """Surface an error."""
