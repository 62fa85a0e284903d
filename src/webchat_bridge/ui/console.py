"""Rich console implementation of the host UI."""

from __future__ import annotations

from collections import deque
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.text import Text

from .base import HostUI

LOG_HISTORY = 500


class ConsoleUI(HostUI):
    """Present the bridge in a terminal."""

    def __init__(
        self,
        console: Optional[Console] = None,
        insert_output: Optional[Path] = None,
        show_log: bool = True,
    ) -> None:
        self._console = console or Console()
        self._insert_output = insert_output
        self._show_log = show_log
        self.log_lines: deque[str] = deque(maxlen=LOG_HISTORY)

    def get_user_input(self, prompt: str) -> Optional[str]:
        try:
            value = Prompt.ask(prompt, console=self._console, default="", show_default=False)
        except (EOFError, KeyboardInterrupt):
            return None
        return value or None

    def log_output(self, message: str) -> None:
        line = f"[{datetime.now().strftime('%H:%M:%S')}] {message}"
        self.log_lines.append(line)
        if self._show_log:
            self._console.print(line, style="dim", markup=False, highlight=False)

    def show_status_bar_message(
        self,
        message: str,
        loading: bool = False,
        duration: Optional[float] = None,
    ) -> None:
        if not message:
            return
        prefix = "… " if loading else ""
        self._console.print(f"{prefix}{message}", style="bold cyan", markup=False)

    def show_response_webview(self, markdown: str, title: str) -> None:
        self._console.print(Panel(Markdown(markdown or "_(empty response)_"), title=title))

    def insert_into_editor(self, text: str) -> None:
        if self._insert_output is None:
            self._console.print(text, markup=False, highlight=False)
            return
        self._insert_output.parent.mkdir(parents=True, exist_ok=True)
        with self._insert_output.open("a", encoding="utf-8") as handle:
            handle.write(text)

    def confirm(self, message: str, detail: Optional[str] = None) -> bool:
        if detail:
            self._console.print(Panel(Text(detail), title="Details", style="yellow"))
        try:
            return Confirm.ask(message, console=self._console, default=False)
        except (EOFError, KeyboardInterrupt):
            return False

    def show_warning(self, message: str) -> None:
        self._console.print(f"Warning: {message}", style="yellow", markup=False)

    def show_error(self, message: str) -> None:
        self._console.print(f"Error: {message}", style="bold red", markup=False)
