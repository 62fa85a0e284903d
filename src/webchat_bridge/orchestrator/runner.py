"""Orchestrator that sequences the session, parser, dispatcher and UI."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..browser.session import ChatSessionManager
from ..commands.dispatcher import CommandDispatcher
from ..models import CommandResult, NotificationEvent, NotificationLevel, ParsedResponse
from ..notifications.base import Notifier
from ..parser.response_parser import ResponseParser
from ..ui.base import HostUI

LOGGER = logging.getLogger(__name__)


@dataclass
class InteractionResult:
    """Outcome of one prompt round trip."""

    parsed: ParsedResponse
    results: list[CommandResult] = field(default_factory=list)

    @property
    def failed_commands(self) -> list[CommandResult]:
        return [result for result in self.results if not result.success]


class Orchestrator:
    """Run prompt interactions one at a time against a chat session."""

    def __init__(
        self,
        session: ChatSessionManager,
        parser: ResponseParser,
        dispatcher: CommandDispatcher,
        ui: HostUI,
        notifier: Notifier,
        webview_title: str = "Chat Response",
        status_duration: Optional[float] = 3.0,
    ) -> None:
        self._session = session
        self._parser = parser
        self._dispatcher = dispatcher
        self._ui = ui
        self._notifier = notifier
        self._webview_title = webview_title
        self._status_duration = status_duration
        self._lock = asyncio.Lock()

    async def ask(self, prompt: str) -> InteractionResult:
        """Send ``prompt``, run its directives and show the reply."""

        result = await self._interact(prompt)
        self._ui.show_response_webview(result.parsed.text, self._webview_title)
        self._ui.show_status_bar_message("Response displayed.", False, self._status_duration)
        return result

    async def insert(self, prompt: str) -> InteractionResult:
        """Send ``prompt``, run its directives and insert the reply into the editor."""

        result = await self._interact(prompt)
        self._ui.insert_into_editor(build_insert_text(result.parsed))
        self._ui.show_status_bar_message("Inserted response into editor.", False, self._status_duration)
        return result

    async def close(self) -> None:
        await self._session.close_browser()

    async def _interact(self, prompt: str) -> InteractionResult:
        async with self._lock:
            try:
                if not self._session.is_initialized():
                    self._ui.show_status_bar_message("Initializing chat session...", True)
                    await self._session.initialize()
                self._ui.show_status_bar_message("Sending prompt...", True)
                html = await self._session.submit_prompt(prompt)
                self._ui.show_status_bar_message("Parsing response...", True)
                parsed = self._parser.parse(html)
                results = await self._run_commands(parsed)
            except Exception as exc:
                LOGGER.exception("Interaction failed")
                self._ui.log_output(f"Error: {exc}")
                self._ui.show_error(f"Chat request failed: {exc}")
                self._ui.show_status_bar_message("Error occurred. Check the output log.", False, 5.0)
                self._notifier.notify(
                    NotificationEvent(
                        type="interaction_failed",
                        message=str(exc),
                        level=NotificationLevel.ERROR,
                    )
                )
                raise
        return InteractionResult(parsed=parsed, results=results)

    async def _run_commands(self, parsed: ParsedResponse) -> list[CommandResult]:
        if not parsed.commands:
            return []
        self._ui.log_output(f"Executing {len(parsed.commands)} command(s) from the response...")
        results = await self._dispatcher.execute_all(parsed.commands)
        for command, result in zip(parsed.commands, results):
            if result.success:
                self._ui.log_output(
                    f"Executed command '{command.action}': {json.dumps(result.output, default=str)}"
                )
            else:
                self._ui.log_output(f"Failed to execute command '{command.action}': {result.error}")
                self._ui.show_warning(f"Failed to execute command '{command.action}': {result.error}")
        return results


def build_insert_text(parsed: ParsedResponse) -> str:
    """Concatenate the reply's code blocks as fenced blocks, or fall back to its text."""

    if not parsed.code_blocks:
        return parsed.text
    return "".join(
        f"```{block.language}\n{block.code}\n```\n\n" for block in parsed.code_blocks
    )
