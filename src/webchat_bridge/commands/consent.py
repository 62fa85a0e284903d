"""User consent for side-effecting commands."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from ..ui.base import HostUI


class ConsentProvider(ABC):
    """Ask the user whether a gated action may proceed."""

    @abstractmethod
    async def request(self, prompt: str, detail: Optional[str] = None) -> bool:
        """Return ``True`` only when the user explicitly approves."""


class UIConsent(ConsentProvider):
    """Ask through the host UI's yes/no prompt."""

    def __init__(self, ui: HostUI) -> None:
        self._ui = ui

    async def request(self, prompt: str, detail: Optional[str] = None) -> bool:
        return await asyncio.to_thread(self._ui.confirm, prompt, detail)


class AutoConsent(ConsentProvider):
    """Answer every request the same way, for unattended runs."""

    def __init__(self, approve: bool) -> None:
        self._approve = approve
        self.requests: list[str] = []

    async def request(self, prompt: str, detail: Optional[str] = None) -> bool:
        self.requests.append(prompt)
        return self._approve
