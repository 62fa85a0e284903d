"""Browser driver abstractions.

The session manager talks to the remote chat page only through the narrow
capability interface below. Pages address elements by :class:`SelectorRole`
and resolve the concrete CSS selector from configuration, so swapping the
automation engine never touches parsing or dispatch code.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from ..config import SessionConfig


class SelectorRole(str, enum.Enum):
    """Elements of the chat page the session needs to find."""

    PROMPT_INPUT = "prompt_input"
    COMPLETION_INDICATOR = "completion_indicator"
    RESPONSE_CONTAINER = "response_container"


class BrowserDriverError(RuntimeError):
    """Raised when the automation engine fails to perform an operation."""


class ChatPage(ABC):
    """A single page pointed at the chat endpoint."""

    @abstractmethod
    async def goto(self, url: str, timeout: float) -> None:
        """Navigate to ``url`` and wait until the network is idle."""

    @abstractmethod
    async def wait_for(self, role: SelectorRole, timeout: float) -> None:
        """Wait until an element for ``role`` is present."""

    @abstractmethod
    async def focus(self, role: SelectorRole) -> None:
        """Focus the element for ``role``."""

    @abstractmethod
    async def clear(self, role: SelectorRole) -> None:
        """Remove any existing content from the element for ``role``."""

    @abstractmethod
    async def type_text(self, role: SelectorRole, text: str, delay: float) -> None:
        """Type ``text`` key by key into the element for ``role``."""

    @abstractmethod
    async def submit(self) -> None:
        """Perform the page's submit gesture."""

    @abstractmethod
    async def wait_for_content(self, role: SelectorRole, timeout: float) -> None:
        """Wait until the element for ``role`` renders non-empty markup."""

    @abstractmethod
    async def last_inner_html(self, role: SelectorRole) -> str:
        """Return the inner markup of the last element matching ``role``."""


class BrowserHandle(ABC):
    """A launched browser process."""

    @abstractmethod
    async def new_page(self) -> ChatPage:
        """Open a new page."""

    @abstractmethod
    def on_disconnect(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run when the process disconnects."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Return whether the process is still reachable."""

    @abstractmethod
    async def close(self) -> None:
        """Terminate the process. Safe to call when it is already gone."""


class BrowserDriver(ABC):
    """Factory for browser processes."""

    @abstractmethod
    async def launch(self, config: "SessionConfig") -> BrowserHandle:
        """Launch a browser process configured by ``config``."""
