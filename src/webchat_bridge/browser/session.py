"""Lifecycle and prompt submission for the remote chat browser session."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional, Union

from ..config import SessionConfig
from ..errors import ConfigurationError, DisconnectError, LaunchError, SubmissionError
from ..models import NotificationEvent, NotificationLevel
from ..notifications.base import Notifier
from ..ui.base import HostUI
from .base import BrowserDriver, BrowserHandle, ChatPage, SelectorRole

LOGGER = logging.getLogger(__name__)

ConfigSource = Union[SessionConfig, Callable[[], SessionConfig]]
Sleeper = Callable[[float], Awaitable[None]]


class SessionState(str, enum.Enum):
    """Lifecycle states of a chat session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DISCONNECTED = "disconnected"


class ChatSessionManager:
    """Own one browser process and one page pointed at the chat endpoint.

    Prompt submission must be serialized by the caller: the manager keeps a
    single page and does not lock around :meth:`submit_prompt`.
    """

    def __init__(
        self,
        config: ConfigSource,
        driver: Optional[BrowserDriver] = None,
        ui: Optional[HostUI] = None,
        notifier: Optional[Notifier] = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if isinstance(config, SessionConfig):
            self._config_source: Callable[[], SessionConfig] = lambda: config
        else:
            self._config_source = config
        if driver is None:
            from .playwright_driver import PlaywrightDriver

            driver = PlaywrightDriver()
        self._driver = driver
        self._ui = ui
        self._notifier = notifier
        self._sleep = sleep
        self._config: SessionConfig = self._config_source()
        self._browser: Optional[BrowserHandle] = None
        self._page: Optional[ChatPage] = None
        self._state = SessionState.UNINITIALIZED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> SessionConfig:
        return self._config

    def is_browser_connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    def is_initialized(self) -> bool:
        return (
            self._state == SessionState.READY
            and self._page is not None
            and self.is_browser_connected()
        )

    async def initialize(self) -> None:
        """Launch the browser and wait for the chat page to become usable."""

        if self.is_initialized():
            self._log("Already initialized.")
            return
        if self._browser is not None:
            await self._discard(self._browser)
            self._release()

        config = self._config_source()
        self._config = config
        if config.executable_path and not config.executable_path.is_file():
            message = (
                f"Browser executable not found at configured path: {config.executable_path}. "
                "Check the session.executable_path setting."
            )
            self._log(message, logging.ERROR)
            raise ConfigurationError(message)

        self._state = SessionState.INITIALIZING
        self._log(
            f"Launching browser (headless: {config.headless}, "
            f"path: {config.executable_path or 'default'})"
        )
        for attempt in range(1, config.max_retries + 1):
            self._log(f"Initialize attempt {attempt}/{config.max_retries}...")
            browser: Optional[BrowserHandle] = None
            try:
                browser = await self._driver.launch(config)
                self._browser = browser
                browser.on_disconnect(self._disconnect_listener(browser))
                page = await browser.new_page()
                self._page = page
                self._log(f"Page created. Navigating to {config.endpoint_url}...")
                await page.goto(config.endpoint_url, config.initial_load_timeout)
                self._log("Navigation successful. Waiting for the prompt input...")
                await page.wait_for(SelectorRole.PROMPT_INPUT, config.initial_load_timeout)
            except Exception as exc:
                self._log(f"Initialization attempt {attempt} failed: {exc}", logging.ERROR)
                if browser is not None:
                    self._browser = None
                    self._page = None
                    await self._discard(browser)
                if attempt == config.max_retries:
                    self._state = SessionState.UNINITIALIZED
                    raise LaunchError(
                        f"Failed to initialize the browser session after {config.max_retries} "
                        f"attempts: {exc}",
                        attempts=config.max_retries,
                    ) from exc
                await self._sleep(config.retry_delay)
                continue
            self._state = SessionState.READY
            self._log("Prompt input found. Session ready.")
            return

    async def submit_prompt(self, text: str) -> str:
        """Send ``text`` to the chat and return the markup of the newest reply."""

        if not self.is_initialized():
            self._log("Not initialized. Attempting initialization.", logging.WARNING)
            await self.initialize()
        page = self._page
        if not self.is_initialized() or page is None:
            raise SubmissionError("Session is not initialized. Cannot send prompt.")

        config = self._config
        self._log(f"Sending prompt. Length: {len(text)}")
        for attempt in range(1, config.max_retries + 1):
            self._log(f"Send prompt attempt {attempt}/{config.max_retries}...")
            try:
                html = await self._exchange(page, text, config)
            except Exception as exc:
                self._log(f"Send prompt attempt {attempt} failed: {exc}", logging.ERROR)
                if not self.is_browser_connected():
                    self._release()
                    raise DisconnectError(
                        "Browser disconnected during operation. Please try again.",
                        attempts=attempt,
                    ) from exc
                if attempt == config.max_retries:
                    raise SubmissionError(
                        f"Failed to send prompt and get response after {config.max_retries} "
                        f"attempts: {exc}",
                        attempts=config.max_retries,
                    ) from exc
                await self._sleep(config.retry_delay)
                continue
            if html.strip():
                self._log(f"Received response HTML. Length: {len(html)}")
                return html
            self._log("Response container found, but no HTML content extracted.", logging.WARNING)
            if attempt == config.max_retries:
                raise SubmissionError(
                    f"Failed to extract response content after {config.max_retries} attempts.",
                    attempts=config.max_retries,
                )
            await self._sleep(config.retry_delay)
        raise SubmissionError("Failed to send prompt after all retries.")

    async def close_browser(self) -> None:
        """Release the page and the browser process. Safe to call repeatedly."""

        browser = self._browser
        self._release()
        if browser is None:
            self._log("Browser was not open or already closed.")
            return
        self._log("Closing browser...")
        await self._discard(browser)
        self._log("Browser closed.")

    async def __aenter__(self) -> "ChatSessionManager":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close_browser()

    async def _exchange(self, page: ChatPage, text: str, config: SessionConfig) -> str:
        await page.wait_for(SelectorRole.PROMPT_INPUT, config.response_timeout)
        await page.focus(SelectorRole.PROMPT_INPUT)
        await page.clear(SelectorRole.PROMPT_INPUT)
        await page.type_text(SelectorRole.PROMPT_INPUT, text, config.typing_delay)
        await page.submit()
        self._log("Prompt submitted. Waiting for completion indicator...")
        await page.wait_for(SelectorRole.COMPLETION_INDICATOR, config.response_timeout)
        self._log("Completion indicator found. Waiting for response content...")
        await page.wait_for_content(SelectorRole.RESPONSE_CONTAINER, config.content_timeout)
        return await page.last_inner_html(SelectorRole.RESPONSE_CONTAINER)

    def _disconnect_listener(self, browser: BrowserHandle) -> Callable[[], None]:
        def _on_disconnect() -> None:
            if browser is not self._browser:
                return
            self._log("Browser disconnected.", logging.WARNING)
            self._browser = None
            self._page = None
            self._state = SessionState.DISCONNECTED
            if self._notifier:
                self._notifier.notify(
                    NotificationEvent(
                        type="browser_disconnected",
                        message=(
                            "Chat browser session disconnected. "
                            "You may need to re-run the command."
                        ),
                        level=NotificationLevel.WARNING,
                    )
                )

        return _on_disconnect

    def _release(self) -> None:
        self._browser = None
        self._page = None
        self._state = SessionState.UNINITIALIZED

    async def _discard(self, browser: BrowserHandle) -> None:
        try:
            await browser.close()
        except Exception as exc:
            self._log(f"Error closing browser: {exc}", logging.ERROR)

    def _log(self, message: str, level: int = logging.INFO) -> None:
        LOGGER.log(level, message)
        if self._ui:
            self._ui.log_output(f"SessionManager: {message}")
