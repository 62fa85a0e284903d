"""Playwright-powered browser driver implementation."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from playwright.async_api import Browser, Error, Page, Playwright, async_playwright

from ..config import SessionConfig
from .base import BrowserDriver, BrowserDriverError, BrowserHandle, ChatPage, SelectorRole

LOGGER = logging.getLogger(__name__)

_CLEAR_SCRIPT = """el => {
    if ('value' in el) { el.value = ''; } else { el.textContent = ''; }
}"""
_HAS_CONTENT_SCRIPT = """selector => {
    const el = document.querySelector(selector);
    return !!el && el.innerHTML.trim() !== '';
}"""
_LAST_HTML_SCRIPT = "els => els.length ? els[els.length - 1].innerHTML : ''"


class PlaywrightChatPage(ChatPage):
    """Chat page backed by a Playwright page."""

    def __init__(self, page: Page, config: SessionConfig) -> None:
        self._page = page
        self._config = config

    def _selector(self, role: SelectorRole) -> str:
        return self._config.selector_for(role)

    async def goto(self, url: str, timeout: float) -> None:
        try:
            await self._page.goto(url, wait_until="networkidle", timeout=_to_timeout(timeout))
        except Error as exc:
            raise BrowserDriverError(f"Navigation to {url} failed: {exc}") from exc

    async def wait_for(self, role: SelectorRole, timeout: float) -> None:
        selector = self._selector(role)
        try:
            await self._page.wait_for_selector(selector, timeout=_to_timeout(timeout))
        except Error as exc:
            raise BrowserDriverError(f"Waiting for {role.value} ({selector}) failed: {exc}") from exc

    async def focus(self, role: SelectorRole) -> None:
        try:
            await self._page.focus(self._selector(role))
        except Error as exc:
            raise BrowserDriverError(f"Focusing {role.value} failed: {exc}") from exc

    async def clear(self, role: SelectorRole) -> None:
        try:
            await self._page.eval_on_selector(self._selector(role), _CLEAR_SCRIPT)
        except Error as exc:
            raise BrowserDriverError(f"Clearing {role.value} failed: {exc}") from exc

    async def type_text(self, role: SelectorRole, text: str, delay: float) -> None:
        locator = self._page.locator(self._selector(role)).first
        try:
            await locator.press_sequentially(text, delay=delay * 1000)
        except Error as exc:
            raise BrowserDriverError(f"Typing into {role.value} failed: {exc}") from exc

    async def submit(self) -> None:
        try:
            await self._page.keyboard.press("Enter")
        except Error as exc:
            raise BrowserDriverError(f"Submitting the prompt failed: {exc}") from exc

    async def wait_for_content(self, role: SelectorRole, timeout: float) -> None:
        try:
            await self._page.wait_for_function(
                _HAS_CONTENT_SCRIPT,
                arg=self._selector(role),
                timeout=_to_timeout(timeout),
            )
        except Error as exc:
            raise BrowserDriverError(f"{role.value} did not render content: {exc}") from exc

    async def last_inner_html(self, role: SelectorRole) -> str:
        try:
            html = await self._page.eval_on_selector_all(self._selector(role), _LAST_HTML_SCRIPT)
        except Error as exc:
            raise BrowserDriverError(f"Reading {role.value} failed: {exc}") from exc
        return html or ""


class PlaywrightBrowserHandle(BrowserHandle):
    """Owns one Playwright instance and the browser it launched."""

    def __init__(self, playwright: Playwright, browser: Browser, config: SessionConfig) -> None:
        self._playwright: Optional[Playwright] = playwright
        self._browser: Optional[Browser] = browser
        self._config = config

    async def new_page(self) -> ChatPage:
        if not self._browser:
            raise BrowserDriverError("Browser is closed")
        try:
            page = await self._browser.new_page()
        except Error as exc:
            raise BrowserDriverError(f"Opening a page failed: {exc}") from exc
        return PlaywrightChatPage(page, self._config)

    def on_disconnect(self, callback: Callable[[], None]) -> None:
        if self._browser:
            self._browser.on("disconnected", lambda _browser: callback())

    def is_connected(self) -> bool:
        return bool(self._browser and self._browser.is_connected())

    async def close(self) -> None:
        LOGGER.debug("Stopping Playwright browser")
        try:
            if self._browser and self._browser.is_connected():
                await self._browser.close()
        except Error as exc:
            LOGGER.debug("Browser close reported: %s", exc)
        finally:
            if self._playwright:
                await self._playwright.stop()
            self._browser = None
            self._playwright = None


class PlaywrightDriver(BrowserDriver):
    """Launch Chromium through Playwright."""

    async def launch(self, config: SessionConfig) -> BrowserHandle:
        LOGGER.debug("Starting Playwright browser")
        playwright = await async_playwright().start()
        launch_kwargs: dict[str, object] = {
            "headless": config.headless,
            "args": list(config.launch_args),
        }
        if config.executable_path:
            launch_kwargs["executable_path"] = str(config.executable_path)
        try:
            browser = await playwright.chromium.launch(**launch_kwargs)
        except Error as exc:
            await playwright.stop()
            raise BrowserDriverError(f"Browser launch failed: {exc}") from exc
        return PlaywrightBrowserHandle(playwright, browser, config)


def _to_timeout(timeout: Optional[float]) -> Optional[int]:
    if timeout is None:
        return None
    return int(timeout * 1000)
