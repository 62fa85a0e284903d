from __future__ import annotations

from pathlib import Path

import pytest
from fakes import CollectingNotifier, FakeBrowser, FakeDriver, FakePage, RecordingSleep, StubUI

from webchat_bridge.browser.base import BrowserDriverError, SelectorRole
from webchat_bridge.browser.session import ChatSessionManager, SessionState
from webchat_bridge.config import SessionConfig
from webchat_bridge.errors import (
    ConfigurationError,
    DisconnectError,
    LaunchError,
    SubmissionError,
)
from webchat_bridge.models import NotificationLevel


def build_manager(
    driver: FakeDriver,
    *,
    sleep: RecordingSleep | None = None,
    notifier: CollectingNotifier | None = None,
    ui: StubUI | None = None,
    **config_overrides: object,
) -> ChatSessionManager:
    config = SessionConfig(max_retries=3, retry_delay=0.5, **config_overrides)
    return ChatSessionManager(
        config,
        driver=driver,
        ui=ui,
        notifier=notifier,
        sleep=sleep or RecordingSleep(),
    )


@pytest.mark.asyncio
async def test_initialize_navigates_and_waits_for_prompt_input():
    driver = FakeDriver()
    manager = build_manager(driver, endpoint_url="https://chat.example")

    await manager.initialize()

    assert manager.state == SessionState.READY
    assert manager.is_initialized() is True
    page = driver.browsers[0].page
    assert page.events[:2] == [
        ("goto", "https://chat.example"),
        ("wait_for", SelectorRole.PROMPT_INPUT),
    ]


@pytest.mark.asyncio
async def test_initialize_twice_does_not_relaunch():
    driver = FakeDriver()
    manager = build_manager(driver)

    await manager.initialize()
    await manager.initialize()

    assert driver.launches == 1
    assert manager.state == SessionState.READY


@pytest.mark.asyncio
async def test_missing_executable_is_fatal_and_not_retried(tmp_path: Path):
    driver = FakeDriver()
    manager = build_manager(driver, executable_path=tmp_path / "chromium")

    with pytest.raises(ConfigurationError, match="not found"):
        await manager.initialize()

    assert driver.launches == 0
    assert manager.state == SessionState.UNINITIALIZED


@pytest.mark.asyncio
async def test_existing_executable_is_passed_to_driver(tmp_path: Path):
    executable = tmp_path / "chromium"
    executable.write_text("#!/bin/sh\n")
    driver = FakeDriver()
    manager = build_manager(driver, executable_path=executable)

    await manager.initialize()

    assert driver.configs[0].executable_path == executable


@pytest.mark.asyncio
async def test_selector_failure_exhausts_retries_with_fixed_delay():
    driver = FakeDriver(page_factory=lambda: FakePage(failing_roles=(SelectorRole.PROMPT_INPUT,)))
    sleep = RecordingSleep()
    manager = build_manager(driver, sleep=sleep)

    with pytest.raises(LaunchError) as excinfo:
        await manager.initialize()

    assert driver.launches == 3
    assert sleep.delays == [0.5, 0.5]
    assert "3 attempts" in str(excinfo.value)
    assert excinfo.value.attempts == 3
    assert all(browser.closed for browser in driver.browsers)
    assert manager.state == SessionState.UNINITIALIZED


@pytest.mark.asyncio
async def test_initialize_recovers_after_launch_failure():
    driver = FakeDriver(launch_errors=[BrowserDriverError("launch failed")])
    sleep = RecordingSleep()
    manager = build_manager(driver, sleep=sleep)

    await manager.initialize()

    assert driver.launches == 2
    assert sleep.delays == [0.5]
    assert manager.is_initialized() is True


@pytest.mark.asyncio
async def test_submit_prompt_types_and_returns_latest_reply():
    driver = FakeDriver(page_factory=lambda: FakePage(responses=["<p>Newest</p>"]))
    ui = StubUI()
    manager = build_manager(driver, ui=ui)
    await manager.initialize()

    html = await manager.submit_prompt("Hello there")

    assert html == "<p>Newest</p>"
    page = driver.browsers[0].page
    names = [name for name, _ in page.events]
    assert names.index("clear") < names.index("type") < names.index("submit")
    assert ("type", "Hello there") in page.events
    assert ("wait_for", SelectorRole.COMPLETION_INDICATOR) in page.events
    assert any(line.startswith("SessionManager: ") for line in ui.logs)


@pytest.mark.asyncio
async def test_submit_prompt_initializes_implicitly():
    driver = FakeDriver()
    manager = build_manager(driver)

    html = await manager.submit_prompt("Hi")

    assert html == "<p>Hello</p>"
    assert driver.launches == 1


@pytest.mark.asyncio
async def test_submit_prompt_retries_empty_reply():
    driver = FakeDriver(page_factory=lambda: FakePage(responses=["", "  ", "<p>Done</p>"]))
    sleep = RecordingSleep()
    manager = build_manager(driver, sleep=sleep)
    await manager.initialize()

    html = await manager.submit_prompt("Hi")

    assert html == "<p>Done</p>"
    assert driver.browsers[0].page.count("submit") == 3
    assert sleep.delays == [0.5, 0.5]


@pytest.mark.asyncio
async def test_submit_prompt_fails_after_all_attempts():
    driver = FakeDriver(
        page_factory=lambda: FakePage(failing_roles=(SelectorRole.COMPLETION_INDICATOR,))
    )
    manager = build_manager(driver)
    await manager.initialize()

    with pytest.raises(SubmissionError) as excinfo:
        await manager.submit_prompt("Hi")

    assert not isinstance(excinfo.value, DisconnectError)
    assert "3 attempts" in str(excinfo.value)
    assert driver.browsers[0].page.count("submit") == 3
    assert manager.is_initialized() is True


@pytest.mark.asyncio
async def test_disconnect_event_resets_session_and_notifies():
    driver = FakeDriver()
    notifier = CollectingNotifier()
    manager = build_manager(driver, notifier=notifier)
    await manager.initialize()

    driver.browsers[0].disconnect()

    assert manager.is_initialized() is False
    assert manager.state == SessionState.DISCONNECTED
    assert notifier.events[-1].type == "browser_disconnected"
    assert notifier.events[-1].level == NotificationLevel.WARNING


@pytest.mark.asyncio
async def test_submit_after_disconnect_reinitializes_with_fresh_page():
    driver = FakeDriver()
    manager = build_manager(driver)
    await manager.initialize()
    stale_page = driver.browsers[0].page
    driver.browsers[0].disconnect()

    await manager.submit_prompt("Again")

    assert driver.launches == 2
    assert stale_page.count("type") == 0
    assert driver.browsers[1].page.count("type") == 1
    assert manager.state == SessionState.READY


@pytest.mark.asyncio
async def test_disconnect_during_submit_is_not_retried():
    driver = FakeDriver()
    sleep = RecordingSleep()
    manager = build_manager(driver, sleep=sleep)
    await manager.initialize()
    browser: FakeBrowser = driver.browsers[0]
    browser.page.hooks[SelectorRole.COMPLETION_INDICATOR] = browser.disconnect
    browser.page.failing_roles.add(SelectorRole.COMPLETION_INDICATOR)

    with pytest.raises(DisconnectError):
        await manager.submit_prompt("Hi")

    assert browser.page.count("submit") == 1
    assert sleep.delays == []
    assert manager.state == SessionState.UNINITIALIZED


@pytest.mark.asyncio
async def test_close_browser_is_idempotent_and_tolerates_errors():
    driver = FakeDriver()
    manager = build_manager(driver)
    await manager.initialize()
    driver.browsers[0].close_error = RuntimeError("already gone")

    await manager.close_browser()
    await manager.close_browser()

    assert driver.browsers[0].closed is True
    assert manager.state == SessionState.UNINITIALIZED
    assert manager.is_initialized() is False


@pytest.mark.asyncio
async def test_async_context_manager_closes_browser():
    driver = FakeDriver()
    async with build_manager(driver) as manager:
        await manager.initialize()

    assert driver.browsers[0].closed is True
