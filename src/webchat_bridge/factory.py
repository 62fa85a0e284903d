"""Factories for constructing components from configuration."""

from __future__ import annotations

from typing import Optional

from .browser.base import BrowserDriver
from .browser.session import ChatSessionManager
from .commands.consent import AutoConsent, ConsentProvider, UIConsent
from .commands.dispatcher import CommandDispatcher
from .config import BridgeConfig, NotificationConfig, UIConfig, WorkspaceConfig
from .notifications.base import ConsoleNotifier, Notifier, NullNotifier
from .orchestrator.runner import Orchestrator
from .parser.response_parser import ResponseParser
from .ui.base import HostUI
from .ui.console import ConsoleUI
from .workspace.local import LocalWorkspace


def build_ui(config: UIConfig) -> HostUI:
    return ConsoleUI(insert_output=config.insert_output)


def build_notifier(config: NotificationConfig) -> Notifier:
    channel = config.channel.lower()
    if channel == "console":
        return ConsoleNotifier()
    if channel == "none":
        return NullNotifier()
    raise ValueError(f"Unsupported notification channel: {config.channel}")


def build_workspace(config: WorkspaceConfig) -> LocalWorkspace:
    return LocalWorkspace(config.root, terminal_name=config.terminal_name)


def build_consent(ui: HostUI, auto_approve: Optional[bool] = None) -> ConsentProvider:
    if auto_approve is None:
        return UIConsent(ui)
    return AutoConsent(auto_approve)


def build_orchestrator(
    config: BridgeConfig,
    ui: HostUI,
    notifier: Notifier,
    workspace: LocalWorkspace,
    *,
    auto_approve: Optional[bool] = None,
    driver: Optional[BrowserDriver] = None,
) -> Orchestrator:
    session = ChatSessionManager(config.session, driver=driver, ui=ui, notifier=notifier)
    dispatcher = CommandDispatcher(
        workspace,
        build_consent(ui, auto_approve),
        max_files=config.workspace.max_files,
    )
    return Orchestrator(
        session=session,
        parser=ResponseParser(),
        dispatcher=dispatcher,
        ui=ui,
        notifier=notifier,
        webview_title=config.ui.webview_title,
        status_duration=config.ui.status_duration,
    )
