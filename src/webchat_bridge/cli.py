"""Command line interface for webchat-bridge."""

from __future__ import annotations

import asyncio
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer

from .config import BridgeConfig, load_config
from .factory import build_notifier, build_orchestrator, build_ui, build_workspace

app = typer.Typer(help="Webchat bridge entry point")

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to YAML configuration."),
]
EnvFileOption = Annotated[
    Optional[Path],
    typer.Option("--env-file", help="Path to an .env file with default configuration values."),
]
WorkspaceOption = Annotated[
    Optional[Path],
    typer.Option("--workspace", "-w", help="Workspace root that commands act on."),
]
HeadlessOption = Annotated[
    Optional[bool],
    typer.Option("--headless/--headed", help="Run the browser in headless mode (or headed)."),
]
ExecutableOption = Annotated[
    Optional[Path],
    typer.Option("--executable-path", help="Chrome/Chromium executable to launch."),
]
YesOption = Annotated[
    bool,
    typer.Option("--yes", "-y", help="Approve file writes and terminal commands without asking."),
]
PromptArgument = Annotated[
    Optional[str],
    typer.Argument(help="Prompt to send. Asked interactively when omitted."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("webchat-bridge"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def ask(
    prompt: PromptArgument = None,
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    workspace: WorkspaceOption = None,
    headless: HeadlessOption = None,
    executable_path: ExecutableOption = None,
    yes: YesOption = False,
) -> None:
    """Send a prompt, run its directives and show the reply."""

    config = _load(config_path, env_file, workspace, headless, executable_path)
    if not asyncio.run(_run_single(config, prompt, insert=False, auto_approve=yes or None)):
        raise typer.Exit(code=1)


@app.command()
def insert(
    prompt: PromptArgument = None,
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    workspace: WorkspaceOption = None,
    headless: HeadlessOption = None,
    executable_path: ExecutableOption = None,
    yes: YesOption = False,
) -> None:
    """Send a prompt, run its directives and insert the reply's code."""

    config = _load(config_path, env_file, workspace, headless, executable_path)
    if not asyncio.run(_run_single(config, prompt, insert=True, auto_approve=yes or None)):
        raise typer.Exit(code=1)


@app.command()
def chat(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    workspace: WorkspaceOption = None,
    headless: HeadlessOption = None,
    executable_path: ExecutableOption = None,
    yes: YesOption = False,
) -> None:
    """Hold a conversation until an empty prompt is entered."""

    config = _load(config_path, env_file, workspace, headless, executable_path)
    if not asyncio.run(_run_chat(config, auto_approve=yes or None)):
        raise typer.Exit(code=1)


def _load(
    config_path: Optional[Path],
    env_file: Optional[Path],
    workspace: Optional[Path],
    headless: Optional[bool],
    executable_path: Optional[Path],
) -> BridgeConfig:
    overrides: dict[str, Any] = {}
    if headless is not None or executable_path is not None:
        overrides.setdefault("session", {})
        if headless is not None:
            overrides["session"]["headless"] = headless
        if executable_path is not None:
            overrides["session"]["executable_path"] = str(executable_path)
    if workspace is not None:
        overrides["workspace"] = {"root": str(workspace)}
    return load_config(config_path, env_file=env_file, **overrides)


async def _run_single(
    config: BridgeConfig,
    prompt: Optional[str],
    *,
    insert: bool,
    auto_approve: Optional[bool],
) -> bool:
    ui = build_ui(config.ui)
    notifier = build_notifier(config.notifications)
    workspace = build_workspace(config.workspace)
    orchestrator = build_orchestrator(config, ui, notifier, workspace, auto_approve=auto_approve)
    try:
        if prompt is None:
            prompt = await asyncio.to_thread(ui.get_user_input, "Ask the chat")
        if not prompt:
            ui.show_status_bar_message("No prompt provided.", False, config.ui.status_duration)
            return True
        if insert:
            await orchestrator.insert(prompt)
        else:
            await orchestrator.ask(prompt)
        return True
    except Exception:
        return False
    finally:
        await orchestrator.close()
        await workspace.close()


async def _run_chat(config: BridgeConfig, *, auto_approve: Optional[bool]) -> bool:
    ui = build_ui(config.ui)
    notifier = build_notifier(config.notifications)
    workspace = build_workspace(config.workspace)
    orchestrator = build_orchestrator(config, ui, notifier, workspace, auto_approve=auto_approve)
    try:
        while True:
            prompt = await asyncio.to_thread(ui.get_user_input, "You")
            if not prompt:
                return True
            try:
                await orchestrator.ask(prompt)
            except Exception:
                ui.show_warning("The last prompt failed; you can try again.")
    finally:
        await orchestrator.close()
        await workspace.close()


if __name__ == "__main__":
    app()
