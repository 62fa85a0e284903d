"""Typed directive kinds and validation of raw commands into them."""

from __future__ import annotations

import enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

from ..errors import CommandValidationError
from ..models import Command


class CommandAction(str, enum.Enum):
    """Closed set of actions the dispatcher understands."""

    READ_FILE = "readFile"
    WRITE_FILE = "writeFile"
    EXECUTE_TERMINAL = "executeTerminal"
    GET_WORKSPACE_FILES = "getWorkspaceFiles"
    GET_DIAGNOSTICS = "getDiagnostics"
    GET_ACTIVE_FILE_INFO = "getActiveFileInfo"
    GET_SELECTION = "getSelection"


class _Directive(BaseModel):
    model_config = ConfigDict(frozen=True)


class ReadFileDirective(_Directive):
    kind: Literal[CommandAction.READ_FILE] = CommandAction.READ_FILE
    path: str


class WriteFileDirective(_Directive):
    kind: Literal[CommandAction.WRITE_FILE] = CommandAction.WRITE_FILE
    path: str
    content: str


class ExecuteTerminalDirective(_Directive):
    kind: Literal[CommandAction.EXECUTE_TERMINAL] = CommandAction.EXECUTE_TERMINAL
    command: str


class GetWorkspaceFilesDirective(_Directive):
    kind: Literal[CommandAction.GET_WORKSPACE_FILES] = CommandAction.GET_WORKSPACE_FILES


class GetDiagnosticsDirective(_Directive):
    kind: Literal[CommandAction.GET_DIAGNOSTICS] = CommandAction.GET_DIAGNOSTICS


class GetActiveFileInfoDirective(_Directive):
    kind: Literal[CommandAction.GET_ACTIVE_FILE_INFO] = CommandAction.GET_ACTIVE_FILE_INFO


class GetSelectionDirective(_Directive):
    kind: Literal[CommandAction.GET_SELECTION] = CommandAction.GET_SELECTION
    allow_empty: bool = False


Directive = Union[
    ReadFileDirective,
    WriteFileDirective,
    ExecuteTerminalDirective,
    GetWorkspaceFilesDirective,
    GetDiagnosticsDirective,
    GetActiveFileInfoDirective,
    GetSelectionDirective,
]


def to_directive(command: Command) -> Directive:
    """Validate ``command`` and return its typed directive.

    Raises :class:`CommandValidationError` for unknown actions and for missing
    or malformed parameters.
    """

    try:
        action = CommandAction(command.action)
    except ValueError:
        raise CommandValidationError(
            f"Unknown or unsupported action: '{command.action}'."
        ) from None

    params = command.params
    if action == CommandAction.READ_FILE:
        return ReadFileDirective(path=_required_text(params, "path", action))
    if action == CommandAction.WRITE_FILE:
        path = _required_text(params, "path", action)
        if "content" not in params:
            raise CommandValidationError(f"Missing 'content' parameter for {action.value}.")
        return WriteFileDirective(path=path, content=params["content"])
    if action == CommandAction.EXECUTE_TERMINAL:
        return ExecuteTerminalDirective(command=_required_text(params, "command", action))
    if action == CommandAction.GET_WORKSPACE_FILES:
        return GetWorkspaceFilesDirective()
    if action == CommandAction.GET_DIAGNOSTICS:
        return GetDiagnosticsDirective()
    if action == CommandAction.GET_ACTIVE_FILE_INFO:
        return GetActiveFileInfoDirective()
    if action == CommandAction.GET_SELECTION:
        return GetSelectionDirective(allow_empty=_optional_flag(params, "allowEmpty", action))
    raise CommandValidationError(f"Unknown or unsupported action: '{command.action}'.")


def _required_text(params: dict[str, str], name: str, action: CommandAction) -> str:
    value = params.get(name)
    if not isinstance(value, str) or not value.strip():
        raise CommandValidationError(
            f"Missing or invalid '{name}' parameter for {action.value} (must be a non-empty string)."
        )
    return value


def _optional_flag(params: dict[str, str], name: str, action: CommandAction) -> bool:
    value = params.get(name)
    if value is None:
        return False
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise CommandValidationError(
        f"Invalid '{name}' parameter for {action.value}: expected \"true\" or \"false\", got {value!r}."
    )
