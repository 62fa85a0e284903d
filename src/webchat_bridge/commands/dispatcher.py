"""Execute reply directives against the local workspace."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from ..errors import CommandValidationError, ConsentDenied
from ..models import Command, CommandResult
from ..workspace.base import DiagnosticEntry, Position, Workspace
from .consent import ConsentProvider
from .directives import (
    CommandAction,
    Directive,
    ExecuteTerminalDirective,
    GetActiveFileInfoDirective,
    GetDiagnosticsDirective,
    GetSelectionDirective,
    GetWorkspaceFilesDirective,
    ReadFileDirective,
    WriteFileDirective,
    to_directive,
)

LOGGER = logging.getLogger(__name__)

WORKSPACE_SCOPED = frozenset(
    {
        CommandAction.READ_FILE,
        CommandAction.WRITE_FILE,
        CommandAction.GET_WORKSPACE_FILES,
        CommandAction.GET_DIAGNOSTICS,
        CommandAction.GET_ACTIVE_FILE_INFO,
    }
)
CONTENT_PREVIEW_CHARS = 100


class CommandDispatcher:
    """Map validated commands to workspace effects.

    :meth:`execute` never raises: every failure, including unknown actions,
    invalid parameters and refused consent, becomes a failed
    :class:`CommandResult`.
    """

    def __init__(
        self,
        workspace: Workspace,
        consent: ConsentProvider,
        max_files: int = 100,
    ) -> None:
        self._workspace = workspace
        self._consent = consent
        self._max_files = max_files

    async def execute(self, command: Command) -> CommandResult:
        try:
            directive = to_directive(command)
            if directive.kind in WORKSPACE_SCOPED and self._workspace.root is None:
                raise CommandValidationError("No workspace folder is currently open.")
            output = await self._run(directive)
        except (CommandValidationError, ConsentDenied) as exc:
            LOGGER.info("Command %s rejected: %s", command.action, exc)
            return CommandResult.fail(command.action, str(exc))
        except Exception as exc:
            LOGGER.exception("Error executing command %s", command.action)
            return CommandResult.fail(command.action, str(exc) or type(exc).__name__)
        return CommandResult.ok(command.action, output)

    async def execute_all(self, commands: Iterable[Command]) -> list[CommandResult]:
        """Execute ``commands`` one at a time, in order."""

        results = []
        for command in commands:
            results.append(await self.execute(command))
        return results

    async def _run(self, directive: Directive) -> Any:
        if isinstance(directive, ReadFileDirective):
            return self._resolve(directive.path).read_text(encoding="utf-8")
        if isinstance(directive, WriteFileDirective):
            return await self._write_file(directive)
        if isinstance(directive, ExecuteTerminalDirective):
            return await self._execute_terminal(directive)
        if isinstance(directive, GetWorkspaceFilesDirective):
            return [self._display_path(path) for path in self._workspace.find_files(self._max_files)]
        if isinstance(directive, GetDiagnosticsDirective):
            return [
                {
                    "filePath": self._display_path(item.path),
                    "diagnostics": [_diagnostic_payload(entry) for entry in item.diagnostics],
                }
                for item in self._workspace.diagnostics()
            ]
        if isinstance(directive, GetActiveFileInfoDirective):
            return self._active_file_info()
        if isinstance(directive, GetSelectionDirective):
            return self._selection_info(directive.allow_empty)
        raise CommandValidationError(f"Unknown or unsupported action: '{directive.kind.value}'.")

    async def _write_file(self, directive: WriteFileDirective) -> str:
        target = self._resolve(directive.path)
        preview = directive.content[:CONTENT_PREVIEW_CHARS]
        approved = await self._consent.request(
            f"Allow the assistant to write to the file '{directive.path}'?",
            f"Content preview (first {CONTENT_PREVIEW_CHARS} chars):\n{preview}",
        )
        if not approved:
            raise ConsentDenied("User denied file write operation.")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(directive.content, encoding="utf-8")
        return f"File '{directive.path}' written successfully."

    async def _execute_terminal(self, directive: ExecuteTerminalDirective) -> str:
        approved = await self._consent.request(
            "Allow the assistant to execute the following command in the terminal?\n\n"
            f"Command: {directive.command}",
        )
        if not approved:
            raise ConsentDenied("User denied terminal command execution.")
        terminal = await self._workspace.terminal()
        await terminal.send_line(directive.command)
        return "Command sent to terminal for execution."

    def _active_file_info(self) -> dict[str, Any]:
        document = self._workspace.active_document()
        if document is None:
            raise CommandValidationError("No active text editor found.")
        return {
            "filePath": self._display_path(document.path),
            "languageId": document.language_id,
            "lineCount": document.line_count,
            "isDirty": document.is_dirty,
            "isUntitled": document.is_untitled,
            "eol": document.eol,
            "version": document.version,
        }

    def _selection_info(self, allow_empty: bool) -> dict[str, Any]:
        selection = self._workspace.selection()
        if selection is None:
            raise CommandValidationError("No active text editor found.")
        if selection.is_empty and not allow_empty:
            raise CommandValidationError(
                'No text selected. To allow, send allowEmpty="true".'
            )
        return {
            "selectedText": selection.text,
            "isEmpty": selection.is_empty,
            "isSingleLine": selection.is_single_line,
            "start": _position_payload(selection.start),
            "end": _position_payload(selection.end),
            "active": _position_payload(selection.active),
            "anchor": _position_payload(selection.anchor),
        }

    def _resolve(self, relative: str) -> Path:
        root = self._workspace.root
        if root is None:
            raise CommandValidationError("No workspace folder is currently open.")
        base = root.resolve()
        target = (base / relative).resolve()
        if not target.is_relative_to(base):
            raise CommandValidationError(f"Path '{relative}' resolves outside the workspace.")
        return target

    def _display_path(self, path: Path) -> str:
        root: Optional[Path] = self._workspace.root
        if root is not None and path.is_relative_to(root):
            return path.relative_to(root).as_posix()
        return str(path)


def _position_payload(position: Position) -> dict[str, int]:
    return {"line": position.line, "character": position.character}


def _diagnostic_payload(entry: DiagnosticEntry) -> dict[str, Any]:
    return {
        "message": entry.message,
        "severity": entry.severity.value,
        "source": entry.source,
        "code": str(entry.code) if entry.code is not None else None,
        "range": {
            "startLine": entry.start.line,
            "startChar": entry.start.character,
            "endLine": entry.end.line,
            "endChar": entry.end.character,
        },
    }
