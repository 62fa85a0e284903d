"""Filesystem-backed workspace and shell terminal."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from .base import (
    DiagnosticEntry,
    DocumentInfo,
    FileDiagnostics,
    Position,
    SelectionInfo,
    Terminal,
    Workspace,
)

LOGGER = logging.getLogger(__name__)

IGNORED_DIRECTORIES = frozenset({".git", "node_modules", "__pycache__", ".venv", ".mypy_cache"})

LANGUAGE_IDS = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascriptreact",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".json": "json",
    ".md": "markdown",
    ".html": "html",
    ".css": "css",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".sh": "shellscript",
    ".rs": "rust",
    ".go": "go",
    ".java": "java",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
}


class ShellTerminal(Terminal):
    """Feed lines to a long-lived shell process running in the workspace root."""

    def __init__(self, cwd: Optional[Path] = None, name: str = "webchat-bridge") -> None:
        self.name = name
        self._cwd = cwd
        self._process: Optional[asyncio.subprocess.Process] = None

    async def _ensure_process(self) -> asyncio.subprocess.Process:
        if self._process is None or self._process.returncode is not None:
            shell = os.environ.get("SHELL", "/bin/sh")
            LOGGER.info("Starting terminal %s (%s)", self.name, shell)
            self._process = await asyncio.create_subprocess_exec(
                shell,
                stdin=asyncio.subprocess.PIPE,
                cwd=str(self._cwd) if self._cwd else None,
            )
        return self._process

    async def send_line(self, line: str) -> None:
        process = await self._ensure_process()
        if process.stdin is None:
            raise RuntimeError(f"Terminal {self.name} has no input pipe")
        process.stdin.write((line + "\n").encode("utf-8"))
        await process.stdin.drain()

    async def close(self) -> None:
        process = self._process
        self._process = None
        if process is None or process.returncode is not None:
            return
        if process.stdin is not None:
            process.stdin.close()
        try:
            await asyncio.wait_for(process.wait(), timeout=5)
        except asyncio.TimeoutError:
            LOGGER.warning("Terminal %s did not exit; terminating", self.name)
            process.terminate()
            await process.wait()


class LocalWorkspace(Workspace):
    """Workspace rooted at a local directory.

    Editor state (open document, selection, diagnostics) is supplied by the
    host through :meth:`open_document`, :meth:`select` and
    :meth:`publish_diagnostics`.
    """

    def __init__(
        self,
        root: Optional[Path],
        terminal: Optional[Terminal] = None,
        terminal_name: str = "webchat-bridge",
    ) -> None:
        self._root = root.resolve() if root else None
        self._terminal = terminal
        self._terminal_name = terminal_name
        self._diagnostics: dict[Path, list[DiagnosticEntry]] = {}
        self._document: Optional[DocumentInfo] = None
        self._document_text = ""
        self._selection: Optional[SelectionInfo] = None

    @property
    def root(self) -> Optional[Path]:
        return self._root

    def find_files(self, limit: int) -> list[Path]:
        if self._root is None:
            return []
        found: list[Path] = []
        for current, directories, files in os.walk(self._root):
            directories[:] = sorted(d for d in directories if d not in IGNORED_DIRECTORIES)
            for name in sorted(files):
                if len(found) >= limit:
                    return found
                found.append(Path(current) / name)
        return found

    def publish_diagnostics(self, path: Path, entries: list[DiagnosticEntry]) -> None:
        resolved = self._resolve(path)
        if entries:
            self._diagnostics[resolved] = list(entries)
        else:
            self._diagnostics.pop(resolved, None)

    def diagnostics(self) -> list[FileDiagnostics]:
        return [
            FileDiagnostics(path=path, diagnostics=list(entries))
            for path, entries in self._diagnostics.items()
        ]

    def open_document(self, path: Path, *, is_dirty: bool = False) -> DocumentInfo:
        resolved = self._resolve(path)
        text = resolved.read_bytes().decode("utf-8")
        version = self._document.version + 1 if self._document and self._document.path == resolved else 1
        self._document = DocumentInfo(
            path=resolved,
            language_id=LANGUAGE_IDS.get(resolved.suffix.lower(), "plaintext"),
            line_count=text.count("\n") + 1,
            is_dirty=is_dirty,
            eol="CRLF" if "\r\n" in text else "LF",
            version=version,
        )
        self._document_text = text.replace("\r\n", "\n")
        origin = Position(line=0, character=0)
        self._selection = SelectionInfo(text="", start=origin, end=origin, active=origin, anchor=origin)
        return self._document

    def select(self, anchor: Position, active: Position) -> SelectionInfo:
        if self._document is None:
            raise RuntimeError("No document is open")
        start, end = sorted((anchor, active), key=lambda pos: (pos.line, pos.character))
        self._selection = SelectionInfo(
            text=self._slice(start, end),
            start=start,
            end=end,
            active=active,
            anchor=anchor,
        )
        return self._selection

    def active_document(self) -> Optional[DocumentInfo]:
        return self._document

    def selection(self) -> Optional[SelectionInfo]:
        if self._document is None:
            return None
        return self._selection

    async def terminal(self) -> Terminal:
        if self._terminal is None:
            self._terminal = ShellTerminal(cwd=self._root, name=self._terminal_name)
        return self._terminal

    async def close(self) -> None:
        if self._terminal is not None:
            await self._terminal.close()

    def _resolve(self, path: Path) -> Path:
        if path.is_absolute() or self._root is None:
            return path.resolve()
        return (self._root / path).resolve()

    def _slice(self, start: Position, end: Position) -> str:
        lines = self._document_text.split("\n")
        if start.line >= len(lines):
            return ""
        if start.line == end.line:
            return lines[start.line][start.character : end.character]
        parts = [lines[start.line][start.character :]]
        parts.extend(lines[start.line + 1 : end.line])
        if end.line < len(lines):
            parts.append(lines[end.line][: end.character])
        return "\n".join(parts)
