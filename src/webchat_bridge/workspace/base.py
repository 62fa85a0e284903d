"""Workspace abstractions consumed by the command dispatcher."""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field


class Position(BaseModel):
    line: int
    character: int


class DiagnosticSeverity(str, enum.Enum):
    ERROR = "Error"
    WARNING = "Warning"
    INFORMATION = "Information"
    HINT = "Hint"


class DiagnosticEntry(BaseModel):
    """A single problem reported for a file."""

    message: str
    severity: DiagnosticSeverity = DiagnosticSeverity.ERROR
    source: Optional[str] = None
    code: Optional[Union[str, int]] = None
    start: Position
    end: Position


class FileDiagnostics(BaseModel):
    path: Path
    diagnostics: list[DiagnosticEntry] = Field(default_factory=list)


class DocumentInfo(BaseModel):
    """Description of the document open in the active editor."""

    path: Path
    language_id: str
    line_count: int
    is_dirty: bool = False
    is_untitled: bool = False
    eol: str = "LF"
    version: int = 1


class SelectionInfo(BaseModel):
    """Selection in the active editor. ``anchor`` is where the drag started."""

    text: str
    start: Position
    end: Position
    active: Position
    anchor: Position

    @property
    def is_empty(self) -> bool:
        return self.start == self.end

    @property
    def is_single_line(self) -> bool:
        return self.start.line == self.end.line


class Terminal(ABC):
    """An interactive terminal lines can be sent to."""

    @abstractmethod
    async def send_line(self, line: str) -> None:
        """Send ``line`` followed by a newline for execution."""

    @abstractmethod
    async def close(self) -> None:
        """Dispose of the terminal."""


class Workspace(ABC):
    """The local workspace that commands read from and write to."""

    @property
    @abstractmethod
    def root(self) -> Optional[Path]:
        """First workspace root, or ``None`` when no workspace is open."""

    @abstractmethod
    def find_files(self, limit: int) -> list[Path]:
        """Return up to ``limit`` absolute file paths inside the workspace."""

    @abstractmethod
    def diagnostics(self) -> list[FileDiagnostics]:
        """Return current diagnostics grouped by file."""

    @abstractmethod
    def active_document(self) -> Optional[DocumentInfo]:
        """Return the active document, if any."""

    @abstractmethod
    def selection(self) -> Optional[SelectionInfo]:
        """Return the active editor's selection, or ``None`` without an editor."""

    @abstractmethod
    async def terminal(self) -> Terminal:
        """Return the active terminal, creating one if needed."""
