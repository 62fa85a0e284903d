"""Shared models used across the webchat bridge."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CodeBlock(BaseModel):
    """A fenced code region found in a reply."""

    model_config = ConfigDict(frozen=True)

    language: str = ""
    code: str = ""


class Command(BaseModel):
    """A directive embedded in a reply, requesting a local workspace effect."""

    model_config = ConfigDict(frozen=True)

    action: str
    params: dict[str, str] = Field(default_factory=dict)


class ParsedResponse(BaseModel):
    """Structured decomposition of one reply fragment."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    code_blocks: tuple[CodeBlock, ...] = ()
    commands: tuple[Command, ...] = ()

    @classmethod
    def empty(cls) -> "ParsedResponse":
        return cls()


class CommandResult(BaseModel):
    """Outcome of executing a single command."""

    model_config = ConfigDict(frozen=True)

    action: str
    success: bool
    output: Any = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _check_consistency(self) -> "CommandResult":
        if self.success and self.error is not None:
            raise ValueError("A successful result cannot carry an error")
        if not self.success:
            if self.output is not None:
                raise ValueError("A failed result cannot carry output")
            if not self.error:
                raise ValueError("A failed result requires an error message")
        return self

    @classmethod
    def ok(cls, action: str, output: Any = None) -> "CommandResult":
        return cls(action=action, success=True, output=output)

    @classmethod
    def fail(cls, action: str, error: str) -> "CommandResult":
        return cls(action=action, success=False, error=error)


class NotificationLevel(str, enum.Enum):
    """Severity of notification events."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class NotificationEvent(BaseModel):
    """Event emitted to notify users."""

    type: str
    message: str
    level: NotificationLevel = NotificationLevel.INFO
    data: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
