"""Error types raised by the bridge."""

from __future__ import annotations


class BridgeError(RuntimeError):
    """Base class for failures surfaced to callers of the bridge."""


class ConfigurationError(BridgeError):
    """Raised when the session configuration cannot be used. Never retried."""


class LaunchError(BridgeError):
    """Raised when the browser could not be brought to a ready state."""

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class SubmissionError(BridgeError):
    """Raised when a prompt could not be submitted or its reply not collected."""

    def __init__(self, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class DisconnectError(SubmissionError):
    """Raised when the browser process went away during an operation."""


class CommandValidationError(ValueError):
    """Raised when a command's parameters do not satisfy its action."""


class ConsentDenied(BridgeError):
    """Raised when the user declines a consent-gated action."""
