"""Extraction of bracketed directives from reply text.

A directive looks like::

    [VSCODE_COMMAND: writeFile path="src/app.py" content='print("hi")']

Values may be quoted with double quotes, single quotes or backticks. Only the
quote characters are unescaped (``\\"``, ``\\'`` and ``\\```); every other
backslash is kept as written. A closing bracket inside a quoted value does not
end the directive unless the quotes never balance, in which case the first
unescaped closing bracket does.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, Optional

from ..models import Command

LOGGER = logging.getLogger(__name__)

COMMAND_TAG = "VSCODE_COMMAND"
PARAMLESS_ACTIONS = frozenset(
    {"getWorkspaceFiles", "getDiagnostics", "getActiveFileInfo", "getSelection"}
)

_START_RE = re.compile(r"\[" + COMMAND_TAG + r":\s*(\w+)(?=[\s\]])")
_PARAM_RE = re.compile(
    r"""(\w+)\s*=\s*(?:"((?:\\.|[^"\\])*)"|'((?:\\.|[^'\\])*)'|`((?:\\.|[^`\\])*)`)""",
    re.DOTALL,
)
_ESCAPE_RE = re.compile(r"""\\(["'`])""")
_QUOTES = "\"'`"


def parse_commands(text: str) -> list[Command]:
    """Return every well-formed directive in ``text`` in order of appearance."""

    commands: list[Command] = []
    for action, body in _iter_directives(text):
        params = {
            match.group(1): _unescape(_first_group(match))
            for match in _PARAM_RE.finditer(body)
        }
        if not params and action not in PARAMLESS_ACTIONS:
            LOGGER.warning("Discarding %s directive %r without parameters", COMMAND_TAG, action)
            continue
        commands.append(Command(action=action, params=params))
    return commands


def _iter_directives(text: str) -> Iterator[tuple[str, str]]:
    position = 0
    while True:
        match = _START_RE.search(text, position)
        if not match:
            return
        end = _find_closing_bracket(text, match.end(), quote_aware=True)
        if end is None:
            end = _find_closing_bracket(text, match.end(), quote_aware=False)
        if end is None:
            LOGGER.warning("Unterminated %s directive at offset %d", COMMAND_TAG, match.start())
            position = match.end()
            continue
        yield match.group(1), text[match.end() : end]
        position = end + 1


def _find_closing_bracket(text: str, start: int, *, quote_aware: bool) -> Optional[int]:
    quote: Optional[str] = None
    index = start
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if quote:
            if char == quote:
                quote = None
        elif quote_aware and char in _QUOTES:
            quote = char
        elif char == "]":
            return index
        index += 1
    return None


def _first_group(match: re.Match[str]) -> str:
    for value in match.group(2, 3, 4):
        if value is not None:
            return value
    return ""


def _unescape(value: str) -> str:
    return _ESCAPE_RE.sub(r"\1", value)
