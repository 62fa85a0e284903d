"""Decompose a rendered chat reply into text, code blocks and commands."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, Optional, Union

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..models import CodeBlock, Command, ParsedResponse
from .command_grammar import parse_commands

LOGGER = logging.getLogger(__name__)

BLOCK_TAGS = frozenset(
    {
        "p",
        "div",
        "ul",
        "ol",
        "li",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "blockquote",
        "table",
        "hr",
        "section",
        "article",
        "pre",
    }
)
WRAPPER_TAGS = frozenset({"div", "section", "article", "main"})

_LANGUAGE_RE = re.compile(r"language-(\w+)")
_BLANK_RUN_RE = re.compile(r"(?:[ \t]*\n){3,}")


class ResponseParser:
    """Turn the inner markup of one reply into a :class:`ParsedResponse`."""

    def parse(self, raw_html: Any) -> ParsedResponse:
        if not isinstance(raw_html, str) or not raw_html.strip():
            LOGGER.warning("Received empty or invalid HTML content")
            return ParsedResponse.empty()
        try:
            return self._parse(raw_html)
        except Exception:
            LOGGER.exception("Failed to parse response HTML")
            return ParsedResponse.empty()

    def _parse(self, raw_html: str) -> ParsedResponse:
        soup = BeautifulSoup(raw_html, "html.parser")
        pieces: list[str] = []
        code_blocks: list[CodeBlock] = []
        json_commands: list[Command] = []

        for node in _response_root(soup).children:
            if isinstance(node, Comment):
                continue
            if isinstance(node, NavigableString):
                pieces.append(str(node))
                continue
            if not isinstance(node, Tag):
                continue
            if node.name == "pre":
                code = node.find("code")
                if isinstance(code, Tag):
                    block = CodeBlock(language=_language_of(code), code=code.get_text())
                    code_blocks.append(block)
                    if block.language.lower() == "json":
                        json_commands.extend(commands_from_json(block.code))
                    pieces.append(_placeholder(block.language))
                    continue
            pieces.append(node.get_text())
            if node.name in BLOCK_TAGS:
                pieces.append("\n\n")

        text = _BLANK_RUN_RE.sub("\n\n", "".join(pieces)).strip()
        commands = json_commands + parse_commands(text)
        return ParsedResponse(text=text, code_blocks=tuple(code_blocks), commands=tuple(commands))


def commands_from_json(source: str) -> list[Command]:
    """Read one command object or an array of them from a JSON code block."""

    try:
        payload = json.loads(source)
    except ValueError:
        LOGGER.debug("JSON code block is not valid JSON; no commands extracted")
        return []
    entries: Iterable[Any] = payload if isinstance(payload, list) else [payload]
    commands = []
    for entry in entries:
        command = _command_from_entry(entry)
        if command is not None:
            commands.append(command)
    return commands


def _command_from_entry(entry: Any) -> Optional[Command]:
    if not isinstance(entry, dict):
        return None
    action = entry.get("action")
    params = entry.get("params")
    if not isinstance(action, str) or not isinstance(params, dict):
        return None
    return Command(
        action=action,
        params={str(key): _stringify(value) for key, value in params.items()},
    )


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


def _response_root(soup: BeautifulSoup) -> Union[BeautifulSoup, Tag]:
    tags = [child for child in soup.children if isinstance(child, Tag)]
    loose_text = [
        child
        for child in soup.children
        if isinstance(child, NavigableString)
        and not isinstance(child, Comment)
        and child.strip()
    ]
    if len(tags) == 1 and not loose_text and tags[0].name in WRAPPER_TAGS:
        return tags[0]
    return soup


def _language_of(code: Tag) -> str:
    classes = code.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for token in classes:
        match = _LANGUAGE_RE.match(token)
        if match:
            return match.group(1)
    return ""


def _placeholder(language: str) -> str:
    if language:
        return f"\n\n[Code block in {language} omitted]\n\n"
    return "\n\n[Code block omitted]\n\n"
