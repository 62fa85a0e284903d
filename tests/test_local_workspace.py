from pathlib import Path
from types import SimpleNamespace

import pytest

from webchat_bridge.workspace.base import Position
from webchat_bridge.workspace.local import LocalWorkspace, ShellTerminal


def test_find_files_skips_ignored_directories(tmp_path: Path):
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "dep.js").write_text("", encoding="utf-8")
    (tmp_path / "main.py").write_text("", encoding="utf-8")

    files = LocalWorkspace(tmp_path).find_files(limit=10)

    assert files == [tmp_path.resolve() / "main.py"]


def test_workspace_without_root_has_no_files():
    workspace = LocalWorkspace(None)
    assert workspace.root is None
    assert workspace.find_files(limit=10) == []


def test_open_document_detects_crlf_and_language(tmp_path: Path):
    path = tmp_path / "script.sh"
    path.write_bytes(b"echo one\r\necho two")
    workspace = LocalWorkspace(tmp_path)

    document = workspace.open_document(Path("script.sh"))

    assert document.language_id == "shellscript"
    assert document.eol == "CRLF"
    assert document.line_count == 2
    assert workspace.open_document(Path("script.sh")).version == 2


def test_multi_line_selection(tmp_path: Path):
    (tmp_path / "notes.md").write_text("alpha\nbravo\ncharlie\n", encoding="utf-8")
    workspace = LocalWorkspace(tmp_path)
    workspace.open_document(Path("notes.md"))

    selection = workspace.select(Position(line=2, character=3), Position(line=0, character=2))

    assert selection.text == "pha\nbravo\ncha"
    assert selection.start == Position(line=0, character=2)
    assert selection.anchor == Position(line=2, character=3)
    assert selection.is_single_line is False


def test_select_requires_open_document(tmp_path: Path):
    with pytest.raises(RuntimeError):
        LocalWorkspace(tmp_path).select(Position(line=0, character=0), Position(line=0, character=1))


def test_publishing_empty_diagnostics_clears_file(tmp_path: Path):
    workspace = LocalWorkspace(tmp_path)
    workspace.publish_diagnostics(Path("a.py"), [])
    assert workspace.diagnostics() == []


def test_crlf_document_selection_uses_normalised_lines(tmp_path: Path):
    (tmp_path / "win.txt").write_bytes(b"first\r\nsecond\r\n")
    workspace = LocalWorkspace(tmp_path)
    workspace.open_document(Path("win.txt"))

    selection = workspace.select(Position(line=1, character=0), Position(line=1, character=6))

    assert workspace.active_document().eol == "CRLF"
    assert selection.text == "second"


@pytest.mark.asyncio
async def test_terminal_without_input_pipe_raises():
    terminal = ShellTerminal(name="build")
    terminal._process = SimpleNamespace(returncode=None, stdin=None)

    with pytest.raises(RuntimeError, match="no input pipe"):
        await terminal.send_line("make")
