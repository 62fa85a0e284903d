from webchat_bridge.models import CodeBlock, Command, ParsedResponse
from webchat_bridge.parser.response_parser import ResponseParser, commands_from_json


def test_paragraph_and_code_block():
    parsed = ResponseParser().parse(
        '<p>Hello</p><pre><code class="language-js">console.log(1)</code></pre>'
    )
    assert "Hello" in parsed.text
    assert "[Code block in js omitted]" in parsed.text
    assert "console.log" not in parsed.text
    assert parsed.code_blocks == (CodeBlock(language="js", code="console.log(1)"),)
    assert parsed.commands == ()


def test_wrapper_element_children_are_walked():
    parsed = ResponseParser().parse(
        '<div class="markdown"><p>Intro</p><pre><code>raw</code></pre><p>Outro</p></div>'
    )
    assert parsed.text == "Intro\n\n[Code block omitted]\n\nOutro"
    assert parsed.code_blocks == (CodeBlock(language="", code="raw"),)


def test_language_hint_uses_first_matching_class():
    parsed = ResponseParser().parse(
        '<pre><code class="hljs language-python language-ruby">x = 1</code></pre>'
    )
    assert parsed.code_blocks[0].language == "python"


def test_pre_without_code_is_plain_text():
    parsed = ResponseParser().parse("<pre>just text</pre>")
    assert parsed.code_blocks == ()
    assert parsed.text == "just text"


def test_inline_code_and_text_nodes_are_kept():
    parsed = ResponseParser().parse("Run <code>make</code> now<p>Next</p>")
    assert parsed.text == "Run make nowNext"


def test_blank_line_runs_collapse():
    parsed = ResponseParser().parse("<p>One</p>\n\n\n\n<p>Two</p>")
    assert parsed.text == "One\n\nTwo"


def test_bracket_commands_are_extracted_from_text():
    parsed = ResponseParser().parse(
        '<p>Reading now [VSCODE_COMMAND: readFile path="notes.md"]</p>'
    )
    assert parsed.commands == (Command(action="readFile", params={"path": "notes.md"}),)


def test_json_code_block_commands_precede_bracket_commands():
    html = (
        '<p>[VSCODE_COMMAND: getDiagnostics]</p>'
        '<pre><code class="language-json">'
        '[{"action": "writeFile", "params": {"path": "a.txt", "content": "x"}},'
        ' {"action": "getSelection", "params": {"allowEmpty": true}},'
        ' {"action": "broken"}]'
        "</code></pre>"
    )
    parsed = ResponseParser().parse(html)
    assert [command.action for command in parsed.commands] == [
        "writeFile",
        "getSelection",
        "getDiagnostics",
    ]
    assert parsed.commands[1].params == {"allowEmpty": "true"}
    assert len(parsed.code_blocks) == 1


def test_single_json_command_object():
    assert commands_from_json('{"action": "readFile", "params": {"path": "a", "n": 3}}') == [
        Command(action="readFile", params={"path": "a", "n": "3"})
    ]


def test_invalid_json_block_is_ignored():
    parsed = ResponseParser().parse('<pre><code class="language-json">{not json</code></pre>')
    assert parsed.commands == ()
    assert parsed.code_blocks[0].code == "{not json"


def test_empty_or_non_string_input_yields_empty_response():
    parser = ResponseParser()
    assert parser.parse("") == ParsedResponse.empty()
    assert parser.parse("   ") == ParsedResponse.empty()
    assert parser.parse(None) == ParsedResponse.empty()
    assert parser.parse(42) == ParsedResponse.empty()
