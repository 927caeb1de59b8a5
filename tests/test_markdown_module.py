from sandoc.adapters.markdown import (
    DEFAULT_MARKDOWN_EXTENSIONS,
    deduplicate_markdown_extensions,
    normalize_markdown_extensions,
    render_markdown,
    resolve_markdown_extensions,
)


class _Recorder:
    def __init__(self, html: str = "<pre>block</pre>") -> None:
        self.calls: list[tuple[str, str]] = []
        self.html = html

    def __call__(self, code: str, info: str) -> str:
        self.calls.append((code, info))
        return self.html


def test_renderer_receives_code_and_info_string() -> None:
    recorder = _Recorder()
    html = render_markdown("Intro\n\n```san export=preview\nvar x = 1;\n```\n\nOutro", recorder)

    assert recorder.calls == [("var x = 1;", "san export=preview")]
    assert "<p>Intro</p>" in html
    assert "<p>Outro</p>" in html
    assert "<pre>block</pre>" in html
    assert "<p><pre>" not in html


def test_blocks_are_visited_in_document_order() -> None:
    recorder = _Recorder()
    source = "```a\n1\n```\n\ntext\n\n~~~b\n2\n~~~\n\n````c\n3\n````\n"

    render_markdown(source, recorder)

    assert recorder.calls == [("1", "a"), ("2", "b"), ("3", "c")]


def test_fence_without_blank_line_before_is_detected() -> None:
    recorder = _Recorder()

    render_markdown("Paragraph\n```js\nlet a;\n```", recorder)

    assert recorder.calls == [("let a;", "js")]


def test_closing_fence_must_match_opening() -> None:
    recorder = _Recorder()
    source = "````md\n```\ninner\n```\n````\n"

    render_markdown(source, recorder)

    assert recorder.calls == [("```\ninner\n```", "md")]


def test_unterminated_fence_runs_to_end_of_document() -> None:
    recorder = _Recorder()

    render_markdown("```san\nline one\nline two", recorder)

    assert recorder.calls == [("line one\nline two", "san")]


def test_opening_indentation_is_removed_from_content() -> None:
    recorder = _Recorder()

    render_markdown("  ```js\n  a();\n    b();\n c();\n  ```\n", recorder)

    assert recorder.calls == [("a();\n  b();\nc();", "js")]


def test_fence_inside_blockquote_is_detected() -> None:
    recorder = _Recorder()
    source = "> Quote\n>\n> ```san export=preview\n> var a;\n>   indented();\n> ```\n\nAfter"

    html = render_markdown(source, recorder)

    assert recorder.calls == [("var a;\n  indented();", "san export=preview")]
    assert "<blockquote>" in html
    assert html.index("<pre>block</pre>") < html.index("</blockquote>")
    assert "<p><code>" not in html


def test_quoted_fence_ends_with_its_blockquote() -> None:
    recorder = _Recorder()

    render_markdown("> ```js\n> a();\n\nOutside", recorder)

    assert recorder.calls == [("a();", "js")]


def test_fence_inside_list_item_is_detected() -> None:
    recorder = _Recorder()
    source = "- item\n\n    ```san export=preview\n    var b;\n      nested();\n    ```\n\n- next\n"

    html = render_markdown(source, recorder)

    assert recorder.calls == [("var b;\n  nested();", "san export=preview")]
    first_item = html[html.index("<li>") : html.index("</li>")]
    assert "<pre>block</pre>" in first_item
    assert "<p><code>" not in html


def test_indented_block_outside_list_is_not_a_fence() -> None:
    recorder = _Recorder()

    html = render_markdown("Paragraph\n\n    ```js\n    a();\n    ```\n", recorder)

    assert recorder.calls == []
    assert "<pre><code>```js" in html


def test_tabs_reach_the_renderer_unchanged() -> None:
    recorder = _Recorder()

    render_markdown("```js\nif (a) {\n\treturn 1;\n}\n```\n", recorder)

    assert recorder.calls == [("if (a) {\n\treturn 1;\n}", "js")]


def test_windows_line_endings_are_stripped_from_code() -> None:
    recorder = _Recorder()

    render_markdown("```js\r\nlet a;\r\n```\r\n", recorder)

    assert recorder.calls == [("let a;", "js")]


def test_backtick_info_string_with_backtick_is_not_a_fence() -> None:
    recorder = _Recorder()

    render_markdown("```not`a fence```\n", recorder)

    assert recorder.calls == []


def test_custom_element_output_is_not_wrapped_in_paragraph() -> None:
    recorder = _Recorder("<demo-widget></demo-widget>")

    html = render_markdown("Before\n\n```san\nx\n```\n\nAfter", recorder)

    assert "<demo-widget></demo-widget>" in html
    assert "<p><demo-widget>" not in html


def test_competing_fence_extensions_are_ignored() -> None:
    recorder = _Recorder()

    html = render_markdown("```py\nprint(1)\n```\n", recorder, extensions=["fenced_code", "tables"])

    assert recorder.calls == [("print(1)", "py")]
    assert "<pre>block</pre>" in html


def test_default_extensions_are_active() -> None:
    html = render_markdown("| a | b |\n|---|---|\n| 1 | 2 |\n\n~~gone~~", _Recorder())

    assert "<table>" in html
    assert "<del>gone</del>" in html


def test_extension_helpers() -> None:
    assert normalize_markdown_extensions("toc, admonition smarty") == [
        "toc",
        "admonition",
        "smarty",
    ]
    assert normalize_markdown_extensions(None) == []
    assert deduplicate_markdown_extensions(["toc", "TOC", "tables"]) == ["toc", "tables"]

    resolved = resolve_markdown_extensions(["toc", "pymdownx.superfences"], ["tables"])

    assert "toc" in resolved
    assert "tables" not in resolved
    assert "pymdownx.superfences" not in resolved
    assert resolved[: len(DEFAULT_MARKDOWN_EXTENSIONS) - 1] == [
        extension for extension in DEFAULT_MARKDOWN_EXTENSIONS if extension != "tables"
    ]
