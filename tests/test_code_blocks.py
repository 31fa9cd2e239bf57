from __future__ import annotations

from streammark import markdown_to_html


def test_code_is_escaped_independently() -> None:
    html = markdown_to_html("```js\nconst a = 1 < 2 && b;\n```")

    assert '<code class="md-codeblock__code language-js">const a = 1 &lt; 2 &amp;&amp; b;</code>' in html
    assert '<div class="md-codeblock__lang">js</div>' in html


def test_missing_language_falls_back_to_code() -> None:
    html = markdown_to_html("```\nx\n```")

    assert '<div class="md-codeblock__lang">code</div>' in html
    assert "language-code" in html


def test_language_class_is_sanitized() -> None:
    html = markdown_to_html('```C++ "x"\nint main();\n```')

    assert '<div class="md-codeblock__lang">C++ "x"</div>' in html
    assert "language-cx" in html


def test_trailing_blank_lines_are_stripped() -> None:
    html = markdown_to_html("```\na\n\n   \n```")
    assert '">a</code>' in html


def test_newlines_stay_literal_inside_code() -> None:
    html = markdown_to_html("```\na\nb\n```")

    assert "a\nb</code>" in html
    assert "<br>" not in html


def test_markdown_inside_code_is_not_formatted() -> None:
    html = markdown_to_html("```\n**x** # y\n- z\n```")

    assert "**x** # y\n- z</code>" in html
    assert "<b>" not in html
    assert "<h1>" not in html
    assert "<ul>" not in html


def test_copy_button_carries_percent_encoded_code() -> None:
    html = markdown_to_html("```\na b&c\n```")
    assert 'data-copy-code="a%20b%26c"' in html


def test_copy_data_is_attribute_escaped() -> None:
    html = markdown_to_html("```\nit's\n```")
    assert 'data-copy-code="it&#39;s"' in html


def test_copy_button_has_no_inline_handler() -> None:
    html = markdown_to_html("```\nx\n```")

    assert 'class="md-codeblock__copy"' in html
    assert "onclick" not in html


def test_blocks_keep_document_order() -> None:
    html = markdown_to_html("```a\n1\n```\ntext\n```b\n2\n```")

    assert html.index("language-a") < html.index("text") < html.index("language-b")


def test_breaks_next_to_code_block_are_removed() -> None:
    html = markdown_to_html("before\n```\nx\n```\nafter")

    assert html.startswith('before<div class="md-codeblock">')
    assert html.endswith("</code></pre></div>after")


def test_longer_fence_keeps_inner_backticks() -> None:
    html = markdown_to_html("````md\n```\ninner\n```\n````")

    assert "language-md" in html
    assert "```\ninner\n```</code>" in html


def test_fence_must_start_a_line() -> None:
    html = markdown_to_html("say ```x``` here")
    assert "md-codeblock" not in html


def test_tilde_fence_is_not_extracted() -> None:
    html = markdown_to_html("~~~\n<b>\n~~~")

    assert "md-codeblock" not in html
    assert "&lt;b&gt;" in html


def test_placeholder_syntax_cannot_be_forged() -> None:
    assert markdown_to_html("\x00CODEBLOCK_0\x00") == "CODEBLOCK_0"
