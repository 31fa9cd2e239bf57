"""Tests for closing unterminated code fences during streaming."""

from __future__ import annotations

import logging

import pytest

from streammark import balance_streaming_code_fence, markdown_to_html


def test_unterminated_fence_gets_closing_line() -> None:
    assert balance_streaming_code_fence("```python\nprint(1)") == "```python\nprint(1)\n```"


def test_no_extra_newline_when_text_ends_with_one() -> None:
    assert balance_streaming_code_fence("```\nx\n") == "```\nx\n```"


def test_closing_uses_opening_char_and_length() -> None:
    # A shorter run does not close a longer fence
    assert balance_streaming_code_fence("~~~~\ncode\n~~~") == "~~~~\ncode\n~~~\n~~~~"


def test_other_fence_char_does_not_close() -> None:
    assert balance_streaming_code_fence("```\nx\n~~~") == "```\nx\n~~~\n```"


def test_longer_closing_run_closes() -> None:
    text = "```\nx\n`````"
    assert balance_streaming_code_fence(text) == text


@pytest.mark.parametrize(
    "text",
    [
        "",
        "plain text",
        "```\nx\n```\n",
        "before\n~~~\ny\n~~~\nafter",
        "```js\na\n```\n```py\nb\n```",
    ],
)
def test_balanced_input_is_unchanged(text: str) -> None:
    assert balance_streaming_code_fence(text) == text


@pytest.mark.parametrize(
    "text",
    ["```", "```py\n", "````\ncode", "~~~\nx\n```", "a\n```b\nc\n```\n```d"],
)
def test_balancing_is_idempotent(text: str) -> None:
    once = balance_streaming_code_fence(text)
    assert balance_streaming_code_fence(once) == once


def test_second_block_can_be_left_open() -> None:
    text = "```a\n1\n```\n```b\n2"
    assert balance_streaming_code_fence(text) == text + "\n```"


def test_streamed_fence_renders_as_code_block() -> None:
    html = markdown_to_html("Example:\n```python\nprint('hi')")

    assert '<div class="md-codeblock">' in html
    assert "language-python" in html
    assert "print('hi')</code>" in html
    assert "```" not in html


def test_fence_opened_on_last_line_renders_empty_block() -> None:
    html = markdown_to_html("```")

    assert html.startswith('<div class="md-codeblock">')
    assert '<code class="md-codeblock__code language-code"></code>' in html


def test_virtual_close_is_logged(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="streammark.markdown_formatter")

    balance_streaming_code_fence("```py\nx")

    assert any("Virtually closing" in r.getMessage() and r.levelno == logging.DEBUG for r in caplog.records)


def test_balanced_input_logs_nothing(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="streammark.markdown_formatter")

    balance_streaming_code_fence("```py\nx\n```")

    assert not any("Virtually closing" in r.getMessage() for r in caplog.records)
