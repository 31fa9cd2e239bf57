from __future__ import annotations

import pytest

from streammark import markdown_to_html, render_page
from streammark.page import COPY_SCRIPT, DEFAULT_STYLESHEET


def test_render_page_wraps_fragment() -> None:
    page = render_page("<b>x</b>", title="A & B")

    assert page.startswith("<!DOCTYPE html>")
    assert "<title>A &amp; B</title>" in page
    assert '<div class="md-message"><b>x</b></div>' in page
    assert DEFAULT_STYLESHEET in page
    assert COPY_SCRIPT in page


def test_custom_stylesheet_replaces_default() -> None:
    page = render_page("", stylesheet="body { color: red; }")

    assert "<style>body { color: red; }</style>" in page
    assert ".md-table" not in page


@pytest.mark.parametrize(
    "class_name",
    [
        "md-table",
        "md-table__head-cell",
        "md-table__cell",
        "md-align-left",
        "md-align-center",
        "md-align-right",
        "md-codeblock",
        "md-codeblock__header",
        "md-codeblock__lang",
        "md-codeblock__copy",
        "md-codeblock__pre",
        "md-link",
        "md-link__tooltip",
    ],
)
def test_default_stylesheet_covers_emitted_classes(class_name: str) -> None:
    assert f".{class_name} " in DEFAULT_STYLESHEET or f".{class_name}," in DEFAULT_STYLESHEET


def test_copy_script_reads_data_attribute() -> None:
    html = markdown_to_html("```\nx\n```")

    assert "data-copy-code" in html
    assert "data-copy-code" in COPY_SCRIPT
    assert "decodeURIComponent" in COPY_SCRIPT
