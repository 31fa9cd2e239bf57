# -*- coding: utf-8 -*-
"""
Standalone HTML page around a rendered fragment.

The converter only emits class names; this module supplies the stylesheet
for them and the clipboard wiring for code block copy buttons, for previews
and exported messages.
"""

from typing import Optional

from streammark.markdown_formatter import escape_html


DEFAULT_STYLESHEET = """
body { font-family: 'Segoe UI', sans-serif; font-size: 14px; color: #333; line-height: 1.5; max-width: 860px; margin: 24px auto; padding: 0 16px; }
h1 { font-size: 20px; margin: 10px 0 6px 0; color: #222; }
h2 { font-size: 17px; margin: 10px 0 6px 0; color: #222; }
h3 { font-size: 15px; margin: 10px 0 6px 0; color: #222; }
h4 { font-size: 14px; margin: 10px 0 6px 0; color: #222; }
blockquote { border-left: 3px solid #ccc; padding-left: 12px; color: #555; margin: 6px 0; font-style: italic; }
ul { margin: 4px 0 4px 20px; padding: 0; }
li { margin: 2px 0; }
hr { border: none; border-top: 1px solid #ccc; margin: 10px 0; }
code { background: #f0f0f0; padding: 2px 5px; border-radius: 3px; font-family: Consolas, 'Courier New', monospace; font-size: 12px; border: 1px solid #ddd; }

.md-table { border-collapse: collapse; border: 1px solid #ccc; margin: 8px 0; width: auto; }
.md-table__head-cell, .md-table__cell { border: 1px solid #ccc; padding: 6px 10px; }
.md-table__head-cell { font-weight: bold; background-color: #f0f0f0; }
.md-align-left { text-align: left; }
.md-align-center { text-align: center; }
.md-align-right { text-align: right; }

.md-codeblock { background: #2d2d2d; color: #f8f8f2; border-radius: 6px; border: 1px solid #555; margin: 8px 0; overflow: hidden; }
.md-codeblock__header { display: flex; justify-content: space-between; align-items: center; padding: 4px 12px; background: #3a3a3a; }
.md-codeblock__lang { font-size: 11px; color: #999; }
.md-codeblock__copy { background: none; border: none; color: #ccc; cursor: pointer; padding: 2px; }
.md-codeblock__copy:hover { color: #fff; }
.md-codeblock__copy.is-copied { color: #28a745; }
.md-codeblock__pre { margin: 0; padding: 10px 12px; white-space: pre-wrap; word-break: break-word; }
.md-codeblock__code { background: none; border: none; padding: 0; color: inherit; }

.md-link { color: #2980b9; text-decoration: underline; position: relative; }
.md-link__tooltip { display: none; position: absolute; left: 0; top: 100%; background: #333; color: #fff; font-size: 11px; padding: 2px 6px; border-radius: 3px; white-space: nowrap; }
.md-link:hover .md-link__tooltip { display: block; }
.md-icon { width: 1em; height: 1em; vertical-align: middle; fill: currentColor; }
.md-icon-external { fill: none; }
"""

# Delegated handler; the markup itself never carries inline handlers
COPY_SCRIPT = """
document.addEventListener('click', function (event) {
  var button = event.target.closest('.md-codeblock__copy');
  if (!button || !navigator.clipboard) return;
  var code = decodeURIComponent(button.getAttribute('data-copy-code') || '');
  navigator.clipboard.writeText(code).then(function () {
    button.classList.add('is-copied');
    setTimeout(function () { button.classList.remove('is-copied'); }, 1500);
  });
});
"""


def render_page(body_html: str, title: str = "Markdown preview", stylesheet: Optional[str] = None) -> str:
    """
    Wrap a rendered fragment into a complete HTML document.

    Args:
        body_html: Output of markdown_to_html
        title: Document title (escaped here)
        stylesheet: CSS text; None means DEFAULT_STYLESHEET
    """
    css = DEFAULT_STYLESHEET if stylesheet is None else stylesheet
    return (
        '<!DOCTYPE html>\n'
        '<html>\n'
        '<head>\n'
        '<meta charset="utf-8">\n'
        f'<title>{escape_html(title)}</title>\n'
        f'<style>{css}</style>\n'
        '</head>\n'
        '<body>\n'
        f'<div class="md-message">{body_html}</div>\n'
        f'<script>{COPY_SCRIPT}</script>\n'
        '</body>\n'
        '</html>\n'
    )
