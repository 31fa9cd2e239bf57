# -*- coding: utf-8 -*-
"""
Markdown → HTML formatter for streamed LLM messages.

Converts a restricted markdown dialect (fenced code, headings, blockquotes,
lists, tables, horizontal rules, bold, italic, inline code, links) into
sanitized HTML that can be injected into a page as-is.

The input may be a prefix of a message that is still being generated: an
unterminated code fence is closed virtually, so every intermediate state
renders as styled output instead of leaking raw fence markers.
"""

import logging
import re
from typing import List, Optional, Tuple
from urllib.parse import quote

from streammark.models import CodeBlock, FenceState, InlineRuns, LinkRecord, TableModel

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Escaping
# ---------------------------------------------------------------------------

def escape_html(value: str = '') -> str:
    """Escape &, < and > for use in HTML text content."""
    return value.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')


def escape_attr(value: str = '') -> str:
    """Escape a value for use inside a quoted HTML attribute."""
    return escape_html(value).replace('"', '&quot;').replace("'", '&#39;')


def _unescape_html(value: str) -> str:
    return value.replace('&lt;', '<').replace('&gt;', '>').replace('&amp;', '&')


# ---------------------------------------------------------------------------
# Preprocessing
# ---------------------------------------------------------------------------

# An unclosed reasoning block swallows everything up to the end of the text
_THINK_BLOCK_RE = re.compile(
    r'<think(?:ing)?>.*?(?:</think(?:ing)?>|\Z)',
    re.IGNORECASE | re.DOTALL
)
_EXOTIC_SPACES_RE = re.compile('[\u00a0\u202f\u2007]')


def preprocess(text: str) -> str:
    """Strip reasoning blocks, normalize spaces and line endings."""
    text = _THINK_BLOCK_RE.sub('', text)
    text = _EXOTIC_SPACES_RE.sub(' ', text)
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    # NUL is the placeholder sentinel below
    return text.replace('\x00', '')


# ---------------------------------------------------------------------------
# Streaming fence balancing
# ---------------------------------------------------------------------------

_FENCE_OPEN_RE = re.compile(r'^[ \t]*(`{3,}|~{3,})')


def _closes_fence(line: str, fence: FenceState) -> bool:
    pattern = r'[ \t]*%s{%d,}[ \t]*' % (re.escape(fence.char), fence.length)
    return re.fullmatch(pattern, line) is not None


def balance_streaming_code_fence(text: str) -> str:
    """
    Virtually close an unfinished fenced code block.

    Scans line by line keeping at most one open fence. A fence closes only
    with the same character repeated at least as many times as it was opened
    with. If a fence is still open at the end, a matching closing line is
    appended so the block renders while the message is being streamed.
    Already balanced text is returned unchanged.
    """
    open_fence: Optional[FenceState] = None

    for line in text.split('\n'):
        if open_fence is None:
            m = _FENCE_OPEN_RE.match(line)
            if m:
                run = m.group(1)
                open_fence = FenceState(char=run[0], length=len(run))
        elif _closes_fence(line, open_fence):
            open_fence = None

    if open_fence is None:
        return text

    closing = open_fence.closing_fence
    logger.debug(f"Virtually closing unterminated code fence {closing!r}")
    if text.endswith('\n'):
        return text + closing
    return text + '\n' + closing


# ---------------------------------------------------------------------------
# Placeholder system for protecting code blocks
# ---------------------------------------------------------------------------

_CODE_BLOCK_PH = '\x00CODEBLOCK_%d\x00'
_CODE_BLOCK_PH_RE = re.compile(r'\x00CODEBLOCK_(\d+)\x00')

# Opening and closing fences sit on their own lines; the closing run may be
# longer than the opening one.
_CODE_BLOCK_RE = re.compile(
    r'^[ \t]*(`{3,})(?!`)([^\n]*)\n(.*?)^[ \t]*\1`*[ \t]*$',
    re.DOTALL | re.MULTILINE
)

_COPY_ICON = (
    '<svg class="md-icon md-icon-copy" viewBox="0 0 24 24" width="16" height="16" '
    'aria-hidden="true"><path d="M16 1H4a2 2 0 0 0-2 2v12h2V3h12V1zm3 4H8a2 2 0 0 0-2 '
    '2v14a2 2 0 0 0 2 2h11a2 2 0 0 0 2-2V7a2 2 0 0 0-2-2zm0 16H8V7h11v14z"/></svg>'
)


def _extract_code_blocks(text: str) -> Tuple[str, List[CodeBlock]]:
    """Extract fenced code blocks into placeholders, in document order."""
    blocks: List[CodeBlock] = []

    def _replacer(m):
        lines = m.group(3).split('\n')
        while lines and not lines[-1].strip():
            lines.pop()
        blocks.append(CodeBlock(language=m.group(2).strip(), code='\n'.join(lines)))
        return _CODE_BLOCK_PH % (len(blocks) - 1)

    text = _CODE_BLOCK_RE.sub(_replacer, text)
    return text, blocks


def _render_code_block(block: CodeBlock) -> str:
    """Header bar (language + copy button) followed by the escaped code."""
    title = block.language or 'code'
    language_class = re.sub(r'[^a-z0-9_-]', '', title.lower()) or 'code'
    # Same unreserved set as JavaScript's encodeURIComponent
    encoded = quote(block.code, safe="!~*'()", errors='replace')

    head = (
        '<div class="md-codeblock__header">'
        f'<div class="md-codeblock__lang">{escape_html(title)}</div>'
        '<button type="button" class="md-codeblock__copy" aria-label="Copy code" '
        f'title="Copy code" data-copy-code="{escape_attr(encoded)}">{_COPY_ICON}</button>'
        '</div>'
    )
    # Newlines stay literal inside <pre>; the code never goes through <br> conversion
    body = (
        '<pre class="md-codeblock__pre">'
        f'<code class="md-codeblock__code language-{language_class}">'
        f'{escape_html(block.code)}</code></pre>'
    )
    return f'<div class="md-codeblock">{head}{body}</div>'


def _restore_code_blocks(text: str, blocks: List[CodeBlock]) -> str:
    """Replace code block placeholders with rendered blocks."""
    return _CODE_BLOCK_PH_RE.sub(lambda m: _render_code_block(blocks[int(m.group(1))]), text)


# ---------------------------------------------------------------------------
# Block-level elements
# ---------------------------------------------------------------------------

def _format_headings(text: str) -> str:
    """Convert # .. #### headings, longest marker first."""
    for level in (4, 3, 2, 1):
        text = re.sub(
            r'^%s (.+)$' % ('#' * level),
            r'<h%d>\1</h%d>' % (level, level),
            text,
            flags=re.MULTILINE
        )
    return text


# Runs on escaped text, so the quote marker is &gt;
_BLOCKQUOTE_RE = re.compile(r'(^|\n)([ \t]*&gt; .+(?:\n[ \t]*&gt; .+)*)')
_BLOCKQUOTE_MARKER_RE = re.compile(r'^[ \t]*&gt;\s*')


def _format_blockquotes(text: str) -> str:
    """Merge consecutive > lines into a single blockquote."""

    def _replacer(m):
        lines = [_BLOCKQUOTE_MARKER_RE.sub('', line).strip() for line in m.group(2).split('\n')]
        return f"{m.group(1)}<blockquote>{'<br>'.join(lines)}</blockquote>"

    return _BLOCKQUOTE_RE.sub(_replacer, text)


_LIST_RE = re.compile(r'(^|\n)([ \t]*[-*] .+(?:\n[ \t]*[-*] .+)*)')
_LIST_MARKER_RE = re.compile(r'^[ \t]*[-*]\s+')


def _format_lists(text: str) -> str:
    """Convert runs of - / * lines to an unordered list."""

    def _replacer(m):
        items = ''.join(
            f'<li>{_LIST_MARKER_RE.sub("", line).strip()}</li>'
            for line in m.group(2).split('\n')
        )
        return f'{m.group(1)}<ul>{items}</ul>'

    return _LIST_RE.sub(_replacer, text)


def _format_hr(text: str) -> str:
    """Convert a lone --- line to a horizontal rule."""
    return re.sub(r'^---[ \t]*$', '<hr>', text, flags=re.MULTILINE)


# ---------------------------------------------------------------------------
# Table parsing
# ---------------------------------------------------------------------------

_TABLE_SEPARATOR_RE = re.compile(r'^\|\s*[:\-]+(?:\s*\|\s*[:\-]+)+\s*\|?\s*$')
_SEPARATOR_CELL_RE = re.compile(r'^[ :\-]+$')


def _split_row(line: str) -> List[str]:
    row = line.strip()
    if row.startswith('|'):
        row = row[1:]
    if row.endswith('|'):
        row = row[:-1]
    return [cell.strip() for cell in row.split('|')]


def _cell_alignment(cell: str) -> str:
    cell = re.sub(r'\s+', '', cell)
    left = cell.startswith(':')
    right = cell.endswith(':')
    if left and right:
        return 'center'
    if right:
        return 'right'
    return 'left'


def _parse_table(lines: List[str]) -> Optional[TableModel]:
    """Parse header, separator and body lines; None if the block is not a valid table."""
    headers = _split_row(lines[0])
    separators = _split_row(lines[1])

    if len(headers) < 2 or len(separators) < 2 or len(headers) != len(separators):
        return None
    if not all(_SEPARATOR_CELL_RE.match(cell) and '-' in cell for cell in separators):
        return None

    return TableModel(
        headers=headers,
        alignments=[_cell_alignment(cell) for cell in separators],
        rows=[_split_row(line) for line in lines[2:]],
    )


def _render_table(table: TableModel) -> str:
    head_cells = ''.join(
        f'<th class="md-table__head-cell md-align-{table.alignment(ci)}">{cell}</th>'
        for ci, cell in enumerate(table.headers)
    )
    rows = ''
    for row in table.rows:
        cells = ''.join(
            f'<td class="md-table__cell md-align-{table.alignment(ci)}">{cell}</td>'
            for ci, cell in enumerate(row)
        )
        rows += f'<tr class="md-table__row">{cells}</tr>'

    return (
        '<table class="md-table">'
        f'<thead><tr class="md-table__row md-table__row--head">{head_cells}</tr></thead>'
        f'<tbody>{rows}</tbody>'
        '</table>'
    )


def _format_tables(text: str) -> str:
    """Convert GitHub-style pipe tables; invalid candidates stay as text."""
    lines = text.split('\n')
    result = []
    i = 0

    while i < len(lines):
        # Table start: a | line followed by a separator line
        if (i + 1 < len(lines)
                and lines[i].startswith('|')
                and _TABLE_SEPARATOR_RE.match(lines[i + 1])):
            j = i + 2
            while j < len(lines) and lines[j].startswith('|'):
                j += 1

            block = lines[i:j]
            table = _parse_table(block)
            if table is None:
                logger.debug(f"Table candidate at line {i + 1} rejected, left as text")
                result.extend(block)
            else:
                result.append(_render_table(table))
            i = j
        else:
            result.append(lines[i])
            i += 1

    return '\n'.join(result)


# ---------------------------------------------------------------------------
# Inline elements
# ---------------------------------------------------------------------------

_INLINE_CODE_PH = '\x00CODEINLINE_%d\x00'
_STRONG_PH = '\x00STRONG_%d\x00'
_EMPHASIS_PH = '\x00EM_%d\x00'

_INLINE_CODE_RE = re.compile(r'`([^`]+?)`')
# The closing ** is the last pair of an asterisk run, so **a *b*** nests
_STRONG_RE = re.compile(r'\*\*(.+?)\*\*(?!\*)', re.DOTALL)
_EMPHASIS_RE = re.compile(r'(?<!\*)\*(.+?)\*(?!\*)', re.DOTALL)

_INLINE_CODE_PH_RE = re.compile(r'\x00CODEINLINE_(\d+)\x00')
_STRONG_OR_EMPHASIS_PH_RE = re.compile(r'\x00(STRONG|EM)_(\d+)\x00')
_ANY_INLINE_PH_RE = re.compile(r'\x00(CODEINLINE|STRONG|EM)_(\d+)\x00')


def _protect(pattern: re.Pattern, placeholder: str, text: str, runs: List[str]) -> str:
    """Move every match's inner content to ``runs`` and leave a placeholder."""

    def _replacer(m):
        runs.append(m.group(1))
        return placeholder % (len(runs) - 1)

    return pattern.sub(_replacer, text)


def _restore_strong_and_emphasis(text: str, runs: InlineRuns) -> str:
    def _replacer(m):
        idx = int(m.group(2))
        if m.group(1) == 'STRONG':
            return f'<b>{_restore_strong_and_emphasis(runs.strong[idx], runs)}</b>'
        return f'<i>{_restore_strong_and_emphasis(runs.emphasis[idx], runs)}</i>'

    return _STRONG_OR_EMPHASIS_PH_RE.sub(_replacer, text)


def _restore_inline_source(text: str, runs: InlineRuns) -> str:
    """Put the original markdown delimiters back in place of placeholders."""

    def _replacer(m):
        kind, idx = m.group(1), int(m.group(2))
        if kind == 'CODEINLINE':
            return f'`{runs.code[idx]}`'
        if kind == 'STRONG':
            return f'**{_restore_inline_source(runs.strong[idx], runs)}**'
        return f'*{_restore_inline_source(runs.emphasis[idx], runs)}*'

    return _ANY_INLINE_PH_RE.sub(_replacer, text)


def _format_inline(text: str) -> Tuple[str, InlineRuns]:
    """
    Capture inline code, bold and italic runs behind placeholders.

    Inline code is protected first, so asterisks inside it are never read as
    markup. Emphasis is also looked for inside each captured bold run.
    The placeholders stay in the text until ``_restore_inline``, so the
    link pass never sees code content or generated tags.
    """
    runs = InlineRuns()

    text = _protect(_INLINE_CODE_RE, _INLINE_CODE_PH, text, runs.code)
    text = _protect(_STRONG_RE, _STRONG_PH, text, runs.strong)
    runs.strong = [_protect(_EMPHASIS_RE, _EMPHASIS_PH, content, runs.emphasis) for content in runs.strong]
    text = _protect(_EMPHASIS_RE, _EMPHASIS_PH, text, runs.emphasis)
    return text, runs


def _restore_inline(text: str, runs: InlineRuns) -> str:
    text = _restore_strong_and_emphasis(text, runs)
    return _INLINE_CODE_PH_RE.sub(lambda m: f'<code>{runs.code[int(m.group(1))]}</code>', text)


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

# Single-line only: a code block placeholder always starts its own line.
# No part may cross a [, so an unmatched bracket never scans past the next one
_LINK_RE = re.compile(r'\[([^\[\]\n]+)\]\(([^\[)\n]+)\)')

_EXTERNAL_ICON = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" '
    'stroke-linejoin="round" class="md-icon md-icon-external">'
    '<path d="M18 13v6a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2V8a2 2 0 0 1 2-2h6"></path>'
    '<polyline points="15 3 21 3 21 9"></polyline>'
    '<line x1="10" y1="14" x2="21" y2="3"></line></svg>'
)


def _render_link(link: LinkRecord) -> str:
    url = link.safe_href
    if not url:
        return link.label
    return (
        f'<a class="md-link md-link--external" href="{escape_attr(url)}" '
        'target="_blank" rel="noreferrer noopener">'
        f'<span class="md-link__label">{link.label}</span> {_EXTERNAL_ICON}'
        f'<span class="md-link__tooltip">{escape_html(url)}</span></a>'
    )


def _format_links(text: str, runs: InlineRuns) -> str:
    """Convert [label](href); unsafe targets degrade to the bare label."""

    def _replacer(m):
        # The href was captured from escaped, placeholdered text
        href = _unescape_html(_restore_inline_source(m.group(2), runs))
        return _render_link(LinkRecord(label=m.group(1), href=href))

    # Links wrapped in bold or italic live inside the captured runs
    runs.strong = [_LINK_RE.sub(_replacer, content) for content in runs.strong]
    runs.emphasis = [_LINK_RE.sub(_replacer, content) for content in runs.emphasis]
    return _LINK_RE.sub(_replacer, text)


# ---------------------------------------------------------------------------
# Line breaks
# ---------------------------------------------------------------------------

def _normalize_line_breaks(html: str) -> str:
    html = html.replace('\n', '<br>')

    # 3+ breaks collapse to a paragraph gap
    html = re.sub(r'(?:<br>\s*){3,}', '<br><br>', html)

    # At most one break before a block element and after a closing one
    html = re.sub(
        r'(<br>\s*)+(<(?:h[1-4]|hr|table|ul|ol|blockquote)\b[^>]*>)',
        r'<br>\2',
        html
    )
    html = re.sub(r'(</(?:h[1-4]|table|ul|ol|blockquote)>\s*)(<br>\s*)+', r'\1<br>', html)

    # None after headings and lists
    html = re.sub(r'(</h[1-4]>)(<br>\s*)+', r'\1', html)
    html = re.sub(r'(</(?:ul|ol)>)(<br>\s*)+', r'\1', html)
    return html


def _cleanup_code_block_breaks(html: str) -> str:
    html = re.sub(r'<br>\s*(?=<div class="md-codeblock">)', '', html)
    return re.sub(r'(</code></pre></div>)\s*<br>', r'\1', html)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def markdown_to_html(text: Optional[str]) -> str:
    """
    Convert markdown text to sanitized HTML.

    Handles: reasoning-block removal, unterminated code fences, fenced code
    blocks, headings, blockquotes, lists, tables, horizontal rules, bold,
    italic, inline code, links.

    Never raises; malformed constructs are left as escaped text.
    """
    if not text:
        return ''

    # 1. Reasoning blocks, exotic spaces, line endings
    text = preprocess(text)

    # 2. Close a fence left open by a truncated stream
    text = balance_streaming_code_fence(text)

    # 3. Protect code blocks (``` ... ```)
    text, code_blocks = _extract_code_blocks(text)

    # 4. Escape everything else
    html = escape_html(text)

    # 5. Block-level elements
    html = _format_headings(html)
    html = _format_blockquotes(html)
    html = _format_lists(html)
    html = _format_tables(html)
    html = _format_hr(html)

    # 6. Inline code, bold, italic
    html, runs = _format_inline(html)

    # 7. Links
    html = _format_links(html, runs)
    html = _restore_inline(html, runs)

    # 8. Remaining newlines
    html = _normalize_line_breaks(html)

    # 9. Restore code blocks
    html = _restore_code_blocks(html, code_blocks)

    # 10. Stray breaks next to code blocks
    return _cleanup_code_block_breaks(html)
