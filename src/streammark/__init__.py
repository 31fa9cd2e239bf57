"""
streammark.

Конвертер markdown в безопасный HTML, устойчивый к незавершённому (стриминговому) вводу.
"""

from streammark.markdown_formatter import (
    markdown_to_html,
    balance_streaming_code_fence,
    escape_html,
    escape_attr,
)
from streammark.models import (
    FenceState,
    CodeBlock,
    InlineRuns,
    TableModel,
    LinkRecord,
    RenderConfig,
)
from streammark.streaming import StreamRenderer, render_stream, split_chunks
from streammark.page import render_page
from streammark.exceptions import (
    StreamMarkError,
    ConfigError,
    SourceError,
)

__version__ = "1.0.0"

__all__ = [
    # Converter
    "markdown_to_html",
    "balance_streaming_code_fence",
    "escape_html",
    "escape_attr",
    # Streaming
    "StreamRenderer",
    "render_stream",
    "split_chunks",
    # Page
    "render_page",
    # Models
    "FenceState",
    "CodeBlock",
    "InlineRuns",
    "TableModel",
    "LinkRecord",
    "RenderConfig",
    # Exceptions
    "StreamMarkError",
    "ConfigError",
    "SourceError",
]
