"""
Рендеринг сообщения, приходящего по частям (токен за токеном).

Каждый вызов заново конвертирует весь накопленный текст, поэтому
промежуточные состояния (например, незакрытый блок кода) отображаются
корректно и меняются по мере поступления данных.
"""

import logging
from typing import Iterable, Iterator

from streammark.markdown_formatter import markdown_to_html

logger = logging.getLogger(__name__)


class StreamRenderer:
    """Накопитель фрагментов с рендерингом после каждого фрагмента."""

    def __init__(self):
        self._accumulated = ""
        self._html = ""
        self._chunks_received = 0

    def feed(self, chunk: str) -> str:
        """
        Добавить фрагмент и отрендерить весь накопленный текст.

        Args:
            chunk: Очередной фрагмент сообщения

        Returns:
            HTML для текущего состояния сообщения
        """
        self._accumulated += chunk
        self._chunks_received += 1
        self._html = markdown_to_html(self._accumulated)
        return self._html

    @property
    def text(self) -> str:
        return self._accumulated

    @property
    def html(self) -> str:
        return self._html

    @property
    def chunks_received(self) -> int:
        return self._chunks_received

    def reset(self) -> None:
        """Начать новое сообщение."""
        logger.debug(f"Stream reset after {self._chunks_received} chunks")
        self._accumulated = ""
        self._html = ""
        self._chunks_received = 0


def split_chunks(text: str, size: int) -> Iterator[str]:
    """
    Разбить текст на последовательные фрагменты фиксированной длины.

    Raises:
        ValueError: size меньше 1
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(text), size):
        yield text[start:start + size]


def render_stream(chunks: Iterable[str]) -> Iterator[str]:
    """Отдавать HTML после каждого поступившего фрагмента."""
    renderer = StreamRenderer()
    for chunk in chunks:
        yield renderer.feed(chunk)
