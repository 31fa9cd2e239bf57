"""
Pydantic модели промежуточных записей конвертера и конфигурации.

Все записи конвертера живут в пределах одного вызова markdown_to_html.
"""

import re
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


Alignment = Literal["left", "center", "right"]

_SAFE_SCHEME_RE = re.compile(r'^(?:https?://|mailto:|tel:)', re.IGNORECASE)


# ===== PIPELINE MODELS =====

class FenceState(BaseModel):
    """Открытый (незакрытый) блок кода при сканировании по строкам."""
    char: Literal["`", "~"]
    length: int = Field(ge=3, description="Длина открывающей серии символов")

    @property
    def closing_fence(self) -> str:
        """Строка, которой блок закрывается виртуально."""
        return self.char * self.length


class CodeBlock(BaseModel):
    """Извлечённый блок кода."""
    language: str = ""
    code: str = ""


class InlineRuns(BaseModel):
    """Захваченное содержимое inline-разметки по категориям."""
    code: List[str] = Field(default_factory=list)
    strong: List[str] = Field(default_factory=list)
    emphasis: List[str] = Field(default_factory=list)


class TableModel(BaseModel):
    """Разобранная markdown-таблица."""
    headers: List[str]
    alignments: List[Alignment]
    rows: List[List[str]] = Field(default_factory=list)

    def alignment(self, column: int) -> Alignment:
        """Выравнивание колонки; лишние ячейки строк выравниваются влево."""
        if column < len(self.alignments):
            return self.alignments[column]
        return "left"


class LinkRecord(BaseModel):
    """Ссылка вида [label](href)."""
    label: str
    href: str

    @property
    def safe_href(self) -> str:
        """
        Адрес, если он разрешён для гиперссылки, иначе пустая строка.

        Разрешены http(s)://, mailto:, tel:, пути от корня (/...) и якоря (#...).
        Адреса вида //host не считаются путями от корня.
        """
        href = self.href.strip()
        if not href:
            return ""
        if _SAFE_SCHEME_RE.match(href):
            return href
        if href.startswith("#"):
            return href
        if href.startswith("/") and not href.startswith("//"):
            return href
        return ""


# ===== CONFIG MODELS =====

class RenderConfig(BaseModel):
    """Настройки CLI."""
    page_title: str = Field(default="Markdown preview", description="Заголовок HTML-страницы")
    standalone: bool = Field(default=False, description="Оборачивать результат в полную страницу")
    stylesheet: Optional[str] = Field(
        default=None,
        description="Путь к собственному CSS. None = встроенные стили"
    )
    chunk_size: int = Field(default=24, ge=1, description="Размер фрагмента при эмуляции стриминга")
    stream_delay: float = Field(default=0.02, ge=0, description="Пауза между фрагментами (сек)")
