"""
Исключения для streammark.

Сам конвертер не бросает исключений; они используются конфигурацией и CLI.
"""

from typing import Optional, Dict, Any


class StreamMarkError(Exception):
    """Базовое исключение для streammark."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ConfigError(StreamMarkError):
    """Неизвестный ключ или недопустимое значение конфигурации."""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.key = key
        super().__init__(message, details)


class SourceError(StreamMarkError):
    """Не удалось прочитать markdown-источник."""

    def __init__(self, message: str, path: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.path = path
        super().__init__(message, details)
