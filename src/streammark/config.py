"""
Управление конфигурацией CLI.

Хранит настройки в файле в домашней директории пользователя.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any

from pydantic import ValidationError

from streammark.exceptions import ConfigError
from streammark.models import RenderConfig

logger = logging.getLogger(__name__)

# Переопределение директории конфигурации (например, для тестов и CI)
CONFIG_DIR_ENV = "STREAMMARK_CONFIG_DIR"


class ConfigManager:
    """Менеджер конфигурации."""

    # Директория для хранения конфигурации
    CONFIG_DIR_NAME = ".streammark"
    CONFIG_FILE_NAME = "config.json"

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Инициализация менеджера конфигурации.

        Args:
            config_dir: Путь к директории конфигурации.
                        По умолчанию $STREAMMARK_CONFIG_DIR или ~/.streammark/
        """
        if config_dir is None:
            env_dir = os.environ.get(CONFIG_DIR_ENV)
            if env_dir:
                self.config_dir = Path(env_dir)
            else:
                self.config_dir = Path.home() / self.CONFIG_DIR_NAME
        else:
            self.config_dir = Path(config_dir)

        self.config_file = self.config_dir / self.CONFIG_FILE_NAME
        self._config: Optional[RenderConfig] = None

    def _ensure_config_dir(self) -> None:
        """Создать директорию конфигурации если не существует."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> RenderConfig:
        """
        Загрузить конфигурацию из файла.

        Returns:
            Конфигурация; настройки по умолчанию, если файла нет или он повреждён
        """
        if self._config is not None:
            return self._config

        if not self.config_file.exists():
            self._config = RenderConfig()
            return self._config

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._config = RenderConfig(**data)
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            # Поврежденный файл - используем настройки по умолчанию
            logger.warning(f"Config file {self.config_file} is invalid, using defaults: {e}")
            self._config = RenderConfig()

        return self._config

    def save(self, config: Optional[RenderConfig] = None) -> None:
        """
        Сохранить конфигурацию в файл.

        Args:
            config: Конфигурация для сохранения.
                   Если не указана, сохраняет текущую.
        """
        if config is not None:
            self._config = config

        if self._config is None:
            return

        self._ensure_config_dir()

        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(self._config.model_dump(), f, indent=2, ensure_ascii=False)

    def get_config(self) -> RenderConfig:
        """Получить текущую конфигурацию."""
        if self._config is None:
            return self.load()
        return self._config

    def as_dict(self) -> Dict[str, Any]:
        """Текущие значения всех настроек."""
        return self.get_config().model_dump()

    def set_value(self, key: str, raw_value: str) -> RenderConfig:
        """
        Установить одну настройку из строкового значения (из CLI).

        Args:
            key: Имя настройки (page_title, standalone, stylesheet, chunk_size, stream_delay)
            raw_value: Значение; "none" сбрасывает stylesheet

        Returns:
            Обновлённая конфигурация

        Raises:
            ConfigError: неизвестный ключ или недопустимое значение
        """
        if key not in RenderConfig.model_fields:
            available = ", ".join(RenderConfig.model_fields)
            raise ConfigError(f"Неизвестная настройка '{key}'. Доступные: {available}", key=key)

        data = self.as_dict()
        value: Any = raw_value
        if key == "stylesheet" and raw_value.lower() in ("", "none"):
            value = None
        data[key] = value

        try:
            config = RenderConfig(**data)
        except ValidationError as e:
            raise ConfigError(
                f"Недопустимое значение для '{key}': {raw_value}",
                key=key,
                details={"errors": e.errors()}
            ) from e

        self.save(config)
        logger.info(f"Config value updated: {key}={value!r}")
        return config

    def reset(self) -> None:
        """Сбросить настройки к значениям по умолчанию."""
        self.save(RenderConfig())

    def load_stylesheet(self) -> Optional[str]:
        """
        Прочитать пользовательский CSS.

        Returns:
            Текст CSS или None, если используется встроенный

        Raises:
            ConfigError: файл стилей не удалось прочитать
        """
        path = self.get_config().stylesheet
        if not path:
            return None

        try:
            return Path(path).expanduser().read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Не удалось прочитать файл стилей: {path}", key="stylesheet") from e


# Глобальный экземпляр менеджера конфигурации
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """
    Получить глобальный экземпляр менеджера конфигурации.

    Args:
        config_dir: Путь к директории конфигурации

    Returns:
        ConfigManager
    """
    global _config_manager

    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)

    return _config_manager
