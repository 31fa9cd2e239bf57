from __future__ import annotations

import json
from pathlib import Path

import pytest

from streammark import ConfigError, RenderConfig
from streammark.config import CONFIG_DIR_ENV, ConfigManager, get_config_manager


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path)

    assert manager.load() == RenderConfig()
    assert not manager.config_file.exists()


def test_set_value_persists(tmp_path: Path) -> None:
    ConfigManager(tmp_path).set_value("chunk_size", "8")

    data = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
    assert data["chunk_size"] == 8
    assert ConfigManager(tmp_path).get_config().chunk_size == 8


def test_set_value_coerces_types(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path)

    assert manager.set_value("standalone", "true").standalone is True
    assert manager.set_value("stream_delay", "0.5").stream_delay == 0.5
    assert manager.set_value("page_title", "Ответ").page_title == "Ответ"


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as exc_info:
        ConfigManager(tmp_path).set_value("colour", "red")

    assert exc_info.value.key == "colour"


@pytest.mark.parametrize("key,value", [("chunk_size", "0"), ("chunk_size", "many"), ("stream_delay", "-1")])
def test_invalid_value_is_rejected(tmp_path: Path, key: str, value: str) -> None:
    manager = ConfigManager(tmp_path)

    with pytest.raises(ConfigError):
        manager.set_value(key, value)
    assert manager.get_config() == RenderConfig()


def test_corrupt_file_falls_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
    assert ConfigManager(tmp_path).load() == RenderConfig()


def test_invalid_values_in_file_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text('{"chunk_size": -3}', encoding="utf-8")
    assert ConfigManager(tmp_path).load() == RenderConfig()


def test_reset(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path)
    manager.set_value("chunk_size", "3")
    manager.reset()

    assert ConfigManager(tmp_path).get_config() == RenderConfig()


def test_env_var_sets_config_dir(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))
    assert ConfigManager().config_dir == tmp_path


def test_get_config_manager_recreates_for_new_dir(tmp_path: Path) -> None:
    first = get_config_manager(tmp_path / "a")
    second = get_config_manager(tmp_path / "b")

    assert first is not second
    assert get_config_manager() is second


def test_stylesheet(tmp_path: Path) -> None:
    css = tmp_path / "theme.css"
    css.write_text(".md-table { color: red; }", encoding="utf-8")
    manager = ConfigManager(tmp_path)

    assert manager.load_stylesheet() is None

    manager.set_value("stylesheet", str(css))
    assert manager.load_stylesheet() == ".md-table { color: red; }"

    manager.set_value("stylesheet", "none")
    assert manager.get_config().stylesheet is None


def test_missing_stylesheet_raises(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path)
    manager.set_value("stylesheet", str(tmp_path / "missing.css"))

    with pytest.raises(ConfigError):
        manager.load_stylesheet()
