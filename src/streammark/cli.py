"""
CLI интерфейс для streammark.

Использование:
    streammark render answer.md -o answer.html
    streammark render - --page < answer.md
    streammark stream answer.md --chunk-size 8
    streammark config set page_title "Ответ модели"
"""

import sys
import os
import time
import logging
from pathlib import Path
from typing import Optional

# Windows кодировка
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.panel import Panel
from rich.live import Live
from rich.syntax import Syntax

from streammark.config import CONFIG_DIR_ENV, ConfigManager, get_config_manager
from streammark.exceptions import StreamMarkError, SourceError
from streammark.markdown_formatter import markdown_to_html
from streammark.page import render_page
from streammark.streaming import StreamRenderer, split_chunks

console = Console(stderr=True)

# Сколько последних символов HTML показывать в live-панели
_LIVE_PREVIEW_CHARS = 1200


def error(message: str) -> None:
    """Вывести ошибку."""
    console.print(f"[red]✗[/red] {message}")


def success(message: str) -> None:
    """Вывести успех."""
    console.print(f"[green]✓[/green] {message}")


def info(message: str) -> None:
    """Вывести информацию."""
    console.print(f"[blue]ℹ[/blue] {message}")


def read_source(source: str) -> str:
    """
    Прочитать markdown из файла или stdin ("-").

    Raises:
        SourceError: файл не найден или не в UTF-8
    """
    try:
        with click.open_file(source, encoding="utf-8") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise SourceError(f"Файл не в кодировке UTF-8: {source}", path=source) from e
    except OSError as e:
        raise SourceError(f"Не удалось прочитать {source}: {e.strerror or e}", path=source) from e


def write_output(html: str, output: Optional[str]) -> None:
    """Записать HTML в файл или в stdout."""
    if output:
        Path(output).write_text(html, encoding="utf-8")
        success(f"Сохранено: [bold]{output}[/bold]")
    else:
        click.echo(html, nl=False)


def _get_config(ctx) -> ConfigManager:
    return get_config_manager(ctx.obj.get("config_dir"))


@click.group()
@click.option(
    "--config-dir",
    envvar=CONFIG_DIR_ENV,
    type=click.Path(file_okay=False),
    help="Директория конфигурации (по умолчанию: ~/.streammark)"
)
@click.option("--verbose", "-v", is_flag=True, help="Подробный лог")
@click.pass_context
def main(ctx, config_dir: Optional[str], verbose: bool):
    """streammark - конвертер markdown в безопасный HTML для стриминговых ответов."""
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = Path(config_dir) if config_dir else None

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


# ===== RENDER COMMANDS =====

@main.command()
@click.argument("source")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Файл для HTML (по умолчанию stdout)")
@click.option("--page/--fragment", default=None, help="Полная HTML-страница или только фрагмент")
@click.option("--title", "-t", help="Заголовок страницы")
@click.pass_context
def render(ctx, source: str, output: Optional[str], page: Optional[bool], title: Optional[str]):
    """Сконвертировать markdown-файл (или stdin: -) в HTML."""
    try:
        config = _get_config(ctx)
        settings = config.get_config()

        html = markdown_to_html(read_source(source))

        standalone = settings.standalone if page is None else page
        if standalone:
            html = render_page(
                html,
                title=title or settings.page_title,
                stylesheet=config.load_stylesheet()
            )

        write_output(html, output)

    except StreamMarkError as e:
        error(e.message)
        sys.exit(1)
    except OSError as e:
        error(f"Ошибка записи: {e}")
        sys.exit(1)


@main.command()
@click.argument("source")
@click.option("--chunk-size", "-n", type=click.IntRange(min=1), help="Символов в одном фрагменте")
@click.option("--delay", "-d", type=click.FloatRange(min=0), help="Пауза между фрагментами (сек)")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Файл для итогового HTML")
@click.pass_context
def stream(ctx, source: str, chunk_size: Optional[int], delay: Optional[float], output: Optional[str]):
    """Эмулировать посимвольную доставку и показать промежуточный HTML."""
    try:
        settings = _get_config(ctx).get_config()
        size = chunk_size or settings.chunk_size
        pause = settings.stream_delay if delay is None else delay

        text = read_source(source)
        renderer = StreamRenderer()

        with Live(console=console, refresh_per_second=12, transient=True) as live:
            for chunk in split_chunks(text, size):
                html = renderer.feed(chunk)
                live.update(Panel(
                    Syntax(html[-_LIVE_PREVIEW_CHARS:], "html", word_wrap=True),
                    title=f"Фрагмент {renderer.chunks_received}",
                    border_style="cyan"
                ))
                if pause:
                    time.sleep(pause)

        info(f"Фрагментов: {renderer.chunks_received}, символов: {len(renderer.text)}")

        if output:
            write_output(renderer.html, output)
        else:
            console.print(Panel(
                Syntax(renderer.html, "html", word_wrap=True),
                title="Итоговый HTML",
                border_style="green"
            ))

    except StreamMarkError as e:
        error(e.message)
        sys.exit(1)
    except OSError as e:
        error(f"Ошибка записи: {e}")
        sys.exit(1)


# ===== CONFIG COMMANDS =====

@main.group("config")
def config_group():
    """Управление настройками."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx):
    """Показать текущие настройки."""
    config = _get_config(ctx)

    table = Table(title="Настройки", show_header=False)
    table.add_column("Параметр", style="cyan")
    table.add_column("Значение")

    for key, value in config.as_dict().items():
        table.add_row(key, "-" if value is None else str(value))

    console.print(table)
    info(f"Файл: {config.config_file}")


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx, key: str, value: str):
    """Изменить настройку."""
    try:
        updated = _get_config(ctx).set_value(key, value)
        success(f"{key} = [bold]{getattr(updated, key)}[/bold]")
    except StreamMarkError as e:
        error(e.message)
        sys.exit(1)


@config_group.command("reset")
@click.pass_context
def config_reset(ctx):
    """Сбросить настройки к значениям по умолчанию."""
    _get_config(ctx).reset()
    success("Настройки сброшены")


if __name__ == "__main__":
    main()
