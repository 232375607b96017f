from __future__ import annotations
import json
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
from datetime import datetime, timezone

import typer
from rich import print
from rich.markup import escape

# --- сначала пакетные импорты (когда модуль загружается как uf2_tool.main),
#     затем fallback для запуска файла напрямую из папки uf2_tool ---
try:
    from .config import APP_NAME, LOG_FILE
    from .firmware.io import build_uf2
    from .firmware.map import FAMILIES, get_format
except ImportError:
    from config import APP_NAME, LOG_FILE
    from firmware.io import build_uf2
    from firmware.map import FAMILIES, get_format

app = typer.Typer(add_completion=False, help="UF2 CLI: сборка boot2 + программы в UF2 для RP2040.")

def _log_event(kind: str, payload: dict):
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    record = {
        "ts": datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z",
        "kind": kind,
        "payload": payload,
    }
    with open(LOG_FILE, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")

def _version_callback(value: bool):
    if not value:
        return
    try:
        ver = pkg_version("uf2-tool")
    except PackageNotFoundError:
        # запуск из исходников без установки пакета
        ver = "unknown"
    print(f"{APP_NAME} {ver}")
    raise typer.Exit()

@app.callback()
def main(
    version: bool = typer.Option(False, "--version", "-V", callback=_version_callback,
                                 is_eager=True, help="Показать версию и выйти"),
):
    """UF2 CLI: сборка boot2 + программы в UF2 для RP2040."""

@app.command()
def families():
    """Показать поддерживаемые семейства (family ID и базовый адрес)."""
    for fam in FAMILIES.values():
        print(f"[cyan]{fam.name}[/] - family 0x{fam.family_id:08X}, base 0x{fam.base_address:08X}")

@app.command()
def build(
    bootrom: Path = typer.Option(..., "--bootrom", "-b",
                                 help="boot2 для прошивки в pico, не больше 252 байт"),
    progdata: Path = typer.Option(..., "--progdata", "-p",
                                  help="Программа, кладётся в память с выравниванием 256 байт"),
    output: Path = typer.Option(..., "--output", "-o", help="Куда сохранить .uf2"),
    family: str = typer.Option("rp2040", help="Семейство МК (см. команду families)"),
):
    """
    Собрать UF2: первый блок - boot2 с CRC32, дальше программа блоками по 256 байт.
    """
    for path in (bootrom, progdata):
        if not path.exists():
            print(f"[red]Файл не найден:[/] {escape(str(path))}")
            raise typer.Exit(code=2)

    try:
        fmt = get_format(family)
    except KeyError as e:
        print(f"[red]{escape(e.args[0])}[/]")
        raise typer.Exit(code=2)

    try:
        result = build_uf2(bootrom, progdata, output, fmt)
    except OSError as e:
        _log_event("build_error", {"bootrom": str(bootrom), "progdata": str(progdata),
                                   "output": str(output), "error": str(e)})
        print(f"[red]Ошибка ввода-вывода:[/] {escape(str(e))}")
        raise typer.Exit(code=1)

    _log_event("build_uf2", result)
    for warning in result["warnings"]:
        print(f"[yellow]Внимание:[/] {escape(warning)}")
    print(f"[green]{result['blocks']} blocks generated[/] -> {escape(result['out'])} ({result['bytes']} байт, CRC32 boot2 {result['crc32']})")
    print(f"[dim]Логи записаны в: {escape(str(LOG_FILE))}[/]")


if __name__ == "__main__":
    app()
