"""Doctor command for environment diagnostics."""

from __future__ import annotations

import os
import sys

import typer
from rich.console import Console

from cli.ui_components import build_doctor_table
from core.config import AppSettings, resolve_binary_path
from core.domain.errors import UnsupportedPlatform
from core.platforms import detect_target, release_url

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


@app.command()
def run() -> None:
    """Check platform support and the installed binary."""

    settings = AppSettings()
    table = build_doctor_table()
    ok = True

    try:
        target = detect_target()
        table.add_row("Platform", "OK", f"{target.os_name}/{target.arch}")
        table.add_row(
            "Release URL",
            "OK",
            release_url(repo=settings.release_repo, version=settings.release_version, target=target),
        )
    except UnsupportedPlatform as exc:
        ok = False
        table.add_row("Platform", "FAIL", str(exc))

    binary = resolve_binary_path(settings)
    if binary.is_file():
        table.add_row("Binary", "OK", str(binary))
        if sys.platform.startswith("win") or os.access(binary, os.X_OK):
            table.add_row("Executable", "OK", "mode allows execution")
        else:
            ok = False
            table.add_row("Executable", "FAIL", "missing execute permission (chmod 755)")
    else:
        ok = False
        table.add_row("Binary", "MISSING", f"{binary} -> run `qrimzn install`")

    table.add_row("Go runtime env", "OK", f"GOGC={settings.gogc} GOMEMLIMIT={settings.gomemlimit} GOMAXPROCS={settings.gomaxprocs}")

    _console.print(table)
    if not ok:
        raise typer.Exit(code=1)
