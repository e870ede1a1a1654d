"""CLI principal (Typer).

Por qué Typer:
- Comandos tipados sin boilerplate de argparse.
- Se integra con Rich para salida legible (tablas, colores, logging).
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Coroutine, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.bridge import QrimznBridge
from adapters.installer import install_binary
from cli import doctor
from cli.ui_components import build_outputs_table, print_banner
from core.config import AppSettings
from core.domain.errors import QrimznError
from core.services.imaging import DEFAULT_WIDTHS, write_qr_code, write_resized_variants

T = TypeVar("T")

app = typer.Typer(
    no_args_is_help=True,
    help="Image resizing and QR generation through the prebuilt qrimzn binary.",
)
app.add_typer(doctor.app, name="doctor")

_console = Console()


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=False, show_path=False)],
        force=True,
    )


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Ejecuta la corrutina y traduce errores del dominio a exit code 1."""

    try:
        return asyncio.run(coro)
    except QrimznError as exc:
        _console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    banner: bool = typer.Option(False, "--banner", help="Show the banner before running."),
) -> None:
    configure_logging(verbose)
    if banner:
        print_banner(_console)


@app.command()
def install(
    force: bool = typer.Option(False, "--force", help="Re-download even if already installed."),
    version: Optional[str] = typer.Option(None, "--version", help="Release version to download."),
) -> None:
    """Download and install the qrimzn binary for this platform."""

    settings = AppSettings()
    if version:
        settings = settings.model_copy(update={"release_version": version})
    path = _run(install_binary(settings, force=force))
    _console.print(f"[green]qrimzn ready:[/green] {path}")


@app.command()
def resize(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Image to resize."),
    width: int = typer.Option(..., "--width", "-w", help="Target width in pixels."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output PNG path."),
) -> None:
    """Resize a single image to the given width (PNG output)."""

    bridge = QrimznBridge(AppSettings())
    out_path = output or input_path.with_name(f"{input_path.stem}_{width}px.png")
    data = _run(bridge.resize(input_path.read_bytes(), width))
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(data)
    _console.print(f"[green]Saved:[/green] {out_path} ({len(data)} bytes)")


@app.command(name="resize-batch")
def resize_batch(
    input_path: Path = typer.Argument(..., help="Image to resize."),
    widths: List[int] = typer.Option(list(DEFAULT_WIDTHS), "--width", "-w", help="Target width (repeatable)."),
    output_dir: Path = typer.Option(Path("output"), "--output-dir", "-d", help="Directory for the variants."),
) -> None:
    """Resize one image to several widths (`resized_<w>px.png`)."""

    settings = AppSettings()
    bridge = QrimznBridge(settings)
    paths = _run(
        write_resized_variants(
            bridge,
            input_path,
            output_dir,
            widths,
            max_concurrency=settings.max_concurrency,
        )
    )
    _console.print(build_outputs_table(paths))


@app.command()
def qrcode(
    content: str = typer.Option(..., "--content", "-c", help="QR content (typically a URL)."),
    code: str = typer.Option(..., "--code", "-k", help="Label printed under the QR."),
    output: Path = typer.Option(Path("qr.png"), "--output", "-o", help="Output PNG path."),
) -> None:
    """Generate a labelled QR code PNG."""

    bridge = QrimznBridge(AppSettings())
    path = _run(write_qr_code(bridge, content, code, output))
    _console.print(f"[green]Saved:[/green] {path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
