"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("qrimzn", style="bold cyan")
    subtitle = Text("Resize • QR codes • prebuilt binary bridge", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_outputs_table(paths: Sequence[Path]) -> Table:
    """Tabla de ficheros generados por un batch."""

    table = Table(title="Generated images")
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Size", style="white", justify="right")
    for path in paths:
        size = path.stat().st_size if path.exists() else 0
        table.add_row(str(path), f"{size:,} B")
    return table


def build_doctor_table() -> Table:
    table = Table(title="qrimzn Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
