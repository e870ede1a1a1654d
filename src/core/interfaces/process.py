"""Contrato para lanzar el binario.

Por qué Protocol:
- El Bridge no depende de `asyncio.create_subprocess_exec` directamente.
- Los tests envuelven el spawner real para contar invocaciones.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class ProcessSpawner(Protocol):
    """Lanza un único proceso con stdout/stderr en pipe.

    Reglas de diseño:
    - `stdin` es pipe solo si `with_stdin` es True (si no, DEVNULL).
    - Errores del sistema operativo se propagan como `OSError`.
    """

    async def __call__(
        self,
        program: Path,
        args: Sequence[str],
        *,
        env: dict[str, str],
        with_stdin: bool,
    ) -> asyncio.subprocess.Process:
        ...
