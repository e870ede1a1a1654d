"""Bridge de subprocesos hacia el binario `qrimzn`.

Responsabilidad:
- Traducir una petición tipada (`ResizeRequest` / `QrCodeRequest`) en una
  invocación única del binario (flags + payload opcional por stdin).
- Recoger stdout en orden de llegada y clasificar stderr.
- Mapear el código de salida a un resultado o a un error.

Sin timeout, sin reintentos y sin pool: un proceso por llamada.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import AsyncIterator, Iterable, Sequence

from core.config import AppSettings, resolve_binary_path
from core.domain.errors import BinaryNotFound, ProcessFailed, SpawnFailed
from core.domain.models import (
    ProcessEnvironment,
    QrCodeRequest,
    ResizeRequest,
)
from core.interfaces.process import ProcessSpawner

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
MAX_DIAGNOSTIC_LINE = 64 * 1024

# El binario escribe progreso/tiempos en stderr; esto es esperado.
BENIGN_DIAGNOSTIC_MARKERS: tuple[str, ...] = (
    "resizeImg",
    "Decoded image format",
    "Reading image data from stdin",
)


async def spawn_process(
    program: Path,
    args: Sequence[str],
    *,
    env: dict[str, str],
    with_stdin: bool,
) -> asyncio.subprocess.Process:
    """Spawner por defecto (`asyncio.create_subprocess_exec`, nunca shell)."""

    return await asyncio.create_subprocess_exec(
        str(program),
        *args,
        stdin=asyncio.subprocess.PIPE if with_stdin else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        env=env,
    )


class ChunkStream:
    """Secuencia perezosa de chunks de bytes: finita y no reiniciable."""

    def __init__(self, reader: asyncio.StreamReader, *, chunk_size: int = CHUNK_SIZE) -> None:
        self._reader = reader
        self._chunk_size = chunk_size
        self._consumed = False

    def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise RuntimeError("ChunkStream can only be iterated once")
        self._consumed = True
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        while True:
            chunk = await self._reader.read(self._chunk_size)
            if not chunk:
                return
            yield chunk


async def collect(chunks: ChunkStream) -> bytes:
    """Concatena los chunks en el orden exacto de llegada."""

    parts: list[bytes] = []
    async for chunk in chunks:
        parts.append(chunk)
    return b"".join(parts)


class DiagnosticFilter:
    """Clasifica líneas de stderr en esperadas (benignas) o inesperadas.

    Nota: se basa en substrings; la allowlist se mantiene tal cual para no
    cambiar qué se considera esperado.
    """

    def __init__(self, markers: Iterable[str] = BENIGN_DIAGNOSTIC_MARKERS) -> None:
        self.markers = tuple(markers)

    def is_benign(self, line: str) -> bool:
        return any(marker in line for marker in self.markers)

    def report(self, line: str) -> None:
        text = line.rstrip()
        if not text:
            return
        if self.is_benign(text):
            logger.debug("qrimzn: %s", text)
        else:
            logger.warning("qrimzn stderr: %s", text)


async def _drain_diagnostics(reader: asyncio.StreamReader, diagnostics: DiagnosticFilter) -> None:
    # Lectura por chunks: una línea sin salto mayor que el límite del
    # StreamReader no debe romper la llamada.
    pending = b""
    async for chunk in ChunkStream(reader):
        pending += chunk
        *lines, pending = pending.split(b"\n")
        for raw in lines:
            diagnostics.report(raw.decode("utf-8", errors="replace"))
        while len(pending) > MAX_DIAGNOSTIC_LINE:
            diagnostics.report(pending[:MAX_DIAGNOSTIC_LINE].decode("utf-8", errors="replace"))
            pending = pending[MAX_DIAGNOSTIC_LINE:]
    if pending:
        diagnostics.report(pending.decode("utf-8", errors="replace"))


async def _feed_stdin(writer: asyncio.StreamWriter, payload: bytes) -> None:
    try:
        writer.write(payload)
        await writer.drain()
    except (BrokenPipeError, ConnectionResetError) as exc:
        # El proceso cerró stdin antes de tiempo; el exit code decide el resultado.
        logger.debug("stdin closed early by qrimzn: %s", exc)
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except (BrokenPipeError, ConnectionResetError):
            pass


class QrimznBridge:
    """Invoca el binario instalado, una vez por petición.

    Llamadas concurrentes son independientes: cada una posee su proceso,
    sus streams y su buffer. No hay estado mutable compartido.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        spawner: ProcessSpawner | None = None,
        diagnostics: DiagnosticFilter | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._spawner: ProcessSpawner = spawner or spawn_process
        self._diagnostics = diagnostics or DiagnosticFilter()

    @property
    def binary_path(self) -> Path:
        return resolve_binary_path(self._settings)

    def default_environment(self) -> ProcessEnvironment:
        return ProcessEnvironment(
            gogc=self._settings.gogc,
            gomemlimit=self._settings.gomemlimit,
            gomaxprocs=self._settings.gomaxprocs,
        )

    async def resize(
        self,
        payload: bytes,
        width: int,
        *,
        env: ProcessEnvironment | None = None,
    ) -> bytes:
        request = ResizeRequest.create(payload=payload, width=width)
        return await self.execute(request, env=env)

    async def qrcode(
        self,
        content: str,
        code: str,
        *,
        env: ProcessEnvironment | None = None,
    ) -> bytes:
        request = QrCodeRequest.create(content=content, code=code)
        return await self.execute(request, env=env)

    async def execute(
        self,
        request: ResizeRequest | QrCodeRequest,
        *,
        env: ProcessEnvironment | None = None,
    ) -> bytes:
        binary = self.binary_path
        if not binary.is_file():
            raise BinaryNotFound(binary)

        payload = request.stdin_payload
        environment = (env or self.default_environment()).build()
        args = request.to_args()

        try:
            proc = await self._spawner(
                binary,
                args,
                env=environment,
                with_stdin=payload is not None,
            )
        except OSError as exc:
            raise SpawnFailed(binary, exc.strerror or str(exc)) from exc

        logger.debug("spawned qrimzn pid=%s args=%s", proc.pid, args)

        assert proc.stdout is not None and proc.stderr is not None
        tasks = [
            collect(ChunkStream(proc.stdout)),
            _drain_diagnostics(proc.stderr, self._diagnostics),
        ]
        if payload is not None:
            assert proc.stdin is not None
            tasks.append(_feed_stdin(proc.stdin, payload))

        try:
            output, *_ = await asyncio.gather(*tasks)
        except BaseException:
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
            await proc.wait()
            raise
        exit_code = await proc.wait()

        if exit_code != 0:
            raise ProcessFailed(exit_code, operation=request.kind)
        logger.debug("qrimzn %s produced %d bytes", request.kind, len(output))
        return output


async def resize_image(
    payload: bytes,
    width: int,
    *,
    settings: AppSettings | None = None,
    env: ProcessEnvironment | None = None,
) -> bytes:
    return await QrimznBridge(settings).resize(payload, width, env=env)


async def create_qr_code(
    content: str,
    code: str,
    *,
    settings: AppSettings | None = None,
    env: ProcessEnvironment | None = None,
) -> bytes:
    return await QrimznBridge(settings).qrcode(content, code, env=env)
