"""Taxonomía de errores.

Por qué una jerarquía propia:
- El caller distingue problemas de configuración (`BinaryNotFound`) de
  problemas de runtime (`ProcessFailed`) sin parsear mensajes.
- Installer y Bridge comparten raíz (`QrimznError`) para que la CLI los trate igual.
"""

from __future__ import annotations

from pathlib import Path


class QrimznError(Exception):
    """Raíz de todos los errores del proyecto."""


class BridgeError(QrimznError):
    """Fallo de una invocación del binario."""


class InvalidArgument(BridgeError, ValueError):
    """Parámetros inválidos; el proceso nunca llega a lanzarse."""


class BinaryNotFound(BridgeError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"qrimzn binary not found at {path}. Run `qrimzn install` first."
        )


class SpawnFailed(BridgeError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to start {path}: {reason}")


class ProcessFailed(BridgeError):
    def __init__(self, exit_code: int, *, operation: str | None = None) -> None:
        self.exit_code = exit_code
        self.operation = operation
        label = f"qrimzn {operation}" if operation else "qrimzn"
        super().__init__(f"{label} exited with code {exit_code}")


class InstallError(QrimznError):
    """Fallo del instalador (red, plataforma, extracción)."""


class UnsupportedPlatform(InstallError):
    def __init__(self, system: str, machine: str) -> None:
        self.system = system
        self.machine = machine
        super().__init__(f"no prebuilt qrimzn binary for {system}/{machine}")


class DownloadFailed(InstallError):
    def __init__(self, url: str, reason: str, *, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(f"failed to download {url}: {reason}")


class TooManyRedirects(InstallError):
    def __init__(self, url: str, max_redirects: int) -> None:
        self.url = url
        self.max_redirects = max_redirects
        super().__init__(f"too many redirects (>{max_redirects}) while fetching {url}")


class ExtractionFailed(InstallError):
    def __init__(self, archive: Path, reason: str) -> None:
        self.archive = archive
        self.reason = reason
        super().__init__(f"failed to extract {archive.name}: {reason}")
