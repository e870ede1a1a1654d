"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Installer y Bridge resuelven la ruta del binario con la misma regla.
"""

from __future__ import annotations

import os
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BINARY_BASENAME = "qrimzn"
DEFAULT_RELEASE_VERSION = "0.1.0"


def package_version() -> str:
    """Versión instalada de la distribución (o la de desarrollo)."""

    try:
        return version("qrimzn")
    except PackageNotFoundError:
        return DEFAULT_RELEASE_VERSION


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "qrimzn"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "qrimzn"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "qrimzn"
    return Path.home() / ".config" / "qrimzn"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _project_root() -> Path:
    # core/config.py -> core -> src -> <project_root>
    return Path(__file__).resolve().parents[2]


def binary_name(*, windows: bool | None = None) -> str:
    if windows is None:
        windows = sys.platform.startswith("win")
    return f"{BINARY_BASENAME}.exe" if windows else BINARY_BASENAME


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/installer/bridge.
    """

    model_config = SettingsConfigDict(
        env_prefix="QRIMZN_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    bin_dir: Path | None = Field(
        default=None,
        description="Directorio donde vive el binario (por defecto <project_root>/bin).",
    )
    release_repo: str = Field(
        default="outranker/qrimzn",
        min_length=3,
        description="Repositorio GitHub (owner/name) que publica los releases.",
    )
    release_version: str = Field(
        default_factory=package_version,
        min_length=1,
        description="Versión semántica del release a descargar (sin la 'v').",
    )
    download_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout de la descarga del archivo de release (segundos).",
    )
    max_redirects: int = Field(
        default=5,
        ge=0,
        le=20,
        description="Saltos HTTP de redirección permitidos durante la descarga.",
    )
    user_agent: str = Field(
        default_factory=lambda: f"qrimzn-py/{package_version()}",
        min_length=1,
        description="User-Agent para la descarga.",
    )

    # Tuning del runtime Go del binario (por llamada, nunca global).
    gogc: str = Field(default="25", min_length=1)
    gomemlimit: str = Field(default="200MiB", min_length=1)
    gomaxprocs: str = Field(default="1", min_length=1)

    max_concurrency: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Procesos simultáneos máximos en operaciones batch.",
    )

    def resolved_bin_dir(self) -> Path:
        return self.bin_dir if self.bin_dir is not None else _project_root() / "bin"


def resolve_binary_path(settings: AppSettings | None = None, *, windows: bool | None = None) -> Path:
    """Ruta fija y predecible del ejecutable instalado."""

    settings = settings or AppSettings()
    return settings.resolved_bin_dir() / binary_name(windows=windows)
