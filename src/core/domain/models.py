"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- La validación de parámetros ocurre antes de lanzar ningún proceso.
- Las peticiones son inmutables: una petición = una invocación del binario.

Nota:
- Estos modelos describen *qué* se le pide al binario, no *cómo* se invoca.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator
from pydantic.config import ConfigDict

from core.domain.errors import InvalidArgument


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "request"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


class _OperationBase(BaseModel, ABC):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def create(cls, **data: Any):
        """Construye la petición traduciendo errores de validación a `InvalidArgument`."""

        try:
            return cls(**data)
        except ValidationError as exc:
            raise InvalidArgument(_summarize(exc)) from exc

    @abstractmethod
    def to_args(self) -> list[str]:
        """Flags de línea de comandos para el binario."""

    @property
    def stdin_payload(self) -> bytes | None:
        return None


class ResizeRequest(_OperationBase):
    """Redimensiona una imagen (bytes crudos por stdin) a un ancho dado."""

    kind: Literal["resize"] = "resize"
    width: int = Field(
        ...,
        gt=0,
        description="Ancho objetivo en píxeles (el binario no amplía imágenes).",
    )
    payload: bytes = Field(
        ...,
        min_length=1,
        strict=True,
        repr=False,
        description="Imagen original (JPEG, PNG, GIF, BMP, TIFF o WebP).",
    )

    def to_args(self) -> list[str]:
        return ["--type", "resize", "--width", str(self.width)]

    @property
    def stdin_payload(self) -> bytes | None:
        return self.payload


class QrCodeRequest(_OperationBase):
    """Genera un QR con una etiqueta de texto debajo."""

    kind: Literal["qrcode"] = "qrcode"
    content: str = Field(
        ...,
        min_length=1,
        description="Contenido codificado en el QR (típicamente una URL).",
    )
    code: str = Field(
        ...,
        min_length=1,
        description="Etiqueta impresa bajo el QR.",
    )

    @field_validator("content", "code")
    @classmethod
    def _reject_nul(cls, value: str) -> str:
        # Los argumentos de proceso no pueden contener NUL.
        if "\x00" in value:
            raise ValueError("must not contain NUL characters")
        return value

    def to_args(self) -> list[str]:
        return ["--type", "qrcode", "--content", self.content, "--code", self.code]


OperationRequest = Annotated[
    Union[ResizeRequest, QrCodeRequest],
    Field(discriminator="kind"),
]

_REQUEST_ADAPTER: TypeAdapter[OperationRequest] = TypeAdapter(OperationRequest)


def parse_request(data: Mapping[str, Any]) -> ResizeRequest | QrCodeRequest:
    """Valida un mapping y devuelve la variante correspondiente a `kind`."""

    try:
        return _REQUEST_ADAPTER.validate_python(dict(data))
    except ValidationError as exc:
        raise InvalidArgument(_summarize(exc)) from exc


class ProcessEnvironment(BaseModel):
    """Entorno explícito por llamada para el proceso hijo.

    Por qué no `os.environ`:
    - Llamadas concurrentes no se pisan la configuración entre sí.
    """

    model_config = ConfigDict(frozen=True)

    gogc: str = "25"
    gomemlimit: str = "200MiB"
    gomaxprocs: str = "1"
    extra: dict[str, str] = Field(default_factory=dict)

    def build(self, base: Mapping[str, str] | None = None) -> dict[str, str]:
        env = dict(os.environ if base is None else base)
        env.update(
            {
                "GOGC": self.gogc,
                "GOMEMLIMIT": self.gomemlimit,
                "GOMAXPROCS": self.gomaxprocs,
            }
        )
        env.update(self.extra)
        return env


class ReleaseTarget(BaseModel):
    """Plataforma resuelta en nomenclatura Go (`GOOS`/`GOARCH`)."""

    model_config = ConfigDict(frozen=True)

    os_name: str = Field(..., description="windows | darwin | linux")
    arch: str = Field(..., description="amd64 | arm64")

    @property
    def is_windows(self) -> bool:
        return self.os_name == "windows"

    @property
    def binary_name(self) -> str:
        return "qrimzn.exe" if self.is_windows else "qrimzn"

    @property
    def archive_ext(self) -> str:
        return "zip" if self.is_windows else "tar.gz"

    def archive_name(self, version: str) -> str:
        return f"qrimzn-v{version}-{self.os_name}-{self.arch}.{self.archive_ext}"
