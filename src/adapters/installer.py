"""Instalador del binario `qrimzn`.

Flujo:
1) Resolver plataforma/arquitectura (nomenclatura Go) y URL del release.
2) Descargar el archivo siguiendo redirecciones con un límite explícito.
3) Extraer únicamente el ejecutable en `bin_dir` y marcarlo ejecutable (POSIX).

El Bridge nunca instala: si falta el binario, falla con `BinaryNotFound`.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import IO, Iterator

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import DownloadFailed, ExtractionFailed, TooManyRedirects
from core.domain.models import ReleaseTarget
from core.platforms import detect_target, release_url

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 307, 308})


def binary_destination(settings: AppSettings, target: ReleaseTarget) -> Path:
    return settings.resolved_bin_dir() / target.binary_name


def is_installed(settings: AppSettings | None = None, *, target: ReleaseTarget | None = None) -> bool:
    settings = settings or AppSettings()
    target = target or detect_target()
    return binary_destination(settings, target).is_file()


async def open_release_stream(
    client: httpx.AsyncClient,
    url: str,
    *,
    max_redirects: int,
) -> httpx.Response:
    """Abre `url` en modo streaming siguiendo como mucho `max_redirects` saltos.

    Devuelve la respuesta 200 abierta; el caller debe cerrarla (`aclose`).
    """

    current = url
    for _ in range(max_redirects + 1):
        try:
            response = await client.send(client.build_request("GET", current), stream=True)
        except httpx.HTTPError as exc:
            raise DownloadFailed(current, str(exc) or exc.__class__.__name__) from exc

        if response.status_code in REDIRECT_STATUSES:
            location = response.headers.get("location")
            await response.aclose()
            if not location:
                raise DownloadFailed(
                    current,
                    "redirect response without location header",
                    status_code=response.status_code,
                )
            current = str(httpx.URL(current).join(location))
            logger.info("Following redirect to: %s", current)
            continue

        if response.status_code == 200:
            return response

        await response.aclose()
        raise DownloadFailed(
            current,
            f"{response.status_code} {response.reason_phrase}".strip(),
            status_code=response.status_code,
        )

    raise TooManyRedirects(url, max_redirects)


async def download_archive(
    client: httpx.AsyncClient,
    url: str,
    dest: Path,
    *,
    max_redirects: int,
) -> Path:
    response = await open_release_stream(client, url, max_redirects=max_redirects)
    try:
        with dest.open("wb") as fh:
            async for chunk in response.aiter_bytes():
                fh.write(chunk)
    except httpx.HTTPError as exc:
        raise DownloadFailed(str(response.url), str(exc) or exc.__class__.__name__) from exc
    finally:
        await response.aclose()
    return dest


def _tar_binary(archive: tarfile.TarFile, name: str) -> Iterator[IO[bytes]]:
    for member in archive.getmembers():
        if member.isfile() and PurePosixPath(member.name).name == name:
            fh = archive.extractfile(member)
            if fh is not None:
                yield fh


def _zip_binary(archive: zipfile.ZipFile, name: str) -> Iterator[IO[bytes]]:
    for info in archive.infolist():
        if not info.is_dir() and PurePosixPath(info.filename).name == name:
            yield archive.open(info)


def extract_binary(archive_path: Path, target: ReleaseTarget, dest: Path) -> Path:
    """Extrae solo el ejecutable de `archive_path` en `dest`.

    Se ignoran las rutas internas del archivo (se busca por nombre base), así
    que nada se escribe fuera de `dest.parent`.
    """

    tmp_dest = dest.with_name(dest.name + ".part")
    try:
        if target.archive_ext == "zip":
            with zipfile.ZipFile(archive_path) as zf:
                found = _copy_first(_zip_binary(zf, target.binary_name), tmp_dest)
        else:
            with tarfile.open(archive_path, "r:gz") as tf:
                found = _copy_first(_tar_binary(tf, target.binary_name), tmp_dest)
    except (tarfile.TarError, zipfile.BadZipFile, EOFError, OSError) as exc:
        tmp_dest.unlink(missing_ok=True)
        raise ExtractionFailed(archive_path, str(exc)) from exc

    if not found:
        raise ExtractionFailed(archive_path, f"{target.binary_name} not present in archive")

    os.replace(tmp_dest, dest)
    if not target.is_windows:
        dest.chmod(0o755)
    return dest


def _copy_first(candidates: Iterator[IO[bytes]], out_path: Path) -> bool:
    for src in candidates:
        with src, out_path.open("wb") as out:
            shutil.copyfileobj(src, out)
        return True
    return False


async def install_binary(
    settings: AppSettings | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    force: bool = False,
    target: ReleaseTarget | None = None,
) -> Path:
    """Garantiza que el binario existe (y es ejecutable) en la ruta esperada."""

    settings = settings or AppSettings()
    target = target or detect_target()
    dest = binary_destination(settings, target)

    if dest.is_file() and not force:
        logger.info("qrimzn already installed at %s", dest)
        return dest

    bin_dir = dest.parent
    bin_dir.mkdir(parents=True, exist_ok=True)

    url = release_url(repo=settings.release_repo, version=settings.release_version, target=target)
    archive_path = bin_dir / target.archive_name(settings.release_version.removeprefix("v"))
    logger.info("Downloading binary from %s...", url)

    owns_client = client is None
    client = client or build_async_client(settings)
    try:
        await download_archive(client, url, archive_path, max_redirects=settings.max_redirects)
        await asyncio.to_thread(extract_binary, archive_path, target, dest)
    finally:
        archive_path.unlink(missing_ok=True)
        if owns_client:
            await client.aclose()

    logger.info("Binary extracted to %s", dest)
    return dest
