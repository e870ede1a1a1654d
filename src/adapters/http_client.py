"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers del instalador.
- Facilita testeo: se puede inyectar un `transport` (p.ej. `httpx.MockTransport`).
- Las redirecciones NO las sigue httpx: el instalador las resuelve con un
  límite explícito de saltos.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` para descargar releases."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/octet-stream, */*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.download_timeout_seconds),
        follow_redirects=False,
        headers=headers,
        transport=transport,
    )
