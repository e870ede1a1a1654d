"""Image workflows built on top of the subprocess bridge.

The bridge itself has no admission control; batch helpers here cap the
number of simultaneous processes with a semaphore so callers don't spawn
one process per width without limit.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Sequence

from adapters.bridge import QrimznBridge
from core.domain.errors import InvalidArgument
from core.domain.models import ProcessEnvironment

logger = logging.getLogger(__name__)

DEFAULT_WIDTHS: tuple[int, ...] = (400, 800, 1200)


def resized_filename(width: int) -> str:
    return f"resized_{width}px.png"


async def resize_to_widths(
    bridge: QrimznBridge,
    payload: bytes,
    widths: Sequence[int],
    *,
    max_concurrency: int = 4,
    env: ProcessEnvironment | None = None,
) -> list[bytes]:
    """Resize one image to several widths; results keep the order of `widths`."""

    if not widths:
        raise InvalidArgument("at least one width is required")
    if max_concurrency < 1:
        raise InvalidArgument("max_concurrency must be >= 1")

    semaphore = asyncio.Semaphore(max_concurrency)

    async def _one(width: int) -> bytes:
        async with semaphore:
            logger.info("Resizing image to width: %dpx", width)
            return await bridge.resize(payload, width, env=env)

    return list(await asyncio.gather(*(_one(w) for w in widths)))


async def write_resized_variants(
    bridge: QrimznBridge,
    input_path: Path,
    output_dir: Path,
    widths: Sequence[int] = DEFAULT_WIDTHS,
    *,
    max_concurrency: int = 4,
    env: ProcessEnvironment | None = None,
) -> list[Path]:
    """Write `resized_<w>px.png` for each width into `output_dir`."""

    if not input_path.is_file():
        raise InvalidArgument(f"Input image not found at: {input_path}")

    payload = input_path.read_bytes()
    results = await resize_to_widths(
        bridge,
        payload,
        widths,
        max_concurrency=max_concurrency,
        env=env,
    )

    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for width, data in zip(widths, results):
        out_path = output_dir / resized_filename(width)
        out_path.write_bytes(data)
        logger.info("Saved resized image to: %s", out_path)
        written.append(out_path)
    return written


async def write_qr_code(
    bridge: QrimznBridge,
    content: str,
    code: str,
    output_path: Path,
    *,
    env: ProcessEnvironment | None = None,
) -> Path:
    data = await bridge.qrcode(content, code, env=env)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    return output_path
