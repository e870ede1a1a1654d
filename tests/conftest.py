"""tests/conftest.py — Shared fixtures for the qrimzn test suite."""
from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

SRC_DIR = str(Path(__file__).resolve().parent.parent / "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from adapters.bridge import spawn_process  # noqa: E402
from core.config import AppSettings, resolve_binary_path  # noqa: E402


class CountingSpawner:
    """Wraps the real spawner and counts how many processes were started."""

    def __init__(self):
        self.calls = 0
        self.seen_args = []

    async def __call__(self, program, args, *, env, with_stdin):
        self.calls += 1
        self.seen_args.append(list(args))
        return await spawn_process(program, args, env=env, with_stdin=with_stdin)


@pytest.fixture
def bin_dir(tmp_path):
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def settings(bin_dir):
    return AppSettings(bin_dir=bin_dir, release_version="1.2.3")


@pytest.fixture
def spawner():
    return CountingSpawner()


@pytest.fixture
def write_stub(settings):
    """Install a Python script as the qrimzn binary; returns its path."""

    if sys.platform.startswith("win"):
        pytest.skip("stub executables rely on a POSIX shebang")

    def _write(body: str, *, mode: int = 0o755) -> Path:
        path = resolve_binary_path(settings)
        source = f"#!{sys.executable}\nimport os, sys, time\n" + textwrap.dedent(body)
        path.write_text(source, encoding="utf-8")
        path.chmod(mode)
        return path

    return _write


ECHO_STUB = """
data = sys.stdin.buffer.read()
sys.stdout.buffer.write(data)
sys.stdout.buffer.flush()
"""

ARGS_STUB = """
sys.stdout.write("\\n".join(sys.argv[1:]))
"""
