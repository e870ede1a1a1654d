"""Platform/architecture mapping for release archives.

Release assets follow Go naming (`GOOS`/`GOARCH`), so the host values
reported by `platform` are translated before building the download URL.
"""

from __future__ import annotations

import platform

from core.domain.errors import UnsupportedPlatform
from core.domain.models import ReleaseTarget

RELEASE_URL_TEMPLATE = "https://github.com/{repo}/releases/download/v{version}/{archive}"

_OS_MAP: dict[str, str] = {
    "windows": "windows",
    "win32": "windows",
    "darwin": "darwin",
    "linux": "linux",
}

_ARCH_MAP: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

SUPPORTED_TARGETS: frozenset[tuple[str, str]] = frozenset(
    {
        ("linux", "amd64"),
        ("linux", "arm64"),
        ("darwin", "amd64"),
        ("darwin", "arm64"),
        ("windows", "amd64"),
        ("windows", "arm64"),
    }
)


def detect_target(system: str | None = None, machine: str | None = None) -> ReleaseTarget:
    """Resolve the host (or the given) platform to a release target."""

    system = system if system is not None else platform.system()
    machine = machine if machine is not None else platform.machine()

    os_name = _OS_MAP.get(system.strip().lower())
    arch = _ARCH_MAP.get(machine.strip().lower())
    if os_name is None or arch is None or (os_name, arch) not in SUPPORTED_TARGETS:
        raise UnsupportedPlatform(system, machine)
    return ReleaseTarget(os_name=os_name, arch=arch)


def release_url(*, repo: str, version: str, target: ReleaseTarget) -> str:
    version = version.removeprefix("v")
    return RELEASE_URL_TEMPLATE.format(
        repo=repo,
        version=version,
        archive=target.archive_name(version),
    )
