"""Tests for core/domain/models.py and core/platforms.py."""
from __future__ import annotations

import pytest

from core.domain.errors import InvalidArgument, UnsupportedPlatform
from core.domain.models import QrCodeRequest, ReleaseTarget, ResizeRequest, parse_request
from core.platforms import detect_target, release_url


class TestRequests:
    def test_parse_dispatches_on_kind(self):
        resize = parse_request({"kind": "resize", "width": 800, "payload": b"img"})
        qr = parse_request({"kind": "qrcode", "content": "https://x", "code": "ABC"})
        assert isinstance(resize, ResizeRequest)
        assert isinstance(qr, QrCodeRequest)
        assert resize.stdin_payload == b"img"
        assert qr.stdin_payload is None

    def test_unknown_kind(self):
        with pytest.raises(InvalidArgument):
            parse_request({"kind": "rotate", "angle": 90})

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            ResizeRequest.create(payload=b"img", width=0)

    def test_extra_fields_rejected(self):
        with pytest.raises(InvalidArgument):
            QrCodeRequest.create(content="a", code="b", width=3)

    def test_requests_are_frozen(self):
        request = ResizeRequest.create(payload=b"img", width=10)
        with pytest.raises(Exception):
            request.width = 20

    def test_payload_hidden_from_repr(self):
        request = ResizeRequest.create(payload=b"secret-bytes", width=10)
        assert "secret-bytes" not in repr(request)


class TestPlatforms:
    @pytest.mark.parametrize(
        "system,machine,expected",
        [
            ("Linux", "x86_64", ("linux", "amd64")),
            ("Linux", "aarch64", ("linux", "arm64")),
            ("Darwin", "arm64", ("darwin", "arm64")),
            ("Darwin", "x86_64", ("darwin", "amd64")),
            ("Windows", "AMD64", ("windows", "amd64")),
            ("win32", "x64", ("windows", "amd64")),
        ],
    )
    def test_mapping(self, system, machine, expected):
        target = detect_target(system, machine)
        assert (target.os_name, target.arch) == expected

    @pytest.mark.parametrize("system,machine", [("Linux", "i686"), ("FreeBSD", "amd64"), ("Linux", "armv7l")])
    def test_unsupported(self, system, machine):
        with pytest.raises(UnsupportedPlatform):
            detect_target(system, machine)

    def test_release_url_posix(self):
        target = ReleaseTarget(os_name="linux", arch="amd64")
        assert release_url(repo="outranker/qrimzn", version="1.2.3", target=target) == (
            "https://github.com/outranker/qrimzn/releases/download/v1.2.3/"
            "qrimzn-v1.2.3-linux-amd64.tar.gz"
        )

    def test_release_url_windows_accepts_v_prefix(self):
        target = ReleaseTarget(os_name="windows", arch="amd64")
        url = release_url(repo="outranker/qrimzn", version="v2.0.0", target=target)
        assert url.endswith("/v2.0.0/qrimzn-v2.0.0-windows-amd64.zip")
        assert target.binary_name == "qrimzn.exe"


class TestStrictness:
    def test_text_payload_rejected(self):
        with pytest.raises(InvalidArgument):
            ResizeRequest.create(payload="text", width=10)

    def test_nul_in_qr_fields_rejected(self):
        with pytest.raises(InvalidArgument):
            QrCodeRequest.create(content="a\x00b", code="K")

    def test_base_request_is_abstract(self):
        base = ResizeRequest.__mro__[1]
        with pytest.raises(TypeError):
            base()
