"""Tests for cli/main.py and cli/doctor.py (Typer commands)."""
from __future__ import annotations

import pytest
from typer.testing import CliRunner

from conftest import ARGS_STUB, ECHO_STUB

from cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _bin_dir_env(monkeypatch, bin_dir):
    monkeypatch.setenv("QRIMZN_BIN_DIR", str(bin_dir))


def test_resize_writes_output(write_stub, tmp_path):
    write_stub(ECHO_STUB)
    source = tmp_path / "photo.jpg"
    source.write_bytes(b"raw-image")

    result = runner.invoke(app, ["resize", str(source), "--width", "640"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "photo_640px.png").read_bytes() == b"raw-image"


def test_resize_without_binary_fails(tmp_path):
    source = tmp_path / "photo.jpg"
    source.write_bytes(b"raw-image")

    result = runner.invoke(app, ["resize", str(source), "--width", "640"])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_resize_rejects_zero_width(write_stub, tmp_path):
    write_stub(ECHO_STUB)
    source = tmp_path / "photo.jpg"
    source.write_bytes(b"raw-image")

    result = runner.invoke(app, ["resize", str(source), "--width", "0"])

    assert result.exit_code == 1
    assert not (tmp_path / "photo_0px.png").exists()


def test_resize_batch(write_stub, tmp_path):
    write_stub(ECHO_STUB)
    source = tmp_path / "photo.jpg"
    source.write_bytes(b"raw-image")
    out_dir = tmp_path / "variants"

    result = runner.invoke(
        app,
        ["resize-batch", str(source), "-w", "100", "-w", "200", "--output-dir", str(out_dir)],
    )

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in out_dir.iterdir()) == ["resized_100px.png", "resized_200px.png"]


def test_qrcode(write_stub, tmp_path):
    write_stub(ARGS_STUB)
    out = tmp_path / "qr.png"

    result = runner.invoke(app, ["qrcode", "--content", "https://x", "--code", "K1", "--output", str(out)])

    assert result.exit_code == 0, result.output
    assert out.read_text().split("\n") == ["--type", "qrcode", "--content", "https://x", "--code", "K1"]


def test_doctor_reports_missing_binary():
    result = runner.invoke(app, ["doctor", "run"])
    assert result.exit_code == 1
    assert "Binary" in result.output
