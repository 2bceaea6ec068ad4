"""Tests for the scrcpy-capture command line."""

import pytest
from PIL import Image

from scrcpy_capture import cli
from scrcpy_capture.client.manager import DeviceManager
from scrcpy_capture.core.adb import CommandResult, ServerNotFoundError

from conftest import SCREEN_SIZE, FakeRunner, free_port


@pytest.fixture
def fake_manager(tmp_path, monkeypatch):
    server = tmp_path / "scrcpy-server"
    server.write_bytes(b"PK\x03\x04")
    runner = FakeRunner()
    runner.responses.update(
        {
            "version": CommandResult(success=True, output="Android Debug Bridge version 1.0.41\n"),
            "devices": CommandResult(
                success=True, output="List of devices attached\nABC123\tdevice\n"
            ),
            "shell getprop": CommandResult(success=True, output="Pixel 7\n"),
        }
    )

    def create(adb_path=None, server_path=None, config=None):
        manager = DeviceManager(adb_path="adb", server_path=str(server), config=config)
        manager.runner = runner
        return manager

    monkeypatch.setattr(cli, "DeviceManager", create)
    return runner


def _run(*args):
    return cli.main([*args, "--port", str(free_port()), "--settle-delay", "0"])


def test_list_devices(fake_manager, capsys):
    assert _run("--list") == 0
    assert capsys.readouterr().out.strip() == "ABC123\tPixel 7"


def test_single_capture(fake_manager, tmp_path, capsys):
    path = tmp_path / "shot.png"

    assert _run(str(path)) == 0

    assert capsys.readouterr().out.strip() == str(path)
    with Image.open(path) as saved:
        assert saved.size == SCREEN_SIZE


def test_capture_series(fake_manager, tmp_path):
    output = tmp_path / "shot.jpg"

    assert _run(str(output), "--count", "2") == 0

    for name in ("shot_000.jpg", "shot_001.jpg"):
        with Image.open(tmp_path / name) as saved:
            assert saved.format == "JPEG"


def test_explicit_serial(fake_manager, tmp_path):
    assert _run(str(tmp_path / "shot.png"), "-s", "DEF456") == 0
    assert all(serial == "DEF456" for serial, args in fake_manager.calls
               if args[0] == "pull")


def test_capture_failure_exit_code(fake_manager, tmp_path):
    fake_manager.fail("shell screencap")
    assert _run(str(tmp_path / "shot.png")) == 1


def test_no_devices(fake_manager, tmp_path, capsys):
    fake_manager.responses["devices"] = CommandResult(
        success=True, output="List of devices attached\n"
    )
    assert _run(str(tmp_path / "shot.png")) == 1
    assert "no connected devices" in capsys.readouterr().err


def test_adb_unavailable(fake_manager, capsys):
    fake_manager.fail("version", "No such file or directory")
    assert _run("--list") == 1
    assert "adb is not available" in capsys.readouterr().err


def test_missing_server(monkeypatch, capsys):
    def create(**kwargs):
        raise ServerNotFoundError("scrcpy-server file not found")

    monkeypatch.setattr(cli, "DeviceManager", create)
    assert _run("--list") == 1
    assert "scrcpy-server file not found" in capsys.readouterr().err


def test_port_and_settle_delay_reach_config(monkeypatch):
    seen = {}

    def create(**kwargs):
        seen.update(kwargs)
        raise ServerNotFoundError("scrcpy-server file not found")

    monkeypatch.setattr(cli, "DeviceManager", create)
    cli.main(["--list", "--port", "30000", "--settle-delay", "0.5"])

    assert seen["config"].local_port == 30000
    assert seen["config"].settle_delay == 0.5
