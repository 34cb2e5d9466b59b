"""Test command-line argument handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from dafit import cli
from dafit.models import DeviceDescriptor, GattCharacteristic, GattService, TransferResult


def test_normalize_argv_rewrites_key_value_tokens():
    argv = ["upload", "name=C20", "address=AA:BB", "verbose=2", "file=face.bin", "--adapter", "hci0"]
    assert cli.normalize_argv(argv) == [
        "upload",
        "--name=C20",
        "--address=AA:BB",
        "--verbosity=2",
        "face.bin",
        "--adapter",
        "hci0",
    ]


def test_normalize_argv_leaves_unknown_keys():
    assert cli.normalize_argv(["weird=1"]) == ["weird=1"]


def test_parse_args_key_value_style():
    _, args = cli.parse_args(["upload", "face.bin", "name=C20", "verbosity=1", "adapter=hci1"])
    assert args.mode == "upload"
    assert args.file == "face.bin"
    assert args.name == "C20"
    assert args.verbosity == 1
    assert args.adapter == "hci1"


def test_parse_args_file_after_options():
    _, args = cli.parse_args(["upload", "--name", "C20", "face.bin"])
    assert args.file == "face.bin"


def test_parse_args_defaults_to_help():
    _, args = cli.parse_args([])
    assert args.mode == "help"


def test_config_from_args():
    _, args = cli.parse_args(["info", "address=AA:BB", "slot=preset-6", "timeout=0"])
    config = cli.config_from_args(args)
    assert config.address_filter == "AA:BB"
    assert config.face_slot_id == 0x06
    assert config.notification_timeout is None


def test_format_value():
    assert cli.format_value(b"\x41\x00") == "41 00    'A.'    65"
    assert cli.format_value(b"abc") == "61 62 63    'abc'"


def test_print_services(capsys):
    services = [
        GattService(
            uuid="0000180f-0000-1000-8000-00805f9b34fb",
            primary=False,
            characteristics=[
                GattCharacteristic(
                    uuid="00002a19-0000-1000-8000-00805f9b34fb",
                    properties=["read", "notify"],
                    value=b"\x32",
                ),
            ],
        ),
    ]

    cli._print_services(services)

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "Service 0000180f-0000-1000-8000-00805f9b34fb    primary: False"
    assert lines[1].endswith("read, notify")
    assert "DATA READ" in lines[2]


def test_main_help(capsys):
    assert cli.main(["help"]) == 0
    assert "dafit-upload" in capsys.readouterr().out


def test_main_upload_requires_file():
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["upload"])
    assert exc_info.value.code == 2


def test_main_rejects_unknown_slot():
    with pytest.raises(SystemExit):
        cli.main(["info", "slot=nowhere"])


def test_main_upload_missing_file(tmp_path: Path, capsys):
    assert cli.main(["upload", str(tmp_path / "missing.bin")]) == 1
    assert "Cannot read" in capsys.readouterr().err


def test_main_info_no_watch(monkeypatch: pytest.MonkeyPatch, capsys):
    async def fake_find_watch(config, on_candidate=None):
        return None

    monkeypatch.setattr(cli, "find_watch", fake_find_watch)

    assert cli.main(["info"]) == 1
    assert "No compatible watch found" in capsys.readouterr().out


class _FakeWatch:
    name = "C20"
    descriptor = DeviceDescriptor("MOYOUNG-V2", "2.0.6", "0001", 80)

    def __init__(self):
        self.disconnected = False

    async def upload_watch_face(self, payload, progress_callback=None):
        progress_callback(0)
        return TransferResult(len(payload), 1, 0, 0, 0x0D)

    async def disconnect(self):
        self.disconnected = True


def test_main_upload_success(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys):
    watch = _FakeWatch()

    async def fake_find_watch(config, on_candidate=None):
        return watch

    monkeypatch.setattr(cli, "find_watch", fake_find_watch)
    face = tmp_path / "face.bin"
    face.write_bytes(b"\x01" * 10)

    assert cli.main(["upload", str(face)]) == 0

    out = capsys.readouterr().out
    assert "Manufacturer:      MOYOUNG-V2" in out
    assert "File send finished! 10 bytes" in out
    assert watch.disconnected
