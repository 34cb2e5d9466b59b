"""Command-line interface for uploading DaFit watch faces.

Usage:
    dafit-upload info [name=NAME] [address=ADDRESS] [verbosity=N] [adapter=hci0]
    dafit-upload upload WATCHFACE.BIN [name=NAME] [address=ADDRESS] [slot=custom]
    dafit-upload help

Options may also be given as --name NAME, --address ADDRESS, etc.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import UploaderConfig
from .discovery import DiscoveredDevice, find_watch
from .exceptions import DaFitError, TransferError
from .models.descriptor import DeviceDescriptor
from .models.enums import VerdictStatus
from .models.gatt import GattService
from .models.verdict import QualificationVerdict

MODES = ("info", "upload", "help")

# key=value spellings accepted in place of --key value
_KEY_ALIASES = {
    "name": "name",
    "address": "address",
    "verbosity": "verbosity",
    "verbose": "verbosity",
    "adapter": "adapter",
    "slot": "slot",
    "timeout": "timeout",
}


def normalize_argv(argv: Sequence[str]) -> list[str]:
    """Rewrite key=value tokens into --key=value options.

    file=PATH becomes a bare positional path.
    """
    normalized: list[str] = []
    for token in argv:
        key, sep, value = token.partition("=")
        if sep and not token.startswith("-"):
            if key == "file":
                normalized.append(value)
                continue
            if key in _KEY_ALIASES:
                normalized.append(f"--{_KEY_ALIASES[key]}={value}")
                continue
        normalized.append(token)
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dafit-upload",
        description="Face uploader for MoYoung / DaFit smart watches.",
    )
    parser.add_argument("mode", choices=MODES, help="What to do")
    parser.add_argument("file", nargs="?", help="Watch face binary (upload mode)")
    parser.add_argument("--name", default="", help="Limit to devices named NAME")
    parser.add_argument("--address", default="", help="Limit to the device at ADDRESS")
    parser.add_argument("--verbosity", type=int, default=0, help="0 = quiet, 1 = info, 2 = debug")
    parser.add_argument("--adapter", default=None, help="Bluetooth adapter (e.g. hci0)")
    parser.add_argument(
        "--slot",
        default=None,
        help="Face slot to activate after upload (name or number, default: custom)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each watch notification (0 = wait forever)",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> tuple[argparse.ArgumentParser, argparse.Namespace]:
    parser = build_parser()
    raw = list(sys.argv[1:] if argv is None else argv)
    if not raw or raw[0] in ("-h", "--help"):
        raw = ["help"]
    args = parser.parse_intermixed_args(normalize_argv(raw))
    return parser, args


def config_from_args(args: argparse.Namespace) -> UploaderConfig:
    """Build the session configuration from parsed arguments."""
    config = UploaderConfig(
        name_filter=args.name,
        address_filter=args.address,
        adapter=args.adapter,
        verbosity=args.verbosity,
    )
    if args.slot is not None:
        config = config.with_updates(face_slot=args.slot)
    if args.timeout is not None:
        config = config.with_updates(notification_timeout=args.timeout or None)
    return config


def configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def format_value(data: bytes) -> str:
    """Hex, printable ASCII and little-endian integer view of a raw value."""
    ascii_view = "".join(chr(b) if 31 < b < 127 else "." for b in data)
    text = f"{data.hex(' ')}    '{ascii_view}'"
    if len(data) in (1, 2, 4):
        text += f"    {int.from_bytes(data, 'little')}"
    return text


def _print_candidate(found: DiscoveredDevice, verdict: QualificationVerdict) -> None:
    line = f"Found device [{found.address}]: {found.name}."
    if verdict.status is VerdictStatus.NAME_MISMATCH:
        line += f" Skipping{': ' + verdict.reason if verdict.reason else '.'}"
    elif verdict.status is VerdictStatus.INCOMPATIBLE:
        line += f" This doesn't look like a compatible device ({verdict.reason})."
    print(line)


def _print_descriptor(descriptor: DeviceDescriptor) -> None:
    print(f"Software Revision: {descriptor.software_revision}")
    print(f"Serial Number:     {descriptor.serial_number}")
    print(f"Manufacturer:      {descriptor.manufacturer}")
    print(f"Battery Level:     {descriptor.battery_level}")


def _print_services(services: list[GattService]) -> None:
    for service in services:
        print(f"Service {service.uuid}    primary: {service.primary}")
        for char in service.characteristics:
            print(f"        {char.uuid}    {', '.join(char.properties)}")
            if char.value is not None:
                print(f"        {char.uuid}    DATA READ        {format_value(char.value)}")


async def cmd_info(config: UploaderConfig) -> int:
    """Find a compatible watch and show its device information."""
    print(f"Scanning for watches ({config.scan_timeout:.0f}s)...")
    watch = await find_watch(config, on_candidate=_print_candidate)
    if watch is None:
        print("No compatible watch found.")
        return 1

    try:
        _print_descriptor(watch.descriptor)
        if config.verbosity > 0:
            _print_services(await watch.read_services(include_values=True))
    finally:
        print(f"Disconnecting from {watch.name}.")
        await watch.disconnect()
    return 0


async def cmd_upload(config: UploaderConfig, path: Path) -> int:
    """Find a compatible watch and upload a watch face to it."""
    try:
        payload = path.read_bytes()
    except OSError as e:
        print(f"Cannot read {path}: {e}", file=sys.stderr)
        return 1
    if not payload:
        print(f"{path} is empty, nothing to upload.", file=sys.stderr)
        return 1

    print(f"Scanning for watches ({config.scan_timeout:.0f}s)...")
    watch = await find_watch(config, on_candidate=_print_candidate)
    if watch is None:
        print("No compatible watch found.")
        return 1

    def _progress(percent: int) -> None:
        print(f"\rSending watch face... {percent:3d}%", end="", flush=True)

    try:
        _print_descriptor(watch.descriptor)
        result = await watch.upload_watch_face(payload, progress_callback=_progress)
        print()
    except TransferError as e:
        print(f"\nUpload failed: {e}", file=sys.stderr)
        return 1
    finally:
        print(f"Disconnecting from {watch.name}.")
        await watch.disconnect()

    print(
        f"File send finished! {result.file_length} bytes, "
        f"face slot 0x{result.face_slot:02x} activated."
    )
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser, args = parse_args(argv)
    if args.mode == "help":
        parser.print_help()
        return 0

    configure_logging(args.verbosity)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    if args.mode == "upload" and not args.file:
        parser.error("upload requires a watch face file")

    try:
        if args.mode == "info":
            return asyncio.run(cmd_info(config))
        return asyncio.run(cmd_upload(config, Path(args.file)))
    except KeyboardInterrupt:
        return 130
    except DaFitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
