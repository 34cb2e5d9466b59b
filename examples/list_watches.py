"""List nearby BLE peripherals and flag likely DaFit watches.

A peripheral advertising the vendor transfer service is only a candidate;
run `dafit-upload info` to fully qualify it.

Usage:
    uv run python examples/list_watches.py --duration 10
    uv run python examples/list_watches.py --adapter hci1 --qualify
"""

from __future__ import annotations

import argparse
import asyncio

from dafit import UploaderConfig, discover_devices, find_watch
from dafit.protocol import TRANSFER_SERVICE_UUID


async def list_watches(duration: float, adapter: str | None, qualify: bool) -> None:
    """Scan once and print every peripheral seen."""
    print(f"Scanning for {duration:.1f}s...")
    devices = await discover_devices(timeout=duration, adapter=adapter)

    for device in sorted(devices, key=lambda d: d.rssi or -999, reverse=True):
        marker = "*" if TRANSFER_SERVICE_UUID in device.service_uuids else " "
        print(f" {marker} {device.address}  rssi={device.rssi}  {device.name}")

    if not qualify:
        return

    config = UploaderConfig(scan_timeout=duration, adapter=adapter)
    watch = await find_watch(config)
    if watch is None:
        print("\nNo compatible watch found.")
        return

    try:
        descriptor = watch.descriptor
        print(
            f"\nCompatible watch: {watch.name} ({watch.address}) "
            f"software={descriptor.software_revision} battery={descriptor.battery_level}"
        )
    finally:
        await watch.disconnect()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="List nearby BLE peripherals, marking those with the DaFit transfer service."
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Scan duration in seconds. Default: 10",
    )
    parser.add_argument("--adapter", default=None, help="Bluetooth adapter (e.g. hci0)")
    parser.add_argument(
        "--qualify",
        action="store_true",
        help="Also connect and qualify the first compatible watch.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    try:
        asyncio.run(list_watches(args.duration, args.adapter, args.qualify))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
