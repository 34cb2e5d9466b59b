"""Scanning for watches."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from bleak import BleakScanner
from bleak.exc import BleakError

from .config import UploaderConfig
from .device import DaFitWatch
from .exceptions import BLEConnectionError
from .models.verdict import QualificationVerdict

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)

UNKNOWN_NAME = "(unknown)"


@dataclass(frozen=True)
class DiscoveredDevice:
    """A peripheral seen while scanning."""

    address: str
    name: str
    service_uuids: tuple[str, ...] = ()
    rssi: int | None = None
    ble_device: BLEDevice | None = field(default=None, compare=False)


CandidateCallback = Callable[[DiscoveredDevice, QualificationVerdict], None]


async def discover_devices(
        timeout: float = 10.0,
        adapter: str | None = None,
) -> list[DiscoveredDevice]:
    """Scan for nearby BLE peripherals.

    Args:
        timeout: Scan duration in seconds (default: 10)
        adapter: Bluetooth adapter to scan with, default adapter if None

    Returns:
        Peripherals with their advertised service UUIDs

    Raises:
        BLEConnectionError: If scanning fails (e.g. no adapter)
    """
    kwargs = {"adapter": adapter} if adapter else {}
    _LOGGER.debug("Scanning for %.1fs (adapter=%s)", timeout, adapter or "default")

    try:
        found = await BleakScanner.discover(timeout=timeout, return_adv=True, **kwargs)
    except (BleakError, OSError) as e:
        raise BLEConnectionError(f"Scan failed: {e}") from e

    devices = [
        DiscoveredDevice(
            address=device.address,
            name=adv.local_name or device.name or UNKNOWN_NAME,
            service_uuids=tuple(adv.service_uuids),
            rssi=adv.rssi,
            ble_device=device,
        )
        for device, adv in found.values()
    ]
    _LOGGER.info("Found %d BLE peripherals", len(devices))
    return devices


async def find_watch(
        config: UploaderConfig,
        on_candidate: CandidateCallback | None = None,
) -> DaFitWatch | None:
    """Scan and return the first compatible watch, connected and qualified.

    Candidates are qualified one after another; scanning stops at the first
    accepted one. Rejected candidates are disconnected.

    Args:
        config: Session configuration (filters, adapter, timeouts)
        on_candidate: Called with each candidate and its verdict

    Returns:
        Qualified DaFitWatch, or None if no candidate qualified
    """
    devices = await discover_devices(config.scan_timeout, config.adapter)
    if not devices:
        _LOGGER.warning("No BLE peripheral devices found")
        return None

    for found in devices:
        watch = DaFitWatch(
            found.address,
            ble_device=found.ble_device,
            name=found.name,
            config=config,
        )
        verdict = await watch.qualify()
        if on_candidate is not None:
            on_candidate(found, verdict)

        if verdict.is_qualified:
            return watch

        await watch.disconnect()

    return None
