"""Test scanning and candidate selection."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from bleak.exc import BleakError

from dafit import UploaderConfig
from dafit.discovery import DiscoveredDevice, discover_devices, find_watch
from dafit.exceptions import BLEConnectionError
from dafit.models import DeviceDescriptor, QualificationVerdict


def _scan_result(address: str, local_name: str | None, device_name: str | None = None):
    device = SimpleNamespace(address=address, name=device_name)
    adv = SimpleNamespace(local_name=local_name, service_uuids=["0000feea-0000-1000-8000-00805f9b34fb"], rssi=-60)
    return device, adv


@pytest.mark.asyncio
async def test_discover_devices(monkeypatch: pytest.MonkeyPatch):
    seen: dict = {}

    async def fake_discover(**kwargs):
        seen.update(kwargs)
        return {
            "AA": _scan_result("AA", "C20"),
            "BB": _scan_result("BB", None, "Fallback"),
            "CC": _scan_result("CC", None),
        }

    monkeypatch.setattr("dafit.discovery.BleakScanner.discover", fake_discover)

    devices = await discover_devices(timeout=2.0, adapter="hci1")

    assert seen == {"timeout": 2.0, "return_adv": True, "adapter": "hci1"}
    assert [d.name for d in devices] == ["C20", "Fallback", "(unknown)"]
    assert devices[0].service_uuids == ("0000feea-0000-1000-8000-00805f9b34fb",)
    assert devices[0].rssi == -60


@pytest.mark.asyncio
async def test_discover_devices_wraps_scan_errors(monkeypatch: pytest.MonkeyPatch):
    async def fake_discover(**kwargs):
        raise BleakError("No Bluetooth adapters found")

    monkeypatch.setattr("dafit.discovery.BleakScanner.discover", fake_discover)

    with pytest.raises(BLEConnectionError, match="Scan failed"):
        await discover_devices()


@pytest.mark.asyncio
async def test_find_watch_stops_at_first_qualified(monkeypatch: pytest.MonkeyPatch):
    devices = [
        DiscoveredDevice(address="11", name="Phone"),
        DiscoveredDevice(address="22", name="C20"),
        DiscoveredDevice(address="33", name="C20 Pro"),
    ]
    verdicts = {
        "11": QualificationVerdict.incompatible("missing services"),
        "22": QualificationVerdict.qualified(DeviceDescriptor("MOYOUNG-V2", "1", "2", 3)),
        "33": QualificationVerdict.qualified(DeviceDescriptor("MOYOUNG-V2", "1", "2", 3)),
    }
    qualified: list[str] = []
    disconnected: list[str] = []

    async def fake_discover_devices(timeout, adapter):
        return devices

    async def fake_qualify(self):
        qualified.append(self.address)
        self._verdict = verdicts[self.address]
        return self._verdict

    async def fake_disconnect(self):
        disconnected.append(self.address)

    monkeypatch.setattr("dafit.discovery.discover_devices", fake_discover_devices)
    monkeypatch.setattr("dafit.discovery.DaFitWatch.qualify", fake_qualify)
    monkeypatch.setattr("dafit.discovery.DaFitWatch.disconnect", fake_disconnect)

    candidates: list[tuple[str, bool]] = []
    watch = await find_watch(
        UploaderConfig(),
        on_candidate=lambda found, verdict: candidates.append((found.address, verdict.is_qualified)),
    )

    assert watch is not None
    assert watch.address == "22"
    assert qualified == ["11", "22"]
    assert disconnected == ["11"]
    assert candidates == [("11", False), ("22", True)]


@pytest.mark.asyncio
async def test_find_watch_none_found(monkeypatch: pytest.MonkeyPatch):
    async def fake_discover_devices(timeout, adapter):
        return []

    monkeypatch.setattr("dafit.discovery.discover_devices", fake_discover_devices)

    assert await find_watch(UploaderConfig()) is None
