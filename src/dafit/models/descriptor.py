"""Device descriptor read during qualification."""

from __future__ import annotations

from dataclasses import dataclass


def decode_text(raw: bytes) -> str:
    """Decode a GATT string characteristic, replacing invalid UTF-8."""
    return bytes(raw).decode("utf-8", errors="replace")


def decode_battery(raw: bytes) -> int:
    """Battery Level characteristic: first byte, 0-255.

    Raises:
        ValueError: If the characteristic returned no data
    """
    if not raw:
        raise ValueError("Battery level read returned no data")
    return raw[0]


@dataclass(frozen=True)
class DeviceDescriptor:
    """Descriptive attributes of a watch, read once per session.

    Attributes:
        manufacturer: Manufacturer Name String (0x2A29)
        software_revision: Software Revision String (0x2A28)
        serial_number: Serial Number String (0x2A25)
        battery_level: Battery Level (0x2A19), raw byte value
        name: Advertised name
        address: Peripheral address
    """
    manufacturer: str
    software_revision: str
    serial_number: str
    battery_level: int
    name: str = ""
    address: str = ""

    @classmethod
    def from_raw(
            cls,
            manufacturer: bytes,
            software_revision: bytes,
            serial_number: bytes,
            battery_level: bytes,
            name: str = "",
            address: str = "",
    ) -> DeviceDescriptor:
        """Build a descriptor from raw characteristic reads."""
        return cls(
            manufacturer=decode_text(manufacturer),
            software_revision=decode_text(software_revision),
            serial_number=decode_text(serial_number),
            battery_level=decode_battery(battery_level),
            name=name,
            address=address,
        )
