"""GATT service/characteristic snapshots for the info dump."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class GattCharacteristic:
    """One characteristic and, when readable and requested, its value."""

    uuid: str
    properties: list[str] = field(default_factory=list)
    value: bytes | None = None

    @property
    def readable(self) -> bool:
        return "read" in self.properties


@dataclass
class GattService:
    """One service with its characteristics."""

    uuid: str
    primary: bool = True
    characteristics: list[GattCharacteristic] = field(default_factory=list)
