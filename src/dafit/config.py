"""Uploader configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from .protocol.commands import DEFAULT_FACE_SLOT, FACE_SLOTS, resolve_face_slot


@dataclass(frozen=True)
class UploaderConfig:
    """Settings for one scan/qualify/upload session.

    Passed by value into the scanner, qualifier and transfer engine.

    Attributes:
        name_filter: Only accept peripherals advertising exactly this name
        address_filter: Only accept the peripheral with this address
        adapter: Bluetooth adapter to scan with (e.g. "hci0"), default adapter if None
        verbosity: 0 = quiet, 1 = info, 2+ = debug
        scan_timeout: Seconds to scan for peripherals
        connect_timeout: Seconds allowed per connection attempt
        connect_attempts: Connection attempts per candidate
        notification_timeout: Seconds to wait for each notification during
            a transfer, None waits forever
        settle_delay: Seconds to wait after the final write before disconnecting
        face_slot: Logical slot name (or slot number) activated after upload
        face_slots: Logical slot name -> slot byte table
    """
    name_filter: str = ""
    address_filter: str = ""
    adapter: str | None = None
    verbosity: int = 0
    scan_timeout: float = 10.0
    connect_timeout: float = 10.0
    connect_attempts: int = 1
    notification_timeout: float | None = 30.0
    settle_delay: float = 1.0
    face_slot: str | int = DEFAULT_FACE_SLOT
    face_slots: Mapping[str, int] = field(default_factory=lambda: dict(FACE_SLOTS))

    def __post_init__(self) -> None:
        if self.connect_attempts < 1:
            raise ValueError("connect_attempts must be at least 1")
        if self.notification_timeout is not None and self.notification_timeout <= 0:
            raise ValueError("notification_timeout must be positive or None")
        if self.settle_delay < 0:
            raise ValueError("settle_delay must not be negative")
        resolve_face_slot(self.face_slot, self.face_slots)

    @property
    def face_slot_id(self) -> int:
        """Slot byte for the configured face slot."""
        return resolve_face_slot(self.face_slot, self.face_slots)

    def with_updates(self, **changes: Any) -> UploaderConfig:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
