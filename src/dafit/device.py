"""Main DaFit watch class."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .config import UploaderConfig
from .exceptions import BLEConnectionError, IncompatibleDeviceError
from .models.descriptor import DeviceDescriptor
from .models.gatt import GattService
from .models.transfer import TransferResult
from .models.verdict import QualificationVerdict
from .protocol.commands import resolve_face_slot
from .qualifier import qualify
from .transfer import ProgressCallback, TransferEngine
from .transport import BLEConnection

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


class DaFitWatch:
    """MoYoung / DaFit smart watch.

    Main API for qualifying a watch and uploading watch faces.

    Usage:
        # Qualify on connect, then upload
        async with DaFitWatch("AA:BB:CC:DD:EE:FF") as watch:
            print(watch.descriptor.battery_level)
            await watch.upload_watch_face(payload)

        # Activate a face already stored on the watch
        async with DaFitWatch(address, config=UploaderConfig(face_slot="preset-6")) as watch:
            await watch.select_face()
    """

    def __init__(
            self,
            address: str,
            ble_device: BLEDevice | None = None,
            name: str | None = None,
            config: UploaderConfig | None = None,
    ):
        """Initialize DaFit watch.

        Args:
            address: Peripheral address
            ble_device: Optional BLEDevice found while scanning
            name: Advertised name, if known
            config: Session configuration (default: UploaderConfig())
        """
        self.config = config or UploaderConfig()
        self._connection = BLEConnection(
            address,
            ble_device,
            name=name,
            timeout=self.config.connect_timeout,
            max_attempts=self.config.connect_attempts,
            adapter=self.config.adapter,
        )
        self._engine: TransferEngine | None = None
        self._verdict: QualificationVerdict | None = None

    async def __aenter__(self) -> DaFitWatch:
        """Connect and qualify the watch."""
        verdict = await self.qualify()
        if not verdict.is_qualified:
            await self.disconnect()
            raise IncompatibleDeviceError(
                f"{self.address} is not a compatible watch: "
                f"{verdict.reason or verdict.status.value}",
                verdict,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from watch."""
        await self.disconnect()

    @property
    def address(self) -> str:
        return self._connection.address

    @property
    def name(self) -> str:
        return self._connection.name

    @property
    def is_connected(self) -> bool:
        return self._connection.is_connected

    @property
    def verdict(self) -> QualificationVerdict | None:
        """Result of the last qualify() call."""
        return self._verdict

    @property
    def descriptor(self) -> DeviceDescriptor | None:
        """Device information read during qualification."""
        return self._verdict.descriptor if self._verdict else None

    async def connect(self) -> None:
        await self._connection.connect()

    async def disconnect(self) -> None:
        await self._connection.disconnect()

    async def qualify(self) -> QualificationVerdict:
        """Connect if needed and check that this is a compatible watch.

        Returns:
            QualificationVerdict for this peripheral
        """
        self._verdict = await qualify(self._connection, self.config)
        return self._verdict

    def _require_qualified(self) -> TransferEngine:
        if not self._verdict or not self._verdict.is_qualified:
            raise RuntimeError("Watch not qualified - call qualify() first")
        if not self.is_connected:
            raise RuntimeError("Watch not connected")

        if self._engine is None:
            self._engine = TransferEngine(
                self._connection,
                notification_timeout=self.config.notification_timeout,
                settle_delay=self.config.settle_delay,
                face_slot=self.config.face_slot_id,
            )
        return self._engine

    async def upload_watch_face(
            self,
            payload: bytes,
            progress_callback: ProgressCallback | None = None,
    ) -> TransferResult:
        """Upload a watch face file and make it the active face.

        Args:
            payload: Watch face binary
            progress_callback: Called with the transfer percentage after each chunk

        Returns:
            TransferResult

        Raises:
            RuntimeError: If the watch is not qualified and connected
            TransferError: If the transfer was aborted
        """
        engine = self._require_qualified()

        _LOGGER.info(
            "Uploading %d byte watch face to %s (%s)",
            len(payload),
            self.name,
            self.address,
        )
        return await engine.upload(payload, progress_callback=progress_callback)

    async def select_face(self, slot: str | int | None = None) -> None:
        """Activate a stored watch face.

        Args:
            slot: Logical slot name or slot number (default: configured slot)
        """
        engine = self._require_qualified()
        if slot is None:
            slot_id = self.config.face_slot_id
        else:
            slot_id = resolve_face_slot(slot, self.config.face_slots)
        await engine.select_face(slot_id)

    async def read_services(self, include_values: bool = False) -> list[GattService]:
        """List services and characteristics, optionally reading readable values.

        Unreadable values are left as None.
        """
        if not self.is_connected:
            raise RuntimeError("Watch not connected")

        services = self._connection.services()
        if include_values:
            for service in services:
                for char in service.characteristics:
                    if not char.readable:
                        continue
                    try:
                        char.value = await self._connection.read(char.uuid)
                    except BLEConnectionError as e:
                        _LOGGER.debug("Could not read %s: %s", char.uuid, e)
        return services
