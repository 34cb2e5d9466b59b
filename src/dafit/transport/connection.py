"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from bleak import BleakClient, BleakScanner
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..exceptions import BLEConnectionError, BLETimeoutError
from ..models.gatt import GattCharacteristic, GattService

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice

_LOGGER = logging.getLogger(__name__)


class BLEConnection:
    """Manages the BLE connection to one watch.

    Features:
    - Connection via bleak-retry-connector with service caching
    - Service/characteristic enumeration and raw reads/writes by UUID
    - Notification queue that is closed when the link drops
    """

    def __init__(
            self,
            address: str,
            ble_device: BLEDevice | None = None,
            name: str | None = None,
            timeout: float = 10.0,
            max_attempts: int = 1,
            adapter: str | None = None,
            use_services_cache: bool = True,
    ):
        """Initialize BLE connection manager.

        Args:
            address: Peripheral address
            ble_device: Optional BLEDevice found while scanning
            name: Advertised name (taken from ble_device when omitted)
            timeout: Connection timeout in seconds (default: 10)
            max_attempts: Connection attempts for bleak-retry-connector (default: 1)
            adapter: Bluetooth adapter to use (e.g. "hci0")
            use_services_cache: Enable GATT service caching (default: True)
        """
        self.address = address
        self.ble_device = ble_device
        self.name = name if name is not None else (ble_device.name if ble_device else None) or ""
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.adapter = adapter
        self.use_services_cache = use_services_cache

        self._client: BleakClient | None = None
        self._notification_queue: asyncio.Queue[bytes | None] = asyncio.Queue()

    async def __aenter__(self) -> BLEConnection:
        """Connect to device (context manager entry)."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect from device (context manager exit)."""
        await self.disconnect()

    def _adapter_kwargs(self) -> dict[str, Any]:
        return {"adapter": self.adapter} if self.adapter else {}

    async def connect(self) -> None:
        """Establish BLE connection and discover services.

        Raises:
            BLEConnectionError: If connection fails
            BLETimeoutError: If connection times out
        """
        if self._client and self._client.is_connected:
            return  # Already connected

        try:
            _LOGGER.debug(
                "Connecting to %s (max_attempts=%d)",
                self.address,
                self.max_attempts,
            )

            if self.ble_device:
                device = self.ble_device
            else:
                device = await BleakScanner.find_device_by_address(
                    self.address,
                    timeout=self.timeout,
                    **self._adapter_kwargs(),
                )
                if device is None:
                    raise BLEConnectionError(
                        f"Device {self.address} not found during scan"
                    )
                self.ble_device = device
                self.name = self.name or device.name or ""

            # A close marker from the previous link must not end the next session
            self._drain_notifications()

            self._client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=device,
                name=self.name or device.address,
                disconnected_callback=self._on_disconnected,
                max_attempts=self.max_attempts,
                use_services_cache=self.use_services_cache,
                timeout=self.timeout,
                **self._adapter_kwargs(),
            )

            _LOGGER.debug("Connected to %s", self.address)

        except BLEConnectionError:
            raise
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"Connection timeout after {self.timeout}s"
            ) from e
        except Exception as e:
            raise BLEConnectionError(
                f"Failed to connect: {e}"
            ) from e

    async def disconnect(self) -> None:
        """Disconnect from device."""
        if self._client and self._client.is_connected:
            try:
                _LOGGER.debug("Disconnecting from %s", self.address)
                await self._client.disconnect()
            except Exception as e:
                _LOGGER.warning("Error during disconnect: %s", e)
            finally:
                self._client = None

    def _on_disconnected(self, client: BleakClient) -> None:
        """Close the notification stream when the link drops."""
        _LOGGER.debug("Link to %s lost", self.address)
        self._notification_queue.put_nowait(None)

    def _require_client(self) -> BleakClient:
        if not self._client or not self._client.is_connected:
            raise BLEConnectionError("Not connected")
        return self._client

    def services(self) -> list[GattService]:
        """Snapshot of the discovered services and characteristics.

        Raises:
            BLEConnectionError: If not connected
        """
        client = self._require_client()
        return [
            GattService(
                uuid=service.uuid,
                primary=getattr(service, "primary", True),
                characteristics=[
                    GattCharacteristic(uuid=char.uuid, properties=list(char.properties))
                    for char in service.characteristics
                ],
            )
            for service in client.services
        ]

    def service_uuids(self) -> list[str]:
        """UUIDs of all discovered services."""
        return [service.uuid for service in self.services()]

    def characteristic_uuids(self) -> list[str]:
        """UUIDs of all discovered characteristics across services."""
        return [
            char.uuid
            for service in self.services()
            for char in service.characteristics
        ]

    async def read(self, uuid: str) -> bytes:
        """Read a characteristic value.

        Raises:
            BLEConnectionError: If not connected or read fails
        """
        client = self._require_client()
        try:
            return bytes(await client.read_gatt_char(uuid))
        except Exception as e:
            raise BLEConnectionError(f"Read of {uuid} failed: {e}") from e

    async def write(self, uuid: str, data: bytes, response: bool = False) -> None:
        """Write to a characteristic.

        Args:
            uuid: Characteristic UUID
            data: Bytes to write
            response: Wait for link-layer write confirmation (default: False)

        Raises:
            BLEConnectionError: If not connected or write fails
        """
        client = self._require_client()
        try:
            await client.write_gatt_char(uuid, data, response=response)
        except Exception as e:
            raise BLEConnectionError(f"Write to {uuid} failed: {e}") from e

    async def start_notify(self, uuid: str) -> None:
        """Subscribe to notifications from a characteristic.

        Notifications still queued from an earlier subscription are dropped.

        Raises:
            BLEConnectionError: If not connected or subscribing fails
        """
        client = self._require_client()
        self._drain_notifications()
        try:
            await client.start_notify(uuid, self._notification_callback)
        except Exception as e:
            raise BLEConnectionError(f"Subscribe to {uuid} failed: {e}") from e

        _LOGGER.debug("Notifications started on %s", uuid)

    async def stop_notify(self, uuid: str) -> None:
        """Unsubscribe from a characteristic and drop unread notifications.

        Errors are logged, not raised: a dropped link has nothing left to
        unsubscribe.
        """
        if self._client and self._client.is_connected:
            try:
                await self._client.stop_notify(uuid)
                _LOGGER.debug("Notifications stopped on %s", uuid)
            except Exception as e:
                _LOGGER.warning("Error stopping notifications on %s: %s", uuid, e)
        self._drain_notifications()

    def _drain_notifications(self) -> int:
        dropped = 0
        while True:
            try:
                self._notification_queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            dropped += 1
        if dropped:
            _LOGGER.debug("Dropped %d stale notification(s)", dropped)
        return dropped

    def _notification_callback(self, sender, data: bytearray) -> None:
        """Handle incoming BLE notifications.

        Args:
            sender: Characteristic that sent notification
            data: Notification data
        """
        self._notification_queue.put_nowait(bytes(data))

    async def next_notification(self, timeout: float | None = None) -> bytes | None:
        """Wait for the next notification.

        Args:
            timeout: Seconds to wait, None waits forever

        Returns:
            Notification data, or None once the stream is closed

        Raises:
            BLETimeoutError: If nothing arrived within timeout
        """
        try:
            return await asyncio.wait_for(
                self._notification_queue.get(),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"No notification received within {timeout}s"
            ) from e

    @property
    def is_connected(self) -> bool:
        """Check if currently connected to device."""
        return self._client is not None and self._client.is_connected
