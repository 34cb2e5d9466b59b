"""BLE transport layer."""

from .connection import BLEConnection

__all__ = ["BLEConnection"]
