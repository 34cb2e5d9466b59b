"""Data models for DaFit watches."""

from .descriptor import DeviceDescriptor, decode_battery, decode_text
from .enums import TransferState, VerdictStatus
from .gatt import GattCharacteristic, GattService
from .transfer import TransferResult, TransferSession
from .verdict import QualificationVerdict

__all__ = [
    "DeviceDescriptor",
    "decode_battery",
    "decode_text",
    "GattCharacteristic",
    "GattService",
    "QualificationVerdict",
    "TransferResult",
    "TransferSession",
    "TransferState",
    "VerdictStatus",
]
