"""DaFit watch face uploader.

  Pure Python package for qualifying MoYoung / DaFit smart watches over BLE
  and uploading watch faces to them.
  """

from .config import UploaderConfig
from .device import DaFitWatch
from .discovery import DiscoveredDevice, discover_devices, find_watch
from .exceptions import (
    BLEConnectionError,
    BLETimeoutError,
    DaFitError,
    IncompatibleDeviceError,
    LinkWriteFailedError,
    MalformedFrameError,
    NotificationStreamClosedError,
    ProtocolError,
    TransferError,
    TransferTimeoutError,
    UnexpectedFrameError,
)
from .models import (
    DeviceDescriptor,
    GattCharacteristic,
    GattService,
    QualificationVerdict,
    TransferResult,
    TransferSession,
    TransferState,
    VerdictStatus,
)
from .protocol import (
    ACCEPTED_MANUFACTURER,
    CHUNK_SIZE,
    FACE_SLOTS,
    REQUIRED_CHARACTERISTICS,
    REQUIRED_SERVICES,
)
from .qualifier import evaluate, qualify
from .transfer import TransferEngine

__version__ = "0.1.0"

__all__ = [
    # Main API
    "DaFitWatch",
    "TransferEngine",
    "UploaderConfig",
    "discover_devices",
    "find_watch",
    "qualify",
    "evaluate",
    # Exceptions
    "DaFitError",
    "BLEConnectionError",
    "BLETimeoutError",
    "ProtocolError",
    "UnexpectedFrameError",
    "MalformedFrameError",
    "IncompatibleDeviceError",
    "TransferError",
    "LinkWriteFailedError",
    "NotificationStreamClosedError",
    "TransferTimeoutError",
    # Models
    "DeviceDescriptor",
    "DiscoveredDevice",
    "GattCharacteristic",
    "GattService",
    "QualificationVerdict",
    "TransferResult",
    "TransferSession",
    "TransferState",
    "VerdictStatus",
    # Constants
    "ACCEPTED_MANUFACTURER",
    "CHUNK_SIZE",
    "FACE_SLOTS",
    "REQUIRED_SERVICES",
    "REQUIRED_CHARACTERISTICS",
]
