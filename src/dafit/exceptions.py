"""Exceptions raised by the dafit package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.verdict import QualificationVerdict


class DaFitError(Exception):
    """Base exception for all dafit errors."""


class BLEConnectionError(DaFitError):
    """Connecting to, reading from or writing to the watch failed."""


class BLETimeoutError(DaFitError):
    """A BLE operation did not finish in time."""


class ProtocolError(DaFitError):
    """The watch sent data that does not follow the transfer protocol."""


class UnexpectedFrameError(ProtocolError):
    """Notification is not a recognized frame for any handled opcode.

    Non-fatal: the transfer engine logs these and keeps serving.
    """


class TransferError(DaFitError):
    """A watch face transfer was aborted."""


class LinkWriteFailedError(TransferError):
    """Writing to the command or data characteristic failed."""


class NotificationStreamClosedError(TransferError):
    """The notification stream ended before the watch reported completion."""


class TransferTimeoutError(TransferError):
    """No notification arrived within the configured wait."""


class MalformedFrameError(ProtocolError, TransferError):
    """Frame is too short to hold the fields its opcode declares."""


class IncompatibleDeviceError(DaFitError):
    """The peripheral did not qualify as a compatible watch."""

    def __init__(self, message: str, verdict: QualificationVerdict | None = None):
        super().__init__(message)
        self.verdict = verdict
