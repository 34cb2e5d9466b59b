"""Transfer session and result models."""

from __future__ import annotations

from dataclasses import dataclass, field

from .enums import TransferState


@dataclass
class TransferSession:
    """Mutable state of one upload, owned by the transfer engine.

    expected_index is diagnostic only; the watch decides which chunk
    it wants next.
    """
    payload: bytes
    file_length: int = field(init=False)
    expected_index: int = 0
    state: TransferState = TransferState.IDLE
    abort_reason: str | None = None
    chunks_served: int = 0
    unexpected_frames: int = 0
    completion_value: int | None = None

    def __post_init__(self) -> None:
        self.payload = bytes(self.payload)
        self.file_length = len(self.payload)

    def abort(self, reason: str) -> None:
        self.state = TransferState.ABORTED
        self.abort_reason = reason


@dataclass(frozen=True)
class TransferResult:
    """Summary of a completed upload.

    Attributes:
        file_length: Bytes announced in the prep command
        chunks_served: Data writes performed (re-requests included)
        unexpected_frames: Notifications ignored during the transfer
        completion_value: Raw 4-byte value from the completion frame (not verified)
        face_slot: Slot byte sent in the face select command
    """
    file_length: int
    chunks_served: int
    unexpected_frames: int
    completion_value: int
    face_slot: int
