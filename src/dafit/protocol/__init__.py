"""BLE protocol implementation."""

from .chunking import chunk_count, chunk_range, chunk_slice, progress_percent
from .commands import (
    ACCEPTED_MANUFACTURER,
    BATTERY_LEVEL_UUID,
    BATTERY_SERVICE_UUID,
    CHUNK_SIZE,
    COMMAND_WRITE_UUID,
    DATA_WRITE_UUID,
    DEFAULT_FACE_SLOT,
    DEVICE_INFO_SERVICE_UUID,
    FACE_SLOTS,
    FILE_ID,
    FRAME_HEADER,
    MANUFACTURER_NAME_UUID,
    NOTIFY_UUID,
    REQUIRED_CHARACTERISTICS,
    REQUIRED_SERVICES,
    SERIAL_NUMBER_UUID,
    SOFTWARE_REVISION_UUID,
    TRANSFER_SERVICE_UUID,
    Opcode,
    build_completion_ack_command,
    build_prep_command,
    build_select_face_command,
    resolve_face_slot,
)
from .responses import (
    Frame,
    format_frame,
    parse_chunk_request,
    parse_completion,
    parse_frame,
    parse_prep_command,
)

__all__ = [
    "Opcode",
    "ACCEPTED_MANUFACTURER",
    "CHUNK_SIZE",
    "FILE_ID",
    "FRAME_HEADER",
    "FACE_SLOTS",
    "DEFAULT_FACE_SLOT",
    "DEVICE_INFO_SERVICE_UUID",
    "BATTERY_SERVICE_UUID",
    "TRANSFER_SERVICE_UUID",
    "SOFTWARE_REVISION_UUID",
    "SERIAL_NUMBER_UUID",
    "MANUFACTURER_NAME_UUID",
    "BATTERY_LEVEL_UUID",
    "NOTIFY_UUID",
    "COMMAND_WRITE_UUID",
    "DATA_WRITE_UUID",
    "REQUIRED_SERVICES",
    "REQUIRED_CHARACTERISTICS",
    "build_prep_command",
    "build_completion_ack_command",
    "build_select_face_command",
    "resolve_face_slot",
    "Frame",
    "format_frame",
    "parse_frame",
    "parse_chunk_request",
    "parse_completion",
    "parse_prep_command",
    "chunk_count",
    "chunk_range",
    "chunk_slice",
    "progress_percent",
]
