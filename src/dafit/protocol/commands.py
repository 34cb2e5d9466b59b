"""BLE protocol commands for MoYoung / DaFit watches."""

from __future__ import annotations

from enum import IntEnum
from typing import Final, Mapping

from bleak.uuids import normalize_uuid_16


class Opcode(IntEnum):
    """Frame opcodes (4th header byte)."""

    SELECT_FACE = 0x06      # Activate a stored watch face
    CHUNK_REQUEST = 0x07    # Watch asks for chunk N
    FILE_LENGTH = 0x09      # Prep command, completion notification and its ACK


# Services
DEVICE_INFO_SERVICE_UUID = normalize_uuid_16(0x180A)
BATTERY_SERVICE_UUID = normalize_uuid_16(0x180F)
TRANSFER_SERVICE_UUID = normalize_uuid_16(0xFEEA)

# Characteristics
SOFTWARE_REVISION_UUID = normalize_uuid_16(0x2A28)
SERIAL_NUMBER_UUID = normalize_uuid_16(0x2A25)
MANUFACTURER_NAME_UUID = normalize_uuid_16(0x2A29)
BATTERY_LEVEL_UUID = normalize_uuid_16(0x2A19)
NOTIFY_UUID = normalize_uuid_16(0xFEE3)
COMMAND_WRITE_UUID = normalize_uuid_16(0xFEE2)
DATA_WRITE_UUID = normalize_uuid_16(0xFEE6)

REQUIRED_SERVICES: Final[frozenset[str]] = frozenset({
    DEVICE_INFO_SERVICE_UUID,
    BATTERY_SERVICE_UUID,
    TRANSFER_SERVICE_UUID,
})

REQUIRED_CHARACTERISTICS: Final[frozenset[str]] = frozenset({
    SOFTWARE_REVISION_UUID,
    SERIAL_NUMBER_UUID,
    MANUFACTURER_NAME_UUID,
    BATTERY_LEVEL_UUID,
    NOTIFY_UUID,
    COMMAND_WRITE_UUID,
    DATA_WRITE_UUID,
})

# Exact Manufacturer Name String reported by compatible watches
ACCEPTED_MANUFACTURER: Final = "MOYOUNG-V2"

# Framing constants
FRAME_HEADER: Final = b"\xfe\xea\x20"
FILE_ID: Final = 0x74  # Storage file the uploaded face lands in
HEADER_LENGTH: Final = 5
SELECT_FACE_MARKER: Final = 0x19

# Maximum payload bytes per data write
CHUNK_SIZE: Final = 244

MAX_FILE_LENGTH: Final = 0xFFFFFFFF

# Logical face slot -> slot byte sent in the select command.
# File 0x74 shows up as face 13, file 0x6E as face 6.
FACE_SLOTS: Final[Mapping[str, int]] = {
    "custom": 0x0D,
    "preset-6": 0x06,
}
DEFAULT_FACE_SLOT: Final = "custom"


def _header(opcode: Opcode) -> bytes:
    return FRAME_HEADER + bytes([opcode, FILE_ID])


def build_prep_command(file_length: int) -> bytes:
    """Build command announcing an upload of file_length bytes.

    Returns:
        Command bytes: FE EA 20 09 74 + length (4 bytes, big-endian)

    Raises:
        ValueError: If file_length does not fit an unsigned 32-bit value
    """
    if not 0 <= file_length <= MAX_FILE_LENGTH:
        raise ValueError(f"File length {file_length} does not fit in 4 bytes")
    return _header(Opcode.FILE_LENGTH) + file_length.to_bytes(4, byteorder="big")


def build_completion_ack_command() -> bytes:
    """Build the acknowledgment sent after the watch reports completion.

    Returns:
        Command bytes: FE EA 20 09 74 00 00 00 00
    """
    return _header(Opcode.FILE_LENGTH) + bytes(4)


def build_select_face_command(slot_id: int) -> bytes:
    """Build command activating the watch face stored in slot_id.

    Returns:
        Command bytes: FE EA 20 06 19 + slot_id (1 byte)

    Raises:
        ValueError: If slot_id is outside 0-255
    """
    if not 0 <= slot_id <= 0xFF:
        raise ValueError(f"Face slot {slot_id} out of range 0-255")
    return FRAME_HEADER + bytes([Opcode.SELECT_FACE, SELECT_FACE_MARKER, slot_id])


def resolve_face_slot(slot: str | int, table: Mapping[str, int] = FACE_SLOTS) -> int:
    """Translate a logical slot name (or raw slot number) into a slot byte.

    Raises:
        ValueError: If the name is not in the table or the number is out of range
    """
    if isinstance(slot, int):
        value = slot
    elif slot.isdigit():
        value = int(slot)
    elif slot.lower().startswith("0x"):
        value = int(slot, 16)
    else:
        try:
            value = table[slot]
        except KeyError:
            known = ", ".join(sorted(table))
            raise ValueError(f"Unknown face slot {slot!r} (known: {known})") from None

    if not 0 <= value <= 0xFF:
        raise ValueError(f"Face slot {value} out of range 0-255")
    return value
