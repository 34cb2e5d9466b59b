"""Notification frame parsing for the DaFit transfer protocol."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from ..exceptions import MalformedFrameError, UnexpectedFrameError
from .commands import FRAME_HEADER, HEADER_LENGTH, Opcode


@dataclass(frozen=True)
class Frame:
    """A received protocol frame.

    Format: [FE EA 20][opcode:1][file_id:1][payload:variable]
    """

    opcode: int
    file_id: int
    payload: bytes
    raw: bytes


def format_frame(data: bytes) -> str:
    """Hex dump used by SEND/RECV debug logging."""
    return data.hex(" ")


def parse_frame(data: bytes) -> Frame:
    """Split raw notification data into header fields and payload.

    Args:
        data: Raw notification bytes

    Returns:
        Parsed Frame

    Raises:
        UnexpectedFrameError: If data is too short for a header or the
            header bytes do not match
    """
    if len(data) < HEADER_LENGTH:
        raise UnexpectedFrameError(
            f"Frame too short: {len(data)} bytes (need at least {HEADER_LENGTH})"
        )

    if data[:3] != FRAME_HEADER:
        raise UnexpectedFrameError(f"Unknown frame header: {format_frame(data[:3])}")

    return Frame(
        opcode=data[3],
        file_id=data[4],
        payload=bytes(data[HEADER_LENGTH:]),
        raw=bytes(data),
    )


def parse_chunk_request(frame: Frame) -> int:
    """Extract the requested chunk index.

    Format: [header:5][index:2 BE]

    Raises:
        MalformedFrameError: If the payload is shorter than 2 bytes
    """
    if len(frame.payload) < 2:
        raise MalformedFrameError(
            f"Chunk request too short: {len(frame.raw)} bytes (need {HEADER_LENGTH + 2})"
        )
    return struct.unpack(">H", frame.payload[0:2])[0]


def parse_completion(frame: Frame) -> int:
    """Extract the 4-byte value the watch reports once all data arrived.

    The meaning of the value (checksum or otherwise) is unknown; it is
    returned as-is.

    Raises:
        MalformedFrameError: If the payload is shorter than 4 bytes
    """
    if len(frame.payload) < 4:
        raise MalformedFrameError(
            f"Completion frame too short: {len(frame.raw)} bytes (need {HEADER_LENGTH + 4})"
        )
    return struct.unpack(">I", frame.payload[0:4])[0]


def parse_prep_command(data: bytes) -> int:
    """Decode a prep command back to the announced file length."""
    frame = parse_frame(data)
    if frame.opcode != Opcode.FILE_LENGTH:
        raise UnexpectedFrameError(
            f"Not a prep command: opcode 0x{frame.opcode:02x}"
        )
    return parse_completion(frame)
