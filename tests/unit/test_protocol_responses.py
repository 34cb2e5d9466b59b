"""Test notification frame parsing."""

import pytest

from dafit.exceptions import MalformedFrameError, TransferError, UnexpectedFrameError
from dafit.protocol.responses import (
    format_frame,
    parse_chunk_request,
    parse_completion,
    parse_frame,
)


class TestParseFrame:
    """Test header validation and field splitting."""

    def test_parse_chunk_request_frame(self):
        frame = parse_frame(b'\xfe\xea\x20\x07\x74\x00\x02')
        assert frame.opcode == 0x07
        assert frame.file_id == 0x74
        assert frame.payload == b'\x00\x02'
        assert frame.raw == b'\xfe\xea\x20\x07\x74\x00\x02'

    def test_accepts_bytearray(self):
        frame = parse_frame(bytearray(b'\xfe\xea\x20\x09\x74'))
        assert frame.payload == b''
        assert isinstance(frame.raw, bytes)

    def test_too_short(self):
        """Fewer than 5 bytes is not a protocol frame."""
        with pytest.raises(UnexpectedFrameError, match="too short"):
            parse_frame(b'\xfe\xea\x20\x07')

    def test_empty(self):
        with pytest.raises(UnexpectedFrameError):
            parse_frame(b'')

    def test_header_mismatch(self):
        with pytest.raises(UnexpectedFrameError, match="Unknown frame header"):
            parse_frame(b'\xfe\xeb\x20\x07\x74\x00\x00')


class TestParseChunkRequest:
    """Test chunk index extraction."""

    def test_big_endian_index(self):
        frame = parse_frame(b'\xfe\xea\x20\x07\x74\x01\x02')
        assert parse_chunk_request(frame) == 0x0102

    def test_extra_bytes_ignored(self):
        frame = parse_frame(b'\xfe\xea\x20\x07\x74\x00\x05\xff')
        assert parse_chunk_request(frame) == 5

    def test_truncated_index(self):
        frame = parse_frame(b'\xfe\xea\x20\x07\x74\x00')
        with pytest.raises(MalformedFrameError, match="Chunk request too short"):
            parse_chunk_request(frame)


class TestParseCompletion:
    """Test completion value extraction."""

    def test_value(self):
        frame = parse_frame(b'\xfe\xea\x20\x09\x74\x12\x34\x56\x78')
        assert parse_completion(frame) == 0x12345678

    def test_truncated_value(self):
        frame = parse_frame(b'\xfe\xea\x20\x09\x74\x12\x34')
        with pytest.raises(MalformedFrameError, match="Completion frame too short"):
            parse_completion(frame)

    def test_malformed_is_fatal_transfer_error(self):
        """MalformedFrameError aborts transfers, so it must be a TransferError."""
        assert issubclass(MalformedFrameError, TransferError)
        assert not issubclass(UnexpectedFrameError, TransferError)


def test_format_frame():
    assert format_frame(b'\xfe\xea\x20') == "fe ea 20"
