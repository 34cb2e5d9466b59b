"""Test descriptor, verdict and session models."""

import pytest

from dafit.models import (
    DeviceDescriptor,
    QualificationVerdict,
    TransferSession,
    TransferState,
    VerdictStatus,
    decode_battery,
    decode_text,
)


class TestDecoding:
    """Test raw characteristic decoding."""

    def test_decode_text(self):
        assert decode_text(b"MOYOUNG-V2") == "MOYOUNG-V2"

    def test_decode_text_replaces_invalid_utf8(self):
        assert decode_text(b"MO\xffYOUNG") == "MO\ufffdYOUNG"

    def test_decode_battery_uses_first_byte(self):
        assert decode_battery(b"\x57") == 87
        assert decode_battery(b"\xff\x01") == 255

    def test_decode_battery_empty(self):
        with pytest.raises(ValueError, match="no data"):
            decode_battery(b"")


def test_descriptor_from_raw():
    descriptor = DeviceDescriptor.from_raw(
        manufacturer=b"MOYOUNG-V2",
        software_revision=b"MOY-GKE5-2.0.6",
        serial_number=b"\x00\xfe",
        battery_level=b"\x64",
        name="C20",
        address="AA:BB:CC:DD:EE:FF",
    )

    assert descriptor.manufacturer == "MOYOUNG-V2"
    assert descriptor.software_revision == "MOY-GKE5-2.0.6"
    assert descriptor.serial_number == "\x00\ufffd"
    assert descriptor.battery_level == 100
    assert descriptor.name == "C20"


class TestQualificationVerdict:
    """Test verdict constructors."""

    def test_qualified_carries_descriptor(self):
        descriptor = DeviceDescriptor("MOYOUNG-V2", "1.0", "123", 50)
        verdict = QualificationVerdict.qualified(descriptor)
        assert verdict.status is VerdictStatus.QUALIFIED
        assert verdict.is_qualified
        assert verdict.descriptor is descriptor

    def test_incompatible(self):
        verdict = QualificationVerdict.incompatible("missing services")
        assert verdict.status is VerdictStatus.INCOMPATIBLE
        assert not verdict.is_qualified
        assert verdict.descriptor is None
        assert verdict.reason == "missing services"

    def test_name_mismatch(self):
        verdict = QualificationVerdict.name_mismatch()
        assert verdict.status is VerdictStatus.NAME_MISMATCH
        assert verdict.reason == ""


class TestTransferSession:
    """Test session bookkeeping."""

    def test_length_fixed_from_payload(self):
        session = TransferSession(bytearray(b"abc"))
        assert session.file_length == 3
        assert session.payload == b"abc"
        assert session.state is TransferState.IDLE
        assert session.expected_index == 0

    def test_abort(self):
        session = TransferSession(b"")
        session.abort("link lost")
        assert session.state is TransferState.ABORTED
        assert session.state.is_terminal
        assert session.abort_reason == "link lost"

    def test_terminal_states(self):
        assert TransferState.DONE.is_terminal
        assert not TransferState.SERVING.is_terminal
