"""Tests for decoding the universal identity reply."""

import pytest

from push2control.domain.identity import DeviceIdentity, decode_device_identity
from push2control.protocol.errors import MalformedPayloadError

from conftest import IDENTITY_REPLY_BYTES


def test_decode_fixture_reply():
    identity = decode_device_identity(IDENTITY_REPLY_BYTES)
    assert identity == DeviceIdentity(
        firmware_version="1.7",
        serial_number=0x4D + (0x5A << 7) + (0x10 << 14) + (0x2C << 21),
        software_build=0x2E + (0x01 << 7),
        device_family_code=0x67 + (0x32 << 7),
        device_family_member_code=2,
        board_revision=1,
    )
    assert identity.serial_number == 92548429
    assert identity.software_build == 174
    assert identity.device_family_code == 6503


def test_decode_accepts_exactly_22_bytes():
    identity = decode_device_identity(list(IDENTITY_REPLY_BYTES[:22]))
    assert identity.board_revision == 1


def test_decode_rejects_short_reply():
    with pytest.raises(MalformedPayloadError):
        decode_device_identity(IDENTITY_REPLY_BYTES[:21])


def test_identity_is_immutable():
    identity = decode_device_identity(IDENTITY_REPLY_BYTES)
    with pytest.raises(AttributeError):
        identity.board_revision = 2  # type: ignore[misc]
