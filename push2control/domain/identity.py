from __future__ import annotations

from dataclasses import dataclass

from push2control.protocol.errors import MalformedPayloadError
from push2control.protocol.varlen7 import decode_varlen7


# Byte offsets within a framed identity reply:
#   F0 7E <dev> 06 02 <mfr x3> <family x2> <member x2> <fw major> <fw minor>
#   <build x2> <serial x5> <board rev> F7
FAMILY_CODE = slice(8, 10)
FAMILY_MEMBER_CODE = slice(10, 12)
FIRMWARE_MAJOR = 12
FIRMWARE_MINOR = 13
SOFTWARE_BUILD = slice(14, 16)
SERIAL_NUMBER = slice(16, 21)
BOARD_REVISION = 21

MIN_IDENTITY_REPLY_LENGTH = BOARD_REVISION + 1


@dataclass(frozen=True)
class DeviceIdentity:
    firmware_version: str
    serial_number: int
    software_build: int
    device_family_code: int
    device_family_member_code: int
    board_revision: int


def decode_device_identity(raw: bytes | bytearray | list[int]) -> DeviceIdentity:
    """Decode a framed universal identity reply into a `DeviceIdentity`."""

    data = bytes(raw)
    if len(data) < MIN_IDENTITY_REPLY_LENGTH:
        raise MalformedPayloadError(
            f"Identity reply needs at least {MIN_IDENTITY_REPLY_LENGTH} bytes; got {len(data)}"
        )

    return DeviceIdentity(
        firmware_version=f"{data[FIRMWARE_MAJOR]}.{data[FIRMWARE_MINOR]}",
        serial_number=decode_varlen7(data[SERIAL_NUMBER]),
        software_build=decode_varlen7(data[SOFTWARE_BUILD]),
        device_family_code=decode_varlen7(data[FAMILY_CODE]),
        device_family_member_code=decode_varlen7(data[FAMILY_MEMBER_CODE]),
        board_revision=data[BOARD_REVISION],
    )
