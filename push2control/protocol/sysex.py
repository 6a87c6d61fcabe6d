from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, cast

import mido

from push2control.protocol.codes import (
    COMMAND_ID_OFFSET,
    GENERAL_INFORMATION,
    IDENTITY_REPLY,
    IDENTITY_REPLY_KEY,
    MIN_FRAME_LENGTH,
    PUSH2_SYSEX_HEADER,
    SYSEX_END,
    SYSEX_START,
    UNIVERSAL_NON_REALTIME,
)
from push2control.protocol.errors import InvalidInputError, MalformedFrameError


@dataclass(frozen=True)
class SysexFrame:
    command: int
    payload: bytes
    raw: bytes

    def __repr__(self) -> str:
        return (
            f"SysexFrame(command=0x{self.command:02X}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def build_push2_sysex(command: Sequence[int] | bytes | bytearray) -> list[int]:
    """Build a *framed* Push 2 SysEx message as a list of ints.

    `command` is the command id followed by its payload bytes.
    Output is: F0 00 21 1D 01 01 <cmd> <payload...> F7
    """

    body = list(command)
    if not body:
        raise InvalidInputError("command must contain at least the command id")
    for b in body:
        if isinstance(b, bool) or not isinstance(b, int) or b < 0 or b > 0x7F:
            raise InvalidInputError(f"SysEx data bytes must be 0..127; got {b!r}")

    return [*PUSH2_SYSEX_HEADER, *body, SYSEX_END]


def parse_push2_sysex(raw: Sequence[int] | bytes | bytearray) -> SysexFrame:
    """Parse a framed Push 2 SysEx message.

    Raises `MalformedFrameError` if the message is too short, does not start
    with the Push 2 header, or is not terminated with F7.
    """

    data = bytes(raw)
    if len(data) < MIN_FRAME_LENGTH:
        raise MalformedFrameError(
            f"Push 2 SysEx frame needs at least {MIN_FRAME_LENGTH} bytes; got {len(data)}"
        )
    if tuple(data[:COMMAND_ID_OFFSET]) != PUSH2_SYSEX_HEADER:
        raise MalformedFrameError(f"Not a Push 2 SysEx header: {format_sysex_bytes(data[:COMMAND_ID_OFFSET])}")
    if data[-1] != SYSEX_END:
        raise MalformedFrameError(f"SysEx frame is not terminated with F7: {format_sysex_bytes(data)}")

    return SysexFrame(
        command=data[COMMAND_ID_OFFSET],
        payload=data[COMMAND_ID_OFFSET + 1 : -1],
        raw=data,
    )


def is_identity_reply(raw: bytes) -> bool:
    return (
        len(raw) >= 5
        and raw[0] == SYSEX_START
        and raw[1] == UNIVERSAL_NON_REALTIME
        and raw[3] == GENERAL_INFORMATION
        and raw[4] == IDENTITY_REPLY
    )


def correlation_key(raw: bytes) -> int | str | None:
    """Return the key that pairs an inbound frame with an outstanding request.

    Push 2 frames are keyed by their command id byte. Identity replies share a
    single key. Anything else cannot answer a request and yields None.
    """

    if is_identity_reply(raw):
        return IDENTITY_REPLY_KEY
    if len(raw) >= MIN_FRAME_LENGTH and tuple(raw[:COMMAND_ID_OFFSET]) == PUSH2_SYSEX_HEADER:
        return raw[COMMAND_ID_OFFSET]
    return None


def sysex_bytes(message: mido.Message) -> bytes | None:
    """Return the framed bytes (F0..F7) of a mido SysEx message, or None."""

    msg = cast(Any, message)
    if getattr(msg, "type", None) != "sysex":
        return None
    return bytes(msg.bytes())


def format_sysex_bytes(data: bytes | bytearray | Sequence[int], *, max_len: int = 64) -> str:
    """Format SysEx bytes as hex, truncated for logs.

    Accepts framed (F0..F7) or unframed payloads.
    """

    raw = bytes(data)
    truncated = raw[:max_len]
    hex_part = " ".join(f"{b:02X}" for b in truncated)
    if len(raw) > max_len:
        return f"{hex_part} ...(+{len(raw) - max_len} bytes)"
    return hex_part
