from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable

import mido
import pytest

from push2control.protocol.codes import IDENTITY_REQUEST, PUSH2_SYSEX_HEADER, Push2SysexCodes
from push2control.protocol.engine import RequestResponseEngine
from push2control.protocol.varlen7 import decode_varlen7, encode_varlen7


# Identity reply captured in the shape a Push 2 sends it (firmware 1.7).
IDENTITY_REPLY_BYTES = bytes(
    [
        0xF0, 0x7E, 0x01, 0x06, 0x02,
        0x00, 0x21, 0x1D,  # manufacturer
        0x67, 0x32,  # family code
        0x02, 0x00,  # family member code
        0x01, 0x07,  # firmware major, minor
        0x2E, 0x01,  # software build
        0x4D, 0x5A, 0x10, 0x2C, 0x00,  # serial number
        0x01,  # board revision
        0xF7,
    ]
)


def push2_frame(command: int, *payload: int) -> list[int]:
    return [*PUSH2_SYSEX_HEADER, command, *payload, 0xF7]


def sysex_message(raw: list[int] | bytes) -> mido.Message:
    return mido.Message.from_bytes(list(raw))


class FakeTransport:
    """Records outgoing frames and hands out queued inbound messages."""

    def __init__(self) -> None:
        self.sent: list[list[int]] = []
        self.on_send: Callable[[list[int]], None] | None = None
        self.fail_sends = False
        self._inbound: deque[mido.Message] = deque()
        self._lock = threading.Lock()

    def send_sysex(self, framed_or_unframed) -> None:
        if self.fail_sends:
            raise RuntimeError("MIDI output not connected. Call connect() first.")
        data = list(framed_or_unframed)
        self.sent.append(data)
        if self.on_send is not None:
            self.on_send(data)

    def receive_pending(self) -> list[mido.Message]:
        with self._lock:
            messages = list(self._inbound)
            self._inbound.clear()
        return messages

    def push(self, message: mido.Message) -> None:
        with self._lock:
            self._inbound.append(message)


class FakePush2:
    """Answers Push 2 SysEx requests the way the hardware does."""

    def __init__(self, transport: FakeTransport) -> None:
        self.transport = transport
        self.brightness = 100
        self.touch_strip_code = 0b1101000
        self.identity_reply = IDENTITY_REPLY_BYTES
        # When set, the brightness reported back differs from what was written.
        self.brightness_offset = 0
        self.silent = False
        transport.on_send = self.handle

    def handle(self, data: list[int]) -> None:
        if self.silent:
            return
        if tuple(data) == IDENTITY_REQUEST:
            self.transport.push(sysex_message(self.identity_reply))
            return
        if tuple(data[:6]) != PUSH2_SYSEX_HEADER:
            return

        command, payload = data[6], data[7:-1]
        if command == Push2SysexCodes.SET_DISPLAY_BRIGHTNESS:
            self.brightness = decode_varlen7(payload) + self.brightness_offset
        elif command == Push2SysexCodes.GET_DISPLAY_BRIGHTNESS:
            reply = push2_frame(command, *encode_varlen7(self.brightness, width=2))
            self.transport.push(sysex_message(reply))
        elif command == Push2SysexCodes.SET_TOUCH_STRIP_CONFIG:
            self.touch_strip_code = payload[0]
        elif command == Push2SysexCodes.GET_TOUCH_STRIP_CONFIG:
            self.transport.push(sysex_message(push2_frame(command, self.touch_strip_code)))


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def engine(transport: FakeTransport):
    engine = RequestResponseEngine(transport, timeout_s=1.0, poll_interval_s=0.001)
    engine.start()
    yield engine
    engine.stop()


@pytest.fixture
def device(transport: FakeTransport) -> FakePush2:
    return FakePush2(transport)
