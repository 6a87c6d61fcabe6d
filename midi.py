from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional
from typing import Any, cast

import mido

from push2control.protocol.errors import InvalidInputError


PORT_NAMES = {
    "user": "Ableton Push 2 User Port",
    "live": "Ableton Push 2 Live Port",
}


@dataclass(frozen=True)
class MidiPorts:
    inputs: list[str]
    outputs: list[str]


def push2_port_name(port: str) -> str:
    """Map `user`/`live` (any case) to the Push 2 MIDI port name."""
    try:
        return PORT_NAMES[port.lower()]
    except (KeyError, AttributeError):
        raise InvalidInputError(f"Expected port to be either 'user' or 'live'; got {port!r}") from None


class Push2Midi:
    """MIDI transport for exchanging SysEx with an Ableton Push 2.

    - Lists available MIDI ports.
    - Opens the User or Live port pair (input + output), or virtual ports of that name.
    - Sends SysEx messages created by the protocol layer and drains replies.

    Notes on mido SysEx:
    - `mido.Message('sysex', data=...)` expects data WITHOUT 0xF0 and 0xF7.
    - This class accepts either framed (F0...F7) or unframed payloads.
    """

    def __init__(
        self,
        port: str = "user",
        *,
        virtual: bool = False,
        backend: str = "mido.backends.rtmidi",
    ) -> None:
        self.port_name = push2_port_name(port)
        self.virtual = virtual
        self.backend = backend

        mido.set_backend(self.backend)

        self._out: Optional[mido.ports.BaseOutput] = None
        self._in: Optional[mido.ports.BaseInput] = None

    def list_ports(self) -> MidiPorts:
        m = cast(Any, mido)
        return MidiPorts(inputs=m.get_input_names(), outputs=m.get_output_names())

    def connect(self) -> str:
        """Open the input and output for `port_name`.

        Hardware port names get a client suffix on some platforms, so the first
        port whose name starts with `port_name` is used. Returns the output port name.
        """
        m = cast(Any, mido)

        if self.virtual:
            self._out = m.open_output(self.port_name, virtual=True)
            self._in = m.open_input(self.port_name, virtual=True)
            return self.port_name

        outputs = m.get_output_names()
        output_name = next((name for name in outputs if name.startswith(self.port_name)), None)
        if output_name is None:
            raise RuntimeError(
                f"No MIDI output port starts with {self.port_name!r}. "
                f"Available outputs: {outputs}"
            )

        inputs = m.get_input_names()
        input_name = next((name for name in inputs if name.startswith(self.port_name)), None)
        if input_name is None:
            raise RuntimeError(
                f"No MIDI input port starts with {self.port_name!r}. "
                f"Available inputs: {inputs}"
            )

        self._out = m.open_output(output_name)
        self._in = m.open_input(input_name)
        return output_name

    def close(self) -> None:
        if self._in is not None:
            self._in.close()
            self._in = None
        if self._out is not None:
            self._out.close()
            self._out = None

    def send_sysex(self, data: Sequence[int] | bytes | bytearray) -> None:
        """Send a SysEx message.

        Accepts either:
        - Full framed message: [0xF0, ..., 0xF7]
        - Unframed data payload for mido: [...]
        """
        if self._out is None:
            raise RuntimeError("MIDI output not connected. Call connect() first.")

        data_list = self._to_int_list(data)

        # Strip F0/F7 if present.
        if data_list and data_list[0] == 0xF0:
            data_list = data_list[1:]
        if data_list and data_list[-1] == 0xF7:
            data_list = data_list[:-1]

        msg = mido.Message("sysex", data=data_list)
        self._out.send(msg)

    def receive_pending(self) -> list[mido.Message]:
        """Return any pending incoming MIDI messages without blocking."""
        if self._in is None:
            return []

        messages: list[mido.Message] = []
        while True:
            msg = self._in.poll()
            if msg is None:
                break
            messages.append(msg)
        return messages

    @staticmethod
    def _to_int_list(data: Sequence[int] | bytes | bytearray) -> list[int]:
        if isinstance(data, (bytes, bytearray)):
            return list(data)

        if isinstance(data, Iterable):
            out: list[int] = []
            for b in data:
                if not isinstance(b, int):
                    raise TypeError(f"SysEx data items must be ints (0-255); got {type(b)}")
                if b < 0 or b > 255:
                    raise ValueError(f"SysEx byte out of range (0-255): {b}")
                out.append(b)
            return out

        raise TypeError(f"Unsupported SysEx data type: {type(data)}")
