from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
from typing import Any, cast

import mido

from midi import Push2Midi
from push2control.protocol.sysex import format_sysex_bytes


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionInfo:
    output_name: str
    port_name: str
    virtual: bool


class MidiTransport:
    """Thin wrapper around `Push2Midi` with an app-friendly interface."""

    def __init__(self, midi: Push2Midi) -> None:
        self._midi = midi

    def list_output_ports(self) -> list[str]:
        return self._midi.list_ports().outputs

    def connect(self) -> ConnectionInfo:
        output_name = self._midi.connect()
        logger.info("Connected MIDI: output=%r virtual=%s", output_name, self._midi.virtual)
        return ConnectionInfo(
            output_name=output_name,
            port_name=self._midi.port_name,
            virtual=self._midi.virtual,
        )

    def close(self) -> None:
        logger.info("Closing MIDI transport")
        self._midi.close()

    def send_sysex(self, framed_or_unframed: Sequence[int] | bytes | bytearray) -> None:
        logger.debug("TX sysex: %s", format_sysex_bytes(list(framed_or_unframed)))
        self._midi.send_sysex(framed_or_unframed)

    def receive_pending(self) -> list[mido.Message]:
        messages = self._midi.receive_pending()
        for msg in messages:
            m = cast(Any, msg)
            if getattr(m, "type", None) == "sysex":
                logger.debug("RX sysex: %s", format_sysex_bytes(list(m.data)))
        return messages
