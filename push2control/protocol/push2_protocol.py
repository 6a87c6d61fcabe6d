from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from push2control.domain.identity import DeviceIdentity, decode_device_identity
from push2control.domain.touch_strip import (
    TouchStripByteCode,
    TouchStripConfiguration,
    TouchStripOverrides,
    TouchStripSetting,
)
from push2control.protocol.codes import (
    DISPLAY_BRIGHTNESS_DIGITS,
    IDENTITY_REPLY_KEY,
    IDENTITY_REQUEST,
    MAX_DISPLAY_BRIGHTNESS,
    Push2SysexCodes,
)
from push2control.protocol.engine import RequestResponseEngine
from push2control.protocol.errors import (
    InvalidInputError,
    MalformedPayloadError,
    VerificationMismatchError,
)
from push2control.protocol.sysex import SysexFrame
from push2control.protocol.varlen7 import decode_varlen7, encode_varlen7


class Push2Event(Enum):
    IDENTITY_RECEIVED = "identity_received"
    TOUCH_STRIP_CONFIGURATION_RECEIVED = "touch_strip_configuration_received"


class Push2Protocol:
    """High-level protocol operations for a Push 2.

    This class deals with:
    - the device identity inquiry
    - reading and writing the touch strip configuration
    - reading and writing (with read-back verification) the display brightness

    The touch strip write is not read back; the brightness write is.
    """

    def __init__(self, engine: RequestResponseEngine, *, timeout_s: float | None = None) -> None:
        self._engine = engine
        self.timeout_s = engine.timeout_s if timeout_s is None else timeout_s

        self.device_identity: DeviceIdentity | None = None
        self.touch_strip_configuration: TouchStripConfiguration | None = None

        self._listeners: dict[Push2Event, list[Callable[[Any], None]]] = {e: [] for e in Push2Event}
        self._logger = logging.getLogger(self.__class__.__name__)

    def add_listener(self, event: Push2Event, callback: Callable[[Any], None]) -> None:
        self._listeners[event].append(callback)

    def remove_listener(self, event: Push2Event, callback: Callable[[Any], None]) -> None:
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def query_identity(self, *, timeout_s: float | None = None) -> DeviceIdentity:
        self._logger.info("Requesting device identity")
        raw = self._engine.transact(
            IDENTITY_REQUEST, IDENTITY_REPLY_KEY, timeout_s=self._timeout(timeout_s)
        )

        identity = decode_device_identity(raw)
        self._logger.info(
            "Device identity: firmware=%s build=%d serial=%d",
            identity.firmware_version,
            identity.software_build,
            identity.serial_number,
        )
        self.device_identity = identity
        self._notify(Push2Event.IDENTITY_RECEIVED, identity)
        return identity

    def get_config(self, command_id: int, *, timeout_s: float | None = None) -> SysexFrame:
        """Read a setting: send `command_id` and return the reply frame."""
        return self._engine.request([command_id], timeout_s=self._timeout(timeout_s))

    def set_config(self, command_id: int, payload: Sequence[int] | bytes = ()) -> None:
        """Write a setting. No reply is awaited."""
        self._engine.send_command([command_id, *payload])

    def get_touch_strip_configuration(self, *, timeout_s: float | None = None) -> TouchStripConfiguration:
        frame = self.get_config(Push2SysexCodes.GET_TOUCH_STRIP_CONFIG, timeout_s=timeout_s)
        if len(frame.payload) < 1:
            raise MalformedPayloadError("Touch strip configuration reply has no payload")

        config = TouchStripConfiguration.from_byte_code(frame.payload[0])
        self._logger.info("Touch strip configuration: 0x%02X", config.to_byte_code())
        self.touch_strip_configuration = config
        self._notify(Push2Event.TOUCH_STRIP_CONFIGURATION_RECEIVED, config)
        return config

    def set_touch_strip_configuration(
        self,
        setting: TouchStripSetting,
        *,
        timeout_s: float | None = None,
    ) -> TouchStripConfiguration:
        """Write the touch strip configuration and return what was written.

        A `TouchStripOverrides` setting reads the current configuration first and
        changes only the named flags.
        """

        if isinstance(setting, TouchStripByteCode):
            config = TouchStripConfiguration.from_byte_code(setting.code)
        elif isinstance(setting, TouchStripOverrides):
            TouchStripConfiguration.check_overrides(setting.flags)
            current = self.get_touch_strip_configuration(timeout_s=timeout_s)
            config = current.with_overrides(setting.flags)
        else:
            raise InvalidInputError(
                f"Expected TouchStripByteCode or TouchStripOverrides; got {type(setting).__name__}"
            )

        code = config.to_byte_code()
        self._logger.info("Setting touch strip configuration to 0x%02X: %s", code, config.as_dict())
        self.set_config(Push2SysexCodes.SET_TOUCH_STRIP_CONFIG, [code])
        self.touch_strip_configuration = config
        return config

    def get_display_brightness(self, *, timeout_s: float | None = None) -> int:
        frame = self.get_config(Push2SysexCodes.GET_DISPLAY_BRIGHTNESS, timeout_s=timeout_s)
        if len(frame.payload) < DISPLAY_BRIGHTNESS_DIGITS:
            raise MalformedPayloadError(
                f"Display brightness reply needs {DISPLAY_BRIGHTNESS_DIGITS} payload bytes; "
                f"got {len(frame.payload)}"
            )
        value = decode_varlen7(frame.payload[:DISPLAY_BRIGHTNESS_DIGITS])
        self._logger.info("Display brightness -> %d", value)
        return value

    def set_display_brightness(self, value: int, *, timeout_s: float | None = None) -> None:
        """Set the display brightness (0..255) and verify it by reading it back."""

        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_DISPLAY_BRIGHTNESS:
            raise InvalidInputError(f"display brightness must be 0..{MAX_DISPLAY_BRIGHTNESS}; got {value!r}")

        self._logger.info("Setting display brightness to %d", value)
        self.set_config(
            Push2SysexCodes.SET_DISPLAY_BRIGHTNESS,
            encode_varlen7(value, width=DISPLAY_BRIGHTNESS_DIGITS),
        )

        actual = self.get_display_brightness(timeout_s=timeout_s)
        if actual != value:
            raise VerificationMismatchError("display brightness", value, actual)

    def _timeout(self, timeout_s: float | None) -> float:
        return self.timeout_s if timeout_s is None else timeout_s

    def _notify(self, event: Push2Event, value: Any) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(value)
            except Exception:
                self._logger.exception("Listener for %s failed", event.value)
