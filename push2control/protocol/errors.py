from __future__ import annotations


class Push2Error(Exception):
    """Base class for everything the Push 2 protocol layer raises."""


class InvalidInputError(Push2Error, ValueError):
    """An argument is outside the domain a codec or operation accepts."""


class MalformedFrameError(Push2Error, ValueError):
    """Wire data is too short or does not carry the expected header."""


class MalformedPayloadError(Push2Error, ValueError):
    """A response frame is well formed but its payload cannot be decoded."""


class RequestTimeoutError(Push2Error, TimeoutError):
    def __init__(self, key: int | str, timeout_s: float, frames_seen: int) -> None:
        self.key = key
        self.timeout_s = timeout_s
        self.frames_seen = frames_seen
        label = f"0x{key:02X}" if isinstance(key, int) else key
        super().__init__(
            f"Timed out after {timeout_s:.2f}s waiting for response {label}. "
            f"Saw {frames_seen} other SysEx frames during wait."
        )


class VerificationMismatchError(Push2Error):
    def __init__(self, setting: str, requested: int, actual: int) -> None:
        self.setting = setting
        self.requested = requested
        self.actual = actual
        super().__init__(
            f"Tried setting {setting} to {requested}, but the device reports {actual}."
        )
