from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace

from push2control.protocol.errors import InvalidInputError


# Touch strip configuration flags
#
#   bit |6|5|4|3|2|1|0|                       |   0          |   1
#        | | | | | | +-- LEDs controlled by   | Push 2*      | host
#        | | | | | +---- host sends           | values*      | sysex
#        | | | | +------ values sent as       | pitch bend*  | mod wheel
#        | | | +-------- LEDs show            | a bar        | a point*
#        | | +---------- bar starts at        | bottom*      | center
#        | +------------ do autoreturn        | no           | yes*
#        +-------------- autoreturn to        | bottom       | center*
#
# (* = device default)


@dataclass(frozen=True)
class TouchStripConfiguration:
    """Seven on/off settings packed into the touch strip configuration byte.

    Field order is bit order: the first field is bit 0.
    """

    leds_controlled_by_push_or_host: int = 0
    # Ignored by the device unless the host controls the LEDs.
    host_sends_values_or_sysex: int = 0
    values_sent_as_pitch_bend_or_mod_wheel: int = 0
    leds_show_bar_or_point: int = 1
    bar_starts_at_bottom_or_center: int = 0
    do_auto_return_no_or_yes: int = 1
    auto_return_to_bottom_or_center: int = 1

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool):
                object.__setattr__(self, f.name, int(value))
            elif value not in (0, 1):
                raise InvalidInputError(f"{f.name} must be 0 or 1; got {value!r}")

    @classmethod
    def flag_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_byte_code(cls, code: int) -> TouchStripConfiguration:
        if isinstance(code, bool) or not isinstance(code, int) or not 0 <= code <= 0x7F:
            raise InvalidInputError(f"touch strip byte code must be 0..127; got {code!r}")
        return cls(**{name: (code >> i) & 1 for i, name in enumerate(cls.flag_names())})

    @classmethod
    def check_overrides(cls, overrides: Mapping[str, int | bool]) -> None:
        unknown = sorted(set(overrides) - set(cls.flag_names()))
        if unknown:
            raise InvalidInputError(f"Unknown touch strip flag(s): {', '.join(unknown)}")
        for name, value in overrides.items():
            if value not in (0, 1):
                raise InvalidInputError(f"{name} must be 0 or 1; got {value!r}")

    def with_overrides(self, overrides: Mapping[str, int | bool]) -> TouchStripConfiguration:
        """Return a copy with the named flags replaced; other flags are kept."""

        self.check_overrides(overrides)
        return replace(self, **dict(overrides))

    def to_byte_code(self) -> int:
        code = 0
        for i, name in enumerate(self.flag_names()):
            code |= getattr(self, name) << i
        return code

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class TouchStripByteCode:
    """Write an already encoded configuration byte as-is."""

    code: int


@dataclass(frozen=True)
class TouchStripOverrides:
    """Write the current device configuration with some flags changed."""

    flags: Mapping[str, int | bool]


TouchStripSetting = TouchStripByteCode | TouchStripOverrides
