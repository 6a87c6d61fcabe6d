"""7-bit-per-byte integer codec used for multi-byte Push 2 SysEx fields.

SysEx data bytes cannot have the top bit set, so numeric fields are split into
7-bit digits. On the wire the least significant digit comes first::

    300 -> [0x2C, 0x02]   (0x2C + (0x02 << 7))
"""

from __future__ import annotations

from collections.abc import Sequence

from push2control.protocol.errors import InvalidInputError


DIGIT_BITS = 7
DIGIT_MASK = 0x7F


def encode_varlen7(value: int, *, width: int | None = None) -> list[int]:
    """Encode a non-negative integer as 7-bit digits, least significant first.

    Uses the minimum number of digits (at least one). With `width`, the result
    is zero-padded to exactly that many digits; a value that needs more digits
    than `width` is rejected.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"Only non-negative integers supported; got {value!r}")
    if value < 0:
        raise InvalidInputError(f"Only non-negative integers supported; got {value}")

    digit_count = max(1, -(-value.bit_length() // DIGIT_BITS))
    if width is not None:
        if width < 1:
            raise InvalidInputError(f"width must be >= 1; got {width}")
        if digit_count > width:
            raise InvalidInputError(f"{value} does not fit in {width} 7-bit digits")
        digit_count = width

    return [(value >> (DIGIT_BITS * i)) & DIGIT_MASK for i in range(digit_count)]


def decode_varlen7(digits: Sequence[int] | bytes | bytearray) -> int:
    """Decode 7-bit digits ordered from least to most significant.

    The caller passes the exact slice for the field; nothing beyond the given
    digits is inspected.
    """

    value = 0
    for i, digit in enumerate(digits):
        value += digit << (DIGIT_BITS * i)
    return value
