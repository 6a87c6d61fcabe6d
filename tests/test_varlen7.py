"""Tests for the 7-bit-per-byte integer codec."""

import pytest

from push2control.protocol.errors import InvalidInputError
from push2control.protocol.varlen7 import decode_varlen7, encode_varlen7


def test_encode_zero_yields_one_digit():
    assert encode_varlen7(0) == [0]


def test_encode_is_least_significant_first():
    # 300 = 0x2C + (0x02 << 7)
    assert encode_varlen7(300) == [0x2C, 0x02]


def test_encode_uses_minimum_digits():
    assert encode_varlen7(0x7F) == [0x7F]
    assert encode_varlen7(0x80) == [0x00, 0x01]
    assert len(encode_varlen7(2**35 - 1)) == 5


def test_encode_pads_to_width():
    assert encode_varlen7(5, width=2) == [5, 0]
    assert encode_varlen7(255, width=2) == [0x7F, 0x01]


def test_encode_rejects_value_wider_than_width():
    with pytest.raises(InvalidInputError):
        encode_varlen7(2**14, width=2)


@pytest.mark.parametrize("bad", [-1, 1.5, "3", None, True])
def test_encode_rejects_non_natural_numbers(bad):
    with pytest.raises(InvalidInputError):
        encode_varlen7(bad)


def test_invalid_input_is_a_value_error():
    with pytest.raises(ValueError):
        encode_varlen7(-5)


def test_decode_weights_each_digit_by_position():
    assert decode_varlen7([0x4D, 0x5A, 0x10, 0x2C, 0x00]) == 92548429
    assert decode_varlen7(bytes([0x2E, 0x01])) == 174


def test_decode_empty_is_zero():
    assert decode_varlen7([]) == 0


@pytest.mark.parametrize(
    "value",
    [0, 1, 127, 128, 255, 16383, 16384, 2**21 - 1, 2**28 + 12345, 2**35 - 1],
)
def test_roundtrip(value):
    assert decode_varlen7(encode_varlen7(value)) == value
