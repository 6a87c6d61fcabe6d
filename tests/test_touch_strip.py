"""Tests for the packed touch strip configuration."""

import pytest

from push2control.domain.touch_strip import TouchStripConfiguration
from push2control.protocol.errors import InvalidInputError


def test_defaults_encode_to_documented_byte():
    config = TouchStripConfiguration()
    assert config.as_dict() == {
        "leds_controlled_by_push_or_host": 0,
        "host_sends_values_or_sysex": 0,
        "values_sent_as_pitch_bend_or_mod_wheel": 0,
        "leds_show_bar_or_point": 1,
        "bar_starts_at_bottom_or_center": 0,
        "do_auto_return_no_or_yes": 1,
        "auto_return_to_bottom_or_center": 1,
    }
    assert config.to_byte_code() == 0b1101000 == 104


def test_flag_order_is_bit_order():
    names = TouchStripConfiguration.flag_names()
    for bit, name in enumerate(names):
        config = TouchStripConfiguration.from_byte_code(1 << bit)
        assert getattr(config, name) == 1
        assert sum(config.as_dict().values()) == 1


def test_every_byte_code_roundtrips():
    for code in range(128):
        assert TouchStripConfiguration.from_byte_code(code).to_byte_code() == code


@pytest.mark.parametrize("code", [-1, 128, 255, 1.0, True])
def test_from_byte_code_rejects_out_of_range(code):
    with pytest.raises(InvalidInputError):
        TouchStripConfiguration.from_byte_code(code)


def test_overrides_merge_onto_existing_flags():
    config = TouchStripConfiguration().with_overrides(
        {"leds_controlled_by_push_or_host": 1, "do_auto_return_no_or_yes": False}
    )
    assert config.leds_controlled_by_push_or_host == 1
    assert config.do_auto_return_no_or_yes == 0
    # untouched flags keep their defaults
    assert config.leds_show_bar_or_point == 1
    assert config.auto_return_to_bottom_or_center == 1
    assert config.to_byte_code() == 0b1001001


def test_overrides_reject_unknown_flag():
    with pytest.raises(InvalidInputError, match="LEDsShowBarOrPoint"):
        TouchStripConfiguration().with_overrides({"LEDsShowBarOrPoint": 1})


def test_flag_values_must_be_bits():
    with pytest.raises(InvalidInputError):
        TouchStripConfiguration(leds_show_bar_or_point=2)


def test_configuration_is_immutable():
    config = TouchStripConfiguration()
    with pytest.raises(AttributeError):
        config.leds_show_bar_or_point = 0  # type: ignore[misc]


def test_check_overrides_rejects_non_bit_values():
    with pytest.raises(InvalidInputError, match="bar_starts_at_bottom_or_center"):
        TouchStripConfiguration.check_overrides({"bar_starts_at_bottom_or_center": 2})
    TouchStripConfiguration.check_overrides({"bar_starts_at_bottom_or_center": True})
