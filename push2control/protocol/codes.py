"""Ableton Push 2 SysEx constants.

Values follow the Push 2 MIDI and display interface documentation.
Keep protocol constants here so the rest of the codebase doesn't duplicate them.
"""

from __future__ import annotations


SYSEX_START = 0xF0
SYSEX_END = 0xF7

# F0 00 21 1D 01 01: Ableton manufacturer id, device id, model id.
PUSH2_SYSEX_HEADER = (SYSEX_START, 0x00, 0x21, 0x1D, 0x01, 0x01)
COMMAND_ID_OFFSET = len(PUSH2_SYSEX_HEADER)
MIN_FRAME_LENGTH = COMMAND_ID_OFFSET + 2

# Universal non-realtime device inquiry: F0 7E <device> 06 01 F7
IDENTITY_REQUEST = (SYSEX_START, 0x7E, 0x01, 0x06, 0x01, SYSEX_END)
UNIVERSAL_NON_REALTIME = 0x7E
GENERAL_INFORMATION = 0x06
IDENTITY_REPLY = 0x02

# Correlation key used for identity replies, which carry no Push 2 command id.
IDENTITY_REPLY_KEY = "identity_reply"


class Push2SysexCodes:
    SET_DISPLAY_BRIGHTNESS = 0x08
    GET_DISPLAY_BRIGHTNESS = 0x09

    SET_TOUCH_STRIP_CONFIG = 0x17
    GET_TOUCH_STRIP_CONFIG = 0x18


MAX_DISPLAY_BRIGHTNESS = 255
DISPLAY_BRIGHTNESS_DIGITS = 2
