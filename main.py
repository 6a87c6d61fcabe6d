from __future__ import annotations

import argparse
import logging
import sys

from midi import Push2Midi

from push2control.app.config import ConfigManager
from push2control.domain.touch_strip import (
    TouchStripByteCode,
    TouchStripConfiguration,
    TouchStripOverrides,
)
from push2control.logging_setup import configure_logging
from push2control.protocol.engine import RequestResponseEngine
from push2control.protocol.errors import Push2Error
from push2control.protocol.push2_protocol import Push2Protocol
from push2control.transport.midi_transport import MidiTransport


def _parse_flag(text: str) -> tuple[str, int]:
    name, sep, value = text.partition("=")
    if not sep or value.strip() not in ("0", "1"):
        raise argparse.ArgumentTypeError(f"expected NAME=0 or NAME=1; got {text!r}")
    name = name.strip()
    if name not in TouchStripConfiguration.flag_names():
        raise argparse.ArgumentTypeError(
            f"unknown flag {name!r}; choose from {', '.join(TouchStripConfiguration.flag_names())}"
        )
    return name, int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query and configure an Ableton Push 2 over SysEx.")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Can also use PUSH2_LOG_LEVEL env var.",
    )
    parser.add_argument(
        "--wire-debug",
        action="store_true",
        default=None,
        help="Log every SysEx frame sent and received. Can also use PUSH2_WIRE_DEBUG=1.",
    )
    parser.add_argument(
        "--config",
        default="push2control.json",
        help="Path to a JSON settings file. Default: push2control.json.",
    )
    parser.add_argument("--port", choices=("user", "live"), default=None, help="Push 2 MIDI port to use.")
    parser.add_argument("--virtual", action="store_true", default=None, help="Open virtual MIDI ports.")
    parser.add_argument("--timeout", type=float, default=None, help="Response timeout in seconds.")
    parser.add_argument("--identity", action="store_true", help="Print the device identity.")
    parser.add_argument(
        "--get-touch-strip",
        action="store_true",
        help="Print the current touch strip configuration.",
    )
    parser.add_argument(
        "--touch-strip",
        type=lambda s: int(s, 0),
        default=None,
        metavar="CODE",
        help="Write a touch strip configuration byte (0..127, e.g. 0x68).",
    )
    parser.add_argument(
        "--touch-strip-flag",
        type=_parse_flag,
        action="append",
        default=[],
        metavar="NAME=0|1",
        help="Change one touch strip flag, keeping the others. Can be repeated.",
    )
    parser.add_argument("--get-brightness", action="store_true", help="Print the display brightness.")
    parser.add_argument("--brightness", type=int, default=None, help="Set display brightness (0..255).")
    return parser


def run(args: argparse.Namespace, protocol: Push2Protocol, logger: logging.Logger) -> None:
    if args.identity:
        identity = protocol.query_identity()
        logger.info("Device identity:")
        logger.info("- firmware_version: %s", identity.firmware_version)
        logger.info("- software_build: %d", identity.software_build)
        logger.info("- serial_number: %d", identity.serial_number)
        logger.info("- device_family_code: %d", identity.device_family_code)
        logger.info("- device_family_member_code: %d", identity.device_family_member_code)
        logger.info("- board_revision: %d", identity.board_revision)

    if args.touch_strip is not None:
        protocol.set_touch_strip_configuration(TouchStripByteCode(args.touch_strip))
    if args.touch_strip_flag:
        protocol.set_touch_strip_configuration(TouchStripOverrides(dict(args.touch_strip_flag)))

    if args.get_touch_strip:
        config = protocol.get_touch_strip_configuration()
        logger.info("Touch strip configuration (0x%02X):", config.to_byte_code())
        for name, value in config.as_dict().items():
            logger.info("- %s: %d", name, value)

    if args.brightness is not None:
        protocol.set_display_brightness(args.brightness)
        logger.info("Display brightness set to %d", args.brightness)
    if args.get_brightness:
        logger.info("Display brightness: %d", protocol.get_display_brightness())


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    configure_logging(cli_level=args.log_level, wire_debug=args.wire_debug)
    logger = logging.getLogger("main")

    config = ConfigManager(args.config).config
    if args.port is not None:
        config.port = args.port
    if args.virtual is not None:
        config.virtual = args.virtual
    if args.timeout is not None:
        config.request_timeout_s = args.timeout

    try:
        midi = Push2Midi(config.port, virtual=config.virtual, backend=config.backend)
        transport = MidiTransport(midi)
        transport.connect()
    except (Push2Error, RuntimeError, OSError, ImportError) as exc:
        # ImportError: the mido port backend (python-rtmidi by default) is not installed.
        logger.error("Failed to connect to MIDI: %s", exc)
        return 1

    engine = RequestResponseEngine(transport, timeout_s=config.request_timeout_s)
    protocol = Push2Protocol(engine)
    engine.start()
    try:
        run(args, protocol, logger)
    except Push2Error as exc:
        logger.error("%s", exc)
        return 1
    finally:
        engine.stop()
        transport.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
