from __future__ import annotations

import logging
import os


# Loggers that dump every SysEx frame at DEBUG.
WIRE_LOGGERS = (
    "RequestResponseEngine",
    "push2control.transport.midi_transport",
)


def configure_logging(*, cli_level: str | None = None, wire_debug: bool | None = None) -> None:
    """Configure root logging for the app.

    Precedence for the root level:
    1) `cli_level` (e.g. from argparse)
    2) env var `PUSH2_LOG_LEVEL`
    3) default INFO

    Per-frame hex dumps stay off at DEBUG unless `wire_debug` is set (or env
    var `PUSH2_WIRE_DEBUG=1`); the wire loggers are capped at INFO otherwise.

    This should be called once, early in the entrypoint.
    """

    level_name = (cli_level or os.environ.get("PUSH2_LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        force=True,
    )

    if wire_debug is None:
        wire_debug = os.environ.get("PUSH2_WIRE_DEBUG", "") in ("1", "true", "yes")
    wire_level = logging.NOTSET if wire_debug else max(level, logging.INFO)
    for name in WIRE_LOGGERS:
        logging.getLogger(name).setLevel(wire_level)
