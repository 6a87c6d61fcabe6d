from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


@dataclass
class Push2Config:
    port: str = "user"  # "user" or "live"
    virtual: bool = False
    request_timeout_s: float = 1.0
    backend: str = "mido.backends.rtmidi"

    @classmethod
    def default(cls) -> Push2Config:
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Push2Config:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

        defaults = cls.default()
        virtual = data.get("virtual", defaults.virtual)
        if not isinstance(virtual, bool):
            raise ValueError(f"virtual must be true or false; got {virtual!r}")
        return cls(
            port=str(data.get("port", defaults.port)),
            virtual=virtual,
            request_timeout_s=float(data.get("request_timeout_s", defaults.request_timeout_s)),
            backend=str(data.get("backend", defaults.backend)),
        )


class ConfigManager:
    """Loads connection settings. Device settings are never stored here."""

    def __init__(self, config_path: Path | str = "push2control.json") -> None:
        self.config_path = Path(config_path)
        self.config = self.load()

    def load(self) -> Push2Config:
        if not self.config_path.exists():
            logger.info("Config file not found at %s, using defaults.", self.config_path)
            return Push2Config.default()

        try:
            with open(self.config_path, "r") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value must be an object")
            return Push2Config.from_dict(data)
        except (OSError, ValueError, TypeError) as e:
            logger.error("Failed to load config from %s: %s", self.config_path, e)
            return Push2Config.default()
