"""Configuration file loading and defaults.

Nothing is read unless a path is given explicitly; without one every value
is the built-in default.
"""

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_DEVICES = ["Xiaomi Smart Band 9 082F"]


@dataclass
class LogConfig:
    level: str = "INFO"


@dataclass
class BLEConfig:
    adapter: str = ""
    scan_timeout: float = 5.0
    reconnect_min: float = 5.0
    reconnect_max: float = 5.0
    channel_capacity: int = 100


@dataclass
class DeviceConfig:
    address: str = ""
    names: list[str] = field(default_factory=lambda: list(SUPPORTED_DEVICES))


@dataclass
class Config:
    log: LogConfig = field(default_factory=LogConfig)
    ble: BLEConfig = field(default_factory=BLEConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)


def load_config(path: str | Path | None = None) -> Config:
    """Load config from ``path``, with defaults for missing values.

    Returns the defaults when no path is given, or when the file cannot be
    read or parsed.
    """
    if path is None:
        return Config()

    path = Path(path).expanduser()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
        config = _parse_config(data)
    except OSError as e:
        logger.warning("Failed to read config '%s': %s. Using defaults.", path, e)
        return Config()
    except (tomllib.TOMLDecodeError, TypeError) as e:
        logger.warning("Failed to parse config '%s': %s. Using defaults.", path, e)
        return Config()

    logger.debug("Loaded config from %s", path)
    return config


def _parse_config(data: dict) -> Config:
    """Parse TOML dict into Config dataclass.

    Uses dataclass defaults for missing values. Unknown keys raise TypeError.
    """
    return Config(
        log=LogConfig(**data.get("log", {})),
        ble=BLEConfig(**data.get("ble", {})),
        device=DeviceConfig(**data.get("device", {})),
    )
