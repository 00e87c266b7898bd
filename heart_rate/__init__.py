"""BLE heart rate monitor client."""

from .channel import ChannelClosed, Receiver, Sender, open_channel
from .config import Config, load_config
from .discovery import MonitorFactory, locate_device
from .errors import (
    CharacteristicNotFound,
    DeviceNotFound,
    HeartRateError,
    NoAdaptersAvailable,
    NoSupportedMonitorFound,
    TransportError,
)
from .log import setup_logging
from .monitor import HeartRateMonitor, MonitorState
from .parser import HeartRateMeasurement, decode_heart_rate, parse_heart_rate
from .retry import ExponentialBackoff, FixedBackoff, RetryPolicy
from .transport import HR_CHAR_UUID, BleakTransport

__all__ = [
    "decode_heart_rate",
    "parse_heart_rate",
    "HeartRateMeasurement",
    "HeartRateMonitor",
    "MonitorState",
    "MonitorFactory",
    "locate_device",
    "open_channel",
    "Sender",
    "Receiver",
    "ChannelClosed",
    "RetryPolicy",
    "FixedBackoff",
    "ExponentialBackoff",
    "BleakTransport",
    "HR_CHAR_UUID",
    "HeartRateError",
    "NoAdaptersAvailable",
    "DeviceNotFound",
    "CharacteristicNotFound",
    "NoSupportedMonitorFound",
    "TransportError",
    "Config",
    "load_config",
    "setup_logging",
]
