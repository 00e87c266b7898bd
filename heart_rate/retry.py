"""Reconnection delay policies for the monitor loop."""

from dataclasses import dataclass
from typing import Protocol

from .config import BLEConfig


class RetryPolicy(Protocol):
    def delay(self, attempt: int) -> float | None:
        """Seconds to wait before retry number ``attempt`` (1-based), or None to give up."""
        ...


@dataclass(frozen=True)
class FixedBackoff:
    """Same delay before every retry."""

    interval: float = 5.0
    max_attempts: int | None = None

    def delay(self, attempt: int) -> float | None:
        if self.max_attempts is not None and attempt > self.max_attempts:
            return None
        return self.interval


@dataclass(frozen=True)
class ExponentialBackoff:
    """Delay doubles on each consecutive failure, capped at ``maximum``."""

    minimum: float = 1.0
    maximum: float = 30.0
    max_attempts: int | None = None

    def delay(self, attempt: int) -> float | None:
        if self.max_attempts is not None and attempt > self.max_attempts:
            return None
        # Exponent is clamped so long outages cannot overflow the float
        return min(self.minimum * 2 ** min(attempt - 1, 64), self.maximum)


def policy_from_config(ble: BLEConfig) -> RetryPolicy:
    """Fixed backoff unless the config asks for a growing delay."""
    if ble.reconnect_max <= ble.reconnect_min:
        return FixedBackoff(interval=ble.reconnect_min)
    return ExponentialBackoff(minimum=ble.reconnect_min, maximum=ble.reconnect_max)
