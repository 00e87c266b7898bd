"""Exceptions raised while discovering and monitoring a heart rate sensor."""

from collections.abc import Sequence


class HeartRateError(Exception):
    """Base class for all heart rate monitor errors."""


class NoAdaptersAvailable(HeartRateError):
    def __init__(self) -> None:
        super().__init__("Bluetooth adapters not found")


class DeviceNotFound(HeartRateError):
    """No discovered peripheral matched the requested name or address."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"Device not found: {target}")


class CharacteristicNotFound(HeartRateError):
    def __init__(self, uuid: str):
        self.uuid = uuid
        super().__init__(f"Heart rate characteristic not found: {uuid}")


class NoSupportedMonitorFound(HeartRateError):
    """Every candidate device name failed to resolve."""

    def __init__(self, names: Sequence[str]):
        self.names = list(names)
        super().__init__(f"No supported heart rate monitor found (tried: {', '.join(self.names) or 'none'})")


class TransportError(HeartRateError):
    """A Bluetooth operation failed.

    The underlying exception is kept in ``cause`` and chained as ``__cause__``.
    """

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Bluetooth error during {operation}: {cause}")
