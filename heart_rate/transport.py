"""Bluetooth transport used by the locator and the monitor.

The ``Transport``/``Adapter``/``Peripheral`` protocols are the only surface the
rest of the package depends on. ``BleakTransport`` implements them on top of
bleak; tests substitute in-memory fakes.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Protocol

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError
from bleak.uuids import normalize_uuid_str

from .channel import DEFAULT_CAPACITY
from .errors import NoAdaptersAvailable, TransportError

logger = logging.getLogger(__name__)

HR_CHAR_UUID = normalize_uuid_str("2A37")


@dataclass(frozen=True)
class PeripheralProperties:
    address: str
    local_name: str | None = None
    rssi: int | None = None


@dataclass(frozen=True)
class Characteristic:
    uuid: str
    service_uuid: str = ""


@dataclass(frozen=True)
class Notification:
    uuid: str
    value: bytes


class Peripheral(Protocol):
    async def properties(self) -> PeripheralProperties | None: ...

    async def connect(self) -> None: ...

    async def discover_services(self) -> None: ...

    def list_characteristics(self) -> list[Characteristic]: ...

    async def subscribe(self, characteristic: Characteristic) -> None: ...

    def notification_stream(self) -> AsyncGenerator[Notification, None]: ...

    async def disconnect(self) -> None: ...


class Adapter(Protocol):
    async def start_scan(self) -> None: ...

    async def stop_scan(self) -> None: ...

    async def list_peripherals(self) -> list[Peripheral]: ...


class Transport(Protocol):
    async def list_adapters(self) -> list[Adapter]: ...


async def first_adapter(transport: Transport) -> Adapter:
    """Return the first adapter the transport reports.

    Raises:
        NoAdaptersAvailable: If there are none
    """
    adapters = await transport.list_adapters()
    if not adapters:
        raise NoAdaptersAvailable()
    return adapters[0]


@contextmanager
def _bleak_errors(operation: str) -> Iterator[None]:
    """Re-raise bleak and OS level failures as TransportError."""
    try:
        yield
    except (BleakError, OSError) as e:
        raise TransportError(operation, e) from e


def _put_latest(queue: asyncio.Queue[Notification | None], item: Notification | None) -> None:
    """Enqueue without waiting, dropping the oldest entry when the queue is full."""
    if queue.full():
        dropped = queue.get_nowait()
        logger.debug("Notification buffer full, dropped %s", dropped)
    queue.put_nowait(item)


class BleakPeripheral:
    """A discovered device, connectable through BleakClient.

    Notifications are buffered per connection in a queue of ``buffer_size``
    entries; when the reader falls behind the oldest ones are dropped.
    """

    def __init__(
        self,
        device: BLEDevice,
        advertisement: AdvertisementData | None = None,
        buffer_size: int = DEFAULT_CAPACITY,
    ):
        self.device = device
        self.advertisement = advertisement
        self.buffer_size = buffer_size
        self._client: BleakClient | None = None
        self._notifications: asyncio.Queue[Notification | None] = asyncio.Queue(buffer_size)

    @property
    def address(self) -> str:
        return self.device.address

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    async def properties(self) -> PeripheralProperties | None:
        adv = self.advertisement
        name = (adv.local_name if adv else None) or self.device.name
        return PeripheralProperties(
            address=self.device.address,
            local_name=name,
            rssi=adv.rssi if adv else None,
        )

    async def connect(self) -> None:
        # Each connection gets its own queue so a late disconnect from an
        # earlier connection cannot end the current stream
        queue: asyncio.Queue[Notification | None] = asyncio.Queue(self.buffer_size)
        self._notifications = queue

        def on_disconnect(_: BleakClient) -> None:
            logger.debug("Device %s disconnected", self.address)
            _put_latest(queue, None)

        self._client = BleakClient(self.device, disconnected_callback=on_disconnect)
        with _bleak_errors("connect"):
            await self._client.connect()
        logger.debug("Connected to %s", self.address)

    async def discover_services(self) -> None:
        client = self._require_client("discover_services")
        # bleak resolves the GATT table while connecting
        with _bleak_errors("discover_services"):
            services = client.services
        logger.debug("Discovered %d service(s) on %s", len(list(services)), self.address)

    def list_characteristics(self) -> list[Characteristic]:
        if self._client is None:
            return []
        return [
            Characteristic(uuid=char.uuid, service_uuid=service.uuid)
            for service in self._client.services
            for char in service.characteristics
        ]

    async def subscribe(self, characteristic: Characteristic) -> None:
        client = self._require_client("subscribe")
        queue = self._notifications
        uuid = characteristic.uuid

        def handler(_: object, data: bytearray) -> None:
            _put_latest(queue, Notification(uuid=uuid, value=bytes(data)))

        with _bleak_errors("subscribe"):
            await client.start_notify(uuid, handler)
        logger.debug("Subscribed to %s", uuid)

    async def notification_stream(self) -> AsyncGenerator[Notification, None]:
        """Yield notifications until the connection ends.

        Raises:
            TransportError: If the device dropped the link on its own, rather
                than through ``disconnect()``
        """
        queue = self._notifications
        while True:
            notification = await queue.get()
            if notification is None:
                if self._client is None:
                    return
                raise TransportError(
                    "notification_stream",
                    BleakError(f"Device {self.address} disconnected"),
                )
            yield notification

    async def disconnect(self) -> None:
        if self._client is None:
            return
        client, self._client = self._client, None
        with _bleak_errors("disconnect"):
            await client.disconnect()

    def _require_client(self, operation: str) -> BleakClient:
        if self._client is None or not self._client.is_connected:
            raise TransportError(operation, BleakError(f"Not connected to {self.address}"))
        return self._client


class BleakAdapter:
    """Scanning handle for one host Bluetooth controller."""

    def __init__(self, name: str | None = None):
        self.name = name
        self._scanner: BleakScanner | None = None

    def _make_scanner(self) -> BleakScanner:
        # The adapter kwarg is only understood by the BlueZ backend
        if self.name:
            return BleakScanner(adapter=self.name)
        return BleakScanner()

    async def start_scan(self) -> None:
        if self._scanner is None:
            self._scanner = self._make_scanner()
        with _bleak_errors("start_scan"):
            await self._scanner.start()
        logger.debug("Scanning on %s...", self.name or "default adapter")

    async def stop_scan(self) -> None:
        if self._scanner is None:
            return
        with _bleak_errors("stop_scan"):
            await self._scanner.stop()

    async def list_peripherals(self) -> list[BleakPeripheral]:
        if self._scanner is None:
            return []
        discovered = self._scanner.discovered_devices_and_advertisement_data
        return [BleakPeripheral(device, adv) for device, adv in discovered.values()]


class BleakTransport:
    """Hands out a fresh BleakAdapter on every call."""

    def __init__(self, adapter: str | None = None):
        self.adapter = adapter or None

    async def list_adapters(self) -> list[BleakAdapter]:
        return [BleakAdapter(self.adapter)]
