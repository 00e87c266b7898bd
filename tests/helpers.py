"""Shared test helpers for heart_rate tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from heart_rate.transport import HR_CHAR_UUID, Characteristic, Notification, PeripheralProperties

DEVICE_ADDRESS = "AA:BB:CC:DD:EE:FF"


def make_hr_packet(
    bpm: int,
    *,
    is_16bit: bool = False,
    sensor_contact: bool | None = None,
    energy: int | None = None,
    rr_intervals: list[int] | None = None,
) -> bytes:
    """Build a BLE HR measurement packet.

    Args:
        bpm: Heart rate in BPM
        is_16bit: If True, use 16-bit BPM format
        sensor_contact: None=not supported, True=detected, False=not detected
        energy: Energy expended in joules (if supported)
        rr_intervals: RR intervals in 1/1024 second units
    """
    flags = 0
    if is_16bit:
        flags |= 0b1
    if sensor_contact is not None:
        flags |= 0b100
        if sensor_contact:
            flags |= 0b10
    if energy is not None:
        flags |= 0b1000
    if rr_intervals:
        flags |= 0b10000

    data = bytearray([flags])
    if is_16bit:
        data.extend(bpm.to_bytes(2, "little"))
    else:
        data.append(bpm)
    if energy is not None:
        data.extend(energy.to_bytes(2, "little"))
    for rr in rr_intervals or []:
        data.extend(rr.to_bytes(2, "little"))
    return bytes(data)


def hr_notification(bpm: int, uuid: str = HR_CHAR_UUID) -> Notification:
    return Notification(uuid=uuid, value=make_hr_packet(bpm))


class FakePeripheral:
    """In-memory peripheral; every operation is an AsyncMock for call assertions."""

    def __init__(
        self,
        address: str,
        name: str | None = None,
        notifications: list[Notification] | None = None,
        characteristics: list[Characteristic] | None = None,
    ):
        self.address = address
        self.name = name
        self.notifications = list(notifications or [])
        self.characteristics = (
            [Characteristic(uuid=HR_CHAR_UUID)] if characteristics is None else list(characteristics)
        )
        self.connect = AsyncMock()
        self.discover_services = AsyncMock()
        self.subscribe = AsyncMock()
        self.disconnect = AsyncMock()
        self.stream_opened = 0

    async def properties(self) -> PeripheralProperties:
        return PeripheralProperties(address=self.address, local_name=self.name)

    def list_characteristics(self) -> list[Characteristic]:
        return list(self.characteristics)

    async def notification_stream(self):
        self.stream_opened += 1
        for notification in self.notifications:
            yield notification


class FakeAdapter:
    def __init__(self, peripherals: list[FakePeripheral] | None = None):
        self.peripherals = list(peripherals or [])
        self.start_scan = AsyncMock()
        self.stop_scan = AsyncMock()

    async def list_peripherals(self) -> list[FakePeripheral]:
        return list(self.peripherals)


def make_transport(*adapters: FakeAdapter) -> MagicMock:
    """Transport whose list_adapters() hands out the given adapters."""
    transport = MagicMock()
    transport.list_adapters = AsyncMock(return_value=list(adapters))
    return transport
