"""Finding a supported heart rate monitor by its advertised name."""

import asyncio
import logging
from collections.abc import Sequence

from .channel import DEFAULT_CAPACITY
from .config import SUPPORTED_DEVICES, Config
from .errors import DeviceNotFound, HeartRateError, NoSupportedMonitorFound
from .monitor import HeartRateMonitor, StateCallback
from .retry import RetryPolicy, policy_from_config
from .transport import BleakTransport, Transport, first_adapter

logger = logging.getLogger(__name__)


async def locate_device(transport: Transport, name: str, scan_timeout: float = 5.0) -> str:
    """Scan for a device advertising exactly ``name``.

    Args:
        transport: Source of the adapter to scan with
        name: Advertised local name, matched case-sensitively
        scan_timeout: Seconds to collect advertisements before looking

    Returns:
        Address of the first matching peripheral

    Raises:
        NoAdaptersAvailable: If the transport has no adapter
        DeviceNotFound: If no discovered peripheral has that name
        TransportError: If scanning fails
    """
    adapter = await first_adapter(transport)
    await adapter.start_scan()
    try:
        await asyncio.sleep(scan_timeout)
        for peripheral in await adapter.list_peripherals():
            props = await peripheral.properties()
            if props is not None and props.local_name == name:
                logger.info("Found: %s (%s)", name, props.address)
                return props.address
    finally:
        await adapter.stop_scan()

    raise DeviceNotFound(name)


class MonitorFactory:
    """Builds a HeartRateMonitor for the first supported device in range."""

    def __init__(
        self,
        transport: Transport,
        device_names: Sequence[str] = SUPPORTED_DEVICES,
        scan_timeout: float = 5.0,
        retry_policy: RetryPolicy | None = None,
        capacity: int = DEFAULT_CAPACITY,
        on_state: StateCallback | None = None,
    ):
        self.transport = transport
        self.device_names = list(device_names)
        self.scan_timeout = scan_timeout
        self.retry_policy = retry_policy
        self.capacity = capacity
        self.on_state = on_state

    @classmethod
    def from_config(
        cls,
        config: Config,
        transport: Transport | None = None,
        on_state: StateCallback | None = None,
    ) -> "MonitorFactory":
        return cls(
            transport or BleakTransport(config.ble.adapter),
            device_names=config.device.names,
            scan_timeout=config.ble.scan_timeout,
            retry_policy=policy_from_config(config.ble),
            capacity=config.ble.channel_capacity,
            on_state=on_state,
        )

    async def for_address(self, address: str) -> HeartRateMonitor:
        """Build a monitor for a known address without scanning for it first."""
        # Independent from any adapter used while locating
        adapter = await first_adapter(self.transport)
        return HeartRateMonitor(
            adapter,
            address,
            scan_timeout=self.scan_timeout,
            retry_policy=self.retry_policy,
            capacity=self.capacity,
            on_state=self.on_state,
        )

    async def detect(self) -> HeartRateMonitor:
        """Try each supported name in order and return a monitor for the first found.

        Raises:
            NoSupportedMonitorFound: If no candidate could be located
        """
        for name in self.device_names:
            try:
                address = await locate_device(self.transport, name, self.scan_timeout)
            except HeartRateError as e:
                logger.warning("Device not found: %s - Error: %s", name, e)
                continue
            return await self.for_address(address)

        raise NoSupportedMonitorFound(self.device_names)
