"""Heart rate monitor session with auto-reconnection."""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from contextlib import aclosing

from .channel import DEFAULT_CAPACITY, ChannelClosed, Receiver, Sender, open_channel
from .errors import CharacteristicNotFound, DeviceNotFound
from .parser import decode_heart_rate
from .retry import FixedBackoff, RetryPolicy
from .transport import HR_CHAR_UUID, Adapter, Characteristic, Peripheral

logger = logging.getLogger(__name__)


class MonitorState(enum.Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    CONNECTED = "connected"
    SUBSCRIBED = "subscribed"
    STREAMING = "streaming"
    DISCONNECTED = "disconnected"


StateCallback = Callable[[MonitorState, str], Awaitable[None]]


class HeartRateMonitor:
    """Streams heart rate values from one device, reconnecting on failure.

    The (adapter, address) pair is fixed for the lifetime of the monitor.
    ``start()`` returns a receiver that stays valid across reconnects; the
    loop ends after the first cycle that finishes without an error, either
    because the device stopped notifying or because the receiver was closed.
    """

    def __init__(
        self,
        adapter: Adapter,
        address: str,
        scan_timeout: float = 5.0,
        retry_policy: RetryPolicy | None = None,
        capacity: int = DEFAULT_CAPACITY,
        on_state: StateCallback | None = None,
    ):
        self.adapter = adapter
        self._address = address
        self._scan_timeout = scan_timeout
        self._retry_policy = retry_policy or FixedBackoff()
        self._capacity = capacity
        self.on_state = on_state
        self._state = MonitorState.IDLE
        self._task: asyncio.Task | None = None
        self._streamed = False

    @property
    def address(self) -> str:
        return self._address

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> Receiver[int]:
        """Spawn the monitoring loop and return the receiving end of its channel."""
        if self._task is not None:
            raise RuntimeError("Monitor already started")
        sender, receiver = open_channel(self._capacity)
        self._task = asyncio.create_task(self._run(sender), name=f"heart-rate-monitor-{self._address}")
        return receiver

    async def wait(self) -> None:
        """Wait for the monitoring loop to finish."""
        if self._task is not None:
            await self._task

    async def stop(self) -> None:
        """Cancel the monitoring loop and wait for it to clean up."""
        if self._task is None or self._task.done():
            return
        logger.debug("Stopping monitor...")
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _set_state(self, state: MonitorState) -> None:
        self._state = state
        if self.on_state is not None:
            await self.on_state(state, self._address)

    async def _run(self, sender: Sender[int]) -> None:
        failures = 0
        try:
            while True:
                await self._set_state(MonitorState.IDLE)
                try:
                    await self._connect_and_monitor(sender)
                except Exception as e:
                    logger.warning("Monitoring error: %s", e)
                    await self._set_state(MonitorState.DISCONNECTED)
                    if self._streamed:
                        failures = 0
                    failures += 1
                    delay = self._retry_policy.delay(failures)
                    if delay is None:
                        logger.error("Giving up on %s after %d failed attempt(s)", self._address, failures)
                        return
                    logger.info("Reconnecting in %.1fs...", delay)
                    await asyncio.sleep(delay)
                else:
                    logger.info("Monitoring of %s finished", self._address)
                    return
        finally:
            await sender.aclose()

    async def _find_peripheral(self) -> Peripheral:
        await self.adapter.start_scan()
        try:
            await asyncio.sleep(self._scan_timeout)
            for peripheral in await self.adapter.list_peripherals():
                props = await peripheral.properties()
                if props is not None and props.address == self._address:
                    return peripheral
        finally:
            await self.adapter.stop_scan()
        raise DeviceNotFound(self._address)

    @staticmethod
    def _find_characteristic(peripheral: Peripheral) -> Characteristic:
        for characteristic in peripheral.list_characteristics():
            if characteristic.uuid == HR_CHAR_UUID:
                return characteristic
        raise CharacteristicNotFound(HR_CHAR_UUID)

    async def _connect_and_monitor(self, sender: Sender[int]) -> None:
        """Run one scan, connect, stream and disconnect cycle."""
        self._streamed = False
        await self._set_state(MonitorState.SCANNING)
        logger.debug("Scanning for %s...", self._address)
        peripheral = await self._find_peripheral()

        logger.debug("Connecting to %s...", self._address)
        await peripheral.connect()
        try:
            await peripheral.discover_services()
            await self._set_state(MonitorState.CONNECTED)

            characteristic = self._find_characteristic(peripheral)
            await peripheral.subscribe(characteristic)
            await self._set_state(MonitorState.SUBSCRIBED)
            logger.info("Connected to %s, streaming heart rate", self._address)

            await self._stream(peripheral, sender)
        except BaseException:
            await self._release(peripheral)
            raise

        await peripheral.disconnect()
        await self._set_state(MonitorState.DISCONNECTED)

    async def _stream(self, peripheral: Peripheral, sender: Sender[int]) -> None:
        self._streamed = True
        await self._set_state(MonitorState.STREAMING)
        async with aclosing(peripheral.notification_stream()) as notifications:
            async for notification in notifications:
                if notification.uuid != HR_CHAR_UUID:
                    continue
                value = decode_heart_rate(notification.value)
                logger.debug("HR: %d bpm", value)
                try:
                    await sender.send(value)
                except ChannelClosed:
                    logger.debug("Receiver closed, ending stream")
                    break

    async def _release(self, peripheral: Peripheral) -> None:
        """Best-effort disconnect after a failed cycle."""
        try:
            await peripheral.disconnect()
        except Exception as e:
            logger.debug("Disconnect after failure also failed: %s", e)
