"""Entry point for heart-rate."""

import argparse
import asyncio
import logging
import signal
from collections.abc import Awaitable
from typing import TypeVar

from .channel import Receiver
from .config import Config, load_config
from .discovery import MonitorFactory
from .errors import HeartRateError
from .log import setup_logging
from .monitor import HeartRateMonitor

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _until_shutdown(aw: Awaitable[T], shutdown: asyncio.Event) -> T | None:
    """Await ``aw`` unless shutdown is requested first, in which case it is cancelled."""
    task = asyncio.ensure_future(aw)
    shutdown_task = asyncio.create_task(shutdown.wait())

    done, pending = await asyncio.wait(
        [task, shutdown_task],
        return_when=asyncio.FIRST_COMPLETED,
    )
    for pending_task in pending:
        pending_task.cancel()
        try:
            await pending_task
        except asyncio.CancelledError:
            pass

    if task in done:
        return task.result()
    return None


async def resolve_monitor(factory: MonitorFactory, address: str | None) -> HeartRateMonitor | None:
    """Build a monitor for ``address``, or auto-detect one. Returns None on failure."""
    try:
        if address:
            return await factory.for_address(address)
        return await factory.detect()
    except HeartRateError as e:
        logger.debug("No monitor available: %s", e)
        return None


async def consume(receiver: Receiver[int]) -> None:
    """Print every received value on its own line."""
    async for hr in receiver:
        print(hr, flush=True)


async def run(config: Config) -> None:
    """Resolve a monitor and print its heart rate values until it stops."""
    shutdown = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown.set)

    monitor = None
    try:
        factory = MonitorFactory.from_config(config)
        monitor = await _until_shutdown(resolve_monitor(factory, config.device.address or None), shutdown)
        if monitor is None:
            return

        receiver = monitor.start()
        await _until_shutdown(consume(receiver), shutdown)
        if shutdown.is_set():
            logger.info("Shutdown requested...")
            await receiver.aclose()
        else:
            await monitor.wait()
    finally:
        if monitor:
            await monitor.stop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Print heart rate values from a BLE heart rate monitor")
    parser.add_argument("-c", "--config", help="Read settings from this TOML file")
    parser.add_argument("-d", "--device", help="Device address (skip detection)")
    parser.add_argument(
        "-n",
        "--name",
        action="append",
        help="Supported device name, exact match (repeatable, replaces the configured list)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    config = load_config(args.config)
    if args.device:
        config.device.address = args.device
    if args.name:
        config.device.names = args.name

    setup_logging("DEBUG" if args.verbose else config.log.level)

    asyncio.run(run(config))


if __name__ == "__main__":
    main()
