"""Shared test fixtures for heart_rate tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from tests.helpers import (
    DEVICE_ADDRESS,
    FakeAdapter,
    FakePeripheral,
    hr_notification,
    make_hr_packet,
    make_transport,
)


@pytest.fixture
def hr_packet_simple() -> bytes:
    """Simple 8-bit BPM packet (72 bpm)."""
    return make_hr_packet(72)


@pytest.fixture
def hr_packet_16bit() -> bytes:
    """16-bit BPM packet (180 bpm)."""
    return make_hr_packet(180, is_16bit=True)


@pytest.fixture
def hr_packet_with_contact() -> bytes:
    """Packet with sensor contact detected."""
    return make_hr_packet(85, sensor_contact=True)


@pytest.fixture
def hr_packet_full() -> bytes:
    """Packet with all fields populated."""
    return make_hr_packet(
        150,
        is_16bit=True,
        sensor_contact=True,
        energy=1500,
        rr_intervals=[800, 850],
    )


@pytest.fixture
def peripheral() -> FakePeripheral:
    """Heart rate peripheral that sends 70, 71, 72 bpm then stops."""
    return FakePeripheral(
        DEVICE_ADDRESS,
        name="Xiaomi Smart Band 9 082F",
        notifications=[hr_notification(70), hr_notification(71), hr_notification(72)],
    )


@pytest.fixture
def adapter(peripheral) -> FakeAdapter:
    return FakeAdapter([peripheral])


@pytest.fixture
def transport(adapter) -> MagicMock:
    return make_transport(adapter)


@pytest.fixture
def mock_sleep():
    """Patch asyncio.sleep so scan windows and backoff take no time."""
    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


# Mock fixtures for bleak
@pytest.fixture
def mock_bleak_client():
    """Create a mock BleakClient."""
    client = MagicMock()
    client.is_connected = True
    client.connect = AsyncMock(return_value=True)
    client.disconnect = AsyncMock(return_value=True)
    client.start_notify = AsyncMock()
    client.stop_notify = AsyncMock()
    return client


@pytest.fixture
def mock_ble_device():
    """Create a mock BLEDevice."""
    device = MagicMock()
    device.address = DEVICE_ADDRESS
    device.name = "HR Monitor"
    return device


@pytest.fixture
def mock_advertisement_data():
    """Create mock AdvertisementData."""
    adv = MagicMock()
    adv.local_name = "Xiaomi Smart Band 9 082F"
    adv.rssi = -60
    return adv


# Config fixtures
@pytest.fixture
def sample_config_dict() -> dict:
    """Sample config dict as would be parsed from TOML."""
    return {
        "log": {"level": "DEBUG"},
        "ble": {
            "adapter": "hci1",
            "scan_timeout": 10.0,
            "reconnect_min": 2.0,
            "reconnect_max": 60.0,
            "channel_capacity": 10,
        },
        "device": {
            "address": "11:22:33:44:55:66",
            "names": ["Polar H10", "Xiaomi Smart Band 9 082F"],
        },
    }


@pytest.fixture
def partial_config_dict() -> dict:
    """Partial config dict with some values missing."""
    return {
        "device": {"address": "11:22:33:44:55:66"},
        "ble": {"scan_timeout": 3.0},
    }
