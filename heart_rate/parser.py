"""Heart rate measurement decoding (Heart Rate Measurement characteristic 0x2A37).

``decode_heart_rate`` is the value published by the monitor. It never fails and
truncates 16-bit readings to their low byte so downstream readers always get a
value in 0..255. ``parse_heart_rate`` keeps the full reading and the optional
fields for callers that want them.
"""

from dataclasses import dataclass

FLAG_UINT16 = 0b1
FLAG_CONTACT_DETECTED = 0b10
FLAG_CONTACT_SUPPORTED = 0b100
FLAG_ENERGY = 0b1000
FLAG_RR = 0b10000


@dataclass
class HeartRateMeasurement:
    """Fully parsed heart rate measurement."""

    bpm: int
    sensor_contact: bool | None  # None if not supported
    energy_expended: int | None  # Joules, if present
    rr_intervals_ms: list[float]


def decode_heart_rate(data: bytes) -> int:
    """Decode one notification payload into a heart rate value.

    Args:
        data: Raw notification bytes

    Returns:
        Heart rate in 0..255, or 0 when the payload is shorter than 2 bytes
    """
    if len(data) < 2:
        return 0
    if data[0] & FLAG_UINT16 == 0:
        return data[1]
    # Only the low byte of the little-endian uint16 is kept
    return int.from_bytes(data[1:3], "little") & 0xFF


def parse_heart_rate(data: bytes) -> HeartRateMeasurement:
    """Parse every field of a heart rate measurement.

    Args:
        data: Raw bytes from the HR measurement characteristic

    Returns:
        HeartRateMeasurement with the untruncated BPM

    Raises:
        ValueError: If data is empty or shorter than its flags require
    """
    if not data:
        raise ValueError("Empty HR data received")

    flags = data[0]
    width = 2 if flags & FLAG_UINT16 else 1
    has_energy = bool(flags & FLAG_ENERGY)

    min_len = 1 + width + (2 if has_energy else 0)
    if len(data) < min_len:
        raise ValueError(f"HR data too short: {len(data)} bytes, need {min_len}")

    offset = 1
    bpm = int.from_bytes(data[offset : offset + width], "little")
    offset += width

    sensor_contact = None
    if flags & FLAG_CONTACT_SUPPORTED:
        sensor_contact = bool(flags & FLAG_CONTACT_DETECTED)

    energy_expended = None
    if has_energy:
        energy_expended = int.from_bytes(data[offset : offset + 2], "little")
        offset += 2

    rr_intervals_ms = []
    if flags & FLAG_RR:
        # 1/1024 s resolution
        for start in range(offset, len(data) - 1, 2):
            rr_raw = int.from_bytes(data[start : start + 2], "little")
            rr_intervals_ms.append(rr_raw * 1000.0 / 1024.0)

    return HeartRateMeasurement(
        bpm=bpm,
        sensor_contact=sensor_contact,
        energy_expended=energy_expended,
        rr_intervals_ms=rr_intervals_ms,
    )
