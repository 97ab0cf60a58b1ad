"""Map native discovery payloads onto ScanRecord.

Each source reports its own field names; the table below says which keys
feed which record field, first match wins. Anything missing or unusable
falls back to the record defaults, so a bad payload never fails a batch.
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from airscan.scanner.models import RawPayload, ScanRecord, SourceType

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"
NOT_AVAILABLE = "N/A"
NO_SIGNAL = -100  # weakest; used when a source reports no level

_FIELD_KEYS: dict[SourceType, dict[str, tuple[str, ...]]] = {
    SourceType.wifi: {
        "name": ("ssid",),
        "address": ("bssid", "mac"),
        "signal": ("signal_level", "signal"),
        "frequency": ("frequency",),
    },
    SourceType.bluetooth: {
        "name": ("name", "local_name"),
        "address": ("address",),
        "signal": ("rssi",),
        "frequency": ("frequency",),
    },
    SourceType.mobile: {
        "name": ("name",),
        "address": ("address", "tower_id"),
        "signal": ("signal", "dbm"),
        "frequency": ("frequency",),
    },
}


def _first(payload: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _as_signal(value: Any) -> int | float:
    if isinstance(value, bool) or value is None:
        return NO_SIGNAL
    if isinstance(value, int | float):
        return value
    try:
        number = float(str(value).strip())
    except ValueError:
        logger.debug("Unparseable signal value %r, using %d", value, NO_SIGNAL)
        return NO_SIGNAL
    return int(number) if number.is_integer() else number


def _as_frequency(value: Any) -> int | float | str:
    if value is None or isinstance(value, bool):
        return NOT_AVAILABLE
    if isinstance(value, int | float | str):
        return value
    return _as_text(value, NOT_AVAILABLE)


def normalize(
    source_type: SourceType, payload: RawPayload | Any, captured_at: datetime
) -> ScanRecord:
    """Build a ScanRecord from one native payload. Never raises."""
    if not isinstance(payload, Mapping):
        logger.debug("Non-mapping %s payload %r, using defaults", source_type, payload)
        payload = {}

    keys = _FIELD_KEYS[source_type]
    return ScanRecord(
        source_type=source_type,
        name=_as_text(_first(payload, keys["name"]), UNKNOWN_NAME),
        address=_as_text(_first(payload, keys["address"]), NOT_AVAILABLE),
        signal_strength=_as_signal(_first(payload, keys["signal"])),
        frequency_info=_as_frequency(_first(payload, keys["frequency"])),
        captured_at=captured_at,
    )


def normalize_all(
    source_type: SourceType, payloads: list[RawPayload], captured_at: datetime
) -> list[ScanRecord]:
    return [normalize(source_type, p, captured_at) for p in payloads]


def wifi_channel(frequency: Any) -> int | str:
    """Derive the 2.4 GHz channel number from a frequency in MHz."""
    try:
        mhz = float(frequency)
    except (TypeError, ValueError):
        return NOT_AVAILABLE
    if not mhz:
        return NOT_AVAILABLE
    return round(mhz / 5 - 2407 / 5)


def wifi_network_details(payload: RawPayload) -> dict[str, Any]:
    """Raw WiFi payload plus channel, encryption and placeholder vendor."""
    return {
        **payload,
        "channel": wifi_channel(payload.get("frequency")),
        "encryption": payload.get("security") or "Unknown",
        "macAddress": payload.get("bssid") or NOT_AVAILABLE,
        "vendor": "Unknown Vendor",
    }
