"""Canonical scan record and source tags."""

import enum
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Native payload as reported by an adapter, before normalization.
RawPayload = dict[str, Any]


class SourceType(enum.StrEnum):
    wifi = "WiFi"
    bluetooth = "Bluetooth"
    mobile = "Mobile"


# Merge order inside a batch, independent of completion order.
SOURCE_PRIORITY: tuple[SourceType, ...] = (
    SourceType.wifi,
    SourceType.bluetooth,
    SourceType.mobile,
)


class ScanRecord(BaseModel):
    """One discovered emitter, normalized across radio types.

    ``signal_strength`` keeps the unit of its source (WiFi level,
    Bluetooth RSSI, mobile dBm) and ``frequency_info`` is passed through
    as reported, so consumers must branch on ``source_type``.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    source_type: SourceType
    name: str = "Unknown"
    address: str = "N/A"
    signal_strength: int | float = -100
    frequency_info: int | float | str = "N/A"
    captured_at: datetime


ScanBatch = list[ScanRecord]
