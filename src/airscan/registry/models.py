"""Relational tables for persisted scan records and saved networks."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel

from airscan.scanner.models import SourceType


class ScanRecordRow(SQLModel, table=True):
    """One row per record of a persisted batch (mirrors the CSV log)."""

    __tablename__ = "scanrecord"

    id: int | None = Field(default=None, primary_key=True)
    source_type: SourceType = Field(index=True)
    name: str
    address: str
    signal: float
    frequency: str  # heterogeneous per source, kept as text
    timestamp: datetime = Field(index=True)


class SavedNetwork(SQLModel, table=True):
    """A WiFi network explicitly saved by a client."""

    id: int | None = Field(default=None, primary_key=True)
    ssid: str
    bssid: str | None = None
    signal: float | None = None
    frequency: int | None = None
    saved_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
