"""Insert and query persisted scan data."""

import logging

from sqlmodel import Session, select

from airscan.registry.models import SavedNetwork, ScanRecordRow
from airscan.scanner.models import ScanBatch, ScanRecord, SourceType

logger = logging.getLogger(__name__)


def record_to_row(record: ScanRecord) -> ScanRecordRow:
    return ScanRecordRow(
        source_type=record.source_type,
        name=record.name,
        address=record.address,
        signal=float(record.signal_strength),
        frequency=str(record.frequency_info),
        timestamp=record.captured_at,
    )


def insert_batch(session: Session, batch: ScanBatch) -> int:
    """Insert every record of a batch in one transaction. Returns row count."""
    rows = [record_to_row(r) for r in batch]
    session.add_all(rows)
    session.commit()
    logger.debug("Inserted %d scan record row(s)", len(rows))
    return len(rows)


def list_scan_records(
    session: Session,
    source_type: SourceType | None = None,
    limit: int = 100,
) -> list[ScanRecordRow]:
    """Persisted records, newest first, optionally for one source."""
    stmt = select(ScanRecordRow)
    if source_type is not None:
        stmt = stmt.where(ScanRecordRow.source_type == source_type)
    stmt = stmt.order_by(
        ScanRecordRow.timestamp.desc(),  # type: ignore[attr-defined]
        ScanRecordRow.id,  # type: ignore[arg-type]
    ).limit(limit)
    return list(session.exec(stmt).all())


def save_network(
    session: Session,
    ssid: str,
    bssid: str | None = None,
    signal: float | None = None,
    frequency: int | None = None,
) -> SavedNetwork:
    network = SavedNetwork(ssid=ssid, bssid=bssid, signal=signal, frequency=frequency)
    session.add(network)
    session.commit()
    session.refresh(network)
    return network


def list_saved_networks(session: Session) -> list[SavedNetwork]:
    stmt = select(SavedNetwork).order_by(SavedNetwork.id)  # type: ignore[arg-type]
    return list(session.exec(stmt).all())
