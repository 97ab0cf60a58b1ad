"""HTTP endpoints: scan triggers and stored data."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from pydantic import BaseModel
from sqlmodel import Session

from airscan.config import settings
from airscan.database import get_session
from airscan.registry.models import SavedNetwork, ScanRecordRow
from airscan.registry.store import list_saved_networks, list_scan_records, save_network
from airscan.scanner.base import PollingAdapter
from airscan.scanner.errors import AdapterError, AllSourcesFailedError
from airscan.scanner.models import ScanBatch, ScanRecord, SourceType
from airscan.scanner.normalize import wifi_network_details
from airscan.scanner.orchestrator import ScanOrchestrator
from airscan.sink.persist import ScanSink, persist_quietly

logger = logging.getLogger(__name__)

router = APIRouter()

ALL_SOURCES = frozenset(SourceType)


def get_orchestrator(request: Request) -> ScanOrchestrator:
    return request.app.state.orchestrator


def get_sink(request: Request) -> ScanSink | None:
    return getattr(request.app.state, "sink", None)


class SaveNetworkRequest(BaseModel):
    ssid: str
    bssid: str | None = None
    signal: float | None = None
    frequency: int | None = None


async def _scan_and_persist(
    sources: frozenset[SourceType],
    window: float,
    orchestrator: ScanOrchestrator,
    sink: ScanSink | None,
    background_tasks: BackgroundTasks,
) -> ScanBatch:
    try:
        batch = await orchestrator.run_scan(sources, window)
    except AllSourcesFailedError:
        logger.exception("Failed to scan networks")
        raise HTTPException(status_code=500, detail="Failed to scan networks")

    # Runs after the response is sent; outcome never reaches the caller
    if sink is not None:
        background_tasks.add_task(persist_quietly, sink, batch)
    return batch


# --- Scans ---


@router.get("/scan-wifi")
async def scan_wifi(
    background_tasks: BackgroundTasks,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
    sink: ScanSink | None = Depends(get_sink),
) -> list[ScanRecord]:
    return await _scan_and_persist(
        frozenset({SourceType.wifi}), 0, orchestrator, sink, background_tasks
    )


@router.get("/scan-bluetooth")
async def scan_bluetooth(
    background_tasks: BackgroundTasks,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
    sink: ScanSink | None = Depends(get_sink),
) -> list[ScanRecord]:
    return await _scan_and_persist(
        frozenset({SourceType.bluetooth}),
        settings.bluetooth_window,
        orchestrator,
        sink,
        background_tasks,
    )


@router.get("/scan-mobile")
async def scan_mobile(
    background_tasks: BackgroundTasks,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
    sink: ScanSink | None = Depends(get_sink),
) -> list[ScanRecord]:
    return await _scan_and_persist(
        frozenset({SourceType.mobile}), 0, orchestrator, sink, background_tasks
    )


@router.get("/scan-all")
async def scan_all(
    background_tasks: BackgroundTasks,
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
    sink: ScanSink | None = Depends(get_sink),
) -> list[ScanRecord]:
    return await _scan_and_persist(
        ALL_SOURCES, settings.bluetooth_window, orchestrator, sink, background_tasks
    )


# --- Stored data ---


@router.get("/api/scan")
async def scan_wifi_details(
    orchestrator: ScanOrchestrator = Depends(get_orchestrator),
) -> list[dict]:
    """WiFi networks with derived channel/encryption fields (not persisted)."""
    adapter = orchestrator.adapters.get(SourceType.wifi)
    if not isinstance(adapter, PollingAdapter):
        raise HTTPException(status_code=500, detail="Failed to scan networks")
    try:
        networks = await adapter.scan()
    except AdapterError:
        logger.exception("Failed to scan networks")
        raise HTTPException(status_code=500, detail="Failed to scan networks")
    return [wifi_network_details(n) for n in networks]


@router.post("/api/save", status_code=201)
def save_network_entry(
    request: SaveNetworkRequest,
    session: Session = Depends(get_session),
) -> dict[str, str]:
    try:
        save_network(
            session,
            ssid=request.ssid,
            bssid=request.bssid,
            signal=request.signal,
            frequency=request.frequency,
        )
    except Exception:
        logger.exception("Failed to save network")
        raise HTTPException(status_code=500, detail="Failed to save network")
    return {"message": "Network saved successfully"}


@router.get("/api/networks")
def list_networks(
    session: Session = Depends(get_session),
) -> list[SavedNetwork]:
    try:
        return list_saved_networks(session)
    except Exception:
        logger.exception("Failed to fetch networks")
        raise HTTPException(status_code=500, detail="Failed to fetch networks")


@router.get("/api/records")
def list_records(
    source_type: SourceType | None = None,
    limit: int = Query(100, ge=1, le=1000),
    session: Session = Depends(get_session),
) -> list[ScanRecordRow]:
    return list_scan_records(session, source_type=source_type, limit=limit)
