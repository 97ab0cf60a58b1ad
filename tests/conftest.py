"""Shared test fixtures."""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import airscan.database as db_module
import airscan.registry.models  # noqa: F401
from airscan.api.routes import get_orchestrator, get_sink
from airscan.database import get_session
from airscan.main import app
from airscan.scanner.mobile import MockMobileAdapter
from airscan.scanner.models import SourceType
from airscan.scanner.orchestrator import ScanOrchestrator
from airscan.sink.csv_log import CsvScanLog
from airscan.sink.persist import ScanSink
from fakes import BT_PAYLOAD, WIFI_PAYLOAD, FakePollingAdapter, FakeWindowedAdapter


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created.

    StaticPool ensures every session uses the same connection,
    so the in-memory database is shared across the test.
    """
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(eng)
    return eng


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as s:
        yield s


@pytest.fixture
def wifi_adapter() -> FakePollingAdapter:
    return FakePollingAdapter(SourceType.wifi, [WIFI_PAYLOAD])


@pytest.fixture
def bluetooth_adapter() -> FakeWindowedAdapter:
    return FakeWindowedAdapter([BT_PAYLOAD])


@pytest.fixture
def orchestrator(wifi_adapter, bluetooth_adapter) -> ScanOrchestrator:
    return ScanOrchestrator(
        {
            SourceType.wifi: wifi_adapter,
            SourceType.bluetooth: bluetooth_adapter,
            SourceType.mobile: MockMobileAdapter(),
        }
    )


@pytest.fixture
def sink(engine, tmp_path) -> ScanSink:
    return ScanSink(CsvScanLog(tmp_path / "scan_results.csv"), engine=engine)


@pytest.fixture
def client(engine, orchestrator, sink, tmp_path, monkeypatch) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with fake adapters and an in-memory store."""
    monkeypatch.setenv("AIRSCAN_DB_PATH", str(tmp_path / "airscan.db"))
    monkeypatch.setenv("AIRSCAN_CSV_LOG_PATH", str(tmp_path / "scan_results.csv"))
    # Patch the module-level engine so lifespan's init_db() uses the test engine.
    original_engine = db_module.engine
    db_module.engine = engine

    def _override_session() -> Generator[Session, None, None]:
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_sink] = lambda: sink
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    db_module.engine = original_engine
