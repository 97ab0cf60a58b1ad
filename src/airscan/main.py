"""Airscan application entrypoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import airscan.database as db_module
from airscan.config import Settings, load_config, settings
from airscan.scanner.base import SourceAdapter
from airscan.scanner.bluetooth import BleakRadio, BluetoothAdapter
from airscan.scanner.mobile import MockMobileAdapter
from airscan.scanner.models import SourceType
from airscan.scanner.orchestrator import ScanOrchestrator
from airscan.scanner.wifi import WifiAdapter
from airscan.sink.csv_log import CsvScanLog
from airscan.sink.persist import ScanSink

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


def _create_adapters(cfg: Settings) -> dict[SourceType, SourceAdapter]:
    """Factory: one adapter per source, from configuration."""
    adapters: dict[SourceType, SourceAdapter] = {
        SourceType.wifi: WifiAdapter(interface=cfg.wifi_interface, rescan=cfg.wifi_rescan),
        SourceType.bluetooth: BluetoothAdapter(BleakRadio(adapter=cfg.bluetooth_adapter)),
    }
    if cfg.mobile_mode == "mock":
        adapters[SourceType.mobile] = MockMobileAdapter()
    elif cfg.mobile_mode != "none":
        logger.warning("Unknown mobile mode '%s', mobile scans disabled", cfg.mobile_mode)
    return adapters


def _create_sink(cfg: Settings) -> ScanSink:
    engine = db_module.engine if cfg.persist_to_db else None
    return ScanSink(CsvScanLog(cfg.csv_log_path), engine=engine)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup/shutdown lifecycle."""
    # Import models to register them with SQLModel before init_db()
    import airscan.registry.models  # noqa: F401

    cfg = load_config()
    if cfg.persist_to_db:
        cfg.db_path.parent.mkdir(parents=True, exist_ok=True)
        db_module.init_db()
        logger.info("Database initialized")

    adapters = _create_adapters(cfg)
    app.state.orchestrator = ScanOrchestrator(adapters)
    app.state.sink = _create_sink(cfg)
    logger.info("Scan sources ready: %s", ", ".join(adapters))

    yield

    bluetooth = adapters.get(SourceType.bluetooth)
    if isinstance(bluetooth, BluetoothAdapter):
        await bluetooth.radio.stop()


app = FastAPI(
    title="Airscan",
    description="WiFi, Bluetooth and cellular discovery scans",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Register routers
from airscan.api.routes import router as api_router  # noqa: E402

app.include_router(api_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


def main() -> None:
    import uvicorn

    logger.info("Starting Airscan on %s:%d", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
