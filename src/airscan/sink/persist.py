"""Durable recording of finished batches.

Persistence is a side effect of a scan, not part of its result: callers
hand the batch over and move on, and failures only reach the log.
"""

import asyncio
import logging

from sqlalchemy.engine import Engine
from sqlmodel import Session

from airscan.registry.store import insert_batch
from airscan.scanner.errors import PersistenceError
from airscan.scanner.models import ScanBatch
from airscan.sink.csv_log import CsvScanLog

logger = logging.getLogger(__name__)

# Strong references to in-flight background writes
_background_tasks: set[asyncio.Task[None]] = set()


class ScanSink:
    """Writes a batch to the CSV log and, optionally, the relational store."""

    def __init__(self, csv_log: CsvScanLog, engine: Engine | None = None) -> None:
        self.csv_log = csv_log
        self.engine = engine

    def _insert(self, engine: Engine, batch: ScanBatch) -> int:
        with Session(engine) as session:
            return insert_batch(session, batch)

    async def persist(self, batch: ScanBatch) -> None:
        """Write ``batch`` to every target. Raises PersistenceError on any failure.

        Targets are attempted independently, so a failing CSV write does not
        prevent the database insert (and vice versa).
        """
        if not batch:
            return

        failures: dict[str, BaseException] = {}
        try:
            await asyncio.to_thread(self.csv_log.append, batch)
        except Exception as e:
            failures["csv"] = e

        if self.engine is not None:
            try:
                await asyncio.to_thread(self._insert, self.engine, batch)
            except Exception as e:
                failures["db"] = e

        if failures:
            raise PersistenceError(failures)
        logger.info("Persisted %d record(s)", len(batch))


async def persist_quietly(sink: ScanSink, batch: ScanBatch) -> None:
    """Persist and log failures instead of raising."""
    try:
        await sink.persist(batch)
    except PersistenceError as e:
        for target, cause in e.failures.items():
            logger.error("Persisting %d record(s) to %s failed: %s", len(batch), target, cause)
    except Exception:
        logger.exception("Unexpected error persisting %d record(s)", len(batch))


def persist_in_background(sink: ScanSink, batch: ScanBatch) -> asyncio.Task[None]:
    """Schedule persistence without awaiting it."""
    task = asyncio.create_task(persist_quietly(sink, batch))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task
