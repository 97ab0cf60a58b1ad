"""Fan a scan out to the selected sources and merge the results."""

import asyncio
import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

from airscan.scanner.base import SourceAdapter, WindowedAdapter
from airscan.scanner.errors import AdapterError, AllSourcesFailedError
from airscan.scanner.models import SOURCE_PRIORITY, RawPayload, ScanBatch, SourceType
from airscan.scanner.normalize import normalize_all

logger = logging.getLogger(__name__)


class ScanOrchestrator:
    """Runs adapters concurrently and produces one timestamped batch.

    Each ``run_scan`` call is independent: windowed adapters allocate a
    fresh buffer and listener per call, and serialize on their own radio
    lock when two calls overlap.
    """

    def __init__(self, adapters: Mapping[SourceType, SourceAdapter]) -> None:
        self.adapters = dict(adapters)

    async def _invoke(self, source: SourceType, window: float) -> list[RawPayload]:
        adapter = self.adapters.get(source)
        if adapter is None:
            raise AdapterError(source, LookupError(f"No adapter configured for {source}"))
        try:
            if isinstance(adapter, WindowedAdapter):
                return await adapter.scan_window(window)
            return await adapter.scan()
        except AdapterError:
            raise
        except Exception as e:
            raise AdapterError(source, e) from e

    async def run_scan(self, sources: Iterable[SourceType], window: float) -> ScanBatch:
        """Scan ``sources`` concurrently and return their merged records.

        Raises AllSourcesFailedError only when every selected source fails;
        otherwise failed sources are logged and left out of the batch.
        """
        wanted = set(sources)
        selected = [s for s in SOURCE_PRIORITY if s in wanted]
        if not selected:
            return []

        logger.info("Starting scan: %s", ", ".join(selected))
        results = await asyncio.gather(
            *(self._invoke(source, window) for source in selected),
            return_exceptions=True,
        )

        captured_at = datetime.now(UTC)
        batch: ScanBatch = []
        errors: list[AdapterError] = []
        for source, result in zip(selected, results, strict=True):
            if isinstance(result, AdapterError):
                errors.append(result)
                continue
            if isinstance(result, BaseException):
                # Cancellation and other non-adapter failures propagate
                raise result
            batch.extend(normalize_all(source, result, captured_at))

        if errors and len(errors) == len(selected):
            logger.error("All selected sources failed: %s", "; ".join(str(e) for e in errors))
            raise AllSourcesFailedError(errors)
        for error in errors:
            logger.warning("Source %s failed, continuing without it: %s", error.source, error.cause)

        logger.info("Scan finished with %d record(s)", len(batch))
        return batch
