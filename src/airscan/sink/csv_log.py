"""Append-only CSV log of scan records."""

import csv
import logging
import threading
from pathlib import Path

from airscan.scanner.models import ScanBatch

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("TYPE", "NAME", "ADDRESS", "SIGNAL", "FREQUENCY", "TIMESTAMP")


class CsvScanLog:
    """Appends one row per record; writes the header when the file is new."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()

    def append(self, batch: ScanBatch) -> int:
        if not batch:
            return 0
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            write_header = not self.path.exists() or self.path.stat().st_size == 0
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                if write_header:
                    writer.writerow(CSV_COLUMNS)
                for record in batch:
                    writer.writerow(
                        [
                            record.source_type,
                            record.name,
                            record.address,
                            record.signal_strength,
                            record.frequency_info,
                            record.captured_at.isoformat(),
                        ]
                    )
        logger.debug("Appended %d record(s) to %s", len(batch), self.path)
        return len(batch)
