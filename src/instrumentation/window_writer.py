"""CSV serialization of closed windows, one file per observing node."""

import csv
import logging
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Hashable, List, Union

from .buffer_sampler import BufferSampler, DropCounters
from .errors import InstrumentationError
from .neighbor_stats import NeighborStatsTable

logger = logging.getLogger(__name__)

LOG_COLUMNS = [
    "observer", "neighbor", "window_start", "window_end",
    "contacts", "contact_time",
    "tx_offer_normal", "tx_ok_normal", "tx_abort_normal", "rx_normal",
    "tx_offer_flood", "tx_ok_flood", "tx_abort_flood", "rx_flood",
    "buf_bytes_avg", "buf_bytes_max",
    "drop_buf_normal", "drop_buf_flood",
]


def format_fixed(value: float, digits: int = 0) -> str:
    """Fixed-point text of `value` with ties rounded away from zero."""
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


class WindowWriter:
    """
    Appends window rows to a node's log file.

    The file is opened in append mode for every write and closed again, so
    no handle outlives a single header or window emission. Any I/O failure
    is fatal and raised as InstrumentationError.
    """

    def __init__(self, observer: Hashable, path: Union[str, Path]):
        self.observer = observer
        self.path = Path(path)

    def has_data(self) -> bool:
        return self.path.exists() and self.path.stat().st_size > 0

    def write_header_if_needed(self) -> bool:
        """Write the header unless the file already holds data. Returns True if written."""
        try:
            if self.has_data():
                return False
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                csv.writer(f, lineterminator="\n").writerow(LOG_COLUMNS)
        except OSError as exc:
            logger.error("Could not write header to log file %s: %s", self.path, exc)
            raise InstrumentationError(f"Could not write header to log file {self.path}") from exc
        logger.info("Created window log %s", self.path)
        return True

    def format_rows(self, start: float, end: float, stats: NeighborStatsTable,
                    sampler: BufferSampler, drops: DropCounters) -> List[List[str]]:
        shared_buffer = [format_fixed(sampler.average(), 2), str(sampler.maximum)]
        shared_drops = [str(drops.normal), str(drops.flood)]

        rows = []
        for neighbor, s in stats.items():
            rows.append([
                str(self.observer),
                str(neighbor),
                format_fixed(start),
                format_fixed(end),
                str(s.contacts),
                format_fixed(s.contact_time),
                str(s.tx_offer_normal),
                str(s.tx_ok_normal),
                str(s.tx_abort_normal),
                str(s.rx_normal),
                str(s.tx_offer_flood),
                str(s.tx_ok_flood),
                str(s.tx_abort_flood),
                str(s.rx_flood),
                *shared_buffer,
                *shared_drops,
            ])
        return rows

    def emit(self, start: float, end: float, stats: NeighborStatsTable,
             sampler: BufferSampler, drops: DropCounters) -> int:
        """Append one row per neighbor seen in [start, end). Returns the row count."""
        rows = self.format_rows(start, end, stats, sampler, drops)
        if not rows:
            return 0

        try:
            with open(self.path, "a", newline="", encoding="utf-8") as f:
                csv.writer(f, lineterminator="\n").writerows(rows)
        except OSError as exc:
            logger.error("Could not write log file %s: %s", self.path, exc)
            raise InstrumentationError(f"Could not write log file {self.path}") from exc
        return len(rows)
