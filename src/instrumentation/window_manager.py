"""Window boundary detection and the flush/reset cycle."""

import logging

from .buffer_sampler import BufferSampler, DropCounters
from .contact_tracker import ContactTracker
from .neighbor_stats import NeighborStatsTable
from .window_writer import WindowWriter

logger = logging.getLogger(__name__)


class WindowManager:
    """
    Owns the current window ``[window_start, window_start + window_size)``.

    On every tick all elapsed windows are closed one after another, so a
    tick delayed by several window lengths still produces one row set per
    window with contiguous, non-overlapping bounds.
    """

    def __init__(self, window_size: float, stats: NeighborStatsTable, contacts: ContactTracker,
                 sampler: BufferSampler, drops: DropCounters, writer: WindowWriter,
                 window_start: float = 0.0):
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        self.window_size = float(window_size)
        self.window_start = float(window_start)
        self.stats = stats
        self.contacts = contacts
        self.sampler = sampler
        self.drops = drops
        self.writer = writer
        self.windows_closed = 0

    @property
    def window_end(self) -> float:
        return self.window_start + self.window_size

    def reset(self, window_start: float) -> None:
        """Start a fresh window at ``window_start`` with empty per-window state."""
        self.window_start = float(window_start)
        self._clear_window_state()

    def tick(self, now: float) -> int:
        """Close every window that ended at or before ``now``. Returns windows closed."""
        closed = 0
        while now >= self.window_start + self.window_size:
            window_end = self.window_start + self.window_size
            self.contacts.fold_ongoing_contacts(window_end)
            rows = self.writer.emit(self.window_start, window_end, self.stats, self.sampler, self.drops)
            logger.debug("Observer %s closed window [%.0f, %.0f) with %d row(s)",
                         self.writer.observer, self.window_start, window_end, rows)
            self._clear_window_state()
            self.window_start = window_end
            closed += 1

        self.windows_closed += closed
        return closed

    def _clear_window_state(self) -> None:
        self.stats.clear()
        self.sampler.reset()
        self.drops.reset()
