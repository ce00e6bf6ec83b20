"""Open-contact bookkeeping for contact-duration accounting."""

import logging
from typing import Dict, Hashable

from .neighbor_stats import NeighborStatsTable

logger = logging.getLogger(__name__)


class ContactTracker:
    """
    Tracks when each currently-open contact began.

    Durations are folded into the owning NeighborStatsTable on link-down, and
    at every window boundary for contacts that are still open, so a long
    contact contributes its partial duration to each window it spans.
    """

    def __init__(self, stats: NeighborStatsTable):
        self.stats = stats
        self._started: Dict[Hashable, float] = {}

    def on_link_up(self, neighbor: Hashable, now: float) -> None:
        # A neighbor has at most one open contact; a stale start is replaced
        self._started[neighbor] = now

    def on_link_down(self, neighbor: Hashable, now: float) -> None:
        started = self._started.pop(neighbor, None)
        if started is None:
            logger.debug("Link down for %s without a matching link up, ignored", neighbor)
            return
        self.stats.add_contact_time(neighbor, now - started)

    def fold_ongoing_contacts(self, boundary: float) -> None:
        for neighbor, started in self._started.items():
            # Contacts opened after the boundary belong to a later window
            if started >= boundary:
                continue
            self.stats.add_contact_time(neighbor, boundary - started)
            self._started[neighbor] = boundary

    def is_open(self, neighbor: Hashable) -> bool:
        return neighbor in self._started

    def open_contacts(self) -> Dict[Hashable, float]:
        return dict(self._started)
