"""Per-neighbor counters accumulated over one window."""

from dataclasses import dataclass
from typing import Dict, Hashable, Iterator, Optional, Tuple

from ..protocols.dtn_protocol import MessageClass


@dataclass
class NeighborStats:
    """
    Counters for one neighbor, valid only inside the current window.

    Outbound counters (offer/ok/abort) are counted against the transfer
    peer, rx against the sender. ok + abort may be lower than offer when a
    transfer is still in flight at window close.
    """

    contacts: int = 0
    contact_time: float = 0.0

    tx_offer_normal: int = 0
    tx_ok_normal: int = 0
    tx_abort_normal: int = 0
    rx_normal: int = 0

    tx_offer_flood: int = 0
    tx_ok_flood: int = 0
    tx_abort_flood: int = 0
    rx_flood: int = 0

    def increment(self, counter: str, message_class: MessageClass) -> None:
        """Increment ``<counter>_<class>``; NEITHER has no counter."""
        if message_class is MessageClass.NEITHER:
            return
        name = f"{counter}_{message_class.value}"
        setattr(self, name, getattr(self, name) + 1)


class NeighborStatsTable:
    """Owned mapping neighbor -> NeighborStats with explicit get-or-create."""

    def __init__(self):
        self._stats: Dict[Hashable, NeighborStats] = {}

    def get_or_create(self, neighbor: Hashable) -> NeighborStats:
        stats = self._stats.get(neighbor)
        if stats is None:
            stats = NeighborStats()
            self._stats[neighbor] = stats
        return stats

    def get(self, neighbor: Hashable) -> Optional[NeighborStats]:
        return self._stats.get(neighbor)

    def _record(self, neighbor: Hashable, counter: str, message_class: MessageClass) -> None:
        # No activity to report for unclassified traffic, so no record either
        if message_class is MessageClass.NEITHER:
            return
        self.get_or_create(neighbor).increment(counter, message_class)

    def record_offer(self, neighbor: Hashable, message_class: MessageClass) -> None:
        self._record(neighbor, "tx_offer", message_class)

    def record_success(self, neighbor: Hashable, message_class: MessageClass) -> None:
        self._record(neighbor, "tx_ok", message_class)

    def record_abort(self, neighbor: Hashable, message_class: MessageClass) -> None:
        self._record(neighbor, "tx_abort", message_class)

    def record_receive(self, neighbor: Hashable, message_class: MessageClass) -> None:
        self._record(neighbor, "rx", message_class)

    def record_contact_start(self, neighbor: Hashable) -> None:
        self.get_or_create(neighbor).contacts += 1

    def add_contact_time(self, neighbor: Hashable, seconds: float) -> None:
        self.get_or_create(neighbor).contact_time += seconds

    def clear(self) -> None:
        self._stats.clear()

    def items(self) -> Iterator[Tuple[Hashable, NeighborStats]]:
        return iter(self._stats.items())

    def __len__(self) -> int:
        return len(self._stats)

    def __contains__(self, neighbor: Hashable) -> bool:
        return neighbor in self._stats
