"""
Node instrumentation
====================
Event hooks that a routing layer calls into. One NodeInstrumentation per
observing node; it owns that node's counters, open contacts, buffer samples
and log file, and shares none of them with other nodes or replicas.
"""

import logging
from pathlib import Path
from typing import Callable, Hashable, Iterable, Optional, Protocol, Tuple

from ..config.simulation_config import InstrumentationConfig
from ..protocols.dtn_protocol import MessageClass, classify
from .buffer_sampler import BufferSampler, DropCounters, buffer_occupancy
from .contact_tracker import ContactTracker
from .errors import InstrumentationError
from .neighbor_stats import NeighborStatsTable
from .window_manager import WindowManager
from .window_writer import WindowWriter

logger = logging.getLogger(__name__)


class BufferView(Protocol):
    """Read-only view of a node's message store."""

    def capacity(self) -> Optional[int]: ...

    def free_capacity(self) -> int: ...

    def held_messages(self) -> Iterable[Tuple[str, int]]: ...


class NodeInstrumentation:

    def __init__(self, clock: Callable[[], float], config: Optional[InstrumentationConfig] = None):
        self.clock = clock
        self.config = config if config is not None else InstrumentationConfig()

        self.stats = NeighborStatsTable()
        self.contacts = ContactTracker(self.stats)
        self.sampler = BufferSampler()
        self.drops = DropCounters()

        self.node_id: Optional[Hashable] = None
        self.buffer: Optional[BufferView] = None
        self.writer: Optional[WindowWriter] = None
        self.windows: Optional[WindowManager] = None

    @property
    def log_path(self) -> Optional[Path]:
        return self.writer.path if self.writer is not None else None

    def classify(self, message_id: Optional[str]) -> MessageClass:
        return classify(message_id, self.config.normal_prefix, self.config.flood_prefix)

    def replicate(self) -> "NodeInstrumentation":
        """Fresh instance with the same configuration and clock but empty state."""
        return NodeInstrumentation(self.clock, self.config)

    # -----------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------
    def on_init(self, node_id: Hashable, buffer: BufferView) -> None:
        """Bind to a node, open the first window and prepare its log file."""
        log_dir = Path(self.config.log_dir)
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Could not create log directory %s: %s", log_dir, exc)
            raise InstrumentationError(f"Could not create log directory {log_dir}") from exc

        self.node_id = node_id
        self.buffer = buffer
        self.writer = WindowWriter(node_id, self.config.log_path_for(node_id))
        self.windows = WindowManager(self.config.window_size, self.stats, self.contacts,
                                     self.sampler, self.drops, self.writer)
        self.windows.reset(self.clock())
        self.writer.write_header_if_needed()

    def _require_init(self) -> WindowManager:
        if self.windows is None:
            raise InstrumentationError("NodeInstrumentation used before on_init()")
        return self.windows

    # -----------------------------------------------------
    # Contacts
    # -----------------------------------------------------
    def on_link_changed(self, neighbor: Hashable, is_up: bool) -> None:
        self._require_init()
        now = self.clock()
        if is_up:
            self.stats.record_contact_start(neighbor)
            self.contacts.on_link_up(neighbor, now)
        else:
            self.contacts.on_link_down(neighbor, now)

    # -----------------------------------------------------
    # Transfers
    # -----------------------------------------------------
    def on_transfer_start(self, neighbor: Hashable, message_id: Optional[str]) -> None:
        self._require_init()
        self.stats.record_offer(neighbor, self.classify(message_id))

    def on_transfer_complete(self, neighbor: Hashable, message_id: Optional[str]) -> None:
        self._require_init()
        if message_id is None:
            return
        self.stats.record_success(neighbor, self.classify(message_id))

    def on_transfer_abort(self, neighbor: Hashable, message_id: Optional[str]) -> None:
        self._require_init()
        if message_id is None:
            return
        self.stats.record_abort(neighbor, self.classify(message_id))

    def on_message_received(self, message_id: Optional[str], from_id: Hashable) -> None:
        self._require_init()
        self.stats.record_receive(from_id, self.classify(message_id))

    def on_message_deleted(self, message_id: Optional[str], was_drop: bool) -> None:
        self._require_init()
        if was_drop:
            self.drops.record_drop(self.classify(message_id))

    # -----------------------------------------------------
    # Periodic tick
    # -----------------------------------------------------
    def on_tick(self) -> int:
        """Sample the buffer, then close any elapsed windows."""
        windows = self._require_init()
        buffer = self.buffer
        self.sampler.sample(buffer_occupancy(buffer.capacity(), buffer.free_capacity(),
                                             buffer.held_messages()))
        return windows.tick(self.clock())
