"""Streaming buffer-occupancy and drop statistics for one window."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..protocols.dtn_protocol import MessageClass


@dataclass
class BufferSampler:
    """Running sum/count/max of buffer occupancy, one sample per tick."""

    total_bytes: int = 0
    samples: int = 0
    maximum: int = 0

    def sample(self, occupancy_bytes: int) -> None:
        self.total_bytes += occupancy_bytes
        self.samples += 1
        if occupancy_bytes > self.maximum:
            self.maximum = occupancy_bytes

    def average(self) -> float:
        return self.total_bytes / self.samples if self.samples > 0 else 0.0

    def reset(self) -> None:
        self.total_bytes = 0
        self.samples = 0
        self.maximum = 0


@dataclass
class DropCounters:
    """Messages evicted from the buffer this window, per traffic class."""

    normal: int = 0
    flood: int = 0

    def record_drop(self, message_class: MessageClass) -> None:
        if message_class is MessageClass.NORMAL:
            self.normal += 1
        elif message_class is MessageClass.FLOOD:
            self.flood += 1

    def reset(self) -> None:
        self.normal = 0
        self.flood = 0


def buffer_occupancy(capacity: Optional[int], free: int,
                     held_messages: Iterable[Tuple[str, int]]) -> int:
    """
    Bytes currently held in a message store.

    Bounded stores report ``capacity - free``. An unbounded store (capacity
    ``None``) has no meaningful free space, so the held message sizes are
    summed instead.
    """
    if capacity is None:
        return sum(size for _, size in held_messages)
    return capacity - free
