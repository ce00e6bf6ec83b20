# src/agents/node.py

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set, Tuple, TYPE_CHECKING

from ..protocols.dtn_protocol import DTNMessage
from ..utils.position import Position
from ..config.simulation_config import SimulationConfig
from ..instrumentation.observer import NodeInstrumentation

if TYPE_CHECKING:
    from ..protocols.prophet_router import ProphetRouter

logger = logging.getLogger(__name__)


class MessageBuffer:
    """
    FIFO message store measured in bytes.

    ``capacity=None`` makes the store unbounded; free_capacity() then has no
    meaning and reports 0.
    """

    def __init__(self, capacity: Optional[int] = None):
        self._capacity = capacity
        self._messages: Dict[str, DTNMessage] = {}
        self._used = 0

    def capacity(self) -> Optional[int]:
        return self._capacity

    def free_capacity(self) -> int:
        if self._capacity is None:
            return 0
        return self._capacity - self._used

    def held_messages(self) -> Iterator[Tuple[str, int]]:
        return ((m.id, m.size) for m in self._messages.values())

    def has_room_for(self, size: int) -> bool:
        return self._capacity is None or self._used + size <= self._capacity

    def can_ever_hold(self, size: int) -> bool:
        return self._capacity is None or size <= self._capacity

    def add(self, message: DTNMessage) -> None:
        self._messages[message.id] = message
        self._used += message.size

    def remove(self, message_id: str) -> Optional[DTNMessage]:
        message = self._messages.pop(message_id, None)
        if message is not None:
            self._used -= message.size
        return message

    def get(self, message_id: str) -> Optional[DTNMessage]:
        return self._messages.get(message_id)

    def oldest(self) -> Optional[DTNMessage]:
        return next(iter(self._messages.values()), None)

    def messages(self) -> List[DTNMessage]:
        return list(self._messages.values())

    def __contains__(self, message_id: str) -> bool:
        return message_id in self._messages

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def used(self) -> int:
        return self._used


@dataclass
class DTNNode:
    id: int
    position: Position
    buffer: MessageBuffer
    instrumentation: NodeInstrumentation
    router: Optional["ProphetRouter"] = None

    # Random waypoint state
    waypoint: Optional[Position] = None
    speed: float = 0.0
    pause_until: float = 0.0

    connections: Set[int] = field(default_factory=set)
    delivered: Dict[str, float] = field(default_factory=dict)
    sending: bool = False

    def can_communicate_with(self, other: "DTNNode", config: SimulationConfig) -> bool:
        return self.position.is_within_range(other.position, config.comm_range)

    def is_connected_to(self, other_id: int) -> bool:
        return other_id in self.connections

    def has_message(self, message_id: str) -> bool:
        return message_id in self.buffer or message_id in self.delivered

    def add_message(self, message: DTNMessage) -> bool:
        """
        Store a message, evicting the oldest messages to make room.
        Evictions are reported to the router as drops.
        Returns False if the message can never fit.
        """
        if not self.buffer.can_ever_hold(message.size):
            logger.debug("Node %s: message %s (%d bytes) larger than buffer", self.id, message.id, message.size)
            return False

        while not self.buffer.has_room_for(message.size):
            victim = self.buffer.oldest()
            self.router.delete_message(victim.id, drop=True)

        self.buffer.add(message)
        return True

    def get_buffer_usage(self) -> float:
        """Get buffer usage as a fraction (0.0 to 1.0), 0.0 for unbounded buffers"""
        capacity = self.buffer.capacity()
        if not capacity:
            return 0.0
        return self.buffer.used / capacity

    def __str__(self) -> str:
        return f"DTNNode(id={self.id}, buffer={len(self.buffer)}, pos={self.position})"
