#Here the DTN message model and traffic classification are defined

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MessageClass(Enum):
    NORMAL = "normal"
    FLOOD = "flood"
    NEITHER = "neither"


@dataclass
class DTNMessage:
    id: str
    source_id: int
    destination_id: int
    generation_time: float
    size: int # Size in bytes

    def get_age(self, current_time: float) -> float:
        return current_time - self.generation_time


def classify(message_id: Optional[str], normal_prefix: str = "M", flood_prefix: str = "F") -> MessageClass:
    """Map a message identifier to its traffic class by reserved prefix."""
    if not message_id:
        return MessageClass.NEITHER
    if message_id.startswith(flood_prefix):
        return MessageClass.FLOOD
    if message_id.startswith(normal_prefix):
        return MessageClass.NORMAL
    return MessageClass.NEITHER
