import csv

from src.protocols.dtn_protocol import DTNMessage


class ManualClock:
    """Settable simulated clock."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def read_rows(path):
    with open(path, newline="", encoding="utf-8") as f:
        return list(csv.DictReader(f))


def make_message(message_id: str, size: int, destination: int = 9) -> DTNMessage:
    return DTNMessage(id=message_id, source_id=0, destination_id=destination, generation_time=0.0, size=size)
