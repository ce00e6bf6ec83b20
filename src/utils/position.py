#This file defines position utilities that are used by node mobility and link detection

from dataclasses import dataclass
import math
from typing import Tuple

@dataclass
class Position:
    x: float
    y: float

    def distance_to(self, other: 'Position') -> float:
        """Calculate Euclidean distance to another position."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_within_range(self, other: 'Position', range_limit: float) -> bool:
        """Check if another position is within a certain range."""
        return self.distance_to(other) <= range_limit

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def move_towards(self, target: 'Position', distance: float) -> 'Position':
        """Move from current position towards target by specified distance"""
        current_distance = self.distance_to(target)

        if current_distance <= distance:
            return Position(target.x, target.y)  # We can reach target

        ratio = distance / current_distance
        return Position(
            self.x + (target.x - self.x) * ratio,
            self.y + (target.y - self.y) * ratio
        )

    def __str__(self) -> str:
        return f"Position(x={self.x:.1f}, y={self.y:.1f})"
