"""
Random Waypoint Mobility
========================
Each node picks a uniformly random waypoint in the area, travels there at a
uniformly random speed, pauses for a random time and repeats.
"""

import numpy as np

from ..utils.position import Position
from ..config.simulation_config import SimulationConfig

from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from ..agents.node import DTNNode


class RandomWaypointMovement:

    def __init__(self, config: SimulationConfig, rng: np.random.Generator):
        self.config = config
        self.rng = rng

    def random_position(self) -> Position:
        return Position(
            float(self.rng.uniform(0, self.config.area_size[0])),
            float(self.rng.uniform(0, self.config.area_size[1]))
        )

    def new_path(self, node: 'DTNNode') -> None:
        node.waypoint = self.random_position()
        node.speed = float(self.rng.uniform(self.config.min_speed, self.config.max_speed))

    def move(self, node: 'DTNNode', now: float, dt: float) -> None:
        """Advance ``node`` by ``dt`` seconds of travel."""
        if now < node.pause_until:
            return

        if node.waypoint is None:
            self.new_path(node)

        node.position = node.position.move_towards(node.waypoint, node.speed * dt)

        # Arrived: pause, then head for a fresh waypoint
        if node.position.distance_to(node.waypoint) == 0:
            node.pause_until = now + float(self.rng.uniform(0, self.config.max_pause))
            node.waypoint = None

    def get_strategy_name(self) -> str:
        return "Random Waypoint"
