from typing import Callable, List, Optional

import numpy as np

from ..agents.node import DTNNode, MessageBuffer
from ..config.simulation_config import SimulationConfig
from ..instrumentation.observer import NodeInstrumentation
from ..movement.random_waypoint import RandomWaypointMovement
from ..protocols.prophet_router import ProphetRouter


class NodeFactory:
    """
    Factory class for creating instrumented DTN nodes.

    Placement uses a NumPy Generator seeded from the config, so two runs with
    the same seed start from the same layout.
    """

    def __init__(self, config: SimulationConfig, clock: Callable[[], float],
                 rng: Optional[np.random.Generator] = None):
        self.config = config
        self.clock = clock
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.movement = RandomWaypointMovement(config, self.rng)

        # Prototype instrumentation, replicated once per node
        self._prototype = NodeInstrumentation(clock, config.instrumentation)

    def create_node(self, node_id: int) -> DTNNode:
        node = DTNNode(
            id=node_id,
            position=self.movement.random_position(),
            buffer=MessageBuffer(self.config.buffer_capacity),
            instrumentation=self._prototype.replicate()
        )
        node.router = ProphetRouter(node, self.config)
        return node

    def create_nodes(self) -> List[DTNNode]:
        """Create and initialize all nodes (opens each node's window log)"""
        nodes = [self.create_node(i) for i in range(self.config.num_nodes)]
        for node in nodes:
            node.router.init()
        return nodes
