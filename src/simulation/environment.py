# Simulation environment setup

import logging
from typing import Dict, List, Optional

import numpy as np
import simpy

from .processes import (
    TrafficCounters,
    movement_process,
    connectivity_process,
    message_generation_process,
    node_update_process,
    statistics_process
)
from ..agents.node import DTNNode
from ..config.simulation_config import SimulationConfig
from .agent_factory import NodeFactory

logger = logging.getLogger(__name__)


class DTNSimulation:
    """Main simulation environment: PRoPHET nodes, each with its own window log"""

    def __init__(self, config: SimulationConfig, statistics_interval: Optional[float] = None):
        self.config = config
        self.env = simpy.Environment()
        self.rng = np.random.default_rng(config.seed)
        self.counters = TrafficCounters()
        self.statistics_interval = statistics_interval if statistics_interval is not None \
            else config.instrumentation.window_size

        self.factory = NodeFactory(config, clock=lambda: self.env.now, rng=self.rng)
        self.nodes: List[DTNNode] = self.factory.create_nodes()
        logger.info("Created %d nodes, window logs in %s", len(self.nodes), config.instrumentation.log_dir)

    def start_processes(self):
        """Start mobility, connectivity, traffic and per-node update processes"""
        self.env.process(movement_process(self.env, self.nodes, self.factory.movement, self.config))
        self.env.process(connectivity_process(self.env, self.nodes, self.config))
        self.env.process(message_generation_process(self.env, self.nodes, self.config, self.rng, self.counters))

        for node in self.nodes:
            self.env.process(node_update_process(self.env, node, self.nodes, self.config, self.counters))

        self.env.process(statistics_process(self.env, self.nodes, self.counters, self.statistics_interval))

    def run(self, until: Optional[float] = None):
        """Run the simulation"""
        until = until if until is not None else self.config.sim_time
        logger.info("Running simulation until t=%.0f", until)
        self.start_processes()
        self.env.run(until=until)
        logger.info("Simulation ended at t=%.0f", self.env.now)

    def get_results(self) -> Dict:
        return {
            "counters": self.counters,
            "nodes": self.nodes,
            "log_files": [node.instrumentation.log_path for node in self.nodes],
            "windows_closed": {node.id: node.instrumentation.windows.windows_closed for node in self.nodes},
        }
