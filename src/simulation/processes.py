# src/simulation/processes.py

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import List

import numpy as np
import simpy

from ..agents.node import DTNNode
from ..config.simulation_config import SimulationConfig
from ..movement.random_waypoint import RandomWaypointMovement
from ..protocols.dtn_protocol import DTNMessage

logger = logging.getLogger(__name__)


@dataclass
class TrafficCounters:
    """Run-wide totals kept by the host, independent of the window logs."""

    created: int = 0
    created_flood: int = 0
    transfers_started: int = 0
    transfers_done: int = 0
    transfers_aborted: int = 0
    delivered: int = 0


def movement_process(env: simpy.Environment, nodes: List[DTNNode], movement: RandomWaypointMovement,
                     config: SimulationConfig):
    """Advance every node along its random-waypoint path."""
    while True:
        for node in nodes:
            movement.move(node, env.now, config.movement_step)
        yield env.timeout(config.movement_step)


def connectivity_process(env: simpy.Environment, nodes: List[DTNNode], config: SimulationConfig):
    """Raise link up/down events on both ends when nodes enter or leave range."""
    while True:
        for a, b in combinations(nodes, 2):
            in_range = a.can_communicate_with(b, config)
            if in_range != a.is_connected_to(b.id):
                a.router.changed_connection(b, in_range)
                b.router.changed_connection(a, in_range)
        yield env.timeout(config.update_interval)


def message_generation_process(env: simpy.Environment, nodes: List[DTNNode], config: SimulationConfig,
                               rng: np.random.Generator, counters: TrafficCounters):
    """Poisson message generation between random source/destination pairs."""
    normal_prefix = config.instrumentation.normal_prefix
    flood_prefix = config.instrumentation.flood_prefix
    sequence = 0

    while True:
        yield env.timeout(float(rng.exponential(config.message_interval)))
        if len(nodes) < 2:
            continue

        source, destination = rng.choice(len(nodes), size=2, replace=False)
        is_flood = rng.random() < config.flood_fraction
        prefix = flood_prefix if is_flood else normal_prefix
        low, high = config.message_size_range

        message = DTNMessage(
            id=f"{prefix}{sequence}",
            source_id=int(source),
            destination_id=int(destination),
            generation_time=env.now,
            size=int(rng.integers(low, high + 1))
        )
        sequence += 1

        if nodes[source].router.create_message(message):
            counters.created += 1
            if is_flood:
                counters.created_flood += 1


def transfer_process(env: simpy.Environment, sender: DTNNode, receiver: DTNNode, message: DTNMessage,
                     config: SimulationConfig, counters: TrafficCounters):
    """
    Send one message over the link, aborting as soon as the link goes down.
    Both ends are marked busy by the caller and released here.
    """
    sender.router.start_transfer(message, receiver)
    counters.transfers_started += 1

    try:
        remaining = message.size / config.transmit_speed
        while remaining > 0:
            step = min(config.update_interval, remaining)
            yield env.timeout(step)
            remaining -= step
            if not sender.is_connected_to(receiver.id):
                sender.router.transfer_aborted(message, receiver)
                counters.transfers_aborted += 1
                return

        delivered = receiver.router.message_transferred(message, sender)
        sender.router.transfer_done(message, receiver)
        counters.transfers_done += 1

        if delivered:
            counters.delivered += 1
            if message.id in sender.buffer:
                sender.router.delete_message(message.id, drop=False)
    finally:
        sender.sending = False
        receiver.sending = False


def node_update_process(env: simpy.Environment, node: DTNNode, nodes: List[DTNNode],
                        config: SimulationConfig, counters: TrafficCounters):
    """Periodic router update: instrumentation tick, then try to start a transfer."""
    while True:
        node.router.update()

        if not node.sending:
            peers = [nodes[i] for i in sorted(node.connections)]
            choice = node.router.next_transfer(peers)
            if choice is not None:
                message, peer = choice
                node.sending = True
                peer.sending = True
                env.process(transfer_process(env, node, peer, message, config, counters))

        yield env.timeout(config.update_interval)


def statistics_process(env: simpy.Environment, nodes: List[DTNNode], counters: TrafficCounters,
                       interval: float):
    """Log a progress line every ``interval`` simulated seconds."""
    while True:
        yield env.timeout(interval)
        links = sum(len(n.connections) for n in nodes) // 2
        logger.info("t=%.0f created=%d delivered=%d aborted=%d open_links=%d",
                    env.now, counters.created, counters.delivered, counters.transfers_aborted, links)
