"""
PRoPHET Router
==============
Probabilistic routing using delivery predictabilities built from encounter
history. This is the routing layer being observed: every lifecycle event is
forwarded to the node's NodeInstrumentation, which never influences any
routing decision.

Normal ("M") messages go to a peer that is their destination or has a
higher delivery predictability for it. Flood ("F") messages are copied to
every peer that does not hold them yet.
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple, TYPE_CHECKING

from .dtn_protocol import DTNMessage, MessageClass
from ..config.simulation_config import SimulationConfig

if TYPE_CHECKING:
    from ..agents.node import DTNNode

logger = logging.getLogger(__name__)


class ProphetRouter:

    def __init__(self, node: "DTNNode", config: SimulationConfig):
        self.node = node
        self.config = config
        self.p_init = config.prophet_p_init
        self.beta = config.prophet_beta
        self.gamma = config.prophet_gamma
        self.time_unit = config.prophet_time_unit

        self.preds: Dict[int, float] = {}
        self.last_age_update = 0.0

    @property
    def instrumentation(self):
        return self.node.instrumentation

    def now(self) -> float:
        return self.instrumentation.clock()

    def init(self) -> None:
        self.last_age_update = self.now()
        self.instrumentation.on_init(self.node.id, self.node.buffer)

    def replicate(self, node: "DTNNode") -> "ProphetRouter":
        return ProphetRouter(node, self.config)

    # -----------------------------------------------------
    # Delivery predictabilities
    # -----------------------------------------------------
    def get_pred_for(self, node_id: int) -> float:
        self.age_delivery_preds()
        return self.preds.get(node_id, 0.0)

    def age_delivery_preds(self) -> None:
        now = self.now()
        time_diff = (now - self.last_age_update) / self.time_unit
        if time_diff == 0:
            return

        mult = self.gamma ** time_diff
        for node_id in self.preds:
            self.preds[node_id] *= mult
        self.last_age_update = now

    def update_delivery_pred_for(self, other_id: int) -> None:
        old = self.get_pred_for(other_id)
        self.preds[other_id] = old + (1 - old) * self.p_init

    def update_transitive_preds(self, other: "ProphetRouter") -> None:
        p_for_other = self.get_pred_for(other.node.id)
        for node_id, other_pred in other.get_preds().items():
            if node_id == self.node.id:
                continue
            old = self.get_pred_for(node_id)
            self.preds[node_id] = old + (1 - old) * p_for_other * other_pred * self.beta

    def get_preds(self) -> Dict[int, float]:
        self.age_delivery_preds()
        return dict(self.preds)

    # -----------------------------------------------------
    # Connection events
    # -----------------------------------------------------
    def changed_connection(self, other: "DTNNode", is_up: bool) -> None:
        if is_up:
            self.node.connections.add(other.id)
            self.update_delivery_pred_for(other.id)
            self.update_transitive_preds(other.router)
        else:
            self.node.connections.discard(other.id)
        self.instrumentation.on_link_changed(other.id, is_up)

    # -----------------------------------------------------
    # Forwarding
    # -----------------------------------------------------
    def should_forward(self, message: DTNMessage, peer: "DTNNode") -> bool:
        if peer.has_message(message.id):
            return False
        message_class = self.instrumentation.classify(message.id)
        if message_class is MessageClass.FLOOD:
            return True
        if message.destination_id == peer.id:
            return True
        return peer.router.get_pred_for(message.destination_id) > self.get_pred_for(message.destination_id)

    def next_transfer(self, peers: Iterable["DTNNode"]) -> Optional[Tuple[DTNMessage, "DTNNode"]]:
        """Pick the next (message, peer) pair to send, deliverable messages first."""
        peers = [p for p in peers if not p.sending]
        if not peers:
            return None

        candidates: List[Tuple[int, float, DTNMessage, "DTNNode"]] = []
        for message in self.node.buffer.messages():
            for peer in peers:
                if not self.should_forward(message, peer):
                    continue
                direct = 0 if message.destination_id == peer.id else 1
                candidates.append((direct, -peer.router.get_pred_for(message.destination_id), message, peer))

        if not candidates:
            return None
        candidates.sort(key=lambda c: (c[0], c[1]))
        _, _, message, peer = candidates[0]
        return message, peer

    def start_transfer(self, message: DTNMessage, peer: "DTNNode") -> None:
        self.instrumentation.on_transfer_start(peer.id, message.id)

    def transfer_done(self, message: Optional[DTNMessage], peer: "DTNNode") -> None:
        self.instrumentation.on_transfer_complete(peer.id, message.id if message is not None else None)

    def transfer_aborted(self, message: Optional[DTNMessage], peer: "DTNNode") -> None:
        self.instrumentation.on_transfer_abort(peer.id, message.id if message is not None else None)

    # -----------------------------------------------------
    # Message store
    # -----------------------------------------------------
    def create_message(self, message: DTNMessage) -> bool:
        return self.node.add_message(message)

    def message_transferred(self, message: DTNMessage, from_node: "DTNNode") -> bool:
        """Accept a message from ``from_node``. Returns True if it reached its destination."""
        self.instrumentation.on_message_received(message.id, from_node.id)

        if message.destination_id == self.node.id:
            if message.id not in self.node.delivered:
                self.node.delivered[message.id] = self.now()
            return True

        if message.id not in self.node.buffer:
            self.node.add_message(message)
        return False

    def delete_message(self, message_id: str, drop: bool) -> None:
        removed = self.node.buffer.remove(message_id)
        if removed is None:
            return
        self.instrumentation.on_message_deleted(message_id, drop)

    def update(self) -> int:
        """Periodic router update; drives the instrumentation tick."""
        return self.instrumentation.on_tick()
