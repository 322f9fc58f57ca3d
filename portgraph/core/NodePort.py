from typing import Dict, List, Optional
import logging
import uuid

from .Types import PortDirection, ValueType


# Get a logger for this module
logger = logging.getLogger(__name__)


class NodePort:
    """
    A typed, directional connection point owned by exactly one node.

    Ports refer to their node and to their peers by ID only. Resolving an ID
    back to a live object is the graph's job (see Graph.find_port_by_id).
    """

    def __init__(self,
                 node_id: str,
                 port_name: str,
                 direction: PortDirection,
                 data_type: ValueType = ValueType.ANY,
                 port_id: Optional[str] = None):
        self.id = port_id if port_id is not None else uuid.uuid4().hex
        self.node_id = node_id
        self.port_name = port_name
        self.direction = direction
        self.data_type = data_type

        # dict used as an insertion-ordered set of peer port IDs
        self._connected_port_ids: Dict[str, None] = {}

    def __repr__(self):
        return f"NodePort({self.node_id}.{self.port_name} [{self.id}])"

    def isInputPort(self) -> bool:
        return self.direction == PortDirection.INPUT

    def isOutputPort(self) -> bool:
        return self.direction == PortDirection.OUTPUT

    @property
    def connected_port_ids(self) -> List[str]:
        return list(self._connected_port_ids)

    def connection_count(self) -> int:
        return len(self._connected_port_ids)

    def is_connected(self) -> bool:
        return len(self._connected_port_ids) > 0

    def is_connected_to(self, other: 'NodePort') -> bool:
        return other.id in self._connected_port_ids

    def can_connect_to(self, other: 'NodePort') -> bool:
        if other is self or other.id == self.id:
            return False
        if self.direction == other.direction:
            return False
        return ValueType.compatible(self.data_type, other.data_type)

    def connect(self, other: 'NodePort'):
        """Connect both ways. Reconnecting an already connected pair is a no-op."""
        if other is self or other.id == self.id:
            raise ValueError(f"Cannot connect port '{self.port_name}' on node '{self.node_id}' to itself")

        if other.id in self._connected_port_ids and self.id in other._connected_port_ids:
            return

        logger.debug(f"Connecting port '{self.port_name}' on node '{self.node_id}' to port '{other.port_name}' on node '{other.node_id}'")
        self._connected_port_ids[other.id] = None
        other._connected_port_ids[self.id] = None

    def disconnect(self, other: 'NodePort'):
        logger.debug(f"Disconnecting port '{self.port_name}' on node '{self.node_id}' from port '{other.port_name}' on node '{other.node_id}'")
        self._connected_port_ids.pop(other.id, None)
        other._connected_port_ids.pop(self.id, None)

    def forget(self, port_id: str):
        """Drop a peer ID from this side only, for peers that no longer resolve."""
        self._connected_port_ids.pop(port_id, None)

    def clear_connections(self):
        """Drop every live connection on this side only, as a reload would."""
        self._connected_port_ids.clear()


class InputPort(NodePort):
    def __init__(self, node_id, port_name, data_type=ValueType.ANY, port_id=None):
        super().__init__(node_id, port_name, PortDirection.INPUT, data_type, port_id)


class OutputPort(NodePort):
    def __init__(self, node_id, port_name, data_type=ValueType.ANY, port_id=None):
        super().__init__(node_id, port_name, PortDirection.OUTPUT, data_type, port_id)
