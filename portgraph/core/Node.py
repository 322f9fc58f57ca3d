from typing import Optional, List, Dict, Any, Type, Callable, TYPE_CHECKING
from dataclasses import dataclass
import logging
import uuid

from .NodePort import NodePort, InputPort, OutputPort
from .Types import PortDirection, ValueType

# To avoid circular imports
if TYPE_CHECKING:
    from .Graph import Graph


# Get a logger for this module
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheTo:
    """
    Declares the TypeIndex category a node type is filed under.

    With ``cache_as_both`` the node is filed under its own concrete type too,
    so sibling types can share a lookup category and still be queried exactly.
    """
    category: type
    cache_as_both: bool = False


class Node:
    _node_registry: Dict[str, Type['Node']] = {}

    # Per-class TypeIndex override. Read from the class itself only, never
    # inherited from a base class.
    cache_to: Optional[CacheTo] = None

    @classmethod
    def register(cls, type_name: str, cache_to: Optional[CacheTo] = None) -> Callable[[Type['Node']], Type['Node']]:
        """Decorator to register a node class with a specific type name."""
        def decorator(subclass: Type['Node']) -> Type['Node']:
            if cls._node_registry.get(type_name):
                raise ValueError(f"Node type '{type_name}' is already registered.")
            cls._node_registry[type_name] = subclass
            subclass.type_name = type_name
            if cache_to is not None:
                subclass.cache_to = cache_to
            return subclass
        return decorator

    @classmethod
    def get_registered_type(cls, type_name: str) -> Optional[Type['Node']]:
        return cls._node_registry.get(type_name)

    @classmethod
    def create_node(cls, type_name: str, name: Optional[str] = None, node_id: Optional[str] = None, **kwargs) -> 'Node':
        """Factory method to create a node instance by type name."""
        if type_name not in cls._node_registry:
            raise ValueError(f"Unknown node type '{type_name}'")

        node_class = cls._node_registry[type_name]
        return node_class(name if name is not None else type_name, type_name, node_id=node_id, **kwargs)

    @staticmethod
    def cache_descriptor(node_class: Type['Node']) -> Optional[CacheTo]:
        return vars(node_class).get("cache_to")

    def __init__(self,
                 name: str,
                 type: Optional[str] = None,
                 node_id: Optional[str] = None):
        self.name = name
        self.type = type if type is not None else getattr(self.__class__, "type_name", self.__class__.__name__)
        self._id = node_id if node_id is not None else uuid.uuid4().hex

        # port name -> port, in declaration order
        self.ports: Dict[str, NodePort] = {}

        # Set by the owning graph while attached, None otherwise
        self.graph: Optional['Graph'] = None
        self.enabled = False

    @property
    def id(self) -> str:
        return self._id

    def __repr__(self):
        return f"{self.__class__.__name__}({self.name} [{self.id}])"

    # --- Ports ---

    def add_input(self, port_name: str, data_type: ValueType = ValueType.ANY) -> InputPort:
        if port_name in self.ports:
            raise ValueError(f"Port '{port_name}' already exists in node '{self.id}'")
        port = InputPort(self.id, port_name, data_type=data_type)
        self.ports[port_name] = port
        return port

    def add_output(self, port_name: str, data_type: ValueType = ValueType.ANY) -> OutputPort:
        if port_name in self.ports:
            raise ValueError(f"Port '{port_name}' already exists in node '{self.id}'")
        port = OutputPort(self.id, port_name, data_type=data_type)
        self.ports[port_name] = port
        return port

    def get_port(self, port_name: str) -> NodePort:
        port = self.ports.get(port_name)
        if port is None:
            raise KeyError(f"Port '{port_name}' not found in node '{self.id}'")
        return port

    @property
    def inputs(self) -> Dict[str, NodePort]:
        return {name: port for name, port in self.ports.items() if port.direction == PortDirection.INPUT}

    @property
    def outputs(self) -> Dict[str, NodePort]:
        return {name: port for name, port in self.ports.items() if port.direction == PortDirection.OUTPUT}

    def restore_port_id(self, port_name: str, port_id: str):
        port = self.get_port(port_name)
        if port.is_connected():
            raise ValueError(f"Cannot change the ID of connected port '{port_name}' on node '{self.id}'")
        port.id = port_id

    def disconnect_all_ports(self):
        if self.graph is None:
            raise ValueError(f"Node '{self.id}' is not attached to a graph")

        for port in self.ports.values():
            for peer_id in port.connected_port_ids:
                peer = self.graph.find_port_by_id(peer_id)
                if peer is not None:
                    port.disconnect(peer)
                else:
                    port.forget(peer_id)

    # --- Lifecycle hooks, fired by the owning graph ---

    def on_added_to_graph(self):
        pass

    def on_removed_from_graph(self):
        pass

    def enable(self):
        self.enabled = True

    def disable(self):
        self.enabled = False

    def validate(self):
        pass

    # --- Per-type persisted fields ---

    def to_dict(self) -> Dict[str, Any]:
        return {}

    def from_dict(self, fields: Dict[str, Any]):
        pass
