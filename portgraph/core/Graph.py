from typing import Optional, List, Dict, Iterable, Iterator, Type, TypeVar
import logging

from .Interface import IGraph
from .Node import Node, CacheTo
from .NodePort import NodePort
from .GraphPrimitives import Comment, Edge
from .SerializableDict import SerializableDict
from .SerializableType import SerializableType


# Get a logger for this module
logger = logging.getLogger(__name__)

T = TypeVar("T")


class NodeView(Iterable[T]):
    """
    Lazy view over the graph's nodes that are instances of a class.
    Each iteration starts again from the first node.
    """
    def __init__(self, nodes: List[Node], node_class: Type[T]):
        self._nodes = nodes
        self._node_class = node_class

    def __iter__(self) -> Iterator[T]:
        for node in self._nodes:
            if isinstance(node, self._node_class):
                yield node


class Graph(IGraph):
    """
    Owns the nodes of a graph, the ID-indexed snapshot of their connections,
    and a by-type index of the nodes.

    Live connections are kept on the ports. Because a persisted graph cannot
    keep direct references between ports, the host calls
    cache_port_connections() before saving and reconstruct_port_connections()
    after loading.
    """

    def __init__(self):
        self._nodes: List[Node] = []
        self._nodes_by_id: Dict[str, Node] = {}
        self.comments: List[Comment] = []

        # port ID -> connected port IDs, persisted
        self.port_connection_cache: SerializableDict[str, List[str]] = SerializableDict()
        # port ID -> live port, runtime only
        self._runtime_port_cache: Dict[str, NodePort] = {}
        self._nodes_by_type_cache: Optional[SerializableDict[SerializableType, List[Node]]] = None

        # Graph serialization version for safely handling automatic upgrades
        self.asset_version: int = 1

        # Informational, toggled by the host on focus changes
        self.is_being_edited: bool = False
        # Set by the host while a runtime simulation drives the graph
        self.runtime_active: bool = False

    @property
    def title(self) -> str:
        """Title shown by an editor. Override to tell graph kinds apart."""
        return "PORTGRAPH"

    @property
    def nodes(self) -> tuple:
        return tuple(self._nodes)

    @property
    def nodes_by_type_cache(self) -> SerializableDict[SerializableType, List[Node]]:
        if self._nodes_by_type_cache is None:
            self._nodes_by_type_cache = SerializableDict()
        return self._nodes_by_type_cache

    # ------------------------------------------------------------------
    # Lifecycle propagation
    # ------------------------------------------------------------------

    def enable(self):
        self.on_graph_enable()
        for node in self._nodes:
            node.enable()

    def disable(self):
        self.on_graph_disable()
        for node in self._nodes:
            node.disable()

    def on_validate(self):
        if not self.runtime_active:
            self.cache_nodes_by_type()

        self.on_graph_validate()
        for node in self._nodes:
            node.validate()

    def on_graph_enable(self):
        """Called by enable() before the nodes are enabled."""
        pass

    def on_graph_disable(self):
        """Called by disable() before the nodes are disabled."""
        pass

    def on_graph_validate(self):
        """Called by on_validate() before the nodes are validated."""
        pass

    # ------------------------------------------------------------------
    # Node lookup
    # ------------------------------------------------------------------

    def get_node_by_id(self, node_id: str) -> Optional[Node]:
        return self._nodes_by_id.get(node_id)

    def get_node(self, node_class: Type[T]) -> Optional[T]:
        """Find the first node of, or inherited from, the given class."""
        return next(iter(NodeView(self._nodes, node_class)), None)

    def get_nodes(self, node_class: Type[T]) -> NodeView:
        """All nodes of, or inherited from, the given class, in graph order."""
        return NodeView(self._nodes, node_class)

    # ------------------------------------------------------------------
    # Node lifecycle
    # ------------------------------------------------------------------

    def _link(self, node: Node):
        node.graph = self
        self._nodes.append(node)
        self._nodes_by_id[node.id] = node

    def _check_can_add(self, node: Node):
        if node.graph is not None and node.graph is not self:
            raise ValueError(f"Node '{node.id}' is already attached to another graph")
        if node.id in self._nodes_by_id:
            raise ValueError(f"Node with id '{node.id}' already exists in the graph")

    def add_node(self, node: Node):
        """
        Add a new node. on_added_to_graph() and enable() are called on it
        after it has been linked, in that order.
        """
        self._check_can_add(node)
        self._link(node)
        logger.debug(f"Added node '{node.name}' ({node.id})")

        node.on_added_to_graph()
        node.enable()

    def add_nodes(self, new_nodes: Iterable[Node]):
        """
        Add a batch of nodes. Every node is linked before any hook runs, then
        on_added_to_graph() fires for all of them, then enable() for all.
        """
        batch = list(new_nodes)
        seen = set()
        for node in batch:
            self._check_can_add(node)
            if node.id in seen:
                raise ValueError(f"Node with id '{node.id}' appears twice in the batch")
            seen.add(node.id)

        for node in batch:
            self._link(node)

        for node in batch:
            node.on_added_to_graph()

        for node in batch:
            node.enable()

    def attach_restored_nodes(self, restored: Iterable[Node]):
        """
        Link nodes read back from a persisted record. No add hooks fire, the
        nodes were already added when the graph was saved.
        """
        batch = list(restored)
        for node in batch:
            self._check_can_add(node)
            self._link(node)

    def remove_node(self, node: Node):
        """
        Remove a node. disable() and on_removed_from_graph() are called
        while it is still part of the graph, then its ports are disconnected
        from their peers and it is unlinked.
        """
        if self._nodes_by_id.get(node.id) is not node:
            raise ValueError(f"Node '{node.id}' is not part of this graph")

        node.disable()
        node.on_removed_from_graph()

        node.disconnect_all_ports()
        self._nodes.remove(node)
        del self._nodes_by_id[node.id]
        for port in node.ports.values():
            self._runtime_port_cache.pop(port.id, None)
        node.graph = None
        logger.debug(f"Removed node '{node.name}' ({node.id})")

    # ------------------------------------------------------------------
    # Connection cache
    # ------------------------------------------------------------------

    def cache_port_connections(self):
        """Overwrite the connection cache with the current live connections."""
        self.port_connection_cache.clear()

        for node in self._nodes:
            for port in node.ports.values():
                self.port_connection_cache[port.id] = port.connected_port_ids

    def reconstruct_port_connections(self):
        """
        Recreate live connections from the connection cache. IDs that no
        longer resolve to a port are skipped. Safe to call repeatedly.
        """
        self._build_runtime_port_cache()

        restored = 0
        for node in self._nodes:
            for port in node.ports.values():
                connected_ids = self.port_connection_cache.get(port.id)
                if connected_ids is None:
                    continue

                for connected_id in connected_ids:
                    other = self.find_port_by_id(connected_id)
                    if other is None:
                        logger.debug(f"Skipping connection {port.id} -> {connected_id}: port not found")
                        continue
                    if other is port or other.id == port.id:
                        logger.debug(f"Skipping connection {port.id} -> {connected_id}: port points at itself")
                        continue
                    if port.is_connected_to(other) and other.is_connected_to(port):
                        continue
                    port.connect(other)
                    restored += 1

        if restored:
            logger.info(f"Reconstructed {restored} port connection(s)")

    def _build_runtime_port_cache(self):
        self._runtime_port_cache.clear()
        for node in self._nodes:
            for port in node.ports.values():
                self._runtime_port_cache[port.id] = port

    def find_port_by_id(self, port_id: str) -> Optional[NodePort]:
        """
        Look up a live port. Uses the runtime cache and falls back to a scan
        of every node. The scan does not add what it finds to the cache.
        """
        port = self._runtime_port_cache.get(port_id)
        if port is not None:
            return port

        for node in self._nodes:
            for candidate in node.ports.values():
                if candidate.id == port_id:
                    return candidate
        return None

    def get_connected_ports(self, port: NodePort) -> List[NodePort]:
        connected = []
        for port_id in port.connected_port_ids:
            other = self.find_port_by_id(port_id)
            if other is not None:
                connected.append(other)
        return connected

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def _owner(self, port: NodePort) -> Node:
        node = self._nodes_by_id.get(port.node_id)
        if node is None or node.ports.get(port.port_name) is not port:
            raise ValueError(f"Port '{port.port_name}' does not belong to a node in this graph")
        return node

    def add_edge(self, output: NodePort, input: NodePort):
        """Connect an output port to an input port, then validate the output's node."""
        output_node = self._owner(output)
        self._owner(input)

        if not output.isOutputPort() or not input.isInputPort():
            raise ValueError(f"Edges must go from an output to an input: '{output.port_name}' -> '{input.port_name}'")
        if not output.can_connect_to(input):
            raise ValueError(f"Type Mismatch: Cannot connect {output.data_type} to {input.data_type}")

        output.connect(input)
        output_node.validate()

    def remove_edge(self, output: NodePort, input: NodePort):
        """Disconnect two ports, then validate both of their nodes."""
        output_node = self._owner(output)
        input_node = self._owner(input)

        output.disconnect(input)
        output_node.validate()
        input_node.validate()

    def edges(self) -> Iterator[Edge]:
        for node in self._nodes:
            for port in node.ports.values():
                if not port.isOutputPort():
                    continue
                for other in self.get_connected_ports(port):
                    yield Edge(port.id, other.id)

    # ------------------------------------------------------------------
    # Type index
    # ------------------------------------------------------------------

    def cache_nodes_by_type(self):
        """Rebuild nodes_by_type_cache from the current node list."""
        self.nodes_by_type_cache.clear()
        self.reset_extended_node_caches()

        for node in self._nodes:
            self.cache_node_by_type(node, Node.cache_descriptor(type(node)))

    def reset_extended_node_caches(self):
        """Override to clear any extra node indexes a subclass keeps."""
        pass

    def cache_node_by_type(self, node: Node, cache_to: Optional[CacheTo]):
        """Override for custom index handling."""
        if cache_to is not None:
            self._append_to_bucket(SerializableType.from_type(cache_to.category), node)
        if cache_to is None or cache_to.cache_as_both:
            self._append_to_bucket(SerializableType.from_type(type(node)), node)

    def _append_to_bucket(self, key: SerializableType, node: Node):
        bucket = self.nodes_by_type_cache.get(key)
        if bucket is None:
            bucket = []
            self.nodes_by_type_cache[key] = bucket
        bucket.append(node)

    def get_cached_nodes(self, node_class: type) -> List[Node]:
        return list(self.nodes_by_type_cache.get(SerializableType.from_type(node_class)) or [])
