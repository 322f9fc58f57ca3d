"""
GraphState: the single editing session served over HTTP.

Builds a small demo graph on startup so a client has something to look at on
first load.
"""
from __future__ import annotations

# Side-effect: registers the demo node types in Node._node_registry
import portgraph.server.node_definitions  # noqa: F401

from typing import Optional

from portgraph.core.Graph import Graph
from portgraph.core.Node import Node
from portgraph.editor.GraphEditorSession import GraphEditorSession


class GraphState:
    """Holds the editor session and the graph it is editing."""

    def __init__(self, seed_demo: bool = True) -> None:
        self.session = GraphEditorSession()
        graph = Graph()
        if seed_demo:
            self._seed_demo(graph)
        self.session.load(graph)

    @property
    def graph(self) -> Graph:
        return self.session.graph

    def load(self, graph: Graph) -> None:
        self.session.close()
        self.session.load(graph)

    def reset(self, seed_demo: bool = True) -> None:
        graph = Graph()
        if seed_demo:
            self._seed_demo(graph)
        self.load(graph)

    # ── Demo graph ──────────────────────────────────────────────────────────

    def _seed_demo(self, graph: Graph) -> None:
        a = Node.create_node("ConstantNode", "ConstA", value=8)
        b = Node.create_node("ConstantNode", "ConstB", value=4)
        add = Node.create_node("AddNode", "Add")
        print_node = Node.create_node("PrintNode", "Print")
        graph.add_nodes([a, b, add, print_node])

        graph.add_edge(a.get_port("out"), add.get_port("a"))
        graph.add_edge(b.get_port("out"), add.get_port("b"))
        graph.add_edge(add.get_port("sum"), print_node.get_port("value"))

        graph.cache_port_connections()
        graph.cache_nodes_by_type()

    def find_node(self, node_id: str) -> Optional[Node]:
        return self.graph.get_node_by_id(node_id)


graph_state = GraphState()
