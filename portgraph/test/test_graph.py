import pytest

from portgraph.core.Graph import Graph
from portgraph.core.Node import Node
from portgraph.core.Types import ValueType


events = []


class RecordingNode(Node):
    def __init__(self, name, **kwargs):
        super().__init__(name, **kwargs)
        self.add_input("in")
        self.add_output("out")
        self.seen_on_add = None

    def on_added_to_graph(self):
        # Record how many siblings were already linked when this hook ran
        self.seen_on_add = len(self.graph.nodes)
        events.append(("added", self.name))

    def on_removed_from_graph(self):
        events.append(("removed", self.name, self.graph is not None, self in self.graph.nodes))

    def enable(self):
        super().enable()
        events.append(("enable", self.name))

    def disable(self):
        super().disable()
        events.append(("disable", self.name, self.graph is not None))

    def validate(self):
        events.append(("validate", self.name))


class RecordingGraph(Graph):
    def on_graph_enable(self):
        events.append(("graph_enable",))

    def on_graph_disable(self):
        events.append(("graph_disable",))

    def on_graph_validate(self):
        events.append(("graph_validate",))


class FancyNode(RecordingNode):
    pass


class TestGraphLifecycle:

    def setup_method(self):
        events.clear()

    def test_add_node_links_then_fires_hooks(self):
        graph = Graph()
        node = RecordingNode("n1")
        graph.add_node(node)

        assert node.graph is graph
        assert graph.nodes == (node,)
        assert node.seen_on_add == 1
        assert node.enabled is True
        assert events == [("added", "n1"), ("enable", "n1")]

    def test_add_nodes_links_everything_first(self):
        graph = Graph()
        batch = [RecordingNode("a"), RecordingNode("b"), RecordingNode("c")]
        graph.add_nodes(node for node in batch)

        assert [n.seen_on_add for n in batch] == [3, 3, 3]
        assert events == [
            ("added", "a"), ("added", "b"), ("added", "c"),
            ("enable", "a"), ("enable", "b"), ("enable", "c"),
        ]

    def test_add_duplicate_id_raises(self):
        graph = Graph()
        graph.add_node(Node("a", node_id="same"))
        with pytest.raises(ValueError, match="already exists"):
            graph.add_node(Node("b", node_id="same"))
        assert len(graph.nodes) == 1

    def test_add_nodes_duplicate_in_batch_links_nothing(self):
        graph = Graph()
        with pytest.raises(ValueError):
            graph.add_nodes([Node("a", node_id="x"), Node("b", node_id="x")])
        assert graph.nodes == ()

    def test_add_node_attached_elsewhere_raises(self):
        node = Node("a")
        Graph().add_node(node)
        with pytest.raises(ValueError, match="another graph"):
            Graph().add_node(node)

    def test_remove_node_fires_hooks_while_attached(self):
        graph = Graph()
        node = RecordingNode("n1")
        graph.add_node(node)
        events.clear()

        graph.remove_node(node)

        assert events == [("disable", "n1", True), ("removed", "n1", True, True)]
        assert node.graph is None
        assert graph.nodes == ()
        assert graph.get_node_by_id(node.id) is None

    def test_remove_foreign_node_raises(self):
        graph = Graph()
        with pytest.raises(ValueError, match="not part of this graph"):
            graph.remove_node(Node("stranger"))

    def test_remove_node_disconnects_every_peer(self):
        graph = Graph()
        hub, left, right = RecordingNode("hub"), RecordingNode("left"), RecordingNode("right")
        graph.add_nodes([hub, left, right])
        graph.add_edge(left.get_port("out"), hub.get_port("in"))
        graph.add_edge(hub.get_port("out"), right.get_port("in"))
        graph.add_edge(left.get_port("out"), right.get_port("in"))

        graph.remove_node(hub)

        removed_ids = {port.id for port in hub.ports.values()}
        for node in graph.nodes:
            for port in node.ports.values():
                assert removed_ids.isdisjoint(port.connected_port_ids)
        assert all(not port.is_connected() for port in hub.ports.values())
        # Unrelated edges survive
        assert left.get_port("out").is_connected_to(right.get_port("in"))

    def test_graph_hooks_fire_before_node_hooks(self):
        graph = RecordingGraph()
        graph.add_nodes([RecordingNode("a"), RecordingNode("b")])
        events.clear()

        graph.disable()
        graph.enable()
        graph.on_validate()

        assert events == [
            ("graph_disable",), ("disable", "a", True), ("disable", "b", True),
            ("graph_enable",), ("enable", "a"), ("enable", "b"),
            ("graph_validate",), ("validate", "a"), ("validate", "b"),
        ]


class TestGraphLookup:

    @pytest.fixture
    def graph(self):
        graph = Graph()
        graph.add_nodes([Node("plain"), RecordingNode("rec"), FancyNode("fancy")])
        return graph

    def test_get_node_matches_subclasses(self, graph):
        assert graph.get_node(RecordingNode).name == "rec"
        assert graph.get_node(FancyNode).name == "fancy"
        assert graph.get_node(Node).name == "plain"

    def test_get_node_missing_returns_none(self):
        assert Graph().get_node(RecordingNode) is None

    def test_get_nodes_is_ordered_and_restartable(self, graph):
        view = graph.get_nodes(RecordingNode)
        assert [n.name for n in view] == ["rec", "fancy"]
        assert [n.name for n in view] == ["rec", "fancy"]

    def test_get_nodes_is_lazy(self, graph):
        view = graph.get_nodes(FancyNode)
        graph.add_node(FancyNode("late"))
        assert [n.name for n in view] == ["fancy", "late"]

    def test_get_node_by_id(self, graph):
        node = graph.nodes[1]
        assert graph.get_node_by_id(node.id) is node

    def test_title(self, graph):
        assert graph.title == "PORTGRAPH"
        assert graph.asset_version == 1


class TestGraphEdges:

    def setup_method(self):
        events.clear()

    @pytest.fixture
    def pair(self):
        graph = Graph()
        a, b = RecordingNode("a"), RecordingNode("b")
        graph.add_nodes([a, b])
        events.clear()
        return graph, a, b

    def test_add_edge_connects_and_validates_output_node(self, pair):
        graph, a, b = pair
        graph.add_edge(a.get_port("out"), b.get_port("in"))

        assert a.get_port("out").is_connected_to(b.get_port("in"))
        assert b.get_port("in").is_connected_to(a.get_port("out"))
        assert events == [("validate", "a")]

    def test_add_edge_twice_keeps_one_connection(self, pair):
        graph, a, b = pair
        graph.add_edge(a.get_port("out"), b.get_port("in"))
        graph.add_edge(a.get_port("out"), b.get_port("in"))
        assert a.get_port("out").connection_count() == 1
        assert len(list(graph.edges())) == 1

    def test_remove_edge_validates_both_nodes(self, pair):
        graph, a, b = pair
        graph.add_edge(a.get_port("out"), b.get_port("in"))
        events.clear()

        graph.remove_edge(a.get_port("out"), b.get_port("in"))

        assert not a.get_port("out").is_connected()
        assert not b.get_port("in").is_connected()
        assert events == [("validate", "a"), ("validate", "b")]

    def test_add_edge_wrong_direction_raises(self, pair):
        graph, a, b = pair
        with pytest.raises(ValueError, match="output to an input"):
            graph.add_edge(b.get_port("in"), a.get_port("out"))

    def test_add_edge_type_mismatch_raises(self):
        graph = Graph()
        a, b = Node("a"), Node("b")
        a.add_output("out", ValueType.STRING)
        b.add_input("in", ValueType.INT)
        graph.add_nodes([a, b])

        with pytest.raises(ValueError, match="Type Mismatch"):
            graph.add_edge(a.get_port("out"), b.get_port("in"))

    def test_add_edge_on_detached_node_raises(self, pair):
        graph, a, _ = pair
        stray = RecordingNode("stray")
        with pytest.raises(ValueError, match="does not belong"):
            graph.add_edge(a.get_port("out"), stray.get_port("in"))

    def test_edges_and_connected_ports(self, pair):
        graph, a, b = pair
        graph.add_edge(a.get_port("out"), b.get_port("in"))

        edges = list(graph.edges())
        assert len(edges) == 1
        assert edges[0].output_port_id == a.get_port("out").id
        assert edges[0].input_port_id == b.get_port("in").id
        assert graph.get_connected_ports(b.get_port("in")) == [a.get_port("out")]
