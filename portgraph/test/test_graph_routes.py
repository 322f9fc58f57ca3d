import sys
import pytest
from fastapi.testclient import TestClient

from portgraph.core.Graph import Graph
from portgraph.server.main import app
from portgraph.server.routes.graph_routes import MAX_TICKS_PER_REQUEST
from portgraph.server.state import graph_state


client = TestClient(app)


def _node_named(name):
    return next(n for n in graph_state.graph.nodes if n.name == name)


class TestGraphRoutes:

    def setup_method(self):
        graph_state.reset()

    def test_health(self):
        assert client.get("/health").json() == {"status": "ok"}

    def test_get_graph_returns_demo_record(self):
        response = client.get("/api/graph")
        assert response.status_code == 200

        data = response.json()
        assert [n["name"] for n in data["nodes"]] == ["ConstA", "ConstB", "Add", "Print"]
        assert data["nodes"][0]["state"] == {"value": 8}
        add_sum = _node_named("Add").get_port("sum").id
        entry = next(e for e in data["port_connection_cache"] if e["key"] == add_sum)
        assert entry["value"] == [_node_named("Print").get_port("value").id]

    def test_put_graph_round_trip(self):
        record = client.get("/api/graph").json()
        graph_state.reset(seed_demo=False)

        response = client.put("/api/graph", json=record)

        assert response.json() == {"nodes": 4, "edges": 3}
        assert _node_named("Print").get_port("value").is_connected()
        assert graph_state.graph.is_being_edited is True

    def test_create_and_fetch_node(self):
        response = client.post("/api/graph/nodes", json={"type": "MultiplyNode", "name": "Mul"})
        assert response.status_code == 201

        node_id = response.json()["id"]
        fetched = client.get(f"/api/graph/nodes/{node_id}").json()
        assert fetched["type"] == "MultiplyNode"
        assert set(fetched["ports"]) == {"a", "b", "product"}

    def test_create_unknown_type(self):
        response = client.post("/api/graph/nodes", json={"type": "NoSuchNode", "name": "x"})
        assert response.status_code == 400
        assert "Unknown node type" in response.json()["detail"]

    def test_delete_node(self):
        add = _node_named("Add")

        assert client.delete(f"/api/graph/nodes/{add.id}").status_code == 200

        assert client.get(f"/api/graph/nodes/{add.id}").status_code == 404
        assert not _node_named("ConstA").get_port("out").is_connected()
        assert not _node_named("Print").get_port("value").is_connected()

    def test_missing_node(self):
        assert client.get("/api/graph/nodes/nope").status_code == 404
        assert client.delete("/api/graph/nodes/nope").status_code == 404

    def test_add_and_remove_edge(self):
        body = {
            "output_port_id": _node_named("ConstA").get_port("out").id,
            "input_port_id": _node_named("Print").get_port("value").id,
        }

        assert client.post("/api/graph/edges", json=body).status_code == 201
        assert len(list(graph_state.graph.edges())) == 4

        assert client.request("DELETE", "/api/graph/edges", json=body).status_code == 200
        assert len(list(graph_state.graph.edges())) == 3

    def test_add_edge_wrong_direction(self):
        body = {
            "output_port_id": _node_named("Add").get_port("a").id,
            "input_port_id": _node_named("ConstB").get_port("out").id,
        }
        response = client.post("/api/graph/edges", json=body)
        assert response.status_code == 400

    def test_add_edge_unknown_port(self):
        body = {"output_port_id": "nope", "input_port_id": "nope"}
        assert client.post("/api/graph/edges", json=body).status_code == 404

    def test_tick_refreshes_connection_cache(self):
        graph_state.graph.port_connection_cache.clear()

        response = client.post("/api/graph/tick", params={"count": graph_state.session.cache_delay})

        assert response.json() == {"tick": graph_state.session.cache_delay}
        assert len(graph_state.graph.port_connection_cache) == 6

    @pytest.mark.parametrize("count", [0, MAX_TICKS_PER_REQUEST + 1])
    def test_tick_rejects_bad_count(self, count):
        response = client.post("/api/graph/tick", params={"count": count})
        assert response.status_code == 422
        assert graph_state.session.cache_tick == 0

    def test_tick_accepts_upper_bound(self):
        response = client.post("/api/graph/tick", params={"count": MAX_TICKS_PER_REQUEST})
        assert response.json() == {"tick": MAX_TICKS_PER_REQUEST}

    def test_focus_and_blur(self):
        assert client.post("/api/graph/blur").json() == {"is_being_edited": False}
        assert client.post("/api/graph/focus").json() == {"is_being_edited": True}

    @pytest.mark.parametrize("type_name, expected", [
        ("portgraph.server.node_definitions.MathNode", ["Add"]),
        ("AddNode", []),
        ("ConstantNode", ["ConstA", "ConstB"]),
    ])
    def test_nodes_by_type(self, type_name, expected):
        response = client.get(f"/api/graph/types/{type_name}")
        assert response.status_code == 200

        names = [graph_state.find_node(node_id).name for node_id in response.json()["nodes"]]
        assert names == expected

    def test_unknown_type(self):
        assert client.get("/api/graph/types/NoSuchType").status_code == 404

    def test_put_graph_does_not_import_unloaded_modules(self, monkeypatch):
        monkeypatch.delitem(sys.modules, "this", raising=False)

        response = client.put("/api/graph", json={"graph_type": "this.Nope"})

        assert response.status_code == 200
        assert type(graph_state.graph) is Graph
        assert "this" not in sys.modules

    def test_types_route_does_not_import_unloaded_modules(self, monkeypatch):
        monkeypatch.delitem(sys.modules, "this", raising=False)

        assert client.get("/api/graph/types/this.Nope").status_code == 404
        assert "this" not in sys.modules

    def test_types_route_rejects_non_node_classes(self):
        assert client.get("/api/graph/types/portgraph.core.Graph.Graph").status_code == 404
