"""
Graph REST routes.

All routes are mounted under /api by main.py.
"""
from __future__ import annotations

from typing import Any, Dict, Tuple

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from portgraph.core.Node import Node
from portgraph.core.NodePort import NodePort
from portgraph.core.SerializableType import UnknownType, resolve_type
from portgraph.serializers.graph_serializer import deserialize_graph, serialize_graph
from portgraph.serializers.schema import GraphRecord
from portgraph.server.state import graph_state

router = APIRouter()

MAX_TICKS_PER_REQUEST = 1000


def _node_summary(node: Node) -> Dict[str, Any]:
    return {
        "id": node.id,
        "name": node.name,
        "type": node.type,
        "ports": {
            name: {
                "id": port.id,
                "direction": port.direction.name,
                "data_type": port.data_type.value,
                "connected": port.connected_port_ids,
            }
            for name, port in node.ports.items()
        },
    }


def _get_node_or_404(node_id: str) -> Node:
    node = graph_state.find_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Node '{node_id}' not found")
    return node


# ── GET /graph ────────────────────────────────────────────────────────────────

@router.get("/graph")
async def get_graph() -> Dict[str, Any]:
    graph = graph_state.graph
    graph.cache_port_connections()
    graph.cache_nodes_by_type()
    return serialize_graph(graph).model_dump()


# ── PUT /graph ────────────────────────────────────────────────────────────────

@router.put("/graph")
async def put_graph(record: GraphRecord) -> Dict[str, Any]:
    graph = deserialize_graph(record)
    graph_state.load(graph)
    return {"nodes": len(graph.nodes), "edges": len(list(graph.edges()))}


# ── Nodes ─────────────────────────────────────────────────────────────────────

class CreateNodeBody(BaseModel):
    type: str
    name: str


@router.post("/graph/nodes", status_code=201)
async def create_node(body: CreateNodeBody) -> Dict[str, Any]:
    try:
        node = Node.create_node(body.type, body.name)
        graph_state.graph.add_node(node)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _node_summary(node)


@router.get("/graph/nodes/{node_id}")
async def get_node(node_id: str) -> Dict[str, Any]:
    return _node_summary(_get_node_or_404(node_id))


@router.delete("/graph/nodes/{node_id}")
async def delete_node(node_id: str) -> Dict[str, Any]:
    node = _get_node_or_404(node_id)
    graph_state.graph.remove_node(node)
    return {"ok": True}


# ── Edges ─────────────────────────────────────────────────────────────────────

class EdgeBody(BaseModel):
    output_port_id: str
    input_port_id: str


def _resolve_edge(body: EdgeBody) -> Tuple[NodePort, NodePort]:
    graph = graph_state.graph
    output = graph.find_port_by_id(body.output_port_id)
    input = graph.find_port_by_id(body.input_port_id)
    if output is None or input is None:
        raise HTTPException(status_code=404, detail="Port not found")
    return output, input


@router.post("/graph/edges", status_code=201)
async def add_edge(body: EdgeBody) -> Dict[str, Any]:
    output, input = _resolve_edge(body)
    try:
        graph_state.graph.add_edge(output, input)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True}


@router.delete("/graph/edges")
async def remove_edge(body: EdgeBody) -> Dict[str, Any]:
    output, input = _resolve_edge(body)
    try:
        graph_state.graph.remove_edge(output, input)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"ok": True}


# ── Session ───────────────────────────────────────────────────────────────────

@router.post("/graph/tick")
async def tick(count: int = Query(1, ge=1, le=MAX_TICKS_PER_REQUEST)) -> Dict[str, Any]:
    for _ in range(count):
        graph_state.session.update()
    return {"tick": graph_state.session.cache_tick}


@router.post("/graph/focus")
async def focus() -> Dict[str, Any]:
    graph_state.session.on_focus()
    return {"is_being_edited": graph_state.graph.is_being_edited}


@router.post("/graph/blur")
async def blur() -> Dict[str, Any]:
    graph_state.session.on_lost_focus()
    return {"is_being_edited": graph_state.graph.is_being_edited}


# ── Type index ────────────────────────────────────────────────────────────────

@router.get("/graph/types/{type_name}")
async def get_nodes_by_type(type_name: str) -> Dict[str, Any]:
    node_class = Node.get_registered_type(type_name) or resolve_type(type_name, import_modules=False)
    if node_class is UnknownType or not issubclass(node_class, Node):
        raise HTTPException(status_code=404, detail=f"Type '{type_name}' not found")

    graph = graph_state.graph
    graph.cache_nodes_by_type()
    return {"type": type_name, "nodes": [node.id for node in graph.get_cached_nodes(node_class)]}
