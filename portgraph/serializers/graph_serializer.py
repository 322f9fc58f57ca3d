"""
Graph serializer.

Converts a live Graph into a GraphRecord (see schema.py) and back.

Saving does not refresh the connection cache. The host is expected to have
called Graph.cache_port_connections() recently (the editor session does so on
its tick), which is what makes the saved snapshot current.

Loading is best effort: unknown node types, duplicate node IDs, reused port IDs
and ports that a node type no longer declares are dropped with a warning, and
connections to anything dropped simply fail to reconstruct.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Set, Type, Union

from portgraph.core.Graph import Graph
from portgraph.core.GraphPrimitives import Comment
from portgraph.core.Node import Node
from portgraph.core.SerializableDict import DictionaryItem
from portgraph.core.SerializableType import UnknownType, qualified_name, resolve_type
from portgraph.serializers.schema import (
    CommentRecord,
    GraphRecord,
    NodeRecord,
    NodeTypeEntry,
    PortConnectionEntry,
    PortRecord,
)

logger = logging.getLogger(__name__)


# ── Save ──────────────────────────────────────────────────────────────────────

def _serialize_node(node: Node) -> NodeRecord:
    return NodeRecord(
        id=node.id,
        type=node.type,
        name=node.name,
        ports=[
            PortRecord(
                id=port.id,
                name=port.port_name,
                direction=port.direction.name,
                data_type=port.data_type.value,
            )
            for port in node.ports.values()
        ],
        state=node.to_dict(),
    )


def _serialize_comment(comment: Comment) -> CommentRecord:
    return CommentRecord(
        text=comment.text,
        theme=comment.theme,
        region=list(comment.region),
        extra=dict(comment.extra),
    )


def serialize_graph(graph: Graph) -> GraphRecord:
    connection_items = graph.port_connection_cache.on_before_serialize()
    type_items = graph.nodes_by_type_cache.on_before_serialize()

    return GraphRecord(
        graph_type=qualified_name(type(graph)),
        asset_version=graph.asset_version,
        nodes=[_serialize_node(node) for node in graph.nodes],
        comments=[_serialize_comment(c) for c in graph.comments],
        port_connection_cache=[
            PortConnectionEntry(key=item.key, value=list(item.value or []))
            for item in connection_items
            if item is not None
        ],
        node_by_type_cache=[
            NodeTypeEntry(
                key=item.key.type_name if item.key is not None else None,
                value=[node.id for node in item.value or []],
            )
            for item in type_items
            if item is not None
        ],
    )


# ── Load ──────────────────────────────────────────────────────────────────────

def _graph_class(record: GraphRecord) -> Type[Graph]:
    # Only classes from modules the process has already loaded
    graph_cls = resolve_type(record.graph_type, import_modules=False)
    if graph_cls is UnknownType or not issubclass(graph_cls, Graph):
        logger.warning(f"Graph type '{record.graph_type}' could not be resolved, loading as Graph")
        return Graph
    return graph_cls


def _deserialize_node(record: NodeRecord, seen_port_ids: Set[str]) -> Optional[Node]:
    if Node.get_registered_type(record.type) is None:
        logger.warning(f"Skipping node '{record.name}' ({record.id}): unknown node type '{record.type}'")
        return None

    node = Node.create_node(record.type, name=record.name, node_id=record.id)
    for port_record in record.ports:
        if port_record.name not in node.ports:
            logger.warning(f"Node '{record.name}' no longer declares port '{port_record.name}', dropping it")
            continue
        if port_record.id in seen_port_ids:
            logger.warning(f"Port id '{port_record.id}' on node '{record.name}' is already taken, assigning a new one")
            continue
        node.restore_port_id(port_record.name, port_record.id)
        seen_port_ids.add(port_record.id)

    node.from_dict(record.state)
    return node


def deserialize_graph(record: GraphRecord, graph_cls: Optional[Type[Graph]] = None) -> Graph:
    graph = (graph_cls or _graph_class(record))()
    graph.asset_version = record.asset_version

    nodes: List[Node] = []
    seen = set()
    seen_port_ids: Set[str] = set()
    for node_record in record.nodes:
        if node_record.id in seen:
            logger.warning(f"Skipping duplicate node id '{node_record.id}'")
            continue
        node = _deserialize_node(node_record, seen_port_ids)
        if node is not None:
            seen.add(node.id)
            nodes.append(node)
    graph.attach_restored_nodes(nodes)

    for comment in record.comments:
        region = tuple((list(comment.region) + [0.0, 0.0, 0.0, 0.0])[:4])
        graph.comments.append(Comment(comment.text, comment.theme, region, dict(comment.extra)))

    graph.port_connection_cache.load_items(
        [DictionaryItem(entry.key, list(entry.value)) for entry in record.port_connection_cache]
    )

    # node_by_type_cache is derived, rebuild rather than trust the record
    graph.reconstruct_port_connections()
    graph.cache_nodes_by_type()
    graph.enable()

    logger.info(f"Loaded graph with {len(graph.nodes)} node(s)")
    return graph


# ── JSON helpers ──────────────────────────────────────────────────────────────

def dumps(graph: Graph, indent: Optional[int] = 2) -> str:
    return serialize_graph(graph).model_dump_json(indent=indent)


def loads(text: Union[str, bytes], graph_cls: Optional[Type[Graph]] = None) -> Graph:
    return deserialize_graph(GraphRecord.model_validate_json(text), graph_cls)


def save_graph(graph: Graph, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(dumps(graph), encoding="utf-8")
    logger.info(f"Saved graph to: {path}")
    return path


def load_graph(path: Union[str, Path], graph_cls: Optional[Type[Graph]] = None) -> Graph:
    return loads(Path(path).read_text(encoding="utf-8"), graph_cls)
