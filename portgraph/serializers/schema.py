"""
Persisted record shapes
=======================
The record format only knows primitive fields, lists and nested records. Maps
are stored as ordered ``key`` / ``value`` entry lists and every cross-node
reference is a string ID.

    {
      "graph_type": "portgraph.core.Graph.Graph",
      "asset_version": 1,
      "nodes": [
        {
          "id": "6f1c...", "type": "Constant", "name": "A",
          "ports": [ { "id": "a81e...", "name": "out", "direction": "OUTPUT", "data_type": "int" } ],
          "state": { "value": 3 }
        }
      ],
      "comments": [ { "text": "inputs", "theme": "", "region": [0, 0, 200, 100], "extra": {} } ],
      "port_connection_cache": [ { "key": "a81e...", "value": ["c02d..."] } ],
      "node_by_type_cache":    [ { "key": "demo.ConstantNode", "value": ["6f1c..."] } ]
    }

``node_by_type_cache`` is derived data. It is written for inspection and
rebuilt from the nodes on load.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PortRecord(BaseModel):
    id: str
    name: str
    direction: str
    data_type: str = "any"


class NodeRecord(BaseModel):
    id: str
    type: str
    name: str
    ports: List[PortRecord] = Field(default_factory=list)
    state: Dict[str, Any] = Field(default_factory=dict)


class CommentRecord(BaseModel):
    text: str = ""
    theme: str = ""
    region: List[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0, 0.0])
    extra: Dict[str, Any] = Field(default_factory=dict)


class PortConnectionEntry(BaseModel):
    key: Optional[str] = None
    value: List[str] = Field(default_factory=list)


class NodeTypeEntry(BaseModel):
    key: Optional[str] = None
    value: List[str] = Field(default_factory=list)


class GraphRecord(BaseModel):
    graph_type: str = "portgraph.core.Graph.Graph"
    asset_version: int = 1
    nodes: List[NodeRecord] = Field(default_factory=list)
    comments: List[CommentRecord] = Field(default_factory=list)
    port_connection_cache: List[PortConnectionEntry] = Field(default_factory=list)
    node_by_type_cache: List[NodeTypeEntry] = Field(default_factory=list)
