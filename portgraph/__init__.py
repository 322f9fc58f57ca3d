"""
portgraph
=========
A node-graph data model that survives round trips through a flat, list-only
record format.

    from portgraph.core.Graph import Graph
    from portgraph.core.Node import Node
    from portgraph.serializers.graph_serializer import dumps, loads
"""

__version__ = "0.1.0"
