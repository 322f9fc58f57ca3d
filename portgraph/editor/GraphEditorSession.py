from typing import Optional
import logging

from portgraph.config import get_settings
from portgraph.core.Graph import Graph


logger = logging.getLogger(__name__)


class GraphEditorSession:
    """
    Headless stand-in for an editor window hosting one graph.

    The host calls update() once per frame. Every ``cache_delay`` frames the
    session either snapshots the live connections into the graph's connection
    cache (while the graph is only being edited) or rebuilds live connections
    from that cache (while a runtime simulation is active).
    """

    def __init__(self, cache_delay: Optional[int] = None):
        self.graph: Optional[Graph] = None
        self.cache_delay = cache_delay if cache_delay is not None else get_settings().cache_delay
        if self.cache_delay < 1:
            raise ValueError(f"cache_delay must be at least 1, got {self.cache_delay}")
        self.cache_tick = 0

    def load(self, graph: Graph):
        """Load a graph for editing. Live connections are rebuilt before editing begins."""
        self.graph = graph
        self.graph.is_being_edited = True
        self.graph.reconstruct_port_connections()
        logger.info(f"Loaded graph '{graph.title}' with {len(graph.nodes)} node(s)")

    def update(self):
        if self.graph is None:
            return

        self.cache_tick += 1
        if self.cache_tick % self.cache_delay != 0:
            return

        if self.graph.runtime_active:
            self.graph.reconstruct_port_connections()
        else:
            self.graph.cache_port_connections()

    def on_focus(self):
        if self.graph is not None:
            self.graph.is_being_edited = True

    def on_lost_focus(self):
        if self.graph is not None:
            self.graph.is_being_edited = False

    def on_close(self):
        """Override to add behaviour when the session closes."""
        pass

    def close(self):
        self.on_close()
        if self.graph is not None:
            self.graph.is_being_edited = False
        self.graph = None
        self.cache_tick = 0
