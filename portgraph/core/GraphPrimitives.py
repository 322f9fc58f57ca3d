from typing import NamedTuple, Tuple
from dataclasses import dataclass, field


# Using NamedTuple for immutability and hashability
class Edge(NamedTuple):
    output_port_id: str
    input_port_id: str

    def __repr__(self):
        return f"Edge({self.output_port_id} -> {self.input_port_id})"


# Free-floating editor note. The core stores and persists comments but never
# looks inside them.
@dataclass
class Comment:
    text: str = ""
    theme: str = ""
    region: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0)
    extra: dict = field(default_factory=dict)
