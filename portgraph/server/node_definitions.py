"""
Demo node types.

Import this module once as a side-effect (state.py does) to register the node
types with the Node registry so they can be created by name and restored from
saved graphs.

AddNode and MultiplyNode are filed under the shared MathNode category in the
type index. MultiplyNode is also filed under its own type.
"""
from __future__ import annotations

from typing import Any, Dict

from portgraph.core.Node import CacheTo, Node
from portgraph.core.Types import ValueType


class MathNode(Node):
    """Category for arithmetic nodes. Not registered, never instantiated."""


@Node.register("ConstantNode")
class ConstantNode(Node):
    def __init__(self, name: str, type: str = "ConstantNode", value: Any = 0, **kwargs):
        super().__init__(name, type, **kwargs)
        self.value = value
        self.add_output("out", ValueType.ANY)

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value}

    def from_dict(self, fields: Dict[str, Any]):
        self.value = fields.get("value", self.value)


@Node.register("AddNode", cache_to=CacheTo(MathNode))
class AddNode(MathNode):
    def __init__(self, name: str, type: str = "AddNode", **kwargs):
        super().__init__(name, type, **kwargs)
        self.add_input("a", ValueType.FLOAT)
        self.add_input("b", ValueType.FLOAT)
        self.add_output("sum", ValueType.FLOAT)


@Node.register("MultiplyNode", cache_to=CacheTo(MathNode, cache_as_both=True))
class MultiplyNode(MathNode):
    def __init__(self, name: str, type: str = "MultiplyNode", **kwargs):
        super().__init__(name, type, **kwargs)
        self.add_input("a", ValueType.FLOAT)
        self.add_input("b", ValueType.FLOAT)
        self.add_output("product", ValueType.FLOAT)


@Node.register("PrintNode")
class PrintNode(Node):
    def __init__(self, name: str, type: str = "PrintNode", **kwargs):
        super().__init__(name, type, **kwargs)
        self.add_input("value", ValueType.ANY)
        self.connected = False

    def validate(self):
        self.connected = self.get_port("value").is_connected()
