from __future__ import annotations
from typing import Iterable, Optional, Type, TypeVar, TYPE_CHECKING

from abc import ABC, abstractmethod

if TYPE_CHECKING:
    from .Node import Node
    from .NodePort import NodePort

T = TypeVar("T")


class IGraph(ABC):
    @abstractmethod
    def get_node(self, node_class: Type[T]) -> Optional[T]:
        pass

    @abstractmethod
    def get_nodes(self, node_class: Type[T]) -> Iterable[T]:
        pass

    @abstractmethod
    def add_node(self, node: 'Node'):
        pass

    @abstractmethod
    def remove_node(self, node: 'Node'):
        pass

    @abstractmethod
    def add_edge(self, output: 'NodePort', input: 'NodePort'):
        pass

    @abstractmethod
    def remove_edge(self, output: 'NodePort', input: 'NodePort'):
        pass
