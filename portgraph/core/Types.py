from enum import Enum, auto


class PortDirection(Enum):
    INPUT = auto()
    OUTPUT = auto()


class ValueType(Enum):
    ANY = "any"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    DICT = "dict"
    ARRAY = "array"
    OBJECT = "object"
    VECTOR = "vector"
    COLOR = "color"

    @staticmethod
    def compatible(source: 'ValueType', target: 'ValueType') -> bool:
        """True when a value of *source* type may flow into a *target* port."""
        if source == ValueType.ANY or target == ValueType.ANY:
            return True
        if source == target:
            return True
        # Allow ints to flow into floats
        return source == ValueType.INT and target == ValueType.FLOAT
