from __future__ import annotations

import importlib
import logging
import sys
from typing import Any, Optional

logger = logging.getLogger(__name__)


class UnknownType:
    """Sentinel standing in for a type name that no longer resolves."""

    def __repr__(self):
        return "UnknownType"


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def resolve_type(type_name: Optional[str], import_modules: bool = True) -> type:
    """
    Resolve a ``module.QualName`` string back to the class it names.

    Tries the longest importable module prefix first, then walks the remaining
    attributes. Anything that fails to resolve (missing module, missing
    attribute, or a name that is not a class) yields ``UnknownType``.

    With ``import_modules=False`` only modules already in ``sys.modules`` are
    considered. Use it for names that come from outside the process.
    """
    if not type_name:
        return UnknownType

    parts = type_name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        if import_modules:
            try:
                obj: Any = importlib.import_module(module_name)
            except ImportError:
                continue
        else:
            obj = sys.modules.get(module_name)
            if obj is None:
                continue

        try:
            for attr in parts[split:]:
                obj = getattr(obj, attr)
        except AttributeError:
            break

        if isinstance(obj, type):
            return obj
        break

    logger.debug(f"Type '{type_name}' could not be resolved")
    return UnknownType


class SerializableType:
    """
    A persistable handle for a class.

    Only ``type_name`` is persisted. Equality and hashing use the resolved
    class, so two handles that name the same class by different strings
    compare equal, and a handle compares equal to the raw class too.
    """

    def __init__(self, type_name: Optional[str] = None):
        self.type_name = type_name
        self._type: Optional[type] = None

    @classmethod
    def from_type(cls, t: Optional[type]) -> 'SerializableType':
        handle = cls(qualified_name(t) if t is not None else None)
        handle._type = t
        return handle

    @property
    def type(self) -> type:
        if self._type is None:
            self._type = resolve_type(self.type_name)
        return self._type

    @type.setter
    def type(self, value: Optional[type]):
        self.type_name = qualified_name(value) if value is not None else None
        self._type = value

    def is_unknown(self) -> bool:
        return self.type is UnknownType

    def __eq__(self, other):
        if isinstance(other, SerializableType):
            return self.type is other.type
        if isinstance(other, type):
            return self.type is other
        return NotImplemented

    def __hash__(self):
        return hash(self.type)

    def __str__(self):
        t = self.type
        if t is UnknownType:
            return "null"
        return qualified_name(t)

    def __repr__(self):
        return f"SerializableType({self.type_name!r})"
