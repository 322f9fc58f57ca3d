"""
SerializableDict
================
A map that can be persisted by a record format which only knows about lists
of simple entries.

The live data sits in a plain ``dict``. Immediately before persistence the
owner calls :meth:`SerializableDict.on_before_serialize`, which flattens the
dict into ``items`` (a list of :class:`DictionaryItem`). Immediately after
restoration the owner fills ``items`` and calls
:meth:`SerializableDict.on_after_deserialize`, which rebuilds the dict.

Duplicate or ``None`` keys in a restored snapshot do not raise. The offending
entry is dropped, the first value seen wins, and the map is flagged as
``poisoned``. A poisoned map keeps its raw ``items`` untouched (and refuses to
reflatten over them) so the corrupted snapshot can still be inspected.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


@dataclass
class DictionaryItem(Generic[K, V]):
    key: Optional[K]
    value: Optional[V]


class SerializableDict(MutableMapping, Generic[K, V]):

    def __init__(self, other: Optional[Mapping] = None):
        self._dictionary: Dict[K, V] = {}
        self.items_list: List[Optional[DictionaryItem]] = []
        self.poisoned: bool = False

        if other is not None:
            for key in other.keys():
                self.add(key, other[key])

    # ------------------------------------------------------------------
    # Map protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: K) -> V:
        return self._dictionary[key]

    def __setitem__(self, key: K, value: V) -> None:
        self._dictionary[key] = value

    def __delitem__(self, key: K) -> None:
        del self._dictionary[key]

    def __iter__(self) -> Iterator[K]:
        return iter(self._dictionary)

    def __len__(self) -> int:
        return len(self._dictionary)

    def __contains__(self, key: object) -> bool:
        return key in self._dictionary

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        # A missing key is reported as absent (None), never as a zero value
        return self._dictionary.get(key, default)

    def add(self, key: K, value: V) -> None:
        if key in self._dictionary:
            raise KeyError(f"An item with the key '{key}' has already been added")
        self._dictionary[key] = value

    def remove(self, key: K) -> bool:
        if key in self._dictionary:
            del self._dictionary[key]
            return True
        return False

    def clear(self) -> None:
        self._dictionary.clear()

    # ------------------------------------------------------------------
    # Flatten / restore
    # ------------------------------------------------------------------

    def on_before_serialize(self) -> List[Optional[DictionaryItem]]:
        if self.poisoned:
            return self.items_list

        self.items_list.clear()
        for key, value in self._dictionary.items():
            self.items_list.append(DictionaryItem(key, value))
        return self.items_list

    def on_after_deserialize(self) -> None:
        self._dictionary.clear()
        self.poisoned = False

        for index, item in enumerate(self.items_list):
            if item is None:
                continue
            if item.key is None or item.key in self._dictionary:
                self.poisoned = True
                logger.warning(f"Dropping entry {index} with key '{item.key}': null or duplicate key")
                continue
            self._dictionary[item.key] = item.value

        if not self.poisoned:
            self.items_list.clear()

    def load_items(self, items: List[Optional[DictionaryItem]]) -> None:
        """Replace the flattened entries with *items* and rebuild the map from them."""
        self.items_list = list(items)
        self.on_after_deserialize()

    def key_at(self, index: int) -> Optional[K]:
        return self.items_list[index].key

    def value_at(self, index: int) -> Optional[V]:
        return self.items_list[index].value

    # ------------------------------------------------------------------
    # Explicit conversions
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[K, V]:
        return dict(self._dictionary)

    @classmethod
    def from_dict(cls, dictionary: Optional[Mapping]) -> Optional['SerializableDict']:
        if dictionary is None:
            return None
        return cls(dictionary)

    # ------------------------------------------------------------------
    # Debug interchange: "k1:v1,k2:v2"
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return ",".join(
            f"{_display(key)}:{_display(value)}" for key, value in self._dictionary.items()
        )

    def __repr__(self) -> str:
        return f"SerializableDict({self._dictionary!r}, poisoned={self.poisoned})"

    @classmethod
    def new_from_string(cls,
                        dictionary_string: str,
                        key_type: Callable[[str], Any] = str,
                        value_type: Callable[[str], Any] = str) -> 'SerializableDict':
        """
        Parse the ``"k1:v1,k2:v2"`` debug form.

        Raises ValueError on an entry without ``:``, on a value that cannot be
        converted, or on a repeated key. This path is for tooling only; the
        authoritative round trip is on_before_serialize/on_after_deserialize.
        """
        result = cls()
        if dictionary_string == "":
            return result

        for entry in dictionary_string.split(","):
            if ":" not in entry:
                raise ValueError(f"Malformed dictionary entry '{entry}': expected 'key:value'")
            key_string, value_string = entry.split(":", 1)

            key = _convert(key_string, key_type)
            value = _convert(value_string, value_type)
            try:
                result.add(key, value)
            except KeyError as exc:
                raise ValueError(f"Duplicate key '{key_string}' in dictionary string") from exc

        return result

    def from_string(self,
                    dictionary_string: str,
                    key_type: Callable[[str], Any] = str,
                    value_type: Callable[[str], Any] = str) -> None:
        self._dictionary = SerializableDict.new_from_string(dictionary_string, key_type, value_type)._dictionary


def _display(value: Any) -> str:
    # Display only: floats are truncated, not rounded, to two decimals
    if isinstance(value, float) and math.isfinite(value):
        return str(math.trunc(value * 100) / 100)
    return str(value)


def _convert(text: str, target: Callable[[str], Any]) -> Any:
    if target is bool:
        lowered = text.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0"):
            return False
        raise ValueError(f"Cannot convert '{text}' to bool")
    try:
        return target(text)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Cannot convert '{text}' to {getattr(target, '__name__', target)}") from exc
