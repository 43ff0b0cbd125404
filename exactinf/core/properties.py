"""
exactinf/core/properties.py

Named configuration options for inference algorithms.

A PropertySet maps keys to values of a closed set of kinds (count, text,
real, boolean, nested PropertySet). Its text form is

    [key1=value1,key2=value2,...]

where a value may itself be a bracketed PropertySet. Parsing stores values
as raw text; typed getters coerce them on demand.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterator, Union

from exactinf.core.exceptions import MalformedProperty, UnknownProperty

PropertyValue = Union[int, str, float, bool, "PropertySet"]


class PropertyKind(Enum):
    """Kinds a property value can take."""
    COUNT = 1
    TEXT = 2
    REAL = 3
    BOOLEAN = 4
    NESTED = 5


def kind_of(value: Any) -> PropertyKind:
    """Tag a Python value with its PropertyKind."""
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return PropertyKind.BOOLEAN
    if isinstance(value, int):
        return PropertyKind.COUNT
    if isinstance(value, float):
        return PropertyKind.REAL
    if isinstance(value, str):
        return PropertyKind.TEXT
    if isinstance(value, PropertySet):
        return PropertyKind.NESTED
    raise TypeError(f"Unsupported property value type: {type(value).__name__}")


def _format_value(value: PropertyValue) -> str:
    kind = kind_of(value)
    if kind == PropertyKind.BOOLEAN:
        return "1" if value else "0"
    if kind == PropertyKind.REAL:
        return repr(value)
    return str(value)


def _coerce(key: str, value: PropertyValue, kind: PropertyKind) -> PropertyValue:
    actual = kind_of(value)
    if actual == kind:
        return value
    if kind == PropertyKind.TEXT:
        return _format_value(value)
    if actual == PropertyKind.COUNT and kind == PropertyKind.REAL:
        return float(value)
    if actual != PropertyKind.TEXT:
        raise UnknownProperty(f"Property '{key}' is {actual.name}, cannot read as {kind.name}")

    text = value.strip()
    try:
        if kind == PropertyKind.COUNT:
            n = int(text)
            if n < 0:
                raise ValueError(text)
            return n
        if kind == PropertyKind.REAL:
            return float(text)
        if kind == PropertyKind.BOOLEAN:
            lowered = text.lower()
            if lowered in ("1", "true", "yes"):
                return True
            if lowered in ("0", "false", "no"):
                return False
            raise ValueError(text)
        return PropertySet.from_string(text)
    except (ValueError, MalformedProperty) as e:
        raise UnknownProperty(
            f"Property '{key}' value '{value}' cannot be read as {kind.name}"
        ) from e


class PropertySet:
    """
    Ordered key -> value mapping with typed retrieval.

    Example:
        >>> ps = PropertySet().set("verbose", 1).set("name", "EXACT")
        >>> str(ps)
        '[verbose=1,name=EXACT]'
        >>> PropertySet.from_string("[verbose=1]").get_as("verbose", PropertyKind.COUNT)
        1
    """

    def __init__(self, items: Union[Dict[str, PropertyValue], None] = None):
        self._props: Dict[str, PropertyValue] = {}
        if items:
            for k, v in items.items():
                self.set(k, v)

    def set(self, key: str, value: PropertyValue) -> "PropertySet":
        kind_of(value)
        self._props[key] = value
        return self

    def get(self, key: str) -> PropertyValue:
        """Raw value of ``key``."""
        try:
            return self._props[key]
        except KeyError:
            raise UnknownProperty(f"Unknown property '{key}'") from None

    def get_as(self, key: str, kind: PropertyKind) -> PropertyValue:
        """Value of ``key`` coerced to ``kind``."""
        return _coerce(key, self.get(key), kind)

    def get_count(self, key: str) -> int:
        return self.get_as(key, PropertyKind.COUNT)

    def get_text(self, key: str) -> str:
        return self.get_as(key, PropertyKind.TEXT)

    def get_real(self, key: str) -> float:
        return self.get_as(key, PropertyKind.REAL)

    def get_bool(self, key: str) -> bool:
        return self.get_as(key, PropertyKind.BOOLEAN)

    def get_nested(self, key: str) -> "PropertySet":
        return self.get_as(key, PropertyKind.NESTED)

    def has_key(self, key: str) -> bool:
        return key in self._props

    def erase(self, key: str) -> None:
        self._props.pop(key, None)

    def keys(self):
        return self._props.keys()

    def items(self):
        return self._props.items()

    def copy(self) -> "PropertySet":
        out = PropertySet()
        for k, v in self._props.items():
            out._props[k] = v.copy() if isinstance(v, PropertySet) else v
        return out

    def __contains__(self, key: object) -> bool:
        return key in self._props

    def __iter__(self) -> Iterator[str]:
        return iter(self._props)

    def __len__(self) -> int:
        return len(self._props)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertySet):
            return NotImplemented
        return self._props == other._props

    def __str__(self) -> str:
        return "[" + ",".join(f"{k}={_format_value(v)}" for k, v in self._props.items()) + "]"

    def __repr__(self) -> str:
        return f"PropertySet({self})"

    @staticmethod
    def from_string(text: str) -> "PropertySet":
        """
        Parse ``[key=value,...]``, keeping every value as raw text.

        Raises:
            MalformedProperty: missing outer brackets, a key without '=',
                or unbalanced brackets inside a value.
        """
        s = text.strip()
        if len(s) < 2 or s[0] != "[" or s[-1] != "]":
            raise MalformedProperty(f"Property set must be enclosed in brackets: '{text}'")

        ps = PropertySet()
        n = len(s) - 1
        start = 1
        while start < n:
            end = s.find("=", start + 1, n)
            if end < 0:
                raise MalformedProperty(f"Missing '=' after position {start} in '{text}'")
            key = s[start:end]

            start = end + 1
            level = 0
            end = start
            while end < n:
                c = s[end]
                if c == "[":
                    level += 1
                elif c == "]":
                    level -= 1
                elif c == "," and level == 0:
                    break
                end += 1
            if level != 0:
                raise MalformedProperty(f"Unbalanced brackets in value of '{key}' in '{text}'")
            ps.set(key, s[start:end])

            start = end + 1
        return ps
