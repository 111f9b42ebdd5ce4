"""Dotted and indexed property paths such as `user.addresses[0].city`."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Self

logger = logging.getLogger(__name__)


class PartBase:
    pass


@dataclass(slots=True, frozen=True)
class AttributePart(PartBase):
    name: str


@dataclass(slots=True, frozen=True)
class ItemPart(PartBase):
    key: str


@dataclass(slots=True, frozen=True)
class PropertyPath:
    root: str
    parts: tuple[PartBase, ...] = ()

    def __str__(self) -> str:
        result = self.root
        for part in self.parts:
            match part:
                case AttributePart(name):
                    result += f".{name}"
                case ItemPart(key):
                    result += f"[{key}]"
                case _:
                    msg = f"Unknown part type: {type(part)}"
                    raise TypeError(msg)
        return result

    @classmethod
    def parse(cls, path_str: str) -> Self:
        """Parse a path, `\\.` and `\\[` escape the separators inside a name."""
        s = path_str.strip()
        if not s:
            msg = "Property path must not be empty"
            raise ValueError(msg)

        names: list[PartBase] = []
        i = 0
        current = ""
        pending_attr = True
        while i < len(s):
            char = s[i]
            if char == "\\" and i + 1 < len(s):
                current += s[i + 1]
                i += 2
                continue
            if char == ".":
                if pending_attr or current:
                    names.append(AttributePart(name=current))
                current = ""
                pending_attr = True
                i += 1
            elif char == "[":
                if current or (pending_attr and names):
                    names.append(AttributePart(name=current))
                close = s.find("]", i)
                if close == -1:
                    msg = f"Unclosed '[' at position {i}: {path_str}"
                    raise ValueError(msg)
                names.append(ItemPart(key=s[i + 1 : close].strip()))
                current = ""
                pending_attr = False
                i = close + 1
            else:
                current += char
                i += 1
        if current or pending_attr:
            names.append(AttributePart(name=current))

        if not names or any(isinstance(part, AttributePart) and not part.name for part in names):
            msg = f"Invalid property path: {path_str}"
            raise ValueError(msg)

        first, *rest = names
        if isinstance(first, ItemPart):
            # A path starting with an index such as "[0].name"
            return cls(root="", parts=tuple(names))
        assert isinstance(first, AttributePart)
        return cls(root=first.name, parts=tuple(rest))

    @property
    def all_parts(self) -> tuple[PartBase, ...]:
        if not self.root:
            return self.parts
        return (AttributePart(name=self.root), *self.parts)


def get_property(value: Any, name: str) -> tuple[bool, Any]:
    """Look up one property of a value.

    Mapping keys are tried before attributes. Returns `(found, property_value)`.
    Errors other than a missing attribute or key propagate to the caller.
    """
    if isinstance(value, Mapping):
        if name in value:
            return True, value[name]
        return False, None
    try:
        return True, getattr(value, name)
    except AttributeError:
        return False, None


def _get_item(value: Any, key: str) -> tuple[bool, Any]:
    if isinstance(value, Mapping):
        if key in value:
            return True, value[key]
        if key.lstrip("-").isdigit() and int(key) in value:
            return True, value[int(key)]
        return False, None
    if isinstance(value, Sequence) and not isinstance(value, str) and key.lstrip("-").isdigit():
        index = int(key)
        if -len(value) <= index < len(value):
            return True, value[index]
    return False, None


def get_value_by_path(value: Any, path: PropertyPath) -> tuple[bool, Any]:
    """Follow a property path. Returns `(found, property_value)`."""
    current = value
    for part in path.all_parts:
        match part:
            case AttributePart(name):
                found, current = get_property(current, name)
            case ItemPart(key):
                found, current = _get_item(current, key)
            case _:
                msg = f"Unknown part type: {type(part)}"
                raise TypeError(msg)
        if not found:
            logger.debug(f"Property path {path} stopped at {part}")
            return False, None
    return True, current
