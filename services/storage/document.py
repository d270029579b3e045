"""
In-memory settings document: a JSON-shaped tree of plain Python values.

Nodes are ``None``, ``bool``, ``int``, ``float``, ``str``, ``list`` or
``dict`` keyed by ``str``. A path is a sequence of ``str`` (mapping key) or
``int`` (array index) segments.
"""

from __future__ import annotations

import copy
import math
import numbers
from typing import Any, Dict, List, Sequence, Union

from services.storage.errors import SerializationError

Node = Union[None, bool, int, float, str, List["Node"], Dict[str, "Node"]]
Segment = Union[str, int]

_MISSING = object()


def normalize(value: Any, *, _where: str = "value") -> Node:
    """
    Return a detached copy of ``value`` using only document node types.

    Tuples become lists. Anything else outside the node types raises
    :class:`SerializationError`.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        value = float(value)
        if not math.isfinite(value):
            raise SerializationError(f"{_where}: non-finite float {value!r} is not serializable")
        return value
    if isinstance(value, (list, tuple)):
        return [normalize(item, _where=f"{_where}[{index}]") for index, item in enumerate(value)]
    if isinstance(value, dict):
        result: Dict[str, Node] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise SerializationError(f"{_where}: mapping key {key!r} is not a string")
            result[key] = normalize(item, _where=f"{_where}.{key}")
        return result
    raise SerializationError(f"{_where}: unsupported type {type(value).__name__}")


def _check_path(path: Sequence[Segment]) -> None:
    for segment in path:
        if isinstance(segment, bool) or not isinstance(segment, (str, int)):
            raise SerializationError(f"Invalid path segment {segment!r}")
        if isinstance(segment, int) and segment < 0:
            raise SerializationError(f"Negative array index {segment} in path")


def resolve(root: Node, path: Sequence[Segment]) -> Any:
    """Return the node at ``path`` or ``None`` when it does not exist."""
    node: Any = root
    for segment in path:
        if isinstance(node, dict) and isinstance(segment, str):
            node = node.get(segment, _MISSING)
        elif isinstance(node, list) and isinstance(segment, int) and not isinstance(segment, bool):
            node = node[segment] if 0 <= segment < len(node) else _MISSING
        else:
            return None
        if node is _MISSING:
            return None
    return node


def children(root: Node, path: Sequence[Segment]) -> Dict[str, Node]:
    """Return the mapping at ``path``, or an empty dict for any other node."""
    node = resolve(root, path)
    return node if isinstance(node, dict) else {}


def _container_for(segment: Segment) -> Node:
    return [] if isinstance(segment, int) else {}


def _set_child(parent: Any, segment: Segment, value: Any) -> None:
    if isinstance(segment, int):
        if len(parent) <= segment:
            parent.extend([None] * (segment + 1 - len(parent)))
        parent[segment] = value
    else:
        parent[segment] = value


def assign(root: Dict[str, Node], path: Sequence[Segment], value: Any) -> None:
    """
    Write ``value`` at ``path`` inside ``root``, creating intermediate nodes.

    The value and path are validated before anything is modified, so a
    rejected write leaves ``root`` unchanged.
    """
    if not path:
        raise SerializationError("Cannot replace the document root through a path")
    _check_path(path)
    if not isinstance(path[0], str):
        raise SerializationError("The document root is a mapping; first segment must be a key")
    node_value = normalize(value)

    node: Any = root
    for segment, following in zip(path[:-1], path[1:]):
        expected = list if isinstance(following, int) else dict
        child = resolve(node, [segment])
        if not isinstance(child, expected):
            child = _container_for(following)
            _set_child(node, segment, child)
        node = child
    _set_child(node, path[-1], node_value)


def snapshot(root: Node) -> Node:
    return copy.deepcopy(root)
