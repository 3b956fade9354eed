"""Traversal helpers for containers: sizes, elements, tuples, pairs, queues and shared values."""

from __future__ import annotations

import struct
from typing import Any, Iterable

from magistrate.serializer import Serializer, is_bytecopyable

_ITEM_SIZES = {bool: struct.calcsize("?"), int: struct.calcsize("q"), float: struct.calcsize("d")}
_POINTER_SIZE = struct.calcsize("P")


def serialize_container_size(s: Serializer, cont: Any) -> int:
    """Serialize the number of elements in ``cont``; returns it (read back when unpacking).

    A footprinting serializer counts the container instead of recording its size.
    """
    size = len(cont) if cont is not None else 0
    if s.is_footprinting():
        s.count_bytes(cont)
        return size
    return s.field(size)


def serialize_container_capacity(s: Serializer, cont: Any, capacity: int | None = None) -> int:
    """Serialize the reserved capacity of ``cont``; returns it (read back when unpacking).

    Python containers have no capacity of their own, so it is passed in; by
    default it is the container's length. Footprinting records nothing.
    """
    if capacity is None:
        capacity = len(cont) if cont is not None else 0
    if s.is_footprinting():
        return capacity
    return s.field(capacity)


def serialize_container_elems(s: Serializer, cont: Iterable[Any]) -> list:
    """Serialize every element of ``cont`` in order; returns the elements seen or read."""
    return [s.field(elm) for elm in cont]


def serialize_tuple(s: Serializer, values: Iterable[Any]) -> tuple:
    """Serialize each member of a tuple in order; returns the resulting tuple."""
    return tuple(s.field(v) for v in values)


def serialize_pair(s: Serializer, pair: Any) -> tuple:
    """Serialize a pair; a one-member pair carries only its first value."""
    s.count_bytes(pair)
    members = tuple(pair)
    if len(members) == 1:
        return (s.field(members[0]),)
    if len(members) != 2:
        raise ValueError(f"a pair has one or two members, not {len(members)}")
    first = s.field(members[0])
    second = s.field(members[1])
    return (first, second)


def _element_size(items: list) -> int:
    if items and is_bytecopyable(items[0]):
        return _ITEM_SIZES[type(items[0])]
    return _POINTER_SIZE


def serialize_queue_like(s: Serializer, queue: Iterable[Any]) -> None:
    """Footprint a queue, priority queue or stack; other serializers are refused."""
    if not s.is_footprinting():
        raise TypeError("queue-like containers can only be footprinted")
    items = list(queue)
    s.count_bytes(queue)
    s.contiguous_bytes(None, _element_size(items), len(items))


def serialize_shared(s: Serializer, value: Any) -> Any:
    """Footprint a shared value and what it refers to; other serializers are refused."""
    if not s.is_footprinting():
        raise TypeError("shared values can only be footprinted")
    s.count_bytes(value)
    if value is not None:
        return s.field(value)
    return None