"""Registry giving every type a validated numeric index and a readable name."""

from __future__ import annotations

import itertools

DEAD_MASK = 0xFF0000FF
DEAD_MARK = 0xDE0000AD

_counter = itertools.count()
_names: dict[int, str] = {}
_indices: dict[type, int] = {}


def demangle(name) -> str:
    """Return a readable name for a type or a type name."""
    if isinstance(name, type):
        return f"{name.__module__}.{name.__qualname__}"
    return str(name)


def validate_index(index: int) -> bool:
    return (index & DEAD_MASK) == DEAD_MARK


def get_type_idx(cls: type) -> int:
    """Index of ``cls``, registering it on first use."""
    index = _indices.get(cls)
    if index is None:
        index = ((next(_counter) & 0xFFFF) << 8) | DEAD_MARK
        _indices[cls] = index
        _names[index] = demangle(cls)
    return index


def get_type_name_for_idx(index: int) -> str:
    return _names.get(index, "")


def get_type_name(cls: type) -> str:
    return get_type_name_for_idx(get_type_idx(cls))