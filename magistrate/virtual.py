"""Registry of serializable classes per hierarchy, linking derived entries to their bases."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

_BYTECOPYABLE = (bool, int, float)


@dataclass
class RegistryEntry:
    """One registered (class, serializer type) pair inside a hierarchy's registry."""

    cls: type
    serializer_type: Any
    index: int
    base_idx: int | None = None


# Registries are kept per hierarchy root, so a derived class and its bases
# share one index space.
_registries: dict[type, list[RegistryEntry]] = {}
_lookup: dict[tuple[type, Any], int] = {}


def _root(cls: type) -> type:
    candidates = [c for c in cls.__mro__ if c is not object]
    return candidates[-1] if candidates else cls


def _base_type(cls: type) -> type:
    bases = [b for b in cls.__bases__ if b is not object]
    return bases[0] if bases else cls


def _can_serialize(cls: type) -> bool:
    return cls in _BYTECOPYABLE or callable(getattr(cls, "serialize", None))


def make_obj_idx(cls: type, serializer_type: Any) -> int:
    """Index of ``cls`` for ``serializer_type``, registering the pair on first use."""
    key = (cls, serializer_type)
    index = _lookup.get(key)
    if index is not None:
        return index
    entries = _registries.setdefault(_root(cls), [])
    index = len(entries)
    entries.append(RegistryEntry(cls, serializer_type, index))
    _lookup[key] = index
    return index


def get_entry(cls: type, index: int) -> RegistryEntry:
    """The entry at ``index`` in the registry of the hierarchy ``cls`` belongs to."""
    entries = _registries.get(_root(cls), [])
    if not 0 <= index < len(entries):
        raise KeyError(f"no registry entry {index} for {cls.__qualname__}")
    return entries[index]


def link_derived_to_base(serializer_type: Any, derived: type, base: type) -> RegistryEntry:
    """Record on the entry of ``derived`` the index of ``base`` for the same serializer."""
    if not issubclass(derived, base):
        raise TypeError(f"{derived.__qualname__} does not derive from {base.__qualname__}")
    derived_idx = make_obj_idx(derived, serializer_type)
    base_idx = make_obj_idx(base, serializer_type)
    entry = get_entry(derived, derived_idx)
    entry.base_idx = base_idx
    return entry


def instantiate_obj_serializer(cls: type, *args: Any) -> dict[Any, int]:
    """Register ``cls`` with every serializer type given, where ``cls`` can be serialized.

    Each registration is linked to the direct base of ``cls`` (a root class
    links to itself). Returns the index registered for each serializer type.
    """
    registered: dict[Any, int] = {}
    if not _can_serialize(cls):
        return registered
    for serializer_type in args:
        registered[serializer_type] = make_obj_idx(cls, serializer_type)
        link_derived_to_base(serializer_type, cls, _base_type(cls))
    return registered