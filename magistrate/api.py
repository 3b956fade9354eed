"""Top-level entry points: serialize to and from buffers and files, and traverse values."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from magistrate.reconstructor import ReconstructionError, construct
from magistrate.serializer import Packer, Serializer, Sizer, Unpacker


def serialize(obj: Any) -> bytes:
    """Size then pack ``obj``; returns the packed buffer."""
    sizer = Sizer()
    sizer.field(obj)
    packer = Packer(sizer.size)
    packer.field(obj)
    return packer.extract_packed_buffer()


def _template_for(cls: Any) -> Any:
    if not isinstance(cls, type) or not callable(getattr(cls, "serialize", None)):
        return None
    try:
        return construct(cls)
    except ReconstructionError:
        # Abstract or otherwise unconstructible: the buffer names the concrete class.
        return None


def deserialize(cls: Any, buffer: bytes) -> Any:
    """Build a new value of type ``cls`` from a packed buffer."""
    result = Unpacker(buffer).field(_template_for(cls))
    if isinstance(cls, type) and result is not None and not isinstance(result, cls):
        raise TypeError(
            f"buffer holds {type(result).__qualname__}, not {cls.__qualname__}"
        )
    return result


def deserialize_in_place(buffer: bytes, obj: Any) -> Any:
    """Unpack a buffer into the existing ``obj``; returns ``obj``."""
    result = Unpacker(buffer).field(obj)
    if result is not obj:
        raise TypeError(
            f"buffer cannot be unpacked in place into a {type(obj).__qualname__}"
        )
    return obj


def serialize_to_file(obj: Any, path: str | os.PathLike) -> None:
    """Serialize ``obj`` and write the buffer to ``path``."""
    Path(path).write_bytes(serialize(obj))


def deserialize_from_file(cls: Any, path: str | os.PathLike) -> Any:
    """Read a buffer from ``path`` and build a new value of type ``cls``."""
    return deserialize(cls, Path(path).read_bytes())


def deserialize_in_place_from_file(path: str | os.PathLike, obj: Any) -> Any:
    """Read a buffer from ``path`` and unpack it into ``obj``; returns ``obj``."""
    return deserialize_in_place(Path(path).read_bytes(), obj)


def traverse(obj: Any, traverser: Serializer | type) -> Serializer:
    """Walk ``obj`` with a traverser (an instance or a class to instantiate); returns it."""
    if isinstance(traverser, type):
        traverser = traverser()
    traverser.field(obj)
    return traverser