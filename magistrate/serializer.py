"""Serializer modes, the base traverser and the sizing, packing and unpacking serializers."""

from __future__ import annotations

import enum
import struct
from itertools import chain, islice, repeat
from typing import Any

from magistrate.reconstructor import construct

_ITEM_CODES = {bool: "?", int: "q", float: "d"}
_PLACEHOLDERS = {"?": False, "q": 0, "d": 0.0}
_GENERIC = "x"

# Classes seen while serializing, looked up by name when unpacking objects.
_classes: dict[str, type] = {}


def _class_key(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def is_bytecopyable(value: Any) -> bool:
    """Whether a value is a plain scalar that can be copied as raw bytes."""
    return type(value) in _ITEM_CODES


def _typecode(values: list) -> str | None:
    codes = {_ITEM_CODES.get(type(v)) for v in values}
    if len(codes) == 1 and None not in codes:
        return codes.pop()
    return None


class SerializationMode(enum.IntEnum):
    """The phase a serializer is in."""

    NONE = 0
    UNPACKING = 1
    PACKING = 2
    SIZING = 3
    FOOTPRINTING = 4
    INVALID = -1


def dispatch_array(s: "Serializer", values: list) -> list:
    """Serialize a sequence, contiguously when every element is byte-copyable."""
    values = list(values)
    if values and _typecode(values) is not None:
        result = s.contiguous_typed(s, values, len(values))
        return values if result is None else list(result)
    return [s.field(v) for v in values]


class Serializer:
    """Base traverser: walks values and reports them as contiguous byte ranges."""

    def __init__(self, mode: SerializationMode = SerializationMode.NONE) -> None:
        self.mode = SerializationMode(mode)
        self.virtual_disabled = False

    def is_sizing(self) -> bool:
        return self.mode is SerializationMode.SIZING

    def is_packing(self) -> bool:
        return self.mode is SerializationMode.PACKING

    def is_unpacking(self) -> bool:
        return self.mode is SerializationMode.UNPACKING

    def is_footprinting(self) -> bool:
        return self.mode is SerializationMode.FOOTPRINTING

    def count_bytes(self, value: Any) -> None:
        """Count the footprint of a value; nothing by default."""

    def add_bytes(self, size: int) -> None:
        """Add bytes to a footprint; nothing by default."""

    def contiguous_bytes(self, data: bytes, size: int, num_elms: int) -> bytes | None:
        """Handle ``num_elms`` elements of ``size`` bytes; returns the bytes seen."""
        return data

    def contiguous_typed(self, serdes: "Serializer", values: list, num_elms: int) -> list | None:
        """Serialize homogeneous scalars through ``serdes.contiguous_bytes``."""
        code = _typecode(values)
        if code is None or len(values) != num_elms:
            raise TypeError("contiguous_typed needs num_elms values of one scalar type")
        fmt = f"<{num_elms}{code}"
        try:
            raw = struct.pack(fmt, *values)
        except struct.error as exc:
            raise OverflowError(str(exc)) from exc
        out = serdes.contiguous_bytes(raw, struct.calcsize(code), num_elms)
        return list(struct.unpack(fmt, raw if out is None else bytes(out)))

    def used_buffer_size(self) -> int:
        return 0

    def skip(self, *args: Any) -> None:
        """Note that some data is skipped in the traversal."""

    # -- traversal ----------------------------------------------------------

    def field(self, value: Any) -> Any:
        """Serialize ``value`` both ways; returns the value (read back when unpacking)."""
        if self.is_unpacking():
            return self._read_value(value)
        self._write_value(value)
        return value

    def _raw(self, data: bytes) -> bytes:
        out = self.contiguous_bytes(data, 1, len(data))
        return data if out is None else bytes(out)

    def _scalar(self, value: Any) -> Any:
        result = self.contiguous_typed(self, [value], 1)
        return value if result is None else result[0]

    def _tag(self, tag: str) -> str:
        return self._raw(tag.encode("ascii")).decode("ascii")

    def _text(self, text: str) -> str:
        encoded = text.encode("utf-8")
        n = self._scalar(len(encoded))
        data = self._raw(bytes(n) if self.is_unpacking() else encoded)
        return data.decode("utf-8")

    def _write_value(self, value: Any) -> None:
        kind = type(value)
        if value is None:
            self._tag("N")
        elif kind in _ITEM_CODES:
            self._tag(_ITEM_CODES[kind])
            self._scalar(value)
        elif isinstance(value, str):
            self._tag("s")
            self._text(value)
        elif isinstance(value, (bytes, bytearray)):
            self._tag("y")
            self._scalar(len(value))
            self._raw(bytes(value))
        elif isinstance(value, (list, tuple)):
            self._tag("l" if isinstance(value, list) else "t")
            self._scalar(len(value))
            code = _typecode(list(value)) if value else None
            self._tag(code or _GENERIC)
            dispatch_array(self, value)
        elif isinstance(value, dict):
            self._tag("d")
            self._scalar(len(value))
            for key, item in value.items():
                self.field(key)
                self.field(item)
        elif isinstance(value, (set, frozenset)):
            self._tag("e")
            self._scalar(len(value))
            for item in value:
                self.field(item)
        elif callable(getattr(value, "serialize", None)):
            key = _class_key(kind)
            _classes[key] = kind
            self._tag("o")
            self._text(key)
            value.serialize(self)
        else:
            raise TypeError(f"cannot serialize value of type {kind.__name__}")

    def _read_value(self, template: Any) -> Any:
        tag = self._tag("\0")
        if tag == "N":
            return None
        if tag in _PLACEHOLDERS:
            return self._scalar(_PLACEHOLDERS[tag])
        if tag == "s":
            return self._text("")
        if tag == "y":
            return self._raw(bytes(self._scalar(0)))
        if tag in ("l", "t"):
            return self._read_sequence(tag, template)
        if tag == "d":
            n = self._scalar(0)
            lookup = template if isinstance(template, dict) else {}
            result = {}
            for _ in range(n):
                key = self.field(None)
                result[key] = self.field(lookup.get(key))
            if isinstance(template, dict):
                template.clear()
                template.update(result)
                return template
            return result
        if tag == "e":
            n = self._scalar(0)
            return {self.field(None) for _ in range(n)}
        if tag == "o":
            return self._read_object(template)
        raise ValueError(f"corrupt buffer: unknown tag {tag!r}")

    def _read_sequence(self, tag: str, template: Any) -> Any:
        n = self._scalar(0)
        code = self._tag("\0")
        if code in _PLACEHOLDERS:
            values = dispatch_array(self, [_PLACEHOLDERS[code]] * n) if n else []
        elif code == _GENERIC:
            templates = template if isinstance(template, (list, tuple)) else ()
            values = [self.field(t) for t in islice(chain(templates, repeat(None)), n)]
        else:
            raise ValueError(f"corrupt buffer: unknown element code {code!r}")
        if tag == "t":
            return tuple(values)
        if isinstance(template, list):
            template[:] = values
            return template
        return values

    def _read_object(self, template: Any) -> Any:
        key = self._text("")
        if template is not None and _class_key(type(template)) == key:
            target = template
        else:
            cls = _classes.get(key)
            if cls is None:
                raise ValueError(f"unknown class {key!r} in buffer")
            target = construct(cls)
        target.serialize(self)
        return target


class Sizer(Serializer):
    """Counts the bytes a value needs."""

    def __init__(self) -> None:
        super().__init__(SerializationMode.SIZING)
        self.size = 0

    def add_bytes(self, size: int) -> None:
        self.size += size

    def contiguous_bytes(self, data: bytes, size: int, num_elms: int) -> bytes:
        self.size += size * num_elms
        return data


class Packer(Serializer):
    """Writes values into a buffer of fixed size."""

    def __init__(self, size: int) -> None:
        super().__init__(SerializationMode.PACKING)
        self._buffer = bytearray(size)
        self._offset = 0

    def contiguous_bytes(self, data: bytes, size: int, num_elms: int) -> bytes:
        end = self._offset + len(data)
        if end > len(self._buffer):
            raise BufferError("packing past the end of the buffer")
        self._buffer[self._offset:end] = data
        self._offset = end
        return data

    def used_buffer_size(self) -> int:
        return self._offset

    def extract_packed_buffer(self) -> bytes:
        return bytes(self._buffer)


class Unpacker(Serializer):
    """Reads values back out of a packed buffer."""

    def __init__(self, buffer: bytes) -> None:
        super().__init__(SerializationMode.UNPACKING)
        self._buffer = bytes(buffer)
        self._offset = 0

    def contiguous_bytes(self, data: bytes, size: int, num_elms: int) -> bytes:
        end = self._offset + size * num_elms
        if end > len(self._buffer):
            raise ValueError("buffer exhausted while unpacking")
        chunk = self._buffer[self._offset:end]
        self._offset = end
        return chunk

    def used_buffer_size(self) -> int:
        return self._offset