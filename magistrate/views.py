"""Serialization of multi-dimensional views and dynamically sized views."""

from __future__ import annotations

import enum
import itertools
from typing import Any

import numpy as np

from magistrate.serializer import Serializer

MAX_RANK = 8


class Layout(enum.IntEnum):
    """Memory layout of a view: column-major, row-major or strided."""

    LEFT = 0
    RIGHT = 1
    STRIDE = 2

    @property
    def order(self) -> str:
        return "C" if self is Layout.RIGHT else "F"


class View:
    """A labelled n-dimensional array with a fixed memory layout.

    The extents are given as integers, or a single array-like supplies both
    the shape and the initial contents (copied). A view whose array is not
    writeable is treated as a view of constant data.
    """

    def __init__(self, label: str, *args: Any, layout: Layout = Layout.RIGHT) -> None:
        self.label = str(label)
        self.layout = Layout(layout)
        if len(args) == 1 and not isinstance(args[0], (int, np.integer)):
            data = np.array(args[0], order=self.layout.order, copy=True)
        else:
            extents = tuple(int(a) for a in args)
            if any(e < 0 for e in extents):
                raise ValueError("view extents must not be negative")
            data = np.zeros(extents, dtype=np.float64, order=self.layout.order)
        if data.ndim > MAX_RANK:
            raise ValueError(f"views have at most {MAX_RANK} dimensions")
        self.data = data

    @classmethod
    def _aliasing(cls, other: "View") -> "View":
        view = cls.__new__(cls)
        view.label = other.label
        view.layout = other.layout
        view.data = other.data
        return view

    @property
    def rank(self) -> int:
        return self.data.ndim

    @property
    def size(self) -> int:
        return int(self.data.size)

    @property
    def is_const(self) -> bool:
        return not self.data.flags.writeable

    def extent(self, dim: int) -> int:
        """Extent of dimension ``dim``; dimensions past the rank have extent 1."""
        if dim < 0:
            raise IndexError("negative dimension")
        if dim >= self.rank:
            return 1
        return int(self.data.shape[dim])

    def __getitem__(self, index: Any) -> Any:
        return self.data[index]

    def __setitem__(self, index: Any, value: Any) -> None:
        self.data[index] = value

    def __repr__(self) -> str:
        return f"View({self.label!r}, shape={self.data.shape}, layout={self.layout.name})"


def _chunk_size_for(min_chunk_size: int) -> int:
    if min_chunk_size < 1:
        raise ValueError("chunk size must be at least 1")
    return 1 << (int(min_chunk_size) - 1).bit_length()


class DynamicView:
    """A one-dimensional view that grows in chunks up to a fixed maximum extent."""

    def __init__(self, label: str, min_chunk_size: int, max_extent: int) -> None:
        self._reset(label, min_chunk_size, max_extent)

    def _reset(self, label: str, min_chunk_size: int, max_extent: int) -> None:
        if max_extent < 0:
            raise ValueError("maximum extent must not be negative")
        self.label = str(label)
        self.chunk_size = _chunk_size_for(min_chunk_size)
        max_chunks = -(-int(max_extent) // self.chunk_size)
        self.allocation_extent = max_chunks * self.chunk_size
        self._values: list[Any] = []

    def resize_serial(self, size: int) -> None:
        """Grow or shrink to ``size`` elements; new elements are zero."""
        if size < 0 or size > self.allocation_extent:
            raise ValueError(
                f"size {size} outside the allocation extent {self.allocation_extent}"
            )
        del self._values[size:]
        self._values.extend(0 for _ in range(size - len(self._values)))

    @property
    def size(self) -> int:
        return len(self._values)

    def extent(self, dim: int) -> int:
        if dim < 0:
            raise IndexError("negative dimension")
        return self.size if dim == 0 else 1

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, index: int) -> Any:
        return self._values[index]

    def __setitem__(self, index: int, value: Any) -> None:
        self._values[index] = value

    def __iter__(self):
        return iter(self._values)


def _serialize_layout(s: Serializer, view: View) -> tuple[Layout, list[int], list[int]]:
    kind = Layout(s.field(int(view.layout)))
    shape = list(view.data.shape)
    itemsize = view.data.itemsize or 1
    strides = [int(st) // itemsize for st in view.data.strides]
    dims: list[int] = []
    stride_out: list[int] = []
    for i in range(MAX_RANK):
        dims.append(s.field(int(shape[i]) if i < len(shape) else 0))
        if kind is Layout.STRIDE:
            stride_out.append(s.field(int(strides[i]) if i < len(strides) else 0))
    return kind, dims, stride_out


def serialize_view(s: Serializer, view: View) -> View:
    """Serialize a view: label, rank, layout, element type and data.

    When unpacking, ``view`` is reallocated to the packed shape and filled;
    a view of constant data stays constant. Returns ``view``.
    """
    label = s.field(view.label)
    rt_dim = s.field(int(view.rank))
    layout, dims, _ = _serialize_layout(s, view)
    dtype = np.dtype(s.field(view.data.dtype.str))
    was_const = view.is_const

    if s.is_unpacking():
        if not 0 <= rt_dim <= MAX_RANK:
            raise ValueError(f"corrupt buffer: rank {rt_dim}")
        view.label = label
        view.layout = layout
        view.data = np.zeros(tuple(dims[:rt_dim]), dtype=dtype, order=layout.order)

    num_elms = s.field(int(view.size))
    if s.is_unpacking() and num_elms != view.size:
        raise ValueError("corrupt buffer: element count does not match extents")

    data = view.data
    is_contig = s.field(bool(data.flags.c_contiguous or data.flags.f_contiguous))
    init = s.field(True)

    if init:
        order = view.layout.order
        if is_contig:
            raw = bytes(data.size * data.itemsize) if s.is_unpacking() else data.tobytes(order=order)
            out = s.contiguous_bytes(raw, data.itemsize, num_elms)
            if s.is_unpacking():
                chunk = raw if out is None else bytes(out)
                view.data = (
                    np.frombuffer(chunk, dtype=dtype).reshape(data.shape, order=order).copy(order=order)
                )
        else:
            for index in itertools.product(*(range(n) for n in data.shape)):
                value = s.field(data[index].item())
                if s.is_unpacking():
                    data[index] = value

    if s.is_unpacking() and was_const:
        view.data.setflags(write=False)
    return view


def serialize_dynamic_view(s: Serializer, view: DynamicView) -> DynamicView:
    """Serialize a dynamic view: label, chunk size, maximum extent, size and elements."""
    label = s.field(view.label)
    chunk_size = 0
    max_extent = 0
    view_size = 0
    if not s.is_unpacking():
        chunk_size = view.chunk_size
        max_extent = view.allocation_extent
        view_size = view.size
    chunk_size = s.field(int(chunk_size))
    max_extent = s.field(int(max_extent))
    view_size = s.field(int(view_size))

    if s.is_unpacking():
        view._reset(label, chunk_size, max_extent)
        view.resize_serial(view_size)

    for i in range(view.size):
        value = s.field(view[i])
        if s.is_unpacking():
            view[i] = value
    return view


def serialize_extent_only(s: Serializer, view: View, label: str) -> View:
    """Serialize only the extents of a view of rank 1 to 4.

    When unpacking, ``view`` is reallocated with ``label`` and the packed
    extents, keeping its element type and layout. Returns ``view``.
    """
    rank = view.rank
    if not 1 <= rank <= 4:
        raise ValueError("extent-only serialization supports views of rank 1 to 4")
    extents = [s.field(view.extent(d)) for d in range(rank)]
    if s.is_unpacking():
        view.label = str(label)
        view.data = np.zeros(tuple(extents), dtype=view.data.dtype, order=view.layout.order)
    return view


def serialize_contents_only(s: Serializer, view: View) -> View:
    """Serialize a view fully, but when unpacking copy into its existing storage.

    Anything sharing the view's storage sees the unpacked contents.
    """
    values = View._aliasing(view)
    serialize_view(s, values)
    if s.is_unpacking():
        if values.data.shape != view.data.shape:
            raise ValueError(
                f"packed shape {values.data.shape} does not match view shape {view.data.shape}"
            )
        np.copyto(view.data, values.data)
    return view