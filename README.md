# magistrate

magistrate serializes Python objects into compact byte buffers and files, and
reads them back again. You describe a type once, in a single two-way
`serialize(self, s)` method. That one method is used for sizing, packing and
unpacking alike.

## Installing

```
pip install magistrate
```

## Describing a type

```python
from magistrate.api import serialize, deserialize


class Point:
    def __init__(self, x=0, y=0):
        self.x = x
        self.y = y

    def serialize(self, s):
        self.x = s.field(self.x)
        self.y = s.field(self.y)


buffer = serialize(Point(3, 4))
point = deserialize(Point, buffer)
assert (point.x, point.y) == (3, 4)
```

`Serializer.field` takes the current value of an attribute and returns the
value the attribute should hold afterwards: while sizing and packing it
returns the value it was given, while unpacking it returns the value read from
the buffer.

`field` handles `None`, `bool`, `int`, `float`, `str`, `bytes`, lists, tuples,
dicts, sets and any object with a `serialize` method. Lists and tuples whose
elements are all `bool`, all `int` or all `float` are written as one
contiguous block (`int` as 64-bit, `float` as double). Any other value raises
`TypeError`.

`serialize` sizes the value with a `Sizer`, then packs it with a `Packer`.
`deserialize` reads it back with an `Unpacker`. All three live in
`magistrate.serializer`, next to the `Serializer` base class and the
`SerializationMode` enum.

## Files and in-place unpacking

```python
from magistrate.api import (
    serialize_to_file,
    deserialize_from_file,
    deserialize_in_place_from_file,
)

serialize_to_file(Point(1, 2), "point.bin")
copy = deserialize_from_file(Point, "point.bin")

target = Point()
deserialize_in_place_from_file("point.bin", target)
```

`deserialize_in_place` does the same for a buffer already in memory, and
returns the object it filled.

## Constructing objects on deserialization

`magistrate.reconstructor.construct` builds a fresh instance. It tries these
in order:

1. a constructor annotated to take a `SerializeConstructTag`;
2. a callable `reconstruct` attribute of the class, called with no arguments;
3. the constructor with no arguments.

Abstract classes, and classes with none of these, raise `ReconstructionError`.
`construct_allow_fail` does the same, but its error message names the class.

A packed object records its class name. The object comes back as that class,
so a derived instance held where a base is expected stays derived. When
unpacking, a class is found in one of two ways:

- it matches the template value being unpacked into;
- it was serialized earlier in the same process.

Otherwise `ValueError` is raised.

## Class registries

`magistrate.virtual` keeps a registry of serializable classes per class
hierarchy:

- `make_obj_idx` gives each class and serializer-type pair an index.
- `link_derived_to_base` records the base's index on the derived class's `RegistryEntry`.
- `instantiate_obj_serializer` registers a class with several serializer types at once.

`magistrate.type_registry` gives each type a checked numeric index and a
readable name.

## Container helpers

`magistrate.containers` offers building blocks for writing `serialize`
methods:

- `serialize_container_size`
- `serialize_container_capacity`
- `serialize_container_elems`
- `serialize_tuple`
- `serialize_pair`

`serialize_queue_like` and `serialize_shared` work only with a serializer in
`SerializationMode.FOOTPRINTING`. Any other serializer raises `TypeError`.

## Custom traversals

`magistrate.api.traverse(obj, traverser)` walks an object with a serializer of
your own, given as an instance or a class. Override `contiguous_bytes` or
`contiguous_typed` to see what the object would write, without producing a
buffer. `magistrate.examples` contains `PrintBytesTraverse` and
`TypedTraverse` as worked examples.

## Views

`magistrate.views` provides:

- `View`, a labelled numpy-backed array with a `Layout` of `LEFT`, `RIGHT` or `STRIDE`;
- `DynamicView`, a one-dimensional array that grows in chunks up to a maximum extent.

Functions for serializing them:

- `serialize_view` writes a whole view;
- `serialize_dynamic_view` writes a dynamic view;
- `serialize_extent_only` writes only the extents of a view of rank 1 to 4;
- `serialize_contents_only` writes a whole view, and when unpacking copies into the view's existing storage.

## Examples

To run the bundled examples, a file round trip and the two custom traversals:

```
magistrate-examples
```

The file example writes `hello.txt` in the current directory by default; pass
`--path` to choose another file. The command exits with status 1 if either
read-back fails.

## What it does not do

- There is no footprinting serializer that measures an object's memory use.
  The mode exists, but you must supply such a serializer yourself.
- Buffers are in this package's own format. They are not meant to be read by
  other tools.