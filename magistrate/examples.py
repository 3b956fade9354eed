"""Worked examples: serializing a user type to a file and traversing an object."""

from __future__ import annotations

import argparse
import sys
from typing import Any, TextIO

from magistrate.api import (
    deserialize_from_file,
    deserialize_in_place_from_file,
    serialize_to_file,
    traverse,
)
from magistrate.serializer import SerializationMode, Serializer

U_VAL = 934


class MyTestType:
    """A vector of doubles and its length, serialized field by field."""

    def __init__(self, length: int = 0) -> None:
        self.length = length
        self.u = [float(U_VAL + i) for i in range(length)]

    def serialize(self, s: Serializer) -> None:
        self.u = s.field(self.u)
        self.length = s.field(self.length)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MyTestType):
            return NotImplemented
        if self.length != other.length:
            return False
        return self.u[: self.length] == other.u[: other.length]

    def __repr__(self) -> str:
        return f"MyTestType(length={self.length}, u={self.u!r})"


class TestObject:
    """Two integers and three vectors of ints, doubles and strings."""

    __test__ = False  # not a test class, despite its name

    def __init__(self) -> None:
        self.a = 29
        self.b = 36
        self.vec1: list[int] = []
        self.vec2: list[float] = []
        self.vec3: list[str] = []

    @classmethod
    def make(cls) -> "TestObject":
        """An instance with ten elements in each vector."""
        obj = cls()
        for i in range(10):
            obj.vec1.append(i)
            obj.vec2.append(i * 29.34)
            obj.vec3.append("hello: " + _to_string(obj.vec2[-1]))
        return obj

    def serialize(self, s: Serializer) -> None:
        self.a = s.field(self.a)
        self.b = s.field(self.b)
        self.vec1 = s.field(self.vec1)
        self.vec2 = s.field(self.vec2)
        self.vec3 = s.field(self.vec3)


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return f"{value:f}"
    return str(int(value)) if isinstance(value, bool) else str(value)


class PrintBytesTraverse(Serializer):
    """Traverser that prints every contiguous byte range it is handed."""

    def __init__(self, out: TextIO | None = None) -> None:
        super().__init__(SerializationMode.NONE)
        self.out = out if out is not None else sys.stdout

    def contiguous_bytes(self, data: bytes, size: int, num_elms: int) -> bytes:
        print(f"PrintBytesTraverse: size={size}, num_elms={num_elms}", file=self.out)
        return data


class TypedTraverse(Serializer):
    """Traverser that prints typed ranges, and prints lists instead of descending into them."""

    def __init__(self, out: TextIO | None = None) -> None:
        super().__init__(SerializationMode.NONE)
        self.out = out if out is not None else sys.stdout

    def field(self, value: Any) -> Any:
        if isinstance(value, list):
            print(f"Traversing vector: size={len(value)}", file=self.out)
            for i, item in enumerate(value):
                print(f"\t vector[{i}]={_to_string(item)}", end="", file=self.out)
            print(file=self.out)
            return value
        return super().field(value)

    def contiguous_typed(self, serdes: Serializer, values: list, num_elms: int) -> list:
        name = type(values[0]).__name__ if values else "None"
        print(f"TypedTraverse: type is {name}, num={num_elms}", file=self.out)
        return values


def run_file_example(path) -> tuple[bool, bool]:
    """Write a MyTestType to ``path``, read it back both ways; returns whether each worked."""
    my_test_inst = MyTestType(11)
    serialize_to_file(my_test_inst, path)

    out = deserialize_from_file(MyTestType, path)
    worked = my_test_inst == out
    if worked:
        print(" Serialization / Deserialization from file worked. ")
    else:
        print(" Serialization / Deserialization from file failed. ")

    out_2 = MyTestType()
    deserialize_in_place_from_file(path, out_2)
    worked_in_place = my_test_inst == out_2
    if worked_in_place:
        print(" Deserialization in-place from file worked. ")
    else:
        print(" Deserialization in-place from file failed. ")

    return worked, worked_in_place


def run_traversal_example(out: TextIO | None = None) -> None:
    """Traverse a TestObject with the byte-printing and then the typed traverser."""
    my_obj = TestObject.make()
    traverse(my_obj, PrintBytesTraverse(out))
    traverse(my_obj, TypedTraverse(out))


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run the serialization examples.")
    parser.add_argument("--path", default="hello.txt", help="file the file example writes")
    args = parser.parse_args(argv)

    worked, worked_in_place = run_file_example(args.path)
    run_traversal_example()
    return 0 if worked and worked_in_place else 1


if __name__ == "__main__":
    sys.exit(main())