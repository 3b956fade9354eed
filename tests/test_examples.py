import io
import re

from magistrate.api import deserialize, serialize
from magistrate.examples import (
    MyTestType,
    PrintBytesTraverse,
    TestObject,
    TypedTraverse,
    main,
    run_file_example,
    run_traversal_example,
)
from magistrate.api import traverse


def test_my_test_type_values():
    obj = MyTestType(11)
    assert obj.length == 11
    assert len(obj.u) == 11
    assert obj.u[0] == 934.0
    assert all(b - a == 1.0 for a, b in zip(obj.u, obj.u[1:]))


def test_my_test_type_default_is_empty():
    obj = MyTestType()
    assert obj.length == 0
    assert obj.u == []


def test_my_test_type_equality():
    assert MyTestType(5) == MyTestType(5)
    assert (MyTestType(3) == MyTestType(4)) is False
    other = MyTestType(5)
    other.u[2] = -1.0
    assert (MyTestType(5) == other) is False


def test_my_test_type_round_trip():
    obj = MyTestType(11)
    out = deserialize(MyTestType, serialize(obj))
    assert out == obj
    assert out.u == obj.u


def test_run_file_example(tmp_path, capsys):
    path = tmp_path / "hello.txt"
    assert run_file_example(path) == (True, True)
    assert path.stat().st_size > 0
    captured = capsys.readouterr().out
    assert "Serialization / Deserialization from file worked." in captured
    assert "Deserialization in-place from file worked." in captured


def test_test_object_make():
    obj = TestObject.make()
    assert obj.a == 29
    assert obj.b == 36
    assert obj.vec1 == list(range(10))
    assert obj.vec2[1] == 29.34
    assert obj.vec3[0] == "hello: 0.000000"
    assert all(s.startswith("hello: ") for s in obj.vec3)


def test_test_object_round_trip():
    obj = TestObject.make()
    out = deserialize(TestObject, serialize(obj))
    assert (out.a, out.b) == (obj.a, obj.b)
    assert out.vec1 == obj.vec1
    assert out.vec2 == obj.vec2
    assert out.vec3 == obj.vec3


def test_print_bytes_traverse_reports_ranges():
    buf = io.StringIO()
    traverse(TestObject.make(), PrintBytesTraverse(buf))
    lines = buf.getvalue().splitlines()
    assert lines
    pattern = re.compile(r"PrintBytesTraverse: size=\d+, num_elms=\d+")
    assert all(pattern.fullmatch(line) for line in lines)
    assert "PrintBytesTraverse: size=8, num_elms=10" in lines


def test_typed_traverse_prints_vectors():
    buf = io.StringIO()
    traverse(TestObject.make(), TypedTraverse(buf))
    text = buf.getvalue()
    assert text.count("Traversing vector: size=10") == 3
    assert "\t vector[0]=hello: 0.000000" in text
    assert "\t vector[9]=9" in text
    assert "TypedTraverse: type is int, num=1" in text
    assert "num=10" not in text


def test_typed_traverse_leaves_lists_alone():
    obj = TestObject.make()
    before = list(obj.vec1)
    traverse(obj, TypedTraverse(io.StringIO()))
    assert obj.vec1 == before


def test_run_traversal_example_writes_both():
    buf = io.StringIO()
    run_traversal_example(buf)
    text = buf.getvalue()
    assert "PrintBytesTraverse: size=" in text
    assert "Traversing vector: size=10" in text
    assert text.index("PrintBytesTraverse") < text.index("Traversing vector")


def test_main_runs(tmp_path, capsys):
    path = tmp_path / "out.bin"
    assert main(["--path", str(path)]) == 0
    assert path.exists()
    captured = capsys.readouterr().out
    assert "worked" in captured
    assert "failed" not in captured