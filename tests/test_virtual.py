import pytest

from magistrate.serializer import Packer, Sizer, Unpacker
from magistrate.virtual import (
    get_entry,
    instantiate_obj_serializer,
    link_derived_to_base,
    make_obj_idx,
)


def _hierarchy():
    class Root:
        def serialize(self, s):
            pass

    class Mid(Root):
        pass

    class Leaf(Mid):
        pass

    return Root, Mid, Leaf


def test_make_obj_idx_is_stable():
    root, _, _ = _hierarchy()
    idx = make_obj_idx(root, Sizer)
    assert make_obj_idx(root, Sizer) == idx
    entry = get_entry(root, idx)
    assert entry.cls is root
    assert entry.index == idx


def test_distinct_serializers_get_distinct_indices():
    root, _, _ = _hierarchy()
    assert make_obj_idx(root, Sizer) != make_obj_idx(root, Packer)


def test_get_entry_describes_registration():
    root, _, _ = _hierarchy()
    idx = make_obj_idx(root, Unpacker)
    entry = get_entry(root, idx)
    assert entry.cls is root
    assert entry.serializer_type is Unpacker
    assert entry.index == idx
    assert entry.base_idx is None


def test_derived_and_base_share_registry():
    root, mid, _ = _hierarchy()
    mid_idx = make_obj_idx(mid, Sizer)
    root_idx = make_obj_idx(root, Sizer)
    assert mid_idx != root_idx
    assert get_entry(root, mid_idx).cls is mid
    assert get_entry(mid, root_idx).cls is root


def test_link_derived_to_base():
    root, mid, _ = _hierarchy()
    entry = link_derived_to_base(Packer, mid, root)
    assert entry.cls is mid
    assert entry.base_idx == make_obj_idx(root, Packer)
    assert get_entry(mid, make_obj_idx(mid, Packer)).base_idx == make_obj_idx(root, Packer)


def test_link_requires_subclass():
    root, _, _ = _hierarchy()
    other, _, _ = _hierarchy()
    with pytest.raises(TypeError):
        link_derived_to_base(Sizer, root, other)


def test_instantiate_links_to_direct_base():
    _, mid, leaf = _hierarchy()
    result = instantiate_obj_serializer(leaf, Sizer, Packer)
    assert set(result) == {Sizer, Packer}
    for serializer_type, idx in result.items():
        entry = get_entry(leaf, idx)
        assert entry.cls is leaf
        assert entry.base_idx == make_obj_idx(mid, serializer_type)


def test_instantiate_root_links_to_itself():
    root, _, _ = _hierarchy()
    result = instantiate_obj_serializer(root, Sizer)
    idx = result[Sizer]
    assert get_entry(root, idx).base_idx == idx


def test_instantiate_skips_unserializable():
    class Plain:
        pass

    assert instantiate_obj_serializer(Plain, Sizer, Packer) == {}
    with pytest.raises(KeyError):
        get_entry(Plain, 0)


def test_instantiate_bytecopyable_scalar():
    result = instantiate_obj_serializer(float, Sizer)
    entry = get_entry(float, result[Sizer])
    assert entry.cls is float
    assert entry.base_idx == result[Sizer]


def test_get_entry_unknown_index_raises():
    root, _, _ = _hierarchy()
    make_obj_idx(root, Sizer)
    with pytest.raises(KeyError):
        get_entry(root, 99)
    with pytest.raises(KeyError):
        get_entry(root, -1)