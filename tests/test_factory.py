"""
测试节点工厂 - 创建节点和从扁平记录重建
"""
import random

import pytest

from nested_set.core.node import NodeFactory, NestedSetRecord, TreeNode
from nested_set.exceptions import ReconstructionError, ValidationError


def make_records():
    """R[A[C], B] 的扁平记录"""
    return [
        NestedSetRecord(tag="root", node_left=0, node_right=7, node_depth=0, title="R"),
        NestedSetRecord(tag="A", node_left=1, node_right=4, node_depth=1, title="A"),
        NestedSetRecord(tag="C", node_left=2, node_right=3, node_depth=2, title="C"),
        NestedSetRecord(tag="B", node_left=5, node_right=6, node_depth=1, title="B"),
    ]


def test_two_node_reconstruction():
    """一个根记录加一个被包含的记录 -> 两个节点的树"""
    records = [
        NestedSetRecord(tag="root", node_left=0, node_right=3, node_depth=0),
        NestedSetRecord(tag="child", node_left=1, node_right=2, node_depth=1),
    ]

    nodes = NodeFactory().to_nested(records)

    assert set(nodes) == {"root", "child"}
    assert nodes["root"].children == [nodes["child"]]
    assert nodes["child"].parent is nodes["root"]


def test_reconstruction_preserves_fields():
    records = make_records()
    records[1].uuid = "u-1"
    records[1].org_uuid = "org-1"
    records[1].type = "folder"
    records[1].deleted_at = "2024-01-01T00:00:00"

    nodes = NodeFactory().to_nested(records)
    a = nodes["A"]

    assert a.tag == "A"
    assert a.uuid == "u-1"
    assert a.org_uuid == "org-1"
    assert a.type == "folder"
    assert a.deleted_at == "2024-01-01T00:00:00"


def test_reconstruction_unordered_input():
    """输入顺序被打乱时兄弟顺序和编号不变"""
    records = make_records()
    expected = [r.to_dict() for r in records]

    shuffled = list(records)
    random.Random(3).shuffle(shuffled)
    nodes = NodeFactory().to_nested(shuffled)

    assert [r.to_dict() for r in nodes["root"].flat()] == expected
    assert [c.tag for c in nodes["root"].children] == ["A", "B"]


def test_reconstruction_from_dicts():
    nodes = TreeNode.to_nested([r.to_dict() for r in make_records()])

    assert nodes["C"].get_path() == ["R", "A", "C"]


def test_duplicate_tag_rejected():
    records = make_records()
    records[3].tag = "A"

    with pytest.raises(ReconstructionError) as exc_info:
        NodeFactory().to_nested(records)
    assert exc_info.value.details["reason"] == "duplicate_tag"


def test_missing_parent_permissive():
    """找不到父记录的记录成为独立的根节点"""
    records = [
        NestedSetRecord(tag="root", node_left=0, node_right=3, node_depth=0),
        NestedSetRecord(tag="child", node_left=1, node_right=2, node_depth=1),
        NestedSetRecord(tag="stray", node_left=10, node_right=13, node_depth=2),
        NestedSetRecord(tag="stray-kid", node_left=11, node_right=12, node_depth=3),
    ]

    nodes = NodeFactory().to_nested(records)
    stray = nodes["stray"]

    assert stray.is_root()
    assert stray.children == [nodes["stray-kid"]]
    assert (stray.node_left, stray.node_right, stray.node_depth) == (0, 3, 0)
    assert nodes["stray-kid"].node_depth == 1
    stray.validate()
    assert nodes["root"].children == [nodes["child"]]


def test_missing_parent_strict():
    records = [
        NestedSetRecord(tag="root", node_left=0, node_right=3, node_depth=0),
        NestedSetRecord(tag="stray", node_left=10, node_right=11, node_depth=2),
    ]

    with pytest.raises(ReconstructionError) as exc_info:
        NodeFactory().to_nested(records, strict=True)
    assert exc_info.value.details["tag"] == "stray"
    assert exc_info.value.details["reason"] == "missing_parent"


def test_multiple_roots_strict():
    records = [
        NestedSetRecord(tag="r1", node_left=0, node_right=1, node_depth=0),
        NestedSetRecord(tag="r2", node_left=2, node_right=3, node_depth=0),
    ]

    assert len(NodeFactory().to_nested(records)) == 2
    with pytest.raises(ReconstructionError) as exc_info:
        NodeFactory().to_nested(records, strict=True)
    assert exc_info.value.details["reason"] == "multiple_roots"


def test_invalid_record_dict():
    with pytest.raises(ValidationError):
        NodeFactory().to_nested([{"tag": "root", "node_left": 0, "node_right": 1}])


def test_create_nodes():
    factory = NodeFactory()
    root = factory.create_root_node("文档库", "library")
    a = factory.create_child_node(root, "第一章", "chapter")
    b = factory.create_child_node(root, "序言", "chapter", tag="preface", prepend=True)

    assert root.tag == "root"
    assert len(a.tag) == 8
    assert root.children == [b, a]
    assert (b.node_left, b.node_right) == (1, 2)
    assert (a.node_left, a.node_right) == (3, 4)
    assert root.node_right == 5


def test_create_root_with_custom_tag():
    factory = NodeFactory(root_tag="top")
    assert factory.root_tag == "top"
    assert factory.create_root_node("R").tag == "top"


def test_create_node_from_dict():
    node = NodeFactory().create_node_from_dict({
        "tag": "x", "node_left": "3", "node_right": 4.0, "node_depth": 1, "title": "X"
    })

    assert node.tag == "x"
    assert (node.node_left, node.node_right, node.node_depth) == (3, 4, 1)
    assert node.is_root()


def test_root_tag_is_never_linked():
    """标签为根标签的记录即使落在别的区间内也是根节点"""
    top = TreeNode("T", tag="top")
    top.append(TreeNode("R", tag="root"))

    nodes = NodeFactory().to_nested(top.flat())

    assert nodes["root"].is_root()
    assert nodes["root"].node_depth == 0
    assert (nodes["root"].node_left, nodes["root"].node_right) == (0, 1)
    assert nodes["top"].children == []
    with pytest.raises(ReconstructionError) as exc_info:
        NodeFactory().to_nested(top.flat(), strict=True)
    assert exc_info.value.details["reason"] == "multiple_roots"


def test_root_tag_keeps_its_subtree():
    records = [
        NestedSetRecord(tag="top", node_left=0, node_right=5, node_depth=0),
        NestedSetRecord(tag="root", node_left=1, node_right=4, node_depth=1),
        NestedSetRecord(tag="leaf", node_left=2, node_right=3, node_depth=2),
    ]

    nodes = NodeFactory().to_nested(records)

    assert nodes["leaf"].parent is nodes["root"]
    assert nodes["leaf"].node_depth == 1
    assert (nodes["root"].node_left, nodes["root"].node_right) == (0, 3)


def test_create_child_rejects_root_tag():
    factory = NodeFactory()
    root = factory.create_root_node("R")

    with pytest.raises(ValidationError) as exc_info:
        factory.create_child_node(root, "X", tag="root")
    assert exc_info.value.details["reason"] == "reserved_root_tag"
    assert root.children == []


@pytest.mark.parametrize("record, field", [
    (NestedSetRecord(tag="bad", node_left=4, node_right=4, node_depth=0), "node_right"),
    (NestedSetRecord(tag="bad", node_left=5, node_right=2, node_depth=0), "node_right"),
    (NestedSetRecord(tag="bad", node_left=0, node_right=1, node_depth=-1), "node_depth"),
])
def test_invalid_record_instance(record, field):
    with pytest.raises(ValidationError) as exc_info:
        NodeFactory().to_nested([record])
    assert exc_info.value.details["field"] == field
