"""
测试系统主类
"""
import pytest

from nested_set import NestedSetSystem
from nested_set.exceptions import (
    TreeError, TreeNotFoundError, NodeNotFoundError, ReconstructionError,
    TreeCycleError, ValidationError
)


@pytest.fixture
def system():
    return NestedSetSystem({"log_level": "DEBUG"})


def test_create_and_list(system):
    result = system.create_tree("docs", "文档库", "library")

    assert result["success"] is True
    assert result["root_node"]["tag"] == "root"
    assert system.list_trees()[0]["node_count"] == 1

    with pytest.raises(TreeError):
        system.create_tree("docs", "again")
    with pytest.raises(TreeNotFoundError):
        system.get_tree("missing")


def test_add_move_remove(system):
    system.create_tree("docs", "文档库")
    system.add_node("docs", "root", "第一章", tag="ch1")
    system.add_node("docs", "root", "第二章", tag="ch2")
    system.add_node("docs", "ch1", "1.1", tag="s11")
    system.add_node("docs", "root", "序言", tag="pre", prepend=True)

    records = system.flatten_tree("docs")
    assert [r.tag for r in records] == ["root", "pre", "ch1", "s11", "ch2"]
    assert records[0].node_right == 9

    system.move_node("docs", "s11", "ch2")
    assert [r.tag for r in system.flatten_tree("docs")] == ["root", "pre", "ch1", "ch2", "s11"]

    with pytest.raises(TreeCycleError):
        system.move_node("docs", "ch2", "s11")

    removed = system.remove_node("docs", "ch2")
    assert removed.is_root()
    assert system.get_tree("docs").get_node_count() == 3
    assert system.validate_tree("docs")["valid"] is True

    with pytest.raises(NodeNotFoundError):
        system.add_node("docs", "ch2", "x")


def test_add_node_rejects_duplicate_tag(system):
    system.create_tree("t", "R")
    system.add_node("t", "root", "A", tag="A")

    with pytest.raises(TreeError) as exc_info:
        system.add_node("t", "root", "A again", tag="A")
    assert exc_info.value.code == "DUPLICATE_TAG"
    with pytest.raises(ValidationError):
        system.add_node("t", "A", "second root", tag="root")

    repo = system.get_tree("t")
    assert repo.get_node_count() == 2
    assert len(repo.get_all_nodes()) == 2

    copy = system.load_tree("t2", system.flatten_tree("t"))
    assert [r.tag for r in copy.flat()] == ["root", "A"]


def test_load_and_export(system):
    system.create_tree("src", "R")
    system.add_node("src", "root", "A", tag="A")
    system.add_node("src", "A", "C", tag="C")

    frame = system.export_frame("src")
    repo = system.import_frame("copy", frame)

    assert [r.to_dict() for r in repo.flat()] == [r.to_dict() for r in system.flatten_tree("src")]
    assert {t["tree_id"] for t in system.list_trees()} == {"src", "copy"}

    system.delete_tree("copy")
    with pytest.raises(TreeNotFoundError):
        system.delete_tree("copy")


def test_load_tree_rejects_forest(system):
    records = [
        {"tag": "r1", "node_left": 0, "node_right": 1, "node_depth": 0},
        {"tag": "r2", "node_left": 2, "node_right": 3, "node_depth": 0},
    ]

    with pytest.raises(ReconstructionError):
        system.load_tree("forest", records)


def test_strict_setting():
    system = NestedSetSystem({"strict_reconstruction": True, "enable_logging": False})
    records = [
        {"tag": "root", "node_left": 0, "node_right": 1, "node_depth": 0},
        {"tag": "stray", "node_left": 5, "node_right": 6, "node_depth": 3},
    ]

    with pytest.raises(ReconstructionError) as exc_info:
        system.load_tree("t", records)
    assert exc_info.value.details["reason"] == "missing_parent"


def test_validate_tree_report(system):
    system.create_tree("t", "R")
    node = system.add_node("t", "root", "A", tag="A")
    node.node_right = 50

    report = system.validate_tree("t")

    assert report["valid"] is False
    assert {"tag": "A", "invariant": "containment"}.items() <= report["violations"][0].items()


def test_verify_on_flatten():
    system = NestedSetSystem({"verify_on_flatten": True, "verify_after_mutation": True, "enable_logging": False})
    system.create_tree("t", "R")
    system.add_node("t", "root", "A", tag="A")

    assert len(system.flatten_tree("t")) == 2


def test_invalid_config():
    with pytest.raises(ValidationError):
        NestedSetSystem({"log_level": "LOUD"})


def test_stats(system):
    system.create_tree("a", "A")
    system.create_tree("b", "B")
    system.add_node("b", "root", "x")

    stats = system.get_stats()
    assert stats["tree_count"] == 2
    assert stats["total_nodes"] == 3
    assert system.name == stats["system_name"]
    assert repr(system) == "NestedSetSystem(trees=2)"
