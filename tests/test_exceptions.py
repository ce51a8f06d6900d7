"""
测试异常体系
"""
from nested_set.exceptions import (
    BaseError, TreeError, NodeError, NodeNotFoundError, TreeNotFoundError,
    TreeCycleError, InvariantViolationError, ReconstructionError,
    ConfigError, ValidationError, DataImportError
)


def test_exception_creation():
    """测试异常创建"""
    error = InvariantViolationError("节点右值必须小于父节点右值", tag="A", invariant="containment")

    assert error.code == "INVARIANT_VIOLATION"
    assert error.tag == "A"
    assert error.invariant == "containment"
    assert str(error).startswith("[INVARIANT_VIOLATION]")
    print("✓ 异常创建测试通过")


def test_exception_inheritance():
    """测试异常继承关系"""
    assert issubclass(NodeNotFoundError, NodeError)
    assert issubclass(TreeCycleError, NodeError)
    assert issubclass(NodeError, TreeError)
    assert issubclass(InvariantViolationError, TreeError)
    assert issubclass(ReconstructionError, TreeError)
    assert issubclass(TreeNotFoundError, TreeError)
    for cls in (TreeError, ConfigError, ValidationError, DataImportError):
        assert issubclass(cls, BaseError)


def test_exception_details():
    error = NodeNotFoundError(tag="x")
    assert error.details == {"tag": "x"}
    assert "tag=x" in error.message

    error = ReconstructionError("标签重复: a", tag="a", reason="duplicate_tag")
    assert error.code == "RECONSTRUCTION_ERROR"
    assert error.details["reason"] == "duplicate_tag"

    error = TreeCycleError(parent_tag="p", child_tag="c")
    assert error.details == {"parent_tag": "p", "child_tag": "c"}


def test_to_dict():
    error = ValidationError("缺少必需字段: tag", field="tag", reason="required_field_missing")
    data = error.to_dict()

    assert data["code"] == "VALIDATION_ERROR"
    assert data["details"]["field"] == "tag"
    assert "timestamp" in data
