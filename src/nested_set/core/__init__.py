"""
核心模块包
包含记录、节点、重建与校验的实现
"""

from .node import (
    NestedSetRecord,
    RECORD_FIELDS,
    TreeNode,
    TreeVerifier,
    InvariantViolation,
    NodeFactory,
    NodeRepository,
)

__all__ = [
    'NestedSetRecord',
    'RECORD_FIELDS',
    'TreeNode',
    'TreeVerifier',
    'InvariantViolation',
    'NodeFactory',
    'NodeRepository',
]
