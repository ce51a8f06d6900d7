"""
节点模块 - 嵌套集合树的节点、记录和管理
"""

from .record import NestedSetRecord, RECORD_FIELDS
from .entity import TreeNode
from .verifier import TreeVerifier, InvariantViolation
from .factory import NodeFactory
from .repository import NodeRepository

__all__ = [
    'NestedSetRecord',
    'RECORD_FIELDS',
    'TreeNode',
    'TreeVerifier',
    'InvariantViolation',
    'NodeFactory',
    'NodeRepository',
]
