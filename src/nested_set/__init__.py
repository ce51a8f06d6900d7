"""
嵌套集合树 - 用 (left, right, depth) 三元组编码层级数据
"""

__version__ = "1.0.0"

from .core.node import NestedSetRecord, TreeNode, NodeFactory, NodeRepository, TreeVerifier
from .system import NestedSetSystem

__all__ = [
    'NestedSetSystem',
    'NestedSetRecord',
    'TreeNode',
    'NodeFactory',
    'NodeRepository',
    'TreeVerifier',
]
