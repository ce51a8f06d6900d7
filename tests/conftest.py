"""
pytest配置文件
用于设置测试环境和共享fixtures
"""
import sys
import os

import pytest

# 将src目录添加到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from nested_set.core.node import TreeNode  # noqa: E402


@pytest.fixture
def two_child_tree():
    """根节点 R，依次追加 A、B"""
    root = TreeNode("R", "folder", tag="root")
    a = TreeNode("A", "folder", tag="A")
    b = TreeNode("B", "folder", tag="B")
    root.append(a)
    root.append(b)
    return root, a, b


@pytest.fixture
def grandchild_tree(two_child_tree):
    """在 two_child_tree 的 A 下追加 C"""
    root, a, b = two_child_tree
    c = TreeNode("C", "file", tag="C")
    a.append(c)
    return root, a, b, c
