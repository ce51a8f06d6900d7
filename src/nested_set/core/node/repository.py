"""
节点仓库模块
管理一棵树的节点索引、遍历和基于区间的查询
"""

import logging
from typing import Optional, Dict, Any, List

from .entity import TreeNode
from .record import NestedSetRecord
from .verifier import TreeVerifier, InvariantViolation
from ...exceptions import NodeNotFoundError, TreeError

logger = logging.getLogger(__name__)


class NodeRepository:
    """节点仓库，按 tag 索引一棵树的所有节点"""

    def __init__(self, root_node: Optional[TreeNode] = None):
        """
        初始化节点仓库

        Args:
            root_node: 根节点，如果为None则创建一个空的仓库
        """
        self._root = root_node
        self._nodes: Dict[str, TreeNode] = {}
        self._verifier = TreeVerifier()

        if root_node is not None:
            self.reindex()

    def reindex(self) -> None:
        """结构变更后重新建立 tag 索引"""
        self._nodes = {}
        if self._root is None:
            return
        for node in [self._root] + self._root.get_descendants():
            if node.tag is not None:
                self._nodes[node.tag] = node

    @property
    def root(self) -> Optional[TreeNode]:
        """获取根节点"""
        return self._root

    def set_root(self, root_node: TreeNode) -> None:
        """设置根节点"""
        if self._root is not None:
            raise TreeError("根节点已设置", code="ROOT_ALREADY_SET")
        if not root_node.is_root():
            raise TreeError("仓库的根节点不能有父节点", code="ROOT_HAS_PARENT")

        self._root = root_node
        root_node.rebuild()
        self.reindex()

    def get_node(self, tag: str) -> Optional[TreeNode]:
        """根据标签获取节点"""
        return self._nodes.get(tag)

    def require_node(self, tag: str) -> TreeNode:
        """根据标签获取节点，不存在时抛出 NodeNotFoundError"""
        node = self._nodes.get(tag)
        if node is None:
            raise NodeNotFoundError(tag=tag)
        return node

    def ensure_tag_available(self, tag: Optional[str], node: Optional[TreeNode] = None) -> None:
        """
        检查 tag 没有被树中其他节点占用（node 本身占用不算冲突）

        Raises:
            TreeError: 标签已存在
        """
        existing = self._nodes.get(tag)
        if existing is not None and existing is not node:
            raise TreeError(f"标签已存在: {tag}", code="DUPLICATE_TAG", details={"tag": tag})

    def add_node(self, node: TreeNode, parent_tag: str, prepend: bool = False) -> TreeNode:
        """
        把节点（可带子树）挂到 parent_tag 下

        node 已在本树中时相当于移动。

        Raises:
            NodeNotFoundError: 父节点不存在
            TreeError: 子树中的标签与树中其他节点重复
        """
        parent = self.require_node(parent_tag)
        incoming = set()
        for member in [node] + node.get_descendants():
            if member.tag is None:
                continue
            if member.tag in incoming:
                raise TreeError(f"标签已存在: {member.tag}", code="DUPLICATE_TAG", details={"tag": member.tag})
            incoming.add(member.tag)
            self.ensure_tag_available(member.tag, member)

        if prepend:
            parent.prepend(node)
        else:
            parent.append(node)

        self.reindex()
        logger.debug(f"添加节点: {node.tag} -> {parent_tag}")
        return node

    def remove_node(self, tag: str) -> TreeNode:
        """
        移除节点及其子树

        Returns:
            被移除的（已孤立的）节点

        Raises:
            NodeNotFoundError: 节点不存在
            TreeError: 试图移除根节点
        """
        node = self.require_node(tag)
        if node is self._root:
            raise TreeError("不能移除根节点", code="ROOT_REMOVAL")

        node.parent.remove_child(node)
        self.reindex()
        logger.debug(f"移除节点: {tag}")
        return node

    def get_all_nodes(self) -> List[TreeNode]:
        """获取所有节点"""
        return list(self._nodes.values())

    def get_node_count(self) -> int:
        """获取节点数量"""
        if self._root is None:
            return 0
        return 1 + len(self._root.get_descendants())

    def get_tree_depth(self) -> int:
        """获取树的最大深度"""
        if self._root is None:
            return 0
        return max(node.node_depth for node in self.traverse()) - self._root.node_depth

    def find_nodes(self, **criteria) -> List[TreeNode]:
        """
        根据条件查找节点

        Args:
            **criteria: 查找条件，如 type="folder", node_depth=1

        Returns:
            匹配的节点列表（前序）
        """
        results = []

        for node in self.traverse():
            match = True

            for key, value in criteria.items():
                if not hasattr(node, key):
                    match = False
                    break

                node_value = getattr(node, key)
                if callable(node_value):
                    node_value = node_value()

                if node_value != value:
                    match = False
                    break

            if match:
                results.append(node)

        return results

    def traverse(self, order: str = "preorder") -> List[TreeNode]:
        """
        遍历树

        Args:
            order: 遍历顺序，可选 "preorder"（前序）, "postorder"（后序）

        Returns:
            节点列表
        """
        if self._root is None:
            return []

        if order == "preorder":
            return [self._root] + self._root.get_descendants()
        if order == "postorder":
            # 前序按左值排列，后序按右值排列
            return sorted([self._root] + self._root.get_descendants(), key=lambda n: n.node_right)

        raise ValueError(f"不支持的遍历顺序: {order}")

    # ========== 区间查询 ==========

    def get_descendants(self, tag: str) -> List[TreeNode]:
        """区间严格落在节点区间内的所有节点，按左值排序"""
        node = self.require_node(tag)
        return sorted(
            (other for other in self.traverse()
             if node.node_left < other.node_left and other.node_right < node.node_right),
            key=lambda n: n.node_left
        )

    def get_ancestors(self, tag: str) -> List[TreeNode]:
        """区间严格包含节点区间的所有节点，从根开始"""
        node = self.require_node(tag)
        return sorted(
            (other for other in self.traverse()
             if other.node_left < node.node_left and node.node_right < other.node_right),
            key=lambda n: n.node_left
        )

    def get_subtree_size(self, tag: str) -> int:
        """子树中的节点数（含自身），由区间长度直接得出"""
        node = self.require_node(tag)
        return (node.node_right - node.node_left + 1) // 2

    # ========== 扁平化与校验 ==========

    def flat(self) -> List[NestedSetRecord]:
        """从根节点扁平化"""
        if self._root is None:
            return []
        return self._root.flat()

    def check(self) -> List[InvariantViolation]:
        """整树检查，返回所有违反项"""
        if self._root is None:
            return []
        return self._verifier.check(self._root)

    def verify(self) -> None:
        """
        整树验证

        Raises:
            InvariantViolationError: 第一个违反的不变式
        """
        if self._root is not None:
            self._verifier.verify(self._root)

    def to_dict(self) -> Dict[str, Any]:
        """序列化仓库：根标签和扁平记录"""
        return {
            'root_tag': self._root.tag if self._root is not None else None,
            'node_count': self.get_node_count(),
            'records': [record.to_dict() for record in self.flat()],
        }
