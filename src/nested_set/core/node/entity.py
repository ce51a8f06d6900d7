"""
树节点实体模块
定义内存中的嵌套集合树节点，负责结构变更、重新编号、扁平化和校验
"""

import logging
from typing import Optional, Dict, Any, List, Iterable, Union, Mapping

from ...interfaces import INode
from ...exceptions import TreeCycleError
from .record import NestedSetRecord
from .verifier import InvariantViolation

logger = logging.getLogger(__name__)


class _RebuildWalk:
    """
    一次重建遍历的状态

    除已访问节点外，还缓存子节点在父节点中的位置、每个父节点的下探游标和
    已收尾子树的长度，使整次遍历只需线性时间。遍历期间树结构不变。
    """

    def __init__(self, visited: List['TreeNode']):
        self.visited = visited
        self.seen = {id(node) for node in visited}
        self._positions: Dict[int, int] = {}
        self._cursors: Dict[int, int] = {}
        self._sizes: Dict[int, int] = {}

    def enter(self, node: 'TreeNode') -> None:
        self.visited.append(node)
        self.seen.add(id(node))

    def index_of(self, node: 'TreeNode') -> int:
        """node 在父节点子列表中的位置，每个父节点只扫描一次"""
        if id(node) not in self._positions:
            for idx, child in enumerate(node.parent.children):
                self._positions[id(child)] = idx
        return self._positions[id(node)]

    def next_pending(self, node: 'TreeNode') -> Optional['TreeNode']:
        """第一个尚未分配左值的子节点"""
        children = node.children
        idx = self._cursors.get(id(node), 0)
        while idx < len(children) and id(children[idx]) in self.seen:
            idx += 1
        self._cursors[id(node)] = idx
        return children[idx] if idx < len(children) else None

    def close(self, node: 'TreeNode') -> int:
        """子节点全部收尾后计算子树长度，结果与 get_size 相同"""
        size = 2
        for child in node.children:
            child_size = self._sizes.get(id(child))
            size += child_size if child_size is not None else child.get_size()
        self._sizes[id(node)] = size
        return size


class TreeNode(INode):
    """
    树节点 - 嵌套集合编码的内存表示

    每个节点包含：
    1. 身份信息：uuid, org_uuid, tag, title, type
    2. 编码信息：node_left, node_right, node_depth
    3. 树关系：parent（不拥有）, children（有序，拥有）
    4. 审计信息：created_by ... deleted_at，原样透传

    任何 append / prepend / remove_child 都会触发整棵树的重新编号，
    代价与树的大小成正比。
    """

    def __init__(
        self,
        title: str = "",
        type: str = "",
        uuid: Optional[str] = None,
        org_uuid: Optional[str] = None,
        created_by: Optional[str] = None,
        updated_by: Optional[str] = None,
        created_at: Optional[Any] = None,
        updated_at: Optional[Any] = None,
        deleted_by: Optional[str] = None,
        deleted_at: Optional[Any] = None,
        left: int = 0,
        right: int = 1,
        depth: int = 0,
        parent: Optional['TreeNode'] = None,
        tag: Optional[str] = None
    ):
        """
        初始化树节点

        Args:
            title: 节点标题
            type: 节点类型
            uuid: 持久化标识，持久化之前为 None
            left / right / depth: 占位编码，挂到父节点下并重建后才有效
            parent: 父节点，给出时立即 append 到其下
            tag: 在一批记录中唯一的键
        """
        # ========== 身份信息 ==========
        self.uuid = uuid
        self.org_uuid = org_uuid
        self.title = title
        self.tag = tag
        self.type = type

        # ========== 编码信息 ==========
        self.node_left = left
        self.node_right = right
        self.node_depth = depth

        # ========== 审计信息 ==========
        self.created_by = created_by
        self.updated_by = updated_by
        self.created_at = created_at
        self.updated_at = updated_at
        self.deleted_by = deleted_by
        self.deleted_at = deleted_at

        # ========== 树结构关系 ==========
        self.children: List['TreeNode'] = []
        self.parent: Optional['TreeNode'] = None

        if parent is not None:
            parent.append(self)

    # ========== 结构查询 ==========

    def is_leaf(self) -> bool:
        """深度为0的节点即使没有子节点也不算叶子"""
        return self.node_depth > 0 and len(self.children) == 0

    def is_root(self) -> bool:
        return self.parent is None

    def _index_in_parent(self) -> int:
        """按对象身份查找自己在父节点子列表中的位置，找不到返回 -1"""
        if self.parent is None:
            return -1
        for idx, child in enumerate(self.parent.children):
            if child is self:
                return idx
        return -1

    def prev_sibling(self) -> Optional['TreeNode']:
        idx = self._index_in_parent()
        if idx <= 0:
            return None
        return self.parent.children[idx - 1]

    def next_sibling(self) -> Optional['TreeNode']:
        idx = self._index_in_parent()
        if idx < 0 or idx + 1 >= len(self.parent.children):
            return None
        return self.parent.children[idx + 1]

    def count_next_siblings(self) -> int:
        """排在自己之后的兄弟数量"""
        if self.parent is None:
            return 0
        return len(self.parent.children) - (self._index_in_parent() + 1)

    def get_size(self) -> int:
        """
        子树占用的区间长度

        叶子为2，其余为 2 + 所有子节点长度之和，即子树节点数的两倍。
        重建时右值都由它推出。
        """
        if self.is_leaf():
            return 2
        return 2 + 2 * len(self.get_descendants())

    def get_root(self) -> 'TreeNode':
        """获取根节点"""
        root = self
        while root.parent is not None:
            root = root.parent
        return root

    def get_ancestors(self) -> List['TreeNode']:
        """获取所有祖先节点（从根到父节点）"""
        ancestors = []
        current = self.parent
        while current is not None:
            ancestors.insert(0, current)
            current = current.parent
        return ancestors

    def get_descendants(self) -> List['TreeNode']:
        """获取所有后代节点（前序）"""
        descendants = []
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            descendants.append(node)
            stack.extend(reversed(node.children))
        return descendants

    def get_path(self) -> List[str]:
        """获取从根到当前节点的标题路径"""
        return [node.title for node in self.get_ancestors()] + [self.title]

    # ========== 结构变更 ==========

    def _attach(self, node: 'TreeNode') -> None:
        """挂接前的检查：禁止成环，已有父节点的先摘下"""
        if node is self or any(ancestor is node for ancestor in self.get_ancestors()):
            raise TreeCycleError(parent_tag=self.tag, child_tag=node.tag)

        if node.parent is not None:
            node.parent.remove_child(node)

        node.parent = self
        node.node_depth = self.node_depth + 1
        self._redepth(node)

    @staticmethod
    def _redepth(node: 'TreeNode') -> None:
        """子树整体移动后，后代深度跟随父节点"""
        for descendant in node.get_descendants():
            descendant.node_depth = descendant.parent.node_depth + 1

    def append(self, node: 'TreeNode') -> None:
        """
        追加子节点到末尾

        Raises:
            TreeCycleError: node 是自己或自己的祖先
        """
        self._attach(node)
        self.children.append(node)
        self.rebuild()

    def prepend(self, node: 'TreeNode') -> None:
        """
        插入子节点到开头

        Raises:
            TreeCycleError: node 是自己或自己的祖先
        """
        self._attach(node)
        self.children.insert(0, node)
        self.rebuild()

    def remove_child(self, child: 'TreeNode') -> bool:
        """
        移除子节点

        被移除的节点成为孤立节点，它子树中的编号保持上次计算的值，
        在重新挂到别处之前无效。

        Returns:
            child 确实是子节点并已移除时为 True
        """
        idx = child._index_in_parent() if child.parent is self else -1
        if idx < 0:
            return False

        del self.children[idx]
        child.parent = None
        self.rebuild()
        return True

    # ========== 重新编号 ==========

    def rebuild(self, visited: Optional[List['TreeNode']] = None) -> List['TreeNode']:
        """
        从当前节点出发重新计算整棵树的左右值

        每个节点在后代之前拿到左值，在后代之后拿到右值。遍历通过兄弟/父节点
        跳转推进，visited 记录已分配左值的节点，因此可以从任意节点重入，
        对已正确编号的树重复调用得到相同结果。

        Args:
            visited: 已访问节点列表，会被原地追加

        Returns:
            visited（按分配左值的顺序）
        """
        if visited is None:
            visited = []
        walk = _RebuildWalk(visited)

        node: Optional[TreeNode] = self
        while node is not None:
            node = node._rebuild_step(walk)

        logger.debug(f"重建完成: 起点={self.tag}, 节点数={len(visited)}")
        return visited

    def _rebuild_step(self, walk: _RebuildWalk) -> Optional['TreeNode']:
        """执行一步遍历，返回下一个要访问的节点，遍历结束返回 None"""
        if id(self) not in walk.seen:
            if self.parent is None:
                self.node_left = 0
            else:
                idx = walk.index_of(self)
                if idx == 0:
                    self.node_left = self.parent.node_left + 1
                else:
                    self.node_left = self.parent.children[idx - 1].node_right + 1
            walk.enter(self)

        pending = walk.next_pending(self)
        if pending is not None:
            return pending

        # 没有可下探的子节点：叶子，或子节点都已访问
        self.node_right = self.node_left + walk.close(self) - 1
        if self.parent is None:
            return None

        siblings = self.parent.children
        idx = walk.index_of(self)
        return siblings[idx + 1] if idx + 1 < len(siblings) else self.parent

    # ========== 扁平化与重建 ==========

    def to_record(self) -> NestedSetRecord:
        """投影为扁平记录"""
        return NestedSetRecord(
            uuid=self.uuid,
            org_uuid=self.org_uuid,
            title=self.title,
            tag=self.tag,
            node_left=self.node_left,
            node_right=self.node_right,
            node_depth=self.node_depth,
            type=self.type,
            created_by=self.created_by,
            updated_by=self.updated_by,
            created_at=self.created_at,
            updated_at=self.updated_at,
            deleted_by=self.deleted_by,
            deleted_at=self.deleted_at,
        )

    @classmethod
    def from_record(cls, record: NestedSetRecord) -> 'TreeNode':
        """
        从扁平记录创建孤立节点

        编码值一并复制，但只有挂入树并重建后才可信。
        """
        return cls(
            title=record.title,
            type=record.type,
            uuid=record.uuid,
            org_uuid=record.org_uuid,
            created_by=record.created_by,
            updated_by=record.updated_by,
            created_at=record.created_at,
            updated_at=record.updated_at,
            deleted_by=record.deleted_by,
            deleted_at=record.deleted_at,
            left=record.node_left,
            right=record.node_right,
            depth=record.node_depth,
            tag=record.tag,
        )

    def flat(self) -> List[NestedSetRecord]:
        """重建后按遍历顺序输出所有节点的扁平记录"""
        return [node.to_record() for node in self.rebuild()]

    @staticmethod
    def to_nested(
        records: Iterable[Union[NestedSetRecord, Mapping[str, Any]]],
        strict: bool = False
    ) -> Dict[str, 'TreeNode']:
        """
        从扁平记录重建树

        Returns:
            tag -> TreeNode
        """
        from .factory import NodeFactory
        return NodeFactory().to_nested(records, strict=strict)

    def to_dict(self) -> Dict[str, Any]:
        """序列化为字典：记录字段加上父子标签"""
        result = self.to_record().to_dict()
        result['parent_tag'] = self.parent.tag if self.parent is not None else None
        result['children'] = [child.tag for child in self.children]
        return result

    # ========== 校验 ==========

    def check(self) -> List[InvariantViolation]:
        """
        检查本节点与父节点的关系

        只做局部检查（不检查兄弟连续性和区间长度），整树检查见 TreeVerifier。
        """
        violations = []

        if self.node_depth != 0 and self.parent is None:
            violations.append(InvariantViolation(
                self.tag, "parent_link", "深度不为0的节点必须有父节点"
            ))

        if self.parent is not None:
            if self.parent.node_left >= self.node_left:
                violations.append(InvariantViolation(
                    self.tag, "containment", "节点左值必须大于父节点左值"
                ))
            if self.parent.node_right <= self.node_right:
                violations.append(InvariantViolation(
                    self.tag, "containment", "节点右值必须小于父节点右值"
                ))
            if self.parent.node_depth + 1 != self.node_depth:
                violations.append(InvariantViolation(
                    self.tag, "depth", "节点深度必须等于父节点深度加一"
                ))

        return violations

    def validate(self) -> None:
        """
        验证节点

        Raises:
            InvariantViolationError: 第一个违反的不变式
        """
        violations = self.check()
        if violations:
            raise violations[0].to_error()

    # ========== 特殊方法 ==========

    def __repr__(self) -> str:
        return (f"TreeNode({self.title!r}, tag={self.tag!r}, "
                f"[{self.node_left}, {self.node_right}], depth={self.node_depth})")
