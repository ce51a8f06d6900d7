"""
整树不变式检查
TreeNode.validate 只检查单个节点和父节点的关系，这里检查整棵树
"""

from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

from ...exceptions import InvariantViolationError

if TYPE_CHECKING:
    from .entity import TreeNode


@dataclass(frozen=True)
class InvariantViolation:
    """一次不变式违反：出错节点的 tag、不变式名称和说明"""

    tag: Optional[str]
    invariant: str
    message: str

    def to_error(self) -> InvariantViolationError:
        return InvariantViolationError(
            message=f"{self.message} (tag={self.tag})",
            tag=self.tag,
            invariant=self.invariant
        )


class TreeVerifier:
    """
    整树验证器

    不变式：
    - single_root:    只有根节点没有父节点，且根节点的父子关系一致
    - parent_link:    深度不为0的节点必须有父节点，且在父节点的子列表中
    - containment:    子节点区间严格包含于父节点区间
    - depth:          子节点深度 = 父节点深度 + 1
    - sibling_layout: 第一个子节点紧跟父节点左值，其余紧跟前一个兄弟的右值
    - span_size:      区间长度 = 2 + 所有子节点区间长度之和
    - leaf_span:      叶子节点 right = left + 1
    - root_left:      根节点左值为0
    """

    def check(self, root: 'TreeNode') -> List[InvariantViolation]:
        """检查整棵树，返回所有违反项（没有违反时为空列表）"""
        violations: List[InvariantViolation] = []

        if root.parent is not None:
            violations.append(InvariantViolation(root.tag, "single_root", "起点不是根节点"))
            return violations

        if root.node_left != 0:
            violations.append(InvariantViolation(root.tag, "root_left", "根节点左值必须为0"))

        violations.extend(self._check_size(root))

        for node in [root] + root.get_descendants():
            violations.extend(node.check())
            for child in node.children:
                if child.parent is not node:
                    violations.append(InvariantViolation(
                        child.tag, "parent_link", "子节点的父引用与所在子列表不一致"
                    ))
            violations.extend(self._check_layout(node))
            if node is not root:
                violations.extend(self._check_size(node))

        return violations

    def verify(self, root: 'TreeNode') -> None:
        """
        验证整棵树

        Raises:
            InvariantViolationError: 第一个违反的不变式
        """
        violations = self.check(root)
        if violations:
            raise violations[0].to_error()

    def _check_layout(self, node: 'TreeNode') -> List[InvariantViolation]:
        """兄弟节点从父节点左值之后连续排列"""
        violations = []
        expected = node.node_left + 1
        for child in node.children:
            if child.node_left != expected:
                violations.append(InvariantViolation(
                    child.tag, "sibling_layout",
                    f"节点左值应为 {expected}，实际为 {child.node_left}"
                ))
            expected = child.node_right + 1
        return violations

    def _check_size(self, node: 'TreeNode') -> List[InvariantViolation]:
        """区间长度与 get_size 一致，叶子只占两个数"""
        violations = []
        span = node.node_right - node.node_left + 1
        if span != node.get_size():
            violations.append(InvariantViolation(
                node.tag, "span_size",
                f"区间长度应为 {node.get_size()}，实际为 {span}"
            ))
        if node.is_leaf() and node.node_right != node.node_left + 1:
            violations.append(InvariantViolation(
                node.tag, "leaf_span", "叶子节点的右值必须等于左值加一"
            ))
        return violations
