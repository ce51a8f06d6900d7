"""
节点接口定义
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any


class INode(ABC):
    """节点接口 - 定义嵌套集合树节点的基本行为"""

    @abstractmethod
    def is_leaf(self) -> bool:
        """深度大于0且没有子节点"""
        pass

    @abstractmethod
    def is_root(self) -> bool:
        """没有父节点"""
        pass

    @abstractmethod
    def prev_sibling(self) -> Optional['INode']:
        """前一个兄弟节点"""
        pass

    @abstractmethod
    def next_sibling(self) -> Optional['INode']:
        """后一个兄弟节点"""
        pass

    @abstractmethod
    def get_size(self) -> int:
        """子树占用的区间长度"""
        pass

    @abstractmethod
    def append(self, node: 'INode') -> None:
        """追加到子节点末尾并重新编号"""
        pass

    @abstractmethod
    def prepend(self, node: 'INode') -> None:
        """插入到子节点开头并重新编号"""
        pass

    @abstractmethod
    def remove_child(self, child: 'INode') -> bool:
        """移除子节点"""
        pass

    @abstractmethod
    def rebuild(self, visited: Optional[List['INode']] = None) -> List['INode']:
        """
        重新计算整棵树的左右值

        Args:
            visited: 已分配左值的节点（可在多次调用间共享）

        Returns:
            按遍历顺序排列的节点列表
        """
        pass

    @abstractmethod
    def flat(self) -> List[Any]:
        """重建后输出扁平记录列表"""
        pass

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        pass

    @abstractmethod
    def validate(self) -> None:
        """验证节点与父节点的关系，不合法时抛出异常"""
        pass
