"""
节点工厂 - 创建节点，从扁平记录重建树
"""
import logging
import uuid
from typing import Dict, Any, Optional, List, Iterable, Union, Mapping

from ...exceptions import ReconstructionError, ValidationError
from .entity import TreeNode
from .record import NestedSetRecord

logger = logging.getLogger(__name__)


class NodeFactory:
    """节点工厂，负责创建节点和从扁平记录重建树"""

    def __init__(self, root_tag: str = "root"):
        """
        初始化节点工厂

        Args:
            root_tag: 根节点使用的标签
        """
        self._root_tag = root_tag

    @property
    def root_tag(self) -> str:
        return self._root_tag

    def create_root_node(self, title: str, type: str = "", tag: Optional[str] = None, **fields) -> TreeNode:
        """创建根节点，编号为 [0, 1]"""
        node = TreeNode(title=title, type=type, tag=tag or self._root_tag, **fields)
        node.rebuild()
        return node

    def create_child_node(
            self,
            parent_node: TreeNode,
            title: str,
            type: str = "",
            tag: Optional[str] = None,
            prepend: bool = False,
            **fields
    ) -> TreeNode:
        """
        创建子节点并挂到 parent_node 下（默认追加到末尾）

        Raises:
            ValidationError: tag 是保留的根标签
        """
        if tag == self._root_tag:
            raise ValidationError(
                message=f"根标签不能用于子节点: {tag}",
                field="tag",
                value=tag,
                reason="reserved_root_tag"
            )

        node = TreeNode(title=title, type=type, tag=tag or self._generate_tag(), **fields)

        if prepend:
            parent_node.prepend(node)
        else:
            parent_node.append(node)

        return node

    def _generate_tag(self) -> str:
        """生成唯一的节点标签"""
        return str(uuid.uuid4())[:8]

    def create_node_from_dict(self, data: Mapping[str, Any]) -> TreeNode:
        """
        从字典创建孤立节点

        Raises:
            ValidationError: 字典缺少必需字段
        """
        return TreeNode.from_record(NestedSetRecord.from_dict(data))

    def to_nested(
            self,
            records: Iterable[Union[NestedSetRecord, Mapping[str, Any]]],
            strict: bool = False
    ) -> Dict[str, TreeNode]:
        """
        从扁平记录重建树

        父节点是区间严格包含该记录且深度恰好少一的记录。标签为根标签的记录
        总是根节点，不会挂到别的记录下。找不到父节点的记录也成为根节点
        （宽松模式）；strict=True 时，深度不为0的孤立记录或出现多个根节点
        都会报错。子节点按左值顺序挂接，所以输入顺序不影响结果。

        Args:
            records: 记录或记录字典，有序无序均可
            strict: 严格模式

        Returns:
            tag -> TreeNode

        Raises:
            ReconstructionError: 标签重复，或严格模式下找不到父节点
            ValidationError: 记录缺少必需字段，或区间、深度非法
        """
        documents = [
            record.validate() if isinstance(record, NestedSetRecord) else NestedSetRecord.from_dict(record)
            for record in records
        ]

        nodes: Dict[str, TreeNode] = {}
        for doc in documents:
            if doc.tag in nodes:
                raise ReconstructionError(f"标签重复: {doc.tag}", tag=doc.tag, reason="duplicate_tag")
            nodes[doc.tag] = TreeNode.from_record(doc)

        roots: List[str] = []
        for doc in sorted(documents, key=lambda d: d.node_left):
            declared_root = doc.tag == self._root_tag
            parent = None if declared_root else self._find_parent(doc, documents)

            if parent is None:
                if strict and doc.node_depth != 0 and not declared_root:
                    raise ReconstructionError(
                        f"找不到父记录: {doc.tag}", tag=doc.tag, reason="missing_parent"
                    )
                if doc.node_depth != 0:
                    logger.warning(f"记录 {doc.tag} 找不到父记录，作为根节点处理")
                    nodes[doc.tag].node_depth = 0
                roots.append(doc.tag)
                continue

            nodes[parent.tag].append(nodes[doc.tag])

        if strict and len(roots) > 1:
            raise ReconstructionError(
                f"存在多个根节点: {roots}", tag=roots[1], reason="multiple_roots"
            )

        # 每棵树从根重新编号一次，孤立根节点也得到有效编码
        for tag in roots:
            nodes[tag].rebuild()

        logger.info(f"重建完成: 记录数={len(documents)}, 根节点数={len(roots)}")
        return nodes

    @staticmethod
    def _find_parent(doc: NestedSetRecord, documents: List[NestedSetRecord]) -> Optional[NestedSetRecord]:
        """逐条扫描，找区间严格包含 doc 且深度少一的记录"""
        for other in documents:
            if other.contains(doc) and other.node_depth == doc.node_depth - 1:
                return other
        return None
