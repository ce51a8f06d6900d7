"""
嵌套集合树系统主入口
集成配置、日志、节点工厂和节点仓库，按 tree_id 管理多棵树
"""

import logging
from typing import Dict, List, Optional, Any, Iterable, Union, Mapping
from datetime import datetime

import pandas as pd

from .exceptions import TreeError, TreeNotFoundError, ReconstructionError
from .config.settings import TreeSettings
from .config.validator import ConfigValidator
from .core.node import NodeFactory, NodeRepository, TreeNode, NestedSetRecord
from .services.import_export import FrameImporter, records_to_frame


class NestedSetSystem:
    """
    嵌套集合树系统主类
    集成所有模块，提供完整的管理接口
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        初始化系统

        Args:
            config: 系统配置字典
        """
        self.validator = ConfigValidator()
        if config:
            self.validator.validate_system_config(config)

        # 加载配置
        self.settings = TreeSettings.from_dict(config) if config else TreeSettings()

        # 初始化日志
        self._setup_logging()
        self.logger = logging.getLogger(__name__)

        # 核心组件
        self._node_factory = NodeFactory(root_tag=self.settings.root_tag)

        # 数据容器
        self._trees: Dict[str, NodeRepository] = {}  # tree_id -> NodeRepository
        self._tree_metadata: Dict[str, Dict[str, Any]] = {}

        self._start_time = datetime.now()

        self.logger.info(f"{self.settings.system_name} 初始化完成")

    def _setup_logging(self):
        """配置日志系统"""
        if not self.settings.enable_logging:
            return

        handlers: List[logging.Handler] = [logging.StreamHandler()]
        if self.settings.log_file:
            handlers.append(logging.FileHandler(self.settings.log_file, encoding='utf-8'))

        logging.basicConfig(
            level=getattr(logging, self.settings.log_level),
            format=self.settings.log_format,
            handlers=handlers
        )

    @property
    def name(self) -> str:
        return self.settings.system_name

    @property
    def version(self) -> str:
        return self.settings.version

    # ========== 树管理 ==========

    def create_tree(self, tree_id: str, title: str, type: str = "", **fields) -> Dict[str, Any]:
        """
        创建只有根节点的新树

        Args:
            tree_id: 树ID（唯一标识）
            title: 根节点标题
            type: 根节点类型
            **fields: 根节点的其他记录字段（uuid, created_by ...）

        Returns:
            创建结果
        """
        if tree_id in self._trees:
            raise TreeError(f"树已存在: {tree_id}", code="TREE_EXISTS", details={"tree_id": tree_id})

        root = self._node_factory.create_root_node(title, type, **fields)
        self._register_tree(tree_id, NodeRepository(root))

        self.logger.info(f"创建树成功: {tree_id} ({title})")

        return {
            "success": True,
            "tree_id": tree_id,
            "root_node": root.to_dict(),
            "created_at": self._tree_metadata[tree_id]["created_at"]
        }

    def _register_tree(self, tree_id: str, repository: NodeRepository) -> None:
        self._trees[tree_id] = repository
        self._tree_metadata[tree_id] = {
            "id": tree_id,
            "created_at": datetime.now().isoformat(),
            "root_tag": repository.root.tag if repository.root is not None else None,
        }

    def get_tree(self, tree_id: str) -> NodeRepository:
        """获取树仓库"""
        if tree_id not in self._trees:
            raise TreeNotFoundError(tree_id=tree_id)
        return self._trees[tree_id]

    def delete_tree(self, tree_id: str) -> Dict[str, Any]:
        """删除树"""
        if tree_id not in self._trees:
            raise TreeNotFoundError(tree_id=tree_id)

        del self._trees[tree_id]
        del self._tree_metadata[tree_id]

        self.logger.info(f"删除树成功: {tree_id}")

        return {
            "success": True,
            "tree_id": tree_id,
            "deleted_at": datetime.now().isoformat()
        }

    def list_trees(self) -> List[Dict[str, Any]]:
        """列出所有树"""
        trees = []
        for tree_id, metadata in self._tree_metadata.items():
            repo = self._trees[tree_id]
            trees.append({
                "tree_id": tree_id,
                "created_at": metadata["created_at"],
                "root_tag": metadata["root_tag"],
                "node_count": repo.get_node_count(),
                "tree_depth": repo.get_tree_depth()
            })
        return trees

    # ========== 节点管理 ==========

    def add_node(
            self,
            tree_id: str,
            parent_tag: str,
            title: str,
            type: str = "",
            tag: Optional[str] = None,
            prepend: bool = False,
            **fields
    ) -> TreeNode:
        """
        在 parent_tag 下创建子节点

        Raises:
            TreeNotFoundError: 树不存在
            NodeNotFoundError: 父节点不存在
            TreeError: 标签已存在
            ValidationError: 标签是保留的根标签
        """
        repository = self.get_tree(tree_id)
        parent = repository.require_node(parent_tag)
        repository.ensure_tag_available(tag)

        node = self._node_factory.create_child_node(parent, title, type, tag=tag, prepend=prepend, **fields)
        repository.reindex()
        self._after_mutation(repository)

        self.logger.info(f"添加节点成功: {node.tag} 到树 {tree_id}")
        return node

    def move_node(self, tree_id: str, tag: str, parent_tag: str, prepend: bool = False) -> TreeNode:
        """把节点连同子树移动到 parent_tag 下"""
        repository = self.get_tree(tree_id)
        node = repository.require_node(tag)
        repository.add_node(node, parent_tag, prepend=prepend)
        self._after_mutation(repository)
        return node

    def remove_node(self, tree_id: str, tag: str) -> TreeNode:
        """移除节点及其子树，返回被摘下的节点"""
        repository = self.get_tree(tree_id)
        node = repository.remove_node(tag)
        self._after_mutation(repository)

        self.logger.info(f"移除节点成功: {tag} 从树 {tree_id}")
        return node

    def _after_mutation(self, repository: NodeRepository) -> None:
        if self.settings.verify_after_mutation:
            repository.verify()

    # ========== 扁平化与重建 ==========

    def load_tree(
            self,
            tree_id: str,
            records: Iterable[Union[NestedSetRecord, Mapping[str, Any]]],
            strict: Optional[bool] = None
    ) -> NodeRepository:
        """
        从扁平记录重建一棵树并注册

        Args:
            tree_id: 树ID
            records: 扁平记录
            strict: 严格模式，默认取 settings.strict_reconstruction

        Raises:
            ReconstructionError: 记录为空，或重建出多个根节点
        """
        if tree_id in self._trees:
            raise TreeError(f"树已存在: {tree_id}", code="TREE_EXISTS", details={"tree_id": tree_id})

        if strict is None:
            strict = self.settings.strict_reconstruction

        nodes = self._node_factory.to_nested(records, strict=strict)
        roots = [node for node in nodes.values() if node.is_root()]
        if len(roots) != 1:
            raise ReconstructionError(
                f"一棵树需要恰好一个根节点，实际为 {len(roots)}", reason="root_count"
            )

        repository = NodeRepository(roots[0])
        self._register_tree(tree_id, repository)

        self.logger.info(f"加载树成功: {tree_id}, 节点数={len(nodes)}")
        return repository

    def flatten_tree(self, tree_id: str) -> List[NestedSetRecord]:
        """输出扁平记录，verify_on_flatten 打开时先做整树校验"""
        repository = self.get_tree(tree_id)
        records = repository.flat()
        if self.settings.verify_on_flatten:
            repository.verify()
        return records

    def validate_tree(self, tree_id: str) -> Dict[str, Any]:
        """
        整树检查，返回报告（不抛异常）

        Returns:
            {'valid': bool, 'violations': [...]}
        """
        violations = self.get_tree(tree_id).check()
        return {
            "tree_id": tree_id,
            "valid": not violations,
            "violations": [
                {"tag": v.tag, "invariant": v.invariant, "message": v.message}
                for v in violations
            ]
        }

    # ========== 表格 ==========

    def export_frame(self, tree_id: str) -> pd.DataFrame:
        """把树扁平化为 DataFrame"""
        return records_to_frame(self.flatten_tree(tree_id))

    def import_frame(
            self,
            tree_id: str,
            frame: pd.DataFrame,
            column_map: Optional[Dict[str, str]] = None,
            strict: Optional[bool] = None
    ) -> NodeRepository:
        """从 DataFrame 导入一棵树"""
        importer = FrameImporter({'column_map': column_map or {}})
        records = importer.import_data(frame)
        return self.load_tree(tree_id, records, strict=strict)

    # ========== 系统状态 ==========

    def get_stats(self) -> Dict[str, Any]:
        """获取系统信息"""
        return {
            "system_name": self.settings.system_name,
            "version": self.settings.version,
            "start_time": self._start_time.isoformat(),
            "tree_count": len(self._trees),
            "total_nodes": sum(repo.get_node_count() for repo in self._trees.values()),
            "settings": self.settings.to_dict()
        }

    def __repr__(self) -> str:
        return f"NestedSetSystem(trees={len(self._trees)})"
