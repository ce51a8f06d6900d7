"""
嵌套集合树异常体系
"""
from datetime import datetime
from typing import Dict, Any, Optional


class BaseError(Exception):
    """所有异常的基类"""
    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.context = context or {}
        self.timestamp = datetime.now()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典，便于序列化"""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# ==================== 配置和验证异常 ====================
class ConfigError(BaseError):
    """配置错误"""
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details, **kwargs)


class ValidationError(BaseError):
    """数据验证错误"""
    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        reason: Optional[str] = None,
        **kwargs
    ):
        details = {
            "field": field,
            "value": value,
            "reason": reason
        }
        super().__init__(message, code="VALIDATION_ERROR", details=details, **kwargs)


# ==================== 树结构相关异常 ====================
class TreeError(BaseError):
    """树结构错误基类"""
    pass


class TreeNotFoundError(TreeError):
    """树不存在"""
    def __init__(self, tree_id: str, **kwargs):
        super().__init__(
            message=f"树不存在: {tree_id}",
            code="TREE_NOT_FOUND",
            details={"tree_id": tree_id},
            **kwargs
        )


class NodeError(TreeError):
    """节点操作错误"""
    pass


class NodeNotFoundError(NodeError):
    """节点不存在"""
    def __init__(self, tag: Optional[str] = None, **kwargs):
        details = {"tag": tag} if tag else {}
        message = "节点不存在"
        if tag:
            message += f": tag={tag}"
        super().__init__(message, code="NODE_NOT_FOUND", details=details, **kwargs)


class TreeCycleError(NodeError):
    """插入操作会使节点成为自己的祖先"""
    def __init__(self, parent_tag: Optional[str] = None, child_tag: Optional[str] = None, **kwargs):
        super().__init__(
            message=f"不能把节点挂到自身或其后代之下: parent={parent_tag}, child={child_tag}",
            code="TREE_CYCLE",
            details={"parent_tag": parent_tag, "child_tag": child_tag},
            **kwargs
        )


class InvariantViolationError(TreeError):
    """
    嵌套集合不变式被破坏

    details 中携带出错节点的 tag 和被违反的不变式名称。
    """
    def __init__(self, message: str, tag: Optional[str] = None, invariant: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            code="INVARIANT_VIOLATION",
            details={"tag": tag, "invariant": invariant},
            **kwargs
        )

    @property
    def tag(self) -> Optional[str]:
        return self.details.get("tag")

    @property
    def invariant(self) -> Optional[str]:
        return self.details.get("invariant")


class ReconstructionError(TreeError):
    """从扁平记录重建树失败"""
    def __init__(self, message: str, tag: Optional[str] = None, reason: Optional[str] = None, **kwargs):
        super().__init__(
            message=f"重建失败: {message}",
            code="RECONSTRUCTION_ERROR",
            details={"tag": tag, "reason": reason},
            **kwargs
        )


# ==================== 导入相关异常 ====================
class DataImportError(BaseError):
    """导入过程异常"""
    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        super().__init__(
            message=f"导入失败: {message}",
            code="DATA_IMPORT_ERROR",
            details={"source": source},
            **kwargs
        )
