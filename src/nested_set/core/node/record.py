"""
扁平记录模块
定义一个节点持久化后的形状：身份字段、(left, right, depth) 三元组和审计元数据
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any, Mapping, Tuple

from ...config.validator import ConfigValidator


# 记录的字段顺序（也是导出表格时的列顺序）
RECORD_FIELDS = (
    'uuid',
    'org_uuid',
    'title',
    'tag',
    'node_left',
    'node_right',
    'node_depth',
    'type',
    'created_by',
    'updated_by',
    'created_at',
    'updated_at',
    'deleted_by',
    'deleted_at',
)


@dataclass
class NestedSetRecord:
    """
    扁平记录 - 与存储无关的纯数据

    uuid 在持久化之前为 None，由存储层填写。
    审计字段（created_by ... deleted_at）原样透传，核心不做解释。
    """

    tag: str
    node_left: int
    node_right: int
    node_depth: int
    title: str = ""
    type: str = ""
    uuid: Optional[str] = None
    org_uuid: Optional[str] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None
    created_at: Optional[Any] = None
    updated_at: Optional[Any] = None
    deleted_by: Optional[str] = None
    deleted_at: Optional[Any] = None

    def span(self) -> Tuple[int, int]:
        """返回 (left, right) 区间"""
        return self.node_left, self.node_right

    def contains(self, other: 'NestedSetRecord') -> bool:
        """other 的区间是否严格位于本记录区间之内"""
        return self.node_left < other.node_left and other.node_right < self.node_right

    def to_dict(self) -> Dict[str, Any]:
        """按 RECORD_FIELDS 顺序转换为字典"""
        data = asdict(self)
        return {field: data[field] for field in RECORD_FIELDS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'NestedSetRecord':
        """
        从字典创建记录

        未知键被忽略，缺失的可选字段为 None。

        Raises:
            ValidationError: 缺少 tag / node_left / node_right / node_depth 或区间非法
        """
        validated = ConfigValidator().validate_record_dict(data)
        values = {field: validated.get(field) for field in RECORD_FIELDS}
        values['tag'] = str(values['tag'])
        if values['title'] is None:
            values['title'] = ""
        if values['type'] is None:
            values['type'] = ""
        return cls(**values)

    def validate(self) -> 'NestedSetRecord':
        """
        按 from_dict 的规则检查本记录

        Raises:
            ValidationError: 区间或深度非法
        """
        ConfigValidator().validate_record_dict(self.to_dict())
        return self
