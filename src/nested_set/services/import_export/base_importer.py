"""
数据导入器基类
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Any, Optional

from ...core.node.record import NestedSetRecord
from ...exceptions import DataImportError


class DataImporter(ABC):
    """数据导入器抽象基类：把某种来源转换为扁平记录列表"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self._validate_config()

    def _validate_config(self):
        """验证配置参数"""
        pass

    @abstractmethod
    def validate_source(self, source: Any) -> bool:
        """验证来源是否可导入"""
        pass

    @abstractmethod
    def parse_data(self, source: Any) -> List[Dict[str, Any]]:
        """解析数据为标准化的记录字典"""
        pass

    @abstractmethod
    def convert_to_records(self, data: List[Dict[str, Any]]) -> List[NestedSetRecord]:
        """将记录字典转换为扁平记录"""
        pass

    def import_data(self, source: Any) -> List[NestedSetRecord]:
        """
        导入数据的完整流程
        1. 验证来源
        2. 解析数据
        3. 转换为扁平记录
        """
        if not self.validate_source(source):
            raise DataImportError("来源验证失败", source=type(source).__name__)

        data = self.parse_data(source)
        return self.convert_to_records(data)
