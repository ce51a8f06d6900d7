"""
DataFrame 导入器
把一张嵌套集合表（每行一条记录）转换为扁平记录
"""
import logging
from typing import Dict, List, Any, Optional

import pandas as pd

from .base_importer import DataImporter
from ...core.node.record import NestedSetRecord, RECORD_FIELDS
from ...config.validator import REQUIRED_RECORD_FIELDS
from ...exceptions import DataImportError, ValidationError

logger = logging.getLogger(__name__)


class FrameImporter(DataImporter):
    """
    DataFrame 导入器

    功能：
    1. 检查必需列（tag, node_left, node_right, node_depth）
    2. 把 NaN 转为 None，数值列转为 int
    3. 生成 NestedSetRecord 列表，可直接交给 NodeFactory.to_nested

    配置：
    - column_map: 来源列名 -> 记录字段名，用于改名后的表
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.column_map: Dict[str, str] = self.config.get('column_map', {})

        # 统计信息
        self.stats = {
            'frames_processed': 0,
            'rows_parsed': 0,
            'records_created': 0
        }

    def _validate_config(self):
        column_map = self.config.get('column_map', {})
        unknown = [target for target in column_map.values() if target not in RECORD_FIELDS]
        if unknown:
            raise DataImportError(f"列映射指向未知字段: {unknown}", source="config")

    def validate_source(self, source: Any) -> bool:
        """来源必须是包含全部必需列的 DataFrame"""
        if not isinstance(source, pd.DataFrame):
            return False

        columns = set(source.rename(columns=self.column_map).columns)
        missing = [field for field in REQUIRED_RECORD_FIELDS if field not in columns]
        if missing:
            logger.warning(f"DataFrame 缺少必需列: {missing}")
            return False
        return True

    def parse_data(self, source: pd.DataFrame) -> List[Dict[str, Any]]:
        """逐行解析，只保留记录字段"""
        frame = source.rename(columns=self.column_map)
        columns = [field for field in RECORD_FIELDS if field in frame.columns]

        rows = []
        for idx, row in frame[columns].iterrows():
            parsed = {}
            for field in columns:
                value = row[field]
                parsed[field] = None if pd.isna(value) else value
            parsed['_row_index'] = idx
            rows.append(parsed)

        self.stats['frames_processed'] += 1
        self.stats['rows_parsed'] += len(rows)
        return rows

    def convert_to_records(self, data: List[Dict[str, Any]]) -> List[NestedSetRecord]:
        """转换为扁平记录，出错时指明行号"""
        records = []
        for row in data:
            row_index = row.pop('_row_index', None)
            try:
                records.append(NestedSetRecord.from_dict(row))
            except ValidationError as e:
                raise DataImportError(f"第 {row_index} 行无效: {e.message}", source=str(row_index))

        self.stats['records_created'] += len(records)
        logger.info(f"DataFrame 导入完成: {len(records)} 条记录")
        return records
