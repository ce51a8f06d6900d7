"""
导入导出模块
扁平记录与 pandas DataFrame 之间的转换
"""

from .base_importer import DataImporter
from .frame_importer import FrameImporter
from .frame_exporter import records_to_frame, frame_descendants, frame_ancestors

__all__ = [
    'DataImporter',
    'FrameImporter',
    'records_to_frame',
    'frame_descendants',
    'frame_ancestors',
]
