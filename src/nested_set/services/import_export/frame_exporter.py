"""
DataFrame 导出与区间查询
扁平记录落表后，祖先/后代关系只需比较左右值
"""
from typing import Iterable, List

import pandas as pd

from ...core.node.record import NestedSetRecord, RECORD_FIELDS
from ...exceptions import NodeNotFoundError


def records_to_frame(records: Iterable[NestedSetRecord]) -> pd.DataFrame:
    """按扁平顺序生成 DataFrame，列顺序为 RECORD_FIELDS"""
    rows: List[dict] = [record.to_dict() for record in records]
    return pd.DataFrame(rows, columns=list(RECORD_FIELDS))


def _locate(frame: pd.DataFrame, tag: str) -> pd.Series:
    matches = frame[frame['tag'] == tag]
    if matches.empty:
        raise NodeNotFoundError(tag=tag)
    return matches.iloc[0]


def frame_descendants(frame: pd.DataFrame, tag: str) -> pd.DataFrame:
    """区间严格落在 tag 区间内的行，按左值排序"""
    node = _locate(frame, tag)
    mask = (frame['node_left'] > node['node_left']) & (frame['node_right'] < node['node_right'])
    return frame[mask].sort_values('node_left')


def frame_ancestors(frame: pd.DataFrame, tag: str) -> pd.DataFrame:
    """区间严格包含 tag 区间的行，从根开始"""
    node = _locate(frame, tag)
    mask = (frame['node_left'] < node['node_left']) & (frame['node_right'] > node['node_right'])
    return frame[mask].sort_values('node_left')
