# -*- coding: utf-8 -*-
"""
导出引擎
格式策略、表迭代器和快照输出器
"""

from .format_policy import resolve
from .table_iterator import TableIterator
from .snapshot_emitter import SnapshotEmitter, INCOMPATIBLE_NOTICE

__all__ = [
    'resolve',
    'TableIterator',
    'SnapshotEmitter',
    'INCOMPATIBLE_NOTICE',
]
