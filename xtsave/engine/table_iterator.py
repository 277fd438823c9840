# -*- coding: utf-8 -*-
"""
表迭代器
确定一次导出需要访问的表及其顺序
"""

from typing import List

from xtsave.data_access.rule_store import RuleStore
from xtsave.models.catalog import builtin_table_names, is_builtin_table
from xtsave.models.rule_models import DumpRequest, TableDescriptor
from xtsave.infrastructure.error_handler import TableNotFoundError
from xtsave.infrastructure.logger import logger


class TableIterator:
    """表迭代器"""

    def __init__(self, store: RuleStore, profile):
        """
        Args:
            store: 规则存储
            profile: 规则族配置（FamilyProfile）
        """
        self.store = store
        self.profile = profile

    def enumerate(self, request: DumpRequest) -> List[TableDescriptor]:
        """
        获取需要导出的表

        Raises:
            TableNotFoundError: 指定的表不存在
        """
        family = request.family

        if self.profile.fixed_table:
            # 固定表规则族：不枚举目录，表不存在即无事可做
            name = self.profile.fixed_table
            if not self.store.table_exists(name):
                logger.info(f"表 {name} 不存在，无需导出")
                return []
            return [TableDescriptor(name, family, is_builtin_table(family, name))]

        if request.table_name:
            return [self._lookup(request)]

        tables = [
            TableDescriptor(name, family, True)
            for name in builtin_table_names(family)
            if self.store.table_exists(name)
        ]
        logger.info(f"规则族 {family.value} 待导出的表: {[t.name for t in tables]}")
        return tables

    def _lookup(self, request: DumpRequest) -> TableDescriptor:
        """按名称查找表"""
        name = request.table_name
        builtin = is_builtin_table(request.family, name)

        if self.store.table_exists(name):
            return TableDescriptor(name, request.family, builtin)
        if builtin and self.profile.builtin_tables_always_known:
            logger.debug(f"内置表 {name} 尚未创建，按空表导出")
            return TableDescriptor(name, request.family, True)

        raise TableNotFoundError(name)
