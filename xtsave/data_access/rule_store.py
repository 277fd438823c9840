# -*- coding: utf-8 -*-
"""
规则后端存储接口
定义导出引擎使用的后端能力：表目录、兼容性检查、链/规则读取和行渲染
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from xtsave.models.catalog import builtin_chains
from xtsave.models.rule_models import (
    ChainDescriptor, DumpFormatFlags, Family, RuleEntry, TableState,
)
from xtsave.utils.format_utils import FormatUtils
from xtsave.infrastructure.error_handler import IncompatibleTableError
from xtsave.infrastructure.logger import logger


class RuleStore(ABC):
    """规则后端存储抽象类"""

    backend_name = "unknown"

    def __init__(self, family: Family):
        """
        初始化后端存储

        Args:
            family: 规则族
        """
        self.family = family
        self.closed = False

    def __enter__(self) -> 'RuleStore':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @abstractmethod
    def list_tables(self) -> List[str]:
        """获取后端中实际存在的表名"""
        pass

    @abstractmethod
    def is_compatible(self, table_name: str) -> bool:
        """表能否用旧版保存格式无损表示"""
        pass

    @abstractmethod
    def get_chains(self, table_name: str) -> List[ChainDescriptor]:
        """获取表的有序链列表"""
        pass

    @abstractmethod
    def get_rules(self, table_name: str, chain_name: str) -> List[RuleEntry]:
        """获取链的有序规则列表"""
        pass

    def table_exists(self, table_name: str) -> bool:
        """检查表是否存在"""
        return table_name in self.list_tables()

    def render_chain(self, chain: ChainDescriptor, flags: DumpFormatFlags) -> str:
        """渲染链声明行，例如 :INPUT ACCEPT [0:0]"""
        line = f":{chain.name} {chain.policy or '-'}"
        if DumpFormatFlags.INCLUDE_COUNTERS in flags:
            line = f"{line} {FormatUtils.format_counters(chain.packets, chain.bytes)}"
        return line

    def render_rule(self, rule: RuleEntry, flags: DumpFormatFlags) -> str:
        """渲染规则行，计数器位置取决于是否使用旧版语法"""
        line = f"-A {rule.chain} {rule.text}" if rule.text else f"-A {rule.chain}"
        if DumpFormatFlags.INCLUDE_COUNTERS not in flags:
            return line
        if DumpFormatFlags.LEGACY_COUNTER_SYNTAX in flags:
            return f"{line} {FormatUtils.format_legacy_counters(rule.packets, rule.bytes)}"
        return f"{FormatUtils.format_counters(rule.packets, rule.bytes)} {line}"

    def legacy_tables_warning(self) -> Optional[str]:
        """存在本后端看不到的旧版表时返回提示信息"""
        return None

    def close(self):
        """释放后端资源"""
        if not self.closed:
            logger.debug(f"{self.__class__.__name__} 已释放")
        self.closed = True

    def _placeholder_chains(self, table_name: str) -> List[ChainDescriptor]:
        """尚未创建的内置表：返回默认策略为ACCEPT的内置链"""
        return [ChainDescriptor(name=name, policy='ACCEPT')
                for name in builtin_chains(self.family, table_name) or ()]


class MemoryRuleStore(RuleStore):
    """内存规则存储，用于嵌入调用和测试"""

    backend_name = "memory"

    def __init__(self, family: Family, tables: Iterable[TableState] = ()):
        super().__init__(family)
        self.tables: Dict[str, TableState] = {table.name: table for table in tables}

    def list_tables(self) -> List[str]:
        return list(self.tables)

    def is_compatible(self, table_name: str) -> bool:
        table = self.tables.get(table_name)
        return table is None or table.compatible

    def get_chains(self, table_name: str) -> List[ChainDescriptor]:
        table = self.tables.get(table_name)
        if table is None:
            return self._placeholder_chains(table_name)
        if not table.compatible:
            raise IncompatibleTableError(table_name)
        return list(table.chains)

    def get_rules(self, table_name: str, chain_name: str) -> List[RuleEntry]:
        table = self.tables.get(table_name)
        if table is None:
            return []
        if not table.compatible:
            raise IncompatibleTableError(table_name)
        return table.rules_of(chain_name)
