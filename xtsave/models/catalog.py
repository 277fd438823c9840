# -*- coding: utf-8 -*-
"""
内置表目录
按规则族定义内置表及其内置链，顺序即导出顺序
"""

from typing import Dict, List, Optional, Tuple

from xtsave.models.rule_models import Family


_INET_TABLES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('mangle', ('PREROUTING', 'INPUT', 'FORWARD', 'OUTPUT', 'POSTROUTING')),
    ('security', ('INPUT', 'FORWARD', 'OUTPUT')),
    ('raw', ('PREROUTING', 'OUTPUT')),
    ('filter', ('INPUT', 'FORWARD', 'OUTPUT')),
    ('nat', ('PREROUTING', 'INPUT', 'OUTPUT', 'POSTROUTING')),
)

_BRIDGE_TABLES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('filter', ('INPUT', 'FORWARD', 'OUTPUT')),
    ('nat', ('PREROUTING', 'OUTPUT', 'POSTROUTING')),
    ('broute', ('BROUTING',)),
)

_ARP_TABLES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ('filter', ('INPUT', 'OUTPUT')),
)

BUILTIN_TABLES: Dict[Family, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    Family.IPV4: _INET_TABLES,
    Family.IPV6: _INET_TABLES,
    Family.BRIDGE: _BRIDGE_TABLES,
    Family.ARP: _ARP_TABLES,
}


def builtin_table_names(family: Family) -> List[str]:
    """获取规则族的内置表名列表（目录顺序）"""
    return [name for name, _ in BUILTIN_TABLES[family]]


def is_builtin_table(family: Family, table_name: str) -> bool:
    """检查是否为内置表"""
    return table_name in builtin_table_names(family)


def builtin_chains(family: Family, table_name: str) -> Optional[Tuple[str, ...]]:
    """获取内置表的内置链，非内置表返回None"""
    for name, chains in BUILTIN_TABLES[family]:
        if name == table_name:
            return chains
    return None
