# -*- coding: utf-8 -*-
"""
规则数据模型
定义规则族、表、链、规则以及导出请求/结果的数据结构
"""

from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from typing import List, Optional


class Family(Enum):
    """规则族枚举"""
    IPV4 = "ip"
    IPV6 = "ip6"
    BRIDGE = "bridge"
    ARP = "arp"

    @property
    def is_inet(self) -> bool:
        """是否属于IPv4/IPv6过滤规则族"""
        return self in (Family.IPV4, Family.IPV6)


class DumpFormatFlags(Flag):
    """导出格式标志位"""
    NONE = 0
    INCLUDE_COUNTERS = auto()
    LEGACY_COUNTER_SYNTAX = auto()


class DumpOutcome(Enum):
    """单表导出结果"""
    EMITTED = "emitted"
    SKIPPED_INCOMPATIBLE = "skipped_incompatible"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class TableDescriptor:
    """表描述符"""
    name: str
    family: Family
    is_builtin: bool = True


@dataclass
class ChainDescriptor:
    """链描述符，policy为None表示用户自定义链"""
    name: str
    policy: Optional[str] = None
    packets: int = 0
    bytes: int = 0

    @property
    def is_builtin(self) -> bool:
        return self.policy is not None


@dataclass
class RuleEntry:
    """规则条目，text为匹配条件和动作的文本形式（不含链名）"""
    chain: str
    text: str
    packets: int = 0
    bytes: int = 0


@dataclass
class TableState:
    """表状态：有序链列表和按链分组的规则"""
    name: str
    chains: List[ChainDescriptor] = field(default_factory=list)
    rules: List[RuleEntry] = field(default_factory=list)
    compatible: bool = True

    def rules_of(self, chain_name: str) -> List[RuleEntry]:
        """获取指定链的规则，保持原有顺序"""
        return [rule for rule in self.rules if rule.chain == chain_name]


@dataclass(frozen=True)
class DumpRequest:
    """导出请求，由命令行参数构造，整个运行过程中不可变"""
    family: Family
    table_name: Optional[str] = None
    counters: bool = False
    legacy_counters: bool = False
    dump: bool = False
