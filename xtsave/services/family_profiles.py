# -*- coding: utf-8 -*-
"""
规则族配置
三个前端（过滤/网桥/ARP）共用同一个导出流程，差异全部体现在这里
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from xtsave.models.rule_models import Family


class MissingTablePolicy(Enum):
    """指定表不存在时的处理方式"""
    FATAL = "fatal"   # 报错并返回非零退出码
    SOFT = "soft"     # 报错但视为成功


@dataclass(frozen=True)
class FamilyProfile:
    """规则族配置"""
    name: str
    default_family: Family
    missing_table_policy: MissingTablePolicy = MissingTablePolicy.FATAL
    fixed_table: Optional[str] = None
    builtin_tables_always_known: bool = False
    legacy_counter_env: Optional[str] = None
    supports_table_selector: bool = True
    supports_family_selector: bool = False
    check_legacy_tables: bool = False


FILTER_PROFILE = FamilyProfile(
    name="filter",
    default_family=Family.IPV4,
    missing_table_policy=MissingTablePolicy.FATAL,
    builtin_tables_always_known=True,
    supports_family_selector=True,
    check_legacy_tables=True,
)

BRIDGE_PROFILE = FamilyProfile(
    name="bridge",
    default_family=Family.BRIDGE,
    missing_table_policy=MissingTablePolicy.SOFT,
    legacy_counter_env="EBTABLES_SAVE_COUNTER",
)

ARP_PROFILE = FamilyProfile(
    name="arp",
    default_family=Family.ARP,
    fixed_table="filter",
    supports_table_selector=False,
)


def profile_for(family: Family) -> FamilyProfile:
    """获取规则族对应的配置"""
    if family.is_inet:
        return FILTER_PROFILE
    if family is Family.BRIDGE:
        return BRIDGE_PROFILE
    return ARP_PROFILE
