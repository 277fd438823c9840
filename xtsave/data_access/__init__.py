# -*- coding: utf-8 -*-
"""
数据访问层
提供对nf_tables/xt_tables规则状态的访问接口
"""

from .rule_store import RuleStore, MemoryRuleStore
from .nftables_store import NftablesStore
from .xtables_store import XtablesStore
from .store_adapter import open_store

__all__ = [
    'RuleStore',
    'MemoryRuleStore',
    'NftablesStore',
    'XtablesStore',
    'open_store',
]
