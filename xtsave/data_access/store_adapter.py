# -*- coding: utf-8 -*-
"""
规则存储适配器
按规则族和配置选择后端，优先使用nf_tables，IPv4/IPv6可降级到xt_tables
"""

from typing import Callable, Optional

from xtsave.data_access.nftables_store import NftablesStore, Runner
from xtsave.data_access.rule_store import RuleStore
from xtsave.data_access.xtables_store import XtablesStore
from xtsave.models.rule_models import Family
from xtsave.infrastructure.config import Config
from xtsave.infrastructure.error_handler import StoreInitError
from xtsave.infrastructure.logger import logger


SUPPORTED_BACKENDS = ("auto", "nftables", "xtables")

StoreFactory = Callable[[Family], RuleStore]


def open_store(family: Family, config: Optional[Config] = None, runner: Optional[Runner] = None) -> RuleStore:
    """
    打开规则族对应的规则存储

    Args:
        family: 规则族
        config: 配置对象，None表示默认配置
        runner: nft命令执行函数（测试用）

    Returns:
        RuleStore对象，调用方负责关闭

    Raises:
        StoreInitError: 没有可用的后端
    """
    config = config or Config()
    preferred = config.get('backend.inet', 'auto') if family.is_inet else 'nftables'
    if preferred not in SUPPORTED_BACKENDS:
        raise StoreInitError(f"不支持的后端类型: {preferred}")

    logger.info(f"规则族 {family.value} 首选后端: {preferred}")

    if preferred == 'xtables':
        return XtablesStore(family)

    try:
        return NftablesStore(
            family,
            nft_cmd=config.get('nftables.command', 'nft'),
            timeout=config.get('nftables.timeout', 30),
            proc_root=config.get('proc_root', '/proc'),
            runner=runner,
        )
    except StoreInitError as original_error:
        if preferred != 'auto':
            raise
        logger.info(f"nf_tables后端不可用，降级到xt_tables: {original_error}")
        try:
            return XtablesStore(family)
        except StoreInitError as fallback_error:
            logger.error(f"降级后端也失败: {fallback_error}")
            raise StoreInitError(
                f"{original_error} (xt_tables: {fallback_error})"
            ) from fallback_error
