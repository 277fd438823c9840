# -*- coding: utf-8 -*-
"""
xt_tables规则存储
通过python-iptables(iptc)读取旧版xtables规则，仅支持IPv4/IPv6
"""

from typing import Any, Dict, List

from xtsave.data_access.rule_store import RuleStore
from xtsave.models.catalog import builtin_table_names
from xtsave.models.rule_models import ChainDescriptor, Family, RuleEntry
from xtsave.utils.format_utils import FormatUtils
from xtsave.utils.ip_utils import IPUtils
from xtsave.infrastructure.error_handler import StoreInitError, handle_store_error
from xtsave.infrastructure.logger import logger


_ANY_PROTOCOLS = (None, '', 'ip', 'ipv6', 'all', '0')

_MISSING_TABLE_MARKERS = ("does not exist", "no such file", "insmod")


class XtablesStore(RuleStore):
    """xt_tables规则存储"""

    backend_name = "legacy"

    def __init__(self, family: Family):
        """
        初始化xt_tables存储

        Raises:
            StoreInitError: 规则族不支持，或python-iptables不可用
        """
        super().__init__(family)
        if not family.is_inet:
            raise StoreInitError(f"xt_tables后端不支持规则族: {family.value}")

        try:
            import iptc
        except ImportError as e:
            raise StoreInitError(f"python-iptables库未安装: {e}") from e
        except Exception as e:
            # libiptc共享库缺失时iptc在导入阶段抛出异常
            raise StoreInitError(f"python-iptables初始化失败: {e}") from e

        self._iptc = iptc
        self._table_class = iptc.Table6 if family is Family.IPV6 else iptc.Table
        self._tables: Dict[str, Any] = {}
        self._open_tables()

        logger.info(f"xt_tables存储初始化成功，规则族: {family.value}，表: {list(self._tables)}")

    def _open_tables(self):
        """
        打开内核中可用的内置表

        只有"表不存在"视为表缺失，权限不足等其他错误说明后端无法使用。

        Raises:
            StoreInitError: 无法打开xtables句柄
        """
        for table_name in builtin_table_names(self.family):
            try:
                table = self._table_class(table_name)
                table.autocommit = False
                table.refresh()
            except self._iptc.IPTCError as e:
                if not self._is_missing_table(e):
                    raise StoreInitError(f"无法打开表 {table_name}: {e}") from e
                logger.debug(f"表 {table_name} 不存在: {e}")
                continue
            self._tables[table_name] = table

    @staticmethod
    def _is_missing_table(error: Exception) -> bool:
        """libiptc对未加载的表报告 Table does not exist (do you need to insmod?)"""
        message = str(error).lower()
        return any(marker in message for marker in _MISSING_TABLE_MARKERS)

    def list_tables(self) -> List[str]:
        return list(self._tables)

    def is_compatible(self, table_name: str) -> bool:
        return True

    @handle_store_error
    def get_chains(self, table_name: str) -> List[ChainDescriptor]:
        table = self._tables.get(table_name)
        if table is None:
            return self._placeholder_chains(table_name)

        chains = []
        for chain in table.chains:
            if chain.is_builtin():
                packets, bytes_ = chain.get_counters()
                chains.append(ChainDescriptor(
                    name=chain.name,
                    policy=chain.get_policy().name,
                    packets=packets,
                    bytes=bytes_,
                ))
            else:
                chains.append(ChainDescriptor(name=chain.name))
        return chains

    @handle_store_error
    def get_rules(self, table_name: str, chain_name: str) -> List[RuleEntry]:
        table = self._tables.get(table_name)
        if table is None:
            return []

        chain = self._iptc.Chain(table, chain_name)
        entries = []
        for rule in chain.rules:
            packets, bytes_ = rule.get_counters()
            entries.append(RuleEntry(
                chain=chain_name,
                text=self._format_rule(rule),
                packets=packets,
                bytes=bytes_,
            ))
        return entries

    def _format_rule(self, rule: Any) -> str:
        """将iptc规则格式化为保存格式文本"""
        parts = []

        for option, value in (('-s', rule.src), ('-d', rule.dst)):
            inverted, address = IPUtils.split_inverted(value or '')
            address = IPUtils.format_address(address)
            if address:
                parts.append(f"{FormatUtils.negate(option, inverted)} {address}")

        for option, value in (('-i', rule.in_interface), ('-o', rule.out_interface)):
            if value:
                inverted, name = IPUtils.split_inverted(value)
                parts.append(f"{FormatUtils.negate(option, inverted)} {name}")

        inverted, protocol = IPUtils.split_inverted(rule.protocol or '')
        if protocol not in _ANY_PROTOCOLS:
            parts.append(f"{FormatUtils.negate('-p', inverted)} {protocol}")

        for match in rule.matches:
            parts.append(f"-m {match.name}{self._format_parameters(match.get_all_parameters())}")

        target = rule.target
        if target is not None and target.name:
            jump = '-g' if getattr(target, 'goto', False) else '-j'
            parts.append(f"{jump} {target.name}{self._format_parameters(target.get_all_parameters())}")

        return ' '.join(parts)

    def _format_parameters(self, parameters: Dict[str, List[str]]) -> str:
        """格式化扩展参数，取反参数以 ! 开头"""
        text = ''
        for name, values in parameters.items():
            values = list(values or [])
            inverted = bool(values) and values[0] == '!'
            if inverted:
                values = values[1:]
            option = FormatUtils.negate(f"--{name}", inverted)
            args = ' '.join(FormatUtils.quote_argument(str(v)) for v in values)
            text += f" {option} {args}" if args else f" {option}"
        return text
