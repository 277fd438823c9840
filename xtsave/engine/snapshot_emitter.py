# -*- coding: utf-8 -*-
"""
快照输出器
按保存格式输出单张表：生成信息、表标记、链声明、规则、COMMIT、完成信息
"""

import time
from typing import Callable, List

from xtsave.data_access.rule_store import RuleStore
from xtsave.infrastructure.error_handler import IncompatibleTableError
from xtsave.infrastructure.output_sink import OutputSink
from xtsave.models.rule_models import DumpFormatFlags, DumpOutcome, TableDescriptor
from xtsave.utils.format_utils import FormatUtils
from xtsave.infrastructure.logger import logger


INCOMPATIBLE_NOTICE = "# Table '{name}' is incompatible, use 'nft' tool."


class SnapshotEmitter:
    """快照输出器"""

    def __init__(
        self,
        store: RuleStore,
        sink: OutputSink,
        program_name: str,
        version: str,
        clock: Callable[[], float] = time.time
    ):
        self.store = store
        self.sink = sink
        self.program_name = program_name
        self.version = version
        self.clock = clock

    def emit(self, table: TableDescriptor, flags: DumpFormatFlags) -> DumpOutcome:
        """
        输出一张表的快照

        整张表的内容先在内存中组装，再一次写入输出目标，
        后端中途出错时不会留下半张表。

        Args:
            table: 表描述符
            flags: 导出格式标志

        Returns:
            DumpOutcome
        """
        if not self.store.is_compatible(table.name):
            return self._skip(table)

        lines = [
            f"# Generated by {self.program_name} v{self.version} on {FormatUtils.format_timestamp(self.clock())}",
            f"*{table.name}",
        ]

        try:
            # 先输出全部链声明，规则中引用的链必须已声明
            chains = self.store.get_chains(table.name)
            lines.extend(self.store.render_chain(chain, flags) for chain in chains)
            lines.extend(self._rule_lines(table, [chain.name for chain in chains], flags))
        except IncompatibleTableError as e:
            logger.debug(f"读取过程中发现不兼容: {e}")
            return self._skip(table)

        lines.append("COMMIT")
        lines.append(f"# Completed on {FormatUtils.format_timestamp(self.clock())}")

        self.sink.write_lines(lines)
        logger.debug(f"表 {table.name} 输出完成，共 {len(lines)} 行")
        return DumpOutcome.EMITTED

    def _skip(self, table: TableDescriptor) -> DumpOutcome:
        logger.info(f"表 {table.name} 不兼容旧版保存格式，跳过")
        self.sink.write_lines([INCOMPATIBLE_NOTICE.format(name=table.name)])
        return DumpOutcome.SKIPPED_INCOMPATIBLE

    def _rule_lines(self, table: TableDescriptor, chain_names: List[str], flags: DumpFormatFlags) -> List[str]:
        """按链声明顺序输出规则"""
        lines = []
        for chain_name in chain_names:
            for rule in self.store.get_rules(table.name, chain_name):
                lines.append(self.store.render_rule(rule, flags))
        return lines
