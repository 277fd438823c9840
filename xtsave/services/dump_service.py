# -*- coding: utf-8 -*-
"""
导出服务
按规则族配置驱动一次完整的导出：初始化后端、确定表、逐表输出、汇总结果
"""

import sys
import time
from collections import Counter
from typing import Callable, IO, List, Optional

from xtsave.data_access.rule_store import RuleStore
from xtsave.engine.format_policy import resolve
from xtsave.engine.snapshot_emitter import SnapshotEmitter
from xtsave.engine.table_iterator import TableIterator
from xtsave.infrastructure.config import VERSION
from xtsave.infrastructure.error_handler import StoreError, StoreInitError, TableNotFoundError
from xtsave.infrastructure.logger import logger
from xtsave.infrastructure.output_sink import OutputSink
from xtsave.models.rule_models import DumpFormatFlags, DumpOutcome, DumpRequest, Family
from xtsave.services.family_profiles import FamilyProfile, MissingTablePolicy


class DumpOrchestrator:
    """导出流程调度器"""

    def __init__(
        self,
        profile: FamilyProfile,
        store_factory: Callable[[Family], RuleStore],
        sink: OutputSink,
        err: Optional[IO[str]] = None,
        program_name: str = "xtsave",
        version: str = VERSION,
        clock: Callable[[], float] = time.time
    ):
        """
        初始化调度器

        Args:
            profile: 规则族配置
            store_factory: 按规则族打开规则存储的函数
            sink: 已获取的输出目标
            err: 错误信息输出流，默认为标准错误
            program_name: 程序名，写入生成信息
            version: 程序版本
            clock: 时间函数
        """
        self.profile = profile
        self.store_factory = store_factory
        self.sink = sink
        self.err = err
        self.program_name = program_name
        self.version = version
        self.clock = clock
        self.outcomes: List[DumpOutcome] = []

    def run(self, request: DumpRequest) -> int:
        """
        执行导出

        Returns:
            退出码：0成功，1失败

        Raises:
            OutputError: 输出目标写入失败
        """
        flags = resolve(request.counters, request.legacy_counters)
        self.outcomes = []
        logger.info(f"开始导出，规则族: {request.family.value}，表: {request.table_name or '全部'}，"
                    f"格式: {flags}")

        try:
            store = self.store_factory(request.family)
        except StoreInitError as e:
            logger.error(f"后端初始化失败: {e}")
            self._error(f"{self.program_name}/{self.version} Failed to initialize nft: {e}")
            return 1

        try:
            failed = self._dump(store, request, flags)
            # 指定的表不存在时不检查旧版表
            if self.profile.check_legacy_tables and DumpOutcome.NOT_FOUND not in self.outcomes:
                warning = store.legacy_tables_warning()
                if warning:
                    self._error(warning)
        finally:
            store.close()

        if request.dump:
            return 0
        return 1 if failed else 0

    def _dump(self, store: RuleStore, request: DumpRequest, flags: DumpFormatFlags) -> bool:
        """逐表导出，返回是否有失败"""
        try:
            tables = TableIterator(store, self.profile).enumerate(request)
        except TableNotFoundError as e:
            logger.info(f"指定的表不存在: {e.table_name}")
            self._error(str(e))
            self.outcomes.append(DumpOutcome.NOT_FOUND)
            return self.profile.missing_table_policy is MissingTablePolicy.FATAL
        except StoreError as e:
            self._error(f"{self.program_name}: {e}")
            return True

        emitter = SnapshotEmitter(store, self.sink, self.program_name, self.version, self.clock)
        failed = False
        for table in tables:
            try:
                self.outcomes.append(emitter.emit(table, flags))
            except StoreError as e:
                # 单表失败不影响其他表
                logger.error(f"表 {table.name} 导出失败: {e}")
                self._error(f"{self.program_name}: {e}")
                failed = True

        summary = Counter(outcome.value for outcome in self.outcomes)
        logger.info(f"导出完成: {dict(summary)}")
        return failed

    def _error(self, message: str):
        stream = self.err or sys.stderr
        stream.write(f"{message}\n")
        stream.flush()
