# -*- coding: utf-8 -*-
"""
nf_tables规则存储
通过nft命令的JSON输出读取规则状态，支持ip/ip6/bridge/arp四个规则族
无法翻译为旧版保存格式的表标记为不兼容
"""

import json
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from xtsave.data_access.nft_translator import NftRuleTranslator, UnsupportedExpression
from xtsave.data_access.rule_store import RuleStore
from xtsave.models.catalog import builtin_chains
from xtsave.models.rule_models import ChainDescriptor, Family, RuleEntry, TableState
from xtsave.infrastructure.error_handler import IncompatibleTableError, StoreInitError, handle_store_error
from xtsave.infrastructure.logger import logger


Runner = Callable[[List[str]], str]

_INCOMPATIBLE_OBJECTS = ('set', 'map', 'flowtable', 'element', 'counter', 'quota', 'limit', 'ct helper')


class NftablesStore(RuleStore):
    """nf_tables规则存储"""

    backend_name = "nf_tables"

    def __init__(
        self,
        family: Family,
        nft_cmd: str = 'nft',
        timeout: int = 30,
        proc_root: str = '/proc',
        runner: Optional[Runner] = None
    ):
        """
        初始化nf_tables存储，并检查nft命令是否可用

        Args:
            family: 规则族
            nft_cmd: nft命令路径
            timeout: 命令超时时间（秒）
            proc_root: proc文件系统根目录，用于检测旧版xtables表
            runner: 执行nft命令并返回标准输出的函数，默认使用subprocess

        Raises:
            StoreInitError: nft命令不可用或执行失败
        """
        super().__init__(family)
        self.nft_cmd = nft_cmd
        self.timeout = timeout
        self.proc_root = Path(proc_root)
        self._runner = runner or self._run_nft
        self._translator = NftRuleTranslator(family)
        self._table_cache: Dict[str, TableState] = {}
        self._incompatible_reasons: Dict[str, str] = {}

        try:
            self._tables = self._fetch_tables()
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            raise StoreInitError(str(e)) from e

        logger.info(f"nf_tables存储初始化成功，规则族: {family.value}，表: {self._tables}")

    def _run_nft(self, args: List[str]) -> str:
        """执行nft命令，返回标准输出"""
        cmd = [self.nft_cmd, '-j'] + args
        logger.debug(f"执行命令: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.error(f"nft命令超时: {' '.join(cmd)}")
            raise
        except subprocess.CalledProcessError as e:
            logger.error(f"nft命令执行失败: {e.stderr}")
            raise
        return result.stdout

    def _query(self, args: List[str]) -> List[Dict[str, Any]]:
        """执行查询并返回nftables对象列表"""
        output = self._runner(args)
        if not output.strip():
            return []
        return json.loads(output).get('nftables', [])

    def _fetch_tables(self) -> List[str]:
        """获取当前规则族下存在的表"""
        tables = []
        for nft_obj in self._query(['list', 'tables']):
            table = nft_obj.get('table')
            if table and table.get('family') == self.family.value:
                tables.append(table['name'])
        return tables

    def list_tables(self) -> List[str]:
        return list(self._tables)

    @handle_store_error
    def is_compatible(self, table_name: str) -> bool:
        if table_name not in self._tables:
            return True
        return self._load_table(table_name).compatible

    @handle_store_error
    def get_chains(self, table_name: str) -> List[ChainDescriptor]:
        if table_name not in self._tables:
            return self._placeholder_chains(table_name)
        return list(self._compatible_table(table_name).chains)

    @handle_store_error
    def get_rules(self, table_name: str, chain_name: str) -> List[RuleEntry]:
        if table_name not in self._tables:
            return []
        return self._compatible_table(table_name).rules_of(chain_name)

    def _compatible_table(self, table_name: str) -> TableState:
        """读取表，不兼容时抛出IncompatibleTableError"""
        state = self._load_table(table_name)
        if not state.compatible:
            raise IncompatibleTableError(table_name, self._incompatible_reasons.get(table_name, ""))
        return state

    def _load_table(self, table_name: str) -> TableState:
        """读取并解析整张表，结果缓存"""
        if table_name in self._table_cache:
            return self._table_cache[table_name]

        state = TableState(name=table_name)
        nft_objects = self._query(['list', 'table', self.family.value, table_name])
        self._parse_table(nft_objects, state)
        self._table_cache[table_name] = state

        logger.info(f"成功解析表 {table_name}，链: {len(state.chains)}，规则: {len(state.rules)}，"
                    f"兼容: {state.compatible}")
        return state

    def _parse_table(self, nft_objects: List[Dict[str, Any]], state: TableState):
        """解析表的nft JSON对象"""
        allowed_chains = builtin_chains(self.family, state.name) or ()

        for nft_obj in nft_objects:
            if 'chain' in nft_obj:
                chain = nft_obj['chain']
                if 'hook' in chain and chain['name'] not in allowed_chains:
                    self._mark_incompatible(state, f"基础链 {chain['name']} 不是内置链")
                state.chains.append(self._parse_chain(chain))

            elif 'rule' in nft_obj:
                try:
                    state.rules.append(self._translator.translate(nft_obj['rule']))
                except (UnsupportedExpression, KeyError, TypeError, ValueError) as e:
                    self._mark_incompatible(state, f"无法表示的规则: {e}")

            elif any(key in nft_obj for key in _INCOMPATIBLE_OBJECTS):
                self._mark_incompatible(state, f"无法表示的对象: {list(nft_obj)}")

    def _mark_incompatible(self, state: TableState, reason: str):
        logger.info(f"表 {state.name} 不兼容: {reason}")
        state.compatible = False
        self._incompatible_reasons.setdefault(state.name, reason)

    def _parse_chain(self, chain: Dict[str, Any]) -> ChainDescriptor:
        """解析链对象，基础链带默认策略，用户链策略为None"""
        policy = None
        if 'hook' in chain:
            policy = str(chain.get('policy', 'accept')).upper()
        return ChainDescriptor(name=chain['name'], policy=policy)

    def legacy_tables_warning(self) -> Optional[str]:
        """检测旧版xtables表是否存在"""
        if not self.family.is_inet:
            return None

        prefix = 'ip6' if self.family is Family.IPV6 else 'ip'
        names_file = self.proc_root / 'net' / f'{prefix}_tables_names'
        try:
            content = names_file.read_text()
        except OSError:
            return None
        if not content.strip():
            return None
        return (f"# Warning: {prefix}tables-legacy tables present, "
                f"use {prefix}tables-legacy-save to see them")
