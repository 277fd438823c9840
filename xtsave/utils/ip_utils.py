# -*- coding: utf-8 -*-
"""
IP地址处理工具
提供地址/掩码到保存格式的转换
"""

import ipaddress
from typing import Any, Optional, Tuple


class IPUtils:
    """IP地址处理工具类"""

    @staticmethod
    def is_valid_ip(ip: str) -> bool:
        """验证IP地址格式"""
        try:
            ipaddress.ip_address(ip)
            return True
        except ValueError:
            return False

    @staticmethod
    def mask_to_prefix(mask: str) -> Optional[int]:
        """将点分或冒号形式的掩码转换为前缀长度，非连续掩码返回None"""
        if mask.isdigit():
            return int(mask)
        try:
            bits = int(ipaddress.ip_address(mask))
            width = ipaddress.ip_address(mask).max_prefixlen
        except ValueError:
            return None
        prefix = bin(bits).count('1')
        # 非连续掩码无法用前缀表示
        if bits != ((1 << width) - 1) ^ ((1 << (width - prefix)) - 1):
            return None
        return prefix

    @staticmethod
    def split_inverted(value: str) -> Tuple[bool, str]:
        """拆分取反标记，例如 '!10.0.0.0/8' -> (True, '10.0.0.0/8')"""
        value = value.strip()
        if value.startswith('!'):
            return True, value[1:].strip()
        return False, value

    @staticmethod
    def format_address(value: Optional[str]) -> Optional[str]:
        """
        格式化地址为保存格式

        Args:
            value: 地址，可带掩码，例如 10.0.0.0/255.0.0.0

        Returns:
            前缀形式的地址，例如 10.0.0.0/8；匹配任意地址时返回None
        """
        if not value:
            return None
        if '/' not in value:
            if not IPUtils.is_valid_ip(value):
                return value
            return f"{value}/{ipaddress.ip_address(value).max_prefixlen}"

        addr, mask = value.split('/', 1)
        prefix = IPUtils.mask_to_prefix(mask)
        if prefix == 0:
            return None
        if prefix is None:
            return value
        return f"{addr}/{prefix}"

    @staticmethod
    def format_nft_address(value: Any) -> Optional[str]:
        """格式化nftables JSON中的地址值，支持字符串和prefix对象"""
        if isinstance(value, str):
            if '/' in value:
                return value
            return IPUtils.format_address(value) if IPUtils.is_valid_ip(value) else value
        if isinstance(value, dict) and 'prefix' in value:
            prefix = value['prefix']
            addr = prefix.get('addr')
            length = prefix.get('len')
            if addr and length is not None:
                return f"{addr}/{length}"
        return None
