# -*- coding: utf-8 -*-
"""
xtsave
以旧版保存格式导出过滤/网桥/ARP规则状态
"""

from xtsave.infrastructure.config import VERSION as __version__

__all__ = ['__version__']
