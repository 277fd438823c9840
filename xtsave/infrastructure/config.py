# -*- coding: utf-8 -*-
"""
配置管理模块
管理应用程序配置，支持YAML文件和环境变量
"""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from .error_handler import ConfigError, handle_config_error


VERSION = "0.1.0"
DEFAULT_CONFIG_FILE = "/etc/xtsave/config.yaml"
CONFIG_ENV_VAR = "XTSAVE_CONFIG"


class Config:
    """配置管理类"""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = Path(config_file or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)
        self._config = self._load_config()

    @handle_config_error
    def _load_config(self) -> Dict[str, Any]:
        """加载配置文件，文件内容覆盖默认配置"""
        config = self._get_default_config()
        if not self.config_file.exists():
            return config

        with open(self.config_file, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"配置文件格式错误: {self.config_file}")

        self._merge(config, data)
        return config

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]):
        """递归合并配置"""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge(base[key], value)
            else:
                base[key] = value

    def _get_default_config(self) -> Dict[str, Any]:
        """获取默认配置"""
        return copy.deepcopy({
            'program': {
                'version': VERSION,
            },
            'backend': {
                # auto: 优先nftables，降级到xtables
                'inet': 'auto',
            },
            'nftables': {
                'command': 'nft',
                'timeout': 30,
            },
            'proc_root': '/proc',
            'logging': {
                'level': 'WARNING',
                'file': None,
            }
        })

    def get(self, key: str, default: Any = None) -> Any:
        """获取配置值"""
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """设置配置值"""
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def reload(self):
        """重新加载配置"""
        self._config = self._load_config()
