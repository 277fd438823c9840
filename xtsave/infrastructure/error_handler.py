# -*- coding: utf-8 -*-
"""
异常处理模块
定义自定义异常类和错误处理装饰器
"""

from functools import wraps
from typing import Callable
from .logger import logger


class XtSaveError(Exception):
    """工具基础异常类"""
    pass


class StoreInitError(XtSaveError):
    """规则后端初始化失败"""
    pass


class StoreError(XtSaveError):
    """规则后端查询失败"""
    pass


class TableNotFoundError(XtSaveError):
    """指定的表不存在"""

    def __init__(self, table_name: str):
        super().__init__(f"Table '{table_name}' does not exist")
        self.table_name = table_name


class IncompatibleTableError(XtSaveError):
    """表无法用旧版保存格式表示"""

    def __init__(self, table_name: str, reason: str = ""):
        message = f"表 {table_name} 不兼容旧版保存格式"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.table_name = table_name
        self.reason = reason


class OutputError(XtSaveError):
    """输出目标无法打开或写入"""
    pass


class ConfigError(XtSaveError):
    """配置错误"""
    pass


def handle_store_error(func: Callable) -> Callable:
    """后端查询错误装饰器"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except XtSaveError:
            raise
        except Exception as e:
            logger.error(f"后端查询失败: {e}")
            raise StoreError(f"规则后端查询失败: {e}") from e
    return wrapper


def handle_config_error(func: Callable) -> Callable:
    """配置错误装饰器"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigError:
            raise
        except Exception as e:
            logger.error(f"配置错误: {e}")
            raise ConfigError(f"配置处理失败: {e}") from e
    return wrapper
