# -*- coding: utf-8 -*-
"""
输出目标管理
标准输出或文件，只允许获取一次，任何退出路径都会刷新并释放
"""

import sys
from typing import IO, Iterable, Optional

from .error_handler import OutputError
from .logger import logger


class OutputSink:
    """导出内容的输出目标"""

    def __init__(self, path: Optional[str] = None, stream: Optional[IO[str]] = None):
        """
        初始化输出目标

        Args:
            path: 输出文件路径，None表示写入标准输出
            stream: 替代标准输出的流（主要用于测试）
        """
        self.path = path
        self._default_stream = stream
        self._stream: Optional[IO[str]] = None
        self._owned = False
        self._acquired = False

    def __enter__(self) -> 'OutputSink':
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def acquire(self) -> 'OutputSink':
        """获取输出目标，整个运行期间只能获取一次"""
        if self._acquired:
            raise OutputError("输出目标已获取，不允许再次重定向")
        self._acquired = True

        if self.path:
            try:
                self._stream = open(self.path, 'w', encoding='utf-8')
            except OSError as e:
                raise OutputError(f"Failed to open file, error: {e.strerror or e}") from e
            self._owned = True
            logger.debug(f"输出重定向到文件: {self.path}")
        else:
            self._stream = self._default_stream or sys.stdout
        return self

    def write_lines(self, lines: Iterable[str]):
        """一次性写入一组行并刷新，保证同一张表的输出连续"""
        if self._stream is None:
            raise OutputError("输出目标尚未获取")
        block = ''.join(f"{line}\n" for line in lines)
        try:
            self._stream.write(block)
            self._stream.flush()
        except OSError as e:
            raise OutputError(f"Failed to write output, error: {e.strerror or e}") from e

    def release(self):
        """刷新并释放输出目标"""
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.flush()
        except OSError as e:
            raise OutputError(f"Failed to flush output, error: {e.strerror or e}") from e
        finally:
            if self._owned:
                stream.close()
                self._owned = False
