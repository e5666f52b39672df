#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
cliplayer 异常定义

所有异常均继承自 ClipLayerError，便于统一捕获。
"""

from typing import Optional


class ClipLayerError(Exception):
    """cliplayer 基础异常"""
    pass


class WorkspaceError(ClipLayerError):
    """
    工作环境异常

    无法创建/删除临时工作目录或输出目录时抛出。
    """
    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            message = f"{message}: {path}"
        super().__init__(message)


class ClipIOError(ClipLayerError):
    """
    文件读写异常

    打开、读取、写入或定位源文件/目标文件/中间文件失败时抛出。
    """
    def __init__(self, operation: str, path: str, reason: Optional[BaseException] = None):
        self.operation = operation
        self.path = path
        self.reason = reason
        message = f"{operation}失败: {path}"
        if reason is not None:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidFormatError(ClipLayerError):
    """
    文件格式无效异常

    当文件魔法数或结构不符合预期时抛出。
    """
    def __init__(self, message: str, expected: str = None, actual: str = None):
        self.expected = expected
        self.actual = actual
        if expected and actual:
            message = f"{message}: 期望 {expected}, 实际 {actual}"
        super().__init__(message)


class NotClipFileError(InvalidFormatError):
    """
    非 CLIP 文件异常

    整个文件中找不到 SQLite 数据块签名时抛出。
    """
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"不是 CLIP 文件格式: {path}")


class TruncatedChunkError(InvalidFormatError):
    """
    数据块截断异常

    数据块声明的长度超出了文件实际剩余的字节数。
    """
    def __init__(self, offset: int, declared: int, available: int):
        self.offset = offset
        self.declared = declared
        self.available = available
        super().__init__(
            f"偏移 {offset:#x} 处的数据块已截断",
            expected=f"{declared} 字节",
            actual=f"{available} 字节"
        )


class UnsupportedLayoutError(ClipLayerError):
    """
    图层结构异常

    根文件夹缺失或不唯一、链接指向不存在的图层、出现循环引用时抛出。
    可能是不支持的文件版本。
    """
    def __init__(self, message: str = None):
        super().__init__(
            message or "无法解析图层结构，可能是不支持的版本"
        )


class LayerStoreError(ClipLayerError):
    """
    SQLite 数据库操作异常

    打开数据库或执行查询/更新语句失败时抛出。
    """
    def __init__(self, message: str, reason: Optional[BaseException] = None):
        self.reason = reason
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)
