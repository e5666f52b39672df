#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
二进制 I/O 封装

提供 BinaryWriter 和 BinaryReader 类，封装所有底层文件操作，
使上层模块不需要直接操作文件指针。

CLIP 容器中的整数字段均为 Big-Endian。
"""

import struct
from typing import BinaryIO

from .schema import COPY_CHUNK_SIZE


class BinaryWriter:
    """
    二进制写入器

    封装所有底层写操作，提供类型化的写入和回写方法。
    """

    def __init__(self, file: BinaryIO, position: int = 0):
        """
        初始化写入器

        Args:
            file: 以 'wb' 或 'w+b' 模式打开的文件对象
            position: 文件对象当前位置
        """
        self._file = file
        self._position = position

    @property
    def position(self) -> int:
        """当前写入位置"""
        return self._position

    # ==================== 原始写入 ====================

    def write_bytes(self, data: bytes) -> int:
        """
        写入原始字节

        Args:
            data: 要写入的字节

        Returns:
            写入的字节数
        """
        self._file.write(data)
        self._position += len(data)
        return len(data)

    # ==================== 流复制 ====================

    def copy_from(
        self,
        reader: 'BinaryReader',
        size: int,
        chunk_size: int = COPY_CHUNK_SIZE
    ) -> int:
        """
        从读取器复制恰好 size 字节

        分块读写，不会一次性把整段数据读入内存。

        Args:
            reader: 数据来源
            size: 要复制的字节数
            chunk_size: 每次读写的块大小

        Returns:
            复制的字节数

        Raises:
            EOFError: 来源不足 size 字节
        """
        remaining = size
        while remaining > 0:
            data = reader.read_bytes(min(chunk_size, remaining))
            self.write_bytes(data)
            remaining -= len(data)
        return size

    def copy_all(self, file: BinaryIO, chunk_size: int = COPY_CHUNK_SIZE) -> int:
        """
        复制文件对象的全部剩余内容

        Returns:
            复制的字节数
        """
        total = 0
        while True:
            data = file.read(chunk_size)
            if not data:
                break
            total += self.write_bytes(data)
        return total

    # ==================== 位置控制 ====================

    def reserve(self, size: int) -> int:
        """
        预留空间 (写入零字节)

        用于预留长度字段等固定大小区域，稍后回写。

        Returns:
            预留区域的起始位置
        """
        start = self._position
        self.write_bytes(b'\x00' * size)
        return start

    def seek(self, position: int):
        """移动到指定位置"""
        self._file.seek(position)
        self._position = position

    def patch_bytes(self, position: int, data: bytes):
        """
        在指定位置回写数据

        写入后恢复到原位置。
        """
        current = self._position
        self.seek(position)
        self.write_bytes(data)
        self.seek(current)

    def patch_u64_be(self, position: int, value: int):
        """在指定位置回写 u64 值 (Big-Endian)"""
        self.patch_bytes(position, struct.pack('>Q', value))


class BinaryReader:
    """
    二进制读取器

    封装所有底层读操作。read_bytes 会反复读取直到凑满请求的字节数，
    因此对返回短读的流 (管道、套接字等) 同样适用。
    """

    def __init__(self, file: BinaryIO, position: int = 0):
        """
        初始化读取器

        Args:
            file: 以 'rb' 模式打开的文件对象
            position: 文件对象当前位置
        """
        self._file = file
        self._position = position

    @property
    def position(self) -> int:
        """当前读取位置"""
        return self._position

    def read_bytes(self, size: int) -> bytes:
        """
        读取指定字节数

        Args:
            size: 要读取的字节数

        Returns:
            读取的字节

        Raises:
            EOFError: 文件不足请求的字节数
        """
        parts = []
        remaining = size
        while remaining > 0:
            data = self._file.read(remaining)
            if not data:
                raise EOFError(
                    f"文件结束: 期望读取 {size} 字节，实际只有 {size - remaining} 字节"
                )
            parts.append(data)
            remaining -= len(data)
            self._position += len(data)
        return b''.join(parts)

    def seek(self, position: int):
        """移动到指定位置"""
        self._file.seek(position)
        self._position = position
