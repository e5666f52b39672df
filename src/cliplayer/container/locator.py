#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
SQLite 数据块定位器

在 CLIP 容器的字节流中查找 SQLite 数据块，无需解析容器的块结构，
也不会把整个文件读入内存。
"""

import logging
import os
from typing import BinaryIO, Optional, Union

from ..core.schema import (
    SqliteChunkHeader, ChunkLocation,
    SQL_CHUNK_SIGNATURE, LENGTH_FIELD_SIZE, BUFFER_SIZE
)
from ..exceptions import ClipIOError


logger = logging.getLogger(__name__)


class ChunkScanner:
    """
    滑动窗口扫描器

    固定大小的缓冲区分块读取流。每个字节偏移都可能是数据块头的起点，
    跨越两次读取边界的数据块头也能找到：重新填充前，
    尚未检查完的尾部字节会先移到缓冲区开头。

    状态:
    - _base: 缓冲区第 0 字节在流中的偏移
    - _start: 下一个待检查的缓冲区位置
    - _end: 缓冲区中有效数据的末尾
    - _eof: 流是否已读完
    """

    def __init__(self, stream: BinaryIO, buffer_size: int = BUFFER_SIZE, name: str = None):
        """
        初始化扫描器

        Args:
            stream: 以 'rb' 模式打开的流，从当前位置开始扫描
            buffer_size: 缓冲区大小，不能小于数据块头大小
            name: 用于错误信息的流名称
        """
        if buffer_size < SqliteChunkHeader.SIZE:
            raise ValueError(
                f"buffer_size 不能小于 {SqliteChunkHeader.SIZE}: {buffer_size}"
            )
        self._stream = stream
        self._name = name or getattr(stream, 'name', '<stream>')
        self._buffer = bytearray(buffer_size)
        self._base = 0
        self._start = 0
        self._end = 0
        self._eof = False

    @property
    def position(self) -> int:
        """下一个待检查字节在流中的偏移"""
        return self._base + self._start

    @property
    def eof(self) -> bool:
        return self._eof

    def _fill(self) -> bool:
        """
        搬移剩余字节并补充数据

        Returns:
            是否读到了新数据

        Raises:
            ClipIOError: 读取失败
        """
        if self._eof:
            return False

        rest = self._end - self._start
        if self._start:
            self._buffer[:rest] = self._buffer[self._start:self._end]
            self._base += self._start
            self._start = 0
            self._end = rest

        try:
            data = self._stream.read(len(self._buffer) - self._end)
        except OSError as e:
            raise ClipIOError("读取", str(self._name), e) from e

        if not data:
            self._eof = True
            return False

        self._buffer[self._end:self._end + len(data)] = data
        self._end += len(data)
        return True

    def scan(self) -> Optional[ChunkLocation]:
        """
        查找下一个 SQLite 数据块

        先用签名快速跳到候选位置，再比对完整的 32 字节数据块头。

        Returns:
            数据块位置，流结束仍未找到返回 None
        """
        header_size = SqliteChunkHeader.SIZE
        signature_size = len(SQL_CHUNK_SIGNATURE)

        while True:
            hit = self._buffer.find(SQL_CHUNK_SIGNATURE, self._start, self._end)

            if hit < 0:
                # 签名可能被截断在缓冲区末尾
                self._start = max(self._start, self._end - signature_size + 1)
                if not self._fill():
                    return None
                continue

            if hit + header_size > self._end:
                self._start = hit
                if not self._fill():
                    return None
                continue

            header = SqliteChunkHeader.unpack(bytes(self._buffer[hit:hit + header_size]))
            self._start = hit + 1
            if header.is_valid:
                offset = self._base + hit + signature_size + LENGTH_FIELD_SIZE
                return ChunkLocation(size=header.length, offset=offset)


def find_sqlite_chunk(
    source: Union[str, os.PathLike, BinaryIO],
    buffer_size: int = BUFFER_SIZE
) -> Optional[ChunkLocation]:
    """
    查找 CLIP 容器中的 SQLite 数据块

    Args:
        source: 文件路径或以 'rb' 模式打开的流
        buffer_size: 扫描缓冲区大小

    Returns:
        ChunkLocation(size, offset)，未找到返回 None

    Raises:
        ClipIOError: 打开或读取失败
    """
    if hasattr(source, 'read'):
        return ChunkScanner(source, buffer_size).scan()

    path = os.fspath(source)
    try:
        f = open(path, 'rb')
    except OSError as e:
        raise ClipIOError("打开", path, e) from e

    with f:
        location = ChunkScanner(f, buffer_size, name=path).scan()

    if location is None:
        logger.debug("%s 中没有 SQLite 数据块", path)
    else:
        logger.debug(
            "%s 中找到 SQLite 数据块: offset=%#x size=%d",
            path, location.offset, location.size
        )
    return location
