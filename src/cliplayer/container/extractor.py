#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
数据块提取

把容器中的一段字节 (offset + size) 复制为独立文件。
"""

import logging
import os
from typing import Union

from ..core.binary_io import BinaryReader, BinaryWriter
from ..core.schema import ChunkLocation, COPY_CHUNK_SIZE
from ..exceptions import ClipIOError, TruncatedChunkError, NotClipFileError
from .locator import find_sqlite_chunk


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def extract_range(
    source: PathLike,
    destination: PathLike,
    offset: int,
    size: int,
    chunk_size: int = COPY_CHUNK_SIZE
) -> int:
    """
    复制 source 中 [offset, offset + size) 到 destination

    分块传输，不会把整段数据读入内存。

    Args:
        source: 源文件路径
        destination: 目标文件路径 (已存在则覆盖)
        offset: 起始偏移
        size: 复制的字节数
        chunk_size: 每次读写的块大小

    Returns:
        复制的字节数

    Raises:
        ClipIOError: 打开/定位/读写失败
        TruncatedChunkError: 源文件在 offset 之后不足 size 字节
    """
    source = os.fspath(source)
    destination = os.fspath(destination)

    try:
        src = open(source, 'rb')
    except OSError as e:
        raise ClipIOError("打开", source, e) from e

    with src:
        reader = BinaryReader(src)
        try:
            reader.seek(offset)
        except OSError as e:
            raise ClipIOError("定位", source, e) from e

        try:
            dst = open(destination, 'wb')
        except OSError as e:
            raise ClipIOError("创建", destination, e) from e

        with dst:
            writer = BinaryWriter(dst)
            try:
                writer.copy_from(reader, size, chunk_size)
            except EOFError as e:
                raise TruncatedChunkError(
                    offset, size, reader.position - offset
                ) from e
            except OSError as e:
                raise ClipIOError("复制", source, e) from e

    logger.debug("已提取 %s [%#x, +%d) -> %s", source, offset, size, destination)
    return size


def extract_sqlite(source: PathLike, destination: PathLike) -> ChunkLocation:
    """
    查找并提取 CLIP 容器中的 SQLite 数据库

    Args:
        source: CLIP 文件路径
        destination: 输出的 SQLite 文件路径

    Returns:
        数据块位置

    Raises:
        NotClipFileError: 找不到 SQLite 数据块
    """
    location = find_sqlite_chunk(source)
    if location is None:
        raise NotClipFileError(os.fspath(source))
    extract_range(source, destination, location.offset, location.size)
    return location
