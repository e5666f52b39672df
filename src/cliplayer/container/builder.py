#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
CLIP 容器重组

用修改后的 SQLite 数据库重新拼装 CLIP 文件。SQLite 数据块之前的字节原样复制，
之后写入新的数据库和结尾块，最后回写长度字段。
"""

import logging
import os
from typing import Union

from ..core.binary_io import BinaryReader, BinaryWriter
from ..core.schema import FooterChunk, LENGTH_FIELD_SIZE, COPY_CHUNK_SIZE
from ..exceptions import ClipIOError, TruncatedChunkError


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class ContainerBuilder:
    """
    CLIP 容器构建器

    输出布局:
    1. 原文件 [0, payload_offset - 8) 原样复制
    2. 长度字段 (先写 0 占位)
    3. 新的 SQLite 数据
    4. 结尾块 CHNKFoot
    5. 回写长度字段
    """

    def __init__(
        self,
        source_path: PathLike,
        output_path: PathLike,
        payload_offset: int,
        chunk_size: int = COPY_CHUNK_SIZE
    ):
        """
        初始化构建器

        Args:
            source_path: 原 CLIP 文件
            output_path: 输出文件 (通常位于临时目录)
            payload_offset: SQLite 数据在原文件中的起始位置
            chunk_size: 复制块大小
        """
        if payload_offset < LENGTH_FIELD_SIZE:
            raise ValueError(f"payload_offset 过小: {payload_offset}")
        self._source_path = os.fspath(source_path)
        self._output_path = os.fspath(output_path)
        self._payload_offset = payload_offset
        self._chunk_size = chunk_size

    @property
    def prefix_size(self) -> int:
        """原样复制的前缀长度"""
        return self._payload_offset - LENGTH_FIELD_SIZE

    def build(self, sqlite_path: PathLike) -> int:
        """
        构建并写入 CLIP 文件

        Args:
            sqlite_path: 修改后的 SQLite 文件

        Returns:
            写入的 SQLite 数据长度 (即长度字段的值)

        Raises:
            ClipIOError: 读写失败
            TruncatedChunkError: 原文件比 payload_offset 短
        """
        sqlite_path = os.fspath(sqlite_path)

        try:
            src = open(self._source_path, 'rb')
        except OSError as e:
            raise ClipIOError("打开", self._source_path, e) from e

        with src:
            try:
                out = open(self._output_path, 'w+b')
            except OSError as e:
                raise ClipIOError("创建", self._output_path, e) from e

            with out:
                writer = BinaryWriter(out)
                reader = BinaryReader(src)

                # ========== 1. 前缀 ==========
                try:
                    writer.copy_from(reader, self.prefix_size, self._chunk_size)
                except EOFError as e:
                    raise TruncatedChunkError(
                        0, self.prefix_size, reader.position
                    ) from e
                except OSError as e:
                    raise ClipIOError("复制", self._source_path, e) from e

                try:
                    # ========== 2. 长度字段占位 ==========
                    length_pos = writer.reserve(LENGTH_FIELD_SIZE)

                    # ========== 3. SQLite 数据 ==========
                    with open(sqlite_path, 'rb') as db:
                        sqlite_size = writer.copy_all(db, self._chunk_size)

                    # ========== 4. 结尾块 ==========
                    writer.write_bytes(FooterChunk().pack())

                    # ========== 5. 回写长度 ==========
                    writer.patch_u64_be(length_pos, sqlite_size)
                except OSError as e:
                    raise ClipIOError("写入", self._output_path, e) from e

        logger.debug(
            "已写入 %s: prefix=%d sqlite=%d",
            self._output_path, self.prefix_size, sqlite_size
        )
        return sqlite_size
