#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
cliplayer 数据结构定义

定义 CLIP 容器中 SQLite 数据块头、结尾块以及图层记录等核心数据结构。

容器中与本库相关的布局:

    [CHNKSQLi: 8s][长度: u64 BE][SQLite format 3\\0 ...SQLite 数据...][CHNKFoot: 8s][0: u64]

长度字段描述的是整个 SQLite 数据 (包含其自身的 16 字节文件头)。
"""

import struct
from dataclasses import dataclass, field
from typing import ClassVar, List, Tuple


# ==================== 常量定义 ====================

# SQLite 数据块签名
SQL_CHUNK_SIGNATURE = b'CHNKSQLi'

# 嵌入数据库自身的文件头 (SQLite 魔法数)
SQLITE_HEADER = b'SQLite format 3\x00'

# 结尾块签名
FOOTER_SIGNATURE = b'CHNKFoot'

# 长度字段大小
LENGTH_FIELD_SIZE = 8

# 根文件夹标识 (LayerType, LayerFolder)
ROOT_LAYER_TYPE = 256
ROOT_LAYER_FOLDER = 1

# 链接结束标记
NO_LAYER = 0

# 扫描窗口大小
BUFFER_SIZE = 1024

# 流复制分块大小
COPY_CHUNK_SIZE = 64 * 1024


# ==================== 数据块头 ====================

@dataclass
class SqliteChunkHeader:
    """
    SQLite 数据块头 (32 bytes)

    由数据块签名、大端长度字段和 SQLite 文件头组成，
    扫描时在每个字节偏移处按此结构比对。
    """
    FORMAT: ClassVar[str] = '>8sQ16s'
    SIZE: ClassVar[int] = 32

    signature: bytes = SQL_CHUNK_SIGNATURE
    length: int = 0
    sqlite_header: bytes = SQLITE_HEADER

    def pack(self) -> bytes:
        """序列化为字节"""
        return struct.pack(
            self.FORMAT,
            self.signature,
            self.length,
            self.sqlite_header
        )

    @classmethod
    def unpack(cls, data: bytes) -> 'SqliteChunkHeader':
        """从字节反序列化"""
        values = struct.unpack(cls.FORMAT, data)
        return cls(
            signature=values[0],
            length=values[1],
            sqlite_header=values[2]
        )

    @property
    def is_valid(self) -> bool:
        """签名与 SQLite 文件头是否都匹配"""
        return (
            self.signature == SQL_CHUNK_SIGNATURE
            and self.sqlite_header == SQLITE_HEADER
        )


# ==================== 结尾块 ====================

@dataclass
class FooterChunk:
    """
    结尾块 (16 bytes)

    位于 SQLite 数据之后，标记容器结束。
    """
    FORMAT: ClassVar[str] = '>8sQ'
    SIZE: ClassVar[int] = 16

    signature: bytes = FOOTER_SIGNATURE
    _reserved: int = field(default=0, repr=False)

    def pack(self) -> bytes:
        """序列化为字节"""
        return struct.pack(self.FORMAT, self.signature, self._reserved)

    @classmethod
    def unpack(cls, data: bytes) -> 'FooterChunk':
        """从字节反序列化"""
        values = struct.unpack(cls.FORMAT, data)
        return cls(signature=values[0], _reserved=values[1])


# ==================== 定位结果 ====================

@dataclass(frozen=True)
class ChunkLocation:
    """
    SQLite 数据块位置

    offset 指向 SQLite 数据的第一个字节 (即 SQLite 文件头)，
    长度字段位于 offset - 8。
    """
    size: int       # 声明的 SQLite 数据长度
    offset: int     # SQLite 数据在容器中的起始位置

    @property
    def length_field_offset(self) -> int:
        return self.offset - LENGTH_FIELD_SIZE

    @property
    def end(self) -> int:
        return self.offset + self.size


# ==================== 图层记录 ====================

@dataclass(frozen=True)
class LayerRecord:
    """
    Layer 表中的一行

    图层之间通过 stable_id (MainId) 互相引用，而不是数组下标。
    """
    record_id: int          # _PW_ID, 仅用于标识行
    stable_id: int          # MainId
    name: str               # LayerName
    kind: int               # LayerType
    is_folder: int          # LayerFolder, 非零表示文件夹
    next_sibling_id: int    # LayerNextIndex, 0 表示没有下一个兄弟
    first_child_id: int     # LayerFirstChildIndex, 0 表示空文件夹

    @property
    def folder(self) -> bool:
        return self.is_folder != 0

    @property
    def is_root(self) -> bool:
        return self.kind == ROOT_LAYER_TYPE and self.is_folder == ROOT_LAYER_FOLDER


# ==================== 重命名结果 ====================

@dataclass
class RenameResult:
    """重命名操作结果"""
    renamed: List[Tuple[int, str, str]] = field(default_factory=list)  # (stable_id, 旧名, 新名)

    @property
    def renamed_count(self) -> int:
        return len(self.renamed)

    def add(self, stable_id: int, old_name: str, new_name: str) -> None:
        self.renamed.append((stable_id, old_name, new_name))
