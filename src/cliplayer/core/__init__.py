#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
cliplayer 核心模块

提供二进制 I/O 封装、数据结构定义和图层层级索引。
"""

from .binary_io import BinaryReader, BinaryWriter
from .schema import (
    SqliteChunkHeader, FooterChunk, ChunkLocation, LayerRecord, RenameResult,
    SQL_CHUNK_SIGNATURE, SQLITE_HEADER, FOOTER_SIGNATURE,
    ROOT_LAYER_TYPE, ROOT_LAYER_FOLDER, NO_LAYER,
    BUFFER_SIZE, COPY_CHUNK_SIZE,
)
from .hierarchy import LayerIndex

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "SqliteChunkHeader",
    "FooterChunk",
    "ChunkLocation",
    "LayerRecord",
    "RenameResult",
    "SQL_CHUNK_SIGNATURE",
    "SQLITE_HEADER",
    "FOOTER_SIGNATURE",
    "ROOT_LAYER_TYPE",
    "ROOT_LAYER_FOLDER",
    "NO_LAYER",
    "BUFFER_SIZE",
    "COPY_CHUNK_SIZE",
    "LayerIndex",
]
