#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
cliplayer 容器模块

提供 SQLite 数据块的定位、提取和 CLIP 容器重组功能。
"""

from .locator import ChunkScanner, find_sqlite_chunk
from .extractor import extract_range, extract_sqlite
from .builder import ContainerBuilder

__all__ = [
    "ChunkScanner",
    "find_sqlite_chunk",
    "extract_range",
    "extract_sqlite",
    "ContainerBuilder",
]
