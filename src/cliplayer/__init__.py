#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
cliplayer - CLIP 文件图层批量重命名

定位 CLIP 文件中嵌入的 SQLite 数据库，按文件夹名称重命名图层，
再重新拼装出除长度字段外其余字节完全不变的 CLIP 文件。
"""

__version__ = "0.1.0"
__author__ = "Virace"

# 异常类
from .exceptions import (
    ClipLayerError,
    WorkspaceError,
    ClipIOError,
    InvalidFormatError,
    NotClipFileError,
    TruncatedChunkError,
    UnsupportedLayoutError,
    LayerStoreError,
)

# 核心
from .core import LayerRecord, LayerIndex, ChunkLocation, RenameResult

# 容器
from .container import (
    ChunkScanner,
    find_sqlite_chunk,
    extract_range,
    extract_sqlite,
    ContainerBuilder,
)

# 图层数据库
from .store import LayerStore
from .renamer import LayerRenamer, rename_layers_in_sqlite, format_layer_name

# Hooks
from .hooks import (
    RenamePredicate,
    RegexPredicate,
    AlwaysRename,
    NeverRename,
    default_predicate,
    DEFAULT_LAYER_PATTERN,
    DEFAULT_ROOT_BASE_NAME,
)

# 工具
from .utils import backup_path, move_into_place

# 入口
from .workflow import rename_layers

__all__ = [
    # 版本
    "__version__",
    # 异常
    "ClipLayerError",
    "WorkspaceError",
    "ClipIOError",
    "InvalidFormatError",
    "NotClipFileError",
    "TruncatedChunkError",
    "UnsupportedLayoutError",
    "LayerStoreError",
    # 核心
    "LayerRecord",
    "LayerIndex",
    "ChunkLocation",
    "RenameResult",
    # 容器
    "ChunkScanner",
    "find_sqlite_chunk",
    "extract_range",
    "extract_sqlite",
    "ContainerBuilder",
    # 图层数据库
    "LayerStore",
    "LayerRenamer",
    "rename_layers_in_sqlite",
    "format_layer_name",
    # Hooks
    "RenamePredicate",
    "RegexPredicate",
    "AlwaysRename",
    "NeverRename",
    "default_predicate",
    "DEFAULT_LAYER_PATTERN",
    "DEFAULT_ROOT_BASE_NAME",
    # 工具
    "backup_path",
    "move_into_place",
    # 入口
    "rename_layers",
]
