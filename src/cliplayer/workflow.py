#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
CLIP 图层重命名流程

定位 → 提取 SQLite → 重命名图层 → 重组容器 → 落盘。
所有中间文件都写在独立的临时目录中，只有全部成功后才替换目标文件。
"""

import logging
import os
import shutil
import tempfile
from typing import Union

from .container.builder import ContainerBuilder
from .container.extractor import extract_range
from .container.locator import find_sqlite_chunk
from .core.schema import RenameResult
from .exceptions import NotClipFileError, WorkspaceError
from .hooks.base import Predicate
from .renamer import rename_layers_in_sqlite
from .utils import move_into_place


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

# 临时目录中的文件名
SQLITE_FILE_NAME = "layers.sqlite"
OUTPUT_FILE_NAME = "out.clip"


def _create_workspace() -> str:
    try:
        return tempfile.mkdtemp(prefix="cliplayer-")
    except OSError as e:
        raise WorkspaceError(f"无法创建临时目录 ({e})") from e


def _remove_workspace(workspace: str) -> None:
    # 目标文件已落盘或原异常正在传播，清理失败只记录
    try:
        shutil.rmtree(workspace)
    except OSError as e:
        logger.debug("无法删除临时目录 %s (%s)", workspace, e)


def rename_layers(
    source_path: PathLike,
    destination_path: PathLike,
    root_base_name: str,
    should_rename: Predicate
) -> RenameResult:
    """
    生成图层已重命名的 CLIP 文件

    把图层名改为所在文件夹的名称加序号。source_path 与 destination_path
    可以是同一个文件，是否需要备份由调用方决定。

    Args:
        source_path: 输入 CLIP 文件
        destination_path: 输出 CLIP 文件
        root_base_name: 根文件夹下图层的基础名称，为空则不处理根文件夹下的图层
        should_rename: (图层名) -> bool，决定图层是否需要重命名

    Returns:
        重命名结果

    Raises:
        WorkspaceError: 无法创建临时目录或输出目录
        ClipIOError: 文件读写失败
        NotClipFileError: 不是 CLIP 文件
        TruncatedChunkError: SQLite 数据块长度超出文件
        UnsupportedLayoutError: 图层结构无法解析
        LayerStoreError: SQLite 操作失败
    """
    source_path = os.fspath(source_path)
    destination_path = os.fspath(destination_path)

    workspace = _create_workspace()
    try:
        sqlite_path = os.path.join(workspace, SQLITE_FILE_NAME)
        output_path = os.path.join(workspace, OUTPUT_FILE_NAME)

        # ========== 1. 定位 SQLite 数据块 ==========
        location = find_sqlite_chunk(source_path)
        if location is None:
            raise NotClipFileError(source_path)

        # ========== 2. 提取 ==========
        extract_range(source_path, sqlite_path, location.offset, location.size)

        # ========== 3. 重命名 ==========
        result = rename_layers_in_sqlite(sqlite_path, root_base_name, should_rename)

        # ========== 4. 重组 ==========
        ContainerBuilder(source_path, output_path, location.offset).build(sqlite_path)

        # ========== 5. 落盘 ==========
        move_into_place(output_path, destination_path)
    finally:
        _remove_workspace(workspace)

    logger.debug(
        "%s -> %s: 重命名 %d 个图层",
        source_path, destination_path, result.renamed_count
    )
    return result
