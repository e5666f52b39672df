#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
cliplayer 工具函数

提供备份路径、目录创建和文件落盘等通用功能。
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Union

from .core.schema import COPY_CHUNK_SIZE
from .exceptions import ClipIOError, WorkspaceError


logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

BACKUP_SUFFIX = ".bk.clip"


def backup_path(path: PathLike) -> Path:
    """
    计算备份文件路径

    替换原扩展名为 .bk.clip。

    Examples:
        >>> backup_path("art/cover.clip").as_posix()
        'art/cover.bk.clip'
        >>> backup_path("noext").as_posix()
        'noext.bk.clip'
    """
    path = Path(path)
    return path.with_name(path.stem + BACKUP_SUFFIX)


def ensure_directory(path: PathLike) -> None:
    """
    确保目录存在

    Raises:
        WorkspaceError: 创建失败
    """
    path = os.fspath(path)
    if not path or os.path.isdir(path):
        return
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise WorkspaceError(f"无法创建目录 ({e})", path) from e


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass


def move_into_place(src: PathLike, dst: PathLike) -> None:
    """
    把临时文件移动到最终位置

    优先使用 os.replace (同一文件系统内是原子操作)。失败时 (例如跨设备)
    先把内容复制到目标目录下的临时文件，再原子替换目标，最后删除源文件。
    任何情况下目标文件都不会处于写了一半的状态。

    Args:
        src: 已写好的临时文件
        dst: 最终路径，上级目录不存在时自动创建

    Raises:
        WorkspaceError: 无法创建上级目录
        ClipIOError: 保存失败
    """
    src = os.fspath(src)
    dst = os.fspath(dst)
    parent = os.path.dirname(os.path.abspath(dst))
    ensure_directory(parent)

    try:
        os.replace(src, dst)
        return
    except OSError as e:
        logger.debug("无法直接移动 %s -> %s (%s)，改为复制", src, dst, e)

    try:
        fd, staging = tempfile.mkstemp(
            prefix="." + os.path.basename(dst) + ".", suffix=".tmp", dir=parent
        )
    except OSError as e:
        raise ClipIOError("保存", dst, e) from e

    try:
        with os.fdopen(fd, 'wb') as out, open(src, 'rb') as f:
            shutil.copyfileobj(f, out, COPY_CHUNK_SIZE)
        os.replace(staging, dst)
    except OSError as e:
        _discard(staging)
        raise ClipIOError("保存", dst, e) from e

    try:
        os.remove(src)
    except OSError as e:
        # 目标已替换完成
        logger.debug("无法删除 %s (%s)", src, e)
