#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
图层重命名

从根文件夹开始深度优先遍历图层树，把判定为需要重命名的图层
改为 "<文件夹名> <序号>"。文件夹本身不会被重命名。
"""

import logging
import os
from typing import Iterator, Union

from .core.hierarchy import LayerIndex
from .core.schema import LayerRecord, RenameResult
from .exceptions import UnsupportedLayoutError
from .hooks.base import Predicate
from .store import LayerStore


logger = logging.getLogger(__name__)


def format_layer_name(base: str, number: int) -> str:
    """
    生成新的图层名

    Examples:
        >>> format_layer_name("root", 1)
        'root 1'
        >>> format_layer_name("背景", 3)
        '背景 3'
    """
    return f"{base} {number}"


class _FolderFrame:
    """遍历栈中的一个文件夹"""

    __slots__ = ('folder', 'children', 'is_root', 'counter')

    def __init__(self, folder: LayerRecord, children: Iterator[LayerRecord], is_root: bool):
        self.folder = folder
        self.children = children
        self.is_root = is_root
        self.counter = 1


class LayerRenamer:
    """
    图层树重命名器

    规则:
    - 每个文件夹维护独立的序号，从 1 开始，只有实际重命名后才递增
    - 根文件夹下的图层使用 root_base_name (去掉末尾空白) 作为基础名称；
      去掉空白后为空时根文件夹下的图层完全不处理 (连判定都不调用)
    - 其他文件夹下的图层使用该文件夹当前的名称作为基础名称
    - 每个图层在树中最多出现一次，重复访问视为循环引用
    """

    def __init__(self, store: LayerStore, root_base_name: str, should_rename: Predicate):
        """
        初始化重命名器

        Args:
            store: 已打开的图层数据库
            root_base_name: 根文件夹下图层的基础名称
            should_rename: (图层名) -> bool 的判定函数
        """
        self._store = store
        self._root_base_name = root_base_name.rstrip()
        self._should_rename = should_rename

    def run(self, index: LayerIndex) -> RenameResult:
        """
        遍历并重命名

        使用显式栈代替递归，避免深层嵌套时超出递归深度。

        Raises:
            UnsupportedLayoutError: 链接悬空或存在循环引用
            LayerStoreError: 更新数据库失败
        """
        result = RenameResult()
        root = index.root
        visited = {root.stable_id}
        stack = [_FolderFrame(root, index.iter_children(root), is_root=True)]

        while stack:
            frame = stack[-1]
            child = next(frame.children, None)
            if child is None:
                stack.pop()
                continue

            if child.stable_id in visited:
                raise UnsupportedLayoutError(f"图层 {child.stable_id} 被重复引用，可能存在循环")
            visited.add(child.stable_id)

            if child.folder:
                stack.append(_FolderFrame(child, index.iter_children(child), is_root=False))
            else:
                self._visit_layer(frame, child, result)

        return result

    def _visit_layer(self, frame: _FolderFrame, layer: LayerRecord, result: RenameResult) -> None:
        if frame.is_root:
            if not self._root_base_name:
                return
            base = self._root_base_name
        else:
            base = frame.folder.name

        if not self._should_rename(layer.name):
            return

        new_name = format_layer_name(base, frame.counter)
        self._store.rename_layer(layer.stable_id, new_name)
        frame.counter += 1
        result.add(layer.stable_id, layer.name, new_name)
        logger.debug("图层 %d: %r -> %r", layer.stable_id, layer.name, new_name)


def rename_layers_in_sqlite(
    sqlite_path: Union[str, os.PathLike],
    root_base_name: str,
    should_rename: Predicate
) -> RenameResult:
    """
    重命名 SQLite 文件中的图层

    Args:
        sqlite_path: 从 CLIP 文件提取出的 SQLite 文件
        root_base_name: 根文件夹下图层的基础名称
        should_rename: (图层名) -> bool 的判定函数

    Returns:
        重命名结果

    Raises:
        LayerStoreError: 数据库操作失败
        UnsupportedLayoutError: 图层结构无法解析
    """
    with LayerStore(sqlite_path) as store:
        index = LayerIndex(store.load_all_layers())
        result = LayerRenamer(store, root_base_name, should_rename).run(index)

    logger.debug("共重命名 %d 个图层", result.renamed_count)
    return result
