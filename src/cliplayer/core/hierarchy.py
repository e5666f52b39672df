#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
图层层级索引

Layer 表把树结构存成扁平记录：子图层和兄弟图层通过 MainId 引用，
与记录在表中的位置无关。这里按 MainId 排序后用二分查找定位记录。
"""

import bisect
from typing import Iterable, Iterator, List, Optional

from .schema import LayerRecord, NO_LAYER
from ..exceptions import UnsupportedLayoutError


class LayerIndex:
    """
    按 stable_id 排序的图层索引

    构建时检查 stable_id 唯一且恰好存在一个根文件夹。
    """

    def __init__(self, records: Iterable[LayerRecord]):
        """
        构建索引

        Args:
            records: 从数据库加载的图层记录 (顺序任意)

        Raises:
            UnsupportedLayoutError: stable_id 重复，或根文件夹缺失/不唯一
        """
        self._records: List[LayerRecord] = sorted(records, key=lambda r: r.stable_id)
        self._keys: List[int] = [r.stable_id for r in self._records]

        root_ids = []
        previous = None
        for record in self._records:
            if record.stable_id == previous:
                raise UnsupportedLayoutError(f"图层 ID 重复: {record.stable_id}")
            previous = record.stable_id
            if record.is_root:
                root_ids.append(record.stable_id)

        if not root_ids:
            raise UnsupportedLayoutError("找不到根文件夹，可能是不支持的版本")
        if len(root_ids) > 1:
            raise UnsupportedLayoutError(f"存在多个根文件夹: {root_ids}")

        self._root_id = root_ids[0]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, stable_id: int) -> bool:
        return self.find(stable_id) is not None

    @property
    def root_id(self) -> int:
        """根文件夹的 stable_id"""
        return self._root_id

    @property
    def root(self) -> LayerRecord:
        return self.get(self._root_id)

    @property
    def records(self) -> List[LayerRecord]:
        """按 stable_id 排序的全部记录"""
        return list(self._records)

    def find(self, stable_id: int) -> Optional[LayerRecord]:
        """二分查找记录，不存在返回 None"""
        pos = bisect.bisect_left(self._keys, stable_id)
        if pos < len(self._keys) and self._keys[pos] == stable_id:
            return self._records[pos]
        return None

    def get(self, stable_id: int) -> LayerRecord:
        """
        获取记录

        Raises:
            UnsupportedLayoutError: 引用了不存在的图层
        """
        record = self.find(stable_id)
        if record is None:
            raise UnsupportedLayoutError(f"引用了不存在的图层: {stable_id}")
        return record

    def iter_children(self, folder: LayerRecord) -> Iterator[LayerRecord]:
        """
        按兄弟链顺序迭代文件夹的直接子图层

        先取 first_child_id，再沿 next_sibling_id 前进直到结束标记。
        同一条链中重复出现的 ID 视为循环。

        Raises:
            UnsupportedLayoutError: 不是文件夹、链接悬空或链中有循环
        """
        if not folder.folder:
            raise UnsupportedLayoutError(f"图层 {folder.stable_id} 不是文件夹")

        seen = set()
        next_id = folder.first_child_id
        while next_id != NO_LAYER:
            if next_id in seen:
                raise UnsupportedLayoutError(
                    f"文件夹 {folder.stable_id} 的兄弟链存在循环: {next_id}"
                )
            seen.add(next_id)
            child = self.get(next_id)
            next_id = child.next_sibling_id
            yield child
