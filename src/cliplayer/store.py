#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
图层数据库访问

以 SQLite 打开从 CLIP 文件中提取的数据库，读取 Layer 表并更新图层名称。
"""

import logging
import os
import sqlite3
from typing import List, Optional, Union

from .core.schema import LayerRecord
from .exceptions import LayerStoreError


logger = logging.getLogger(__name__)


SELECT_LAYERS_SQL = (
    "SELECT _PW_ID, MainId, LayerName, LayerType, LayerFolder, "
    "LayerNextIndex, LayerFirstChildIndex FROM Layer"
)

RENAME_LAYER_SQL = "UPDATE Layer SET LayerName = ? WHERE MainId = ?"


def _int_or_zero(value) -> int:
    return int(value) if value is not None else 0


class LayerStore:
    """
    Layer 表访问器

    只提供两个操作：读取全部图层、按 MainId 修改图层名称。
    修改在 close() 时提交，发生异常时回滚。
    """

    def __init__(self, db_path: Union[str, os.PathLike]):
        """
        打开数据库

        Args:
            db_path: SQLite 文件路径 (必须已存在)

        Raises:
            LayerStoreError: 文件不存在或无法以 SQLite 打开
        """
        self._db_path = os.fspath(db_path)
        self._conn: Optional[sqlite3.Connection] = None

        if not os.path.isfile(self._db_path):
            raise LayerStoreError(f"数据库文件不存在: {self._db_path}")

        try:
            self._conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise LayerStoreError(f"无法打开数据库 {self._db_path}", e) from e

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise LayerStoreError(f"数据库已关闭: {self._db_path}")
        return self._conn

    def load_all_layers(self) -> List[LayerRecord]:
        """
        读取 Layer 表的全部记录

        返回顺序由数据库决定，调用方需要自行排序。

        Raises:
            LayerStoreError: 查询失败 (文件损坏、表结构不符等)
        """
        try:
            rows = self._connection().execute(SELECT_LAYERS_SQL).fetchall()
        except sqlite3.Error as e:
            raise LayerStoreError("读取图层失败", e) from e

        layers = []
        for row in rows:
            try:
                layers.append(LayerRecord(
                    record_id=_int_or_zero(row[0]),
                    stable_id=_int_or_zero(row[1]),
                    name=row[2] if row[2] is not None else '',
                    kind=_int_or_zero(row[3]),
                    is_folder=_int_or_zero(row[4]),
                    next_sibling_id=_int_or_zero(row[5]),
                    first_child_id=_int_or_zero(row[6]),
                ))
            except (TypeError, ValueError) as e:
                raise LayerStoreError(f"图层记录格式不符: {tuple(row)}", e) from e

        logger.debug("从 %s 读取了 %d 个图层", self._db_path, len(layers))
        return layers

    def rename_layer(self, stable_id: int, new_name: str) -> None:
        """
        修改图层名称

        Args:
            stable_id: 图层 MainId
            new_name: 新名称

        Raises:
            LayerStoreError: 执行失败，或没有恰好更新一行
        """
        try:
            cursor = self._connection().execute(RENAME_LAYER_SQL, (new_name, stable_id))
        except sqlite3.Error as e:
            raise LayerStoreError(f"重命名图层 {stable_id} 失败", e) from e

        if cursor.rowcount != 1:
            raise LayerStoreError(
                f"重命名图层 {stable_id} 应更新 1 行，实际更新 {cursor.rowcount} 行"
            )

    def commit(self) -> None:
        """提交修改"""
        try:
            self._connection().commit()
        except sqlite3.Error as e:
            raise LayerStoreError("提交修改失败", e) from e

    def close(self, commit: bool = True) -> None:
        """
        关闭数据库

        Args:
            commit: 是否在关闭前提交修改，否则回滚
        """
        if self._conn is None:
            return
        conn = self._conn
        try:
            if commit:
                self.commit()
            else:
                conn.rollback()
        finally:
            self._conn = None
            conn.close()

    def __enter__(self) -> 'LayerStore':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(commit=exc_type is None)
