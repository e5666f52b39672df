#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pytest 全局配置

提供合成 CLIP 文件的 fixtures：真实的 SQLite Layer 表，
外面包上 CHNKSQLi 数据块和 CHNKFoot 结尾块。
"""

import io
import sqlite3
import struct
from pathlib import Path
from typing import Dict, List, Tuple, Union

import pytest

from cliplayer.container import extract_sqlite


# ==================== 格式常量 ====================

ROOT_TYPE = 256
FOLDER_TYPE = 0
LAYER_TYPE = 1

FOOTER = b'CHNKFoot' + b'\x00' * 8

# SQLite 数据块之前的其他数据块 (内容不重要，只要求原样保留)
DEFAULT_PREFIX = (
    b'CSFCHUNK' + struct.pack('>Q', 24) + b'\x00' * 8
    + b'CHNKHead' + struct.pack('>Q', 40) + bytes(range(40))
    + b'CHNKSQLi' + b'not really sqlite'    # 没有 SQLite 文件头的诱饵签名
    + b'CHNKExta' + struct.pack('>Q', 300) + bytes(range(256)) + b'\xff' * 44
)

CREATE_LAYER_TABLE = (
    "CREATE TABLE Layer ("
    "_PW_ID INTEGER PRIMARY KEY AUTOINCREMENT, "
    "MainId INTEGER, "
    "LayerName TEXT, "
    "LayerType INTEGER, "
    "LayerFolder INTEGER, "
    "LayerNextIndex INTEGER, "
    "LayerFirstChildIndex INTEGER)"
)

# 图层树描述: 字符串为普通图层，(名称, [子节点...]) 为文件夹
TreeNode = Union[str, Tuple[str, list]]


# ==================== 构建工具 ====================

def flatten_tree(children: List[TreeNode], root_name: str = "root") -> List[dict]:
    """
    把树描述展开为 Layer 表行

    MainId 按 10, 17, 24 ... 分配，故意与行位置无关。
    """
    rows: List[dict] = []
    counter = [0]

    def alloc() -> int:
        counter[0] += 1
        return 3 + counter[0] * 7

    def add_node(node: TreeNode, kind: int = None) -> dict:
        if isinstance(node, str):
            row = {
                'MainId': alloc(), 'LayerName': node, 'LayerType': LAYER_TYPE,
                'LayerFolder': 0, 'LayerNextIndex': 0, 'LayerFirstChildIndex': 0,
            }
            rows.append(row)
            return row

        name, sub = node
        row = {
            'MainId': alloc(), 'LayerName': name,
            'LayerType': FOLDER_TYPE if kind is None else kind,
            'LayerFolder': 1, 'LayerNextIndex': 0, 'LayerFirstChildIndex': 0,
        }
        rows.append(row)
        child_rows = [add_node(c) for c in sub]
        for a, b in zip(child_rows, child_rows[1:]):
            a['LayerNextIndex'] = b['MainId']
        if child_rows:
            row['LayerFirstChildIndex'] = child_rows[0]['MainId']
        return row

    add_node((root_name, children), kind=ROOT_TYPE)
    return rows


def write_layer_db(path: Path, rows: List[dict]) -> Path:
    """写入 Layer 表 (行顺序倒置，确保调用方不依赖表中顺序)"""
    conn = sqlite3.connect(str(path))
    try:
        conn.execute(CREATE_LAYER_TABLE)
        conn.execute("CREATE TABLE Canvas (_PW_ID INTEGER PRIMARY KEY, CanvasWidth INTEGER)")
        conn.execute("INSERT INTO Canvas (CanvasWidth) VALUES (1920)")
        for row in reversed(rows):
            conn.execute(
                "INSERT INTO Layer (MainId, LayerName, LayerType, LayerFolder, "
                "LayerNextIndex, LayerFirstChildIndex) VALUES (?, ?, ?, ?, ?, ?)",
                (row['MainId'], row['LayerName'], row['LayerType'], row['LayerFolder'],
                 row['LayerNextIndex'], row['LayerFirstChildIndex'])
            )
        conn.commit()
    finally:
        conn.close()
    return path


def wrap_clip(sqlite_bytes: bytes, prefix: bytes = DEFAULT_PREFIX) -> bytes:
    """把 SQLite 数据包装为 CLIP 容器"""
    return (
        prefix
        + b'CHNKSQLi' + struct.pack('>Q', len(sqlite_bytes))
        + sqlite_bytes
        + FOOTER
    )


def read_names(db_path: Path) -> Dict[int, str]:
    """MainId -> LayerName"""
    conn = sqlite3.connect(str(db_path))
    try:
        return dict(conn.execute("SELECT MainId, LayerName FROM Layer").fetchall())
    finally:
        conn.close()


class ShortReadStream(io.RawIOBase):
    """每次最多返回 step 字节的流，用于测试跨缓冲区边界"""

    def __init__(self, data: bytes, step: int):
        self._data = data
        self._pos = 0
        self._step = step

    def readable(self):
        return True

    def read(self, size=-1):
        if size is None or size < 0:
            size = len(self._data)
        size = min(size, self._step)
        chunk = self._data[self._pos:self._pos + size]
        self._pos += len(chunk)
        return chunk


# ==================== Fixtures ====================

@pytest.fixture
def layer_db(tmp_path):
    """
    按树描述创建 SQLite 图层数据库

    Returns:
        (tree, root_name="root") -> (数据库路径, 行列表)
    """
    counter = [0]

    def make(children: List[TreeNode], root_name: str = "root"):
        counter[0] += 1
        rows = flatten_tree(children, root_name)
        path = write_layer_db(tmp_path / f"layers_{counter[0]}.sqlite", rows)
        return path, rows

    return make


@pytest.fixture
def make_clip(tmp_path, layer_db):
    """
    按树描述创建 CLIP 文件

    Returns:
        (tree, root_name="root", prefix=DEFAULT_PREFIX) -> (CLIP 路径, 行列表)
    """
    counter = [0]

    def make(children: List[TreeNode], root_name: str = "root", prefix: bytes = DEFAULT_PREFIX):
        counter[0] += 1
        db_path, rows = layer_db(children, root_name)
        clip_path = tmp_path / f"sample_{counter[0]}.clip"
        clip_path.write_bytes(wrap_clip(db_path.read_bytes(), prefix))
        return clip_path, rows

    return make


@pytest.fixture
def clip_names(tmp_path):
    """
    读取 CLIP 文件中的图层名

    Returns:
        (CLIP 路径) -> {MainId: LayerName}
    """
    counter = [0]

    def read(clip_path: Path) -> Dict[int, str]:
        counter[0] += 1
        db_path = tmp_path / f"check_{counter[0]}.sqlite"
        extract_sqlite(clip_path, db_path)
        return read_names(db_path)

    return read


def ids_by_name(rows: List[dict]) -> Dict[str, int]:
    """LayerName -> MainId (测试树中名称唯一时使用)"""
    return {row['LayerName']: row['MainId'] for row in rows}
