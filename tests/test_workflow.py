#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
集成测试

测试 rename_layers 完整流程与 ContainerBuilder / move_into_place。
"""

import io
import os
import shutil
import sqlite3
import struct
import tempfile

import pytest

import cliplayer.utils
from cliplayer import (
    rename_layers,
    ContainerBuilder,
    RegexPredicate,
    AlwaysRename,
    NeverRename,
    NotClipFileError,
    UnsupportedLayoutError,
    ClipIOError,
)
from cliplayer.container import find_sqlite_chunk
from cliplayer.utils import backup_path, move_into_place
from conftest import DEFAULT_PREFIX, FOOTER, ids_by_name, wrap_clip


def split_container(data: bytes):
    """(前缀, 长度字段值, SQLite 数据, 结尾)"""
    location = find_sqlite_chunk(io.BytesIO(data)).offset
    prefix = data[:location - 8]
    length = struct.unpack('>Q', data[location - 8:location])[0]
    payload = data[location:location + length]
    tail = data[location + length:]
    return prefix, length, payload, tail


# ==================== rename_layers ====================

class TestRenameLayers:
    """rename_layers 测试"""

    def test_example(self, tmp_path, make_clip, clip_names):
        """根文件夹 A 下 layer1/layer2 被改为 root 1/root 2，其余字节不变"""
        clip_path, rows = make_clip(["layer1", "layer2"], root_name="A")
        ids = ids_by_name(rows)
        out = tmp_path / "out.clip"

        result = rename_layers(clip_path, out, "root ", RegexPredicate(r"layer\d+"))

        names = clip_names(out)
        assert names[ids["layer1"]] == "root 1"
        assert names[ids["layer2"]] == "root 2"
        assert names[ids["A"]] == "A"
        assert result.renamed_count == 2

        prefix, _, _, tail = split_container(out.read_bytes())
        assert prefix == DEFAULT_PREFIX + b'CHNKSQLi'
        assert tail == FOOTER

    def test_zero_renames_is_byte_identical(self, tmp_path, make_clip):
        """没有图层被重命名时输出与输入完全相同"""
        clip_path, _ = make_clip(["a", ("F", ["b", "c"])])
        out = tmp_path / "same.clip"

        result = rename_layers(clip_path, out, "base", NeverRename())

        assert result.renamed_count == 0
        assert out.read_bytes() == clip_path.read_bytes()

    def test_length_field_matches_payload(self, tmp_path, make_clip):
        """长度字段等于新 SQLite 数据长度"""
        clip_path, _ = make_clip([("F", [f"l{i}" for i in range(50)])])
        out = tmp_path / "out.clip"

        rename_layers(clip_path, out, "a much longer base name than before", AlwaysRename())

        data = out.read_bytes()
        prefix, length, payload, tail = split_container(data)
        assert len(data) == len(prefix) + 8 + length + 16
        assert payload.startswith(b'SQLite format 3\x00')
        assert tail == FOOTER

    def test_in_place(self, make_clip, clip_names):
        """输入与输出为同一文件"""
        clip_path, rows = make_clip([("F", ["x"])])
        ids = ids_by_name(rows)

        rename_layers(clip_path, clip_path, "", AlwaysRename())

        assert clip_names(clip_path)[ids["x"]] == "F 1"

    def test_creates_output_directory(self, tmp_path, make_clip):
        clip_path, _ = make_clip(["a"])
        out = tmp_path / "nested" / "dir" / "out.clip"

        rename_layers(clip_path, out, "b", AlwaysRename())

        assert out.exists()

    def test_not_clip(self, tmp_path):
        """不是 CLIP 文件时目标文件保持不变"""
        source = tmp_path / "in.clip"
        source.write_bytes(b'nothing to see here' * 50)
        dest = tmp_path / "out.clip"
        dest.write_bytes(b'untouched')

        with pytest.raises(NotClipFileError):
            rename_layers(source, dest, "x", AlwaysRename())

        assert dest.read_bytes() == b'untouched'

    def test_missing_source(self, tmp_path):
        with pytest.raises(ClipIOError):
            rename_layers(tmp_path / "missing.clip", tmp_path / "out.clip", "x", AlwaysRename())

    def test_structure_error_leaves_destination(self, tmp_path, layer_db):
        """图层结构错误时目标文件保持不变"""
        db_path, rows = layer_db(["a"])
        conn = sqlite3.connect(str(db_path))
        conn.execute("UPDATE Layer SET LayerType = 0")
        conn.commit()
        conn.close()
        source = tmp_path / "noroot.clip"
        source.write_bytes(wrap_clip(db_path.read_bytes()))
        dest = tmp_path / "out.clip"
        dest.write_bytes(b'untouched')

        with pytest.raises(UnsupportedLayoutError):
            rename_layers(source, dest, "x", AlwaysRename())

        assert dest.read_bytes() == b'untouched'

    def test_workspace_removed(self, tmp_path, make_clip, monkeypatch):
        """成功与失败时临时目录都会被删除"""
        created = []
        real_mkdtemp = tempfile.mkdtemp

        def mkdtemp(*args, **kwargs):
            path = real_mkdtemp(*args, dir=str(tmp_path), **kwargs)
            created.append(path)
            return path

        monkeypatch.setattr(tempfile, "mkdtemp", mkdtemp)
        clip_path, _ = make_clip(["a"])
        bad = tmp_path / "bad.clip"
        bad.write_bytes(b'\x00' * 64)

        rename_layers(clip_path, tmp_path / "ok.clip", "x", AlwaysRename())
        with pytest.raises(NotClipFileError):
            rename_layers(bad, tmp_path / "fail.clip", "x", AlwaysRename())

        assert len(created) == 2
        assert not any(os.path.exists(p) for p in created)

    def test_workspace_cleanup_failure_is_not_fatal(self, tmp_path, make_clip, monkeypatch, clip_names):
        """输出已落盘后，临时目录删除失败不影响结果"""
        clip_path, rows = make_clip([("F", ["x"])])
        ids = ids_by_name(rows)
        out = tmp_path / "out.clip"

        real_mkdtemp = tempfile.mkdtemp

        def failing_rmtree(path, *args, **kwargs):
            raise OSError(16, "Device or resource busy")

        monkeypatch.setattr(tempfile, "mkdtemp", lambda **kwargs: real_mkdtemp(dir=str(tmp_path), **kwargs))
        monkeypatch.setattr(shutil, "rmtree", failing_rmtree)

        result = rename_layers(clip_path, out, "", AlwaysRename())

        monkeypatch.undo()
        assert result.renamed_count == 1
        assert clip_names(out)[ids["x"]] == "F 1"


# ==================== ContainerBuilder ====================

class TestContainerBuilder:
    """ContainerBuilder 测试"""

    def test_empty_payload(self, tmp_path):
        """SQLite 数据为空时长度字段为 0"""
        source = tmp_path / "src.clip"
        source.write_bytes(b'PREFIX..' + b'CHNKSQLi' + struct.pack('>Q', 3) + b'abc' + FOOTER)
        empty = tmp_path / "empty.sqlite"
        empty.write_bytes(b'')
        out = tmp_path / "out.clip"

        size = ContainerBuilder(source, out, payload_offset=24).build(empty)

        assert size == 0
        assert out.read_bytes() == b'PREFIX..' + b'CHNKSQLi' + b'\x00' * 8 + FOOTER

    def test_drops_old_payload(self, tmp_path):
        source = tmp_path / "src.clip"
        source.write_bytes(b'P' * 100 + b'\x00' * 8 + b'old payload' + FOOTER + b'trailing')
        payload = tmp_path / "new.sqlite"
        payload.write_bytes(b'N' * 5000)
        out = tmp_path / "out.clip"

        size = ContainerBuilder(source, out, payload_offset=108, chunk_size=333).build(payload)

        assert size == 5000
        assert out.read_bytes() == b'P' * 100 + struct.pack('>Q', 5000) + b'N' * 5000 + FOOTER

    def test_source_too_short(self, tmp_path):
        from cliplayer.exceptions import TruncatedChunkError
        source = tmp_path / "src.clip"
        source.write_bytes(b'tiny')
        payload = tmp_path / "p.sqlite"
        payload.write_bytes(b'x')

        with pytest.raises(TruncatedChunkError):
            ContainerBuilder(source, tmp_path / "out.clip", payload_offset=64).build(payload)

    def test_invalid_offset(self, tmp_path):
        with pytest.raises(ValueError):
            ContainerBuilder(tmp_path / "a", tmp_path / "b", payload_offset=4)


# ==================== utils ====================

class TestMoveIntoPlace:
    """move_into_place 测试"""

    def test_replace(self, tmp_path):
        src = tmp_path / "tmp.clip"
        src.write_bytes(b'new')
        dst = tmp_path / "dst.clip"
        dst.write_bytes(b'old')

        move_into_place(src, dst)

        assert dst.read_bytes() == b'new'
        assert not src.exists()

    def test_copy_fallback(self, tmp_path, monkeypatch):
        """os.replace 失败 (如跨设备) 时改为复制"""
        src = tmp_path / "tmp.clip"
        src.write_bytes(b'payload' * 1000)
        dst = tmp_path / "out" / "dst.clip"

        real_replace = os.replace
        calls = []

        def flaky_replace(a, b):
            calls.append((a, b))
            if len(calls) == 1:
                raise OSError(18, "Invalid cross-device link")
            return real_replace(a, b)

        monkeypatch.setattr(cliplayer.utils.os, "replace", flaky_replace)

        move_into_place(src, dst)

        assert dst.read_bytes() == b'payload' * 1000
        assert not src.exists()
        assert os.listdir(dst.parent) == ["dst.clip"]

    def test_source_removal_failure_is_not_fatal(self, tmp_path, monkeypatch):
        """复制完成后源文件删除失败不影响结果"""
        src = tmp_path / "tmp.clip"
        src.write_bytes(b'new')
        dst = tmp_path / "dst.clip"
        dst.write_bytes(b'old')

        real_replace = os.replace
        calls = []

        def flaky_replace(a, b):
            calls.append((a, b))
            if len(calls) == 1:
                raise OSError(18, "Invalid cross-device link")
            return real_replace(a, b)

        def failing_remove(path):
            raise OSError(13, "Permission denied")

        monkeypatch.setattr(cliplayer.utils.os, "replace", flaky_replace)
        monkeypatch.setattr(cliplayer.utils.os, "remove", failing_remove)

        move_into_place(src, dst)

        monkeypatch.undo()
        assert dst.read_bytes() == b'new'
        assert src.exists()


class TestBackupPath:
    """backup_path 测试"""

    @pytest.mark.parametrize("path,expected", [
        ("a.clip", "a.bk.clip"),
        ("dir/art.clip", "dir/art.bk.clip"),
        ("noext", "noext.bk.clip"),
        ("v1.2.clip", "v1.2.bk.clip"),
    ])
    def test_backup_path(self, path, expected):
        assert backup_path(path).as_posix() == expected
