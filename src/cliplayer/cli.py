#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
命令行入口

    cliplayer INPUT [OUTPUT] [--pattern REGEX] [--base-name NAME]

OUTPUT 省略时覆盖 INPUT，覆盖前会把 INPUT 复制为 <名称>.bk.clip 作为备份。
设置环境变量 DEBUG 可输出调试日志。
"""

import argparse
import logging
import os
import re
import shutil
import sys
from typing import List, Optional

from . import __version__
from .exceptions import ClipLayerError
from .hooks.predicates import RegexPredicate, DEFAULT_LAYER_PATTERN, DEFAULT_ROOT_BASE_NAME
from .utils import backup_path
from .workflow import rename_layers


logger = logging.getLogger(__name__)


def _regex(value: str):
    try:
        return re.compile(value)
    except re.error as e:
        raise argparse.ArgumentTypeError(f"无效的正则表达式 {value!r}: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cliplayer",
        description="把 CLIP 文件中的默认图层名改为 \"所在文件夹名 序号\""
    )
    parser.add_argument("input", help="输入 CLIP 文件")
    parser.add_argument("output", nargs="?", default=None, help="输出 CLIP 文件 (默认覆盖输入)")
    parser.add_argument(
        "--pattern", type=_regex, default=DEFAULT_LAYER_PATTERN,
        help=f"需要重命名的图层名正则 (默认: {DEFAULT_LAYER_PATTERN})"
    )
    parser.add_argument(
        "--base-name", default=DEFAULT_ROOT_BASE_NAME,
        help="根文件夹下图层的基础名称，为空则不处理根文件夹下的图层"
    )
    parser.add_argument("-v", "--version", action="version", version=f"v{__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)

    args = build_parser().parse_args(argv)

    source = args.input
    output = args.output if args.output is not None else args.input

    if not os.path.isfile(source):
        print(f"错误: 找不到文件 {source}", file=sys.stderr)
        return 1

    # 覆盖原文件时先复制一份备份，失败时原路径下的文件保持不变
    if os.path.abspath(source) == os.path.abspath(output):
        backup = str(backup_path(source))
        try:
            shutil.copy2(source, backup)
            logger.info("已备份到 %s", backup)
        except OSError as e:
            print(f"创建备份失败: {e}", file=sys.stderr)

    try:
        result = rename_layers(source, output, args.base_name, RegexPredicate(args.pattern))
    except ClipLayerError as e:
        print(f"写入错误: {e}", file=sys.stderr)
        return 1

    print(f"已重命名 {result.renamed_count} 个图层: {output}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
