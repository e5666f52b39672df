#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
内置判定 Hook 实现

提供正则匹配等常用的重命名判定。
"""

import re
from typing import Pattern, Union

from .base import RenamePredicate


# CLIP STUDIO PAINT 新建图层的默认名称
DEFAULT_LAYER_PATTERN = r"レイヤー \d+"

# 根文件夹下图层使用的基础名称
DEFAULT_ROOT_BASE_NAME = "レイヤー "


class RegexPredicate(RenamePredicate):
    """
    正则判定

    图层名中任意位置匹配即视为需要重命名 (re.search 语义)。
    """

    def __init__(self, pattern: Union[str, Pattern[str]]):
        self._regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    @property
    def display_name(self) -> str:
        return f"regex({self._regex.pattern})"

    def should_rename(self, name: str) -> bool:
        return self._regex.search(name) is not None


class AlwaysRename(RenamePredicate):
    """所有图层都重命名"""

    @property
    def display_name(self) -> str:
        return "always"

    def should_rename(self, name: str) -> bool:
        return True


class NeverRename(RenamePredicate):
    """不重命名任何图层"""

    @property
    def display_name(self) -> str:
        return "never"

    def should_rename(self, name: str) -> bool:
        return False


def default_predicate() -> RegexPredicate:
    """匹配默认图层名的判定"""
    return RegexPredicate(DEFAULT_LAYER_PATTERN)
