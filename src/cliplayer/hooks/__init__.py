#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
cliplayer Hook 系统

提供重命名判定的可插拔接口。
"""

from .base import RenamePredicate, Predicate
from .predicates import (
    RegexPredicate,
    AlwaysRename,
    NeverRename,
    default_predicate,
    DEFAULT_LAYER_PATTERN,
    DEFAULT_ROOT_BASE_NAME,
)

__all__ = [
    # 抽象基类
    "RenamePredicate",
    "Predicate",
    # 内置实现
    "RegexPredicate",
    "AlwaysRename",
    "NeverRename",
    "default_predicate",
    "DEFAULT_LAYER_PATTERN",
    "DEFAULT_ROOT_BASE_NAME",
]
