#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hook 基类定义

定义"是否重命名图层"判定的抽象接口。
"""

from abc import ABC, abstractmethod
from typing import Callable


# 任何 (图层名) -> bool 的可调用对象都可以作为判定函数
Predicate = Callable[[str], bool]


class RenamePredicate(ABC):
    """
    重命名判定钩子

    遍历图层树时对每个候选图层名调用一次，可能被调用很多次，
    实现必须是无副作用的纯函数。
    """

    @property
    def display_name(self) -> str:
        """
        可读名称

        默认返回类名，子类可覆盖提供更友好的名称。
        """
        return type(self).__name__

    @abstractmethod
    def should_rename(self, name: str) -> bool:
        """
        判定图层是否需要重命名

        Args:
            name: 图层当前名称

        Returns:
            True 表示需要重命名
        """
        pass

    def __call__(self, name: str) -> bool:
        return self.should_rename(name)
