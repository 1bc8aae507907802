# -*- coding: utf-8 -*-
"""
数独ソルバーで使う主なデータ構造（型）をまとめたモジュールです。

dataclass を使うことで、
「この構造体はどんなフィールドを持っているのか」を
分かりやすく表現しています。
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple

# グリッド上の座標を表す型 (row, col)、どちらも 0 始まり
CellCoord = Tuple[int, int]


@dataclass(frozen=True, order=True)
class Digit:
    """
    数独の数字 1〜9 を表す値型です。

    Attributes
    ----------
    value : int
        1〜9 の整数。範囲外はコンストラクタで ValueError になります。

    Notes
    -----
    すでに範囲内と分かっている値（候補集合のビット位置から求めた値など）は
    :meth:`unchecked` で検証を省略して作れます。
    """

    value: int

    MIN: ClassVar["Digit"]
    MAX: ClassVar["Digit"]

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValueError(f"Sudoku digit must be an int, got {self.value!r}")
        if not 1 <= self.value <= 9:
            raise ValueError(f"Sudoku digits must be between 1 and 9, found: {self.value}")

    @classmethod
    def unchecked(cls, value: int) -> "Digit":
        """範囲チェックを行わずに Digit を作ります（呼び出し側で保証済みの場合のみ）。"""
        assert 1 <= value <= 9, value
        digit = object.__new__(cls)
        object.__setattr__(digit, "value", value)
        return digit

    @classmethod
    def from_index(cls, index: int) -> Optional["Digit"]:
        """0〜8 のインデックスから Digit を返します。範囲外なら None。"""
        if 0 <= index <= 8:
            return cls.unchecked(index + 1)
        return None

    def index(self) -> int:
        """0〜8 のインデックス（ビット位置）を返します。"""
        return self.value - 1

    def next(self) -> Optional["Digit"]:
        if self.value < 9:
            return Digit.unchecked(self.value + 1)
        return None

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


Digit.MIN = Digit(1)
Digit.MAX = Digit(9)

ALL_DIGITS: Tuple[Digit, ...] = tuple(Digit(v) for v in range(1, 10))


class CellState(Enum):
    """
    候補グリッドの表示用ビューで、数字が確定していないマスの状態です。

    確定しているマスはこの列挙ではなく :class:`Digit` そのもので表します。
    """

    BROKEN = "broken"      # 候補が 1 つも残っていない
    MULTIPLE = "multiple"  # 候補が 2 つ以上残っている
