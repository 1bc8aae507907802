# -*- coding: utf-8 -*-
"""
問題の入力を内部表現（Digit または None の 9×9 配列）に正規化するモジュールです。

主な役割:
- テキスト形式の問題をパース（1 行 = 1 行、"." や空白 = 空きマス）
- pandas.DataFrame の盤面を numpy 配列に変換し、各セルを正規化
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np
import pandas as pd

from ..config import BLANK_CHARS, GRID_SIZE
from ..exceptions import PuzzleFormatError
from ..types import Digit
from .container import GRID_SHAPE


def parse_puzzle(text: str, blank_chars: str = BLANK_CHARS) -> np.ndarray:
    """
    テキストの問題を Digit / None の 9×9 配列に変換します。

    書式
    ----
    - 1 行が盤面の 1 行に対応
    - blank_chars に含まれる文字（既定では "."）と空白文字は空きマス
    - "1"〜"9" は確定した数字
    - 9 列に満たない行は、残りを空きマスとして扱う
    - 末尾の空行は無視

    Raises
    ------
    PuzzleFormatError
        それ以外の文字が含まれる場合や、9 行 / 9 列を超える場合、
        行数が 9 に満たない場合。
    """
    lines = text.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()

    if len(lines) != GRID_SIZE:
        raise PuzzleFormatError(
            f"Sudoku input must have {GRID_SIZE} rows, found: {len(lines)}"
        )

    grid = np.empty(GRID_SHAPE, dtype=object)
    for ri, line in enumerate(lines):
        if len(line) > GRID_SIZE and line[GRID_SIZE:].strip():
            raise PuzzleFormatError(
                f"Row {ri + 1} has more than {GRID_SIZE} columns: {line!r}"
            )
        for ci in range(GRID_SIZE):
            ch = line[ci] if ci < len(line) else " "
            grid[ri, ci] = _parse_char(ch, blank_chars)

    return grid


def _parse_char(ch: str, blank_chars: str = BLANK_CHARS) -> Optional[Digit]:
    if ch in blank_chars or ch.isspace():
        return None
    if not ch.isdigit() or not ch.isascii():
        raise PuzzleFormatError(f"Invalid character in sudoku input: {ch}")
    try:
        return Digit(int(ch))
    except ValueError as e:
        raise PuzzleFormatError(str(e)) from e


def normalize_cell(x: Any) -> Optional[Digit]:
    """
    DataFrame などから来た個々のセルの値を Digit / None に変換します。

    変換ルール
    ----------
    - None, NaN, 空文字, "."（BLANK_CHARS）, 0 : 空きマス（None）
    - 1〜9 の int / 整数値の float / 数字文字列 : Digit
    - それ以外 : PuzzleFormatError
    """
    if x is None:
        return None
    if isinstance(x, Digit):
        return x
    if isinstance(x, str):
        s = x.strip()
        if not s or s in BLANK_CHARS:
            return None
        if not s.isdigit():
            raise PuzzleFormatError(f"Invalid cell value: {x!r}")
        x = int(s)
    elif isinstance(x, (bool, np.bool_)):
        raise PuzzleFormatError(f"Invalid cell value: {x!r}")
    elif isinstance(x, (int, np.integer)):
        x = int(x)
    elif isinstance(x, (float, np.floating)):
        if pd.isna(x):
            return None
        if not float(x).is_integer():
            raise PuzzleFormatError(f"Invalid cell value: {x!r}")
        x = int(x)
    elif pd.api.types.is_scalar(x) and pd.isna(x):
        # pd.NA など
        return None
    else:
        raise PuzzleFormatError(f"Invalid cell value: {x!r}")

    if x == 0:
        return None
    try:
        return Digit(x)
    except ValueError as e:
        raise PuzzleFormatError(str(e)) from e


def normalize_grid(df: pd.DataFrame) -> np.ndarray:
    """
    DataFrame から 2次元 numpy 配列に変換し、
    各セルを :func:`normalize_cell` によって正規化します。

    Parameters
    ----------
    df : pandas.DataFrame
        入力の盤面データ。shape は (9, 9) である必要があります。

    Returns
    -------
    numpy.ndarray
        shape = (9, 9), dtype=object の配列。各要素は Digit または None。
    """
    if df.shape != GRID_SHAPE:
        raise PuzzleFormatError(f"Board must be {GRID_SIZE}x{GRID_SIZE}, got {df.shape}")

    grid = np.empty(GRID_SHAPE, dtype=object)
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            grid[i, j] = normalize_cell(df.iat[i, j])

    return grid
