# -*- coding: utf-8 -*-
"""
9×9 の盤面を numpy 配列として扱うための汎用ヘルパーです。

盤面はすべて shape = (9, 9) の numpy.ndarray で表します。
- 数字の盤面（問題・解）は dtype=object で、各要素は Digit または None
- 候補集合の盤面は dtype=uint16 のビットマスク（csp.domains を参照）

ここには数独のルールは一切含めず、
「全マスに関数を適用する」「2 つの盤面をマスごとに合成する」といった
受け身の操作だけを置いています。
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Optional, Sequence

import numpy as np

from ..config import GRID_SIZE

GRID_SHAPE = (GRID_SIZE, GRID_SIZE)


def splat(value: Any, dtype=object) -> np.ndarray:
    """全マスが同じ値の盤面を作ります。"""
    grid = np.empty(GRID_SHAPE, dtype=dtype)
    grid.fill(value)
    return grid


def as_grid(rows: Sequence[Sequence[Any]]) -> np.ndarray:
    """
    入れ子のリストなどを dtype=object の 9×9 配列に変換します。

    Raises
    ------
    ValueError
        9 行 9 列でない場合。
    """
    if len(rows) != GRID_SIZE or any(len(row) != GRID_SIZE for row in rows):
        raise ValueError(f"Expected a {GRID_SIZE}x{GRID_SIZE} grid")

    grid = np.empty(GRID_SHAPE, dtype=object)
    for i, row in enumerate(rows):
        for j, cell in enumerate(row):
            grid[i, j] = cell
    return grid


def map_grid(grid: np.ndarray, f: Callable[[Any], Any], dtype=object) -> np.ndarray:
    """各マスに f を適用した新しい盤面を返します。"""
    out = np.empty(GRID_SHAPE, dtype=dtype)
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            out[i, j] = f(grid[i, j])
    return out


def try_map_grid(
    grid: np.ndarray, f: Callable[[Any], Optional[Any]], dtype=object
) -> Optional[np.ndarray]:
    """
    各マスに f を適用した新しい盤面を返します。

    f がどこか 1 マスでも None を返したら、盤面全体として None を返します。
    """
    out = np.empty(GRID_SHAPE, dtype=dtype)
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            value = f(grid[i, j])
            if value is None:
                return None
            out[i, j] = value
    return out


def combine(
    a: np.ndarray, b: np.ndarray, op: Callable[[Any, Any], Any], dtype=object
) -> np.ndarray:
    """2 つの盤面をマスごとに op で合成した新しい盤面を返します。"""
    out = np.empty(GRID_SHAPE, dtype=dtype)
    for i in range(GRID_SIZE):
        for j in range(GRID_SIZE):
            out[i, j] = op(a[i, j], b[i, j])
    return out


def iter_cells(grid: np.ndarray) -> Iterator[Any]:
    """行優先（row-major）で全マスの値を順に返します。"""
    for row in grid:
        yield from row


def to_int_rows(grid: np.ndarray, blank: int = 0) -> list[list[int]]:
    """
    数字の盤面を JSON などに載せやすい int の二重リストに変換します。

    空きマス（None）は blank で表します。
    """
    return [
        [blank if cell is None else int(cell) for cell in row]
        for row in grid
    ]
