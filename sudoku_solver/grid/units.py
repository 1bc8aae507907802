# -*- coding: utf-8 -*-
"""
行・列・3×3 ブロックという 27 個の「ユニット」の座標計算です。

盤面上のマスは (row, col) の座標か、row * 9 + col の
フラットなインデックスで表します。
"""

from __future__ import annotations

from typing import List, Tuple

import numpy as np

from ..config import BLOCK_SIZE, GRID_SIZE
from ..types import CellCoord


def flat_index(row: int, col: int) -> int:
    return row * GRID_SIZE + col


def block_cell(unit: int, pos: int) -> CellCoord:
    """
    ブロック番号 unit（0〜8）の中の pos 番目（0〜8）のマスの座標を返します。

    ブロックは左上から行優先で番号を振り、
    ブロック内のマスも左上から行優先で並べます。
    """
    row = (unit // BLOCK_SIZE) * BLOCK_SIZE + pos // BLOCK_SIZE
    col = (unit % BLOCK_SIZE) * BLOCK_SIZE + pos % BLOCK_SIZE
    return row, col


ROWS: List[List[CellCoord]] = [
    [(i, j) for j in range(GRID_SIZE)] for i in range(GRID_SIZE)
]
COLS: List[List[CellCoord]] = [
    [(j, i) for j in range(GRID_SIZE)] for i in range(GRID_SIZE)
]
BLOCKS: List[List[CellCoord]] = [
    [block_cell(i, j) for j in range(GRID_SIZE)] for i in range(GRID_SIZE)
]

# 27 ユニット（行 9 + 列 9 + ブロック 9）
UNITS: List[List[CellCoord]] = ROWS + COLS + BLOCKS

# shape = (27, 9) のフラットインデックス配列。numpy の一括判定に使います。
UNIT_INDEX: np.ndarray = np.array(
    [[flat_index(r, c) for r, c in unit] for unit in UNITS], dtype=np.intp
)


def _build_peers() -> Tuple[Tuple[int, ...], ...]:
    peers = []
    for idx in range(GRID_SIZE * GRID_SIZE):
        row, col = divmod(idx, GRID_SIZE)
        ps = set()
        for unit in UNITS:
            if (row, col) in unit:
                ps.update(flat_index(r, c) for r, c in unit)
        ps.discard(idx)
        peers.append(tuple(sorted(ps)))
    return tuple(peers)


# PEERS[idx] は、マス idx と同じ行・列・ブロックに属する他の 20 マス
PEERS: Tuple[Tuple[int, ...], ...] = _build_peers()
