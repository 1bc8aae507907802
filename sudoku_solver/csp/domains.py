# -*- coding: utf-8 -*-
"""
盤面全体の候補集合（CandidateGrid）を扱うモジュールです。

CandidateGrid は 81 マス分の候補マスクを shape = (9, 9), dtype=uint16 の
numpy 配列で持ちます。探索の作業状態そのものです。

- 問題（Digit / None の盤面）からの初期化
- 破綻しているかどうかの判定（ソルバー全体で唯一の「矛盾」の定義）
- 全マス確定時の解の取り出し
- 表示用の読み取り専用ビュー

CandidateGrid は「値」として扱います。分岐するときは必ず copy() した
別の盤面を渡し、兄弟の分岐が互いの途中状態を見ることはありません。
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..grid.container import GRID_SHAPE, map_grid, splat, try_map_grid
from ..grid.units import UNIT_INDEX
from ..types import CellCoord, CellState, Digit
from .candidates import FULL_MASK, CandidateSet, bit

MASK_DTYPE = np.uint16

# IS_SINGLE[mask] は、mask がちょうど 1 ビットだけ立っているとき True
IS_SINGLE: np.ndarray = np.array(
    [m != 0 and m & (m - 1) == 0 for m in range(FULL_MASK + 1)], dtype=bool
)


class CandidateGrid:
    """
    9×9 の候補集合の盤面です。

    Attributes
    ----------
    masks : numpy.ndarray
        shape = (9, 9), dtype=uint16。各要素が 1 マスの候補ビットマスク。
    """

    __slots__ = ("masks",)

    def __init__(self, masks: Optional[np.ndarray] = None) -> None:
        if masks is None:
            masks = splat(FULL_MASK, dtype=MASK_DTYPE)
        masks = np.array(masks, dtype=MASK_DTYPE)
        if masks.shape != GRID_SHAPE:
            raise ValueError(f"Candidate grid must be 9x9, got {masks.shape}")
        self.masks = masks

    # ---- 生成 --------------------------------------------------------------

    @classmethod
    def from_puzzle(cls, puzzle: np.ndarray) -> "CandidateGrid":
        """
        問題の盤面（各マス Digit または None）から候補グリッドを作ります。

        数字のあるマスは 1 要素の集合、空きマスは 1〜9 すべての集合になります。
        """
        puzzle = np.asarray(puzzle, dtype=object)
        return cls(
            map_grid(
                puzzle,
                lambda d: CandidateSet.initial_state(d).bits,
                dtype=MASK_DTYPE,
            )
        )

    @classmethod
    def splat(cls, candidates: CandidateSet) -> "CandidateGrid":
        """全マスが同じ候補集合の盤面を作ります。"""
        return cls(splat(candidates.bits, dtype=MASK_DTYPE))

    def copy(self) -> "CandidateGrid":
        return CandidateGrid(self.masks)

    def assign(self, other: "CandidateGrid") -> None:
        """other の内容でこの盤面をその場で置き換えます。"""
        self.masks[...] = other.masks

    def with_cell(self, row: int, col: int, digit: Digit) -> "CandidateGrid":
        """(row, col) を digit に固定したコピーを返します。"""
        branch = self.copy()
        branch.masks[row, col] = bit(digit)
        return branch

    # ---- マス単位のアクセス ------------------------------------------------

    def __getitem__(self, cell: CellCoord) -> CandidateSet:
        row, col = cell
        return CandidateSet(int(self.masks[row, col]))

    def __setitem__(self, cell: CellCoord, value: CandidateSet) -> None:
        row, col = cell
        self.masks[row, col] = value.bits

    def first_undetermined(self) -> Optional[CellCoord]:
        """行優先で最初の「まだ確定していない」マスを返します。"""
        undetermined = np.flatnonzero(~IS_SINGLE[self.masks.ravel()])
        if undetermined.size == 0:
            return None
        row, col = divmod(int(undetermined[0]), 9)
        return row, col

    def undetermined_count(self) -> int:
        return int((~IS_SINGLE[self.masks]).sum())

    # ---- 判定 --------------------------------------------------------------

    def is_empty(self) -> bool:
        """全マスが空集合（全分岐が破綻した合図）かどうか。"""
        return not self.masks.any()

    def is_broken(self) -> bool:
        """
        盤面が破綻しているかを判定します。

        次のどちらかなら破綻です。
        (a) 候補が空のマスがある
        (b) 同じ行・列・ブロックの 2 マスが同じ数字に確定している

        (b) は 27 ユニットそれぞれで確定マスのビットを集計して調べます。
        1 ビットずつのマスクなので、ユニット内に重複がなければ
        「ビットの和」と「ビットの OR」が一致し、重複があれば必ず食い違います。
        これは全ペアを比較するのと同じ結果になります。
        """
        flat = self.masks.ravel()
        if not flat.all():
            return True

        fixed = np.where(IS_SINGLE[flat], flat, 0).astype(np.int64)
        units = fixed[UNIT_INDEX]
        return bool((np.bitwise_or.reduce(units, axis=1) != units.sum(axis=1)).any())

    def solved(self) -> Optional[np.ndarray]:
        """
        全マスが確定していれば、Digit の 9×9 盤面を返します。

        まだ候補が複数あるマスが残っていれば None。
        破綻した盤面に対して呼ぶのはプログラムの誤りです。
        """
        assert not self.is_broken(), "Cannot operate on a broken sudoku"
        return try_map_grid(self.masks, lambda m: CandidateSet(int(m)).determined())

    def cell_states(self) -> np.ndarray:
        """
        表示用の読み取り専用ビューを返します。

        各要素は CellState.BROKEN / 確定した Digit / CellState.MULTIPLE のいずれか。
        """

        def state(mask) -> object:
            cs = CandidateSet(int(mask))
            if cs.is_broken():
                return CellState.BROKEN
            det = cs.determined()
            if det is not None:
                return det
            return CellState.MULTIPLE

        return map_grid(self.masks, state)

    # ---- 演算 --------------------------------------------------------------

    def __or__(self, other: "CandidateGrid") -> "CandidateGrid":
        if not isinstance(other, CandidateGrid):
            return NotImplemented
        return CandidateGrid(np.bitwise_or(self.masks, other.masks))

    def __and__(self, other: "CandidateGrid") -> "CandidateGrid":
        if not isinstance(other, CandidateGrid):
            return NotImplemented
        return CandidateGrid(np.bitwise_and(self.masks, other.masks))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CandidateGrid):
            return NotImplemented
        return bool(np.array_equal(self.masks, other.masks))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"CandidateGrid(undetermined={self.undetermined_count()})"

    # ---- 伝播・探索（実体は propagation / search モジュール） ---------------

    def infer_step(self) -> None:
        from .propagation import infer_step

        infer_step(self)

    def infer(self) -> None:
        from .propagation import infer

        infer(self)

    def recursive_hypothetical(self, depth: int, limit: int, **kwargs) -> np.ndarray:
        from .search import recursive_hypothetical

        return recursive_hypothetical(self, depth, limit, **kwargs)

    def solve(self, **kwargs) -> np.ndarray:
        from .search import solve

        return solve(self, **kwargs)
