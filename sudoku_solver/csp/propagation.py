# -*- coding: utf-8 -*-
"""
制約伝播（propagation）を行うモジュールです。

ここでの伝播は「仮にこのマスをこの数字に固定したら盤面が破綻するか？」を
全マス・全候補について試し、破綻する候補を本物の盤面から消す、
という 1 周分の掃き出し（infer_step）と、
それを変化がなくなるまで繰り返す不動点ループ（infer）から成ります。

矛盾を見つけたら Broken 例外を投げ、その枝は探索側で捨てられます。
"""

from __future__ import annotations

import numpy as np

from ..exceptions import Broken
from ..grid.units import PEERS
from .candidates import is_single
from .domains import CandidateGrid


def infer_step(grid: CandidateGrid) -> None:
    """
    1 周分の推論を行い、grid をその場で絞り込みます。

    行優先で各マスを見ていき、まだ確定していないマスの候補 d ごとに
    「そのマスを d に固定した仮の盤面」が破綻するなら d を候補から外します。
    後ろのマスは、前のマスで外した結果を見た上で判定されます。

    掃き出しの開始時点で盤面が破綻していないので、仮の盤面が破綻するのは
    「同じユニットの他のマスがすでに d に確定している」場合に限られます。
    そのため各マスについて、確定済みのピアの数字をまとめて外しています。

    Raises
    ------
    Broken
        掃き出しの前、途中、後のいずれかで盤面が破綻した場合。
        途中で破綻したときは grid を書き換えません。
    """
    if grid.is_broken():
        raise Broken()

    cells = grid.masks.ravel().tolist()
    for idx, mask in enumerate(cells):
        if is_single(mask):
            continue

        fixed = 0
        for p in PEERS[idx]:
            m = cells[p]
            if m & (m - 1) == 0:
                fixed |= m

        remaining = mask & ~fixed
        if remaining != mask:
            if remaining == 0:
                # このマスに置ける数字がなくなった
                raise Broken()
            cells[idx] = remaining

    grid.masks[...] = np.array(cells, dtype=grid.masks.dtype).reshape(grid.masks.shape)

    if grid.is_broken():
        raise Broken()


def infer(grid: CandidateGrid) -> None:
    """
    infer_step を、盤面が変化しなくなるまで繰り返します（不動点）。

    収束までの回数は問題ごとに読めないので、回数ではなく
    「掃き出しの前後で盤面全体が等しいか」で停止を判定します。

    Raises
    ------
    Broken
        どこかの掃き出しで盤面が破綻した場合。
    """
    while True:
        original = grid.copy()
        infer_step(grid)
        if grid == original:
            return
