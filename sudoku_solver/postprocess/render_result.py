# -*- coding: utf-8 -*-
"""
探索結果をもとに表示用の情報を構築するモジュールです。
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from ..csp.domains import CandidateGrid
from ..grid.container import to_int_rows
from ..types import CellState, Digit


def render_solution(solution: np.ndarray) -> str:
    """
    解の盤面を、各数字の後ろに空白を付けた 9 行のテキストにします。

    例: "5 3 4 6 7 8 9 1 2 \\n..."
    """
    return "".join(
        "".join(f"{d} " for d in row) + "\n"
        for row in solution
    )


def render_puzzle(puzzle: np.ndarray) -> str:
    """問題の盤面をテキストにします。空きマスは "." です。"""
    return "".join(
        "".join(". " if cell is None else f"{cell} " for cell in row) + "\n"
        for row in puzzle
    )


def _candidate_symbol(state: Any) -> str:
    if state is CellState.BROKEN:
        return "X"
    if isinstance(state, Digit):
        return str(state)
    return "-"


def render_candidates(grid: CandidateGrid) -> str:
    """
    候補グリッドの状態をテキストにします（デバッグ表示用）。

    - "X" : 候補がなくなったマス
    - 数字 : 確定したマス
    - "-" : まだ候補が複数あるマス
    """
    states = grid.cell_states()
    return "".join(
        "".join(f"{_candidate_symbol(s)} " for s in row) + "\n"
        for row in states
    )


def build_result(
    original_df: pd.DataFrame,
    solution: Optional[np.ndarray],
) -> Dict[str, Any]:
    """
    API などに返す、JSON にそのまま載せられる結果を組み立てます。

    解がなければ status="unsolvable" で solved_board は None です。
    """
    rows, cols = original_df.shape

    if solution is None:
        return {
            "status": "unsolvable",
            "solved_board": None,
            "shape": (rows, cols),
        }

    solved_df = pd.DataFrame(
        to_int_rows(solution),
        index=original_df.index,
        columns=original_df.columns,
    )

    return {
        "status": "ok",
        "solved_board": solved_df.values.tolist(),  # DataFrameは返さない
        "shape": (rows, cols),
    }
