# sudoku_solver/__init__.py
# -*- coding: utf-8 -*-
"""
sudoku_solver パッケージの入口となるモジュールです。

api_proto/local_api.py や cli.py などから:

    from sudoku_solver import solve, solve_puzzle

と呼び出されることを想定しています。

- solve(df)          : 盤面（pandas.DataFrame）を受け取り、表示用の結果 dict を返す
- solve_puzzle(grid) : Digit / None の 9×9 盤面を受け取り、解の盤面か None を返す
- solve_text(text)   : テキスト形式の問題をパースして solve_puzzle する
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from .config import (
    DEPTH_LIMIT_STEP,
    INITIAL_DEPTH_LIMIT,
    MAX_WORKERS,
    PARALLEL_BACKEND,
)
from .csp.candidates import CandidateSet
from .csp.domains import CandidateGrid
from .csp.search import solve as solve_candidates
from .exceptions import (
    Broken,
    DepthLimitReached,
    PuzzleFormatError,
    SearchCancelled,
    SudokuError,
    Unsolvable,
)
from .grid.parser import normalize_grid, parse_puzzle
from .logging_utils import get_logger
from .postprocess.render_result import build_result
from .types import CellState, Digit

__all__ = [
    "Broken",
    "CandidateGrid",
    "CandidateSet",
    "CellState",
    "DepthLimitReached",
    "Digit",
    "PuzzleFormatError",
    "SearchCancelled",
    "SudokuError",
    "Unsolvable",
    "parse_puzzle",
    "solve",
    "solve_puzzle",
    "solve_puzzle_strict",
    "solve_text",
]

logger = get_logger()


def solve_puzzle(
    puzzle: np.ndarray,
    initial_limit: int = INITIAL_DEPTH_LIMIT,
    limit_step: int = DEPTH_LIMIT_STEP,
    backend: str = PARALLEL_BACKEND,
    max_workers: Optional[int] = MAX_WORKERS,
) -> Optional[np.ndarray]:
    """
    問題を解いて Digit の 9×9 盤面を返します。解がなければ None。
    """
    grid = CandidateGrid.from_puzzle(puzzle)
    try:
        return solve_candidates(
            grid,
            initial_limit=initial_limit,
            limit_step=limit_step,
            backend=backend,
            max_workers=max_workers,
        )
    except Broken:
        return None


def solve_puzzle_strict(puzzle: np.ndarray, **kwargs: Any) -> np.ndarray:
    """solve_puzzle と同じですが、解がなければ Unsolvable を投げます。"""
    solution = solve_puzzle(puzzle, **kwargs)
    if solution is None:
        raise Unsolvable("Invalid sudoku, cannot solve")
    return solution


def solve_text(text: str, **kwargs: Any) -> Optional[np.ndarray]:
    """テキスト形式の問題をパースして解きます。"""
    return solve_puzzle(parse_puzzle(text), **kwargs)


def solve(
    df: pd.DataFrame,
    initial_limit: int = INITIAL_DEPTH_LIMIT,
    backend: str = PARALLEL_BACKEND,
    max_workers: Optional[int] = MAX_WORKERS,
) -> Dict[str, Any]:
    """
    数独を解くメイン関数（盤面 DataFrame 版）。

    1. 盤面の正規化（Digit / None の配列へ）
    2. 候補グリッドを作って反復深化で探索
    3. 表示用の結果構築
    """
    logger.info("=== solve() START ===")
    logger.info("Grid shape: %s", df.shape)

    puzzle = normalize_grid(df)
    givens = sum(cell is not None for row in puzzle for cell in row)
    logger.info("Givens: %d / 81", givens)

    solution = solve_puzzle(
        puzzle,
        initial_limit=initial_limit,
        backend=backend,
        max_workers=max_workers,
    )
    if solution is None:
        logger.info("No solution: the puzzle is contradictory.")

    result = build_result(original_df=df, solution=solution)

    logger.info("=== solve() END (status=%s) ===", result["status"])
    return result
