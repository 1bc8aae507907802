# tests/conftest.py
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to sys.path so "sudoku_solver" and "api_proto" can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sudoku_solver.grid.container import as_grid  # noqa: E402
from sudoku_solver.types import Digit  # noqa: E402

# Well-known completed grid
SOLUTION_TEXT = """\
534678912
672195348
198342567
859761423
426853791
713924856
961537284
287419635
345286179
"""

SOLUTION_ROWS = [[int(ch) for ch in line] for line in SOLUTION_TEXT.splitlines()]

# Uniquely solvable puzzle that elimination alone does not finish;
# the search needs several deepening attempts.
MEDIUM_TEXT = """\
..3.2.6..
9..3.5..1
..18.64..
..81.29..
7.......8
..67.82..
..26.95..
8..2.3..9
..5.1.3..
"""

MEDIUM_SOLUTION_ROWS = [
    [int(ch) for ch in line]
    for line in (
        "483921657", "967345821", "251876493",
        "548132976", "729564138", "136798245",
        "372689514", "814253769", "695417382",
    )
]

# Cells of SOLUTION that form two "deadly rectangles": blanking them leaves a
# puzzle with exactly two solutions that propagation alone cannot split.
RECTANGLE_BLANKS = [
    (3, 5), (3, 8), (4, 5), (4, 8),
    (6, 3), (6, 8), (7, 3), (7, 8),
]


def make_puzzle(blanks):
    """SOLUTION から指定マスを空けた Digit / None の盤面を作る。"""
    blanks = set(blanks)
    return as_grid([
        [None if (i, j) in blanks else Digit(v) for j, v in enumerate(row)]
        for i, row in enumerate(SOLUTION_ROWS)
    ])


def digits_to_ints(grid):
    return [[int(d) for d in row] for row in grid]


def is_valid_solution(rows):
    """rows（int の 9×9）が数独の完成形になっているか。"""
    full = set(range(1, 10))
    for i in range(9):
        if set(rows[i]) != full:
            return False
        if {rows[r][i] for r in range(9)} != full:
            return False
        br, bc = (i // 3) * 3, (i % 3) * 3
        if {rows[br + r][bc + c] for r in range(3) for c in range(3)} != full:
            return False
    return True


@pytest.fixture
def solution_rows():
    return [row[:] for row in SOLUTION_ROWS]


@pytest.fixture
def easy_puzzle():
    # 1 行目と 1 列目をすべて空けたもの。伝播だけで解ける。
    blanks = [(0, j) for j in range(9)] + [(i, 0) for i in range(1, 9)]
    return make_puzzle(blanks)


@pytest.fixture
def diagonal_puzzle():
    return make_puzzle([(i, i) for i in range(9)])


@pytest.fixture
def rectangle_puzzle():
    return make_puzzle(RECTANGLE_BLANKS)


@pytest.fixture
def solved_puzzle():
    return make_puzzle([])


@pytest.fixture
def empty_puzzle():
    return np.full((9, 9), None, dtype=object)
