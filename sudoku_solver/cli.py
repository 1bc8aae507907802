# -*- coding: utf-8 -*-
"""
コマンドラインから数独を解くエントリポイントです。

Usage:
  sudoku-solve puzzle.txt
  python -m sudoku_solver puzzle.txt --backend serial --verbose

終了コード:
  0 : 解けた（解を標準出力に表示）
  1 : 解がない / ファイルが読めない / 書式が不正
  2 : 引数が足りない
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import solve_puzzle
from .config import INITIAL_DEPTH_LIMIT, MAX_WORKERS, PARALLEL_BACKEND
from .csp.search import BACKENDS
from .exceptions import PuzzleFormatError
from .grid.parser import parse_puzzle
from .logging_utils import get_logger
from .postprocess.render_result import render_solution

USAGE = "usage: solve puzzle.txt"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sudoku-solve", description="Solve a 9x9 sudoku.")
    ap.add_argument("path", nargs="?", help="puzzle file, one row per line, '.' = blank")
    ap.add_argument("--initial-limit", type=int, default=INITIAL_DEPTH_LIMIT)
    ap.add_argument("--backend", choices=BACKENDS, default=PARALLEL_BACKEND)
    ap.add_argument("--workers", type=int, default=MAX_WORKERS)
    ap.add_argument("--verbose", action="store_true", help="log search progress")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.path is None:
        print(USAGE, file=sys.stderr)
        return 2

    get_logger("DEBUG" if args.verbose else "WARNING")

    try:
        text = Path(args.path).read_text(encoding="utf-8")
        puzzle = parse_puzzle(text)
    except (OSError, PuzzleFormatError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    solution = solve_puzzle(
        puzzle,
        initial_limit=args.initial_limit,
        backend=args.backend,
        max_workers=args.workers,
    )
    if solution is None:
        print("Invalid sudoku, cannot solve", file=sys.stderr)
        return 1

    sys.stdout.write(render_solution(solution))
    return 0
