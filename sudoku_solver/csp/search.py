# -*- coding: utf-8 -*-
"""
仮定（分岐）による探索を行うモジュールです。

ざっくり流れ
------------
1. 制約伝播（infer）を行い、破綻していればこのノードは Broken で失敗
2. 全マス確定していれば、その解を返す
3. 深さが上限を超えていれば、絞り込んだ盤面を持たせて DepthLimit で失敗
4. 行優先で最初の未確定マスを選び、候補ごとにそのマスを固定した
   コピーを作って、1 段深く再帰する（兄弟の枝は互いに独立）
5. 枝の結果を列挙順に見て、
   - 解が見つかればすぐに返す
   - Broken の枝は何も寄与しない
   - DepthLimit の枝は、その盤面をマスごとの和集合でまとめる
   まとめた盤面をこのノードの状態とし、DepthLimit で失敗する

外側の solve() は反復深化です。深さ上限 1 から始め、DepthLimit で
失敗するたびに上限を増やして「元の盤面から」やり直します。

並列化
------
各試行の根ノードから parallel_depth 段までの分岐は、親プロセス側で
木を展開（plan）し、その下の部分木をまとめて Executor に投げます。
結果は展開した木を列挙順にたどって 4〜5 の規則で組み上げます。
投げた部分木の中の再帰はワーカー内で直列です。
ブロッキングな join を入れ子にしないため、有限サイズのプールでも詰まりません。

解が見つかったら、まだ始まっていない部分木は取り消し、
実行中の部分木にはキャンセルフラグ（Event）で止まるよう伝えます。
各ノードの先頭でフラグを見るので、1 ノード分の時間で止まります。
"""

from __future__ import annotations

import multiprocessing
import os
import threading
from concurrent.futures import Executor, Future, ProcessPoolExecutor, ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Callable, Iterable, Iterator, List, Optional

import numpy as np

from ..config import (
    DEPTH_LIMIT_STEP,
    INITIAL_DEPTH_LIMIT,
    MAX_WORKERS,
    PARALLEL_BACKEND,
    PARALLEL_DEPTH,
)
from ..exceptions import Broken, DepthLimitReached, SearchCancelled
from ..logging_utils import get_logger
from .candidates import CandidateSet
from .domains import CandidateGrid
from .propagation import infer

logger = get_logger()

BACKENDS = ("process", "thread", "serial")


@dataclass
class SearchPool:
    """
    並列探索に使う Executor と、キャンセルフラグの作り方の組です。

    Attributes
    ----------
    executor : concurrent.futures.Executor
        部分木を実行する Executor。
    make_event : callable
        ワーカーから参照できる Event を 1 つ作って返す関数。
        スレッドなら threading.Event、プロセスなら Manager().Event。
    """

    executor: Executor
    make_event: Callable[[], Any]


@dataclass
class BranchOutcome:
    """
    1 つの枝を探索した結果です。

    Attributes
    ----------
    solution : numpy.ndarray or None
        解が見つかった場合の Digit の 9×9 盤面。
    frontier : CandidateGrid or None
        深さ上限で打ち切られた場合の、絞り込み済みの盤面。
    """

    solution: Optional[np.ndarray] = None
    frontier: Optional[CandidateGrid] = None

    @property
    def broken(self) -> bool:
        return self.solution is None and self.frontier is None


@dataclass
class _Plan:
    # 親側で展開した探索木のノード。
    # outcome（その場で決着）/ future（ワーカーに投げた）/ children のどれか 1 つを持つ
    grid: CandidateGrid
    depth: int
    outcome: Optional[BranchOutcome] = None
    future: Optional[Future] = None
    children: List["_Plan"] = field(default_factory=list)


def explore_branch(
    grid: CandidateGrid, depth: int, limit: int, cancel: Any = None
) -> BranchOutcome:
    """
    1 つの枝を直列に探索し、例外を BranchOutcome に詰め替えて返します。

    プロセスプールのワーカーからも呼ばれるため、モジュールの
    トップレベルに置いています。cancel がセットされると
    SearchCancelled がそのまま外に出ます（その結果は誰も読みません）。
    """
    try:
        return BranchOutcome(
            solution=recursive_hypothetical(grid, depth, limit, cancel=cancel)
        )
    except DepthLimitReached as e:
        return BranchOutcome(frontier=e.grid)
    except Broken:
        return BranchOutcome()


def merge_frontiers(frontiers: Iterable[CandidateGrid]) -> CandidateGrid:
    """
    深さ上限で打ち切られた枝の盤面を、マスごとの和集合でまとめます。

    1 つもなければ（全枝が破綻）、全マスが空集合の盤面を返します。
    """
    return reduce(
        lambda a, b: a | b,
        frontiers,
        CandidateGrid.splat(CandidateSet.EMPTY),
    )


def _settle(
    grid: CandidateGrid, depth: int, limit: int, cancel: Any = None
) -> Optional[np.ndarray]:
    # 1〜3: 分岐せずに決着するかを調べる。決着しなければ None
    if cancel is not None and cancel.is_set():
        raise SearchCancelled()

    infer(grid)

    solution = grid.solved()
    if solution is not None:
        return solution
    if depth > limit:
        raise DepthLimitReached(grid.copy())
    return None


def _branches(grid: CandidateGrid, depth: int, limit: int) -> List[CandidateGrid]:
    cell = grid.first_undetermined()
    assert cell is not None
    row, col = cell
    options = grid[cell].options()

    logger.debug(
        "[search] depth=%d/%d branch r%dc%d on %s",
        depth, limit, row + 1, col + 1, [int(d) for d in options],
    )
    return [grid.with_cell(row, col, d) for d in options]


def _combine(
    grid: CandidateGrid, depth: int, limit: int, outcomes: Iterator[BranchOutcome]
) -> np.ndarray:
    # 5: 枝の結果を列挙順に集めて、このノードの結果にする
    frontiers: List[CandidateGrid] = []
    for outcome in outcomes:
        if outcome.solution is not None:
            return outcome.solution
        if outcome.frontier is not None:
            frontiers.append(outcome.frontier)

    merged = merge_frontiers(frontiers)
    grid.assign(merged)

    if merged.is_empty():
        # 全ての枝が矛盾した
        raise Broken()

    logger.debug(
        "[search] depth=%d/%d merged %d frontier(s), undetermined=%d",
        depth, limit, len(frontiers), merged.undetermined_count(),
    )
    raise DepthLimitReached(grid.copy())


def _as_outcome(run: Callable[[], np.ndarray]) -> BranchOutcome:
    try:
        return BranchOutcome(solution=run())
    except DepthLimitReached as e:
        return BranchOutcome(frontier=e.grid)
    except Broken:
        return BranchOutcome()


def _plan(
    pool: SearchPool,
    grid: CandidateGrid,
    depth: int,
    limit: int,
    levels: int,
    cancel: Any,
    futures: List[Future],
) -> _Plan:
    """
    親側で探索木を levels 段だけ展開し、その下の部分木を Executor に投げます。

    展開の途中で決着したノード（破綻・解・深さ超過）はその場で結果を持たせ、
    ワーカーには投げません。
    """
    if levels <= 0:
        future = pool.executor.submit(explore_branch, grid, depth, limit, cancel)
        futures.append(future)
        return _Plan(grid, depth, future=future)

    try:
        solution = _settle(grid, depth, limit)
    except DepthLimitReached as e:
        return _Plan(grid, depth, outcome=BranchOutcome(frontier=e.grid))
    except Broken:
        return _Plan(grid, depth, outcome=BranchOutcome())
    if solution is not None:
        return _Plan(grid, depth, outcome=BranchOutcome(solution=solution))

    children = [
        _plan(pool, branch, depth + 1, limit, levels - 1, cancel, futures)
        for branch in _branches(grid, depth, limit)
    ]
    return _Plan(grid, depth, children=children)


def _resolve(plan: _Plan, limit: int) -> BranchOutcome:
    # 展開した木を列挙順にたどる。解が見つかった時点で残りの枝は読まない
    if plan.outcome is not None:
        return plan.outcome
    if plan.future is not None:
        return plan.future.result()
    return _as_outcome(
        lambda: _combine(
            plan.grid, plan.depth, limit,
            (_resolve(child, limit) for child in plan.children),
        )
    )


def recursive_hypothetical(
    grid: CandidateGrid,
    depth: int,
    limit: int,
    pool: Optional[SearchPool] = None,
    cancel: Any = None,
    parallel_depth: int = PARALLEL_DEPTH,
) -> np.ndarray:
    """
    深さ上限付きで 1 ノード分の探索を行います。grid はその場で更新されます。

    Parameters
    ----------
    grid : CandidateGrid
        このノードの盤面。呼び出し側とは共有しないコピーを渡すこと。
    depth : int
        現在の深さ（根が 1）。
    limit : int
        深さ上限。depth がこれを超えたノードは分岐しません。
    pool : SearchPool, optional
        指定された場合、このノードから parallel_depth 段の分岐を展開し、
        その下の部分木を並列に探索します。
    cancel : Event, optional
        セットされると、次に見たノードで SearchCancelled を投げて止まります。
    parallel_depth : int
        pool 使用時に親側で展開する段数。1 なら根の枝をそのまま投げます。

    Returns
    -------
    numpy.ndarray
        Digit の 9×9 の解。

    Raises
    ------
    Broken
        このノードが矛盾している、または全ての枝が矛盾していた場合。
    DepthLimitReached
        上限内で決着しなかった場合。e.grid に絞り込んだ盤面を持たせます。
    SearchCancelled
        cancel がセットされた場合。
    """
    solution = _settle(grid, depth, limit, cancel)
    if solution is not None:
        return solution

    branches = _branches(grid, depth, limit)

    if pool is None:
        # ジェネレータなので、解が見つかった時点で残りの枝は評価されない
        return _combine(
            grid, depth, limit,
            (explore_branch(b, depth + 1, limit, cancel) for b in branches),
        )

    if parallel_depth < 1:
        raise ValueError("parallel_depth must be positive")

    event = pool.make_event()
    futures: List[Future] = []
    try:
        plans = [
            _plan(pool, b, depth + 1, limit, parallel_depth - 1, event, futures)
            for b in branches
        ]
        logger.debug(
            "[search] depth=%d/%d submitted %d subtree(s)", depth, limit, len(futures),
        )
        return _combine(grid, depth, limit, (_resolve(p, limit) for p in plans))
    finally:
        # 解が見つかって途中で抜けた場合も含め、残りの部分木を止める。
        # 始まっていないものは取り消し、実行中のものはフラグを見て止まる。
        event.set()
        for future in futures:
            future.cancel()


@contextmanager
def open_executor(
    backend: str = PARALLEL_BACKEND,
    max_workers: Optional[int] = MAX_WORKERS,
) -> Iterator[Optional[SearchPool]]:
    """
    backend に応じた SearchPool を開きます。"serial" なら None を返します。

    プロセスプールが作れない環境では、警告を出して直列に切り替えます。
    終了時は、キャンセルフラグで止まりつつある部分木（各 1 ノード分）
    だけを待って後片付けします。
    """
    if backend not in BACKENDS:
        raise ValueError(f"backend must be one of: {', '.join(BACKENDS)}")

    workers = max_workers or os.cpu_count() or 1
    pool: Optional[SearchPool] = None
    manager = None

    if backend == "process":
        executor = None
        try:
            executor = ProcessPoolExecutor(max_workers=workers)
            manager = multiprocessing.Manager()
            pool = SearchPool(executor=executor, make_event=manager.Event)
        except (PermissionError, OSError, NotImplementedError) as e:
            logger.warning("Process pool unavailable (%s); searching serially.", e)
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)
    elif backend == "thread":
        pool = SearchPool(
            executor=ThreadPoolExecutor(max_workers=workers),
            make_event=threading.Event,
        )

    if pool is None:
        yield None
        return

    try:
        yield pool
    finally:
        pool.executor.shutdown(wait=True, cancel_futures=True)
        if manager is not None:
            manager.shutdown()


def solve(
    grid: CandidateGrid,
    initial_limit: int = INITIAL_DEPTH_LIMIT,
    limit_step: int = DEPTH_LIMIT_STEP,
    backend: str = PARALLEL_BACKEND,
    max_workers: Optional[int] = MAX_WORKERS,
    parallel_depth: int = PARALLEL_DEPTH,
) -> np.ndarray:
    """
    反復深化で盤面を解きます。

    各試行は、前回の試行で絞り込んだ盤面ではなく「元の盤面」の
    コピーから始めます。grid 自体は書き換えません。

    Raises
    ------
    Broken
        解が存在しないことが分かった場合。
    """
    if initial_limit < 1 or limit_step < 1:
        raise ValueError("initial_limit and limit_step must be positive")
    if parallel_depth < 1:
        raise ValueError("parallel_depth must be positive")

    limit = initial_limit
    with open_executor(backend, max_workers) as pool:
        while True:
            logger.info("[search] attempt with depth limit %d", limit)
            try:
                return recursive_hypothetical(
                    grid.copy(), 1, limit, pool=pool, parallel_depth=parallel_depth,
                )
            except DepthLimitReached:
                limit += limit_step
