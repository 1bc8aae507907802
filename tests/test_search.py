# tests/test_search.py
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from sudoku_solver.config import EXHAUSTIVE_DEPTH_LIMIT
from sudoku_solver.csp import search
from sudoku_solver.csp.candidates import CandidateSet
from sudoku_solver.csp.domains import CandidateGrid
from sudoku_solver.csp.propagation import infer
from sudoku_solver.csp.search import (
    BranchOutcome,
    SearchPool,
    explore_branch,
    merge_frontiers,
    open_executor,
    recursive_hypothetical,
    solve,
)
from sudoku_solver.exceptions import Broken, DepthLimitReached, SearchCancelled
from sudoku_solver.grid.parser import parse_puzzle
from sudoku_solver.types import Digit

from conftest import (
    MEDIUM_SOLUTION_ROWS,
    MEDIUM_TEXT,
    RECTANGLE_BLANKS,
    digits_to_ints,
    is_valid_solution,
)


def cs(*values):
    s = CandidateSet.EMPTY
    for v in values:
        s.add(Digit(v))
    return s


def rectangle_answer(solution_rows):
    # 反復深化では各分岐で小さい数字から試すので、
    # 1 つ目の長方形は元の解どおり、2 つ目は入れ替わった解になる
    expected = [row[:] for row in solution_rows]
    expected[6][3], expected[6][8] = 4, 5
    expected[7][3], expected[7][8] = 5, 4
    return expected


def test_solved_grid_returns_immediately(solved_puzzle, solution_rows):
    g = CandidateGrid.from_puzzle(solved_puzzle)
    assert digits_to_ints(recursive_hypothetical(g, 1, 1)) == solution_rows


def test_depth_limit_merges_branches(rectangle_puzzle):
    g = CandidateGrid.from_puzzle(rectangle_puzzle)
    expected = g.copy()
    infer(expected)

    with pytest.raises(DepthLimitReached) as info:
        recursive_hypothetical(g, 1, 1)

    # (3, 5) の 2 つの分岐は 1 つ目の長方形を互いに逆向きに埋めるので、
    # 和集合を取ると伝播直後の盤面に戻る
    assert info.value.grid == expected
    assert g == expected
    for cell in RECTANGLE_BLANKS:
        assert info.value.grid[cell].count() == 2


def test_depth_exceeded_node_does_not_branch(rectangle_puzzle):
    g = CandidateGrid.from_puzzle(rectangle_puzzle)
    with pytest.raises(DepthLimitReached) as info:
        recursive_hypothetical(g, 2, 1)
    assert info.value.grid.undetermined_count() == 8


def test_partial_merge_keeps_only_surviving_branch():
    g = CandidateGrid()
    g[0, 0] = cs(1, 2)
    g[0, 1] = cs(1, 3)
    g[0, 2] = cs(1, 3)

    with pytest.raises(DepthLimitReached) as info:
        recursive_hypothetical(g, 1, 1)

    merged = info.value.grid
    # (0, 0) = 1 の分岐は (0, 1), (0, 2) が両方 3 になって破綻する
    assert merged[0, 0].determined() == Digit(2)
    assert merged[0, 1] == cs(1, 3)
    assert Digit(2) not in merged[0, 5]
    assert g == merged


def test_all_branches_broken_is_broken():
    g = CandidateGrid()
    for col in range(3):
        g[0, col] = cs(1, 2)

    with pytest.raises(Broken):
        recursive_hypothetical(g, 1, 1)
    assert g.is_empty()

    g = CandidateGrid()
    for col in range(3):
        g[0, col] = cs(1, 2)
    with pytest.raises(Broken):
        solve(g, backend="serial")


def test_contradictory_root_is_broken():
    g = CandidateGrid()
    g[4, 0] = cs(7)
    g[4, 6] = cs(7)
    with pytest.raises(Broken):
        recursive_hypothetical(g, 1, 5)


@pytest.mark.parametrize("backend", ["serial", "thread", "process"])
def test_solve_rectangle_puzzle(rectangle_puzzle, solution_rows, backend):
    g = CandidateGrid.from_puzzle(rectangle_puzzle)
    before = g.copy()

    solution = solve(g, backend=backend, max_workers=2)

    assert digits_to_ints(solution) == rectangle_answer(solution_rows)
    assert g == before  # 元の盤面は書き換えない


def test_solve_easy_puzzle_in_first_attempt(easy_puzzle, solution_rows, caplog):
    g = CandidateGrid.from_puzzle(easy_puzzle)
    with caplog.at_level(logging.INFO, logger="sudoku_solver"):
        solution = g.solve(backend="serial")
    assert digits_to_ints(solution) == solution_rows
    attempts = [r for r in caplog.records if "attempt with depth limit" in r.getMessage()]
    assert len(attempts) == 1


def test_solve_empty_grid(empty_puzzle):
    g = CandidateGrid.from_puzzle(empty_puzzle)
    solution = solve(g, initial_limit=EXHAUSTIVE_DEPTH_LIMIT, backend="serial")
    assert is_valid_solution(digits_to_ints(solution))


def test_solve_rejects_bad_arguments():
    g = CandidateGrid()
    with pytest.raises(ValueError):
        solve(g, initial_limit=0)
    with pytest.raises(ValueError):
        solve(g, limit_step=0, backend="serial")
    with pytest.raises(ValueError):
        solve(g, backend="gpu")


def test_explore_branch_wraps_outcomes(solved_puzzle, rectangle_puzzle):
    done = explore_branch(CandidateGrid.from_puzzle(solved_puzzle), 1, 1)
    assert done.solution is not None and not done.broken

    cut = explore_branch(CandidateGrid.from_puzzle(rectangle_puzzle), 5, 1)
    assert cut.frontier is not None and cut.solution is None

    broken = CandidateGrid()
    broken[0, 0] = CandidateSet.EMPTY
    assert explore_branch(broken, 1, 1).broken
    assert BranchOutcome().broken


def test_merge_frontiers():
    assert merge_frontiers([]).is_empty()

    a = CandidateGrid.splat(cs(1))
    b = CandidateGrid.splat(cs(4))
    merged = merge_frontiers([a, b])
    assert merged[8, 0] == cs(1, 4)


def test_open_executor_backends():
    with open_executor("serial") as pool:
        assert pool is None
    with open_executor("thread", max_workers=1) as pool:
        assert pool.executor.submit(sum, [1, 2]).result() == 3
        event = pool.make_event()
        assert not event.is_set()


def test_process_pool_falls_back_to_serial(monkeypatch, caplog, rectangle_puzzle, solution_rows):
    def refuse(*args, **kwargs):
        raise OSError("no semaphores here")

    monkeypatch.setattr(search, "ProcessPoolExecutor", refuse)

    with caplog.at_level(logging.WARNING, logger="sudoku_solver"):
        with open_executor("process") as pool:
            assert pool is None
        solution = solve(CandidateGrid.from_puzzle(rectangle_puzzle), backend="process")

    assert "searching serially" in caplog.text
    assert digits_to_ints(solution) == rectangle_answer(solution_rows)


class CountingExecutor(ThreadPoolExecutor):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.submitted = 0

    def submit(self, *args, **kwargs):
        self.submitted += 1
        return super().submit(*args, **kwargs)


def recording_pool(max_workers=2):
    events = []

    def make_event():
        event = threading.Event()
        events.append(event)
        return event

    return SearchPool(CountingExecutor(max_workers=max_workers), make_event), events


def test_fan_out_reaches_below_the_root(rectangle_puzzle, solution_rows):
    pool, events = recording_pool()
    try:
        g = CandidateGrid.from_puzzle(rectangle_puzzle)
        solution = recursive_hypothetical(g, 1, 2, pool=pool, parallel_depth=2)
    finally:
        pool.executor.shutdown(wait=True)

    # 根の (3, 5) は 2 択、その下の (6, 3) も 2 択なので 4 つの部分木が投げられる
    assert pool.executor.submitted == 4
    assert digits_to_ints(solution) == rectangle_answer(solution_rows)
    assert events and all(e.is_set() for e in events)


@pytest.mark.parametrize("parallel_depth", [1, 2, 3, 5])
def test_parallel_depth_does_not_change_results(rectangle_puzzle, parallel_depth):
    pool, events = recording_pool()
    try:
        serial = CandidateGrid.from_puzzle(rectangle_puzzle)
        with pytest.raises(DepthLimitReached) as expected:
            recursive_hypothetical(serial, 1, 1)

        g = CandidateGrid.from_puzzle(rectangle_puzzle)
        with pytest.raises(DepthLimitReached) as info:
            recursive_hypothetical(g, 1, 1, pool=pool, parallel_depth=parallel_depth)
    finally:
        pool.executor.shutdown(wait=True)

    assert info.value.grid == expected.value.grid
    assert g == serial
    assert all(e.is_set() for e in events)


def test_all_branches_broken_in_parallel():
    pool, _ = recording_pool()
    g = CandidateGrid()
    for col in range(3):
        g[0, col] = cs(1, 2)
    try:
        with pytest.raises(Broken):
            recursive_hypothetical(g, 1, 3, pool=pool, parallel_depth=2)
    finally:
        pool.executor.shutdown(wait=True)
    assert g.is_empty()


def test_set_cancel_flag_stops_the_search(rectangle_puzzle):
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(SearchCancelled):
        recursive_hypothetical(CandidateGrid.from_puzzle(rectangle_puzzle), 1, 5, cancel=cancel)
    with pytest.raises(SearchCancelled):
        explore_branch(CandidateGrid.from_puzzle(rectangle_puzzle), 2, 5, cancel)


def test_cancel_flag_is_seen_below_the_branch_root(rectangle_puzzle):
    # 根は通過させ、2 つ目のノードを見た時点でフラグが立つようにする
    class SetOnSecondCheck:
        def __init__(self):
            self.checks = 0

        def is_set(self):
            self.checks += 1
            return self.checks > 1

    flag = SetOnSecondCheck()
    with pytest.raises(SearchCancelled):
        recursive_hypothetical(CandidateGrid.from_puzzle(rectangle_puzzle), 1, 5, cancel=flag)
    assert flag.checks == 2


def test_bad_parallel_depth_rejected():
    with pytest.raises(ValueError):
        solve(CandidateGrid(), parallel_depth=0, backend="serial")


@pytest.mark.parametrize("backend", ["serial", "thread"])
def test_uniquely_solvable_puzzle_needs_several_attempts(backend, caplog):
    g = CandidateGrid.from_puzzle(parse_puzzle(MEDIUM_TEXT))

    with caplog.at_level(logging.INFO, logger="sudoku_solver"):
        solution = solve(g, backend=backend, max_workers=2)

    assert digits_to_ints(solution) == MEDIUM_SOLUTION_ROWS
    attempts = [r for r in caplog.records if "attempt with depth limit" in r.getMessage()]
    assert len(attempts) > 1
