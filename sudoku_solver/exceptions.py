# -*- coding: utf-8 -*-
"""
数独ソルバーで使う例外をまとめたモジュールです。

すべて :class:`SudokuError` を継承しているので、失敗の種類を
気にしない呼び出し側はこれ 1 つを捕まえれば済みます。

- Broken / DepthLimitReached : 探索中のふつうの制御フロー。呼び出し側で必ず回復できる
- SearchCancelled             : 並列探索で、解が見つかったあとに残りの枝を止める合図
- Unsolvable                  : 厳格版の入口で、解がなかったことを表す
- PuzzleFormatError           : 入力（テキスト / 盤面）の書式の誤り

プロセスプールの境界をまたぐため、どれも pickle できる形にしています。
"""

from __future__ import annotations


class SudokuError(Exception):
    """ソルバーが投げる例外の基底クラスです。"""


class Broken(SudokuError):
    """
    途中までの割り当てが矛盾していることを表します。

    候補が 1 つも残っていないマスがあるか、同じ行・列・ブロックの
    2 マスが同じ数字に確定している状態です。
    """


class DepthLimitReached(SudokuError):
    """
    深さ上限までに決着しなかったことを表します。

    Attributes
    ----------
    grid : CandidateGrid
        そのノードが最後に持っていた、絞り込み済みの候補グリッド。
        呼び出し側はこれを兄弟の結果とマージします。
    """

    def __init__(self, grid):
        super().__init__(grid)
        self.grid = grid


class SearchCancelled(SudokuError):
    """キャンセルフラグがセットされたため、探索を途中で止めたことを表します。"""


class Unsolvable(SudokuError):
    """厳格版の入口（solve_puzzle_strict など）で、解がなかった場合に投げます。"""


class PuzzleFormatError(SudokuError, ValueError):
    """
    テキストや盤面を 9×9 の問題として読めなかったことを表します。

    例: 数字・"."・空白以外の文字、9 行 / 9 列を超える入力、
    shape が (9, 9) でない DataFrame など。
    """
