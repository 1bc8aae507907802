# -*- coding: utf-8 -*-
"""
sudoku_solver 全体で共通して使う設定値をまとめたモジュールです。

実運用時には、ここを編集することで
- 反復深化の開始深さ・増分
- 並列探索のバックエンド（プロセス / スレッド / 直列）
- ワーカー数
- ログレベル
などを簡単に変更できます。

各関数はこれらの値をキーワード引数のデフォルトとして受け取るので、
呼び出しごとに上書きすることもできます。
"""

from __future__ import annotations

from typing import Optional

# ==== 盤面 =================================================================

# 盤面の一辺のマス数（9×9 以外はサポートしない）
GRID_SIZE: int = 9

# ブロック（3×3）の一辺
BLOCK_SIZE: int = 3

# テキスト形式で「空きマス」とみなす文字（空白文字も常に空きマス扱い）
BLANK_CHARS: str = "."


# ==== 探索関連 =============================================================

# 反復深化の最初の深さ上限。
# 1 から始めて、DepthLimit で失敗するたびに DEPTH_LIMIT_STEP ずつ増やします。
INITIAL_DEPTH_LIMIT: int = 1

# 反復深化で深さ上限を増やす幅
DEPTH_LIMIT_STEP: int = 1

# 深さ上限をこの値以上にすると、未確定マス（最大 81 個）を
# すべて分岐し尽くせるため、1 回の深さ優先探索で必ず決着します。
EXHAUSTIVE_DEPTH_LIMIT: int = GRID_SIZE * GRID_SIZE


# ==== 並列化関連 ===========================================================

# 分岐の並列実行に使うバックエンド: "process", "thread", "serial"
PARALLEL_BACKEND: str = "process"

# ワーカー数の上限。None なら os.cpu_count() に任せます。
MAX_WORKERS: Optional[int] = None

# 並列探索で、各試行の根から何段までの分岐を親側で展開してから
# ワーカーに投げるか。1 なら根の枝をそのまま投げます。
PARALLEL_DEPTH: int = 2


# ==== ログ関連 =============================================================

# sudoku_solver ロガーのレベル
LOG_LEVEL: str = "INFO"
