# -*- coding: utf-8 -*-
"""
ログ出力の設定を行うモジュールです。

- ソルバーの開始・終了、反復深化の各試行は INFO
- 分岐の展開やマージの様子は DEBUG
- 並列実行のフォールバックなどは WARNING
で出力します。
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import LOG_LEVEL

# sudoku_solver パッケージ共通で使うロガー名
LOGGER_NAME = "sudoku_solver"


def get_logger(level: Optional[str] = None) -> logging.Logger:
    """
    sudoku_solver 全体で共通して使う logger を返します。

    すでに handler（出力先）が設定されていない場合は、
    標準エラー出力に LOG_LEVEL のログを表示するように設定します。
    level を渡した場合は、既存の logger でもレベルだけ上書きします。
    """
    logger = logging.getLogger(LOGGER_NAME)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(LOG_LEVEL)

    if level is not None:
        logger.setLevel(level)

    return logger
