# -*- coding: utf-8 -*-
"""
sudoku_solver.grid パッケージ

盤面（グリッド）に関する処理をまとめたサブパッケージです。
- container.py : 9×9 の numpy 配列を汎用コンテナとして扱うヘルパー
- units.py     : 行・列・ブロックの座標計算と、各マスのピア
- parser.py    : テキストや DataFrame から内部表現への変換
"""
