# -*- coding: utf-8 -*-
"""
sudoku_solver.csp パッケージ

制約伝播 + 探索による数独の解法をまとめています。

主に以下の役割を持つモジュールから構成されています。
- candidates.py  : 1 マス分の候補集合（9 ビットのマスク）
- domains.py     : 盤面全体の候補集合と、破綻判定・解の取り出し
- propagation.py : 制約伝播（1 周分の掃き出しと不動点ループ）
- search.py      : 深さ上限付きの仮定探索と反復深化
"""
