from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
import sys
import os
from typing import List, Optional, Union
import pandas as pd

# プロジェクトルートをパスに追加して sudoku_solver をインポート可能にする
# このファイルは api_proto/local_api.py なので、親ディレクトリがルート
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sudoku_solver import PuzzleFormatError, solve
from sudoku_solver.logging_utils import get_logger

logger = get_logger()

app = FastAPI()

class SolveRequest(BaseModel):
    board: List[List[Union[int, str, None]]]  # 9x9, 空きマスは 0 / "" / "." / null
    user_id: Optional[str] = None
    backend: str = "thread"

@app.post("/api/solve")
async def api_solve(request: SolveRequest):
    """
    Solver API endpoint.
    Receives grid data (2D array), converts to DataFrame, and calls solver logic.
    """
    logger.info("/api/solve user_id=%s", request.user_id)
    try:
        # 2D配列をDataFrameに変換
        df = pd.DataFrame(request.board)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return solve(df, backend=request.backend)
    except (PuzzleFormatError, ValueError) as e:
        # 書式の誤り / 不明な backend
        raise HTTPException(status_code=400, detail=str(e))
