"""FastAPI REST interface for the engine."""

import threading
from typing import List, Optional

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, field_validator

from cimille.config import CONFIG
from cimille.main import Engine

app = FastAPI(title=CONFIG.ui.engine_name, version="0.1.0")

# Shared engine instance; requests are serialized by the lock.
engine = Engine()
_engine_lock = threading.Lock()


class PositionRequest(BaseModel):
    fen: Optional[str] = None  # None or "startpos" means the initial position
    moves: List[str] = []


class MoveRequest(BaseModel):
    move: str  # UCI format e.g. "e2e4"


class SearchRequest(BaseModel):
    depth: Optional[int] = None
    movetime: Optional[int] = None

    @field_validator("depth")
    @classmethod
    def _depth_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 1 <= v <= CONFIG.search.max_depth:
            raise ValueError(f"depth must be between 1 and {CONFIG.search.max_depth}")
        return v

    @field_validator("movetime")
    @classmethod
    def _clamp_movetime(cls, v: Optional[int]) -> Optional[int]:
        # keep requests between 10 ms and 30 s
        return None if v is None else max(10, min(v, 30_000))


def _board_state() -> dict:
    position = engine.position
    return {
        "fen": position.fen(),
        "turn": "white" if position.side_to_move == chess.WHITE else "black",
        "legal_moves": [m.uci() for m in position.legal_moves()],
        "is_game_over": position.is_game_over(),
        "result": position.board.result(claim_draw=True) if position.is_game_over() else None,
    }


@app.get("/board")
def get_board():
    with _engine_lock:
        return _board_state()


@app.post("/position")
def set_position(req: PositionRequest):
    with _engine_lock:
        try:
            engine.set_position(req.fen, req.moves)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid position: {e}")
        return {"fen": engine.position.fen()}


@app.post("/move")
def make_move(req: MoveRequest):
    with _engine_lock:
        if not engine.make_move(req.move):
            raise HTTPException(status_code=400, detail=f"Illegal or malformed move: {req.move}")
        return {"fen": engine.position.fen(), "move": req.move}


@app.post("/search")
def search_move(req: SearchRequest = SearchRequest()):
    with _engine_lock:
        if engine.position.is_game_over():
            raise HTTPException(status_code=400, detail="Game is already over")
        depth = req.depth or (None if req.movetime else CONFIG.search.depth)
        result = engine.search(depth=depth, movetime=req.movetime)

    return {
        "best_move": result.best_move.uci() if result.best_move else None,
        "score": result.score,
        "depth": result.depth,
        "nodes": result.nodes,
        "time_ms": result.elapsed_ms,
        "status": result.status.value,
        "fen": engine.position.fen(),
    }


@app.post("/reset")
def reset_board():
    with _engine_lock:
        engine.new_game()
        return {"fen": engine.position.fen()}
