"""Alpha-beta minimax over a single fixed depth.

Scores are always from White's point of view: White maximizes, Black
minimizes. Mate scores live in a band just below MATE_SCORE; a mated leaf
scores +/-MATE_SCORE and loses one unit per ply on its way back to the root,
so a mate found nearer the root always outranks a deeper one.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import chess

from cimille.core.board import Move, Position
from cimille.core.evaluator import DRAW_SCORE, MATE_SCORE, Evaluator
from cimille.core.ordering import MoveOrderer

log = logging.getLogger(__name__)

INF = float("inf")
MAX_PLY = 256
MATE_THRESHOLD = MATE_SCORE - MAX_PLY


def is_mate_score(score: float) -> bool:
    return abs(score) >= MATE_THRESHOLD


def mate_distance(score: float) -> int:
    """Plies to mate encoded in a root score."""
    return int(round(MATE_SCORE - abs(score)))


def toward_root(score: float) -> float:
    """Move a mate score one ply farther from the mated position."""
    if not is_mate_score(score):
        return score
    return score - 1 if score > 0 else score + 1


def away_from_root(bound: float) -> float:
    """Inverse of toward_root: restate a parent's window bound in the child's frame."""
    if bound in (INF, -INF) or not is_mate_score(bound):
        return bound
    return bound + 1 if bound > 0 else bound - 1


@dataclass
class SearchJob:
    """State of one search request; never shared between searches."""

    depth_bound: Optional[int] = None
    time_budget_ms: float = INF
    start_time: float = field(default_factory=time.monotonic)
    stop_event: threading.Event = field(default_factory=threading.Event)
    nodes: int = 0
    # set when the current iteration returned early on stop/timeout
    truncated: bool = False

    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.start_time) * 1000

    def is_cancelled(self) -> bool:
        return self.stop_event.is_set()

    def is_expired(self) -> bool:
        return self.elapsed_ms() >= self.time_budget_ms

    def should_stop(self) -> bool:
        return self.is_cancelled() or self.is_expired()

    def cancel(self):
        self.stop_event.set()


@dataclass(frozen=True)
class ScoredMove:
    move: Move
    score: float


class AlphaBetaSearcher:
    def __init__(self, evaluator: Optional[Evaluator] = None, orderer: Optional[MoveOrderer] = None):
        self.evaluator = evaluator or Evaluator()
        self.orderer = orderer or MoveOrderer()

    def search(self, position: Position, depth: int, alpha: float, beta: float,
               job: SearchJob) -> Tuple[float, Optional[Move]]:
        """Return (score, best move at this node) for `position` searched to `depth` plies.

        `position` is mutated during the call and restored before it returns.
        """
        if depth < 0:
            raise ValueError(f"negative search depth: {depth}")

        if job.should_stop():
            job.truncated = True
            return self.evaluator.evaluate(position), None

        if position.is_checkmate():
            # the side to move is mated
            return (-MATE_SCORE if position.side_to_move == chess.WHITE else MATE_SCORE), None

        if position.is_stalemate() or position.is_draw():
            return DRAW_SCORE, None

        if depth == 0:
            job.nodes += 1
            return self.evaluator.evaluate(position), None

        maximizing = position.side_to_move == chess.WHITE
        best_score = -INF if maximizing else INF
        best_move = None

        for move in self.orderer.order_moves(position, position.legal_moves()):
            if job.should_stop():
                job.truncated = True
                break

            position.apply(move)
            try:
                score, _ = self.search(position, depth - 1,
                                       away_from_root(alpha), away_from_root(beta), job)
            finally:
                position.undo()
            score = toward_root(score)

            if maximizing:
                if score > best_score:
                    best_score = score
                    best_move = move
                alpha = max(alpha, score)
            else:
                if score < best_score:
                    best_score = score
                    best_move = move
                beta = min(beta, score)

            if alpha >= beta:
                break

        if best_move is None:
            # interrupted before the first move finished
            return self.evaluator.evaluate(position), None
        return best_score, best_move

    def search_root(self, position: Position, depth: int, job: SearchJob) -> List[ScoredMove]:
        """Score every root move at `depth` plies, best first for the side to move.

        Only the first entry is exact; later entries may be bounds once the
        window has narrowed. Ties keep enumeration order.
        """
        if depth < 1:
            raise ValueError(f"root search needs depth >= 1, got {depth}")

        maximizing = position.side_to_move == chess.WHITE
        alpha, beta = -INF, INF
        scored: List[ScoredMove] = []

        for move in self.orderer.order_moves(position, position.legal_moves()):
            if job.should_stop():
                job.truncated = True
                log.debug("root search stopped after %d of its moves", len(scored))
                break

            position.apply(move)
            try:
                score, _ = self.search(position, depth - 1,
                                       away_from_root(alpha), away_from_root(beta), job)
            finally:
                position.undo()
            score = toward_root(score)
            scored.append(ScoredMove(move, score))

            if maximizing:
                alpha = max(alpha, score)
            else:
                beta = min(beta, score)

        scored.sort(key=lambda sm: sm.score, reverse=maximizing)
        return scored
