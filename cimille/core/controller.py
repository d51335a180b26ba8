"""Iterative deepening driver.

The controller owns the SearchJob of the running search. Each depth is a
fresh root search; only fully completed depths update the answer, so a
stop or a timeout in the middle of an iteration falls back to the previous
depth's move.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from cimille.config import CONFIG, SearchConfig
from cimille.core.board import Move, Position
from cimille.core.search import (
    AlphaBetaSearcher, ScoredMove, SearchJob, is_mate_score, mate_distance,
)

log = logging.getLogger(__name__)


class SearchStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class ProgressRecord:
    depth: int
    score: float
    nodes: int
    nps: int
    elapsed_ms: int
    move: Move


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: float = 0.0
    depth: int = 0
    nodes: int = 0
    elapsed_ms: int = 0
    status: SearchStatus = SearchStatus.COMPLETED
    scored_moves: List[ScoredMove] = field(default_factory=list)


ProgressCallback = Callable[[ProgressRecord], None]


class SearchController:
    def __init__(self, searcher: Optional[AlphaBetaSearcher] = None,
                 cfg: SearchConfig = None, rng: Optional[random.Random] = None):
        self.searcher = searcher or AlphaBetaSearcher()
        self.cfg = cfg or CONFIG.search
        self.rng = rng or random.Random(self.cfg.random_seed)
        self.state = SearchStatus.IDLE
        self.job: Optional[SearchJob] = None

    def new_job(self, depth_bound: Optional[int], time_budget_ms: float) -> SearchJob:
        """Create the job for the next run; stop() applies to it from here on."""
        self.job = SearchJob(depth_bound=depth_bound, time_budget_ms=time_budget_ms)
        return self.job

    def stop(self):
        if self.job is not None:
            self.job.cancel()

    def run(self, position: Position, depth_bound: Optional[int], time_budget_ms: float,
            on_progress: Optional[ProgressCallback] = None,
            job: Optional[SearchJob] = None) -> SearchResult:
        """Search `position` until the depth bound, the deadline or a stop.

        Contract violations from the searcher propagate; the controller is
        left CANCELLED rather than RUNNING in that case.
        """
        if job is None:
            job = self.new_job(depth_bound, time_budget_ms)
        else:
            job.start_time = time.monotonic()
        self.state = SearchStatus.RUNNING

        final_state = SearchStatus.CANCELLED
        try:
            result = self._deepen(position, depth_bound, job, on_progress)
            final_state = result.status
        finally:
            self.state = final_state

        log.info("search finished: %s depth=%d move=%s nodes=%d time=%dms",
                 result.status.value, result.depth, result.best_move, result.nodes,
                 result.elapsed_ms)
        return result

    def _deepen(self, position: Position, depth_bound: Optional[int], job: SearchJob,
                on_progress: Optional[ProgressCallback]) -> SearchResult:
        max_depth = self.cfg.max_depth
        if depth_bound is not None:
            max_depth = min(depth_bound, max_depth)

        best: Optional[ScoredMove] = None
        completed_depth = 0
        scored_moves: List[ScoredMove] = []
        last_iteration_ms = 0.0
        status = SearchStatus.COMPLETED

        depth = 1
        while depth <= max_depth:
            if job.is_expired():
                status = SearchStatus.TIMED_OUT
                break
            if job.is_cancelled():
                status = SearchStatus.CANCELLED
                break
            # a mate is never deeper than the depth that found it
            if best is not None and is_mate_score(best.score) \
                    and mate_distance(best.score) <= depth + 1:
                log.debug("forced mate confirmed at depth %d, not deepening", completed_depth)
                break
            if best is not None and not self._has_time_for_next(job, last_iteration_ms):
                status = SearchStatus.TIMED_OUT
                break

            job.truncated = False
            iteration_start = job.elapsed_ms()
            scored = self.searcher.search_root(position, depth, job)
            last_iteration_ms = job.elapsed_ms() - iteration_start

            if job.truncated:
                # partial iteration: keep the last completed depth
                status = SearchStatus.CANCELLED if job.is_cancelled() else SearchStatus.TIMED_OUT
                break
            if not scored:
                break

            best = scored[0]
            scored_moves = scored
            completed_depth = depth
            self._report(job, depth, best, on_progress)
            depth += 1

        result = SearchResult(
            best_move=best.move if best else None,
            score=best.score if best else 0.0,
            depth=completed_depth,
            nodes=job.nodes,
            elapsed_ms=int(job.elapsed_ms()),
            status=status,
            scored_moves=scored_moves,
        )
        if result.best_move is None:
            result.best_move = self._fallback_move(position)
        return result

    def _has_time_for_next(self, job: SearchJob, last_iteration_ms: float) -> bool:
        remaining = job.time_budget_ms - job.elapsed_ms()
        if remaining < self.cfg.min_iteration_ms:
            return False
        return last_iteration_ms * self.cfg.time_growth_factor <= remaining

    def _report(self, job: SearchJob, depth: int, best: ScoredMove,
                on_progress: Optional[ProgressCallback]):
        elapsed = max(1, int(job.elapsed_ms()))
        record = ProgressRecord(
            depth=depth,
            score=best.score,
            nodes=job.nodes,
            nps=job.nodes * 1000 // elapsed,
            elapsed_ms=elapsed,
            move=best.move,
        )
        log.debug("depth %d: %s score=%.2f nodes=%d", depth, best.move, best.score, job.nodes)
        if on_progress:
            try:
                on_progress(record)
            except Exception:
                # reporting errors never abort the search
                log.exception("progress callback failed at depth %d", depth)

    def _fallback_move(self, position: Position) -> Optional[Move]:
        moves = position.legal_moves()
        if not moves:
            return None
        move = self.rng.choice(moves)
        log.warning("no completed depth, playing random move %s", move)
        return move
