import logging
import threading
from typing import Callable, Iterable, Optional

import chess

from cimille.core.board import Position
from cimille.core.controller import ProgressRecord, SearchController, SearchResult, SearchStatus
from cimille.core.search import AlphaBetaSearcher
from cimille.core.evaluator import Evaluator
from cimille.core.timeman import TimeControl, TimeManager

log = logging.getLogger(__name__)

# callback(record, None) per completed depth, callback(None, result) once at the end
SearchCallback = Callable[[Optional[ProgressRecord], Optional[SearchResult]], None]


class Engine:
    """Facade used by the protocol layers: new-game, set-position, search, stop."""

    def __init__(self, controller: Optional[SearchController] = None,
                 time_manager: Optional[TimeManager] = None):
        self.position = Position()
        self.controller = controller or SearchController(AlphaBetaSearcher(Evaluator()))
        self.time_manager = time_manager or TimeManager()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_searching(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def new_game(self):
        self.stop()
        self.position.reset()

    def set_position(self, fen: Optional[str] = None, moves: Iterable[str] = ()):
        """Raises ValueError on bad FEN or an illegal move; the old position is kept then."""
        self.stop()
        self.position.set_position(fen, moves)

    def make_move(self, move_uci: str) -> bool:
        try:
            move = self.position.parse_move(move_uci)
        except ValueError:
            return False
        self.position.apply(move)
        return True

    def time_control(self, depth=None, movetime=None, wtime=None, btime=None,
                     winc=None, binc=None, movestogo=None, infinite=False) -> TimeControl:
        white = self.position.side_to_move == chess.WHITE
        return TimeControl(
            remaining_ms=wtime if white else btime,
            increment_ms=winc if white else binc,
            moves_to_go=movestogo,
            move_time_ms=movetime,
            depth=depth,
            infinite=infinite,
        )

    def search(self, on_progress=None, **limits) -> SearchResult:
        """Blocking search of the current position."""
        depth, budget = self.time_manager.allocate(self.time_control(**limits))
        return self.controller.run(self.position.copy(), depth, budget, on_progress)

    def start_search(self, callback: Optional[SearchCallback] = None, **limits):
        """Search on a worker thread; the engine position may change meanwhile."""
        self.stop()
        depth, budget = self.time_manager.allocate(self.time_control(**limits))
        position = self.position.copy()
        job = self.controller.new_job(depth, budget)

        def worker():
            try:
                result = self.controller.run(
                    position, depth, budget,
                    on_progress=(lambda rec: callback(rec, None)) if callback else None,
                    job=job,
                )
            except Exception:
                log.exception("search aborted")
                result = SearchResult(best_move=None, status=SearchStatus.CANCELLED)
            if callback:
                callback(None, result)

        self._thread = threading.Thread(target=worker, daemon=True)
        self._thread.start()

    def stop(self):
        self.controller.stop()
        self.wait()

    def wait(self, timeout: Optional[float] = None):
        if self._thread:
            self._thread.join(timeout=timeout)
            if not self._thread.is_alive():
                self._thread = None

    def get_best_move(self, **limits):
        result = self.search(**limits)
        return (result.best_move.uci() if result.best_move else None), result.score
