"""Core engine components: position, evaluator, ordering, search, time and control."""

from .board import Move, Position, PositionStateError
from .evaluator import Evaluator
from .ordering import MoveOrderer
from .search import AlphaBetaSearcher, ScoredMove, SearchJob
from .timeman import TimeControl, TimeManager
from .controller import ProgressRecord, SearchController, SearchResult, SearchStatus
