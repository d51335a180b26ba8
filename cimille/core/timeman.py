"""Time management: turn clock state into a depth bound and a time budget."""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from cimille.config import CONFIG, TimeConfig

log = logging.getLogger(__name__)


@dataclass
class TimeControl:
    """Limits for one search, already reduced to the side to move."""

    remaining_ms: Optional[int] = None
    increment_ms: Optional[int] = None
    moves_to_go: Optional[int] = None
    move_time_ms: Optional[int] = None
    depth: Optional[int] = None
    infinite: bool = False


class TimeManager:
    def __init__(self, cfg: TimeConfig = None):
        self.cfg = cfg or CONFIG.time

    def allocate(self, tc: TimeControl) -> Tuple[Optional[int], int]:
        """Return (depth_bound, time_budget_ms); a depth bound of None means unbounded."""
        cfg = self.cfg
        depth = tc.depth
        increment = tc.increment_ms or 0

        if tc.move_time_ms is not None:
            budget = tc.move_time_ms
        elif tc.infinite:
            budget = cfg.infinite_budget_ms
        elif tc.remaining_ms is not None and tc.remaining_ms > 0:
            if tc.moves_to_go:
                budget = tc.remaining_ms // tc.moves_to_go + increment - cfg.safety_buffer_ms
            else:
                budget = tc.remaining_ms // cfg.moves_divisor + increment
                budget = min(budget, cfg.max_budget_ms) - cfg.safety_buffer_ms
        else:
            budget = cfg.fallback_budget_ms
            if depth is None:
                depth = cfg.fallback_depth

        budget = max(int(budget), cfg.min_budget_ms)
        log.debug("time allocation: depth=%s budget=%dms from %s", depth, budget, tc)
        return depth, budget
