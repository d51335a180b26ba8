"""Move ordering: MVV-LVA captures, checks and promotions first."""

from typing import Iterable, List

import chess

from cimille.config import CONFIG, OrderingConfig
from cimille.core.board import Move, Position

# Ordering material, independent of the evaluator's tunable values.
ORDER_VALUES = {
    chess.PAWN: 1,
    chess.KNIGHT: 3,
    chess.BISHOP: 3,
    chess.ROOK: 5,
    chess.QUEEN: 9,
    chess.KING: 0,
}


class MoveOrderer:
    def __init__(self, cfg: OrderingConfig = None):
        self.cfg = cfg or CONFIG.ordering

    def mvv_lva(self, move: Move) -> int:
        if move.captured is None:
            return 0
        return ORDER_VALUES[move.captured] * 10 - ORDER_VALUES[move.piece]

    def score_move(self, position: Position, move: Move) -> int:
        score = 0
        if move.is_capture:
            score += self.mvv_lva(move) + self.cfg.capture_bonus
        if position.gives_check(move):
            score += self.cfg.check_bonus
        if move.promotion is not None:
            score += self.cfg.promotion_bonus
        return score

    def order_moves(self, position: Position, moves: Iterable[Move]) -> List[Move]:
        # sorted() is stable: equal scores keep generation order
        return sorted(moves, key=lambda m: self.score_move(position, m), reverse=True)
