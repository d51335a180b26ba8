"""Static evaluator: material, piece-square tables, mobility and check term."""

import chess

from cimille.config import CONFIG, EvalConfig
from cimille.core.board import Position

MATE_SCORE = 100000.0
DRAW_SCORE = 0.0


class Evaluator:
    def __init__(self, cfg: EvalConfig = None):
        self.cfg = cfg or CONFIG.eval

    def evaluate(self, position: Position) -> float:
        """Return static eval in pawns, positive favors White.

        Never mutates `position`.
        """
        if position.is_checkmate():
            # side to move has no escape
            return -MATE_SCORE if position.side_to_move == chess.WHITE else MATE_SCORE
        if position.is_stalemate() or position.is_draw():
            return DRAW_SCORE

        score = 0.0
        for sq, piece in position.pieces():
            value = self.piece_value(piece.piece_type) + self.square_value(piece, sq)
            score += value if piece.color == chess.WHITE else -value

        score += self.mobility(position)
        score += self.check_term(position)
        return score

    def piece_value(self, piece_type: chess.PieceType) -> float:
        return self.cfg.piece_values.get(chess.piece_name(piece_type).upper(), 0.0)

    def square_value(self, piece: chess.Piece, sq: chess.Square) -> float:
        table = self.cfg.pst.get(chess.piece_name(piece.piece_type).upper())
        if not table:
            return 0.0
        file = chess.square_file(sq)
        rank = chess.square_rank(sq)
        # Tables read top-down from rank 8; Black uses the vertical mirror.
        row = 7 - rank if piece.color == chess.WHITE else rank
        return table[row][file] / self.cfg.pst_divisor

    def mobility(self, position: Position) -> float:
        white = position.mobility(chess.WHITE)
        black = position.mobility(chess.BLACK)
        return (white - black) * self.cfg.mobility_weight

    def check_term(self, position: Position) -> float:
        if not position.in_check():
            return 0.0
        if position.side_to_move == chess.WHITE:
            return -self.cfg.check_bonus
        return self.cfg.check_bonus
