"""Position wrapper over python-chess used as the rules collaborator of the search."""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

import chess


class PositionStateError(RuntimeError):
    """Raised when apply/undo pairing is violated."""


@dataclass(frozen=True)
class Move:
    from_square: chess.Square
    to_square: chess.Square
    piece: chess.PieceType
    promotion: Optional[chess.PieceType] = None
    captured: Optional[chess.PieceType] = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    def to_chess(self) -> chess.Move:
        return chess.Move(self.from_square, self.to_square, promotion=self.promotion)

    def uci(self) -> str:
        """Coordinate form, e.g. 'e2e4' or 'e7e8q'."""
        return self.to_chess().uci()

    def __str__(self) -> str:
        return self.uci()


class Position:
    def __init__(self, fen: Optional[str] = None):
        """Initialize from FEN or the standard starting position."""
        self.board = chess.Board(fen) if fen else chess.Board()

    @classmethod
    def from_board(cls, board: chess.Board) -> "Position":
        pos = cls.__new__(cls)
        pos.board = board
        return pos

    def copy(self) -> "Position":
        return Position.from_board(self.board.copy())

    @property
    def side_to_move(self) -> chess.Color:
        return self.board.turn

    # Setup and notation

    def reset(self):
        """Reset to the initial position."""
        self.board.reset()

    def fen(self) -> str:
        return self.board.fen()

    def set_fen(self, fen: str):
        """Raises ValueError on malformed FEN, leaving the position untouched."""
        board = chess.Board(fen)
        self.board = board

    def set_position(self, fen: Optional[str] = None, moves: Iterable[str] = ()):
        """Load `fen` (or the start position) and replay UCI moves.

        The position is only replaced once every move has been validated.
        """
        board = chess.Board(fen) if fen and fen != "startpos" else chess.Board()
        for uci in moves:
            move = chess.Move.from_uci(uci)
            if move not in board.legal_moves:
                raise ValueError(f"illegal move in replay list: {uci}")
            board.push(move)
        self.board = board

    # Move generation

    def _describe(self, move: chess.Move) -> Move:
        piece = self.board.piece_type_at(move.from_square)
        if self.board.is_en_passant(move):
            captured = chess.PAWN
        else:
            captured = self.board.piece_type_at(move.to_square)
            # castling is encoded as king-takes-own-rook in chess960 only
            if captured is not None and self.board.color_at(move.to_square) == self.board.turn:
                captured = None
        return Move(move.from_square, move.to_square, piece, move.promotion, captured)

    def legal_moves(self) -> List[Move]:
        return [self._describe(m) for m in self.board.legal_moves]

    def parse_move(self, uci: str) -> Move:
        move = chess.Move.from_uci(uci)
        if move not in self.board.legal_moves:
            raise ValueError(f"illegal move: {uci}")
        return self._describe(move)

    def mobility(self, color: chess.Color) -> int:
        """Legal-move count for `color`, as if it were to move.

        For the side not on move the turn is flipped and the en passant
        square cleared.
        """
        if color == self.board.turn:
            return self.board.legal_moves.count()
        flipped = self.board.copy(stack=False)
        flipped.turn = color
        flipped.ep_square = None
        return flipped.legal_moves.count()

    # Apply / undo

    def apply(self, move: Move):
        self.board.push(move.to_chess())

    def undo(self) -> Move:
        if not self.board.move_stack:
            raise PositionStateError("undo() without a matching apply()")
        last = self.board.pop()
        return self._describe(last)

    def gives_check(self, move: Move) -> bool:
        return self.board.gives_check(move.to_chess())

    # Status queries

    def in_check(self) -> bool:
        return self.board.is_check()

    def is_checkmate(self) -> bool:
        return self.board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self.board.is_stalemate()

    def is_draw(self) -> bool:
        """Insufficient material, fifty-move rule or threefold repetition."""
        return (
            self.board.is_insufficient_material()
            or self.board.is_fifty_moves()
            or self.board.is_repetition(3)
        )

    def is_game_over(self) -> bool:
        return self.is_checkmate() or self.is_stalemate() or self.is_draw()

    def pieces(self) -> Iterator[Tuple[chess.Square, chess.Piece]]:
        return iter(self.board.piece_map().items())
