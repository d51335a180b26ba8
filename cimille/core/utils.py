import logging
import sys

import chess

from cimille.core.search import is_mate_score, mate_distance


def configure_logging(level: str = "INFO"):
    """Route engine logs to stderr; stdout belongs to the protocol."""
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def uci_score(score: float, turn: chess.Color) -> str:
    """White-relative pawn score -> UCI 'cp N' / 'mate N' from the mover's view."""
    pov = score if turn == chess.WHITE else -score
    if is_mate_score(pov):
        mate_in = (mate_distance(pov) + 1) // 2
        return f"mate {mate_in if pov > 0 else -mate_in}"
    return f"cp {int(round(pov * 100))}"


def format_info(record, turn: chess.Color) -> str:
    return (f"info depth {record.depth} score {uci_score(record.score, turn)} "
            f"nodes {record.nodes} nps {record.nps} time {record.elapsed_ms} "
            f"pv {record.move.uci()}")


def format_bestmoves(scored_moves, limit: int = 4) -> str:
    parts = [f"{sm.move.uci()} {round(sm.score, 2)}" for sm in scored_moves[:limit]]
    return "info string bestmoves " + " ".join(parts)
