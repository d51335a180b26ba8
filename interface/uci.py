"""UCI protocol loop. stdout carries protocol lines only; logs go to stderr."""

import logging
import sys
import threading
from typing import List, Optional, TextIO

from cimille.config import CONFIG
from cimille.core.utils import configure_logging, format_bestmoves, format_info
from cimille.main import Engine

log = logging.getLogger(__name__)

# go tokens followed by an integer value
GO_INT_PARAMS = ("depth", "movetime", "wtime", "btime", "winc", "binc", "movestogo")


class UCI:
    def __init__(self, engine: Optional[Engine] = None, out: Optional[TextIO] = None):
        self.engine = engine or Engine()
        self.out = out or sys.stdout
        self._out_lock = threading.Lock()

    @property
    def board(self):
        return self.engine.position.board

    def _send(self, line: str):
        with self._out_lock:
            self.out.write(line + "\n")
            self.out.flush()

    def run(self, stream: Optional[TextIO] = None):
        stream = stream or sys.stdin
        for raw in stream:
            if not self.handle(raw):
                break
        self.engine.stop()

    def handle(self, line: str) -> bool:
        """Dispatch one command line. Returns False on quit."""
        tokens = line.strip().split()
        if not tokens:
            return True
        command, args = tokens[0], tokens[1:]

        if command == "uci":
            self._send(f"id name {CONFIG.ui.engine_name}")
            self._send(f"id author {CONFIG.ui.engine_author}")
            self._send("uciok")
        elif command == "isready":
            self._send("readyok")
        elif command == "ucinewgame":
            self.engine.new_game()
        elif command == "position":
            self._parse_position(args)
        elif command == "go":
            self._parse_go(args)
        elif command == "stop":
            self.engine.stop()
        elif command == "setoption":
            self._parse_setoption(args)
        elif command == "quit":
            return False
        else:
            log.debug("uci: ignoring unknown command %r", command)
        return True

    def _parse_position(self, tokens: List[str]):
        if not tokens:
            return
        moves: List[str] = []
        if "moves" in tokens:
            idx = tokens.index("moves")
            moves = tokens[idx + 1:]
            tokens = tokens[:idx]

        if tokens[0] == "startpos":
            fen = None
        elif tokens[0] == "fen" and len(tokens) > 1:
            fen = " ".join(tokens[1:7])
        else:
            log.warning("uci: unknown position type %r", tokens[0])
            return

        try:
            self.engine.set_position(fen, moves)
        except ValueError as e:
            log.error("uci: rejected position command: %s", e)

    def _parse_go(self, tokens: List[str]):
        limits = {}
        i = 0
        while i < len(tokens):
            tok = tokens[i]
            if tok in GO_INT_PARAMS and i + 1 < len(tokens):
                try:
                    limits[tok] = int(tokens[i + 1])
                except ValueError:
                    log.warning("uci: bad value for %s: %r", tok, tokens[i + 1])
                i += 2
            elif tok == "infinite":
                limits["infinite"] = True
                i += 1
            else:
                i += 1

        turn = self.engine.position.side_to_move
        self.engine.start_search(
            callback=lambda record, result: self._on_search(record, result, turn),
            **limits,
        )

    def _on_search(self, record, result, turn):
        if record is not None:
            self._send(format_info(record, turn))
            return
        if result.scored_moves:
            self._send(format_bestmoves(result.scored_moves))
        self._send(f"bestmove {result.best_move.uci() if result.best_move else '(none)'}")

    def _parse_setoption(self, tokens: List[str]):
        if "name" not in tokens:
            return
        rest = tokens[tokens.index("name") + 1:]
        name = " ".join(rest[:rest.index("value")] if "value" in rest else rest)
        log.info("uci: option not supported, ignoring: %s", name)


def main():
    configure_logging(CONFIG.log_level)
    UCI().run()


if __name__ == "__main__":
    main()
