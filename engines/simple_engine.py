"""Deterministic one-ply UCI engine.

Scores every legal move by material and a few simple bonuses, reports the
top ``MultiPV`` moves as ``info`` lines for each iteration up to a small
depth cap, and finishes with ``bestmove``. It exists so the analysis layer can
be exercised end to end without a Stockfish binary.
"""

import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import chess

PIECE_VALUES: Dict[int, int] = {
    chess.PAWN: 100,
    chess.KNIGHT: 320,
    chess.BISHOP: 330,
    chess.ROOK: 500,
    chess.QUEEN: 900,
    chess.KING: 0,
}

CENTER_SQUARES = [chess.D4, chess.E4, chess.D5, chess.E5]
CENTER_CONTROL_BONUS = 12
CHECK_BONUS = 25
MAX_REPORTED_DEPTH = 3
MAX_MULTIPV = 64
NODES_PER_MOVE = 20


@dataclass
class RankedMove:
    move: chess.Move
    score_cp: int
    mate: Optional[int] = None


class SimpleEngine:
    """Lightweight engine that scores single plies with static heuristics."""

    def __init__(self) -> None:
        self.board = chess.Board()
        self.running = True
        self.debug = False
        self.multipv = 1
        self._handlers: Dict[str, Callable[[str], None]] = {
            "uci": self.handle_uci,
            "isready": self.handle_isready,
            "ucinewgame": self.handle_ucinewgame,
            "setoption": self.handle_setoption,
            "position": self.handle_position,
            "go": self.handle_go,
            "debug": self.handle_debug,
            "quit": self.handle_quit,
            "stop": lambda _: None,
        }

    def start(self) -> None:
        for raw in sys.stdin:
            self.dispatch(raw)
            # Output must reach the pipe before the caller waits on it.
            sys.stdout.flush()
            if not self.running:
                break

    def dispatch(self, line: str) -> None:
        name, _, args = line.strip().partition(" ")
        if not name:
            return
        self._handlers.get(name.lower(), self.handle_unknown)(args.strip())

    def handle_uci(self, _: str) -> None:
        print("id name SimpleEngine")
        print("id author JaskFish Project")
        print(f"option name MultiPV type spin default 1 min 1 max {MAX_MULTIPV}")
        print("uciok")

    def handle_isready(self, _: str) -> None:
        print("readyok")

    def handle_ucinewgame(self, _: str) -> None:
        self.board.reset()

    def handle_setoption(self, args: str) -> None:
        tokens = args.split()
        if "name" not in tokens:
            self._log(f"Malformed setoption: {args}")
            return
        name_start = tokens.index("name") + 1
        if "value" in tokens:
            value_index = tokens.index("value")
            name = " ".join(tokens[name_start:value_index])
            value = " ".join(tokens[value_index + 1 :])
        else:
            name = " ".join(tokens[name_start:])
            value = ""

        if name.lower() == "multipv":
            try:
                self.multipv = max(1, min(MAX_MULTIPV, int(value)))
            except ValueError:
                self._log(f"Invalid MultiPV value: {value}")
            return
        print(f"info string No such option: {name}")

    def handle_position(self, args: str) -> None:
        """Only ``position fen <FEN>`` is understood; trailing moves are ignored."""
        kind, _, rest = args.partition(" ")
        if kind != "fen":
            self._log(f"Unsupported position command: {args}")
            return
        fen = " ".join(rest.split(" moves ")[0].split()[:6])
        try:
            self.board = chess.Board(fen)
        except ValueError:
            self._log(f"Invalid FEN received: {fen}")

    def handle_go(self, args: str) -> None:
        depth = MAX_REPORTED_DEPTH
        tokens = args.split()
        if "depth" in tokens:
            try:
                depth = int(tokens[tokens.index("depth") + 1])
            except (IndexError, ValueError):
                self._log(f"Invalid depth in go command: {args}")
        depth = max(1, min(MAX_REPORTED_DEPTH, depth))

        ranked = self.rank_moves()
        if not ranked:
            if self.board.is_checkmate():
                print("info depth 0 score mate 0")
            else:
                print("info depth 0 score cp 0")
            print("bestmove (none)")
            return

        shown = ranked[: self.multipv]
        nodes = 0
        for current_depth in range(1, depth + 1):
            for index, entry in enumerate(shown, start=1):
                nodes += NODES_PER_MOVE * len(ranked)
                score = f"mate {entry.mate}" if entry.mate is not None else f"cp {entry.score_cp}"
                print(
                    f"info depth {current_depth} seldepth {current_depth} multipv {index} "
                    f"score {score} nodes {nodes} nps {nodes * 1000} time {current_depth} "
                    f"pv {entry.move.uci()}"
                )
        print(f"bestmove {ranked[0].move.uci()}")

    def handle_debug(self, args: str) -> None:
        if args.lower() not in ("on", "off"):
            print("info string debug expects on or off")
            return
        self.debug = args.lower() == "on"

    def handle_quit(self, _: str) -> None:
        self.running = False

    def handle_unknown(self, args: str) -> None:
        self._log(f"Unknown command: {args}")

    def rank_moves(self) -> List[RankedMove]:
        """Score each legal move from the side to move's point of view, best first."""
        board = self.board
        ranked: List[RankedMove] = []
        for move in board.legal_moves:
            board.push(move)
            try:
                if board.is_checkmate():
                    ranked.append(RankedMove(move, 0, mate=1))
                    continue
                score = -self._evaluate(board)
                if board.is_check():
                    score += CHECK_BONUS
                ranked.append(RankedMove(move, score))
            finally:
                board.pop()

        ranked.sort(key=lambda entry: (entry.mate is None, -entry.score_cp, entry.move.uci()))
        return ranked

    def _evaluate(self, board: chess.Board) -> int:
        """Static score relative to ``board.turn``."""
        if board.is_stalemate() or board.is_insufficient_material():
            return 0
        score = 0
        for square, piece in board.piece_map().items():
            value = PIECE_VALUES[piece.piece_type]
            if square in CENTER_SQUARES and piece.piece_type in (chess.PAWN, chess.KNIGHT):
                value += CENTER_CONTROL_BONUS
            score += value if piece.color == board.turn else -value
        return score

    def _log(self, message: str) -> None:
        if self.debug:
            print(f"info string {message}")


if __name__ == "__main__":
    SimpleEngine().start()
