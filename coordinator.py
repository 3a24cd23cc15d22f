"""End-to-end evaluation requests on top of a :class:`UciEngine`."""

from typing import Optional, Protocol

import chess_logic
from aggregator import InfoAggregator
from config import DEFAULT_EVAL_DEPTH
from errors import EngineNotReadyError, NoEvaluationAvailableError
from models import (
    BestMove,
    EvaluationResult,
    InfoLine,
    PlayMoveResult,
    Position,
    SearchOutcome,
    SearchRequest,
    SearchResult,
)
from scoring import mate_to_infinity, normalize_score
from utils import debug_text, emit, info_text


class EngineBackend(Protocol):
    """The slice of :class:`engine_comm.UciEngine` the coordinator depends on."""

    def is_ready(self) -> bool:
        ...

    def analyse(self, fen: str, request: SearchRequest, on_info=None) -> SearchOutcome:
        ...


class SearchCoordinator:
    def __init__(self, engine: EngineBackend, *, debug: bool = False) -> None:
        self.engine = engine
        self.debug = debug

    def get_best_moves(
        self,
        fen: str,
        depth: Optional[int] = None,
        num_lines: Optional[int] = None,
        time_limit_ms: Optional[int] = None,
    ) -> SearchResult:
        """Return up to ``num_lines`` engine lines for ``fen``, best first.

        Already-drawn positions (stalemate, insufficient material, threefold
        repetition) return an empty result with zeroed statistics without
        touching the engine.
        """
        board = chess_logic.load_board(fen)
        reason = chess_logic.draw_reason(board)
        if reason is not None:
            self._log(info_text(f"{reason}: skipping engine search"))
            return SearchResult.draw(fen)

        if num_lines is not None and num_lines < 1:
            num_lines = 1
        request = SearchRequest.with_defaults(depth, num_lines, time_limit_ms)
        if not self.engine.is_ready():
            raise EngineNotReadyError()

        position = Position.from_board(board)
        aggregator = InfoAggregator(request.num_lines)
        outcome = self.engine.analyse(position.fen, request, aggregator.feed)
        entries = aggregator.finish(outcome.bestmove)

        moves = tuple(self._to_best_move(position, entry) for entry in entries)
        return SearchResult(
            moves=moves,
            position=fen,
            depth=aggregator.depth if aggregator.depth is not None else request.depth,
            nodes=aggregator.nodes or 0,
            time_ms=aggregator.time_ms or 0,
        )

    def evaluate_lines(
        self,
        fen: str,
        depth: int = DEFAULT_EVAL_DEPTH,
        num_lines: int = 1,
    ) -> SearchResult:
        return self.get_best_moves(fen, depth=depth, num_lines=max(num_lines, 1))

    def evaluate_position(self, fen: str, depth: int = DEFAULT_EVAL_DEPTH) -> EvaluationResult:
        """Single-line evaluation from White's point of view.

        Mate scores collapse to +/-inf with ``is_mate`` set and the mate
        distance kept in ``mate_in_plies``.
        """
        board = chess_logic.load_board(fen)
        result = self.evaluate_lines(fen, depth=depth, num_lines=1)
        if not result.moves:
            if chess_logic.is_terminal_draw(board):
                return EvaluationResult(score=0.0, is_mate=False)
            raise NoEvaluationAvailableError()

        best = result.moves[0]
        if best.mate_in_plies is not None:
            return EvaluationResult(
                score=mate_to_infinity(best.mate_in_plies, board.turn),
                is_mate=True,
                mate_in_plies=best.mate_in_plies,
            )
        if best.score is None:
            raise NoEvaluationAvailableError()
        return EvaluationResult(score=best.score, is_mate=False)

    def play_move(self, fen: str, uci_move: str) -> PlayMoveResult:
        applied = chess_logic.apply_uci_move(fen, uci_move)
        if applied is None:
            return PlayMoveResult(uci_move=uci_move, is_legal=False)
        resulting_fen, san = applied
        return PlayMoveResult(uci_move=uci_move, is_legal=True, resulting_fen=resulting_fen, san=san)

    def _to_best_move(self, position: Position, entry: InfoLine) -> BestMove:
        score, mate = normalize_score(entry.score, position.side_to_move)
        uci_move = entry.pv[0] if entry.pv else None
        algebraic = None
        if uci_move is not None:
            algebraic = chess_logic.uci_to_san(position.fen, uci_move)
            if algebraic == uci_move:
                self._log(debug_text(f"Could not translate {uci_move} in {position.fen}"))
        return BestMove(uci_move=uci_move, algebraic=algebraic, score=score, mate_in_plies=mate)

    def _log(self, message: str) -> None:
        emit(message, self.debug)
