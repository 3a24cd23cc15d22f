"""Result and request shapes exchanged between the engine layer and callers."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Tuple

import chess

from config import DEFAULT_DEPTH, DEFAULT_NUM_LINES, DEFAULT_TIME_LIMIT_MS
from errors import InvalidSearchRequestError


@dataclass(frozen=True)
class Position:
    fen: str
    side_to_move: chess.Color

    @classmethod
    def from_board(cls, board: chess.Board) -> "Position":
        return cls(fen=board.fen(), side_to_move=board.turn)


@dataclass(frozen=True)
class SearchRequest:
    depth: int = DEFAULT_DEPTH
    num_lines: int = DEFAULT_NUM_LINES
    time_limit_ms: int = DEFAULT_TIME_LIMIT_MS

    def __post_init__(self) -> None:
        for name in ("depth", "num_lines", "time_limit_ms"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidSearchRequestError(f"{name} must be a positive integer, got {value!r}")

    @classmethod
    def with_defaults(
        cls,
        depth: Optional[int] = None,
        num_lines: Optional[int] = None,
        time_limit_ms: Optional[int] = None,
    ) -> "SearchRequest":
        return cls(
            depth=DEFAULT_DEPTH if depth is None else depth,
            num_lines=DEFAULT_NUM_LINES if num_lines is None else num_lines,
            time_limit_ms=DEFAULT_TIME_LIMIT_MS if time_limit_ms is None else time_limit_ms,
        )


@dataclass(frozen=True)
class EngineScore:
    unit: str  # "cp" or "mate"
    value: int

    @property
    def is_mate(self) -> bool:
        return self.unit == "mate"


@dataclass(frozen=True)
class InfoLine:
    """One parsed ``info`` line streamed by the engine during a search."""

    depth: Optional[int] = None
    seldepth: Optional[int] = None
    time: Optional[int] = None
    nodes: Optional[int] = None
    multipv: Optional[int] = None
    pv: Tuple[str, ...] = ()
    score: Optional[EngineScore] = None
    string: Optional[str] = None

    @property
    def line_index(self) -> int:
        return self.multipv if self.multipv is not None else 1

    @property
    def carries_move_data(self) -> bool:
        return bool(self.pv) or self.score is not None

    def with_pv(self, move: str) -> "InfoLine":
        return replace(self, pv=(move,))


@dataclass
class SearchOutcome:
    lines: List[InfoLine] = field(default_factory=list)
    bestmove: Optional[str] = None
    ponder: Optional[str] = None


@dataclass(frozen=True)
class BestMove:
    uci_move: Optional[str]
    algebraic: Optional[str]
    score: Optional[float]
    mate_in_plies: Optional[int]
    is_draw: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uci": self.uci_move,
            "san": self.algebraic,
            "score": self.score,
            "mate": self.mate_in_plies,
            "isDraw": self.is_draw,
        }


@dataclass(frozen=True)
class SearchResult:
    moves: Tuple[BestMove, ...]
    position: str
    depth: int
    nodes: int
    time_ms: int

    @classmethod
    def draw(cls, fen: str) -> "SearchResult":
        return cls(moves=(), position=fen, depth=0, nodes=0, time_ms=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "moves": [move.to_dict() for move in self.moves],
            "position": self.position,
            "depth": self.depth,
            "nodes": self.nodes,
            "time": self.time_ms,
        }


@dataclass(frozen=True)
class EvaluationResult:
    score: float
    is_mate: bool
    mate_in_plies: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"score": self.score, "isMate": self.is_mate}
        if self.mate_in_plies is not None:
            data["moveNumber"] = self.mate_in_plies
        return data

    def describe(self) -> str:
        if self.is_mate and self.mate_in_plies is not None:
            winner = "white" if self.score > 0 else "black"
            return f"Mate in {abs(self.mate_in_plies)} moves for {winner}"
        return f"Evaluation: {self.score} pawns"


@dataclass(frozen=True)
class PlayMoveResult:
    uci_move: str
    is_legal: bool
    resulting_fen: Optional[str] = None
    san: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "move": self.uci_move,
            "isLegal": self.is_legal,
            "resultingFen": self.resulting_fen,
            "san": self.san,
        }
