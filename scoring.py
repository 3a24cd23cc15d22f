"""Convert engine scores to a White-positive scale.

UCI reports ``score`` from the point of view of the side to move. Everything
leaving this module is absolute instead: positive favours White whether White
or Black was to move in the analysed position.
"""

from typing import Optional, Tuple

import chess

from models import EngineScore

CENTIPAWNS_PER_PAWN = 100


def to_white_perspective(value, side_to_move: chess.Color):
    return value if side_to_move == chess.WHITE else -value


def normalize_score(
    score: Optional[EngineScore], side_to_move: chess.Color
) -> Tuple[Optional[float], Optional[int]]:
    """Return ``(pawns, mate)`` where exactly one is set, or both None without a score.

    ``mate`` keeps the magnitude reported by the engine; only its sign changes
    with the perspective flip.
    """
    if score is None:
        return None, None
    if score.is_mate:
        return None, to_white_perspective(score.value, side_to_move)
    pawns = score.value / CENTIPAWNS_PER_PAWN
    # Avoid -0.0 leaking into results for level positions with Black to move.
    return to_white_perspective(pawns, side_to_move) + 0.0, None


def mate_to_infinity(mate: int, side_to_move: chess.Color) -> float:
    """Map a White-positive mate distance to +/-inf.

    ``mate == 0`` means the side to move is already checkmated.
    """
    if mate > 0:
        return float("inf")
    if mate < 0:
        return float("-inf")
    return float("-inf") if side_to_move == chess.WHITE else float("inf")
