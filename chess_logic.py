import re
from typing import Optional, Tuple

import chess

from errors import InvalidMoveError, InvalidPositionError

UCI_MOVE_PATTERN = re.compile(r"^[a-h][1-8][a-h][1-8][qrbnQRBN]?$")


def load_board(fen: str) -> chess.Board:
    """Build a board from ``fen`` or raise :class:`InvalidPositionError`."""
    if not isinstance(fen, str) or not fen.strip():
        raise InvalidPositionError()
    try:
        board = chess.Board(fen)
    except ValueError:
        raise InvalidPositionError() from None
    if not board.is_valid():
        raise InvalidPositionError()
    return board


def draw_reason(board: chess.Board) -> Optional[str]:
    if board.is_stalemate():
        return "Stalemate"
    if board.is_insufficient_material():
        return "Insufficient Material"
    if board.can_claim_threefold_repetition():
        return "Threefold Repetition"
    return None


def is_terminal_draw(board: chess.Board) -> bool:
    return draw_reason(board) is not None


def uci_to_san(fen: str, uci_move: str) -> str:
    """Translate ``uci_move`` to SAN on a fresh board; fall back to the UCI text."""
    board = chess.Board(fen)
    try:
        move = board.parse_uci(uci_move.lower())
    except ValueError:
        return uci_move
    return board.san(move)


def check_move_format(uci_move: str) -> str:
    if not isinstance(uci_move, str) or not UCI_MOVE_PATTERN.match(uci_move):
        raise InvalidMoveError()
    return uci_move.lower()


def apply_uci_move(fen: str, uci_move: str) -> Optional[Tuple[str, str]]:
    """Play ``uci_move`` on a fresh board.

    Returns ``(resulting_fen, san)``, or None when the move is well formed but
    illegal in the position.
    """
    text = check_move_format(uci_move)
    board = load_board(fen)
    try:
        move = board.parse_uci(text)
    except ValueError:
        return None
    san = board.san(move)
    board.push(move)
    return board.fen(), san


