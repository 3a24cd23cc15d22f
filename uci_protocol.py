"""Parsing of engine output and construction of UCI commands."""

from typing import Dict, List, Optional, Tuple

from errors import UciParseError
from models import EngineScore, InfoLine, SearchRequest

INT_FIELDS = {
    "depth",
    "seldepth",
    "time",
    "nodes",
    "multipv",
    "nps",
    "hashfull",
    "tbhits",
    "sbhits",
    "cpuload",
    "currmovenumber",
}
MOVE_LIST_FIELDS = {"pv", "refutation", "currline"}
KEYWORDS = INT_FIELDS | MOVE_LIST_FIELDS | {"score", "currmove", "string", "wdl"}
KEPT_FIELDS = ("depth", "seldepth", "time", "nodes", "multipv")
NO_MOVE_TOKENS = {"(none)", "0000", "none"}


def _to_int(token: str, line: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise UciParseError(f"Expected integer, got {token!r} in: {line}") from None


def _take(tokens: List[str], index: int, line: str) -> str:
    if index >= len(tokens):
        raise UciParseError(f"Truncated info line: {line}")
    return tokens[index]


def parse_info_line(line: str) -> InfoLine:
    """Parse one ``info ...`` line.

    Raises :class:`UciParseError` for truncated fields or non-numeric values.
    """
    tokens = line.split()
    if not tokens or tokens[0] != "info":
        raise UciParseError(f"Not an info line: {line}")

    values: Dict[str, int] = {}
    pv: Tuple[str, ...] = ()
    score: Optional[EngineScore] = None
    text: Optional[str] = None

    i = 1
    while i < len(tokens):
        key = tokens[i]
        i += 1
        if key in INT_FIELDS:
            values[key] = _to_int(_take(tokens, i, line), line)
            i += 1
        elif key == "score":
            unit = _take(tokens, i, line)
            if unit not in ("cp", "mate"):
                raise UciParseError(f"Unknown score unit {unit!r} in: {line}")
            score = EngineScore(unit=unit, value=_to_int(_take(tokens, i + 1, line), line))
            i += 2
            while i < len(tokens) and tokens[i] in ("lowerbound", "upperbound"):
                i += 1
        elif key == "wdl":
            for offset in range(3):
                _to_int(_take(tokens, i + offset, line), line)
            i += 3
        elif key == "currmove":
            _take(tokens, i, line)
            i += 1
        elif key in MOVE_LIST_FIELDS:
            start = i
            while i < len(tokens) and tokens[i] not in KEYWORDS:
                i += 1
            if key == "pv":
                pv = tuple(tokens[start:i])
        elif key == "string":
            text = " ".join(tokens[i:])
            break
        # Unknown tokens are skipped; engines add vendor extensions freely.

    return InfoLine(
        pv=pv,
        score=score,
        string=text,
        **{name: values.get(name) for name in KEPT_FIELDS},
    )


def parse_bestmove_line(line: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(bestmove, ponder)``; bestmove is None when the engine has no move."""
    parts = line.strip().split()
    if not parts or parts[0] != "bestmove":
        raise UciParseError(f"Not a bestmove line: {line}")
    best = parts[1] if len(parts) >= 2 and parts[1] not in NO_MOVE_TOKENS else None
    ponder = None
    if len(parts) >= 4 and parts[2] == "ponder" and parts[3] not in NO_MOVE_TOKENS:
        ponder = parts[3]
    return best, ponder


def format_option_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def setoption_command(name: str, value) -> str:
    return f"setoption name {name} value {format_option_value(value)}"


def position_command(fen: str) -> str:
    return f"position fen {fen}"


def go_command(request: SearchRequest) -> str:
    return f"go depth {request.depth} movetime {request.time_limit_ms}"
