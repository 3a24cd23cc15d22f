import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from utils import emit, info_text

DEFAULT_DEPTH = 20
DEFAULT_NUM_LINES = 3
DEFAULT_TIME_LIMIT_MS = 1000
DEFAULT_EVAL_DEPTH = 15

STOCKFISH_CANDIDATES = ("stockfish", "/opt/homebrew/bin/stockfish", "/usr/games/stockfish")
BUNDLED_ENGINE = Path(__file__).resolve().parent / "engines" / "simple_engine.py"


@dataclass
class EngineConfig:
    path: str
    args: List[str] = field(default_factory=list)
    ready_timeout: float = 10.0
    quit_timeout: float = 2.0
    debug: bool = False
    # Extra UCI options applied right after the handshake, e.g. {"Threads": 2}.
    options: Dict[str, Union[str, int, bool]] = field(default_factory=dict)

    def command(self) -> List[str]:
        return resolve_engine_command(self.path) + list(self.args)


def resolve_engine_command(path: str) -> List[str]:
    """Engine scripts written in Python run under the current interpreter."""
    if path.endswith(".py"):
        return [sys.executable, path]
    return [path]


def resolve_engine_path(override: Optional[str] = None, *, debug: bool = False) -> str:
    if override:
        candidate = shutil.which(override) or os.path.abspath(override)
        if os.path.exists(candidate):
            return candidate
        emit(info_text(f"Engine path not found: {override}. Searching defaults"), debug)

    for name in STOCKFISH_CANDIDATES:
        found = shutil.which(name)
        if found:
            return found

    emit(info_text(f"No Stockfish binary found; using {BUNDLED_ENGINE.name}"), debug)
    return str(BUNDLED_ENGINE)
