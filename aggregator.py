from typing import List, Optional

from models import InfoLine


class InfoAggregator:
    """Keeps the deepest ``info`` line per multi-PV slot during one search.

    Slots are indexed by ``multipv - 1``. A later line replaces the stored one
    when its depth is greater than or equal to the stored depth, so the last
    report at a given depth wins and a slot never regresses to a shallower
    line. Telemetry (depth, nodes, time) tracks the last value seen on any
    line, including lines that carry no move data.
    """

    def __init__(self, num_lines: int) -> None:
        if num_lines < 1:
            raise ValueError("num_lines must be at least 1")
        self._slots: List[Optional[InfoLine]] = [None] * num_lines
        self._last_line: Optional[InfoLine] = None
        self.depth: Optional[int] = None
        self.nodes: Optional[int] = None
        self.time_ms: Optional[int] = None

    def feed(self, line: InfoLine) -> None:
        self._record_telemetry(line)
        self._last_line = line
        if not line.carries_move_data:
            return

        index = line.line_index - 1
        if not 0 <= index < len(self._slots):
            return
        current = self._slots[index]
        if current is None or (line.depth or 0) >= (current.depth or 0):
            self._slots[index] = line

    def finish(self, bestmove: Optional[str] = None) -> List[InfoLine]:
        entries = [slot for slot in self._slots if slot is not None]
        if not entries and bestmove:
            base = self._last_line or InfoLine()
            entries = [base.with_pv(bestmove)]
        return entries

    def _record_telemetry(self, line: InfoLine) -> None:
        if line.depth is not None:
            self.depth = line.depth
        if line.nodes is not None:
            self.nodes = line.nodes
        if line.time is not None:
            self.time_ms = line.time
