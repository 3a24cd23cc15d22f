"""Owned UCI engine subprocess with serialized command sequences.

Lifecycle::

    UNINITIALIZED -> INITIALIZING -> READY -> SHUTTING_DOWN -> CLOSED
                          |            |
                          +-> FAILED <-+

``FAILED`` is reached on any process-level I/O failure. Nothing restarts the
engine automatically; callers invoke :meth:`UciEngine.init` again.
"""

import queue
import subprocess
import threading
import time
from concurrent.futures import CancelledError, ThreadPoolExecutor
from enum import Enum
from typing import Callable, Optional, Union

from config import EngineConfig
from errors import (
    EngineCommunicationError,
    EngineError,
    EngineNotReadyError,
    EngineStartupError,
    UciParseError,
)
from models import InfoLine, SearchOutcome, SearchRequest
from uci_protocol import (
    go_command,
    parse_bestmove_line,
    parse_info_line,
    position_command,
    setoption_command,
)
from utils import debug_text, emit, received_text, sending_text

InfoCallback = Callable[[InfoLine], None]

MULTIPV_OPTION = "MultiPV"
SEARCH_POLL_INTERVAL = 0.5


class EngineState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"
    CLOSED = "closed"
    FAILED = "failed"


class UciEngine:
    """Drive one UCI engine process.

    Every command sequence runs on a single worker thread, so concurrent
    callers are queued in arrival order and a search always runs through its
    ``bestmove`` before the next sequence starts.
    """

    def __init__(self, config: Union[EngineConfig, str]) -> None:
        if isinstance(config, str):
            config = EngineConfig(path=config)
        self.config = config
        self.engine_name: Optional[str] = None
        self.engine_author: Optional[str] = None
        self._state = EngineState.UNINITIALIZED
        self._state_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._proc: Optional[subprocess.Popen] = None
        self._reader_thread: Optional[threading.Thread] = None
        self._reader_error: Optional[BaseException] = None
        self._queue: "queue.Queue[Optional[str]]" = queue.Queue()
        self._commands: Optional[ThreadPoolExecutor] = None

    def __enter__(self) -> "UciEngine":
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.quit()

    @property
    def state(self) -> EngineState:
        return self._state

    def is_ready(self) -> bool:
        return self._state is EngineState.READY

    # ------------------------------------------------------------------ lifecycle

    def init(self) -> None:
        with self._state_lock:
            if self._state is EngineState.READY:
                return
            if self._state in (EngineState.INITIALIZING, EngineState.SHUTTING_DOWN):
                raise EngineError(f"Engine is {self._state.value}")
            self._state = EngineState.INITIALIZING
            stale, self._commands = self._commands, None

        if stale is not None:
            stale.shutdown(wait=False, cancel_futures=True)
        # Re-initialising after a failure replaces whatever is left of the old process.
        self._kill()

        try:
            self._launch()
            self._handshake()
        except EngineError as exc:
            self._kill()
            self._state = EngineState.FAILED
            if isinstance(exc, EngineStartupError):
                raise
            raise EngineStartupError(f"Engine never became ready: {exc}") from exc

        with self._state_lock:
            self._commands = ThreadPoolExecutor(max_workers=1, thread_name_prefix="uci-engine")
            self._state = EngineState.READY
        self._log(f"Engine ready: {self.engine_name or self.config.path}")

    def quit(self) -> None:
        with self._state_lock:
            if self._state in (
                EngineState.UNINITIALIZED,
                EngineState.SHUTTING_DOWN,
                EngineState.CLOSED,
            ):
                return
            self._state = EngineState.SHUTTING_DOWN
            commands, self._commands = self._commands, None

        if commands is not None:
            commands.shutdown(wait=False, cancel_futures=True)

        proc = self._proc
        if proc is not None and proc.poll() is None:
            try:
                self._send("quit")
            except EngineCommunicationError as exc:
                self._log(f"Could not send quit: {exc}")
            if proc.stdin:
                try:
                    proc.stdin.close()
                except OSError:
                    pass
            try:
                proc.wait(timeout=self.config.quit_timeout)
            except subprocess.TimeoutExpired:
                self._log("Engine process unresponsive; forcing termination")
                self._kill()

        self._join_reader()
        self._proc = None
        self._state = EngineState.CLOSED

    # ------------------------------------------------------------------ commands

    def set_option(self, name: str, value) -> None:
        self._run(self._set_option, name, value)

    def set_position(self, fen: str) -> None:
        self._run(self._set_position, fen)

    def search(self, request: SearchRequest, on_info: Optional[InfoCallback] = None) -> SearchOutcome:
        return self._run(self._search, request, on_info)

    def analyse(
        self,
        fen: str,
        request: SearchRequest,
        on_info: Optional[InfoCallback] = None,
    ) -> SearchOutcome:
        """Configure multi-PV, set the position and search as one queued job."""
        return self._run(self._analyse, fen, request, on_info)

    def _run(self, fn, *args):
        with self._state_lock:
            if self._state is not EngineState.READY or self._commands is None:
                raise EngineNotReadyError()
            future = self._commands.submit(self._guarded, fn, *args)
        try:
            return future.result()
        except CancelledError:
            raise EngineNotReadyError() from None

    def _guarded(self, fn, *args):
        # A job queued behind one that failed the engine must not touch the pipe.
        if self._state is not EngineState.READY:
            raise EngineNotReadyError()
        try:
            return fn(*args)
        except EngineCommunicationError:
            with self._state_lock:
                if self._state is EngineState.READY:
                    self._state = EngineState.FAILED
            raise

    def _set_option(self, name: str, value) -> None:
        self._send(setoption_command(name, value))
        self._await_ready()

    def _set_position(self, fen: str) -> None:
        self._send(position_command(fen))
        self._await_ready()

    def _analyse(self, fen: str, request: SearchRequest, on_info: Optional[InfoCallback]) -> SearchOutcome:
        self._set_option(MULTIPV_OPTION, request.num_lines)
        self._set_position(fen)
        return self._search(request, on_info)

    def _search(self, request: SearchRequest, on_info: Optional[InfoCallback]) -> SearchOutcome:
        self._send(go_command(request))
        outcome = SearchOutcome()
        # The stream is always drained through bestmove so the next job starts
        # on a quiet pipe; errors seen on the way are raised afterwards.
        pending: Optional[Exception] = None

        while True:
            line = self._next_line(SEARCH_POLL_INTERVAL)
            if line is None:
                continue
            head = line.split(" ", 1)[0]
            if head == "bestmove":
                outcome.bestmove, outcome.ponder = parse_bestmove_line(line)
                break
            if head != "info":
                continue
            try:
                info = parse_info_line(line)
            except UciParseError as exc:
                pending = pending or exc
                continue
            outcome.lines.append(info)
            if on_info is not None and pending is None:
                try:
                    on_info(info)
                except Exception as exc:
                    pending = exc

        if pending is not None:
            raise pending
        return outcome

    # ------------------------------------------------------------------ process I/O

    def _launch(self) -> None:
        command = self.config.command()
        self._queue = queue.Queue()
        self._reader_error = None
        try:
            self._proc = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except OSError as exc:
            raise EngineStartupError(f"Failed to launch engine {command!r}: {exc}") from exc
        if self._proc.stdin is None or self._proc.stdout is None:
            raise EngineStartupError("Failed to open pipes to engine process")
        self._reader_thread = threading.Thread(target=self._reader_loop, args=(self._proc,), daemon=True)
        self._reader_thread.start()

    def _handshake(self) -> None:
        self._send("uci")
        deadline = time.monotonic() + self.config.ready_timeout
        while True:
            line = self._next_line(max(0.05, deadline - time.monotonic()))
            if line is None:
                if time.monotonic() >= deadline:
                    raise EngineStartupError("Timed out waiting for 'uciok' from engine")
                continue
            if line.startswith("id name "):
                self.engine_name = line[len("id name "):].strip()
            elif line.startswith("id author "):
                self.engine_author = line[len("id author "):].strip()
            elif line.strip() == "uciok":
                break
        self._await_ready()

        for name, value in self.config.options.items():
            self._set_option(name, value)
        self._send("ucinewgame")
        self._await_ready()

    def _await_ready(self) -> None:
        self._send("isready")
        deadline = time.monotonic() + self.config.ready_timeout
        while time.monotonic() < deadline:
            line = self._next_line(max(0.05, deadline - time.monotonic()))
            if line is not None and line.strip() == "readyok":
                return
        raise EngineCommunicationError("Timed out waiting for 'readyok' from engine")

    def _reader_loop(self, proc: subprocess.Popen) -> None:
        try:
            for raw in proc.stdout:
                self._queue.put(raw.rstrip("\r\n"))
        except (OSError, ValueError) as exc:
            self._reader_error = exc
        finally:
            self._queue.put(None)

    def _next_line(self, timeout: float) -> Optional[str]:
        """Return the next engine line, None on timeout; raise once stdout closes."""
        try:
            line = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if line is None:
            self._queue.put(None)
            detail = f": {self._reader_error}" if self._reader_error else ""
            raise EngineCommunicationError(f"Engine process closed its output{detail}")
        self._log(received_text(line), raw=True)
        return line

    def _send(self, command: str) -> None:
        with self._write_lock:
            proc = self._proc
            if proc is None or proc.stdin is None:
                raise EngineCommunicationError("Engine process is not running")
            self._log(sending_text(command), raw=True)
            try:
                proc.stdin.write(command + "\n")
                proc.stdin.flush()
            except (OSError, ValueError) as exc:
                raise EngineCommunicationError(f"Failed to send {command!r}: {exc}") from exc

    def _kill(self) -> None:
        proc = self._proc
        if proc is None:
            return
        if proc.poll() is None:
            proc.terminate()
            try:
                proc.wait(timeout=1.0)
            except subprocess.TimeoutExpired:
                proc.kill()
                try:
                    proc.wait(timeout=1.0)
                except subprocess.TimeoutExpired:
                    self._log("Engine process did not exit after kill")
        self._join_reader()

    def _join_reader(self) -> None:
        if self._reader_thread is not None:
            self._reader_thread.join(timeout=1.0)
            self._reader_thread = None

    def _log(self, message: str, *, raw: bool = False) -> None:
        if self.config.debug:
            emit(message if raw else debug_text(message))

