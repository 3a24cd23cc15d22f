import chess
import pytest

from engines.simple_engine import SimpleEngine
from uci_protocol import parse_bestmove_line, parse_info_line


def test_handle_uci_outputs_identity(capsys: pytest.CaptureFixture[str]) -> None:
    engine = SimpleEngine()
    engine.handle_uci("")
    output = capsys.readouterr().out.strip().splitlines()
    assert output == [
        "id name SimpleEngine",
        "id author JaskFish Project",
        "option name MultiPV type spin default 1 min 1 max 64",
        "uciok",
    ]


def test_handle_position_loads_fen(capsys: pytest.CaptureFixture[str]) -> None:
    engine = SimpleEngine()
    engine.handle_position("fen 6k1/5ppp/8/8/8/5Q2/5PPP/6K1 b - - 0 1")
    assert engine.board.turn is chess.BLACK
    assert engine.board.piece_at(chess.F3).piece_type == chess.QUEEN

    engine.debug = True
    engine.handle_position("fen invalid")
    engine.handle_position("startpos")
    output = capsys.readouterr().out
    assert "Invalid FEN" in output
    assert "Unsupported position command" in output
    assert engine.board.turn is chess.BLACK


def test_dispatch_routes_commands(capsys: pytest.CaptureFixture[str]) -> None:
    engine = SimpleEngine()
    engine.dispatch("isready\n")
    engine.dispatch("   \n")
    engine.dispatch("QUIT")
    assert capsys.readouterr().out == "readyok\n"
    assert engine.running is False


def test_setoption_multipv_and_unknown_option(capsys: pytest.CaptureFixture[str]) -> None:
    engine = SimpleEngine()
    engine.handle_setoption("name MultiPV value 4")
    assert engine.multipv == 4
    engine.handle_setoption("name MultiPV value 999")
    assert engine.multipv == 64
    engine.handle_setoption("name Hash value 16")
    assert "No such option: Hash" in capsys.readouterr().out


def test_handle_go_reports_multipv_lines(capsys: pytest.CaptureFixture[str]) -> None:
    engine = SimpleEngine()
    engine.handle_setoption("name MultiPV value 3")
    engine.handle_go("depth 2 movetime 50")
    lines = capsys.readouterr().out.strip().splitlines()

    infos = [parse_info_line(line) for line in lines[:-1]]
    assert [(info.depth, info.multipv) for info in infos] == [(1, 1), (1, 2), (1, 3), (2, 1), (2, 2), (2, 3)]
    best, _ = parse_bestmove_line(lines[-1])
    assert best == infos[0].pv[0]
    assert chess.Move.from_uci(best) in engine.board.legal_moves


def test_handle_go_finds_mate_in_one(capsys: pytest.CaptureFixture[str]) -> None:
    engine = SimpleEngine()
    engine.handle_position("fen r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR w KQkq - 0 4")
    engine.handle_go("depth 1")
    lines = capsys.readouterr().out.strip().splitlines()
    assert parse_info_line(lines[0]).score.value == 1
    assert lines[-1] == "bestmove h5f7"


def test_handle_go_when_game_is_over(capsys: pytest.CaptureFixture[str]) -> None:
    engine = SimpleEngine()
    engine.board = chess.Board("7k/5Q2/6K1/8/8/8/8/8 b - - 0 1")
    engine.handle_go("depth 5")
    assert capsys.readouterr().out.strip().splitlines() == [
        "info depth 0 score cp 0",
        "bestmove (none)",
    ]


def test_rank_moves_prefers_captures() -> None:
    engine = SimpleEngine()
    engine.board = chess.Board("4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1")
    assert engine.rank_moves()[0].move == chess.Move.from_uci("e4d5")


def test_handle_debug_toggles_state() -> None:
    engine = SimpleEngine()
    engine.handle_debug("on")
    engine.handle_debug("off")
    assert engine.debug is False
