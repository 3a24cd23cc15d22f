import json

import chess
import pytest

import main
from config import BUNDLED_ENGINE

ENGINE_ARGS = ["--engine", str(BUNDLED_ENGINE)]
SCHOLAR_SETUP = "r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR w KQkq - 0 4"


class UnusedEngine:
    def is_ready(self) -> bool:
        raise AssertionError("engine should not be consulted")

    def analyse(self, fen, request, on_info=None):
        raise AssertionError("engine should not be consulted")


def test_parse_args_defaults() -> None:
    args = main.parse_args(["best-moves", chess.STARTING_FEN])
    assert (args.depth, args.lines, args.time_ms) == (20, 3, 1000)
    assert args.engine is None
    assert args.debug is False

    args = main.parse_args(["-dev", "play", "e2e4"])
    assert args.debug is True
    assert args.fen == chess.STARTING_FEN
    assert not main.needs_engine(args)
    assert main.needs_engine(main.parse_args(["play", "e2e4", "--evaluate"]))


def test_run_command_play_without_engine() -> None:
    coordinator = main.SearchCoordinator(UnusedEngine())
    status, lines = main.run_command(main.parse_args(["play", "e2e4"]), coordinator)
    assert status == 0
    assert lines == [
        "Move e2e4 is legal. New position: rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"
    ]

    status, lines = main.run_command(main.parse_args(["play", "e2e5"]), coordinator)
    assert (status, lines) == (1, ["Move e2e5 is illegal."])


def test_main_play_reports_bad_move_format(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(ENGINE_ARGS + ["play", "castle"]) == 1
    assert capsys.readouterr().out.strip() == "Error: Invalid move format"


def test_main_evaluate_mate(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(ENGINE_ARGS + ["evaluate", SCHOLAR_SETUP, "--depth", "2"]) == 0
    assert capsys.readouterr().out.strip() == "Mate in 1 moves for white"


def test_main_evaluate_invalid_fen(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(ENGINE_ARGS + ["evaluate", "invalid-fen-string"]) == 1
    assert capsys.readouterr().out.strip() == "Error: Invalid FEN position"


def test_main_best_moves_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    status = main.main(ENGINE_ARGS + ["best-moves", chess.STARTING_FEN, "--depth", "2", "--lines", "2", "--time", "50"])
    assert status == 0
    data = json.loads(capsys.readouterr().out)
    assert data["position"] == chess.STARTING_FEN
    assert data["depth"] == 2
    assert len(data["moves"]) == 2
    assert set(data["moves"][0]) == {"uci", "san", "score", "mate", "isDraw"}


def test_main_best_moves_on_stalemate(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(ENGINE_ARGS + ["best-moves", "k7/8/1Q6/8/8/8/8/K7 b - - 0 1"]) == 0
    assert json.loads(capsys.readouterr().out)["moves"] == []


def test_main_rejects_non_positive_limits(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(ENGINE_ARGS + ["best-moves", chess.STARTING_FEN, "--depth", "0"]) == 1
    assert capsys.readouterr().out.startswith("Error: depth must be a positive integer")


def test_main_play_and_evaluate(capsys: pytest.CaptureFixture[str]) -> None:
    assert main.main(ENGINE_ARGS + ["play", "e2e4", "--evaluate", "--depth", "1"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0].startswith("Move e2e4 is legal.")
    assert lines[1].startswith("Evaluation: ")
