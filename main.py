# MAIN
import argparse
import json
import sys
from typing import List, Optional, Tuple

import chess

from config import (
    DEFAULT_DEPTH,
    DEFAULT_EVAL_DEPTH,
    DEFAULT_NUM_LINES,
    DEFAULT_TIME_LIMIT_MS,
    EngineConfig,
    resolve_engine_path,
)
from coordinator import SearchCoordinator
from engine_comm import UciEngine
from errors import AnalysisError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyse chess positions with a UCI engine")
    parser.add_argument("--engine", help="Path to the UCI engine executable or Python script")
    parser.add_argument("-dev", "--debug", dest="debug", action="store_true", help="Echo UCI traffic to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate = subparsers.add_parser("evaluate", help="Evaluate a position from White's point of view")
    evaluate.add_argument("fen")
    evaluate.add_argument("--depth", type=int, default=DEFAULT_EVAL_DEPTH)

    best = subparsers.add_parser("best-moves", help="List the engine's best lines as JSON")
    best.add_argument("fen")
    best.add_argument("--depth", type=int, default=DEFAULT_DEPTH)
    best.add_argument("--lines", type=int, default=DEFAULT_NUM_LINES)
    best.add_argument("--time", dest="time_ms", type=int, default=DEFAULT_TIME_LIMIT_MS)

    play = subparsers.add_parser("play", help="Check and apply a UCI move")
    play.add_argument("move")
    play.add_argument("--fen", default=chess.STARTING_FEN)
    play.add_argument("--evaluate", action="store_true", help="Evaluate the resulting position")
    play.add_argument("--depth", type=int, default=DEFAULT_EVAL_DEPTH)

    return parser.parse_args(argv)


def run_command(args: argparse.Namespace, coordinator: SearchCoordinator) -> Tuple[int, List[str]]:
    """Execute one CLI command; return the exit status and the lines to print."""
    if args.command == "evaluate":
        return 0, [coordinator.evaluate_position(args.fen, depth=args.depth).describe()]

    if args.command == "best-moves":
        result = coordinator.get_best_moves(
            args.fen,
            depth=args.depth,
            num_lines=args.lines,
            time_limit_ms=args.time_ms,
        )
        return 0, [json.dumps(result.to_dict(), indent=2)]

    played = coordinator.play_move(args.fen, args.move)
    if not played.is_legal:
        return 1, [f"Move {args.move} is illegal."]
    lines = [f"Move {args.move} is legal. New position: {played.resulting_fen}"]
    if args.evaluate:
        lines.append(coordinator.evaluate_position(played.resulting_fen, depth=args.depth).describe())
    return 0, lines


def needs_engine(args: argparse.Namespace) -> bool:
    return args.command != "play" or args.evaluate


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    engine = UciEngine(EngineConfig(path=resolve_engine_path(args.engine, debug=args.debug), debug=args.debug))
    coordinator = SearchCoordinator(engine, debug=args.debug)

    try:
        if needs_engine(args):
            engine.init()
        status, lines = run_command(args, coordinator)
        for line in lines:
            print(line)
    except AnalysisError as exc:
        print(f"Error: {exc}")
        return 1
    finally:
        engine.quit()
    return status


if __name__ == "__main__":
    sys.exit(main())
